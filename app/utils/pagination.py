"""
Utilidades de paginación para listas ya cargadas en memoria.

El historial de reportes llega completo de la API; la paginación solo
recorta lo que se muestra.
"""

from typing import TypedDict


class PaginationInfo(TypedDict):
    """
    Metadatos de paginación.

    Attributes:
        page: Página actual (desde 1)
        per_page: Elementos por página
        total: Total de elementos
        total_pages: Total de páginas
        offset: Índice del primer elemento de la página (desde 0)
    """

    page: int
    per_page: int
    total: int
    total_pages: int
    offset: int


def calculate_pagination(page: int, per_page: int, total: int) -> PaginationInfo:
    """
    Calcula los metadatos de paginación a partir del total.

    Example:
        >>> pagination = calculate_pagination(page=2, per_page=10, total=95)
        >>> pagination["total_pages"], pagination["offset"]
        (10, 10)

    Note:
        Una lista vacía tiene total_pages=1, no 0
    """
    total_pages = (total + per_page - 1) // per_page if total > 0 else 1
    offset = (page - 1) * per_page

    return {
        "page": page,
        "per_page": per_page,
        "total": total,
        "total_pages": total_pages,
        "offset": offset,
    }


def page_numbers(pagination: PaginationInfo, window: int = 2) -> list[int]:
    """Números de página a mostrar alrededor de la actual."""
    first = max(1, pagination["page"] - window)
    last = min(pagination["total_pages"], pagination["page"] + window)
    return list(range(first, last + 1))

"""
Servicio de Centros de Empadronamiento
Selección en cascada provincia → municipio → punto sobre la lista plana.
"""

from typing import Iterable, Optional

from app.schemas.center import RegistrationCenter


def _unique(values: Iterable[str]) -> list[str]:
    """Valores únicos conservando el orden de aparición."""
    return list(dict.fromkeys(values))


class CenterSelector:
    """
    Estado de la selección en cascada.

    Cambiar un nivel limpia todos los niveles inferiores; solo el punto
    resuelve un center_id.
    """

    def __init__(self, centers: Iterable[RegistrationCenter] = ()):
        self.centers: tuple[RegistrationCenter, ...] = tuple(centers)
        self.province = ""
        self.municipality = ""
        self.point: Optional[RegistrationCenter] = None

    @property
    def center_id(self) -> Optional[int]:
        return self.point.id if self.point else None

    @property
    def provinces(self) -> list[str]:
        return _unique(c.provincia for c in self.centers)

    @property
    def municipalities(self) -> list[str]:
        if not self.province:
            return []
        return _unique(
            c.municipio for c in self.centers if c.provincia == self.province
        )

    @property
    def points(self) -> list[RegistrationCenter]:
        if not self.province or not self.municipality:
            return []
        return [
            c
            for c in self.centers
            if c.provincia == self.province and c.municipio == self.municipality
        ]

    def select_province(self, province: str) -> None:
        self.province = province if province in self.provinces else ""
        self.municipality = ""
        self.point = None

    def select_municipality(self, municipality: str) -> None:
        self.municipality = municipality if municipality in self.municipalities else ""
        self.point = None

    def select_point(self, center_id: Optional[int]) -> Optional[RegistrationCenter]:
        """Selecciona un punto entre los del municipio actual."""
        self.point = next((c for c in self.points if c.id == center_id), None)
        return self.point

    def clear(self) -> None:
        self.province = ""
        self.municipality = ""
        self.point = None

    def replace_centers(self, centers: Iterable[RegistrationCenter]) -> None:
        self.centers = tuple(centers)
        self.clear()

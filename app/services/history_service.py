"""
Servicio de Historial de Reportes
Historial de reportes diarios de un operador, con resumen y eliminación.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from app.config import settings
from app.content import OPERATOR_MESSAGES
from app.schemas.report import ReportHistory, ReportHistoryEntry
from app.services.api_client import (
    ApiError,
    PadronApiClient,
    UnauthenticatedError,
    user_message,
)
from app.services.token_auth import SessionCredentials
from app.utils.pagination import PaginationInfo, calculate_pagination

logger = logging.getLogger(__name__)


@dataclass
class HistorySummary:
    total_reportes: int = 0
    total_registro_c: int = 0
    total_registro_r: int = 0
    activos: int = 0
    parciales: int = 0
    sin_registros: int = 0


@dataclass
class HistoryPage:
    """Una página del historial lista para el template."""

    nombre_operador: str = ""
    entries: list[ReportHistoryEntry] = field(default_factory=list)
    summary: HistorySummary = field(default_factory=HistorySummary)
    pagination: Optional[PaginationInfo] = None
    error: Optional[str] = None


def summarize(entries: Iterable[ReportHistoryEntry]) -> HistorySummary:
    summary = HistorySummary()
    for entry in entries:
        summary.total_reportes += 1
        summary.total_registro_c += entry.registro_c
        summary.total_registro_r += entry.registro_r
        status = entry.estado_actividad
        if status == "Activo":
            summary.activos += 1
        elif status == "Parcial":
            summary.parciales += 1
        else:
            summary.sin_registros += 1
    return summary


def paginate(
    entries: list[ReportHistoryEntry], page: int, per_page: int
) -> tuple[list[ReportHistoryEntry], PaginationInfo]:
    """Recorta la lista a la página pedida (fuera de rango se ajusta)."""
    pagination = calculate_pagination(1, per_page, len(entries))
    page = min(max(page, 1), pagination["total_pages"])
    pagination = calculate_pagination(page, per_page, len(entries))
    offset = pagination["offset"]
    return entries[offset : offset + per_page], pagination


def remove_entry(history: ReportHistory, report_id: int) -> ReportHistory:
    """Copia del historial sin el reporte eliminado, con el total actualizado."""
    remaining = [e for e in history.data if e.id_reporte != report_id]
    return history.model_copy(
        update={"data": remaining, "total_reportes": len(remaining)}
    )


async def load_history_page(
    client: PadronApiClient,
    credentials: SessionCredentials,
    operador_id: int,
    page: int = 1,
    per_page: Optional[int] = None,
) -> HistoryPage:
    """
    Obtiene el historial y arma la página pedida.

    Un fallo de la API se devuelve como HistoryPage.error;
    UnauthenticatedError se propaga.
    """
    per_page = per_page or settings.HISTORY_PAGE_SIZE

    try:
        history = await client.get_report_history(credentials, operador_id)
    except UnauthenticatedError:
        raise
    except ApiError as exc:
        logger.warning("History fetch for operator %s failed: %s", operador_id, exc)
        return HistoryPage(error=user_message(exc, OPERATOR_MESSAGES["history_failed"]))

    entries, pagination = paginate(history.data, page, per_page)
    summary = summarize(history.data)
    summary.total_reportes = max(history.total_reportes, len(history.data))

    return HistoryPage(
        nombre_operador=history.nombre_operador,
        entries=entries,
        summary=summary,
        pagination=pagination,
    )


async def delete_report(
    client: PadronApiClient, credentials: SessionCredentials, report_id: int
) -> Optional[str]:
    """
    Elimina un reporte.

    Returns:
        None si se eliminó, o el mensaje de error a mostrar
    """
    try:
        await client.delete_report(credentials, report_id)
    except UnauthenticatedError:
        raise
    except ApiError as exc:
        logger.warning("Delete of report %s failed: %s", report_id, exc)
        return user_message(exc, OPERATOR_MESSAGES["delete_failed"])

    logger.info("Report %s deleted", report_id)
    return None

"""
Servicio del Panel de Coordinador
Estado de envío del reporte diario de cada operador asignado.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Iterable, Optional

from app.schemas.report import ReportHistory, ReportHistoryEntry
from app.schemas.user import OperadorAsignado
from app.services.api_client import PadronApiClient, UnauthenticatedError
from app.services.token_auth import SessionCredentials

logger = logging.getLogger(__name__)


class CompletionStatus(str, Enum):
    COMPLETED = "completed"
    PENDING = "pending"
    UNKNOWN = "unknown"


@dataclass
class OperatorStatus:
    operator: OperadorAsignado
    status: CompletionStatus
    report: Optional[ReportHistoryEntry] = None

    @property
    def registro_c(self) -> int:
        return self.report.registro_c if self.report else 0

    @property
    def registro_r(self) -> int:
        return self.report.registro_r if self.report else 0


@dataclass
class CoordinatorOverview:
    day: date
    rows: list[OperatorStatus] = field(default_factory=list)
    query: str = ""
    total: int = 0
    completed: int = 0
    pending: int = 0
    unknown: int = 0

    @property
    def completion_pct(self) -> int:
        if self.total == 0:
            return 0
        return round(self.completed * 100 / self.total)


def report_for_day(history: ReportHistory, day: date) -> Optional[ReportHistoryEntry]:
    """Primer reporte del historial cuya fecha de reporte es `day`."""
    return next((e for e in history.data if e.report_date == day), None)


def filter_operators(
    operators: Iterable[OperadorAsignado], query: str
) -> list[OperadorAsignado]:
    """
    Filtra por usuario, ruta o número de estación.

    La búsqueda no distingue mayúsculas; una consulta vacía devuelve todo.
    """
    operators = list(operators)
    needle = (query or "").strip().lower()
    if not needle:
        return operators

    def matches(op: OperadorAsignado) -> bool:
        haystack = (op.username, op.ruta, str(op.nro_estacion).zfill(5))
        return any(needle in value.lower() for value in haystack)

    return [op for op in operators if matches(op)]


def summarize(
    day: date, rows: list[OperatorStatus], query: str = ""
) -> CoordinatorOverview:
    overview = CoordinatorOverview(day=day, rows=rows, query=query, total=len(rows))
    for row in rows:
        if row.status == CompletionStatus.COMPLETED:
            overview.completed += 1
        elif row.status == CompletionStatus.PENDING:
            overview.pending += 1
        else:
            overview.unknown += 1
    return overview


async def _status_for(
    client: PadronApiClient,
    credentials: SessionCredentials,
    operator: OperadorAsignado,
    day: date,
) -> OperatorStatus:
    history = await client.get_report_history(credentials, operator.id_operador)
    report = report_for_day(history, day)
    status = CompletionStatus.COMPLETED if report else CompletionStatus.PENDING
    return OperatorStatus(operator=operator, status=status, report=report)


async def build_overview(
    client: PadronApiClient,
    credentials: SessionCredentials,
    operators: Iterable[OperadorAsignado],
    day: Optional[date] = None,
    query: str = "",
) -> CoordinatorOverview:
    """
    Consulta el historial de cada operador (en paralelo) y arma el panel.

    Un historial que no se pudo obtener deja al operador como UNKNOWN;
    UnauthenticatedError se propaga.
    """
    day = day or date.today()
    selected = filter_operators(operators, query)

    results = await asyncio.gather(
        *(_status_for(client, credentials, op, day) for op in selected),
        return_exceptions=True,
    )

    rows = []
    for operator, result in zip(selected, results):
        if isinstance(result, UnauthenticatedError):
            raise result
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result
        if isinstance(result, Exception):
            logger.warning(
                "History for operator %s unavailable: %s", operator.id_operador, result
            )
            result = OperatorStatus(operator=operator, status=CompletionStatus.UNKNOWN)
        rows.append(result)

    return summarize(day, rows, query)

"""
Servicio de Reporte Diario
Ciclo de vida del borrador del reporte y armado del payload de envío.

ReportForm es el borrador de una sesión de operador:
- Se edita campo por campo; los valores derivados (códigos y registros) se
  recalculan en cada lectura, nunca se guardan
- No se puede enviar hasta que valide, tenga centro y estación resueltos y
  haya cambiado respecto de sus valores iniciales
- Tras un envío aceptado queda en estado de éxito y, pasado un retardo fijo,
  vuelve a sus valores iniciales con la estación bloqueada
- Si la API rechaza el envío, el borrador queda intacto para corregirlo
"""

import asyncio
import logging
from datetime import date, datetime, timezone
from typing import Mapping, Optional

from app.config import settings
from app.constants.report import (
    EMPTY_INCIDENTS,
    REPORT_SUBMITTED_STATUS,
    CounterKind,
)
from app.content import CENTER_MESSAGES, REPORT_MESSAGES, STATION_MESSAGES
from app.schemas.report import REPORT_FORM_FIELDS, DailyReportPayload, ReportFormData
from app.services.api_client import (
    ApiError,
    PadronApiClient,
    UnauthenticatedError,
    user_message,
)
from app.services.center_service import CenterSelector
from app.services.counter_service import (
    ReportPreview,
    build_preview,
    calculate_registers,
    format_counter_code,
)
from app.services.station_service import (
    StationDirectory,
    StationResolver,
    pad_station_number,
)
from app.services.token_auth import SessionCredentials
from app.utils.validators import validate_report_form

logger = logging.getLogger(__name__)


def default_form_data(
    assigned_number: int, today: Optional[date] = None
) -> ReportFormData:
    """Valores iniciales del borrador: fecha de hoy y estación asignada."""
    return ReportFormData(
        fecha_reporte=(today or date.today()).isoformat(),
        nro_estacion=pad_station_number(assigned_number),
    )


def _iso_utc(moment: datetime) -> str:
    """ISO-8601 en UTC con milisegundos y sufijo Z."""
    return (
        moment.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def build_report_payload(
    data: ReportFormData,
    operator_id: int,
    station_id: int,
    center_id: int,
    submitted_at: Optional[datetime] = None,
) -> DailyReportPayload:
    """
    Arma el payload de POST /api/reportesdiarios/.

    Asume un borrador ya validado; los códigos y registros se recalculan
    con las mismas funciones que usa la vista previa.

    Args:
        data: Borrador validado
        operator_id: id_operador de la sesión
        station_id: id de la estación resuelta
        center_id: id del centro de empadronamiento seleccionado
        submitted_at: Momento del envío (default: ahora)

    Returns:
        DailyReportPayload listo para enviar
    """
    station = data.nro_estacion
    submitted_at = submitted_at or datetime.now(timezone.utc)

    return DailyReportPayload(
        fecha_reporte=f"{data.fecha_reporte}T00:00:00Z",
        contador_inicial_c=format_counter_code(
            CounterKind.C, station, data.contador_inicial_c, data.nro_tramite_c
        ),
        contador_final_c=format_counter_code(
            CounterKind.C, station, data.contador_final_c, data.nro_tramite_c
        ),
        registro_c=calculate_registers(
            data.contador_inicial_c, data.contador_final_c, data.nro_saltos_c
        ),
        contador_inicial_r=format_counter_code(
            CounterKind.R, station, data.contador_inicial_r, data.nro_tramite_r
        ),
        contador_final_r=format_counter_code(
            CounterKind.R, station, data.contador_final_r, data.nro_tramite_r
        ),
        registro_r=calculate_registers(
            data.contador_inicial_r, data.contador_final_r, data.nro_saltos_r
        ),
        incidencias=data.incidencias or EMPTY_INCIDENTS,
        observaciones=data.observaciones or "",
        fecha_registro=_iso_utc(submitted_at),
        sincronizar=True,
        estado=REPORT_SUBMITTED_STATUS,
        operador=operator_id,
        estacion=station_id,
        centro_empadronamiento=center_id,
    )


class ReportForm:
    """Borrador del reporte diario de un operador."""

    def __init__(
        self,
        operator_id: int,
        assigned_number: int,
        directory: Optional[StationDirectory] = None,
        centers: Optional[CenterSelector] = None,
        reset_delay: Optional[float] = None,
        today: Optional[date] = None,
    ):
        self.operator_id = operator_id
        self._defaults = default_form_data(assigned_number, today)
        self.data = self._defaults.model_copy()

        self.station = StationResolver(assigned_number, directory or StationDirectory())
        self.centers = centers or CenterSelector()
        self.reset_delay = (
            settings.REPORT_RESET_DELAY_SECONDS if reset_delay is None else reset_delay
        )

        self.error: Optional[str] = None
        self.load_errors: list[str] = []
        self.success = False
        self.submitting = False
        self._reset_handle: Optional[asyncio.TimerHandle] = None

    # ============================================================
    # Estado derivado
    # ============================================================

    @property
    def preview(self) -> ReportPreview:
        return build_preview(self.data)

    @property
    def field_errors(self) -> dict[str, list[str]]:
        return validate_report_form(self.data)

    @property
    def is_dirty(self) -> bool:
        return self.data != self._defaults

    @property
    def station_id(self) -> Optional[int]:
        return self.station.station_id

    @property
    def center_id(self) -> Optional[int]:
        return self.centers.center_id

    def blocking_reasons(self) -> list[str]:
        """Motivos por los que el envío está bloqueado (vacío si se puede enviar)."""
        reasons = []
        if self.field_errors:
            reasons.append(REPORT_MESSAGES["invalid"])
        if self.center_id is None:
            reasons.append(REPORT_MESSAGES["center_required"])
        if self.station_id is None:
            reasons.append(REPORT_MESSAGES["station_unresolved"])
        if not self.is_dirty:
            reasons.append(REPORT_MESSAGES["not_dirty"])
        return reasons

    @property
    def can_submit(self) -> bool:
        return not self.submitting and not self.success and not self.blocking_reasons()

    # ============================================================
    # Edición
    # ============================================================

    async def update_fields(self, updates: Mapping[str, str]) -> None:
        """
        Aplica cambios de campos del formulario.

        El número de estación solo se acepta desbloqueado y dispara su
        resolución; el resto de los campos se copia tal cual.
        """
        changes = {
            name: (updates[name] or "").strip()
            for name in REPORT_FORM_FIELDS
            if name in updates and updates[name] is not None
        }
        station_number = changes.pop("nro_estacion", None)

        if changes:
            self.data = self.data.model_copy(update=changes)

        if station_number is not None and not self.station.locked:
            self.data = self.data.model_copy(update={"nro_estacion": station_number})
            await self.station.set_station_number(station_number)

    def unlock_station(self, confirmed: bool) -> bool:
        if not self.station.unlock(confirmed):
            return False
        self.data = self.data.model_copy(update={"nro_estacion": ""})
        return True

    def lock_station(self) -> None:
        self.station.lock()
        self.data = self.data.model_copy(
            update={"nro_estacion": self.station.station_number}
        )

    def select_province(self, province: str) -> None:
        self.centers.select_province(province)

    def select_municipality(self, municipality: str) -> None:
        self.centers.select_municipality(municipality)

    def select_point(self, center_id: Optional[int]) -> None:
        self.centers.select_point(center_id)

    def reset(self) -> None:
        """Vuelve a los valores iniciales, re-bloquea la estación y limpia mensajes."""
        self._cancel_pending_reset()
        self.data = self._defaults.model_copy()
        self.station.reset()
        self.centers.clear()
        self.error = None
        self.success = False

    def discard(self) -> None:
        """Invalida el timer y las búsquedas pendientes al abandonar el borrador."""
        self._cancel_pending_reset()
        self.station.lock()

    # ============================================================
    # Carga de snapshots
    # ============================================================

    async def load(
        self, client: PadronApiClient, credentials: SessionCredentials
    ) -> None:
        """
        Carga (o recarga) el directorio de estaciones y la lista de centros.

        Un fallo deja la lista afectada vacía y un mensaje en load_errors;
        UnauthenticatedError se propaga.
        """
        self.load_errors = []
        stations, centers = await asyncio.gather(
            client.list_stations(credentials),
            client.list_centers(credentials),
            return_exceptions=True,
        )

        for result in (stations, centers):
            if isinstance(result, UnauthenticatedError):
                raise result

        if isinstance(stations, BaseException):
            logger.warning("Station directory fetch failed: %s", stations)
            self.load_errors.append(STATION_MESSAGES["directory_failed"])
            stations = []
        if isinstance(centers, BaseException):
            logger.warning("Center list fetch failed: %s", centers)
            self.load_errors.append(CENTER_MESSAGES["load_failed"])
            centers = []

        self.station.replace_directory(StationDirectory(stations))
        if self.station.locked:
            self.data = self.data.model_copy(
                update={"nro_estacion": self.station.station_number}
            )
        self.centers.replace_centers(centers)

    # ============================================================
    # Envío
    # ============================================================

    async def submit(
        self, client: PadronApiClient, credentials: SessionCredentials
    ) -> bool:
        """
        Envía el reporte si nada lo bloquea.

        Returns:
            True si la API lo aceptó

        Raises:
            UnauthenticatedError: la sesión ya no es válida
        """
        if self.submitting:
            self.error = REPORT_MESSAGES["in_flight"]
            return False
        if self.success:
            return False

        reasons = self.blocking_reasons()
        if reasons:
            self.error = reasons[0]
            return False

        payload = build_report_payload(
            self.data, self.operator_id, self.station_id, self.center_id
        )

        self.submitting = True
        self.error = None
        try:
            await client.submit_daily_report(credentials, payload)
        except UnauthenticatedError:
            raise
        except ApiError as exc:
            logger.warning("Daily report submission failed: %s", exc)
            self.error = user_message(exc, REPORT_MESSAGES["submit_failed"])
            return False
        finally:
            self.submitting = False

        logger.info(
            "Daily report submitted (operator %s, station %s, center %s)",
            self.operator_id,
            payload.estacion,
            payload.centro_empadronamiento,
        )
        self.success = True
        self._schedule_reset()
        return True

    def _schedule_reset(self) -> None:
        self._cancel_pending_reset()
        loop = asyncio.get_running_loop()
        self._reset_handle = loop.call_later(
            self.reset_delay, self._reset_after_success
        )

    def _reset_after_success(self) -> None:
        self._reset_handle = None
        self.reset()

    def _cancel_pending_reset(self) -> None:
        if self._reset_handle is not None:
            self._reset_handle.cancel()
            self._reset_handle = None


async def open_report_form(
    client: PadronApiClient,
    credentials: SessionCredentials,
    operator_id: int,
    assigned_number: int,
) -> ReportForm:
    """Crea un borrador nuevo y carga sus snapshots."""
    form = ReportForm(operator_id, assigned_number)
    await form.load(client, credentials)
    return form

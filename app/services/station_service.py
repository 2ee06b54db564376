"""
Servicio de Estaciones
Directorio de estaciones y resolución del número de estación del reporte.

El directorio es un snapshot inmutable cargado una vez por formulario.
StationResolver implementa el bloqueo/desbloqueo del número de estación:

- Bloqueado: número fijo a la estación asignada al operador
- Desbloqueado: número libre; al llegar a 5 dígitos se busca en el directorio

Cada disparo (cambio de número, bloqueo, reinicio) incrementa una generación.
Una búsqueda que termina con una generación vieja se descarta, de modo que
siempre gana el último disparo aunque las búsquedas terminen desordenadas.
"""

import logging
from typing import Awaitable, Callable, Iterable, Optional

from app.content import STATION_MESSAGES
from app.schemas.station import Station
from app.services.api_client import ApiError
from app.utils.validators import is_station_number

logger = logging.getLogger(__name__)

StationLookup = Callable[[str], Awaitable[Optional[Station]]]


def pad_station_number(number: int | str) -> str:
    return str(number).zfill(5)


class StationDirectory:
    """Snapshot de solo lectura de las estaciones."""

    def __init__(self, stations: Iterable[Station] = ()):
        self._stations: tuple[Station, ...] = tuple(stations)

    def __len__(self) -> int:
        return len(self._stations)

    @property
    def stations(self) -> tuple[Station, ...]:
        return self._stations

    def find_by_number(self, number: int | str) -> Optional[Station]:
        """
        Busca por igualdad numérica exacta; gana la primera coincidencia.

        Args:
            number: Número de estación (int o texto de dígitos)

        Returns:
            Station o None si no existe
        """
        try:
            target = int(number)
        except (TypeError, ValueError):
            return None

        for station in self._stations:
            if station.nro_estacion == target:
                return station
        return None

    async def lookup(self, number: str) -> Optional[Station]:
        return self.find_by_number(number)


class StationResolver:
    """
    Máquina de estados Bloqueado/Desbloqueado del número de estación.

    Attributes:
        locked: True mientras el número está fijo a la estación asignada
        station_number: Texto actual del campo
        station: Estación resuelta, o None
        error: Mensaje de resolución/búsqueda, o None
        validating: True mientras hay una búsqueda en curso
        generation: Contador de disparos para descartar búsquedas viejas
    """

    def __init__(
        self,
        assigned_number: int,
        directory: StationDirectory,
        lookup: Optional[StationLookup] = None,
    ):
        self.assigned_number = assigned_number
        self.directory = directory
        self._custom_lookup = lookup

        self.locked = True
        self.station_number = pad_station_number(assigned_number)
        self.station: Optional[Station] = None
        self.error: Optional[str] = None
        self.validating = False
        self.generation = 0

        self._restore_assigned()

    @property
    def station_id(self) -> Optional[int]:
        return self.station.id if self.station else None

    def _restore_assigned(self) -> None:
        self.station_number = pad_station_number(self.assigned_number)
        self.station = self.directory.find_by_number(self.assigned_number)

    def _lookup(self, number: str) -> Awaitable[Optional[Station]]:
        if self._custom_lookup is not None:
            return self._custom_lookup(number)
        return self.directory.lookup(number)

    def replace_directory(self, directory: StationDirectory) -> None:
        """Reemplaza el snapshot y re-resuelve la estación si está bloqueado."""
        self.directory = directory
        if self.locked:
            self._restore_assigned()

    def unlock(self, confirmed: bool) -> bool:
        """
        Bloqueado → Desbloqueado. Requiere confirmación explícita.

        Limpia el número y la estación resuelta.

        Returns:
            True si el estado cambió
        """
        if not self.locked or not confirmed:
            return False

        self.generation += 1
        self.locked = False
        self.station_number = ""
        self.station = None
        self.error = None
        self.validating = False
        logger.info("Station unlocked (assigned %s)", self.assigned_number)
        return True

    def lock(self) -> None:
        """
        Desbloqueado → Bloqueado. Siempre permitido, sin confirmación.

        Restaura el número asignado y su estación desde el snapshot, sin
        llamadas de red. Descarta cualquier búsqueda en curso.
        """
        self.generation += 1
        self.locked = True
        self.error = None
        self.validating = False
        self._restore_assigned()

    def reset(self) -> None:
        """Vuelve al estado inicial (bloqueado en la estación asignada)."""
        self.lock()

    async def set_station_number(self, value: str) -> Optional[Station]:
        """
        Actualiza el número mientras está desbloqueado y lo resuelve.

        - Menos de 5 dígitos (o formato inválido): la resolución se limpia
        - Exactamente 5 dígitos: búsqueda asíncrona en el directorio

        Returns:
            La estación resuelta para este disparo, o None
        """
        if self.locked:
            return self.station

        value = (value or "").strip()
        self.generation += 1
        generation = self.generation
        self.station_number = value
        self.station = None
        self.error = None

        if not is_station_number(value):
            self.validating = False
            return None

        self.validating = True
        try:
            station = await self._lookup(value)
        except ApiError as exc:
            if generation != self.generation:
                return None
            logger.warning("Station lookup for %s failed: %s", value, exc)
            self.station = None
            self.error = STATION_MESSAGES["lookup_failed"]
            self.validating = False
            return None

        if generation != self.generation:
            logger.debug("Discarding stale lookup for %s", value)
            return None

        self.validating = False
        if station is None:
            self.station = None
            self.error = STATION_MESSAGES["not_found"].format(number=value)
            return None

        self.station = station
        self.error = None
        return station

"""
Servicio de Límite de Intentos
Límite en memoria para los intentos de login.

Con varios workers cada proceso lleva su propia cuenta.
"""

import time
from collections import defaultdict
from dataclasses import dataclass
from threading import Lock
from typing import Dict, Optional, Tuple

from app.utils.ip_utils import normalize_ip_for_rate_limit

USERNAME_MAX_ATTEMPTS = 5
USERNAME_WINDOW_SECONDS = 15 * 60
IP_MAX_ATTEMPTS = 20
IP_WINDOW_SECONDS = 60 * 60


@dataclass
class RateLimitEntry:
    count: int
    window_start: float


class RateLimiter:
    """Limitador de ventana fija, thread-safe."""

    def __init__(self):
        self._lock = Lock()
        self._requests: Dict[str, RateLimitEntry] = defaultdict(
            lambda: RateLimitEntry(0, 0)
        )
        self._operation_count = 0

    def is_allowed(
        self, key: str, max_requests: int, window_seconds: int
    ) -> Tuple[bool, Optional[int]]:
        """
        Registra un intento y verifica si está dentro del límite.

        Args:
            key: Identificador (ej: "ip:1.2.3.4" o "user:juan")
            max_requests: Máximo de intentos en la ventana
            window_seconds: Duración de la ventana en segundos

        Returns:
            Tupla (permitido, segundos_para_reintentar)
        """
        with self._lock:
            self._operation_count += 1

            if self._operation_count >= 100 and len(self._requests) > 1000:
                self._cleanup_old_entries_unlocked(max_age_seconds=2 * 60 * 60)

            current_time = time.time()
            entry = self._requests[key]

            if entry.window_start < current_time - window_seconds:
                entry.count = 0
                entry.window_start = current_time

            if entry.count >= max_requests:
                retry_after = int(entry.window_start + window_seconds - current_time)
                return False, max(1, retry_after)

            entry.count += 1
            return True, None

    def reset(self, key: Optional[str] = None) -> None:
        """Olvida un identificador (o todos)."""
        with self._lock:
            if key is None:
                self._requests.clear()
            else:
                self._requests.pop(key, None)

    def _cleanup_old_entries_unlocked(self, max_age_seconds: int = 3600):
        """Debe llamarse con el lock tomado."""
        current_time = time.time()
        stale = [
            key
            for key, entry in self._requests.items()
            if current_time - entry.window_start > max_age_seconds
        ]
        for key in stale:
            del self._requests[key]
        self._operation_count = 0


# Global rate limiter instance
login_rate_limiter = RateLimiter()


def check_login_rate_limit(
    identifier: str, identifier_type: str = "username"
) -> Tuple[bool, Optional[int]]:
    """
    Verifica el límite de intentos de login.

    Límites:
    - Usuario: 5 intentos cada 15 minutos
    - IP: 20 intentos por hora
    """
    if identifier_type == "username":
        return login_rate_limiter.is_allowed(
            key=f"user:{identifier.strip().lower()}",
            max_requests=USERNAME_MAX_ATTEMPTS,
            window_seconds=USERNAME_WINDOW_SECONDS,
        )
    normalized_ip = normalize_ip_for_rate_limit(identifier)
    return login_rate_limiter.is_allowed(
        key=f"ip:{normalized_ip}",
        max_requests=IP_MAX_ATTEMPTS,
        window_seconds=IP_WINDOW_SECONDS,
    )


def retry_minutes(retry_after: Optional[int]) -> int:
    """Minutos enteros (al menos 1) para el mensaje de reintento."""
    return max(1, -(-(retry_after or 60) // 60))

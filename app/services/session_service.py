"""
Servicio de Sesiones
Almacén en memoria de sesiones de usuario.

Una sesión se crea en el login y se destruye en el logout o al expirar.
El navegador solo guarda un JWT firmado con el id de sesión; los tokens de
la API, el usuario y el borrador del reporte viven aquí y se pasan
explícitamente a cada operación que los necesita.
"""

import logging
import secrets
import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Dict, Optional

from app.config import settings
from app.constants.roles import UserRole
from app.schemas.user import Operador, SessionUser
from app.services.token_auth import SessionCredentials

logger = logging.getLogger(__name__)


@dataclass
class UserSession:
    """Contexto explícito de una sesión autenticada."""

    id: str
    credentials: SessionCredentials
    user: SessionUser
    role: UserRole
    created_at: float = field(default_factory=time.time)
    # ReportForm of the operator, created on first visit to the form
    report_form: Optional[Any] = None

    @property
    def operator(self) -> Optional[Operador]:
        return self.user.operador

    @property
    def is_expired(self) -> bool:
        max_age = settings.SESSION_EXPIRE_HOURS * 60 * 60
        return time.time() - self.created_at > max_age

    def discard_form(self) -> None:
        """Descarta el borrador y cualquier efecto pendiente del formulario."""
        if self.report_form is not None:
            self.report_form.discard()
            self.report_form = None


class SessionStore:
    """
    Almacén de sesiones thread-safe.

    Suficiente para un solo proceso; con varios workers haría falta un
    almacén compartido.
    """

    def __init__(self):
        self._lock = Lock()
        self._sessions: Dict[str, UserSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(
        self, credentials: SessionCredentials, user: SessionUser, role: UserRole
    ) -> UserSession:
        session = UserSession(
            id=secrets.token_urlsafe(24),
            credentials=credentials,
            user=user,
            role=role,
        )
        with self._lock:
            self._cleanup_expired_unlocked()
            self._sessions[session.id] = session
        logger.info("Session created for user %s (%s)", user.username, role.value)
        return session

    def get(self, session_id: Optional[str]) -> Optional[UserSession]:
        if not session_id:
            return None
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            if session.is_expired:
                self._drop_unlocked(session_id)
                return None
            return session

    def destroy(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        with self._lock:
            self._drop_unlocked(session_id)

    def clear(self) -> None:
        with self._lock:
            for session_id in list(self._sessions):
                self._drop_unlocked(session_id)

    def _drop_unlocked(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            session.discard_form()
            session.credentials.clear()
            logger.info("Session closed for user %s", session.user.username)

    def _cleanup_expired_unlocked(self) -> None:
        expired = [sid for sid, s in self._sessions.items() if s.is_expired]
        for session_id in expired:
            self._drop_unlocked(session_id)


# Global session store instance
session_store = SessionStore()

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from app.config import settings
from app.constants.roles import UserRole
from app.content import LOGIN_ERRORS
from app.schemas.user import SessionUser
from app.services.api_client import ApiError, ApiRejectedError, PadronApiClient
from app.services.session_service import SessionStore, UserSession
from app.services.token_auth import SessionCredentials

logger = logging.getLogger(__name__)


class LoginError(Exception):
    """Login rechazado; el mensaje se muestra tal cual al usuario."""


# ============================================================
# SECCIÓN 1: Cookie de Sesión (JWT)
# ============================================================


def create_session_token(session_id: str) -> str:
    """Crea el JWT de la cookie de sesión con el id de sesión como sub."""
    now = datetime.now(timezone.utc)
    expires = now + timedelta(hours=settings.SESSION_EXPIRE_HOURS)

    to_encode = {"sub": session_id, "exp": expires, "iat": now}

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_session_token(token: str) -> Optional[str]:
    """Verifica el JWT de sesión y devuelve el id de sesión si es válido."""
    try:
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM]
        )
    except jwt.InvalidTokenError:
        return None

    session_id: Optional[str] = payload.get("sub")
    return session_id or None


# ============================================================
# SECCIÓN 2: Reglas de Rol
# ============================================================


def check_role_assignment(user: SessionUser, role: UserRole) -> Optional[str]:
    """
    Verifica que el usuario pueda actuar con el rol elegido.

    Reglas:
    - El primer grupo del usuario debe ser el rol elegido
    - Operador: debe tener datos de operador y estación asignada (ids != 0)
    - Coordinador: debe tener datos de coordinador

    Returns:
        Mensaje de error, o None si el rol es válido
    """
    if user.primary_group != role.value:
        return LOGIN_ERRORS["wrong_role"]

    if role == UserRole.OPERADOR:
        if user.operador is None:
            return LOGIN_ERRORS["operator_missing"]
        if user.operador.id_estacion == 0 or user.operador.nro_estacion == 0:
            return LOGIN_ERRORS["station_missing"]

    if role == UserRole.COORDINADOR and user.coordinador is None:
        return LOGIN_ERRORS["coordinator_missing"]

    return None


def validate_role(session: UserSession, role: UserRole) -> bool:
    """True si la sesión tiene el rol pedido y sus datos siguen siendo válidos."""
    if session.role != role:
        return False
    return check_role_assignment(session.user, role) is None


# ============================================================
# SECCIÓN 3: Login / Logout
# ============================================================


async def login(
    client: PadronApiClient,
    store: SessionStore,
    username: str,
    password: str,
    role: UserRole,
) -> UserSession:
    """
    Autentica contra la API y crea la sesión.

    Args:
        client: Cliente de la API
        store: Almacén de sesiones
        username: Usuario
        password: Contraseña
        role: Rol elegido en el formulario

    Returns:
        La sesión creada

    Raises:
        LoginError: con el mensaje a mostrar
    """
    try:
        response = await client.obtain_token(username, password)
    except ApiRejectedError as exc:
        if exc.status_code in (400, 401):
            raise LoginError(LOGIN_ERRORS["invalid_credentials"]) from exc
        raise LoginError(exc.message or LOGIN_ERRORS["generic"]) from exc
    except ApiError as exc:
        logger.warning("Login for %s failed: %s", username, exc)
        raise LoginError(LOGIN_ERRORS["generic"]) from exc

    error = check_role_assignment(response.user, role)
    if error:
        logger.info("Login for %s refused: %s", username, error)
        raise LoginError(error)

    credentials = SessionCredentials(access=response.access, refresh=response.refresh)
    return store.create(credentials, response.user, role)


def logout(store: SessionStore, session_id: Optional[str]) -> None:
    store.destroy(session_id)

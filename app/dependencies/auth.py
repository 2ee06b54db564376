from typing import Optional

from fastapi import Depends, HTTPException, Request, status

from app.config import settings
from app.constants.roles import UserRole, home_path_for
from app.services.api_client import PadronApiClient
from app.services.auth_service import validate_role, verify_session_token
from app.services.session_service import SessionStore, UserSession, session_store


def get_api_client(request: Request) -> PadronApiClient:
    """Cliente de la API creado en el lifespan de la aplicación."""
    return request.app.state.api_client


def get_session_store() -> SessionStore:
    return session_store


def _redirect(location: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_302_FOUND,
        headers={"Location": location, "HX-Redirect": location},
    )


def _session_from_cookie(
    request: Request, store: SessionStore
) -> Optional[UserSession]:
    """
    Extrae el id de sesión del JWT de la cookie y busca la sesión.

    Returns:
        La sesión, o None si no hay cookie, el JWT es inválido o la
        sesión ya no existe
    """
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token:
        return None

    session_id = verify_session_token(token)
    if session_id is None:
        return None

    return store.get(session_id)


def get_current_session_optional(
    request: Request, store: SessionStore = Depends(get_session_store)
) -> Optional[UserSession]:
    """
    Sesión actual o None (sin excepción).

    Para páginas que funcionan con y sin sesión, como /login.
    """
    return _session_from_cookie(request, store)


def get_current_session(
    request: Request, store: SessionStore = Depends(get_session_store)
) -> UserSession:
    """
    Sesión actual; sin sesión válida redirige a /login.
    """
    session = _session_from_cookie(request, store)
    if session is None:
        raise _redirect("/login")
    return session


def _require_role(session: UserSession, role: UserRole) -> UserSession:
    if not validate_role(session, role):
        location = "/login" if session.role == role else home_path_for(session.role)
        raise _redirect(location)
    return session


def require_operator(
    session: UserSession = Depends(get_current_session),
) -> UserSession:
    """
    Sesión de un Operador con estación asignada.

    Otro rol se redirige a su propio inicio.
    """
    return _require_role(session, UserRole.OPERADOR)


def require_coordinator(
    session: UserSession = Depends(get_current_session),
) -> UserSession:
    return _require_role(session, UserRole.COORDINADOR)

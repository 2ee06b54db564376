"""
Rutas de autenticación.
Login con rol elegido, logout y redirección al inicio de cada rol.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from app.constants.roles import UserRole, home_path_for
from app.content import LOGIN_ERRORS
from app.dependencies.auth import (
    get_api_client,
    get_current_session_optional,
    get_session_store,
)
from app.dependencies.csrf import validate_csrf_token
from app.services import auth_service
from app.services.api_client import PadronApiClient
from app.services.rate_limit_service import check_login_rate_limit, retry_minutes
from app.services.session_service import SessionStore, UserSession
from app.utils.ip_utils import get_client_ip
from app.utils.response_utils import (
    clear_session_cookie,
    redirect,
    set_session_cookie,
)
from app.utils.template_helpers import render_template

router = APIRouter()


def _render_login(
    request: Request,
    error: Optional[str] = None,
    username: str = "",
    role: str = UserRole.OPERADOR.value,
    status_code: int = 200,
):
    return render_template(
        request,
        "pages/login.html",
        {
            "error": error,
            "username": username,
            "selected_role": role,
            "roles": [r.value for r in UserRole],
        },
        status_code=status_code,
    )


@router.get("/")
async def index(session: Optional[UserSession] = Depends(get_current_session_optional)):
    location = home_path_for(session.role) if session else "/login"
    return RedirectResponse(url=location, status_code=302)


@router.get("/login", response_class=HTMLResponse)
async def login_page(
    request: Request,
    session: Optional[UserSession] = Depends(get_current_session_optional),
):
    if session:
        return RedirectResponse(url=home_path_for(session.role), status_code=302)

    return _render_login(request)


@router.post("/login", response_class=HTMLResponse)
async def login_submit(
    request: Request,
    csrf_protected: None = Depends(validate_csrf_token),
    username: str = Form(""),
    password: str = Form(""),
    role: str = Form(UserRole.OPERADOR.value),
    client: PadronApiClient = Depends(get_api_client),
    store: SessionStore = Depends(get_session_store),
):
    username = username.strip()

    if not username or not password:
        return _render_login(request, LOGIN_ERRORS["required"], username, role)

    try:
        selected_role = UserRole(role)
    except ValueError:
        return _render_login(request, LOGIN_ERRORS["wrong_role"], username)

    ip_allowed, ip_retry_after = check_login_rate_limit(get_client_ip(request), "ip")
    user_allowed, user_retry_after = (
        check_login_rate_limit(username, "username") if ip_allowed else (True, None)
    )
    if not (ip_allowed and user_allowed):
        minutes = retry_minutes(ip_retry_after or user_retry_after)
        return _render_login(
            request,
            LOGIN_ERRORS["rate_limited"].format(minutes=minutes),
            username,
            role,
            status_code=429,
        )

    try:
        session = await auth_service.login(
            client, store, username, password, selected_role
        )
    except auth_service.LoginError as exc:
        return _render_login(request, str(exc), username, role)

    response = redirect(home_path_for(session.role))
    return set_session_cookie(response, auth_service.create_session_token(session.id))


@router.post("/logout")
async def logout(
    csrf_protected: None = Depends(validate_csrf_token),
    session: Optional[UserSession] = Depends(get_current_session_optional),
    store: SessionStore = Depends(get_session_store),
):
    auth_service.logout(store, session.id if session else None)
    return clear_session_cookie(redirect("/login"))

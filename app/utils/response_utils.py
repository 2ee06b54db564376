"""
Utilidades de respuesta HTTP.
"""

from fastapi import Response
from fastapi.responses import RedirectResponse

from app.config import settings


def set_session_cookie(response: Response, token: str) -> Response:
    """
    Cookie de sesión:
    - HttpOnly: fuera del alcance de JavaScript
    - Secure: solo HTTPS en producción
    - SameSite=Lax
    """
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=not settings.DEBUG,
        samesite="lax",
        max_age=60 * 60 * settings.SESSION_EXPIRE_HOURS,
    )
    return response


def clear_session_cookie(response: Response) -> Response:
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return response


def redirect(url: str, status_code: int = 303) -> RedirectResponse:
    """Redirect que también funciona para peticiones HTMX (HX-Redirect)."""
    response = RedirectResponse(url=url, status_code=status_code)
    response.headers["HX-Redirect"] = url
    return response

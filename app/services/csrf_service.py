"""
Servicio CSRF
Patrón double-submit cookie.

El middleware deja un token firmado en la cookie csrf_token; los formularios
y las peticiones HTMX lo reenvían (campo csrf_token o cabecera X-CSRF-Token)
y la dependencia validate_csrf_token compara ambos.
"""

import hashlib
import hmac
import secrets
from contextlib import suppress
from typing import Optional

from starlette.requests import Request

from app.config import settings

CSRF_COOKIE_NAME = "csrf_token"
CSRF_HEADER_NAME = "X-CSRF-Token"
CSRF_COOKIE_MAX_AGE = 60 * 60 * 24 * 7


def generate_csrf_token() -> str:
    return secrets.token_urlsafe(32)


def _signature(token: str) -> str:
    return hmac.new(
        settings.SECRET_KEY.encode(), token.encode(), hashlib.sha256
    ).hexdigest()


def sign_csrf_token(token: str) -> str:
    """Firma el token con SECRET_KEY: "token.firma"."""
    return f"{token}.{_signature(token)}"


def verify_csrf_signature(signed_token: str) -> Optional[str]:
    """Devuelve el token si la firma es válida."""
    with suppress(ValueError):
        token, signature = signed_token.rsplit(".", 1)
        if hmac.compare_digest(signature, _signature(token)):
            return token
    return None


def get_csrf_token_from_cookie(request: Request) -> Optional[str]:
    signed_token = request.cookies.get(CSRF_COOKIE_NAME)
    if not signed_token:
        return None
    return verify_csrf_signature(signed_token)


class CSRFMiddleware:
    """
    Middleware ASGI que solo emite la cookie CSRF cuando falta.

    La validación la hace la dependencia validate_csrf_token. Las rutas
    /api/* no usan cookie de formulario y se saltean.
    """

    def __init__(self, app):
        self.app = app

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http" or scope.get("path", "").startswith("/api/"):
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)
        existing_cookie = request.cookies.get(CSRF_COOKIE_NAME)
        if existing_cookie and verify_csrf_signature(existing_cookie) is None:
            existing_cookie = None

        async def send_wrapper(message):
            if message["type"] == "http.response.start" and not existing_cookie:
                signed_token = sign_csrf_token(generate_csrf_token())
                cookie_value = (
                    f"{CSRF_COOKIE_NAME}={signed_token}; Path=/; "
                    f"SameSite=strict; Max-Age={CSRF_COOKIE_MAX_AGE}"
                )
                if not settings.DEBUG:
                    cookie_value += "; Secure"

                headers = list(message.get("headers", []))
                headers.append((b"set-cookie", cookie_value.encode()))
                message["headers"] = headers

            await send(message)

        await self.app(scope, receive, send_wrapper)

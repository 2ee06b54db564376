"""
Dependencia de validación CSRF

Compara el token enviado (cabecera X-CSRF-Token o campo csrf_token del
formulario) con la cookie firmada.
"""

import logging
import secrets

from fastapi import HTTPException, Request, status

from app.services.csrf_service import (
    CSRF_COOKIE_NAME,
    CSRF_HEADER_NAME,
    verify_csrf_signature,
)

logger = logging.getLogger(__name__)


async def validate_csrf_token(request: Request) -> None:
    """
    Valida el token CSRF en métodos inseguros (POST, PUT, DELETE, PATCH).

    Raises:
        HTTPException: 403 si falta la cookie, falta el token o no coinciden

    Usage:
        @router.post("/enviar")
        async def enviar(csrf_protected: None = Depends(validate_csrf_token)):
            ...
    """
    if request.method not in ("POST", "PUT", "DELETE", "PATCH"):
        return

    signed_cookie_token = request.cookies.get(CSRF_COOKIE_NAME)
    request_token = request.headers.get(CSRF_HEADER_NAME)

    if not request_token:
        content_type = request.headers.get("content-type", "")
        if (
            "application/x-www-form-urlencoded" in content_type
            or "multipart/form-data" in content_type
        ):
            try:
                form = await request.form()
            except Exception as e:
                logger.warning("Failed to parse form for CSRF token: %s", e)
            else:
                token_value = form.get("csrf_token")
                if isinstance(token_value, str):
                    request_token = token_value

    if not signed_cookie_token or verify_csrf_signature(signed_cookie_token) is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Falta la cookie CSRF. Recargue la página.",
        )

    if not request_token:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Falta el token CSRF en la petición.",
        )

    if not secrets.compare_digest(signed_cookie_token, request_token):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Token CSRF inválido."
        )

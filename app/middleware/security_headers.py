"""
Middleware de Cabeceras de Seguridad
Genera el nonce CSP de cada petición y agrega las cabeceras de seguridad.
"""

import secrets

from starlette.middleware.base import BaseHTTPMiddleware

from app.config import settings

# htmx is served from this CDN
SCRIPT_SOURCES = ("'self'", "https://unpkg.com")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Cabeceras agregadas a todas las respuestas:
    - X-Frame-Options / frame-ancestors: sin embeber en otros sitios
    - X-Content-Type-Options: sin MIME sniffing
    - Strict-Transport-Security: solo en producción
    - Content-Security-Policy: con nonce por petición (request.state.csp_nonce)
    - Referrer-Policy y Permissions-Policy
    """

    async def dispatch(self, request, call_next):
        nonce = secrets.token_urlsafe(16)
        request.state.csp_nonce = nonce

        response = await call_next(request)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"

        if not settings.DEBUG:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        csp_policy = [
            "default-src 'self'",
            f"script-src {' '.join(SCRIPT_SOURCES)} 'nonce-{nonce}'",
            f"style-src 'self' 'nonce-{nonce}'",
            "img-src 'self' data:",
            "frame-ancestors 'none'",
            "base-uri 'self'",
            "form-action 'self'",
            "connect-src 'self'",
        ]
        response.headers["Content-Security-Policy"] = "; ".join(csp_policy)
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = (
            "camera=(), geolocation=(), microphone=(), payment=(), usb=()"
        )

        return response

"""
Contexto común de templates.

Los textos de app.content son inmutables en tiempo de ejecución y se
cargan una sola vez; lo propio de cada petición (sesión, CSRF, nonce) se
agrega en cada render.
"""

from typing import Any, Dict, Optional

from fastapi import Request

from app.services.session_service import UserSession


class TemplateDataContext:
    """Caché de los datos estáticos del contexto de templates."""

    _static_data: Optional[Dict[str, Any]] = None

    @classmethod
    def get_static_context(cls) -> Dict[str, Any]:
        if cls._static_data is None:
            from app.content import (
                ACTIVITY_STATUS_COLORS,
                COMMON_LABELS,
                COMPLETION_COLORS,
                COMPLETION_LABELS,
                FIELD_LABELS,
                OPERATOR_MESSAGES,
                REPORT_MESSAGES,
                ROLE_LABELS,
                SITE,
            )

            cls._static_data = {
                "site": SITE,
                "role_labels": ROLE_LABELS,
                "field_labels": FIELD_LABELS,
                "report_messages": REPORT_MESSAGES,
                "operator_messages": OPERATOR_MESSAGES,
                "activity_colors": ACTIVITY_STATUS_COLORS,
                "completion_labels": COMPLETION_LABELS,
                "completion_colors": COMPLETION_COLORS,
                "common_labels": COMMON_LABELS,
            }

        return cls._static_data

    @classmethod
    def build_context(
        cls,
        request: Request,
        session: Optional[UserSession] = None,
        extra_context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Contexto completo: datos estáticos + datos de la petición.

        Args:
            request: Petición actual
            session: Sesión autenticada, si la hay
            extra_context: Contexto adicional a combinar
        """
        context = cls.get_static_context().copy()

        context.update(
            {
                "request": request,
                "session": session,
                "user": session.user if session else None,
                "role": session.role.value if session else None,
                "csrf_token": request.cookies.get("csrf_token", ""),
                "csp_nonce": getattr(request.state, "csp_nonce", ""),
            }
        )

        if extra_context:
            context.update(extra_context)

        return context

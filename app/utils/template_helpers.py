"""
Helpers de render de templates.
"""

from typing import Optional

from fastapi import Request

from app.services.session_service import UserSession
from app.utils.template_config import templates
from app.utils.template_context import TemplateDataContext


def is_htmx(request: Request) -> bool:
    return request.headers.get("HX-Request") == "true"


def render_template(
    request: Request,
    template_name: str,
    context: dict,
    session: Optional[UserSession] = None,
    status_code: int = 200,
):
    common_context = TemplateDataContext.build_context(request, session, context)

    # request is passed separately in the current TemplateResponse signature
    common_context.pop("request", None)

    return templates.TemplateResponse(
        request, template_name, common_context, status_code=status_code
    )

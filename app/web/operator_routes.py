"""
Rutas del Operador: inicio con su información e historial de reportes.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from app.content import OPERATOR_MESSAGES
from app.dependencies.auth import get_api_client, require_operator
from app.dependencies.csrf import validate_csrf_token
from app.services import history_service
from app.services.api_client import (
    ApiError,
    PadronApiClient,
    UnauthenticatedError,
    user_message,
)
from app.services.session_service import UserSession
from app.utils.pagination import page_numbers
from app.utils.template_helpers import is_htmx, render_template

router = APIRouter(prefix="/operador")


@router.get("", response_class=HTMLResponse)
async def operator_home(
    request: Request,
    session: UserSession = Depends(require_operator),
    client: PadronApiClient = Depends(get_api_client),
):
    info, error = None, None
    try:
        response = await client.get_operator_info(
            session.credentials, session.operator.id_operador
        )
        info = response.data
    except UnauthenticatedError:
        raise
    except ApiError as exc:
        error = user_message(exc, OPERATOR_MESSAGES["info_failed"])

    return render_template(
        request,
        "pages/operador/inicio.html",
        {"info": info, "error": error, "operador": session.operator},
        session,
    )


async def _render_history(
    request: Request,
    session: UserSession,
    client: PadronApiClient,
    page: int = 1,
    message: Optional[str] = None,
    message_error: bool = False,
):
    history = await history_service.load_history_page(
        client, session.credentials, session.operator.id_operador, page
    )
    template = "pages/operador/historial.html"
    if is_htmx(request):
        template = "partials/history_table.html"
    return render_template(
        request,
        template,
        {
            "history": history,
            "pages": page_numbers(history.pagination) if history.pagination else [],
            "message": message,
            "message_error": message_error,
        },
        session,
    )


@router.get("/historial", response_class=HTMLResponse)
async def report_history(
    request: Request,
    page: int = 1,
    session: UserSession = Depends(require_operator),
    client: PadronApiClient = Depends(get_api_client),
):
    return await _render_history(request, session, client, page)


@router.post("/historial/{report_id}/eliminar", response_class=HTMLResponse)
async def delete_report(
    request: Request,
    report_id: int,
    page: int = 1,
    csrf_protected: None = Depends(validate_csrf_token),
    session: UserSession = Depends(require_operator),
    client: PadronApiClient = Depends(get_api_client),
):
    error = await history_service.delete_report(client, session.credentials, report_id)
    return await _render_history(
        request,
        session,
        client,
        page,
        message=error or OPERATOR_MESSAGES["deleted"],
        message_error=error is not None,
    )

"""
Rutas del Coordinador: panel de envío de reportes de sus operadores.
"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from app.dependencies.auth import get_api_client, require_coordinator
from app.services import coordinator_service
from app.services.api_client import PadronApiClient
from app.services.session_service import UserSession
from app.utils.template_helpers import is_htmx, render_template

router = APIRouter(prefix="/coordinador")


def _parse_day(value: Optional[str]) -> date:
    """Fecha del panel; vacía o inválida es hoy."""
    if value:
        try:
            return date.fromisoformat(value)
        except ValueError:
            pass
    return date.today()


@router.get("", response_class=HTMLResponse)
async def coordinator_dashboard(
    request: Request,
    fecha: Optional[str] = None,
    q: str = "",
    session: UserSession = Depends(require_coordinator),
    client: PadronApiClient = Depends(get_api_client),
):
    overview = await coordinator_service.build_overview(
        client,
        session.credentials,
        session.user.operadores_asignados,
        _parse_day(fecha),
        q,
    )

    template = "pages/coordinador/panel.html"
    if is_htmx(request):
        template = "partials/coordinator_table.html"

    return render_template(
        request,
        template,
        {"overview": overview, "coordinador": session.user.coordinador},
        session,
    )

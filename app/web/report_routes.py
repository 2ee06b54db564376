"""
Rutas del formulario de reporte diario.

La página completa se carga con GET /operador/registro; cada interacción
posterior es un POST HTMX que modifica el borrador de la sesión y devuelve
el fragmento a reemplazar:
- partials/report_state.html: vista previa, errores y botón de envío
- partials/report_form.html: el formulario entero (estación, centros, estado)
"""

import logging
from typing import Mapping, Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse

from app.dependencies.auth import get_api_client, require_operator
from app.dependencies.csrf import validate_csrf_token
from app.schemas.report import REPORT_FORM_FIELDS
from app.services.api_client import PadronApiClient
from app.services.report_service import ReportForm, open_report_form
from app.services.session_service import UserSession
from app.utils.template_helpers import render_template

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/operador/registro")

FORM_PARTIAL = "partials/report_form.html"
STATE_PARTIAL = "partials/report_state.html"


async def _get_form(session: UserSession, client: PadronApiClient) -> ReportForm:
    """Borrador de la sesión; se abre uno nuevo si no existe."""
    if session.report_form is None:
        operator = session.operator
        session.report_form = await open_report_form(
            client,
            session.credentials,
            operator.id_operador,
            operator.nro_estacion,
        )
    return session.report_form


async def _form_fields(request: Request) -> Mapping[str, str]:
    form = await request.form()
    fields = {}
    for name in REPORT_FORM_FIELDS:
        value = form.get(name)
        if isinstance(value, str):
            fields[name] = value
    return fields


def _render(
    request: Request,
    session: UserSession,
    form: ReportForm,
    template: str = FORM_PARTIAL,
):
    return render_template(request, template, {"form": form}, session)


def _parse_center_id(value: Optional[str]) -> Optional[int]:
    try:
        return int(value) if value else None
    except ValueError:
        return None


@router.get("", response_class=HTMLResponse)
async def report_page(
    request: Request,
    session: UserSession = Depends(require_operator),
    client: PadronApiClient = Depends(get_api_client),
):
    # A full page load always starts a fresh draft
    session.discard_form()
    form = await _get_form(session, client)
    return _render(request, session, form, "pages/operador/registro.html")


@router.get("/estado", response_class=HTMLResponse)
async def report_state(
    request: Request,
    session: UserSession = Depends(require_operator),
    client: PadronApiClient = Depends(get_api_client),
):
    form = await _get_form(session, client)
    return _render(request, session, form)


@router.post("/campos", response_class=HTMLResponse)
async def update_fields(
    request: Request,
    csrf_protected: None = Depends(validate_csrf_token),
    session: UserSession = Depends(require_operator),
    client: PadronApiClient = Depends(get_api_client),
):
    form = await _get_form(session, client)
    await form.update_fields(await _form_fields(request))
    return _render(request, session, form, STATE_PARTIAL)


@router.post("/estacion/desbloquear", response_class=HTMLResponse)
async def unlock_station(
    request: Request,
    confirmado: bool = Form(False),
    csrf_protected: None = Depends(validate_csrf_token),
    session: UserSession = Depends(require_operator),
    client: PadronApiClient = Depends(get_api_client),
):
    form = await _get_form(session, client)
    form.unlock_station(confirmado)
    return _render(request, session, form)


@router.post("/estacion/bloquear", response_class=HTMLResponse)
async def lock_station(
    request: Request,
    csrf_protected: None = Depends(validate_csrf_token),
    session: UserSession = Depends(require_operator),
    client: PadronApiClient = Depends(get_api_client),
):
    form = await _get_form(session, client)
    form.lock_station()
    return _render(request, session, form)


@router.post("/centro", response_class=HTMLResponse)
async def select_center(
    request: Request,
    provincia: str = Form(""),
    municipio: str = Form(""),
    centro: str = Form(""),
    csrf_protected: None = Depends(validate_csrf_token),
    session: UserSession = Depends(require_operator),
    client: PadronApiClient = Depends(get_api_client),
):
    """
    Aplica el nivel de la cascada que cambió; los inferiores se limpian.
    """
    form = await _get_form(session, client)
    centers = form.centers

    if provincia != centers.province:
        form.select_province(provincia)
    elif municipio != centers.municipality:
        form.select_municipality(municipio)
    else:
        form.select_point(_parse_center_id(centro))

    return _render(request, session, form)


@router.post("/enviar", response_class=HTMLResponse)
async def submit_report(
    request: Request,
    csrf_protected: None = Depends(validate_csrf_token),
    session: UserSession = Depends(require_operator),
    client: PadronApiClient = Depends(get_api_client),
):
    form = await _get_form(session, client)
    await form.update_fields(await _form_fields(request))
    await form.submit(client, session.credentials)
    return _render(request, session, form)


@router.post("/limpiar", response_class=HTMLResponse)
async def clear_form(
    request: Request,
    csrf_protected: None = Depends(validate_csrf_token),
    session: UserSession = Depends(require_operator),
    client: PadronApiClient = Depends(get_api_client),
):
    form = await _get_form(session, client)
    form.reset()
    return _render(request, session, form)


@router.post("/recargar", response_class=HTMLResponse)
async def reload_snapshots(
    request: Request,
    csrf_protected: None = Depends(validate_csrf_token),
    session: UserSession = Depends(require_operator),
    client: PadronApiClient = Depends(get_api_client),
):
    form = await _get_form(session, client)
    await form.load(client, session.credentials)
    logger.info("Snapshots reloaded for operator %s", form.operator_id)
    return _render(request, session, form)

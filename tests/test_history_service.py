import asyncio

import httpx

from app.content import OPERATOR_MESSAGES
from app.schemas.report import ReportHistory
from app.services import history_service
from app.services.api_client import PadronApiClient

from conftest import API_BASE, history_entry


def make_history(count):
    return ReportHistory.model_validate(
        {
            "nombre_operador": "Juan Pérez",
            "total_reportes": count,
            "data": [
                history_entry(i, f"2026-09-{i:02d}", registro_c=i, registro_r=i % 2)
                for i in range(1, count + 1)
            ],
        }
    )


def test_summary_counts_activity_states():
    history = ReportHistory.model_validate(
        {
            "data": [
                history_entry(1, "2026-10-18", 50, 30),
                history_entry(2, "2026-10-17", 20, 0),
                history_entry(3, "2026-10-16"),
            ]
        }
    )

    summary = history_service.summarize(history.data)

    assert summary.total_reportes == 3
    assert summary.total_registro_c == 70
    assert summary.total_registro_r == 30
    assert (summary.activos, summary.parciales, summary.sin_registros) == (1, 1, 1)


def test_paginate_slices_and_clamps_page():
    entries = make_history(23).data

    items, pagination = history_service.paginate(entries, 3, 10)
    assert [e.id_reporte for e in items] == [21, 22, 23]
    assert pagination["total_pages"] == 3

    items, pagination = history_service.paginate(entries, 99, 10)
    assert pagination["page"] == 3

    items, pagination = history_service.paginate(entries, 0, 10)
    assert pagination["page"] == 1
    assert len(items) == 10


def test_paginate_empty_history():
    items, pagination = history_service.paginate([], 1, 10)

    assert items == []
    assert pagination["total_pages"] == 1


def test_remove_entry_updates_total():
    history = make_history(3)

    updated = history_service.remove_entry(history, 2)

    assert [e.id_reporte for e in updated.data] == [1, 3]
    assert updated.total_reportes == 2
    assert history.total_reportes == 3


def test_load_history_page(api_client, credentials):
    page = asyncio.run(
        history_service.load_history_page(api_client, credentials, 11, per_page=2)
    )

    assert page.error is None
    assert page.nombre_operador == "Operador 11"
    assert [e.id_reporte for e in page.entries] == [101, 102]
    assert page.summary.total_reportes == 3
    assert page.pagination["total_pages"] == 2


def test_load_history_page_failure(api_client, credentials, fake_api):
    fake_api.failing_paths.add("/historial-reportes/11/")

    page = asyncio.run(history_service.load_history_page(api_client, credentials, 11))

    assert page.error is not None
    assert page.entries == []


def test_delete_report(api_client, credentials, fake_api):
    error = asyncio.run(history_service.delete_report(api_client, credentials, 102))

    assert error is None
    assert fake_api.deleted == [102]


def test_delete_report_failure_returns_message(api_client, credentials):
    error = asyncio.run(history_service.delete_report(api_client, credentials, 555))

    assert error == "Reporte no encontrado"


def test_delete_report_transport_failure_uses_fallback(credentials):
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    client = PadronApiClient(API_BASE, transport=httpx.MockTransport(handler))
    error = asyncio.run(history_service.delete_report(client, credentials, 101))

    assert error == OPERATOR_MESSAGES["delete_failed"]

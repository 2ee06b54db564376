import asyncio

import httpx
import pytest

from app.services.api_client import (
    ApiRejectedError,
    ApiTransportError,
    PadronApiClient,
    UnauthenticatedError,
    user_message,
)
from app.services.token_auth import SessionCredentials

from conftest import API_BASE, PASSWORD


def run(coro):
    return asyncio.run(coro)


def test_obtain_token_parses_user(api_client):
    response = run(api_client.obtain_token("jperez", PASSWORD))

    assert response.access.startswith("access-")
    assert response.user.primary_group == "Operador"
    assert response.user.operador.id_operador == 11
    assert response.user.operador.ruta.nombre == "Ruta Norte"


def test_obtain_token_wrong_password_is_rejected(api_client):
    with pytest.raises(ApiRejectedError) as exc_info:
        run(api_client.obtain_token("jperez", "nope"))

    assert exc_info.value.status_code == 401


def test_bearer_token_is_sent(api_client, credentials, fake_api):
    run(api_client.list_stations(credentials))

    assert fake_api.requests[-1].headers["Authorization"] == f"Bearer {credentials.access}"


def test_expired_access_token_is_refreshed_once(api_client, credentials, fake_api):
    old_access = credentials.access
    fake_api.expire_access_tokens()

    stations = run(api_client.list_stations(credentials))

    assert [s.id for s in stations] == [21, 22]
    assert credentials.access != old_access
    paths = [r.url.path for r in fake_api.requests]
    assert paths == [
        "/lista-estaciones-llaves/",
        "/api/token/refresh/",
        "/lista-estaciones-llaves/",
    ]


def test_failed_refresh_clears_credentials(api_client, credentials, fake_api):
    fake_api.expire_all_tokens()

    with pytest.raises(UnauthenticatedError):
        run(api_client.list_centers(credentials))

    assert not credentials.is_present
    assert credentials.refresh is None


def test_missing_credentials_never_hit_the_network(api_client, fake_api):
    with pytest.raises(UnauthenticatedError):
        run(api_client.list_stations(SessionCredentials()))

    assert fake_api.requests == []


def test_server_message_is_kept(api_client, credentials, fake_api):
    with pytest.raises(ApiRejectedError) as exc_info:
        run(api_client.delete_report(credentials, 12345))

    assert exc_info.value.status_code == 404
    assert user_message(exc_info.value, "fallback") == "Reporte no encontrado"


def test_delete_returns_none_on_204(api_client, credentials, fake_api):
    assert run(api_client.delete_report(credentials, 101)) is None
    assert fake_api.deleted == [101]


def test_history_is_parsed(api_client, credentials):
    history = run(api_client.get_report_history(credentials, 11))

    assert history.total_reportes == 3
    assert [e.estado_actividad for e in history.data] == [
        "Activo",
        "Parcial",
        "Sin registros",
    ]


def test_unexpected_payload_is_transport_error(credentials):
    def handler(request):
        return httpx.Response(200, json={"unexpected": True})

    client = PadronApiClient(API_BASE, transport=httpx.MockTransport(handler))
    with pytest.raises(ApiTransportError):
        run(client.list_stations(credentials))


def test_timeout_is_transport_error(credentials):
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    client = PadronApiClient(API_BASE, transport=httpx.MockTransport(handler))
    with pytest.raises(ApiTransportError) as exc_info:
        run(client.list_centers(credentials))

    assert user_message(exc_info.value, "fallback") == "fallback"

"""
Cliente de la API de Empadronamiento

Único punto de contacto con la API remota. Todas las llamadas son asíncronas
(httpx.AsyncClient) con timeout acotado, y todo fallo se traduce a la
jerarquía ApiError antes de salir de este módulo:

- ApiTransportError: timeout, conexión o respuesta ilegible
- UnauthenticatedError: sin credenciales, o refresh de token fallido
- ApiRejectedError: la API respondió 4xx/5xx (con mensaje opcional)
"""

import logging
from typing import Any, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from app.config import settings
from app.schemas.center import RegistrationCenter
from app.schemas.operator import OperadorInfo
from app.schemas.report import DailyReportPayload, ReportHistory
from app.schemas.station import Station
from app.schemas.user import LoginResponse
from app.services.token_auth import BearerTokenAuth, SessionCredentials

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

LOGIN_PATH = "/api/token/"
REFRESH_PATH = "/api/token/refresh/"
OPERATOR_INFO_PATH = "/info-operador/{operador_id}/"
STATIONS_PATH = "/lista-estaciones-llaves/"
CENTERS_PATH = "/lista-centros-empadronamiento/"
REPORTS_PATH = "/api/reportesdiarios/"
REPORT_DETAIL_PATH = "/api/reportesdiarios/{report_id}/"
REPORT_HISTORY_PATH = "/historial-reportes/{operador_id}/"


class ApiError(Exception):
    """Base de todos los errores de la API remota."""

    def __init__(self, message: str = "", status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ApiTransportError(ApiError):
    pass


class UnauthenticatedError(ApiError):
    pass


class ApiRejectedError(ApiError):
    pass


def user_message(exc: ApiError, fallback: str) -> str:
    """Mensaje del servidor si lo hay, si no el texto genérico."""
    if isinstance(exc, ApiRejectedError) and exc.message:
        return exc.message
    return fallback


def _extract_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return ""
    if isinstance(body, dict):
        for key in ("message", "detail", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return ""


class PadronApiClient:
    """
    Async client for the remote API.

    Methods that need a session receive its SessionCredentials explicitly;
    the client itself holds no per-user state.
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def _auth_for(self, credentials: SessionCredentials) -> BearerTokenAuth:
        if credentials is None or not credentials.is_present:
            raise UnauthenticatedError("No autenticado")
        return BearerTokenAuth(credentials, f"{self.base_url}{REFRESH_PATH}")

    async def _request(
        self,
        method: str,
        path: str,
        credentials: Optional[SessionCredentials] = None,
        json: Any = None,
        authenticated: bool = True,
    ) -> Any:
        auth = self._auth_for(credentials) if authenticated else None

        try:
            response = await self._client.request(method, path, json=json, auth=auth)
        except httpx.TimeoutException as exc:
            logger.warning("Timeout on %s %s", method, path)
            raise ApiTransportError("Tiempo de espera agotado") from exc
        except httpx.HTTPError as exc:
            logger.warning("Transport error on %s %s: %s", method, path, exc)
            raise ApiTransportError(str(exc)) from exc

        if authenticated and (
            response.status_code == 401 or not credentials.is_present
        ):
            logger.info("Unauthenticated response on %s %s", method, path)
            raise UnauthenticatedError("Sesión expirada", status_code=401)

        if response.is_error:
            message = _extract_message(response)
            logger.warning(
                "API rejected %s %s with %s: %s",
                method,
                path,
                response.status_code,
                message or "<no message>",
            )
            raise ApiRejectedError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None

        try:
            return response.json()
        except ValueError as exc:
            raise ApiTransportError("Respuesta inválida de la API") from exc

    @staticmethod
    def _parse(model: Type[T], data: Any) -> T:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            logger.error("Unexpected %s payload: %s", model.__name__, exc)
            raise ApiTransportError("Respuesta inválida de la API") from exc

    def _parse_list(self, model: Type[T], data: Any) -> list[T]:
        if not isinstance(data, list):
            raise ApiTransportError("Respuesta inválida de la API")
        return [self._parse(model, item) for item in data]

    # ============================================================
    # Autenticación
    # ============================================================

    async def obtain_token(self, username: str, password: str) -> LoginResponse:
        data = await self._request(
            "POST",
            LOGIN_PATH,
            json={"username": username, "password": password},
            authenticated=False,
        )
        return self._parse(LoginResponse, data)

    # ============================================================
    # Operador
    # ============================================================

    async def get_operator_info(
        self, credentials: SessionCredentials, operador_id: int
    ) -> OperadorInfo:
        data = await self._request(
            "GET", OPERATOR_INFO_PATH.format(operador_id=operador_id), credentials
        )
        return self._parse(OperadorInfo, data)

    async def list_stations(self, credentials: SessionCredentials) -> list[Station]:
        data = await self._request("GET", STATIONS_PATH, credentials)
        return self._parse_list(Station, data)

    async def list_centers(
        self, credentials: SessionCredentials
    ) -> list[RegistrationCenter]:
        data = await self._request("GET", CENTERS_PATH, credentials)
        return self._parse_list(RegistrationCenter, data)

    # ============================================================
    # Reportes diarios
    # ============================================================

    async def submit_daily_report(
        self, credentials: SessionCredentials, payload: DailyReportPayload
    ) -> Any:
        return await self._request(
            "POST", REPORTS_PATH, credentials, json=payload.model_dump()
        )

    async def get_report_history(
        self, credentials: SessionCredentials, operador_id: int
    ) -> ReportHistory:
        data = await self._request(
            "GET", REPORT_HISTORY_PATH.format(operador_id=operador_id), credentials
        )
        return self._parse(ReportHistory, data)

    async def delete_report(
        self, credentials: SessionCredentials, report_id: int
    ) -> None:
        await self._request(
            "DELETE", REPORT_DETAIL_PATH.format(report_id=report_id), credentials
        )


def create_api_client(
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> PadronApiClient:
    return PadronApiClient(
        settings.API_BASE_URL, settings.API_TIMEOUT_SECONDS, transport=transport
    )

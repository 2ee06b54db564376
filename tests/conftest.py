"""
Fixtures compartidas.

FakePadronApi simula la API remota detrás de httpx.MockTransport: usuarios,
tokens con refresh, estaciones, centros, reportes e historiales.
"""

import asyncio
import json
import os
import re
import tempfile

# Settings are read at import time; plain-http cookies need DEBUG on
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="padron-logs-"))
os.environ.setdefault("SECRET_KEY", "test-secret")

import httpx
import pytest

from app.services.api_client import PadronApiClient
from app.services.rate_limit_service import login_rate_limiter
from app.services.session_service import session_store

API_BASE = "http://api.test"
PASSWORD = "secreto123"


def operator_user(
    user_id=7,
    username="jperez",
    id_operador=11,
    id_estacion=21,
    nro_estacion=42,
    groups=("Operador",),
):
    return {
        "id": user_id,
        "username": username,
        "email": f"{username}@padron.test",
        "groups": list(groups),
        "operador": {
            "id_operador": id_operador,
            "ruta": {"id": 3, "nombre": "Ruta Norte"},
            "id_estacion": id_estacion,
            "nro_estacion": nro_estacion,
            "tipo_operador": "Titular",
        },
        "coordinador": None,
        "operadores_asignados": [],
    }


def coordinator_user(user_id=9, username="mrojas"):
    return {
        "id": user_id,
        "username": username,
        "email": f"{username}@padron.test",
        "groups": ["Coordinador"],
        "operador": None,
        "coordinador": {
            "id": 2,
            "nombre": "María",
            "apellido_paterno": "Rojas",
            "apellido_materno": "Quispe",
            "celular": "70000000",
            "cantidad_operadores": 3,
        },
        "operadores_asignados": [
            {
                "id": 1,
                "id_operador": 11,
                "tipo_operador": "Titular",
                "ruta": "Ruta Norte",
                "nro_estacion": 42,
                "username": "jperez",
                "email": "jperez@padron.test",
            },
            {
                "id": 2,
                "id_operador": 12,
                "tipo_operador": "Suplente",
                "ruta": "Ruta Sur",
                "nro_estacion": 10795,
                "username": "alopez",
                "email": "alopez@padron.test",
            },
            {
                "id": 3,
                "id_operador": 13,
                "tipo_operador": "Titular",
                "ruta": "Ruta Sur",
                "nro_estacion": 500,
                "username": "cmamani",
                "email": "cmamani@padron.test",
            },
        ],
    }


STATIONS = [
    {"id": 21, "codigo_equipo": "EQ-042", "tipo_estacion": "Fija", "nro_estacion": 42},
    {
        "id": 22,
        "codigo_equipo": "EQ-10795",
        "tipo_estacion": "Móvil",
        "nro_estacion": 10795,
        "contador_c": 100,
        "contador_r": 80,
        "id_llave": 5,
    },
]

CENTERS = [
    {
        "id": 1,
        "provincia": "Murillo",
        "municipio": "La Paz",
        "punto_de_empadronamiento": "Colegio Bolívar",
        "id_ruta": 3,
        "nombre_ruta": "Ruta Norte",
    },
    {
        "id": 2,
        "provincia": "Murillo",
        "municipio": "La Paz",
        "punto_de_empadronamiento": "Mercado Rodríguez",
        "id_ruta": 3,
        "nombre_ruta": "Ruta Norte",
    },
    {
        "id": 3,
        "provincia": "Murillo",
        "municipio": "El Alto",
        "punto_de_empadronamiento": "Plaza Ceja",
        "id_ruta": 3,
        "nombre_ruta": "Ruta Norte",
    },
    {
        "id": 4,
        "provincia": "Cercado",
        "municipio": "Oruro",
        "punto_de_empadronamiento": "Terminal",
        "id_ruta": 4,
        "nombre_ruta": "Ruta Sur",
    },
]


def history_entry(id_reporte, fecha, registro_c=0, registro_r=0, nro_estacion=42):
    return {
        "id_reporte": id_reporte,
        "fecha_reporte": fecha,
        "fecha_registro": f"{fecha}T18:00:00Z",
        "codigo_estacion": "EQ-042",
        "nro_estacion": nro_estacion,
        "registro_c": registro_c,
        "registro_r": registro_r,
        "punto_empadronamiento": "Colegio Bolívar",
        "municipio": "La Paz",
        "provincia": "Murillo",
        "departamento": "La Paz",
        "nombre_ruta": "Ruta Norte",
        "incidencias": "0",
        "observaciones": "",
    }


class FakePadronApi:
    """Handler de httpx.MockTransport con estado mutable para los tests."""

    def __init__(self):
        self.users = {
            "jperez": operator_user(),
            "mrojas": coordinator_user(),
            "sinestacion": operator_user(
                user_id=8, username="sinestacion", id_estacion=0, nro_estacion=0
            ),
        }
        self.stations = list(STATIONS)
        self.centers = list(CENTERS)
        self.histories = {
            11: [
                history_entry(101, "2026-10-18", 50, 30),
                history_entry(102, "2026-10-17", 20, 0),
                history_entry(103, "2026-10-16"),
            ],
            12: [history_entry(201, "2026-10-19", 10, 10, nro_estacion=10795)],
        }
        self.failing_paths: set[str] = set()
        self.reject_report_with: dict | None = None
        self.submitted: list[dict] = []
        self.deleted: list[int] = []
        self.requests: list[httpx.Request] = []
        self.access_tokens: set[str] = set()
        self.refresh_tokens: set[str] = set()
        self._counter = 0

    # tokens

    def issue_tokens(self) -> tuple[str, str]:
        self._counter += 1
        access, refresh = f"access-{self._counter}", f"refresh-{self._counter}"
        self.access_tokens.add(access)
        self.refresh_tokens.add(refresh)
        return access, refresh

    def expire_access_tokens(self) -> None:
        self.access_tokens.clear()

    def expire_all_tokens(self) -> None:
        self.access_tokens.clear()
        self.refresh_tokens.clear()

    # transport

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if path in self.failing_paths:
            return httpx.Response(500, json={"detail": "boom"})

        if path == "/api/token/":
            return self._login(request)
        if path == "/api/token/refresh/":
            return self._refresh(request)

        auth = request.headers.get("Authorization", "")
        if auth.removeprefix("Bearer ") not in self.access_tokens:
            return httpx.Response(401, json={"detail": "Token inválido"})

        if path == "/lista-estaciones-llaves/":
            return httpx.Response(200, json=self.stations)
        if path == "/lista-centros-empadronamiento/":
            return httpx.Response(200, json=self.centers)
        if path == "/api/reportesdiarios/" and request.method == "POST":
            return self._submit(request)

        match = re.fullmatch(r"/api/reportesdiarios/(\d+)/", path)
        if match and request.method == "DELETE":
            return self._delete(int(match.group(1)))

        match = re.fullmatch(r"/historial-reportes/(\d+)/", path)
        if match:
            return self._history(int(match.group(1)))

        match = re.fullmatch(r"/info-operador/(\d+)/", path)
        if match:
            return self._operator_info(int(match.group(1)))

        return httpx.Response(404, json={"detail": "Not found"})

    def _login(self, request):
        body = json.loads(request.content)
        user = self.users.get(body.get("username"))
        if user is None or body.get("password") != PASSWORD:
            return httpx.Response(
                401, json={"detail": "No active account found with the given credentials"}
            )
        access, refresh = self.issue_tokens()
        return httpx.Response(
            200, json={"access": access, "refresh": refresh, "user": user}
        )

    def _refresh(self, request):
        body = json.loads(request.content)
        if body.get("refresh") not in self.refresh_tokens:
            return httpx.Response(401, json={"detail": "Token is invalid or expired"})
        self._counter += 1
        access = f"access-{self._counter}"
        self.access_tokens.add(access)
        return httpx.Response(200, json={"access": access})

    def _submit(self, request):
        payload = json.loads(request.content)
        if self.reject_report_with is not None:
            return httpx.Response(400, json=self.reject_report_with)
        self.submitted.append(payload)
        return httpx.Response(201, json={"id_reporte": 900 + len(self.submitted)})

    def _delete(self, report_id):
        for entries in self.histories.values():
            for entry in entries:
                if entry["id_reporte"] == report_id:
                    entries.remove(entry)
                    self.deleted.append(report_id)
                    return httpx.Response(204)
        return httpx.Response(404, json={"message": "Reporte no encontrado"})

    def _history(self, operador_id):
        entries = self.histories.get(operador_id, [])
        return httpx.Response(
            200,
            json={
                "nombre_operador": f"Operador {operador_id}",
                "total_reportes": len(entries),
                "data": entries,
            },
        )

    def _operator_info(self, operador_id):
        return httpx.Response(
            200,
            json={
                "success": True,
                "operador_id": operador_id,
                "data": {
                    "nombre": "Juan",
                    "apellido_paterno": "Pérez",
                    "apellido_materno": "Condori",
                    "celular": "71234567",
                    "carnet": "1234567 LP",
                    "tipo_operador": "Titular",
                    "nombre_coordinador": "María Rojas",
                    "id_estacion": 21,
                    "codigo_equipo": "EQ-042",
                    "modelo_estacion": "K-200",
                    "tipo_estacion": "Fija",
                    "nro_estacion": 42,
                    "contador_r": 80,
                    "contador_c": 100,
                    "punto_de_empadronamiento": "Colegio Bolívar",
                    "municipio": "La Paz",
                    "provincia": "Murillo",
                    "departamento": "La Paz",
                    "nombre_ruta": "Ruta Norte",
                },
            },
        )


@pytest.fixture(autouse=True)
def _clean_global_state():
    session_store.clear()
    login_rate_limiter.reset()
    yield
    session_store.clear()
    login_rate_limiter.reset()


@pytest.fixture
def fake_api():
    return FakePadronApi()


@pytest.fixture
def api_client(fake_api):
    client = PadronApiClient(API_BASE, transport=httpx.MockTransport(fake_api))
    yield client
    asyncio.run(client.aclose())


@pytest.fixture
def credentials(fake_api):
    from app.services.token_auth import SessionCredentials

    access, refresh = fake_api.issue_tokens()
    return SessionCredentials(access=access, refresh=refresh)

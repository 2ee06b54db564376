import asyncio

import pytest

from app.constants.roles import UserRole, home_path_for
from app.content import LOGIN_ERRORS
from app.schemas.user import SessionUser
from app.services import auth_service
from app.services.auth_service import (
    LoginError,
    check_role_assignment,
    create_session_token,
    verify_session_token,
)
from app.services.rate_limit_service import RateLimiter, check_login_rate_limit
from app.services.session_service import SessionStore
from app.services.token_auth import SessionCredentials

from conftest import PASSWORD, coordinator_user, operator_user


def test_session_token_round_trip():
    token = create_session_token("abc123")

    assert verify_session_token(token) == "abc123"
    assert verify_session_token(token + "x") is None
    assert verify_session_token("not-a-jwt") is None


def test_home_paths():
    assert home_path_for(UserRole.OPERADOR) == "/operador"
    assert home_path_for("Coordinador") == "/coordinador"
    assert home_path_for(None) == "/login"
    assert home_path_for("Administrador") == "/login"


def test_role_must_be_first_group():
    user = SessionUser.model_validate(operator_user(groups=("Coordinador", "Operador")))

    assert check_role_assignment(user, UserRole.OPERADOR) == LOGIN_ERRORS["wrong_role"]


def test_operator_needs_station():
    user = SessionUser.model_validate(operator_user(id_estacion=0, nro_estacion=0))

    assert check_role_assignment(user, UserRole.OPERADOR) == LOGIN_ERRORS["station_missing"]


def test_operator_needs_operator_data():
    data = operator_user()
    data["operador"] = None
    user = SessionUser.model_validate(data)

    assert check_role_assignment(user, UserRole.OPERADOR) == LOGIN_ERRORS["operator_missing"]


def test_coordinator_needs_coordinator_data():
    data = coordinator_user()
    data["coordinador"] = None
    user = SessionUser.model_validate(data)

    assert (
        check_role_assignment(user, UserRole.COORDINADOR)
        == LOGIN_ERRORS["coordinator_missing"]
    )


def test_login_creates_session(api_client):
    store = SessionStore()

    session = asyncio.run(
        auth_service.login(api_client, store, "jperez", PASSWORD, UserRole.OPERADOR)
    )

    assert store.get(session.id) is session
    assert session.role == UserRole.OPERADOR
    assert session.credentials.is_present
    assert session.operator.nro_estacion == 42


def test_login_wrong_password(api_client):
    with pytest.raises(LoginError) as exc_info:
        asyncio.run(
            auth_service.login(
                api_client, SessionStore(), "jperez", "bad", UserRole.OPERADOR
            )
        )

    assert str(exc_info.value) == LOGIN_ERRORS["invalid_credentials"]


def test_login_wrong_role_creates_no_session(api_client):
    store = SessionStore()

    with pytest.raises(LoginError) as exc_info:
        asyncio.run(
            auth_service.login(api_client, store, "jperez", PASSWORD, UserRole.COORDINADOR)
        )

    assert str(exc_info.value) == LOGIN_ERRORS["wrong_role"]
    assert len(store) == 0


def test_login_api_down(api_client, fake_api):
    fake_api.failing_paths.add("/api/token/")

    with pytest.raises(LoginError):
        asyncio.run(
            auth_service.login(
                api_client, SessionStore(), "jperez", PASSWORD, UserRole.OPERADOR
            )
        )


def test_logout_discards_session_and_tokens():
    store = SessionStore()
    user = SessionUser.model_validate(operator_user())
    credentials = SessionCredentials(access="a", refresh="r")
    session = store.create(credentials, user, UserRole.OPERADOR)

    auth_service.logout(store, session.id)

    assert store.get(session.id) is None
    assert not credentials.is_present


def test_expired_session_is_dropped(monkeypatch):
    store = SessionStore()
    user = SessionUser.model_validate(operator_user())
    session = store.create(SessionCredentials("a", "r"), user, UserRole.OPERADOR)

    monkeypatch.setattr(session, "created_at", session.created_at - 13 * 60 * 60)

    assert store.get(session.id) is None
    assert len(store) == 0


def test_rate_limiter_blocks_after_limit():
    limiter = RateLimiter()

    results = [limiter.is_allowed("k", max_requests=2, window_seconds=60) for _ in range(3)]

    assert results[0] == (True, None)
    assert results[1] == (True, None)
    allowed, retry_after = results[2]
    assert allowed is False
    assert 1 <= retry_after <= 60


def test_login_rate_limit_per_username_is_case_insensitive():
    for _ in range(5):
        assert check_login_rate_limit("JPerez", "username")[0]

    allowed, _ = check_login_rate_limit("jperez", "username")
    assert allowed is False

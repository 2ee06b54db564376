import asyncio
from datetime import date

import pytest

from app.schemas.user import SessionUser
from app.services.api_client import UnauthenticatedError
from app.services.coordinator_service import (
    CompletionStatus,
    build_overview,
    filter_operators,
)
from app.services.token_auth import SessionCredentials

from conftest import coordinator_user

OPERATORS = SessionUser.model_validate(coordinator_user()).operadores_asignados


def usernames(operators):
    return [op.username for op in operators]


def test_filter_by_username_route_or_station():
    assert usernames(filter_operators(OPERATORS, "JPEREZ")) == ["jperez"]
    assert usernames(filter_operators(OPERATORS, "sur")) == ["alopez", "cmamani"]
    assert usernames(filter_operators(OPERATORS, "10795")) == ["alopez"]
    assert usernames(filter_operators(OPERATORS, "00500")) == ["cmamani"]
    assert usernames(filter_operators(OPERATORS, "  ")) == [
        "jperez",
        "alopez",
        "cmamani",
    ]


def test_overview_marks_completed_and_pending(api_client, credentials):
    overview = asyncio.run(
        build_overview(api_client, credentials, OPERATORS, date(2026, 10, 18))
    )

    statuses = {row.operator.username: row.status for row in overview.rows}
    assert statuses == {
        "jperez": CompletionStatus.COMPLETED,
        "alopez": CompletionStatus.PENDING,
        "cmamani": CompletionStatus.PENDING,
    }
    assert (overview.total, overview.completed, overview.pending) == (3, 1, 2)
    assert overview.completion_pct == 33
    assert overview.rows[0].registro_c == 50


def test_history_failure_marks_operator_unknown(api_client, credentials, fake_api):
    fake_api.failing_paths.add("/historial-reportes/13/")

    overview = asyncio.run(
        build_overview(api_client, credentials, OPERATORS, date(2026, 10, 19))
    )

    statuses = [row.status for row in overview.rows]
    assert statuses == [
        CompletionStatus.PENDING,
        CompletionStatus.COMPLETED,
        CompletionStatus.UNKNOWN,
    ]
    assert overview.unknown == 1


def test_overview_with_query_only_fetches_matches(api_client, credentials, fake_api):
    overview = asyncio.run(
        build_overview(api_client, credentials, OPERATORS, date(2026, 10, 19), "alopez")
    )

    assert usernames(row.operator for row in overview.rows) == ["alopez"]
    assert [r.url.path for r in fake_api.requests] == ["/historial-reportes/12/"]


def test_empty_overview(api_client, credentials):
    overview = asyncio.run(build_overview(api_client, credentials, [], date(2026, 10, 19)))

    assert overview.total == 0
    assert overview.completion_pct == 0


def test_expired_session_propagates(api_client):
    credentials = SessionCredentials(access="expired", refresh="expired")

    with pytest.raises(UnauthenticatedError):
        asyncio.run(
            build_overview(api_client, credentials, OPERATORS, date(2026, 10, 19))
        )

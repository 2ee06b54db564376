"""
Bearer Token Authentication

httpx.Auth flow that attaches the session access token to every request
and refreshes it once when the API answers 401.

Flow:
1. Request is sent with "Authorization: Bearer <access>"
2. On 401, POST {"refresh": <refresh>} to the refresh endpoint
3. If refresh succeeds, the new access token is stored in the session
   credentials and the original request is replayed once
4. If refresh fails, the credentials are cleared and the API client reports
   the call as unauthenticated
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class SessionCredentials:
    """Tokens de una sesión. Mutable: el refresh reemplaza el access token."""

    access: Optional[str] = None
    refresh: Optional[str] = None

    @property
    def is_present(self) -> bool:
        return bool(self.access)

    def clear(self) -> None:
        self.access = None
        self.refresh = None


class BearerTokenAuth(httpx.Auth):
    requires_response_body = True

    def __init__(self, credentials: SessionCredentials, refresh_url: str):
        self.credentials = credentials
        self.refresh_url = refresh_url

    def auth_flow(self, request: httpx.Request):
        request.headers["Authorization"] = f"Bearer {self.credentials.access}"
        response = yield request

        if response.status_code != 401 or not self.credentials.refresh:
            return

        refresh_response = yield httpx.Request(
            "POST", self.refresh_url, json={"refresh": self.credentials.refresh}
        )
        if refresh_response.status_code != 200:
            logger.warning(
                "Token refresh rejected with status %s", refresh_response.status_code
            )
            self.credentials.clear()
            return

        try:
            body = refresh_response.json()
        except ValueError:
            logger.warning("Token refresh returned a non-JSON body")
            self.credentials.clear()
            return

        new_access = body.get("access") if isinstance(body, dict) else None
        if not new_access:
            self.credentials.clear()
            return

        self.credentials.access = new_access
        if body.get("refresh"):
            self.credentials.refresh = body["refresh"]
        logger.info("Access token refreshed")

        request.headers["Authorization"] = f"Bearer {new_access}"
        yield request

"""Async HTTP client for the Monzo API (OAuth2 authorization code flow)."""

import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError

from finagg.core.exceptions import BankAPIError
from finagg.schemas.monzo import MonzoTransaction, MonzoTransactionsResponse, TokenResponse

logger = logging.getLogger(__name__)

AUTH_URL = "https://auth.monzo.com"
API_BASE_URL = "https://api.monzo.com"
SCOPE = "read:accounts read:transactions"


def format_timestamp(value: datetime) -> str:
    """RFC 3339 in UTC, as the transactions endpoint expects."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class MonzoClient:
    """Thin wrapper over the Monzo REST endpoints used by the feed.

    Any transport failure, non-200 response or malformed body is raised as
    BankAPIError (MONZO_001).
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self._http = http_client or httpx.AsyncClient(base_url=API_BASE_URL, timeout=timeout)

    async def aclose(self) -> None:
        await self._http.aclose()

    def build_auth_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "state": state,
            "scope": SCOPE,
        }
        return f"{AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> TokenResponse:
        data = {
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
            "code": code,
            "scope": SCOPE,
        }
        body = await self._request("POST", "/oauth2/token", data=data)
        return self._validate(TokenResponse, body)

    async def refresh_token(self, refresh_token: str) -> TokenResponse:
        data = {
            "grant_type": "refresh_token",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "refresh_token": refresh_token,
        }
        body = await self._request("POST", "/oauth2/token", data=data)
        return self._validate(TokenResponse, body)

    async def get_account_id(self, access_token: str) -> str:
        """Return the id of the first account the token can read."""
        body = await self._request("GET", "/accounts", access_token=access_token)
        accounts = body.get("accounts") or []
        if not accounts or not accounts[0].get("id"):
            logger.error("No Monzo accounts found")
            raise BankAPIError("MONZO_001", {"reason": "no accounts found"})
        return accounts[0]["id"]

    async def get_transactions(
        self,
        access_token: str,
        account_id: str,
        since: datetime,
        before: datetime,
    ) -> list[MonzoTransaction]:
        params = {
            "account_id": account_id,
            "since": format_timestamp(since),
            "before": format_timestamp(before),
        }
        body = await self._request("GET", "/transactions", params=params, access_token=access_token)
        return self._validate(MonzoTransactionsResponse, body).transactions

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
        access_token: str | None = None,
    ) -> dict[str, Any]:
        headers = {"Authorization": f"Bearer {access_token}"} if access_token else None
        try:
            response = await self._http.request(method, path, params=params, data=data, headers=headers)
        except httpx.HTTPError as e:
            logger.error("Monzo request failed", extra={"path": path, "error_type": type(e).__name__})
            raise BankAPIError("MONZO_001", {"path": path}) from e

        if response.status_code != httpx.codes.OK:
            logger.error(
                "Monzo API error",
                extra={"path": path, "status_code": response.status_code, "body": response.text[:500]},
            )
            raise BankAPIError("MONZO_001", {"path": path, "status_code": response.status_code})

        try:
            return response.json()
        except ValueError as e:
            logger.error("Monzo response is not JSON", extra={"path": path})
            raise BankAPIError("MONZO_001", {"path": path, "reason": "invalid json"}) from e

    @staticmethod
    def _validate(model, body: dict[str, Any]):
        try:
            return model.model_validate(body)
        except ValidationError as e:
            logger.error("Unexpected Monzo response shape", extra={"model": model.__name__})
            raise BankAPIError("MONZO_001", {"reason": "unexpected response"}) from e

"""Monzo API payloads and OAuth token state."""

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    access_token: str
    refresh_token: str = ""
    expires_in: int = 0
    token_type: str = "Bearer"
    user_id: str | None = None
    account_id: str | None = None


class MonzoTransaction(BaseModel):
    """A transaction item as returned by ``GET /transactions``.

    Amounts are in minor units; negative amounts are outgoing.
    """

    id: str
    account_id: str | None = None
    amount: int
    description: str | None = None
    created: str = ""
    category: str | None = None
    notes: str | None = None
    scheme: str | None = None


class MonzoTransactionsResponse(BaseModel):
    transactions: list[MonzoTransaction] = Field(default_factory=list)


class AuthTokens(BaseModel):
    access_token: str
    refresh_token: str
    expires_in: int
    account_id: str
    issued_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    def is_expired(self, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now >= self.issued_at + timedelta(seconds=self.expires_in)


class AuthURLResponse(BaseModel):
    auth_url: str


class MonzoLoadResult(BaseModel):
    """Outcome of one feed load.

    ``failed`` groups the skipped feed items' ids by the reason they failed.
    """

    saved: int = 0
    failed: dict[str, list[str]] = Field(default_factory=dict)

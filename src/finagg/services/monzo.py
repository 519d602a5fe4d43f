"""Monzo transaction feed: OAuth handshake, token upkeep and feed import.

State and tokens live in process memory: one connected Monzo account per
running service.
"""

import logging
import secrets
import string
import threading
from datetime import datetime, timezone
from decimal import Decimal

from finagg.categorization import KeywordCategorizer
from finagg.clients.monzo import MonzoClient
from finagg.core.exceptions import AuthorizationError, BankAPIError, InvalidStateError
from finagg.schemas.monzo import AuthTokens, MonzoLoadResult, MonzoTransaction, TokenResponse
from finagg.schemas.transaction import CanonicalTransaction, TransactionType
from finagg.services.category import CategoryService
from finagg.services.transaction import TransactionService

logger = logging.getLogger(__name__)

STATE_LENGTH = 32
STATE_ALPHABET = string.ascii_letters + string.digits


def generate_state(length: int = STATE_LENGTH) -> str:
    return "".join(secrets.choice(STATE_ALPHABET) for _ in range(length))


class StateStore:
    """Holds the OAuth state of the authorization request in flight."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._state: str | None = None

    def set(self, state: str) -> None:
        with self._lock:
            self._state = state

    def get(self) -> str | None:
        with self._lock:
            return self._state

    def consume(self, state: str) -> bool:
        """Clear the stored state if ``state`` matches it."""
        with self._lock:
            if self._state is None or not secrets.compare_digest(self._state, state):
                return False
            self._state = None
            return True


class TokenStore:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tokens: AuthTokens | None = None

    def set(self, tokens: AuthTokens) -> None:
        with self._lock:
            self._tokens = tokens

    def get(self) -> AuthTokens | None:
        with self._lock:
            return self._tokens


def convert_amount(minor_units: int) -> str:
    return f"{Decimal(minor_units).scaleb(-2):.2f}"


def convert_type(minor_units: int) -> TransactionType:
    return TransactionType.OUTCOME if minor_units < 0 else TransactionType.INCOME


def convert_description(*parts: str | None) -> str:
    return ", ".join(p for p in parts if p)


def convert_date(created: str) -> datetime:
    """Parse an ISO-8601 timestamp (``...Z``) into an aware UTC datetime."""
    try:
        parsed = datetime.fromisoformat(created.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        raise ValueError(f"invalid transaction date: {created}") from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


class MonzoService:
    def __init__(
        self,
        client: MonzoClient,
        transaction_service: TransactionService,
        category_service: CategoryService,
        categorizer: KeywordCategorizer,
        bank_id: int,
        state_store: StateStore | None = None,
        token_store: TokenStore | None = None,
    ):
        self.client = client
        self.transaction_service = transaction_service
        self.category_service = category_service
        self.categorizer = categorizer
        self.bank_id = bank_id
        self.state_store = state_store or StateStore()
        self.token_store = token_store or TokenStore()

    def get_authorization_url(self) -> str:
        state = generate_state()
        self.state_store.set(state)
        return self.client.build_auth_url(state)

    async def handle_callback(self, state: str, code: str) -> None:
        """Complete the OAuth handshake and remember the account's tokens.

        Raises:
            InvalidStateError: If ``state`` doesn't match the pending request (MONZO_003)
            BankAPIError: If Monzo rejects the code or has no account
        """
        if not self.state_store.consume(state):
            logger.warning("Monzo callback with invalid state")
            raise InvalidStateError("MONZO_003")

        token = await self.client.exchange_code(code)
        account_id = await self.client.get_account_id(token.access_token)
        self.token_store.set(self._to_auth_tokens(token, account_id))
        logger.info("Monzo account connected")

    async def load_transactions(self, user_id: int, since: datetime, before: datetime) -> MonzoLoadResult:
        tokens = await self._ensure_auth()
        items = await self.client.get_transactions(tokens.access_token, tokens.account_id, since, before)

        result = MonzoLoadResult()
        if not items:
            logger.info("No Monzo transactions in range", extra={"since": since.isoformat(), "before": before.isoformat()})
            return result

        await self.category_service.warm()
        transactions = []
        for item in items:
            try:
                transactions.append(self.convert(item, user_id))
            except ValueError as e:
                result.failed.setdefault(str(e), []).append(item.id)

        if transactions:
            result.saved = await self.transaction_service.save_transactions(transactions)

        logger.info(
            "Monzo transactions loaded",
            extra={"fetched": len(items), "saved": result.saved, "failed": sum(len(v) for v in result.failed.values())},
        )
        return result

    def convert(self, item: MonzoTransaction, user_id: int) -> CanonicalTransaction:
        return CanonicalTransaction(
            bank_id=self.bank_id,
            user_id=user_id,
            external_id=item.id,
            amount=convert_amount(item.amount),
            description=convert_description(item.description, item.category, item.notes, item.scheme),
            transaction_date=convert_date(item.created),
            category_id=self.categorizer.infer(item.category, item.description),
            type=convert_type(item.amount),
        )

    async def _ensure_auth(self) -> AuthTokens:
        tokens = self.token_store.get()
        if tokens is None:
            logger.error("Monzo tokens missing, account not connected")
            raise AuthorizationError("MONZO_002")
        if not tokens.is_expired():
            return tokens

        try:
            refreshed = await self.client.refresh_token(tokens.refresh_token)
        except BankAPIError as e:
            logger.error("Failed to refresh Monzo tokens")
            raise AuthorizationError("MONZO_002", {"reason": "token refresh failed"}) from e

        tokens = self._to_auth_tokens(refreshed, tokens.account_id)
        self.token_store.set(tokens)
        return tokens

    @staticmethod
    def _to_auth_tokens(token: TokenResponse, account_id: str) -> AuthTokens:
        return AuthTokens(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
            expires_in=token.expires_in,
            account_id=account_id,
        )

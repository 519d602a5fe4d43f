"""Canonical transaction schemas.

CanonicalTransaction is the shape every bank-specific input is normalized
into before persistence; the response models are what the read endpoints
return.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

UNCATEGORIZED_ID = 1


class TransactionType(str, Enum):
    UNSPECIFIED = "unspecified"
    INCOME = "income"
    OUTCOME = "outcome"


class TransactionField(str, Enum):
    """Canonical fields a CSV column can feed.

    Field handlers run in this declaration order.
    """

    DATE = "date"
    AMOUNT = "amount"
    DESCRIPTION = "description"
    CATEGORY = "category"
    EXTERNAL_ID = "external_id"


REQUIRED_FIELDS: tuple[TransactionField, ...] = (TransactionField.DATE, TransactionField.AMOUNT)


class CanonicalTransaction(BaseModel):
    """A transaction normalized from a CSV row or an API feed item.

    Bank and user are injected by the caller; category and type start at
    their defaults so that partially-parsed rows are still valid records.
    """

    bank_id: int = Field(..., gt=0)
    user_id: int = Field(..., gt=0)
    external_id: str | None = Field(None, description="Source identifier, when the source has one")
    amount: str = Field("", description="Decimal string exactly as found in the source")
    category_id: int = Field(default=UNCATEGORIZED_ID)
    description: str = ""
    type: TransactionType = TransactionType.UNSPECIFIED
    transaction_date: datetime | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class TransactionResponse(BaseModel):
    """Persisted transaction enriched with bank, category and user names."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    bank_id: int
    external_id: str
    user_id: int
    amount: str
    category_id: int
    description: str
    type: TransactionType
    transaction_date: datetime
    created_at: datetime
    bank_name: str | None = None
    category_name: str | None = None
    user_name: str | None = None


class TransactionListResponse(BaseModel):
    transactions: list[TransactionResponse]
    total_count: int

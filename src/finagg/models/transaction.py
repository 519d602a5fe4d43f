"""Transaction model.

The table is range-partitioned by month on ``transaction_date``; partitions
are named ``transaction_YYYY_MM`` and created by TransactionRepository.
PostgreSQL requires the partition key in every unique constraint, so both the
primary key and the external-id constraint include ``transaction_date``.
"""
from datetime import datetime, timezone

from sqlalchemy import BigInteger, DateTime, ForeignKey, Identity, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from finagg.models.base import Base


class Transaction(Base):
    """Canonical persisted transaction."""

    __tablename__ = "transaction"
    __table_args__ = (
        UniqueConstraint(
            "bank_id", "external_id", "transaction_date", name="uniq_transaction_external"
        ),
        Index("ix_transaction_user_id_date", "user_id", "transaction_date"),
        {"postgresql_partition_by": "RANGE (transaction_date)"},
    )

    id: Mapped[int] = mapped_column(BigInteger, Identity(), primary_key=True)
    transaction_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), primary_key=True)
    bank_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("bank.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    external_id: Mapped[str] = mapped_column(String(255), nullable=False)
    amount: Mapped[str] = mapped_column(String(64), nullable=False)
    category_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("category.id"), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="unspecified")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Transaction(id={self.id}, bank_id={self.bank_id}, amount={self.amount})>"

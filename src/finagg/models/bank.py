"""Bank registry models: banks, their import methods and CSV header configuration."""
from sqlalchemy import BigInteger, Boolean, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finagg.models.base import BaseModel


class Bank(BaseModel):
    """A bank the user can import transactions from."""

    __tablename__ = "bank"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)

    import_methods: Mapped[list["BankImportMethod"]] = relationship(
        "BankImportMethod", back_populates="bank", lazy="selectin", passive_deletes="all"
    )
    headers: Mapped[list["BankHeader"]] = relationship(
        "BankHeader", back_populates="bank", lazy="selectin", passive_deletes="all"
    )

    def __repr__(self) -> str:
        return f"<Bank(id={self.id}, name={self.name})>"


class BankImportMethod(BaseModel):
    __tablename__ = "bank_import_method"
    __table_args__ = (UniqueConstraint("bank_id", "import_method", name="uq_bank_import_method"),)

    bank_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("bank.id", ondelete="CASCADE"), nullable=False, index=True
    )
    import_method: Mapped[str] = mapped_column(String(20), nullable=False)

    bank: Mapped["Bank"] = relationship("Bank", back_populates="import_methods")


class BankHeader(BaseModel):
    """A raw CSV column name configured for a bank."""

    __tablename__ = "bank_header"
    __table_args__ = (UniqueConstraint("bank_id", "name", name="uq_bank_header_name"),)

    bank_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("bank.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    required: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    bank: Mapped["Bank"] = relationship("Bank", back_populates="headers")
    # Ordered by id: the order fields were configured in
    mappings: Mapped[list["BankHeaderMapping"]] = relationship(
        "BankHeaderMapping",
        back_populates="header",
        lazy="selectin",
        order_by="BankHeaderMapping.id",
        passive_deletes="all",
    )

    def __repr__(self) -> str:
        return f"<BankHeader(id={self.id}, bank_id={self.bank_id}, name={self.name})>"


class BankHeaderMapping(BaseModel):
    """Links a bank header to one canonical transaction field."""

    __tablename__ = "bank_header_mapping"
    __table_args__ = (
        UniqueConstraint("header_id", "transaction_field", name="uq_header_transaction_field"),
    )

    header_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("bank_header.id", ondelete="CASCADE"), nullable=False, index=True
    )
    transaction_field: Mapped[str] = mapped_column(String(30), nullable=False)

    header: Mapped["BankHeader"] = relationship("BankHeader", back_populates="mappings")

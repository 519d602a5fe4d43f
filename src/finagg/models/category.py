"""Category and keyword models used for category inference."""
from sqlalchemy import BigInteger, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from finagg.models.base import BaseModel


class Category(BaseModel):
    __tablename__ = "category"

    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    keywords: Mapped[list["CategoryKeyword"]] = relationship(
        "CategoryKeyword", back_populates="category", lazy="selectin", passive_deletes="all"
    )

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name})>"


class CategoryKeyword(BaseModel):
    """A text fragment that, when found in a transaction, selects its category."""

    __tablename__ = "category_keyword"

    category_id: Mapped[int] = mapped_column(
        BigInteger, ForeignKey("category.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)

    category: Mapped["Category"] = relationship("Category", back_populates="keywords")

    def __repr__(self) -> str:
        return f"<CategoryKeyword(id={self.id}, category_id={self.category_id}, name={self.name})>"

"""User model owning imported transactions."""
from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from finagg.models.base import BaseModel


class User(BaseModel):
    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.name})>"

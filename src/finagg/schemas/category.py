"""Category registry schemas."""

from pydantic import BaseModel, ConfigDict

TRANSFER_CATEGORY_NAME = "Transfer"


class CategoryInfo(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    name: str
    description: str | None = None


class CategoryKeywordInfo(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: int
    category_id: int
    name: str

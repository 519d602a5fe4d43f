"""Bank registry schemas."""

from pydantic import BaseModel, ConfigDict, Field

from finagg.core.banks import ImportMethod
from finagg.schemas.transaction import TransactionField


class BankInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    import_methods: tuple[ImportMethod, ...] = ()

    def supports(self, method: ImportMethod) -> bool:
        return method in self.import_methods


class HeaderMapping(BaseModel):
    """Configuration linking one raw CSV column of a bank to canonical fields.

    A single column may feed several fields (e.g. a free-text column used
    both as description and for category inference).
    """

    model_config = ConfigDict(frozen=True)

    bank_id: int
    name: str
    required: bool = False
    fields: tuple[TransactionField, ...] = Field(default=())

from fastapi import APIRouter, Depends

from finagg.api.deps import get_bank_service
from finagg.schemas.bank import BankInfo
from finagg.services.bank import BankService

router = APIRouter(prefix="/banks", tags=["banks"])


@router.get("", response_model=list[BankInfo])
async def list_banks(service: BankService = Depends(get_bank_service)) -> list[BankInfo]:
    """List banks with the import methods each supports."""
    return await service.list_banks()

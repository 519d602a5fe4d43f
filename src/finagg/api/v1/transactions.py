"""Transaction read endpoints."""

from fastapi import APIRouter, Depends, Query

from finagg.api.deps import get_transaction_service
from finagg.schemas.transaction import TransactionListResponse
from finagg.services.transaction import TransactionService

router = APIRouter(prefix="/transactions", tags=["transactions"])


@router.get("/types", response_model=list[str])
async def list_transaction_types() -> list[str]:
    return TransactionService.transaction_types()


@router.get("", response_model=TransactionListResponse)
async def list_transactions(
    month: int = Query(..., ge=1, le=12),
    year: int = Query(..., ge=1970, le=9999),
    user_id: int | None = Query(None, gt=0),
    bank_id: int | None = Query(None, gt=0),
    service: TransactionService = Depends(get_transaction_service),
) -> TransactionListResponse:
    """List one month's transactions, optionally narrowed to a user or bank."""
    transactions = await service.list_transactions(month, year, user_id, bank_id)
    return TransactionListResponse(transactions=transactions, total_count=len(transactions))

"""Monzo account connection and feed import endpoints."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from finagg.api.deps import get_monzo_service
from finagg.schemas.monzo import AuthURLResponse, MonzoLoadResult
from finagg.services.monzo import MonzoService

router = APIRouter(prefix="/monzo", tags=["monzo"])


@router.get("/auth-url", response_model=AuthURLResponse)
async def get_auth_url(service: MonzoService = Depends(get_monzo_service)) -> AuthURLResponse:
    return AuthURLResponse(auth_url=service.get_authorization_url())


@router.get("/callback")
async def monzo_callback(
    state: str = Query(..., min_length=1),
    code: str = Query(..., min_length=1),
    service: MonzoService = Depends(get_monzo_service),
) -> dict:
    """OAuth redirect target: completes the authorization code exchange."""
    await service.handle_callback(state, code)
    return {"success": True}


@router.post("/transactions/load", response_model=MonzoLoadResult)
async def load_transactions(
    user_id: int = Query(..., gt=0),
    since: datetime = Query(...),
    before: datetime = Query(...),
    service: MonzoService = Depends(get_monzo_service),
) -> MonzoLoadResult:
    return await service.load_transactions(user_id, since, before)

"""API version 1 routes."""

from fastapi import APIRouter

from finagg.api.v1 import banks, categories, monzo, transactions, uploads, users

router = APIRouter(prefix="/api/v1")

router.include_router(uploads.router)
router.include_router(banks.router)
router.include_router(categories.router)
router.include_router(users.router)
router.include_router(transactions.router)
router.include_router(monzo.router)

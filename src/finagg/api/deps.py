"""FastAPI dependencies exposing the services built at startup."""

from fastapi import Request

from finagg.services.bank import BankService
from finagg.services.category import CategoryService
from finagg.services.monzo import MonzoService
from finagg.services.transaction import TransactionService
from finagg.services.uploader import UploadService
from finagg.services.user import UserService


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service


def get_bank_service(request: Request) -> BankService:
    return request.app.state.bank_service


def get_category_service(request: Request) -> CategoryService:
    return request.app.state.category_service


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_transaction_service(request: Request) -> TransactionService:
    return request.app.state.transaction_service


def get_monzo_service(request: Request) -> MonzoService:
    return request.app.state.monzo_service

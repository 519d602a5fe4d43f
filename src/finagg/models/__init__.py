"""Database models."""
from finagg.models.bank import Bank, BankHeader, BankHeaderMapping, BankImportMethod
from finagg.models.category import Category, CategoryKeyword
from finagg.models.transaction import Transaction
from finagg.models.user import User

__all__ = [
    "Bank",
    "BankHeader",
    "BankHeaderMapping",
    "BankImportMethod",
    "Category",
    "CategoryKeyword",
    "Transaction",
    "User",
]

# Repository layer - Data access with Pydantic responses

from .base import BaseRepository
from .transaction_repository import TransactionRepository
from .summary_repository import TransactionSummaryRepository

__all__ = [
    "BaseRepository",
    "TransactionRepository",
    "TransactionSummaryRepository",
]

"""Database connection and schema."""

from brifify.db.client import close_pool, create_pool, ensure_schema
from brifify.db.models import Base, BriefRecord, LedgerEntry, UserAccountRecord

__all__ = [
    "Base",
    "BriefRecord",
    "LedgerEntry",
    "UserAccountRecord",
    "close_pool",
    "create_pool",
    "ensure_schema",
]

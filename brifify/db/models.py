"""Table definitions.

Stores issue raw SQL through the asyncpg pool; these models are the single
source of truth for the schema and are used to create it.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class UserAccountRecord(Base):
    """Per-user token balance and identity metadata."""

    __tablename__ = "user_account"

    user_id = Column(String(255), primary_key=True)
    is_anonymous = Column(Boolean, nullable=False, default=True)
    tokens = Column(Integer, nullable=False, default=0)
    email = Column(String(320), nullable=True)
    identity_provider = Column(String(100), nullable=True)
    external_id = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    last_updated = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("tokens >= 0", name="ck_user_account_tokens_non_negative"),
    )


class LedgerEntry(Base):
    """Applied balance mutations (idempotent on `idempotency_key`)."""

    __tablename__ = "ledger_entry"

    idempotency_key = Column(String(255), primary_key=True)
    user_id = Column(String(255), nullable=False)
    delta = Column(Integer, nullable=False)
    reason = Column(String(20), nullable=False)  # credit, charge
    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_ledger_entry_user_id", "user_id"),
    )


class BriefRecord(Base):
    """Saved technical briefs keyed by (user_id, brief_id)."""

    __tablename__ = "brief"

    user_id = Column(String(255), primary_key=True)
    brief_id = Column(String(64), primary_key=True)
    title = Column(Text, nullable=False)
    brief_data = Column(JSONB, nullable=False)
    share_id = Column(String(64), nullable=True, unique=True)
    created_at = Column(DateTime(timezone=True), nullable=False)
    updated_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("ix_brief_user_created", "user_id", "created_at"),
    )

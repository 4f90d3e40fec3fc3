"""SQLAlchemy ORM models for mm_ledger.

These define the items and transactions tables for create_all at startup.
Repository queries are raw SQL in persistence.py and must agree with them.
"""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    Index,
    String,
    func,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from src.mm_common.database import Base


class ItemORM(Base):
    __tablename__ = "items"
    __table_args__ = (
        CheckConstraint("loan_amount >= 0", name="ck_items_loan_gte_0"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    item_code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    item_name: Mapped[str] = mapped_column(String(255), nullable=False)
    member_ids: Mapped[list[str]] = mapped_column(
        ARRAY(String(16)), nullable=False, server_default="{}"
    )
    current_principal_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    loan_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    settlement_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    is_loan_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    transaction_ids: Mapped[list[str]] = mapped_column(
        ARRAY(String(36)), nullable=False, server_default="{}"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


class TransactionORM(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint(
            "transaction_type IN ('LOAN', 'REGULAR', 'SETTLEMENT')",
            name="ck_transactions_type",
        ),
        Index("idx_transactions_member_ids", "member_ids", postgresql_using="gin"),
        Index("idx_transactions_item_time", "item_code", "created_at"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    transaction_type: Mapped[str] = mapped_column(String(16), nullable=False)
    member_ids: Mapped[list[str]] = mapped_column(ARRAY(String(16)), nullable=False)
    item_code: Mapped[str] = mapped_column(String(32), nullable=False)
    principal_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    loan_interest_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    loan_emi: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    penalty_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    amount_returned: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    returned_amount_description: Mapped[str] = mapped_column(
        String(500), nullable=False, default=""
    )
    settlement_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    loan_taken_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_amount: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    # Item balances just before this transaction was applied
    loan_amount_before: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    principal_amount_before: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    is_loan_active_before: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    transaction_by: Mapped[str | None] = mapped_column(String(16), nullable=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    supersedes_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    superseded_by_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    # No updated_at; corrections append a superseding row instead

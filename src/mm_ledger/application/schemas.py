"""Pydantic schemas for mm_ledger API."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from src.mm_common.amounts import rupees_to_display
from src.mm_common.datetime_utils import YearMonth
from src.mm_common.enums import TransactionType
from src.mm_ledger.domain.models import Item, PeriodTotals, Summary, Transaction
from src.mm_member.domain.models import Member

# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class _TransactionAmounts(BaseModel):
    principal_amount: int = Field(0, ge=0)
    loan_interest_amount: int = Field(0, ge=0)
    loan_emi: int = Field(0, ge=0)
    penalty_amount: int = Field(0, ge=0)
    amount_returned: int = Field(0, ge=0)
    returned_amount_description: str = Field("", max_length=500)
    loan_taken_amount: int = Field(0, ge=0, description="LOAN only: amount lent out")
    settlement_amount: int = Field(0, ge=0, description="SETTLEMENT only")


class CreateTransactionRequest(_TransactionAmounts):
    member_ids: list[str] = Field(..., min_length=1, description="Jointly liable members")
    item_code: str = Field(..., min_length=1, max_length=32)
    transaction_type: TransactionType

    @field_validator("member_ids", mode="before")
    @classmethod
    def split_member_ids(cls, v: Any) -> Any:
        """Accept "12345, 67890" as well as a JSON list."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v


class CorrectTransactionRequest(_TransactionAmounts):
    transaction_type: TransactionType | None = Field(
        None, description="Omit to keep the original type"
    )


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class MemberInfo(BaseModel):
    member_id: str
    name: str
    mobile: str
    is_active: bool
    is_default_password: bool
    total_items_issued: int

    @classmethod
    def from_domain(cls, member: Member) -> "MemberInfo":
        return cls(
            member_id=member.member_id,
            name=member.name,
            mobile=member.mobile,
            is_active=member.is_active,
            is_default_password=member.is_default_password,
            total_items_issued=member.total_items_issued,
        )


class ItemResponse(BaseModel):
    id: str
    item_code: str
    item_name: str
    member_ids: list[str]
    current_principal_amount: int
    current_principal_display: str
    loan_amount: int
    loan_display: str
    settlement_amount: int
    is_loan_active: bool
    is_active: bool

    @classmethod
    def from_domain(cls, item: Item) -> "ItemResponse":
        return cls(
            id=item.id,
            item_code=item.item_code,
            item_name=item.item_name,
            member_ids=list(item.member_ids),
            current_principal_amount=item.current_principal_amount,
            current_principal_display=rupees_to_display(item.current_principal_amount),
            loan_amount=item.loan_amount,
            loan_display=rupees_to_display(item.loan_amount),
            settlement_amount=item.settlement_amount,
            is_loan_active=item.is_loan_active,
            is_active=item.is_active,
        )


class TransactionItem(BaseModel):
    id: str
    transaction_type: str
    member_ids: list[str]
    item_code: str
    principal_amount: int
    loan_interest_amount: int
    loan_emi: int
    penalty_amount: int
    amount_returned: int
    returned_amount_description: str
    settlement_amount: int
    loan_taken_amount: int
    total_amount: int
    total_amount_display: str
    loan_amount_before: int
    principal_amount_before: int
    is_loan_active_before: bool
    transaction_by: str | None
    is_deleted: bool
    supersedes_id: str | None
    superseded_by_id: str | None
    created_at: str  # ISO8601 string

    @classmethod
    def from_domain(cls, txn: Transaction) -> "TransactionItem":
        return cls(
            id=txn.id,
            transaction_type=txn.transaction_type,
            member_ids=list(txn.member_ids),
            item_code=txn.item_code,
            principal_amount=txn.principal_amount,
            loan_interest_amount=txn.loan_interest_amount,
            loan_emi=txn.loan_emi,
            penalty_amount=txn.penalty_amount,
            amount_returned=txn.amount_returned,
            returned_amount_description=txn.returned_amount_description,
            settlement_amount=txn.settlement_amount,
            loan_taken_amount=txn.loan_taken_amount,
            total_amount=txn.total_amount,
            total_amount_display=rupees_to_display(txn.total_amount),
            loan_amount_before=txn.loan_amount_before,
            principal_amount_before=txn.principal_amount_before,
            is_loan_active_before=txn.is_loan_active_before,
            transaction_by=txn.transaction_by,
            is_deleted=txn.is_deleted,
            supersedes_id=txn.supersedes_id,
            superseded_by_id=txn.superseded_by_id,
            created_at=txn.created_at.isoformat(),
        )


class PeriodTotalsResponse(BaseModel):
    principal_amount: int = 0
    loan_interest_amount: int = 0
    loan_emi: int = 0
    total_amount: int = 0
    amount_returned: int = 0
    penalty_amount: int = 0
    settlement_amount: int = 0

    @classmethod
    def from_domain(cls, totals: PeriodTotals) -> "PeriodTotalsResponse":
        return cls(
            principal_amount=totals.principal_amount,
            loan_interest_amount=totals.loan_interest_amount,
            loan_emi=totals.loan_emi,
            total_amount=totals.total_amount,
            amount_returned=totals.amount_returned,
            penalty_amount=totals.penalty_amount,
            settlement_amount=totals.settlement_amount,
        )


class MemberSummaryResponse(BaseModel):
    member: MemberInfo
    total_items_issued: int
    total_principal_amount: int
    total_principal_display: str
    total_loan_amount: int
    total_loan_display: str
    total_settlement_amount: int
    total_settlement_display: str
    period: str  # "YYYY-MM" the transaction details cover
    last_transaction_date: str | None
    last_transaction_details: PeriodTotalsResponse

    @classmethod
    def from_domain(
        cls, member: Member, summary: Summary, period: YearMonth
    ) -> "MemberSummaryResponse":
        last = summary.last_transaction_date
        return cls(
            member=MemberInfo.from_domain(member),
            total_items_issued=member.total_items_issued,
            total_principal_amount=summary.total_principal_amount,
            total_principal_display=rupees_to_display(summary.total_principal_amount),
            total_loan_amount=summary.total_loan_amount,
            total_loan_display=rupees_to_display(summary.total_loan_amount),
            total_settlement_amount=summary.total_settlement_amount,
            total_settlement_display=rupees_to_display(summary.total_settlement_amount),
            period=f"{period.year:04d}-{period.month:02d}",
            last_transaction_date=last.isoformat() if last else None,
            last_transaction_details=PeriodTotalsResponse.from_domain(
                summary.last_transaction_details
            ),
        )


class TransactionResultResponse(BaseModel):
    transaction: TransactionItem
    item: ItemResponse


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_transactions: int
    limit: int
    has_next_page: bool
    has_prev_page: bool


class ItemTransactionPage(BaseModel):
    pagination: Pagination
    transactions: list[TransactionItem]


class CacheReloadResponse(BaseModel):
    members: int
    items: int
    transactions: int
    monthly_groups: int

"""Domain models for mm_ledger: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class ItemBalances:
    """Running balances of one item; the state the transition function maps over."""

    current_principal_amount: int = 0
    loan_amount: int = 0
    settlement_amount: int = 0
    is_loan_active: bool = False


@dataclass(frozen=True)
class TransactionInput:
    transaction_type: str
    principal_amount: int = 0
    loan_interest_amount: int = 0
    loan_emi: int = 0
    penalty_amount: int = 0
    amount_returned: int = 0
    settlement_amount: int = 0
    loan_taken_amount: int = 0
    # Item balances before the transaction; required to revert a REGULAR
    loan_amount_before: int | None = None
    is_loan_active_before: bool | None = None


@dataclass
class Item:
    id: str
    item_code: str
    item_name: str
    member_ids: list[str] = field(default_factory=list)
    current_principal_amount: int = 0
    loan_amount: int = 0
    settlement_amount: int = 0
    is_loan_active: bool = False
    transaction_ids: list[str] = field(default_factory=list)
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def balances(self) -> ItemBalances:
        return ItemBalances(
            current_principal_amount=self.current_principal_amount,
            loan_amount=self.loan_amount,
            settlement_amount=self.settlement_amount,
            is_loan_active=self.is_loan_active,
        )

    def set_balances(self, balances: ItemBalances) -> None:
        self.current_principal_amount = balances.current_principal_amount
        self.loan_amount = balances.loan_amount
        self.settlement_amount = balances.settlement_amount
        self.is_loan_active = balances.is_loan_active


@dataclass
class Transaction:
    id: str
    transaction_type: str
    member_ids: list[str]
    item_code: str
    created_at: datetime                 # effective time; drives period grouping
    principal_amount: int = 0
    loan_interest_amount: int = 0
    loan_emi: int = 0
    penalty_amount: int = 0
    amount_returned: int = 0
    returned_amount_description: str = ""
    settlement_amount: int = 0
    loan_taken_amount: int = 0
    total_amount: int = 0
    loan_amount_before: int = 0          # item balances before this transaction
    principal_amount_before: int = 0
    is_loan_active_before: bool = False
    transaction_by: str | None = None    # acting admin member_id
    is_deleted: bool = False
    supersedes_id: str | None = None
    superseded_by_id: str | None = None
    recorded_at: datetime | None = None

    @property
    def is_live(self) -> bool:
        """Neither soft-deleted nor replaced by a correcting entry."""
        return not self.is_deleted and self.superseded_by_id is None

    def as_input(self) -> TransactionInput:
        return TransactionInput(
            transaction_type=self.transaction_type,
            principal_amount=self.principal_amount,
            loan_interest_amount=self.loan_interest_amount,
            loan_emi=self.loan_emi,
            penalty_amount=self.penalty_amount,
            amount_returned=self.amount_returned,
            settlement_amount=self.settlement_amount,
            loan_taken_amount=self.loan_taken_amount,
            loan_amount_before=self.loan_amount_before,
            is_loan_active_before=self.is_loan_active_before,
        )


@dataclass(frozen=True)
class MonthlyGroup:
    """Latest live transaction of one (year, month, item) for a member."""

    year: int
    month: int
    item_code: str
    last_transaction: Transaction
    last_date: datetime


@dataclass
class PeriodTotals:
    principal_amount: int = 0
    loan_interest_amount: int = 0
    loan_emi: int = 0
    total_amount: int = 0
    amount_returned: int = 0
    penalty_amount: int = 0
    settlement_amount: int = 0

    def add(self, txn: Transaction) -> None:
        self.principal_amount += txn.principal_amount
        self.loan_interest_amount += txn.loan_interest_amount
        self.loan_emi += txn.loan_emi
        self.total_amount += txn.total_amount
        self.amount_returned += txn.amount_returned
        self.penalty_amount += txn.penalty_amount
        self.settlement_amount += txn.settlement_amount


@dataclass
class Summary:
    total_principal_amount: int
    total_loan_amount: int
    total_settlement_amount: int
    last_transaction_date: datetime | None
    last_transaction_details: PeriodTotals

"""Item balance transitions for LOAN / REGULAR / SETTLEMENT transactions.

Pure functions: take the current ItemBalances and return new ones.

  LOAN        loan += loan_taken_amount; is_loan_active = True
  SETTLEMENT  loan frozen; settlement_amount = input; is_loan_active = False
  REGULAR     principal += principal_amount;
              if loan > 0: loan = max(0, loan - loan_emi)
              is_loan_active = loan > 0

``revert`` undoes ``apply`` for the same stored transaction, restoring the
loan flag from the balance snapshot taken at insert time. SETTLEMENT is the
one asymmetric case: reverting it zeroes settlement_amount and re-opens the
loan (is_loan_active = True) whatever the residual loan amount is.
"""

import dataclasses

from src.mm_common.enums import TransactionType
from src.mm_common.errors import (
    MissingBalanceSnapshotError,
    NegativeAmountError,
    UnknownTransactionTypeError,
)
from src.mm_ledger.domain.models import ItemBalances, TransactionInput

_AMOUNT_FIELDS = (
    "principal_amount",
    "loan_interest_amount",
    "loan_emi",
    "penalty_amount",
    "amount_returned",
    "settlement_amount",
    "loan_taken_amount",
)


def parse_transaction_type(value: str) -> TransactionType:
    try:
        return TransactionType(value)
    except ValueError:
        raise UnknownTransactionTypeError(str(value)) from None


def validate_transaction_input(txn: TransactionInput) -> None:
    """Reject unknown types and negative amounts before any balance is touched."""
    parse_transaction_type(txn.transaction_type)
    for name in _AMOUNT_FIELDS:
        amount = getattr(txn, name)
        if amount < 0:
            raise NegativeAmountError(name, amount)


def apply(current: ItemBalances, txn: TransactionInput) -> ItemBalances:
    txn_type = parse_transaction_type(txn.transaction_type)

    if txn_type is TransactionType.LOAN:
        return dataclasses.replace(
            current,
            loan_amount=current.loan_amount + txn.loan_taken_amount,
            is_loan_active=True,
        )

    if txn_type is TransactionType.SETTLEMENT:
        return dataclasses.replace(
            current,
            settlement_amount=txn.settlement_amount,
            is_loan_active=False,
        )

    # REGULAR
    loan = current.loan_amount
    if loan > 0:
        loan = max(0, loan - txn.loan_emi)
    return dataclasses.replace(
        current,
        current_principal_amount=current.current_principal_amount + txn.principal_amount,
        loan_amount=loan,
        is_loan_active=loan > 0,
    )


def _require_snapshot(txn: TransactionInput) -> tuple[int, bool]:
    if txn.loan_amount_before is None or txn.is_loan_active_before is None:
        raise MissingBalanceSnapshotError(txn.transaction_type)
    return txn.loan_amount_before, txn.is_loan_active_before


def loan_reduction(txn: TransactionInput) -> int:
    """Loan actually paid down by a REGULAR transaction, from its stored snapshot."""
    loan_before, _ = _require_snapshot(txn)
    if loan_before <= 0:
        return 0
    return min(loan_before, txn.loan_emi)


def revert(current: ItemBalances, txn: TransactionInput) -> ItemBalances:
    """Undo ``apply(…, txn)`` using the transaction's stored (pre-edit) values.

    REGULAR needs the full snapshot (``loan_amount_before`` and
    ``is_loan_active_before``); LOAN restores the flag from it when present.
    """
    txn_type = parse_transaction_type(txn.transaction_type)

    if txn_type is TransactionType.LOAN:
        loan = max(0, current.loan_amount - txn.loan_taken_amount)
        was_active = txn.is_loan_active_before
        return dataclasses.replace(
            current,
            loan_amount=loan,
            is_loan_active=loan > 0 if was_active is None else was_active,
        )

    if txn_type is TransactionType.SETTLEMENT:
        return dataclasses.replace(current, settlement_amount=0, is_loan_active=True)

    # REGULAR
    _, was_active = _require_snapshot(txn)
    return dataclasses.replace(
        current,
        current_principal_amount=max(
            0, current.current_principal_amount - txn.principal_amount
        ),
        loan_amount=current.loan_amount + loan_reduction(txn),
        is_loan_active=was_active,
    )

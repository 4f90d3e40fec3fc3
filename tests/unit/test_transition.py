"""Unit tests for the LOAN / REGULAR / SETTLEMENT transition and its reversal."""

import pytest

from src.mm_common.errors import (
    MissingBalanceSnapshotError,
    NegativeAmountError,
    UnknownTransactionTypeError,
)
from src.mm_ledger.domain.models import ItemBalances, TransactionInput
from src.mm_ledger.domain.transition import (
    apply,
    loan_reduction,
    parse_transaction_type,
    revert,
    validate_transaction_input,
)


def _regular(
    principal: int = 0,
    emi: int = 0,
    loan_before: int = 0,
    active_before: bool | None = None,
) -> TransactionInput:
    return TransactionInput(
        transaction_type="REGULAR",
        principal_amount=principal,
        loan_emi=emi,
        loan_amount_before=loan_before,
        is_loan_active_before=loan_before > 0 if active_before is None else active_before,
    )


class TestApplyLoan:
    def test_adds_loan_taken_and_activates(self) -> None:
        before = ItemBalances(current_principal_amount=500, loan_amount=200)
        after = apply(before, TransactionInput("LOAN", loan_taken_amount=1000))
        assert after.loan_amount == 1200
        assert after.is_loan_active is True
        assert after.current_principal_amount == 500

    def test_zero_loan_still_forces_active(self) -> None:
        after = apply(ItemBalances(), TransactionInput("LOAN"))
        assert after.loan_amount == 0
        assert after.is_loan_active is True


class TestApplySettlement:
    def test_forces_inactive_and_sets_settlement(self) -> None:
        before = ItemBalances(loan_amount=3000, is_loan_active=True, settlement_amount=10)
        after = apply(before, TransactionInput("SETTLEMENT", settlement_amount=2500))
        assert after.is_loan_active is False
        assert after.settlement_amount == 2500
        assert after.loan_amount == 3000  # frozen

    @pytest.mark.parametrize("loan", [0, 1, 99999])
    def test_inactive_regardless_of_loan(self, loan: int) -> None:
        before = ItemBalances(loan_amount=loan, is_loan_active=True)
        assert apply(before, TransactionInput("SETTLEMENT")).is_loan_active is False


class TestApplyRegular:
    def test_full_emi_clears_loan(self) -> None:
        before = ItemBalances(loan_amount=1000, is_loan_active=True)
        after = apply(before, _regular(principal=0, emi=1000))
        assert after.loan_amount == 0
        assert after.is_loan_active is False

    def test_partial_emi_keeps_loan_active(self) -> None:
        before = ItemBalances(current_principal_amount=100, loan_amount=1000, is_loan_active=True)
        after = apply(before, _regular(principal=50, emi=300))
        assert after.loan_amount == 700
        assert after.is_loan_active is True
        assert after.current_principal_amount == 150

    def test_emi_larger_than_loan_floors_at_zero(self) -> None:
        after = apply(ItemBalances(loan_amount=200), _regular(emi=500))
        assert after.loan_amount == 0

    def test_emi_ignored_without_loan(self) -> None:
        after = apply(ItemBalances(current_principal_amount=10), _regular(principal=90, emi=500))
        assert after.loan_amount == 0
        assert after.is_loan_active is False
        assert after.current_principal_amount == 100

    def test_loan_then_full_emi(self) -> None:
        state = apply(ItemBalances(), TransactionInput("LOAN", loan_taken_amount=5000))
        state = apply(state, _regular(emi=5000, loan_before=state.loan_amount))
        assert state.loan_amount == 0
        assert state.is_loan_active is False

    def test_input_state_not_mutated(self) -> None:
        before = ItemBalances(loan_amount=1000)
        apply(before, _regular(emi=100))
        assert before.loan_amount == 1000


class TestRevert:
    @pytest.mark.parametrize(
        ("before", "principal", "emi"),
        [
            (ItemBalances(current_principal_amount=0, loan_amount=0), 100, 0),
            (ItemBalances(current_principal_amount=400, loan_amount=1000, is_loan_active=True), 100, 300),
            (ItemBalances(current_principal_amount=400, loan_amount=1000, is_loan_active=True), 0, 1000),
            (ItemBalances(current_principal_amount=400, loan_amount=200, is_loan_active=True), 50, 900),
            (ItemBalances(current_principal_amount=7, loan_amount=0, settlement_amount=5), 3, 900),
            # settled but still owing: apply re-opens the loan, revert must close it again
            (
                ItemBalances(
                    current_principal_amount=400,
                    loan_amount=1000,
                    settlement_amount=900,
                    is_loan_active=False,
                ),
                100,
                0,
            ),
            (ItemBalances(loan_amount=1000, settlement_amount=900, is_loan_active=False), 0, 400),
            # loan repaid and flag already cleared by hand
            (ItemBalances(loan_amount=0, is_loan_active=True), 10, 0),
        ],
    )
    def test_regular_round_trip_restores_state(
        self, before: ItemBalances, principal: int, emi: int
    ) -> None:
        txn = _regular(
            principal=principal,
            emi=emi,
            loan_before=before.loan_amount,
            active_before=before.is_loan_active,
        )
        assert revert(apply(before, txn), txn) == before

    def test_full_emi_reverted_restores_loan(self) -> None:
        before = ItemBalances(loan_amount=1000, is_loan_active=True)
        txn = _regular(emi=1000, loan_before=1000, active_before=True)
        cleared = apply(before, txn)
        assert cleared.loan_amount == 0
        restored = revert(cleared, txn)
        assert restored.loan_amount == 1000
        assert restored.is_loan_active is True

    def test_regular_without_snapshot_rejected(self) -> None:
        txn = TransactionInput("REGULAR", loan_emi=1000)
        cleared = apply(ItemBalances(loan_amount=1000, is_loan_active=True), txn)
        with pytest.raises(MissingBalanceSnapshotError):
            revert(cleared, txn)

    def test_regular_with_partial_snapshot_rejected(self) -> None:
        txn = TransactionInput("REGULAR", loan_emi=100, loan_amount_before=500)
        with pytest.raises(MissingBalanceSnapshotError):
            revert(ItemBalances(loan_amount=400, is_loan_active=True), txn)

    def test_loan_round_trip(self) -> None:
        before = ItemBalances(loan_amount=0, is_loan_active=False)
        txn = TransactionInput("LOAN", loan_taken_amount=800)
        assert revert(apply(before, txn), txn) == before

    def test_loan_round_trip_on_settled_item(self) -> None:
        before = ItemBalances(loan_amount=1000, settlement_amount=900, is_loan_active=False)
        txn = TransactionInput(
            "LOAN", loan_taken_amount=200, loan_amount_before=1000, is_loan_active_before=False
        )
        assert revert(apply(before, txn), txn) == before

    def test_settlement_reversal_reopens_loan(self) -> None:
        before = ItemBalances(loan_amount=0, is_loan_active=False, settlement_amount=0)
        txn = TransactionInput("SETTLEMENT", settlement_amount=1500)
        after = revert(apply(before, txn), txn)
        assert after.settlement_amount == 0
        assert after.is_loan_active is True

    def test_loan_reduction_uses_snapshot(self) -> None:
        assert loan_reduction(_regular(emi=500, loan_before=200)) == 200
        assert loan_reduction(_regular(emi=500, loan_before=900)) == 500
        assert loan_reduction(_regular(emi=500, loan_before=0)) == 0


class TestValidation:
    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(UnknownTransactionTypeError):
            parse_transaction_type("REFUND")

    def test_apply_rejects_unknown_type(self) -> None:
        with pytest.raises(UnknownTransactionTypeError):
            apply(ItemBalances(), TransactionInput("BONUS"))

    def test_negative_amount_rejected(self) -> None:
        with pytest.raises(NegativeAmountError) as exc:
            validate_transaction_input(TransactionInput("REGULAR", loan_emi=-1))
        assert "loan_emi" in exc.value.message

    def test_valid_input_passes(self) -> None:
        validate_transaction_input(TransactionInput("LOAN", loan_taken_amount=10))

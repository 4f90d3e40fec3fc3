"""Unit tests for monthly grouping and member summary rollup."""

from datetime import UTC, datetime, timedelta, timezone
from typing import Any

from src.mm_common.datetime_utils import YearMonth
from src.mm_ledger.domain.models import Item, Transaction
from src.mm_ledger.domain.rollup import group_monthly, period_totals, rollup


def _txn(txn_id: str, created_at: datetime, **kwargs: Any) -> Transaction:
    return Transaction(
        id=txn_id,
        transaction_type=kwargs.pop("transaction_type", "REGULAR"),
        member_ids=kwargs.pop("member_ids", ["11111"]),
        item_code=kwargs.pop("item_code", "B1"),
        created_at=created_at,
        **kwargs,
    )


def _item(item_id: str, code: str, principal: int, loan: int = 0, settlement: int = 0) -> Item:
    return Item(
        id=item_id,
        item_code=code,
        item_name=f"Book {code}",
        member_ids=["11111"],
        current_principal_amount=principal,
        loan_amount=loan,
        settlement_amount=settlement,
    )


MAY_3 = datetime(2024, 5, 3, 10, 0, tzinfo=UTC)
MAY_20 = datetime(2024, 5, 20, 10, 0, tzinfo=UTC)
APR_9 = datetime(2024, 4, 9, 10, 0, tzinfo=UTC)


class TestGroupMonthly:
    def test_keeps_latest_per_period_and_item(self) -> None:
        groups = group_monthly(
            "11111",
            [
                _txn("t1", MAY_3, principal_amount=100),
                _txn("t2", MAY_20, principal_amount=200),
            ],
        )
        assert len(groups) == 1
        assert groups[0].last_transaction.id == "t2"
        assert groups[0].last_date == MAY_20

    def test_sort_order(self) -> None:
        groups = group_monthly(
            "11111",
            [
                _txn("a", APR_9, item_code="B1"),
                _txn("b", MAY_3, item_code="B2"),
                _txn("c", MAY_3, item_code="B1"),
                _txn("d", datetime(2023, 12, 1, tzinfo=UTC), item_code="A9"),
            ],
        )
        assert [(g.year, g.month, g.item_code) for g in groups] == [
            (2024, 5, "B1"),
            (2024, 5, "B2"),
            (2024, 4, "B1"),
            (2023, 12, "A9"),
        ]

    def test_skips_deleted_superseded_and_other_members(self) -> None:
        groups = group_monthly(
            "11111",
            [
                _txn("deleted", MAY_20, is_deleted=True),
                _txn("old", MAY_20, superseded_by_id="new"),
                _txn("other", MAY_20, member_ids=["22222"]),
                _txn("live", MAY_3),
            ],
        )
        assert [g.last_transaction.id for g in groups] == ["live"]

    def test_joint_transaction_counts_for_each_member(self) -> None:
        txns = [_txn("j", MAY_3, member_ids=["11111", "22222"])]
        assert len(group_monthly("11111", txns)) == 1
        assert len(group_monthly("22222", txns)) == 1

    def test_periods_evaluated_in_utc(self) -> None:
        # 2024-06-01 02:00 at +05:30 is still May in UTC
        ist = timezone(timedelta(hours=5, minutes=30))
        groups = group_monthly("11111", [_txn("t", datetime(2024, 6, 1, 2, 0, tzinfo=ist))])
        assert (groups[0].year, groups[0].month) == (2024, 5)

    def test_empty(self) -> None:
        assert group_monthly("11111", []) == []


class TestRollup:
    def test_same_period_counts_only_latest(self) -> None:
        summary = rollup(
            "11111",
            [
                _txn("t1", MAY_3, principal_amount=100, total_amount=100),
                _txn("t2", MAY_20, principal_amount=200, total_amount=200),
            ],
            YearMonth(2024, 5),
            [],
        )
        assert summary.last_transaction_details.principal_amount == 200
        assert summary.last_transaction_details.total_amount == 200
        assert summary.last_transaction_date == MAY_20

    def test_sums_across_items_in_period(self) -> None:
        txns = [
            _txn("b1", MAY_3, item_code="B1", principal_amount=100, loan_emi=50, penalty_amount=5),
            _txn("b2", MAY_20, item_code="B2", principal_amount=300, loan_interest_amount=20),
            _txn("apr", APR_9, item_code="B1", principal_amount=999),
        ]
        totals, last = period_totals(group_monthly("11111", txns), YearMonth(2024, 5))
        assert totals.principal_amount == 400
        assert totals.loan_emi == 50
        assert totals.loan_interest_amount == 20
        assert totals.penalty_amount == 5
        assert last == MAY_20

    def test_no_transactions_in_period(self) -> None:
        summary = rollup("11111", [_txn("apr", APR_9)], YearMonth(2024, 5), [])
        assert summary.last_transaction_date is None
        assert summary.last_transaction_details.total_amount == 0

    def test_balance_totals_come_from_items(self) -> None:
        items = [
            _item("i1", "B1", principal=1000, loan=500),
            _item("i2", "B2", principal=2000, loan=0, settlement=300),
        ]
        summary = rollup("11111", [], YearMonth(2024, 5), items)
        assert summary.total_principal_amount == 3000
        assert summary.total_loan_amount == 500
        assert summary.total_settlement_amount == 300

"""Monthly rollup of a member's ledger.

Each (year, month, item) period is represented by its latest live transaction
only; earlier transactions in the same period are summarised away. The
period summary sums those representatives; the balance totals come from the
member's items as they stand now, independent of any period.
"""

from collections.abc import Iterable, Sequence
from datetime import datetime

from src.mm_common.datetime_utils import YearMonth, as_utc, period_of
from src.mm_ledger.domain.models import (
    Item,
    MonthlyGroup,
    PeriodTotals,
    Summary,
    Transaction,
)


def group_monthly(
    member_id: str, transactions: Iterable[Transaction]
) -> list[MonthlyGroup]:
    """Latest live transaction per (year, month, item_code) touching `member_id`.

    Sorted by year desc, month desc, item_code asc.
    """
    latest: dict[tuple[int, int, str], Transaction] = {}
    for txn in transactions:
        if not txn.is_live or member_id not in txn.member_ids:
            continue
        year, month = period_of(txn.created_at)
        key = (year, month, txn.item_code)
        held = latest.get(key)
        if held is None or as_utc(txn.created_at) > as_utc(held.created_at):
            latest[key] = txn

    groups = [
        MonthlyGroup(
            year=year,
            month=month,
            item_code=item_code,
            last_transaction=txn,
            last_date=txn.created_at,
        )
        for (year, month, item_code), txn in latest.items()
    ]
    groups.sort(key=lambda g: g.item_code)
    groups.sort(key=lambda g: (g.year, g.month), reverse=True)
    return groups


def period_totals(
    groups: Iterable[MonthlyGroup], target: YearMonth
) -> tuple[PeriodTotals, datetime | None]:
    """Sum the representatives of `target`; also return their latest timestamp."""
    totals = PeriodTotals()
    last_date: datetime | None = None
    for group in groups:
        if (group.year, group.month) != (target.year, target.month):
            continue
        totals.add(group.last_transaction)
        if last_date is None or as_utc(group.last_date) > as_utc(last_date):
            last_date = group.last_date
    return totals, last_date


def summarize(
    groups: Iterable[MonthlyGroup], target: YearMonth, items: Sequence[Item]
) -> Summary:
    totals, last_date = period_totals(groups, target)
    return Summary(
        total_principal_amount=sum(i.current_principal_amount for i in items),
        total_loan_amount=sum(i.loan_amount for i in items),
        total_settlement_amount=sum(i.settlement_amount for i in items),
        last_transaction_date=last_date,
        last_transaction_details=totals,
    )


def rollup(
    member_id: str,
    transactions: Iterable[Transaction],
    target: YearMonth,
    items: Sequence[Item],
) -> Summary:
    return summarize(group_monthly(member_id, transactions), target, items)

"""Ledger application services.

LedgerService         admin writes: create / correct / delete transactions,
                      paginated item history.
LedgerReadService     member reads through the ReadCache (cache-aside),
                      plus the full cache reload pass.

Write paths follow one sequence per item:
  cache.lock("item:<code>")
    -> SELECT ... FOR UPDATE
    -> snapshot balances into the new row (loan_amount_before, ...)
    -> insert, transition, persist balances, append ids
    -> commit
  -> invalidate every cache entry the write touched
The service commits or rolls back; repositories never do.
"""

import logging
import math
import uuid
from collections.abc import Callable
from datetime import datetime
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.amounts import total_amount
from src.mm_common.datetime_utils import YearMonth, as_utc, previous_month, utc_now
from src.mm_common.enums import CacheKind
from src.mm_common.errors import (
    ItemNotFoundError,
    ItemNotIssuedError,
    MemberNotFoundError,
    TransactionNotEditableError,
    TransactionNotFoundError,
)
from src.mm_ledger.application.schemas import (
    CacheReloadResponse,
    CorrectTransactionRequest,
    CreateTransactionRequest,
    ItemResponse,
    ItemTransactionPage,
    MemberSummaryResponse,
    Pagination,
    TransactionItem,
    TransactionResultResponse,
)
from src.mm_ledger.domain.cache import ReadCache
from src.mm_ledger.domain.models import Item, Transaction, TransactionInput
from src.mm_ledger.domain.repository import LedgerRepositoryProtocol
from src.mm_ledger.domain.rollup import group_monthly, summarize
from src.mm_ledger.domain.transition import apply, revert, validate_transaction_input
from src.mm_ledger.infrastructure.persistence import LedgerRepository
from src.mm_member.domain.models import Member
from src.mm_member.domain.repository import MemberRepositoryProtocol
from src.mm_member.infrastructure.persistence import MemberRepository

logger = logging.getLogger(__name__)

MONTH_NAMES = (
    "JAN", "FEB", "MAR", "APR", "MAY", "JUN",
    "JUL", "AUG", "SEP", "OCT", "NOV", "DEC",
)


def item_lock_key(item_code: str) -> str:
    return f"item:{item_code}"


def invalidate_after_write(
    cache: ReadCache,
    item_id: str,
    member_ids: list[str],
    transaction_ids: list[str],
) -> None:
    """Evict everything a transaction write touched."""
    cache.invalidate(CacheKind.ITEM, item_id)
    for member_id in member_ids:
        cache.invalidate(CacheKind.MEMBER, member_id)
        cache.invalidate_monthly(member_id)
    for txn_id in transaction_ids:
        cache.invalidate(CacheKind.TRANSACTION, txn_id)


def group_history(transactions: list[Transaction]) -> dict[str, dict[str, list[dict[str, Any]]]]:
    """{"2024": {"MAY": [...], "APR": [...]}, "2023": {...}}, newest first throughout."""
    ordered = sorted(transactions, key=lambda t: as_utc(t.created_at), reverse=True)
    history: dict[str, dict[str, list[dict[str, Any]]]] = {}
    for txn in ordered:
        ts = as_utc(txn.created_at)
        months = history.setdefault(str(ts.year), {})
        months.setdefault(MONTH_NAMES[ts.month - 1], []).append(
            TransactionItem.from_domain(txn).model_dump()
        )
    return history


class LedgerService:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol | None = None,
        member_repo: MemberRepositoryProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()
        self._members: MemberRepositoryProtocol = member_repo or MemberRepository()
        self._clock = clock

    async def create_transaction(
        self,
        db: AsyncSession,
        cache: ReadCache,
        body: CreateTransactionRequest,
        acting_member_id: str | None,
    ) -> TransactionResultResponse:
        txn_input = TransactionInput(
            transaction_type=body.transaction_type.value,
            principal_amount=body.principal_amount,
            loan_interest_amount=body.loan_interest_amount,
            loan_emi=body.loan_emi,
            penalty_amount=body.penalty_amount,
            amount_returned=body.amount_returned,
            settlement_amount=body.settlement_amount,
            loan_taken_amount=body.loan_taken_amount,
        )
        validate_transaction_input(txn_input)
        member_ids = list(dict.fromkeys(body.member_ids))

        async with cache.lock(item_lock_key(body.item_code)):
            try:
                for member_id in member_ids:
                    if await self._members.get_member(db, member_id) is None:
                        raise MemberNotFoundError(member_id)

                item = await self._repo.get_item_by_code(db, body.item_code, for_update=True)
                if item is None:
                    raise ItemNotFoundError(body.item_code)

                txn = Transaction(
                    id=str(uuid.uuid4()),
                    transaction_type=txn_input.transaction_type,
                    member_ids=member_ids,
                    item_code=item.item_code,
                    created_at=self._clock(),
                    principal_amount=body.principal_amount,
                    loan_interest_amount=body.loan_interest_amount,
                    loan_emi=body.loan_emi,
                    penalty_amount=body.penalty_amount,
                    amount_returned=body.amount_returned,
                    returned_amount_description=body.returned_amount_description,
                    settlement_amount=body.settlement_amount,
                    loan_taken_amount=body.loan_taken_amount,
                    total_amount=total_amount(
                        body.principal_amount,
                        body.loan_interest_amount,
                        body.loan_emi,
                        body.penalty_amount,
                    ),
                    loan_amount_before=item.loan_amount,
                    principal_amount_before=item.current_principal_amount,
                    is_loan_active_before=item.is_loan_active,
                    transaction_by=acting_member_id,
                )
                saved = await self._repo.insert_transaction(db, txn)
                balances = apply(item.balances, saved.as_input())
                await self._repo.append_item_transaction(db, item.id, saved.id)
                updated = await self._repo.update_item_balances(db, item.id, balances)
                await self._members.append_transaction(db, member_ids, saved.id)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        invalidate_after_write(cache, item.id, member_ids, [])
        logger.info(
            "Transaction %s recorded: %s on %s for %s by %s",
            saved.id, saved.transaction_type, item.item_code, member_ids, acting_member_id,
        )
        return TransactionResultResponse(
            transaction=TransactionItem.from_domain(saved),
            item=ItemResponse.from_domain(updated),
        )

    async def correct_transaction(
        self,
        db: AsyncSession,
        cache: ReadCache,
        transaction_id: str,
        body: CorrectTransactionRequest,
        acting_member_id: str | None,
    ) -> TransactionResultResponse:
        """Replace a live transaction with a corrected one.

        The old row stays, marked superseded_by_id; the new row carries
        supersedes_id and the old created_at so it lands in the same period.
        Item balances become revert(old) followed by apply(new).
        """
        probe = await self._repo.get_transaction(db, transaction_id)
        if probe is None:
            raise TransactionNotFoundError(transaction_id)

        async with cache.lock(item_lock_key(probe.item_code)):
            try:
                old = await self._repo.get_transaction(db, transaction_id)
                if old is None:
                    raise TransactionNotFoundError(transaction_id)
                if old.is_deleted:
                    raise TransactionNotEditableError(transaction_id, "deleted")
                if old.superseded_by_id is not None:
                    raise TransactionNotEditableError(
                        transaction_id, f"superseded by {old.superseded_by_id}"
                    )

                txn_type = (
                    body.transaction_type.value
                    if body.transaction_type is not None
                    else old.transaction_type
                )
                new_input = TransactionInput(
                    transaction_type=txn_type,
                    principal_amount=body.principal_amount,
                    loan_interest_amount=body.loan_interest_amount,
                    loan_emi=body.loan_emi,
                    penalty_amount=body.penalty_amount,
                    amount_returned=body.amount_returned,
                    settlement_amount=body.settlement_amount,
                    loan_taken_amount=body.loan_taken_amount,
                )
                validate_transaction_input(new_input)

                item = await self._repo.get_item_by_code(db, old.item_code, for_update=True)
                if item is None:
                    raise ItemNotFoundError(old.item_code)

                base = revert(item.balances, old.as_input())
                replacement = Transaction(
                    id=str(uuid.uuid4()),
                    transaction_type=txn_type,
                    member_ids=list(old.member_ids),
                    item_code=old.item_code,
                    created_at=old.created_at,
                    principal_amount=body.principal_amount,
                    loan_interest_amount=body.loan_interest_amount,
                    loan_emi=body.loan_emi,
                    penalty_amount=body.penalty_amount,
                    amount_returned=body.amount_returned,
                    returned_amount_description=body.returned_amount_description,
                    settlement_amount=body.settlement_amount,
                    loan_taken_amount=body.loan_taken_amount,
                    total_amount=total_amount(
                        body.principal_amount,
                        body.loan_interest_amount,
                        body.loan_emi,
                        body.penalty_amount,
                    ),
                    loan_amount_before=base.loan_amount,
                    principal_amount_before=base.current_principal_amount,
                    is_loan_active_before=base.is_loan_active,
                    transaction_by=acting_member_id,
                    supersedes_id=old.id,
                )
                saved = await self._repo.insert_transaction(db, replacement)
                await self._repo.mark_superseded(db, old.id, saved.id)
                balances = apply(base, saved.as_input())
                await self._repo.append_item_transaction(db, item.id, saved.id)
                updated = await self._repo.update_item_balances(db, item.id, balances)
                await self._members.append_transaction(db, saved.member_ids, saved.id)
                await db.commit()
            except Exception:
                await db.rollback()
                raise

        invalidate_after_write(cache, item.id, saved.member_ids, [old.id])
        logger.info(
            "Transaction %s corrected by %s (new id %s)",
            old.id, acting_member_id, saved.id,
        )
        return TransactionResultResponse(
            transaction=TransactionItem.from_domain(saved),
            item=ItemResponse.from_domain(updated),
        )

    async def delete_transaction(
        self, db: AsyncSession, cache: ReadCache, transaction_id: str
    ) -> TransactionItem:
        """Soft delete: set is_deleted only. Item balances are left as they are."""
        try:
            txn = await self._repo.get_transaction(db, transaction_id)
            if txn is None:
                raise TransactionNotFoundError(transaction_id)
            if not txn.is_deleted:
                await self._repo.mark_deleted(db, transaction_id)
                await db.commit()
        except Exception:
            await db.rollback()
            raise

        txn.is_deleted = True
        cached_item = cache.get_item_by_code(txn.item_code)
        if cached_item is not None:
            cache.invalidate(CacheKind.ITEM, cached_item.id)
        for member_id in txn.member_ids:
            cache.invalidate(CacheKind.MEMBER, member_id)
            cache.invalidate_monthly(member_id)
        cache.invalidate(CacheKind.TRANSACTION, transaction_id)
        logger.info("Transaction %s soft-deleted", transaction_id)
        return TransactionItem.from_domain(txn)

    async def list_items(self, db: AsyncSession) -> list[ItemResponse]:
        return [ItemResponse.from_domain(item) for item in await self._repo.list_items(db)]

    async def list_item_transactions(
        self, db: AsyncSession, item_code: str, page: int, limit: int
    ) -> ItemTransactionPage:
        item = await self._repo.get_item_by_code(db, item_code)
        if item is None:
            raise ItemNotFoundError(item_code)

        total = await self._repo.count_item_transactions(db, item_code)
        total_pages = math.ceil(total / limit) if total else 0
        txns = await self._repo.list_item_transactions(
            db, item_code, offset=(page - 1) * limit, limit=limit
        )
        return ItemTransactionPage(
            pagination=Pagination(
                current_page=page,
                total_pages=total_pages,
                total_transactions=total,
                limit=limit,
                has_next_page=page < total_pages,
                has_prev_page=page > 1,
            ),
            transactions=[TransactionItem.from_domain(t) for t in txns],
        )


class LedgerReadService:
    def __init__(
        self,
        repo: LedgerRepositoryProtocol | None = None,
        member_repo: MemberRepositoryProtocol | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._repo: LedgerRepositoryProtocol = repo or LedgerRepository()
        self._members: MemberRepositoryProtocol = member_repo or MemberRepository()
        self._clock = clock

    # -- cache-aside loaders -------------------------------------------------

    async def load_member(self, db: AsyncSession, cache: ReadCache, member_id: str) -> Member:
        member: Member | None = cache.get(CacheKind.MEMBER, member_id)
        if member is None:
            member = await self._members.get_member(db, member_id)
            if member is None:
                raise MemberNotFoundError(member_id)
            cache.put(CacheKind.MEMBER, member)
        return member

    async def load_items(
        self, db: AsyncSession, cache: ReadCache, item_ids: list[str]
    ) -> list[Item]:
        found: dict[str, Item] = {}
        misses: list[str] = []
        for item_id in item_ids:
            item = cache.get(CacheKind.ITEM, item_id)
            if item is None:
                misses.append(item_id)
            else:
                found[item_id] = item
        for item in await self._repo.get_items_by_ids(db, misses):
            cache.put(CacheKind.ITEM, item)
            found[item.id] = item
        return [found[i] for i in item_ids if i in found]

    async def load_item_by_code(
        self, db: AsyncSession, cache: ReadCache, item_code: str
    ) -> Item:
        item = cache.get_item_by_code(item_code)
        if item is None:
            item = await self._repo.get_item_by_code(db, item_code)
            if item is None:
                raise ItemNotFoundError(item_code)
            cache.put(CacheKind.ITEM, item)
        return item

    async def load_transactions(
        self, db: AsyncSession, cache: ReadCache, transaction_ids: list[str]
    ) -> list[Transaction]:
        found: dict[str, Transaction] = {}
        misses: list[str] = []
        for txn_id in transaction_ids:
            txn = cache.get(CacheKind.TRANSACTION, txn_id)
            if txn is None:
                misses.append(txn_id)
            else:
                found[txn_id] = txn
        for txn in await self._repo.get_transactions_by_ids(db, misses):
            cache.put(CacheKind.TRANSACTION, txn)
            found[txn.id] = txn
        return [found[i] for i in transaction_ids if i in found]

    # -- member views --------------------------------------------------------

    async def get_member_summary(
        self,
        db: AsyncSession,
        cache: ReadCache,
        member_id: str,
        period: YearMonth | None = None,
    ) -> MemberSummaryResponse:
        """Balances across the member's items plus one month's latest entries.

        `period` defaults to the calendar month before now.
        """
        member = await self.load_member(db, cache, member_id)
        items = await self.load_items(db, cache, member.item_ids)
        transactions = await self._repo.list_member_transactions(db, member_id)
        groups = group_monthly(member_id, transactions)
        cache.index_monthly(groups)

        target = period or previous_month(self._clock())
        summary = summarize(groups, target, items)
        return MemberSummaryResponse.from_domain(member, summary, target)

    async def list_member_items(
        self, db: AsyncSession, cache: ReadCache, member_id: str
    ) -> list[ItemResponse]:
        member = await self.load_member(db, cache, member_id)
        items = await self.load_items(db, cache, member.item_ids)
        return [ItemResponse.from_domain(item) for item in items]

    async def get_item_history(
        self, db: AsyncSession, cache: ReadCache, member_id: str, item_code: str
    ) -> dict[str, Any]:
        item = await self.load_item_by_code(db, cache, item_code)
        if member_id not in item.member_ids:
            raise ItemNotIssuedError(item_code, member_id)
        transactions = await self.load_transactions(db, cache, item.transaction_ids)
        live = [t for t in transactions if t.is_live]
        return {
            "item": ItemResponse.from_domain(item).model_dump(),
            "transactions": group_history(live),
        }

    # -- reload --------------------------------------------------------------

    async def reload_cache(self, db: AsyncSession, cache: ReadCache) -> CacheReloadResponse:
        """Drop everything and repopulate from the store."""
        cache.clear()
        members = await self._members.list_members(db)
        for member in members:
            cache.put(CacheKind.MEMBER, member)
        items = await self._repo.list_items(db)
        for item in items:
            cache.put(CacheKind.ITEM, item)

        group_count = 0
        for member in members:
            groups = group_monthly(
                member.member_id,
                await self._repo.list_member_transactions(db, member.member_id),
            )
            cache.index_monthly(groups)
            group_count += len(groups)

        result = CacheReloadResponse(
            members=cache.size(CacheKind.MEMBER),
            items=cache.size(CacheKind.ITEM),
            transactions=cache.size(CacheKind.TRANSACTION),
            monthly_groups=group_count,
        )
        logger.info(
            "Read cache reloaded: %d members, %d items, %d transactions, %d monthly groups",
            result.members, result.items, result.transactions, result.monthly_groups,
        )
        return result

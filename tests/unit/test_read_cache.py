"""Unit tests for the in-process ReadCache."""

import asyncio
from datetime import UTC, datetime

from src.mm_common.enums import CacheKind
from src.mm_ledger.domain.cache import ReadCache, monthly_key
from src.mm_ledger.domain.models import Item, MonthlyGroup, Transaction
from src.mm_member.domain.models import Member


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _member(member_id: str = "11111") -> Member:
    return Member(member_id=member_id, name="Asha", mobile="9000000001")


def _item(item_id: str = "item-1", code: str = "B1") -> Item:
    return Item(id=item_id, item_code=code, item_name="Gita")


def _group(txn_id: str, member_ids: list[str], year: int = 2024, month: int = 5) -> MonthlyGroup:
    created = datetime(year, month, 10, tzinfo=UTC)
    txn = Transaction(
        id=txn_id,
        transaction_type="REGULAR",
        member_ids=member_ids,
        item_code="B1",
        created_at=created,
    )
    return MonthlyGroup(
        year=year, month=month, item_code="B1", last_transaction=txn, last_date=created
    )


class TestGetPut:
    def test_miss_returns_none(self) -> None:
        assert ReadCache().get(CacheKind.MEMBER, "11111") is None

    def test_put_then_get(self) -> None:
        cache = ReadCache()
        member = _member()
        cache.put(CacheKind.MEMBER, member)
        assert cache.get(CacheKind.MEMBER, "11111") is member

    def test_put_overwrites(self) -> None:
        cache = ReadCache()
        cache.put(CacheKind.ITEM, _item())
        newer = _item()
        newer.loan_amount = 50
        cache.put(CacheKind.ITEM, newer)
        assert cache.get(CacheKind.ITEM, "item-1").loan_amount == 50
        assert cache.size(CacheKind.ITEM) == 1

    def test_item_code_index(self) -> None:
        cache = ReadCache()
        item = _item("item-9", "B9")
        cache.put(CacheKind.ITEM, item)
        assert cache.get_item_by_code("B9") is item
        assert cache.get_item_by_code("B1") is None

    def test_partitions_are_separate(self) -> None:
        cache = ReadCache()
        cache.put(CacheKind.ITEM, _item("x"))
        assert cache.get(CacheKind.TRANSACTION, "x") is None


class TestInvalidation:
    def test_invalidate_item_drops_code_index(self) -> None:
        cache = ReadCache()
        cache.put(CacheKind.ITEM, _item())
        cache.invalidate(CacheKind.ITEM, "item-1")
        assert cache.get(CacheKind.ITEM, "item-1") is None
        assert cache.get_item_by_code("B1") is None

    def test_invalidate_missing_key_is_noop(self) -> None:
        ReadCache().invalidate(CacheKind.MEMBER, "nobody")

    def test_ttl_expiry(self) -> None:
        clock = FakeClock()
        cache = ReadCache(ttl_seconds=10, clock=clock)
        cache.put(CacheKind.MEMBER, _member())
        clock.now = 9.9
        assert cache.get(CacheKind.MEMBER, "11111") is not None
        clock.now = 10.0
        assert cache.get(CacheKind.MEMBER, "11111") is None
        assert cache.size(CacheKind.MEMBER) == 0

    def test_zero_ttl_never_expires(self) -> None:
        clock = FakeClock()
        cache = ReadCache(ttl_seconds=0, clock=clock)
        cache.put(CacheKind.MEMBER, _member())
        clock.now = 1e9
        assert cache.get(CacheKind.MEMBER, "11111") is not None

    def test_clear_empties_everything(self) -> None:
        cache = ReadCache()
        cache.put(CacheKind.MEMBER, _member())
        cache.put(CacheKind.ITEM, _item())
        cache.index_monthly([_group("t1", ["11111"])])
        cache.clear()
        for kind in CacheKind:
            assert cache.size(kind) == 0
        assert cache.get_item_by_code("B1") is None
        assert cache.monthly_transaction_ids("11111", 2024, 5, "B1") == []


class TestIndexMonthly:
    def test_buckets_every_member(self) -> None:
        cache = ReadCache()
        cache.index_monthly([_group("t1", ["11111", "22222"])])
        assert cache.monthly_transaction_ids("11111", 2024, 5, "B1") == ["t1"]
        assert cache.monthly_transaction_ids("22222", 2024, 5, "B1") == ["t1"]
        assert cache.get(CacheKind.TRANSACTION, "t1") is not None

    def test_idempotent(self) -> None:
        cache = ReadCache()
        groups = [_group("t1", ["11111"]), _group("t2", ["11111"], month=4)]
        cache.index_monthly(groups)
        cache.index_monthly(groups)
        assert cache.monthly_transaction_ids("11111", 2024, 5, "B1") == ["t1"]
        assert cache.monthly_transaction_ids("11111", 2024, 4, "B1") == ["t2"]

    def test_invalidate_monthly_only_touches_member(self) -> None:
        cache = ReadCache()
        cache.index_monthly([_group("t1", ["11111", "22222"])])
        cache.invalidate_monthly("11111")
        assert cache.monthly_transaction_ids("11111", 2024, 5, "B1") == []
        assert cache.monthly_transaction_ids("22222", 2024, 5, "B1") == ["t1"]

    def test_key_format(self) -> None:
        assert monthly_key("11111", 2024, 5, "B1") == "11111_2024_5_B1"


class TestLocksAndSnapshot:
    def test_same_key_same_lock(self) -> None:
        cache = ReadCache()
        assert cache.lock("item:B1") is cache.lock("item:B1")
        assert cache.lock("item:B1") is not cache.lock("item:B2")

    async def test_lock_serialises(self) -> None:
        cache = ReadCache()
        order: list[str] = []

        async def worker(name: str) -> None:
            async with cache.lock("item:B1"):
                order.append(f"{name}-in")
                await asyncio.sleep(0)
                order.append(f"{name}-out")

        await asyncio.gather(worker("a"), worker("b"))
        assert order == ["a-in", "a-out", "b-in", "b-out"]

    def test_clear_drops_idle_locks(self) -> None:
        cache = ReadCache()
        idle = cache.lock("item:B1")
        cache.clear()
        assert cache.lock("item:B1") is not idle

    async def test_clear_keeps_held_locks(self) -> None:
        cache = ReadCache()
        async with cache.lock("item:B1"):
            held = cache.lock("item:B1")
            cache.clear()
            assert cache.lock("item:B1") is held
            assert held.locked()

    def test_snapshot_is_plain_data(self) -> None:
        cache = ReadCache()
        cache.put(CacheKind.MEMBER, _member())
        cache.put(CacheKind.ITEM, _item())
        snap = cache.snapshot()
        assert snap["members"]["11111"]["name"] == "Asha"
        assert snap["item_codes"] == {"B1": "item-1"}
        assert snap["transactions"] == {}

"""In-process read cache for members, items and transactions.

One instance is constructed by the application lifespan and stored on
``app.state.read_cache``; request handlers receive it through the
``get_read_cache`` dependency. Nothing here talks to the database:

  - Read: cache-aside. ``get`` returns the record or None, the caller fetches
    from the store on a miss and calls ``put``.
  - Write: the caller persists first, then ``invalidate``s every record it
    touched. Entries also age out after ``ttl_seconds`` (0 = never).
  - Item read-modify-write sequences run under ``lock(key)`` so two edits of
    the same item cannot interleave inside one process.

Partitions:
  MEMBER       member_id -> Member
  ITEM         item id   -> Item      (+ item_code -> item id index)
  TRANSACTION  txn id    -> Transaction
  monthly      "{member_id}_{year}_{month}_{item_code}" -> [txn ids]
"""

import asyncio
import logging
import time
from collections import defaultdict
from collections.abc import Callable, Iterable
from dataclasses import asdict
from typing import Any

from src.mm_common.enums import CacheKind
from src.mm_ledger.domain.models import Item, MonthlyGroup

logger = logging.getLogger(__name__)


def monthly_key(member_id: str, year: int, month: int, item_code: str) -> str:
    return f"{member_id}_{year}_{month}_{item_code}"


def _primary_key(kind: CacheKind, record: Any) -> str:
    if kind is CacheKind.MEMBER:
        return str(record.member_id)
    return str(record.id)


class ReadCache:
    def __init__(
        self,
        ttl_seconds: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKind, dict[str, tuple[float, Any]]] = {
            kind: {} for kind in CacheKind
        }
        self._item_code_index: dict[str, str] = {}
        self._monthly: dict[str, list[str]] = {}
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    # -- records -------------------------------------------------------------

    def get(self, kind: CacheKind, key: str) -> Any | None:
        entry = self._entries[kind].get(key)
        if entry is None:
            return None
        stored_at, record = entry
        if self._ttl > 0 and self._clock() - stored_at >= self._ttl:
            self.invalidate(kind, key)
            return None
        return record

    def put(self, kind: CacheKind, record: Any) -> None:
        key = _primary_key(kind, record)
        self._entries[kind][key] = (self._clock(), record)
        if kind is CacheKind.ITEM:
            self._item_code_index[record.item_code] = key

    def get_item_by_code(self, item_code: str) -> Item | None:
        item_id = self._item_code_index.get(item_code)
        if item_id is None:
            return None
        item: Item | None = self.get(CacheKind.ITEM, item_id)
        return item

    def invalidate(self, kind: CacheKind, key: str) -> None:
        entry = self._entries[kind].pop(key, None)
        if kind is CacheKind.ITEM and entry is not None:
            self._item_code_index.pop(entry[1].item_code, None)

    # -- monthly index -------------------------------------------------------

    def index_monthly(self, groups: Iterable[MonthlyGroup]) -> None:
        """Cache each group's representative transaction and bucket its id.

        Idempotent: indexing the same groups twice leaves every bucket unchanged.
        """
        for group in groups:
            txn = group.last_transaction
            self.put(CacheKind.TRANSACTION, txn)
            for member_id in txn.member_ids:
                bucket = self._monthly.setdefault(
                    monthly_key(member_id, group.year, group.month, group.item_code), []
                )
                if txn.id not in bucket:
                    bucket.append(txn.id)

    def monthly_transaction_ids(
        self, member_id: str, year: int, month: int, item_code: str
    ) -> list[str]:
        return list(self._monthly.get(monthly_key(member_id, year, month, item_code), []))

    def invalidate_monthly(self, member_id: str) -> None:
        """Drop every monthly bucket of one member; rebuilt on the next summary read."""
        prefix = f"{member_id}_"
        for key in [k for k in self._monthly if k.startswith(prefix)]:
            del self._monthly[key]

    # -- lifecycle -----------------------------------------------------------

    def lock(self, key: str) -> asyncio.Lock:
        """Per-key mutex for read-modify-write sequences (e.g. ``item:<code>``).

        One lock per key ever written; ``clear`` drops the idle ones.
        """
        return self._locks[key]

    def clear(self) -> None:
        for partition in self._entries.values():
            partition.clear()
        self._item_code_index.clear()
        self._monthly.clear()
        held = {key: lock for key, lock in self._locks.items() if lock.locked()}
        self._locks = defaultdict(asyncio.Lock, held)
        logger.info("Read cache cleared (%d item locks held)", len(held))

    def size(self, kind: CacheKind) -> int:
        return len(self._entries[kind])

    def snapshot(self) -> dict[str, Any]:
        """Plain-dict dump of every partition, for admin inspection."""
        return {
            "members": {k: asdict(v) for k, (_, v) in self._entries[CacheKind.MEMBER].items()},
            "items": {k: asdict(v) for k, (_, v) in self._entries[CacheKind.ITEM].items()},
            "item_codes": dict(self._item_code_index),
            "transactions": {
                k: asdict(v) for k, (_, v) in self._entries[CacheKind.TRANSACTION].items()
            },
            "monthly_transaction_ids": {k: list(v) for k, v in self._monthly.items()},
        }

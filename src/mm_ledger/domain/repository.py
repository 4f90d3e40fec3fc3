"""Repository Protocol for the ledger store.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_ledger.domain.models import Item, ItemBalances, Transaction


class LedgerRepositoryProtocol(Protocol):
    # -- items ---------------------------------------------------------------

    async def get_item(self, db: AsyncSession, item_id: str) -> Item | None: ...

    async def get_item_by_code(
        self, db: AsyncSession, item_code: str, for_update: bool = False
    ) -> Item | None: ...

    async def get_items_by_ids(self, db: AsyncSession, item_ids: list[str]) -> list[Item]: ...

    async def get_items_by_codes(
        self, db: AsyncSession, item_codes: list[str]
    ) -> list[Item]: ...

    async def list_items(self, db: AsyncSession) -> list[Item]: ...

    async def insert_item(
        self,
        db: AsyncSession,
        item_code: str,
        item_name: str,
        member_ids: list[str],
        current_principal_amount: int,
    ) -> Item: ...

    async def update_item_balances(
        self, db: AsyncSession, item_id: str, balances: ItemBalances
    ) -> Item: ...

    async def append_item_transaction(
        self, db: AsyncSession, item_id: str, transaction_id: str
    ) -> None: ...

    async def add_item_member(self, db: AsyncSession, item_id: str, member_id: str) -> None: ...

    async def remove_item_member(
        self, db: AsyncSession, item_id: str, member_id: str
    ) -> None: ...

    # -- transactions --------------------------------------------------------

    async def insert_transaction(self, db: AsyncSession, txn: Transaction) -> Transaction: ...

    async def get_transaction(
        self, db: AsyncSession, transaction_id: str
    ) -> Transaction | None: ...

    async def get_transactions_by_ids(
        self, db: AsyncSession, transaction_ids: list[str]
    ) -> list[Transaction]: ...

    async def mark_deleted(self, db: AsyncSession, transaction_id: str) -> bool: ...

    async def mark_superseded(
        self, db: AsyncSession, transaction_id: str, superseded_by_id: str
    ) -> None: ...

    async def list_member_transactions(
        self, db: AsyncSession, member_id: str
    ) -> list[Transaction]: ...

    async def count_item_transactions(self, db: AsyncSession, item_code: str) -> int: ...

    async def list_item_transactions(
        self, db: AsyncSession, item_code: str, offset: int, limit: int
    ) -> list[Transaction]: ...

"""Repository Protocol for the member store.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_member.domain.models import Member, MemberCredentials


class MemberRepositoryProtocol(Protocol):
    async def get_member(self, db: AsyncSession, member_id: str) -> Member | None: ...

    async def list_members(self, db: AsyncSession) -> list[Member]: ...

    async def count_members(self, db: AsyncSession) -> int: ...

    async def get_credentials(
        self, db: AsyncSession, member_id: str
    ) -> MemberCredentials | None: ...

    async def get_credentials_by_mobile(
        self, db: AsyncSession, mobile: str
    ) -> MemberCredentials | None: ...

    async def mobile_taken(
        self, db: AsyncSession, mobile: str, exclude_member_id: str | None = None
    ) -> bool: ...

    async def insert_member(
        self,
        db: AsyncSession,
        member_id: str,
        name: str,
        mobile: str,
        password_hash: str,
        item_ids: list[str],
    ) -> Member: ...

    async def update_profile(
        self, db: AsyncSession, member_id: str, name: str, mobile: str
    ) -> Member | None: ...

    async def set_active(
        self, db: AsyncSession, member_id: str, is_active: bool
    ) -> Member | None: ...

    async def set_password(
        self, db: AsyncSession, member_id: str, password_hash: str, is_default: bool
    ) -> bool: ...

    async def add_item(self, db: AsyncSession, member_id: str, item_id: str) -> None: ...

    async def remove_item(self, db: AsyncSession, member_id: str, item_id: str) -> None: ...

    async def append_transaction(
        self, db: AsyncSession, member_ids: list[str], transaction_id: str
    ) -> None: ...

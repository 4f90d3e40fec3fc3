"""MemberAdminService: admin-side member management.

Members are never physically deleted; deactivation blocks login and every
authenticated request. Member <-> item links are kept on both sides
(members.item_ids and items.member_ids).
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.enums import CacheKind
from src.mm_common.errors import (
    InternalError,
    ItemCodeExistsError,
    ItemNotFoundError,
    MemberNotFoundError,
    MobileExistsError,
)
from src.mm_common.id_generator import generate_member_id
from src.mm_gateway.auth.password import default_password_for, hash_password
from src.mm_ledger.domain.cache import ReadCache
from src.mm_ledger.domain.repository import LedgerRepositoryProtocol
from src.mm_ledger.infrastructure.persistence import LedgerRepository
from src.mm_member.application.schemas import (
    AddMemberRequest,
    AddMemberResponse,
    IssueItemResponse,
    MemberResponse,
    UpdateMemberRequest,
)
from src.mm_member.domain.models import Member
from src.mm_member.domain.repository import MemberRepositoryProtocol
from src.mm_member.infrastructure.persistence import MemberRepository

logger = logging.getLogger(__name__)

_MEMBER_ID_ATTEMPTS = 20


class MemberAdminService:
    def __init__(
        self,
        repo: MemberRepositoryProtocol | None = None,
        ledger_repo: LedgerRepositoryProtocol | None = None,
    ) -> None:
        self._repo: MemberRepositoryProtocol = repo or MemberRepository()
        self._ledger: LedgerRepositoryProtocol = ledger_repo or LedgerRepository()

    async def list_members(self, db: AsyncSession) -> list[MemberResponse]:
        return [MemberResponse.from_domain(m) for m in await self._repo.list_members(db)]

    async def _get_member(self, db: AsyncSession, member_id: str) -> Member:
        member = await self._repo.get_member(db, member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        return member

    async def _new_member_id(self, db: AsyncSession) -> str:
        for _ in range(_MEMBER_ID_ATTEMPTS):
            candidate = generate_member_id()
            if await self._repo.get_member(db, candidate) is None:
                return candidate
        raise InternalError("Could not allocate a free member id")

    async def add_member(
        self, db: AsyncSession, cache: ReadCache, body: AddMemberRequest
    ) -> AddMemberResponse:
        """Create a member holding existing items and/or freshly created ones.

        Initial password is the mobile number, flagged is_default_password.
        """
        try:
            if await self._repo.mobile_taken(db, body.mobile):
                raise MobileExistsError(body.mobile)
            member_id = await self._new_member_id(db)

            existing = await self._ledger.get_items_by_codes(db, body.existing_item_codes)
            missing = set(body.existing_item_codes) - {i.item_code for i in existing}
            if missing:
                raise ItemNotFoundError(", ".join(sorted(missing)))

            item_ids = [item.id for item in existing]
            for new_item in body.new_items:
                if await self._ledger.get_item_by_code(db, new_item.item_code) is not None:
                    raise ItemCodeExistsError(new_item.item_code)
                created = await self._ledger.insert_item(
                    db,
                    item_code=new_item.item_code,
                    item_name=new_item.item_name,
                    member_ids=[member_id],
                    current_principal_amount=new_item.current_principal_amount,
                )
                item_ids.append(created.id)

            default_password = default_password_for(body.mobile)
            member = await self._repo.insert_member(
                db,
                member_id=member_id,
                name=body.name,
                mobile=body.mobile,
                password_hash=hash_password(default_password),
                item_ids=item_ids,
            )
            for item in existing:
                await self._ledger.add_item_member(db, item.id, member_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        for item in existing:
            cache.invalidate(CacheKind.ITEM, item.id)
        logger.info("Member %s added with %d items", member_id, len(item_ids))
        return AddMemberResponse(
            member=MemberResponse.from_domain(member),
            default_password=default_password,
        )

    async def update_member(
        self, db: AsyncSession, cache: ReadCache, member_id: str, body: UpdateMemberRequest
    ) -> MemberResponse:
        try:
            current = await self._get_member(db, member_id)
            name = body.name or current.name
            mobile = body.mobile or current.mobile
            if mobile != current.mobile and await self._repo.mobile_taken(
                db, mobile, exclude_member_id=member_id
            ):
                raise MobileExistsError(mobile)
            member = await self._repo.update_profile(db, member_id, name, mobile)
            if member is None:
                raise MemberNotFoundError(member_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        cache.invalidate(CacheKind.MEMBER, member_id)
        return MemberResponse.from_domain(member)

    async def set_active(
        self, db: AsyncSession, cache: ReadCache, member_id: str, is_active: bool
    ) -> MemberResponse:
        try:
            member = await self._repo.set_active(db, member_id, is_active)
            if member is None:
                raise MemberNotFoundError(member_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        cache.invalidate(CacheKind.MEMBER, member_id)
        logger.info("Member %s %s", member_id, "activated" if is_active else "deactivated")
        return MemberResponse.from_domain(member)

    async def set_item_issued(
        self,
        db: AsyncSession,
        cache: ReadCache,
        member_id: str,
        item_code: str,
        issue: bool,
    ) -> IssueItemResponse:
        """Issue an item to a member (issue=True) or take it back."""
        try:
            await self._get_member(db, member_id)
            item = await self._ledger.get_item_by_code(db, item_code, for_update=True)
            if item is None:
                raise ItemNotFoundError(item_code)
            if issue:
                await self._repo.add_item(db, member_id, item.id)
                await self._ledger.add_item_member(db, item.id, member_id)
            else:
                await self._repo.remove_item(db, member_id, item.id)
                await self._ledger.remove_item_member(db, item.id, member_id)
            member = await self._get_member(db, member_id)
            refreshed = await self._ledger.get_item(db, item.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        cache.invalidate(CacheKind.MEMBER, member_id)
        cache.invalidate(CacheKind.ITEM, item.id)
        cache.invalidate_monthly(member_id)
        logger.info(
            "Item %s %s member %s", item_code, "issued to" if issue else "returned from", member_id
        )
        return IssueItemResponse(
            member_id=member_id,
            item_code=item_code,
            member_item_ids=list(member.item_ids),
            item_member_ids=list(refreshed.member_ids) if refreshed else [],
        )

    async def reset_password(self, db: AsyncSession, member_id: str) -> str:
        """Reset to the default password (the mobile number); returns it."""
        try:
            member = await self._get_member(db, member_id)
            default_password = default_password_for(member.mobile)
            await self._repo.set_password(
                db, member_id, hash_password(default_password), is_default=True
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Password reset for member %s", member_id)
        return default_password

"""Club administration: configuration row, admin role, first-run seeding."""

import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mm_admin.application.schemas import ClubConfigRequest, ClubConfigResponse
from src.mm_common.errors import ClubConfigNotFoundError, MemberNotFoundError
from src.mm_gateway.auth.password import hash_password
from src.mm_member.domain.repository import MemberRepositoryProtocol
from src.mm_member.infrastructure.persistence import MemberRepository

logger = logging.getLogger(__name__)

SEED_ADMIN_MEMBER_ID = "00000"

_CONFIG_COLUMNS = """
    admin_member_ids, interest_per_month, default_principal_amount,
    current_total_principal_amount, date_of_emi
"""

_GET_CONFIG_SQL = text(f"SELECT {_CONFIG_COLUMNS} FROM club_config WHERE id = 1")

_IS_ADMIN_SQL = text("""
    SELECT 1 FROM club_config
    WHERE id = 1 AND CAST(:member_id AS VARCHAR) = ANY(admin_member_ids)
""")

_UPSERT_CONFIG_SQL = text(f"""
    INSERT INTO club_config
        (id, admin_member_ids, interest_per_month, default_principal_amount,
         current_total_principal_amount, date_of_emi)
    VALUES
        (1, '{{}}', :interest_per_month, :default_principal_amount,
         :current_total_principal_amount, :date_of_emi)
    ON CONFLICT (id) DO UPDATE SET
        interest_per_month = EXCLUDED.interest_per_month,
        default_principal_amount = EXCLUDED.default_principal_amount,
        current_total_principal_amount = EXCLUDED.current_total_principal_amount,
        date_of_emi = EXCLUDED.date_of_emi,
        updated_at = NOW()
    RETURNING {_CONFIG_COLUMNS}
""")

_BUMP_PRINCIPAL_SQL = text(f"""
    UPDATE club_config
    SET current_total_principal_amount =
            current_total_principal_amount + default_principal_amount,
        updated_at = NOW()
    WHERE id = 1
    RETURNING {_CONFIG_COLUMNS}
""")

_GRANT_ADMIN_SQL = text(f"""
    UPDATE club_config
    SET admin_member_ids = array_append(admin_member_ids, CAST(:member_id AS VARCHAR)),
        updated_at = NOW()
    WHERE id = 1 AND NOT (CAST(:member_id AS VARCHAR) = ANY(admin_member_ids))
    RETURNING {_CONFIG_COLUMNS}
""")

_REVOKE_ADMIN_SQL = text(f"""
    UPDATE club_config
    SET admin_member_ids = array_remove(admin_member_ids, CAST(:member_id AS VARCHAR)),
        updated_at = NOW()
    WHERE id = 1
    RETURNING {_CONFIG_COLUMNS}
""")

_SEED_CONFIG_SQL = text("""
    INSERT INTO club_config (id, admin_member_ids)
    VALUES (1, CAST(:admin_member_ids AS VARCHAR[]))
    ON CONFLICT (id) DO NOTHING
""")


class AdminService:
    def __init__(self, member_repo: MemberRepositoryProtocol | None = None) -> None:
        self._members: MemberRepositoryProtocol = member_repo or MemberRepository()

    async def is_admin(self, db: AsyncSession, member_id: str) -> bool:
        result = await db.execute(_IS_ADMIN_SQL, {"member_id": member_id})
        return result.fetchone() is not None

    async def get_config(self, db: AsyncSession) -> ClubConfigResponse:
        row = (await db.execute(_GET_CONFIG_SQL)).fetchone()
        if row is None:
            raise ClubConfigNotFoundError()
        return ClubConfigResponse.from_row(row)

    async def upsert_config(
        self, db: AsyncSession, body: ClubConfigRequest
    ) -> ClubConfigResponse:
        try:
            result = await db.execute(_UPSERT_CONFIG_SQL, body.model_dump())
            row = result.fetchone()
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Club config updated: %s", body.model_dump())
        return ClubConfigResponse.from_row(row)

    async def add_monthly_principal(self, db: AsyncSession) -> ClubConfigResponse:
        """current_total_principal_amount += default_principal_amount."""
        try:
            row = (await db.execute(_BUMP_PRINCIPAL_SQL)).fetchone()
            if row is None:
                raise ClubConfigNotFoundError()
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ClubConfigResponse.from_row(row)

    async def set_admin(
        self, db: AsyncSession, member_id: str, is_admin: bool
    ) -> ClubConfigResponse:
        try:
            if await self._members.get_member(db, member_id) is None:
                raise MemberNotFoundError(member_id)
            sql = _GRANT_ADMIN_SQL if is_admin else _REVOKE_ADMIN_SQL
            row = (await db.execute(sql, {"member_id": member_id})).fetchone()
            if row is None:
                # grant on an existing admin matches no row; re-read to tell apart
                row = (await db.execute(_GET_CONFIG_SQL)).fetchone()
                if row is None:
                    raise ClubConfigNotFoundError()
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Admin role %s for member %s", "granted" if is_admin else "revoked", member_id)
        return ClubConfigResponse.from_row(row)

    async def seed_defaults(self, db: AsyncSession) -> bool:
        """First run only: create member 00000 and a club config naming it admin.

        Returns True when anything was created.
        """
        try:
            if await self._members.count_members(db) > 0:
                return False
            await self._members.insert_member(
                db,
                member_id=SEED_ADMIN_MEMBER_ID,
                name="Administrator",
                mobile=settings.DEFAULT_ADMIN_MOBILE,
                password_hash=hash_password(settings.DEFAULT_ADMIN_PASSWORD),
                item_ids=[],
            )
            await db.execute(_SEED_CONFIG_SQL, {"admin_member_ids": [SEED_ADMIN_MEMBER_ID]})
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.warning(
            "Seeded default admin %s (mobile %s); change its password",
            SEED_ADMIN_MEMBER_ID, settings.DEFAULT_ADMIN_MOBILE,
        )
        return True

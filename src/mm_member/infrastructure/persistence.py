"""MemberRepository: concrete implementation of MemberRepositoryProtocol.

All queries use raw text() SQL. Array columns (item_ids, transaction_ids) are
maintained with array_append / array_remove so concurrent appends do not
overwrite each other.

Transaction ownership: the CALLER (application service) commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_member.domain.models import Member, MemberCredentials

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_MEMBER_COLUMNS = """
    member_id, name, mobile, item_ids, transaction_ids,
    is_active, is_default_password, created_at, updated_at
"""

_GET_MEMBER_SQL = text(f"SELECT {_MEMBER_COLUMNS} FROM members WHERE member_id = :member_id")

_LIST_MEMBERS_SQL = text(f"SELECT {_MEMBER_COLUMNS} FROM members ORDER BY member_id")

_COUNT_MEMBERS_SQL = text("SELECT COUNT(*) FROM members")

_CREDENTIALS_COLUMNS = "member_id, mobile, password_hash, is_active, is_default_password"

_GET_CREDENTIALS_SQL = text(
    f"SELECT {_CREDENTIALS_COLUMNS} FROM members WHERE member_id = :member_id"
)

_GET_CREDENTIALS_BY_MOBILE_SQL = text(
    f"SELECT {_CREDENTIALS_COLUMNS} FROM members WHERE mobile = :mobile"
)

_MOBILE_TAKEN_SQL = text("""
    SELECT 1 FROM members
    WHERE mobile = :mobile
      AND (CAST(:exclude_member_id AS VARCHAR) IS NULL
           OR member_id <> CAST(:exclude_member_id AS VARCHAR))
    LIMIT 1
""")

_INSERT_MEMBER_SQL = text(f"""
    INSERT INTO members
        (member_id, name, mobile, password_hash, is_default_password,
         item_ids, transaction_ids, is_active)
    VALUES
        (:member_id, :name, :mobile, :password_hash, TRUE,
         CAST(:item_ids AS VARCHAR[]), '{{}}', TRUE)
    RETURNING {_MEMBER_COLUMNS}
""")

_UPDATE_PROFILE_SQL = text(f"""
    UPDATE members
    SET name = :name, mobile = :mobile, updated_at = NOW()
    WHERE member_id = :member_id
    RETURNING {_MEMBER_COLUMNS}
""")

_SET_ACTIVE_SQL = text(f"""
    UPDATE members
    SET is_active = :is_active, updated_at = NOW()
    WHERE member_id = :member_id
    RETURNING {_MEMBER_COLUMNS}
""")

_SET_PASSWORD_SQL = text("""
    UPDATE members
    SET password_hash = :password_hash,
        is_default_password = :is_default,
        updated_at = NOW()
    WHERE member_id = :member_id
    RETURNING member_id
""")

_ADD_ITEM_SQL = text("""
    UPDATE members
    SET item_ids = array_append(item_ids, CAST(:item_id AS VARCHAR)), updated_at = NOW()
    WHERE member_id = :member_id AND NOT (CAST(:item_id AS VARCHAR) = ANY(item_ids))
""")

_REMOVE_ITEM_SQL = text("""
    UPDATE members
    SET item_ids = array_remove(item_ids, CAST(:item_id AS VARCHAR)), updated_at = NOW()
    WHERE member_id = :member_id
""")

_APPEND_TRANSACTION_SQL = text("""
    UPDATE members
    SET transaction_ids = array_append(transaction_ids, CAST(:transaction_id AS VARCHAR)),
        updated_at = NOW()
    WHERE member_id = ANY(CAST(:member_ids AS VARCHAR[]))
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_member(row: object) -> Member:
    return Member(
        member_id=row.member_id,  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        mobile=row.mobile,  # type: ignore[attr-defined]
        item_ids=list(row.item_ids or []),  # type: ignore[attr-defined]
        transaction_ids=list(row.transaction_ids or []),  # type: ignore[attr-defined]
        is_active=row.is_active,  # type: ignore[attr-defined]
        is_default_password=row.is_default_password,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_credentials(row: object) -> MemberCredentials:
    return MemberCredentials(
        member_id=row.member_id,  # type: ignore[attr-defined]
        mobile=row.mobile,  # type: ignore[attr-defined]
        password_hash=row.password_hash,  # type: ignore[attr-defined]
        is_active=row.is_active,  # type: ignore[attr-defined]
        is_default_password=row.is_default_password,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MemberRepository:
    async def get_member(self, db: AsyncSession, member_id: str) -> Member | None:
        result = await db.execute(_GET_MEMBER_SQL, {"member_id": member_id})
        row = result.fetchone()
        return _row_to_member(row) if row else None

    async def list_members(self, db: AsyncSession) -> list[Member]:
        result = await db.execute(_LIST_MEMBERS_SQL)
        return [_row_to_member(row) for row in result.fetchall()]

    async def count_members(self, db: AsyncSession) -> int:
        result = await db.execute(_COUNT_MEMBERS_SQL)
        return int(result.scalar_one())

    async def get_credentials(
        self, db: AsyncSession, member_id: str
    ) -> MemberCredentials | None:
        result = await db.execute(_GET_CREDENTIALS_SQL, {"member_id": member_id})
        row = result.fetchone()
        return _row_to_credentials(row) if row else None

    async def get_credentials_by_mobile(
        self, db: AsyncSession, mobile: str
    ) -> MemberCredentials | None:
        result = await db.execute(_GET_CREDENTIALS_BY_MOBILE_SQL, {"mobile": mobile})
        row = result.fetchone()
        return _row_to_credentials(row) if row else None

    async def mobile_taken(
        self, db: AsyncSession, mobile: str, exclude_member_id: str | None = None
    ) -> bool:
        result = await db.execute(
            _MOBILE_TAKEN_SQL, {"mobile": mobile, "exclude_member_id": exclude_member_id}
        )
        return result.fetchone() is not None

    async def insert_member(
        self,
        db: AsyncSession,
        member_id: str,
        name: str,
        mobile: str,
        password_hash: str,
        item_ids: list[str],
    ) -> Member:
        result = await db.execute(
            _INSERT_MEMBER_SQL,
            {
                "member_id": member_id,
                "name": name,
                "mobile": mobile,
                "password_hash": password_hash,
                "item_ids": item_ids,
            },
        )
        return _row_to_member(result.fetchone())

    async def update_profile(
        self, db: AsyncSession, member_id: str, name: str, mobile: str
    ) -> Member | None:
        result = await db.execute(
            _UPDATE_PROFILE_SQL, {"member_id": member_id, "name": name, "mobile": mobile}
        )
        row = result.fetchone()
        return _row_to_member(row) if row else None

    async def set_active(
        self, db: AsyncSession, member_id: str, is_active: bool
    ) -> Member | None:
        result = await db.execute(
            _SET_ACTIVE_SQL, {"member_id": member_id, "is_active": is_active}
        )
        row = result.fetchone()
        return _row_to_member(row) if row else None

    async def set_password(
        self, db: AsyncSession, member_id: str, password_hash: str, is_default: bool
    ) -> bool:
        result = await db.execute(
            _SET_PASSWORD_SQL,
            {"member_id": member_id, "password_hash": password_hash, "is_default": is_default},
        )
        return result.fetchone() is not None

    async def add_item(self, db: AsyncSession, member_id: str, item_id: str) -> None:
        await db.execute(_ADD_ITEM_SQL, {"member_id": member_id, "item_id": item_id})

    async def remove_item(self, db: AsyncSession, member_id: str, item_id: str) -> None:
        await db.execute(_REMOVE_ITEM_SQL, {"member_id": member_id, "item_id": item_id})

    async def append_transaction(
        self, db: AsyncSession, member_ids: list[str], transaction_id: str
    ) -> None:
        await db.execute(
            _APPEND_TRANSACTION_SQL,
            {"member_ids": member_ids, "transaction_id": transaction_id},
        )

"""LedgerRepository: concrete implementation of LedgerRepositoryProtocol.

Items and transactions, all through raw text() SQL.
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.

Transaction ownership: the CALLER (application service) commits or rolls back.
Balance writes are only safe after get_item_by_code(..., for_update=True) in
the same DB transaction.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_ledger.domain.models import Item, ItemBalances, Transaction

# ---------------------------------------------------------------------------
# SQL: items
# ---------------------------------------------------------------------------

_ITEM_COLUMNS = """
    id, item_code, item_name, member_ids,
    current_principal_amount, loan_amount, settlement_amount, is_loan_active,
    transaction_ids, is_active, created_at, updated_at
"""

_GET_ITEM_SQL = text(f"SELECT {_ITEM_COLUMNS} FROM items WHERE id = :item_id")

_GET_ITEM_BY_CODE_SQL = text(f"SELECT {_ITEM_COLUMNS} FROM items WHERE item_code = :item_code")

_GET_ITEM_BY_CODE_FOR_UPDATE_SQL = text(
    f"SELECT {_ITEM_COLUMNS} FROM items WHERE item_code = :item_code FOR UPDATE"
)

_GET_ITEMS_BY_IDS_SQL = text(f"""
    SELECT {_ITEM_COLUMNS} FROM items
    WHERE id = ANY(CAST(:item_ids AS VARCHAR[]))
    ORDER BY item_code
""")

_GET_ITEMS_BY_CODES_SQL = text(f"""
    SELECT {_ITEM_COLUMNS} FROM items
    WHERE item_code = ANY(CAST(:item_codes AS VARCHAR[]))
    ORDER BY item_code
""")

_LIST_ITEMS_SQL = text(f"SELECT {_ITEM_COLUMNS} FROM items ORDER BY item_code")

_INSERT_ITEM_SQL = text(f"""
    INSERT INTO items
        (id, item_code, item_name, member_ids,
         current_principal_amount, loan_amount, settlement_amount, is_loan_active,
         transaction_ids, is_active)
    VALUES
        (CAST(gen_random_uuid() AS VARCHAR), :item_code, :item_name,
         CAST(:member_ids AS VARCHAR[]),
         :current_principal_amount, 0, 0, FALSE,
         '{{}}', TRUE)
    RETURNING {_ITEM_COLUMNS}
""")

_UPDATE_ITEM_BALANCES_SQL = text(f"""
    UPDATE items
    SET current_principal_amount = :current_principal_amount,
        loan_amount = :loan_amount,
        settlement_amount = :settlement_amount,
        is_loan_active = :is_loan_active,
        updated_at = NOW()
    WHERE id = :item_id
    RETURNING {_ITEM_COLUMNS}
""")

_APPEND_ITEM_TRANSACTION_SQL = text("""
    UPDATE items
    SET transaction_ids = array_append(transaction_ids, CAST(:transaction_id AS VARCHAR)),
        updated_at = NOW()
    WHERE id = :item_id
""")

_ADD_ITEM_MEMBER_SQL = text("""
    UPDATE items
    SET member_ids = array_append(member_ids, CAST(:member_id AS VARCHAR)), updated_at = NOW()
    WHERE id = :item_id AND NOT (CAST(:member_id AS VARCHAR) = ANY(member_ids))
""")

_REMOVE_ITEM_MEMBER_SQL = text("""
    UPDATE items
    SET member_ids = array_remove(member_ids, CAST(:member_id AS VARCHAR)), updated_at = NOW()
    WHERE id = :item_id
""")

# ---------------------------------------------------------------------------
# SQL: transactions
# ---------------------------------------------------------------------------

_TXN_COLUMNS = """
    id, transaction_type, member_ids, item_code,
    principal_amount, loan_interest_amount, loan_emi, penalty_amount,
    amount_returned, returned_amount_description, settlement_amount,
    loan_taken_amount, total_amount, loan_amount_before, principal_amount_before,
    is_loan_active_before,
    transaction_by, is_deleted, supersedes_id, superseded_by_id,
    created_at, recorded_at
"""

_INSERT_TXN_SQL = text(f"""
    INSERT INTO transactions
        (id, transaction_type, member_ids, item_code,
         principal_amount, loan_interest_amount, loan_emi, penalty_amount,
         amount_returned, returned_amount_description, settlement_amount,
         loan_taken_amount, total_amount, loan_amount_before, principal_amount_before,
         is_loan_active_before,
         transaction_by, is_deleted, supersedes_id, superseded_by_id, created_at)
    VALUES
        (:id, :transaction_type, CAST(:member_ids AS VARCHAR[]), :item_code,
         :principal_amount, :loan_interest_amount, :loan_emi, :penalty_amount,
         :amount_returned, :returned_amount_description, :settlement_amount,
         :loan_taken_amount, :total_amount, :loan_amount_before, :principal_amount_before,
         :is_loan_active_before,
         CAST(:transaction_by AS VARCHAR), FALSE, CAST(:supersedes_id AS VARCHAR), NULL,
         :created_at)
    RETURNING {_TXN_COLUMNS}
""")

_GET_TXN_SQL = text(f"SELECT {_TXN_COLUMNS} FROM transactions WHERE id = :transaction_id")

_GET_TXNS_BY_IDS_SQL = text(f"""
    SELECT {_TXN_COLUMNS} FROM transactions
    WHERE id = ANY(CAST(:transaction_ids AS VARCHAR[]))
    ORDER BY created_at DESC
""")

_MARK_DELETED_SQL = text("""
    UPDATE transactions SET is_deleted = TRUE
    WHERE id = :transaction_id
    RETURNING id
""")

_MARK_SUPERSEDED_SQL = text("""
    UPDATE transactions SET superseded_by_id = :superseded_by_id
    WHERE id = :transaction_id
""")

_LIVE = "is_deleted = FALSE AND superseded_by_id IS NULL"

_LIST_MEMBER_TXNS_SQL = text(f"""
    SELECT {_TXN_COLUMNS} FROM transactions
    WHERE :member_id = ANY(member_ids) AND {_LIVE}
    ORDER BY created_at DESC
""")

_COUNT_ITEM_TXNS_SQL = text(f"""
    SELECT COUNT(*) FROM transactions
    WHERE item_code = :item_code AND {_LIVE}
""")

_LIST_ITEM_TXNS_SQL = text(f"""
    SELECT {_TXN_COLUMNS} FROM transactions
    WHERE item_code = :item_code AND {_LIVE}
    ORDER BY created_at DESC, id DESC
    OFFSET :offset
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_item(row: object) -> Item:
    return Item(
        id=str(row.id),  # type: ignore[attr-defined]
        item_code=row.item_code,  # type: ignore[attr-defined]
        item_name=row.item_name,  # type: ignore[attr-defined]
        member_ids=list(row.member_ids or []),  # type: ignore[attr-defined]
        current_principal_amount=row.current_principal_amount,  # type: ignore[attr-defined]
        loan_amount=row.loan_amount,  # type: ignore[attr-defined]
        settlement_amount=row.settlement_amount,  # type: ignore[attr-defined]
        is_loan_active=row.is_loan_active,  # type: ignore[attr-defined]
        transaction_ids=list(row.transaction_ids or []),  # type: ignore[attr-defined]
        is_active=row.is_active,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
    )


def _row_to_transaction(row: object) -> Transaction:
    return Transaction(
        id=str(row.id),  # type: ignore[attr-defined]
        transaction_type=row.transaction_type,  # type: ignore[attr-defined]
        member_ids=list(row.member_ids or []),  # type: ignore[attr-defined]
        item_code=row.item_code,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        principal_amount=row.principal_amount,  # type: ignore[attr-defined]
        loan_interest_amount=row.loan_interest_amount,  # type: ignore[attr-defined]
        loan_emi=row.loan_emi,  # type: ignore[attr-defined]
        penalty_amount=row.penalty_amount,  # type: ignore[attr-defined]
        amount_returned=row.amount_returned,  # type: ignore[attr-defined]
        returned_amount_description=row.returned_amount_description,  # type: ignore[attr-defined]
        settlement_amount=row.settlement_amount,  # type: ignore[attr-defined]
        loan_taken_amount=row.loan_taken_amount,  # type: ignore[attr-defined]
        total_amount=row.total_amount,  # type: ignore[attr-defined]
        loan_amount_before=row.loan_amount_before,  # type: ignore[attr-defined]
        principal_amount_before=row.principal_amount_before,  # type: ignore[attr-defined]
        is_loan_active_before=row.is_loan_active_before,  # type: ignore[attr-defined]
        transaction_by=row.transaction_by,  # type: ignore[attr-defined]
        is_deleted=row.is_deleted,  # type: ignore[attr-defined]
        supersedes_id=row.supersedes_id,  # type: ignore[attr-defined]
        superseded_by_id=row.superseded_by_id,  # type: ignore[attr-defined]
        recorded_at=row.recorded_at,  # type: ignore[attr-defined]
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class LedgerRepository:
    # -- items ---------------------------------------------------------------

    async def get_item(self, db: AsyncSession, item_id: str) -> Item | None:
        result = await db.execute(_GET_ITEM_SQL, {"item_id": item_id})
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def get_item_by_code(
        self, db: AsyncSession, item_code: str, for_update: bool = False
    ) -> Item | None:
        sql = _GET_ITEM_BY_CODE_FOR_UPDATE_SQL if for_update else _GET_ITEM_BY_CODE_SQL
        result = await db.execute(sql, {"item_code": item_code})
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def get_items_by_ids(self, db: AsyncSession, item_ids: list[str]) -> list[Item]:
        if not item_ids:
            return []
        result = await db.execute(_GET_ITEMS_BY_IDS_SQL, {"item_ids": item_ids})
        return [_row_to_item(row) for row in result.fetchall()]

    async def get_items_by_codes(
        self, db: AsyncSession, item_codes: list[str]
    ) -> list[Item]:
        if not item_codes:
            return []
        result = await db.execute(_GET_ITEMS_BY_CODES_SQL, {"item_codes": item_codes})
        return [_row_to_item(row) for row in result.fetchall()]

    async def list_items(self, db: AsyncSession) -> list[Item]:
        result = await db.execute(_LIST_ITEMS_SQL)
        return [_row_to_item(row) for row in result.fetchall()]

    async def insert_item(
        self,
        db: AsyncSession,
        item_code: str,
        item_name: str,
        member_ids: list[str],
        current_principal_amount: int,
    ) -> Item:
        result = await db.execute(
            _INSERT_ITEM_SQL,
            {
                "item_code": item_code,
                "item_name": item_name,
                "member_ids": member_ids,
                "current_principal_amount": current_principal_amount,
            },
        )
        return _row_to_item(result.fetchone())

    async def update_item_balances(
        self, db: AsyncSession, item_id: str, balances: ItemBalances
    ) -> Item:
        result = await db.execute(
            _UPDATE_ITEM_BALANCES_SQL,
            {
                "item_id": item_id,
                "current_principal_amount": balances.current_principal_amount,
                "loan_amount": balances.loan_amount,
                "settlement_amount": balances.settlement_amount,
                "is_loan_active": balances.is_loan_active,
            },
        )
        return _row_to_item(result.fetchone())

    async def append_item_transaction(
        self, db: AsyncSession, item_id: str, transaction_id: str
    ) -> None:
        await db.execute(
            _APPEND_ITEM_TRANSACTION_SQL,
            {"item_id": item_id, "transaction_id": transaction_id},
        )

    async def add_item_member(self, db: AsyncSession, item_id: str, member_id: str) -> None:
        await db.execute(_ADD_ITEM_MEMBER_SQL, {"item_id": item_id, "member_id": member_id})

    async def remove_item_member(
        self, db: AsyncSession, item_id: str, member_id: str
    ) -> None:
        await db.execute(_REMOVE_ITEM_MEMBER_SQL, {"item_id": item_id, "member_id": member_id})

    # -- transactions --------------------------------------------------------

    async def insert_transaction(self, db: AsyncSession, txn: Transaction) -> Transaction:
        result = await db.execute(
            _INSERT_TXN_SQL,
            {
                "id": txn.id,
                "transaction_type": txn.transaction_type,
                "member_ids": txn.member_ids,
                "item_code": txn.item_code,
                "principal_amount": txn.principal_amount,
                "loan_interest_amount": txn.loan_interest_amount,
                "loan_emi": txn.loan_emi,
                "penalty_amount": txn.penalty_amount,
                "amount_returned": txn.amount_returned,
                "returned_amount_description": txn.returned_amount_description,
                "settlement_amount": txn.settlement_amount,
                "loan_taken_amount": txn.loan_taken_amount,
                "total_amount": txn.total_amount,
                "loan_amount_before": txn.loan_amount_before,
                "principal_amount_before": txn.principal_amount_before,
                "is_loan_active_before": txn.is_loan_active_before,
                "transaction_by": txn.transaction_by,
                "supersedes_id": txn.supersedes_id,
                "created_at": txn.created_at,
            },
        )
        return _row_to_transaction(result.fetchone())

    async def get_transaction(
        self, db: AsyncSession, transaction_id: str
    ) -> Transaction | None:
        result = await db.execute(_GET_TXN_SQL, {"transaction_id": transaction_id})
        row = result.fetchone()
        return _row_to_transaction(row) if row else None

    async def get_transactions_by_ids(
        self, db: AsyncSession, transaction_ids: list[str]
    ) -> list[Transaction]:
        if not transaction_ids:
            return []
        result = await db.execute(_GET_TXNS_BY_IDS_SQL, {"transaction_ids": transaction_ids})
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def mark_deleted(self, db: AsyncSession, transaction_id: str) -> bool:
        result = await db.execute(_MARK_DELETED_SQL, {"transaction_id": transaction_id})
        return result.fetchone() is not None

    async def mark_superseded(
        self, db: AsyncSession, transaction_id: str, superseded_by_id: str
    ) -> None:
        await db.execute(
            _MARK_SUPERSEDED_SQL,
            {"transaction_id": transaction_id, "superseded_by_id": superseded_by_id},
        )

    async def list_member_transactions(
        self, db: AsyncSession, member_id: str
    ) -> list[Transaction]:
        result = await db.execute(_LIST_MEMBER_TXNS_SQL, {"member_id": member_id})
        return [_row_to_transaction(row) for row in result.fetchall()]

    async def count_item_transactions(self, db: AsyncSession, item_code: str) -> int:
        result = await db.execute(_COUNT_ITEM_TXNS_SQL, {"item_code": item_code})
        return int(result.scalar_one())

    async def list_item_transactions(
        self, db: AsyncSession, item_code: str, offset: int, limit: int
    ) -> list[Transaction]:
        result = await db.execute(
            _LIST_ITEM_TXNS_SQL, {"item_code": item_code, "offset": offset, "limit": limit}
        )
        return [_row_to_transaction(row) for row in result.fetchall()]

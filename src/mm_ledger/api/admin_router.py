"""mm_ledger admin REST API: record, correct and delete transactions; item listings."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.database import get_db_session
from src.mm_common.response import ApiResponse, success_response
from src.mm_gateway.auth.dependencies import require_admin
from src.mm_ledger.api.dependencies import get_read_cache
from src.mm_ledger.application.schemas import (
    CorrectTransactionRequest,
    CreateTransactionRequest,
)
from src.mm_ledger.application.service import LedgerService
from src.mm_ledger.domain.cache import ReadCache
from src.mm_member.infrastructure.db_models import MemberORM

router = APIRouter(prefix="/admin", tags=["admin-ledger"])

_service = LedgerService()


@router.post("/transactions", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    body: CreateTransactionRequest,
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_transaction(db, cache, body, admin.member_id)
    return success_response(data.model_dump(), request, message="Transaction recorded")


@router.put("/transactions/{transaction_id}")
async def correct_transaction(
    transaction_id: str,
    body: CorrectTransactionRequest,
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    request: Request,
) -> ApiResponse:
    data = await _service.correct_transaction(db, cache, transaction_id, body, admin.member_id)
    return success_response(data.model_dump(), request, message="Transaction corrected")


@router.delete("/transactions/{transaction_id}")
async def delete_transaction(
    transaction_id: str,
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    request: Request,
) -> ApiResponse:
    data = await _service.delete_transaction(db, cache, transaction_id)
    return success_response(data.model_dump(), request, message="Transaction deleted")


@router.get("/items")
async def list_items(
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    items = await _service.list_items(db)
    return success_response([i.model_dump() for i in items], request)


@router.get("/items/{item_code}/transactions")
async def list_item_transactions(
    item_code: str,
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    page: Annotated[int, Query(ge=1)] = 1,
    limit: Annotated[int, Query(ge=1, le=100)] = 10,
) -> ApiResponse:
    data = await _service.list_item_transactions(db, item_code, page, limit)
    return success_response(data.model_dump(), request)

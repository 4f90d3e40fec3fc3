"""mm_ledger member REST API: own summary, items and item history."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.database import get_db_session
from src.mm_common.datetime_utils import YearMonth
from src.mm_common.response import ApiResponse, success_response
from src.mm_gateway.auth.dependencies import get_current_member
from src.mm_ledger.api.dependencies import get_read_cache
from src.mm_ledger.application.service import LedgerReadService
from src.mm_ledger.domain.cache import ReadCache
from src.mm_member.infrastructure.db_models import MemberORM

router = APIRouter(prefix="/member", tags=["member"])

_service = LedgerReadService()


@router.get("/summary")
async def get_summary(
    current_member: Annotated[MemberORM, Depends(get_current_member)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    request: Request,
    year: Annotated[int | None, Query(ge=2000, le=9999)] = None,
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
) -> ApiResponse:
    # both or neither; default is the previous calendar month
    period = YearMonth(year, month) if year is not None and month is not None else None
    data = await _service.get_member_summary(db, cache, current_member.member_id, period)
    return success_response(data.model_dump(), request)


@router.get("/items")
async def list_items(
    current_member: Annotated[MemberORM, Depends(get_current_member)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    request: Request,
) -> ApiResponse:
    items = await _service.list_member_items(db, cache, current_member.member_id)
    return success_response([i.model_dump() for i in items], request)


@router.get("/items/{item_code}/transactions")
async def item_history(
    item_code: str,
    current_member: Annotated[MemberORM, Depends(get_current_member)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_item_history(db, cache, current_member.member_id, item_code)
    return success_response(data, request)

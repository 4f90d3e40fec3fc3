"""Admin member management REST API."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.database import get_db_session
from src.mm_common.response import ApiResponse, success_response
from src.mm_gateway.auth.dependencies import require_admin
from src.mm_ledger.api.dependencies import get_read_cache
from src.mm_ledger.domain.cache import ReadCache
from src.mm_member.application.schemas import (
    AddMemberRequest,
    IssueItemRequest,
    SetActiveRequest,
    UpdateMemberRequest,
)
from src.mm_member.application.service import MemberAdminService
from src.mm_member.infrastructure.db_models import MemberORM

router = APIRouter(prefix="/admin/members", tags=["admin-members"])

_service = MemberAdminService()


@router.get("")
async def list_members(
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    members = await _service.list_members(db)
    return success_response([m.model_dump() for m in members], request)


@router.post("", status_code=status.HTTP_201_CREATED)
async def add_member(
    body: AddMemberRequest,
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    request: Request,
) -> ApiResponse:
    data = await _service.add_member(db, cache, body)
    return success_response(
        data.model_dump(), request, message="Member created with default password"
    )


@router.patch("/{member_id}")
async def update_member(
    member_id: str,
    body: UpdateMemberRequest,
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_member(db, cache, member_id, body)
    return success_response(data.model_dump(), request)


@router.put("/{member_id}/active")
async def set_active(
    member_id: str,
    body: SetActiveRequest,
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    request: Request,
) -> ApiResponse:
    data = await _service.set_active(db, cache, member_id, body.is_active)
    message = "Member activated" if body.is_active else "Member deactivated"
    return success_response(data.model_dump(), request, message=message)


@router.put("/{member_id}/items/{item_code}")
async def set_item_issued(
    member_id: str,
    item_code: str,
    body: IssueItemRequest,
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    request: Request,
) -> ApiResponse:
    data = await _service.set_item_issued(db, cache, member_id, item_code, body.issue)
    message = "Item issued" if body.issue else "Item returned"
    return success_response(data.model_dump(), request, message=message)


@router.post("/{member_id}/reset-password")
async def reset_password(
    member_id: str,
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    default_password = await _service.reset_password(db, member_id)
    return success_response(
        {"member_id": member_id, "default_password": default_password, "is_default_password": True},
        request,
        message="Password reset; member must change it on next login",
    )

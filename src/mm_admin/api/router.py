"""Admin REST API: club config, admin role, read-cache maintenance."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_admin.application.schemas import AdminRoleRequest, ClubConfigRequest
from src.mm_admin.application.service import AdminService
from src.mm_common.database import get_db_session
from src.mm_common.response import ApiResponse, success_response
from src.mm_gateway.auth.dependencies import require_admin
from src.mm_ledger.api.dependencies import get_read_cache
from src.mm_ledger.application.service import LedgerReadService
from src.mm_ledger.domain.cache import ReadCache
from src.mm_member.infrastructure.db_models import MemberORM

router = APIRouter(prefix="/admin", tags=["admin"])

_service = AdminService()
_read_service = LedgerReadService()


@router.get("/config")
async def get_config(
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_config(db)
    return success_response(data.model_dump(), request)


@router.put("/config")
async def upsert_config(
    body: ClubConfigRequest,
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.upsert_config(db, body)
    return success_response(data.model_dump(), request, message="Configuration saved")


@router.post("/config/principal")
async def add_monthly_principal(
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.add_monthly_principal(db)
    return success_response(data.model_dump(), request, message="Total principal updated")


@router.put("/members/{member_id}/admin")
async def set_admin(
    member_id: str,
    body: AdminRoleRequest,
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.set_admin(db, member_id, body.is_admin)
    message = "Admin role granted" if body.is_admin else "Admin role revoked"
    return success_response(data.model_dump(), request, message=message)


@router.post("/cache/reload")
async def reload_cache(
    admin: Annotated[MemberORM, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    request: Request,
) -> ApiResponse:
    data = await _read_service.reload_cache(db, cache)
    return success_response(data.model_dump(), request, message="Cache reloaded")


@router.get("/cache")
async def inspect_cache(
    admin: Annotated[MemberORM, Depends(require_admin)],
    cache: Annotated[ReadCache, Depends(get_read_cache)],
    request: Request,
) -> ApiResponse:
    return success_response(cache.snapshot(), request)

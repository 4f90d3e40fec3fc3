"""Auth API router: login, change password, session.

All endpoints return ApiResponse[T]. request_id is read from
request.state (injected by RequestLogMiddleware).
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_common.database import get_db_session
from src.mm_common.response import ApiResponse, success_response
from src.mm_gateway.auth.dependencies import get_current_member
from src.mm_gateway.member.schemas import ChangePasswordRequest, LoginRequest
from src.mm_gateway.member.service import AuthService
from src.mm_member.infrastructure.db_models import MemberORM

router = APIRouter(prefix="/auth", tags=["auth"])
_service = AuthService()


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Member login by mobile number",
)
async def login(
    request: Request,
    body: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    data = await _service.login(db, body.mobile, body.password)
    return success_response(data.model_dump(), request, message="Login successful")


@router.post(
    "/change-password",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Change own password",
)
async def change_password(
    request: Request,
    body: ChangePasswordRequest,
    current_member: MemberORM = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    await _service.change_password(
        db, current_member.member_id, body.current_password, body.new_password
    )
    return success_response(None, request, message="Password changed")


@router.get(
    "/session",
    status_code=status.HTTP_200_OK,
    response_model=ApiResponse,
    summary="Current member session",
)
async def session(
    request: Request,
    current_member: MemberORM = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse:
    data = await _service.session(db, current_member.member_id)
    return success_response(data.model_dump(), request)

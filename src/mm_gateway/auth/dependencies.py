"""FastAPI dependencies: get_current_member, require_admin.

Usage in any protected router:
    from src.mm_gateway.auth.dependencies import get_current_member

    @router.get("/protected")
    async def protected(member: MemberORM = Depends(get_current_member)):
        ...
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.mm_admin.application.service import AdminService
from src.mm_common.database import get_db_session
from src.mm_common.errors import AdminRequiredError, InvalidCredentialsError, MemberInactiveError
from src.mm_gateway.auth.jwt_handler import decode_token
from src.mm_member.infrastructure.db_models import MemberORM

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)

_admin_service = AdminService()


async def get_current_member(
    token: str = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db_session),
) -> MemberORM:
    """Validate the Bearer token and return the member row.

    Raises HTTP 401 if the token is missing, invalid, expired, or names an
    unknown member; 403 (MemberInactiveError) if the member is deactivated.
    """
    try:
        payload = decode_token(token)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(MemberORM).where(MemberORM.member_id == payload["sub"]))
    member = result.scalar_one_or_none()
    if member is None:
        raise _CREDENTIALS_EXCEPTION

    if not member.is_active:
        raise MemberInactiveError()

    return member


async def require_admin(
    current_member: MemberORM = Depends(get_current_member),
    db: AsyncSession = Depends(get_db_session),
) -> MemberORM:
    """Admin role is membership of club_config.admin_member_ids, checked live."""
    if not await _admin_service.is_admin(db, current_member.member_id):
        raise AdminRequiredError()
    return current_member

"""Member authentication: login, change password, session lookup.

Login and wrong-password both raise InvalidCredentialsError so the response
does not reveal which mobile numbers are registered.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.mm_admin.application.service import AdminService
from src.mm_common.errors import (
    InvalidCredentialsError,
    MemberInactiveError,
    MemberNotFoundError,
    PasswordMismatchError,
)
from src.mm_gateway.auth.jwt_handler import create_access_token
from src.mm_gateway.auth.password import hash_password, verify_password
from src.mm_gateway.member.schemas import LoginResponse, SessionInfo
from src.mm_member.domain.repository import MemberRepositoryProtocol
from src.mm_member.infrastructure.persistence import MemberRepository

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(
        self,
        member_repo: MemberRepositoryProtocol | None = None,
        admin_service: AdminService | None = None,
    ) -> None:
        self._members: MemberRepositoryProtocol = member_repo or MemberRepository()
        self._admin = admin_service or AdminService(self._members)

    async def login(self, db: AsyncSession, mobile: str, password: str) -> LoginResponse:
        creds = await self._members.get_credentials_by_mobile(db, mobile)
        if creds is None or not verify_password(password, creds.password_hash):
            logger.info("Failed login for mobile %s", mobile)
            raise InvalidCredentialsError()
        if not creds.is_active:
            raise MemberInactiveError()

        session = await self.session(db, creds.member_id)
        token = create_access_token(
            creds.member_id,
            is_admin=session.is_admin,
            is_default_password=creds.is_default_password,
        )
        return LoginResponse(
            access_token=token,
            expires_in=settings.JWT_EXPIRE_MINUTES * 60,
            member=session,
        )

    async def change_password(
        self, db: AsyncSession, member_id: str, current_password: str, new_password: str
    ) -> None:
        creds = await self._members.get_credentials(db, member_id)
        if creds is None:
            raise MemberNotFoundError(member_id)
        if not verify_password(current_password, creds.password_hash):
            raise InvalidCredentialsError()
        if current_password == new_password:
            raise PasswordMismatchError("New password must differ from the current one")

        try:
            await self._members.set_password(
                db, member_id, hash_password(new_password), is_default=False
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Member %s changed password", member_id)

    async def session(self, db: AsyncSession, member_id: str) -> SessionInfo:
        member = await self._members.get_member(db, member_id)
        if member is None:
            raise MemberNotFoundError(member_id)
        return SessionInfo(
            member_id=member.member_id,
            name=member.name,
            mobile=member.mobile,
            is_admin=await self._admin.is_admin(db, member_id),
            is_default_password=member.is_default_password,
        )

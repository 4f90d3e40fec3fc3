"""SQLAlchemy ORM model for the members table.

Used for table creation at startup and for the auth dependency lookup;
repository queries are raw SQL in persistence.py and must agree with it.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, String, func
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from src.mm_common.database import Base


class MemberORM(Base):
    __tablename__ = "members"

    member_id: Mapped[str] = mapped_column(String(16), primary_key=True)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    mobile: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_default_password: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    # item ids (items.id) held by this member; items.member_ids is the reverse side
    item_ids: Mapped[list[str]] = mapped_column(
        ARRAY(String(36)), nullable=False, server_default="{}"
    )
    transaction_ids: Mapped[list[str]] = mapped_column(
        ARRAY(String(36)), nullable=False, server_default="{}"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

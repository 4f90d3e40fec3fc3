"""SQLAlchemy ORM model for the single-row club_config table.

Created by create_tables() at startup; queries go through raw SQL in
mm_admin.application.service.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from src.mm_common.database import Base


class ClubConfigORM(Base):
    __tablename__ = "club_config"
    __table_args__ = (CheckConstraint("id = 1", name="ck_club_config_single_row"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=1)
    admin_member_ids: Mapped[list[str]] = mapped_column(
        ARRAY(String(16)), nullable=False, server_default="{}"
    )
    interest_per_month: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    default_principal_amount: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    current_total_principal_amount: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("0")
    )
    date_of_emi: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text("16")
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("NOW()")
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=text("NOW()")
    )

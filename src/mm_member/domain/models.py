"""Domain models for mm_member: pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Member:
    member_id: str                   # 5-digit code, also the JWT subject
    name: str
    mobile: str
    item_ids: list[str] = field(default_factory=list)
    transaction_ids: list[str] = field(default_factory=list)
    is_active: bool = True
    is_default_password: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def total_items_issued(self) -> int:
        return len(self.item_ids)


@dataclass
class MemberCredentials:
    member_id: str
    mobile: str
    password_hash: str
    is_active: bool
    is_default_password: bool

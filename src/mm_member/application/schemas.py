"""Pydantic schemas for admin member management."""

from pydantic import BaseModel, Field, model_validator

from src.mm_member.domain.models import Member


class NewItemRequest(BaseModel):
    item_code: str = Field(..., min_length=1, max_length=32)
    item_name: str = Field(..., min_length=1, max_length=128)
    current_principal_amount: int = Field(0, ge=0)


class AddMemberRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    mobile: str = Field(..., min_length=1, max_length=20)
    existing_item_codes: list[str] = Field(default_factory=list)
    new_items: list[NewItemRequest] = Field(default_factory=list)

    @model_validator(mode="after")
    def no_duplicate_codes(self) -> "AddMemberRequest":
        codes = self.existing_item_codes + [i.item_code for i in self.new_items]
        if len(codes) != len(set(codes)):
            raise ValueError("item codes must be unique")
        return self


class UpdateMemberRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    mobile: str | None = Field(None, min_length=1, max_length=20)


class SetActiveRequest(BaseModel):
    is_active: bool


class IssueItemRequest(BaseModel):
    issue: bool = Field(..., description="True issues the item, False returns it")


class MemberResponse(BaseModel):
    member_id: str
    name: str
    mobile: str
    item_ids: list[str]
    total_items_issued: int
    is_active: bool
    is_default_password: bool
    created_at: str | None

    @classmethod
    def from_domain(cls, member: Member) -> "MemberResponse":
        return cls(
            member_id=member.member_id,
            name=member.name,
            mobile=member.mobile,
            item_ids=list(member.item_ids),
            total_items_issued=member.total_items_issued,
            is_active=member.is_active,
            is_default_password=member.is_default_password,
            created_at=member.created_at.isoformat() if member.created_at else None,
        )


class AddMemberResponse(BaseModel):
    member: MemberResponse
    default_password: str


class IssueItemResponse(BaseModel):
    member_id: str
    item_code: str
    member_item_ids: list[str]
    item_member_ids: list[str]

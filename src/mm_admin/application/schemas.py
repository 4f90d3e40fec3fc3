"""Pydantic schemas for mm_admin API."""

from pydantic import BaseModel, Field

from src.mm_common.amounts import rupees_to_display


class ClubConfigRequest(BaseModel):
    interest_per_month: int = Field(..., ge=0)
    default_principal_amount: int = Field(..., ge=0)
    current_total_principal_amount: int = Field(0, ge=0)
    date_of_emi: int = Field(16, ge=1, le=31)


class ClubConfigResponse(BaseModel):
    admin_member_ids: list[str]
    interest_per_month: int
    default_principal_amount: int
    current_total_principal_amount: int
    current_total_principal_display: str
    date_of_emi: int

    @classmethod
    def from_row(cls, row: object) -> "ClubConfigResponse":
        total = row.current_total_principal_amount  # type: ignore[attr-defined]
        return cls(
            admin_member_ids=list(row.admin_member_ids or []),  # type: ignore[attr-defined]
            interest_per_month=row.interest_per_month,  # type: ignore[attr-defined]
            default_principal_amount=row.default_principal_amount,  # type: ignore[attr-defined]
            current_total_principal_amount=total,
            current_total_principal_display=rupees_to_display(total),
            date_of_emi=row.date_of_emi,  # type: ignore[attr-defined]
        )


class AdminRoleRequest(BaseModel):
    is_admin: bool

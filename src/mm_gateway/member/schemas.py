"""Pydantic request/response schemas for mm_gateway auth endpoints."""

from pydantic import BaseModel, Field, model_validator

from src.mm_gateway.auth.password import MIN_PASSWORD_LENGTH


class LoginRequest(BaseModel):
    mobile: str = Field(..., min_length=1, max_length=20)
    password: str = Field(..., min_length=1)


class SessionInfo(BaseModel):
    member_id: str
    name: str
    mobile: str
    is_admin: bool
    is_default_password: bool


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 3600
    member: SessionInfo


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH, max_length=128)
    verify_password: str

    @model_validator(mode="after")
    def passwords_match(self) -> "ChangePasswordRequest":
        if self.new_password != self.verify_password:
            raise ValueError("new_password and verify_password do not match")
        return self

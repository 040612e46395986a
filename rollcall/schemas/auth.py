"""Authentication schemas."""
from typing import Optional
from pydantic import Field, field_validator

from rollcall.core.constants import ROLE_STUDENT
from rollcall.core.sanitization import normalize_email, sanitize_name
from rollcall.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)
    rule: int = ROLE_STUDENT
    student_id: Optional[str] = Field(None, max_length=50)

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: str) -> str:
        return sanitize_name(v)

    @field_validator('email')
    @classmethod
    def normalize_email_field(cls, v: str) -> str:
        return normalize_email(v)


class LoginRequest(CamelModel):
    email: str = Field(..., min_length=1, max_length=254)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator('email')
    @classmethod
    def normalize_email_field(cls, v: str) -> str:
        return v.strip().lower()


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, max_length=200)
    photo_url: Optional[str] = Field(None, max_length=500)

    @field_validator('name')
    @classmethod
    def sanitize_name_field(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            return sanitize_name(v)
        return v


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=1, max_length=128)


class UserOut(CamelModel):
    id: int
    name: str
    email: str
    rule: int
    student_id: Optional[str] = None
    photo_url: Optional[str] = None
    token: Optional[str] = None

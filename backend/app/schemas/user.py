import uuid
from typing import Optional

from pydantic import BaseModel, EmailStr, field_validator

from app.schemas.common import UtcDateTime
from app.utils.positions import validate_positions

VALID_ROLES = ("staff", "supervisor", "manager")


class UserOut(BaseModel):
    id: uuid.UUID
    username: str
    email: str
    role: str
    first_name: Optional[str]
    last_name: Optional[str]
    phone: Optional[str]
    national_number: Optional[str]
    address: Optional[str]
    iban: Optional[str]
    hourly_rate: float
    positions: list[str]
    is_active: bool
    created_at: UtcDateTime

    model_config = {"from_attributes": True}


class ProfileUpdate(BaseModel):
    """Fields any user may change on their own profile."""
    username: str
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    national_number: Optional[str] = None
    address: Optional[str] = None
    iban: Optional[str] = None
    positions: Optional[list[str]] = None

    @field_validator("positions")
    @classmethod
    def keep_known_positions(cls, v: list[str] | None) -> list[str] | None:
        return None if v is None else validate_positions(v)


class UserUpdate(ProfileUpdate):
    """Manager update: profile fields plus role, rate and activation."""
    role: str
    hourly_rate: float = 0
    is_active: Optional[bool] = None

    @field_validator("role")
    @classmethod
    def known_role(cls, v: str) -> str:
        if v not in VALID_ROLES:
            raise ValueError(f"Invalid role. Allowed: {', '.join(VALID_ROLES)}")
        return v

    @field_validator("hourly_rate")
    @classmethod
    def non_negative_rate(cls, v: float) -> float:
        if v < 0:
            raise ValueError("Hourly rate cannot be negative")
        return v

import uuid
from datetime import date as Date, time as Time
from typing import Optional

from pydantic import BaseModel, field_validator

from app.schemas.common import UtcDateTime
from app.utils.positions import ALL_POSITIONS


def _check_position(v: str) -> str:
    if v not in ALL_POSITIONS:
        raise ValueError(f"Position must be one of: {', '.join(ALL_POSITIONS)}")
    return v


class ShiftCreate(BaseModel):
    title: str
    date: Date
    start_time: Time
    end_time: Time

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Title must not be empty")
        return v.strip()


class ShiftUpdate(ShiftCreate):
    pass


class ShiftOut(BaseModel):
    id: uuid.UUID
    title: str
    date: Date
    start_time: Time
    end_time: Time
    created_at: UtcDateTime

    model_config = {"from_attributes": True}


class ShiftAssignmentIn(BaseModel):
    """Staff member listed inside a bulk-created shift."""
    user_id: uuid.UUID
    position: str
    is_supervisor: bool = False
    individual_start_time: Optional[Time] = None
    individual_end_time: Optional[Time] = None

    @field_validator("position")
    @classmethod
    def known_position(cls, v: str) -> str:
        return _check_position(v)


class ShiftWithStaffCreate(ShiftCreate):
    assigned_users: list[ShiftAssignmentIn] = []


class MultipleShiftCreate(BaseModel):
    shifts: list[ShiftWithStaffCreate]

    @field_validator("shifts")
    @classmethod
    def not_empty(cls, v: list) -> list:
        if not v:
            raise ValueError("At least one shift is required")
        return v


class AssignRequest(BaseModel):
    user_id: uuid.UUID
    shift_id: uuid.UUID
    position: str
    is_supervisor: bool = False

    @field_validator("position")
    @classmethod
    def known_position(cls, v: str) -> str:
        return _check_position(v)


class UnassignRequest(BaseModel):
    user_id: uuid.UUID
    shift_id: uuid.UUID


class PersonnelMember(BaseModel):
    user_id: uuid.UUID
    is_supervisor: bool = False
    individual_start_time: Optional[Time] = None
    individual_end_time: Optional[Time] = None


class PersonnelUpdate(BaseModel):
    """Position -> staff list, e.g. {"bar": [...], "hot": [...]}."""
    personnel: dict[str, list[PersonnelMember]]

    @field_validator("personnel")
    @classmethod
    def known_positions(cls, v: dict) -> dict:
        for position in v:
            _check_position(position)
        return v


class PersonnelUpdateResult(BaseModel):
    added: int
    updated: int
    removed: int
    kept_with_hours: int


class AssignmentOut(BaseModel):
    """A UserShift joined with its user."""
    id: uuid.UUID
    user_id: uuid.UUID
    shift_id: uuid.UUID
    username: str
    email: str
    role: str
    position: Optional[str]
    category: Optional[str]
    is_supervisor: bool
    individual_start_time: Optional[Time]
    individual_end_time: Optional[Time]
    clock_in: Optional[UtcDateTime]
    clock_out: Optional[UtcDateTime]
    validated: bool
    hours_worked: Optional[float]


class UserShiftOut(BaseModel):
    """A UserShift joined with its shift (a user's own planning)."""
    user_shift_id: uuid.UUID
    shift_id: uuid.UUID
    title: str
    date: Date
    start_time: Time
    end_time: Time
    position: Optional[str]
    is_supervisor: bool
    individual_start_time: Optional[Time]
    individual_end_time: Optional[Time]
    clock_in: Optional[UtcDateTime]
    clock_out: Optional[UtcDateTime]
    validated: bool


class ShiftStatusOut(BaseModel):
    shift_id: uuid.UUID
    status: str  # upcoming | pending | validated
    in_progress: bool
    validated_count: int
    total_count: int


class ShiftOverviewOut(ShiftOut):
    """Shift with its staff grouped by position and its validation status."""
    status: str
    in_progress: bool
    validated_count: int
    total_count: int
    personnel: dict[str, list[AssignmentOut]]

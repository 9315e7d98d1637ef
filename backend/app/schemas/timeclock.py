import uuid
from datetime import date as Date, time as Time
from typing import Optional

from pydantic import BaseModel, model_validator

from app.schemas.common import UtcDateTime


class ClockRequest(BaseModel):
    shift_id: uuid.UUID


class ValidateRequest(BaseModel):
    user_shift_id: uuid.UUID
    comment: Optional[str] = None


class ValidateShiftRequest(BaseModel):
    shift_id: uuid.UUID
    comment: Optional[str] = None


class UpdateHoursRequest(BaseModel):
    user_shift_id: uuid.UUID
    clock_in: UtcDateTime
    clock_out: UtcDateTime
    reason: Optional[str] = None

    @model_validator(mode="after")
    def clock_out_after_clock_in(self) -> "UpdateHoursRequest":
        if self.clock_out <= self.clock_in:
            raise ValueError("clock_out must be after clock_in")
        return self


class UserShiftStateOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    shift_id: uuid.UUID
    position: Optional[str]
    clock_in: Optional[UtcDateTime]
    clock_out: Optional[UtcDateTime]
    validated: bool
    validated_by: Optional[uuid.UUID]
    validated_at: Optional[UtcDateTime]
    comment: Optional[str]

    model_config = {"from_attributes": True}


class HoursRecordOut(BaseModel):
    """One clocked assignment, flattened with its user and shift."""
    user_shift_id: uuid.UUID
    user_id: uuid.UUID
    shift_id: uuid.UUID
    username: str
    first_name: Optional[str]
    last_name: Optional[str]
    title: str
    date: Date
    start_time: Time
    end_time: Time
    position: Optional[str]
    category: Optional[str]
    is_supervisor: bool
    clock_in: Optional[UtcDateTime]
    clock_out: Optional[UtcDateTime]
    hours_worked: Optional[float]
    duration: str
    validated: bool
    validated_by: Optional[uuid.UUID]
    validated_at: Optional[UtcDateTime]
    comment: Optional[str]


class ShiftHoursGroupOut(BaseModel):
    shift_id: uuid.UUID
    title: str
    date: Date
    start_time: Time
    end_time: Time
    status: str
    validated_count: int
    total_count: int
    records: list[HoursRecordOut]


class DayHoursGroupOut(BaseModel):
    date: Date
    shifts: list[ShiftHoursGroupOut]


class SupervisorShiftOut(BaseModel):
    shift_id: uuid.UUID
    title: str
    date: Date
    start_time: Time
    end_time: Time
    status: str
    in_progress: bool


class SalaryRowOut(BaseModel):
    user_shift_id: uuid.UUID
    user_id: uuid.UUID
    username: str
    first_name: Optional[str]
    last_name: Optional[str]
    position: Optional[str]
    category: Optional[str]
    hours_worked: float
    validated: bool
    hourly_rate: Optional[float]
    salary: Optional[float]

    model_config = {"from_attributes": True}


class HoursAuditOut(BaseModel):
    id: uuid.UUID
    user_shift_id: uuid.UUID
    modified_by: Optional[uuid.UUID]
    action: str
    old_clock_in: Optional[UtcDateTime]
    new_clock_in: Optional[UtcDateTime]
    old_clock_out: Optional[UtcDateTime]
    new_clock_out: Optional[UtcDateTime]
    old_validated: Optional[bool]
    new_validated: Optional[bool]
    reason: Optional[str]
    created_at: UtcDateTime

    model_config = {"from_attributes": True}


class ValidateShiftResult(BaseModel):
    shift_id: uuid.UUID
    validated: int
    already_validated: int
    not_clocked: int

import uuid
from datetime import date as Date, time as Time
from typing import Optional

from pydantic import BaseModel

from app.schemas.common import UtcDateTime


class UnavailabilityCreate(BaseModel):
    shift_id: uuid.UUID
    reason: Optional[str] = None


class UnavailabilityOut(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    shift_id: uuid.UUID
    reason: Optional[str]
    created_at: UtcDateTime
    title: str
    date: Date
    start_time: Time
    end_time: Time


class OpenShiftOut(BaseModel):
    """A shift where someone declared themselves unavailable."""
    unavailability_id: uuid.UUID
    shift_id: uuid.UUID
    title: str
    date: Date
    start_time: Time
    end_time: Time
    position: Optional[str]
    original_user_id: uuid.UUID
    original_username: str
    reason: Optional[str]


class ReplacementCreate(BaseModel):
    shift_id: uuid.UUID
    original_user_id: uuid.UUID


class ReplacementDecision(BaseModel):
    approve: bool


class ReplacementOut(BaseModel):
    id: uuid.UUID
    shift_id: uuid.UUID
    title: str
    date: Date
    start_time: Time
    end_time: Time
    original_user_id: uuid.UUID
    original_username: str
    replacement_user_id: uuid.UUID
    replacement_username: str
    status: str
    decided_by: Optional[uuid.UUID]
    decided_at: Optional[UtcDateTime]
    created_at: UtcDateTime

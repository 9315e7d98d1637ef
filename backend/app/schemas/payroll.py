import uuid
from datetime import date
from typing import Optional

from pydantic import BaseModel


class PayrollLineOut(BaseModel):
    user_id: uuid.UUID
    username: str
    full_name: str
    hourly_rate: float
    shift_count: int
    hours_by_category: dict[str, float]
    uncategorized_hours: float
    total_hours: float
    total_salary: float

    model_config = {"from_attributes": True}


class PayrollSummaryOut(BaseModel):
    from_date: Optional[date]
    to_date: Optional[date]
    lines: list[PayrollLineOut]
    hours_by_category: dict[str, float]
    salary_by_category: dict[str, float]
    total_hours: float
    total_salary: float

    model_config = {"from_attributes": True}

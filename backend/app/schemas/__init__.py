from app.schemas.auth import Token, LoginRequest, RegisterRequest, RefreshRequest, ChangePasswordRequest
from app.schemas.user import UserOut, UserUpdate, ProfileUpdate
from app.schemas.shift import (
    ShiftCreate, ShiftUpdate, ShiftOut, MultipleShiftCreate, AssignRequest, UnassignRequest,
    PersonnelUpdate, AssignmentOut, ShiftStatusOut, ShiftOverviewOut,
)
from app.schemas.timeclock import (
    ClockRequest, ValidateRequest, ValidateShiftRequest, UpdateHoursRequest,
    HoursRecordOut, DayHoursGroupOut, SalaryRowOut, HoursAuditOut,
)
from app.schemas.availability import UnavailabilityCreate, UnavailabilityOut, ReplacementCreate, ReplacementOut
from app.schemas.payroll import PayrollLineOut, PayrollSummaryOut

__all__ = [
    "Token", "LoginRequest", "RegisterRequest", "RefreshRequest", "ChangePasswordRequest",
    "UserOut", "UserUpdate", "ProfileUpdate",
    "ShiftCreate", "ShiftUpdate", "ShiftOut", "MultipleShiftCreate", "AssignRequest", "UnassignRequest",
    "PersonnelUpdate", "AssignmentOut", "ShiftStatusOut", "ShiftOverviewOut",
    "ClockRequest", "ValidateRequest", "ValidateShiftRequest", "UpdateHoursRequest",
    "HoursRecordOut", "DayHoursGroupOut", "SalaryRowOut", "HoursAuditOut",
    "UnavailabilityCreate", "UnavailabilityOut", "ReplacementCreate", "ReplacementOut",
    "PayrollLineOut", "PayrollSummaryOut",
]

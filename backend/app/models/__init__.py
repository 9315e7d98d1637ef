from app.models.user import User
from app.models.shift import Shift, UserShift
from app.models.audit import HoursAudit
from app.models.availability import ShiftUnavailability, ShiftReplacement

__all__ = [
    "User",
    "Shift",
    "UserShift",
    "HoursAudit",
    "ShiftUnavailability",
    "ShiftReplacement",
]

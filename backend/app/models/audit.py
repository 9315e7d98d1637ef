import uuid
from datetime import datetime, timezone

from sqlalchemy import String, DateTime, Boolean, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base


class HoursAudit(Base):
    __tablename__ = "hours_audit"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_shift_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("user_shifts.id", ondelete="CASCADE"), nullable=False
    )
    modified_by: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("users.id"), nullable=True)

    action: Mapped[str] = mapped_column(String(50), nullable=False)  # VALIDATE | REVALIDATE | UPDATE_HOURS
    old_clock_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    new_clock_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    old_clock_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    new_clock_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    old_validated: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    new_validated: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

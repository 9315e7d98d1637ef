import uuid
from datetime import date, datetime, time, timezone

from sqlalchemy import String, DateTime, Boolean, ForeignKey, Time, Date, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.database import Base


class Shift(Base):
    __tablename__ = "shifts"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )

    # Relationships
    assignments: Mapped[list["UserShift"]] = relationship(
        back_populates="shift",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class UserShift(Base):
    """Assignment of one user to one shift, with clock and validation state."""

    __tablename__ = "user_shifts"
    __table_args__ = (UniqueConstraint("user_id", "shift_id", name="uq_user_shift"),)

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    shift_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("shifts.id", ondelete="CASCADE"), nullable=False)

    position: Mapped[str | None] = mapped_column(String(50), nullable=True)
    is_supervisor: Mapped[bool] = mapped_column(Boolean, default=False)
    individual_start_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    individual_end_time: Mapped[time | None] = mapped_column(Time, nullable=True)

    clock_in: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    clock_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Validation tracking
    validated: Mapped[bool] = mapped_column(Boolean, default=False)
    validated_by: Mapped[uuid.UUID | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    validated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Relationships
    user: Mapped["User"] = relationship(back_populates="assignments", foreign_keys=[user_id])
    shift: Mapped["Shift"] = relationship(back_populates="assignments")

    @property
    def has_clocked(self) -> bool:
        return self.clock_in is not None or self.clock_out is not None

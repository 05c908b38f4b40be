"""Booking session model definitions."""

from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, text

from peertutor.core.timeutils import utc_now
from peertutor.database import Base


DEFAULT_BOOKING_TOPIC = "General tutoring session"


class BookingStatus(str, Enum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"


_ACTIVE_BOOKING_PREDICATE = text("status != 'Cancelled'")


class BookingSession(Base):
    """Represents a student's reservation of a tutor's availability slot."""
    __tablename__ = "booking_sessions"
    # A slot carries at most one non-cancelled booking, enforced by the store.
    __table_args__ = (
        Index(
            "uq_booking_sessions_active_slot",
            "availability_id",
            unique=True,
            sqlite_where=_ACTIVE_BOOKING_PREDICATE,
            postgresql_where=_ACTIVE_BOOKING_PREDICATE,
        ),
    )

    id = Column(Integer, primary_key=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    tutor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    availability_id = Column(Integer, ForeignKey("tutor_availability.id", ondelete="SET NULL"))
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    topic = Column(String, nullable=False, default=DEFAULT_BOOKING_TOPIC)
    description = Column(String)
    status = Column(String, nullable=False, default=BookingStatus.PENDING.value)
    created_at = Column(DateTime, nullable=False, default=utc_now)

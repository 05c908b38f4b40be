"""Tutor availability model definitions."""

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, Integer, String
from peertutor.database import Base


class TutorAvailability(Base):
    """Represents a time window a tutor has published for booking."""
    __tablename__ = "tutor_availability"

    id = Column(Integer, primary_key=True)
    tutor_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    is_booked = Column(Boolean, nullable=False, default=False)
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurring_day = Column(String)
    recurrence_end_date = Column(Date)

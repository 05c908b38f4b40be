"""User model definitions."""

from sqlalchemy import Column, DateTime, Integer, String

from peertutor.core.timeutils import utc_now
from peertutor.database import Base


STUDENT_ROLE = "Student"
TUTOR_ROLE = "Tutor"
ADMIN_ROLE = "Admin"


class User(Base):
    """Represents a platform user as provisioned by the identity provider."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    first_name = Column(String)
    last_name = Column(String)
    role = Column(String, nullable=False, default=STUDENT_ROLE)  # Student/Tutor/Admin
    created_at = Column(DateTime, default=utc_now)

    @property
    def display_name(self) -> str:
        full_name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return full_name or self.email

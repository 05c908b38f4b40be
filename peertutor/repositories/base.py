"""
Store interfaces consumed by the booking core.

The services depend on these abstractions only, so they can run against the
SQLAlchemy repositories in production and against fakes in tests.
"""

from abc import ABC, abstractmethod
from datetime import datetime

from peertutor.models.availability import TutorAvailability
from peertutor.models.booking import BookingSession, BookingStatus
from peertutor.models.user import User


class AvailabilityStore(ABC):
    @abstractmethod
    def get(self, availability_id: int) -> TutorAvailability | None:
        """Return the slot with the given id, or None."""

    @abstractmethod
    def add(self, availability: TutorAvailability) -> TutorAvailability:
        """Persist a new slot and return it with its id assigned."""

    @abstractmethod
    def update(self, availability: TutorAvailability) -> TutorAvailability:
        """Persist changes made to an existing slot."""

    @abstractmethod
    def delete(self, availability: TutorAvailability) -> None:
        """Remove a slot."""

    @abstractmethod
    def has_overlap(self, tutor_id: int, start_time: datetime, end_time: datetime) -> bool:
        """True when another slot of the tutor intersects ``[start_time, end_time)``."""

    @abstractmethod
    def list_by_tutor(self, tutor_id: int, offset: int, limit: int) -> tuple[list[TutorAvailability], int]:
        """Page of the tutor's slots ordered by start time, plus the total count."""

    @abstractmethod
    def list_open(
        self,
        tutor_id: int,
        window_start: datetime,
        window_end: datetime,
        offset: int,
        limit: int,
    ) -> tuple[list[TutorAvailability], int]:
        """Page of unbooked slots of the tutor intersecting the window, plus the total count."""


class BookingStore(ABC):
    @abstractmethod
    def get(self, booking_id: int) -> BookingSession | None:
        """Return the booking with the given id, or None."""

    @abstractmethod
    def insert(self, booking: BookingSession) -> BookingSession:
        """
        Persist a new booking.

        Raises:
            StoreConflictException: if the store rejects the row as a duplicate
        """

    @abstractmethod
    def update(self, booking: BookingSession) -> BookingSession:
        """Persist changes made to an existing booking."""

    @abstractmethod
    def has_overlap(self, tutor_id: int, start_time: datetime, end_time: datetime) -> bool:
        """True when a non-cancelled booking of the tutor intersects ``[start_time, end_time)``."""

    @abstractmethod
    def list_by_student(
        self,
        student_id: int,
        offset: int,
        limit: int,
        status: BookingStatus | None = None,
    ) -> tuple[list[BookingSession], int]:
        """Page of the student's bookings, plus the total count."""

    @abstractmethod
    def list_by_tutor(
        self,
        tutor_id: int,
        offset: int,
        limit: int,
        status: BookingStatus | None = None,
    ) -> tuple[list[BookingSession], int]:
        """Page of the tutor's bookings, plus the total count."""

    @abstractmethod
    def list_upcoming(
        self,
        user_id: int,
        is_tutor: bool,
        offset: int,
        limit: int,
    ) -> tuple[list[BookingSession], int]:
        """Page of the user's bookings that have not started yet and are still live."""


class UserDirectory(ABC):
    @abstractmethod
    def get(self, user_id: int) -> User | None:
        """Return the user with the given id, or None."""

    @abstractmethod
    def get_display_name(self, user_id: int) -> str | None:
        """Display name for the user, or None when unknown."""

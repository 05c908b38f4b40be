"""
Booking service.

Owns the booking lifecycle: creating bookings against tutor availability,
moving them through the status state machine, and keeping each slot's
``is_booked`` flag in step with the booking that holds it.

Store writes happen one after another without a shared transaction. A booking
is always inserted before its slot is flagged, so an interruption in between
leaves a pending booking next to a slot that still looks open, never a
flagged slot without a booking.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from peertutor.core.exceptions import (
    ForbiddenException,
    NotFoundException,
    StoreConflictException,
    ValidationException,
)
from peertutor.core.results import service_operation
from peertutor.core.timeutils import to_naive_utc, utc_now
from peertutor.models.availability import TutorAvailability
from peertutor.models.booking import DEFAULT_BOOKING_TOPIC, BookingSession, BookingStatus
from peertutor.models.user import ADMIN_ROLE, TUTOR_ROLE
from peertutor.repositories.base import AvailabilityStore, BookingStore, UserDirectory
from peertutor.schemas.booking import BookingFilter, BookingView, CreateBookingRequest, InstantBookingRequest
from peertutor.schemas.common import Page, PageRequest
from peertutor.services.booking_state import assert_transition, parse_status

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Actor:
    """The user performing an operation, as established by the caller."""

    user_id: int
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN_ROLE


def resolve_topic(topic: str | None) -> str:
    normalized = (topic or '').strip()
    return normalized or DEFAULT_BOOKING_TOPIC


class BookingService:
    def __init__(
        self,
        bookings: BookingStore,
        availability: AvailabilityStore,
        users: UserDirectory,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.bookings = bookings
        self.availability = availability
        self.users = users
        self.clock = clock

    @service_operation
    def create_booking(self, student_id: int, request: CreateBookingRequest) -> BookingView:
        """Book a published availability slot for a student."""
        slot = self.availability.get(request.availability_id)
        if slot is None:
            raise NotFoundException('Availability not found.')

        if slot.is_booked:
            raise ValidationException('This availability slot is already booked.')

        if slot.tutor_id != request.tutor_id:
            raise ValidationException('The selected availability slot does not belong to this tutor.')

        if self.bookings.has_overlap(slot.tutor_id, slot.start_time, slot.end_time):
            raise ValidationException('The tutor already has a booking during this time.')

        booking = BookingSession(
            student_id=student_id,
            tutor_id=slot.tutor_id,
            availability_id=slot.id,
            start_time=slot.start_time,
            end_time=slot.end_time,
            topic=resolve_topic(request.topic),
            description=request.description,
            status=BookingStatus.PENDING.value,
            created_at=self.clock(),
        )
        booking = self._insert(booking)
        self._mark_slot_booked(slot, booking)

        logger.info('Student %s booked availability %s (booking %s)', student_id, slot.id, booking.id)
        return self._to_view(booking)

    @service_operation
    def create_instant_booking(self, student_id: int, request: InstantBookingRequest) -> BookingView:
        """Book a tutor for an arbitrary window without a previously published slot."""
        start_time = to_naive_utc(request.start_time)
        end_time = to_naive_utc(request.end_time)

        if end_time <= start_time:
            raise ValidationException('End time must be after the start time.')

        if start_time <= self.clock():
            raise ValidationException('Instant bookings must start in the future.')

        if student_id == request.tutor_id:
            raise ValidationException('You cannot book a session with yourself.')

        tutor = self.users.get(request.tutor_id)
        if tutor is None or tutor.role != TUTOR_ROLE:
            raise NotFoundException('Tutor not found.')

        if self.bookings.has_overlap(request.tutor_id, start_time, end_time):
            raise ValidationException('The tutor already has a booking during this time.')

        # Open published slots in the window must be booked directly.
        if self.availability.has_overlap(request.tutor_id, start_time, end_time):
            raise ValidationException('The tutor has published availability during this time. Book that slot instead.')

        slot = self.availability.add(
            TutorAvailability(
                tutor_id=request.tutor_id,
                start_time=start_time,
                end_time=end_time,
                is_booked=False,
                is_recurring=False,
            )
        )
        booking = BookingSession(
            student_id=student_id,
            tutor_id=request.tutor_id,
            availability_id=slot.id,
            start_time=start_time,
            end_time=end_time,
            topic=resolve_topic(request.topic),
            description=request.description,
            status=BookingStatus.PENDING.value,
            created_at=self.clock(),
        )
        booking = self._insert(booking)
        self._mark_slot_booked(slot, booking)

        logger.info('Student %s created instant booking %s with tutor %s', student_id, booking.id, request.tutor_id)
        return self._to_view(booking)

    @service_operation
    def update_status(self, booking_id: int, status: str, actor: Actor | None = None) -> BookingView:
        """
        Move a booking to ``status`` if the state machine allows it.

        ``actor`` carries the caller's capability. When given, cancelling is
        limited to the booking's student and admins, and confirming or
        completing to the booking's tutor and admins. ``None`` is reserved for
        trusted internal callers.
        """
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise NotFoundException('Booking not found.')

        target = parse_status(status)
        if actor is not None:
            self._check_capability(booking, target, actor)

        current = BookingStatus(booking.status)
        assert_transition(current, target)

        if target is BookingStatus.COMPLETED and booking.end_time > self.clock():
            raise ValidationException('Cannot complete a session that has not ended yet.')

        if target is BookingStatus.CANCELLED:
            self._release_slot(booking)

        booking.status = target.value
        booking = self.bookings.update(booking)

        logger.info('Booking %s moved from %s to %s', booking.id, current.value, target.value)
        return self._to_view(booking)

    @service_operation
    def get_by_id(self, booking_id: int) -> BookingView:
        booking = self.bookings.get(booking_id)
        if booking is None:
            raise NotFoundException('Booking not found.')
        return self._to_view(booking)

    @service_operation
    def list_by_student(self, student_id: int, filters: BookingFilter) -> Page[BookingView]:
        bookings, total = self.bookings.list_by_student(
            student_id,
            offset=filters.offset,
            limit=filters.page_size,
            status=filters.status,
        )
        return self._to_page(bookings, total, filters)

    @service_operation
    def list_by_tutor(self, tutor_id: int, filters: BookingFilter) -> Page[BookingView]:
        bookings, total = self.bookings.list_by_tutor(
            tutor_id,
            offset=filters.offset,
            limit=filters.page_size,
            status=filters.status,
        )
        return self._to_page(bookings, total, filters)

    @service_operation
    def list_upcoming(self, user_id: int, is_tutor: bool, filters: PageRequest) -> Page[BookingView]:
        # The store owns the time and role predicate.
        bookings, total = self.bookings.list_upcoming(
            user_id,
            is_tutor,
            offset=filters.offset,
            limit=filters.page_size,
        )
        return self._to_page(bookings, total, filters)

    def _check_capability(self, booking: BookingSession, target: BookingStatus, actor: Actor) -> None:
        if actor.is_admin:
            return

        if target is BookingStatus.CANCELLED and actor.user_id != booking.student_id:
            raise ForbiddenException('You do not have permission to cancel this booking.')

        if target in (BookingStatus.CONFIRMED, BookingStatus.COMPLETED) and actor.user_id != booking.tutor_id:
            raise ForbiddenException('You do not have permission to update this booking status.')

    def _insert(self, booking: BookingSession) -> BookingSession:
        try:
            return self.bookings.insert(booking)
        except StoreConflictException as exc:
            raise ValidationException('This availability slot has just been booked by someone else.') from exc

    def _mark_slot_booked(self, slot: TutorAvailability, booking: BookingSession) -> None:
        slot.is_booked = True
        try:
            self.availability.update(slot)
        except Exception:
            logger.error(
                'Booking %s was saved but availability %s could not be marked as booked',
                booking.id,
                slot.id,
            )
            raise

    def _release_slot(self, booking: BookingSession) -> None:
        if booking.availability_id is None:
            return

        slot = self.availability.get(booking.availability_id)
        if slot is None:
            logger.warning('Availability %s for booking %s no longer exists', booking.availability_id, booking.id)
            return

        slot.is_booked = False
        self.availability.update(slot)

    def _display_name(self, user_id: int, cache: dict[int, str | None]) -> str | None:
        if user_id in cache:
            return cache[user_id]

        try:
            name = self.users.get_display_name(user_id)
        except Exception:
            logger.warning('Could not resolve display name for user %s', user_id, exc_info=True)
            name = None

        cache[user_id] = name
        return name

    def _to_view(self, booking: BookingSession, cache: dict[int, str | None] | None = None) -> BookingView:
        names = {} if cache is None else cache
        view = BookingView.model_validate(booking)
        return view.model_copy(
            update={
                'student_name': self._display_name(booking.student_id, names),
                'tutor_name': self._display_name(booking.tutor_id, names),
            }
        )

    def _to_page(self, bookings: list[BookingSession], total: int, filters: PageRequest) -> Page[BookingView]:
        names: dict[int, str | None] = {}
        return Page[BookingView](
            items=[self._to_view(booking, names) for booking in bookings],
            total_count=total,
            page=filters.page,
            page_size=filters.page_size,
        )

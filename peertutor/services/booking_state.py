"""Booking status state machine."""

from peertutor.core.exceptions import ValidationException
from peertutor.models.booking import BookingStatus

BOOKING_TRANSITIONS: dict[BookingStatus, frozenset[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

VALID_STATUS_NAMES = ', '.join(status.value for status in BookingStatus)


def parse_status(value: str | BookingStatus | None) -> BookingStatus:
    """Match a status name case-insensitively against the known statuses."""
    if isinstance(value, BookingStatus):
        return value

    normalized = (value or '').strip().lower()
    for status in BookingStatus:
        if status.value.lower() == normalized:
            return status

    raise ValidationException(f'Invalid booking status. Valid values are: {VALID_STATUS_NAMES}.')


def is_terminal(status: BookingStatus) -> bool:
    return not BOOKING_TRANSITIONS[status]


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return target in BOOKING_TRANSITIONS[current]


def assert_transition(current: BookingStatus, target: BookingStatus) -> None:
    if is_terminal(current):
        raise ValidationException(f'Cannot change the status of a {current.value.lower()} booking.')
    if not can_transition(current, target):
        raise ValidationException(f'Invalid booking transition: {current.value} -> {target.value}.')

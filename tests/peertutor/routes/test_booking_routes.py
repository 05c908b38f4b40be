from datetime import datetime

import pytest
from fastapi import HTTPException

from peertutor.core.results import ErrorKind, ServiceResult
from peertutor.models.booking import BookingStatus
from peertutor.routes.booking_routes import (
    create_booking,
    get_booking,
    list_student_bookings,
    list_upcoming_bookings,
    update_booking_status,
)
from peertutor.routes.common import unwrap
from peertutor.schemas.booking import CreateBookingRequest, UpdateBookingStatusRequest

SLOT_START = datetime(2026, 3, 2, 9, 0)


@pytest.mark.parametrize(
    ('kind', 'status_code'),
    [
        (ErrorKind.VALIDATION, 400),
        (ErrorKind.FORBIDDEN, 403),
        (ErrorKind.NOT_FOUND, 404),
        (ErrorKind.UNEXPECTED, 500),
    ],
)
def test_unwrap_maps_error_kinds_to_status_codes(kind: ErrorKind, status_code: int) -> None:
    with pytest.raises(HTTPException) as exception_info:
        unwrap(ServiceResult.failure(kind, 'Nope.'))

    assert exception_info.value.status_code == status_code
    assert exception_info.value.detail == 'Nope.'


def test_unwrap_returns_successful_value() -> None:
    assert unwrap(ServiceResult.success(5)) == 5


def test_create_booking_returns_pending_booking(booking_service, student, tutor, make_slot) -> None:
    slot = make_slot(tutor.id, SLOT_START)

    booking = create_booking(
        data=CreateBookingRequest(tutor_id=tutor.id, availability_id=slot.id),
        current_user=student,
        service=booking_service,
    )

    assert booking.status is BookingStatus.PENDING
    assert booking.student_id == student.id


def test_create_booking_rejects_booked_slot_with_400(booking_service, student, tutor, make_slot) -> None:
    slot = make_slot(tutor.id, SLOT_START, is_booked=True)

    with pytest.raises(HTTPException) as exception_info:
        create_booking(
            data=CreateBookingRequest(tutor_id=tutor.id, availability_id=slot.id),
            current_user=student,
            service=booking_service,
        )

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'This availability slot is already booked.'


def test_get_booking_rejects_unrelated_user(booking_service, student, other_student, tutor, make_slot, make_booking) -> None:
    booking = make_booking(make_slot(tutor.id, SLOT_START), student.id)

    with pytest.raises(HTTPException) as exception_info:
        get_booking(booking_id=booking.id, current_user=other_student, service=booking_service)

    assert exception_info.value.status_code == 403
    assert exception_info.value.detail == 'You do not have permission to view this booking.'


@pytest.mark.parametrize('viewer', ['student', 'tutor', 'admin'])
def test_get_booking_allows_participants_and_admins(
    request,
    booking_service,
    student,
    tutor,
    admin,
    make_slot,
    make_booking,
    viewer: str,
) -> None:
    booking = make_booking(make_slot(tutor.id, SLOT_START), student.id)

    view = get_booking(booking_id=booking.id, current_user=request.getfixturevalue(viewer), service=booking_service)

    assert view.id == booking.id


def test_get_booking_returns_404_when_missing(booking_service, admin) -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_booking(booking_id=999, current_user=admin, service=booking_service)

    assert exception_info.value.status_code == 404
    assert exception_info.value.detail == 'Booking not found.'


def test_update_booking_status_requires_status(booking_service, tutor) -> None:
    with pytest.raises(HTTPException) as exception_info:
        update_booking_status(
            booking_id=1,
            data=UpdateBookingStatusRequest(status='   '),
            current_user=tutor,
            service=booking_service,
        )

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == 'Status is required.'


def test_update_booking_status_forbids_student_confirmation(
    booking_service,
    student,
    tutor,
    make_slot,
    make_booking,
) -> None:
    booking = make_booking(make_slot(tutor.id, SLOT_START), student.id)

    with pytest.raises(HTTPException) as exception_info:
        update_booking_status(
            booking_id=booking.id,
            data=UpdateBookingStatusRequest(status='Confirmed'),
            current_user=student,
            service=booking_service,
        )

    assert exception_info.value.status_code == 403
    assert exception_info.value.detail == 'You do not have permission to update this booking status.'


def test_update_booking_status_lets_tutor_confirm(booking_service, student, tutor, make_slot, make_booking) -> None:
    booking = make_booking(make_slot(tutor.id, SLOT_START), student.id)

    view = update_booking_status(
        booking_id=booking.id,
        data=UpdateBookingStatusRequest(status='confirmed'),
        current_user=tutor,
        service=booking_service,
    )

    assert view.status is BookingStatus.CONFIRMED


def test_list_student_bookings_returns_page(booking_service, student, tutor, make_slot, make_booking) -> None:
    make_booking(make_slot(tutor.id, SLOT_START), student.id)

    page = list_student_bookings(
        page=1,
        page_size=10,
        booking_status=None,
        current_user=student,
        service=booking_service,
    )

    assert page.total_count == 1
    assert page.items[0].student_name == 'Sam Student'


def test_list_upcoming_bookings_uses_caller_role(booking_service, student, tutor, make_slot, make_booking) -> None:
    booking = make_booking(make_slot(tutor.id, SLOT_START), student.id)

    tutor_page = list_upcoming_bookings(page=1, page_size=10, current_user=tutor, service=booking_service)
    student_page = list_upcoming_bookings(page=1, page_size=10, current_user=student, service=booking_service)

    assert [item.id for item in tutor_page.items] == [booking.id]
    assert [item.id for item in student_page.items] == [booking.id]


def test_booking_service_dependency_reports_unavailable_database(monkeypatch, db) -> None:
    from sqlalchemy.exc import OperationalError

    from peertutor.routes import common

    def fail_schema_check() -> None:
        raise OperationalError('SELECT 1', {}, Exception('connection refused'))

    monkeypatch.setattr(common, 'ensure_booking_schema', fail_schema_check)

    with pytest.raises(HTTPException) as exception_info:
        common.get_booking_service(db=db)

    assert exception_info.value.status_code == 503

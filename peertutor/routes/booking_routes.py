from fastapi import APIRouter, Depends, HTTPException, Query, status

from peertutor.auth.dependencies import actor_for, get_current_user, require_roles
from peertutor.core import config
from peertutor.models.booking import BookingStatus
from peertutor.models.user import ADMIN_ROLE, STUDENT_ROLE, TUTOR_ROLE, User
from peertutor.routes.common import get_booking_service, unwrap
from peertutor.schemas.booking import (
    BookingFilter,
    BookingView,
    CreateBookingRequest,
    InstantBookingRequest,
    UpdateBookingStatusRequest,
)
from peertutor.schemas.common import Page, PageRequest
from peertutor.services.booking_service import BookingService

router = APIRouter(tags=['bookings'])


@router.post('', response_model=BookingView, status_code=status.HTTP_201_CREATED)
def create_booking(
    data: CreateBookingRequest,
    current_user: User = Depends(require_roles(STUDENT_ROLE)),
    service: BookingService = Depends(get_booking_service),
):
    return unwrap(service.create_booking(current_user.id, data))


@router.post('/instant', response_model=BookingView, status_code=status.HTTP_201_CREATED)
def create_instant_booking(
    data: InstantBookingRequest,
    current_user: User = Depends(require_roles(STUDENT_ROLE)),
    service: BookingService = Depends(get_booking_service),
):
    return unwrap(service.create_instant_booking(current_user.id, data))


@router.get('/student', response_model=Page[BookingView])
def list_student_bookings(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1),
    booking_status: BookingStatus | None = Query(default=None, alias='status'),
    current_user: User = Depends(require_roles(STUDENT_ROLE)),
    service: BookingService = Depends(get_booking_service),
):
    filters = BookingFilter(page=page, page_size=page_size, status=booking_status)
    return unwrap(service.list_by_student(current_user.id, filters))


@router.get('/tutor', response_model=Page[BookingView])
def list_tutor_bookings(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1),
    booking_status: BookingStatus | None = Query(default=None, alias='status'),
    current_user: User = Depends(require_roles(TUTOR_ROLE)),
    service: BookingService = Depends(get_booking_service),
):
    filters = BookingFilter(page=page, page_size=page_size, status=booking_status)
    return unwrap(service.list_by_tutor(current_user.id, filters))


@router.get('/upcoming', response_model=Page[BookingView])
def list_upcoming_bookings(
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1),
    current_user: User = Depends(require_roles(STUDENT_ROLE, TUTOR_ROLE)),
    service: BookingService = Depends(get_booking_service),
):
    filters = PageRequest(page=page, page_size=page_size)
    is_tutor = current_user.role == TUTOR_ROLE
    return unwrap(service.list_upcoming(current_user.id, is_tutor, filters))


@router.get('/{booking_id}', response_model=BookingView)
def get_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service),
):
    booking = unwrap(service.get_by_id(booking_id))

    if current_user.id not in (booking.student_id, booking.tutor_id) and current_user.role != ADMIN_ROLE:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='You do not have permission to view this booking.',
        )

    return booking


@router.put('/{booking_id}/status', response_model=BookingView)
def update_booking_status(
    booking_id: int,
    data: UpdateBookingStatusRequest,
    current_user: User = Depends(require_roles(STUDENT_ROLE, TUTOR_ROLE, ADMIN_ROLE)),
    service: BookingService = Depends(get_booking_service),
):
    if not data.status.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Status is required.',
        )

    return unwrap(service.update_status(booking_id, data.status, actor=actor_for(current_user)))

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status

from peertutor.auth.dependencies import get_current_user, require_roles
from peertutor.core import config
from peertutor.core.timeutils import to_naive_utc, utc_now
from peertutor.models.user import ADMIN_ROLE, STUDENT_ROLE, TUTOR_ROLE, User
from peertutor.routes.common import get_availability_service, unwrap
from peertutor.schemas.availability import AvailabilityView, CreateAvailabilityRequest
from peertutor.schemas.common import Page, PageRequest
from peertutor.services.availability_service import AvailabilityService

router = APIRouter(tags=['availability'])


def validate_search_window(start: datetime, end: datetime) -> tuple[datetime, datetime]:
    window_start = to_naive_utc(start)
    window_end = to_naive_utc(end)

    if window_start < utc_now():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Start date cannot be in the past.',
        )

    if window_end <= window_start:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='End date must be after the start date.',
        )

    return window_start, window_end


@router.post('', response_model=AvailabilityView, status_code=status.HTTP_201_CREATED)
def add_availability(
    data: CreateAvailabilityRequest,
    current_user: User = Depends(require_roles(TUTOR_ROLE)),
    service: AvailabilityService = Depends(get_availability_service),
):
    return unwrap(service.add_availability(current_user.id, data))


@router.get('/available', response_model=Page[AvailabilityView])
def list_available_slots(
    tutor_id: int = Query(...),
    start: datetime = Query(...),
    end: datetime = Query(...),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1),
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    del current_user
    window_start, window_end = validate_search_window(start, end)
    filters = PageRequest(page=page, page_size=page_size)
    return unwrap(service.list_available_slots(tutor_id, window_start, window_end, filters))


@router.get('/tutor/{tutor_id}', response_model=Page[AvailabilityView])
def list_tutor_availability(
    tutor_id: int,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=config.DEFAULT_PAGE_SIZE, ge=1),
    current_user: User = Depends(require_roles(TUTOR_ROLE, ADMIN_ROLE, STUDENT_ROLE)),
    service: AvailabilityService = Depends(get_availability_service),
):
    if current_user.role == TUTOR_ROLE and current_user.id != tutor_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='You can only view your own availability.',
        )

    filters = PageRequest(page=page, page_size=page_size)
    return unwrap(service.list_by_tutor(tutor_id, filters))


@router.get('/{availability_id}', response_model=AvailabilityView)
def get_availability(
    availability_id: int,
    current_user: User = Depends(get_current_user),
    service: AvailabilityService = Depends(get_availability_service),
):
    del current_user
    return unwrap(service.get_by_id(availability_id))


@router.delete('/{availability_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_availability(
    availability_id: int,
    current_user: User = Depends(require_roles(TUTOR_ROLE)),
    service: AvailabilityService = Depends(get_availability_service),
):
    availability = unwrap(service.get_by_id(availability_id))

    if availability.tutor_id != current_user.id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='You can only delete your own availability slots.',
        )

    unwrap(service.delete_availability(availability_id))

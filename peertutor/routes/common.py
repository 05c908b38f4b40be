from fastapi import Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from peertutor.core.results import ErrorKind, ServiceResult
from peertutor.database import ensure_booking_schema, get_db
from peertutor.repositories.availability_repository import AvailabilityRepository
from peertutor.repositories.booking_repository import BookingRepository
from peertutor.repositories.user_repository import UserRepository
from peertutor.services.availability_service import AvailabilityService
from peertutor.services.booking_service import BookingService

ERROR_STATUS_CODES = {
    ErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def ensure_database_ready() -> None:
    try:
        ensure_booking_schema()
    except SQLAlchemyError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail='Database unavailable. Verify DATABASE_URL and database credentials.',
        ) from exc


def unwrap(result: ServiceResult):
    if result.ok:
        return result.value

    raise HTTPException(
        status_code=ERROR_STATUS_CODES[result.error.kind],
        detail=result.error.message,
    )


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    ensure_database_ready()
    return BookingService(
        bookings=BookingRepository(db),
        availability=AvailabilityRepository(db),
        users=UserRepository(db),
    )


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    ensure_database_ready()
    return AvailabilityService(availability=AvailabilityRepository(db))

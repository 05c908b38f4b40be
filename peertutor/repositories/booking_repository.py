import logging
from collections.abc import Callable
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Query, Session

from peertutor.core.exceptions import StoreConflictException
from peertutor.core.timeutils import utc_now
from peertutor.models.booking import BookingSession, BookingStatus
from peertutor.repositories.base import BookingStore

logger = logging.getLogger(__name__)

LIVE_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


class BookingRepository(BookingStore):
    def __init__(self, db: Session, clock: Callable[[], datetime] = utc_now) -> None:
        self.db = db
        self.clock = clock

    def get(self, booking_id: int) -> BookingSession | None:
        return self.db.get(BookingSession, booking_id)

    def insert(self, booking: BookingSession) -> BookingSession:
        try:
            self.db.add(booking)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise StoreConflictException(
                f'Availability {booking.availability_id} already has an active booking.'
            ) from exc
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception('Failed to insert booking for student %s', booking.student_id)
            raise
        self.db.refresh(booking)
        return booking

    def update(self, booking: BookingSession) -> BookingSession:
        try:
            self.db.add(booking)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception('Failed to update booking %s', booking.id)
            raise
        self.db.refresh(booking)
        return booking

    def has_overlap(self, tutor_id: int, start_time: datetime, end_time: datetime) -> bool:
        overlapping = self.db.query(BookingSession.id).filter(
            BookingSession.tutor_id == tutor_id,
            BookingSession.status != BookingStatus.CANCELLED.value,
            BookingSession.start_time < end_time,
            BookingSession.end_time > start_time,
        ).first()
        return overlapping is not None

    def list_by_student(
        self,
        student_id: int,
        offset: int,
        limit: int,
        status: BookingStatus | None = None,
    ) -> tuple[list[BookingSession], int]:
        query = self.db.query(BookingSession).filter(BookingSession.student_id == student_id)
        return self._page(self._with_status(query, status), offset, limit)

    def list_by_tutor(
        self,
        tutor_id: int,
        offset: int,
        limit: int,
        status: BookingStatus | None = None,
    ) -> tuple[list[BookingSession], int]:
        query = self.db.query(BookingSession).filter(BookingSession.tutor_id == tutor_id)
        return self._page(self._with_status(query, status), offset, limit)

    def list_upcoming(
        self,
        user_id: int,
        is_tutor: bool,
        offset: int,
        limit: int,
    ) -> tuple[list[BookingSession], int]:
        owner_column = BookingSession.tutor_id if is_tutor else BookingSession.student_id
        query = self.db.query(BookingSession).filter(
            owner_column == user_id,
            BookingSession.status.in_(LIVE_STATUSES),
            BookingSession.start_time > self.clock(),
        )
        total = query.count()
        bookings = query.order_by(BookingSession.start_time.asc()).offset(offset).limit(limit).all()
        return bookings, total

    @staticmethod
    def _with_status(query: Query, status: BookingStatus | None) -> Query:
        if status is None:
            return query
        return query.filter(BookingSession.status == status.value)

    @staticmethod
    def _page(query: Query, offset: int, limit: int) -> tuple[list[BookingSession], int]:
        total = query.count()
        bookings = query.order_by(BookingSession.start_time.desc()).offset(offset).limit(limit).all()
        return bookings, total

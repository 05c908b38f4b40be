import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from peertutor.models.availability import TutorAvailability
from peertutor.repositories.base import AvailabilityStore

logger = logging.getLogger(__name__)


class AvailabilityRepository(AvailabilityStore):
    def __init__(self, db: Session) -> None:
        self.db = db

    def get(self, availability_id: int) -> TutorAvailability | None:
        return self.db.get(TutorAvailability, availability_id)

    def add(self, availability: TutorAvailability) -> TutorAvailability:
        try:
            self.db.add(availability)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception('Failed to add availability for tutor %s', availability.tutor_id)
            raise
        self.db.refresh(availability)
        return availability

    def update(self, availability: TutorAvailability) -> TutorAvailability:
        try:
            self.db.add(availability)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception('Failed to update availability %s', availability.id)
            raise
        self.db.refresh(availability)
        return availability

    def delete(self, availability: TutorAvailability) -> None:
        try:
            self.db.delete(availability)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            logger.exception('Failed to delete availability %s', availability.id)
            raise

    def has_overlap(self, tutor_id: int, start_time: datetime, end_time: datetime) -> bool:
        overlapping = self.db.query(TutorAvailability.id).filter(
            TutorAvailability.tutor_id == tutor_id,
            TutorAvailability.start_time < end_time,
            TutorAvailability.end_time > start_time,
        ).first()
        return overlapping is not None

    def list_by_tutor(self, tutor_id: int, offset: int, limit: int) -> tuple[list[TutorAvailability], int]:
        query = self.db.query(TutorAvailability).filter(TutorAvailability.tutor_id == tutor_id)
        total = query.count()
        slots = query.order_by(TutorAvailability.start_time.asc()).offset(offset).limit(limit).all()
        return slots, total

    def list_open(
        self,
        tutor_id: int,
        window_start: datetime,
        window_end: datetime,
        offset: int,
        limit: int,
    ) -> tuple[list[TutorAvailability], int]:
        query = self.db.query(TutorAvailability).filter(
            TutorAvailability.tutor_id == tutor_id,
            TutorAvailability.is_booked.is_(False),
            TutorAvailability.start_time < window_end,
            TutorAvailability.end_time > window_start,
        )
        total = query.count()
        slots = query.order_by(TutorAvailability.start_time.asc()).offset(offset).limit(limit).all()
        return slots, total

import os
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

os.environ.setdefault('DATABASE_URL', 'sqlite:///:memory:')

from peertutor.database import Base  # noqa: E402
from peertutor.models.availability import TutorAvailability  # noqa: E402
from peertutor.models.booking import BookingSession, BookingStatus  # noqa: E402
from peertutor.models.user import ADMIN_ROLE, STUDENT_ROLE, TUTOR_ROLE, User  # noqa: E402
from peertutor.repositories.availability_repository import AvailabilityRepository  # noqa: E402
from peertutor.repositories.booking_repository import BookingRepository  # noqa: E402
from peertutor.repositories.user_repository import UserRepository  # noqa: E402
from peertutor.services.availability_service import AvailabilityService  # noqa: E402
from peertutor.services.booking_service import BookingService  # noqa: E402

NOW = datetime(2026, 3, 2, 8, 0)
TABLES = [User.__table__, TutorAvailability.__table__, BookingSession.__table__]


def frozen_clock() -> datetime:
    return NOW


@pytest.fixture
def db():
    engine = create_engine('sqlite:///:memory:')
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine, tables=TABLES)

    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine, tables=list(reversed(TABLES)))


def _add_user(db, email: str, first_name: str, last_name: str, role: str) -> User:
    user = User(email=email, first_name=first_name, last_name=last_name, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def student(db) -> User:
    return _add_user(db, 'sam@example.edu', 'Sam', 'Student', STUDENT_ROLE)


@pytest.fixture
def other_student(db) -> User:
    return _add_user(db, 'olive@example.edu', 'Olive', 'Other', STUDENT_ROLE)


@pytest.fixture
def tutor(db) -> User:
    return _add_user(db, 'tina@example.edu', 'Tina', 'Tutor', TUTOR_ROLE)


@pytest.fixture
def other_tutor(db) -> User:
    return _add_user(db, 'theo@example.edu', 'Theo', 'Teacher', TUTOR_ROLE)


@pytest.fixture
def admin(db) -> User:
    return _add_user(db, 'ada@example.edu', 'Ada', 'Admin', ADMIN_ROLE)


@pytest.fixture
def make_slot(db):
    def factory(tutor_id: int, start_time: datetime, minutes: int = 60, is_booked: bool = False) -> TutorAvailability:
        slot = TutorAvailability(
            tutor_id=tutor_id,
            start_time=start_time,
            end_time=start_time + timedelta(minutes=minutes),
            is_booked=is_booked,
        )
        db.add(slot)
        db.commit()
        db.refresh(slot)
        return slot

    return factory


@pytest.fixture
def make_booking(db):
    def factory(
        slot: TutorAvailability,
        student_id: int,
        status: BookingStatus = BookingStatus.PENDING,
        flag_slot: bool = True,
    ) -> BookingSession:
        booking = BookingSession(
            student_id=student_id,
            tutor_id=slot.tutor_id,
            availability_id=slot.id,
            start_time=slot.start_time,
            end_time=slot.end_time,
            topic='Algebra review',
            status=status.value,
            created_at=NOW,
        )
        slot.is_booked = flag_slot and status is not BookingStatus.CANCELLED
        db.add_all([booking, slot])
        db.commit()
        db.refresh(booking)
        return booking

    return factory


@pytest.fixture
def booking_service(db) -> BookingService:
    return BookingService(
        bookings=BookingRepository(db, clock=frozen_clock),
        availability=AvailabilityRepository(db),
        users=UserRepository(db),
        clock=frozen_clock,
    )


@pytest.fixture
def availability_service(db) -> AvailabilityService:
    return AvailabilityService(availability=AvailabilityRepository(db), clock=frozen_clock)

from datetime import datetime

from pydantic import BaseModel, field_validator

from peertutor.models.booking import BookingStatus
from peertutor.schemas.common import PageRequest

MAX_TOPIC_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 1000


def _normalize_optional_text(value: str | None, max_length: int, field_name: str) -> str | None:
    if value is None:
        return None

    normalized = value.strip()
    if not normalized:
        return None

    if len(normalized) > max_length:
        raise ValueError(f'{field_name} must be {max_length} characters or fewer.')

    return normalized


class CreateBookingRequest(BaseModel):
    tutor_id: int
    availability_id: int
    topic: str | None = None
    description: str | None = None

    @field_validator('topic')
    @classmethod
    def validate_topic(cls, value: str | None) -> str | None:
        return _normalize_optional_text(value, MAX_TOPIC_LENGTH, 'Topic')

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return _normalize_optional_text(value, MAX_DESCRIPTION_LENGTH, 'Description')


class InstantBookingRequest(BaseModel):
    tutor_id: int
    start_time: datetime
    end_time: datetime
    topic: str | None = None
    description: str | None = None

    @field_validator('topic')
    @classmethod
    def validate_topic(cls, value: str | None) -> str | None:
        return _normalize_optional_text(value, MAX_TOPIC_LENGTH, 'Topic')

    @field_validator('description')
    @classmethod
    def validate_description(cls, value: str | None) -> str | None:
        return _normalize_optional_text(value, MAX_DESCRIPTION_LENGTH, 'Description')


class UpdateBookingStatusRequest(BaseModel):
    status: str


class BookingFilter(PageRequest):
    status: BookingStatus | None = None


class BookingView(BaseModel):
    id: int
    student_id: int
    tutor_id: int
    availability_id: int | None = None
    start_time: datetime
    end_time: datetime
    topic: str
    description: str | None = None
    status: BookingStatus
    created_at: datetime
    student_name: str | None = None
    tutor_name: str | None = None

    class Config:
        from_attributes = True

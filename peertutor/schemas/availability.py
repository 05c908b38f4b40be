from datetime import date, datetime

from pydantic import BaseModel, field_validator

WEEKDAYS = ('monday', 'tuesday', 'wednesday', 'thursday', 'friday', 'saturday', 'sunday')


class CreateAvailabilityRequest(BaseModel):
    start_time: datetime
    end_time: datetime
    is_recurring: bool = False
    recurring_day: str | None = None
    recurrence_end_date: date | None = None

    @field_validator('recurring_day')
    @classmethod
    def validate_recurring_day(cls, value: str | None) -> str | None:
        if value is None:
            return None

        normalized = value.strip().lower()
        if not normalized:
            return None
        if normalized not in WEEKDAYS:
            raise ValueError('Recurring day must be a weekday name.')

        return normalized.capitalize()


class AvailabilityView(BaseModel):
    id: int
    tutor_id: int
    start_time: datetime
    end_time: datetime
    is_booked: bool
    is_recurring: bool = False
    recurring_day: str | None = None
    recurrence_end_date: date | None = None

    class Config:
        from_attributes = True

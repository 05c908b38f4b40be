import logging
from collections.abc import Callable
from datetime import datetime

from peertutor.core.exceptions import NotFoundException, ValidationException
from peertutor.core.results import service_operation
from peertutor.core.timeutils import to_naive_utc, utc_now
from peertutor.models.availability import TutorAvailability
from peertutor.repositories.base import AvailabilityStore
from peertutor.schemas.availability import AvailabilityView, CreateAvailabilityRequest
from peertutor.schemas.common import Page, PageRequest

logger = logging.getLogger(__name__)


class AvailabilityService:
    """Slot management for tutors. Ownership checks are left to the caller."""

    def __init__(self, availability: AvailabilityStore, clock: Callable[[], datetime] = utc_now) -> None:
        self.availability = availability
        self.clock = clock

    @service_operation
    def add_availability(self, tutor_id: int, request: CreateAvailabilityRequest) -> AvailabilityView:
        start_time = to_naive_utc(request.start_time)
        end_time = to_naive_utc(request.end_time)

        if end_time <= start_time:
            raise ValidationException('End time must be after the start time.')

        if start_time < self.clock():
            raise ValidationException('Availability cannot start in the past.')

        if request.is_recurring:
            if not request.recurring_day:
                raise ValidationException('Recurring availability requires a recurring day.')
            if request.recurrence_end_date and request.recurrence_end_date < start_time.date():
                raise ValidationException('Recurrence end date cannot be before the start date.')

        if self.availability.has_overlap(tutor_id, start_time, end_time):
            raise ValidationException('This availability overlaps an existing slot.')

        slot = self.availability.add(
            TutorAvailability(
                tutor_id=tutor_id,
                start_time=start_time,
                end_time=end_time,
                is_booked=False,
                is_recurring=request.is_recurring,
                recurring_day=request.recurring_day if request.is_recurring else None,
                recurrence_end_date=request.recurrence_end_date if request.is_recurring else None,
            )
        )

        logger.info('Tutor %s added availability %s', tutor_id, slot.id)
        return AvailabilityView.model_validate(slot)

    @service_operation
    def get_by_id(self, availability_id: int) -> AvailabilityView:
        slot = self.availability.get(availability_id)
        if slot is None:
            raise NotFoundException('Availability not found.')
        return AvailabilityView.model_validate(slot)

    @service_operation
    def delete_availability(self, availability_id: int) -> None:
        slot = self.availability.get(availability_id)
        if slot is None:
            raise NotFoundException('Availability not found.')

        if slot.is_booked:
            raise ValidationException('A booked availability slot cannot be deleted.')

        self.availability.delete(slot)
        logger.info('Availability %s deleted', availability_id)

    @service_operation
    def list_by_tutor(self, tutor_id: int, filters: PageRequest) -> Page[AvailabilityView]:
        slots, total = self.availability.list_by_tutor(tutor_id, offset=filters.offset, limit=filters.page_size)
        return self._to_page(slots, total, filters)

    @service_operation
    def list_available_slots(
        self,
        tutor_id: int,
        window_start: datetime,
        window_end: datetime,
        filters: PageRequest,
    ) -> Page[AvailabilityView]:
        slots, total = self.availability.list_open(
            tutor_id,
            to_naive_utc(window_start),
            to_naive_utc(window_end),
            offset=filters.offset,
            limit=filters.page_size,
        )
        return self._to_page(slots, total, filters)

    @staticmethod
    def _to_page(slots: list[TutorAvailability], total: int, filters: PageRequest) -> Page[AvailabilityView]:
        return Page[AvailabilityView](
            items=[AvailabilityView.model_validate(slot) for slot in slots],
            total_count=total,
            page=filters.page,
            page_size=filters.page_size,
        )

# ===== app/services/availability/availability_service.py =====
import logging
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import List, Union
from uuid import UUID

from app.core.exceptions import InvalidDate, ServiceNotFound
from app.services.availability.busy_set import BusyInterval, BusySetAggregator
from app.services.availability.slot_generator import CandidateSlot, SlotGenerator
from app.services.business.business_store import BusinessStore
from app.utils.time_utils import local_to_utc, overlaps

logger = logging.getLogger(__name__)

CLOSED_DAY_MESSAGE = "Business is closed on this day."
ISO_DATE_RE = re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}")


@dataclass
class AvailabilityResult:
    slots: List[CandidateSlot] = field(default_factory=list)
    message: str = "Available slots retrieved successfully"


def parse_date(value: Union[str, date]) -> date:
    """Accept a date or a YYYY-MM-DD string"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not ISO_DATE_RE.fullmatch(text):
        raise InvalidDate(text)
    try:
        return datetime.strptime(text, "%Y-%m-%d").date()
    except ValueError:
        raise InvalidDate(str(value))


def free_slots(candidates: List[CandidateSlot], busy: List[BusyInterval]) -> List[CandidateSlot]:
    """Candidates that intersect no busy interval, in generation order"""
    return [
        slot for slot in candidates
        if not any(overlaps(b.start, b.end, slot.start, slot.end) for b in busy)
    ]


class AvailabilityService:
    """Answers which slots are free for one service at one business on one date"""

    def __init__(
            self,
            aggregator: BusySetAggregator,
            slot_generator: SlotGenerator,
            default_duration_minutes: int = 30,
    ):
        self.aggregator = aggregator
        self.slot_generator = slot_generator
        self.default_duration_minutes = default_duration_minutes

    def get_available_slots(
            self,
            store: BusinessStore,
            business_id: UUID,
            service_id: UUID,
            requested_date: Union[str, date],
    ) -> AvailabilityResult:
        target_date = parse_date(requested_date)

        service = store.get_service(service_id)
        if not service or service.business_id != business_id:
            raise ServiceNotFound(service_id)

        rules = store.get_weekday_rules(business_id, target_date.isoweekday())
        if not rules:
            logger.info(f"Business {business_id} has no rules for {target_date}, returning no slots")
            return AvailabilityResult(slots=[], message=CLOSED_DAY_MESSAGE)

        zone_name = rules[0].time_zone
        window_start = local_to_utc(datetime.combine(target_date, time.min), zone_name)
        window_end = local_to_utc(datetime.combine(target_date + timedelta(days=1), time.min), zone_name)

        busy = self.aggregator.collect(store, business_id, window_start, window_end)
        duration = service.effective_duration(self.default_duration_minutes)
        candidates = self.slot_generator.generate(target_date, rules, duration)
        slots = free_slots(candidates, busy)

        logger.debug(
            f"Availability for business {business_id} on {target_date}: "
            f"{len(candidates)} candidates, {len(busy)} busy, {len(slots)} free"
        )
        return AvailabilityResult(slots=slots)

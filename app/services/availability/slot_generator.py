# app/services/availability/slot_generator.py
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Dict, Iterable, List

from app.models.availability import OperatingHourRule
from app.utils.time_utils import local_to_utc, to_rfc3339


@dataclass(frozen=True)
class CandidateSlot:
    start: datetime  # UTC
    end: datetime  # UTC
    time_zone: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "start_time": to_rfc3339(self.start),
            "end_time": to_rfc3339(self.end),
        }


class SlotGenerator:
    """Walks each operating-hour rule in fixed steps and emits slots that fit before close"""

    def __init__(self, step_minutes: int = 30):
        if step_minutes <= 0:
            raise ValueError("step_minutes must be positive")
        self.step = timedelta(minutes=step_minutes)

    def generate(
            self,
            target_date: date,
            rules: Iterable[OperatingHourRule],
            duration_minutes: int,
    ) -> List[CandidateSlot]:
        duration = timedelta(minutes=duration_minutes)
        slots: List[CandidateSlot] = []

        for rule in rules:
            cursor = datetime.combine(target_date, rule.open_time)
            close = datetime.combine(target_date, rule.close_time)

            # Step, not duration: consecutive candidates may overlap
            while cursor + duration <= close:
                slots.append(CandidateSlot(
                    start=local_to_utc(cursor, rule.time_zone),
                    end=local_to_utc(cursor + duration, rule.time_zone),
                    time_zone=rule.time_zone,
                ))
                cursor += self.step

        return slots

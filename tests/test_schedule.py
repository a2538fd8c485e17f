import uuid
from datetime import time

import pytest
from pydantic import ValidationError as PydanticValidationError

from app.core.exceptions import InvalidTimeZone, NotFoundError
from app.models.availability import OperatingHourRule
from app.schemas.availability import WeeklyRuleIn, WeeklyScheduleIn
from app.services.availability.schedule_service import ScheduleService


def weekly(*rules):
    return WeeklyScheduleIn(rules=[
        {"day_of_week": day, "open_time": open_, "close_time": close, "time_zone": zone}
        for day, open_, close, zone in rules
    ]).rules


class TestReplaceWeeklySchedule:
    def test_new_set_fully_supersedes_old(self, db, store, seeded):
        rules = ScheduleService.replace_weekly_schedule(store, seeded.business_id, weekly(
            (1, "08:00:00", "12:00:00", "Europe/Paris"),
            (1, "13:00:00", "18:00:00", "Europe/Paris"),
            (5, "10:00:00", "14:00:00", "Europe/Paris"),
        ))

        assert [(r.day_of_week, r.open_time) for r in rules] == [
            (1, time(8)), (1, time(13)), (5, time(10)),
        ]
        # The old Wednesday rule is gone
        assert store.get_weekday_rules(seeded.business_id, 3) == []
        assert db.query(OperatingHourRule).filter_by(business_id=seeded.business_id).count() == 3

    def test_empty_set_closes_every_day(self, store, seeded):
        assert ScheduleService.replace_weekly_schedule(store, seeded.business_id, []) == []
        assert store.get_weekly_schedule(seeded.business_id) == []

    def test_invalid_zone_keeps_previous_schedule(self, store, seeded):
        with pytest.raises(InvalidTimeZone):
            ScheduleService.replace_weekly_schedule(store, seeded.business_id, weekly(
                (1, "08:00:00", "12:00:00", "Europe/Paris"),
                (2, "08:00:00", "12:00:00", "Moon/Base"),
            ))

        remaining = store.get_weekly_schedule(seeded.business_id)
        assert [(r.day_of_week, r.time_zone) for r in remaining] == [(3, "America/New_York")]

    def test_other_businesses_untouched(self, db, cipher, store, seeded):
        from tests.conftest import seed_business
        other = seed_business(db, cipher)

        ScheduleService.replace_weekly_schedule(store, seeded.business_id, [])

        assert len(store.get_weekly_schedule(other.business_id)) == 1

    def test_unknown_business(self, store):
        with pytest.raises(NotFoundError):
            ScheduleService.replace_weekly_schedule(store, uuid.uuid4(), [])

    def test_get_unknown_business(self, store):
        with pytest.raises(NotFoundError):
            ScheduleService.get_weekly_schedule(store, uuid.uuid4())


class TestWeeklyRuleIn:
    def test_parses_wall_clock_times(self):
        rule = WeeklyRuleIn(day_of_week=7, open_time="09:30:00", close_time="17:00:00", time_zone=" Asia/Tokyo ")
        assert rule.open_time == time(9, 30)
        assert rule.time_zone == "Asia/Tokyo"

    @pytest.mark.parametrize("payload", [
        {"day_of_week": 0, "open_time": "09:00:00", "close_time": "17:00:00", "time_zone": "UTC"},
        {"day_of_week": 8, "open_time": "09:00:00", "close_time": "17:00:00", "time_zone": "UTC"},
        {"day_of_week": 1, "open_time": "17:00:00", "close_time": "09:00:00", "time_zone": "UTC"},
        {"day_of_week": 1, "open_time": "09:00:00", "close_time": "09:00:00", "time_zone": "UTC"},
        {"day_of_week": 1, "open_time": "nine", "close_time": "17:00:00", "time_zone": "UTC"},
        {"day_of_week": 1, "open_time": "09:00:00+02:00", "close_time": "17:00:00", "time_zone": "UTC"},
        {"day_of_week": 1, "open_time": "09:00:00", "close_time": "17:00:00", "time_zone": "   "},
    ])
    def test_rejects_bad_rules(self, payload):
        with pytest.raises(PydanticValidationError):
            WeeklyRuleIn(**payload)

# app/services/availability/schedule_service.py
"""Weekly operating-hours management"""
import logging
from typing import List
from uuid import UUID

from app.core.exceptions import NotFoundError
from app.models.availability import OperatingHourRule
from app.schemas.availability import WeeklyRuleIn
from app.services.business.business_store import BusinessStore

logger = logging.getLogger(__name__)


class ScheduleService:
    """Reads and replaces a business's weekly schedule"""

    @staticmethod
    def replace_weekly_schedule(
            store: BusinessStore,
            business_id: UUID,
            rules: List[WeeklyRuleIn],
    ) -> List[OperatingHourRule]:
        """The new rule set fully supersedes the old one"""
        if not store.get_business(business_id):
            raise NotFoundError("Business not found")

        new_rules = [
            OperatingHourRule(
                business_id=business_id,
                day_of_week=rule.day_of_week,
                open_time=rule.open_time,
                close_time=rule.close_time,
                time_zone=rule.time_zone,
            )
            for rule in rules
        ]
        return store.replace_weekly_schedule(business_id, new_rules)

    @staticmethod
    def get_weekly_schedule(store: BusinessStore, business_id: UUID) -> List[OperatingHourRule]:
        if not store.get_business(business_id):
            raise NotFoundError("Business not found")
        return store.get_weekly_schedule(business_id)

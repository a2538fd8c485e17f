# app/services/availability/busy_set.py
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from app.services.business.business_store import BusinessStore
from app.services.calendar.base import CalendarGateway
from app.utils.time_utils import ensure_utc, parse_rfc3339

logger = logging.getLogger(__name__)

SOURCE_APPOINTMENT = "appointment"
SOURCE_CALENDAR = "calendar"


@dataclass(frozen=True)
class BusyInterval:
    start: datetime  # UTC
    end: datetime  # UTC
    source: str = SOURCE_APPOINTMENT


class BusySetAggregator:
    """
    Collects blocked intervals for a business over a UTC window.

    Local appointments are mandatory: a store failure propagates.
    The remote calendar is best effort: any failure is logged and the
    remote contribution is left out. Results are concatenated without
    merging.
    """

    def __init__(self, gateway: Optional[CalendarGateway], calendar_id: str = "primary"):
        self.gateway = gateway
        self.calendar_id = calendar_id

    def collect(
            self,
            store: BusinessStore,
            business_id: UUID,
            window_start: datetime,
            window_end: datetime,
    ) -> List[BusyInterval]:
        busy = [
            BusyInterval(
                start=ensure_utc(appt.appointment_start_time),
                end=ensure_utc(appt.appointment_end_time),
                source=SOURCE_APPOINTMENT,
            )
            for appt in store.get_appointments_overlapping(business_id, window_start, window_end)
        ]

        busy.extend(self._remote_busy(store, business_id, window_start, window_end))
        return busy

    def _remote_busy(
            self,
            store: BusinessStore,
            business_id: UUID,
            window_start: datetime,
            window_end: datetime,
    ) -> List[BusyInterval]:
        if self.gateway is None:
            return []

        credential = store.get_auth_credential(business_id)
        if credential is None or not credential.has_refresh_token:
            return []

        try:
            refresh_token = store.decrypt_refresh_token(credential)
            access_token = self.gateway.refresh_access_token(refresh_token)
            busy_by_calendar = self.gateway.query_free_busy(
                access_token,
                window_start,
                window_end,
                calendar_id=self.calendar_id,
            )
            remote = [
                BusyInterval(start=parse_rfc3339(start), end=parse_rfc3339(end), source=SOURCE_CALENDAR)
                for blocks in busy_by_calendar.values()
                for start, end in blocks
            ]
        except Exception as e:
            logger.warning(f"Calendar busy times unavailable for business {business_id}, using local appointments only: {e}")
            return []

        logger.debug(f"Fetched {len(remote)} remote busy blocks for business {business_id}")
        return remote

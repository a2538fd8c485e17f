# app/services/calendar/base.py
"""Calendar provider boundary used by availability and booking"""
from datetime import datetime
from typing import Any, Dict, List, Protocol, Tuple

BusyBlock = Tuple[str, str]  # RFC3339 start/end as returned by the provider


class CalendarGateway(Protocol):
    def refresh_access_token(self, refresh_token: str) -> str:
        """Exchange a refresh token for an access token; raises AuthError"""
        ...

    def query_free_busy(
            self,
            access_token: str,
            time_min: datetime,
            time_max: datetime,
            calendar_id: str = "primary",
    ) -> Dict[str, List[BusyBlock]]:
        """Busy blocks per calendar id for [time_min, time_max)"""
        ...

    def insert_event(
            self,
            access_token: str,
            event: Dict[str, Any],
            calendar_id: str = "primary",
    ) -> Dict[str, Any]:
        """Create an event; raises CalendarAPIError with the provider body on failure"""
        ...

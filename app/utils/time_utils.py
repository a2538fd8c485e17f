# ===== app/utils/time_utils.py =====
"""
Time zone conversion and half-open interval helpers.

All instants handled by the booking engine are timezone-aware UTC datetimes.
Local wall-clock values are naive datetimes interpreted in an IANA zone.
"""
from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from app.core.exceptions import InvalidTimeZone


def get_zone(zone_name: str) -> ZoneInfo:
    """Resolve an IANA zone id, raising InvalidTimeZone when unknown"""
    if not isinstance(zone_name, str) or not zone_name:
        raise InvalidTimeZone(zone_name)
    try:
        return ZoneInfo(zone_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise InvalidTimeZone(zone_name)


def local_to_utc(local: datetime, zone_name: str) -> datetime:
    """
    Convert a naive local wall-clock datetime to a UTC instant.

    Ambiguous times (DST fold) take the later offset, nonexistent times
    (DST gap) skip forward. Both cases come down to picking the later of
    the two candidate instants.
    """
    zone = get_zone(zone_name)
    naive = local.replace(tzinfo=None)
    first = naive.replace(tzinfo=zone, fold=0).astimezone(timezone.utc)
    second = naive.replace(tzinfo=zone, fold=1).astimezone(timezone.utc)
    return max(first, second)


def utc_to_local(instant: datetime, zone_name: str) -> datetime:
    """Convert a UTC instant to a naive local wall-clock datetime"""
    zone = get_zone(zone_name)
    return ensure_utc(instant).astimezone(zone).replace(tzinfo=None)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive values (drivers that drop offsets) and normalize aware ones"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def overlaps(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    """Half-open intersection test: [start_a, end_a) and [start_b, end_b) share an instant"""
    return start_a < end_b and end_a > start_b


def parse_rfc3339(value: str) -> datetime:
    """Parse an RFC3339 timestamp into a UTC instant; offsets are mandatory"""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00").replace("z", "+00:00"))
    if parsed.tzinfo is None:
        raise ValueError(f"Timestamp without offset: {value}")
    return parsed.astimezone(timezone.utc)


def to_rfc3339(instant: datetime) -> str:
    """Format a UTC instant as RFC3339 with a Z suffix"""
    return ensure_utc(instant).isoformat().replace("+00:00", "Z")

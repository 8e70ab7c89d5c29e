import math
import time
from datetime import datetime, timezone


def now_ms() -> int:
    """Current wall-clock time as epoch milliseconds."""
    return int(time.time() * 1000)


def to_local_datetime(dt, tz_name: str | None = None):
    """Convert a datetime from source tz (assume UTC if naive) to local or given tz.

    - If `tz_name` is 'local' or None: use system local timezone.
    - If `tz_name` is IANA tz name (e.g., 'America/New_York'): use that.
    - If `dt` has no tzinfo, assume UTC.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    if tz_name and tz_name != "local":
        from zoneinfo import ZoneInfo
        return dt.astimezone(ZoneInfo(tz_name))
    return dt.astimezone()


def local_hour(epoch_ms: int, tz_name: str | None = None) -> int:
    """
    Hour of day (0-23) of an epoch-ms timestamp in the given timezone.
    Example: local_hour(0, "UTC") -> 0
    """
    dt = datetime.fromtimestamp(epoch_ms / 1000.0, tz=timezone.utc)
    return to_local_datetime(dt, tz_name).hour


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives.

    Python's round() is banker's rounding; user-facing percentages and
    minute estimates should read 2.5 -> 3.
    """
    return int(math.floor(value + 0.5))

import os
from datetime import datetime, timezone

from zoneinfo import ZoneInfo

_LOCAL_TZ = None


def _resolve_local_tz():
    global _LOCAL_TZ
    if _LOCAL_TZ is not None:
        return _LOCAL_TZ
    tz_name = os.environ.get("APP_TIMEZONE") or os.environ.get("TZ")
    if tz_name:
        try:
            _LOCAL_TZ = ZoneInfo(tz_name)
            return _LOCAL_TZ
        except Exception:
            _LOCAL_TZ = None
    _LOCAL_TZ = datetime.now().astimezone().tzinfo
    return _LOCAL_TZ


def utc_now():
    """Naive UTC timestamp, matching what the models store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def format_timestamp(value):
    """Render a stored UTC timestamp as ``M/d/yyyy h:mm AM`` in local time."""
    if value is None:
        return ""
    local = value.replace(tzinfo=timezone.utc).astimezone(_resolve_local_tz())
    hour = local.hour % 12 or 12
    meridiem = "AM" if local.hour < 12 else "PM"
    return f"{local.month}/{local.day}/{local.year} {hour}:{local.minute:02d} {meridiem}"

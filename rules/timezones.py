"""
Time Zone Helpers - Formatted clock values for time placeholders
================================================================

Provides the clock readings behind ``{time_*}`` placeholders:
- Server local time, UTC and GMT
- Named IANA zones (``{time_tokyo}``)
- Fixed offsets (``{time_utc_plus_07_00}``, ``{time_gmt_minus_03_30}``)
"""

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


TIME_FORMAT = "%Y-%m-%d %H:%M:%S"

# Placeholder name -> IANA zone
NAMED_ZONES = {
    "time_bangkok": "Asia/Bangkok",
    "time_berlin": "Europe/Berlin",
    "time_london": "Europe/London",
    "time_los_angeles": "America/Los_Angeles",
    "time_new_york": "America/New_York",
    "time_paris": "Europe/Paris",
    "time_singapore": "Asia/Singapore",
    "time_sydney": "Australia/Sydney",
    "time_tokyo": "Asia/Tokyo",
    "time_toronto": "America/Toronto",
}

OFFSET_HOURS = range(-12, 15)
OFFSET_MINUTES = (0, 30, 45)
OFFSET_PREFIXES = ("utc", "gmt")

# Substrings whose presence means a template may carry offset placeholders
OFFSET_INDICATORS = tuple(f"{{time_{prefix}_" for prefix in OFFSET_PREFIXES)


def format_time(tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> str:
    """
    Format the current time in a zone.

    Args:
        tz: Target zone; None means the server's local zone
        now: Reference instant (defaults to the current time)
    """
    instant = now or datetime.now(timezone.utc)
    if instant.tzinfo is None:
        instant = instant.astimezone()
    if tz is None:
        return instant.astimezone().strftime(TIME_FORMAT)
    return instant.astimezone(tz).strftime(TIME_FORMAT)


def format_zone_time(zone_name: str, now: Optional[datetime] = None) -> str:
    """Format the current time in a named IANA zone, or 'unknown'."""
    try:
        zone = ZoneInfo(zone_name)
    except (ZoneInfoNotFoundError, ValueError):
        return "unknown"
    return format_time(zone, now)


def zone_label(prefix: str, hours: int, minutes: int) -> str:
    """
    Build the placeholder for a fixed offset.

    >>> zone_label("gmt", 7, 0)
    '{time_gmt_plus_07_00}'
    >>> zone_label("utc", -3, 30)
    '{time_utc_minus_03_30}'
    """
    sign = "minus" if hours < 0 else "plus"
    return f"{{time_{prefix}_{sign}_{abs(hours):02d}_{minutes:02d}}}"


def offset_zone(hours: int, minutes: int) -> timezone:
    """Fixed-offset zone; minutes share the sign of hours."""
    delta = timedelta(hours=abs(hours), minutes=minutes)
    return timezone(-delta if hours < 0 else delta)


def _build_offsets() -> Dict[str, timezone]:
    offsets = {}
    for hours in OFFSET_HOURS:
        for minutes in OFFSET_MINUTES:
            zone = offset_zone(hours, minutes)
            for prefix in OFFSET_PREFIXES:
                offsets[zone_label(prefix, hours, minutes)] = zone
    return offsets


# Placeholder label -> fixed-offset zone
OFFSETS = _build_offsets()

_OFFSET_LABEL = re.compile(r"\{time_(?:utc|gmt)_(?:plus|minus)_\d\d_\d\d\}")


def needs_offset_sweep(template: str) -> bool:
    """Cheap guard before looking for offset labels."""
    return any(indicator in template for indicator in OFFSET_INDICATORS)


def offset_time(label: str, now: Optional[datetime] = None) -> Optional[str]:
    """Time for a fixed-offset placeholder, or None for an unsupported label."""
    zone = OFFSETS.get(label)
    if zone is None:
        return None
    return format_time(zone, now)


def replace_offset_times(template: str, now: Optional[datetime] = None) -> str:
    """
    Replace every fixed-offset time placeholder in a template.

    Offsets run from -12 to +14 hours in 0, 30 and 45 minute steps,
    under both the ``utc`` and ``gmt`` prefixes. Unsupported offsets
    are left as they are.
    """
    if not needs_offset_sweep(template):
        return template

    def substitute(match):
        value = offset_time(match.group(0), now)
        return match.group(0) if value is None else value

    return _OFFSET_LABEL.sub(substitute, template)

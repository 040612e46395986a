"""General utility functions."""
import random
from datetime import datetime, timezone, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo

from rollcall.core import config
from rollcall.core.constants import CLASS_CODE_LENGTH


def make_pronounceable(length: int = CLASS_CODE_LENGTH) -> str:
    """Generate a pronounceable code using consonant-vowel pattern."""
    consonants = "BCDFGHJKLMNPQRSTVWXYZ"
    vowels = "AEIOU"

    code = ""
    for i in range(length):
        if i % 2 == 0:
            code += random.choice(consonants)
        else:
            code += random.choice(vowels)

    return code


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC timezone."""
    if dt.tzinfo is None:
        # Assume UTC if no timezone
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def get_timezone() -> tzinfo:
    """Timezone used for rendering timestamps in API responses."""
    name = config.settings.TIMEZONE
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def to_timezone(dt: datetime, tz: tzinfo) -> datetime:
    """Convert datetime to specified timezone."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(tz)


def isoformat(dt: Optional[datetime]) -> Optional[str]:
    """Render a stored timestamp as ISO 8601 in the configured timezone."""
    if dt is None:
        return None
    return to_timezone(dt, get_timezone()).isoformat()

from datetime import date, datetime, timedelta
from typing import Iterator
from zoneinfo import ZoneInfo

from app.core.config import settings

# Python weekday(): 0 = Monday ... 5 = Saturday, 6 = Sunday
WEEKEND_DAYS = (5, 6)


def today() -> date:
    """Current calendar day in the business timezone."""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).date()


def iter_days(start: date, end: date) -> Iterator[date]:
    d = start
    while d <= end:
        yield d
        d += timedelta(days=1)


def is_weekend_window(start: date, end: date) -> bool:
    """A window counts as a weekend window if any of its days is Saturday or Sunday."""
    if (end - start).days >= 6:
        return True
    return any(d.weekday() in WEEKEND_DAYS for d in iter_days(start, end))

# lambdas/hello_agent/date_range.py
from datetime import datetime, time, timedelta, timezone
from typing import Optional

from .models import DateRange

NRQL_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def get_date_range(days_ago: int, now: Optional[datetime] = None) -> DateRange:
    """
    Computes an inclusive UTC day window ending today.

    Args:
        days_ago: How many calendar days before today the window starts.
        now: Current time, defaults to the wall clock. Naive values are read as UTC.

    Returns:
        A DateRange starting at 00:00:00 `days_ago` days back and ending at
        23:59:59 today, both formatted as 'YYYY-MM-DD HH:MM:SS'.
    """
    if days_ago < 0:
        raise ValueError(f"days_ago must be >= 0, got {days_ago}")

    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    else:
        now = now.astimezone(timezone.utc)

    today = now.date()
    start_utc = datetime.combine(today - timedelta(days=days_ago), time(0, 0, 0))
    end_utc = datetime.combine(today, time(23, 59, 59))

    return DateRange(
        start=start_utc.strftime(NRQL_TIMESTAMP_FORMAT),
        end=end_utc.strftime(NRQL_TIMESTAMP_FORMAT),
    )

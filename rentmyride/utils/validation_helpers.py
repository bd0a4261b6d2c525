import math
from datetime import datetime, timedelta, timezone

ONE_DAY = timedelta(days=1)


def utcnow():
    """Current UTC time as a naive datetime, the form stored in the database."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value):
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def rental_days(start: datetime, end: datetime) -> int:
    """Whole days billed for a rental; partial days round up and the minimum is one."""
    return max(1, math.ceil((end - start) / ONE_DAY))

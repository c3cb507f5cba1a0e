"""Datetime normalization for values crossing the API and database boundary."""
from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator


def to_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """
    Convert a datetime to naive UTC, the form MongoDB hands back.

    Naive values are assumed to already be UTC and are returned unchanged;
    aware values (e.g. ``2024-03-05T10:00:00Z`` or ``+02:00``) are shifted to
    UTC and stripped of their tzinfo so they compare with stored values.

    Example:
        >>> to_utc_naive(datetime(2024, 3, 5, 10, 0, tzinfo=timezone.utc))
        datetime.datetime(2024, 3, 5, 10, 0)
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


# Request field type: any incoming timestamp is stored and compared as naive UTC
UtcDatetime = Annotated[datetime, AfterValidator(to_utc_naive)]

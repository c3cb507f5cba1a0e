"""Resolution of report range keywords into concrete instant ranges."""
import calendar
from datetime import date, datetime, time
from typing import Iterator, Optional

from bizmanager.models.report import DateRange, RangeKeyword


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _month_start(year: int, month: int) -> date:
    return date(year, month, 1)


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def _span(first: date, last: date) -> DateRange:
    return DateRange(
        start=datetime.combine(first, time.min),
        end=datetime.combine(last, time.max),
    )


def resolve_range(
    keyword: RangeKeyword | str,
    today: Optional[date] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> DateRange:
    """
    Turn a range keyword into an inclusive ``DateRange``.

    Month based ranges start at 00:00 on the first day and end at the last
    representable instant of the final day. ``custom`` uses the supplied
    ``start``/``end`` days the same way.

    Raises:
        ValueError: For unknown keywords or missing/inverted custom bounds
    """
    try:
        keyword = RangeKeyword(keyword)
    except ValueError:
        raise ValueError(f"Unknown date range: {keyword}")

    if today is None:
        today = datetime.utcnow().date()
    year, month = today.year, today.month

    if keyword is RangeKeyword.THIS_MONTH:
        return _span(_month_start(year, month), _month_end(year, month))

    if keyword is RangeKeyword.LAST_MONTH:
        prev_year, prev_month = _shift_month(year, month, -1)
        return _span(_month_start(prev_year, prev_month), _month_end(prev_year, prev_month))

    if keyword in (RangeKeyword.LAST_3_MONTHS, RangeKeyword.LAST_6_MONTHS):
        back = 2 if keyword is RangeKeyword.LAST_3_MONTHS else 5
        first_year, first_month = _shift_month(year, month, -back)
        return _span(_month_start(first_year, first_month), _month_end(year, month))

    if keyword is RangeKeyword.THIS_YEAR:
        return _span(date(year, 1, 1), date(year, 12, 31))

    # custom
    if start is None or end is None:
        raise ValueError("Custom range requires both start and end dates")
    if end < start:
        raise ValueError("Range end cannot be before range start")
    return _span(start, end)


def iter_months(date_range: DateRange) -> Iterator[tuple[int, int]]:
    """Yield every (year, month) touched by the range, in order."""
    year, month = date_range.start.year, date_range.start.month
    last = (date_range.end.year, date_range.end.month)
    while (year, month) <= last:
        yield year, month
        year, month = _shift_month(year, month, 1)


def month_key(moment: datetime) -> tuple[int, int]:
    return moment.year, moment.month


def month_label(year: int, month: int) -> str:
    """Human label for a month bucket, e.g. ``Mar 2024``."""
    return f"{calendar.month_abbr[month]} {year}"

"""Expand a recurring frequency code into the concrete dates of one month."""

from __future__ import annotations

import calendar
from datetime import date
from typing import List, Tuple, Union

from lifetasks.models.constants import DATE_FORMAT
from lifetasks.models.recurrence import Frequency

MonthLike = Union[date, Tuple[int, int]]

# Python weekday: Monday=0 ... Sunday=6
_WEEKDAYS: dict[str, int] = {
    "mon": 0,
    "tue": 1,
    "wed": 2,
    "thu": 3,
    "fri": 4,
    "sat": 5,
    "sun": 6,
}

_FIRST_WEEKDAY_OF_MONTH: dict[str, int] = {
    Frequency.MONTHLY_FIRST_MON.value: _WEEKDAYS["mon"],
    Frequency.MONTHLY_FIRST_FRI.value: _WEEKDAYS["fri"],
}


def _year_month(target_month: MonthLike) -> Tuple[int, int]:
    if isinstance(target_month, date):
        return target_month.year, target_month.month
    year, month = target_month
    return int(year), int(month)


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def add_months(day: date, months: int) -> date:
    """First day of the month `months` after the month containing `day`."""
    index = day.year * 12 + (day.month - 1) + months
    return date(index // 12, index % 12 + 1, 1)


def format_date(day: date) -> str:
    return day.strftime(DATE_FORMAT)


def _month_days(year: int, month: int) -> List[date]:
    return [date(year, month, d) for d in range(1, days_in_month(year, month) + 1)]


def expand(frequency: str, target_month: MonthLike) -> List[str]:
    """Return the dates (YYYY-MM-DD, ascending) in `target_month` matching `frequency`.

    `target_month` is any date inside the month, or a (year, month) tuple.
    Codes are matched exactly (no case or whitespace folding). Unknown codes
    expand to an empty list rather than raising, so one malformed definition
    cannot block the others.
    """
    year, month = _year_month(target_month)
    frequency = frequency or ""
    days = _month_days(year, month)

    if frequency == Frequency.EVERYDAY.value:
        return [format_date(d) for d in days]

    if frequency == Frequency.DAILY.value:
        return [format_date(d) for d in days if d.weekday() < 5]

    if frequency.startswith("weekly-"):
        target = _WEEKDAYS.get(frequency[len("weekly-"):])
        if target is None:
            return []
        return [format_date(d) for d in days if d.weekday() == target]

    if frequency == Frequency.MONTHLY_1.value:
        return [format_date(days[0])]

    if frequency == Frequency.MONTHLY_15.value:
        # Guard kept even though every real month has a 15th.
        if len(days) >= 15:
            return [format_date(days[14])]
        return []

    if frequency == Frequency.MONTHLY_LAST.value:
        return [format_date(days[-1])]

    if frequency in _FIRST_WEEKDAY_OF_MONTH:
        target = _FIRST_WEEKDAY_OF_MONTH[frequency]
        for d in days[:7]:
            if d.weekday() == target:
                return [format_date(d)]
        return []

    return []

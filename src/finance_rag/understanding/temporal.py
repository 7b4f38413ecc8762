"""Resolution of fuzzy temporal phrases into inclusive date ranges."""

from __future__ import annotations

import calendar
import re
from collections.abc import Callable
from datetime import date, timedelta

from finance_rag.types import DateRange

DEFAULT_DAY_WINDOW = 30

# Literal English names; calendar.month_name follows LC_TIME.
_ENGLISH_MONTHS = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

MONTH_NAMES: dict[str, int] = {
    name: number for number, name in enumerate(_ENGLISH_MONTHS, start=1)
}

# Approximate spans, applied to the reference year.
NAMED_PERIODS: dict[str, tuple[tuple[int, int], tuple[int, int]]] = {
    "carnival": ((2, 10), (2, 13)),
}

_LAST_MONTH = re.compile(r"\b(?:last|past|previous|prior)\s+month\b")
_THIS_MONTH = re.compile(r"\b(?:this|current)\s+month\b")
_LAST_N_DAYS = re.compile(r"\b(?:last|past|previous)\s+(\S+)\s+days?\b")
_LAST_WEEK = re.compile(r"\b(?:last|past|previous)\s+week\b")
_MONTH_NAME = re.compile(r"\b(" + "|".join(MONTH_NAMES) + r")\b")

_Matcher = Callable[[str, date], DateRange | None]


def resolve(phrase: str, reference_date: date) -> DateRange:
    """Resolve `phrase` relative to `reference_date`.

    Matchers are tried in a fixed priority order and the first hit wins, so
    "last month" is never read as a month name and "last 7 days" is never read
    as "last week". Unknown phrases yield an unresolved range; this function
    does not raise.
    """

    if not isinstance(phrase, str):
        return DateRange.unresolved()
    text = phrase.lower().strip()
    if not text:
        return DateRange.unresolved()

    for matcher in _MATCHERS:
        result = matcher(text, reference_date)
        if result is not None:
            return result
    return DateRange.unresolved()


def month_bounds(year: int, month: int) -> DateRange:
    """Return the first and last calendar day of a month."""
    last_day = calendar.monthrange(year, month)[1]
    return DateRange(date(year, month, 1), date(year, month, last_day))


def _last_month(text: str, ref: date) -> DateRange | None:
    if not _LAST_MONTH.search(text):
        return None
    if ref.month == 1:
        return month_bounds(ref.year - 1, 12)
    return month_bounds(ref.year, ref.month - 1)


def _this_month(text: str, ref: date) -> DateRange | None:
    if not _THIS_MONTH.search(text):
        return None
    return month_bounds(ref.year, ref.month)


def _last_n_days(text: str, ref: date) -> DateRange | None:
    match = _LAST_N_DAYS.search(text)
    if not match:
        return None
    count = match.group(1)
    days = int(count) if count.isdecimal() else DEFAULT_DAY_WINDOW
    days = min(days, (ref - date.min).days)
    return DateRange(ref - timedelta(days=days), ref)


def _last_week(text: str, ref: date) -> DateRange | None:
    if not _LAST_WEEK.search(text):
        return None
    return DateRange(ref - timedelta(days=7), ref)


def _month_name(text: str, ref: date) -> DateRange | None:
    match = _MONTH_NAME.search(text)
    if not match:
        return None
    return month_bounds(ref.year, MONTH_NAMES[match.group(1)])


def _named_period(text: str, ref: date) -> DateRange | None:
    for name, ((start_month, start_day), (end_month, end_day)) in NAMED_PERIODS.items():
        if name in text:
            return DateRange(
                date(ref.year, start_month, start_day),
                date(ref.year, end_month, end_day),
            )
    return None


_MATCHERS: tuple[_Matcher, ...] = (
    _last_month,
    _this_month,
    _last_n_days,
    _last_week,
    _month_name,
    _named_period,
)

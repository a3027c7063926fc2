"""Parsers for the individual columns of zoneinfo source lines.

Names in zoneinfo sources (keywords, months, weekdays and the year words
minimum, maximum and only) may be abbreviated to any unambiguous prefix and
are case insensitive. The compact tzdata.zi distribution relies on this,
e.g. "R EU 1981 ma - Mar lastSu 1u 1 S".

Amounts of time are written [-]hh[:mm[:ss]] where the hour may exceed 24.
Times of day may carry a suffix naming the clock they are read from:
  - w: local wall clock time (the default)
  - s: local standard time
  - u, g, z: universal time
"""

from __future__ import annotations

import datetime
import re
from collections.abc import Mapping, Sequence
from typing import TypeVar, Union

from ..instant import DaySelector, TimeFrame, Weekday
from ..period import Until
from ..rule import YearClass, YearLimit

__all__ = [
    "match_name",
    "is_amount",
    "parse_amount",
    "parse_time",
    "parse_save",
    "parse_month",
    "parse_weekday",
    "parse_day",
    "parse_year",
    "parse_year_class",
    "parse_until",
]

_T = TypeVar("_T")

_AMOUNT_RE = re.compile(
    r"(?P<sign>-)?(?P<hour>\d+)"
    r"(?::(?P<minutes>\d{1,2})(?::(?P<seconds>\d{1,2})(?:\.\d+)?)?)?"
)
_SUFFIX_RE = re.compile(r"(?P<amount>.*?)(?P<suffix>[wsugz]?)", re.IGNORECASE)
_SAVE_SUFFIX_RE = re.compile(r"(?P<amount>.*?)(?P<suffix>[sd]?)", re.IGNORECASE)
_LAST_DAY_RE = re.compile(r"last(?P<weekday>[a-z]+)", re.IGNORECASE)
_WEEKDAY_DAY_RE = re.compile(
    r"(?P<weekday>[a-z]+)(?P<op>[<>]=)(?P<day>\d+)", re.IGNORECASE
)

_MONTHS: Mapping[str, int] = {
    "January": 1,
    "February": 2,
    "March": 3,
    "April": 4,
    "May": 5,
    "June": 6,
    "July": 7,
    "August": 8,
    "September": 9,
    "October": 10,
    "November": 11,
    "December": 12,
}
_WEEKDAYS: Mapping[str, Weekday] = {
    weekday.name.title(): weekday for weekday in Weekday
}
_YEAR_WORDS: Mapping[str, YearLimit] = {
    "minimum": YearLimit.MINIMUM,
    "maximum": YearLimit.MAXIMUM,
    "only": YearLimit.ONLY,
}
_YEAR_CLASSES: Mapping[str, YearClass] = {
    "-": YearClass.ALWAYS,
    "even": YearClass.EVEN,
    "odd": YearClass.ODD,
    "uspres": YearClass.US_PRESIDENTIAL,
    "nonpres": YearClass.NON_PRESIDENTIAL,
    "nonuspres": YearClass.NON_PRESIDENTIAL,
}
_TIME_FRAMES: Mapping[str, TimeFrame] = {
    "": TimeFrame.WALL,
    "w": TimeFrame.WALL,
    "s": TimeFrame.STANDARD,
    "u": TimeFrame.UNIVERSAL,
    "g": TimeFrame.UNIVERSAL,
    "z": TimeFrame.UNIVERSAL,
}


def match_name(value: str, names: Mapping[str, _T], kind: str) -> _T:
    """Return the value for a case insensitive, possibly abbreviated name."""
    lowered = value.lower()
    if not lowered:
        raise ValueError(f"Empty {kind} name")
    matches = [name for name in names if name.lower().startswith(lowered)]
    exact = [name for name in matches if name.lower() == lowered]
    if exact:
        return names[exact[0]]
    if len(matches) != 1:
        raise ValueError(
            f"{'Ambiguous' if matches else 'Unknown'} {kind} name: {value}"
        )
    return names[matches[0]]


def is_amount(value: str) -> bool:
    """Return true if the value looks like an amount of time."""
    return _AMOUNT_RE.fullmatch(value) is not None


def parse_amount(value: str) -> datetime.timedelta:
    """Parse an amount of time from [-]hh[:mm[:ss]], with "-" meaning zero."""
    if value == "-":
        return datetime.timedelta(0)
    if (match := _AMOUNT_RE.fullmatch(value)) is None:
        raise ValueError(f"Unable to parse amount of time: {value}")
    sign = -1 if match.group("sign") else 1
    return sign * datetime.timedelta(
        hours=int(match.group("hour")),
        minutes=int(match.group("minutes") or "0"),
        seconds=int(match.group("seconds") or "0"),
    )


def parse_time(value: str) -> tuple[datetime.timedelta, TimeFrame]:
    """Parse a time of day with an optional time frame suffix."""
    match = _SUFFIX_RE.fullmatch(value)
    if match is None:
        raise ValueError(f"Unable to parse time of day: {value}")
    return (
        parse_amount(match.group("amount")),
        _TIME_FRAMES[match.group("suffix").lower()],
    )


def parse_save(value: str) -> datetime.timedelta:
    """Parse a SAVE column, ignoring any standard/daylight suffix."""
    match = _SAVE_SUFFIX_RE.fullmatch(value)
    if match is None:
        raise ValueError(f"Unable to parse save: {value}")
    return parse_amount(match.group("amount"))


def parse_month(value: str) -> int:
    """Parse a month name into a month between 1 and 12."""
    return match_name(value, _MONTHS, "month")


def parse_weekday(value: str) -> Weekday:
    """Parse a weekday name."""
    return match_name(value, _WEEKDAYS, "weekday")


def parse_day(value: str) -> DaySelector:
    """Parse an ON column e.g. 5, lastSun, Sun>=8 or Sun<=25."""
    if value.isdigit():
        return DaySelector.of(int(value))
    if match := _LAST_DAY_RE.fullmatch(value):
        return DaySelector.last(parse_weekday(match.group("weekday")))
    if match := _WEEKDAY_DAY_RE.fullmatch(value):
        weekday = parse_weekday(match.group("weekday"))
        day = int(match.group("day"))
        if match.group("op") == ">=":
            return DaySelector.on_or_after(weekday, day)
        return DaySelector.on_or_before(weekday, day)
    raise ValueError(f"Unable to parse day: {value}")


def parse_year(value: str) -> Union[int, YearLimit]:
    """Parse a FROM or TO column, a year or one of minimum, maximum and only."""
    if value.lstrip("-").isdigit():
        return int(value)
    return match_name(value, _YEAR_WORDS, "year")


def parse_year_class(value: str) -> YearClass:
    """Parse the TYPE column of a rule."""
    if (year_class := _YEAR_CLASSES.get(value.lower())) is None:
        raise ValueError(f"Unknown year type: {value}")
    return year_class


def parse_until(values: Sequence[str]) -> Until | None:
    """Parse the UNTIL columns of a zone line, year [month [day [time]]]."""
    if not values:
        return None
    if len(values) > 4:
        raise ValueError(f"Unexpected UNTIL columns: {' '.join(values)}")
    year = int(values[0])
    month = parse_month(values[1]) if len(values) > 1 else None
    day = parse_day(values[2]) if len(values) > 2 else None
    time: datetime.timedelta | None = None
    time_frame = TimeFrame.WALL
    if len(values) > 3:
        time, time_frame = parse_time(values[3])
    return Until(year=year, month=month, day=day, time=time, time_frame=time_frame)

"""Library for resolving zoneinfo calendar descriptions into instants.

Zoneinfo rules and zone boundaries describe a moment with a year, an optional
month, an optional day of the month and an optional time of day, for example
"the last Sunday of October at 2:00 local wall clock time". The pieces are
optional in a cascading way:

  - Without a month, the moment is midnight UTC on January 1st. Any day or
    time is ignored.
  - With a month but no day, the moment is midnight UTC on the 1st of that
    month. Any time is ignored.
  - With a month and a day, the time of day is added (it may exceed 24 hours
    and roll into the next day) and converted from its time frame to UTC.

The time frame says which clock the time of day is read from:
  - universal: UTC, no adjustment.
  - standard: local standard time, the zone's base UTC offset is removed.
  - wall: local wall clock time, the base offset plus any daylight saving
    adjustment is removed.
"""

from __future__ import annotations

import calendar
import datetime
import enum
import functools
from typing import Optional, Self

from dateutil import relativedelta, rrule
from pydantic import BaseModel, ConfigDict, Field, model_validator

__all__ = [
    "MIN_YEAR",
    "MAX_YEAR",
    "MAX_INSTANT",
    "Weekday",
    "TimeFrame",
    "DayType",
    "DaySelector",
    "resolve_instant",
]

# Years at the edge of the datetime range are avoided so that subtracting an
# offset from a resolved date can never overflow.
MIN_YEAR = datetime.MINYEAR + 1
MAX_YEAR = datetime.MAXYEAR - 1

MAX_INSTANT = datetime.datetime.max.replace(tzinfo=datetime.UTC)
"""An instant after every resolvable boundary, used for periods that never end."""

_ZERO = datetime.timedelta(0)


class Weekday(enum.IntEnum):
    """Corresponds to a day of the week, numbered like `datetime.date.weekday`."""

    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6

    @property
    def rrule_weekday(self) -> rrule.weekday:
        """Return the dateutil weekday for this day."""
        return rrule.weekdays[self.value]


class TimeFrame(str, enum.Enum):
    """The clock a time of day is expressed in."""

    WALL = "w"
    """Local wall clock time, standard time plus any daylight saving."""

    STANDARD = "s"
    """Local standard time."""

    UNIVERSAL = "u"
    """Universal time."""

    def offset(
        self, utc_offset: datetime.timedelta, save: datetime.timedelta
    ) -> datetime.timedelta:
        """Return the amount to remove from a time in this frame to get UTC."""
        if self is TimeFrame.UNIVERSAL:
            return _ZERO
        if self is TimeFrame.STANDARD:
            return utc_offset
        return utc_offset + save


class DayType(str, enum.Enum):
    """How a day selector picks a day within a month."""

    DAY_OF_MONTH = "day_of_month"
    """A literal day of the month e.g. 5."""

    LAST_WEEKDAY = "last_weekday"
    """The last occurrence of a weekday in the month e.g. lastSun."""

    WEEKDAY_ON_OR_BEFORE = "weekday_on_or_before"
    """The last occurrence of a weekday on or before a day e.g. Sun<=25."""

    WEEKDAY_ON_OR_AFTER = "weekday_on_or_after"
    """The first occurrence of a weekday on or after a day e.g. Sun>=8."""


class DaySelector(BaseModel):
    """Describes which day of a month a rule or boundary applies to."""

    model_config = ConfigDict(frozen=True)

    kind: DayType
    """How the day is selected."""

    day: Optional[int] = Field(default=None, ge=1, le=31)
    """The day of the month, or the day the weekday search is anchored on."""

    weekday: Optional[Weekday] = None
    """The weekday searched for, unused for a literal day of the month."""

    @model_validator(mode="after")
    def _verify_fields(self) -> Self:
        """Verify the fields required by the selector kind are present."""
        if self.kind is not DayType.DAY_OF_MONTH and self.weekday is None:
            raise ValueError(f"Day selector {self.kind.value} requires a weekday")
        if self.kind is not DayType.LAST_WEEKDAY and self.day is None:
            raise ValueError(f"Day selector {self.kind.value} requires a day")
        return self

    @classmethod
    def of(cls, day: int) -> DaySelector:
        """Select a literal day of the month."""
        return cls(kind=DayType.DAY_OF_MONTH, day=day)

    @classmethod
    def last(cls, weekday: Weekday) -> DaySelector:
        """Select the last weekday of the month."""
        return cls(kind=DayType.LAST_WEEKDAY, weekday=weekday)

    @classmethod
    def on_or_after(cls, weekday: Weekday, day: int) -> DaySelector:
        """Select the first weekday on or after the day."""
        return cls(kind=DayType.WEEKDAY_ON_OR_AFTER, weekday=weekday, day=day)

    @classmethod
    def on_or_before(cls, weekday: Weekday, day: int) -> DaySelector:
        """Select the last weekday on or before the day."""
        return cls(kind=DayType.WEEKDAY_ON_OR_BEFORE, weekday=weekday, day=day)

    def exists_in(self, year: int, month: int) -> bool:
        """Return false if a literal day of the month is past the end of the month."""
        if self.kind is not DayType.DAY_OF_MONTH or self.day is None:
            return True
        return self.day <= calendar.monthrange(year, month)[1]

    def resolve(self, year: int, month: int) -> datetime.date:
        """Return the date selected within the month of the year.

        Weekday searches anchored on a day may leave the month, e.g. Sun>=29
        in a February without a Sunday on or after the 29th.
        """
        if self.kind is DayType.DAY_OF_MONTH or self.weekday is None:
            return datetime.date(year, month, self.day or 1)
        weekday = self.weekday.rrule_weekday
        if self.kind is DayType.LAST_WEEKDAY:
            return datetime.date(year, month, 1) + relativedelta.relativedelta(
                day=31, weekday=weekday(-1)
            )
        anchor = datetime.date(year, month, 1) + datetime.timedelta(
            days=(self.day or 1) - 1
        )
        if self.kind is DayType.WEEKDAY_ON_OR_AFTER:
            return anchor + relativedelta.relativedelta(weekday=weekday(+1))
        return anchor + relativedelta.relativedelta(weekday=weekday(-1))

    def __str__(self) -> str:
        """Return the zoneinfo source representation of the selector."""
        if self.kind is DayType.DAY_OF_MONTH or self.weekday is None:
            return str(self.day)
        name = self.weekday.name[:3].title()
        if self.kind is DayType.LAST_WEEKDAY:
            return f"last{name}"
        if self.kind is DayType.WEEKDAY_ON_OR_AFTER:
            return f"{name}>={self.day}"
        return f"{name}<={self.day}"


@functools.lru_cache(maxsize=8192)
def resolve_instant(
    year: int,
    month: int | None = None,
    day: DaySelector | None = None,
    time: datetime.timedelta | None = None,
    time_frame: TimeFrame = TimeFrame.WALL,
    utc_offset: datetime.timedelta = _ZERO,
    save: datetime.timedelta = _ZERO,
) -> datetime.datetime:
    """Resolve a year with an optional month, day and time of day to a UTC instant.

    The utc_offset is the zone's base offset and save is the daylight saving
    adjustment, used only to convert standard and wall clock times.
    """
    if month is None:
        return datetime.datetime(year, 1, 1, tzinfo=datetime.UTC)
    if day is None:
        return datetime.datetime(year, month, 1, tzinfo=datetime.UTC)
    result = datetime.datetime.combine(
        day.resolve(year, month), datetime.time(), tzinfo=datetime.UTC
    )
    if time is None:
        return result
    return result + time - time_frame.offset(utc_offset, save)

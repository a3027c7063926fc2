"""Library for the historical periods of a zone.

A zone is described by a series of periods (the continuation lines of a
zoneinfo Zone entry), each with a base UTC offset, either a rule set or a
fixed daylight saving amount, an abbreviation format and an optional UNTIL
column describing when the period ends:

  Zone  Europe/London  -0:01:15  -        LMT      1847 Dec  1  0:00s
                        0:00     GB-Eire  %s       1968 Oct 27
                        1:00     -        BST      1971 Oct 31  2:00u
                        0:00     GB-Eire  %s       1996
                        0:00     EU       GMT/BST

The UNTIL column uses the local time of the period that is ending, so the
daylight saving amount in effect affects when the period ends.
"""

from __future__ import annotations

import datetime
from typing import Optional, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .instant import MAX_INSTANT, DaySelector, TimeFrame, resolve_instant
from .rule import RecurrenceRule, RuleSet

__all__ = [
    "Until",
    "Period",
]

_ZERO = datetime.timedelta(0)


class Until(BaseModel):
    """The end of a period, a literal year with an optional month, day and time."""

    model_config = ConfigDict(frozen=True)

    year: int
    """The year the period ends."""

    month: Optional[int] = Field(default=None, ge=1, le=12)
    """The month the period ends, between 1 and 12."""

    day: Optional[DaySelector] = None
    """The day of the month the period ends."""

    time: Optional[datetime.timedelta] = None
    """The time of day the period ends, midnight if not specified."""

    time_frame: TimeFrame = TimeFrame.WALL
    """The clock the time of day is expressed in."""

    @model_validator(mode="after")
    def _verify_fields(self) -> Self:
        """Verify the day is only specified with a month that contains it."""
        if self.day is None:
            return self
        if self.month is None:
            raise ValueError(f"Until {self.year} has a day without a month")
        if not self.day.exists_in(self.year, self.month):
            raise ValueError(
                f"Until day {self.day} is not in month {self.month} of {self.year}"
            )
        return self

    def resolve(
        self, utc_offset: datetime.timedelta, save: datetime.timedelta
    ) -> datetime.datetime:
        """Return the instant the period ends given the offset and save in effect."""
        return resolve_instant(
            self.year,
            self.month,
            self.day,
            self.time,
            self.time_frame,
            utc_offset,
            save,
        )


class Period(BaseModel):
    """A span of a zone's history with a constant offset definition."""

    model_config = ConfigDict(frozen=True)

    utc_offset: datetime.timedelta
    """The base offset from UTC for standard time."""

    rules: Optional[RuleSet] = None
    """The daylight saving rules for this period, shared with other periods."""

    save: datetime.timedelta = _ZERO
    """A fixed daylight saving amount, when the period has no rules."""

    format: str
    """The abbreviation format, with %s replaced by the rule letters."""

    dst_format: Optional[str] = None
    """The abbreviation used during daylight saving time, if distinct."""

    until: Optional[Until] = None
    """When the period ends, or never if not specified."""

    @model_validator(mode="after")
    def _verify_save(self) -> Self:
        """Verify a period uses either a rule set or a fixed save."""
        if self.rules is not None and self.save:
            raise ValueError(
                f"Period with rules {self.rules.name} can't have a fixed save"
            )
        return self

    def active_rule(self, when: datetime.datetime) -> RecurrenceRule | None:
        """Return the rule in effect at the instant, None for a fixed save."""
        if self.rules is None:
            return None
        return self.rules.active_rule(when, self.utc_offset)

    def save_at(self, when: datetime.datetime) -> datetime.timedelta:
        """Return the daylight saving amount in effect at the instant."""
        if self.rules is None:
            return self.save
        if (rule := self.active_rule(when)) is not None:
            return rule.save
        return _ZERO

    def boundary(self, when: datetime.datetime) -> datetime.datetime:
        """Return the instant the period ends, evaluated as of the instant."""
        if self.until is None:
            return MAX_INSTANT
        return self.until.resolve(self.utc_offset, self.save_at(when))

"""Library for zoneinfo recurrence rules.

A zoneinfo rule describes an offset change that recurs yearly over a range of
years, for example:

  Rule  EU  1981  max  -  Mar  lastSun  1:00u  1:00  S

Rules with the same name form a rule set, and the order of the rules in the
source is significant: the rule set is scanned from the end when looking for
the rule in effect at an instant.

A rule's start is written relative to its own first year, but must be
re-evaluated in the calendar year being queried. The rule in effect at an
instant is the one whose re-evaluated start is the latest one at or before
that instant, considering the queried year and the year before it.
"""

from __future__ import annotations

import bisect
import datetime
import enum
from collections.abc import Sequence
from typing import Optional, Self, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .instant import MAX_YEAR, MIN_YEAR, DaySelector, TimeFrame, resolve_instant

__all__ = [
    "YearLimit",
    "YearClass",
    "RecurrenceRule",
    "RuleSet",
    "resolve_rules",
    "active_rule",
]

_ZERO = datetime.timedelta(0)

_US_PRESIDENTIAL_TERM = 4


class YearLimit(str, enum.Enum):
    """A symbolic year in the FROM and TO columns of a rule."""

    MINIMUM = "minimum"
    """The earliest representable year."""

    MAXIMUM = "maximum"
    """The latest representable year."""

    ONLY = "only"
    """Repeats the FROM year, only valid in the TO column."""


class YearClass(str, enum.Enum):
    """Restricts the years in a rule's range that the rule applies to."""

    ALWAYS = "-"
    EVEN = "even"
    ODD = "odd"
    US_PRESIDENTIAL = "uspres"
    NON_PRESIDENTIAL = "nonpres"

    def matches(self, year: int) -> bool:
        """Return true if the year is of this class."""
        if self is YearClass.EVEN:
            return year % 2 == 0
        if self is YearClass.ODD:
            return year % 2 != 0
        if self is YearClass.US_PRESIDENTIAL:
            return year % _US_PRESIDENTIAL_TERM == 0
        if self is YearClass.NON_PRESIDENTIAL:
            return year % _US_PRESIDENTIAL_TERM != 0
        return True


def _resolve_year(value: Union[int, YearLimit]) -> int:
    if value is YearLimit.MINIMUM:
        return MIN_YEAR
    if value is YearLimit.MAXIMUM:
        return MAX_YEAR
    if isinstance(value, YearLimit):
        raise ValueError(f"Year {value.value} can't be resolved on its own")
    return value


class RecurrenceRule(BaseModel):
    """A single line of a zoneinfo rule set."""

    model_config = ConfigDict(frozen=True)

    name: str
    """The name of the rule set this rule is part of."""

    from_year: Union[int, YearLimit]
    """The first year in which the rule applies."""

    to_year: Union[int, YearLimit] = YearLimit.ONLY
    """The final year in which the rule applies, or ONLY to repeat from_year."""

    year_class: YearClass = YearClass.ALWAYS
    """The type of years within the range the rule applies to."""

    month: Optional[int] = Field(default=None, ge=1, le=12)
    """The month the rule takes effect, between 1 and 12."""

    day: Optional[DaySelector] = None
    """The day of the month the rule takes effect."""

    time: Optional[datetime.timedelta] = None
    """Time of day the rule takes effect, midnight if not specified."""

    time_frame: TimeFrame = TimeFrame.WALL
    """The clock the time of day is expressed in."""

    save: datetime.timedelta = _ZERO
    """Amount added to local standard time while the rule is in effect."""

    letters: Optional[str] = None
    """The variable part of the zone abbreviation e.g. the S or D of EST or EDT."""

    @model_validator(mode="after")
    def _verify_years(self) -> Self:
        """Verify the year range and date fields are consistent."""
        if self.from_year is YearLimit.ONLY:
            raise ValueError(f"Rule {self.name} FROM year can't be 'only'")
        if (
            isinstance(self.from_year, int)
            and not isinstance(self.to_year, YearLimit)
            and self.to_year < self.from_year
        ):
            raise ValueError(
                f"Rule {self.name} TO year {self.to_year} is before FROM year {self.from_year}"
            )
        if self.day is not None and self.month is None:
            raise ValueError(f"Rule {self.name} has a day without a month")
        if self.day is not None and self.month is not None:
            # The first and final years are always resolved by the rule matcher
            for year in (self.effective_from_year, self.effective_to_year):
                if not self.day.exists_in(year, self.month):
                    raise ValueError(
                        f"Rule {self.name} day {self.day} is not in month {self.month} of {year}"
                    )
        return self

    @property
    def effective_from_year(self) -> int:
        """Return the first year the rule applies as a number."""
        return _resolve_year(self.from_year)

    @property
    def effective_to_year(self) -> int:
        """Return the last year the rule applies as a number."""
        if self.to_year is YearLimit.ONLY:
            return self.effective_from_year
        return _resolve_year(self.to_year)

    def applies_to(self, year: int) -> bool:
        """Return true if the rule recurs in the specified year.

        A rule on February 29th does not recur in common years.
        """
        return (
            self.effective_from_year <= year <= self.effective_to_year
            and self.year_class.matches(year)
            and (
                self.day is None
                or self.month is None
                or self.day.exists_in(year, self.month)
            )
        )

    def resolve_start(
        self, year: int, utc_offset: datetime.timedelta
    ) -> datetime.datetime:
        """Return the instant the rule takes effect in the year.

        The utc_offset is the base offset of the period using the rule. Wall
        clock times are interpreted with this rule's own save.
        """
        return resolve_instant(
            year,
            self.month,
            self.day,
            self.time,
            self.time_frame,
            utc_offset,
            self.save,
        )


class RuleSet(BaseModel):
    """An ordered set of rules sharing a name.

    A rule set is shared by reference between every period that uses it, so
    rules resolved from different zones can be compared by identity.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    """The name shared by all rules in the set."""

    rules: tuple[RecurrenceRule, ...] = ()
    """The rules in source document order."""

    @model_validator(mode="after")
    def _verify_names(self) -> Self:
        """Verify that every rule belongs to this set."""
        for rule in self.rules:
            if rule.name != self.name:
                raise ValueError(
                    f"Rule {rule.name} does not belong to rule set {self.name}"
                )
        return self

    def active_rule(
        self, when: datetime.datetime, utc_offset: datetime.timedelta
    ) -> RecurrenceRule | None:
        """Return the rule in effect at the instant, see `active_rule`."""
        return active_rule(self.rules, when, utc_offset)


def resolve_rules(
    rules: Sequence[RecurrenceRule],
    from_year: int,
    to_year: int,
    limit: datetime.datetime,
    utc_offset: datetime.timedelta,
) -> dict[datetime.datetime, RecurrenceRule]:
    """Return the rules that started by the limit, keyed by their start in each year.

    Rules are scanned from the end of the set. Once a rule's final occurrence
    is at or before the limit, the rules before it in the set are assumed to
    have ended too, and the scan of that year stops.
    """
    resolved: dict[datetime.datetime, RecurrenceRule] = {}
    for year in range(from_year, to_year + 1):
        for rule in reversed(rules):
            if not rule.applies_to(year):
                continue
            if rule.resolve_start(rule.effective_to_year, utc_offset) <= limit:
                break
            if rule.resolve_start(rule.effective_from_year, utc_offset) <= limit:
                resolved[rule.resolve_start(year, utc_offset)] = rule
    return dict(sorted(resolved.items()))


def active_rule(
    rules: Sequence[RecurrenceRule],
    when: datetime.datetime,
    utc_offset: datetime.timedelta,
) -> RecurrenceRule | None:
    """Return the rule in effect at the instant, or None if no rule has started."""
    year = when.year
    from_year = year - 1 if year > MIN_YEAR else year
    resolved = resolve_rules(rules, from_year, year, when, utc_offset)
    if (rule := resolved.get(when)) is not None:
        return rule
    starts = list(resolved)
    if index := bisect.bisect_left(starts, when):
        return resolved[starts[index - 1]]
    return None

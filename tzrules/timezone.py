"""A tzinfo implementation backed by zoneinfo rules.

`ZoneTimezone` answers the usual questions about a zone at an instant: the UTC
offset, the daylight saving amount, and the abbreviation in use. It also
implements `datetime.tzinfo` so it can be attached to datetime objects:

```python
from tzrules.tzdata import read_timezone

london = read_timezone("Europe/London")
value = datetime.datetime(2010, 7, 1, 12, tzinfo=datetime.UTC).astimezone(london)
print(value.isoformat(), value.tzname())
```

The tzinfo methods receive local wall clock times. A local time is mapped to
UTC with the offset in effect at that time, which is ambiguous around
transitions: times that are skipped or repeated by a transition resolve to
one of the two candidate offsets and `fold` is ignored. Conversion from UTC
with `fromutc` (used by `astimezone`) is always exact.
"""

from __future__ import annotations

import datetime

from .instant import MAX_INSTANT
from .period import Period
from .rule import RecurrenceRule
from .util import normalize_instant
from .zone import Zone, ZoneEntry, resolve_zone

__all__ = [
    "ZoneTimezone",
]

_ZERO = datetime.timedelta(0)
_MIN_INSTANT = datetime.datetime.min.replace(tzinfo=datetime.UTC)

_LETTERS_TOKEN = "%s"
_OFFSET_TOKEN = "%z"


def _format_offset(offset: datetime.timedelta) -> str:
    """Format an offset the way zic does for %z e.g. +05, -0330 or +053012."""
    seconds = int(offset.total_seconds())
    sign = "-" if seconds < 0 else "+"
    hours, remainder = divmod(abs(seconds), 3600)
    minutes, seconds = divmod(remainder, 60)
    if seconds:
        return f"{sign}{hours:02d}{minutes:02d}{seconds:02d}"
    if minutes:
        return f"{sign}{hours:02d}{minutes:02d}"
    return f"{sign}{hours:02d}"


def _to_utc(local: datetime.datetime, offset: datetime.timedelta) -> datetime.datetime:
    """Remove an offset from a local time, clamped to the datetime range."""
    try:
        return local - offset
    except OverflowError:
        return MAX_INSTANT if offset < _ZERO else _MIN_INSTANT


def _matches_daylight(rule: RecurrenceRule, daylight: bool) -> bool:
    return bool(rule.save) == daylight


def _abbreviation_rule(
    period: Period, when: datetime.datetime, daylight: bool
) -> RecurrenceRule | None:
    """Return a rule to take abbreviation letters from.

    The rule in effect is used when it agrees with the daylight request.
    Otherwise the rule set is walked from its end, and once past the rule in
    effect the first rule that agrees is used. This is a best effort search:
    a matching rule that appears after the rule in effect is never found.
    """
    if period.rules is None or (rule := period.active_rule(when)) is None:
        return None
    if _matches_daylight(rule, daylight):
        return rule
    passed = False
    for candidate in reversed(period.rules.rules):
        if candidate is rule:
            passed = True
        elif passed and _matches_daylight(candidate, daylight):
            return candidate
    return None


class ZoneTimezone(datetime.tzinfo):
    """An implementation of tzinfo for a zone or alias.

    Every query method accepts an optional instant, which defaults to now.
    Naive instants are interpreted as UTC.
    """

    def __init__(self, key: str, entry: ZoneEntry) -> None:
        """Initialize ZoneTimezone."""
        self._key = key
        self._entry = entry

    @property
    def key(self) -> str:
        """Return the name the timezone was looked up with."""
        return self._key

    @property
    def entry(self) -> ZoneEntry:
        """Return the zone or alias backing this timezone."""
        return self._entry

    @property
    def zone(self) -> Zone:
        """Return the concrete zone, following aliases."""
        return resolve_zone(self._entry)

    def offset_at(self, when: datetime.datetime | None = None) -> datetime.timedelta:
        """Return the UTC offset in effect at the instant."""
        return self._entry.effective_offset(normalize_instant(when))

    def raw_offset_at(
        self, when: datetime.datetime | None = None
    ) -> datetime.timedelta:
        """Return the base UTC offset, without daylight saving, at the instant."""
        if (period := self._entry.active_period(normalize_instant(when))) is None:
            return _ZERO
        return period.utc_offset

    def dst_savings_at(
        self, when: datetime.datetime | None = None
    ) -> datetime.timedelta:
        """Return the saving of the rule in effect at the instant.

        Periods with a fixed save have no rule and report no savings.
        """
        if (rule := self._entry.active_rule(normalize_instant(when))) is None:
            return _ZERO
        return rule.save

    def is_daylight_at(self, when: datetime.datetime | None = None) -> bool:
        """Return true if daylight saving time is in effect at the instant."""
        return bool(self.dst_savings_at(when))

    def uses_daylight_time(self, when: datetime.datetime | None = None) -> bool:
        """Return true if the zone currently observes daylight saving time."""
        return self.is_daylight_at(when)

    def display_name(
        self, daylight: bool, when: datetime.datetime | None = None
    ) -> str | None:
        """Return the abbreviation for standard or daylight time at the instant.

        Returns None when the zone has no period in effect at the instant.
        """
        when = normalize_instant(when)
        if (period := self._entry.active_period(when)) is None:
            return None
        template = period.format
        if daylight and period.dst_format:
            template = period.dst_format
        rule = _abbreviation_rule(period, when, daylight)
        letters = ""
        offset = period.utc_offset + period.save
        if rule is not None:
            letters = rule.letters or ""
            offset = period.utc_offset + rule.save
        return template.replace(_OFFSET_TOKEN, _format_offset(offset)).replace(
            _LETTERS_TOKEN, letters
        )

    def has_same_governing_rule(
        self, other: datetime.tzinfo, when: datetime.datetime | None = None
    ) -> bool:
        """Return true if both zones are governed by the same rule object.

        Rule sets are shared between zones, so this compares identity rather
        than the rule contents. Two zones without a rule in effect are
        considered the same.
        """
        if not isinstance(other, ZoneTimezone):
            return False
        when = normalize_instant(when)
        return self._entry.active_rule(when) is other.entry.active_rule(when)

    def _local_to_utc(self, dt: datetime.datetime) -> datetime.datetime:
        """Map a local wall clock time to an instant in UTC."""
        local = dt.replace(tzinfo=datetime.UTC)
        guess = _to_utc(local, self.offset_at(local))
        return _to_utc(local, self.offset_at(guess))

    def utcoffset(self, dt: datetime.datetime | None) -> datetime.timedelta | None:
        """Return offset of local time from UTC, as a timedelta object."""
        if dt is None:
            return None
        return self.offset_at(self._local_to_utc(dt))

    def dst(self, dt: datetime.datetime | None) -> datetime.timedelta | None:
        """Return the daylight saving time (DST) adjustment, if applicable."""
        if dt is None:
            return None
        return self.dst_savings_at(self._local_to_utc(dt))

    def tzname(self, dt: datetime.datetime | None) -> str | None:
        """Return the time zone abbreviation for the datetime."""
        if dt is None:
            return None
        when = self._local_to_utc(dt)
        return self.display_name(self.is_daylight_at(when), when)

    def fromutc(self, dt: datetime.datetime) -> datetime.datetime:
        """Convert a UTC time with this tzinfo attached to local time."""
        if dt.tzinfo is not self:
            raise ValueError("fromutc: dt.tzinfo is not self")
        when = dt.replace(tzinfo=datetime.UTC)
        return (when + self.offset_at(when)).replace(tzinfo=self)

    def __str__(self) -> str:
        """Return the string representation of the timezone."""
        return self._key

    def __repr__(self) -> str:
        """Return the string representation of the timezone."""
        return f"ZoneTimezone({self._key})"

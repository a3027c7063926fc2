"""Library for resolving the active period and offset of a zone.

A zone's periods are listed earliest first and each one ends at its UNTIL
boundary. The period active at an instant is the one with the earliest
boundary that is not before the instant. Periods are scanned from the most
recent one, and the scan stops at the first boundary before the instant
since boundaries never decrease in source order.

A link (alias) gives another name to a zone and forwards every query to it.
"""

from __future__ import annotations

import datetime
import logging
from typing import Union

from pydantic import BaseModel, ConfigDict

from .exceptions import ZoneDataError
from .period import Period
from .rule import RecurrenceRule

__all__ = [
    "Zone",
    "Alias",
    "ZoneEntry",
    "resolve_zone",
]

_LOGGER = logging.getLogger(__name__)

_ZERO = datetime.timedelta(0)


class Zone(BaseModel):
    """A named zone with its ordered historical periods."""

    model_config = ConfigDict(frozen=True)

    name: str
    """The zone name e.g. Europe/London."""

    periods: tuple[Period, ...] = ()
    """The periods in source document order, earliest first."""

    def active_period(self, when: datetime.datetime) -> Period | None:
        """Return the period in effect at the instant, if any."""
        active: Period | None = None
        active_boundary: datetime.datetime | None = None
        for period in reversed(self.periods):
            boundary = period.boundary(when)
            if boundary < when:
                break
            if boundary == when and active is not None:
                break
            if active_boundary is None or boundary < active_boundary:
                active = period
                active_boundary = boundary
        return active

    def active_rule(self, when: datetime.datetime) -> RecurrenceRule | None:
        """Return the rule of the active period in effect at the instant."""
        if (period := self.active_period(when)) is None:
            return None
        return period.active_rule(when)

    def effective_offset(self, when: datetime.datetime) -> datetime.timedelta:
        """Return the UTC offset in effect at the instant, including daylight saving."""
        if (period := self.active_period(when)) is None:
            return _ZERO
        return period.utc_offset + period.save_at(when)


class Alias(BaseModel):
    """Another name for a zone, from a zoneinfo Link line."""

    model_config = ConfigDict(frozen=True)

    name: str
    """The alias name e.g. Europe/Jersey."""

    target: Union[Zone, Alias]
    """The zone (or alias) this name refers to."""

    @property
    def zone(self) -> Zone:
        """Return the zone this alias ultimately refers to."""
        return resolve_zone(self)

    @property
    def periods(self) -> tuple[Period, ...]:
        """Return the periods of the target zone."""
        return self.zone.periods

    def active_period(self, when: datetime.datetime) -> Period | None:
        """Return the period of the target zone in effect at the instant."""
        return self.zone.active_period(when)

    def active_rule(self, when: datetime.datetime) -> RecurrenceRule | None:
        """Return the rule of the target zone in effect at the instant."""
        return self.zone.active_rule(when)

    def effective_offset(self, when: datetime.datetime) -> datetime.timedelta:
        """Return the UTC offset of the target zone at the instant."""
        return self.zone.effective_offset(when)


ZoneEntry = Union[Zone, Alias]
"""A registry entry, either a concrete zone or an alias for one."""


def resolve_zone(entry: ZoneEntry) -> Zone:
    """Follow aliases until reaching a concrete zone."""
    seen: set[str] = set()
    while isinstance(entry, Alias):
        if entry.name in seen:
            raise ZoneDataError(f"Alias cycle detected at {entry.name}")
        seen.add(entry.name)
        _LOGGER.debug("Resolving alias %s to %s", entry.name, entry.target.name)
        entry = entry.target
    return entry

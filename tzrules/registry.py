"""A directory of zones by name.

The registry is populated once while zoneinfo data is loaded and is read
concurrently afterwards. Readers never take a lock: writers serialize on a
lock, copy the current mapping, add their entries and publish the new mapping
with a single assignment, so a reader always sees a complete snapshot.

Entries are never replaced or removed once registered.
"""

from __future__ import annotations

import datetime
import logging
import threading
from collections.abc import Mapping
from functools import cache
from types import MappingProxyType
from typing import TYPE_CHECKING

from .exceptions import ZoneRegistryError
from .util import normalize_instant
from .zone import ZoneEntry

if TYPE_CHECKING:
    from .timezone import ZoneTimezone

__all__ = [
    "ZoneRegistry",
    "get_registry",
]

_LOGGER = logging.getLogger(__name__)


class ZoneRegistry:
    """A thread safe mapping of zone names to zones and aliases."""

    def __init__(self) -> None:
        """Initialize ZoneRegistry."""
        self._lock = threading.Lock()
        self._entries: Mapping[str, ZoneEntry] = MappingProxyType({})

    def register(self, name: str, entry: ZoneEntry) -> None:
        """Add a single zone or alias to the registry."""
        self.register_all({name: entry})

    def register_all(self, entries: Mapping[str, ZoneEntry]) -> None:
        """Add zones and aliases to the registry in a single update.

        Raises ZoneRegistryError if any of the names is already registered, in
        which case none of the entries are added.
        """
        with self._lock:
            current = self._entries
            if duplicates := sorted(name for name in entries if name in current):
                raise ZoneRegistryError(
                    f"Zones already registered: {', '.join(duplicates)}"
                )
            updated = dict(current)
            updated.update(entries)
            self._entries = MappingProxyType(updated)
        _LOGGER.debug(
            "Registered %d zones, %d total", len(entries), len(updated)
        )

    def lookup(self, name: str) -> ZoneEntry | None:
        """Return the zone or alias registered under the name, if any."""
        return self._entries.get(name)

    def timezone(self, name: str) -> ZoneTimezone | None:
        """Return a tzinfo for the zone registered under the name, if any."""
        from .timezone import ZoneTimezone

        if (entry := self.lookup(name)) is None:
            _LOGGER.debug("Zone not found: %s", name)
            return None
        return ZoneTimezone(name, entry)

    def all_names(self) -> set[str]:
        """Return the names of every registered zone and alias."""
        return set(self._entries)

    def names_with_offset(
        self,
        offset: datetime.timedelta,
        when: datetime.datetime | None = None,
    ) -> set[str]:
        """Return the names of zones whose offset is in effect at the instant.

        The instant defaults to now.
        """
        when = normalize_instant(when)
        return {
            name
            for name, entry in self._entries.items()
            if entry.effective_offset(when) == offset
        }

    def __contains__(self, name: object) -> bool:
        """Return true if the name is registered."""
        return name in self._entries

    def __len__(self) -> int:
        """Return the number of registered names."""
        return len(self._entries)


@cache
def get_registry() -> ZoneRegistry:
    """Return the registry shared by the whole process.

    It is filled with the tzdata zones by `tzrules.tzdata.read_timezone`.
    """
    return ZoneRegistry()

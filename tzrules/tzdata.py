"""Library for loading zones from the tzdata package.

The tzdata python package ships the compact zoneinfo source tzdata.zi next to
the compiled TZif files. This module parses that source so the full history
of every zone is available to the rule engine, for example:

```python
from tzrules.tzdata import read_timezone

sydney = read_timezone("Australia/Sydney")
print(sydney.offset_at(datetime.datetime(2010, 1, 1, tzinfo=datetime.UTC)))
```
"""

from __future__ import annotations

import logging
from functools import cache
from importlib import resources

from .exceptions import TzRulesError
from .parsing import ZoneinfoParser
from .registry import ZoneRegistry, get_registry
from .timezone import ZoneTimezone

__all__ = [
    "load_tzdata",
    "read_timezone",
    "read_version",
]

_LOGGER = logging.getLogger(__name__)

_TZDATA_PACKAGE = "tzdata.zoneinfo"
_TZDATA_SOURCE = "tzdata.zi"
_VERSION_PREFIX = "# version "


@cache
def _read_source() -> str:
    """Read and cache the zoneinfo source from the tzdata package."""
    try:
        with resources.files(_TZDATA_PACKAGE).joinpath(_TZDATA_SOURCE).open(
            "r", encoding="utf-8"
        ) as source_file:
            return source_file.read()
    except ModuleNotFoundError as err:
        raise TzRulesError("Unable to load tzdata module, is it installed?") from err
    except FileNotFoundError as err:
        raise TzRulesError(
            f"Unable to find {_TZDATA_SOURCE} in the tzdata module"
        ) from err


def read_version() -> str | None:
    """Return the version of the tzdata release e.g. 2024a."""
    for line in _read_source().splitlines():
        if line.startswith(_VERSION_PREFIX):
            return line[len(_VERSION_PREFIX) :].strip()
    return None


def load_tzdata(registry: ZoneRegistry | None = None) -> ZoneRegistry:
    """Parse the tzdata source and register every zone and alias.

    A new registry is created if one is not specified.
    """
    if registry is None:
        registry = ZoneRegistry()
    _LOGGER.debug("Loading tzdata version %s", read_version())
    parser = ZoneinfoParser()
    parser.feed(_read_source(), source=_TZDATA_SOURCE)
    registry.register_all(parser.build())
    return registry


@cache
def _tzdata_registry() -> ZoneRegistry:
    """Load the tzdata zones into the process wide registry, once."""
    return load_tzdata(get_registry())


def read_timezone(key: str) -> ZoneTimezone:
    """Return a tzinfo for a zone from the tzdata package.

    The first call loads every tzdata zone into the registry returned by
    `get_registry`.
    """
    if (timezone := _tzdata_registry().timezone(key)) is None:
        raise TzRulesError(f"Unable to find timezone in tzdata: {key}")
    return timezone

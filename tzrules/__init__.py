"""A library for resolving UTC offsets from zoneinfo rules.

Zoneinfo sources describe each zone's history as a series of periods with a
base offset and either a fixed daylight saving amount or a named set of
recurring rules such as "last Sunday in October at 2am". This library turns
those declarative descriptions into the offset, daylight saving state and
abbreviation in effect at any instant:

```python
import datetime

from tzrules.tzdata import read_timezone

sydney = read_timezone("Australia/Sydney")
when = datetime.datetime(2010, 10, 2, 16, tzinfo=datetime.UTC)
print(sydney.offset_at(when), sydney.is_daylight_at(when))
```
"""

__all__ = [
    "compat",
    "exceptions",
    "instant",
    "parsing",
    "period",
    "registry",
    "rule",
    "timezone",
    "tzdata",
    "util",
    "zone",
]

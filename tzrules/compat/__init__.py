"""Compatibility switches for reading zoneinfo data.

The zoneinfo sources published over the years are not always strictly
well formed. This package exposes context managers that relax validation
while loading.
"""

__all__ = [
    "parse_compat",
]

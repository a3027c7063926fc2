"""Parsing of zoneinfo source files into zones and aliases."""

from .zoneinfo import ZoneinfoParser, parse_zoneinfo

__all__ = [
    "ZoneinfoParser",
    "parse_zoneinfo",
]

"""Parser for zoneinfo source files.

The zoneinfo sources (africa, europe, northamerica, ... or the compact
tzdata.zi) are made of three kinds of lines:

  Rule  NAME  FROM  TO  TYPE  IN  ON  AT  SAVE  LETTER/S
  Zone  NAME  STDOFF  RULES  FORMAT  [UNTIL]
        STDOFF  RULES  FORMAT  [UNTIL]
  Link  TARGET  LINK-NAME

A Zone line with an UNTIL column is followed by a continuation line with the
next period of the zone. Text after an unquoted # is a comment, see
`tokens` for how lines are split into fields.

Rule lines are grouped into rule sets by name and each rule set is shared by
every zone that references it. Zones may reference rule sets defined later or
in another source file, so references are resolved when `build` is called
after all sources have been fed to the parser.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from pydantic import ValidationError

from ..compat import parse_compat
from ..exceptions import ZoneDataError, ZoneParseError
from ..period import Period
from ..rule import RecurrenceRule, RuleSet
from ..zone import Alias, Zone, ZoneEntry
from .fields import (
    is_amount,
    match_name,
    parse_amount,
    parse_day,
    parse_month,
    parse_save,
    parse_time,
    parse_until,
    parse_year,
    parse_year_class,
)
from .tokens import tokenize_line

__all__ = [
    "ZoneinfoParser",
    "parse_zoneinfo",
]

_LOGGER = logging.getLogger(__name__)

_RULE = "Rule"
_ZONE = "Zone"
_LINK = "Link"
_KEYWORDS = {_RULE: _RULE, _ZONE: _ZONE, _LINK: _LINK}

_RULE_FIELDS = 10
_ZONE_MIN_FIELDS = 5
_CONTINUATION_MIN_FIELDS = 3
_LINK_FIELDS = 3
_NO_VALUE = "-"
_FORMAT_SEPARATOR = "/"


@dataclass
class _SourceLine:
    """A line of source text with the location it was read from."""

    source: str
    number: int
    text: str
    fields: list[str] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.source}:{self.number}: {self.text.strip()}"


@dataclass
class _PendingZone:
    """The period lines of a zone, resolved into periods by `build`."""

    name: str
    lines: list[tuple[_SourceLine, list[str]]] = field(default_factory=list)


@dataclass
class _PendingLink:
    """A link line, resolved into an alias by `build`."""

    line: _SourceLine
    target: str
    name: str


def _keyword(value: str) -> str | None:
    """Return the keyword a line starts with, or None for a continuation line."""
    try:
        return match_name(value, _KEYWORDS, "keyword")
    except ValueError:
        return None


def _split_format(value: str) -> tuple[str, str | None]:
    """Split a FORMAT column into standard and daylight formats."""
    if _FORMAT_SEPARATOR in value:
        std, dst = value.split(_FORMAT_SEPARATOR, 1)
        return std, dst
    return value, None


class ZoneinfoParser:
    """Accumulates zoneinfo source text and builds zones and aliases."""

    def __init__(self) -> None:
        """Initialize ZoneinfoParser."""
        self._rules: dict[str, list[RecurrenceRule]] = {}
        self._zones: dict[str, _PendingZone] = {}
        self._links: list[_PendingLink] = []
        self._continuation: _PendingZone | None = None

    def feed(self, text: str, source: str = "<string>") -> None:
        """Parse the lines of a zoneinfo source."""
        _LOGGER.debug("Parsing zoneinfo source %s", source)
        self._continuation = None
        for number, text_line in enumerate(text.splitlines(), start=1):
            line = _SourceLine(source, number, text_line)
            try:
                line.fields = tokenize_line(text_line)
                if line.fields:
                    self._parse_line(line)
            except ValueError as err:
                self._handle_error(
                    f"Unable to parse line {number} of {source}", line, err
                )

    def _handle_error(self, message: str, line: _SourceLine, err: Exception) -> None:
        """Raise a parse error, or log it when lenient parsing is enabled."""
        if parse_compat.is_lenient_parsing_enabled():
            _LOGGER.warning("%s, skipping: %s (%s)", message, line, err)
            return
        raise ZoneParseError(message, detailed_error=f"{line}: {err}") from err

    def _parse_line(self, line: _SourceLine) -> None:
        keyword = _keyword(line.fields[0])
        if keyword is None:
            self._parse_continuation(line)
            return
        self._continuation = None
        if keyword == _RULE:
            self._parse_rule(line)
        elif keyword == _ZONE:
            self._parse_zone(line)
        else:
            self._parse_link(line)

    def _parse_rule(self, line: _SourceLine) -> None:
        if len(line.fields) != _RULE_FIELDS:
            raise ValueError(f"Expected {_RULE_FIELDS} fields in a Rule line")
        (_, name, from_year, to_year, year_class, month, day, at, save, letters) = (
            line.fields
        )
        time, time_frame = parse_time(at)
        rule = RecurrenceRule(
            name=name,
            from_year=parse_year(from_year),
            to_year=parse_year(to_year),
            year_class=parse_year_class(year_class),
            month=parse_month(month),
            day=parse_day(day),
            time=time,
            time_frame=time_frame,
            save=parse_save(save),
            letters=None if letters == _NO_VALUE else letters,
        )
        self._rules.setdefault(name, []).append(rule)

    def _parse_zone(self, line: _SourceLine) -> None:
        if len(line.fields) < _ZONE_MIN_FIELDS:
            raise ValueError(
                f"Expected at least {_ZONE_MIN_FIELDS} fields in a Zone line"
            )
        name = line.fields[1]
        if name in self._zones:
            raise ValueError(f"Duplicate zone name {name}")
        zone = _PendingZone(name)
        self._zones[name] = zone
        self._add_period(zone, line, line.fields[2:])

    def _parse_continuation(self, line: _SourceLine) -> None:
        if self._continuation is None:
            raise ValueError("Unexpected continuation line")
        if len(line.fields) < _CONTINUATION_MIN_FIELDS:
            raise ValueError(
                f"Expected at least {_CONTINUATION_MIN_FIELDS} fields in a continuation line"
            )
        self._add_period(self._continuation, line, line.fields)

    def _add_period(
        self, zone: _PendingZone, line: _SourceLine, fields: list[str]
    ) -> None:
        # Validate the columns now so errors point at the right line
        parse_amount(fields[0])
        parse_until(fields[3:])
        zone.lines.append((line, fields))
        self._continuation = zone if len(fields) > _CONTINUATION_MIN_FIELDS else None

    def _parse_link(self, line: _SourceLine) -> None:
        if len(line.fields) != _LINK_FIELDS:
            raise ValueError(f"Expected {_LINK_FIELDS} fields in a Link line")
        self._links.append(_PendingLink(line, line.fields[1], line.fields[2]))

    def _build_period(
        self, line: _SourceLine, fields: list[str], rule_sets: dict[str, RuleSet]
    ) -> Period:
        stdoff, rules, format_value = fields[:3]
        rule_set: RuleSet | None = None
        save = parse_amount(_NO_VALUE)
        if rules != _NO_VALUE:
            if is_amount(rules):
                save = parse_amount(rules)
            elif (rule_set := rule_sets.get(rules)) is None:
                raise ZoneDataError(f"Unknown rule set {rules} at {line}")
        format_std, format_dst = _split_format(format_value)
        try:
            return Period(
                utc_offset=parse_amount(stdoff),
                rules=rule_set,
                save=save,
                format=format_std,
                dst_format=format_dst,
                until=parse_until(fields[3:]),
            )
        except ValidationError as err:
            raise ZoneDataError(f"Invalid period at {line}: {err}") from err

    def _build_zone(
        self, pending: _PendingZone, rule_sets: dict[str, RuleSet]
    ) -> Zone:
        return Zone(
            name=pending.name,
            periods=tuple(
                self._build_period(line, fields, rule_sets)
                for line, fields in pending.lines
            ),
        )

    def build(self) -> dict[str, ZoneEntry]:
        """Return every zone and alias parsed so far, keyed by name.

        Raises ZoneDataError when a zone references an unknown rule set or a
        link references an unknown zone, unless lenient parsing is enabled.
        """
        rule_sets = {
            name: RuleSet(name=name, rules=tuple(rules))
            for name, rules in self._rules.items()
        }
        entries: dict[str, ZoneEntry] = {}
        for name, pending in self._zones.items():
            try:
                entries[name] = self._build_zone(pending, rule_sets)
            except ZoneDataError as err:
                if not parse_compat.is_lenient_parsing_enabled():
                    raise
                _LOGGER.warning("Skipping zone %s: %s", name, err)

        links = list(self._links)
        while links:
            remaining: list[_PendingLink] = []
            for link in links:
                if link.name in entries:
                    self._link_error(f"Link name {link.name} is already defined", link)
                elif (target := entries.get(link.target)) is not None:
                    entries[link.name] = Alias(name=link.name, target=target)
                else:
                    remaining.append(link)
            if len(remaining) == len(links):
                for link in remaining:
                    self._link_error(f"Unknown link target {link.target}", link)
                break
            links = remaining

        _LOGGER.debug(
            "Built %d rule sets, %d zones and %d links",
            len(rule_sets),
            len(self._zones),
            len(self._links),
        )
        return entries

    def _link_error(self, message: str, link: _PendingLink) -> None:
        if not parse_compat.is_lenient_parsing_enabled():
            raise ZoneDataError(f"{message} at {link.line}")
        _LOGGER.warning("Skipping link %s: %s", link.name, message)


def parse_zoneinfo(sources: Iterable[str] | str) -> dict[str, ZoneEntry]:
    """Parse one or more zoneinfo sources into zones and aliases keyed by name."""
    if isinstance(sources, str):
        sources = [sources]
    parser = ZoneinfoParser()
    for index, text in enumerate(sources):
        parser.feed(text, source=f"<source {index}>")
    return parser.build()

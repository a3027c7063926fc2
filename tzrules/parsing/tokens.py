"""Split zoneinfo source lines into fields.

Parsing expression grammar for a zoneinfo source line, defined using
pyparsing. Fields are separated by white space and an unquoted # starts a
comment that runs to the end of the line. A field may be enclosed in double
quotes when it contains white space or a #, e.g. a FORMAT of "Some Zone".

The responsibility here is only to find the fields. The meaning of each
field is handled by the zoneinfo parser.
"""

from __future__ import annotations

from functools import cache

from pyparsing import (
    ParseException,
    ParserElement,
    QuotedString,
    Word,
    ZeroOrMore,
    printables,
    python_style_comment,
)

__all__ = [
    "tokenize_line",
]

_QUOTE = '"'
_COMMENT = "#"


@cache
def create_parser() -> ParserElement:
    """Create the zoneinfo line parser."""
    quoted_field = QuotedString(_QUOTE)
    plain_field = Word(printables, exclude_chars=_QUOTE + _COMMENT)
    line = ZeroOrMore(quoted_field | plain_field)
    line.ignore(python_style_comment)
    return line


def tokenize_line(line: str) -> list[str]:
    """Return the fields of a zoneinfo source line, without any comment."""
    if _COMMENT not in line and _QUOTE not in line:
        return line.split()
    try:
        result = create_parser().parse_string(line, parse_all=True)
    except ParseException as err:
        raise ValueError(f"Unable to split line into fields: {err}") from err
    return [str(value) for value in result.as_list()]

"""Compatibility layer for reading malformed zoneinfo source files."""

from collections.abc import Generator
import contextlib
import contextvars


_lenient_parsing = contextvars.ContextVar("lenient_parsing", default=False)


@contextlib.contextmanager
def enable_lenient_parsing() -> Generator[None]:
    """Context manager to log and skip malformed lines in zoneinfo sources."""
    token = _lenient_parsing.set(True)
    try:
        yield
    finally:
        _lenient_parsing.reset(token)


def is_lenient_parsing_enabled() -> bool:
    """Check if lenient parsing is enabled."""
    return _lenient_parsing.get()

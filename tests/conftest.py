"""Test fixtures."""

import pathlib

import pytest

from tzrules.parsing import parse_zoneinfo
from tzrules.registry import ZoneRegistry
from tzrules.zone import ZoneEntry

TESTDATA_PATH = pathlib.Path(__file__).parent / "testdata"
TESTDATA_SOURCES = ("europe", "australasia")


@pytest.fixture(name="entries")
def mock_entries() -> dict[str, ZoneEntry]:
    """Fixture with the zones and aliases parsed from the test data."""
    return parse_zoneinfo(
        [
            (TESTDATA_PATH / name).read_text(encoding="utf-8")
            for name in TESTDATA_SOURCES
        ]
    )


@pytest.fixture(name="registry")
def mock_registry(entries: dict[str, ZoneEntry]) -> ZoneRegistry:
    """Fixture with a registry populated from the test data."""
    registry = ZoneRegistry()
    registry.register_all(entries)
    return registry

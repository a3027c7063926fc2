"""Tests for the tzinfo implementation backed by zoneinfo rules."""

import datetime
import pathlib

import freezegun
import pytest

from tzrules.parsing import parse_zoneinfo
from tzrules.registry import ZoneRegistry
from tzrules.timezone import ZoneTimezone
from tzrules.zone import ZoneEntry

TESTDATA_PATH = pathlib.Path(__file__).parent / "testdata"

HOUR = datetime.timedelta(hours=1)
ZERO = datetime.timedelta(0)

SUMMER_2010 = datetime.datetime(2010, 7, 1, tzinfo=datetime.UTC)
WINTER_2010 = datetime.datetime(2010, 1, 15, tzinfo=datetime.UTC)


@pytest.fixture(name="london")
def mock_london(registry: ZoneRegistry) -> ZoneTimezone:
    """Fixture for the Europe/London timezone."""
    timezone = registry.timezone("Europe/London")
    assert timezone
    return timezone


@pytest.fixture(name="sydney")
def mock_sydney(registry: ZoneRegistry) -> ZoneTimezone:
    """Fixture for the Australia/Sydney timezone."""
    timezone = registry.timezone("Australia/Sydney")
    assert timezone
    return timezone


@pytest.mark.parametrize(
    "when,offset",
    [
        (datetime.datetime(2010, 3, 28, 0, 59, 59, tzinfo=datetime.UTC), ZERO),
        (datetime.datetime(2010, 3, 28, 1, 0, 0, tzinfo=datetime.UTC), HOUR),
        (datetime.datetime(2010, 10, 31, 0, 59, 59, tzinfo=datetime.UTC), HOUR),
        (datetime.datetime(2010, 10, 31, 1, 0, 0, tzinfo=datetime.UTC), ZERO),
    ],
)
def test_london_offset(
    london: ZoneTimezone, when: datetime.datetime, offset: datetime.timedelta
) -> None:
    """Test the offset of London around the 2010 transitions."""
    assert london.offset_at(when) == offset
    assert london.raw_offset_at(when) == ZERO
    assert london.dst_savings_at(when) == offset
    assert london.is_daylight_at(when) == bool(offset)


@pytest.mark.parametrize(
    "when,offset",
    [
        (datetime.datetime(2010, 4, 3, 15, 59, 59, tzinfo=datetime.UTC), 11 * HOUR),
        (datetime.datetime(2010, 4, 3, 16, 0, 0, tzinfo=datetime.UTC), 10 * HOUR),
        (datetime.datetime(2010, 10, 2, 15, 59, 59, tzinfo=datetime.UTC), 10 * HOUR),
        (datetime.datetime(2010, 10, 2, 16, 0, 0, tzinfo=datetime.UTC), 11 * HOUR),
    ],
)
def test_sydney_offset(
    sydney: ZoneTimezone, when: datetime.datetime, offset: datetime.timedelta
) -> None:
    """Test the offset of Sydney around the 2010 transitions."""
    assert sydney.offset_at(when) == offset
    assert sydney.raw_offset_at(when) == 10 * HOUR
    assert sydney.is_daylight_at(when) == (offset == 11 * HOUR)


def test_offset_with_local_instant(london: ZoneTimezone) -> None:
    """Test instants in other timezones or without a timezone."""
    assert london.offset_at(
        datetime.datetime(2010, 3, 28, 1, 59, 59, tzinfo=datetime.timezone(HOUR))
    ) == ZERO
    assert london.offset_at(datetime.datetime(2010, 3, 28, 1, 0, 0)) == HOUR


@freezegun.freeze_time("2010-07-01 12:00:00")
def test_defaults_to_now(london: ZoneTimezone) -> None:
    """Test queries use the current time when an instant is not specified."""
    assert london.offset_at() == HOUR
    assert london.dst_savings_at() == HOUR
    assert london.is_daylight_at()
    assert london.uses_daylight_time()
    assert london.display_name(True) == "BST"


def test_fixed_period(london: ZoneTimezone) -> None:
    """Test a period with a fixed offset and no rules."""
    when = datetime.datetime(1969, 7, 1, tzinfo=datetime.UTC)
    assert london.offset_at(when) == HOUR
    assert london.raw_offset_at(when) == HOUR
    assert london.dst_savings_at(when) == ZERO
    assert not london.is_daylight_at(when)
    assert london.display_name(False, when) == "BST"


def test_uses_daylight_time(registry: ZoneRegistry) -> None:
    """Test zones with and without daylight saving time."""
    perth = registry.timezone("Australia/Perth")
    assert perth
    assert not perth.uses_daylight_time(SUMMER_2010)
    assert perth.offset_at(SUMMER_2010) == 8 * HOUR
    assert perth.offset_at(WINTER_2010) == 8 * HOUR

    when = datetime.datetime(2008, 1, 15, tzinfo=datetime.UTC)
    assert perth.uses_daylight_time(when)
    assert perth.offset_at(when) == 9 * HOUR

    andorra = registry.timezone("Europe/Andorra")
    assert andorra
    assert andorra.uses_daylight_time(SUMMER_2010)
    assert not andorra.uses_daylight_time(WINTER_2010)


@pytest.mark.parametrize(
    "key,when,standard,daylight",
    [
        ("Europe/London", SUMMER_2010, "GMT", "BST"),
        ("Europe/London", WINTER_2010, "GMT", "BST"),
        ("Europe/Jersey", SUMMER_2010, "GMT", "BST"),
        ("Europe/Andorra", SUMMER_2010, "CET", "CEST"),
        ("Europe/Andorra", WINTER_2010, "CET", "CEST"),
        ("Australia/Sydney", SUMMER_2010, "AEST", "AEDT"),
        ("Australia/Sydney", WINTER_2010, "AEST", "AEDT"),
        ("Atlantic/Reykjavik", SUMMER_2010, "GMT", "GMT"),
        (
            "Europe/London",
            datetime.datetime(1985, 7, 1, tzinfo=datetime.UTC),
            "GMT",
            "BST",
        ),
    ],
)
def test_display_name(
    registry: ZoneRegistry,
    key: str,
    when: datetime.datetime,
    standard: str,
    daylight: str,
) -> None:
    """Test the standard and daylight abbreviations of a zone."""
    timezone = registry.timezone(key)
    assert timezone
    assert timezone.display_name(False, when) == standard
    assert timezone.display_name(True, when) == daylight


def test_display_name_search_limit(london: ZoneTimezone) -> None:
    """Test letters are only taken from rules listed before the rule in effect."""
    when = datetime.datetime(1975, 7, 1, tzinfo=datetime.UTC)
    assert london.display_name(True, when) == "BST"
    # The only standard time rule of the year is listed after the rule in effect
    assert london.display_name(False, when) == ""


def test_display_name_offset_format() -> None:
    """Test abbreviations built from the numeric offset."""
    entries = parse_zoneinfo(
        "\n".join(
            [
                "Zone Test/India 5:30 - %z",
                "Zone Test/Newfoundland -3:30 1:00 %z",
                "Zone Test/Seconds 0:20:45 - %z",
            ]
        )
    )
    assert ZoneTimezone("Test/India", entries["Test/India"]).display_name(
        False, SUMMER_2010
    ) == "+0530"
    assert ZoneTimezone(
        "Test/Newfoundland", entries["Test/Newfoundland"]
    ).display_name(True, SUMMER_2010) == "-0230"
    assert ZoneTimezone("Test/Seconds", entries["Test/Seconds"]).display_name(
        False, SUMMER_2010
    ) == "+002045"


def test_display_name_no_period() -> None:
    """Test a zone with no period in effect has no display name."""
    entries = parse_zoneinfo("Zone Test/Ended 1:00 - TST 2000\n")
    timezone = ZoneTimezone("Test/Ended", entries["Test/Ended"])
    assert timezone.display_name(False, SUMMER_2010) is None
    assert timezone.offset_at(SUMMER_2010) == ZERO
    assert timezone.raw_offset_at(SUMMER_2010) == ZERO


@pytest.mark.parametrize(
    "when",
    [
        datetime.datetime(1900, 1, 1, tzinfo=datetime.UTC),
        datetime.datetime(1969, 7, 1, tzinfo=datetime.UTC),
        datetime.datetime(1975, 7, 1, tzinfo=datetime.UTC),
        datetime.datetime(1985, 1, 1, tzinfo=datetime.UTC),
        datetime.datetime(2010, 3, 28, 1, 0, 0, tzinfo=datetime.UTC),
        SUMMER_2010,
        WINTER_2010,
    ],
)
def test_alias_round_trip(registry: ZoneRegistry, when: datetime.datetime) -> None:
    """Test an alias answers exactly like the zone it refers to."""
    london = registry.timezone("Europe/London")
    jersey = registry.timezone("Europe/Jersey")
    assert london
    assert jersey
    assert jersey.offset_at(when) == london.offset_at(when)
    assert jersey.raw_offset_at(when) == london.raw_offset_at(when)
    assert jersey.dst_savings_at(when) == london.dst_savings_at(when)
    assert jersey.is_daylight_at(when) == london.is_daylight_at(when)
    assert jersey.display_name(False, when) == london.display_name(False, when)
    assert jersey.display_name(True, when) == london.display_name(True, when)
    assert jersey.has_same_governing_rule(london, when)


def test_same_governing_rule(registry: ZoneRegistry) -> None:
    """Test zones sharing a rule set are governed by the same rule."""
    andorra = registry.timezone("Europe/Andorra")
    tirane = registry.timezone("Europe/Tirane")
    sydney = registry.timezone("Australia/Sydney")
    assert andorra
    assert tirane
    assert sydney

    assert andorra.has_same_governing_rule(andorra, SUMMER_2010)
    assert andorra.has_same_governing_rule(tirane, SUMMER_2010)
    assert tirane.has_same_governing_rule(andorra, SUMMER_2010)
    assert not andorra.has_same_governing_rule(sydney, SUMMER_2010)
    assert not sydney.has_same_governing_rule(andorra, SUMMER_2010)
    assert not andorra.has_same_governing_rule(datetime.UTC, SUMMER_2010)


def test_same_governing_rule_by_identity(entries: dict[str, ZoneEntry]) -> None:
    """Test equal rules loaded separately are not the same governing rule."""
    reloaded = parse_zoneinfo((TESTDATA_PATH / "europe").read_text(encoding="utf-8"))
    andorra = ZoneTimezone("Europe/Andorra", entries["Europe/Andorra"])
    other = ZoneTimezone("Europe/Andorra", reloaded["Europe/Andorra"])
    assert andorra.zone.active_rule(SUMMER_2010) == other.zone.active_rule(SUMMER_2010)
    assert not andorra.has_same_governing_rule(other, SUMMER_2010)


def test_same_governing_rule_without_rules(registry: ZoneRegistry) -> None:
    """Test zones without a rule in effect compare as the same."""
    london = registry.timezone("Europe/London")
    reykjavik = registry.timezone("Atlantic/Reykjavik")
    assert london
    assert reykjavik
    assert london.has_same_governing_rule(
        reykjavik, datetime.datetime(1969, 7, 1, tzinfo=datetime.UTC)
    )


def test_tzinfo_from_utc(london: ZoneTimezone) -> None:
    """Test converting instants to local time with astimezone."""
    value = datetime.datetime(2010, 7, 1, 12, 0, 0, tzinfo=datetime.UTC).astimezone(
        london
    )
    assert value.hour == 13
    assert value.tzinfo is london
    assert value.utcoffset() == HOUR
    assert value.dst() == HOUR
    assert value.tzname() == "BST"

    value = WINTER_2010.astimezone(london)
    assert value.hour == 0
    assert value.utcoffset() == ZERO
    assert value.dst() == ZERO
    assert value.tzname() == "GMT"


def test_tzinfo_local_time(sydney: ZoneTimezone) -> None:
    """Test attaching the timezone to a local wall clock time."""
    value = datetime.datetime(2010, 1, 15, 12, 0, 0, tzinfo=sydney)
    assert value.utcoffset() == 11 * HOUR
    assert value.tzname() == "AEDT"
    assert value.astimezone(datetime.UTC) == datetime.datetime(
        2010, 1, 15, 1, 0, 0, tzinfo=datetime.UTC
    )

    value = datetime.datetime(2010, 7, 1, 12, 0, 0, tzinfo=sydney)
    assert value.utcoffset() == 10 * HOUR
    assert value.dst() == ZERO
    assert value.tzname() == "AEST"


def test_tzinfo_none(london: ZoneTimezone) -> None:
    """Test the tzinfo methods called without a datetime."""
    assert london.utcoffset(None) is None
    assert london.dst(None) is None
    assert london.tzname(None) is None


def test_tzinfo_range_limits() -> None:
    """Test local times at the ends of the datetime range."""
    entries = parse_zoneinfo(
        "\n".join(
            [
                "Zone Test/West -5:00 - WST",
                "Zone Test/East 5:00 - EST",
            ]
        )
    )
    west = ZoneTimezone("Test/West", entries["Test/West"])
    east = ZoneTimezone("Test/East", entries["Test/East"])
    assert datetime.datetime.max.replace(tzinfo=west).utcoffset() == -5 * HOUR
    assert datetime.datetime.max.replace(tzinfo=west).tzname() == "WST"
    assert datetime.datetime.min.replace(tzinfo=east).utcoffset() == 5 * HOUR
    assert datetime.datetime.min.replace(tzinfo=east).dst() == ZERO


def test_fromutc_other_timezone(london: ZoneTimezone) -> None:
    """Test fromutc requires the datetime to use this timezone."""
    with pytest.raises(ValueError, match="is not self"):
        london.fromutc(SUMMER_2010)


def test_str(london: ZoneTimezone) -> None:
    """Test the string representations of a timezone."""
    assert str(london) == "Europe/London"
    assert repr(london) == "ZoneTimezone(Europe/London)"

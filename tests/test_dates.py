from datetime import date, datetime, timedelta, timezone

import pytest

from reviewdesk.services.dates import NO_DATE, format_date, parse_date


@pytest.mark.parametrize(
    "raw",
    [
        "2024-03-15T10:30:00Z",
        "2024-03-15T10:30:00.123Z",
        "2024-03-15T10:30:00+03:00",
        1710499800000,
        "1710499800000",
        1710499800,
        "1710499800",
        "2024-03-15",
        "15.03.2024",
        datetime(2024, 3, 15, 10, 30),
        date(2024, 3, 15),
    ],
)
def test_format_date_known_encodings(raw):
    assert format_date(raw) == "15.03.2024"


def test_format_date_pads_day_and_month():
    assert format_date("2024-01-05") == "05.01.2024"
    assert format_date("2024-01-05T00:00") == "05.01.2024"


@pytest.mark.parametrize("raw", [None, "", 0, [], {}])
def test_format_date_empty_values_give_sentinel(raw):
    assert format_date(raw) == NO_DATE


def test_format_date_passes_unknown_text_through():
    assert format_date("вчера") == "вчера"
    assert format_date("15/03/2024") == "15/03/2024"


def test_format_date_never_raises():
    assert format_date("2024-13-45") == NO_DATE
    assert format_date("2024-02-30T10:00") == NO_DATE
    # millisecond epoch far outside the datetime range
    assert format_date(10**20) == NO_DATE


def test_parse_date_returns_aware_utc():
    parsed = parse_date("2024-03-15T10:30:00Z")
    assert parsed == datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)

    assert parse_date(1710499800000) == datetime(2024, 3, 15, 10, 50, tzinfo=timezone.utc)
    assert parse_date("15.03.2024") == datetime(2024, 3, 15, tzinfo=timezone.utc)
    assert parse_date("2024-03-15") == datetime(2024, 3, 15, tzinfo=timezone.utc)
    assert parse_date(datetime(2024, 3, 15)).tzinfo is not None


@pytest.mark.parametrize("raw", [None, "", "garbage", 0, {"a": 1}, "31.02.2024"])
def test_parse_date_unparseable_is_none(raw):
    assert parse_date(raw) is None


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-03-15T23:30:00-05:00", "16.03.2024"),
        ("2024-03-16T01:30:00+03:00", "15.03.2024"),
        (datetime(2024, 3, 15, 23, 30, tzinfo=timezone(timedelta(hours=-5))), "16.03.2024"),
    ],
)
def test_displayed_date_agrees_with_sort_key(raw, expected):
    assert format_date(raw) == expected
    assert parse_date(raw).strftime("%d.%m.%Y") == expected

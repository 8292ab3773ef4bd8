import json
from datetime import datetime

import pytest

from stillopen.models import Category, TradingWindow, Weekday
from stillopen.parser import (
    InvalidInstantError,
    infer_category,
    load_venues,
    parse_instant,
    parse_venue,
    schedule_from_periods,
)

VENUES_YAML = """\
venues:
  - id: rocks-pub
    name: The Rocks Pub
    category: bar
    address: 1 George St, The Rocks
    website: https://rockspub.example
    on_deal_platform: true
    hours:
      fri: [[17:00, "02:00"]]
      sat: [["12:00", "00:00"]]
  - id: gallery
    name: Harbour Gallery
    types: [museum, point_of_interest]
    suburb: Millers Point
    lat: -33.857
    lng: 151.205
  - id: rocks-pub
    name: Duplicate Pub
    category: Bar
"""


def test_parse_instant_iso():
    assert parse_instant("2026-10-16T22:30") == datetime(2026, 10, 16, 22, 30)


def test_parse_instant_drops_timezone():
    assert parse_instant("2026-10-16T22:30:00+11:00") == datetime(2026, 10, 16, 22, 30)


@pytest.mark.parametrize("text", [None, "", "   ", "tonight", "2026-13-01T10:00"])
def test_parse_instant_invalid(text):
    with pytest.raises(InvalidInstantError):
        parse_instant(text)


def test_invalid_instant_is_value_error():
    assert issubclass(InvalidInstantError, ValueError)


@pytest.mark.parametrize(
    "types,expected",
    [
        (["restaurant", "bar"], Category.RESTAURANT),
        (["Cafe"], Category.CAFE),
        (["ice_cream_shop"], Category.DESSERT),
        (["night_club"], Category.BAR),
        (["bowling_alley"], Category.ACTIVITY),
        (["point_of_interest"], Category.ACTIVITY),
        ([], Category.ACTIVITY),
    ],
)
def test_infer_category(types, expected):
    assert infer_category(types) is expected


def test_schedule_from_periods():
    periods = [
        # Sunday 10:00-16:00
        {"open": {"day": 0, "hour": 10, "minute": 0}, "close": {"day": 0, "hour": 16, "minute": 0}},
        # Friday 17:00 until Saturday 02:00
        {"open": {"day": 5, "hour": 17}, "close": {"day": 6, "hour": 2}},
        # Saturday 18:00 until midnight
        {"open": {"day": 6, "hour": 18, "minute": 0}, "close": {"day": 0, "hour": 0, "minute": 0}},
        {"open": {"day": 1, "hour": 9}},
    ]
    schedule = schedule_from_periods(periods)

    assert schedule.windows(Weekday.SUN) == (TradingWindow("10:00", "16:00"),)
    assert schedule.windows(Weekday.FRI) == (TradingWindow("17:00", "02:00"),)
    assert schedule.windows(Weekday.SAT) == (TradingWindow("18:00", "24:00"),)
    assert schedule.windows(Weekday.MON) == ()


def test_schedule_from_periods_without_data():
    assert schedule_from_periods(None) is None


def test_parse_venue_requires_known_category():
    with pytest.raises(ValueError):
        parse_venue({"id": "x", "name": "X", "category": "Nightclub"})


def test_parse_venue_without_hours_has_no_schedule():
    venue = parse_venue({"id": "x", "name": "X", "category": "Cafe"})
    assert venue.schedule is None
    assert venue.website is None
    assert venue.deal_url is None


def test_load_venues(tmp_path):
    path = tmp_path / "venues.yaml"
    path.write_text(VENUES_YAML, encoding="utf-8")

    venues = load_venues(path)

    assert [v.id for v in venues] == ["rocks-pub", "gallery"]
    pub, gallery = venues

    assert pub.category is Category.BAR
    assert pub.address == "1 George St, The Rocks"
    assert pub.deal_url == "https://eatclub.com.au/venue/the-rocks-pub"
    # Unquoted 17:00 arrives from YAML as 1020 minutes
    assert pub.schedule.windows(Weekday.FRI) == (TradingWindow("17:00", "02:00"),)
    assert pub.schedule.windows(Weekday.SAT) == (TradingWindow("12:00", "00:00"),)

    assert gallery.category is Category.ACTIVITY
    assert gallery.address == "Millers Point"
    assert gallery.schedule is None
    assert (gallery.latitude, gallery.longitude) == (-33.857, 151.205)


def test_load_venues_json(tmp_path):
    path = tmp_path / "venues.json"
    data = {
        "venues": [
            {
                "id": "cafe",
                "name": "Corner Cafe",
                "category": "Cafe",
                "booking_url": "https://book.example/cafe",
                "on_deal_platform": True,
                "deal_url": "https://deals.example/cafe",
                "hours": {"monday": [["07:00", "15:00"]]},
            }
        ]
    }
    path.write_text(json.dumps(data), encoding="utf-8")

    (venue,) = load_venues(path)
    assert venue.booking_url == "https://book.example/cafe"
    assert venue.deal_url == "https://deals.example/cafe"
    assert venue.schedule.windows(Weekday.MON) == (TradingWindow("07:00", "15:00"),)


def test_load_venues_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_venues(path) == []


def test_load_venues_unknown_day(tmp_path):
    path = tmp_path / "venues.yaml"
    path.write_text(
        'venues:\n  - id: x\n    name: X\n    category: Bar\n    hours:\n      funday: [["10:00", "12:00"]]\n',
        encoding="utf-8",
    )
    with pytest.raises(ValueError):
        load_venues(path)


def test_parse_venue_skips_malformed_windows():
    venue = parse_venue(
        {
            "id": "x",
            "name": "X",
            "category": "Bar",
            "hours": {
                "fri": [["17:00"], ["18:00", "23:00"], ["09:00", "12:00", "15:00"], "17:00"],
                "sat": ["17:00", "02:00"],
                "sun": 1020,
                "mon": None,
            },
        }
    )
    assert venue.schedule.windows(Weekday.FRI) == (TradingWindow("18:00", "23:00"),)
    assert venue.schedule.windows(Weekday.SAT) == ()
    assert venue.schedule.windows(Weekday.SUN) == ()
    assert venue.schedule.windows(Weekday.MON) == ()


def test_load_venues_keeps_file_with_malformed_window(tmp_path):
    path = tmp_path / "venues.yaml"
    path.write_text(
        "venues:\n"
        "  - id: pub\n"
        "    name: Pub\n"
        "    category: Bar\n"
        "    hours:\n"
        '      fri: ["17:00", "02:00"]\n'
        '      sat: [["17:00", "02:00"]]\n'
        "  - id: cafe\n"
        "    name: Cafe\n"
        "    category: Cafe\n",
        encoding="utf-8",
    )
    pub, cafe = load_venues(path)
    assert pub.schedule.windows(Weekday.FRI) == ()
    assert pub.schedule.windows(Weekday.SAT) == (TradingWindow("17:00", "02:00"),)
    assert cafe.id == "cafe"


def test_schedule_from_periods_skips_malformed_periods():
    periods = [
        "Monday: 9 AM - 5 PM",
        None,
        {"open": "09:00", "close": "17:00"},
        {"open": {"day": 1, "hour": 9}, "close": {"day": 1, "hour": 17}},
    ]
    schedule = schedule_from_periods(periods)
    assert schedule.windows(Weekday.MON) == (TradingWindow("09:00", "17:00"),)

from datetime import datetime

import pytest

from stillopen.models import Category
from stillopen.search import distance_meters, filter_open_venues, role_pools, sort_for_listing

FRIDAY_11PM = datetime(2026, 10, 23, 23, 0)
LATE = {"fri": [("17:00", "02:00")]}
EARLY = {"fri": [("08:00", "16:00")]}


def ids(open_venues):
    return [ov.venue.id for ov in open_venues]


def test_filter_keeps_only_open_venues(make_venue):
    venues = [
        make_venue("late", hours=LATE),
        make_venue("early", hours=EARLY),
        make_venue("unknown", hours=None),
    ]
    result = filter_open_venues(venues, FRIDAY_11PM)
    assert ids(result) == ["late"]
    assert result[0].closes_at == datetime(2026, 10, 24, 2, 0)


def test_filter_by_category(make_venue):
    venues = [
        make_venue("pub", category=Category.BAR, hours=LATE),
        make_venue("diner", category=Category.RESTAURANT, hours=LATE),
    ]
    assert ids(filter_open_venues(venues, FRIDAY_11PM, category=Category.BAR)) == ["pub"]


def test_filter_by_suburb_is_case_insensitive(make_venue):
    venues = [
        make_venue("a", hours=LATE, address="12 Crown St, Surry Hills"),
        make_venue("b", hours=LATE, address="3 King St, Newtown"),
    ]
    assert ids(filter_open_venues(venues, FRIDAY_11PM, suburb=" surry ")) == ["a"]


def test_filter_require_website_spares_activities(make_venue):
    venues = [
        make_venue("bar-no-site", category=Category.BAR, hours=LATE),
        make_venue("bar-site", category=Category.BAR, hours=LATE, website="https://bar.example"),
        make_venue("cinema", category=Category.ACTIVITY, hours=LATE),
    ]
    result = filter_open_venues(venues, FRIDAY_11PM, require_website=True)
    assert ids(result) == ["bar-site", "cinema"]


def test_filter_by_radius(make_venue):
    origin = (-33.8688, 151.2093)
    venues = [
        make_venue("near", hours=LATE, latitude=-33.8700, longitude=151.2100),
        make_venue("far", hours=LATE, latitude=-33.9500, longitude=151.2100),
        make_venue("nowhere", hours=LATE),
    ]
    result = filter_open_venues(venues, FRIDAY_11PM, origin=origin, radius_m=2500)
    assert ids(result) == ["near", "nowhere"]


@pytest.mark.parametrize("radius", [0, -5, 50_001])
def test_filter_rejects_bad_radius(make_venue, radius):
    with pytest.raises(ValueError):
        filter_open_venues([make_venue(hours=LATE)], FRIDAY_11PM, origin=(0.0, 0.0), radius_m=radius)


def test_distance_meters():
    assert distance_meters((0.0, 0.0), (0.0, 0.0)) == 0.0
    assert distance_meters((0.0, 0.0), (1.0, 0.0)) == pytest.approx(111_195, rel=1e-4)


def test_sort_for_listing_puts_bookable_first(make_venue):
    venues = [
        make_venue("c", name="cellar", hours=LATE),
        make_venue("b", name="Bistro", hours=LATE, booking_url="https://book.example/b"),
        make_venue("a", name="Arcade", hours=LATE),
    ]
    listing = sort_for_listing(filter_open_venues(venues, FRIDAY_11PM))
    assert ids(listing) == ["b", "a", "c"]


def test_role_pools(make_venue):
    venues = [
        make_venue("restaurant", category=Category.RESTAURANT, hours=LATE),
        make_venue("cafe", category=Category.CAFE, hours=LATE),
        make_venue("gelato", category=Category.DESSERT, hours=LATE),
        make_venue("museum", category=Category.ACTIVITY, hours=LATE),
        make_venue("pub", category=Category.BAR, hours=LATE),
    ]
    food, activity, bar = role_pools(filter_open_venues(venues, FRIDAY_11PM))
    assert [v.id for v in food] == ["restaurant", "cafe", "gelato"]
    assert [v.id for v in activity] == ["museum"]
    assert [v.id for v in bar] == ["pub"]

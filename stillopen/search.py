"""Open-venue filtering ahead of ranking."""

import math
from collections.abc import Iterable
from datetime import datetime

from stillopen.hours import closing_instant_at
from stillopen.models import Category, OpenVenue, Venue

EARTH_RADIUS_M = 6_371_000
MAX_RADIUS_M = 50_000

FOOD_CATEGORIES = frozenset({Category.RESTAURANT, Category.CAFE, Category.DESSERT})


def distance_meters(a: tuple[float, float], b: tuple[float, float]) -> float:
    """Haversine distance between two (lat, lng) points in degrees."""
    lat1, lng1 = map(math.radians, a)
    lat2, lng2 = map(math.radians, b)

    sin_dlat = math.sin((lat2 - lat1) / 2)
    sin_dlng = math.sin((lng2 - lng1) / 2)
    h = sin_dlat * sin_dlat + math.cos(lat1) * math.cos(lat2) * sin_dlng * sin_dlng
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(h))


def _within_radius(venue: Venue, origin: tuple[float, float], radius_m: float) -> bool:
    if venue.latitude is None or venue.longitude is None:
        return True  # unknown location, let the caller's query area decide
    return distance_meters(origin, (venue.latitude, venue.longitude)) <= radius_m


def filter_open_venues(
    venues: Iterable[Venue],
    at: datetime,
    category: Category | None = None,
    suburb: str | None = None,
    require_website: bool = False,
    origin: tuple[float, float] | None = None,
    radius_m: float | None = None,
) -> list[OpenVenue]:
    """
    Keep venues matching the filters that are open at ``at``.

    With ``require_website`` only activities may lack a website.
    Venues without hours data are never reported as open.
    """
    if origin is not None and radius_m is not None and not 0 < radius_m <= MAX_RADIUS_M:
        raise ValueError(f"Invalid radius (1..{MAX_RADIUS_M} meters): {radius_m}")

    suburb_key = suburb.strip().lower() if suburb else ""
    results: list[OpenVenue] = []
    for venue in venues:
        if category is not None and venue.category != category:
            continue
        if suburb_key and suburb_key not in venue.address.lower():
            continue
        if require_website and venue.category != Category.ACTIVITY and not venue.website:
            continue
        if origin is not None and radius_m is not None and not _within_radius(venue, origin, radius_m):
            continue
        if venue.schedule is None:
            continue

        closes_at = closing_instant_at(venue.schedule, at)
        if closes_at is not None:
            results.append(OpenVenue(venue=venue, closes_at=closes_at))

    return results


def sort_for_listing(open_venues: list[OpenVenue]) -> list[OpenVenue]:
    """Bookable venues first, then by name."""
    return sorted(
        open_venues,
        key=lambda ov: (0 if ov.venue.booking_url else 1, ov.venue.name.lower()),
    )


def role_pools(open_venues: Iterable[OpenVenue]) -> tuple[list[Venue], list[Venue], list[Venue]]:
    """Split open venues into (food, activity, bar) pools for an itinerary."""
    food: list[Venue] = []
    activity: list[Venue] = []
    bar: list[Venue] = []
    for ov in open_venues:
        if ov.venue.category in FOOD_CATEGORIES:
            food.append(ov.venue)
        elif ov.venue.category == Category.ACTIVITY:
            activity.append(ov.venue)
        elif ov.venue.category == Category.BAR:
            bar.append(ov.venue)
    return food, activity, bar

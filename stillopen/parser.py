"""Venue file and request parsing for stillopen."""

import logging
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path
from typing import Any

import yaml

from stillopen.models import Category, TradingWindow, Venue, WeeklySchedule, Weekday
from stillopen.normalize import MINUTES_PER_DAY, deal_platform_url, format_hhmm

logger = logging.getLogger(__name__)


class InvalidInstantError(ValueError):
    """Raised when the reference date and time cannot be parsed."""


# Google place type -> category, checked in this order
PLACE_TYPE_CATEGORIES: list[tuple[Category, frozenset[str]]] = [
    (Category.RESTAURANT, frozenset({"restaurant", "meal_takeaway", "meal_delivery"})),
    (Category.CAFE, frozenset({"cafe"})),
    (Category.DESSERT, frozenset({"bakery", "ice_cream_shop", "dessert_shop"})),
    (Category.BAR, frozenset({"bar", "night_club", "pub"})),
    (
        Category.ACTIVITY,
        frozenset(
            {
                "tourist_attraction",
                "museum",
                "art_gallery",
                "movie_theater",
                "bowling_alley",
                "amusement_park",
                "zoo",
                "aquarium",
                "stadium",
                "park",
                "spa",
                "gym",
                "casino",
                "escape_room",
            }
        ),
    ),
]

# Google numbers days 0=Sunday..6=Saturday
GOOGLE_DAYS = [Weekday.SUN, Weekday.MON, Weekday.TUE, Weekday.WED, Weekday.THU, Weekday.FRI, Weekday.SAT]


def parse_instant(text: str | None) -> datetime:
    """
    Parse an ISO date and time (e.g. from a datetime-local input).

    Timezone offsets are dropped: the wall-clock value is used as given.
    """
    if not text or not text.strip():
        raise InvalidInstantError("Missing datetime")
    try:
        at = datetime.fromisoformat(text.strip())
    except ValueError:
        raise InvalidInstantError(f"Invalid datetime: {text!r}") from None
    return at.replace(tzinfo=None)


def infer_category(types: Iterable[str]) -> Category:
    """Infer a category from Google place types; unknown types count as Activity."""
    found = {str(t).lower() for t in types}
    for category, place_types in PLACE_TYPE_CATEGORIES:
        if found & place_types:
            return category
    return Category.ACTIVITY


def _hhmm(hour: int | None, minute: int | None) -> str:
    return f"{hour or 0:02d}:{minute or 0:02d}"


def _time_text(value: Any) -> str:
    """
    Return a window bound as "HH:MM" text.

    YAML 1.1 reads unquoted 17:00 as the base-60 integer 1020, which is
    already minutes since midnight.
    """
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= MINUTES_PER_DAY:
        return format_hhmm(value)
    return str(value)


def _schedule_from_hours(hours: dict[str, Any] | None) -> WeeklySchedule:
    """Build a schedule from a day -> [[open, close], ...] mapping, skipping malformed windows."""
    windows: dict[str, list[TradingWindow]] = {}
    for day, pairs in (hours or {}).items():
        if not isinstance(pairs, (list, tuple)):
            if pairs is not None:
                logger.debug("Skipping malformed %s windows %r", day, pairs)
            pairs = []

        day_windows: list[TradingWindow] = []
        for pair in pairs:
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                logger.debug("Skipping malformed %s window %r", day, pair)
                continue
            open_time, close_time = pair
            day_windows.append(TradingWindow(_time_text(open_time), _time_text(close_time)))
        windows[day] = day_windows
    return WeeklySchedule.from_mapping(windows)


def schedule_from_periods(periods: list[dict[str, Any]] | None) -> WeeklySchedule | None:
    """
    Convert Google ``regularOpeningHours.periods`` into a weekly schedule.

    Each period is stored under its opening day; a 00:00 close becomes 24:00.
    Returns None when no periods are given.
    """
    if not isinstance(periods, list):
        return None

    hours: dict[Weekday, list[TradingWindow]] = {}
    for period in periods:
        if not isinstance(period, dict):
            logger.debug("Skipping malformed opening period %r", period)
            continue
        open_ = period.get("open")
        close = period.get("close")
        if not isinstance(open_, dict) or not isinstance(close, dict):
            continue

        day = GOOGLE_DAYS[open_.get("day", 1) % 7]
        open_time = _hhmm(open_.get("hour"), open_.get("minute"))
        close_time = _hhmm(close.get("hour"), close.get("minute"))
        if close_time == "00:00":
            close_time = "24:00"
        hours.setdefault(day, []).append(TradingWindow(open_time, close_time))

    return WeeklySchedule.from_mapping(hours)


def parse_venue(entry: dict[str, Any]) -> Venue:
    """Build a Venue from one entry of a venues file."""
    name = str(entry["name"])

    if entry.get("category"):
        category = Category.parse(entry["category"])
    else:
        category = infer_category(entry.get("types", []))

    if "hours" in entry:
        schedule = _schedule_from_hours(entry["hours"])
    else:
        schedule = schedule_from_periods(entry.get("opening_periods"))

    on_deal_platform = bool(entry.get("on_deal_platform", False))
    deal_url = entry.get("deal_url")
    if on_deal_platform and not deal_url:
        deal_url = deal_platform_url(name)

    lat = entry.get("lat")
    lng = entry.get("lng")

    return Venue(
        id=str(entry["id"]),
        name=name,
        category=category,
        address=entry.get("address") or entry.get("suburb") or "",
        website=entry.get("website") or None,
        booking_url=entry.get("booking_url") or None,
        on_deal_platform=on_deal_platform,
        deal_url=deal_url,
        schedule=schedule,
        latitude=float(lat) if lat is not None else None,
        longitude=float(lng) if lng is not None else None,
    )


def load_venues(path: Path) -> list[Venue]:
    """Load venues from a YAML (or JSON) file with a top-level ``venues`` list."""
    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if not data or "venues" not in data:
        return []

    venues: list[Venue] = []
    seen: set[str] = set()
    for entry in data["venues"]:
        venue = parse_venue(entry)
        if venue.id in seen:
            logger.warning("Duplicate venue id %s, keeping the first", venue.id)
            continue
        seen.add(venue.id)
        venues.append(venue)

    return venues

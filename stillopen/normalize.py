"""Time-of-day and name normalization for stillopen."""

import re

MINUTES_PER_DAY = 1440  # also the end-of-day sentinel ("24:00")

DEFAULT_DEAL_PLATFORM_URL = "https://eatclub.com.au"


def parse_hhmm(text: str) -> int | None:
    """
    Parse an "HH:MM" time of day into minutes since midnight.

    Returns None for malformed text. "24:00" parses to the end-of-day
    sentinel (1440); any other hour of 24 is malformed.
    """
    hour_text, sep, minute_text = str(text).strip().partition(":")
    if not sep or not hour_text.isdigit() or not minute_text.isdigit():
        return None

    hour, minute = int(hour_text), int(minute_text)
    if minute > 59 or hour > 24 or (hour == 24 and minute != 0):
        return None
    return hour * 60 + minute


def normalize_close(close_minutes: int) -> int:
    """Treat a midnight close as end of day, otherwise it would close immediately."""
    return MINUTES_PER_DAY if close_minutes == 0 else close_minutes


def format_hhmm(minutes: int) -> str:
    """Inverse of parse_hhmm for values in 0..1440."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def deal_platform_slug(name: str) -> str:
    """
    Convert a venue name into the deal platform's URL slug.

    "Tom's Bar & Grill" -> "toms-bar-and-grill"
    """
    slug = name.lower().replace("&", "and")
    slug = re.sub(r"['’]", "", slug)
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    return re.sub(r"\s+", "-", slug.strip())


def deal_platform_url(name: str, base_url: str = DEFAULT_DEAL_PLATFORM_URL) -> str:
    """Build the deal platform venue URL guessed from the venue name."""
    return f"{base_url.rstrip('/')}/venue/{deal_platform_slug(name)}"

"""Opening-hours evaluation for stillopen."""

import logging
from datetime import datetime, timedelta

from stillopen.models import TradingWindow, WeeklySchedule, Weekday
from stillopen.normalize import normalize_close, parse_hhmm

logger = logging.getLogger(__name__)


def _window_minutes(window: TradingWindow) -> tuple[int, int] | None:
    """
    Parse a window into (open, close) minutes with the midnight close normalized.

    Returns None for windows that contribute no open time: malformed text,
    or open == close. An equal-bounds window is treated as closed rather
    than open around the clock.
    """
    open_minutes = parse_hhmm(window.open)
    close_minutes = parse_hhmm(window.close)
    if open_minutes is None or close_minutes is None:
        logger.debug("Skipping malformed trading window %r", window)
        return None

    close_minutes = normalize_close(close_minutes)
    if open_minutes == close_minutes:
        return None
    return open_minutes, close_minutes


def closing_instant_at(schedule: WeeklySchedule, at: datetime) -> datetime | None:
    """
    Return the instant the window containing ``at`` closes, or None if closed.

    Today's windows are checked first, then the previous day's windows
    that cross midnight into today. The first matching window wins.
    """
    day = Weekday.of(at)
    minutes = at.hour * 60 + at.minute
    day_start = at.replace(hour=0, minute=0, second=0, microsecond=0)

    for window in schedule.windows(day):
        bounds = _window_minutes(window)
        if bounds is None:
            continue
        open_minutes, close_minutes = bounds

        if close_minutes > open_minutes:
            if open_minutes <= minutes < close_minutes:
                return day_start + timedelta(minutes=close_minutes)
        elif minutes >= open_minutes:
            # Cross-midnight window, closes tomorrow
            return day_start + timedelta(days=1, minutes=close_minutes)

    for window in schedule.windows(day.previous()):
        bounds = _window_minutes(window)
        if bounds is None:
            continue
        open_minutes, close_minutes = bounds

        if close_minutes < open_minutes and minutes < close_minutes:
            return day_start + timedelta(minutes=close_minutes)

    return None


def is_open_at(schedule: WeeklySchedule, at: datetime) -> bool:
    """Return True if the schedule has a window containing ``at``."""
    return closing_instant_at(schedule, at) is not None


def minutes_until_close(closes_at: datetime, at: datetime) -> float:
    """Minutes from ``at`` until ``closes_at``, never negative."""
    return max(0.0, (closes_at - at).total_seconds() / 60)

"""Data models for stillopen."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum


class Weekday(IntEnum):
    """Day of week, numbered like ``datetime.weekday()``."""

    MON = 0
    TUE = 1
    WED = 2
    THU = 3
    FRI = 4
    SAT = 5
    SUN = 6

    def previous(self) -> "Weekday":
        return Weekday((self - 1) % 7)

    @classmethod
    def of(cls, at: datetime) -> "Weekday":
        return cls(at.weekday())

    @classmethod
    def from_name(cls, name: str) -> "Weekday":
        """Accept "mon", "Monday", "MON" and similar."""
        key = name.strip().upper()[:3]
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown weekday: {name!r}") from None


class Category(str, Enum):
    """Closed set of venue categories."""

    RESTAURANT = "Restaurant"
    CAFE = "Cafe"
    DESSERT = "Dessert"
    BAR = "Bar"
    ACTIVITY = "Activity"

    @classmethod
    def parse(cls, value: "str | Category") -> "Category":
        if isinstance(value, Category):
            return value
        for category in cls:
            if category.value.lower() == value.strip().lower():
                return category
        raise ValueError(f"Unknown category: {value!r}")


@dataclass(frozen=True)
class TradingWindow:
    """An (open, close) pair of "HH:MM" wall-clock times as given by the data source."""

    open: str
    close: str  # "24:00" (or "00:00") means midnight close


@dataclass(frozen=True)
class WeeklySchedule:
    """Trading windows for each weekday, one slot per ``Weekday``."""

    days: tuple[tuple[TradingWindow, ...], ...] = ((),) * 7

    def __post_init__(self):
        if len(self.days) != 7:
            raise ValueError(f"A weekly schedule needs 7 days, got {len(self.days)}")

    def windows(self, day: Weekday) -> tuple[TradingWindow, ...]:
        return self.days[day]

    def is_empty(self) -> bool:
        return not any(self.days)

    @classmethod
    def from_mapping(
        cls,
        hours: Mapping["str | Weekday", Iterable[tuple[str, str] | TradingWindow]],
    ) -> "WeeklySchedule":
        """Build a schedule from a day -> [(open, close), ...] mapping.

        Days missing from the mapping are closed all day.
        """
        slots: list[list[TradingWindow]] = [[] for _ in Weekday]
        for key, windows in hours.items():
            day = key if isinstance(key, Weekday) else Weekday.from_name(key)
            for window in windows or ():
                if not isinstance(window, TradingWindow):
                    open_time, close_time = window
                    window = TradingWindow(str(open_time), str(close_time))
                slots[day].append(window)
        return cls(days=tuple(tuple(s) for s in slots))


@dataclass(frozen=True)
class Venue:
    """An immutable venue snapshot supplied by the data source."""

    id: str
    name: str
    category: Category
    address: str = ""
    website: str | None = None
    booking_url: str | None = None
    on_deal_platform: bool = False
    deal_url: str | None = None
    schedule: WeeklySchedule | None = None  # None = no hours data at all
    latitude: float | None = None
    longitude: float | None = None


@dataclass(frozen=True)
class OpenVenue:
    """A venue annotated with the instant it closes."""

    venue: Venue
    closes_at: datetime


@dataclass(frozen=True)
class ScoreBreakdown:
    """Weighted score of a venue and the normalized signals behind it."""

    final_score: float
    open_score: float
    deal_score: float
    actionability_score: float


@dataclass(frozen=True)
class ScoredCandidate:
    """A venue paired with its score."""

    venue: Venue
    breakdown: ScoreBreakdown
    closes_at: datetime | None = None

    @property
    def score(self) -> float:
        return self.breakdown.final_score


@dataclass(frozen=True)
class Itinerary:
    """A food, activity and bar plan for one instant."""

    food: Venue
    activity: Venue
    bar: Venue
    at: datetime
    picks: Mapping[str, ScoredCandidate] = field(default_factory=dict, hash=False)
    # picks maps role ("food", "activity", "bar") -> the scored pick

    def venues(self) -> list[tuple[str, Venue]]:
        return [("food", self.food), ("activity", self.activity), ("bar", self.bar)]

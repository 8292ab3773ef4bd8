"""Venue scoring, top-fraction selection and itinerary building."""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType
from typing import Protocol

import numpy as np

from stillopen.hours import closing_instant_at, minutes_until_close
from stillopen.models import Itinerary, ScoreBreakdown, ScoredCandidate, Venue

logger = logging.getLogger(__name__)


class EmptyPoolError(ValueError):
    """Raised when selecting from a pool with no venues."""


class ItineraryError(ValueError):
    """Raised when an itinerary cannot be built from the given pools."""


class RandomSource(Protocol):
    """Anything that picks an integer in [low, high), like ``numpy.random.Generator``."""

    def integers(self, low: int, high: int) -> int: ...


def _clamp01(value: float) -> float:
    return min(1.0, max(0.0, value))


@dataclass(frozen=True)
class RankingConfig:
    """
    Fixed scoring constants.

    The defaults (60/25/15 weighting, 4 hour cap, top quarter) are the
    scoring contract; other values exist for tests and audits.
    """

    open_weight: float = 0.60
    deal_weight: float = 0.25
    actionability_weight: float = 0.15
    cap_minutes: float = 240.0
    unknown_hours_score: float = 0.5
    top_fraction: float = 0.25

    def __post_init__(self):
        total = self.open_weight + self.deal_weight + self.actionability_weight
        if not math.isclose(total, 1.0):
            raise ValueError(f"Score weights must sum to 1.0, got {total}")
        if self.cap_minutes <= 0:
            raise ValueError("cap_minutes must be positive")
        _check_fraction(self.top_fraction)


def _check_fraction(fraction: float) -> None:
    if not 0 < fraction <= 1:
        raise ValueError(f"Top fraction must be in (0, 1], got {fraction}")


def top_slice_size(pool_size: int, fraction: float) -> int:
    """Number of candidates in the top fraction, rounded up, at least 1."""
    return max(1, math.ceil(pool_size * fraction))


class RankingEngine:
    """
    Scores venues and picks from the best of them.

    Holds no per-request state, so one engine can serve concurrent requests
    as long as its random source can.
    """

    def __init__(
        self,
        config: RankingConfig | None = None,
        rng: RandomSource | None = None,
        seed: int | None = None,
    ):
        self.config = config or RankingConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def score(self, venue: Venue, at: datetime) -> ScoredCandidate:
        """Score a venue at ``at`` and keep its closing instant for display."""
        cfg = self.config

        closes_at = None
        if venue.schedule is None:
            open_score = cfg.unknown_hours_score
        else:
            closes_at = closing_instant_at(venue.schedule, at)
            if closes_at is None:
                open_score = 0.0
            else:
                open_score = _clamp01(minutes_until_close(closes_at, at) / cfg.cap_minutes)

        deal_score = 1.0 if venue.on_deal_platform else 0.0
        actions = (1 if venue.website else 0) + (1 if venue.booking_url else 0)
        actionability_score = _clamp01(actions / 2)

        final_score = (
            cfg.open_weight * open_score
            + cfg.deal_weight * deal_score
            + cfg.actionability_weight * actionability_score
        )
        breakdown = ScoreBreakdown(
            final_score=final_score,
            open_score=open_score,
            deal_score=deal_score,
            actionability_score=actionability_score,
        )
        return ScoredCandidate(venue=venue, breakdown=breakdown, closes_at=closes_at)

    def score_venue(self, venue: Venue, at: datetime) -> ScoreBreakdown:
        return self.score(venue, at).breakdown

    def rank(self, pool: Sequence[Venue], at: datetime) -> list[ScoredCandidate]:
        """Score every venue and sort best first; equal scores keep pool order."""
        scored = [self.score(venue, at) for venue in pool]
        if not scored:
            return []
        scores = np.array([c.score for c in scored])
        order = np.argsort(-scores, kind="stable")
        return [scored[i] for i in order]

    def pick(
        self,
        pool: Sequence[Venue],
        at: datetime,
        fraction: float | None = None,
    ) -> ScoredCandidate:
        """Pick uniformly at random from the top fraction of the ranked pool."""
        fraction = self.config.top_fraction if fraction is None else fraction
        _check_fraction(fraction)
        if not pool:
            raise EmptyPoolError("Cannot select from an empty pool")

        ranked = self.rank(pool, at)
        top = ranked[: top_slice_size(len(ranked), fraction)]
        choice = top[int(self.rng.integers(0, len(top)))]
        logger.debug(
            "Picked %s (score %.3f) from top %d of %d",
            choice.venue.id,
            choice.score,
            len(top),
            len(ranked),
        )
        return choice

    def select_from_top_quartile(
        self,
        pool: Sequence[Venue],
        at: datetime,
        fraction: float | None = None,
    ) -> Venue:
        return self.pick(pool, at, fraction).venue

    def _pick_excluding(
        self,
        role: str,
        pool: Sequence[Venue],
        at: datetime,
        exclude: set[str],
    ) -> ScoredCandidate:
        remaining = [v for v in pool if v.id not in exclude]
        if not remaining:
            # Best effort only: a duplicate beats no plan
            logger.warning(
                "No %s venue left after excluding %s; allowing a repeat",
                role,
                ", ".join(sorted(exclude)),
            )
            remaining = list(pool)
        return self.pick(remaining, at)

    def build_itinerary(
        self,
        food_pool: Sequence[Venue],
        activity_pool: Sequence[Venue],
        bar_pool: Sequence[Venue],
        at: datetime,
    ) -> Itinerary:
        """
        Pick a food venue, then an activity, then a bar.

        Each later pick avoids venues already chosen when its pool allows it.
        Raises ItineraryError, before picking anything, if any pool is empty.
        """
        pools = {"food": food_pool, "activity": activity_pool, "bar": bar_pool}
        empty = [role for role, pool in pools.items() if not pool]
        if empty:
            raise ItineraryError(f"Cannot build itinerary: no open {', '.join(empty)} venues")

        picks: dict[str, ScoredCandidate] = {}
        chosen: set[str] = set()
        for role, pool in pools.items():
            candidate = self._pick_excluding(role, pool, at, chosen)
            picks[role] = candidate
            chosen.add(candidate.venue.id)

        return Itinerary(
            food=picks["food"].venue,
            activity=picks["activity"].venue,
            bar=picks["bar"].venue,
            at=at,
            picks=MappingProxyType(picks),
        )


def score_venue(venue: Venue, at: datetime) -> ScoreBreakdown:
    """Score a venue with the default weighting."""
    return RankingEngine().score_venue(venue, at)


def select_from_top_quartile(
    pool: Sequence[Venue],
    at: datetime,
    fraction: float | None = None,
    rng: RandomSource | None = None,
) -> Venue:
    """Pick a venue from the top fraction of the pool."""
    return RankingEngine(rng=rng).select_from_top_quartile(pool, at, fraction)


def build_itinerary(
    food_pool: Sequence[Venue],
    activity_pool: Sequence[Venue],
    bar_pool: Sequence[Venue],
    at: datetime,
    rng: RandomSource | None = None,
) -> Itinerary:
    """Build a food, activity and bar itinerary with the default weighting."""
    return RankingEngine(rng=rng).build_itinerary(food_pool, activity_pool, bar_pool, at)

import pytest

from stillopen.models import Category, Venue, WeeklySchedule


@pytest.fixture
def make_venue():
    """Factory for venues with sensible defaults."""

    def _make(
        id="v1",
        name=None,
        category=Category.RESTAURANT,
        hours=None,
        **kwargs,
    ) -> Venue:
        schedule = WeeklySchedule.from_mapping(hours) if hours is not None else None
        return Venue(
            id=id,
            name=name or id.title(),
            category=category,
            schedule=schedule,
            **kwargs,
        )

    return _make

"""Output formatting for stillopen."""

from datetime import datetime

from stillopen.models import Itinerary, OpenVenue, ScoredCandidate, Venue

ROLE_TITLES = {"food": "Food", "activity": "Activity", "bar": "Bar"}


def format_closes_in(closes_at: datetime, at: datetime) -> str:
    """Short label for the time left until closing."""
    seconds = (closes_at - at).total_seconds()
    if seconds <= 0:
        return "Closed"

    total_minutes = int(seconds // 60)
    hours, minutes = divmod(total_minutes, 60)

    if hours == 0 and minutes <= 5:
        return "Closes very soon"
    if hours == 0:
        return f"Closes in {minutes}m"
    if minutes == 0:
        return f"Closes in {hours}h"
    return f"Closes in {hours}h {minutes}m"


def format_open_venues(open_venues: list[OpenVenue], at: datetime) -> str:
    """Format a listing of open venues for display."""
    if not open_venues:
        return f"Nothing open at {at:%a %d %b %H:%M}."

    lines = [f"=== Open at {at:%a %d %b %H:%M} ({len(open_venues)} venues) ==="]
    for ov in open_venues:
        venue = ov.venue
        lines.append(f"  {venue.name} [{venue.category.value}]")
        if venue.address:
            lines.append(f"    {venue.address}")
        lines.append(f"    {format_closes_in(ov.closes_at, at)} (at {ov.closes_at:%H:%M})")
        for label, url in _links(venue):
            lines.append(f"    {label}: {url}")
    return "\n".join(lines)


def _links(venue: Venue) -> list[tuple[str, str]]:
    links = []
    if venue.website:
        links.append(("Website", venue.website))
    if venue.booking_url:
        links.append(("Book", venue.booking_url))
    if venue.on_deal_platform and venue.deal_url:
        links.append(("Deals", venue.deal_url))
    return links


def explain_pick(venue: Venue) -> str:
    """One-sentence explanation of why a venue was a good pick."""
    reasons = []
    if venue.on_deal_platform:
        reasons.append("is on the deal platform for potential discounts")
    if venue.website:
        reasons.append("has a website for booking and information")
    if venue.address:
        reasons.append(f"is located at {venue.address}")
    if not reasons:
        return "Selected from the top-scoring options open right now."
    return f"Selected because it {', '.join(reasons)}."


def _format_pick(role: str, venue: Venue, candidate: ScoredCandidate | None, at: datetime) -> list[str]:
    lines = [f"--- {ROLE_TITLES[role]}: {venue.name} ---"]
    if candidate is not None:
        b = candidate.breakdown
        lines.append(
            f"  Score {b.final_score:.3f} "
            f"(open {b.open_score:.2f}, deal {b.deal_score:.0f}, "
            f"actionability {b.actionability_score:.2f})"
        )
        if candidate.closes_at is not None:
            lines.append(f"  {format_closes_in(candidate.closes_at, at)}")
    for label, url in _links(venue):
        lines.append(f"  {label}: {url}")
    lines.append(f"  {explain_pick(venue)}")
    return lines


def format_itinerary(itinerary: Itinerary) -> str:
    """Format an itinerary with score breakdowns and explanations."""
    lines = [f"=== Your night out, {itinerary.at:%a %d %b %H:%M} ==="]
    for role, venue in itinerary.venues():
        lines.extend(_format_pick(role, venue, itinerary.picks.get(role), itinerary.at))
        lines.append("")
    return "\n".join(lines).rstrip()


def format_venues_csv(open_venues: list[OpenVenue], at: datetime) -> str:
    """Format open venues as CSV for export."""
    lines: list[str] = ["id,name,category,closes_at,minutes_left,on_deal_platform"]

    for ov in open_venues:
        venue = ov.venue
        minutes_left = max(0, int((ov.closes_at - at).total_seconds() // 60))
        name = venue.name.replace('"', '""')
        lines.append(
            f'{venue.id},"{name}",{venue.category.value},'
            f"{ov.closes_at:%Y-%m-%dT%H:%M},{minutes_left},{str(venue.on_deal_platform).lower()}"
        )

    return "\n".join(lines)

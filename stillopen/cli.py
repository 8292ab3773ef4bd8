"""Command-line interface for stillopen."""

import argparse
import logging
import sys
from pathlib import Path

from stillopen.models import Category
from stillopen.output import format_itinerary, format_open_venues, format_venues_csv
from stillopen.parser import InvalidInstantError, load_venues, parse_instant
from stillopen.ranking import ItineraryError, RankingConfig, RankingEngine
from stillopen.search import filter_open_venues, role_pools, sort_for_listing


def main(argv: list[str] | None = None) -> int:
    """Main entry point for stillopen CLI."""
    parser = argparse.ArgumentParser(
        description="Find venues still open at a given time and plan a night out.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""\
Examples:
  stillopen venues.yaml --at 2026-10-16T22:30
  stillopen venues.yaml --at 2026-10-16T22:30 --category bar --suburb surry
  stillopen venues.yaml --at 2026-10-16T19:00 --plan --seed 7
""",
    )
    parser.add_argument(
        "venues_file",
        type=Path,
        help="Path to the YAML or JSON file with venues",
    )
    parser.add_argument(
        "--at",
        required=True,
        help="Local date and time to check (ISO format, e.g. 2026-10-16T22:30)",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--category",
        choices=[c.value.lower() for c in Category],
        type=str.lower,
        help="Only list venues in this category",
    )
    parser.add_argument(
        "--suburb",
        help="Only venues whose address contains this text",
    )
    parser.add_argument("--lat", type=float, help="Search origin latitude")
    parser.add_argument("--lng", type=float, help="Search origin longitude")
    parser.add_argument(
        "--radius",
        type=float,
        default=2500,
        help="Search radius in meters around --lat/--lng (default: 2500)",
    )
    parser.add_argument(
        "--require-website",
        action="store_true",
        help="Skip non-activity venues without a website",
    )
    mode.add_argument(
        "--plan",
        action="store_true",
        help="Build a food, activity and bar itinerary instead of listing",
    )
    parser.add_argument(
        "--top-fraction",
        type=float,
        default=0.25,
        help="Fraction of best-scoring venues to pick from (default: 0.25)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Seed for repeatable picks",
    )
    parser.add_argument(
        "--csv",
        action="store_true",
        help="Print the open-venue listing as CSV",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log scoring and selection details",
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        at = parse_instant(args.at)
    except InvalidInstantError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if (args.lat is None) != (args.lng is None):
        print("Error: --lat and --lng must be given together", file=sys.stderr)
        return 1
    origin = (args.lat, args.lng) if args.lat is not None else None

    # Validate venues file exists
    if not args.venues_file.exists():
        print(f"Error: Venues file not found: {args.venues_file}", file=sys.stderr)
        return 1

    try:
        venues = load_venues(args.venues_file)
    except Exception as e:
        print(f"Error parsing venues file: {e}", file=sys.stderr)
        return 1

    print(f"Loaded {len(venues)} venues", file=sys.stderr)

    try:
        open_venues = filter_open_venues(
            venues,
            at,
            category=Category.parse(args.category) if args.category else None,
            suburb=args.suburb,
            require_website=args.require_website,
            origin=origin,
            radius_m=args.radius,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.plan:
        try:
            engine = RankingEngine(RankingConfig(top_fraction=args.top_fraction), seed=args.seed)
            food, activity, bar = role_pools(open_venues)
            itinerary = engine.build_itinerary(food, activity, bar, at)
        except (ItineraryError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(format_itinerary(itinerary))
        return 0

    listing = sort_for_listing(open_venues)
    if args.csv:
        print(format_venues_csv(listing, at))
    else:
        print(format_open_venues(listing, at))

    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
import argparse
import logging
import sys
import os

# Add the parent directory to the path so we can import the package
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from commute_routing.api_client import APIClient
from commute_routing.config import Config, UserConfig
from commute_routing.errors import AllProvidersFailed, CommuteError, NoEligibleRoutes
from commute_routing.location import PlatformLocator
from commute_routing.pipeline import Annotation, Outcome, build_planner


ANNOTATION_LABELS = {
    Annotation.LEAVING_SOON: " 🏃‍♂️ LEAVING SOON",
    Annotation.GOOD_TIMING: " ⚡ GOOD TIMING",
}


def setup_logging(debug=False):
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug or Config.DEBUG else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


def format_duration(d):
    """Format a timedelta as "now", "12m", "2h" or "1h5m"."""
    minutes = int(d.total_seconds() // 60)
    if minutes < 1:
        return "now"
    if minutes < 60:
        return f"{minutes}m"
    hours, remaining = divmod(minutes, 60)
    if remaining == 0:
        return f"{hours}h"
    return f"{hours}h{remaining}m"


def format_clock(dt):
    return dt.strftime("%I:%M %p").lstrip("0")


def print_departures(departures):
    for i, departure in enumerate(departures):
        itinerary = departure.itinerary
        status = ANNOTATION_LABELS.get(departure.annotation, "")
        print(f"\n{i+1}. Depart: {format_clock(itinerary.departure_time)} ({format_duration(departure.time_until)}){status}")
        print(f"   Arrive: {format_clock(itinerary.arrival_time)} (Travel: {format_duration(itinerary.total_duration)})")
        print(f"   Distance: {itinerary.distance_label}")

        if itinerary.transit_steps():
            print(f"   🚌 {itinerary.line_summary()}")

    print("\n📱 Tip: Add this tool to your PATH for quick access anywhere!")


def fail(message):
    print(message)
    sys.exit(1)


def choose_trip(args, cfg):
    """
    Work out (current location, destination, destination label).
    A current location of None means it must be detected.
    """
    if len(args.locations) == 2:
        current, destination = args.locations
        print(f"📍 Route from {current} to {destination}")
        return current, destination, f"destination ({destination})"

    if len(args.locations) == 1:
        fail("❌ Please provide both from and to locations, or use no arguments for home/work routing\n"
             "Example: commute \"U District Station\" \"Capitol Hill\"")

    if not cfg.is_valid():
        fail("❌ Configuration not found. Set home_address and google_api_key in your config file "
             "or the COMMUTE_HOME_ADDRESS and GOOGLE_MAPS_API_KEY environment variables.")

    if args.work:
        if not cfg.work_address:
            fail("❌ Work address not configured.")
        current, destination, label = cfg.home_address, cfg.work_address, "work"
        print("📍 Going to work (assuming you're at home)")
    elif cfg.work_address:
        current, destination, label = cfg.work_address, cfg.home_address, "home"
        print("📍 Going home (assuming you're at work)")
    else:
        current, destination, label = None, cfg.home_address, "home"

    # Explicit location overrides
    if args.at_home:
        current = cfg.home_address
        print("📍 Override: using home as current location")
    elif args.at_work and cfg.work_address:
        current = cfg.work_address
        print("📍 Override: using work as current location")
    elif args.from_address:
        current = args.from_address
        print(f"📍 Override: using specified location: {args.from_address}")

    return current, destination, label


def run(args):
    try:
        cfg = UserConfig.load()
    except (OSError, ValueError) as e:
        fail(f"Error loading config: {e}")

    current, destination, label = choose_trip(args, cfg)

    if not cfg.google_api_key:
        fail("❌ No Google Maps API key configured. Set GOOGLE_MAPS_API_KEY or add it to your config file.")

    locator = PlatformLocator.detect()
    try:
        planner = build_planner(APIClient(cfg.google_api_key), locator=locator)

        if current is None:
            print("📍 Getting your current location... ", end="", flush=True)
            try:
                current = planner.resolver.resolve_current_location()
            except AllProvidersFailed as e:
                fail(f"\nError: automatic location detection failed: {e.last_reason}\n\n"
                     f"💡 Try: 'commute --from \"your current address\"'")
            print(f"✅ (detected: {current})")

        print("🚌 Finding routes... ", end="", flush=True)
        try:
            plan = planner.plan(destination, origin=current)
        except CommuteError as e:
            fail(f"\n❌ Transit service error: {e}")
        print("✅")

        if plan.outcome is Outcome.ALREADY_THERE:
            print(f"\n🏠 You're already at {label}!")
            print(f"📍 Current location matches your {label} address")
            return
        if plan.outcome is Outcome.WALK:
            print(f"\n🚶‍♂️ You're already close to {label}!")
            print(f"Walking time: {format_duration(plan.walk.walk_duration)} ({plan.walk.walk_distance_label})")
            print("💡 No transit needed - just walk!")
            return

        try:
            departures = plan.require_departures(planner.now())
        except NoEligibleRoutes:
            fail("❌ No transit routes found. This could mean:\n"
                 "   • No transit service at this time (most Seattle buses run 5 AM - 2 AM)\n"
                 "   • Your location is too far from Seattle transit\n"
                 "   • Try again in a few minutes")

        print(f"\n🏠 Routes to {destination} ({label})")
        print("=" + "=" * (len(destination) + 12))
        print_departures(departures)
    finally:
        if locator is not None:
            locator.close()


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="commute",
        description="Get Seattle transit directions between locations",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Home from work
  commute

  # Work from home
  commute -w

  # Arbitrary routing
  commute "U District" "Capitol Hill"
        """
    )

    parser.add_argument('locations', nargs='*', metavar='location', help='Optional origin and destination')
    parser.add_argument('-w', '--work', action='store_true', help='Get routes to work (default: routes to home)')
    parser.add_argument('-f', '--from', dest='from_address', type=str, default='',
                        help='Specify your current location instead of auto-detection')
    parser.add_argument('--at-home', action='store_true', help="Override: you're currently at your home address")
    parser.add_argument('--at-work', action='store_true', help="Override: you're currently at your work address")
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')

    args = parser.parse_args(argv)
    if len(args.locations) > 2:
        parser.error("at most two locations (from and to) may be given")

    setup_logging(args.debug)
    run(args)


if __name__ == "__main__":
    main()

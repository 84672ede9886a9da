import logging
import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import pytz

from .distance import ProximityChecker
from .errors import DistanceQueryError, NoEligibleRoutes
from .location import LocationResolver, build_default_providers
from .models import Itinerary, WalkCheck
from .route_client import RouteQueryClient
from .route_planner import RouteAggregator

ALREADY_THERE_THRESHOLD = datetime.timedelta(minutes=2)
LOOKAHEAD_HOURS = 2
MAX_DISPLAYED_ROUTES = 5
LEAVING_SOON_THRESHOLD = datetime.timedelta(minutes=5)
GOOD_TIMING_THRESHOLD = datetime.timedelta(minutes=15)


class Outcome(Enum):
    ALREADY_THERE = "already_there"
    WALK = "walk"
    TRANSIT = "transit"


class Annotation(Enum):
    LEAVING_SOON = "leaving_soon"
    GOOD_TIMING = "good_timing"


@dataclass(frozen=True)
class Departure:
    itinerary: Itinerary
    time_until: datetime.timedelta
    annotation: Optional[Annotation] = None


def annotate_departures(itineraries, now):
    """
    Picks the first few itineraries and labels them by how soon they leave.
    Departures already in the past are skipped.
    """
    departures = []
    for itinerary in itineraries[:MAX_DISPLAYED_ROUTES]:
        time_until = itinerary.departure_time - now
        if time_until < datetime.timedelta(0):
            continue
        if time_until < LEAVING_SOON_THRESHOLD:
            annotation = Annotation.LEAVING_SOON
        elif time_until < GOOD_TIMING_THRESHOLD:
            annotation = Annotation.GOOD_TIMING
        else:
            annotation = None
        departures.append(Departure(itinerary, time_until, annotation))
    return departures


@dataclass
class CommutePlan:
    origin: str
    destination: str
    outcome: Outcome
    walk: Optional[WalkCheck] = None
    itineraries: List[Itinerary] = field(default_factory=list)

    def departures(self, now):
        return annotate_departures(self.itineraries, now)

    def require_departures(self, now):
        """Like departures(), but an empty transit plan raises NoEligibleRoutes."""
        departures = self.departures(now)
        if self.outcome is Outcome.TRANSIT and not departures:
            raise NoEligibleRoutes()
        return departures


class CommutePlanner:
    """
    Decides between "you're there", "just walk" and the next transit departures.
    """

    def __init__(self, resolver, proximity, aggregator, clock=None):
        self.resolver = resolver
        self.proximity = proximity
        self.aggregator = aggregator
        self.clock = clock or (lambda: datetime.datetime.now(pytz.utc))

    def plan(self, destination: str, origin: str = None, lookahead_hours: int = LOOKAHEAD_HOURS) -> CommutePlan:
        """
        Args:
            destination: where the traveler is going
            origin: current location; resolved through the provider chain when None

        Raises:
            AllProvidersFailed: no current location could be resolved
            ProviderError: the primary transit query failed
        """
        if origin is None:
            origin = self.resolver.resolve_current_location()

        try:
            walk = self.proximity.check_walkable(origin, destination)
        except DistanceQueryError as e:
            logging.warning(f"Walking distance check failed, continuing with transit: {e}")
            walk = None

        if walk is not None and walk.is_walkable:
            if walk.walk_duration <= ALREADY_THERE_THRESHOLD:
                outcome = Outcome.ALREADY_THERE
            else:
                outcome = Outcome.WALK
            logging.info(f"No transit needed ({outcome.value}): {walk.walk_duration} walk")
            return CommutePlan(origin, destination, outcome, walk=walk)

        itineraries = self.aggregator.get_next_departures(origin, destination, lookahead_hours)
        return CommutePlan(origin, destination, Outcome.TRANSIT, walk=walk, itineraries=itineraries)

    def now(self):
        return self.clock()


def build_planner(api_client, locator=None, clock=None):
    """Wire the default components around one directions client."""
    return CommutePlanner(
        resolver=LocationResolver(build_default_providers(locator)),
        proximity=ProximityChecker(api_client),
        aggregator=RouteAggregator(RouteQueryClient(api_client, clock=clock), clock=clock),
        clock=clock,
    )

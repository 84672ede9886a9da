"""
Commute Routing

This module finds the next catchable transit departures for a Seattle commute.
It resolves where you are, checks whether walking is quicker, and otherwise
queries the Google Directions API for transit itineraries, falling back to
sampled departure windows when real-time results come back empty or stale.

Example:
    from commute_routing.api_client import APIClient
    from commute_routing.pipeline import build_planner

    planner = build_planner(APIClient(api_key="..."))
    plan = planner.plan("400 Broad St, Seattle, WA", origin="University of Washington")
    for departure in plan.departures(planner.now()):
        print(departure.itinerary.departure_time, departure.annotation)
"""

from .api_client import APIClient
from .distance import ProximityChecker
from .location import LocationResolver, PlatformLocator, build_default_providers
from .models import Itinerary, Step, StepMode
from .pipeline import CommutePlan, CommutePlanner, Outcome, build_planner
from .route_client import RouteQueryClient
from .route_planner import RouteAggregator

__all__ = [
    'APIClient', 'ProximityChecker', 'LocationResolver', 'PlatformLocator',
    'build_default_providers', 'Itinerary', 'Step', 'StepMode', 'CommutePlan',
    'CommutePlanner', 'Outcome', 'build_planner', 'RouteQueryClient', 'RouteAggregator',
]

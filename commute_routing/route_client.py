import logging
import datetime

import pytz

from .config import Config
from .errors import NoRoutesFound, ProviderError
from .models import Itinerary, Step, StepMode

# Literal markup fragments removed from step instructions, in order
HTML_REPLACEMENTS = [
    ("<b>", ""),
    ("</b>", ""),
    ("<div>", ""),
    ("</div>", ""),
    ('<div style="font-size:0.9em">', " - "),
]


def clean_html(html: str) -> str:
    """
    Strips the markup the directions provider puts in step instructions.
    A styled div starts a secondary line, so it becomes a " - " separator.
    """
    text = html or ""
    for fragment, replacement in HTML_REPLACEMENTS:
        text = text.replace(fragment, replacement)
    return text


def line_info(transit_details: dict) -> str:
    line = transit_details.get("line") or {}
    short_name = line.get("short_name")
    if short_name:
        vehicle = (line.get("vehicle") or {}).get("name", "")
        return f"{vehicle} {short_name}"
    return line.get("name", "")


def _timezone(name):
    try:
        return pytz.timezone(name or Config.TIMEZONE)
    except pytz.UnknownTimeZoneError:
        logging.warning(f"Unknown time zone '{name}', using {Config.TIMEZONE}")
        return pytz.timezone(Config.TIMEZONE)


def parse_provider_time(time_obj):
    """Convert a provider {value, time_zone} object to an aware datetime, or None."""
    if not time_obj or "value" not in time_obj:
        return None
    return datetime.datetime.fromtimestamp(int(time_obj["value"]), _timezone(time_obj.get("time_zone")))


class RouteQueryClient:
    """
    Maps transit direction requests onto the directions provider and turns
    the raw routes into Itinerary records.
    """

    def __init__(self, api_client, clock=None):
        self.api_client = api_client
        self.clock = clock or (lambda: datetime.datetime.now(pytz.utc))

    def _parse_step(self, step):
        mode = StepMode.from_provider(step.get("travel_mode"))
        details = step.get("transit_details")
        depart_time = arrive_time = None
        info = ""
        if details:
            depart_time = parse_provider_time(details.get("departure_time"))
            arrive_time = parse_provider_time(details.get("arrival_time"))
            info = line_info(details)

        return Step(
            instructions=clean_html(step.get("html_instructions", "")),
            duration=datetime.timedelta(seconds=step.get("duration", {}).get("value", 0)),
            mode=mode,
            line_info=info,
            depart_time=depart_time,
            arrive_time=arrive_time,
        )

    def _parse_route(self, route, query_time):
        # Only the first leg is used; multi-leg itineraries are not supported
        leg = route["legs"][0]
        total_duration = datetime.timedelta(seconds=leg["duration"]["value"])

        departure = parse_provider_time(leg.get("departure_time"))
        arrival = parse_provider_time(leg.get("arrival_time"))
        if departure is None:
            # Walk-only results carry no schedule; they leave whenever you do
            departure = query_time
        if arrival is None:
            arrival = departure + total_duration

        return Itinerary(
            summary=route.get("summary", ""),
            total_duration=total_duration,
            departure_time=departure,
            arrival_time=arrival,
            distance_label=leg.get("distance", {}).get("text", ""),
            steps=[self._parse_step(step) for step in leg.get("steps", [])],
        )

    def query_transit_routes(self, origin: str, destination: str, depart_at="now", alternatives: bool = True):
        """
        Query transit itineraries departing "now" or at an explicit aware datetime.

        Returns:
            list of Itinerary in provider order

        Raises:
            NoRoutesFound: the provider returned zero candidates
            ProviderError: transport or parsing failure
        """
        query_time = self.clock() if depart_at == "now" else depart_at
        routes = self.api_client.directions(
            origin,
            destination,
            mode="transit",
            departure_time=depart_at,
            alternatives=alternatives,
        )

        if not routes:
            raise NoRoutesFound()

        # A single-route query only ever uses the provider's first answer
        candidates = routes if alternatives else routes[:1]

        itineraries = []
        for route in candidates:
            if not route.get("legs"):
                continue
            try:
                itineraries.append(self._parse_route(route, query_time))
            except (KeyError, TypeError, ValueError) as e:
                logging.error(f"Error parsing route '{route.get('summary', '')}': {e}")
                raise ProviderError(f"failed to parse directions response: {e}", cause=e) from e

        logging.info(f"Transit query at {depart_at} returned {len(itineraries)} itineraries")
        return itineraries

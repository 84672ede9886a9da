import logging
import datetime

import pytz

from .errors import NoRoutesFound, ProviderError

# Departures this far in the past still count, to absorb clock/provider skew
STALE_TOLERANCE = datetime.timedelta(minutes=5)

# Minutes from now at which the fallback queries are issued
FALLBACK_OFFSETS_MINUTES = (0, 20, 40)


def _minute(dt):
    return dt.replace(second=0, microsecond=0)


def remove_duplicate_itineraries(itineraries):
    """
    Drops itineraries with the same summary, departure minute and arrival
    minute as an earlier one. Keeps encounter order.
    """
    seen = set()
    unique = []
    for itinerary in itineraries:
        key = (itinerary.summary, _minute(itinerary.departure_time), _minute(itinerary.arrival_time))
        if key not in seen:
            seen.add(key)
            unique.append(itinerary)
    return unique


def sort_by_departure(itineraries):
    return sorted(itineraries, key=lambda i: i.departure_time)


class RouteAggregator:
    def __init__(self, route_client, clock=None):
        """
        Initialize the RouteAggregator with a RouteQueryClient.
        """
        self.route_client = route_client
        self.clock = clock or (lambda: datetime.datetime.now(pytz.utc))

    def is_stale(self, itinerary, now):
        return itinerary.departure_time < now - STALE_TOLERANCE

    def get_routes(self, origin: str, destination: str):
        """
        Returns every alternative departing from the current second, sorted by
        departure. No stale filtering and no fallback.
        """
        now = self.clock()
        itineraries = self.route_client.query_transit_routes(origin, destination, depart_at=now, alternatives=True)
        return sort_by_departure(itineraries)

    def get_next_departures(self, origin: str, destination: str, lookahead_hours: int = 2):
        """
        Finds the next catchable departures between two locations.

        Runs a "depart now" query with alternatives and drops departures more
        than five minutes old. When nothing survives, samples single
        itineraries at fixed offsets from now instead.

        Args:
            origin: "lat,lon" pair or address
            destination: "lat,lon" pair or address
            lookahead_hours: horizon the caller is interested in

        Returns:
            list: Itinerary records sorted by departure, possibly empty

        Raises:
            ProviderError: if the primary query fails in transport
        """
        if lookahead_hours <= 0:
            raise ValueError("lookahead_hours must be positive")

        now = self.clock()
        logging.info(f"Finding departures from '{origin}' to '{destination}' (lookahead {lookahead_hours}h)")

        try:
            itineraries = self.route_client.query_transit_routes(origin, destination, depart_at="now", alternatives=True)
        except NoRoutesFound:
            logging.info("Primary query returned no routes")
            itineraries = []

        current = [i for i in itineraries if not self.is_stale(i, now)]
        dropped = len(itineraries) - len(current)
        if dropped:
            logging.debug(f"Dropped {dropped} stale itineraries")

        if current:
            return sort_by_departure(current)

        logging.info("No current itineraries from primary query, sampling fallback departure windows")
        return self._get_fallback_routes(origin, destination, now)

    def _get_fallback_routes(self, origin, destination, now):
        collected = []
        # Every window is queried even if earlier ones failed
        for offset in FALLBACK_OFFSETS_MINUTES:
            depart_at = now + datetime.timedelta(minutes=offset)
            try:
                itineraries = self.route_client.query_transit_routes(
                    origin, destination, depart_at=depart_at, alternatives=False
                )
            except (NoRoutesFound, ProviderError) as e:
                logging.warning(f"Fallback query at +{offset}m failed: {e}")
                continue

            if not itineraries:
                logging.debug(f"Fallback query at +{offset}m returned nothing")
                continue
            collected.append(itineraries[0])

        unique = remove_duplicate_itineraries(collected)
        logging.info(f"Fallback produced {len(unique)} unique itineraries from {len(collected)} results")
        return sort_by_departure(unique)

import logging
import datetime
from .errors import DistanceQueryError, ProviderError
from .models import WalkCheck

# Consider "walking distance" as 15 minutes or less
WALKING_THRESHOLD = datetime.timedelta(minutes=15)


class ProximityChecker:
    def __init__(self, api_client):
        self.api_client = api_client

    def get_walking_distance(self, origin: str, destination: str):
        """
        Returns (walk duration, human readable distance) for the first walking route.
        Raises DistanceQueryError if the lookup fails or finds nothing.
        """
        try:
            routes = self.api_client.directions(origin, destination, mode="walking")
        except ProviderError as e:
            raise DistanceQueryError(f"failed to get walking directions: {e}") from e

        if not routes or not routes[0].get("legs"):
            raise DistanceQueryError("no walking route found")

        leg = routes[0]["legs"][0]
        try:
            duration = datetime.timedelta(seconds=leg["duration"]["value"])
            distance = leg.get("distance", {}).get("text", "")
        except (KeyError, TypeError) as e:
            raise DistanceQueryError(f"malformed walking route: {e}") from e
        return duration, distance

    def check_walkable(self, origin: str, destination: str) -> WalkCheck:
        walk_time, walk_distance = self.get_walking_distance(origin, destination)
        is_walkable = walk_time <= WALKING_THRESHOLD
        logging.info(f"Walking time {walk_time} ({walk_distance}); walkable={is_walkable}")
        return WalkCheck(is_walkable=is_walkable, walk_duration=walk_time, walk_distance_label=walk_distance)

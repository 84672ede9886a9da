import requests
import logging
import datetime
from .config import Config
from .errors import ProviderError


class APIClient:
    """
    Client for the Google Directions API.
    Handles transit and walking direction requests.
    """

    # Provider statuses that mean "the request worked"
    OK_STATUSES = ("OK", "ZERO_RESULTS")

    def __init__(self, api_key: str, timeout=None):
        """
        Initialize the API client with the Google Maps API key.
        """
        if not api_key:
            raise ValueError("A Google Maps API key is required")
        self.api_key = api_key
        self.timeout = timeout or Config.HTTP_TIMEOUT

    def _format_departure_time(self, departure_time):
        if departure_time is None or departure_time == "now":
            return departure_time
        if isinstance(departure_time, datetime.datetime):
            return str(int(departure_time.timestamp()))
        return str(int(departure_time))

    def directions(self, origin: str, destination: str, mode: str,
                   departure_time=None, alternatives: bool = False):
        """
        Requests directions between two locations.

        Args:
            origin: "lat,lon" pair or free-form address
            destination: "lat,lon" pair or free-form address
            mode: "walking" or "transit"
            departure_time: None, "now", an aware datetime or epoch seconds
            alternatives: ask the provider for alternative routes

        Returns:
            list: raw route dictionaries, empty when the provider found nothing

        Raises:
            ProviderError: on transport, HTTP, status or decoding failures
        """
        params = {
            "origin": origin,
            "destination": destination,
            "mode": mode,
            "units": "imperial",
            "alternatives": "true" if alternatives else "false",
            "key": self.api_key,
        }
        formatted_time = self._format_departure_time(departure_time)
        if formatted_time is not None:
            params["departure_time"] = formatted_time

        logging.debug(f"Requesting {mode} directions: {origin} -> {destination} (departure_time={formatted_time}, alternatives={alternatives})")

        try:
            response = requests.get(Config.DIRECTIONS_URL, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            logging.warning(f"Timeout requesting {mode} directions")
            raise ProviderError(f"directions request timed out after {self.timeout}s", cause=e) from e
        except requests.exceptions.ConnectionError as e:
            logging.warning(f"Connection error requesting {mode} directions: {e}")
            raise ProviderError(f"failed to connect to directions provider: {e}", cause=e) from e
        except requests.exceptions.RequestException as e:
            logging.warning(f"Request error requesting {mode} directions: {e}")
            raise ProviderError(f"failed to get directions: {e}", cause=e) from e

        if response.status_code != 200:
            response_text = response.text[:200]  # Limit to first 200 chars to avoid huge logs
            logging.error(f"Directions request returned {response.status_code}: {response_text}")
            raise ProviderError(f"failed to get directions: HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Directions response is not valid JSON: {e}")
            raise ProviderError("failed to decode directions response", cause=e) from e

        status = data.get("status") if isinstance(data, dict) else None
        if status not in self.OK_STATUSES:
            message = data.get("error_message", "") if isinstance(data, dict) else ""
            logging.error(f"Directions provider returned status {status}: {message}")
            raise ProviderError(f"failed to get directions: {status} {message}".strip())

        routes = data.get("routes") or []
        logging.debug(f"Directions provider returned {len(routes)} routes (status {status})")
        return routes

"""
Current location resolution.

Providers are tried in a fixed priority order and the first one that
produces a location wins:

    1. the platform location command (only when the platform has one)
    2. ip-api.com
    3. ipinfo.io
    4. a fixed default coordinate in central Seattle

Every provider exposes ``attempt_resolve()`` which returns a location
string ("lat,lon" or an address) or raises ``LocationProviderError``.
"""
import json
import logging
import shutil
import subprocess
from enum import Enum

import requests

from .config import Config
from .errors import AllProvidersFailed, LocationProviderError, PreciseLocationError


def format_coordinates(lat, lon):
    """Format a coordinate pair the way every provider reports it."""
    return f"{float(lat):f},{float(lon):f}"


class PreciseLocationStatus(Enum):
    NOT_INITIALIZED = "not_initialized"
    PERMISSION_DENIED = "permission_denied"
    SERVICES_DISABLED = "services_disabled"
    UNAVAILABLE = "unavailable"
    TIMED_OUT = "timed_out"

    def describe(self):
        return {
            PreciseLocationStatus.NOT_INITIALIZED: "location manager not initialized",
            PreciseLocationStatus.PERMISSION_DENIED: "location permission denied. Please allow location access for this app",
            PreciseLocationStatus.SERVICES_DISABLED: "location services disabled. Please enable Location Services",
            PreciseLocationStatus.UNAVAILABLE: "failed to get location (GPS/WiFi issue)",
            PreciseLocationStatus.TIMED_OUT: "location request timed out",
        }[self]


class PlatformLocator:
    """
    Precise location via the platform's location command.

    Acquired once per process: ``detect()`` returns None when the platform
    has no usable command, ``start()`` runs lazily on the first request and
    ``close()`` releases the locator. Usable as a context manager.
    """

    # Command name -> argv producing a JSON object with latitude/longitude
    COMMANDS = {
        "termux-location": ["termux-location", "-p", "gps", "-r", "once"],
        "CoreLocationCLI": ["CoreLocationCLI", "--json"],
    }

    def __init__(self, command, timeout=None):
        if command not in self.COMMANDS:
            raise ValueError(f"Unsupported location command: {command}")
        self.command = command
        self.timeout = timeout or Config.HTTP_TIMEOUT
        self._executable = None
        self._closed = False

    @classmethod
    def detect(cls, timeout=None):
        for command in cls.COMMANDS:
            if shutil.which(command):
                logging.debug(f"Platform location command available: {command}")
                return cls(command, timeout=timeout)
        logging.debug("No platform location command on this system")
        return None

    @property
    def started(self):
        return self._executable is not None

    def start(self):
        if self._closed:
            raise PreciseLocationError(PreciseLocationStatus.NOT_INITIALIZED, "location manager already closed")
        if self._executable is None:
            self._executable = shutil.which(self.command)
            if self._executable is None:
                raise PreciseLocationError(PreciseLocationStatus.NOT_INITIALIZED)
            logging.debug(f"Started platform locator using {self._executable}")
        return self

    def close(self):
        self._executable = None
        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _classify_failure(self, stderr):
        message = (stderr or "").lower()
        if "permission" in message or "denied" in message:
            return PreciseLocationStatus.PERMISSION_DENIED
        if "disabled" in message or "not enabled" in message:
            return PreciseLocationStatus.SERVICES_DISABLED
        return PreciseLocationStatus.UNAVAILABLE

    def request_location(self):
        """Return the current position as "lat,lon" or raise PreciseLocationError."""
        self.start()
        argv = [self._executable] + self.COMMANDS[self.command][1:]
        try:
            result = subprocess.run(argv, capture_output=True, text=True, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            raise PreciseLocationError(PreciseLocationStatus.TIMED_OUT) from e
        except FileNotFoundError as e:
            raise PreciseLocationError(PreciseLocationStatus.NOT_INITIALIZED) from e

        if result.returncode != 0:
            status = self._classify_failure(result.stderr)
            detail = result.stderr.strip() if result.stderr else "unknown error"
            raise PreciseLocationError(status, f"{status.describe()} ({detail})")

        if not result.stdout or not result.stdout.strip():
            raise PreciseLocationError(PreciseLocationStatus.UNAVAILABLE)

        try:
            data = json.loads(result.stdout)
            return format_coordinates(data["latitude"], data["longitude"])
        except (ValueError, KeyError, TypeError) as e:
            raise PreciseLocationError(PreciseLocationStatus.UNAVAILABLE, f"unreadable location output: {e}") from e


class PreciseLocationProvider:
    name = "precise"

    def __init__(self, locator):
        self.locator = locator

    def attempt_resolve(self):
        return self.locator.request_location()


class _HTTPLocationProvider:
    name = None
    url = None

    def __init__(self, url=None, timeout=None):
        if url:
            self.url = url
        self.timeout = timeout or Config.HTTP_TIMEOUT

    def _get_json(self):
        try:
            response = requests.get(self.url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise LocationProviderError(f"{self.name}: {e}") from e

        if response.status_code != 200:
            raise LocationProviderError(f"{self.name}: status: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise LocationProviderError(f"{self.name}: invalid JSON: {e}") from e


class IpApiProvider(_HTTPLocationProvider):
    """IP geolocation through ip-api.com"""
    name = "ip-api"

    def __init__(self, url=None, timeout=None):
        super().__init__(url or Config.IP_API_URL, timeout)

    def attempt_resolve(self):
        data = self._get_json()
        if not isinstance(data, dict) or data.get("status") != "success":
            message = data.get("message", "request failed") if isinstance(data, dict) else "unexpected payload"
            raise LocationProviderError(f"{self.name}: {message}")
        try:
            return format_coordinates(data["lat"], data["lon"])
        except (KeyError, TypeError, ValueError) as e:
            raise LocationProviderError(f"{self.name}: malformed coordinates: {e}") from e


class IpInfoProvider(_HTTPLocationProvider):
    """IP geolocation through ipinfo.io"""
    name = "ipinfo"

    def __init__(self, url=None, timeout=None):
        super().__init__(url or Config.IPINFO_URL, timeout)

    def attempt_resolve(self):
        data = self._get_json()
        loc = data.get("loc") if isinstance(data, dict) else None
        if not loc:
            raise LocationProviderError(f"{self.name}: no location data")
        return loc


class DefaultLocationProvider:
    name = "default"

    def __init__(self, location=None):
        self.location = location or Config.DEFAULT_LOCATION

    def attempt_resolve(self):
        return self.location


def build_default_providers(locator=None):
    """
    Build the provider chain in priority order. The precise provider is only
    part of the chain when a platform locator is given.
    """
    providers = []
    if locator is not None:
        providers.append(PreciseLocationProvider(locator))
    providers.extend([IpApiProvider(), IpInfoProvider(), DefaultLocationProvider()])
    return providers


class LocationResolver:
    def __init__(self, providers=None):
        self.providers = list(providers) if providers is not None else build_default_providers()

    def resolve_current_location(self):
        """
        Returns the first location produced by a provider, in priority order.

        Raises:
            AllProvidersFailed: when every provider fails, carrying the last reason
        """
        attempts = []
        last_reason = "no location providers configured"
        for provider in self.providers:
            name = getattr(provider, "name", type(provider).__name__)
            try:
                location = provider.attempt_resolve()
            except LocationProviderError as e:
                last_reason = str(e)
                attempts.append((name, last_reason))
                logging.info(f"Location provider '{name}' failed: {last_reason}")
                continue

            if not location or not str(location).strip():
                last_reason = f"{name}: empty location"
                attempts.append((name, last_reason))
                logging.info(f"Location provider '{name}' returned an empty location")
                continue

            logging.info(f"Resolved current location via '{name}': {location}")
            return location

        logging.error(f"All location providers failed. Last error: {last_reason}")
        raise AllProvidersFailed(last_reason, attempts)

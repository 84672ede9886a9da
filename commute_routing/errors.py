"""Error kinds raised by the routing pipeline."""


class CommuteError(Exception):
    """Base class for all routing pipeline errors."""


class LocationProviderError(CommuteError):
    """A single location provider could not produce a location."""


class PreciseLocationError(LocationProviderError):
    """The platform location command failed with a known status."""

    def __init__(self, status, message=None):
        self.status = status
        super().__init__(message or status.describe())


class AllProvidersFailed(CommuteError):
    """Every location provider in the chain failed."""

    def __init__(self, last_reason, attempts=None):
        self.last_reason = last_reason
        # list of (provider name, reason) in the order they were tried
        self.attempts = attempts or []
        super().__init__(f"all location services failed: {last_reason}")


class DistanceQueryError(CommuteError):
    """The walking distance lookup failed."""


class ProviderError(CommuteError):
    """Transport or parsing failure while talking to a mapping provider."""

    def __init__(self, message, cause=None):
        self.cause = cause
        super().__init__(message)


class NoRoutesFound(CommuteError):
    """The provider returned zero route candidates."""

    def __init__(self, message="no routes found"):
        super().__init__(message)


class NoEligibleRoutes(CommuteError):
    """Routes may exist but none of them can still be caught."""

    def __init__(self, message="no eligible departures"):
        super().__init__(message)

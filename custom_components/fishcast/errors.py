"""Exception types raised by FishCast providers.

The service layer is the boundary that turns these into neutral defaults or
degraded results; nothing above it sees a provider exception.
"""


class FishCastError(Exception):
    """Base class for FishCast errors."""


class WeatherFetchError(FishCastError):
    """Raised when current conditions or the daily forecast cannot be fetched."""


class TideUnavailableError(FishCastError):
    """Raised when no tide state can be produced for a location."""


class MissingDataError(FishCastError, ValueError):
    """Raised when a required input is missing or malformed."""

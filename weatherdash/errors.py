"""Error taxonomy for weather lookups.

Every error carries a user-facing message. The controller catches these at
the call site that started the user-visible action and hands the message to
the renderer.
"""

from enum import StrEnum


class WeatherError(Exception):
    """Base class for user-facing weather lookup failures."""

    default_message = "Failed to fetch weather data. Please try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)

    @property
    def user_message(self) -> str:
        return str(self)


class NetworkFailure(WeatherError):
    """Non-success HTTP status or transport error."""

    def __init__(self, message: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ProviderResponseError(NetworkFailure):
    """Provider answered 2xx but the payload is missing required fields."""


class NotFound(WeatherError):
    default_message = "City not found. Please try another search."


class GeolocationReason(StrEnum):
    PERMISSION_DENIED = "permission_denied"
    POSITION_UNAVAILABLE = "position_unavailable"
    TIMEOUT = "timeout"
    UNSUPPORTED = "unsupported"


_GEOLOCATION_MESSAGES = {
    GeolocationReason.PERMISSION_DENIED: "Location access was denied.",
    GeolocationReason.POSITION_UNAVAILABLE: "Your location is currently unavailable.",
    GeolocationReason.TIMEOUT: "Timed out while getting your location.",
    GeolocationReason.UNSUPPORTED: "Geolocation is not supported.",
}


class GeolocationFailure(WeatherError):
    def __init__(self, reason: GeolocationReason, message: str | None = None):
        super().__init__(message or _GEOLOCATION_MESSAGES[reason])
        self.reason = reason


class MissingConfiguration(WeatherError):
    default_message = "Please set your OpenWeatherMap API key."

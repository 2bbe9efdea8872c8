"""
Errors - Exception hierarchy for the zone clock
"""


class ZoneClockError(Exception):
    """Base class for all zone clock errors."""


class TimeApiError(ZoneClockError):
    """
    Raised when the time API cannot be reached or returns an unusable payload.

    Network failures and malformed responses share this type;
    callers treat both as "no authoritative time this round".
    """

    def __init__(self, message: str, url: str = ''):
        super().__init__(message)
        self.url = url


class ConfigError(ZoneClockError):
    """Raised when configuration values fail validation."""

"""Exceptions raised by the analytics agent."""


class AnalyticsError(RuntimeError):
    """Base class for analytics agent errors."""


class SensorUnavailable(AnalyticsError):
    """Raised when identity or CPU information cannot be read at startup."""


class CapabilityAbsent(AnalyticsError):
    """Raised when the host's transfer mechanism exposes no exchange statistics."""


class SerializationFailure(AnalyticsError):
    """Raised when a report cannot be encoded as JSON."""


class TransportFailure(AnalyticsError):
    """Raised when a report request cannot be built or delivered."""

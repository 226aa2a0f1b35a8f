"""
Error taxonomy. Everything except ConfigurationError is delivered through
futures/completions, never raised across the asynchronous boundary.
"""


class DMPError(Exception):
    """Base class for all agent errors."""


class NotInitialized(DMPError):
    """A tracking or profile call was made before initialize()."""

    def __init__(self, message="initialize() must be called with a client id first"):
        super().__init__(message)


class TrackingDisabled(DMPError):
    """The user has limited ad tracking; nothing is sent."""

    def __init__(self, message="advertising tracking is disabled on this device"):
        super().__init__(message)


class UnexpectedResponse(DMPError):
    """The server answered, but not with something we can use."""

    def __init__(self, message="unexpected response", status_code=None):
        super().__init__(message)
        self.status_code = status_code


class TransportFailure(DMPError):
    """Wraps a network or decode error reported by the transport."""

    def __init__(self, cause):
        super().__init__(f"transport failure: {cause}")
        self.cause = cause


class ConfigurationError(DMPError, ValueError):
    """Invalid client id, domain or protocol passed to configure()."""

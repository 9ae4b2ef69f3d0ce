# File: errors.py
"""
errors.py

Exceptions raised by the Docker gateway. Every one carries the underlying
docker/requests exception as __cause__.
"""


class GatewayError(Exception):
    """Base class; also raised when the Docker client cannot be built."""


class NotFound(GatewayError):
    """No running container matches the requested name or id."""


class StreamError(GatewayError):
    """A log stream could not be opened or broke while being read."""


class StopError(GatewayError):
    """The daemon rejected a stop request."""


class StartError(GatewayError):
    """The daemon rejected a start request."""

"""Error taxonomy for the sink.

Startup errors abort initialization; request errors fail a single event and
are surfaced to the caller. Nothing here is retried.
"""

from __future__ import annotations


class SinkError(Exception):
    """Base class for sink failures."""

    def __init__(self, details: str) -> None:
        super().__init__(details)
        self.details = details


class StartupError(SinkError):
    """Raised while building mappings or settings."""


class ConfigError(StartupError):
    """Raised on a missing or invalid configuration entry."""


class PathSyntaxError(StartupError):
    """Raised when a query path expression cannot be compiled."""


class UnknownTypeError(StartupError):
    """Raised on an unrecognized type hint keyword."""


class RequestError(SinkError):
    """Raised while turning one event into a write record."""


class SelectorError(RequestError):
    """Raised when path evaluation fails or matches more than one value."""


class PayloadParseError(RequestError):
    """Raised when the payload cannot be decoded or a value cannot be coerced."""


class PayloadTooLargeError(RequestError):
    """Raised when a request body exceeds the configured size limit."""

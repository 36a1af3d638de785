from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Raised while building the service; the collector must not start."""


class DownstreamFault(RuntimeError):
    """Raised by the processing pool after the client has been answered."""

"""
Exception hierarchy for the discovery collaborators.

The resolution engine itself never raises; these cover the Docker API,
configuration and output layers around it.
"""


class D2SDError(Exception):
    """Base class for all d2sd errors."""


class DiscoveryError(D2SDError):
    """Raised when the Docker daemon cannot be reached or queried."""


class ConfigurationError(D2SDError):
    """Raised when the discovery settings are invalid."""

"""Exceptions raised by gridstream."""

from __future__ import annotations


class GridStreamError(Exception):
    """Base class for gridstream errors."""


class ConfigurationError(GridStreamError, ValueError):
    """Raised when a maximum radius or stream configuration is invalid.

    A table built from a bad configuration cannot serve any request, so this
    is raised once at build or configuration time.
    """


class RangeError(GridStreamError, ValueError):
    """Raised when a query radius lies outside ``[0, max_radius]``."""

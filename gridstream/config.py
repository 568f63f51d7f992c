"""
Stream configuration.

The ordering table is built once for a configured maximum radius. Clients
negotiate a view radius within a protocol range (``2..=32`` for the common
case), and the server never serves more than its own maximum. This module
holds those bounds, validates them at startup and builds the table.

Environment variables read by :meth:`StreamConfig.from_env`:

``GRIDSTREAM_MAX_RADIUS``
    The maximum radius the table is built for. Defaults to 16.
``GRIDSTREAM_MIN_RADIUS``
    The smallest supported radius. Defaults to 2.
``GRIDSTREAM_MAX_SUPPORTED_RADIUS``
    The largest supported radius. Defaults to 32.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from gridstream.concrete.table import FragmentTable, ShellFragmentCount, build
from gridstream.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MAX_RADIUS = 16
MIN_SUPPORTED_RADIUS = 2
MAX_SUPPORTED_RADIUS = 32

ENV_PREFIX = "GRIDSTREAM_"


@dataclass(frozen=True, slots=True)
class StreamConfig:
    """Validated streaming bounds.

    Parameters
    ----------
    max_radius : int, optional
        The maximum radius the ordering table covers. Defaults to 16.
    min_radius : int, optional
        The smallest radius the hosting system supports. Defaults to 2.
    max_supported_radius : int, optional
        The largest radius the hosting system supports. Defaults to 32.

    Raises
    ------
    ConfigurationError
        If a bound is negative, the bounds are inverted, or ``max_radius``
        lies outside ``[min_radius, max_supported_radius]``.
    """

    max_radius: int = DEFAULT_MAX_RADIUS
    min_radius: int = MIN_SUPPORTED_RADIUS
    max_supported_radius: int = MAX_SUPPORTED_RADIUS

    def __post_init__(self) -> None:
        for name in ("max_radius", "min_radius", "max_supported_radius"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"{name} must be an integer, got {type(value).__name__}"
                )
            if value < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {value}")
        if self.min_radius > self.max_supported_radius:
            raise ConfigurationError(
                f"min_radius ({self.min_radius}) is greater than "
                f"max_supported_radius ({self.max_supported_radius})"
            )
        if not self.min_radius <= self.max_radius <= self.max_supported_radius:
            raise ConfigurationError(
                f"max_radius must lie in [{self.min_radius}, "
                f"{self.max_supported_radius}], got {self.max_radius}"
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> StreamConfig:
        """Read the configuration from ``GRIDSTREAM_*`` environment variables.

        Parameters
        ----------
        environ : Mapping[str, str] | None, optional
            The environment to read. Defaults to ``os.environ``.

        Returns
        -------
        StreamConfig
            The validated configuration. Unset variables keep their defaults.

        Raises
        ------
        ConfigurationError
            If a variable is not an integer or the result is invalid.
        """
        if environ is None:
            environ = os.environ
        kwargs: dict[str, int] = {}
        for name in ("max_radius", "min_radius", "max_supported_radius"):
            raw = environ.get(ENV_PREFIX + name.upper())
            if raw is None or not raw.strip():
                continue
            try:
                kwargs[name] = int(raw)
            except ValueError as exc:
                raise ConfigurationError(
                    f"{ENV_PREFIX}{name.upper()} must be an integer, got {raw!r}"
                ) from exc
        config = cls(**kwargs)
        logger.info("stream configuration: max_radius=%d", config.max_radius)
        return config

    def clamp(self, radius: int) -> int:
        """Bound a client-requested radius to ``[0, max_radius]``."""
        return max(0, min(int(radius), self.max_radius))

    def build(self) -> tuple[FragmentTable, ShellFragmentCount]:
        """Build the ordering table for ``max_radius``."""
        return build(self.max_radius)

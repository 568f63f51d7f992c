"""
Polars-based ordering-table builder for gridstream.

This module builds the proximity-ordered fragment table that the neighborhood
query walks. The builder is a pure function of one integer, ``max_radius``:

1. Every offset ``(dx, dz)`` with ``dx, dz`` in ``[-max_radius, max_radius]`` is
   enumerated with ``dx`` as the outer loop and ``dz`` as the inner loop. The
   position of an offset in this enumeration is its generation index.
2. Offsets are sorted by the composite key ``(dx**2 + dz**2, generation index)``.
   The second component makes ties deterministic without relying on sort
   stability.
3. The sorted offsets are folded once into fragments: a new fragment opens each
   time the Chebyshev shell changes, and receives the next unused index for its
   shell.

Shells are not contiguous in the result. From shell 3 on, the diagonal corner
of shell ``d`` (key ``2 * d**2``) sorts after the axis points of shell ``d + 1``
(key ``(d + 1)**2``), so a shell can be split across several fragments. The
query relies on the fact that the last fragment of shell ``R`` holds the
corner ``(R, R)``, whose key bounds every key of every shell ``<= R``.

Classes:
    ShellFragmentCount(AbstractShellFragmentCount):
        Immutable ``shell -> number of fragments`` mapping.
    FragmentTable(AbstractOrderingTable):
        Immutable sequence of :class:`~gridstream.abstract.table.Fragment`
        records, backed by a Polars DataFrame with one row per offset.

Usage:
    from gridstream.concrete.table import build

    table, counts = build(16)
    counts[3]            # number of fragments carrying shell 3
    table.to_frame()     # one row per offset, in table order
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence

import numpy as np
import polars as pl

from gridstream.abstract.table import (
    AbstractOrderingTable,
    AbstractShellFragmentCount,
    Fragment,
)
from gridstream.errors import ConfigurationError, RangeError
from gridstream.geometry import Offset, chebyshev_expr, euclidean_key_expr
from gridstream.types_ import DataFrame, RadiusLike
from gridstream.utils import copydoc

logger = logging.getLogger(__name__)


class ShellFragmentCount(AbstractShellFragmentCount):
    """Immutable mapping from shell to the number of fragments carrying it."""

    def __init__(self, counts: Sequence[int]) -> None:
        self._counts = tuple(int(c) for c in counts)

    @property
    def max_radius(self) -> int:
        return len(self._counts) - 1

    def __getitem__(self, shell: RadiusLike) -> int:
        if (
            isinstance(shell, bool)
            or not isinstance(shell, (int, np.integer))
            or not 0 <= shell < len(self._counts)
        ):
            raise KeyError(shell)
        return self._counts[int(shell)]

    def __iter__(self) -> Iterator[int]:
        return iter(range(len(self._counts)))

    def __len__(self) -> int:
        return len(self._counts)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({dict(self)!r})"


@copydoc(AbstractOrderingTable)
class FragmentTable(AbstractOrderingTable):
    """Polars-backed implementation of AbstractOrderingTable.

    Parameters
    ----------
    max_radius : int
        The largest shell the table covers. Must be a non-negative integer.

    Raises
    ------
    ConfigurationError
        If ``max_radius`` is negative or not an integer.
    """

    _frame: pl.DataFrame
    _fragments: tuple[Fragment, ...]

    def __init__(self, max_radius: int) -> None:
        self._max_radius = _validate_max_radius(max_radius)
        self._frame = _offsets_frame(self._max_radius)
        fragments, counts = _fold_fragments(self._frame)
        self._fragments = tuple(fragments)
        self._counts = ShellFragmentCount(counts)
        last_position = [0] * (self._max_radius + 1)
        for position, fragment in enumerate(self._fragments):
            last_position[fragment.shell] = position
        self._last_position = tuple(last_position)
        logger.debug(
            "built ordering table: max_radius=%d offsets=%d fragments=%d",
            self._max_radius,
            self._frame.height,
            len(self._fragments),
        )

    @property
    def max_radius(self) -> int:
        return self._max_radius

    @property
    def counts(self) -> ShellFragmentCount:
        return self._counts

    def fragments_of(self, shell: RadiusLike) -> tuple[Fragment, ...]:
        shell = check_radius(shell, self._max_radius)
        return tuple(f for f in self._fragments if f.shell == shell)

    def scan_length(self, radius: RadiusLike) -> int:
        radius = check_radius(radius, self._max_radius)
        return self._last_position[radius] + 1

    def offsets(self, radius: RadiusLike | None = None) -> list[Offset]:
        radius = (
            self._max_radius
            if radius is None
            else check_radius(radius, self._max_radius)
        )
        prefix = self._fragments[: self.scan_length(radius)]
        return [
            offset
            for fragment in prefix
            if fragment.shell <= radius
            for offset in fragment.offsets
        ]

    def to_frame(self) -> DataFrame:
        return self._frame.clone()

    def __getitem__(self, key: int | slice) -> Fragment | tuple[Fragment, ...]:
        return self._fragments[key]

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self._fragments)

    def __len__(self) -> int:
        return len(self._fragments)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FragmentTable):
            return NotImplemented
        return self._fragments == other._fragments

    def __hash__(self) -> int:
        return hash((self.__class__.__name__, self._max_radius))

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(max_radius={self._max_radius}, "
            f"fragments={len(self._fragments)})"
        )


def build(max_radius: int) -> tuple[FragmentTable, ShellFragmentCount]:
    """Build the ordering table and its shell-count index.

    Parameters
    ----------
    max_radius : int
        The largest shell the table covers. Must be a non-negative integer.

    Returns
    -------
    tuple[FragmentTable, ShellFragmentCount]
        The fragment table and the number of fragments per shell.

    Raises
    ------
    ConfigurationError
        If ``max_radius`` is negative or not an integer.
    """
    table = FragmentTable(max_radius)
    return table, table.counts


def _validate_max_radius(max_radius: int) -> int:
    if isinstance(max_radius, bool) or not isinstance(max_radius, (int, np.integer)):
        raise ConfigurationError(
            f"max_radius must be an integer, got {type(max_radius).__name__}"
        )
    if max_radius < 0:
        raise ConfigurationError(f"max_radius must be non-negative, got {max_radius}")
    return int(max_radius)


def _offsets_frame(max_radius: int) -> pl.DataFrame:
    """Return every offset of the square as one row, in table order.

    Columns are ``generation_index``, ``dx``, ``dz``, ``key``, ``shell``,
    ``fragment`` (position of the offset's fragment in the table) and ``index``
    (the fragment's number among fragments of the same shell).
    """
    span = np.arange(-max_radius, max_radius + 1, dtype=np.int64)
    return (
        pl.DataFrame({"dx": np.repeat(span, span.size), "dz": np.tile(span, span.size)})
        .with_row_index("generation_index")
        .with_columns(
            pl.col("generation_index").cast(pl.Int64),
            euclidean_key_expr().alias("key"),
            chebyshev_expr().alias("shell"),
        )
        .sort(["key", "generation_index"])
        .with_columns(pl.col("shell").rle_id().cast(pl.Int64).alias("fragment"))
        .with_columns(
            (pl.col("fragment").rank("dense").over("shell") - 1)
            .cast(pl.Int64)
            .alias("index")
        )
    )


def check_radius(radius: RadiusLike, max_radius: int) -> int:
    """Return ``radius`` as an int if it names a shell in ``[0, max_radius]``.

    Raises
    ------
    RangeError
        If ``radius`` is not an integer or lies outside the range.
    """
    if (
        isinstance(radius, bool)
        or not isinstance(radius, (int, np.integer))
        or not 0 <= radius <= max_radius
    ):
        raise RangeError(f"radius must lie in [0, {max_radius}], got {radius!r}")
    return int(radius)


def _fold_fragments(frame: pl.DataFrame) -> tuple[list[Fragment], list[int]]:
    """Collect the rows of each ``fragment`` into a :class:`Fragment` record."""
    counts = [0] * (int(frame["shell"].max()) + 1)
    fragments: list[Fragment] = []
    grouped = (
        frame.group_by("fragment", maintain_order=True)
        .agg(pl.col("shell").first(), pl.col("index").first(), "dx", "dz")
        .sort("fragment")
    )
    for _, shell, index, dxs, dzs in grouped.iter_rows():
        offsets = tuple(Offset(dx, dz) for dx, dz in zip(dxs, dzs))
        fragments.append(Fragment(shell, index, offsets))
        counts[shell] = index + 1
    return fragments, counts

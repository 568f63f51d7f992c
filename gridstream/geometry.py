"""
Grid geometry for gridstream.

Offsets and cells live on an integer XZ grid. Two metrics matter:

- the Chebyshev (chessboard) distance ``max(|dx|, |dz|)``, which groups offsets
  into concentric square shells, and
- the squared Euclidean length ``dx**2 + dz**2``, which ranks offsets by true
  proximity without leaving integer arithmetic.

Both metrics are also provided as Polars expressions so the table builder and
the batched query can compute them column-wise.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import NamedTuple

import polars as pl


class Offset(NamedTuple):
    """A displacement ``(dx, dz)`` from an origin cell."""

    dx: int
    dz: int

    @property
    def chebyshev(self) -> int:
        return chebyshev_distance(self)

    @property
    def euclidean_key(self) -> int:
        return euclidean_key(self)


class Cell(NamedTuple):
    """An absolute grid position ``(x, z)``.

    Cells compare and hash like plain ``(x, z)`` tuples, so sets of tuples work
    as presence sets.
    """

    x: int
    z: int

    def offset(self, by: Offset | tuple[int, int]) -> Cell:
        """Return the cell displaced from this one by ``by``."""
        dx, dz = by
        return Cell(self.x + dx, self.z + dz)

    def offset_to(self, other: Cell | tuple[int, int]) -> Offset:
        """Return the offset leading from this cell to ``other``."""
        x, z = other
        return Offset(x - self.x, z - self.z)


def as_cell(value: Cell | tuple[int, int] | Sequence[int]) -> Cell:
    """Return ``value`` as a :class:`Cell`.

    Raises
    ------
    ValueError
        If ``value`` does not hold exactly two coordinates.
    """
    if isinstance(value, Cell):
        return value
    if len(value) != 2:
        raise ValueError(f"a cell needs exactly two coordinates, got {value!r}")
    x, z = value
    return Cell(int(x), int(z))


def chebyshev_distance(offset: Offset | tuple[int, int]) -> int:
    """Shell number of an offset."""
    dx, dz = offset
    return max(abs(dx), abs(dz))


def euclidean_key(offset: Offset | tuple[int, int]) -> int:
    """Squared Euclidean length of an offset."""
    dx, dz = offset
    return dx * dx + dz * dz


def shell_size(shell: int) -> int:
    """Number of offsets at Chebyshev distance ``shell``.

    Parameters
    ----------
    shell : int
        The shell number. Must be non-negative.

    Returns
    -------
    int
        1 for the origin shell, ``(2d+1)**2 - (2d-1)**2`` otherwise.
    """
    if shell < 0:
        raise ValueError(f"shell must be non-negative, got {shell}")
    if shell == 0:
        return 1
    return (2 * shell + 1) ** 2 - (2 * shell - 1) ** 2


def square_size(radius: int) -> int:
    """Number of offsets in the square of the given Chebyshev radius."""
    if radius < 0:
        raise ValueError(f"radius must be non-negative, got {radius}")
    return (2 * radius + 1) ** 2


def chebyshev_expr(dx: str = "dx", dz: str = "dz") -> pl.Expr:
    return pl.max_horizontal(pl.col(dx).abs(), pl.col(dz).abs())


def euclidean_key_expr(dx: str = "dx", dz: str = "dz") -> pl.Expr:
    return pl.col(dx) * pl.col(dx) + pl.col(dz) * pl.col(dz)


__all__ = [
    "Offset",
    "Cell",
    "as_cell",
    "chebyshev_distance",
    "euclidean_key",
    "shell_size",
    "square_size",
    "chebyshev_expr",
    "euclidean_key_expr",
]

"""
Proximity-ordered neighborhood queries over a fragment table.

The query walks the table built by :mod:`gridstream.concrete.table` and emits,
nearest first, every cell within Chebyshev distance ``radius`` of an origin
that is not already present. It stops as soon as the last fragment of shell
``radius`` has been visited: that fragment holds the corner ``(radius, radius)``,
the farthest offset of every shell ``<= radius``, so nothing in range can
follow it.

Functions:
    query(table, counts, radius, origin, is_present):
        The single-origin query. Returns a list of cells.

Classes:
    NeighborhoodQuery(AbstractNeighborhoodQuery):
        Binds a table. Calling it runs :func:`query`; :meth:`frame` runs the
        same query for many origins at once and returns a Polars DataFrame.

Usage:
    from gridstream import build, query

    table, counts = build(16)
    loaded = {(10, 10)}
    to_load = query(table, counts, 8, (10, 10), loaded)
"""

from __future__ import annotations

from collections.abc import Collection, KeysView, Mapping, Sequence, Set

import numpy as np
import polars as pl

from gridstream.abstract.query import AbstractNeighborhoodQuery
from gridstream.abstract.table import AbstractOrderingTable
from gridstream.concrete.table import check_radius
from gridstream.errors import RangeError
from gridstream.geometry import Cell, as_cell
from gridstream.types_ import (
    CellLike,
    CellsLike,
    DataFrame,
    PresenceLike,
    PresencePredicate,
    RadiusLike,
)
from gridstream.utils import copydoc

_FRAME_SCHEMA = pl.Schema(
    {
        "x": pl.Int64(),
        "z": pl.Int64(),
        "dx": pl.Int64(),
        "dz": pl.Int64(),
        "key": pl.Int64(),
        "shell": pl.Int64(),
        "x_center": pl.Int64(),
        "z_center": pl.Int64(),
    }
)


def query(
    table: AbstractOrderingTable,
    counts: Mapping[int, int],
    radius: RadiusLike,
    origin: CellLike,
    is_present: PresenceLike,
) -> list[Cell]:
    """Return the cells to load around ``origin``, nearest first.

    Parameters
    ----------
    table : AbstractOrderingTable
        The fragment table, as returned by :func:`~gridstream.concrete.table.build`.
    counts : Mapping[int, int]
        The number of fragments per shell of ``table``.
    radius : int
        The largest shell to include. Must lie in ``[0, table.max_radius]``.
    origin : CellLike
        The center cell, a :class:`~gridstream.geometry.Cell` or any pair of ints.
    is_present : PresenceLike
        Which cells are already present: a predicate taking a
        :class:`~gridstream.geometry.Cell`, a collection of ``(x, z)`` pairs, or
        None when nothing is present. It must not change during the call.

    Returns
    -------
    list[Cell]
        Every cell within Chebyshev distance ``radius`` of ``origin`` that is
        not present, ordered by squared Euclidean distance. Ties keep the
        ``dx``-major, ``dz``-minor enumeration order.

    Raises
    ------
    RangeError
        If ``radius`` lies outside ``[0, table.max_radius]`` or ``counts`` has
        no entry for it.
    """
    radius = check_radius(radius, table.max_radius)
    try:
        remaining = counts[radius]
    except KeyError:
        raise RangeError(f"no fragment count for shell {radius}") from None
    present = _as_predicate(is_present)
    ox, oz = as_cell(origin)

    cells: list[Cell] = []
    for fragment in table:
        if fragment.shell <= radius:
            if fragment.shell == radius:
                remaining -= 1
            for dx, dz in fragment.offsets:
                cell = Cell(ox + dx, oz + dz)
                if not present(cell):
                    cells.append(cell)
        if remaining == 0:
            break
    return cells


@copydoc(AbstractNeighborhoodQuery)
class NeighborhoodQuery(AbstractNeighborhoodQuery):
    """Fragment-table-based neighborhood query."""

    def __init__(self, table: AbstractOrderingTable) -> None:
        super().__init__(table)

    def copy(self, table: AbstractOrderingTable) -> NeighborhoodQuery:
        return self.__class__(table)

    def __call__(
        self,
        radius: RadiusLike,
        origin: CellLike,
        present: PresenceLike = None,
    ) -> list[Cell]:
        return query(self._table, self._table.counts, radius, origin, present)

    def frame(
        self,
        radius: RadiusLike,
        origins: CellLike | CellsLike,
        present: DataFrame | PresenceLike = None,
    ) -> DataFrame:
        """Run the query for every origin and return the cells as a DataFrame.

        Parameters
        ----------
        radius : int
            The largest shell to include. Must lie in ``[0, table.max_radius]``.
        origins : CellLike | CellsLike
            One origin, a sequence of origins, an ``(n, 2)`` array, or a
            DataFrame with ``x`` and ``z`` columns.
        present : DataFrame | PresenceLike, optional
            Cells already present, shared by all origins. A DataFrame must have
            ``x`` and ``z`` columns. Defaults to None (nothing present).

        Returns
        -------
        DataFrame
            Columns ``x, z, dx, dz, key, shell, x_center, z_center``. Rows are
            grouped by origin in input order; within an origin they follow the
            order :func:`query` returns.
        """
        radius = check_radius(radius, self._table.max_radius)
        centers = _centers_frame(origins).with_row_index("_origin")

        table_df = self._table.to_frame()
        offsets = (
            table_df.filter(
                (pl.col("fragment") < self._table.scan_length(radius))
                & (pl.col("shell") <= radius)
            )
            .select("dx", "dz", "key", "shell")
            .with_row_index("_offset")
        )

        neighbors = (
            centers.join(offsets, how="cross")
            .with_columns(
                (pl.col("x_center") + pl.col("dx")).alias("x"),
                (pl.col("z_center") + pl.col("dz")).alias("z"),
            )
            .sort(["_origin", "_offset"])
        )

        if isinstance(present, DataFrame):
            present_df = present.select(pl.col("x", "z").cast(pl.Int64)).unique()
            neighbors = neighbors.join(present_df, on=["x", "z"], how="anti").sort(
                ["_origin", "_offset"]
            )
        elif present is not None:
            predicate = _as_predicate(present)
            keep = [
                not predicate(Cell(x, z))
                for x, z in neighbors.select("x", "z").iter_rows()
            ]
            neighbors = neighbors.filter(pl.Series(keep, dtype=pl.Boolean))

        return neighbors.select(list(_FRAME_SCHEMA)).cast(_FRAME_SCHEMA)


def _nothing_present(cell: Cell) -> bool:
    return False


def _as_predicate(present: PresenceLike) -> PresencePredicate:
    if present is None:
        return _nothing_present
    if callable(present):
        return present
    if isinstance(present, (Set, KeysView, Mapping)):
        return present.__contains__
    return frozenset(Cell(int(x), int(z)) for x, z in present).__contains__


def _centers_frame(origins: CellLike | CellsLike) -> pl.DataFrame:
    """Normalize one or many origins into an ``x_center, z_center`` frame."""
    if isinstance(origins, DataFrame):
        if not {"x", "z"}.issubset(origins.columns):
            raise ValueError("origins DataFrame must have 'x' and 'z' columns")
        return origins.select(
            pl.col("x").cast(pl.Int64).alias("x_center"),
            pl.col("z").cast(pl.Int64).alias("z_center"),
        )
    if isinstance(origins, np.ndarray):
        arr = origins.astype(np.int64, copy=False)
        if arr.ndim == 1:
            arr = arr.reshape(1, -1)
        if arr.ndim != 2 or arr.shape[1] != 2:
            raise ValueError("origins array must have shape (2,) or (n, 2)")
        pairs = [(int(x), int(z)) for x, z in arr]
    elif _is_single_cell(origins):
        pairs = [as_cell(origins)]
    else:
        pairs = [as_cell(origin) for origin in origins]
    return pl.DataFrame(
        {
            "x_center": [x for x, _ in pairs],
            "z_center": [z for _, z in pairs],
        },
        schema={"x_center": pl.Int64(), "z_center": pl.Int64()},
    )


def _is_single_cell(origins: Collection) -> bool:
    if not isinstance(origins, Sequence) or len(origins) != 2:
        return False
    return all(isinstance(v, (int, np.integer)) for v in origins)

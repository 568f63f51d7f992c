"""
Per-viewer chunk streaming on top of the neighborhood query.

A :class:`ChunkStreamer` owns the "already loaded" state that the query's
presence predicate reads. Each viewer (a player, a camera, anything hashable)
has an origin cell, a radius and an ordered set of loaded cells. When a viewer
joins, moves or changes radius, the streamer returns a :class:`StreamUpdate`
listing the cells to send, nearest first, and the cells that fell out of range
and should be unloaded. The update is applied to the streamer's own state before
it is returned.

The streamer is not thread-safe. Use :meth:`ChunkStreamer.copy` to hand a
consistent snapshot to another reader; the ordering table is shared by
reference since it is immutable.

Usage:
    from gridstream import ChunkStreamer, build

    table, _ = build(16)
    streamer = ChunkStreamer(table)
    update = streamer.join("player-1", (0, 0), radius=8)
    send(update.load)
    update = streamer.move("player-1", (1, 0))
    send(update.load)
    forget(update.unload)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gridstream.abstract.mixin import CopyMixin
from gridstream.abstract.table import AbstractOrderingTable
from gridstream.concrete.query import NeighborhoodQuery
from gridstream.geometry import Cell, as_cell, chebyshev_distance
from gridstream.types_ import CellLike, ViewerKey

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StreamUpdate:
    """The cells to load and unload after a viewer changed its view.

    Attributes
    ----------
    origin : Cell
        The viewer's origin after the change.
    radius : int
        The viewer's radius after the change.
    load : tuple[Cell, ...]
        Cells that entered the view, nearest first.
    unload : tuple[Cell, ...]
        Cells that left the view, in the order they were loaded.
    """

    origin: Cell
    radius: int
    load: tuple[Cell, ...] = ()
    unload: tuple[Cell, ...] = ()


class ChunkStreamer(CopyMixin):
    """Tracks loaded cells per viewer and computes load/unload lists.

    Parameters
    ----------
    table : AbstractOrderingTable
        The ordering table. Viewer radii must lie in ``[0, table.max_radius]``.
    """

    _copy_only_reference: list[str] = ["_table", "_query"]

    # Loaded sets are replaced, never mutated in place, so a shallow copy of
    # the streamer is an independent snapshot.
    _loaded: dict[ViewerKey, dict[Cell, None]]
    _views: dict[ViewerKey, tuple[Cell, int]]

    def __init__(self, table: AbstractOrderingTable) -> None:
        self._table = table
        self._query = NeighborhoodQuery(table)
        self._loaded = {}
        self._views = {}

    @property
    def table(self) -> AbstractOrderingTable:
        return self._table

    @property
    def viewers(self) -> tuple[ViewerKey, ...]:
        return tuple(self._views)

    def join(self, viewer: ViewerKey, origin: CellLike, radius: int) -> StreamUpdate:
        """Start tracking ``viewer`` and return every cell it needs.

        Raises
        ------
        KeyError
            If the viewer is already tracked.
        RangeError
            If ``radius`` lies outside ``[0, table.max_radius]``.
        """
        if viewer in self._views:
            raise KeyError(f"Viewer {viewer!r} is already tracked")
        center = as_cell(origin)
        load = self._query(radius, center)
        self._loaded[viewer] = dict.fromkeys(load)
        self._views[viewer] = (center, radius)
        logger.debug(
            "viewer %r joined at %s radius=%d: %d to load",
            viewer,
            center,
            radius,
            len(load),
        )
        return StreamUpdate(center, radius, tuple(load), ())

    def move(
        self,
        viewer: ViewerKey,
        origin: CellLike,
        radius: int | None = None,
    ) -> StreamUpdate:
        """Move ``viewer`` to ``origin``, optionally changing its radius.

        Cells farther than the radius (Chebyshev distance) from the new origin
        are unloaded; missing cells within the radius are loaded.

        Raises
        ------
        KeyError
            If the viewer is not tracked.
        RangeError
            If ``radius`` lies outside ``[0, table.max_radius]``. The viewer's
            state is left unchanged.
        """
        _, current_radius = self.view(viewer)
        if radius is None:
            radius = current_radius
        center = as_cell(origin)

        kept: dict[Cell, None] = {}
        unload: list[Cell] = []
        for cell in self._loaded[viewer]:
            if chebyshev_distance(center.offset_to(cell)) > radius:
                unload.append(cell)
            else:
                kept[cell] = None
        load = self._query(radius, center, kept)
        kept.update(dict.fromkeys(load))

        self._loaded[viewer] = kept
        self._views[viewer] = (center, radius)
        logger.debug(
            "viewer %r moved to %s radius=%d: %d to load, %d to unload",
            viewer,
            center,
            radius,
            len(load),
            len(unload),
        )
        return StreamUpdate(center, radius, tuple(load), tuple(unload))

    def leave(self, viewer: ViewerKey) -> list[Cell]:
        """Stop tracking ``viewer`` and return its loaded cells in load order.

        Raises
        ------
        KeyError
            If the viewer is not tracked.
        """
        self.view(viewer)
        del self._views[viewer]
        unload = list(self._loaded.pop(viewer))
        logger.debug("viewer %r left: %d to unload", viewer, len(unload))
        return unload

    def view(self, viewer: ViewerKey) -> tuple[Cell, int]:
        """Return the viewer's origin and radius."""
        try:
            return self._views[viewer]
        except KeyError:
            raise KeyError(f"Viewer {viewer!r} is not tracked") from None

    def loaded(self, viewer: ViewerKey) -> frozenset[Cell]:
        """Return a snapshot of the viewer's loaded cells."""
        self.view(viewer)
        return frozenset(self._loaded[viewer])

    def is_loaded(self, viewer: ViewerKey, cell: CellLike) -> bool:
        self.view(viewer)
        return as_cell(cell) in self._loaded[viewer]

    def __contains__(self, viewer: object) -> bool:
        return viewer in self._views

    def __len__(self) -> int:
        return len(self._views)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(max_radius={self._table.max_radius}, "
            f"viewers={len(self._views)})"
        )

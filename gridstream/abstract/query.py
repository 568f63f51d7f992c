"""
Abstract neighborhood-query interface for ordering tables.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from gridstream.abstract.table import AbstractOrderingTable
from gridstream.geometry import Cell
from gridstream.types_ import CellLike, CellsLike, DataFrame, PresenceLike, RadiusLike


class AbstractNeighborhoodQuery(ABC):
    """Abstract interface for proximity-ordered neighborhood queries."""

    def __init__(self, table: AbstractOrderingTable) -> None:
        self._table = table

    @property
    def table(self) -> AbstractOrderingTable:
        return self._table

    @abstractmethod
    def copy(self, table: AbstractOrderingTable) -> "AbstractNeighborhoodQuery":
        """Return a copy of the query bound to a new table."""

    @abstractmethod
    def __call__(
        self,
        radius: RadiusLike,
        origin: CellLike,
        present: PresenceLike = None,
    ) -> list[Cell]: ...

    @abstractmethod
    def frame(
        self,
        radius: RadiusLike,
        origins: CellLike | CellsLike,
        present: DataFrame | PresenceLike = None,
    ) -> DataFrame: ...

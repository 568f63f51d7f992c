"""
Abstract ordering-table interface.

An ordering table partitions the ``(2 * max_radius + 1) ** 2`` square of offsets
around an origin into fragments: maximal runs of same-shell offsets in the
proximity-sorted enumeration of the square. This module defines the
:class:`Fragment` record and the *interface only* for tables; the
Polars-backed builder lives in :mod:`gridstream.concrete.table`.
"""

from __future__ import annotations

from abc import abstractmethod
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass

from gridstream.geometry import Offset
from gridstream.types_ import DataFrame, RadiusLike


@dataclass(frozen=True, slots=True)
class Fragment:
    """A maximal run of same-shell offsets in proximity order.

    Attributes
    ----------
    shell : int
        The Chebyshev distance shared by every offset of the run.
    index : int
        0-based sequence number among the fragments of the same shell.
    offsets : tuple[Offset, ...]
        The run's offsets, nearest first.
    """

    shell: int
    index: int
    offsets: tuple[Offset, ...]

    def __len__(self) -> int:
        return len(self.offsets)

    def __iter__(self) -> Iterator[Offset]:
        return iter(self.offsets)

    @property
    def min_key(self) -> int:
        return self.offsets[0].euclidean_key

    @property
    def max_key(self) -> int:
        return self.offsets[-1].euclidean_key


class AbstractShellFragmentCount(Mapping[int, int]):
    """Interface for the ``shell -> number of fragments`` index."""

    @property
    @abstractmethod
    def max_radius(self) -> int: ...


class AbstractOrderingTable(Sequence[Fragment]):
    """Interface for an immutable, proximity-ordered fragment table."""

    @property
    @abstractmethod
    def max_radius(self) -> int:
        """The largest shell covered by the table."""

    @property
    @abstractmethod
    def counts(self) -> AbstractShellFragmentCount:
        """The number of fragments carrying each shell."""

    @abstractmethod
    def fragments_of(self, shell: RadiusLike) -> tuple[Fragment, ...]:
        """Return the fragments tagged ``shell`` in table order."""

    @abstractmethod
    def scan_length(self, radius: RadiusLike) -> int:
        """Return how many fragments a query of ``radius`` visits.

        This is the position of the last fragment tagged ``radius`` plus one.
        Every fragment of a shell ``<= radius`` lies within that prefix.
        """

    @abstractmethod
    def offsets(self, radius: RadiusLike | None = None) -> list[Offset]:
        """Return every offset of shell ``<= radius`` in table order."""

    @abstractmethod
    def to_frame(self) -> DataFrame:
        """Return the table as one row per offset, in table order."""

    @abstractmethod
    def __getitem__(self, key): ...

    @abstractmethod
    def __iter__(self) -> Iterator[Fragment]: ...

    @abstractmethod
    def __len__(self) -> int: ...

"""Type aliases for the gridstream package."""

from __future__ import annotations

from collections.abc import Callable, Collection, Hashable, Sequence

import numpy as np
import polars as pl

from gridstream.geometry import Cell

###----- Polars Types -----###
DataFrame = pl.DataFrame

###----- Grid -----###
CellLike = Cell | tuple[int, int] | Sequence[int]
CellsLike = Sequence[CellLike] | np.ndarray | DataFrame
RadiusLike = int | np.integer

###----- Presence -----###
# Either a predicate answering "is this cell already loaded?" or a collection
# answering the same through membership. None means nothing is loaded.
PresencePredicate = Callable[[Cell], bool]
PresenceLike = PresencePredicate | Collection[Sequence[int]] | None

###----- Streaming -----###
ViewerKey = Hashable

__all__ = [
    "DataFrame",
    "CellLike",
    "CellsLike",
    "RadiusLike",
    "PresencePredicate",
    "PresenceLike",
    "ViewerKey",
]

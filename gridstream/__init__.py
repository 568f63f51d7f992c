"""
gridstream: proximity-ordered streaming of grid cells.

gridstream answers one question fast: which cells around an origin should be
loaded, nearest first, skipping those already present? It precomputes, once,
a table of fragments (runs of offsets sharing a Chebyshev shell, in squared
Euclidean order) and then serves any radius up to the configured maximum by
walking a prefix of that table.

Key Features:
- One-shot, deterministic table build backed by Polars
- Per-request queries that stop as soon as every in-range cell is emitted
- Batched queries over many origins returning Polars DataFrames
- A per-viewer streamer computing load and unload lists on movement
- Validated configuration with environment overrides

Main Components:
- build: Builds the FragmentTable and its ShellFragmentCount index
- query: Returns the cells to load around an origin
- NeighborhoodQuery: Table-bound query with a DataFrame view
- ChunkStreamer: Tracks loaded cells per viewer
- StreamConfig: Validated streaming bounds

Usage:
    from gridstream import StreamConfig, query

    config = StreamConfig.from_env()
    table, counts = config.build()
    cells = query(table, counts, 8, (10, 10), loaded_cells)

License: MIT
"""

from __future__ import annotations

import os

# Enable runtime type checking if requested via environment variable
if os.getenv("GRIDSTREAM_RUNTIME_TYPECHECKING", "").lower() in ("1", "true", "yes"):
    try:
        from beartype.claw import beartype_this_package

        beartype_this_package()
    except ImportError:
        import warnings

        warnings.warn(
            "GRIDSTREAM_RUNTIME_TYPECHECKING is enabled but beartype is not installed.",
            ImportWarning,
            stacklevel=2,
        )

from gridstream.concrete.query import NeighborhoodQuery, query
from gridstream.concrete.streamer import ChunkStreamer, StreamUpdate
from gridstream.concrete.table import FragmentTable, ShellFragmentCount, build
from gridstream.config import StreamConfig
from gridstream.errors import ConfigurationError, GridStreamError, RangeError
from gridstream.geometry import Cell, Offset

__all__ = [
    "build",
    "query",
    "Cell",
    "Offset",
    "FragmentTable",
    "ShellFragmentCount",
    "NeighborhoodQuery",
    "ChunkStreamer",
    "StreamUpdate",
    "StreamConfig",
    "GridStreamError",
    "ConfigurationError",
    "RangeError",
]

__version__ = "0.1.0.dev0"

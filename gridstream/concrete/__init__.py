"""
Concrete implementations of gridstream components.

This package provides concrete implementations of the abstract base classes
defined in gridstream.abstract. The table builder uses Polars to enumerate and
sort offsets; the query walks the resulting immutable fragment table.

Modules:
    table: Defines FragmentTable, ShellFragmentCount and the build function.
    query: Defines the query function and the NeighborhoodQuery class.
    streamer: Defines ChunkStreamer, which tracks loaded cells per viewer.
"""

from .query import NeighborhoodQuery, query
from .streamer import ChunkStreamer, StreamUpdate
from .table import FragmentTable, ShellFragmentCount, build

__all__ = [
    "ChunkStreamer",
    "FragmentTable",
    "NeighborhoodQuery",
    "ShellFragmentCount",
    "StreamUpdate",
    "build",
    "query",
]

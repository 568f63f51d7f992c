"""
gridstream abstract components.

This package contains the abstract base classes, shared records and mixins
that define the core interfaces of gridstream.

Classes:
    table.py:
        - Fragment: A maximal run of same-shell offsets in proximity order.
        - AbstractShellFragmentCount: Interface for the shell -> fragment count index.
        - AbstractOrderingTable: Interface for proximity-ordered fragment tables.

    query.py:
        - AbstractNeighborhoodQuery: Interface for neighborhood queries over a table.

    mixin.py:
        - CopyMixin: Mixin class providing fast copy functionality.

Usage:
    These classes are not meant to be instantiated directly (except Fragment).
    They should be inherited by concrete implementations in gridstream.concrete.

For more detailed information on each class, refer to their individual docstrings.
"""

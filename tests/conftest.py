"""Conftest for tests.

Ensure beartype runtime checking is enabled before importing the package.

This module sets GRIDSTREAM_RUNTIME_TYPECHECKING=1 at import time so the whole
suite runs with the package's annotations enforced.
"""

import os

os.environ.setdefault("GRIDSTREAM_RUNTIME_TYPECHECKING", "1")

import os
import subprocess
import sys
from pathlib import Path

import pytest
from beartype.roar import BeartypeCallHintParamViolation

from gridstream.concrete.table import check_radius

ROOT = Path(__file__).resolve().parent.parent


@pytest.mark.parametrize("flag", ["1", "0"])
def test_import_with_runtime_typechecking(flag: str):
    env = {**os.environ, "GRIDSTREAM_RUNTIME_TYPECHECKING": flag}
    result = subprocess.run(
        [
            sys.executable,
            "-c",
            "import gridstream; gridstream.NeighborhoodQuery(gridstream.build(2)[0])"
            ".frame(1, [(0, 0)])",
        ],
        cwd=ROOT,
        env=env,
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, result.stderr


def test_annotations_are_enforced():
    with pytest.raises(BeartypeCallHintParamViolation):
        check_radius("3", 4)

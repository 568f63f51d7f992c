from __future__ import annotations

from pathlib import Path

import polars as pl
from typer.testing import CliRunner

from benchmarks import cli
from gridstream import FragmentTable

runner = CliRunner()


def test_benchmarks_cli_runs_minimal(tmp_path: Path) -> None:
    result = runner.invoke(
        cli.app,
        [
            "--methods",
            "query",
            "--radii",
            "2",
            "--queries",
            "3",
            "--repeats",
            "1",
            "--seed",
            "1",
            "--no-save",
            "--results-dir",
            str(tmp_path),
        ],
    )

    assert result.exit_code == 0
    assert "Finished benchmarking method query" in result.stdout
    assert not any(tmp_path.iterdir())


def test_benchmarks_cli_saves_csv(tmp_path: Path) -> None:
    result = runner.invoke(
        cli.app,
        [
            "--methods",
            "all",
            "--radii",
            "0:4:2",
            "--max-radius",
            "5",
            "--queries",
            "2",
            "--results-dir",
            str(tmp_path),
        ],
    )

    assert result.exit_code == 0
    csv_files = sorted(tmp_path.glob("*/*.csv"))
    assert [p.name.split("_")[0] for p in csv_files] == ["frame", "query"]
    df = pl.read_csv(csv_files[1])
    assert df["radius"].to_list() == [0, 2, 4]
    assert df["max_radius"].unique().to_list() == [5]


def test_benchmarks_cli_rejects_bad_radii(tmp_path: Path) -> None:
    result = runner.invoke(
        cli.app,
        ["--radii", "4:2:1", "--no-save", "--results-dir", str(tmp_path)],
    )
    assert result.exit_code != 0


class OffsetsCountingTable(FragmentTable):
    def __init__(self, max_radius: int) -> None:
        super().__init__(max_radius)
        self.offsets_calls = 0

    def offsets(self, radius=None):
        self.offsets_calls += 1
        return super().offsets(radius)


def test_query_runner_builds_presence_once() -> None:
    table = OffsetsCountingTable(4)
    cli._run_query(table, 3, 10, 0)
    assert table.offsets_calls == 1

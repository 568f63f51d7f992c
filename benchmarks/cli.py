"""Typer CLI for timing gridstream table builds and neighborhood queries."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import os
from pathlib import Path
from time import perf_counter
from typing import Annotated, Literal, Optional, Protocol

import numpy as np
import polars as pl
import typer

from gridstream import FragmentTable, NeighborhoodQuery, build, query

app = typer.Typer(add_completion=False)


class RunnerP(Protocol):
    def __call__(
        self, table: FragmentTable, radius: int, queries: int, seed: int
    ) -> None: ...


def _run_query(table: FragmentTable, radius: int, queries: int, seed: int) -> None:
    rng = np.random.default_rng(seed)
    origins = rng.integers(-1_000, 1_000, size=(queries, 2))
    counts = table.counts
    # Roughly half of the square around each origin is already loaded.
    loaded = frozenset(table.offsets(radius)[::2])
    for x, z in origins:
        ox, oz = int(x), int(z)
        query(
            table,
            counts,
            radius,
            (ox, oz),
            lambda cell: (cell.x - ox, cell.z - oz) in loaded,
        )


def _run_frame(table: FragmentTable, radius: int, queries: int, seed: int) -> None:
    rng = np.random.default_rng(seed)
    origins = rng.integers(-1_000, 1_000, size=(queries, 2))
    NeighborhoodQuery(table).frame(radius, origins)


@dataclass(slots=True)
class Method:
    name: Literal["query", "frame"]
    runner: RunnerP


METHODS: dict[str, Method] = {
    "query": Method(name="query", runner=_run_query),
    "frame": Method(name="frame", runner=_run_frame),
}


def _parse_radii(value: str) -> list[int]:
    value = value.strip()
    if ":" in value:
        parts = value.split(":")
        if len(parts) != 3:
            raise typer.BadParameter("Ranges must use start:stop:step format")
        try:
            start, stop, step = (int(part) for part in parts)
        except ValueError as exc:
            raise typer.BadParameter("Range values must be integers") from exc
        if step <= 0:
            raise typer.BadParameter("Step must be positive")
        if start < 0 or stop < 0:
            raise typer.BadParameter("Range endpoints must be non-negative")
        if start > stop:
            raise typer.BadParameter("Range start must be <= stop")
        radii = list(range(start, stop + step, step))
        if radii[-1] > stop:
            radii.pop()
        return radii
    try:
        radius = int(value)
    except ValueError as exc:
        raise typer.BadParameter("Radius must be an integer") from exc
    if radius < 0:
        raise typer.BadParameter("Radius must be non-negative")
    return [radius]


def _parse_methods(value: str) -> list[str]:
    """Parse methods option into a list of method keys.

    Accepts "all", a single method name or a comma-separated list.
    """
    value = value.strip()
    if value == "all":
        return list(METHODS.keys())
    parts = [part.strip() for part in value.split(",") if part.strip()]
    if not parts:
        raise typer.BadParameter("Method selection must not be empty")
    unknown = [p for p in parts if p not in METHODS]
    if unknown:
        raise typer.BadParameter(f"Unknown method selection: {', '.join(unknown)}")
    # preserve order and uniqueness
    return list(dict.fromkeys(parts))


@app.command()
def run(
    methods: Annotated[
        str,
        typer.Option(
            help="Query methods to benchmark: query, frame, or all",
            callback=_parse_methods,
        ),
    ] = "all",
    radii: Annotated[
        str,
        typer.Option(help="Radius or range (start:stop:step)", callback=_parse_radii),
    ] = "2:16:2",
    max_radius: Annotated[
        Optional[int],
        typer.Option(
            min=0, help="Table radius. Defaults to the largest benchmarked radius."
        ),
    ] = None,
    queries: Annotated[
        int, typer.Option(min=1, help="Origins queried per configuration.")
    ] = 100,
    repeats: Annotated[int, typer.Option(help="Repeats per configuration.", min=1)] = 1,
    seed: Annotated[int, typer.Option(help="RNG seed for origins.")] = 42,
    save: Annotated[bool, typer.Option(help="Persist benchmark CSV results.")] = True,
    results_dir: Annotated[
        Optional[Path],
        typer.Option(
            help=(
                "Base directory for benchmark outputs. A timestamped subdirectory "
                "(e.g. results/20250101_120000) is created with CSV files. "
                "Defaults to the module's results directory."
            ),
        ),
    ] = None,
) -> None:
    """Time the table build and the selected query methods."""
    # Support both CLI (via callbacks) and direct function calls
    if isinstance(methods, str):
        methods = _parse_methods(methods)
    if isinstance(radii, str):
        radii = _parse_radii(radii)
    if max_radius is None:
        max_radius = max(radii)
    if max(radii) > max_radius:
        raise typer.BadParameter(
            f"Radii must not exceed the table radius ({max(radii)} > {max_radius})"
        )
    if results_dir is None:
        results_dir = Path(__file__).resolve().parent / "results"

    runtime_typechecking = os.environ.get("GRIDSTREAM_RUNTIME_TYPECHECKING", "")
    if runtime_typechecking and runtime_typechecking.lower() not in {"0", "false"}:
        typer.secho(
            "Warning: GRIDSTREAM_RUNTIME_TYPECHECKING is enabled; benchmarks may run significantly slower.",
            fg=typer.colors.YELLOW,
        )

    timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
    rows: list[dict[str, object]] = []

    start = perf_counter()
    table, _ = build(max_radius)
    build_seconds = perf_counter() - start
    typer.echo(
        f"Built table max_radius={max_radius} fragments={len(table)} in {build_seconds:.3f}s"
    )

    for method in methods:
        config = METHODS[method]
        typer.echo(f"Benchmarking {method} with radii {radii}")
        for radius in radii:
            for repeat_idx in range(repeats):
                run_seed = seed + repeat_idx
                start = perf_counter()
                config.runner(table, radius, queries, run_seed)
                runtime = perf_counter() - start
                rows.append(
                    {
                        "method": method,
                        "max_radius": max_radius,
                        "radius": radius,
                        "queries": queries,
                        "seed": run_seed,
                        "repeat_idx": repeat_idx,
                        "build_seconds": build_seconds,
                        "runtime_seconds": runtime,
                        "timestamp": timestamp,
                    }
                )
                typer.echo(
                    f"Completed {method} radius={radius} queries={queries} seed={run_seed} repeat={repeat_idx} in {runtime:.3f}s"
                )
        typer.echo(f"Finished benchmarking method {method}")

    if not rows:
        typer.echo("No benchmark data collected.")
        return
    df = pl.DataFrame(rows)
    if save:
        timestamp_dir = (results_dir / timestamp).resolve()
        timestamp_dir.mkdir(parents=True, exist_ok=True)
        for method in methods:
            csv_path = timestamp_dir / f"{method}_perf_{timestamp}.csv"
            df.filter(pl.col("method") == method).write_csv(csv_path)
            typer.echo(f"Saved {method} results to {csv_path}")


if __name__ == "__main__":
    app()

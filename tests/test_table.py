import numpy as np
import polars as pl
import pytest
from polars.testing import assert_frame_equal

from gridstream import (
    ConfigurationError,
    FragmentTable,
    Offset,
    RangeError,
    ShellFragmentCount,
    build,
)
from gridstream.abstract.table import Fragment
from gridstream.geometry import shell_size


@pytest.fixture
def table_2() -> FragmentTable:
    table, _ = build(2)
    return table


@pytest.fixture
def table_4() -> FragmentTable:
    table, _ = build(4)
    return table


class Test_Build:
    def test_returns_table_and_counts(self):
        table, counts = build(2)
        assert isinstance(table, FragmentTable)
        assert isinstance(counts, ShellFragmentCount)
        assert counts is table.counts
        assert table.max_radius == 2
        assert counts.max_radius == 2
        assert dict(counts) == {0: 1, 1: 1, 2: 1}

    def test_small_table(self, table_2: FragmentTable):
        assert len(table_2) == 3
        assert table_2[0] == Fragment(shell=0, index=0, offsets=(Offset(0, 0),))
        assert table_2[1].shell == 1
        assert table_2[1].offsets == (
            Offset(-1, 0),
            Offset(0, -1),
            Offset(0, 1),
            Offset(1, 0),
            Offset(-1, -1),
            Offset(-1, 1),
            Offset(1, -1),
            Offset(1, 1),
        )
        assert table_2[2].shell == 2
        assert table_2[2].offsets[:4] == (
            Offset(-2, 0),
            Offset(0, -2),
            Offset(0, 2),
            Offset(2, 0),
        )
        assert table_2[2].offsets[-1] == Offset(2, 2)

    def test_zero_radius(self):
        table, counts = build(0)
        assert len(table) == 1
        assert table[0] == Fragment(shell=0, index=0, offsets=(Offset(0, 0),))
        assert dict(counts) == {0: 1}

    def test_invalid_max_radius(self):
        with pytest.raises(ConfigurationError):
            build(-1)
        with pytest.raises(ValueError):
            build(-5)
        with pytest.raises(ConfigurationError):
            build(True)

    def test_deterministic(self):
        first, first_counts = build(5)
        second, second_counts = build(5)
        assert first == second
        assert list(first) == list(second)
        assert dict(first_counts) == dict(second_counts)
        assert_frame_equal(first.to_frame(), second.to_frame())


@pytest.mark.parametrize("max_radius", range(7))
class Test_Invariants:
    def test_partition_completeness(self, max_radius: int):
        table, _ = build(max_radius)
        offsets = [offset for fragment in table for offset in fragment.offsets]
        span = range(-max_radius, max_radius + 1)
        square = {(dx, dz) for dx in span for dz in span}
        assert len(offsets) == len(square)
        assert set(offsets) == square

    def test_shell_size_law(self, max_radius: int):
        table, counts = build(max_radius)
        for shell in range(max_radius + 1):
            fragments = table.fragments_of(shell)
            assert len(fragments) == counts[shell]
            assert sum(len(f) for f in fragments) == shell_size(shell)
            assert [f.index for f in fragments] == list(range(counts[shell]))
            assert all(o.chebyshev == shell for f in fragments for o in f)

    def test_monotonic_keys(self, max_radius: int):
        table, _ = build(max_radius)
        for fragment in table:
            keys = [o.euclidean_key for o in fragment]
            assert keys == sorted(keys)
        for before, after in zip(table[:-1], table[1:]):
            assert before.max_key <= after.min_key
            assert before.shell != after.shell

    def test_safety(self, max_radius: int):
        table, _ = build(max_radius)
        for radius in range(max_radius + 1):
            prefix = table[: table.scan_length(radius)]
            assert prefix[-1].shell == radius
            assert all(f.shell != radius for f in table[len(prefix) :])
            covered = sum(len(f) for f in prefix if f.shell <= radius)
            assert covered == (2 * radius + 1) ** 2

    def test_frame_matches_fragments(self, max_radius: int):
        table, _ = build(max_radius)
        frame = table.to_frame()
        assert frame.columns == [
            "generation_index",
            "dx",
            "dz",
            "key",
            "shell",
            "fragment",
            "index",
        ]
        assert frame.height == (2 * max_radius + 1) ** 2
        assert frame["fragment"].n_unique() == len(table)
        rows = frame.select("dx", "dz", "shell", "fragment", "index").iter_rows()
        expected = (
            (o.dx, o.dz, f.shell, position, f.index)
            for position, f in enumerate(table)
            for o in f
        )
        assert list(rows) == list(expected)


def test_interleaving(table_4: FragmentTable):
    assert [f.shell for f in table_4] == [0, 1, 2, 3, 4, 3, 4]
    assert dict(table_4.counts) == {0: 1, 1: 1, 2: 1, 3: 2, 4: 2}
    assert table_4[4].offsets[0] == Offset(-4, 0)
    assert table_4[5].offsets == (
        Offset(-3, -3),
        Offset(-3, 3),
        Offset(3, -3),
        Offset(3, 3),
    )


@pytest.mark.parametrize("max_radius", [4, 5, 6])
def test_axis_point_precedes_lower_diagonal(max_radius: int):
    table, counts = build(max_radius)
    position = next(i for i, f in enumerate(table) if Offset(4, 0) in f.offsets)
    last_shell_3 = max(i for i, f in enumerate(table) if f.shell == 3)
    assert position < last_shell_3
    assert counts[3] >= 2


def test_no_interleaving_below_shell_3():
    _, counts = build(3)
    assert dict(counts) == {0: 1, 1: 1, 2: 1, 3: 1}


def test_scan_length(table_4: FragmentTable):
    assert table_4.scan_length(0) == 1
    assert table_4.scan_length(2) == 3
    assert table_4.scan_length(3) == 6
    assert table_4.scan_length(4) == 7
    with pytest.raises(RangeError):
        table_4.scan_length(5)
    with pytest.raises(RangeError):
        table_4.scan_length(-1)


def test_offsets(table_4: FragmentTable):
    assert table_4.offsets(0) == [Offset(0, 0)]
    assert len(table_4.offsets(1)) == 9
    shell_3 = table_4.offsets(3)
    assert len(shell_3) == 49
    assert Offset(4, 0) not in shell_3
    assert shell_3[-1] == Offset(3, 3)
    assert len(table_4.offsets()) == 81


def test_fragments_of(table_4: FragmentTable):
    first, second = table_4.fragments_of(3)
    assert (first.index, second.index) == (0, 1)
    assert len(first) == 20
    assert len(second) == 4
    with pytest.raises(RangeError):
        table_4.fragments_of(5)


def test_radius_arguments_share_one_check(table_4: FragmentTable):
    for bad in (True, -1, 5):
        with pytest.raises(RangeError):
            table_4.fragments_of(bad)
        with pytest.raises(RangeError):
            table_4.scan_length(bad)
        with pytest.raises(RangeError):
            table_4.offsets(bad)
    radius = np.int64(3)
    assert table_4.fragments_of(radius) == table_4.fragments_of(3)
    assert table_4.scan_length(radius) == 6
    assert table_4.offsets(radius) == table_4.offsets(3)
    assert table_4.counts[radius] == 2


def test_fragments_follow_frame_columns(table_4: FragmentTable):
    grouped = (
        table_4.to_frame()
        .group_by("fragment", maintain_order=True)
        .agg(pl.col("shell").first(), pl.col("index").first(), pl.len())
        .sort("fragment")
    )
    assert grouped["fragment"].to_list() == list(range(len(table_4)))
    assert grouped["shell"].to_list() == [f.shell for f in table_4]
    assert grouped["index"].to_list() == [f.index for f in table_4]
    assert grouped["len"].to_list() == [len(f) for f in table_4]
    assert grouped["shell"].to_list() == [0, 1, 2, 3, 4, 3, 4]


def test_counts_mapping(table_4: FragmentTable):
    counts = table_4.counts
    assert len(counts) == 5
    assert list(counts) == [0, 1, 2, 3, 4]
    assert counts == {0: 1, 1: 1, 2: 1, 3: 2, 4: 2}
    assert 4 in counts
    assert 5 not in counts
    assert counts.get(7) is None
    with pytest.raises(KeyError):
        counts[5]
    with pytest.raises(KeyError):
        counts[-1]


def test_table_is_read_only(table_4: FragmentTable):
    frame = table_4.to_frame()
    frame = frame.with_columns(pl.lit(0).alias("shell"))
    assert table_4.to_frame()["shell"].max() == 4
    with pytest.raises(AttributeError):
        table_4[0].shell = 3
    with pytest.raises(TypeError):
        table_4[0] = table_4[1]

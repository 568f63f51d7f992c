from gridstream import Cell


def brute_force_cells(
    max_radius: int,
    radius: int,
    origin: tuple[int, int],
    present: set[tuple[int, int]] | frozenset = frozenset(),
) -> list[Cell]:
    """Enumerate the square dx-major, then stable-sort by squared distance."""
    span = range(-max_radius, max_radius + 1)
    offsets = [
        (dx, dz) for dx in span for dz in span if max(abs(dx), abs(dz)) <= radius
    ]
    offsets.sort(key=lambda o: o[0] * o[0] + o[1] * o[1])
    cells = [Cell(origin[0] + dx, origin[1] + dz) for dx, dz in offsets]
    return [cell for cell in cells if cell not in present]

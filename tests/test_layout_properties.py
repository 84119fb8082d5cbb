"""
Randomized layout checks.

Generates seeded timelines mixing unrelated, split/merge, grouped, chained,
manually placed and out-of-axis entries, and checks that:

- no two entries of different chains overlap on a row (manual rows excepted),
- become chains keep one row,
- manual rows are kept,
- consecutive groups overlap by at most ``min(heights) - 1`` rows,
- every row index is inside the diagram,
- repeated runs agree.
"""

import itertools
import random

import pytest

from timeline_layout.src.common.diagnostics import ProgramDiagnostics
from timeline_layout.src.entries.entry import Entry
from timeline_layout.src.layout.positioner import DiagramPositioner

AXIS_START = 1900
AXIS_END = 2000


def random_timeline(seed: int, count: int = 40) -> list[Entry]:
    rng = random.Random(seed)
    groups = [None, None, "north", "south", "east"]
    entries: list[Entry] = []
    for i in range(count):
        start = rng.randint(AXIS_START - 20, AXIS_END + 10)
        end = rng.choice([start, start + rng.randint(1, 60)])
        split = merge = row = None
        if entries and rng.random() < 0.3:
            split = rng.choice(entries).id
        if entries and rng.random() < 0.2:
            merge = rng.choice(entries).id
        if rng.random() < 0.1:
            row = rng.randint(0, 4)
        entries.append(
            Entry(
                id=f"e{i}",
                start=start,
                end=end,
                row=row,
                split=split,
                merge=merge,
                group=rng.choice(groups),
            )
        )

    # Chains only run forward in time, with one predecessor per successor.
    taken = set()
    for entry in entries:
        if rng.random() >= 0.25:
            continue
        candidates = [
            other
            for other in entries
            if other.start >= entry.start and other is not entry and other.id not in taken
            and other.become != entry.id
        ]
        if candidates:
            successor = rng.choice(candidates)
            entry.become = successor.id
            entry.end = None
            taken.add(successor.id)
    return entries


def _chain_roots(result) -> dict[str, str]:
    predecessors = {e.become: e.id for e in result.entries if e.become}
    roots = {}
    for entry in result.entries:
        node = entry.id
        seen = {node}
        while node in predecessors and predecessors[node] not in seen:
            node = predecessors[node]
            seen.add(node)
        roots[entry.id] = node
    return roots


def _cells(placement):
    return placement.start, max(placement.line_end, placement.start + 1)


def _layout(seed):
    entries = random_timeline(seed)
    result = DiagramPositioner(
        entries, AXIS_START, AXIS_END, ProgramDiagnostics()
    ).calculate()
    return entries, result


@pytest.mark.parametrize("seed", range(12))
def test_entries_of_different_chains_do_not_overlap(seed):
    _, result = _layout(seed)
    roots = _chain_roots(result)

    for row in range(result.row_count):
        placements = result.entries_in_row(row)
        for first, second in itertools.combinations(placements, 2):
            if first.fixed and second.fixed:
                continue
            if roots[first.entry_id] == roots[second.entry_id]:
                continue
            a_lo, a_hi = _cells(first)
            b_lo, b_hi = _cells(second)
            assert a_hi <= b_lo or b_hi <= a_lo, (
                f"{first.entry_id} and {second.entry_id} overlap on row {row}"
            )


@pytest.mark.parametrize("seed", range(12))
def test_chains_share_a_row(seed):
    _, result = _layout(seed)
    for entry in result.entries:
        if not entry.become:
            continue
        head = result.get_placement(entry.id)
        successor = result.get_placement(entry.become)
        if head.fixed or successor.fixed:
            continue
        assert head.row == successor.row, f"{entry.id} -> {entry.become}"


@pytest.mark.parametrize("seed", range(12))
def test_manual_rows_are_kept(seed):
    entries, result = _layout(seed)
    for entry in entries:
        if entry.row is not None:
            assert result.rows[entry.id] == entry.row


@pytest.mark.parametrize("seed", range(12))
def test_group_overlap_is_bounded(seed):
    _, result = _layout(seed)
    ranges = list(result.group_ranges.values())
    for previous, current in zip(ranges, ranges[1:]):
        overlap = previous.offset + previous.height - current.offset
        assert 0 <= overlap <= min(previous.height, current.height) - 1


@pytest.mark.parametrize("seed", range(12))
def test_rows_are_in_range(seed):
    entries, result = _layout(seed)
    assert set(result.rows) == {entry.id for entry in entries}
    assert all(0 <= row < result.row_count for row in result.rows.values())
    for placement in result.placements.values():
        assert AXIS_START <= placement.start <= placement.end <= AXIS_END


@pytest.mark.parametrize("seed", range(6))
def test_layout_is_deterministic(seed):
    entries = random_timeline(seed)
    positioner = DiagramPositioner(entries, AXIS_START, AXIS_END)
    first = positioner.calculate()
    again = positioner.calculate()
    fresh = DiagramPositioner(entries, AXIS_START, AXIS_END).calculate()
    assert first.rows == again.rows == fresh.rows

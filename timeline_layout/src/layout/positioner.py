"""Row assignment for timeline entries."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from timeline_layout.src.common.diagnostics import ProgramDiagnostics
from timeline_layout.src.entries.catalog import EntryCatalog
from timeline_layout.src.entries.entry import Entry

from .diagram_grid import DiagramGrid
from .layout_plan import EntryPlacement, GroupRange, LayoutResult


class ResolutionState(Enum):
    """Progress of a single entry's row resolution."""

    UNRESOLVED = "unresolved"
    RESOLVING = "resolving"
    RESOLVED = "resolved"


class RowField(Enum):
    """Which row an entry is being resolved into."""

    ROW = "row"  # Master grid
    GROUP_ROW = "group_row"  # The entry's group grid


@dataclass
class Resolution:
    """Per-entry layout state kept outside the entries themselves."""

    row: Optional[int] = None
    group_row: Optional[int] = None
    state: ResolutionState = ResolutionState.UNRESOLVED
    fixed: bool = False

    def get(self, row_field: RowField) -> Optional[int]:
        return getattr(self, row_field.value)

    def set(self, row_field: RowField, value: int) -> None:
        setattr(self, row_field.value, value)


class DiagramPositioner:
    """Assign a non-overlapping row to every timeline entry.

    FLOW (see :meth:`calculate`):
    1. Resolve grouped entries inside their own group grid
    2. Stack group grids onto the master grid, overlapping where they fit
    3. Reserve placed entries on the master grid, manual rows first
    4. Nudge entries whose split/merge target sits in another group
    5. Resolve ungrouped entries on the master grid
    """

    def __init__(
        self,
        entries: Sequence[Entry],
        start: int,
        end: int,
        diagnostics: Optional[ProgramDiagnostics] = None,
    ) -> None:
        self.diagnostics = diagnostics or ProgramDiagnostics()
        self.diagnostics.default_stage = "layout"
        self.start = start
        self.end = end
        self.width = end - start + 1

        self.catalog = EntryCatalog(entries, start, end, self.diagnostics)

        self.grid: DiagramGrid
        self._records: Dict[str, Resolution] = {}
        self._groups: List[str] = []
        self._group_grids: Dict[str, DiagramGrid] = {}
        self._group_ranges: Dict[str, GroupRange] = {}
        self._reset_layout_state()

    @property
    def rows(self) -> int:
        """Number of rows in the diagram."""
        return len(self.grid)

    def calculate(self) -> LayoutResult:
        """Calculate the row of every entry."""
        self._reset_layout_state()

        grouped = [entry for entry in self.catalog if entry.group is not None]
        ungrouped = [entry for entry in self.catalog if entry.group is None]

        for entry in grouped:
            if not self._records[entry.id].fixed:
                self._set_entry_row(entry, RowField.GROUP_ROW)

        self._stack_groups(grouped)

        # All grouped spaces must be blocked before any adjustment checks.
        self._reserve_placed_entries()

        for entry in grouped:
            if entry.split or entry.merge:
                self._adjust_connected_entry(entry)

        for entry in ungrouped:
            self._set_entry_row(entry, RowField.ROW)

        self.diagnostics.info(
            f"Placed {len(self.catalog)} entries on {self.rows} rows."
        )
        return self._build_result()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def _reset_layout_state(self) -> None:
        self._records = {entry.id: Resolution() for entry in self.catalog}
        self._pin_fixed_rows()

        fixed_rows = [r.row for r in self._records.values() if r.fixed]
        self.grid = DiagramGrid(self.width, rows=max(fixed_rows) + 1 if fixed_rows else 1)

        self._groups = self.catalog.groups()
        self._group_grids = {
            group: DiagramGrid(self.width, rows=1) for group in self._groups
        }
        self._group_ranges = {}

    def _pin_fixed_rows(self) -> None:
        """Fix manual rows, and give their whole become chain the same row."""
        for entry in self.catalog:
            if entry.row is None:
                continue
            record = self._records[entry.id]
            record.row = entry.row
            record.fixed = True
            record.state = ResolutionState.RESOLVED

            successor = self.catalog.successor(entry)
            if successor is not None and successor.row not in (None, entry.row):
                self.diagnostics.warning(
                    f"{entry.id} becomes {successor.id} but their manual rows differ "
                    f"({entry.row} and {successor.row}). Keeping both.",
                    entry_id=entry.id,
                )

        for entry in self.catalog:
            record = self._records[entry.id]
            if record.fixed:
                continue
            pinned = self._chain_manual_row(entry)
            if pinned is not None:
                record.row = pinned
                record.fixed = True
                record.state = ResolutionState.RESOLVED
                self.diagnostics.debug(
                    f"{entry.id} follows its chain's manual row {pinned}.",
                    entry_id=entry.id,
                )

    def _chain_manual_row(self, entry: Entry) -> Optional[int]:
        """Return the nearest manual row in ``entry``'s become chain."""
        node = self.catalog.predecessor(entry)
        while node is not None:
            if node.row is not None:
                return node.row
            node = self.catalog.predecessor(node)

        for node in self.catalog.chain(entry):
            if node.row is not None:
                return node.row
        return None

    def _span(self, entry: Entry) -> Tuple[int, int]:
        """Grid slots covered by ``entry`` and the rest of its chain."""
        return (
            entry.start - self.start,
            self.catalog.line_end(entry) - self.start,
        )

    def _grid_for(self, entry: Entry, row_field: RowField) -> DiagramGrid:
        if row_field is RowField.GROUP_ROW:
            return self._group_grids[entry.group]
        return self.grid

    # ------------------------------------------------------------------
    # Single-entry resolution
    # ------------------------------------------------------------------

    def _set_entry_row(self, entry: Entry, row_field: RowField) -> Optional[int]:
        """Resolve ``entry`` into ``row_field``, resolving its target first."""
        record = self._records[entry.id]
        current = record.get(row_field)
        if current is not None or record.state is ResolutionState.RESOLVING:
            return current

        grid = self._grid_for(entry, row_field)
        start, end = self._span(entry)
        record.state = ResolutionState.RESOLVING

        near = None
        target = self._proximity_target(entry, row_field)
        if target is not None:
            target_record = self._records[target.id]
            if (
                target_record.get(row_field) is None
                and target_record.state is not ResolutionState.RESOLVING
            ):
                self._set_entry_row(target, row_field)
            near = target_record.get(row_field)

            # The target's chain may already have carried this entry along.
            if record.get(row_field) is not None:
                record.state = ResolutionState.RESOLVED
                return record.get(row_field)

        row = grid.find_space(start, end, near)
        record.set(row_field, row)
        record.state = ResolutionState.RESOLVED
        grid.reserve(row, start, end)
        self._set_line_row(entry, row_field, grid)
        return row

    def _proximity_target(self, entry: Entry, row_field: RowField) -> Optional[Entry]:
        """Return the entry that ``entry`` should be placed close to."""
        target = None
        if entry.split:
            target = self.catalog.get(entry.split)
        elif entry.merge:
            merge_target = self.catalog.get(entry.merge)
            # Merging back into an entry that split from this one.
            if merge_target is not None and merge_target.split != entry.id:
                target = merge_target

        if target is None:
            return None

        if row_field is RowField.GROUP_ROW:
            if target.group != entry.group or self._records[target.id].fixed:
                return None
        return target

    def _set_line_row(self, entry: Entry, row_field: RowField, grid: DiagramGrid) -> None:
        """Carry ``entry``'s row down its become chain."""
        successor = self.catalog.successor(entry)
        if successor is None:
            return

        record = self._records[successor.id]
        if record.fixed:
            return

        row = self._records[entry.id].get(row_field)
        start, end = self._span(successor)
        stale = record.get(row_field)
        if stale is not None:
            grid.release(stale, start, end)

        record.set(row_field, row)
        record.state = ResolutionState.RESOLVED
        grid.reserve(row, start, end)
        self._set_line_row(successor, row_field, grid)

    # ------------------------------------------------------------------
    # Groups
    # ------------------------------------------------------------------

    def _stack_groups(self, grouped: List[Entry]) -> None:
        """Map group-local rows onto master rows, overlapping groups where possible.

        Each group may slide up into at most ``min(previous height, own height) - 1``
        rows of the stack. Clashes are tested against every group stacked so far,
        since a short group can let the next one reach rows of earlier groups.
        The overlap can therefore be smaller than the previous group alone allows.
        """
        offset = 0
        previous: Optional[DiagramGrid] = None
        stacked = DiagramGrid(self.width)

        for group in self._groups:
            members = [
                self._records[entry.id]
                for entry in grouped
                if entry.group == group and not self._records[entry.id].fixed
            ]
            if not members:
                continue

            group_grid = self._group_grids[group]
            if previous is not None:
                limit = min(len(previous), len(group_grid)) - 1
                overlap = DiagramGrid.max_overlap(stacked, group_grid, limit=limit)
                offset -= overlap
                self.diagnostics.debug(
                    f"Group '{group}' overlaps the previous group by {overlap} row(s)."
                )

            for record in members:
                record.row = record.group_row + offset

            stacked.fold_in(group_grid, offset)
            self._group_ranges[group] = GroupRange(group, offset, len(group_grid))
            offset += len(group_grid)
            previous = group_grid

    def _reserve_placed_entries(self) -> None:
        """Reserve fixed rows, then group-derived rows that don't clash with them.

        A group-derived chain landing on occupied slots is moved to the nearest
        free row as a whole.
        """
        placed = [r.row for r in self._records.values() if r.row is not None]
        # A group's last row can be left empty when a chain moves off it.
        placed.extend(group_range.last for group_range in self._group_ranges.values())
        if placed:
            self.grid.grow_to(max(placed))

        for entry in self.catalog:
            record = self._records[entry.id]
            if record.fixed:
                self.grid.reserve(record.row, *self._span(entry))

        reserved = set()
        for entry in self.catalog:
            record = self._records[entry.id]
            if record.fixed or record.row is None or entry.id in reserved:
                continue
            if self.catalog.predecessor(entry) is not None:
                continue  # Placed with its chain head

            start, end = self._span(entry)
            if not self.grid.is_free(record.row, start, end):
                row = self.grid.find_space(start, end, near=record.row)
                self.diagnostics.warning(
                    f"{entry.id} clashes with an entry already on row {record.row}. "
                    f"Moving it to row {row}.",
                    entry_id=entry.id,
                )
                record.row = row

            for member in self.catalog.chain(entry):
                member_record = self._records[member.id]
                if member.id in reserved or member_record.fixed:
                    break
                member_record.row = record.row
                self.grid.reserve(record.row, *self._span(member))
                reserved.add(member.id)

        # Members of chains with more than one predecessor.
        for entry in self.catalog:
            record = self._records[entry.id]
            if not record.fixed and record.row is not None and entry.id not in reserved:
                self.grid.reserve(record.row, *self._span(entry))

    def _cross_group_target(self, entry: Entry) -> Optional[Entry]:
        for target_id in (entry.split, entry.merge):
            target = self.catalog.get(target_id)
            if target is not None and target.group != entry.group:
                return target
        return None

    def _adjust_connected_entry(self, entry: Entry) -> None:
        """Move ``entry`` toward a split/merge target in a different group."""
        record = self._records[entry.id]
        if record.fixed or self.catalog.predecessor(entry) is not None:
            return

        target = self._cross_group_target(entry)
        if target is None:
            return
        target_row = self._records[target.id].row
        if target_row is None or target_row == record.row:
            return

        self.diagnostics.debug(
            f"{entry.id} is in different group from target {target.id}",
            entry_id=entry.id,
        )
        group_range = self._group_ranges[entry.group]
        boundary = group_range.last if target_row > record.row else group_range.first

        new_row = self.grid.find_free_row_between(
            boundary, record.row, *self._span(entry)
        )
        if new_row is None:
            return
        self._move_entry(entry, new_row)

        for linked in self.catalog.linked_to(entry.id):
            linked_record = self._records[linked.id]
            if (
                linked.group != entry.group
                or linked_record.fixed
                or linked_record.row is None
                or self.catalog.predecessor(linked) is not None
            ):
                continue
            move = self.grid.find_free_row_between(
                record.row, linked_record.row, *self._span(linked)
            )
            if move is not None:
                self._move_entry(linked, move)

    def _move_entry(self, entry: Entry, row: int) -> None:
        record = self._records[entry.id]
        start, end = self._span(entry)
        self.diagnostics.info(
            f"Moving {entry.id} from row {record.row} to {row}.", entry_id=entry.id
        )
        self.grid.release(record.row, start, end)
        record.row = row
        self._set_line_row(entry, RowField.ROW, self.grid)
        self.grid.reserve(row, start, end)

    # ------------------------------------------------------------------
    # Result
    # ------------------------------------------------------------------

    def _build_result(self) -> LayoutResult:
        result = LayoutResult(
            row_count=self.rows,
            group_ranges=dict(self._group_ranges),
            entries=list(self.catalog),
        )
        for entry in self.catalog:
            record = self._records[entry.id]
            result.add_placement(
                EntryPlacement(
                    entry_id=entry.id,
                    row=record.row,
                    start=entry.start,
                    end=entry.end,
                    line_end=self.catalog.line_end(entry),
                    group=entry.group,
                    group_row=record.group_row,
                    fixed=record.fixed,
                    preexists=entry.preexists,
                )
            )
        return result


def layout_entries(
    entries: Sequence[Entry],
    start: int,
    end: int,
    diagnostics: Optional[ProgramDiagnostics] = None,
) -> LayoutResult:
    """Lay out ``entries`` on the axis ``[start, end]`` with a fresh positioner."""
    return DiagramPositioner(entries, start, end, diagnostics).calculate()

"""Row occupancy tracking for timeline entry placement."""

from __future__ import annotations

from typing import Iterator, List, Optional

import numpy as np

from timeline_layout.src.common.exceptions import GridBoundsError


class DiagramGrid:
    """Tracks which time-slots of each diagram row are blocked.

    Slot ``x`` corresponds to the time-axis offset ``x`` from the axis start.
    The grid only ever grows by appending rows, and is changed only through
    :meth:`reserve` and :meth:`release`.
    """

    def __init__(self, width: int, rows: int = 0) -> None:
        self.width = max(int(width), 0)
        self._rows: List[np.ndarray] = []
        for _ in range(rows):
            self.add_row()

    def __len__(self) -> int:
        return len(self._rows)

    def __repr__(self) -> str:
        return f"DiagramGrid(width={self.width}, rows={len(self)})"

    def row(self, y: int) -> np.ndarray:
        """Return a read-only view of row ``y``."""
        view = self._row(y).view()
        view.flags.writeable = False
        return view

    def to_array(self) -> np.ndarray:
        """Return a (rows, width) boolean copy of the occupancy table."""
        if not self._rows:
            return np.zeros((0, self.width), dtype=bool)
        return np.vstack(self._rows)

    def add_row(self) -> "DiagramGrid":
        """Append one all-free row."""
        self._rows.append(np.zeros(self.width, dtype=bool))
        return self

    def grow_to(self, y: int) -> "DiagramGrid":
        """Append rows until row index ``y`` exists."""
        while len(self._rows) <= y:
            self.add_row()
        return self

    def _row(self, y: int) -> np.ndarray:
        if y < 0 or y >= len(self._rows):
            raise GridBoundsError(
                f"Attempt to use non-existent grid row {y}. "
                f"Grid has length {len(self._rows)}"
            )
        return self._rows[y]

    def _clip(self, start: int, end: int) -> tuple[int, int]:
        # Point entries still take up one slot.
        if start == end:
            end += 1
        return max(start, 0), min(end, self.width)

    def is_free(self, y: int, start: int, end: int) -> bool:
        """Check whether every slot in ``[start, end)`` on row ``y`` is free."""
        row = self._row(y)
        lo, hi = self._clip(start, end)
        if lo >= hi:
            return True
        return not row[lo:hi].any()

    def reserve(self, y: int, start: int, end: int) -> "DiagramGrid":
        """Block ``[start, end)`` on row ``y``, plus one slot either side."""
        self._mark(y, start, end, True)
        return self

    def release(self, y: int, start: int, end: int) -> "DiagramGrid":
        """Free ``[start, end)`` on row ``y``, plus one slot either side."""
        self._mark(y, start, end, False)
        return self

    def _mark(self, y: int, start: int, end: int, state: bool) -> None:
        row = self._row(y)
        lo, hi = self._clip(start, end)
        if lo >= hi:
            return
        row[lo:hi] = state

        # Keep a gap either side so neighbouring entries don't join up.
        if lo > 0:
            row[lo - 1] = state
        if hi < self.width:
            row[hi] = state

    def _probe_order(self, origin: int) -> Iterator[int]:
        """Yield row indexes outward from ``origin``: 0, -1, +1, -2, +2, ..."""
        count = len(self._rows)
        if 0 <= origin < count:
            yield origin
        step = 1
        while origin - step >= 0 or origin + step < count:
            if 0 <= origin - step < count:
                yield origin - step
            if 0 <= origin + step < count:
                yield origin + step
            step += 1

    def find_space(self, start: int, end: int, near: Optional[int] = None) -> int:
        """Find the row nearest ``near`` (or the middle row) with room for a span.

        Adds a new row if no existing row has space.
        """
        origin = near if near is not None else len(self._rows) // 2
        for y in self._probe_order(origin):
            if self.is_free(y, start, end):
                return y
        self.add_row()
        return len(self._rows) - 1

    def find_free_row_between(
        self, y1: int, y2: int, start: int, end: int
    ) -> Optional[int]:
        """Scan from ``y1`` toward ``y2`` (exclusive) for a row with space."""
        step = 1 if y2 > y1 else -1
        for y in range(y1, y2, step):
            if self.is_free(y, start, end):
                return y
        return None

    def fold_in(self, other: "DiagramGrid", offset: int) -> "DiagramGrid":
        """Block every slot blocked in ``other``, shifted down by ``offset`` rows."""
        if len(other):
            self.grow_to(offset + len(other) - 1)
        width = min(self.width, other.width)
        for y, row in enumerate(other._rows):
            self._rows[offset + y][:width] |= row[:width]
        return self

    @staticmethod
    def max_overlap(
        grid1: "DiagramGrid", grid2: "DiagramGrid", limit: Optional[int] = None
    ) -> int:
        """Return how many trailing rows of ``grid1`` can share rows with
        the leading rows of ``grid2`` without clashing.

        At most ``min(len(grid1), len(grid2)) - 1``, so the second grid always
        keeps at least one row of its own, and never more than ``limit``.
        """
        overlap = min(len(grid1), len(grid2)) - 1
        if limit is not None:
            overlap = min(overlap, limit)
        if overlap <= 0:
            return 0

        width = min(grid1.width, grid2.width)
        upper = grid1.to_array()[:, :width]
        lower = grid2.to_array()[:, :width]

        while overlap > 0:
            clashes = upper[len(upper) - overlap :] & lower[:overlap]
            if not clashes.any():
                return overlap
            overlap -= 1
        return 0

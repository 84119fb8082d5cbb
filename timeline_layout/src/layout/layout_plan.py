from dataclasses import dataclass, field
from typing import Dict, List, Optional

from timeline_layout.src.entries.entry import Entry

"""Data structures describing a computed timeline layout."""


@dataclass
class EntryPlacement:
    """Row assignment of a single entry."""

    entry_id: str
    row: int
    start: int
    end: int
    line_end: int  # End of the entry's become chain
    group: Optional[str] = None
    group_row: Optional[int] = None  # Row inside the group before stacking
    fixed: bool = False  # Manual row, or pinned by a manual chain member
    preexists: bool = False


@dataclass
class GroupRange:
    """Master-grid rows occupied by a stacked group."""

    name: str
    offset: int
    height: int

    @property
    def first(self) -> int:
        return self.offset

    @property
    def last(self) -> int:
        return self.offset + self.height - 1


@dataclass
class LayoutResult:
    """Complete row assignment for a timeline."""

    row_count: int = 1
    placements: Dict[str, EntryPlacement] = field(default_factory=dict)
    group_ranges: Dict[str, GroupRange] = field(default_factory=dict)
    entries: List[Entry] = field(default_factory=list)

    @property
    def rows(self) -> Dict[str, int]:
        """Map of entry ID to final row."""
        return {entry_id: p.row for entry_id, p in self.placements.items()}

    def get_placement(self, entry_id: str) -> Optional[EntryPlacement]:
        """Get placement for an entry."""

        return self.placements.get(entry_id)

    def add_placement(self, placement: EntryPlacement) -> None:
        """Add an entry placement."""

        self.placements[placement.entry_id] = placement

    def entries_in_row(self, row: int) -> List[EntryPlacement]:
        """Return placements on ``row`` ordered by start."""
        return sorted(
            (p for p in self.placements.values() if p.row == row),
            key=lambda p: (p.start, p.entry_id),
        )

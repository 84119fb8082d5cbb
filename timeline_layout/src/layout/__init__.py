"""Layout Planning Module
=========================

This package assigns every timeline entry a vertical row. It is responsible
for:

1. Occupancy tracking: a growable grid of blocked time-slots per row.
2. Row resolution: placing each entry near the entry it splits from or
   merges into, and carrying rows along become chains.
3. Group stacking: laying out each named group on its own grid and then
   overlapping consecutive groups as far as their occupancy allows.

The resulting :class:`LayoutResult` is consumed by whatever draws the diagram.
"""

from .diagram_grid import DiagramGrid
from .layout_plan import LayoutResult, EntryPlacement, GroupRange
from .positioner import (
    DiagramPositioner,
    Resolution,
    ResolutionState,
    RowField,
    layout_entries,
)
from .debug_format import layout_to_dict, format_layout_text

__all__ = [
    # Core positioning
    "DiagramPositioner",
    "layout_entries",
    "DiagramGrid",

    # Data structures
    "LayoutResult",
    "EntryPlacement",
    "GroupRange",
    "Resolution",
    "ResolutionState",
    "RowField",

    # Output
    "layout_to_dict",
    "format_layout_text",
]

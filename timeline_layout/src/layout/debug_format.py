"""Utilities for formatting a computed layout for output."""

from __future__ import annotations

from typing import Any, Dict, List

from .layout_plan import LayoutResult

DATE_LABEL_INTERVAL = 5


def layout_to_dict(result: LayoutResult) -> Dict[str, Any]:

    """Return a JSON-ready description of ``result``."""

    entries: List[Dict[str, Any]] = []
    for entry in result.entries:
        placement = result.get_placement(entry.id)
        if placement is None:
            continue
        item: Dict[str, Any] = {
            "id": entry.id,
            "name": entry.name,
            "row": placement.row,
            "start": placement.start,
            "end": placement.end,
        }
        for key in ("become", "split", "merge", "group"):
            value = getattr(entry, key)
            if value is not None:
                item[key] = value
        if entry.links:
            item["links"] = list(entry.links)
        if placement.preexists:
            item["preexists"] = True
        if entry.properties:
            item.update(entry.properties)
        entries.append(item)

    return {
        "rows": result.row_count,
        "groups": [
            {"name": g.name, "offset": g.offset, "height": g.height}
            for g in result.group_ranges.values()
        ],
        "entries": entries,
    }


def _date_ruler(axis_start: int, axis_end: int, width: int) -> str:
    cells = [" "] * width
    year = axis_start
    while year <= axis_end:
        label = str(year)
        x = year - axis_start
        if x + len(label) <= width:
            cells[x : x + len(label)] = label
        year += DATE_LABEL_INTERVAL * 2
    return "".join(cells).rstrip()


def format_layout_text(result: LayoutResult, axis_start: int, axis_end: int) -> str:

    """Draw ``result`` as a plain-text chart, one line per row.

    Each entry is drawn as ``=`` over the slots it spans, with its ID written
    over the start of the span (truncated to fit).
    """

    width = axis_end - axis_start + 1
    gutter = len(str(max(result.row_count - 1, 0)))
    lines = [" " * (gutter + 2) + _date_ruler(axis_start, axis_end, width)]

    for row in range(result.row_count):
        cells = [" "] * width
        for placement in result.entries_in_row(row):
            lo = max(placement.start - axis_start, 0)
            hi = min(max(placement.end - axis_start, lo + 1), width)
            if lo >= hi:
                continue
            cells[lo:hi] = "=" * (hi - lo)
            label = placement.entry_id[: hi - lo]
            cells[lo : lo + len(label)] = label
        lines.append(f"{row:>{gutter}} |" + "".join(cells).rstrip())

    return "\n".join(lines)

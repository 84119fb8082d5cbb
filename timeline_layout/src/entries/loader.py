"""Build timeline entries from JSON documents."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from timeline_layout.src.common.constants import REQUIRED_ENTRY_FIELDS
from timeline_layout.src.common.diagnostics import ProgramDiagnostics

from .entry import Entry

_ENTRY_FIELDS = {
    "id",
    "name",
    "start",
    "end",
    "row",
    "become",
    "split",
    "merge",
    "links",
    "group",
}


def _parse_int(value: Any) -> Optional[int]:
    """Return ``value`` as an int, or None if it isn't integral."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _parse_links(value: Any) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(part for part in value.split() if part)
    return tuple(str(part) for part in value if part)


def _optional_str(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def entry_from_dict(
    data: Mapping[str, Any], diagnostics: ProgramDiagnostics
) -> Optional[Entry]:
    """Create an Entry from a single JSON object.

    Returns None (after a warning) when the object is missing a required field
    or has an unusable ``start``.
    """
    if not isinstance(data, Mapping):
        diagnostics.warning(
            f"Invalid entry: {data!r}. Entries must be objects.", stage="loading"
        )
        return None

    if not all(key in data for key in REQUIRED_ENTRY_FIELDS):
        diagnostics.warning(
            f"Invalid entry: {json.dumps(data, default=str)}. Entries must have at "
            f"least {', '.join(REQUIRED_ENTRY_FIELDS)} values.",
            stage="loading",
        )
        return None

    entry_id = str(data["id"])
    start = _parse_int(data["start"])
    if start is None:
        diagnostics.warning(
            f"Start {data['start']!r} is not an integer. Skipping entry.",
            stage="loading",
            entry_id=entry_id,
        )
        return None

    end = None
    if data.get("end") is not None:
        end = _parse_int(data["end"])
        if end is None:
            diagnostics.warning(
                f"End {data['end']!r} is not an integer. Deriving it instead.",
                stage="loading",
                entry_id=entry_id,
            )

    row = None
    if data.get("row") is not None:
        row = _parse_int(data["row"])
        if row is None or row < 0:
            diagnostics.warning(
                f"Row {data['row']!r} is not a non-negative integer. Ignoring.",
                stage="loading",
                entry_id=entry_id,
            )
            row = None

    properties: Dict[str, Any] = {
        key: value for key, value in data.items() if key not in _ENTRY_FIELDS
    }

    return Entry(
        id=entry_id,
        name=str(data["name"]),
        start=start,
        end=end,
        row=row,
        become=_optional_str(data.get("become")),
        split=_optional_str(data.get("split")),
        merge=_optional_str(data.get("merge")),
        links=_parse_links(data.get("links")),
        group=_optional_str(data.get("group")),
        properties=properties,
    )


def load_entries(
    items: Iterable[Mapping[str, Any]], diagnostics: ProgramDiagnostics
) -> List[Entry]:
    """Build entries from JSON objects, skipping invalid ones and duplicate IDs."""
    entries: List[Entry] = []
    seen: set[str] = set()

    for item in items:
        entry = entry_from_dict(item, diagnostics)
        if entry is None:
            continue
        if entry.id in seen:
            diagnostics.warning(
                f"Invalid entry: {entry.id} already exists.",
                stage="loading",
                entry_id=entry.id,
            )
            continue
        seen.add(entry.id)
        entries.append(entry)

    return entries


def load_timeline_document(
    text: str, diagnostics: ProgramDiagnostics, source_name: str = "<string>"
) -> Tuple[Dict[str, Any], List[Entry]]:
    """Parse a timeline JSON document.

    The document is either a list of entry objects or an object with an
    ``entries`` list and an optional ``config`` object.

    Returns:
        (config mapping, entries)
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        diagnostics.error(
            f"Malformed JSON at line {e.lineno}, column {e.colno}: {e.msg}",
            stage="loading",
            source_file=source_name,
        )
        return {}, []

    if isinstance(document, list):
        config: Dict[str, Any] = {}
        items = document
    elif isinstance(document, dict):
        config = document.get("config") or {}
        items = document.get("entries", [])
        if not isinstance(config, dict):
            diagnostics.warning(
                "Timeline 'config' must be an object; ignoring.",
                stage="loading",
                source_file=source_name,
            )
            config = {}
        if not isinstance(items, list):
            diagnostics.error(
                "Timeline 'entries' must be a list.",
                stage="loading",
                source_file=source_name,
            )
            return config, []
    else:
        diagnostics.error(
            "Timeline document must be a list of entries or an object.",
            stage="loading",
            source_file=source_name,
        )
        return {}, []

    return config, load_entries(items, diagnostics)

"""Timeline entry model, JSON loading and the validated entry catalog."""

from .entry import Entry
from .loader import entry_from_dict, load_entries, load_timeline_document
from .catalog import EntryCatalog

__all__ = [
    "Entry",
    "EntryCatalog",
    "entry_from_dict",
    "load_entries",
    "load_timeline_document",
]

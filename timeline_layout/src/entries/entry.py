from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

"""Data structures for timeline entries."""


@dataclass
class Entry:
    """A labelled time interval on the diagram."""

    id: str
    start: int
    end: Optional[int] = None  # None until derived by the catalog
    name: str = ""
    row: Optional[int] = None  # Manual override, never reassigned
    become: Optional[str] = None
    split: Optional[str] = None
    merge: Optional[str] = None
    links: Tuple[str, ...] = ()
    group: Optional[str] = None
    preexists: bool = False  # Start was clamped to the axis start
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_point(self) -> bool:
        """True for zero-duration entries."""
        return self.end is not None and self.end == self.start

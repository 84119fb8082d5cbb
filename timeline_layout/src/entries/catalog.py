"""By-ID access to a validated working set of entries."""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Iterator, List, Optional, Sequence

from timeline_layout.src.common.constants import LINK_ATTRIBUTE, REFERENCE_ATTRIBUTES
from timeline_layout.src.common.diagnostics import ProgramDiagnostics

from .entry import Entry

_VISITING = "visiting"
_DONE = "done"


class EntryCatalog:
    """Validated copies of the caller's entries, indexed by ID.

    The caller's entries are never mutated. On construction the catalog:

    1. drops duplicate IDs,
    2. drops references to IDs that don't exist,
    3. breaks ``become`` cycles,
    4. derives missing ends and clamps spans to the axis,
    5. propagates each chain head's group down its ``become`` chain.
    """

    def __init__(
        self,
        entries: Sequence[Entry],
        axis_start: int,
        axis_end: int,
        diagnostics: Optional[ProgramDiagnostics] = None,
    ) -> None:
        self.diagnostics = diagnostics or ProgramDiagnostics()
        self.axis_start = axis_start
        self.axis_end = axis_end

        self._entries: List[Entry] = []
        self._by_id: Dict[str, Entry] = {}
        for entry in entries:
            if entry.id in self._by_id:
                self.diagnostics.warning(
                    f"Invalid entry: {entry.id} already exists. Ignoring duplicate.",
                    stage="catalog",
                    entry_id=entry.id,
                )
                continue
            copy = replace(
                entry, links=tuple(entry.links), properties=dict(entry.properties)
            )
            self._entries.append(copy)
            self._by_id[copy.id] = copy

        self._validate_references()
        self._break_become_cycles()

        self._predecessors: Dict[str, str] = {}
        for entry in self._entries:
            if entry.become:
                self._predecessors.setdefault(entry.become, entry.id)

        self._normalize_spans()
        self._reconcile_groups()

    # ------------------------------------------------------------------
    # Construction passes
    # ------------------------------------------------------------------

    def _validate_references(self) -> None:
        """Drop relationship attributes naming entries that don't exist."""
        for entry in self._entries:
            for attrib in REFERENCE_ATTRIBUTES:
                target = getattr(entry, attrib)
                if target is None:
                    continue
                if target not in self._by_id or target == entry.id:
                    self.diagnostics.warning(
                        f'Given {attrib} ID "{target}" doesn\'t exist. Ignoring.',
                        stage="catalog",
                        entry_id=entry.id,
                    )
                    setattr(entry, attrib, None)

            valid_links = []
            for link in getattr(entry, LINK_ATTRIBUTE):
                if link in self._by_id and link != entry.id:
                    valid_links.append(link)
                else:
                    self.diagnostics.warning(
                        f'Given {LINK_ATTRIBUTE} ID "{link}" doesn\'t exist. Ignoring.',
                        stage="catalog",
                        entry_id=entry.id,
                    )
            setattr(entry, LINK_ATTRIBUTE, tuple(valid_links))

    def _break_become_cycles(self) -> None:
        """Remove the ``become`` link that closes each continuation cycle."""
        state: Dict[str, str] = {}
        for entry in self._entries:
            path: List[Entry] = []
            node: Optional[Entry] = entry
            while node is not None and node.id not in state:
                state[node.id] = _VISITING
                path.append(node)
                nxt = self.successor(node)
                if nxt is not None and state.get(nxt.id) == _VISITING:
                    self.diagnostics.warning(
                        f"{node.id} becomes {nxt.id}, which leads back to {node.id}. "
                        f"Ignoring become.",
                        stage="catalog",
                        entry_id=node.id,
                    )
                    node.become = None
                    break
                node = nxt
            for visited in path:
                state[visited.id] = _DONE

    def _normalize_spans(self) -> None:
        """Clamp spans to the axis and derive ends that weren't given."""
        for entry in self._entries:
            if entry.start < self.axis_start:
                entry.start = self.axis_start
                entry.preexists = True
            elif entry.start > self.axis_end:
                self.diagnostics.warning(
                    f"Start {entry.start} is after the axis end {self.axis_end}. "
                    f"Clamping to {self.axis_end}.",
                    stage="catalog",
                    entry_id=entry.id,
                )
                entry.start = self.axis_end

        for entry in self._entries:
            if entry.end is None:
                successor = self.successor(entry)
                entry.end = successor.start if successor is not None else self.axis_end
            elif entry.end > self.axis_end:
                self.diagnostics.warning(
                    f"End {entry.end} is after the axis end {self.axis_end}. "
                    f"Clamping to {self.axis_end}.",
                    stage="catalog",
                    entry_id=entry.id,
                )
                entry.end = self.axis_end
            if entry.end < entry.start:
                self.diagnostics.warning(
                    f"End {entry.end} is before start {entry.start}. "
                    f"Treating as a point entry.",
                    stage="catalog",
                    entry_id=entry.id,
                )
                entry.end = entry.start

    def _reconcile_groups(self) -> None:
        """Force every chain member into its head's group."""
        for head in self._entries:
            if head.id in self._predecessors:
                continue
            node = head
            successor = self.successor(node)
            while successor is not None:
                if successor.group != node.group:
                    self.diagnostics.warning(
                        f"{node.id} and {successor.id} are directly connected but in "
                        f"separate groups. Amending {successor.id} to {node.group}",
                        stage="catalog",
                        entry_id=successor.id,
                    )
                    successor.group = node.group
                node = successor
                successor = self.successor(node)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def __iter__(self) -> Iterator[Entry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._by_id

    def get(self, entry_id: Optional[str]) -> Optional[Entry]:
        """Return the entry with ``entry_id``, or None."""
        if entry_id is None:
            return None
        return self._by_id.get(entry_id)

    def successor(self, entry: Entry) -> Optional[Entry]:
        """Return the entry ``entry`` becomes, if any."""
        return self.get(entry.become)

    def predecessor(self, entry: Entry) -> Optional[Entry]:
        """Return the first entry that becomes ``entry``, if any."""
        return self.get(self._predecessors.get(entry.id))

    def chain(self, entry: Entry) -> Iterator[Entry]:
        """Yield ``entry`` followed by every entry reachable through ``become``."""
        node: Optional[Entry] = entry
        while node is not None:
            yield node
            node = self.successor(node)

    def line_end(self, entry: Entry) -> int:
        """Return the end of the last entry in ``entry``'s become chain."""
        *_, tail = self.chain(entry)
        return tail.end

    def groups(self) -> List[str]:
        """Return distinct group names in first-encountered order."""
        names: List[str] = []
        for entry in self._entries:
            if entry.group is not None and entry.group not in names:
                names.append(entry.group)
        return names

    def linked_to(self, entry_id: str) -> List[Entry]:
        """Return entries that split from or merge into ``entry_id``."""
        return [
            entry
            for entry in self._entries
            if entry.split == entry_id or entry.merge == entry_id
        ]

"""Shared constants and configuration for timeline layout."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional

# Axis defaults
DEFAULT_YEAR_START = 1900

# Relationship attributes that name other entries
REFERENCE_ATTRIBUTES = ("become", "split", "merge")
LINK_ATTRIBUTE = "links"

# Attributes every loaded entry must carry
REQUIRED_ENTRY_FIELDS = ("id", "name", "start")

# Drawing settings accepted in timeline config documents but not used by layout
RENDERING_CONFIG_KEYS = frozenset(
    {
        "strokeWidth",
        "yearWidth",
        "rowHeight",
        "padding",
        "boxWidth",
        "guides",
        "guideInterval",
        "entrySelector",
        "linkDashes",
        "irregularDashes",
        "panzoom",
        "findForm",
        "zoomIn",
        "zoomOut",
        "zoomReset",
    }
)

_CONFIG_ALIASES = {
    "yearStart": "year_start",
    "year_start": "year_start",
    "yearEnd": "year_end",
    "year_end": "year_end",
}


def _default_year_end() -> int:
    return date.today().year + 1


@dataclass(frozen=True)
class LayoutConfig:
    """Time-axis settings for a layout run."""

    year_start: int = DEFAULT_YEAR_START
    year_end: int = field(default_factory=_default_year_end)

    @property
    def width(self) -> int:
        """Number of grid slots spanned by the axis, both ends included."""
        return self.year_end - self.year_start + 1

    @classmethod
    def from_mapping(
        cls,
        data: Optional[Mapping[str, Any]],
        diagnostics: Any = None,
        base: Optional["LayoutConfig"] = None,
    ) -> "LayoutConfig":
        """Build a config from a timeline document's ``config`` object.

        Values missing from ``data`` fall back to ``base`` (or the defaults).
        """
        base = base or cls()
        values = {"year_start": base.year_start, "year_end": base.year_end}

        for key, value in (data or {}).items():
            target = _CONFIG_ALIASES.get(key)
            if target is None:
                if diagnostics is not None:
                    if key in RENDERING_CONFIG_KEYS:
                        diagnostics.info(
                            f"Config option '{key}' only affects rendering; ignoring.",
                            stage="config",
                        )
                    else:
                        diagnostics.warning(
                            f"Unknown config option '{key}'; ignoring.", stage="config"
                        )
                continue
            try:
                values[target] = int(value)
            except (TypeError, ValueError):
                if diagnostics is not None:
                    diagnostics.warning(
                        f"Config option '{key}' must be an integer, got {value!r}; "
                        f"using {values[target]}.",
                        stage="config",
                    )

        config = cls(**values)
        if config.year_end <= config.year_start and diagnostics is not None:
            diagnostics.error(
                f"Timeline end {config.year_end} must be after start {config.year_start}.",
                stage="config",
            )
        return config


DEFAULT_CONFIG = LayoutConfig()

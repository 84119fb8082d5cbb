"""Debug visualization of a computed timeline layout.

Renders every entry as a horizontal bar on its assigned row, with dashed
connectors for split/merge relationships, so row assignments can be checked
at a glance.

Usage:
    result = DiagramPositioner(entries, 1900, 2000).calculate()
    render_layout_plot(result, "layout.png", 1900, 2000)
"""

from pathlib import Path
from typing import Dict, Tuple, Union

# Optional dependency for visualization
try:
    import matplotlib

    matplotlib.use("Agg")  # Non-interactive backend
    import matplotlib.pyplot as plt
    from matplotlib.collections import LineCollection

    HAS_MATPLOTLIB = True
except ImportError:
    HAS_MATPLOTLIB = False

from .layout_plan import LayoutResult

BAR_HEIGHT = 0.6
GROUP_COLOURS = ["#4c72b0", "#dd8452", "#55a868", "#c44e52", "#8172b3", "#937860"]
UNGROUPED_COLOUR = "#7f7f7f"


def _group_colours(result: LayoutResult) -> Dict[str, str]:
    return {
        name: GROUP_COLOURS[i % len(GROUP_COLOURS)]
        for i, name in enumerate(result.group_ranges)
    }


def render_layout_plot(
    result: LayoutResult,
    path: Union[str, Path],
    axis_start: int,
    axis_end: int,
    figsize: Tuple[float, float] | None = None,
    dpi: int = 100,
) -> Path:
    """Save a PNG of ``result`` to ``path`` and return the path."""
    if not HAS_MATPLOTLIB:
        raise RuntimeError("matplotlib is required for visualization")

    path = Path(path)
    if figsize is None:
        figsize = (max(8.0, (axis_end - axis_start) / 8), max(3.0, result.row_count * 0.5))

    colours = _group_colours(result)
    fig, ax = plt.subplots(figsize=figsize)

    for placement in result.placements.values():
        width = max(placement.end - placement.start, 1)
        colour = colours.get(placement.group, UNGROUPED_COLOUR)
        ax.barh(
            placement.row,
            width,
            left=placement.start,
            height=BAR_HEIGHT,
            color=colour,
            edgecolor="black" if placement.fixed else colour,
            linewidth=1.5 if placement.fixed else 0.5,
        )
        ax.text(
            placement.start + 0.2,
            placement.row,
            placement.entry_id,
            va="center",
            ha="left",
            fontsize=7,
            color="white",
            clip_on=True,
        )

    segments = []
    for entry in result.entries:
        placement = result.get_placement(entry.id)
        if entry.split:
            source = result.get_placement(entry.split)
            segments.append(((placement.start, source.row), (placement.start, placement.row)))
        if entry.merge:
            target = result.get_placement(entry.merge)
            segments.append(((placement.end, placement.row), (placement.end, target.row)))
    if segments:
        ax.add_collection(LineCollection(segments, colors="black", linestyles="dashed", linewidths=0.8))

    ax.set_xlim(axis_start, axis_end + 1)
    ax.set_ylim(result.row_count - 0.5, -0.5)
    ax.set_yticks(range(result.row_count))
    ax.set_xlabel("Year")
    ax.set_ylabel("Row")
    ax.grid(axis="x", linestyle=":", alpha=0.5)

    path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(path, dpi=dpi)
    plt.close(fig)
    return path

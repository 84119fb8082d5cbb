#!/usr/bin/env python3
"""
Timeline layout CLI - Command-line interface for the timeline row layout engine.

This module provides the entry point for the 'timeline-layout' command installed via pip.

Usage:
    timeline-layout timeline.json                     # Lay out a JSON timeline
    timeline-layout --input '[{"id": "a", ...}]'      # Lay out from a string
    timeline-layout timeline.json -o rows.json        # Save the layout to file
    timeline-layout timeline.json --format text       # Print a text chart
    timeline-layout timeline.json --plot layout.png   # Save a debug plot
"""

import json
import logging
import sys
from pathlib import Path

import click

from timeline_layout.src.common.constants import LayoutConfig
from timeline_layout.src.common.diagnostics import ProgramDiagnostics
from timeline_layout.src.entries.loader import load_timeline_document
from timeline_layout.src.layout.debug_format import format_layout_text, layout_to_dict
from timeline_layout.src.layout.layout_debug_viz import render_layout_plot
from timeline_layout.src.layout.positioner import DiagramPositioner

OUTPUT_FORMATS = ["json", "text"]


def layout_timeline_source(
    source_text: str,
    source_name: str = "<string>",
    year_start: int | None = None,
    year_end: int | None = None,
    log_level: str = "error",
    output_format: str = "json",
    plot_path: Path | None = None,
) -> tuple[bool, str, list]:
    """
    Lay out a timeline JSON document.

    Args:
        source_text: The timeline JSON document
        source_name: Name of the source (for diagnostics)
        year_start: First year of the axis, overriding the document's config
        year_end: Last year of the axis, overriding the document's config
        log_level: Minimum severity of returned diagnostic messages
        output_format: "json" for the row assignment as JSON, "text" for a chart
        plot_path: Where to save a debug plot, or None for no plot

    Returns:
        (success: bool, result: str, diagnostics: list)
    """
    diagnostics = ProgramDiagnostics(log_level=log_level)
    diagnostics.default_stage = "loading"

    document_config, entries = load_timeline_document(
        source_text, diagnostics, source_name=source_name
    )
    if diagnostics.has_errors():
        return False, "Loading failed", diagnostics.get_messages(diagnostics.min_severity)

    overrides = {
        key: value
        for key, value in (("year_start", year_start), ("year_end", year_end))
        if value is not None
    }
    layout_config = LayoutConfig.from_mapping({**document_config, **overrides}, diagnostics)
    if diagnostics.has_errors():
        return False, "Invalid configuration", diagnostics.get_messages(
            diagnostics.min_severity
        )

    positioner = DiagramPositioner(
        entries, layout_config.year_start, layout_config.year_end, diagnostics
    )
    result = positioner.calculate()

    if plot_path is not None:
        render_layout_plot(result, plot_path, layout_config.year_start, layout_config.year_end)

    if output_format == "text":
        output = format_layout_text(result, layout_config.year_start, layout_config.year_end)
    else:
        output = json.dumps(layout_to_dict(result), indent=2)

    return True, output, diagnostics.get_messages(diagnostics.min_severity)


def setup_logging(level: str) -> None:
    """Setup logging configuration."""
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    logging.basicConfig(level=numeric_level, format="%(levelname)s: %(message)s")


@click.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path), required=False)
@click.option(
    "-i",
    "--input",
    "input_string",
    type=str,
    help="Lay out a JSON string instead of a file",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    help="Output file for the layout (default: stdout)",
)
@click.option("--year-start", type=int, help="First year of the time axis (default: 1900)")
@click.option("--year-end", type=int, help="Last year of the time axis (default: next year)")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS, case_sensitive=False),
    default="json",
    help="Output format",
)
@click.option(
    "--plot",
    type=click.Path(path_type=Path),
    help="Save a debug plot of the layout to this PNG file",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    help="Set the logging level",
)
def main(input_file, input_string, output, year_start, year_end, output_format, plot, log_level):
    """Assign diagram rows to the entries of a JSON timeline."""
    setup_logging(log_level)

    if input_file and input_string:
        click.echo("Error: Cannot specify both input file and --input string", err=True)
        sys.exit(1)

    if not input_file and not input_string:
        click.echo("Error: Must specify either an input file or --input string", err=True)
        sys.exit(1)

    if input_string:
        source_text = input_string
        source_name = "<string>"
    else:
        try:
            source_text = input_file.read_text(encoding="utf-8")
            source_name = str(input_file.resolve())
        except OSError as e:
            click.echo(f"Failed to read input file: {e}", err=True)
            sys.exit(1)

    success, result, diagnostic_messages = layout_timeline_source(
        source_text,
        source_name=source_name,
        year_start=year_start,
        year_end=year_end,
        log_level=log_level,
        output_format=output_format.lower(),
        plot_path=plot,
    )

    if not success:
        for message in diagnostic_messages:
            click.echo(message, err=True)
        click.echo(f"Layout failed: {result}", err=True)
        sys.exit(1)

    verbose = log_level in ["debug", "info"]

    if output:
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(result, encoding="utf-8")
        except OSError as e:
            click.echo(f"Failed to write output file: {e}", err=True)
            sys.exit(1)
        if verbose:
            click.echo(f"Layout saved to {output}", err=True)
    else:
        click.echo(result)

    if verbose:
        msg_count = len(diagnostic_messages)
        msg = (
            f"Layout completed with {msg_count} diagnostic(s)."
            if msg_count
            else "Layout completed successfully."
        )
        click.echo(msg, err=True)


if __name__ == "__main__":
    main()

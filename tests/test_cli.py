"""
Tests for the CLI module (timeline_layout/cli.py).

These tests cover the command-line interface and layout_timeline_source function.
"""

import json

import pytest
from click.testing import CliRunner

from timeline_layout.cli import layout_timeline_source, main, setup_logging

SIMPLE_TIMELINE = [
    {"id": "a", "name": "Alpha", "start": 1900, "end": 1950},
    {"id": "b", "name": "Beta", "start": 1940, "end": 1990},
]


class TestLayoutTimelineSource:
    """Tests for the layout_timeline_source function."""

    def test_list_document(self):
        """A bare list of entries is laid out."""
        success, result, messages = layout_timeline_source(json.dumps(SIMPLE_TIMELINE))
        assert success is True
        data = json.loads(result)
        assert data["rows"] == 2
        assert [e["row"] for e in data["entries"]] == [0, 1]
        assert messages == []

    def test_document_config_sets_axis(self):
        """The document's config controls the time axis."""
        document = {
            "config": {"yearStart": 1950, "yearEnd": 2000},
            "entries": [{"id": "a", "name": "A", "start": 1900, "end": 1960}],
        }
        success, result, _ = layout_timeline_source(json.dumps(document))
        assert success is True
        entry = json.loads(result)["entries"][0]
        assert entry["start"] == 1950
        assert entry["preexists"] is True

    def test_overrides_take_precedence(self):
        """Explicit year arguments override the document config."""
        document = {
            "config": {"yearStart": 1800},
            "entries": [{"id": "a", "name": "A", "start": 1900}],
        }
        success, result, _ = layout_timeline_source(
            json.dumps(document), year_start=1850, year_end=1950
        )
        assert success is True
        assert json.loads(result)["entries"][0]["end"] == 1950

    def test_text_output(self):
        """Text output draws one line per row."""
        success, result, _ = layout_timeline_source(
            json.dumps(SIMPLE_TIMELINE), year_start=1900, year_end=2000, output_format="text"
        )
        assert success is True
        lines = result.splitlines()
        assert len(lines) == 3
        assert lines[1].startswith("0 |a")

    def test_warnings_reported(self):
        """Corrected problems are returned at warning level."""
        entries = [{"id": "a", "name": "A", "start": 1900, "split": "ghost"}]
        success, _, messages = layout_timeline_source(
            json.dumps(entries), log_level="warning"
        )
        assert success is True
        assert len(messages) == 1
        assert "ghost" in messages[0]

    def test_malformed_json_fails(self):
        success, result, messages = layout_timeline_source("{not json")
        assert success is False
        assert result == "Loading failed"
        assert messages

    def test_invalid_axis_fails(self):
        success, result, _ = layout_timeline_source("[]", year_start=2000, year_end=1990)
        assert success is False
        assert result == "Invalid configuration"

    def test_plot_path(self, tmp_path):
        pytest.importorskip("matplotlib")
        plot = tmp_path / "layout.png"
        success, _, _ = layout_timeline_source(json.dumps(SIMPLE_TIMELINE), plot_path=plot)
        assert success is True
        assert plot.exists()


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_valid_log_level(self):
        setup_logging("debug")

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="Invalid log level"):
            setup_logging("loud")


class TestMainCommand:
    """Tests for the main CLI command."""

    @pytest.fixture
    def runner(self):
        return CliRunner()

    @pytest.fixture
    def timeline_file(self, tmp_path):
        file = tmp_path / "timeline.json"
        file.write_text(json.dumps(SIMPLE_TIMELINE))
        return file

    def test_layout_file(self, runner, timeline_file):
        result = runner.invoke(main, [str(timeline_file)])
        assert result.exit_code == 0
        assert json.loads(result.output)["rows"] == 2

    def test_layout_string_input(self, runner):
        result = runner.invoke(main, ["--input", json.dumps(SIMPLE_TIMELINE)])
        assert result.exit_code == 0
        assert '"rows": 2' in result.output

    def test_both_file_and_string_fails(self, runner, timeline_file):
        result = runner.invoke(main, [str(timeline_file), "--input", "[]"])
        assert result.exit_code == 1

    def test_no_input_fails(self, runner):
        result = runner.invoke(main, [])
        assert result.exit_code == 1

    def test_output_to_file(self, runner, timeline_file, tmp_path):
        output_file = tmp_path / "out" / "rows.json"
        result = runner.invoke(main, [str(timeline_file), "-o", str(output_file)])
        assert result.exit_code == 0
        assert json.loads(output_file.read_text())["rows"] == 2

    def test_text_format(self, runner, timeline_file):
        result = runner.invoke(
            main, [str(timeline_file), "--format", "text", "--year-end", "2000"]
        )
        assert result.exit_code == 0
        assert "0 |a" in result.output

    def test_year_options(self, runner, timeline_file, tmp_path):
        output_file = tmp_path / "rows.json"
        result = runner.invoke(
            main,
            [str(timeline_file), "--year-start", "1945", "--year-end", "1995", "-o", str(output_file)],
        )
        assert result.exit_code == 0
        entries = json.loads(output_file.read_text())["entries"]
        assert entries[0]["start"] == 1945

    def test_invalid_document_fails(self, runner):
        result = runner.invoke(main, ["--input", "42"])
        assert result.exit_code == 1
        assert "Layout failed" in result.output

    def test_log_level_info(self, runner, timeline_file, tmp_path):
        output_file = tmp_path / "rows.json"
        result = runner.invoke(
            main, [str(timeline_file), "--log-level", "info", "-o", str(output_file)]
        )
        assert result.exit_code == 0
        assert "Layout completed" in result.output

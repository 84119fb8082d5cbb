"""
Tests for common/constants.py - Layout configuration.
"""

from datetime import date

from timeline_layout.src.common.constants import (
    DEFAULT_CONFIG,
    DEFAULT_YEAR_START,
    LayoutConfig,
)
from timeline_layout.src.common.diagnostics import ProgramDiagnostics


class TestLayoutConfigDefaults:
    """Tests for default configuration values."""

    def test_default_axis(self):
        config = LayoutConfig()
        assert config.year_start == DEFAULT_YEAR_START == 1900
        assert config.year_end == date.today().year + 1

    def test_default_config_instance(self):
        assert DEFAULT_CONFIG.year_start == 1900

    def test_width_includes_both_ends(self):
        assert LayoutConfig(year_start=1900, year_end=2000).width == 101


class TestLayoutConfigFromMapping:
    """Tests for LayoutConfig.from_mapping."""

    def test_camel_case_keys(self):
        config = LayoutConfig.from_mapping({"yearStart": 1950, "yearEnd": 2020})
        assert config == LayoutConfig(year_start=1950, year_end=2020)

    def test_snake_case_keys(self):
        config = LayoutConfig.from_mapping({"year_start": "1950", "year_end": 2020})
        assert config.year_start == 1950
        assert config.year_end == 2020

    def test_missing_values_use_base(self):
        base = LayoutConfig(year_start=1800, year_end=1900)
        config = LayoutConfig.from_mapping({"yearEnd": 1950}, base=base)
        assert config.year_start == 1800
        assert config.year_end == 1950

    def test_none_mapping(self):
        assert LayoutConfig.from_mapping(None).year_start == 1900

    def test_rendering_keys_are_informational(self):
        diag = ProgramDiagnostics()
        LayoutConfig.from_mapping({"yearWidth": 50, "rowHeight": 50}, diag)
        assert diag.warning_count() == 0
        assert len(diag.diagnostics) == 2

    def test_unknown_key_warns(self):
        diag = ProgramDiagnostics()
        LayoutConfig.from_mapping({"colour": "red"}, diag)
        assert diag.warning_count() == 1

    def test_non_integer_value_warns_and_keeps_default(self):
        diag = ProgramDiagnostics()
        config = LayoutConfig.from_mapping({"yearStart": "soon"}, diag)
        assert config.year_start == 1900
        assert diag.warning_count() == 1

    def test_end_before_start_is_error(self):
        diag = ProgramDiagnostics()
        LayoutConfig.from_mapping({"yearStart": 2000, "yearEnd": 1990}, diag)
        assert diag.has_errors()

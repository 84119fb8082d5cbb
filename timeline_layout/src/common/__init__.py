"""Common utilities shared across layout stages."""

from .diagnostics import ProgramDiagnostics, DiagnosticSeverity
from .exceptions import LayoutError, GridBoundsError
from .constants import LayoutConfig, DEFAULT_CONFIG

__all__ = [
    "ProgramDiagnostics",
    "DiagnosticSeverity",
    "LayoutError",
    "GridBoundsError",
    "LayoutConfig",
    "DEFAULT_CONFIG",
]

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
from pathlib import Path

from .exceptions import LayoutError

"""Unified diagnostic collection for loading and laying out a timeline."""

logger = logging.getLogger("timeline_layout")


class DiagnosticSeverity(Enum):
    """Severity levels for layout diagnostics."""

    DEBUG = "debug"  # Internal layout tracing
    INFO = "info"  # Informational messages for users
    WARNING = "warning"  # Issues that are corrected and don't stop layout
    ERROR = "error"  # Issues that prevent a layout from being produced


_SEVERITY_ORDER = [
    DiagnosticSeverity.DEBUG,
    DiagnosticSeverity.INFO,
    DiagnosticSeverity.WARNING,
    DiagnosticSeverity.ERROR,
]

_LOGGING_LEVELS = {
    DiagnosticSeverity.DEBUG: logging.DEBUG,
    DiagnosticSeverity.INFO: logging.INFO,
    DiagnosticSeverity.WARNING: logging.WARNING,
    DiagnosticSeverity.ERROR: logging.ERROR,
}


@dataclass
class Diagnostic:
    """A single diagnostic message with context."""

    severity: DiagnosticSeverity
    message: str
    stage: str  # loading, catalog, layout, output
    entry_id: Optional[str] = None
    source_file: Optional[str] = None


class ProgramDiagnostics:
    """Central diagnostic collection for a layout run.

    Every diagnostic is kept for later querying and is also forwarded to the
    ``timeline_layout`` logger, so callers that only configure logging still
    see warnings about dropped references and corrected groups.

    Usage:
        diagnostics = ProgramDiagnostics()
        diagnostics.warning("Unknown split target", stage="catalog", entry_id="a")
        if diagnostics.has_errors():
            print(diagnostics.format_for_user())
    """

    def __init__(self, log_level: str = "warning", raise_errors: bool = False):
        self.diagnostics: List[Diagnostic] = []
        self.log_level = log_level.lower()
        self.raise_errors = raise_errors
        self._error_count = 0
        self._warning_count = 0
        self.default_stage = "unknown"

    @property
    def min_severity(self) -> DiagnosticSeverity:
        """Lowest severity included in user-facing output."""
        try:
            return DiagnosticSeverity(self.log_level)
        except ValueError:
            return DiagnosticSeverity.WARNING

    def debug(
        self,
        message: str,
        stage: str | None = None,
        entry_id: Optional[str] = None,
        source_file: Optional[str] = None,
    ) -> None:
        """Add an internal tracing message (shown with log level debug)."""
        self._add(DiagnosticSeverity.DEBUG, message, stage, entry_id, source_file)

    def info(
        self,
        message: str,
        stage: str | None = None,
        entry_id: Optional[str] = None,
        source_file: Optional[str] = None,
    ) -> None:
        """Add an informational message (shown with log level info)."""
        self._add(DiagnosticSeverity.INFO, message, stage, entry_id, source_file)

    def warning(
        self,
        message: str,
        stage: str | None = None,
        entry_id: Optional[str] = None,
        source_file: Optional[str] = None,
    ) -> None:
        """Add a warning (always shown, doesn't stop layout)."""
        self._add(DiagnosticSeverity.WARNING, message, stage, entry_id, source_file)
        self._warning_count += 1

    def error(
        self,
        message: str,
        stage: str | None = None,
        entry_id: Optional[str] = None,
        source_file: Optional[str] = None,
    ) -> None:
        """Add an error (always shown, stops layout).

        Raises LayoutError instead of recording when ``raise_errors`` is set.
        """
        self._add(DiagnosticSeverity.ERROR, message, stage, entry_id, source_file)
        self._error_count += 1
        if self.raise_errors:
            raise LayoutError(message, entry_id)

    def _add(
        self,
        severity: DiagnosticSeverity,
        message: str,
        stage: str | None,
        entry_id: Optional[str],
        source_file: Optional[str],
    ) -> None:
        """Internal method to add a diagnostic."""
        diag = Diagnostic(
            severity=severity,
            message=message,
            stage=stage or self.default_stage,
            entry_id=entry_id,
            source_file=source_file,
        )
        self.diagnostics.append(diag)
        logger.log(_LOGGING_LEVELS[severity], self._format_diagnostic(diag))

    def has_errors(self) -> bool:
        """Check if any errors have been recorded."""
        return self._error_count > 0

    def error_count(self) -> int:
        """Get the number of errors."""
        return self._error_count

    def warning_count(self) -> int:
        """Get the number of warnings."""
        return self._warning_count

    def get_messages(
        self, min_severity: DiagnosticSeverity = DiagnosticSeverity.WARNING
    ) -> List[str]:
        """Get formatted messages at or above the specified severity level."""
        threshold = _SEVERITY_ORDER.index(min_severity)
        return [
            self._format_diagnostic(diag)
            for diag in self.diagnostics
            if _SEVERITY_ORDER.index(diag.severity) >= threshold
        ]

    def _format_diagnostic(self, diag: Diagnostic) -> str:
        """Format a single diagnostic for display."""
        # Format: SEVERITY [stage:file:entry]: message
        location_parts = [diag.stage]
        if diag.source_file:
            location_parts.append(Path(diag.source_file).name)
        if diag.entry_id:
            location_parts.append(diag.entry_id)

        location = ":".join(location_parts)
        return f"{diag.severity.value.upper()} [{location}]: {diag.message}"

    def format_for_user(self) -> str:
        """Format all diagnostics for user-friendly output."""
        if not self.diagnostics:
            return "No diagnostics."

        messages = self.get_messages(self.min_severity)
        summary = (
            f"\nLayout summary: {self._error_count} error(s), "
            f"{self._warning_count} warning(s)"
        )
        return "\n".join(messages) + summary

    def merge(self, other: "ProgramDiagnostics") -> None:
        """Merge diagnostics from another collector."""
        self.diagnostics.extend(other.diagnostics)
        self._error_count += other._error_count
        self._warning_count += other._warning_count

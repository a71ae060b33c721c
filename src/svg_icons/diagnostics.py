"""Structured diagnostics emitted while importing icons."""

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Literal

logger = logging.getLogger(__name__)

Severity = Literal["warning", "error"]


@dataclass(frozen=True)
class Diagnostic:
    """A single reported problem.

    ``subject`` is an icon name for per-icon problems, or a file or
    directory path for loading problems.
    """

    severity: Severity
    subject: str
    reason: str
    stage: str | None = None

    def __str__(self) -> str:
        stage = f" [{self.stage}]" if self.stage else ""
        return f"{self.severity.upper()}{stage} {self.subject}: {self.reason}"


DiagnosticSink = Callable[[Diagnostic], None]


def log_diagnostic(diagnostic: Diagnostic) -> None:
    """Default sink: forward the diagnostic to the package logger."""
    level = logging.ERROR if diagnostic.severity == "error" else logging.WARNING
    logger.log(level, "%s", diagnostic)


@dataclass
class DiagnosticCollector:
    """Sink that keeps every diagnostic it receives.

    Safe to share between worker threads.
    """

    diagnostics: list[Diagnostic] = field(default_factory=list)
    forward: DiagnosticSink | None = None
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )

    def __call__(self, diagnostic: Diagnostic) -> None:
        with self._lock:
            self.diagnostics.append(diagnostic)
        if self.forward is not None:
            self.forward(diagnostic)

    @property
    def subjects(self) -> list[str]:
        """Subjects of all collected diagnostics, in arrival order."""
        return [d.subject for d in self.diagnostics]

    @property
    def has_errors(self) -> bool:
        """Check if any diagnostic has error severity."""
        return any(d.severity == "error" for d in self.diagnostics)


def format_diagnostics(diagnostics: list[Diagnostic]) -> str:
    """Format diagnostics as text.

    Args:
        diagnostics: Collected diagnostics.

    Returns:
        Formatted text.
    """
    lines: list[str] = []
    warnings = sum(1 for d in diagnostics if d.severity == "warning")
    errors = len(diagnostics) - warnings
    lines.append(f"Diagnostics: {warnings} warning(s), {errors} error(s)")
    for diagnostic in diagnostics:
        lines.append(f"  {diagnostic}")
    return "\n".join(lines)

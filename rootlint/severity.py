"""Severity, root type and warning disposition definitions."""

from __future__ import annotations

from enum import Enum


class Severity(str, Enum):
    """Classify how bad a rule violation is."""

    # The target is known to be broken: it will not install, or is
    # effectively guaranteed to fail at runtime.
    FATAL = "fatal"
    # Not immediately fatal, but something that should be fixed.
    WARNING = "warning"

    @property
    def transcript_prefix(self) -> str:
        """Return the transcript label used for violations of this severity."""

        if self is Severity.FATAL:
            return "Failed lint"
        return "Lint warning"


class RootType(str, Enum):
    """Which kind of root a rule applies to."""

    RUNNING = "running"
    ALTERNATIVE = "alternative"


class WarningDisposition(str, Enum):
    """Whether warnings count toward the overall failure verdict."""

    ALLOW_WARNINGS = "allow-warnings"
    FATAL_WARNINGS = "fatal-warnings"

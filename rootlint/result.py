"""Core result data structures for the lint engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

# Number of sample items quoted in multi-item violation messages.
DEFAULT_SAMPLE_COUNT = 5


@dataclass(frozen=True)
class Violation:
    """A rule evaluated successfully and found the target non-conforming."""

    message: str

    def __str__(self) -> str:
        return self.message


# ``None`` means the check passed; an execution failure is an exception.
CheckResult = Optional[Violation]


def lint_ok() -> CheckResult:
    """Everything is fine: no runtime error and the check passed."""

    return None


def lint_err(message: str) -> CheckResult:
    """The check ran and found a problem."""

    return Violation(message)


@dataclass(frozen=True)
class ExecutionTally:
    """Aggregate counts for one lint run."""

    passed: int = 0
    skipped: int = 0
    warnings: int = 0
    fatal: int = 0

    def effective_fatal(self, warnings_are_fatal: bool) -> int:
        if warnings_are_fatal:
            return self.fatal + self.warnings
        return self.fatal

    def summary_lines(self) -> List[str]:
        """Return the transcript summary; zero skipped/warning counts are omitted."""

        lines = [f"Checks passed: {self.passed}"]
        if self.skipped > 0:
            lines.append(f"Checks skipped: {self.skipped}")
        if self.warnings > 0:
            lines.append(f"Warnings: {self.warnings}")
        return lines


class LintError(Exception):
    """Base class for errors surfaced by a lint run."""


class LintRuntimeError(LintError):
    """A rule (or the walk) could not complete evaluation at all."""

    def __init__(self, rule: str, cause: BaseException) -> None:
        super().__init__(f"Unexpected runtime error running lint {rule}: {cause}")
        self.rule = rule
        self.cause = cause


class ChecksFailed(LintError):
    """The run completed but the effective fatal count is nonzero."""

    def __init__(self, count: int) -> None:
        super().__init__(f"Checks failed: {count}")
        self.count = count


class RegistryError(Exception):
    """The rule registry was used incorrectly."""


class DuplicateRuleError(RegistryError):
    pass


class RegistryFrozenError(RegistryError):
    pass


def split_samples(items: Iterable[T], count: int = DEFAULT_SAMPLE_COUNT) -> Optional[Tuple[Sequence[T], int]]:
    """Return up to ``count`` leading items and the number left over.

    Returns ``None`` when ``items`` is empty.
    """

    materialized = list(items)
    if not materialized:
        return None
    return materialized[:count], len(materialized) - count if len(materialized) > count else 0


def format_sample_block(header: str, items: Iterable[str], count: int = DEFAULT_SAMPLE_COUNT) -> str:
    """Render ``header`` followed by indented samples, or ``""`` if there are none."""

    split = split_samples(items, count)
    if split is None:
        return ""
    samples, rest = split
    lines = [header]
    lines.extend(f"  {item}" for item in samples)
    if rest > 0:
        lines.append(f"  ...and {rest} more")
    return "\n".join(lines) + "\n"


def and_more_suffix(others: int) -> str:
    """Return `` (and N more)`` when ``others`` is positive."""

    if others > 0:
        return f" (and {others} more)"
    return ""

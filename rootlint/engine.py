"""Execution engine: filter, run, multiplex the walk, tally and report."""

from __future__ import annotations

import json
import logging
from typing import Dict, Iterable, List, Optional, TextIO, Tuple, Union

import yaml

from .result import (
    CheckResult,
    ChecksFailed,
    ExecutionTally,
    LintRuntimeError,
    Violation,
)
from .rules import REGISTRY, PerNode, Registry, Rule, WholeTree
from .severity import RootType, Severity, WarningDisposition
from .utils.rootfs import RootDir
from .utils.walk import walk

LIST_FORMATS = ("yaml", "json")
WALK_NAME = "filesystem walk"

logger = logging.getLogger("rootlint.engine")

# What a rule produced: a check result, or the exception that stopped it.
Outcome = Union[CheckResult, Exception]


def list_rules(output: TextIO, fmt: str = "yaml", registry: Registry = REGISTRY) -> None:
    """Dump every registered rule, in registry order, as one document."""

    rules = [rule.to_dict() for rule in registry]
    if fmt == "yaml":
        yaml.safe_dump(rules, output, sort_keys=False, allow_unicode=True)
    elif fmt == "json":
        output.write(json.dumps(rules, indent=2))
        output.write("\n")
    else:
        raise ValueError(f"Unsupported list format: {fmt}")


def filter_rules(
    registry: Iterable[Rule], root_type: RootType, skip: Iterable[str]
) -> Tuple[List[Rule], int]:
    """Return the applicable rules in name order, and how many were skipped."""

    skip_names = frozenset(skip)
    applicable: List[Rule] = []
    skipped = 0
    for rule in registry:
        if rule.name in skip_names or not rule.applies_to(root_type):
            skipped += 1
            continue
        applicable.append(rule)
    applicable.sort()
    return applicable, skipped


def run_whole_tree(rules: Iterable[Rule], root: RootDir) -> List[Tuple[Rule, CheckResult]]:
    """Run each whole-tree rule once; the first exception aborts the run."""

    results: List[Tuple[Rule, CheckResult]] = []
    for rule in rules:
        try:
            outcome = rule.check.fn(root)
        except Exception as exc:
            raise LintRuntimeError(rule.name, exc) from exc
        results.append((rule, outcome))
    return results


def run_per_node(rules: Iterable[Rule], root: RootDir) -> List[Tuple[Rule, Outcome]]:
    """Offer every walked entry to each per-node rule that has not yet failed.

    A rule's first violation or exception removes it from the active set; a
    rule therefore reports at most one problem per run. Rules still active
    when the walk ends passed.
    """

    active: List[Rule] = list(rules)
    errors: Dict[str, Tuple[Rule, Outcome]] = {}
    visited = 0

    if active:
        try:
            for entry in walk(root, noxdev=True, path_base=b"/"):
                visited += 1
                failed: List[Rule] = []
                for rule in active:
                    try:
                        outcome: Outcome = rule.check.fn(entry)
                    except Exception as exc:
                        outcome = exc
                    if outcome is not None:
                        failed.append(rule)
                        errors[rule.name] = (rule, outcome)
                if failed:
                    active = [rule for rule in active if rule not in failed]
                if not active:
                    break
        except OSError as exc:
            raise LintRuntimeError(WALK_NAME, exc) from exc
    logger.debug("Walked %d entries; %d per-node rules still active", visited, len(active))

    results: List[Tuple[Rule, Outcome]] = list(errors.values())
    results.extend((rule, None) for rule in active)
    results.sort(key=lambda item: item[0].name)
    return results


def run_rules(
    root: RootDir,
    root_type: RootType,
    skip: Iterable[str],
    output: TextIO,
    registry: Optional[Registry] = None,
) -> ExecutionTally:
    """Run every applicable rule and write one transcript line per violation."""

    applicable, skipped = filter_rules(registry if registry is not None else REGISTRY, root_type, skip)
    whole_tree = [rule for rule in applicable if isinstance(rule.check, WholeTree)]
    per_node = [rule for rule in applicable if isinstance(rule.check, PerNode)]

    results: List[Tuple[Rule, Outcome]] = []
    results.extend(run_whole_tree(whole_tree, root))
    results.extend(run_per_node(per_node, root))

    passed = warnings = fatal = 0
    for rule, outcome in results:
        if isinstance(outcome, Exception):
            raise LintRuntimeError(rule.name, outcome) from outcome
        if isinstance(outcome, Violation):
            output.write(f"{rule.severity.transcript_prefix}: {rule.name}: {outcome}\n")
            if rule.severity is Severity.FATAL:
                fatal += 1
            else:
                warnings += 1
        else:
            logger.debug("OK %s (type=%s)", rule.name, rule.severity.value)
            passed += 1

    return ExecutionTally(passed=passed, skipped=skipped, warnings=warnings, fatal=fatal)


def lint(
    root: RootDir,
    warning_disposition: WarningDisposition,
    root_type: RootType,
    skip: Iterable[str],
    output: TextIO,
    registry: Optional[Registry] = None,
) -> ExecutionTally:
    """Lint ``root`` and write the transcript to ``output``.

    Raises :class:`ChecksFailed` carrying the effective fatal count when it
    is nonzero, and :class:`LintRuntimeError` when a rule or the walk could
    not run at all.
    """

    tally = run_rules(root, root_type, skip, output, registry=registry)
    for line in tally.summary_lines():
        output.write(line + "\n")
    fatal = tally.effective_fatal(warning_disposition is WarningDisposition.FATAL_WARNINGS)
    if fatal > 0:
        raise ChecksFailed(fatal)
    return tally

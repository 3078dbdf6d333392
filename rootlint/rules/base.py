"""Rule records, check shapes and the process-wide registry."""

from __future__ import annotations

import textwrap
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Optional, Union

from rootlint.result import CheckResult, DuplicateRuleError, RegistryFrozenError
from rootlint.severity import RootType, Severity
from rootlint.utils.rootfs import RootDir
from rootlint.utils.walk import WalkEntry

WholeTreeFn = Callable[[RootDir], CheckResult]
PerNodeFn = Callable[[WalkEntry], CheckResult]


@dataclass(frozen=True)
class WholeTree:
    """Receives the root once and inspects it however it likes."""

    fn: WholeTreeFn


@dataclass(frozen=True)
class PerNode:
    """Receives every entry of the shared filesystem walk."""

    fn: PerNodeFn


CheckShape = Union[WholeTree, PerNode]


@dataclass(frozen=True, order=True)
class Rule:
    """A named check. Names are unique, so rules compare by name alone."""

    name: str
    severity: Severity = field(compare=False)
    description: str = field(compare=False)
    check: CheckShape = field(compare=False, repr=False)
    root_type: Optional[RootType] = field(default=None, compare=False)

    def applies_to(self, root_type: RootType) -> bool:
        return self.root_type is None or self.root_type is root_type

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "name": self.name,
            "type": self.severity.value,
            "description": self.description,
        }
        if self.root_type is not None:
            data["root-type"] = self.root_type.value
        return data


class Registry:
    """Append-only collection of rules, read-only once frozen."""

    def __init__(self) -> None:
        self._rules: List[Rule] = []
        self._names: Dict[str, Rule] = {}
        self._frozen = False

    def register(self, rule: Rule) -> Rule:
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register {rule.name!r}: registry is frozen")
        if rule.name in self._names:
            raise DuplicateRuleError(f"Duplicate rule name: {rule.name}")
        self._rules.append(rule)
        self._names[rule.name] = rule
        return rule

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, name: str) -> Optional[Rule]:
        return self._names.get(name)

    def names(self) -> List[str]:
        return [rule.name for rule in self._rules]

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __iter__(self) -> Iterator[Rule]:
        return iter(tuple(self._rules))

    def __len__(self) -> int:
        return len(self._rules)


REGISTRY = Registry()


def _clean(description: str) -> str:
    return textwrap.dedent(description).strip() + "\n"


def whole_tree_rule(
    name: str,
    severity: Severity,
    description: str,
    root_type: Optional[RootType] = None,
    registry: Registry = REGISTRY,
) -> Callable[[WholeTreeFn], WholeTreeFn]:
    """Register the decorated function as a whole-tree rule."""

    def decorator(fn: WholeTreeFn) -> WholeTreeFn:
        registry.register(Rule(name, severity, _clean(description), WholeTree(fn), root_type))
        return fn

    return decorator


def per_node_rule(
    name: str,
    severity: Severity,
    description: str,
    root_type: Optional[RootType] = None,
    registry: Registry = REGISTRY,
) -> Callable[[PerNodeFn], PerNodeFn]:
    """Register the decorated function as a per-node rule."""

    def decorator(fn: PerNodeFn) -> PerNodeFn:
        registry.register(Rule(name, severity, _clean(description), PerNode(fn), root_type))
        return fn

    return decorator

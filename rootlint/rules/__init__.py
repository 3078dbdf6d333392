"""Rule registry for the lint engine.

Importing this package registers every built-in rule and freezes
:data:`REGISTRY`.
"""

from __future__ import annotations

from .base import (
    REGISTRY,
    CheckShape,
    PerNode,
    Registry,
    Rule,
    WholeTree,
    per_node_rule,
    whole_tree_rule,
)
from . import baseimage, boot, encoding, filesystem, state  # noqa: F401  (registration)

REGISTRY.freeze()

__all__ = [
    "REGISTRY",
    "CheckShape",
    "PerNode",
    "Registry",
    "Rule",
    "WholeTree",
    "per_node_rule",
    "whole_tree_rule",
]

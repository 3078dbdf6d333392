import io
import json

import pytest
import yaml

from rootlint.engine import list_rules
from rootlint.result import DuplicateRuleError, RegistryFrozenError, lint_ok
from rootlint.rules import REGISTRY, PerNode, Registry, Rule, WholeTree, whole_tree_rule
from rootlint.severity import RootType, Severity

EXPECTED_RULES = {
    "api-base-directories",
    "baseimage-composefs",
    "baseimage-root",
    "bootc-kargs",
    "buildah-injected",
    "etc-usretc",
    "kernel",
    "nonempty-boot",
    "sysusers",
    "utf8",
    "var-log",
    "var-run",
    "var-tmpfiles",
}


def test_registry_contains_builtin_rules():
    assert set(REGISTRY.names()) == EXPECTED_RULES
    assert REGISTRY.frozen
    assert isinstance(REGISTRY.get("utf8").check, PerNode)
    assert isinstance(REGISTRY.get("var-run").check, WholeTree)


def test_list_yaml_matches_registry():
    out = io.StringIO()
    list_rules(out)

    rules = yaml.safe_load(out.getvalue())

    assert len(rules) == len(REGISTRY)
    assert [rule["name"] for rule in rules] == REGISTRY.names()
    by_name = {rule["name"]: rule for rule in rules}
    assert by_name["var-run"]["type"] == "fatal"
    assert "root-type" not in by_name["var-run"]
    assert by_name["var-tmpfiles"]["root-type"] == "running"
    assert by_name["buildah-injected"]["root-type"] == "alternative"
    assert by_name["var-log"]["description"].startswith("Check for non-empty regular files")


def test_list_json_matches_registry():
    out = io.StringIO()
    list_rules(out, "json")

    rules = json.loads(out.getvalue())

    assert len(rules) == len(REGISTRY)
    assert {rule["type"] for rule in rules} == {"fatal", "warning"}


def test_list_rejects_unknown_format():
    with pytest.raises(ValueError):
        list_rules(io.StringIO(), "xml")


def test_duplicate_names_fail_fast():
    registry = Registry()
    registry.register(Rule("dup", Severity.FATAL, "", WholeTree(lambda root: lint_ok())))

    with pytest.raises(DuplicateRuleError):
        registry.register(Rule("dup", Severity.WARNING, "", PerNode(lambda entry: lint_ok())))
    assert len(registry) == 1


def test_frozen_registry_rejects_registration():
    with pytest.raises(RegistryFrozenError):
        REGISTRY.register(Rule("late", Severity.FATAL, "", WholeTree(lambda root: lint_ok())))


def test_decorator_registers_and_returns_function():
    registry = Registry()

    @whole_tree_rule(
        "example",
        Severity.WARNING,
        """
        Indented
        description.
        """,
        root_type=RootType.RUNNING,
        registry=registry,
    )
    def check_example(root):
        return lint_ok()

    rule = registry.get("example")
    assert rule.check.fn is check_example
    assert rule.description == "Indented\ndescription.\n"
    assert rule.to_dict() == {
        "name": "example",
        "type": "warning",
        "description": "Indented\ndescription.\n",
        "root-type": "running",
    }


def test_rules_order_and_compare_by_name():
    b = Rule("b", Severity.FATAL, "", WholeTree(lambda root: lint_ok()))
    a = Rule("a", Severity.WARNING, "x", PerNode(lambda entry: lint_ok()))

    assert sorted([b, a]) == [a, b]
    assert Rule("a", Severity.FATAL, "", WholeTree(lambda root: lint_ok())) == a

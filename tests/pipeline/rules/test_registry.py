"""Tests for the rule catalogue and registry."""

import logging

import pytest

from tsgate.config import ConfigurationError, RulesSettings
from tsgate.models import NodeKind
from tsgate.pipeline.rules import (
    DEFAULT_RULES,
    RULES,
    CurlyBracketsStructure,
    build_registry,
    registry_from_settings,
)


def test_all_rules_enabled_by_default():
    registry = build_registry()

    assert registry.names == list(DEFAULT_RULES)
    assert len(registry) == len(RULES) == 8


def test_enabled_rules_keep_catalogue_order():
    registry = build_registry(enabled=["RecordValidation", "DeclarationOrder"])

    assert registry.names == ["DeclarationOrder", "RecordValidation"]


def test_check_suffix_is_accepted():
    registry = build_registry(enabled=["NonStaticMethodCheck"])

    assert registry.names == ["NonStaticMethod"]


def test_disabled_rules_are_dropped():
    registry = build_registry(disabled=["NonStaticMethod", "ProhibitNonFinalClasses"])

    assert "NonStaticMethod" not in registry.names
    assert "ProhibitNonFinalClasses" not in registry.names
    assert len(registry) == 6


def test_disabling_everything_warns(caplog):
    with caplog.at_level(logging.WARNING):
        registry = build_registry(enabled=["RecordValidation"], disabled=["RecordValidation"])

    assert len(registry) == 0
    assert "No rules enabled" in caplog.text


@pytest.mark.parametrize("field", ["enabled", "disabled"])
def test_unknown_rule_name(field):
    with pytest.raises(ConfigurationError, match="Unknown rule 'Bogus'"):
        build_registry(**{field: ["Bogus"]})


def test_params_are_passed_to_rules():
    registry = build_registry(enabled=["CurlyBracketsStructure"], params={"CurlyBracketsStructure": {"indent": 2}})

    (rule,) = registry
    assert isinstance(rule, CurlyBracketsStructure)
    assert rule.params == {"indent": 2}


def test_params_for_unknown_rule():
    with pytest.raises(ConfigurationError, match="Unknown rule"):
        build_registry(params={"Bogus": {"x": 1}})


def test_unknown_param():
    with pytest.raises(ConfigurationError, match="Unknown parameter"):
        build_registry(params={"DeclarationOrder": {"strict": True}})


def test_params_must_be_a_mapping():
    with pytest.raises(ConfigurationError, match="must be a mapping"):
        build_registry(params={"CurlyBracketsStructure": [2]})


def test_for_kind_dispatch():
    registry = build_registry()

    array_rules = [rule.name for rule in registry.for_kind(NodeKind.ARRAY_INITIALIZER)]
    record_rules = [rule.name for rule in registry.for_kind(NodeKind.RECORD)]

    assert array_rules == ["CurlyBracketsStructure"]
    assert "RecordValidation" in record_rules
    assert "DeclarationOrder" in record_rules
    assert registry.for_kind(NodeKind.DOC_COMMENT) == []


def test_registry_from_settings():
    settings = RulesSettings(enabled=["DeclarationOrder", "RecordValidation"], disabled=["RecordValidation"])

    assert registry_from_settings(settings).names == ["DeclarationOrder"]

"""Catalogue of built-in rules and the registry of enabled ones."""

import logging
from typing import Any, Iterable, Mapping, Optional

from tsgate.config import ConfigurationError, RulesSettings
from tsgate.models import NodeKind
from tsgate.pipeline.suppression import normalize_rule_name

from .base import Rule
from .brackets import CurlyBracketsStructure
from .classes import ProhibitNonFinalClasses, ProtectedMethodInFinalClass
from .javadoc import JavadocParameterOrder
from .methods import NonStaticMethod, ProhibitUnusedPrivateConstructor
from .ordering import DeclarationOrder
from .records import RecordValidation

logger = logging.getLogger(__name__)

RULES: dict[str, type[Rule]] = {
    rule.name: rule
    for rule in (
        DeclarationOrder,
        CurlyBracketsStructure,
        JavadocParameterOrder,
        RecordValidation,
        NonStaticMethod,
        ProhibitUnusedPrivateConstructor,
        ProtectedMethodInFinalClass,
        ProhibitNonFinalClasses,
    )
}

DEFAULT_RULES: tuple[str, ...] = tuple(RULES)


class RuleRegistry:
    """Ordered set of enabled rules, indexed by the node kinds they subscribe to."""

    def __init__(self, rules: Iterable[Rule]):
        self.rules = list(rules)
        self._by_kind: dict[NodeKind, list[Rule]] = {}
        for rule in self.rules:
            for kind in NodeKind:
                if kind in rule.kinds:
                    self._by_kind.setdefault(kind, []).append(rule)

    def __len__(self) -> int:
        return len(self.rules)

    def __iter__(self):
        return iter(self.rules)

    @property
    def names(self) -> list[str]:
        return [rule.name for rule in self.rules]

    def for_kind(self, kind: NodeKind) -> list[Rule]:
        return self._by_kind.get(kind, [])


def _resolve(name: str, origin: str) -> str:
    resolved = normalize_rule_name(name.strip())
    if resolved not in RULES:
        raise ConfigurationError(
            f"Unknown rule '{name}' in {origin}. Available rules: {', '.join(DEFAULT_RULES)}"
        )
    return resolved


def build_registry(
    enabled: Optional[Iterable[str]] = None,
    disabled: Optional[Iterable[str]] = None,
    params: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> RuleRegistry:
    """Instantiate the enabled rules in catalogue order.

    Args:
        enabled: Rule names to run; empty or None runs every built-in rule
        disabled: Rule names to drop from the enabled set
        params: Rule parameters keyed by rule name

    Raises:
        ConfigurationError: For unknown rule names or invalid parameters
    """
    enabled_names = {_resolve(name, "enabled rules") for name in enabled or []}
    disabled_names = {_resolve(name, "disabled rules") for name in disabled or []}
    rule_params: dict[str, Mapping[str, Any]] = {}
    for name, values in (params or {}).items():
        if not isinstance(values, Mapping):
            raise ConfigurationError(f"Parameters for rule '{name}' must be a mapping")
        rule_params[_resolve(name, "rule parameters")] = values

    selected = [
        name
        for name in DEFAULT_RULES
        if (not enabled_names or name in enabled_names) and name not in disabled_names
    ]
    rules = [RULES[name](**rule_params.get(name, {})) for name in selected]

    if not rules:
        logger.warning("No rules enabled - every file will pass")
    else:
        logger.debug("Active rules:")
        for rule in rules:
            logger.debug("  %s %s", rule.name, rule.params or "")
    return RuleRegistry(rules)


def registry_from_settings(settings: RulesSettings) -> RuleRegistry:
    return build_registry(settings.enabled, settings.disabled, settings.params)

"""Traversal engine: one pre-order walk per file, dispatching nodes to rules."""

import logging

from tsgate.models import SourceUnit, SyntaxNode, Violation
from tsgate.pipeline.rules import Rule, RuleContext, RuleRegistry

logger = logging.getLogger(__name__)


def rule_failure(rule: Rule, node: SyntaxNode, unit: SourceUnit, error: Exception) -> Violation:
    """Diagnostic finding for a rule that raised while visiting a node."""
    return Violation(
        rule=rule.name,
        path=unit.path,
        line=max(node.line, 1),
        column=node.span.column,
        message=(
            f"Internal error in rule {rule.name} on {node.kind.value} "
            f"at line {node.line}: {type(error).__name__}: {error}"
        ),
        diagnostic=True,
    )


class TraversalEngine:
    """Walks a source unit once and collects the raw findings of every enabled rule."""

    def __init__(self, registry: RuleRegistry):
        self.registry = registry

    def check(self, unit: SourceUnit) -> list[Violation]:
        context = RuleContext(unit)
        findings: list[Violation] = []
        for node in unit.tree.walk():
            if node.recovered:
                logger.debug(f"Skipping parse-recovered {node.kind.value} at {unit.path}:{node.line}")
                continue
            for rule in self.registry.for_kind(node.kind):
                try:
                    findings.extend(rule.visit(node, context))
                except Exception as e:
                    logger.error(f"Rule {rule.name} failed on {unit.path}:{node.line}: {e}")
                    findings.append(rule_failure(rule, node, unit, e))
        return findings

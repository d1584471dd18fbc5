"""Inheritance related class checks."""

from typing import Iterable

from tsgate.models import AccessLevel, NodeKind, SyntaxNode, Violation

from .base import Rule, RuleContext


class ProtectedMethodInFinalClass(Rule):
    """Protected members make no sense in a class nobody can extend.

    Abstract classes are left alone since their protected members are
    extension points. Only methods are checked unless ``include_fields`` is
    set, so protected fields of a final class pass by default.
    """

    name = "ProtectedMethodInFinalClass"
    description = "Final classes must not declare protected methods"
    kinds = frozenset({NodeKind.CLASS, NodeKind.RECORD})
    parameters = {"include_fields": False}

    def configure(self) -> None:
        if not isinstance(self.params["include_fields"], bool):
            raise self._param_error("include_fields", "true or false")

    def visit(self, node: SyntaxNode, context: RuleContext) -> Iterable[Violation]:
        if not node.has_modifier("final") or node.has_modifier("abstract"):
            return
        kinds = [NodeKind.METHOD]
        if self.params["include_fields"]:
            kinds.append(NodeKind.FIELD)
        for member in context.members(node, *kinds):
            if member.access is not AccessLevel.PROTECTED:
                continue
            if member.kind is NodeKind.FIELD:
                message = "Final class should not contain protected fields"
            elif member.has_annotation("Override"):
                message = "Protected method is overriding default scoped method"
            else:
                message = "Final class should not contain protected methods"
            yield self.violation(context, member.line, message)


class ProhibitNonFinalClasses(Rule):
    """Every class is either ``final`` or ``abstract``, nested classes included."""

    name = "ProhibitNonFinalClasses"
    description = "Classes must be declared final or abstract"
    kinds = frozenset({NodeKind.CLASS})

    def visit(self, node: SyntaxNode, context: RuleContext) -> Iterable[Violation]:
        if node.has_modifier("final") or node.has_modifier("abstract"):
            return
        yield self.violation(context, node.line, f"Class '{node.name}' must be final or abstract")

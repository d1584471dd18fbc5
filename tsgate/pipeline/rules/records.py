"""Shape of record declarations."""

from typing import Iterable

from tsgate.models import NodeKind, SyntaxNode, Violation

from .base import Rule, RuleContext


class RecordValidation(Rule):
    """Records are final, have components and keep no extra instance state.

    Static fields, methods and a compact constructor are all allowed.
    """

    name = "RecordValidation"
    description = "Records must be final, declare at least one component and have no instance fields"
    kinds = frozenset({NodeKind.RECORD})

    def visit(self, node: SyntaxNode, context: RuleContext) -> Iterable[Violation]:
        if not node.has_modifier("final"):
            yield self.violation(context, node.line, "Records must be final")
        if not node.parameters:
            yield self.violation(context, node.line, "Records must declare at least one component")
        for field in context.members(node, NodeKind.FIELD):
            if not field.has_modifier("static"):
                yield self.violation(
                    context, field.line, "Records cannot have instance fields", column=field.span.column
                )

"""Declaration ordering inside type bodies."""

from typing import Iterable, Optional

from tsgate.models import TYPE_KINDS, NodeKind, SyntaxNode, Violation

from .base import Rule, RuleContext

RANKED_KINDS = (NodeKind.CONSTRUCTOR, NodeKind.METHOD)


def declaration_rank(node: SyntaxNode) -> tuple[int, int]:
    """Constructors before everything else, then by access level."""
    kind_rank = 0 if node.kind is NodeKind.CONSTRUCTOR else 1
    return (kind_rank, node.access.rank)


def describe(node: SyntaxNode) -> str:
    return f"{node.access.label} {node.kind.value} '{node.name}'"


class DeclarationOrder(Rule):
    """Constructors first, then methods from public down to private.

    Every type body is scanned on its own; nested types keep their own
    running maximum.
    """

    name = "DeclarationOrder"
    description = "Constructors come first, then declarations ordered public, protected, package-private, private"
    kinds = TYPE_KINDS

    def visit(self, node: SyntaxNode, context: RuleContext) -> Iterable[Violation]:
        highest: Optional[tuple[tuple[int, int], SyntaxNode]] = None
        for member in context.members(node, *RANKED_KINDS):
            rank = declaration_rank(member)
            if highest is not None and rank < highest[0]:
                yield self.violation(
                    context,
                    member.line,
                    f"Wrong declaration order: {describe(member)} should come before "
                    f"{describe(highest[1])} declared at line {highest[1].line}",
                )
            elif highest is None or rank > highest[0]:
                highest = (rank, member)

"""Order of ``@param`` tags in documentation comments."""

from typing import Iterable

from tsgate.models import NodeKind, SyntaxNode, Violation

from .base import Rule, RuleContext

TYPE_PARAMETER_POSITIONS = ("first", "last")


def declared_parameters(node: SyntaxNode, type_parameters: str = "first") -> list[str]:
    """Parameter names in the order the documentation must follow.

    Type parameters are written as ``<T>``, the way ``@param`` documents them.
    """
    generics = [f"<{name}>" for name in node.type_parameters]
    values = list(node.parameters)
    if type_parameters == "last":
        return values + generics
    return generics + values


class JavadocParameterOrder(Rule):
    """``@param`` tags must list every parameter, in declaration order.

    Applies to constructors, methods and generic type declarations that
    carry a documentation comment. Records document their components, and a
    compact record constructor documents the components of its record.
    """

    name = "JavadocParameterOrder"
    description = "Javadoc @param tags must match the declared type and value parameters, in order"
    kinds = frozenset(
        {NodeKind.CONSTRUCTOR, NodeKind.METHOD, NodeKind.CLASS, NodeKind.INTERFACE, NodeKind.RECORD}
    )
    parameters = {"type_parameters": "first"}

    def configure(self) -> None:
        if self.params["type_parameters"] not in TYPE_PARAMETER_POSITIONS:
            raise self._param_error("type_parameters", "'first' or 'last'")

    def visit(self, node: SyntaxNode, context: RuleContext) -> Iterable[Violation]:
        if node.doc is None:
            return
        tags = node.doc.param_tags()
        declared = declared_parameters(node, self.params["type_parameters"])

        if len(tags) != len(declared):
            yield self.violation(
                context, node.line, "Number of javadoc parameters different than method signature"
            )
            return

        for tag, expected in zip(tags, declared):
            if tag.body != expected:
                yield self.violation(
                    context,
                    tag.line,
                    f"Javadoc parameter order different than signature of '{node.name}' "
                    f"declared at line {node.line}: expected {expected}, found {tag.body}",
                    column=tag.column,
                )
                return

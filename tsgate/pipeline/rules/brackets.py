"""Layout of curly brackets in array initializers."""

from typing import Iterable

from tsgate.models import NodeKind, SyntaxNode, Violation

from .base import Rule, RuleContext


class CurlyBracketsStructure(Rule):
    """Array initializers either fit on one line or use a block layout::

        String[] names = {
            "first",
            "second"
        };
    """

    name = "CurlyBracketsStructure"
    description = "Multi-line array initializers open on their declaration line and close on a line of their own"
    kinds = frozenset({NodeKind.ARRAY_INITIALIZER})
    parameters = {"indent": 4}

    def configure(self) -> None:
        indent = self.params["indent"]
        if isinstance(indent, bool) or not isinstance(indent, int) or indent < 0:
            raise self._param_error("indent", "a non-negative integer")

    def visit(self, node: SyntaxNode, context: RuleContext) -> Iterable[Violation]:
        opening, closing = node.open_brace, node.close_brace
        if opening is None or closing is None:
            return

        if node.intro_line is not None and opening.line != node.intro_line:
            yield self.violation(
                context, opening.line, "Opening bracket should be on the same line as its declaration"
            )

        if opening.line == closing.line:
            return

        elements = node.elements
        first_line_taken = bool(elements) and elements[0].line == opening.line
        last_line_taken = bool(elements) and elements[-1].end_line == closing.line
        if first_line_taken:
            yield self.violation(context, elements[0].line, "Parameters should start on a new line")
        if last_line_taken:
            yield self.violation(context, closing.line, "Closing bracket should be on a new line")

        base = context.unit.indentation(opening.line)
        if not last_line_taken and closing.column - 1 != base:
            yield self.violation(
                context,
                closing.line,
                f"Closing bracket should be indented by {base} spaces, like the line opening the initializer",
                column=closing.column,
            )

        if first_line_taken:
            return
        expected = base + self.params["indent"]
        for element in elements:
            starts_line = not context.unit.line_text(element.line)[: element.column - 1].strip()
            if starts_line and element.column - 1 != expected:
                yield self.violation(
                    context,
                    element.line,
                    f"Initializer element should be indented by {expected} spaces",
                    column=element.column,
                )

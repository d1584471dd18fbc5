"""Small helpers over tree-sitter Java nodes."""

from typing import Iterator, Optional

from tree_sitter import Node

from tsgate.models import Span

COMMENT_TYPES = frozenset({"comment", "line_comment", "block_comment"})
ANNOTATION_TYPES = frozenset({"marker_annotation", "annotation"})


def node_text(node: Optional[Node]) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def span_of(node: Node) -> Span:
    """Convert tree-sitter points (0-indexed, end exclusive) to a 1-indexed inclusive span."""
    return Span(
        line=node.start_point[0] + 1,
        column=node.start_point[1] + 1,
        end_line=node.end_point[0] + 1,
        end_column=max(node.end_point[1], 1),
    )


def is_comment(node: Node) -> bool:
    return node.type in COMMENT_TYPES


def code_children(node: Node) -> list[Node]:
    """Named children without comments."""
    return [child for child in node.named_children if not is_comment(child)]


def find_child(node: Node, *types: str) -> Optional[Node]:
    for child in node.children:
        if child.type in types:
            return child
    return None


def descendants(node: Node) -> Iterator[Node]:
    """All nodes below ``node`` in pre-order, ``node`` excluded."""
    stack = list(reversed(node.children))
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def modifier_keywords(node: Node) -> frozenset[str]:
    """Keyword modifiers (``public``, ``static``...) of a declaration."""
    modifiers = find_child(node, "modifiers")
    if modifiers is None:
        return frozenset()
    return frozenset(child.type for child in modifiers.children if not child.is_named)


def annotation_names(node: Node) -> tuple[str, ...]:
    """Simple names of the annotations in a declaration's modifiers."""
    modifiers = find_child(node, "modifiers")
    if modifiers is None:
        return ()
    names = []
    for child in modifiers.children:
        if child.type in ANNOTATION_TYPES:
            name = node_text(child.child_by_field_name("name"))
            names.append(name.rsplit(".", 1)[-1])
    return tuple(names)


def argument_count(arguments: Optional[Node]) -> int:
    if arguments is None:
        return 0
    return len(code_children(arguments))

"""Lift a tree-sitter Java tree into the declaration arena used by the rules.

Only the declaration structure is lifted: type declarations (top-level and
nested), their members, initializer blocks and every array initializer found
in member bodies or field initializers. Local and anonymous classes stay
inside the body of the member that declares them.
"""

import logging
import re
from typing import Optional

from tree_sitter import Node

from tsgate.models import (
    AccessLevel,
    DocComment,
    DocTag,
    NodeKind,
    SourceUnit,
    SyntaxNode,
    SyntaxTree,
)
from tsgate.pipeline.parse import ParsedFile
from tsgate.pipeline.treesitter import (
    annotation_names,
    code_children,
    find_child,
    is_comment,
    modifier_keywords,
    node_text,
    span_of,
)

logger = logging.getLogger(__name__)

TYPE_DECLARATIONS: dict[str, NodeKind] = {
    "class_declaration": NodeKind.CLASS,
    "interface_declaration": NodeKind.INTERFACE,
    "record_declaration": NodeKind.RECORD,
    "enum_declaration": NodeKind.ENUM,
}

CALLABLE_DECLARATIONS: dict[str, NodeKind] = {
    "constructor_declaration": NodeKind.CONSTRUCTOR,
    "compact_constructor_declaration": NodeKind.CONSTRUCTOR,
    "method_declaration": NodeKind.METHOD,
}

FIELD_DECLARATIONS = frozenset({"field_declaration", "constant_declaration"})
INITIALIZER_BLOCKS = frozenset({"block", "static_initializer"})

ACCESS_MODIFIERS: dict[str, AccessLevel] = {
    "public": AccessLevel.PUBLIC,
    "protected": AccessLevel.PROTECTED,
    "private": AccessLevel.PRIVATE,
}

# Tokens that introduce an array initializer on their own line
ARRAY_INTRODUCERS = frozenset({"array_creation_expression", "variable_declarator"})

TAG_PATTERN = re.compile(r"^\s*(?:/\*\*|\*)?\s*@(\w+)(?:\s+(\S+))?")


def _strip_doc_line(line: str) -> str:
    stripped = line.strip()
    if stripped.startswith("/**"):
        stripped = stripped[3:]
    if stripped.endswith("*/"):
        stripped = stripped[:-2]
    stripped = stripped.strip()
    if stripped.startswith("*"):
        stripped = stripped[1:]
    return stripped.strip()


def parse_doc_comment(comment: Node) -> DocComment:
    """Split a ``/** ... */`` comment into text lines and block tags."""
    start_line = comment.start_point[0] + 1
    start_column = comment.start_point[1]
    lines = []
    tags = []
    for offset, raw in enumerate(node_text(comment).splitlines()):
        match = TAG_PATTERN.match(raw)
        if match:
            body = match.group(2) or ""
            if body == "*/":
                body = ""
            column = match.start(1)
            if offset == 0:
                column += start_column
            tags.append(DocTag(name=match.group(1), body=body, line=start_line + offset, column=column))
        lines.append(_strip_doc_line(raw))
    return DocComment(span=span_of(comment), lines=tuple(lines), tags=tuple(tags))


def attached_doc(declaration: Node) -> Optional[Node]:
    """The documentation comment immediately preceding a declaration, if any."""
    previous = declaration.prev_sibling
    if previous is None or not is_comment(previous):
        return None
    text = node_text(previous)
    if text.startswith("/**") and text != "/**/":
        return previous
    return None


def type_parameter_names(declaration: Node) -> tuple[str, ...]:
    parameters = declaration.child_by_field_name("type_parameters")
    if parameters is None:
        return ()
    names = []
    for parameter in parameters.named_children:
        if parameter.type != "type_parameter":
            continue
        identifier = find_child(parameter, "type_identifier", "identifier")
        if identifier is not None:
            names.append(node_text(identifier))
    return tuple(names)


def value_parameter_names(declaration: Node) -> tuple[tuple[str, ...], bool]:
    """Names of formal parameters (or record components) and whether the last is varargs."""
    parameters = declaration.child_by_field_name("parameters")
    if parameters is None:
        return (), False
    names = []
    varargs = False
    for parameter in parameters.named_children:
        if parameter.type == "formal_parameter":
            names.append(node_text(parameter.child_by_field_name("name")))
        elif parameter.type == "spread_parameter":
            declarator = find_child(parameter, "variable_declarator")
            if declarator is not None:
                names.append(node_text(declarator.child_by_field_name("name")))
            varargs = True
    return tuple(names), varargs


def resolve_access(modifiers: frozenset[str], owner: SyntaxNode, kind: NodeKind) -> AccessLevel:
    for keyword, level in ACCESS_MODIFIERS.items():
        if keyword in modifiers:
            return level
    if owner.kind is NodeKind.INTERFACE:
        return AccessLevel.PUBLIC
    if owner.kind is NodeKind.ENUM and kind is NodeKind.CONSTRUCTOR:
        return AccessLevel.PRIVATE
    return AccessLevel.PACKAGE


def _header_has_error(declaration: Node, body: Optional[Node]) -> bool:
    if declaration.is_error or declaration.is_missing:
        return True
    for child in declaration.children:
        if body is not None and child == body:
            continue
        if child.has_error:
            return True
    if body is not None:
        closing = body.children[-1] if body.children else None
        if closing is None or closing.is_missing:
            return True
    return False


class _ArenaBuilder:
    """Accumulates arena nodes in pre-order."""

    def __init__(self) -> None:
        self.nodes: list[SyntaxNode] = []

    def add(self, kind: NodeKind, ts: Node, parent: Optional[SyntaxNode], **attrs) -> SyntaxNode:
        node = SyntaxNode(
            index=len(self.nodes),
            kind=kind,
            span=span_of(ts),
            parent=parent.index if parent is not None else None,
            ts=ts,
            **attrs,
        )
        self.nodes.append(node)
        if parent is not None:
            parent.children.append(node.index)
        return node

    def add_doc(self, declaration: Node, owner: SyntaxNode) -> None:
        comment = attached_doc(declaration)
        if comment is None:
            return
        owner.doc = parse_doc_comment(comment)
        self.add(NodeKind.DOC_COMMENT, comment, owner, recovered=comment.has_error)

    def lift_types(self, container: Node, parent: SyntaxNode) -> None:
        for child in container.named_children:
            if child.type in TYPE_DECLARATIONS:
                self.add_type(child, parent)
            elif child.type == "ERROR":
                self.lift_types(child, parent)

    def add_type(self, declaration: Node, parent: SyntaxNode) -> None:
        kind = TYPE_DECLARATIONS[declaration.type]
        body = declaration.child_by_field_name("body")
        modifiers = modifier_keywords(declaration)
        parameters: tuple[str, ...] = ()
        varargs = False
        if kind is NodeKind.RECORD:
            parameters, varargs = value_parameter_names(declaration)

        node = self.add(
            kind,
            declaration,
            parent,
            name=node_text(declaration.child_by_field_name("name")),
            modifiers=modifiers,
            annotations=annotation_names(declaration),
            type_parameters=type_parameter_names(declaration),
            parameters=parameters,
            varargs=varargs,
            access=resolve_access(modifiers, parent, kind),
            recovered=_header_has_error(declaration, body),
        )
        self.add_doc(declaration, node)

        if body is None:
            return
        members = body.named_children
        if kind is NodeKind.ENUM:
            declarations = find_child(body, "enum_body_declarations")
            members = declarations.named_children if declarations is not None else []
        for member in members:
            self.add_member(member, node)

    def add_member(self, member: Node, owner: SyntaxNode) -> None:
        if member.type in TYPE_DECLARATIONS:
            self.add_type(member, owner)
        elif member.type in CALLABLE_DECLARATIONS:
            self.add_callable(member, owner)
        elif member.type in FIELD_DECLARATIONS:
            self.add_field(member, owner)
        elif member.type in INITIALIZER_BLOCKS:
            node = self.add(
                NodeKind.BLOCK,
                member,
                owner,
                modifiers=frozenset({"static"}) if member.type == "static_initializer" else frozenset(),
                recovered=member.has_error,
            )
            self.lift_arrays(member, node)
        elif member.type == "ERROR":
            for child in member.named_children:
                self.add_member(child, owner)

    def add_callable(self, declaration: Node, owner: SyntaxNode) -> None:
        kind = CALLABLE_DECLARATIONS[declaration.type]
        modifiers = modifier_keywords(declaration)
        compact = declaration.type == "compact_constructor_declaration"
        if compact:
            parameters, varargs = owner.parameters, owner.varargs
        else:
            parameters, varargs = value_parameter_names(declaration)

        node = self.add(
            kind,
            declaration,
            owner,
            name=node_text(declaration.child_by_field_name("name")),
            modifiers=modifiers,
            annotations=annotation_names(declaration),
            type_parameters=type_parameter_names(declaration),
            parameters=parameters,
            varargs=varargs,
            access=resolve_access(modifiers, owner, kind),
            recovered=declaration.has_error,
            compact=compact,
        )
        self.add_doc(declaration, node)
        body = declaration.child_by_field_name("body")
        if body is not None:
            self.lift_arrays(body, node)

    def add_field(self, declaration: Node, owner: SyntaxNode) -> None:
        modifiers = modifier_keywords(declaration)
        declarators = declaration.children_by_field_name("declarator")
        names = tuple(node_text(d.child_by_field_name("name")) for d in declarators)
        node = self.add(
            NodeKind.FIELD,
            declaration,
            owner,
            name=", ".join(names),
            modifiers=modifiers,
            annotations=annotation_names(declaration),
            parameters=names,
            access=resolve_access(modifiers, owner, NodeKind.FIELD),
            recovered=declaration.has_error,
        )
        self.add_doc(declaration, node)
        self.lift_arrays(declaration, node)

    def lift_arrays(self, container: Node, parent: SyntaxNode) -> None:
        """Add every array initializer below ``container``, nesting them by containment."""
        stack: list[tuple[Node, SyntaxNode]] = [(child, parent) for child in reversed(container.children)]
        while stack:
            current, owner = stack.pop()
            if current.type == "array_initializer":
                owner = self.add_array(current, owner)
            stack.extend((child, owner) for child in reversed(current.children))

    def add_array(self, initializer: Node, parent: SyntaxNode) -> SyntaxNode:
        children = initializer.children
        opening = children[0] if children and children[0].type == "{" else None
        closing = children[-1] if children and children[-1].type == "}" else None

        intro_line = None
        if initializer.parent is not None and initializer.parent.type in ARRAY_INTRODUCERS:
            previous = initializer.prev_sibling
            while previous is not None and is_comment(previous):
                previous = previous.prev_sibling
            if previous is not None:
                intro_line = previous.end_point[0] + 1

        return self.add(
            NodeKind.ARRAY_INITIALIZER,
            initializer,
            parent,
            recovered=initializer.has_error or closing is None or closing.is_missing or opening is None,
            open_brace=span_of(opening) if opening is not None else None,
            close_brace=span_of(closing) if closing is not None else None,
            elements=tuple(span_of(element) for element in code_children(initializer)),
            intro_line=intro_line,
        )


def build_source_unit(parsed: ParsedFile) -> SourceUnit:
    """Build the arena for one parsed file."""
    builder = _ArenaBuilder()
    root = builder.add(NodeKind.COMPILATION_UNIT, parsed.root_node, None, name=parsed.path.name)
    builder.lift_types(parsed.root_node, root)
    logger.debug("Lifted %d node(s) from %s", len(builder.nodes), parsed.path)
    return SourceUnit(path=parsed.path, text=parsed.text, tree=SyntaxTree(builder.nodes))

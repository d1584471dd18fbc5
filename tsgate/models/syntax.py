"""Arena representation of a parsed Java source file."""

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional


class NodeKind(Enum):
    """Closed set of node kinds the rules can subscribe to."""

    COMPILATION_UNIT = "compilation_unit"
    CLASS = "class"
    INTERFACE = "interface"
    RECORD = "record"
    ENUM = "enum"
    CONSTRUCTOR = "constructor"
    METHOD = "method"
    FIELD = "field"
    BLOCK = "block"
    ARRAY_INITIALIZER = "array_initializer"
    DOC_COMMENT = "doc_comment"


TYPE_KINDS = frozenset({NodeKind.CLASS, NodeKind.INTERFACE, NodeKind.RECORD, NodeKind.ENUM})


class AccessLevel(Enum):
    """Visibility of a declaration, ranked public first."""

    PUBLIC = 0
    PROTECTED = 1
    PACKAGE = 2
    PRIVATE = 3

    @property
    def rank(self) -> int:
        return self.value

    @property
    def label(self) -> str:
        return "package-private" if self is AccessLevel.PACKAGE else self.name.lower()


@dataclass(frozen=True, order=True)
class Span:
    """Source position, lines and columns are 1-indexed."""

    line: int
    column: int
    end_line: int
    end_column: int


@dataclass(frozen=True)
class DocTag:
    """A block tag such as ``@param name`` inside a documentation comment."""

    name: str
    body: str
    line: int
    column: int


@dataclass(frozen=True)
class DocComment:
    """A ``/** ... */`` comment attached to a declaration."""

    span: Span
    lines: tuple[str, ...]
    tags: tuple[DocTag, ...]

    def param_tags(self) -> list[DocTag]:
        return [tag for tag in self.tags if tag.name == "param"]


@dataclass
class SyntaxNode:
    """One node of the arena.

    ``parent`` and ``children`` are indices into the owning ``SyntaxTree``.
    ``ts`` keeps the tree-sitter node for rules that inspect bodies.
    """

    index: int
    kind: NodeKind
    span: Span
    parent: Optional[int] = None
    children: list[int] = field(default_factory=list)
    name: str = ""
    modifiers: frozenset[str] = frozenset()
    annotations: tuple[str, ...] = ()
    type_parameters: tuple[str, ...] = ()
    parameters: tuple[str, ...] = ()
    varargs: bool = False
    access: AccessLevel = AccessLevel.PACKAGE
    doc: Optional[DocComment] = None
    recovered: bool = False
    compact: bool = False
    # Array initializer layout
    open_brace: Optional[Span] = None
    close_brace: Optional[Span] = None
    elements: tuple[Span, ...] = ()
    intro_line: Optional[int] = None
    ts: Any = field(default=None, repr=False, compare=False)

    @property
    def line(self) -> int:
        return self.span.line

    def has_modifier(self, modifier: str) -> bool:
        return modifier in self.modifiers

    def has_annotation(self, *names: str) -> bool:
        return any(annotation in names for annotation in self.annotations)


class SyntaxTree:
    """Arena of syntax nodes; index 0 is the compilation unit."""

    def __init__(self, nodes: list[SyntaxNode]):
        if not nodes or nodes[0].kind is not NodeKind.COMPILATION_UNIT:
            raise ValueError("Syntax tree must start with a compilation unit node")
        self.nodes = nodes

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def root(self) -> SyntaxNode:
        return self.nodes[0]

    def node(self, index: int) -> SyntaxNode:
        return self.nodes[index]

    def parent(self, node: SyntaxNode) -> Optional[SyntaxNode]:
        if node.parent is None:
            return None
        return self.nodes[node.parent]

    def children(
        self, node: SyntaxNode, kinds: Optional[Iterable[NodeKind]] = None
    ) -> list[SyntaxNode]:
        """Direct children in source order, optionally filtered by kind."""
        wanted = frozenset(kinds) if kinds is not None else None
        result = []
        for index in node.children:
            child = self.nodes[index]
            if wanted is None or child.kind in wanted:
                result.append(child)
        return result

    def ancestors(self, node: SyntaxNode) -> Iterator[SyntaxNode]:
        current = self.parent(node)
        while current is not None:
            yield current
            current = self.parent(current)

    def enclosing_type(self, node: SyntaxNode) -> Optional[SyntaxNode]:
        """Nearest class/interface/record/enum declaration above ``node``."""
        for ancestor in self.ancestors(node):
            if ancestor.kind in TYPE_KINDS:
                return ancestor
        return None

    def walk(self) -> Iterator[SyntaxNode]:
        """Pre-order traversal from the root."""
        stack = [0]
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))


@dataclass(frozen=True)
class SourceUnit:
    """One analysed file: its path, raw text and syntax arena."""

    path: Path
    text: str
    tree: SyntaxTree

    @cached_property
    def lines(self) -> list[str]:
        return self.text.splitlines()

    def line_text(self, line: int) -> str:
        lines = self.lines
        if 1 <= line <= len(lines):
            return lines[line - 1]
        return ""

    def indentation(self, line: int) -> int:
        text = self.line_text(line)
        return len(text) - len(text.lstrip())

"""Base class shared by all rules."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, ClassVar, Iterable, Iterator, Optional

from tsgate.config import ConfigurationError
from tsgate.models import NodeKind, SourceUnit, SyntaxNode, SyntaxTree, Violation


@dataclass(frozen=True)
class RuleContext:
    """What a rule sees of the file being walked."""

    unit: SourceUnit

    @property
    def path(self) -> Path:
        return self.unit.path

    @property
    def tree(self) -> SyntaxTree:
        return self.unit.tree

    def parent(self, node: SyntaxNode) -> Optional[SyntaxNode]:
        return self.tree.parent(node)

    def enclosing_type(self, node: SyntaxNode) -> Optional[SyntaxNode]:
        return self.tree.enclosing_type(node)

    def members(self, node: SyntaxNode, *kinds: NodeKind) -> Iterator[SyntaxNode]:
        """Direct children of ``node`` of the given kinds, parse-recovered ones left out."""
        for child in self.tree.children(node, kinds or None):
            if not child.recovered:
                yield child


class Rule(ABC):
    """A single structural check.

    Subclasses declare the node kinds they want to see in ``kinds`` and the
    parameters they accept, with defaults, in ``parameters``. A rule instance
    is shared by every file of a run, so ``visit`` must keep any working state
    in locals.
    """

    name: ClassVar[str]
    description: ClassVar[str]
    kinds: ClassVar[frozenset[NodeKind]]
    parameters: ClassVar[dict[str, Any]] = {}

    def __init__(self, **params: Any):
        unknown = sorted(set(params) - set(self.parameters))
        if unknown:
            valid = ", ".join(sorted(self.parameters)) or "none"
            raise ConfigurationError(
                f"Unknown parameter(s) for rule '{self.name}': {', '.join(unknown)} (valid: {valid})"
            )
        self.params: dict[str, Any] = {**self.parameters, **params}
        self.configure()

    def configure(self) -> None:
        """Validate ``self.params``; raise ``ConfigurationError`` on bad values."""

    def _param_error(self, param: str, expected: str) -> ConfigurationError:
        return ConfigurationError(
            f"Invalid value {self.params[param]!r} for parameter '{param}' of rule '{self.name}': expected {expected}"
        )

    @abstractmethod
    def visit(self, node: SyntaxNode, context: RuleContext) -> Iterable[Violation]:
        """Yield the violations found at ``node``."""

    def violation(
        self, context: RuleContext, line: int, message: str, column: Optional[int] = None
    ) -> Violation:
        return Violation(rule=self.name, path=context.path, line=line, column=column, message=message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.params})"

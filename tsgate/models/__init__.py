"""Data models for tsgate."""

from .syntax import (
    TYPE_KINDS,
    AccessLevel,
    DocComment,
    DocTag,
    NodeKind,
    SourceUnit,
    Span,
    SyntaxNode,
    SyntaxTree,
)
from .violation import Report, Violation

__all__ = [
    "TYPE_KINDS",
    "AccessLevel",
    "DocComment",
    "DocTag",
    "NodeKind",
    "Report",
    "SourceUnit",
    "Span",
    "SyntaxNode",
    "SyntaxTree",
    "Violation",
]

"""Tree-sitter based quality gate for Java sources."""

__version__ = "0.1.0"

"""Parse stage of the tsgate pipeline."""

import logging
from dataclasses import dataclass
from fnmatch import fnmatch
from pathlib import Path
from typing import Any, Optional

from tree_sitter_language_pack import get_parser

from tsgate.config import GateSettings, get_settings

logger = logging.getLogger(__name__)

LANGUAGE = "java"
SOURCE_SUFFIXES = (".java",)


@dataclass
class ParsedFile:
    """A source file together with its tree-sitter tree."""

    path: Path
    source: bytes
    tree: Any

    @property
    def root_node(self) -> Any:
        return self.tree.root_node

    @property
    def text(self) -> str:
        return self.source.decode("utf-8", errors="replace")


def is_source_file(file_path: Path) -> bool:
    return file_path.suffix.lower() in SOURCE_SUFFIXES


def read_source_file(file_path: Path) -> bytes:
    """Read source code from file."""
    try:
        return file_path.read_bytes()
    except Exception as e:
        raise ValueError(f"Failed to read file {file_path}: {e}") from e


def parse_source_code(source: bytes, file_path: Path) -> ParsedFile:
    """Parse Java source code using tree-sitter."""
    try:
        parser = get_parser(LANGUAGE)
    except Exception as e:
        raise RuntimeError(f"Failed to get parser for {LANGUAGE}: {e}") from e

    try:
        tree = parser.parse(source)
    except Exception as e:
        raise RuntimeError(f"Failed to parse {file_path}: {e}") from e

    if tree.root_node.has_error:
        logger.warning(f"Parse tree contains errors for {file_path}")

    return ParsedFile(path=file_path, source=source, tree=tree)


def parse_file(file_path: Path) -> ParsedFile:
    """
    Parse a single Java source file using tree-sitter.

    Args:
        file_path: Path to the source file

    Returns:
        ParsedFile object containing the tree

    Raises:
        ValueError: If the file is not a Java file or cannot be read
        RuntimeError: If parsing fails
    """
    logger.debug(f"Parsing file: {file_path}")

    if not is_source_file(file_path):
        raise ValueError(f"Not a Java source file: {file_path}")

    source = read_source_file(file_path)
    parsed = parse_source_code(source, file_path)

    logger.debug(f"Successfully parsed {file_path}")
    return parsed


def parse_ignore_file(ignore_file: Path) -> list[str]:
    """Parse an ignore file and return list of patterns.

    Args:
        ignore_file: Path to the ignore file (e.g., .gitignore)

    Returns:
        List of ignore patterns (empty lines and comments are filtered out)
    """
    try:
        patterns = []
        with ignore_file.open("r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line and not line.startswith("#"):
                    patterns.append(line)
        return patterns
    except Exception as e:
        logger.warning(f"Failed to parse ignore file {ignore_file}: {e}")
        return []


def find_ignore_files(target_path: Path, ignore_file_patterns: list[str]) -> dict[Path, list[str]]:
    """Find all ignore files in the directory hierarchy.

    Args:
        target_path: Root directory to search
        ignore_file_patterns: Glob patterns to find ignore files

    Returns:
        Dictionary mapping directory paths to their ignore patterns
    """
    ignore_files_map: dict[Path, list[str]] = {}

    if not target_path.is_dir():
        return ignore_files_map

    for pattern in ignore_file_patterns:
        for ignore_file in target_path.glob(pattern):
            if ignore_file.is_file():
                patterns = parse_ignore_file(ignore_file)
                if patterns:
                    ignore_files_map.setdefault(ignore_file.parent, []).extend(patterns)
                    logger.debug(f"Loaded {len(patterns)} patterns from {ignore_file}")

    return ignore_files_map


def _matches_double_star(rel_path_str: str, file_name: str, pattern: str) -> bool:
    """Match ``foo/**/bar``, ``foo/**`` and ``**/bar`` patterns."""
    pattern_parts = pattern.split("**")
    if len(pattern_parts) != 2:
        return False

    prefix, suffix = (part.strip("/") for part in pattern_parts)
    if prefix and suffix:
        return fnmatch(rel_path_str, f"{prefix}*{suffix}")
    if prefix:
        return rel_path_str.startswith(prefix)
    if suffix:
        return fnmatch(rel_path_str, f"*{suffix}") or fnmatch(file_name, suffix)
    return False


def matches_pattern(file_path: Path, pattern: str, base_path: Path) -> bool:
    """Check if a file matches an ignore pattern.

    Args:
        file_path: Path to check
        pattern: Ignore pattern (supports glob patterns)
        base_path: Base directory for relative pattern matching

    Returns:
        True if the file matches the pattern
    """
    # Negation patterns are not supported
    if pattern.startswith("!"):
        return False

    try:
        rel_path = file_path.relative_to(base_path)
    except ValueError:
        return False

    rel_path_str = rel_path.as_posix()

    if pattern.endswith("/"):
        pattern = pattern.rstrip("/")
        if not file_path.is_dir():
            return False

    # Anchored to the base directory
    if pattern.startswith("/"):
        return fnmatch(rel_path_str, pattern.lstrip("/"))

    if fnmatch(rel_path_str, pattern) or fnmatch(file_path.name, pattern):
        return True

    if "**" in pattern:
        return _matches_double_star(rel_path_str, file_path.name, pattern)

    return False


def should_ignore_file(
    file_path: Path,
    target_path: Path,
    ignore_patterns: list[str],
    ignore_files_map: dict[Path, list[str]],
) -> bool:
    """Check if a file should be ignored based on patterns.

    Args:
        file_path: File to check
        target_path: Root directory being analyzed
        ignore_patterns: Direct ignore patterns from CLI
        ignore_files_map: Map of directory to ignore patterns from ignore files

    Returns:
        True if the file should be ignored
    """
    for pattern in ignore_patterns:
        if matches_pattern(file_path, pattern, target_path):
            logger.debug(f"File {file_path} matched CLI ignore pattern: {pattern}")
            return True

    # Walk up the directory tree looking for applicable ignore files
    current = file_path.parent
    while True:
        for pattern in ignore_files_map.get(current, []):
            if matches_pattern(file_path, pattern, current):
                logger.debug(f"File {file_path} matched ignore pattern '{pattern}' from {current}")
                return True

        if current == target_path or current.parent == current:
            break
        current = current.parent

    return False


def collect_source_files(target_path: Path, settings: Optional[GateSettings] = None) -> list[Path]:
    """Collect all Java files from a path, applying ignore patterns."""
    settings = settings or get_settings()
    ignore_patterns = settings.ignore_patterns
    ignore_file_patterns = settings.ignore_file_patterns

    if target_path.is_file():
        if ignore_patterns or ignore_file_patterns:
            ignore_files_map = find_ignore_files(target_path.parent, ignore_file_patterns)
            if should_ignore_file(target_path, target_path.parent, ignore_patterns, ignore_files_map):
                logger.info(f"File {target_path} is ignored by patterns")
                return []
        return [target_path]

    if target_path.is_dir():
        ignore_files_map = find_ignore_files(target_path, ignore_file_patterns)

        files: list[Path] = []
        for suffix in SOURCE_SUFFIXES:
            for file in target_path.rglob(f"*{suffix}"):
                if file.is_file() and not should_ignore_file(
                    file, target_path, ignore_patterns, ignore_files_map
                ):
                    files.append(file)

        files.sort()
        logger.info(f"Found {len(files)} source files in directory (after applying ignore patterns)")
        return files

    return []

"""Inline suppression directives.

A directive lives inside a comment and silences one or more rules for a
window of lines starting at the directive's own line::

    // @checkstyle NonStaticMethod (3 lines)
    /* @checkstyle DeclarationOrder|ProhibitNonFinalClasses (1 line) */

Rule names may carry a trailing ``Check`` (``NonStaticMethodCheck``), which is
ignored when matching.
"""

import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)

DEFAULT_MARKER = "@checkstyle"
WINDOW_UNITS = frozenset({"line", "lines"})

_RULES_PATTERN = re.compile(r"^\s+(?P<rules>[\w|]+)\s*(?P<tail>.*)$")
_WINDOW_PATTERN = re.compile(r"^\((?P<count>[^\s)]*)\s*(?P<unit>[^\s)]*)\)")


def normalize_rule_name(name: str) -> str:
    """Strip an optional ``Check`` suffix so both spellings compare equal."""
    if name.endswith("Check") and len(name) > len("Check"):
        return name[: -len("Check")]
    return name


@dataclass(frozen=True)
class SuppressionDirective:
    """One rule silenced over ``[anchor, anchor + length - 1]``."""

    rule: str
    anchor: int
    length: int

    @property
    def last_line(self) -> int:
        return self.anchor + self.length - 1

    def covers(self, line: int) -> bool:
        return self.anchor <= line <= self.last_line


class SuppressionIndex:
    """Per-file lookup from rule name to suppressed line windows."""

    def __init__(self, directives: Iterable[SuppressionDirective] = ()):
        self._windows: dict[str, list[SuppressionDirective]] = {}
        for directive in directives:
            self.add(directive)

    def add(self, directive: SuppressionDirective) -> None:
        self._windows.setdefault(normalize_rule_name(directive.rule), []).append(directive)

    @property
    def directives(self) -> list[SuppressionDirective]:
        return [directive for windows in self._windows.values() for directive in windows]

    def __len__(self) -> int:
        return sum(len(windows) for windows in self._windows.values())

    def is_suppressed(self, rule: str, line: int) -> bool:
        """True iff some window for exactly this rule contains ``line``."""
        windows = self._windows.get(normalize_rule_name(rule), ())
        return any(directive.covers(line) for directive in windows)


def _skip_literal(line: str, start: int) -> int:
    """Index just past the string or char literal opening at ``start``."""
    quote = line[start]
    position = start + 1
    while position < len(line):
        if line[position] == "\\":
            position += 2
            continue
        if line[position] == quote:
            return position + 1
        position += 1
    return len(line)


def iter_comment_text(text: str) -> Iterator[tuple[int, str]]:
    """Yield ``(line, comment text)`` for every comment fragment of a Java source.

    Block comments spanning several lines yield one fragment per line.
    String literals, char literals and text blocks are skipped.
    """
    in_block = False
    in_text_block = False
    for number, line in enumerate(text.splitlines(), start=1):
        position = 0
        while position < len(line):
            if in_block:
                end = line.find("*/", position)
                if end == -1:
                    yield number, line[position:]
                    break
                yield number, line[position:end]
                in_block = False
                position = end + 2
            elif in_text_block:
                end = line.find('"""', position)
                if end == -1:
                    break
                in_text_block = False
                position = end + 3
            elif line.startswith("//", position):
                yield number, line[position + 2 :]
                break
            elif line.startswith("/*", position):
                in_block = True
                position += 2
            elif line.startswith('"""', position):
                in_text_block = True
                position += 3
            elif line[position] in "\"'":
                position = _skip_literal(line, position)
            else:
                position += 1


def parse_directives(comment: str, line: int, marker: str = DEFAULT_MARKER) -> list[SuppressionDirective]:
    """Parse every directive found in one comment fragment.

    Malformed directives are logged and skipped.
    """
    directives = []
    for match in re.finditer(re.escape(marker) + r"(?=\s|$)", comment):
        rest = comment[match.end() :]
        rules_match = _RULES_PATTERN.match(rest)
        if rules_match is None:
            logger.warning(f"Line {line}: suppression directive without a rule name: {comment.strip()!r}")
            continue

        window = _WINDOW_PATTERN.match(rules_match.group("tail"))
        if window is None:
            logger.warning(f"Line {line}: suppression directive without a '(N lines)' window: {comment.strip()!r}")
            continue

        count, unit = window.group("count"), window.group("unit")
        if not count.isdigit() or int(count) < 1:
            logger.warning(f"Line {line}: invalid suppression line count '{count}'")
            continue
        if unit.lower() not in WINDOW_UNITS:
            logger.warning(f"Line {line}: unknown suppression unit '{unit}', expected 'line' or 'lines'")
            continue

        for rule in rules_match.group("rules").split("|"):
            if rule:
                directives.append(SuppressionDirective(rule=rule, anchor=line, length=int(count)))
    return directives


def build_suppression_index(text: str, marker: str = DEFAULT_MARKER) -> SuppressionIndex:
    """Scan the comments of a source file and index its suppression directives."""
    index = SuppressionIndex()
    for line, comment in iter_comment_text(text):
        if marker not in comment:
            continue
        for directive in parse_directives(comment, line, marker):
            index.add(directive)
    logger.debug(f"Indexed {len(index)} suppression directive(s)")
    return index

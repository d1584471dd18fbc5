"""Violation aggregation: suppression filtering, deduplication and ordering."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from tsgate.models import Report, Violation
from tsgate.pipeline.suppression import SuppressionIndex

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    """Per-file buffer produced by one worker."""

    path: Path
    violations: list[Violation] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


def filter_suppressed(findings: Iterable[Violation], index: SuppressionIndex) -> list[Violation]:
    """Drop findings covered by a suppression window of the same rule.

    Diagnostics are never suppressed.
    """
    kept = []
    for finding in findings:
        if not finding.diagnostic and index.is_suppressed(finding.rule, finding.line):
            logger.debug(f"Suppressed: {finding}")
            continue
        kept.append(finding)
    return kept


def build_report(results: Iterable[FileResult]) -> Report:
    """Merge per-file buffers into one sorted, deduplicated report."""
    unique: dict[tuple, Violation] = {}
    failed_files: dict[Path, str] = {}
    files_checked = 0
    for result in results:
        files_checked += 1
        if result.error is not None:
            failed_files[result.path] = result.error
        for violation in result.violations:
            unique.setdefault((violation.sort_key, violation.diagnostic), violation)

    violations = sorted(unique.values(), key=lambda v: v.sort_key)
    return Report(violations=violations, failed_files=failed_files, files_checked=files_checked)

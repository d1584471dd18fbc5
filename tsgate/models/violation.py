"""Models for rule findings and the final report."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Violation(BaseModel):
    """A single rule failure at a source location."""

    model_config = ConfigDict(frozen=True)

    rule: str = Field(description="Name of the rule that produced the finding")
    path: Path = Field(description="Path to the source file")
    line: int = Field(ge=1, description="Line number (1-indexed)")
    column: Optional[int] = Field(default=None, ge=1, description="Column number (1-indexed)")
    message: str = Field(description="Human readable description of the problem")
    diagnostic: bool = Field(
        default=False,
        description="True for internal failures (rule crash, unparseable file) rather than rule findings",
    )

    @property
    def sort_key(self) -> tuple[str, int, str, int, str]:
        return (str(self.path), self.line, self.rule, self.column or 0, self.message)

    def __str__(self) -> str:
        """Format as ``path:line[:column]: message (rule)``."""
        location = f"{self.path}:{self.line}"
        if self.column is not None:
            location = f"{location}:{self.column}"
        return f"{location}: {self.message} ({self.rule})"


class Report(BaseModel):
    """Result of one quality gate run."""

    violations: list[Violation] = Field(
        default_factory=list, description="Sorted, deduplicated, suppression-filtered findings"
    )
    failed_files: dict[Path, str] = Field(
        default_factory=dict, description="Files that could not be parsed"
    )
    files_checked: int = Field(default=0, ge=0, description="Number of files analysed")

    @property
    def has_violations(self) -> bool:
        """A run with any violation is a failing run."""
        return bool(self.violations)

    @property
    def violation_count(self) -> int:
        return len(self.violations)

    @property
    def failure_count(self) -> int:
        return len(self.failed_files)

    def by_file(self) -> dict[Path, list[Violation]]:
        """Group violations by file, keeping report order."""
        grouped: dict[Path, list[Violation]] = {}
        for violation in self.violations:
            grouped.setdefault(violation.path, []).append(violation)
        return grouped

    def by_rule(self) -> dict[str, int]:
        counts: dict[str, int] = {}
        for violation in self.violations:
            counts[violation.rule] = counts.get(violation.rule, 0) + 1
        return counts

"""JSON formatter for tsgate reports."""

import json
from typing import Any

from tsgate.models import Report, Violation


def _violation_to_dict(violation: Violation) -> dict[str, Any]:
    """Convert a Violation to a dictionary."""
    return {
        "file_path": str(violation.path),
        "line": violation.line,
        "column": violation.column,
        "rule": violation.rule,
        "message": violation.message,
        "diagnostic": violation.diagnostic,
    }


def format_as_json(report: Report, *, pretty: bool = True) -> str:
    """Format a report as JSON.

    Args:
        report: The report to format
        pretty: If True, format with indentation for readability

    Returns:
        JSON-formatted string
    """
    data = {
        "files_checked": report.files_checked,
        "violation_count": report.violation_count,
        "passed": not report.has_violations,
        "rules": report.by_rule(),
        "violations": [_violation_to_dict(violation) for violation in report.violations],
        "parse_errors": [
            {"file_path": str(path), "error": error} for path, error in report.failed_files.items()
        ],
    }

    if pretty:
        return json.dumps(data, indent=2)
    return json.dumps(data)

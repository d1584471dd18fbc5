"""Top-level pipeline orchestration.

Collect -> (per file: Parse -> Adapt -> Index suppressions -> Walk -> Filter) -> Aggregate
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from tsgate.config import GateSettings, get_settings
from tsgate.models import Report, Violation
from tsgate.pipeline.adapter import build_source_unit
from tsgate.pipeline.aggregate import FileResult, build_report, filter_suppressed
from tsgate.pipeline.engine import TraversalEngine
from tsgate.pipeline.parse import collect_source_files, parse_file
from tsgate.pipeline.rules import registry_from_settings
from tsgate.pipeline.suppression import build_suppression_index

logger = logging.getLogger(__name__)

PARSE_FAILURE_RULE = "ParseFailure"


def _parse_failure(file_path: Path, reason: str) -> Violation:
    return Violation(
        rule=PARSE_FAILURE_RULE,
        path=file_path,
        line=1,
        message=f"File could not be parsed: {reason}",
        diagnostic=True,
    )


def analyze_file(file_path: Path, engine: TraversalEngine, settings: GateSettings) -> FileResult:
    """Run every per-file stage on one file.

    Never raises for problems with the file itself; an unreadable or
    unparseable file yields a result holding only a diagnostic.
    """
    try:
        parsed = parse_file(file_path)
        unit = build_source_unit(parsed)
    except Exception as e:
        logger.error(f"Failed to parse {file_path}: {e}")
        return FileResult(path=file_path, violations=[_parse_failure(file_path, str(e))], error=str(e))

    index = build_suppression_index(unit.text, settings.suppression.marker)
    findings = engine.check(unit)
    kept = filter_suppressed(findings, index)
    logger.debug(f"{file_path}: {len(findings)} finding(s), {len(kept)} after suppression")
    return FileResult(path=file_path, violations=kept)


def run_pipeline(target_path: Path, settings: Optional[GateSettings] = None) -> Report:
    """Run the quality gate over a file or directory.

    Args:
        target_path: Java file or directory to check
        settings: Settings for the run (global settings when omitted)

    Returns:
        The sorted report; ``report.has_violations`` decides pass/fail

    Raises:
        ConfigurationError: If the rule configuration is invalid, before any file is read
    """
    settings = settings or get_settings()
    registry = registry_from_settings(settings.rules)
    engine = TraversalEngine(registry)

    logger.info("Stage 1/3: Collecting files...")
    files = collect_source_files(target_path, settings)

    logger.info(f"Stage 2/3: Checking {len(files)} file(s) with {len(registry)} rule(s)...")
    if settings.jobs > 1 and len(files) > 1:
        with ThreadPoolExecutor(max_workers=settings.jobs) as executor:
            results = list(executor.map(lambda path: analyze_file(path, engine, settings), files))
    else:
        results = [analyze_file(path, engine, settings) for path in files]

    logger.info("Stage 3/3: Aggregating findings...")
    report = build_report(results)
    logger.info(
        "Check complete: %d violation(s) in %d file(s), %d file(s) failed to parse",
        report.violation_count,
        report.files_checked,
        report.failure_count,
    )
    return report

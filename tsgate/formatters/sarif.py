"""SARIF (Static Analysis Results Interchange Format) formatter for tsgate.

Specification: https://docs.oasis-open.org/sarif/sarif/v2.1.0/sarif-v2.1.0.html
"""

from typing import Optional

from sarif_pydantic import (  # type: ignore[import-untyped]
    ArtifactLocation,
    Level,
    Location,
    Message,
    PhysicalLocation,
    Region,
    ReportingDescriptor,
    Result,
    Run,
    Sarif,
    Tool,
    ToolDriver,
)

from tsgate import __version__
from tsgate.models import Report, Violation
from tsgate.pipeline.rules import RULES


def format_as_sarif(report: Report, *, pretty: bool = True) -> str:
    """Format a report as SARIF JSON.

    Args:
        report: The report to format
        pretty: If True, format with indentation for readability

    Returns:
        SARIF-formatted JSON string
    """
    sarif_log = Sarif(
        version="2.1.0",
        schema_uri="https://json.schemastore.org/sarif-2.1.0.json",
        runs=[_create_run(report)],
    )

    if pretty:
        json_output: str = sarif_log.model_dump_json(indent=2, exclude_none=True)
        return json_output
    json_output = sarif_log.model_dump_json(exclude_none=True)
    return json_output


def _create_run(report: Report) -> Run:
    return Run(
        tool=_create_tool(),
        results=[_create_result(violation) for violation in report.violations],
    )


def _create_tool() -> Tool:
    """One reporting descriptor per built-in rule."""
    return Tool(
        driver=ToolDriver(
            name="tsgate",
            version=__version__,
            semanticVersion=__version__,
            rules=[
                ReportingDescriptor(
                    id=name,
                    name=name,
                    shortDescription=Message(text=rule.description),
                    fullDescription=Message(text=_full_description(rule.__doc__, rule.description)),
                    defaultConfiguration={"level": "error"},
                    properties={"parameters": dict(rule.parameters)} if rule.parameters else None,
                )
                for name, rule in RULES.items()
            ],
        )
    )


def _full_description(doc: Optional[str], fallback: str) -> str:
    if not doc:
        return fallback
    return " ".join(doc.split())


def _create_result(violation: Violation) -> Result:
    region = Region(startLine=violation.line, startColumn=violation.column or 1)
    return Result(
        ruleId=violation.rule,
        level=Level.WARNING if violation.diagnostic else Level.ERROR,
        message=Message(text=violation.message),
        locations=[
            Location(
                physicalLocation=PhysicalLocation(
                    artifactLocation=ArtifactLocation(
                        uri=str(violation.path),
                        uriBaseId="%SRCROOT%",
                    ),
                    region=region,
                )
            )
        ],
        properties={"diagnostic": True} if violation.diagnostic else None,
    )

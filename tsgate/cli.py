"""CLI interface for tsgate."""

import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.tree import Tree

from tsgate.config import ConfigurationError, GateSettings, load_settings_file, set_settings
from tsgate.formatters import format_as_json, format_as_sarif
from tsgate.models import NodeKind, Report, SyntaxNode, SyntaxTree
from tsgate.pipeline.pipeline import run_pipeline
from tsgate.pipeline.rules import RULES

console = Console()


def setup_logging(log_level: str) -> None:
    """Configure logging with rich handler."""
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _parse_patterns(pattern_string: Optional[str]) -> list[str]:
    """Parse comma-separated pattern string into list."""
    if not pattern_string:
        return []
    return [p.strip() for p in pattern_string.split(",") if p.strip()]


def _write_output(text: str, output_path: Path | None) -> None:
    """Write output text to file or stdout."""
    if output_path:
        output_path.write_text(text)
    else:
        print(text)


def display_violations(report: Report) -> None:
    """Display violations grouped by file."""
    if not report.violations:
        return

    for path, violations in report.by_file().items():
        console.print(f"\n[bold]{path}[/bold]")
        for violation in violations:
            location = f"{violation.line}" if violation.column is None else f"{violation.line}:{violation.column}"
            style = "yellow" if violation.diagnostic else "red"
            console.print(
                f"  [{style}]{location:>8}[/{style}]  {violation.message} [dim]({violation.rule})[/dim]",
                highlight=False,
            )


def display_failed_files(report: Report, show_details: bool) -> None:
    """Display files that could not be parsed."""
    if not report.failed_files:
        return

    console.print("\n[bold red]Failed Files:[/bold red]")
    for file_path, error in report.failed_files.items():
        console.print(f"  [red]✗[/red] {file_path}")
        if show_details:
            console.print(f"    [dim]{error}[/dim]")


def display_summary_table(report: Report) -> None:
    """Display violation counts per rule."""
    counts = report.by_rule()
    if not counts:
        return

    table = Table(title="\n[bold cyan]Summary[/bold cyan]", show_header=True, header_style="bold")
    table.add_column("Rule", style="cyan")
    table.add_column("Violations", justify="right")
    table.add_column("Files", justify="right")

    for rule in sorted(counts):
        files = {v.path for v in report.violations if v.rule == rule}
        table.add_row(rule, str(counts[rule]), str(len(files)))

    table.add_row("[bold]Total[/bold]", f"[bold]{report.violation_count}[/bold]", str(len(report.by_file())))
    console.print(table)


def display_status(report: Report) -> None:
    if report.has_violations:
        console.print(
            f"\n[bold red]✗ {report.violation_count} violation(s) in {report.files_checked} file(s)[/bold red]"
        )
    else:
        console.print(f"\n[bold green]✓ No violations in {report.files_checked} file(s)[/bold green]")


def _handle_output(report: Report, output_format: str, output_path: Path | None, log_level: str) -> None:
    """Handle formatting and outputting results."""
    if output_format.lower() == "sarif":
        _write_output(format_as_sarif(report, pretty=True), output_path)
    elif output_format.lower() == "json":
        _write_output(format_as_json(report, pretty=True), output_path)
    else:  # console
        display_violations(report)
        display_failed_files(report, show_details=(log_level.upper() == "DEBUG"))
        display_summary_table(report)
        display_status(report)


def _configure_settings(
    config: Optional[Path],
    rules: Optional[str],
    disable: Optional[str],
    jobs: Optional[int],
    suppression_marker: Optional[str],
    ignore: Optional[str],
    ignore_files: Optional[str],
) -> GateSettings:
    """Build settings from the optional config file, then apply command line overrides."""
    settings = load_settings_file(config) if config else GateSettings()

    rules_update: dict = {}
    if rules:
        rules_update["enabled"] = _parse_patterns(rules)
    if disable:
        rules_update["disabled"] = settings.rules.disabled + _parse_patterns(disable)

    update: dict = {}
    if rules_update:
        update["rules"] = settings.rules.model_copy(update=rules_update)
    if suppression_marker:
        update["suppression"] = settings.suppression.model_copy(update={"marker": suppression_marker})
    if jobs is not None:
        update["jobs"] = jobs
    if ignore is not None:
        update["ignore_patterns"] = _parse_patterns(ignore)
    if ignore_files is not None:
        update["ignore_file_patterns"] = _parse_patterns(ignore_files)

    if update:
        settings = settings.model_copy(update=update)
    set_settings(settings)
    return settings


@click.group()
@click.pass_context
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default="WARNING",
    help="Set the logging level",
)
def main(ctx: click.Context, log_level: str) -> None:
    """Tree-sitter based quality gate for Java sources."""
    setup_logging(log_level.upper())
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level


@main.command()
@click.argument("path", type=click.Path(exists=True, path_type=Path))
@click.pass_context
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML configuration file",
)
@click.option(
    "--rules",
    type=str,
    default=None,
    help="Comma-separated list of rules to run (default: all)",
)
@click.option(
    "--disable",
    type=str,
    default=None,
    help="Comma-separated list of rules to skip",
)
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["console", "json", "sarif"], case_sensitive=False),
    default="console",
    help="Output format (default: console)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output file path for json/sarif (default: stdout)",
)
@click.option(
    "--jobs",
    "-j",
    type=click.IntRange(min=1),
    default=None,
    help="Number of files checked concurrently (default: 1)",
)
@click.option(
    "--suppression-marker",
    type=str,
    default=None,
    help="Keyword that starts an inline suppression directive (default: '@checkstyle')",
)
@click.option(
    "--ignore",
    type=str,
    default=None,
    help="Comma-separated list of glob patterns to ignore files (e.g., '**/generated/**')",
)
@click.option(
    "--ignore-files",
    type=str,
    default=None,
    help="Comma-separated list of glob patterns to find ignore files (default: '**/.*ignore')",
)
def check(
    ctx: click.Context,
    path: Path,
    config: Optional[Path],
    rules: Optional[str],
    disable: Optional[str],
    output_format: str,
    output: Path | None,
    jobs: Optional[int],
    suppression_marker: Optional[str],
    ignore: Optional[str],
    ignore_files: Optional[str],
) -> None:
    """Check Java sources; exit 1 when any violation is found."""
    log_level = ctx.obj["log_level"]

    try:
        settings = _configure_settings(config, rules, disable, jobs, suppression_marker, ignore, ignore_files)
        if output_format.lower() == "console":
            console.print(f"Checking: [cyan]{path}[/cyan]")
            with console.status("[bold green]Running checks..."):
                report = run_pipeline(path, settings)
        else:
            report = run_pipeline(path, settings)
    except ConfigurationError as e:
        console.print(f"[bold red]Configuration error:[/bold red] {e}")
        sys.exit(2)

    _handle_output(report, output_format, output, log_level)

    if report.has_violations:
        sys.exit(1)


@main.command(name="rules")
def list_rules() -> None:
    """List the built-in rules with their parameters."""
    table = Table(title="[bold cyan]Rules[/bold cyan]", show_header=True, header_style="bold")
    table.add_column("Rule", style="cyan")
    table.add_column("Description")
    table.add_column("Parameters", style="dim")

    for name, rule in RULES.items():
        params = ", ".join(f"{key}={value!r}" for key, value in rule.parameters.items())
        table.add_row(name, rule.description, params or "-")
    console.print(table)


def _node_label(node: SyntaxNode) -> str:
    label = f"[cyan]{node.kind.value}[/cyan]"
    if node.name:
        label += f" {node.name}"
    if node.kind not in (NodeKind.COMPILATION_UNIT, NodeKind.DOC_COMMENT, NodeKind.ARRAY_INITIALIZER):
        label += f" [dim]{node.access.label}[/dim]"
    label += f" [dim]lines {node.span.line}-{node.span.end_line}[/dim]"
    if node.recovered:
        label += " [yellow](recovered)[/yellow]"
    return label


def _add_branch(parent: Tree, tree: SyntaxTree, node: SyntaxNode) -> None:
    branch = parent.add(_node_label(node))
    for child in tree.children(node):
        _add_branch(branch, tree, child)


@main.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def tree(file: Path) -> None:
    """Show the declaration tree the rules see for a Java file."""
    from tsgate.pipeline.adapter import build_source_unit
    from tsgate.pipeline.parse import parse_file

    try:
        unit = build_source_unit(parse_file(file))
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] Failed to parse file: {e}")
        sys.exit(1)

    root = Tree(_node_label(unit.tree.root))
    for child in unit.tree.children(unit.tree.root):
        _add_branch(root, unit.tree, child)
    console.print(root)


if __name__ == "__main__":
    main()

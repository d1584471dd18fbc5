import textwrap
from pathlib import Path

import pytest

from tsgate.config import GateSettings, get_settings, set_settings
from tsgate.models import SourceUnit, Violation
from tsgate.pipeline.adapter import build_source_unit
from tsgate.pipeline.engine import TraversalEngine
from tsgate.pipeline.parse import parse_source_code
from tsgate.pipeline.rules import Rule, RuleRegistry

FIXTURES = Path(__file__).parent / "fixtures" / "java"


def fixture_path(rule_name: str, name: str) -> Path:
    return FIXTURES / rule_name / f"{name}.java"


def parse_java(source: str, path: Path = Path("Sample.java")) -> SourceUnit:
    """Parse a Java snippet into a SourceUnit.

    The snippet is dedented and its leading newline dropped, so line 1 is the
    first line of code.
    """
    text = textwrap.dedent(source).lstrip("\n")
    return build_source_unit(parse_source_code(text.encode("utf-8"), path))


def parse_fixture(path: Path) -> SourceUnit:
    return build_source_unit(parse_source_code(path.read_bytes(), path))


def run_rule(rule: Rule, unit: SourceUnit) -> list[Violation]:
    """Run a single rule over a unit, without suppression filtering."""
    return TraversalEngine(RuleRegistry([rule])).check(unit)


def check_source(rule: Rule, source: str) -> list[Violation]:
    return run_rule(rule, parse_java(source))


def check_fixture(rule: Rule, name: str) -> list[Violation]:
    return run_rule(rule, parse_fixture(fixture_path(rule.name, name)))


def lines_of(violations: list[Violation]) -> list[int]:
    return sorted(v.line for v in violations)


@pytest.fixture(autouse=True)
def default_settings():
    """Give every test fresh default settings and restore the previous ones afterwards."""
    original_settings = get_settings()
    set_settings(GateSettings())
    yield
    set_settings(original_settings)

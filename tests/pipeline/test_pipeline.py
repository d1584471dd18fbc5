"""End-to-end tests for the pipeline."""

from pathlib import Path

import pytest

from tsgate.config import ConfigurationError, GateSettings, RulesSettings, SuppressionSettings
from tsgate.pipeline.engine import TraversalEngine
from tsgate.pipeline.pipeline import PARSE_FAILURE_RULE, analyze_file, run_pipeline
from tsgate.pipeline.rules import build_registry

METHOD_BEFORE_CONSTRUCTOR = """\
public final class Service {
    private void helper() {
    }

    public Service() {
    }
}
"""

CONSTRUCTOR_FIRST = """\
public final class Service {
    public Service() {
    }

    private void helper() {
    }
}
"""


def only(*rules: str, **kwargs) -> GateSettings:
    return GateSettings(rules=RulesSettings(enabled=list(rules)), **kwargs)


class TestEndToEnd:
    """Scenarios over real files."""

    def test_method_before_constructor(self, tmp_path):
        (tmp_path / "Service.java").write_text(METHOD_BEFORE_CONSTRUCTOR)

        report = run_pipeline(tmp_path, only("DeclarationOrder"))

        assert report.has_violations
        assert [(v.rule, v.line) for v in report.violations] == [("DeclarationOrder", 5)]

    def test_constructor_first_is_clean(self, tmp_path):
        (tmp_path / "Service.java").write_text(CONSTRUCTOR_FIRST)

        report = run_pipeline(tmp_path, only("DeclarationOrder"))

        assert not report.has_violations
        assert report.files_checked == 1

    def test_suppression_removes_finding(self, tmp_path):
        source = METHOD_BEFORE_CONSTRUCTOR.replace(
            "    public Service() {", "    // @checkstyle DeclarationOrder (2 lines)\n    public Service() {"
        )
        (tmp_path / "Service.java").write_text(source)

        report = run_pipeline(tmp_path, only("DeclarationOrder"))

        assert not report.has_violations

    def test_suppression_for_other_rule_keeps_finding(self, tmp_path):
        source = METHOD_BEFORE_CONSTRUCTOR.replace(
            "    public Service() {", "    // @checkstyle NonStaticMethod (2 lines)\n    public Service() {"
        )
        (tmp_path / "Service.java").write_text(source)

        report = run_pipeline(tmp_path, only("DeclarationOrder"))

        assert [v.rule for v in report.violations] == ["DeclarationOrder"]

    def test_custom_suppression_marker(self, tmp_path):
        source = METHOD_BEFORE_CONSTRUCTOR.replace(
            "    public Service() {", "    // @gate DeclarationOrder (2 lines)\n    public Service() {"
        )
        (tmp_path / "Service.java").write_text(source)
        settings = only("DeclarationOrder", suppression=SuppressionSettings(marker="@gate"))

        assert not run_pipeline(tmp_path, settings).has_violations

    def test_report_is_sorted_across_files(self, tmp_path):
        (tmp_path / "B.java").write_text("class B {\n}\n")
        (tmp_path / "A.java").write_text("class A {\n}\n\nclass C {\n}\n")

        report = run_pipeline(tmp_path, only("ProhibitNonFinalClasses"))

        assert [(v.path.name, v.line) for v in report.violations] == [("A.java", 1), ("A.java", 4), ("B.java", 1)]

    def test_parallel_run_matches_sequential_run(self, tmp_path):
        for index in range(6):
            (tmp_path / f"Service{index}.java").write_text(
                METHOD_BEFORE_CONSTRUCTOR.replace("Service", f"Service{index}")
            )

        sequential = run_pipeline(tmp_path, GateSettings(jobs=1))
        parallel = run_pipeline(tmp_path, GateSettings(jobs=4))

        assert parallel.violations == sequential.violations
        assert parallel.files_checked == 6

    def test_global_settings_are_used_by_default(self, tmp_path):
        (tmp_path / "Service.java").write_text(CONSTRUCTOR_FIRST)

        report = run_pipeline(tmp_path)

        assert report.files_checked == 1


class TestFailures:
    """Tests for per-file and configuration failures."""

    def test_unreadable_file_becomes_file_level_diagnostic(self, tmp_path):
        missing = tmp_path / "Missing.java"
        engine = TraversalEngine(build_registry())

        result = analyze_file(missing, engine, GateSettings())

        assert result.failed
        assert len(result.violations) == 1
        assert result.violations[0].rule == PARSE_FAILURE_RULE
        assert result.violations[0].diagnostic

    def test_unknown_rule_aborts_before_processing(self, tmp_path):
        (tmp_path / "Service.java").write_text(CONSTRUCTOR_FIRST)

        with pytest.raises(ConfigurationError, match="NoSuchRule"):
            run_pipeline(tmp_path, only("NoSuchRule"))

    def test_broken_file_does_not_hide_other_files(self, tmp_path):
        (tmp_path / "Broken.java").write_text("public final class Broken {\n    void f( {\n}\n")
        (tmp_path / "Open.java").write_text("public class Open {\n}\n")

        report = run_pipeline(tmp_path, only("ProhibitNonFinalClasses"))

        assert (Path(tmp_path / "Open.java"), 1) in [(v.path, v.line) for v in report.violations]

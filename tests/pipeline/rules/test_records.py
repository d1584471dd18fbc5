"""Tests for the RecordValidation rule."""

from tsgate.pipeline.rules import RecordValidation

from ...conftest import check_fixture, check_source, lines_of


def test_valid_fixture():
    assert check_fixture(RecordValidation(), "Valid") == []


def test_invalid_fixture():
    violations = check_fixture(RecordValidation(), "Invalid")

    assert [(v.line, v.message) for v in sorted(violations, key=lambda v: (v.line, v.message))] == [
        (4, "Records must be final"),
        (4, "Records must declare at least one component"),
        (8, "Records cannot have instance fields"),
    ]


def test_empty_non_final_record_reports_both():
    violations = check_source(RecordValidation(), "record Empty() {\n}\n")

    assert len(violations) == 2


def test_final_record_with_compact_constructor():
    source = """
    public final record Range(int low, int high) {
        private static final int LIMIT = 10;
        public Range {
            if (low > high) {
                throw new IllegalArgumentException("low > high");
            }
        }
        public int width() {
            return this.high - this.low;
        }
    }
    """

    assert check_source(RecordValidation(), source) == []


def test_instance_field_column():
    source = """
    final record Holder(int value) {
        private int cached;
    }
    """

    violations = check_source(RecordValidation(), source)

    assert [(v.line, v.column) for v in violations] == [(2, 5)]


def test_nested_record():
    source = """
    final class Outer {
        record Inner(int value) {
        }
    }
    """

    assert lines_of(check_source(RecordValidation(), source)) == [2]

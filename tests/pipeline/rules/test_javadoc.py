"""Tests for the JavadocParameterOrder rule."""

import pytest

from tsgate.config import ConfigurationError
from tsgate.pipeline.rules import JavadocParameterOrder

from ...conftest import check_fixture, check_source, lines_of


def test_valid_fixture():
    assert check_fixture(JavadocParameterOrder(), "Valid") == []


def test_invalid_fixture():
    assert lines_of(check_fixture(JavadocParameterOrder(), "Invalid")) == [6, 16, 21, 31]


def test_invalid_fixture_with_type_parameters_last():
    rule = JavadocParameterOrder(type_parameters="last")

    assert lines_of(check_fixture(rule, "Invalid")) == [6, 16, 31]


def test_swapped_tags_reference_the_declaration():
    source = """
    final class Calc {
        /**
         * Adds.
         * @param second Second
         * @param first First
         */
        int add(int first, int second) {
            return first + second;
        }
    }
    """

    violations = check_source(JavadocParameterOrder(), source)

    assert len(violations) == 1
    assert violations[0].line == 4
    assert violations[0].column == 8
    assert "'add' declared at line 7" in violations[0].message
    assert "expected first, found second" in violations[0].message


def test_missing_tag_is_a_count_mismatch():
    source = """
    final class Calc {
        /**
         * Adds.
         * @param first First
         */
        int add(int first, int second) {
            return first + second;
        }
    }
    """

    violations = check_source(JavadocParameterOrder(), source)

    assert [(v.line, v.message) for v in violations] == [
        (6, "Number of javadoc parameters different than method signature")
    ]


def test_doc_without_tags_on_method_with_parameters():
    source = """
    final class Calc {
        /**
         * Adds.
         */
        int add(int first) {
            return first;
        }
    }
    """

    assert lines_of(check_source(JavadocParameterOrder(), source)) == [5]


def test_undocumented_declarations_are_skipped():
    source = """
    final class Calc {
        // Adds.
        int add(int first, int second) {
            return first + second;
        }
    }
    """

    assert check_source(JavadocParameterOrder(), source) == []


def test_generic_class_and_constructor():
    source = """
    /**
     * Box.
     * @param <T> Content type
     */
    final class Box<T> {
        /**
         * Ctor.
         * @param value Content
         */
        Box(T value) {
        }
    }
    """

    assert check_source(JavadocParameterOrder(), source) == []


def test_record_documents_components():
    source = """
    /**
     * Point.
     * @param y Ordinate
     * @param x Abscissa
     */
    final record Point(int x, int y) {
    }
    """

    violations = check_source(JavadocParameterOrder(), source)

    assert len(violations) == 1
    assert violations[0].line == 3


def test_single_line_doc():
    source = """
    final class Calc {
        /** @param value Value */
        void set(int value) {
        }
    }
    """

    assert check_source(JavadocParameterOrder(), source) == []


def test_invalid_position():
    with pytest.raises(ConfigurationError, match="type_parameters"):
        JavadocParameterOrder(type_parameters="middle")

"""Tests for inline suppression directives."""

import logging

from tsgate.pipeline.suppression import (
    SuppressionDirective,
    SuppressionIndex,
    build_suppression_index,
    iter_comment_text,
    normalize_rule_name,
    parse_directives,
)


class TestDirectiveWindow:
    """Tests for the window arithmetic."""

    def test_window_starts_at_anchor(self):
        directive = SuppressionDirective(rule="NonStaticMethod", anchor=10, length=3)

        assert directive.last_line == 12
        assert not directive.covers(9)
        assert directive.covers(10)
        assert directive.covers(12)
        assert not directive.covers(13)

    def test_single_line_window(self):
        directive = SuppressionDirective(rule="NonStaticMethod", anchor=4, length=1)

        assert directive.covers(4)
        assert not directive.covers(5)


class TestSuppressionIndex:
    """Tests for lookups."""

    def test_exact_rule_match_only(self):
        index = SuppressionIndex([SuppressionDirective(rule="DeclarationOrder", anchor=5, length=2)])

        assert index.is_suppressed("DeclarationOrder", 6)
        assert not index.is_suppressed("NonStaticMethod", 6)

    def test_overlapping_windows(self):
        index = SuppressionIndex(
            [
                SuppressionDirective(rule="RecordValidation", anchor=1, length=3),
                SuppressionDirective(rule="RecordValidation", anchor=2, length=5),
            ]
        )

        assert index.is_suppressed("RecordValidation", 1)
        assert index.is_suppressed("RecordValidation", 6)
        assert not index.is_suppressed("RecordValidation", 7)
        assert len(index) == 2

    def test_check_suffix_is_ignored(self):
        index = SuppressionIndex([SuppressionDirective(rule="NonStaticMethodCheck", anchor=1, length=1)])

        assert index.is_suppressed("NonStaticMethod", 1)
        assert index.is_suppressed("NonStaticMethodCheck", 1)

    def test_normalize_rule_name(self):
        assert normalize_rule_name("DeclarationOrderCheck") == "DeclarationOrder"
        assert normalize_rule_name("DeclarationOrder") == "DeclarationOrder"
        assert normalize_rule_name("Check") == "Check"


class TestCommentScanning:
    """Tests for finding comment text in Java sources."""

    def test_line_and_block_comments(self):
        text = 'int a = 1; // trailing\n/* block\n   spans */ int b;\n'

        assert list(iter_comment_text(text)) == [
            (1, " trailing"),
            (2, " block"),
            (3, "   spans "),
        ]

    def test_comment_markers_inside_strings_are_ignored(self):
        text = 'String s = "// not a comment"; char c = \'/\';\nString t = "/* nope */";\n'

        assert list(iter_comment_text(text)) == []

    def test_text_blocks_are_skipped(self):
        text = 'String s = """\n    // inside text block\n    """; // real\n'

        assert list(iter_comment_text(text)) == [(3, " real")]


class TestParseDirectives:
    """Tests for directive syntax."""

    def test_plural_and_singular_units(self):
        assert parse_directives(" @checkstyle NonStaticMethod (3 lines)", 7) == [
            SuppressionDirective(rule="NonStaticMethod", anchor=7, length=3)
        ]
        assert parse_directives(" @checkstyle NonStaticMethod (1 line)", 7) == [
            SuppressionDirective(rule="NonStaticMethod", anchor=7, length=1)
        ]

    def test_several_rules_in_one_directive(self):
        directives = parse_directives("@checkstyle DeclarationOrder|NonStaticMethod (2 lines)", 1)

        assert [d.rule for d in directives] == ["DeclarationOrder", "NonStaticMethod"]

    def test_custom_marker(self):
        directives = parse_directives(" @gate NonStaticMethod (2 lines)", 3, marker="@gate")

        assert directives == [SuppressionDirective(rule="NonStaticMethod", anchor=3, length=2)]
        assert parse_directives(" @checkstyle NonStaticMethod (2 lines)", 3, marker="@gate") == []

    def test_malformed_directives_are_ignored_with_warning(self, caplog):
        malformed = [
            " @checkstyle NonStaticMethod (many lines)",
            " @checkstyle NonStaticMethod (0 lines)",
            " @checkstyle NonStaticMethod (-2 lines)",
            " @checkstyle NonStaticMethod (2 rows)",
            " @checkstyle NonStaticMethod 2 lines",
            " @checkstyle (2 lines)",
        ]
        with caplog.at_level(logging.WARNING, logger="tsgate.pipeline.suppression"):
            for comment in malformed:
                assert parse_directives(comment, 1) == []

        assert len(caplog.records) == len(malformed)


class TestBuildSuppressionIndex:
    """Tests for indexing a whole file."""

    def test_directives_from_all_comment_styles(self):
        text = (
            "public final class Foo {\n"
            "    // @checkstyle NonStaticMethod (2 lines)\n"
            "    public int a() {\n"
            "        return 1;\n"
            "    }\n"
            "    /* @checkstyle DeclarationOrder (1 line) */\n"
            "    /**\n"
            "     * @checkstyle JavadocParameterOrder (4 lines)\n"
            "     */\n"
            "}\n"
        )

        index = build_suppression_index(text)

        assert index.is_suppressed("NonStaticMethod", 3)
        assert not index.is_suppressed("NonStaticMethod", 4)
        assert index.is_suppressed("DeclarationOrder", 6)
        assert index.is_suppressed("JavadocParameterOrder", 11)
        assert len(index) == 3

    def test_malformed_directive_does_not_stop_indexing(self):
        text = (
            "// @checkstyle NonStaticMethod (lots lines)\n"
            "// @checkstyle RecordValidation (1 line)\n"
        )

        index = build_suppression_index(text)

        assert not index.is_suppressed("NonStaticMethod", 1)
        assert index.is_suppressed("RecordValidation", 2)

    def test_directive_in_string_is_not_a_directive(self):
        text = 'String s = "@checkstyle NonStaticMethod (5 lines)";\n'

        assert len(build_suppression_index(text)) == 0

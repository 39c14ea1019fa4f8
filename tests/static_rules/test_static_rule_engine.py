"""
Tests for the static rule engine.

The engine is total and deterministic: unknown categories yield no findings,
and every finding is anchored to verbatim text so it can be applied later.
"""

import pytest

from backend.app.models.linting import RuleSeverity
from backend.app.services.file_types import resolve_category
from backend.app.services.static_rule_engine import StaticRuleEngine


@pytest.fixture
def engine():
    return StaticRuleEngine()


def rules(violations):
    return [v.rule for v in violations]


class TestRouting:
    """File-type resolution and the empty result for unknown files."""

    def test_unknown_category_returns_empty(self, engine):
        assert engine.analyze_file("var x = 1; console.log(x)", "unknown", "file.xyz") == []

    def test_unknown_without_file_name(self, engine):
        assert engine.analyze_file("* { color: red !important; }", "text", None) == []

    def test_declared_type_wins_over_extension(self):
        assert resolve_category("css", "widget.js") == "css"

    def test_extension_fallback_when_type_is_generic(self, engine):
        violations = engine.analyze_file("var x = 1;", "text", "utils.ts")
        assert "js/no-var" in rules(violations)

    @pytest.mark.parametrize("file_type,expected", [
        ("typescript", "javascript"),
        (".tsx", "javascript"),
        ("SCSS", "css"),
        ("less", "css"),
        ("liquid", "liquid"),
        ("markdown", "unknown"),
    ])
    def test_category_aliases(self, file_type, expected):
        assert resolve_category(file_type) == expected


class TestJavaScriptRules:

    def test_var_suggests_const(self, engine):
        violations = engine.analyze_file("var x = 1;", "javascript", "app.js")
        no_var = [v for v in violations if v.rule == "js/no-var"]
        assert len(no_var) == 1
        assert "const" in no_var[0].suggested_code
        assert no_var[0].suggested_code == "const x = 1;"
        assert no_var[0].severity == RuleSeverity.WARNING

    def test_console_log_detected(self, engine):
        violations = engine.analyze_file('console.log("debug");', "javascript", "app.js")
        assert rules(violations) == ["js/no-console-log"]

    def test_loose_equality_detected(self, engine):
        violations = engine.analyze_file("if (a == b) {}", "javascript", "app.js")
        eq = [v for v in violations if v.rule == "js/eqeqeq"]
        assert len(eq) == 1
        assert eq[0].suggested_code == "if (a === b) {}"

    def test_loose_inequality_detected(self, engine):
        violations = engine.analyze_file("if (a != b) {}", "javascript", "app.js")
        eq = [v for v in violations if v.rule == "js/eqeqeq"]
        assert eq and eq[0].suggested_code == "if (a !== b) {}"

    @pytest.mark.parametrize("code", ["if (a === b)", "if (a !== b)"])
    def test_strict_equality_not_flagged(self, engine, code):
        assert "js/eqeqeq" not in rules(engine.analyze_file(code, "javascript", "app.js"))

    def test_comment_and_blank_lines_skipped(self, engine):
        content = '// console.log("debug");\n\n   // var y = 2;'
        assert engine.analyze_file(content, "javascript", "app.js") == []

    def test_three_line_scenario(self, engine):
        content = "var x = 1;\nconsole.log(x);\nif (x == 1) {}"
        violations = engine.analyze_file(content, "javascript", "app.js")

        assert rules(violations) == ["js/no-var", "js/no-console-log", "js/eqeqeq"]
        assert [v.line for v in violations] == [1, 2, 3]

    def test_original_code_is_verbatim_line(self, engine):
        content = "function f() {\n    var total = 0;\n}"
        violation = engine.analyze_file(content, "javascript", "app.js")[0]
        assert violation.original_code in content
        assert violation.line == 2
        assert violation.column == 4


class TestCssRules:

    def test_important_stripped_in_suggestion(self, engine):
        violations = engine.analyze_file(".foo { color: red !important; }", "css", "style.css")
        imp = [v for v in violations if v.rule == "css/no-important"]
        assert imp
        assert "!important" not in imp[0].suggested_code
        assert imp[0].suggested_code == ".foo { color: red; }"

    def test_duplicate_property_multiline_block(self, engine):
        css = ".foo {\n  color: red;\n  color: blue;\n}"
        dup = [v for v in engine.analyze_file(css, "css", "style.css") if v.rule == "css/no-duplicate-properties"]
        assert len(dup) == 1
        assert dup[0].line == 3
        # A whole-line removal is anchored on the line above so the replacement is never empty
        assert dup[0].original_code == "  color: red;\n  color: blue;"
        assert dup[0].suggested_code == "  color: red;"

    def test_duplicate_anchor_skips_blank_lines(self, engine):
        css = ".foo {\n  color: red;\n\n  color: blue;\n}"
        dup = [v for v in engine.analyze_file(css, "css", "style.css") if v.rule == "css/no-duplicate-properties"]
        assert dup[0].original_code == "  color: red;\n\n  color: blue;"
        assert dup[0].suggested_code == "  color: red;"

    def test_duplicate_suggestions_are_never_empty(self, engine):
        css = "a {\n  margin: 0;\n  margin: 1px;\n}\nb { padding: 0; padding: 2px; }\n"
        dup = [v for v in engine.analyze_file(css, "css", "style.css") if v.rule == "css/no-duplicate-properties"]
        assert len(dup) == 2
        assert all(v.suggested_code for v in dup)

    def test_duplicate_property_single_line(self, engine):
        css = ".foo { color: red; color: blue; }"
        dup = [v for v in engine.analyze_file(css, "css", "style.css") if v.rule == "css/no-duplicate-properties"]
        assert len(dup) == 1
        assert dup[0].suggested_code == ".foo { color: red; }"

    def test_every_later_duplicate_flagged(self, engine):
        css = ".foo { margin: 0; margin: 1px; margin: 2px; }"
        dup = [v for v in engine.analyze_file(css, "css", "style.css") if v.rule == "css/no-duplicate-properties"]
        assert len(dup) == 2

    def test_same_property_in_different_blocks_is_fine(self, engine):
        css = ".a { color: red; }\n.b { color: red; }"
        assert "css/no-duplicate-properties" not in rules(engine.analyze_file(css, "css", "style.css"))

    def test_different_properties_not_flagged(self, engine):
        css = ".foo { color: red; background: blue; }"
        assert "css/no-duplicate-properties" not in rules(engine.analyze_file(css, "css", "style.css"))

    def test_universal_selector_is_info(self, engine):
        violations = engine.analyze_file("* { margin: 0; }", "css", "style.css")
        universal = [v for v in violations if v.rule == "css/no-universal-selector"]
        assert universal and universal[0].severity == RuleSeverity.INFO

    def test_star_inside_value_not_flagged(self, engine):
        css = ".grid { grid-template-columns: repeat(3, 1fr); width: calc(2 * 10px); }"
        assert "css/no-universal-selector" not in rules(engine.analyze_file(css, "css", "style.css"))

    def test_comment_markers_not_flagged(self, engine):
        css = "/* layout */ .grid { display: grid; }"
        assert "css/no-universal-selector" not in rules(engine.analyze_file(css, "css", "style.css"))

    def test_scan_is_idempotent(self, engine):
        css = ".a { color: red !important; color: blue; }\n* { margin: 0 !important; }"
        first = engine.analyze_file(css, "scss", "style.scss")
        second = engine.analyze_file(css, "scss", "style.scss")
        assert first == second
        assert first


class TestLiquidRules:

    @pytest.mark.parametrize("template", [
        "{{ settings.color | color_to_rgb }}",
        '{{ "#ff0000" | hex_to_rgba }}',
        "{{ settings.bg | color_darken: 20 }}",
    ])
    def test_deprecated_filters(self, engine, template):
        violations = engine.analyze_file(template, "liquid", "theme.liquid")
        assert "liquid/deprecated-filter" in rules(violations)

    def test_deprecation_table_has_css_replacements(self, engine):
        assert len(engine.deprecated_filters) == 9
        violation = engine.analyze_file("{{ c | color_lighten: 10 }}", "liquid", "a.liquid")[0]
        assert "color-mix" in violation.suggested_code

    def test_three_levels_of_nesting_ok(self, engine):
        content = "\n".join([
            "{% if a %}",
            "  {% if b %}",
            "    {% unless c %}",
            "      ok",
            "    {% endunless %}",
            "  {% endif %}",
            "{% endif %}",
        ])
        assert "liquid/deep-nesting" not in rules(engine.analyze_file(content, "liquid", "section.liquid"))

    def test_four_levels_flagged_at_first_excess_line(self, engine):
        content = "\n".join([
            "{% if a %}",
            "  {% if b %}",
            "    {% if c %}",
            "      {%- if d -%}",
            "        deeply nested",
            "      {%- endif -%}",
            "    {% endif %}",
            "  {% endif %}",
            "{% endif %}",
        ])
        nesting = [v for v in engine.analyze_file(content, "liquid", "section.liquid")
                   if v.rule == "liquid/deep-nesting"]
        assert nesting
        assert nesting[0].line == 4

    def test_deprecated_filter_anchored_on_output_tag(self, engine):
        line = '<div style="color: {{ settings.color | color_to_rgb }}">'
        violation = [v for v in engine.analyze_file(line, "liquid", "a.liquid")
                     if v.rule == "liquid/deprecated-filter"][0]
        assert violation.original_code == "{{ settings.color | color_to_rgb }}"

    def test_close_then_open_on_one_line_keeps_depth(self, engine):
        content = "\n".join([
            "{% if a %}",
            "  {% if b %}",
            "    {% if c %}",
            "    {% endif %}{% if d %}",
            "    {% endif %}",
            "  {% endif %}",
            "{% endif %}",
        ])
        assert "liquid/deep-nesting" not in rules(engine.analyze_file(content, "liquid", "a.liquid"))

    def test_sibling_blocks_do_not_accumulate(self, engine):
        content = "\n".join(["{% if a %}x{% endif %}"] * 6)
        assert "liquid/deep-nesting" not in rules(engine.analyze_file(content, "liquid", "a.liquid"))

    def test_missing_alt_is_error(self, engine):
        violations = engine.analyze_file('<img src="banner.png">', "liquid", "section.liquid")
        alt = [v for v in violations if v.rule == "liquid/missing-alt"]
        assert len(alt) == 1
        assert alt[0].severity == RuleSeverity.ERROR
        assert alt[0].suggested_code == '<img alt="" src="banner.png">'

    def test_img_with_alt_not_flagged(self, engine):
        violations = engine.analyze_file('<img src="banner.png" alt="Banner">', "liquid", "section.liquid")
        assert "liquid/missing-alt" not in rules(violations)

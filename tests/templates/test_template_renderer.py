"""Unit tests for the template renderer."""

from datetime import date

import pytest

from reading_questions.questions import QuestionRequest, build_prompt_context
from reading_questions.templates import (
    TemplateRenderer,
    is_truthy,
    load_template,
    render_template,
    to_text,
)


@pytest.fixture
def renderer():
    """Create a renderer."""
    return TemplateRenderer()


class TestVariableSubstitution:
    """Test the scalar substitution pass."""

    def test_basic_rendering(self, renderer):
        """Test basic variable substitution."""
        assert renderer.render("Hello {{name}}", {"name": "Alice"}) == "Hello Alice"

    def test_every_occurrence_replaced(self, renderer):
        """Test that repeated markers are all replaced."""
        result = renderer.render("{{a}}-{{a}}-{{b}}", {"a": "x", "b": "y"})
        assert result == "x-x-y"

    def test_missing_variable_left_literal(self, renderer):
        """Test that keys absent from the context stay as markers."""
        result = renderer.render("Hello {{name}}, age: {{age}}", {"name": "Alice"})
        assert result == "Hello Alice, age: {{age}}"

    def test_whitespace_inside_marker(self, renderer):
        """Test that {{ name }} is a variable and keeps its spelling when missing."""
        assert renderer.render("Hello {{ name }}", {"name": "Alice"}) == "Hello Alice"
        assert renderer.render("Hello {{ name }}", {}) == "Hello {{ name }}"

    def test_numeric_values(self, renderer):
        """Test numbers use their plain decimal form."""
        result = renderer.render("{{count}} questions, {{ratio}}", {"count": 8, "ratio": 2.5})
        assert result == "8 questions, 2.5"

    def test_none_and_bool_values(self, renderer):
        """Test None renders empty and booleans render lowercase."""
        result = renderer.render("[{{none}}] {{yes}} {{no}}", {"none": None, "yes": True, "no": False})
        assert result == "[] true false"

    def test_sequence_value_not_substituted(self, renderer):
        """Test that list values are not written into variable markers."""
        assert renderer.render("{{items}}", {"items": ["a", "b"]}) == "{{items}}"

    def test_substitution_inside_each_body(self, renderer):
        """Test that pass 1 reaches variables inside each blocks."""
        result = renderer.render(
            "{{#each xs}}{{prefix}}{{this}} {{/each}}",
            {"xs": ["a", "b"], "prefix": "-"}
        )
        assert result == "-a -b "

    @pytest.mark.parametrize("template,context,expected", [
        ("{{a}}", {"a": "1"}, "1"),
        ("x{{a}}y{{b}}z", {"a": "1", "b": 2}, "x1y2z"),
        ("{{greeting}}, {{name}} !", {"greeting": "Bonjour", "name": "Marie"}, "Bonjour, Marie !"),
        ("pas de marqueur", {"unused": "v"}, "pas de marqueur"),
    ])
    def test_substitution_totality(self, renderer, template, context, expected):
        """Test that supplying every key leaves no marker behind."""
        result = renderer.render(template, context)
        assert result == expected
        assert "{{" not in result


class TestEachBlocks:
    """Test the repeated-block expansion pass."""

    def test_each_scenario(self, renderer):
        """Test the basic each expansion."""
        template = "{{#each items}}[{{this}}]{{/each}}"
        assert renderer.render(template, {"items": ["a", "b", "c"]}) == "[a][b][c]"

    def test_empty_sequence(self, renderer):
        """Test that an empty sequence renders nothing."""
        template = "{{#each items}}[{{this}}]{{/each}}"
        assert renderer.render(template, {"items": []}) == ""

    @pytest.mark.parametrize("context", [{}, {"items": "abc"}, {"items": 3}, {"items": None}])
    def test_missing_or_non_sequence_key(self, renderer, context):
        """Test that the block renders empty without a sequence to iterate."""
        assert renderer.render("<{{#each items}}[{{this}}]{{/each}}>", context) == "<>"

    def test_tuple_sequence(self, renderer):
        """Test that tuples are iterated like lists."""
        assert renderer.render("{{#each xs}}{{this}}{{/each}}", {"xs": (1, 2, 3)}) == "123"

    def test_surrounding_text_kept(self, renderer):
        """Test that text around the block is untouched and no separator is added."""
        result = renderer.render("A{{#each xs}}-{{this}}{{/each}}B", {"xs": [1, 2]})
        assert result == "A-1-2B"

    @pytest.mark.parametrize("n", [0, 1, 2, 5])
    def test_repetition_count(self, renderer, n):
        """Test that the body appears once per item, in order."""
        items = [f"i{k}" for k in range(n)]
        result = renderer.render("{{#each items}}<{{this}}>{{/each}}", {"items": items})
        assert result.count("<") == n
        assert result == "".join(f"<{item}>" for item in items)

    def test_equality_guard_per_item(self, renderer):
        """Test that an eq block appears only for the matching item."""
        template = '{{#each types}}{{this}}{{#if (eq this "detail")}}!{{/if}};{{/each}}'
        result = renderer.render(template, {"types": ["vocabulary", "detail", "inference"]})
        assert result == "vocabulary;detail!;inference;"

    def test_equality_guards_for_every_item(self, renderer):
        """Test several eq blocks in one body, each matching a different item."""
        template = (
            '{{#each types}}'
            '{{#if (eq this "a")}}A{{/if}}{{#if (eq this "b")}}B{{/if}}{{#if (eq this "c")}}C{{/if}}'
            '{{/each}}'
        )
        assert renderer.render(template, {"types": ["c", "a", "b", "a"]}) == "CABA"

    def test_equality_guard_single_quotes(self, renderer):
        """Test eq literal in single quotes."""
        template = "{{#each xs}}{{#if (eq this 'b')}}yes{{/if}}{{/each}}"
        assert renderer.render(template, {"xs": ["a", "b"]}) == "yes"

    def test_equality_guard_compares_text(self, renderer):
        """Test that items are compared by textual form."""
        template = '{{#each xs}}{{#if (eq this "2")}}two{{/if}}{{/each}}'
        assert renderer.render(template, {"xs": [1, 2, 3]}) == "two"

    def test_equality_guard_outside_each_left_verbatim(self, renderer):
        """Test that eq blocks outside an each are not resolved."""
        template = '{{#if (eq this "x")}}{{name}}{{/if}}'
        assert renderer.render(template, {"name": "N"}) == '{{#if (eq this "x")}}N{{/if}}'

    def test_flag_block_inside_each(self, renderer):
        """Test that flag blocks inside an each are resolved by the flag pass."""
        template = "{{#each xs}}{{this}}{{#if show}}+{{/if}}{{/each}}"
        assert renderer.render(template, {"xs": ["a", "b"], "show": "y"}) == "a+b+"
        assert renderer.render(template, {"xs": ["a", "b"], "show": ""}) == "ab"

    def test_nested_each(self, renderer):
        """Test that a nested each binds its own item."""
        template = "{{#each rows}}<{{#each cols}}{{this}}{{/each}}>{{/each}}"
        assert renderer.render(template, {"rows": [1, 2], "cols": ["x", "y"]}) == "<xy><xy>"

    def test_this_outside_each(self, renderer):
        """Test that {{this}} outside an each is an ordinary missing variable."""
        assert renderer.render("{{this}}", {}) == "{{this}}"


class TestFlagConditionals:
    """Test the flag-conditional pass."""

    def test_conditional_scenario(self, renderer):
        """Test the greeting scenario with the flag off and on."""
        template = "Bonjour {{name}}! {{#if show}}Bienvenue.{{/if}}"
        assert renderer.render(template, {"name": "Marie", "show": ""}) == "Bonjour Marie! "
        assert renderer.render(template, {"name": "Marie", "show": "yes"}) == "Bonjour Marie! Bienvenue."

    def test_absent_flag_removes_block(self, renderer):
        """Test that an absent flag drops the block and its markers."""
        result = renderer.render("a{{#if missing}}b{{/if}}c", {})
        assert result == "ac"

    def test_truthy_flag_unwraps_content(self, renderer):
        """Test that a truthy flag keeps the content without the markers."""
        result = renderer.render("a{{#if f}}b {{name}}{{/if}}c", {"f": "x", "name": "N"})
        assert result == "ab Nc"

    def test_same_flag_used_twice(self, renderer):
        """Test that blocks with the same guard are evaluated independently."""
        template = "{{#if f}}A{{/if}}-{{#if f}}B{{/if}}"
        assert renderer.render(template, {"f": "1"}) == "A-B"
        assert renderer.render(template, {"f": ""}) == "-"

    def test_multiline_content(self, renderer):
        """Test that block content may span lines."""
        template = "start\n{{#if focus}}\nFOCUS: {{focus}}\n{{/if}}\nend"
        assert renderer.render(template, {"focus": "subjonctif"}) == "start\n\nFOCUS: subjonctif\n\nend"
        assert renderer.render(template, {"focus": ""}) == "start\n\nend"

    @pytest.mark.parametrize("value,expected", [
        ("yes", True),
        ("0", True),
        (0, True),
        ("", False),
        (None, False),
        (True, True),
        (False, False),
        ([], False),
        (["x"], True),
    ])
    def test_truthiness(self, value, expected):
        """Test flag truthiness for different value types."""
        assert is_truthy({"flag": value}, "flag") is expected
        assert TemplateRenderer().render("{{#if flag}}on{{/if}}", {"flag": value}) == ("on" if expected else "")

    def test_absent_key_is_falsy(self):
        """Test that a missing key is falsy."""
        assert is_truthy({}, "flag") is False


class TestPassOrdering:
    """Test that passes run once, in order, over structure not text."""

    def test_substituted_value_not_reparsed(self, renderer):
        """Test that a value that looks like a marker stays literal."""
        result = renderer.render("{{name}}", {"name": "{{other}}", "other": "X"})
        assert result == "{{other}}"

    @pytest.mark.parametrize("flag,expected", [
        ("yes", "x"),
        ("", ""),
    ])
    def test_flag_block_in_item_resolved(self, renderer, flag, expected):
        """Test that flag blocks arriving through item text are resolved by the flag pass."""
        result = renderer.render(
            "{{#each xs}}{{this}}{{/each}}",
            {"xs": ["{{#if f}}x{{/if}}"], "f": flag}
        )
        assert result == expected
        assert renderer.render(result, {}) == result

    def test_flag_block_in_item_keeps_other_markers(self, renderer):
        """Test that only flag blocks in item text are structure."""
        result = renderer.render(
            "{{#each xs}}<{{this}}>{{/each}}",
            {"xs": ["{{#if f}}{{name}} {{this}}{{/if}}", "{{#each ys}}y{{/each}}"],
             "f": "1", "name": "N", "ys": ["a"]}
        )
        assert result == "<{{name}} {{this}}><{{#each ys}}y{{/each}}>"

    def test_flag_in_substituted_value_not_reparsed(self, renderer):
        """Test that scalar values are never read as flag blocks."""
        result = renderer.render("{{v}}", {"v": "{{#if f}}x{{/if}}", "f": "1"})
        assert result == "{{#if f}}x{{/if}}"

    def test_rerender_of_output_is_stable(self, renderer):
        """Test that rendering fully resolved output again changes nothing."""
        template = load_template()
        request = QuestionRequest(
            text="Le chat dort sur le canapé. Il fait beau aujourd'hui.",
            question_count=6,
            focus="passé_composé",
        )
        context = build_prompt_context(request, today=date(2025, 1, 15))

        output = renderer.render(template, context)

        assert "{{" not in output
        assert renderer.render(output, {}) == output


class TestMalformedTemplates:
    """Test fallbacks for templates that don't pair up."""

    def test_unclosed_if_left_literal(self, renderer):
        """Test that an opener without a closer is text."""
        assert renderer.render("Hi {{#if f}}there", {"f": "1"}) == "Hi {{#if f}}there"

    def test_unclosed_each_left_literal(self, renderer):
        """Test that an unclosed each is text and its body is kept."""
        assert renderer.render("{{#each xs}}{{this}}", {"xs": ["a"]}) == "{{#each xs}}{{this}}"

    def test_stray_closer_left_literal(self, renderer):
        """Test that a closer without an opener is text."""
        assert renderer.render("a{{/if}}b{{/each}}", {}) == "a{{/if}}b{{/each}}"

    def test_crossing_blocks(self, renderer):
        """Test that an if closed across an each becomes text."""
        template = "{{#each xs}}{{#if f}}{{this}}{{/each}}{{/if}}"
        result = renderer.render(template, {"xs": ["a", "b"], "f": "1"})
        assert result == "{{#if f}}a{{#if f}}b{{/if}}"

    def test_malformed_marker_left_literal(self, renderer):
        """Test that unknown markers are text."""
        template = "{{#unless x}}y{{/unless}} {{ first name }}"
        assert renderer.render(template, {"x": "1"}) == template

    def test_empty_template(self, renderer):
        """Test rendering an empty template."""
        assert renderer.render("", {"a": 1}) == ""


class TestIntrospection:
    """Test variable extraction and syntax validation."""

    def test_extract_variables(self):
        """Test variable extraction from all marker kinds."""
        template = (
            '{{name}} {{#each types}}{{this}}{{#if (eq this "x")}}{{inner}}{{/if}}{{/each}}'
            '{{#if flag}}{{/if}}'
        )
        assert TemplateRenderer.extract_variables(template) == {"name", "types", "inner", "flag"}

    def test_missing_variables(self, renderer):
        """Test that missing keys are reported sorted."""
        missing = renderer.missing_variables("{{b}} {{a}} {{#if c}}{{/if}}", {"a": 1})
        assert missing == ["b", "c"]

    def test_validate_valid_template(self):
        """Test that the bundled template has no syntax issues."""
        assert TemplateRenderer.validate_template_syntax(load_template()) == []

    def test_validate_reports_locations(self):
        """Test that issues carry line and column."""
        issues = TemplateRenderer.validate_template_syntax_detailed("ok\n  {{#if f}}x")
        assert len(issues) == 1
        assert issues[0].issue_type == "unclosed_block"
        assert (issues[0].line, issues[0].column) == (2, 3)

        messages = TemplateRenderer.validate_template_syntax("ok\n  {{#if f}}x")
        assert messages[0].startswith("unclosed_block at line 2, column 3")


class TestConvenienceFunctions:
    """Test module-level helpers."""

    def test_render_template(self):
        """Test the render_template shortcut."""
        assert render_template("{{#each items}}[{{this}}]{{/each}}", {"items": ["a"]}) == "[a]"

    @pytest.mark.parametrize("value,expected", [
        ("abc", "abc"),
        (3, "3"),
        (1.5, "1.5"),
        (2.0, "2.0"),
        (1e16, "10000000000000000"),
        (1e-05, "0.00001"),
        (-2.5e-7, "-0.00000025"),
        (None, ""),
        (True, "true"),
    ])
    def test_to_text(self, value, expected):
        """Test the textual form of values."""
        assert to_text(value) == expected

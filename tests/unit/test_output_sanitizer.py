"""Tests for model output clean-up."""

import pytest

from blogdesk.services.output_sanitizer import (
    SVG_NS,
    clean_icon_name,
    clean_summary,
    clean_svg,
    extract_json_array,
    is_well_formed_svg,
    strip_code_fences,
)

CIRCLE = '<circle cx="12" cy="12" r="10"/>'
SVG = f'<svg xmlns="{SVG_NS}" viewBox="0 0 24 24">{CIRCLE}</svg>'


class TestStripCodeFences:
    def test_removes_language_fence(self) -> None:
        assert strip_code_fences('```json\n["a"]\n```') == '["a"]'

    def test_plain_text_untouched(self) -> None:
        assert strip_code_fences("  hello  ") == "hello"


class TestExtractJsonArray:
    def test_fenced_array(self) -> None:
        assert extract_json_array('```json ["A","B"]```') == ["A", "B"]

    def test_array_inside_prose(self) -> None:
        assert extract_json_array('Sure! Tags: ["React", "Life"] hope it helps') == [
            "React",
            "Life",
        ]

    def test_skips_broken_bracket_before_valid_array(self) -> None:
        assert extract_json_array('[oops ["Go"]') == ["Go"]

    def test_blank_items_dropped(self) -> None:
        assert extract_json_array('["A", " ", ""]') == ["A"]

    @pytest.mark.parametrize("text", ["", "no array here", '{"tags": 1}', "[unclosed"])
    def test_nothing_salvageable(self, text: str) -> None:
        assert extract_json_array(text) == []


class TestCleanIconName:
    ALLOWED = ["Globe", "Code", "BookOpen"]

    def test_exact(self) -> None:
        assert clean_icon_name("Code", self.ALLOWED) == "Code"

    def test_case_and_noise(self) -> None:
        assert clean_icon_name('"bookopen".', self.ALLOWED) == "BookOpen"

    def test_first_word_wins(self) -> None:
        assert clean_icon_name("Globe is the best match", self.ALLOWED) == "Globe"

    def test_outside_allowed_set(self) -> None:
        assert clean_icon_name("Rocket", self.ALLOWED) is None

    def test_empty(self) -> None:
        assert clean_icon_name("``` ```", self.ALLOWED) is None


class TestCleanSvg:
    def test_well_formed_passthrough(self) -> None:
        assert clean_svg(SVG) == SVG

    def test_strips_fences_and_prologue(self) -> None:
        text = f'```svg\n<?xml version="1.0"?>\n<!DOCTYPE svg>\n{SVG}\n```'
        assert clean_svg(text) == SVG

    def test_drops_surrounding_prose(self) -> None:
        assert clean_svg(f"Here is your icon: {SVG} Enjoy!") == SVG

    def test_wraps_bare_shapes(self) -> None:
        result = clean_svg(CIRCLE)
        assert result.startswith("<svg")
        assert 'viewBox="0 0 24 24"' in result
        assert 'stroke="currentColor"' in result
        assert CIRCLE in result
        assert is_well_formed_svg(result)

    def test_malformed_gives_empty(self) -> None:
        assert clean_svg('<svg viewBox="0 0 24 24"><path d="M0 0"></svg>') == ""

    def test_no_svg_gives_empty(self) -> None:
        assert clean_svg("I cannot draw that.") == ""

    def test_non_svg_root_rejected(self) -> None:
        assert is_well_formed_svg("<div></div>") is False


class TestCleanSummary:
    def test_strips_quotes_and_fences(self) -> None:
        assert clean_summary('```\n"一段摘要"\n```') == "一段摘要"

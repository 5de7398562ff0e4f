"""Tests for section extraction."""

import pytest
from pydantic import ValidationError

from docmap_server.mapping.formatting import PDF_RULES, PPTX_RULES, TXT_RULES, lines_to_units
from docmap_server.mapping.models import Section, SectionType, TextUnit
from docmap_server.mapping.sections import extract_sections, locate_unit


def _units(*texts: str) -> list[TextUnit]:
    return [TextUnit(text=t) for t in texts]


class TestExtractSections:
    """Tests for extract_sections."""

    def test_one_section_per_unit_in_order(self):
        """Each unit found verbatim yields a section, in input order."""
        markdown = "First line\n\nSecond line\n\nThird line"
        sections = extract_sections(_units("First line", "Second line", "Third line"), markdown)

        assert [s.original_text for s in sections] == ["First line", "Second line", "Third line"]
        starts = [s.markdown_start for s in sections]
        assert starts == sorted(starts)
        assert len(set(starts)) == len(starts)
        for section in sections:
            assert markdown[section.markdown_start:section.markdown_end] == section.original_text

    def test_duplicate_units_map_to_distinct_offsets(self):
        """Repeated text is matched at successive occurrences, never the same one."""
        markdown = "Intro\n\nBody\n\nIntro"
        sections = extract_sections(_units("Intro", "Body", "Intro"), markdown)

        assert [s.markdown_start for s in sections] == [0, 7, 13]
        assert sections[0].markdown_start != sections[2].markdown_start

    def test_unmatched_unit_is_dropped_without_moving_cursor(self):
        """A unit missing from the Markdown produces nothing and later units still match."""
        markdown = "Alpha Beta"
        sections = extract_sections(_units("Alpha", "Missing", "Beta"), markdown)

        assert [s.original_text for s in sections] == ["Alpha", "Beta"]
        assert sections[1].markdown_start == 6

    def test_empty_units_are_skipped(self):
        """Blank units are skipped but still count for id positions."""
        sections = extract_sections(_units("", "   ", "Text"), "Text")

        assert len(sections) == 1
        assert sections[0].id == "section-2"

    def test_original_text_is_trimmed(self):
        sections = extract_sections(_units("   padded text  "), "padded text")
        assert sections[0].original_text == "padded text"

    def test_ids_use_prefix_and_explicit_index(self):
        units = [TextUnit(text="Sheet A", index=4)]
        sections = extract_sections(units, "Sheet A", id_prefix="sheet")
        assert sections[0].id == "sheet-4"

    def test_search_is_case_sensitive(self):
        assert extract_sections(_units("title"), "Title") == []

    def test_idempotent(self):
        """Two runs over the same input give the same ranges and types."""
        text = "HEADING\nSome text\n- bullet\nSome text"
        markdown = TXT_RULES.to_markdown(text)

        def run():
            return [
                (s.original_text, s.markdown_start, s.markdown_end, s.type)
                for s in extract_sections(lines_to_units(text), markdown, rules=TXT_RULES)
            ]

        assert run() == run()

    def test_no_units(self):
        assert extract_sections([], "anything") == []


class TestTransformedSearchStrings:
    """Units rewritten by the formatter are searched in their rewritten form."""

    def test_txt_line_types(self):
        text = "HEADING ONE\nplain\n1. item\n- bullet\n    code line"
        markdown = TXT_RULES.to_markdown(text)
        sections = extract_sections(
            lines_to_units(text), markdown, rules=TXT_RULES, id_prefix="txt-section"
        )

        assert [s.type for s in sections] == [
            SectionType.HEADING,
            SectionType.PARAGRAPH,
            SectionType.NUMBERED_LIST,
            SectionType.BULLET_LIST,
            SectionType.CODE,
        ]
        assert sections[0].id == "txt-section-0"
        assert markdown[sections[0].markdown_start:sections[0].markdown_end] == "### HEADING ONE"

    def test_heading_prefix_avoids_earlier_plain_match(self):
        """The heading marker anchors the match to the promoted line, not body text."""
        text = "Intro mentions SUMMARY early\nSUMMARY"
        markdown = PDF_RULES.to_markdown(text)
        units = lines_to_units(text)[1:]
        sections = extract_sections(units, markdown, rules=PDF_RULES)

        assert len(sections) == 1
        assert markdown[sections[0].markdown_start:sections[0].markdown_end] == "# SUMMARY"

    def test_bullet_glyph_rewritten(self):
        text = "• First point"
        markdown = PDF_RULES.to_markdown(text)
        sections = extract_sections(lines_to_units(text), markdown, rules=PDF_RULES)

        assert sections[0].original_text == "• First point"
        assert markdown[sections[0].markdown_start:sections[0].markdown_end] == "- First point"
        assert sections[0].type == SectionType.BULLET_LIST

    def test_native_type_wins_over_text_shape(self):
        units = [TextUnit(text="ALL CAPS", type=SectionType.SLIDE_CONTENT)]
        sections = extract_sections(units, PPTX_RULES.to_markdown("ALL CAPS"), rules=PPTX_RULES)

        assert sections[0].type == SectionType.SLIDE_CONTENT
        assert sections[0].markdown_start == 0
        assert sections[0].markdown_end == len("## ALL CAPS")


class TestLocateUnit:
    """Tests for the single-unit step of the fold."""

    def test_match_advances_cursor(self):
        section, cursor = locate_unit(TextUnit(text="Body"), 3, "Intro Body", 0)
        assert section.markdown_start == 6
        assert section.id == "section-3"
        assert cursor == 10

    def test_search_starts_at_cursor(self):
        section, cursor = locate_unit(TextUnit(text="Intro"), 0, "Intro Intro", 1)
        assert section.markdown_start == 6
        assert cursor == 11

    def test_miss_keeps_cursor(self):
        section, cursor = locate_unit(TextUnit(text="Nope"), 0, "Intro", 2)
        assert section is None
        assert cursor == 2


class TestSectionModel:
    """Tests for Section validation."""

    def test_empty_range_rejected(self):
        with pytest.raises(ValidationError):
            Section(
                id="s",
                original_text="x",
                markdown_start=5,
                markdown_end=5,
                type=SectionType.PARAGRAPH,
            )

    def test_section_is_immutable(self):
        section = Section(
            id="s", original_text="x", markdown_start=0, markdown_end=1, type="paragraph"
        )
        with pytest.raises(ValidationError):
            section.markdown_start = 3

    def test_serializes_camel_case(self):
        section = Section(
            id="s", original_text="x", markdown_start=0, markdown_end=1, type="paragraph"
        )
        data = section.model_dump(by_alias=True, mode="json")
        assert data == {
            "id": "s",
            "originalText": "x",
            "markdownStart": 0,
            "markdownEnd": 1,
            "type": "paragraph",
        }

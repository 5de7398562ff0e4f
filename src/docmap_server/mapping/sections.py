"""Section extraction: anchor source text units to ranges of the Markdown output."""

from collections.abc import Iterable

from ..logger import logger
from .formatting import MarkdownRules
from .models import Section, SectionType, TextUnit


def search_string_for(unit: TextUnit, rules: MarkdownRules | None) -> str:
    """Return the string a unit is expected to appear as in the Markdown."""
    if rules is None:
        return unit.text.strip()
    return rules.search_string(unit.text)


def classify_unit(unit: TextUnit, rules: MarkdownRules | None) -> SectionType:
    """Use the decoder's native tag when present, otherwise the text shape."""
    if unit.type is not None:
        return unit.type
    if rules is None:
        return SectionType.PARAGRAPH
    return rules.classify(unit.text)


def locate_unit(
    unit: TextUnit,
    position: int,
    markdown: str,
    cursor: int,
    rules: MarkdownRules | None = None,
    id_prefix: str = "section",
) -> tuple[Section | None, int]:
    """Match one unit against the Markdown at or after ``cursor``.

    Args:
        unit: The source text unit.
        position: Index of the unit in the source sequence, used for its id.
        markdown: The generated Markdown.
        cursor: Offset from which the search starts.
        rules: Formatter rules for search strings and classification.
        id_prefix: Prefix for the section id.

    Returns:
        The emitted section (or None when the unit is empty or not found) and
        the cursor for the next unit. The cursor only moves forward, and only
        on a match.
    """
    original_text = unit.text.strip()
    if not original_text:
        return None, cursor

    needle = search_string_for(unit, rules)
    match = markdown.find(needle, cursor)
    if match == -1:
        return None, cursor

    index = unit.index if unit.index is not None else position
    section = Section(
        id=f"{id_prefix}-{index}",
        original_text=original_text,
        markdown_start=match,
        markdown_end=match + len(needle),
        type=classify_unit(unit, rules),
    )
    return section, match + len(needle)


def extract_sections(
    units: Iterable[TextUnit],
    markdown: str,
    rules: MarkdownRules | None = None,
    id_prefix: str = "section",
) -> list[Section]:
    """Build the ordered section list for a converted document.

    Units are folded left to right with the search cursor as the carried
    state, so repeated text maps to successive occurrences. Units that
    cannot be found are dropped.
    """
    sections: list[Section] = []
    cursor = 0
    missed = 0

    for position, unit in enumerate(units):
        section, cursor = locate_unit(unit, position, markdown, cursor, rules, id_prefix)
        if section is not None:
            sections.append(section)
        elif unit.text.strip():
            missed += 1

    logger.debug(
        "sections extracted",
        sections=len(sections),
        unmatched_units=missed,
        markdown_length=len(markdown),
    )
    return sections

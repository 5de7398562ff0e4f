"""Heuristic text-to-Markdown formatters and the matching classifiers.

Each format has a ``MarkdownRules`` instance. The same rules that decide
whether a line gets a heading or bullet marker are used to classify the
line and to predict how it will read in the Markdown output, so that the
section extractor searches for the transformed text.
"""

import re
from dataclasses import dataclass

from .models import SectionType, TextUnit

_NUMBERED_PATTERN = re.compile(r"^\d+\.\s+")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_SETEXT_H1 = re.compile(r"^(.+)\n=+$", re.MULTILINE)
_SETEXT_H2 = re.compile(r"^(.+)\n-+$", re.MULTILINE)


@dataclass(frozen=True)
class MarkdownRules:
    """Line-level formatting rules for one source format.

    Attributes:
        name: Format name, used in log fields.
        heading_pattern: Matches a whole line that is promoted to a heading.
            Group 1 is the heading text.
        heading_marker: Prefix written in front of promoted headings.
        bullet_glyphs: Characters that start a bullet line.
        setext: Whether underlined (``===`` / ``---``) headings are converted.
    """

    name: str
    heading_pattern: str
    heading_marker: str
    bullet_glyphs: str = "•·▪▫-"
    setext: bool = False

    @property
    def _heading_re(self) -> re.Pattern:
        return re.compile(self.heading_pattern, re.MULTILINE)

    @property
    def _bullet_re(self) -> re.Pattern:
        return re.compile(rf"^[{re.escape(self.bullet_glyphs)}][ \t]+(.+)$", re.MULTILINE)

    def is_heading(self, line: str) -> bool:
        return self._heading_re.fullmatch(line.rstrip("\r")) is not None

    def is_bullet(self, line: str) -> bool:
        return self._bullet_re.fullmatch(line.rstrip("\r")) is not None

    def to_markdown(self, text: str) -> str:
        """Convert raw text to Markdown."""
        markdown = text.replace("\r\n", "\n")
        if self.setext:
            markdown = _SETEXT_H1.sub(r"# \1", markdown)
            markdown = _SETEXT_H2.sub(r"## \1", markdown)
        markdown = self._heading_re.sub(lambda m: self.heading_marker + m.group(1), markdown)
        markdown = self._bullet_re.sub(r"- \1", markdown)
        markdown = _EXCESS_NEWLINES.sub("\n\n", markdown)
        return markdown.strip()

    def search_string(self, line: str) -> str:
        """Return the text a source line is expected to read as in the Markdown."""
        stripped = line.strip()
        if self.is_heading(line):
            return self.heading_marker + stripped
        if self.is_bullet(line):
            match = self._bullet_re.fullmatch(line.rstrip("\r"))
            return "- " + match.group(1).strip()
        return stripped

    def classify(self, line: str) -> SectionType:
        """Tag a source line by its shape.

        Code detection looks at the untrimmed line; the other rules look at
        the line as the formatter sees it.
        """
        stripped = line.strip()
        if self.is_heading(line):
            return SectionType.HEADING
        if _NUMBERED_PATTERN.match(stripped):
            return SectionType.NUMBERED_LIST
        if self._bullet_re.fullmatch(stripped):
            return SectionType.BULLET_LIST
        if line.startswith("    ") or line.startswith("\t"):
            return SectionType.CODE
        return SectionType.PARAGRAPH


PDF_RULES = MarkdownRules(
    name="pdf",
    heading_pattern=r"^([A-Z][A-Z \t]+)$",
    heading_marker="# ",
)

PPTX_RULES = MarkdownRules(
    name="pptx",
    heading_pattern=r"^([A-Z][A-Z \t]+)$",
    heading_marker="## ",
)

TXT_RULES = MarkdownRules(
    name="txt",
    heading_pattern=r"^([A-Z][A-Z \t]{2,})$",
    heading_marker="### ",
    bullet_glyphs="•·▪▫*-",
    setext=True,
)

# Every sheet name is written as a level-one header
SHEET_RULES = MarkdownRules(
    name="xlsx",
    heading_pattern=r"^(.+)$",
    heading_marker="# ",
)


def lines_to_units(text: str, unit_type: SectionType | None = None) -> list[TextUnit]:
    """Split raw text into one unit per line, keeping empty lines for indexing."""
    return [
        TextUnit(text=line, type=unit_type)
        for line in text.replace("\r\n", "\n").split("\n")
    ]


def markdown_table(rows: list[list[str]]) -> str:
    """Render rows as a GFM table; the first row is the header."""
    if not rows:
        return ""

    headers = rows[0]
    width = len(headers)

    lines = ["| " + " | ".join(_cell(h) for h in headers) + " |"]
    lines.append("| " + " | ".join(["---"] * width) + " |")
    for row in rows[1:]:
        padded = list(row[:width]) + [""] * (width - len(row))
        lines.append("| " + " | ".join(_cell(c) for c in padded) + " |")

    return "\n".join(lines) + "\n"


def _cell(value) -> str:
    if value is None:
        return ""
    return str(value).replace("\n", " ").replace("|", "\\|")

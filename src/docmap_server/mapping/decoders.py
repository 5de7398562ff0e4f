"""Format decoders: turn an uploaded file into text units and Markdown."""

from abc import ABC, abstractmethod
from pathlib import Path

import fitz  # PyMuPDF
import mammoth
from bs4 import BeautifulSoup
from markdownify import ATX, markdownify
from openpyxl import load_workbook
from pptx import Presentation

from ..logger import logger
from .errors import DecodeFailureError, UnsupportedFormatError
from .formatting import (
    PDF_RULES,
    PPTX_RULES,
    SHEET_RULES,
    TXT_RULES,
    MarkdownRules,
    lines_to_units,
    markdown_table,
)
from .models import DecodedDocument, Section, SectionType, TextUnit
from .sections import extract_sections

_DOCX_BLOCK_TYPES = {
    "p": SectionType.PARAGRAPH,
    "h1": SectionType.H1,
    "h2": SectionType.H2,
    "h3": SectionType.H3,
    "h4": SectionType.H4,
    "h5": SectionType.H5,
    "h6": SectionType.H6,
}


class Decoder(ABC):
    """Base class for per-format decoders.

    Subclasses set ``format_name``, ``extensions``, ``id_prefix`` and
    ``rules`` and implement ``_decode``. Library errors raised inside
    ``_decode`` surface as ``DecodeFailureError``.
    """

    format_name: str = ""
    extensions: frozenset[str] = frozenset()
    id_prefix: str = "section"
    rules: MarkdownRules | None = None

    def decode(self, file_path: str | Path) -> DecodedDocument:
        """Decode a file.

        Raises:
            FileNotFoundError: If the file does not exist.
            DecodeFailureError: If the format library cannot parse the file.
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        try:
            decoded = self._decode(file_path)
        except DecodeFailureError:
            raise
        except Exception as e:
            logger.exception(
                "decode failed",
                format=self.format_name,
                file_path=str(file_path),
                error=str(e),
            )
            raise DecodeFailureError(self.format_name, str(e)) from e

        logger.info(
            "document decoded",
            format=self.format_name,
            units=len(decoded.units),
            markdown_length=len(decoded.markdown),
        )
        return decoded

    def extract_sections(self, decoded: DecodedDocument) -> list[Section]:
        return extract_sections(
            decoded.units, decoded.markdown, rules=self.rules, id_prefix=self.id_prefix
        )

    @abstractmethod
    def _decode(self, file_path: Path) -> DecodedDocument:
        """Format-specific decoding."""


class DocxDecoder(Decoder):
    """Word documents via mammoth (DOCX to HTML) and markdownify (HTML to Markdown)."""

    format_name = "DOCX"
    extensions = frozenset({".docx", ".doc"})
    id_prefix = "section"

    def _decode(self, file_path: Path) -> DecodedDocument:
        with open(file_path, "rb") as f:
            result = mammoth.convert_to_html(f)
        html = result.value

        markdown = markdownify(
            html,
            heading_style=ATX,
            bullets="-",
            escape_underscores=False,
            escape_asterisks=False,
            escape_misc=False,
        ).strip()

        soup = BeautifulSoup(html, "html.parser")
        units = [
            TextUnit(text=element.get_text(), type=_DOCX_BLOCK_TYPES[element.name])
            for element in soup.find_all(list(_DOCX_BLOCK_TYPES))
        ]

        return DecodedDocument(
            format=self.format_name,
            units=units,
            markdown=markdown,
            extra={"warnings": [m.message for m in result.messages]},
        )


class PdfDecoder(Decoder):
    """PDF text extraction with PyMuPDF, one unit per text line."""

    format_name = "PDF"
    extensions = frozenset({".pdf"})
    id_prefix = "pdf-section"
    rules = PDF_RULES

    def _decode(self, file_path: Path) -> DecodedDocument:
        doc = fitz.open(file_path)
        try:
            page_count = doc.page_count
            text = "\n\n".join(page.get_text("text") for page in doc)
        finally:
            doc.close()

        return DecodedDocument(
            format=self.format_name,
            units=lines_to_units(text),
            markdown=self.rules.to_markdown(text),
            extra={"page_count": page_count},
        )


class XlsxDecoder(Decoder):
    """Spreadsheets via openpyxl: a header and a table per sheet."""

    format_name = "Excel"
    extensions = frozenset({".xlsx", ".xls"})
    id_prefix = "sheet"
    rules = SHEET_RULES

    def _decode(self, file_path: Path) -> DecodedDocument:
        wb = load_workbook(file_path, read_only=True, data_only=True)
        try:
            parts = []
            units = []
            for sheet_index, sheet_name in enumerate(wb.sheetnames):
                ws = wb[sheet_name]
                # Chart sheets have no cells
                if not hasattr(ws, "iter_rows"):
                    rows = []
                else:
                    rows = [
                        ["" if cell is None else str(cell) for cell in row]
                        for row in ws.iter_rows(values_only=True)
                        if any(cell is not None for cell in row)
                    ]

                parts.append(f"# {sheet_name}\n\n")
                if rows:
                    parts.append(markdown_table(rows) + "\n\n")
                    units.append(
                        TextUnit(
                            text=sheet_name,
                            type=SectionType.SHEET_HEADER,
                            index=sheet_index,
                        )
                    )
            sheet_count = len(wb.sheetnames)
        finally:
            wb.close()

        return DecodedDocument(
            format=self.format_name,
            units=units,
            markdown="".join(parts).strip(),
            extra={"sheet_count": sheet_count},
        )


class PptxDecoder(Decoder):
    """Slide decks via python-pptx, one unit per text line in slide order."""

    format_name = "PowerPoint"
    extensions = frozenset({".pptx", ".ppt"})
    id_prefix = "pptx-section"
    rules = PPTX_RULES

    def _decode(self, file_path: Path) -> DecodedDocument:
        presentation = Presentation(str(file_path))

        lines: list[str] = []
        for slide in presentation.slides:
            if lines:
                lines.append("")
            for shape in slide.shapes:
                lines.extend(_shape_lines(shape))

        text = "\n".join(lines)
        slide_count = len(presentation.slides)

        if not text.strip():
            return DecodedDocument(
                format=self.format_name,
                units=[TextUnit(text=file_path.name, type=SectionType.FALLBACK)],
                markdown=_pptx_fallback_markdown(file_path.name),
                extra={"slide_count": slide_count, "fallback": True},
            )

        return DecodedDocument(
            format=self.format_name,
            units=lines_to_units(text, SectionType.SLIDE_CONTENT),
            markdown=self.rules.to_markdown(text),
            extra={"slide_count": slide_count},
        )

    def extract_sections(self, decoded: DecodedDocument) -> list[Section]:
        if not decoded.extra.get("fallback"):
            return super().extract_sections(decoded)
        return [
            Section(
                id="pptx-fallback",
                original_text=decoded.units[0].text,
                markdown_start=0,
                markdown_end=len(decoded.markdown),
                type=SectionType.FALLBACK,
            )
        ]


class TxtDecoder(Decoder):
    """Plain text, one unit per line."""

    format_name = "Text file"
    extensions = frozenset({".txt"})
    id_prefix = "txt-section"
    rules = TXT_RULES

    def _decode(self, file_path: Path) -> DecodedDocument:
        text = file_path.read_text(encoding="utf-8", errors="replace").replace("\r\n", "\n")
        return DecodedDocument(
            format=self.format_name,
            units=lines_to_units(text),
            markdown=self.rules.to_markdown(text),
        )


def _shape_lines(shape) -> list[str]:
    lines = []
    if shape.has_text_frame:
        for paragraph in shape.text_frame.paragraphs:
            lines.append("".join(run.text for run in paragraph.runs))
    if shape.has_table:
        for row in shape.table.rows:
            lines.append(" ".join(cell.text.strip() for cell in row.cells))
    return lines


def _pptx_fallback_markdown(file_name: str) -> str:
    return (
        "# PowerPoint Presentation\n\n"
        f"*File: {file_name}*\n\n"
        "**Note:** The presentation contains no extractable text."
    )


DECODERS: tuple[Decoder, ...] = (
    DocxDecoder(),
    PdfDecoder(),
    XlsxDecoder(),
    PptxDecoder(),
    TxtDecoder(),
)


def decoder_for(extension: str) -> Decoder:
    """Return the decoder registered for a file extension.

    Raises:
        UnsupportedFormatError: If no decoder handles the extension.
    """
    extension = extension.lower()
    for decoder in DECODERS:
        if extension in decoder.extensions:
            return decoder
    raise UnsupportedFormatError(extension)

from .models import (
    BoundingBox,
    ConvertedDocument,
    DecodedDocument,
    Highlight,
    ImageSize,
    OcrToken,
    Section,
    SectionType,
    TextUnit,
)
from .errors import (
    DecodeFailureError,
    FileTooLargeError,
    OcrError,
    UnsupportedFormatError,
)
from .formatting import (
    PDF_RULES,
    PPTX_RULES,
    SHEET_RULES,
    TXT_RULES,
    MarkdownRules,
)
from .sections import extract_sections, locate_unit
from .decoders import (
    Decoder,
    DocxDecoder,
    PdfDecoder,
    PptxDecoder,
    TxtDecoder,
    XlsxDecoder,
    decoder_for,
)
from .rasterizer import rasterize, store_preview
from .ocr import image_size, recognize
from .highlights import compute_highlights, fit_display_size, highlight_at
from .interaction import HoverState, find_section_for_text
from .session import DocumentSession
from .pipeline import check_allowed, convert_document

__all__ = [
    # Models
    "BoundingBox",
    "ConvertedDocument",
    "DecodedDocument",
    "Highlight",
    "ImageSize",
    "OcrToken",
    "Section",
    "SectionType",
    "TextUnit",
    # Errors
    "DecodeFailureError",
    "FileTooLargeError",
    "OcrError",
    "UnsupportedFormatError",
    # Formatting
    "MarkdownRules",
    "PDF_RULES",
    "PPTX_RULES",
    "SHEET_RULES",
    "TXT_RULES",
    # Section extraction
    "extract_sections",
    "locate_unit",
    # Decoders
    "Decoder",
    "DocxDecoder",
    "PdfDecoder",
    "PptxDecoder",
    "TxtDecoder",
    "XlsxDecoder",
    "decoder_for",
    # Preview and OCR
    "rasterize",
    "store_preview",
    "image_size",
    "recognize",
    # Highlights and interaction
    "compute_highlights",
    "fit_display_size",
    "highlight_at",
    "HoverState",
    "find_section_for_text",
    "DocumentSession",
    # Pipeline
    "check_allowed",
    "convert_document",
]

"""Data contract shared by the section extractor, the highlight mapper and the API.

Attributes are snake_case in Python and camelCase on the wire.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SectionType(str, Enum):
    """Structural role of a section in the source document."""

    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    H4 = "h4"
    H5 = "h5"
    H6 = "h6"
    HEADING = "heading"
    PARAGRAPH = "paragraph"
    NUMBERED_LIST = "numbered-list"
    BULLET_LIST = "bullet-list"
    CODE = "code"
    SHEET_HEADER = "sheet-header"
    SLIDE_CONTENT = "slide-content"
    FALLBACK = "fallback"


class TextUnit(WireModel):
    """One chunk of source text in reading order.

    ``type`` is set by decoders that know the structure natively (DOCX tags,
    sheets, slides); when None the extractor classifies by text shape.
    ``index`` overrides the position used to build the section id.
    """

    text: str
    type: SectionType | None = None
    index: int | None = None


class Section(WireModel):
    """Links a literal source text unit to a half-open range of the Markdown."""

    model_config = ConfigDict(frozen=True)

    id: str
    original_text: str = Field(min_length=1)
    markdown_start: int = Field(ge=0)
    markdown_end: int
    type: SectionType

    @model_validator(mode="after")
    def _check_range(self) -> "Section":
        if self.markdown_end <= self.markdown_start:
            raise ValueError("markdown_end must be greater than markdown_start")
        return self


class BoundingBox(BaseModel):
    """Pixel rectangle in source-image space."""

    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0


class OcrToken(WireModel):
    """A word recognized in a preview image."""

    text: str
    bbox: BoundingBox
    confidence: float | None = None


class ImageSize(WireModel):
    width: float = Field(gt=0)
    height: float = Field(gt=0)


class Highlight(WireModel):
    """Display-space rectangle tying a region of the preview to a section."""

    id: str
    section_id: str
    x: float
    y: float
    width: float
    height: float
    text: str
    original_text: str = ""

    def contains(self, x: float, y: float) -> bool:
        """Return True if the point lies inside the rectangle, edges included."""
        return (
            self.x <= x <= self.x + self.width
            and self.y <= y <= self.y + self.height
        )


class DecodedDocument(BaseModel):
    """Output of a format decoder."""

    format: str
    units: list[TextUnit]
    markdown: str
    extra: dict[str, Any] = Field(default_factory=dict)


class ConvertedDocument(BaseModel):
    """A fully converted upload: Markdown, sections and an optional preview."""

    filename: str
    file_type: str
    markdown: str
    sections: list[Section]
    image: bytes | None = Field(default=None, exclude=True)
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def has_preview(self) -> bool:
        return self.image is not None

"""Map sections onto OCR word boxes and scale them into display space."""

import re
from collections.abc import Sequence

from .models import BoundingBox, Highlight, ImageSize, OcrToken, Section

# Words this short match too many OCR fragments to be useful
MIN_WORD_LENGTH = 3

_NON_WORD = re.compile(r"[^\w]")


def clean_word(text: str) -> str:
    """Lowercase a word and strip non-word characters."""
    return _NON_WORD.sub("", text.lower())


def section_words(text: str) -> list[str]:
    """Return the cleaned words of a section that are long enough to match."""
    words = (clean_word(w) for w in text.split())
    return [w for w in words if len(w) >= MIN_WORD_LENGTH]


def scale_factors(source: ImageSize, display: ImageSize) -> tuple[float, float]:
    """Return the (x, y) factors mapping source-image pixels to display pixels."""
    return display.width / source.width, display.height / source.height


def scale_box(bbox: BoundingBox, scale_x: float, scale_y: float) -> tuple[float, float, float, float]:
    """Transform a source-space box into a display-space (x, y, width, height)."""
    return (
        bbox.x0 * scale_x,
        bbox.y0 * scale_y,
        bbox.width * scale_x,
        bbox.height * scale_y,
    )


def match_tokens(words: Sequence[str], cleaned_tokens: Sequence[str]) -> list[int]:
    """Find the first OCR token for each word by containment in either direction.

    Args:
        words: Cleaned section words.
        cleaned_tokens: Cleaned OCR token texts, aligned with the token list.

    Returns:
        Indices of matched tokens in first-match order, without repeats.
    """
    matched: list[int] = []
    for word in words:
        for i, token in enumerate(cleaned_tokens):
            if not token:
                continue
            if token in word or word in token:
                if i not in matched:
                    matched.append(i)
                break
    return matched


def compute_highlights(
    sections: Sequence[Section],
    tokens: Sequence[OcrToken],
    source_size: ImageSize,
    display_size: ImageSize,
) -> list[Highlight]:
    """Produce display-space highlights for every section found in the OCR output.

    Pure function of its inputs; sections without matching words contribute
    nothing.
    """
    if not sections or not tokens:
        return []

    scale_x, scale_y = scale_factors(source_size, display_size)
    cleaned_tokens = [clean_word(t.text) for t in tokens]
    highlights: list[Highlight] = []

    for section in sections:
        matched = match_tokens(section_words(section.original_text), cleaned_tokens)
        for k, token_index in enumerate(matched):
            token = tokens[token_index]
            x, y, width, height = scale_box(token.bbox, scale_x, scale_y)
            highlights.append(
                Highlight(
                    id=f"{section.id}-{k}",
                    section_id=section.id,
                    x=x,
                    y=y,
                    width=width,
                    height=height,
                    text=token.text,
                    original_text=section.original_text,
                )
            )

    return highlights


def highlight_at(highlights: Sequence[Highlight], x: float, y: float) -> Highlight | None:
    """Return the first highlight containing the display-space point."""
    for highlight in highlights:
        if highlight.contains(x, y):
            return highlight
    return None


def fit_display_size(
    source: ImageSize, max_width: float = 600, max_height: float = 800
) -> ImageSize:
    """Fit an image into the canvas bounds, keeping its aspect ratio."""
    aspect = source.height / source.width
    width = min(source.width, max_width)
    height = width * aspect
    if height > max_height:
        height = max_height
        width = height / aspect
    return ImageSize(width=width, height=height)

"""OCR of preview images into positioned word tokens."""

import io

import pytesseract
from PIL import Image

from ..logger import logger
from .errors import OcrError
from .models import BoundingBox, ImageSize, OcrToken


def image_size(image_bytes: bytes) -> ImageSize:
    """Read the pixel dimensions of an encoded image."""
    with Image.open(io.BytesIO(image_bytes)) as img:
        width, height = img.size
    return ImageSize(width=width, height=height)


def recognize(image_bytes: bytes, lang: str = "eng") -> list[OcrToken]:
    """Run Tesseract on an image and return its words with bounding boxes.

    Args:
        image_bytes: Encoded image (PNG, JPEG, ...).
        lang: Tesseract language code.

    Returns:
        One token per recognized word, in the engine's reading order, with
        boxes in the image's native pixel space.

    Raises:
        OcrError: If the image cannot be opened or the engine fails.
    """
    try:
        with Image.open(io.BytesIO(image_bytes)) as img:
            img.load()
            data = pytesseract.image_to_data(
                img, lang=lang, output_type=pytesseract.Output.DICT
            )
    except Exception as e:
        raise OcrError(f"OCR failed: {e}") from e

    tokens = []
    for i, text in enumerate(data.get("text", [])):
        text = (text or "").strip()
        if not text:
            continue
        left = float(data["left"][i])
        top = float(data["top"][i])
        tokens.append(
            OcrToken(
                text=text,
                bbox=BoundingBox(
                    x0=left,
                    y0=top,
                    x1=left + float(data["width"][i]),
                    y1=top + float(data["height"][i]),
                ),
                confidence=_confidence(data.get("conf", []), i),
            )
        )

    logger.info("ocr complete", words=len(tokens), lang=lang)
    return tokens


def _confidence(values: list, i: int) -> float | None:
    if i >= len(values):
        return None
    try:
        conf = float(values[i])
    except (TypeError, ValueError):
        return None
    return conf if conf >= 0 else None

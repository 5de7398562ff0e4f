"""First-page preview images for converted documents."""

import io
import textwrap
import time
from pathlib import Path

import fitz  # PyMuPDF
from PIL import Image, ImageDraw, ImageFont

from ..logger import logger

TEXT_CANVAS_SIZE = (800, 1200)
TEXT_PADDING = 20
TEXT_PREVIEW_CHARS = 5000


def rasterize(file_path: str | Path, file_type: str, dpi: int = 150) -> bytes | None:
    """Render the first page of a document to PNG bytes.

    Returns None when the format has no preview support or rendering fails;
    a missing preview never fails the conversion.
    """
    file_path = Path(file_path)
    try:
        if file_type == ".pdf":
            return _rasterize_pdf(file_path, dpi)
        if file_type == ".txt":
            return _rasterize_text(file_path)
    except Exception as e:
        logger.warn(
            "preview rendering failed",
            file_path=str(file_path),
            file_type=file_type,
            error=str(e),
        )
        return None

    logger.debug("no preview support for format", file_type=file_type)
    return None


def _rasterize_pdf(file_path: Path, dpi: int) -> bytes | None:
    doc = fitz.open(file_path)
    try:
        if doc.page_count == 0:
            return None
        mat = fitz.Matrix(dpi / 72, dpi / 72)
        pix = doc[0].get_pixmap(matrix=mat)
        return pix.tobytes("png")
    finally:
        doc.close()


def _rasterize_text(file_path: Path) -> bytes:
    content = file_path.read_text(encoding="utf-8", errors="replace")
    return render_text_image(content)


def render_text_image(content: str) -> bytes:
    """Draw the start of a text file on a white page, monospace-style."""
    width, height = TEXT_CANVAS_SIZE
    if len(content) > TEXT_PREVIEW_CHARS:
        content = content[:TEXT_PREVIEW_CHARS] + "..."

    image = Image.new("RGB", TEXT_CANVAS_SIZE, "white")
    draw = ImageDraw.Draw(image)
    font = ImageFont.load_default()

    char_width = max(draw.textlength("M", font=font), 1)
    left, top, right, bottom = font.getbbox("Ay")
    line_height = (bottom - top) + 4
    columns = max(int((width - 2 * TEXT_PADDING) // char_width), 1)

    y = TEXT_PADDING
    for raw_line in content.replace("\r\n", "\n").split("\n"):
        for line in textwrap.wrap(raw_line, width=columns, replace_whitespace=False) or [""]:
            if y + line_height > height - TEXT_PADDING:
                break
            draw.text((TEXT_PADDING, y), line, fill="black", font=font)
            y += line_height

    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def store_preview(image_bytes: bytes, original_name: str, storage_dir: Path) -> str:
    """Write a preview under ``storage_dir`` and return its file name."""
    storage_dir.mkdir(parents=True, exist_ok=True)
    stem = Path(original_name).stem
    safe_stem = "".join(c if c.isalnum() or c in "-_" else "_" for c in stem) or "document"
    name = f"{int(time.time() * 1000)}-{safe_stem}.png"
    (storage_dir / name).write_bytes(image_bytes)
    return name

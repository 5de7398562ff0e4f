"""Conversion orchestration: decode and rasterize an upload side by side."""

import time
from concurrent.futures import ThreadPoolExecutor
from contextvars import copy_context
from pathlib import Path

from ..config import ALLOWED_EXTENSIONS
from ..logger import log_context, logger
from .decoders import decoder_for
from .errors import UnsupportedFormatError
from .models import ConvertedDocument
from .rasterizer import rasterize


def file_type_of(file_name: str) -> str:
    """Return the lowercased extension of a file name, including the dot."""
    return Path(file_name).suffix.lower()


def check_allowed(file_name: str, allowed: frozenset[str] = ALLOWED_EXTENSIONS) -> str:
    """Return the file type, or raise UnsupportedFormatError before any decoding."""
    file_type = file_type_of(file_name)
    if file_type not in allowed:
        raise UnsupportedFormatError(file_type)
    return file_type


def convert_document(
    file_path: str | Path,
    original_filename: str | None = None,
    raster_dpi: int = 150,
    allowed: frozenset[str] = ALLOWED_EXTENSIONS,
) -> ConvertedDocument:
    """Convert an uploaded file to Markdown, sections and an optional preview.

    Decoding and rasterization are independent and run concurrently; a
    rasterization failure leaves the preview empty while a decode failure
    aborts the conversion.

    Args:
        file_path: Path to the stored upload.
        original_filename: Name the user uploaded; defaults to the path's name.
        raster_dpi: Resolution for PDF previews.
        allowed: Extension allow-list.

    Returns:
        ConvertedDocument with Markdown, sections and preview bytes (or None).

    Raises:
        UnsupportedFormatError: If the extension is not allowed.
        DecodeFailureError: If the format library cannot parse the file.
    """
    file_path = Path(file_path)
    file_name = original_filename or file_path.name
    file_type = check_allowed(file_name, allowed)
    decoder = decoder_for(file_type)

    with log_context(file_name=file_name, file_type=file_type):
        start = time.perf_counter()

        executor = ThreadPoolExecutor(max_workers=2)
        try:
            image_future = executor.submit(
                copy_context().run, rasterize, file_path, file_type, raster_dpi
            )
            decode_future = executor.submit(copy_context().run, decoder.decode, file_path)

            decoded = decode_future.result()
            try:
                image = image_future.result()
            except Exception as e:
                logger.warn("preview unavailable", error=str(e))
                image = None
        finally:
            # A decode failure returns without waiting on the render. The
            # caller may delete the upload under it; rasterize turns that
            # into a missing preview.
            executor.shutdown(wait=False, cancel_futures=True)

        sections = decoder.extract_sections(decoded)

        logger.info(
            "document converted",
            sections=len(sections),
            has_preview=image is not None,
            duration_ms=round((time.perf_counter() - start) * 1000, 2),
        )

    return ConvertedDocument(
        filename=file_name,
        file_type=file_type,
        markdown=decoded.markdown,
        sections=sections,
        image=image,
        extra=decoded.extra,
    )

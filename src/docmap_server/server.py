"""FastAPI REST API for document conversion and highlight mapping."""

import shutil
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel, Field

from .config import Settings
from .logger import logger
from .mapping import (
    DecodeFailureError,
    FileTooLargeError,
    Highlight,
    ImageSize,
    OcrError,
    OcrToken,
    Section,
    UnsupportedFormatError,
    check_allowed,
    compute_highlights,
    convert_document,
    image_size,
    recognize,
    store_preview,
)
from .mapping.models import WireModel

settings = Settings.from_env()


# --- Request/Response Models ---


class UploadResponse(WireModel):
    success: bool = True
    filename: str
    markdown: str
    sections: list[Section]
    file_type: str
    image_url: str | None = None
    extra: dict[str, Any] = Field(default_factory=dict)


class OcrResponse(WireModel):
    tokens: list[OcrToken]
    width: float
    height: float


class HighlightRequest(WireModel):
    sections: list[Section]
    tokens: list[OcrToken]
    source_image_size: ImageSize
    display_size: ImageSize


class HighlightResponse(WireModel):
    highlights: list[Highlight]


class HealthResponse(BaseModel):
    status: str


class ErrorResponse(BaseModel):
    code: str
    message: str
    details: str | None = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    logger.set_level(settings.log_level)
    logger.info("starting server", image_storage_dir=str(settings.image_storage_dir))
    settings.image_storage_dir.mkdir(parents=True, exist_ok=True)

    yield

    logger.info("server shutdown")


app = FastAPI(
    title="Document Markdown API",
    description="Converts office documents to Markdown and maps sections onto page previews",
    version="0.1.0",
    lifespan=lifespan,
)


# --- Exception Handlers ---


@app.exception_handler(UnsupportedFormatError)
async def unsupported_format_handler(request, exc: UnsupportedFormatError):
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(code="UNSUPPORTED_FORMAT", message=str(exc)).model_dump(),
    )


@app.exception_handler(FileTooLargeError)
async def file_too_large_handler(request, exc: FileTooLargeError):
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(code="FILE_TOO_LARGE", message=str(exc)).model_dump(),
    )


@app.exception_handler(DecodeFailureError)
async def decode_failure_handler(request, exc: DecodeFailureError):
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            code="DECODE_FAILURE",
            message="File conversion failed",
            details=str(exc),
        ).model_dump(),
    )


# --- Health Endpoints ---


@app.get("/health", response_model=HealthResponse)
def health():
    """Liveness check."""
    return HealthResponse(status="healthy")


# --- Conversion Endpoints ---


@app.post("/api/upload", response_model=UploadResponse)
def upload(file: UploadFile | None = File(None)):
    """Convert one uploaded document to Markdown with its section map."""
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    file_name = file.filename
    file_type = check_allowed(file_name, settings.allowed_extensions)

    settings.upload_dir.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        delete=False, suffix=file_type, dir=settings.upload_dir
    ) as tmp:
        tmp_path = Path(tmp.name)
        shutil.copyfileobj(file.file, tmp)

    try:
        actual_size = tmp_path.stat().st_size
        if actual_size > settings.max_upload_size:
            raise FileTooLargeError(actual_size, settings.max_upload_size)

        converted = convert_document(
            tmp_path,
            original_filename=file_name,
            raster_dpi=settings.raster_dpi,
            allowed=settings.allowed_extensions,
        )
    finally:
        tmp_path.unlink(missing_ok=True)

    image_url = None
    if converted.image is not None:
        image_name = store_preview(converted.image, file_name, settings.image_storage_dir)
        image_url = f"/images/{image_name}"

    return UploadResponse(
        filename=converted.filename,
        markdown=converted.markdown,
        sections=converted.sections,
        file_type=converted.file_type,
        image_url=image_url,
        extra=converted.extra,
    )


# --- Preview Endpoints ---


def _preview_path(name: str) -> Path:
    if Path(name).name != name or not name.endswith(".png"):
        raise HTTPException(status_code=404, detail="Image not found")
    path = settings.image_storage_dir / name
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Image not found")
    return path


@app.get("/images/{name}")
def get_image(name: str):
    """Serve a stored preview image."""
    return FileResponse(path=_preview_path(name), media_type="image/png")


@app.post("/api/images/{name}/ocr", response_model=OcrResponse)
def ocr_image(name: str):
    """Recognize the words of a stored preview.

    OCR failures return an empty token list so the viewer falls back to
    text-only interaction.
    """
    image_bytes = _preview_path(name).read_bytes()
    size = image_size(image_bytes)

    try:
        tokens = recognize(image_bytes, lang=settings.ocr_lang)
    except OcrError as e:
        logger.warn("ocr failed", image=name, error=str(e))
        tokens = []

    return OcrResponse(tokens=tokens, width=size.width, height=size.height)


@app.post("/api/highlights", response_model=HighlightResponse)
def highlights(request: HighlightRequest):
    """Map sections onto OCR tokens in display space."""
    return HighlightResponse(
        highlights=compute_highlights(
            request.sections,
            request.tokens,
            request.source_image_size,
            request.display_size,
        )
    )

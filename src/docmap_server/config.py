"""Environment-driven settings for the conversion server."""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

# 50MB, matching the upload ceiling of the viewer
DEFAULT_MAX_UPLOAD_SIZE = 50 * 1024 * 1024

ALLOWED_EXTENSIONS = frozenset(
    {".doc", ".docx", ".pdf", ".xls", ".xlsx", ".ppt", ".pptx", ".txt"}
)


@dataclass(frozen=True)
class Settings:
    """Runtime configuration.

    Attributes:
        max_upload_size: Largest accepted upload, in bytes.
        image_storage_dir: Where rasterized previews are written and served from.
        upload_dir: Scratch directory for incoming uploads.
        raster_dpi: Resolution used when rendering PDF previews.
        ocr_lang: Tesseract language code.
        log_level: Logger level name.
    """

    max_upload_size: int = DEFAULT_MAX_UPLOAD_SIZE
    image_storage_dir: Path = Path("./data/images")
    upload_dir: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    raster_dpi: int = 150
    ocr_lang: str = "eng"
    log_level: str = "INFO"
    allowed_extensions: frozenset[str] = ALLOWED_EXTENSIONS

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from environment variables, falling back to defaults."""
        return cls(
            max_upload_size=int(os.getenv("MAX_UPLOAD_SIZE", DEFAULT_MAX_UPLOAD_SIZE)),
            image_storage_dir=Path(os.getenv("IMAGE_STORAGE_DIR", "./data/images")),
            upload_dir=Path(os.getenv("UPLOAD_DIR", tempfile.gettempdir())),
            raster_dpi=int(os.getenv("RASTER_DPI", "150")),
            ocr_lang=os.getenv("OCR_LANG", "eng"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )

"""Per-document viewer session.

Owns everything the interactive viewer needs for one open document: the
immutable section list, the preview image, OCR tokens, the derived
highlights and the shared hover state. Each loaded document gets a new
version tag; OCR results that arrive for an older version are dropped.
"""

import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Executor, Future, ThreadPoolExecutor

from ..logger import logger
from .highlights import compute_highlights, fit_display_size, highlight_at
from .interaction import HoverState, find_section_for_text
from .models import ConvertedDocument, Highlight, ImageSize, OcrToken, Section
from .ocr import image_size as read_image_size
from .ocr import recognize

Recognizer = Callable[[bytes], list[OcrToken]]

LISTING_LIMIT = 10
LISTING_TEXT_CHARS = 80


class DocumentSession:
    """Interaction core shared by the image view and the Markdown view."""

    def __init__(
        self,
        recognizer: Recognizer = recognize,
        executor: Executor | None = None,
        max_display: tuple[float, float] = (600, 800),
    ):
        """Initialize an empty session.

        Args:
            recognizer: OCR callable taking image bytes.
            executor: Where OCR runs. A private single-thread pool is created
                when omitted and shut down by ``close``.
            max_display: Canvas bounds (width, height) the preview is fitted into.
        """
        self._recognizer = recognizer
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1)
        self._max_display = max_display
        self._lock = threading.RLock()

        self.hover = HoverState()

        self._version = 0
        self._sections: tuple[Section, ...] = ()
        self._image: bytes | None = None
        self._image_size: ImageSize | None = None
        self._display_size: ImageSize | None = None
        self._tokens: tuple[OcrToken, ...] = ()
        self._highlights: tuple[Highlight, ...] = ()
        self._ocr_enabled = False
        self._ocr_started = False
        self._ocr_done = False

    # --- Document lifecycle ---

    def load_document(
        self,
        sections: Sequence[Section],
        image: bytes | None = None,
        image_size: ImageSize | None = None,
    ) -> int:
        """Replace the open document and return its version tag.

        Clears OCR tokens, highlights and the hover state. When OCR is
        enabled and the document has a preview, recognition starts right away.
        """
        if image is not None and image_size is None:
            image_size = read_image_size(image)

        with self._lock:
            self._version += 1
            self._sections = tuple(sections)
            self._image = image
            self._image_size = image_size if image is not None else None
            self._display_size = (
                fit_display_size(image_size, *self._max_display)
                if self._image_size is not None
                else None
            )
            self._tokens = ()
            self._highlights = ()
            self._ocr_started = False
            self._ocr_done = False
            version = self._version

        self.hover.clear()
        logger.info(
            "document loaded",
            version=version,
            sections=len(sections),
            has_preview=image is not None,
        )
        self._maybe_start_ocr()
        return version

    def load_converted(self, document: ConvertedDocument) -> int:
        return self.load_document(document.sections, document.image)

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    # --- OCR ---

    def enable_ocr(self, enabled: bool = True) -> Future | None:
        """Flip the OCR gate. Returns the OCR future if this call started one."""
        with self._lock:
            self._ocr_enabled = enabled
        if not enabled:
            return None
        return self._maybe_start_ocr()

    def _maybe_start_ocr(self) -> Future | None:
        with self._lock:
            if not self._ocr_enabled or self._image is None or self._ocr_started:
                return None
            self._ocr_started = True
            version = self._version
            image = self._image

        logger.info("starting ocr", version=version)
        future = self._executor.submit(self._recognizer, image)
        future.add_done_callback(lambda f: self._on_ocr_done(version, f))
        return future

    def _on_ocr_done(self, version: int, future: Future) -> None:
        try:
            tokens = future.result()
        except Exception as e:
            logger.warn("ocr failed, highlights disabled", version=version, error=str(e))
            tokens = []
        self.apply_ocr_result(version, tokens)

    def apply_ocr_result(self, version: int, tokens: Sequence[OcrToken]) -> bool:
        """Install OCR tokens for a document version.

        Returns False, leaving state untouched, if ``version`` is no longer
        the open document.
        """
        with self._lock:
            if version != self._version:
                logger.debug(
                    "discarding stale ocr result",
                    result_version=version,
                    current_version=self._version,
                )
                return False
            self._tokens = tuple(tokens)
            self._ocr_done = True
            self._recompute()
        return True

    def _recompute(self) -> None:
        if self._image_size is None or self._display_size is None:
            self._highlights = ()
            return
        self._highlights = tuple(
            compute_highlights(
                self._sections, self._tokens, self._image_size, self._display_size
            )
        )

    # --- State ---

    @property
    def version(self) -> int:
        return self._version

    @property
    def sections(self) -> tuple[Section, ...]:
        return self._sections

    @property
    def tokens(self) -> tuple[OcrToken, ...]:
        return self._tokens

    @property
    def highlights(self) -> tuple[Highlight, ...]:
        return self._highlights

    @property
    def has_preview(self) -> bool:
        return self._image is not None

    @property
    def display_size(self) -> ImageSize | None:
        return self._display_size

    @property
    def ocr_enabled(self) -> bool:
        return self._ocr_enabled

    @property
    def is_processing_ocr(self) -> bool:
        return self._ocr_started and not self._ocr_done

    def emphasized_highlights(self) -> list[Highlight]:
        """Highlights belonging to the hovered section."""
        current = self.hover.value
        if current is None:
            return []
        return [h for h in self._highlights if h.section_id == current]

    # --- Pointer and text events ---

    def pointer_move(self, x: float, y: float) -> str | None:
        """Hover the section under a canvas point, or go idle over empty canvas."""
        hit = highlight_at(self._highlights, x, y)
        self.hover.set(hit.section_id if hit else None)
        return self.hover.value

    def click(self, x: float, y: float) -> str | None:
        """Select the section under a canvas point; clicks on empty canvas do nothing."""
        hit = highlight_at(self._highlights, x, y)
        if hit is not None:
            self.hover.set(hit.section_id)
        return self.hover.value

    def pointer_leave(self) -> None:
        self.hover.clear()

    def text_hover(self, text: str) -> str | None:
        """Hover the section matching text under the pointer in the Markdown view."""
        section = find_section_for_text(self._sections, text)
        if section is not None:
            self.hover.set(section.id)
        return self.hover.value

    def text_leave(self) -> None:
        self.hover.clear()

    # --- Fallback ---

    def section_listing(self, limit: int = LISTING_LIMIT) -> list[str]:
        """Plain-text section list shown when there is no preview image."""
        lines = []
        for section in self._sections[:limit]:
            text = section.original_text[:LISTING_TEXT_CHARS]
            if len(section.original_text) > LISTING_TEXT_CHARS:
                text += "..."
            lines.append(f"[{section.type.value}] {text}")
        remaining = len(self._sections) - limit
        if remaining > 0:
            lines.append(f"...and {remaining} more sections")
        return lines

"""Shared hover state between the image view and the Markdown view."""

import threading
from collections.abc import Callable, Sequence

from ..logger import logger
from .models import Section

HoverListener = Callable[[str | None, str | None], None]


class HoverState:
    """The single currently emphasized section, or None when idle.

    ``set`` is the only mutation entry point. Listeners receive
    ``(previous, current)`` once per actual change, after the new value is
    visible, so no reader ever observes two emphasized sections.
    """

    def __init__(self):
        self._value: str | None = None
        self._lock = threading.Lock()
        self._listeners: list[HoverListener] = []

    @property
    def value(self) -> str | None:
        return self._value

    @property
    def is_idle(self) -> bool:
        return self._value is None

    def is_emphasized(self, section_id: str) -> bool:
        return self._value is not None and self._value == section_id

    def subscribe(self, listener: HoverListener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def set(self, section_id: str | None) -> bool:
        """Hover a section (or go idle with None). Returns True if the value changed."""
        with self._lock:
            previous = self._value
            if previous == section_id:
                return False
            self._value = section_id
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(previous, section_id)
            except Exception as e:
                logger.error(
                    "hover listener failed",
                    previous=previous,
                    current=section_id,
                    error=str(e),
                )
        return True

    def clear(self) -> bool:
        return self.set(None)


def find_section_for_text(sections: Sequence[Section], text: str) -> Section | None:
    """Find the first section whose text contains, or is contained in, ``text``."""
    needle = text.strip()
    if not needle:
        return None
    for section in sections:
        if section.original_text in needle or needle in section.original_text:
            return section
    return None


def section_at_offset(sections: Sequence[Section], offset: int) -> Section | None:
    """Return the section whose Markdown range covers a character offset."""
    for section in sections:
        if section.markdown_start <= offset < section.markdown_end:
            return section
    return None

"""Errors raised by the conversion pipeline."""


class UnsupportedFormatError(ValueError):
    """Raised when a file extension is outside the allow-list."""

    def __init__(self, extension: str):
        self.extension = extension
        super().__init__(f"Unsupported file type: {extension or '(none)'}")


class DecodeFailureError(RuntimeError):
    """Raised when a format library cannot parse a document."""

    def __init__(self, format_name: str, details: str):
        self.format_name = format_name
        self.details = details
        super().__init__(f"{format_name} conversion failed: {details}")


class FileTooLargeError(ValueError):
    """Raised when an upload exceeds the configured size ceiling."""

    def __init__(self, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            f"File too large. Maximum size is {limit // (1024 * 1024)}MB"
        )


class OcrError(RuntimeError):
    """Raised when the OCR engine fails on an image."""

    pass

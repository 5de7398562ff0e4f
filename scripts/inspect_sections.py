#!/usr/bin/env python3
"""Inspection script for section extraction and highlight mapping.

Usage:
    python scripts/inspect_sections.py <file> [--limit N] [--ocr]

Prints the sections found for a document, and with --ocr the highlights
mapped onto its preview image, for manual verification.
"""

import argparse
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from docmap_server.mapping import (
    OcrError,
    compute_highlights,
    convert_document,
    fit_display_size,
    image_size,
    recognize,
)


def main():
    parser = argparse.ArgumentParser(description="Inspect section extraction")
    parser.add_argument("file_path", help="Path to a document")
    parser.add_argument(
        "--limit", type=int, default=20, help="Number of sections to display (default: 20)"
    )
    parser.add_argument("--ocr", action="store_true", help="Run OCR on the preview image")
    args = parser.parse_args()

    file_path = Path(args.file_path)
    if not file_path.exists():
        print(f"Error: File not found: {file_path}")
        sys.exit(1)

    print(f"Converting: {file_path}")
    print("=" * 80)

    doc = convert_document(file_path)

    print(f"Markdown length: {len(doc.markdown)}")
    print(f"Sections: {len(doc.sections)}")
    print(f"Preview: {'yes' if doc.has_preview else 'no'}")
    print("=" * 80)

    for section in doc.sections[: args.limit]:
        text = section.original_text
        text = text[:100] + "..." if len(text) > 100 else text
        print(
            f"  {section.id:<20} [{section.type.value:<13}] "
            f"{section.markdown_start:>6}-{section.markdown_end:<6} {text}"
        )

    if args.ocr:
        if not doc.has_preview:
            print("\nNo preview image for this format; skipping OCR.")
            return
        try:
            tokens = recognize(doc.image)
        except OcrError as e:
            print(f"\nOCR failed: {e}")
            sys.exit(1)
        source = image_size(doc.image)
        display = fit_display_size(source)
        highlights = compute_highlights(doc.sections, tokens, source, display)
        print(f"\nOCR words: {len(tokens)}, highlights: {len(highlights)}")
        for highlight in highlights[: args.limit]:
            print(
                f"  {highlight.id:<24} ({highlight.x:.0f},{highlight.y:.0f} "
                f"{highlight.width:.0f}x{highlight.height:.0f}) {highlight.text}"
            )

    print("\n" + "=" * 80)
    print("Inspection complete.")


if __name__ == "__main__":
    main()

"""Document-to-Markdown conversion with visual section highlighting."""

__version__ = "0.1.0"

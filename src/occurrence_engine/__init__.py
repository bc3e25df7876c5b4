"""Track, mark, and bulk-edit repeated occurrences of patterns in a text buffer."""

__all__ = [
    "actions",
    "buffer",
    "config",
    "errors",
    "marks",
    "occurrence",
    "operators",
    "runtime",
    "text",
]

__version__ = "0.1.0"

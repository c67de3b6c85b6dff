"""String helpers."""

__all__ = ["normalize_whitespace"]


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim the ends."""
    return " ".join(text.split())
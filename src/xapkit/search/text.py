"""Text normalization applied to file contents before indexing."""

from __future__ import annotations

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(text: str, *, limit: int = 0) -> str:
    """Return ``text`` with control characters removed and whitespace collapsed.

    Args:
        text: Raw text read from a file or another source.
        limit: Maximum number of characters to keep; ``0`` keeps everything.

    Returns:
        str: Cleaned text, truncated to ``limit`` characters when positive.
    """

    cleaned = _WHITESPACE.sub(" ", _CONTROL_CHARS.sub(" ", text)).strip()
    return cleaned[:limit] if limit > 0 else cleaned


__all__ = ["normalize_text"]

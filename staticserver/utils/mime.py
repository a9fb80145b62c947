"""Content type helpers."""
from __future__ import annotations

import mimetypes
from pathlib import Path

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(path: Path) -> str:
    """Best-effort content type from the file extension."""

    content_type, _ = mimetypes.guess_type(path.name)
    if content_type is None:
        return DEFAULT_CONTENT_TYPE
    if content_type.startswith("text/"):
        return f"{content_type}; charset=utf-8"
    return content_type

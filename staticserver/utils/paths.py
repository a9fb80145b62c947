"""URL path helpers."""
from __future__ import annotations

import re
from typing import List

_DRIVE_RE = re.compile(r"^[A-Za-z]:")


def split_components(path: str) -> List[str]:
    """Split a decoded URL path on both slash styles, dropping empty and ``.`` parts."""

    return [part for part in re.split(r"[/\\]", path) if part not in ("", ".")]


def has_absolute_override(relative: str) -> bool:
    """Return ``True`` when a path that should be relative is rooted anyway.

    Catches ``//etc``-style doubled slashes, backslash roots and drive letters.
    """

    return relative.startswith(("/", "\\")) or bool(_DRIVE_RE.match(relative))


def has_parent_reference(components: List[str]) -> bool:
    return any(part == ".." for part in components)

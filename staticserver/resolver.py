"""Map request paths onto files below the serving root."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import AbstractSet, Optional
from urllib.parse import unquote

from staticserver.http.request import split_target
from staticserver.utils import has_absolute_override, has_parent_reference, split_components

LOGGER = logging.getLogger(__name__)

HTML_SUFFIX = ".html"


class Outcome(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    BLACKLISTED = "blacklisted"
    FORBIDDEN = "forbidden"
    BAD_REQUEST = "bad_request"


@dataclass(frozen=True)
class ResolvedPath:
    outcome: Outcome
    path: Optional[Path] = None

    @property
    def found(self) -> bool:
        return self.outcome is Outcome.FOUND


NOT_FOUND = ResolvedPath(Outcome.NOT_FOUND)
BLACKLISTED = ResolvedPath(Outcome.BLACKLISTED)
FORBIDDEN = ResolvedPath(Outcome.FORBIDDEN)
BAD_REQUEST = ResolvedPath(Outcome.BAD_REQUEST)


def _is_readable_file(path: Path) -> bool:
    # a name the filesystem cannot hold fails stat with ENAMETOOLONG
    try:
        return path.is_file() and os.access(path, os.R_OK)
    except OSError:
        return False


class PathResolver:
    """Resolve URL paths against a fixed root directory and blacklist."""

    def __init__(
        self,
        root: Path | str,
        blacklist: AbstractSet[str] = frozenset(),
        default_document: str = "index.html",
    ) -> None:
        self.root = Path(os.path.realpath(root))
        self.blacklist = frozenset(blacklist)
        self.default_document = default_document

    def resolve(self, raw_path: str) -> ResolvedPath:
        path, _ = split_target(raw_path)
        try:
            decoded = unquote(path, errors="strict")
        except UnicodeDecodeError:
            return BAD_REQUEST
        if "\x00" in decoded or not decoded.startswith("/"):
            return BAD_REQUEST

        relative = decoded[1:]
        components = split_components(relative)
        if has_absolute_override(relative) or has_parent_reference(components):
            LOGGER.warning("traversal attempt rejected", extra={"path": raw_path})
            return FORBIDDEN
        if not components:
            components = [self.default_document]
        elif decoded.endswith(("/", "\\")):
            return NOT_FOUND

        candidate = self.root.joinpath(*components)
        result = self._check(candidate)
        if result is not None:
            return result
        if candidate.name.endswith(HTML_SUFFIX):
            return NOT_FOUND

        variant = candidate.with_name(candidate.name + HTML_SUFFIX)
        result = self._check(variant)
        if result is not None:
            return result
        return NOT_FOUND

    def _check(self, candidate: Path) -> Optional[ResolvedPath]:
        """Apply containment, blacklist and existence checks to one candidate.

        Returns ``None`` when the candidate simply does not exist.
        """

        canonical = Path(os.path.realpath(candidate))
        if not self._contains(canonical):
            LOGGER.warning("path escapes serving root", extra={"path": str(candidate)})
            return FORBIDDEN
        if candidate.name in self.blacklist or canonical.name in self.blacklist:
            return BLACKLISTED
        if _is_readable_file(canonical):
            return ResolvedPath(Outcome.FOUND, canonical)
        return None

    def _contains(self, path: Path) -> bool:
        return path == self.root or self.root in path.parents


def resolve(
    raw_path: str,
    root: Path | str,
    blacklist: AbstractSet[str] = frozenset(),
    default_document: str = "index.html",
) -> ResolvedPath:
    """Resolve ``raw_path`` once without keeping a resolver around."""

    return PathResolver(root, blacklist, default_document).resolve(raw_path)

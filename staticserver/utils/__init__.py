"""Utility helpers."""
from .mime import guess_content_type  # noqa: F401
from .paths import (  # noqa: F401
    has_absolute_override,
    has_parent_reference,
    split_components,
)

"""
File category helpers for the suggestion engine.

Why this exists:
- Callers pass loose file types ("typescript", ".scss", "text") and we want a
  small, stable set of categories the detectors can switch on.
- The declared type wins; when it is generic we fall back to the file name's
  extension (e.g. fileType="text" with "utils.ts" is still script code).

This module intentionally does NOT sniff file contents.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional


JAVASCRIPT = "javascript"
CSS = "css"
LIQUID = "liquid"
UNKNOWN = "unknown"

JAVASCRIPT_TYPES = {
    "javascript",
    "typescript",
    "js",
    "ts",
    "jsx",
    "tsx",
}

CSS_TYPES = {
    "css",
    "scss",
    "sass",
    "less",
}

LIQUID_TYPES = {
    "liquid",
}


def normalize_type(file_type: Optional[str]) -> str:
    """
    Map a declared type or bare extension onto a category.

    Case-insensitive; a leading dot is ignored so ".ts" and "ts" agree.
    Anything unrecognised returns `unknown`.
    """
    t = (file_type or "").strip().lower()
    if t.startswith("."):
        t = t[1:]

    if t in JAVASCRIPT_TYPES:
        return JAVASCRIPT
    if t in CSS_TYPES:
        return CSS
    if t in LIQUID_TYPES:
        return LIQUID
    return UNKNOWN


def get_effective_extension(filename: Optional[str]) -> str:
    """Return the lower-cased extension of a filename without the dot."""
    name = (filename or "").strip().lower()
    return Path(name).suffix.lstrip(".")


def resolve_category(file_type: Optional[str], file_name: Optional[str] = None) -> str:
    """
    Resolve the detector category for a file.

    The declared `file_type` is tried first, then the extension of `file_name`.
    """
    category = normalize_type(file_type)
    if category != UNKNOWN:
        return category

    ext = get_effective_extension(file_name)
    if ext:
        return normalize_type(ext)
    return UNKNOWN

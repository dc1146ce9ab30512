"""Turn caller-supplied path text into absolute :class:`~pathlib.Path` objects."""

from __future__ import annotations

import os
from pathlib import Path

__all__ = ["optional_path", "resolve_path"]


def _absolute(text: str) -> Path:
    return Path(text).expanduser().resolve()


def resolve_path(value: str | os.PathLike[str], *, empty_error: str | None = None) -> Path:
    """Return *value* expanded and made absolute.

    Raises :class:`ValueError` with *empty_error* when *value* is blank.
    """

    text = os.fspath(value).strip()
    if not text:
        raise ValueError(empty_error or "Path value cannot be empty.")
    return _absolute(text)


def optional_path(text: str | None) -> Path | None:
    """Return the path named by *text*, or ``None`` when it is empty."""

    if text is None or not text.strip():
        return None
    return _absolute(text.strip())

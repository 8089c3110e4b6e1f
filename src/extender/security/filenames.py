"""Filename sanitizing and derivation."""

import re
import secrets
import time
from pathlib import PurePath

MAX_FILENAME_LENGTH = 255

_UNSAFE_CHARS = re.compile(r'[<>:"/\\|?*\0]')
_LEADING_DOTS = re.compile(r"^\.+")


def sanitize_filename(filename: str) -> str:
    """Strip filesystem-dangerous characters and traversal sequences.

    Example:
        >>> sanitize_filename('../../etc/pass"wd.mp3')
        'etcpasswd.mp3'
    """
    cleaned = _UNSAFE_CHARS.sub("", filename)
    cleaned = cleaned.replace("..", "")
    cleaned = _LEADING_DOTS.sub("", cleaned)
    return cleaned[:MAX_FILENAME_LENGTH]


def derive_extended_filename(original_filename: str, version: int, extension: str | None = None) -> str:
    """Build the output name for an extended version (1-based ``version``).

    ``extension`` overrides the suffix taken from ``original_filename``; the
    orchestrator passes the stored upload's suffix so every version keeps a
    servable extension.
    """
    original = PurePath(original_filename)
    suffix = original.suffix if extension is None else extension
    return f"{sanitize_filename(original.stem)}_extended_v{version}{suffix}"


def build_storage_name(extension: str) -> str:
    """Generate a collision-resistant storage name: ``<epoch-ms>-<random><ext>``."""
    millis = int(time.time() * 1000)
    suffix = secrets.randbelow(10**9)
    return f"{millis}-{suffix}{extension}"

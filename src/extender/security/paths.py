"""Path validation against the managed upload and result roots.

Every file the service reads, writes or deletes goes through
:func:`validate_path`. Canonical containment alone is not enough: the raw
string is also screened so that encoded traversal attempts are rejected even
when resolving the path would normalize them away.
"""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from urllib.parse import unquote

from extender.errors import AccessDeniedError, ConfigurationError

logger = logging.getLogger(__name__)

_DANGEROUS_PATTERNS = ("..", "~", "\0", "%00", "%2e%2e", "%2f", "%5c")
_INVALID_CHARS = re.compile(r'[<>"|*?]')
_MAX_DECODE_PASSES = 8


def _decoded_forms(raw: str) -> list[str]:
    """The raw string plus each successive percent-decoding of it."""
    forms = [raw]
    for _ in range(_MAX_DECODE_PASSES):
        decoded = unquote(forms[-1])
        if decoded == forms[-1]:
            break
        forms.append(decoded)
    return forms


def _has_dangerous_pattern(raw: str) -> bool:
    return any(
        pattern in form.lower() for form in _decoded_forms(raw) for pattern in _DANGEROUS_PATTERNS
    )


def _is_within(candidate: Path, root: Path) -> bool:
    candidate_str = str(candidate)
    root_str = str(root)
    return candidate_str == root_str or candidate_str.startswith(root_str + os.sep)


def validate_path(path: str | os.PathLike[str], allowed_root: str | os.PathLike[str]) -> bool:
    """Return True if ``path`` is a safe location inside ``allowed_root``.

    The path must resolve inside the root. Neither its raw form nor any
    percent-decoded form of it may contain traversal/encoding patterns, and
    the raw form may not contain shell-special characters.
    Never raises; any resolution failure counts as a rejection.
    """
    try:
        raw = os.fspath(path)
        if _has_dangerous_pattern(raw):
            return False
        if _INVALID_CHARS.search(raw):
            return False
        canonical = Path(raw).resolve()
        canonical_root = Path(os.fspath(allowed_root)).resolve()
        return _is_within(canonical, canonical_root)
    except (OSError, TypeError, ValueError, RuntimeError) as e:
        logger.error("Path validation error: %s", e)
        return False


def canonicalize_root(path: str | os.PathLike[str]) -> Path:
    """Resolve a configured root directory to its absolute form.

    Raises:
        ConfigurationError: If the configured value contains ``..`` or ``~``.
    """
    raw = os.fspath(path)
    if ".." in raw or "~" in raw:
        raise ConfigurationError(f"Invalid directory path: {raw}")
    try:
        return Path(raw).resolve()
    except (OSError, RuntimeError) as e:
        raise ConfigurationError(f"Failed to validate directory path: {raw}") from e


class PathGuard:
    """Validates paths against the uploads and results roots."""

    def __init__(self, uploads_root: Path, results_root: Path) -> None:
        self.uploads_root = uploads_root
        self.results_root = results_root

    def is_upload(self, path: str | os.PathLike[str]) -> bool:
        return validate_path(path, self.uploads_root)

    def is_result(self, path: str | os.PathLike[str]) -> bool:
        return validate_path(path, self.results_root)

    def is_managed(self, path: str | os.PathLike[str]) -> bool:
        """Check whether the path lies under either managed root."""
        return self.is_upload(path) or self.is_result(path)

    def require_upload(self, path: str | os.PathLike[str], operation: str) -> Path:
        return self._require(self.is_upload(path), path, operation)

    def require_result(self, path: str | os.PathLike[str], operation: str) -> Path:
        return self._require(self.is_result(path), path, operation)

    def require_managed(self, path: str | os.PathLike[str], operation: str) -> Path:
        return self._require(self.is_managed(path), path, operation)

    def _require(self, allowed: bool, path: str | os.PathLike[str], operation: str) -> Path:
        if not allowed:
            logger.warning("Security violation: %s attempted outside managed directories", operation)
            raise AccessDeniedError()
        return Path(os.fspath(path))

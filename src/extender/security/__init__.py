"""Path and filename guards for the managed media directories."""

from extender.security.filenames import (
    build_storage_name,
    derive_extended_filename,
    sanitize_filename,
)
from extender.security.paths import PathGuard, canonicalize_root, validate_path

__all__ = [
    "PathGuard",
    "build_storage_name",
    "canonicalize_root",
    "derive_extended_filename",
    "sanitize_filename",
    "validate_path",
]

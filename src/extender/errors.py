"""Custom exceptions for Track Extender.

Each HTTP-facing error carries the status code it maps to; the API layer
renders them through a single exception handler.
"""


class ExtenderError(Exception):
    """Base exception for Track Extender."""

    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class InvalidInputError(ExtenderError):
    """Bad id, settings, range syntax, file type or extension."""

    status_code = 400


class VersionLimitError(InvalidInputError):
    """Track already has the maximum number of extended versions."""

    def __init__(self, count: int, limit: int) -> None:
        super().__init__(f"Maximum version limit ({limit}) reached: track has {count} versions")
        self.count = count
        self.limit = limit


class AccessDeniedError(ExtenderError):
    """Path rejected by the path guard."""

    status_code = 403

    def __init__(self, message: str = "Access denied: Invalid file path") -> None:
        super().__init__(message)


class NotFoundError(ExtenderError):
    """Missing track, version or file on disk."""

    status_code = 404


class ConflictError(ExtenderError):
    """An extension job is already running for the track."""

    status_code = 409


class RangeNotSatisfiableError(ExtenderError):
    """Range header is well-formed but lies outside the file."""

    status_code = 416

    def __init__(self, file_size: int) -> None:
        super().__init__("Requested range not satisfiable")
        self.file_size = file_size


class OutputPathError(ExtenderError):
    """Derived output path failed validation."""

    status_code = 500


class WorkerError(ExtenderError):
    """External worker process failed."""

    pass


class ConfigurationError(ExtenderError):
    """Invalid configuration detected at startup."""

    pass

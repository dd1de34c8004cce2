from __future__ import annotations

"""Error taxonomy for the manifest pipeline.

Every error defined here is fatal for a run: the orchestrator never returns a
partial machine list. Recoverable conditions (folder lookup failure, unparsable
default disk size) are handled where they occur and only logged.
"""

__all__ = [
    "ManifestError",
    "InputNotFoundError",
    "MalformedInputError",
    "SchemaMismatchError",
    "InvalidDateFormatError",
    "InvalidDiskSizeError",
    "ResolverError",
]


class ManifestError(Exception):
    """Base class for fatal pipeline errors."""

    error_type = "PROCESSING_ERROR"

    def __init__(self, message: str, *, file: str | None = None, row: int = -1) -> None:
        super().__init__(message)
        self.file = file
        self.row = row  # 1-based CSV line, -1 when unknown


class InputNotFoundError(ManifestError):
    """Manifest file is missing or unreadable."""

    error_type = "INPUT_NOT_FOUND"


class MalformedInputError(ManifestError):
    """Delimited syntax could not be parsed (e.g. unterminated quote)."""

    error_type = "MALFORMED_INPUT"


class SchemaMismatchError(ManifestError):
    """Row does not fit the fixed column schema."""

    error_type = "SCHEMA_MISMATCH"


class InvalidDateFormatError(ManifestError):
    """`expires` is neither YYYY-MM-DD nor DD/MM/YYYY."""

    error_type = "INVALID_DATE_FORMAT"


class InvalidDiskSizeError(ManifestError):
    """Disk slot holds something other than a non-negative integer."""

    error_type = "INVALID_DISK_SIZE"


class ResolverError(ManifestError):
    """Inventory path could not be resolved to an identifier."""

    error_type = "RESOLVER_ERROR"

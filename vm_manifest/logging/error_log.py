from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..errors import ManifestError
from ..models.error_record import ErrorRecord

"""Error log generation & buffering.

- JSON Lines with a fixed schema (no extra keys)
- One file per run: `logs/errors-YYYYMMDD-HHMMSS.log` (UTC), created lazily
- Records are buffered and written on flush()
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "record_from_error",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


def record_from_error(error: ManifestError, default_file: str) -> ErrorRecord:
    """Build an ErrorRecord from a fatal pipeline error."""
    return ErrorRecord.create(
        file=error.file or default_file,
        row=error.row,
        error_type=error.error_type,
        message=str(error),
    )


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines.

    - flush() appends all buffered records to the run's file (created on demand)
    - the file path is fixed on first access
    - not thread safe (runs are sequential)
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the file path, or None when nothing was buffered."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from .machine_record import MachineRecord

"""Processing result models for the VM manifest importer.

RowCounters is filled in by the orchestrator while rows stream through the
pipeline; ProcessingResult is the frozen outcome of a whole run.
"""

__all__ = [
    "RowCounters",
    "ProcessingResult",
]


@dataclass
class RowCounters:
    """Mutable per-run counters (orchestrator internal)."""
    rows_read: int = 0  # Data rows after header skipping
    header_rows: int = 0  # Rows dropped because they equal the header
    filtered_rows: int = 0  # Rows rejected by the query
    expired_rows: int = 0  # Rows past the 7 day grace window


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated result of a manifest run."""
    records: list[MachineRecord]
    datastore_cluster_id: str
    run_date: date  # "today" used for expiry decisions
    rows_read: int
    header_rows: int
    filtered_rows: int
    expired_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float

    @property
    def accepted_rows(self) -> int:
        return len(self.records)

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import UTC, date, datetime
from pathlib import Path

from ..errors import ManifestError
from ..logging.error_log import ErrorLogBuffer, record_from_error
from ..models.config_models import ManifestConfig
from ..models.inventory import DatacenterContext
from ..models.machine_record import MachineRecord
from ..models.processing_result import ProcessingResult, RowCounters
from ..tabular.reader import normalize_row, read_manifest_rows
from .disk_policy import apply_default_disks
from .expiry_policy import apply_expiry_policy, current_date
from .progress import ProgressTracker
from .query_filter import matches_query
from .resolver import InventoryResolver, resolve_paths

"""Pipeline orchestration for the VM manifest importer.

build_machine_list() runs the row pipeline:

    read -> normalize -> query pre-check -> disk policy -> expiry policy -> path resolution

Every stage returns a new mapping; nothing is mutated in place and a record is
frozen (MachineRecord) once accepted. The query is checked against the raw
normalized values, before any resolver call. Rows that fail the query still go
through the expiry policy, so that an invalid date anywhere in the manifest
aborts the run, but they never reach the resolver.

process_manifest() wraps it for a configured run: datacenter lookup, datastore
cluster validation, counters, and the JSON Lines error log on fatal errors.
"""

__all__ = [
    "build_machine_list",
    "process_manifest",
]

logger = logging.getLogger(__name__)


def build_machine_list(
    csv_path: Path,
    query: Mapping[str, str] | None,
    default_disks: Mapping[str, str] | None,
    datacenter: DatacenterContext,
    resolver: InventoryResolver,
    today: date | None = None,
    counters: RowCounters | None = None,
) -> list[MachineRecord]:
    """Return the machines that should currently exist, in manifest order.

    Args:
        csv_path: manifest CSV
        query: column -> expected value constraints (None/empty accepts all)
        default_disks: disk slot -> string-encoded minimum size
        datacenter: context handed to the resolver
        resolver: inventory lookups
        today: run date (defaults to today in UTC)
        counters: optional counters updated while rows stream through

    Raises:
        ManifestError: any fatal error; no partial list is returned
    """
    csv_path = Path(csv_path)
    file_name = csv_path.name
    today = today or current_date("UTC")
    counters = counters if counters is not None else RowCounters()

    def _count_header(row_number: int) -> None:
        counters.header_rows += 1
        logger.debug("row=%d equals the header -> skipped", row_number)

    accepted: list[MachineRecord] = []
    with ProgressTracker(description=f"Processing {file_name}") as progress:
        for row_number, cells in read_manifest_rows(csv_path, on_header=_count_header):
            row = normalize_row(cells, row_number, file_name)
            counters.rows_read += 1
            logger.debug("row=%d %s", row_number, row.values)

            matched = matches_query(row.values, query)
            if matched:
                values = apply_default_disks(row.values, default_disks, file=file_name, row=row_number)
            else:
                values = dict(row.values)

            outcome = apply_expiry_policy(values, today, file=file_name, row=row_number)

            if not matched:
                counters.filtered_rows += 1
            elif outcome.excluded:
                counters.expired_rows += 1
            else:
                enriched = resolve_paths(outcome.values, resolver, datacenter, file=file_name, row=row_number)
                accepted.append(MachineRecord.from_values(enriched, file=file_name, row=row_number))

            progress.advance(
                accepted=len(accepted), filtered=counters.filtered_rows, expired=counters.expired_rows
            )

    logger.debug("filtered machine list:")
    for record in accepted:
        logger.debug("  %s", record.to_dict())
    return accepted


def process_manifest(
    config: ManifestConfig,
    resolver: InventoryResolver,
    today: date | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Run a configured manifest import.

    1. Resolve the datacenter and validate the datastore cluster (once, before rows)
    2. Run build_machine_list
    3. Return ProcessingResult with records and counters

    On a fatal error the error is written to the error log and re-raised.
    """
    start_time = datetime.now(UTC)
    if error_log is None:
        error_log = ErrorLogBuffer()
    csv_path = Path(config.csvfile)
    today = today or current_date(config.timezone)
    counters = RowCounters()

    try:
        datacenter = resolver.resolve_datacenter(config.datacenter_id)
        logger.debug("datacenter is %s", datacenter.inventory_path)
        datastore_cluster_id = resolver.resolve_datastore_cluster(config.datastore_cluster, datacenter)
        logger.debug("datastore cluster %s -> %s", config.datastore_cluster, datastore_cluster_id)

        records = build_machine_list(
            csv_path,
            config.query,
            config.default_disks,
            datacenter,
            resolver,
            today=today,
            counters=counters,
        )
    except ManifestError as e:
        error_log.append(record_from_error(e, csv_path.name))
        try:
            path = error_log.flush()
            if path is not None:
                logger.debug("error log written to %s", path)
        except OSError as flush_error:
            logger.warning("failed to write error log: %s", flush_error)
        raise

    end_time = datetime.now(UTC)
    return ProcessingResult(
        records=records,
        datastore_cluster_id=datastore_cluster_id,
        run_date=today,
        rows_read=counters.rows_read,
        header_rows=counters.header_rows,
        filtered_rows=counters.filtered_rows,
        expired_rows=counters.expired_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
    )

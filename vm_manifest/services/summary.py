from __future__ import annotations

from ..models.processing_result import ProcessingResult

"""Summary line rendering for the VM manifest importer."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return str(round(value, 3))


def render_summary_line(result: ProcessingResult) -> str:
    """Render the SUMMARY line for a finished run.

    Format:
    SUMMARY rows={read} accepted={n} filtered={n} expired={n} headers={n} elapsed_sec={s}

    Examples:
        >>> from datetime import date, datetime, timezone
        >>> start = datetime(2023, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2023, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = ProcessingResult(
        ...     records=[], datastore_cluster_id="group-p1", run_date=date(2023, 1, 1),
        ...     rows_read=3, header_rows=1, filtered_rows=2, expired_rows=1,
        ...     start_time=start, end_time=end, elapsed_seconds=2.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY rows=3 accepted=0 filtered=2 expired=1 headers=1 elapsed_sec=2'
    """
    return (
        f"SUMMARY rows={result.rows_read} "
        f"accepted={result.accepted_rows} "
        f"filtered={result.filtered_rows} "
        f"expired={result.expired_rows} "
        f"headers={result.header_rows} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )

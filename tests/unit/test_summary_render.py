from __future__ import annotations

from datetime import UTC, date, datetime

from vm_manifest.models.processing_result import ProcessingResult
from vm_manifest.services.summary import render_summary_line


def _result(elapsed: float, records=None) -> ProcessingResult:
    now = datetime(2026, 10, 17, tzinfo=UTC)
    return ProcessingResult(
        records=records or [],
        datastore_cluster_id="group-p42",
        run_date=date(2026, 10, 17),
        rows_read=5,
        header_rows=1,
        filtered_rows=2,
        expired_rows=1,
        start_time=now,
        end_time=now,
        elapsed_seconds=elapsed,
    )


def test_render_summary_line_basic():
    assert render_summary_line(_result(1.23456)) == (
        "SUMMARY rows=5 accepted=0 filtered=2 expired=1 headers=1 elapsed_sec=1.235"
    )


def test_render_summary_line_zero_and_whole_seconds():
    assert render_summary_line(_result(0)).endswith("elapsed_sec=0")
    assert render_summary_line(_result(3.0)).endswith("elapsed_sec=3")


def test_render_summary_line_small_elapsed_avoids_exponent():
    line = render_summary_line(_result(0.000012))
    assert "e-" not in line
    assert line.endswith("elapsed_sec=0.000012")

from __future__ import annotations

import json
from pathlib import Path

from vm_manifest.errors import InputNotFoundError, InvalidDateFormatError
from vm_manifest.logging.error_log import ErrorLogBuffer, record_from_error
from vm_manifest.models.error_record import ErrorRecord


def test_flush_empty_buffer_writes_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_flush_writes_json_lines(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    buf.append(ErrorRecord.create("m.csv", 4, "INVALID_DATE_FORMAT", "bad date"))
    buf.append(ErrorRecord.create("m.csv", -1, "RESOLVER_ERROR", "no pool"))

    path = buf.flush()

    assert path is not None
    assert path.name.startswith("errors-") and path.suffix == ".log"
    lines = path.read_text(encoding="utf-8").splitlines()
    assert [json.loads(line)["row"] for line in lines] == [4, -1]
    assert len(buf) == 0


def test_record_from_error_uses_error_context():
    rec = record_from_error(InvalidDateFormatError("bad", file="a.csv", row=7), "default.csv")
    assert (rec.file, rec.row, rec.error_type, rec.message) == ("a.csv", 7, "INVALID_DATE_FORMAT", "bad")


def test_record_from_error_falls_back_to_default_file():
    rec = record_from_error(InputNotFoundError("missing"), "machines.csv")
    assert rec.file == "machines.csv"
    assert rec.row == -1
    assert rec.error_type == "INPUT_NOT_FOUND"


def test_error_record_timestamp_is_utc_z():
    rec = ErrorRecord.create("m.csv", 1, "SCHEMA_MISMATCH", "x")
    assert rec.timestamp.endswith("Z")
    assert set(json.loads(rec.to_json_line())) == {"timestamp", "file", "row", "error_type", "message"}

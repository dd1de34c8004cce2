from __future__ import annotations

import csv
import re
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path
from typing import Any

from ..errors import InputNotFoundError, MalformedInputError, SchemaMismatchError
from ..models.row_data import RowData

"""Manifest CSV reader and row normalizer.

The manifest has no mandatory header: every row is positional against COLUMNS.
A row whose cells equal COLUMNS is treated as a header and dropped, wherever it
appears in the file (not only on the first line). This is existing, observable
behaviour and is intentionally kept.

Records are tokenized with csv.reader in strict mode so that each record keeps
its real cell count; a short or long row is rejected by normalize_row instead
of being padded. Every cell is kept as text; integer coercion is done per cell
by normalize_row ("full text is a base-10 integer").

Row numbers are the 1-based physical line on which a record starts. Header and
blank lines are counted, so a number always points at the line a human would
open in an editor.
"""

__all__ = [
    "COLUMNS",
    "DISK_COLUMNS",
    "coerce_cell",
    "is_header_row",
    "normalize_row",
    "read_manifest_rows",
    "read_manifest",
]

COLUMNS: tuple[str, ...] = (
    "hostname",
    "address",
    "gateway",
    "subnet",
    "cpu",
    "memory",
    "vapp",
    "network",
    "template",
    "disk0",
    "disk1",
    "disk2",
    "disk3",
    "expires",
)

DISK_COLUMNS: tuple[str, ...] = ("disk0", "disk1", "disk2", "disk3")

# ASCII digits only; int() alone would also accept " 12", "1_000" and non-ASCII digits
_INT_PATTERN = re.compile(r"[+-]?[0-9]+")


def is_header_row(cells: Sequence[Any]) -> bool:
    return list(cells) == list(COLUMNS)


def read_manifest_rows(
    path: Path,
    on_header: Callable[[int], None] | None = None,
) -> Iterator[tuple[int, list[str]]]:
    """Lazily yield (row_number, cells) for every record of a manifest CSV.

    Single pass; the iterator cannot be restarted. Blank lines are skipped.
    Header-shaped rows are dropped here and do not reach the caller; on_header,
    when given, is called with the row number of each dropped row. Cells are
    yielded exactly as tokenized, whatever their count.

    Raises:
        InputNotFoundError: file missing or unreadable
        MalformedInputError: delimited syntax error (e.g. unterminated quote)
            or undecodable bytes
    """
    path = Path(path)
    if not path.is_file():
        raise InputNotFoundError(f"manifest file not found: {path}", file=path.name)

    try:
        with path.open(encoding="utf-8-sig", newline="") as f:
            reader = csv.reader(f, strict=True)
            consumed = 0  # physical lines read before the current record
            while True:
                try:
                    cells = next(reader)
                except StopIteration:
                    return
                except csv.Error as e:
                    raise MalformedInputError(
                        f"failed to read CSV file {path.name!r} at line {consumed + 1}: {e}",
                        file=path.name,
                        row=consumed + 1,
                    ) from e
                row_number = consumed + 1
                consumed = reader.line_num
                if not cells:
                    continue
                if is_header_row(cells):
                    if on_header is not None:
                        on_header(row_number)
                    continue
                yield row_number, cells
    except UnicodeDecodeError as e:
        raise MalformedInputError(f"failed to decode CSV file {path.name!r}: {e}", file=path.name) from e
    except OSError as e:
        raise InputNotFoundError(f"cannot read manifest file {path}: {e}", file=path.name) from e


def coerce_cell(cell: str) -> int | str:
    """Return int(cell) if the whole cell is a base-10 integer, else the cell unchanged."""
    if _INT_PATTERN.fullmatch(cell):
        return int(cell)
    return cell


def normalize_row(cells: Sequence[str], row_number: int, file_name: str | None = None) -> RowData:
    """Zip a raw row with COLUMNS and coerce numeric cells.

    Raises:
        SchemaMismatchError: cell count differs from the column count
    """
    if len(cells) != len(COLUMNS):
        raise SchemaMismatchError(
            f"{file_name or '<manifest>'} row {row_number}: expected {len(COLUMNS)} cells, got {len(cells)}",
            file=file_name,
            row=row_number,
        )
    values = {col: coerce_cell(cell) for col, cell in zip(COLUMNS, cells, strict=True)}
    return RowData(row_number=row_number, values=values, raw_values=list(cells))


def read_manifest(path: Path) -> Iterator[RowData]:
    """Read and normalize a manifest in one lazy pass."""
    path = Path(path)
    for row_number, cells in read_manifest_rows(path):
        yield normalize_row(cells, row_number, path.name)

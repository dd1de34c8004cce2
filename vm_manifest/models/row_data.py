from __future__ import annotations

from dataclasses import dataclass
from typing import Any

"""RowData model for the VM manifest importer.

RowData represents a single manifest row after normalization: cells zipped with
the fixed column list and numeric-looking cells coerced to int.
"""

__all__ = [
    "RowData",
]


@dataclass(frozen=True)
class RowData:
    """Logical representation of a single manifest row after normalization.

    The row_number is the 1-based physical line on which the record starts.
    Header and blank lines are counted, so error messages point at the line a
    human would open in an editor.
    """
    row_number: int  # physical line the record starts on (1-based)
    values: dict[str, Any]  # Column name -> int | str
    raw_values: list[str] | None = None  # Original cells for debug output

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from ..errors import InvalidDiskSizeError
from ..tabular.reader import DISK_COLUMNS, coerce_cell

"""Default disk size policy.

For every slot disk0..disk3:
- empty / missing value -> the slot default (0 when the slot has no default)
- present value, no default -> unchanged
- present value, default -> raised to the default when strictly smaller

A default that is not an integer counts as 0. The policy never lowers a
present value.
"""

__all__ = [
    "parse_default_size",
    "apply_default_disks",
]

logger = logging.getLogger(__name__)


def parse_default_size(raw: Any) -> int:
    """Parse a configured default; anything that is not an integer becomes 0."""
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    value = coerce_cell(str(raw).strip()) if raw is not None else ""
    if isinstance(value, int):
        return value
    logger.debug("default disk size %r is not an integer -> 0", raw)
    return 0


def apply_default_disks(
    values: Mapping[str, Any],
    default_disks: Mapping[str, Any] | None,
    *,
    file: str | None = None,
    row: int = -1,
) -> dict[str, Any]:
    """Return a copy of values with disk0..disk3 resolved against default_disks.

    Raises:
        InvalidDiskSizeError: a present disk value is not a non-negative integer
    """
    defaults = default_disks or {}
    out = dict(values)
    for disk in DISK_COLUMNS:
        current = out.get(disk)
        has_default = defaults.get(disk) is not None
        if current is None or current == "":
            out[disk] = parse_default_size(defaults[disk]) if has_default else 0
        elif not isinstance(current, int):
            raise InvalidDiskSizeError(f"{disk} must be an integer, got {current!r}", file=file, row=row)
        elif has_default:
            default_size = parse_default_size(defaults[disk])
            if current < default_size:
                out[disk] = default_size
        if out[disk] < 0:
            raise InvalidDiskSizeError(f"{disk} must not be negative, got {out[disk]}", file=file, row=row)
    return out

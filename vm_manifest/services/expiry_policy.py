from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..errors import InvalidDateFormatError

"""Expiry / power-state policy.

Steps applied to every row, in order:
1. empty `expires` -> one year from today
2. power = "true"
3. parse `expires` as YYYY-MM-DD, falling back to DD/MM/YYYY (spreadsheet
   exports rewrite ISO dates into this form). Neither -> InvalidDateFormatError,
   which aborts the whole run
4. delta_hours = hours from the expiry date to the start of today
5. expiry on or before today -> power = "false"
6. delta_hours >= 168 (7 days) -> row excluded from the output

`expires` is written back in YYYY-MM-DD form.
"""

__all__ = [
    "EXPIRY_FORMAT",
    "GRACE_HOURS",
    "ExpiryOutcome",
    "apply_expiry_policy",
    "current_date",
    "one_year_from",
    "parse_expiry",
]

logger = logging.getLogger(__name__)

EXPIRY_FORMAT = "%Y-%m-%d"
GRACE_HOURS = 7 * 24

# (pattern, strptime format); patterns pin zero padding, strptime alone accepts "2020-1-1"
_DATE_FORMATS: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"[0-9]{4}-[0-9]{2}-[0-9]{2}"), EXPIRY_FORMAT),
    (re.compile(r"[0-9]{2}/[0-9]{2}/[0-9]{4}"), "%d/%m/%Y"),
)


@dataclass(frozen=True)
class ExpiryOutcome:
    values: dict[str, Any]  # copy of the row with expires/power set
    expiry: date
    delta_hours: int  # positive when the expiry date is in the past
    excluded: bool  # past the grace window


def current_date(timezone: str = "UTC") -> date:
    """Today's date in the given IANA zone."""
    try:
        tz = ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"unknown timezone: {timezone}") from e
    return datetime.now(tz).date()


def one_year_from(day: date) -> date:
    """Same calendar day next year; Feb 29 rolls over to Mar 1."""
    try:
        return day.replace(year=day.year + 1)
    except ValueError:
        return date(day.year + 1, 3, 1)


def parse_expiry(value: Any, *, file: str | None = None, row: int = -1) -> date:
    text = str(value)
    for pattern, fmt in _DATE_FORMATS:
        if not pattern.fullmatch(text):
            continue
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    raise InvalidDateFormatError(
        f"Invalid date format for expires: {text!r}. Format should be 'YYYY-MM-DD'",
        file=file,
        row=row,
    )


def apply_expiry_policy(
    values: Mapping[str, Any],
    today: date,
    *,
    file: str | None = None,
    row: int = -1,
) -> ExpiryOutcome:
    """Compute expires / power / exclusion for one row.

    Raises:
        InvalidDateFormatError: `expires` matches neither accepted format
    """
    out = dict(values)
    raw = out.get("expires")
    if raw is None or raw == "":
        out["expires"] = one_year_from(today).strftime(EXPIRY_FORMAT)

    out["power"] = "true"
    expiry = parse_expiry(out["expires"], file=file, row=row)
    out["expires"] = expiry.strftime(EXPIRY_FORMAT)

    delta_hours = (today - expiry).days * 24
    if expiry <= today:
        out["power"] = "false"

    excluded = delta_hours >= GRACE_HOURS
    if excluded:
        logger.debug("row=%s expired %s (%dh ago) -> excluded", row, out["expires"], delta_hours)
    return ExpiryOutcome(values=out, expiry=expiry, delta_hours=delta_hours, excluded=excluded)

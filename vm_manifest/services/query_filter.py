from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

"""Query filter for manifest rows.

A query is a mapping of column -> expected string. A row matches a constraint
when its value equals the expected value (an int cell is compared through its
text form), or, for text cells only, when the value ends with it ("web" matches
"prod-web"; cpu 12 does not match "2"). Constraints are evaluated on
the normalized, pre-resolution values: a vApp constraint is written as the
human-readable name, not as a resource pool id.
"""

__all__ = [
    "matches_query",
    "filter_records",
]

logger = logging.getLogger(__name__)


def matches_query(values: Mapping[str, Any], query: Mapping[str, str] | None) -> bool:
    """Return True when every constraint in query is satisfied by values.

    An absent or empty query accepts everything. A constraint on a key that is
    not present in values rejects the row.
    """
    if not query:
        return True
    for key, expected in query.items():
        if key not in values:
            logger.debug("query key=%s not present in row -> reject", key)
            return False
        value = values[key]
        if value == expected:
            continue
        if isinstance(value, str):
            if value.endswith(str(expected)):
                continue
        elif value is not None and str(value) == str(expected):
            continue
        logger.debug("query %s=%r does not match %r", key, expected, value)
        return False
    return True


def filter_records(
    records: Iterable[Mapping[str, Any]], query: Mapping[str, str] | None
) -> list[Mapping[str, Any]]:
    """Keep only the records matching query, preserving order."""
    return [r for r in records if matches_query(r, query)]

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from ..errors import SchemaMismatchError

"""MachineRecord: the enriched, emitted form of a manifest row.

Field order follows the output contract consumed by the provisioning layer.
"""

__all__ = [
    "MachineRecord",
    "OUTPUT_FIELDS",
]

_STRING_FIELDS = (
    "hostname", "address", "gateway", "expires", "power",
    "template", "network", "vapp", "folder",
)
_INT_FIELDS = ("subnet", "cpu", "memory", "disk0", "disk1", "disk2", "disk3")


@dataclass(frozen=True)
class MachineRecord:
    """One machine that should currently exist, with resolved attributes."""
    hostname: str
    address: str
    gateway: str
    subnet: int
    cpu: int
    memory: int
    expires: str  # YYYY-MM-DD
    power: str  # "true" / "false"
    template: str
    network: str  # resolved network id ("" when not set)
    vapp: str  # resolved resource pool id ("" when not set)
    folder: str
    disk0: int
    disk1: int
    disk2: int
    disk3: int

    @classmethod
    def from_values(cls, values: dict[str, Any], *, file: str | None = None, row: int = -1) -> MachineRecord:
        """Build a record from an enriched row mapping.

        String fields are rendered with str() (a hostname such as "1234" was
        coerced to int by the normalizer). Integer fields must already be ints.
        """
        kwargs: dict[str, Any] = {}
        for name in _STRING_FIELDS:
            value = values.get(name)
            kwargs[name] = "" if value is None else str(value)
        for name in _INT_FIELDS:
            value = values.get(name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise SchemaMismatchError(
                    f"column '{name}' expects an integer, got {value!r}", file=file, row=row
                )
            kwargs[name] = value
        return cls(**kwargs)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


OUTPUT_FIELDS = tuple(MachineRecord.__dataclass_fields__)

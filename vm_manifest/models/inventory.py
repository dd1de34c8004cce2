from __future__ import annotations

from dataclasses import dataclass

"""Inventory context handed to the resolver."""

__all__ = [
    "DatacenterContext",
]


@dataclass(frozen=True)
class DatacenterContext:
    """Datacenter the manifest targets.

    inventory_path is the absolute inventory path of the datacenter (e.g. "/dc1")
    and is used to build folder hints for vApps.
    """
    id: str
    name: str
    inventory_path: str

from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the VM manifest importer.

These are the typed form of config/manifest.yml after schema validation; the
loading itself lives in vm_manifest/config/loader.py.
"""

__all__ = [
    "ManifestConfig",
]


@dataclass(frozen=True)
class ManifestConfig:
    """Root configuration object for one manifest run."""
    csvfile: str  # Manifest CSV path
    datacenter_id: str  # Datacenter the machines live in
    datastore_cluster: str  # Datastore cluster validated before rows are processed
    default_disks: dict[str, str]  # disk0..disk3 -> string-encoded minimum size
    inventory: str  # Static inventory YAML used by the resolver
    query: dict[str, str] = field(default_factory=dict)  # column -> expected value
    timezone: str = "UTC"  # Zone used to compute "today"
    output: str | None = None  # JSON output path (stdout when None)

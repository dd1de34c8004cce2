from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Protocol

import yaml

from ..config.loader import ConfigError
from ..errors import ResolverError
from ..models.inventory import DatacenterContext

"""Inventory path resolution.

The pipeline only depends on the InventoryResolver protocol; resolving symbolic
paths against a live inventory is owned elsewhere. StaticInventoryResolver
answers the same questions from a YAML inventory document and is what the CLI
and the tests use.

Inventory document layout:

    datacenters:
      datacenter-21:
        name: dc1
        inventory_path: /dc1          # optional, defaults to "/<name>"
        folders: [apps, apps/web]     # optional; when present folders are checked
        datastore_clusters:
          pod1: group-p42
        resource_pools:
          - {name: web, id: resgroup-v101}
          - {name: web, pool: cluster2, id: resgroup-v102}
        networks:
          VM Network: network-11
"""

__all__ = [
    "InventoryResolver",
    "StaticInventoryResolver",
    "load_inventory",
    "resolve_paths",
    "split_vapp",
    "ROOT_FOLDER",
]

logger = logging.getLogger(__name__)

ROOT_FOLDER = "/"
_VM_PARTICLE = "/vm/"


class InventoryResolver(Protocol):
    """Lookups the pipeline needs from the inventory. All raise ResolverError."""

    def resolve_datacenter(self, datacenter_id: str) -> DatacenterContext: ...

    def resolve_folder(self, path_hint: str) -> str: ...

    def resolve_resource_pool(self, vapp_name: str, pool_name: str, datacenter: DatacenterContext) -> str: ...

    def resolve_network(self, network_path: str, datacenter: DatacenterContext) -> str: ...

    def resolve_datastore_cluster(self, name: str, datacenter: DatacenterContext) -> str: ...


@dataclass(frozen=True)
class _ResourcePool:
    name: str
    pool: str
    id: str


@dataclass(frozen=True)
class _DatacenterInventory:
    context: DatacenterContext
    folders: frozenset[str] | None
    datastore_clusters: dict[str, str]
    resource_pools: tuple[_ResourcePool, ...]
    networks: dict[str, str]


def _str_map(raw: Any, what: str) -> dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"inventory: {what} must be a mapping")
    return {str(k): str(v) for k, v in raw.items()}


def _parse_datacenter(dc_id: str, raw: Any) -> _DatacenterInventory:
    if not isinstance(raw, dict):
        raise ConfigError(f"inventory: datacenter '{dc_id}' must be a mapping")
    name = str(raw.get("name", dc_id))
    inventory_path = str(raw.get("inventory_path") or f"/{name}").rstrip("/")
    pools = []
    for entry in raw.get("resource_pools") or []:
        if not isinstance(entry, dict) or "name" not in entry or "id" not in entry:
            raise ConfigError(f"inventory: resource pool entries in '{dc_id}' need 'name' and 'id'")
        pools.append(_ResourcePool(name=str(entry["name"]), pool=str(entry.get("pool") or ""), id=str(entry["id"])))
    folders = raw.get("folders")
    return _DatacenterInventory(
        context=DatacenterContext(id=dc_id, name=name, inventory_path=inventory_path),
        folders=frozenset(str(f).strip("/") for f in folders) if folders is not None else None,
        datastore_clusters=_str_map(raw.get("datastore_clusters"), "datastore_clusters"),
        resource_pools=tuple(pools),
        networks=_str_map(raw.get("networks"), "networks"),
    )


class StaticInventoryResolver:
    """InventoryResolver backed by an in-memory inventory document."""

    def __init__(self, document: Mapping[str, Any]) -> None:
        raw_dcs = document.get("datacenters") if isinstance(document, Mapping) else None
        if not isinstance(raw_dcs, dict) or not raw_dcs:
            raise ConfigError("inventory: 'datacenters' mapping is required")
        self._datacenters = {str(k): _parse_datacenter(str(k), v) for k, v in raw_dcs.items()}

    def _inventory(self, datacenter: DatacenterContext) -> _DatacenterInventory:
        try:
            return self._datacenters[datacenter.id]
        except KeyError:
            raise ResolverError(f"datacenter not in inventory: {datacenter.id}") from None

    def resolve_datacenter(self, datacenter_id: str) -> DatacenterContext:
        inv = self._datacenters.get(datacenter_id)
        if inv is None:
            raise ResolverError(f"cannot locate datacenter: {datacenter_id}")
        return inv.context

    def resolve_folder(self, path_hint: str) -> str:
        """Return the folder (relative to the vm root) holding the object at path_hint.

        "/dc1/vm/apps/web" -> "apps", "/dc1/vm/web" -> "/".
        """
        inv = next(
            (d for d in self._datacenters.values() if path_hint.startswith(d.context.inventory_path + _VM_PARTICLE)),
            None,
        )
        if inv is None:
            raise ResolverError(f"{path_hint!r} is not under the vm folder of a known datacenter")
        relative = path_hint[len(inv.context.inventory_path) + len(_VM_PARTICLE):]
        parent, _, _ = relative.rpartition("/")
        folder = parent.strip("/")
        if not folder:
            return ROOT_FOLDER
        if inv.folders is not None and folder not in inv.folders:
            raise ResolverError(f"folder not found: {folder}")
        return folder

    def resolve_resource_pool(self, vapp_name: str, pool_name: str, datacenter: DatacenterContext) -> str:
        inv = self._inventory(datacenter)
        candidates = [p for p in inv.resource_pools if p.name == vapp_name]
        if pool_name:
            candidates = [p for p in candidates if p.pool == pool_name]
        elif len(candidates) > 1:
            candidates = [p for p in candidates if not p.pool]
        if not candidates:
            where = f"{vapp_name}:{pool_name}" if pool_name else vapp_name
            raise ResolverError(f"resource pool not found: {where}")
        if len(candidates) > 1:
            raise ResolverError(f"resource pool {vapp_name!r} is ambiguous, specify a pool")
        return candidates[0].id

    def resolve_network(self, network_path: str, datacenter: DatacenterContext) -> str:
        inv = self._inventory(datacenter)
        prefix = f"{datacenter.inventory_path}/network/"
        key = network_path[len(prefix):] if network_path.startswith(prefix) else network_path
        try:
            return inv.networks[key]
        except KeyError:
            raise ResolverError(f"network not found: {network_path}") from None

    def resolve_datastore_cluster(self, name: str, datacenter: DatacenterContext) -> str:
        inv = self._inventory(datacenter)
        prefix = f"{datacenter.inventory_path}/datastore/"
        key = name[len(prefix):] if name.startswith(prefix) else name
        try:
            return inv.datastore_clusters[key]
        except KeyError:
            raise ResolverError(f"error loading datastore cluster: {name}") from None


def load_inventory(path: Path) -> StaticInventoryResolver:
    """Load a StaticInventoryResolver from a YAML inventory file."""
    if not path.exists():
        raise ConfigError(f"inventory file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid inventory yaml: {e}") from e
    return StaticInventoryResolver(data)


def split_vapp(token: str) -> tuple[str, str]:
    """Split "vapp[:pool]" into (vapp, pool); pool is "" when absent."""
    parts = token.split(":")
    if len(parts) == 2:
        return parts[0], parts[1]
    return parts[0], ""


def resolve_paths(
    values: Mapping[str, Any],
    resolver: InventoryResolver,
    datacenter: DatacenterContext,
    *,
    file: str | None = None,
    row: int = -1,
) -> dict[str, Any]:
    """Return a copy of values with vapp/network replaced by ids and folder added.

    Folder lookup failures fall back to the root folder; resource pool and
    network failures are fatal.
    """
    out = dict(values)
    out["folder"] = ROOT_FOLDER

    vapp = out.get("vapp")
    if vapp is not None and vapp != "":
        vapp_name, pool_name = split_vapp(str(vapp))
        vm_path = f"{datacenter.inventory_path}/vm/{vapp}"
        try:
            out["folder"] = resolver.resolve_folder(vm_path)
        except ResolverError as e:
            logger.debug("error parsing virtual machine path %r: %s - using %s for folder", vm_path, e, ROOT_FOLDER)
        try:
            out["vapp"] = resolver.resolve_resource_pool(vapp_name, pool_name, datacenter)
        except ResolverError as e:
            raise ResolverError(f"row {row}: {e}", file=file, row=row) from e
        logger.debug("row=%s vapp=%s -> resource pool %s folder=%s", row, vapp, out["vapp"], out["folder"])

    network = out.get("network")
    if network is not None and network != "":
        try:
            out["network"] = resolver.resolve_network(str(network), datacenter)
        except ResolverError as e:
            raise ResolverError(f"row {row}: {e}", file=file, row=row) from e
    return out

# Shared pytest fixtures
from __future__ import annotations

import csv
import io
import tempfile
from collections.abc import Callable, Sequence
from datetime import date
from pathlib import Path

import pytest
import yaml

from vm_manifest.logging.init import reset_logging
from vm_manifest.models.inventory import DatacenterContext
from vm_manifest.services.resolver import StaticInventoryResolver
from vm_manifest.tabular.reader import COLUMNS

TODAY = date(2026, 10, 17)

INVENTORY = {
    "datacenters": {
        "datacenter-21": {
            "name": "dc1",
            "folders": ["apps", "apps/web"],
            "datastore_clusters": {"pod1": "group-p42"},
            "resource_pools": [
                {"name": "web", "id": "resgroup-v101"},
                {"name": "web", "pool": "cluster2", "id": "resgroup-v102"},
                {"name": "db", "id": "resgroup-v201"},
            ],
            "networks": {"VM Network": "network-11", "pg-100": "dvportgroup-55"},
        }
    }
}


def make_row(**overrides: object) -> list[str]:
    """Build a 14-cell manifest row; unspecified cells are empty."""
    base = {
        "hostname": "h1",
        "address": "10.0.0.1",
        "gateway": "10.0.0.254",
        "subnet": "24",
        "cpu": "2",
        "memory": "4096",
        "template": "tmpl",
    }
    base.update({k: str(v) for k, v in overrides.items()})
    return [base.get(col, "") for col in COLUMNS]


def render_csv(rows: Sequence[Sequence[str]], header: bool = False) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    if header:
        writer.writerow(COLUMNS)
    writer.writerows(rows)
    return buf.getvalue()


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("VM_MANIFEST_CONFIG", raising=False)
        yield p


@pytest.fixture()
def write_manifest(tmp_path: Path) -> Callable[..., Path]:
    def _write(rows: Sequence[Sequence[str]], header: bool = False, name: str = "machines.csv") -> Path:
        path = tmp_path / name
        path.write_text(render_csv(rows, header=header), encoding="utf-8")
        return path
    return _write


@pytest.fixture()
def resolver() -> StaticInventoryResolver:
    return StaticInventoryResolver(INVENTORY)


@pytest.fixture()
def datacenter(resolver: StaticInventoryResolver) -> DatacenterContext:
    return resolver.resolve_datacenter("datacenter-21")


@pytest.fixture()
def sample_config_yaml() -> str:
    return """csvfile: ./data/machines.csv
datacenter_id: datacenter-21
datastore_cluster: pod1
inventory: ./config/inventory.yml
default_disks:
  disk0: "20"
  disk1: "10"
query:
  vapp: web
timezone: UTC
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "manifest.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    (temp_workdir / "config" / "inventory.yml").write_text(yaml.safe_dump(INVENTORY), encoding="utf-8")
    return cfg

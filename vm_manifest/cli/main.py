from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

import pandas as pd
from dotenv import load_dotenv

from ..config.loader import ConfigError, load_config, resolve_config_path
from ..errors import ManifestError
from ..logging.init import log_summary, log_to_stderr, set_debug, setup_logging
from ..models.config_models import ManifestConfig
from ..models.processing_result import ProcessingResult
from ..services.orchestrator import process_manifest
from ..services.resolver import load_inventory
from ..services.summary import render_summary_line
from ..tabular.reader import COLUMNS, normalize_row, read_manifest_rows

"""CLI entrypoint.

Flow:
- Load .env (override mode), then the YAML config
- Load the static inventory used for path resolution
- Run the manifest pipeline, write the machine list as JSON
- Print a SUMMARY line

When the machine list goes to stdout, log lines (INFO, SUMMARY, errors) go to
stderr so that stdout stays a single JSON document.

Exit codes: 0 success, 1 fatal (config, input, date, resolver errors). There is
no partial-success code: a run either produces the complete list or nothing.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1

INSPECT_SAMPLE_ROWS = 3


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv; a missing file is not an error."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="vm-manifest", description="CSV machine manifest -> enriched machine list")
    p.add_argument("--config", help="Config YAML (default: $VM_MANIFEST_CONFIG or config/manifest.yml)")
    p.add_argument("--output", help="Write the machine list JSON here instead of the configured output / stdout")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print the first normalized rows then exit")
    return p.parse_args(argv)


def _inspect_data(cfg: ManifestConfig) -> int:
    csv_path = Path(cfg.csvfile)
    print(f"FILE: {csv_path.name}")
    sample = []
    try:
        for row_number, cells in read_manifest_rows(csv_path):
            sample.append(normalize_row(cells, row_number, csv_path.name))
            if len(sample) >= INSPECT_SAMPLE_ROWS:
                break
    except ManifestError as e:
        print(f"  read_error: {e}")
        return EXIT_FATAL
    if not sample:
        print("  no data rows")
        return EXIT_SUCCESS
    df = pd.DataFrame(
        [r.values for r in sample],
        index=pd.Index([r.row_number for r in sample], name="row"),
        columns=list(COLUMNS),
    )
    print(df.to_string())
    return EXIT_SUCCESS


def _render_payload(result: ProcessingResult) -> str:
    payload = {
        "datastore_cluster_id": result.datastore_cluster_id,
        "result": [r.to_dict() for r in result.records],
    }
    return json.dumps(payload, indent=4, ensure_ascii=False)


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (空リスト [] はテストからの明示指定)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    config_path = resolve_config_path(args.config)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    output = args.output or cfg.output
    if not output and not args.inspect_data:
        log_to_stderr(logger)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    if args.inspect_data:
        return _inspect_data(cfg)

    try:
        resolver = load_inventory(Path(cfg.inventory))
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    logger.info(f"Processing manifest: {cfg.csvfile}")
    try:
        result = process_manifest(cfg, resolver)
    except ManifestError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    payload = _render_payload(result)
    if output:
        out_path = Path(output)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(payload + "\n", encoding="utf-8")
        logger.info(f"wrote {result.accepted_rows} machines to {out_path}")
    else:
        print(payload)

    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return EXIT_SUCCESS

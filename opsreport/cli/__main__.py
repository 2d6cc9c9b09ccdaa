from __future__ import annotations

import argparse
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from opsreport.config.loader import DEFAULT_CONFIG_PATH, ConfigError, load_config
from opsreport.excel.reader import read_grids
from opsreport.logging.init import log_summary, setup_logging
from opsreport.models.config_models import DashboardConfig
from opsreport.services.orchestrator import ProcessingError, process_all, scan_files
from opsreport.services.summary import render_summary_line

"""CLI entrypoint.

python -m opsreport.cli [--config PATH] [--debug] [--inspect-data]

Flow: load .env -> load config -> process every file -> print SUMMARY line.
Exit codes: 0 all files ok (or none found), 2 at least one file failed,
1 fatal (config error, missing source directory).
"""

__all__ = [
    "EXIT_SUCCESS_ALL",
    "EXIT_PARTIAL_FAILURE",
    "EXIT_FATAL",
    "CONFIG_ENV_VAR",
    "main",
]

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1

CONFIG_ENV_VAR = "OPSREPORT_CONFIG"

INSPECT_SAMPLE_ROWS = 5


def _load_env_file(path: Path, override: bool = False) -> None:
    """Load .env using python-dotenv (a missing file is not an error)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="python -m opsreport.cli",
        description="Restaurant P&L / survey report normalizer",
    )
    p.add_argument("--config", type=Path, default=None, help="Config YAML (default: config/dashboard.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print the first rows of every file then exit")
    return p.parse_args(argv)


def _resolve_config_path(arg: Path | None) -> Path:
    if arg is not None:
        return arg
    env = os.getenv(CONFIG_ENV_VAR)
    if env:
        return Path(env)
    return DEFAULT_CONFIG_PATH


def _inspect_data(cfg: DashboardConfig) -> int:
    directory = Path(cfg.source_directory)
    patterns = [cfg.pl_reports.pattern, cfg.surveys.pattern]
    if cfg.products is not None:
        patterns.append(cfg.products.pattern)
    try:
        files = sorted({f for pattern in patterns for f in scan_files(directory, pattern)})
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not files:
        print("inspect: no matching files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f.name}")
        try:
            grids = read_grids(f)
        except Exception as e:  # 壊れたファイルも一覧は続ける
            print(f"  read_error: {e}")
            continue
        for sname, grid in grids.items():
            width = max((len(r) for r in grid), default=0)
            print(f"  SHEET: {sname} rows={len(grid)} cols={width}")
            for row in grid[:INSPECT_SAMPLE_ROWS]:
                # datetime 等は str で出力
                print("    " + json.dumps(row, ensure_ascii=False, default=str))
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # None のときのみ sys.argv を読む (テストから [] を渡せるように)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"))
    config_path = _resolve_config_path(args.config)
    try:
        cfg = load_config(config_path)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    directory = Path(cfg.source_directory)
    if not directory.exists():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Processing files from: {directory}")
    try:
        result = process_all(cfg)
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    total_files = result.success_files + result.failed_files
    summary_line = render_summary_line(total_files, result)
    # log_summary が "SUMMARY " を付けるので除去
    log_summary(summary_line[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

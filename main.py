"""CLI entrypoint: build market, DeFi and Farcaster snapshots."""

from __future__ import annotations

import argparse
import json
import logging
from collections.abc import Callable
from typing import Any

from dotenv import load_dotenv

from config import CryptoConfig, DefiConfig, FarcasterConfig
from crypto_dashboard import get_crypto_dashboard_data
from defi_analytics import get_defi_analytics_data
from farcaster_widget import get_farcaster_widget_data
from json_sink import snapshot_to_dict, write_snapshot

PIPELINE_NAMES = ("crypto", "defi", "farcaster")


def parse_args() -> argparse.Namespace:
    """Parse command-line flags."""
    parser = argparse.ArgumentParser(description="Build dashboard snapshots from CoinGecko, DeFiLlama and Neynar")
    parser.add_argument(
        "--pipeline",
        choices=[*PIPELINE_NAMES, "all"],
        default="all",
        help="Which snapshot to build (default: all)",
    )
    parser.add_argument("--username", default=None, help="Farcaster username (defaults to FARCASTER_USERNAME)")
    parser.add_argument("--output-dir", default=None, help="Directory for <pipeline>.json files")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print snapshots to stdout instead of writing files",
    )
    return parser.parse_args()


def _pipelines(username: str | None) -> dict[str, Callable[[], Any]]:
    return {
        "crypto": lambda: get_crypto_dashboard_data(CryptoConfig.from_env()),
        "defi": lambda: get_defi_analytics_data(DefiConfig.from_env()),
        "farcaster": lambda: get_farcaster_widget_data(username, FarcasterConfig.from_env()),
    }


def run(selected: list[str], username: str | None, output_dir: str | None, dry_run: bool) -> int:
    """Run each selected pipeline independently; return the number that failed."""
    pipelines = _pipelines(username)
    built = 0
    failed = 0

    for name in selected:
        logging.info("Building %s snapshot", name)
        try:
            snapshot = pipelines[name]()
        except Exception as exc:  # isolate per-pipeline failures
            failed += 1
            logging.exception("Pipeline %s failed: %s", name, exc)
            continue

        if dry_run:
            print(json.dumps({name: snapshot_to_dict(snapshot)}, indent=2, ensure_ascii=False))
        else:
            write_snapshot(snapshot, name, output_dir)
        built += 1

    logging.info("Run complete. built=%s failed=%s", built, failed)
    return failed


def main() -> None:
    """Initialize config and execute the selected pipelines."""
    load_dotenv()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    args = parse_args()

    selected = list(PIPELINE_NAMES) if args.pipeline == "all" else [args.pipeline]
    failed = run(selected, args.username, args.output_dir, args.dry_run)
    if failed:
        raise SystemExit(1)


if __name__ == "__main__":
    main()

"""Maintenance CLI for the file-backed draft store.

    python drafts.py summary      # what the recovery prompt would offer
    python drafts.py stats        # size and save time per well-known key
    python drafts.py cleanup      # evict expired or unreadable records
    python drafts.py discard      # start fresh

Every command prints one JSON document to stdout.
"""
from __future__ import annotations
import argparse
import asyncio
import json
from pathlib import Path
from typing import Any, Iterable, Optional

from drafts_lib.config import load_config
from drafts_lib.logging_config import configure_logging
from drafts_lib.main import DraftServices, create_services

COMMANDS = ("summary", "stats", "cleanup", "discard")


def get_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="drafts", description="Inspect and maintain saved form drafts")
    p.add_argument("--config", type=Path, default=None, help="Path to drafts_config.yml")
    p.add_argument("--data-dir", default=None, help="Override the configured data directory")
    p.add_argument("command", choices=COMMANDS, help="Action to run")
    return p


def parse_args(argv: Optional[Iterable[str]] = None) -> argparse.Namespace:
    if argv is not None:
        argv = list(argv)
    return get_parser().parse_args(argv)


async def run_command(services: DraftServices, command: str) -> Any:
    if command == "summary":
        return (await services.reconciler.reconcile()).model_dump(mode="json")
    if command == "stats":
        stats = await services.store.stats()
        return stats.model_dump(mode="json") if stats is not None else None
    if command == "cleanup":
        return {"evicted": await services.store.cleanup_expired()}
    if command == "discard":
        await services.reconciler.discard()
        return {"ok": True}
    raise ValueError(f"Unknown command: {command!r}")


def main(argv: Optional[Iterable[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.config)
    config = load_config(args.config)
    if args.data_dir:
        config.data_dir = args.data_dir
    services = create_services(config)
    result = asyncio.run(run_command(services, args.command))
    print(json.dumps(result, indent=2))
    return 0

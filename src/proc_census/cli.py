"""CLI interface for proc_census."""

from __future__ import annotations

import argparse
import json
import logging
import signal
import sys
import time

from . import __version__
from .config import load_config


def _cmd_collect(args: argparse.Namespace) -> None:
    """Run process state collection until interrupted."""
    cfg = load_config(args.config)

    from .collector.manager import CollectorManager
    from .exporter.local import LocalExporter

    exporters = []

    if cfg.local_exporter.enabled:
        local_exp = LocalExporter(cfg.local_exporter)
        exporters.append(local_exp)

    if cfg.mode == "online":
        from .exporter.otel import OtelExporter
        otel_exp = OtelExporter(cfg.otel)
        otel_exp.install_global()
        exporters.append(otel_exp)

    manager = CollectorManager(cfg.collector, cfg.processes)
    for exp in exporters:
        manager.add_sink(exp.export)

    stop = False

    def _handle_signal(_sig: int, _frame: object) -> None:
        nonlocal stop
        stop = True

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)

    manager.start()
    print(f"proc_census collector running (mode={cfg.mode}, interval={cfg.collector.interval_seconds}s)")
    print("Press Ctrl+C to stop.\n")
    try:
        while not stop:
            time.sleep(0.5)
    finally:
        manager.stop()
        for exp in exporters:
            exp.shutdown()
    print("\nCollection stopped.")


def print_fields(fields: dict[str, int]) -> None:
    """Pretty-print one counter mapping using Rich."""
    from rich.console import Console
    from rich.table import Table

    table = Table(title="Processes")
    table.add_column("State", style="green")
    table.add_column("Count", justify="right", style="cyan")
    for key in sorted(fields):
        style = "bold" if key == "total" else ""
        table.add_row(key, str(fields[key]), style=style)
    Console().print(table)


def _cmd_once(args: argparse.Namespace) -> None:
    """Run a single collection cycle and print the counters."""
    cfg = load_config(args.config)
    if args.force_ps:
        cfg.processes.force_ps = True
    if args.force_proc:
        cfg.processes.force_proc = True

    from .collector.errors import CollectionError
    from .collector.processes import ProcessesCollector

    collector = ProcessesCollector(cfg.processes)
    try:
        fields = collector.gather()
    except CollectionError as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.table:
        print_fields(fields)
    else:
        print(json.dumps({"name": collector.name, "source": collector.source, "fields": fields}, indent=2))


def _cmd_version(_args: argparse.Namespace) -> None:
    print(f"proc_census {__version__}")


def main(argv: list[str] | None = None) -> None:
    """Entry point for the proc-census CLI."""
    parser = argparse.ArgumentParser(
        prog="proc-census",
        description="Count processes by run state",
    )
    parser.add_argument("--config", "-c", default=None, help="Path to proc_census.yaml")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # collect
    collect_p = sub.add_parser("collect", help="Start periodic process state collection")
    collect_p.set_defaults(func=_cmd_collect)

    # once
    once_p = sub.add_parser("once", help="Collect process states once and print them")
    once_p.add_argument("--force-ps", action="store_true", help="Always read states from ps")
    once_p.add_argument("--force-proc", action="store_true", help="Always read states from /proc")
    once_p.add_argument("--table", action="store_true", help="Print a rich table instead of JSON")
    once_p.set_defaults(func=_cmd_once)

    # version
    ver_p = sub.add_parser("version", help="Print version")
    ver_p.set_defaults(func=_cmd_version)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()

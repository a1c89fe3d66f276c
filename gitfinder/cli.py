"""CLI entry point for gitfinder."""

from __future__ import annotations

import argparse
import shutil
import sys
from pathlib import Path

from gitfinder import __version__
from gitfinder.errors import ExitCode, GitFinderError, GitNotFoundError
from gitfinder.filters import NOISE_DIRS
from gitfinder.limiter import DEFAULT_MAX_OPEN
from gitfinder.log import configure_logging
from gitfinder.report import ReportWriter
from gitfinder.scanner import DEFAULT_WORKERS, WalkConfig, WalkScheduler, WalkStats


def _positive_int(value: str) -> int:
    try:
        n = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"{value!r} is not an integer") from None
    if n < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {n}")
    return n


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gitfinder",
        description="Find git repositories that have no 'origin' remote.",
    )
    parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Directory to start walking from (default: current directory)",
    )
    parser.add_argument(
        "--skip",
        action="append",
        default=[],
        metavar="NAME",
        help="Ignore directories with this exact name (repeatable)",
    )
    parser.add_argument(
        "--skip-noise",
        action="store_true",
        help="Also ignore common build/dependency directories (target, node_modules, ...)",
    )
    parser.add_argument(
        "--max-open",
        type=_positive_int,
        default=DEFAULT_MAX_OPEN,
        metavar="N",
        help=f"Maximum directories read at once (default: {DEFAULT_MAX_OPEN})",
    )
    parser.add_argument(
        "--workers",
        type=_positive_int,
        default=DEFAULT_WORKERS,
        metavar="N",
        help=f"Worker threads (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output matches as a JSON array instead of CSV",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print walk statistics to stderr when done",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Diagnostic verbosity on stderr (default: WARNING)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"gitfinder {__version__}",
    )
    return parser


def print_stats(stats: WalkStats) -> None:
    """Print a short Rich summary of the walk to stderr."""
    from rich.console import Console
    from rich.table import Table

    table = Table(title="walk", show_header=False, border_style="dim")
    table.add_column("", style="bold cyan")
    table.add_column("", justify="right", style="bold green")
    table.add_row("directories walked", f"{stats.units:,}")
    table.add_row("unpushed repos", f"{stats.matches:,}")
    table.add_row("errors", f"{stats.errors:,}")
    table.add_row("peak concurrent units", f"{stats.peak:,}")
    Console(stderr=True).print(table)


def _resolve_root(path: str) -> Path:
    try:
        root = Path(path).expanduser().resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        reason = getattr(exc, "strerror", None) or exc
        raise GitFinderError(f"Cannot resolve {path}: {reason}", ExitCode.INVALID_ARGS) from exc
    if not root.is_dir():
        raise GitFinderError(f"Not a directory: {root}", ExitCode.INVALID_ARGS)
    return root


def run(args: argparse.Namespace) -> WalkStats:
    """Walk the requested tree, writing matches to stdout."""
    root = _resolve_root(args.path)
    if shutil.which("git") is None:
        raise GitNotFoundError("git executable not found on PATH")

    blocklist = set(args.skip)
    if args.skip_noise:
        blocklist |= NOISE_DIRS
    config = WalkConfig(
        root=root,
        blocklist=frozenset(blocklist),
        max_open=args.max_open,
        workers=args.workers,
    )

    writer = ReportWriter(sys.stdout, as_json=args.json_output)
    writer.open()
    stats = WalkScheduler.from_config(config, writer).walk(config.root)
    writer.close()
    return stats


def main(argv: list[str] | None = None) -> int:
    """Entry point for the gitfinder CLI."""
    args = _build_parser().parse_args(argv)
    logger = configure_logging(args.log_level)

    try:
        stats = run(args)
    except GitFinderError as exc:
        logger.error("%s", exc)
        return exc.code

    if args.stats:
        print_stats(stats)
    return ExitCode.SUCCESS


if __name__ == "__main__":
    sys.exit(main())

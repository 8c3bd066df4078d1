from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from rich.console import Console
from rich.markup import escape

from .config import Settings, load_settings
from .errors import GoProConcatError
from .file_times import aggregate_file_times
from .logging_utils import configure_logging
from .merger import Merger
from .plan_table import print_plan
from .requirements import check_requirements
from .version import __version__

LOGGER = logging.getLogger(__name__)
CONSOLE = Console()

PROG = "goproconcat"
USAGE = f"Usage: {PROG} outputfile inputfile1 [inputfile2 ...]"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Merge chaptered camera recordings into one file, keeping the original creation time.",
    )
    parser.add_argument("output", nargs="?", type=Path, help="Path of the merged file to write")
    parser.add_argument("inputs", nargs="*", type=Path, help="Chapter files to merge, in any order")
    parser.add_argument("--config", type=Path, default=None, help="Path to a YAML settings file")
    parser.add_argument("--dry-run", action="store_true", help="Show the merge plan without running ffmpeg")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    overrides: dict[str, object] = {}
    if args.dry_run:
        overrides["dry_run"] = True
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    if args.log_file is not None:
        overrides["log_file"] = args.log_file
    return replace(settings, **overrides) if overrides else settings


def _report(prefix: str, exc: BaseException) -> int:
    CONSOLE.print(f"[red]{escape(prefix)}: {escape(str(exc))}[/red]")
    return 1


def run(args: argparse.Namespace) -> int:
    try:
        settings = _apply_cli_overrides(load_settings(args.config), args)
    except (OSError, ValueError) as exc:
        return _report("Error loading configuration", exc)

    try:
        configure_logging(settings.log_level, log_file=settings.log_file)
    except OSError as exc:
        return _report("Error configuring logging", exc)

    try:
        tools = check_requirements(settings)
    except GoProConcatError as exc:
        CONSOLE.print(f"[red]{escape(str(exc))}[/red]")
        return 1

    inputs: list[Path] = list(args.inputs)
    try:
        aggregate = aggregate_file_times(inputs)
    except GoProConcatError as exc:
        return _report("Error getting file times", exc)

    try:
        merger = Merger(tools, settings, on_plan=lambda plan: print_plan(plan, CONSOLE, aggregate))
        merger.run(args.output, inputs, aggregate)
    except GoProConcatError as exc:
        LOGGER.debug("Merge failed", exc_info=True)
        return _report("Error merging files", exc)

    if settings.dry_run:
        CONSOLE.print("[yellow]Dry run complete; no files were written[/yellow]")
    else:
        CONSOLE.print("[green]Files merged successfully[/green]")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_intermixed_args(argv)

    if args.output is None or not args.inputs:
        CONSOLE.print(USAGE, markup=False, highlight=False)
        return 0

    return run(args)


if __name__ == "__main__":
    sys.exit(main())

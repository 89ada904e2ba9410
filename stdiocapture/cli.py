"""
stdiocapture CLI: run a Python script or module under capture.

The target runs in-process (via runpy) with sys.argv set to its own
arguments. Once it finishes, a report of what it wrote is printed:

    stdiocapture run script.py --flag
    stdiocapture run --json -m package.module arg
"""

from __future__ import annotations

import argparse
import json
import logging
import runpy
import sys
import traceback
from typing import Any

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from stdiocapture.capture import capture_sync
from stdiocapture.options import normalize_options
from stdiocapture.result import CaptureResult

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="stdiocapture",
        description="Capture stdout/stderr of Python code",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser(
        "run",
        help="Run a script or module in-process and report its output",
    )
    run_parser.add_argument(
        "--no-echo",
        action="store_true",
        help="Do not forward output to the terminal while running",
    )
    run_parser.add_argument(
        "--color",
        action="store_true",
        help="Leave color environment variables untouched",
    )
    run_parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the report as JSON",
    )
    run_parser.add_argument(
        "-m",
        action="store_true",
        dest="as_module",
        help="Treat TARGET as a module name instead of a script path",
    )
    run_parser.add_argument("target", help="Script path (or module name with -m)")
    run_parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the target",
    )

    args = parser.parse_args(argv)

    # Setup logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.command == "run":
        return handle_run(args)
    else:
        parser.print_help()
        return 0


def handle_run(args: argparse.Namespace) -> int:
    """Handle the run subcommand."""
    overrides: dict[str, Any] = {}
    if args.no_echo:
        overrides["echo"] = False
    if args.color:
        overrides["no_color"] = False

    try:
        options = normalize_options(overrides)
    except (TypeError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    exit_code = 0

    def target() -> None:
        nonlocal exit_code
        exit_code = run_target(args.target, args.args, as_module=args.as_module)

    logger.debug("Running %s under capture", args.target)
    try:
        result = capture_sync(target, options)
    except Exception:
        traceback.print_exc()
        return 1

    if args.json_output:
        print(json.dumps({"exit_code": exit_code, **result.to_dict()}, indent=2))
    else:
        render_report(result, exit_code)

    return exit_code


def run_target(target: str, target_args: list[str], as_module: bool = False) -> int:
    """
    Execute a script or module as __main__ and return its exit code.

    SystemExit raised by the target becomes the return value instead of
    propagating, so the capture around it completes normally.
    """
    old_argv = sys.argv
    sys.argv = [target, *target_args]
    try:
        if as_module:
            runpy.run_module(target, run_name="__main__", alter_sys=True)
        else:
            runpy.run_path(target, run_name="__main__")
    except SystemExit as e:
        return _exit_code(e.code)
    finally:
        sys.argv = old_argv
    return 0


def _exit_code(code: Any) -> int:
    if code is None:
        return 0
    if isinstance(code, int):
        # sys.exit(True) / sys.exit(False)
        return int(code)
    # sys.exit("message") prints the message and exits with status 1
    print(code, file=sys.stderr)
    return 1


def render_report(
    result: CaptureResult,
    exit_code: int,
    console: Console | None = None,
) -> None:
    """Display captured output as rich panels plus a summary table."""
    if console is None:
        console = Console()

    if not result.has_content():
        console.print("[yellow]No output captured.[/yellow]")

    for name, text, style in (
        ("stdout", result.stdout, "cyan"),
        ("stderr", result.stderr, "red"),
    ):
        if text:
            console.print(Panel(Text(text), title=name, border_style=style))

    summary = Table(title="Capture Summary", show_header=True, header_style="bold")
    summary.add_column("Channel", style="cyan")
    summary.add_column("Chars", justify="right")
    summary.add_column("Lines", justify="right")

    for name, text in (
        ("stdout", result.stdout),
        ("stderr", result.stderr),
        ("combined", result.combined),
    ):
        summary.add_row(name, str(len(text)), str(len(text.splitlines())))

    status = "[green]0[/green]" if exit_code == 0 else f"[red]{exit_code}[/red]"
    summary.add_row("", "", "")
    summary.add_row("Exit code", status, "")

    console.print(summary)

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Sequence

from strictsh import __version__
from strictsh.core.config import get_runtime_config
from strictsh.core.errors import StrictError, format_error
from strictsh.core.guard import GuardedExecutor
from strictsh.core.logging import configure_logging, default_log_dir
from strictsh.resources.library import BASH_LIBRARY
from strictsh.services.shell_runner import run_shell_file


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="strictsh",
        description="Strict mode for bash: fail fast, trace failures, guard commands.",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Print version and exit.",
    )

    subparsers = parser.add_subparsers(dest="command")

    lib_parser = subparsers.add_parser(
        "print-lib",
        help='Print the bash library. Load it with: source <(strictsh print-lib)',
    )
    lib_parser.set_defaults(handler=handle_print_lib)

    run_parser = subparsers.add_parser(
        "run",
        help="Run a bash script with the library loaded and strict mode enabled.",
    )
    run_parser.add_argument("script", help="Path to the bash script.")
    run_parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the script.",
    )
    run_parser.add_argument(
        "--no-strict",
        dest="strict",
        action="store_false",
        help="Load the library without calling strict::enable.",
    )
    run_parser.set_defaults(handler=handle_run)

    guard_parser = subparsers.add_parser(
        "guard",
        help="Run a command, print its status code and exit 0.",
    )
    guard_parser.add_argument("program", help="Executable to run.")
    guard_parser.add_argument(
        "args",
        nargs=argparse.REMAINDER,
        help="Arguments passed to the executable.",
    )
    guard_parser.set_defaults(handler=handle_guard)

    config_parser = subparsers.add_parser(
        "print-config",
        help="Print the resolved runtime config to stdout.",
    )
    config_parser.set_defaults(handler=handle_print_config)

    return parser


def handle_print_lib(_args: argparse.Namespace) -> int:
    sys.stdout.write(BASH_LIBRARY)
    return 0


def handle_run(args: argparse.Namespace) -> int:
    script_path = Path(args.script).expanduser()
    if not script_path.exists() or not script_path.is_file():
        raise SystemExit(f"Script not found: {script_path}")
    result = run_shell_file(script_path, args=args.args, strict=args.strict)
    return result.returncode


def handle_guard(args: argparse.Namespace) -> int:
    status = GuardedExecutor().run(None, args.program, *args.args)
    print(status)
    return 0


def handle_print_config(_args: argparse.Namespace) -> int:
    payload = {
        "runtime": get_runtime_config().model_dump(),
        "log_dir": str(default_log_dir()),
    }
    print(json.dumps(payload, indent=2))
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = get_runtime_config()
    configure_logging(
        level=config.log_level,
        format_name=config.log_format,
        log_dir=default_log_dir() if config.log_to_file else None,
    )

    if args.command is None:
        parser.print_help()
        raise SystemExit(2)

    try:
        code = args.handler(args)
    except StrictError as exc:
        print(f"strictsh: {format_error(exc)}", file=sys.stderr)
        raise SystemExit(2) from exc
    raise SystemExit(code)


if __name__ == "__main__":
    main()

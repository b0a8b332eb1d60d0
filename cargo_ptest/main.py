"""Entry point for cargo-ptest.

Parses the captured stdout and stderr of a ``cargo test`` run and prints a
structured view of every test, optionally writing a YAML report.

Arguments after ``--`` are treated as ``cargo test`` arguments: with
``--print-cargo-args`` the filtered command line a caller should use to
produce parseable output is printed instead.
"""

from __future__ import annotations

import argparse
import shlex
import sys
from pathlib import Path

from cargo_ptest.config import (
    ConfigError,
    configuration_from_args,
    filter_forward_args,
    load_configuration,
)
from cargo_ptest.parsing import ParseError, parse
from cargo_ptest.reporting.reporter import Reporter


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Arguments argparse does not recognise are returned in ``extra_args``.
    """
    parser = argparse.ArgumentParser(
        description="Parse captured cargo test output into structured results"
    )
    parser.add_argument(
        "--stdout",
        type=Path,
        default=None,
        help="File holding the captured stdout of cargo test",
    )
    parser.add_argument(
        "--stderr",
        type=Path,
        default=None,
        help="File holding the captured stderr of cargo test",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Path to write the YAML report file",
    )
    parser.add_argument(
        "--config-file",
        type=Path,
        default=Path(".ptest_config"),
        help="Path to the JSON config file (default: .ptest_config)",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        default=False,
        help="Disable ANSI colours in the text view",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Trace block detection to stderr",
    )
    parser.add_argument(
        "--print-cargo-args",
        action="store_true",
        default=False,
        help="Print the cargo test command line for the arguments after --",
    )
    args, extra_args = parser.parse_known_args(argv)
    args.extra_args = extra_args
    return args


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    if argv is None:
        argv = sys.argv[1:]
    own_argv, cargo_args = filter_forward_args(argv)
    args = parse_args(own_argv)

    if args.print_cargo_args:
        print(shlex.join(["cargo", "test", *cargo_args]))
        return 0

    flags = [
        flag for flag, enabled in (
            ("--no-color", args.no_color),
            ("--debug", args.debug),
        ) if enabled
    ] + args.extra_args
    try:
        config = configuration_from_args(
            flags, base=load_configuration(args.config_file),
        )
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.stdout is None or args.stderr is None:
        print("Error: --stdout and --stderr are required", file=sys.stderr)
        return 1

    try:
        stdout = args.stdout.read_text(encoding="utf-8")
        stderr = args.stderr.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read captured output: {e}", file=sys.stderr)
        return 1

    try:
        groups = parse(stdout, stderr, config)
    except ParseError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    reporter = Reporter()
    reporter.add_groups(groups)
    print(reporter.render_text(config))

    if args.output:
        reporter.write_yaml(args.output)
        print(f"Report written to: {args.output}")

    return 1 if reporter.has_failures else 0


if __name__ == "__main__":
    sys.exit(main())

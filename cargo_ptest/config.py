"""Run configuration for cargo-ptest.

A ``Configuration`` is built once, from the optional ``.ptest_config`` JSON
file and the command-line flags, and then threaded read-only through the
parser and the reporter.
"""

from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

# Default configuration values
DEFAULT_CONFIG: dict[str, Any] = {
    "no_color": False,
    "debug": False,
}

# Flags consumed by cargo-ptest itself (everything before "--")
VALID_ARGS = ("--no-color", "--debug")

# Flags that change the shape of cargo test output and break parsing.
# Colour flags are dropped too, since "--color=never" is always appended.
FILTERED_FORWARD_ARGS = frozenset({
    "--nocapture",
    "-v",
    "--verbose",
    "--color=always",
    "--color=auto",
    "--color=never",
})


class ConfigError(ValueError):
    """Raised for arguments or settings cargo-ptest does not understand."""


@dataclass(frozen=True)
class Configuration:
    """Read-only settings shared by the parser and the reporter."""

    no_color: bool = False
    debug: bool = False


def load_configuration(path: Path | None = None) -> Configuration:
    """Load configuration from a JSON file, falling back to defaults.

    Missing keys are filled from ``DEFAULT_CONFIG``.  A missing, unreadable
    or corrupted file yields the defaults.
    """
    data: dict[str, Any] = dict(DEFAULT_CONFIG)
    if path is not None and path.exists():
        try:
            loaded = json.loads(path.read_text())
            if isinstance(loaded, dict):
                data = {**DEFAULT_CONFIG, **loaded}
        except (json.JSONDecodeError, OSError):
            data = dict(DEFAULT_CONFIG)
    return Configuration(
        no_color=bool(data.get("no_color", DEFAULT_CONFIG["no_color"])),
        debug=bool(data.get("debug", DEFAULT_CONFIG["debug"])),
    )


def configuration_from_args(
    args: list[str],
    base: Configuration | None = None,
) -> Configuration:
    """Apply cargo-ptest flags on top of *base*.

    Raises:
        ConfigError: If an argument is not one of ``VALID_ARGS``.
    """
    config = base if base is not None else Configuration()
    for arg in args:
        if arg not in VALID_ARGS:
            raise ConfigError(f"Invalid argument {arg}")
        if arg == "--no-color":
            config = dataclasses.replace(config, no_color=True)
        elif arg == "--debug":
            config = dataclasses.replace(config, debug=True)
    return config


def filter_forward_args(args: list[str]) -> tuple[list[str], list[str]]:
    """Split ``[own args] -- [cargo test args]``.

    Arguments after ``--`` are meant for ``cargo test``.  Flags that would
    make its output unparseable are removed and ``--color=never`` is
    appended.

    Returns:
        ``(own_args, forward_args)``.
    """
    own_args: list[str] = []
    forward_args: list[str] = []
    passed_separator = False

    for arg in args:
        if passed_separator:
            if arg not in FILTERED_FORWARD_ARGS:
                forward_args.append(arg)
        elif arg == "--":
            passed_separator = True
        else:
            own_args.append(arg)

    forward_args.append("--color=never")
    return own_args, forward_args

"""Report generation for parsed test groups.

Renders a linear, optionally coloured, text view for the terminal and a
structured YAML dump of every group, test and summary.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

import yaml

from cargo_ptest.config import Configuration
from cargo_ptest.parsing.models import ParsedTest, ParsedTestGroup, Status, Summary


class Colour(Enum):
    """ANSI foreground colours used by the text view."""

    GREEN = "32"
    RED = "31"
    ORANGE = "33"


_STATUS_COLOURS = {
    Status.OK: Colour.GREEN,
    Status.FAILED: Colour.RED,
    Status.IGNORED: Colour.ORANGE,
}


def colour(c: Colour, text: Any, config: Configuration | None = None) -> str:
    """Wrap *text* in an ANSI colour unless colours are disabled."""
    if config is not None and config.no_color:
        return str(text)
    return f"\x1b[{c.value}m{text}\x1b[0m"


def _test_to_dict(test: ParsedTest) -> dict[str, Any]:
    entry: dict[str, Any] = {
        "kind": test.kind.value,
        "module_path": test.module_path,
        "status": test.status.value,
    }
    # Optional fields are omitted rather than written as null
    optional = {
        "source_file_path": test.source_file_path,
        "line_number": test.line_number,
        "note": test.note,
        "ignore_reason": test.ignore_reason,
        "failure_detail": test.failure_detail,
    }
    entry.update({k: v for k, v in optional.items() if v is not None})
    return entry


def _summary_to_dict(summary: Summary) -> dict[str, Any]:
    return {
        "status": summary.status.value,
        "passed": summary.passed,
        "failed": summary.failed,
        "ignored": summary.ignored,
        "measured": summary.measured,
        "filtered": summary.filtered,
        "elapsed_seconds": summary.elapsed_seconds,
    }


class Reporter:
    """Collects parsed groups and renders them as text or YAML."""

    def __init__(self) -> None:
        self.groups: list[ParsedTestGroup] = []

    def add_groups(self, groups: list[ParsedTestGroup]) -> None:
        """Add parsed groups to the report, keeping their order."""
        self.groups.extend(groups)

    def totals(self) -> dict[str, int]:
        """Count test outcomes across all groups.

        Counts come from the parsed test lines, so doc tests (which have
        no summary) are included.
        """
        totals = {"total": 0, "passed": 0, "failed": 0, "ignored": 0}
        for group in self.groups:
            for test in group.tests:
                totals["total"] += 1
                if test.status is Status.OK:
                    totals["passed"] += 1
                elif test.status is Status.FAILED:
                    totals["failed"] += 1
                else:
                    totals["ignored"] += 1
        return totals

    @property
    def has_failures(self) -> bool:
        return self.totals()["failed"] > 0

    def generate_report(self) -> dict[str, Any]:
        """Generate the report as a plain dict."""
        groups = []
        for group in self.groups:
            entry: dict[str, Any] = {
                "crate_name": group.crate_name,
                "kind": group.kind.value,
                "binary_path": list(group.binary_path),
                "tests": [_test_to_dict(t) for t in group.tests],
            }
            if group.summary is not None:
                entry["summary"] = _summary_to_dict(group.summary)
            groups.append(entry)
        return {
            "report": {
                "summary": self.totals(),
                "groups": groups,
            }
        }

    def write_yaml(self, path: Path) -> None:
        """Write the report as a YAML file.

        Args:
            path: File path to write the YAML report to.
        """
        report = self.generate_report()
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.dump(
                report,
                f,
                default_flow_style=False,
                sort_keys=False,
                allow_unicode=True,
            )

    def _render_test(self, test: ParsedTest, config: Configuration) -> list[str]:
        name = test.module_path
        if test.source_file_path is not None:
            name = f"{test.source_file_path} - {name} (line {test.line_number})"
        line = f"  {colour(_STATUS_COLOURS[test.status], test.status.value, config)} {name}"
        if test.note:
            line += f" [{test.note}]"
        if test.ignore_reason:
            line += f" ({test.ignore_reason})"
        lines = [line]
        if test.failure_detail:
            lines.extend(f"      {d}" for d in test.failure_detail.splitlines())
        return lines

    def render_text(self, config: Configuration | None = None) -> str:
        """Render all groups as a linear text view."""
        config = config if config is not None else Configuration()
        out: list[str] = []
        for group in self.groups:
            if group.binary_path:
                out.append(f"{group.crate_name} ({'/'.join(group.binary_path)})")
            else:
                out.append(group.crate_name)
            for test in group.tests:
                out.extend(self._render_test(test, config))
            if group.summary is not None:
                s = group.summary
                out.append(
                    f"  result: {colour(_STATUS_COLOURS[s.status], s.status.value, config)}"
                    f" - {s.passed} passed, {s.failed} failed, {s.ignored} ignored,"
                    f" {s.measured} measured, {s.filtered} filtered out"
                    f" in {s.elapsed_seconds:.2f}s"
                )
        totals = self.totals()
        failed = totals["failed"]
        out.append(
            f"{totals['total']} tests: "
            f"{colour(Colour.GREEN, totals['passed'], config)} passed, "
            f"{colour(Colour.RED if failed else Colour.GREEN, failed, config)} failed, "
            f"{colour(Colour.ORANGE, totals['ignored'], config)} ignored"
        )
        return "\n".join(out)

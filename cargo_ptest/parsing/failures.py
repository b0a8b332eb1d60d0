"""Correlation of a block's ``failures:`` section with its failed tests.

After the per-test lines, a binary with failures prints::

    failures:
    ---- tests::b stdout ----
    thread 'tests::b' panicked at src/lib.rs:10:5:
    ...
    failures:
        tests::b
    test result: FAILED. ...

The text under each ``---- <path> <channel> ----`` delimiter is the
diagnostic for that test.  The second ``failures:`` line closes the
diagnostics and is followed by one name per failed test.
"""

from __future__ import annotations

import dataclasses
import re

from cargo_ptest.parsing.models import ParsedTest, Status, TestKind

FAILURES_MARKER = "failures:"

DELIMITER_RE = re.compile(r"^---- (?P<path>.+) (?P<channel>\S+) ----$")


def collect_diagnostics(
    lines: list[str],
    start: int,
    failed_count: int,
) -> tuple[list[tuple[str, str]], int]:
    """Extract ``(module_path, text)`` diagnostics from a failures section.

    Args:
        lines: All lines of the block.
        start: Index of the first line after the test result lines.
        failed_count: Number of failed tests, i.e. the length of the name
            list following the second ``failures:`` marker.

    Returns:
        The diagnostics in output order, and the index of the first line
        after the skipped name list.  If no section is found the index is
        *start*.
    """
    diagnostics: list[tuple[str, str]] = []
    markers_seen = 0
    current_path: str | None = None
    current_text: list[str] = []

    def _flush() -> None:
        nonlocal current_path
        if current_path is not None:
            diagnostics.append((current_path, "\n".join(current_text)))
            current_path = None
            current_text.clear()

    index = start
    while index < len(lines):
        line = lines[index]
        stripped = line.strip()

        if stripped == FAILURES_MARKER:
            markers_seen += 1
            if markers_seen == 2:
                _flush()
                # Skip the list of failed test names
                return diagnostics, min(index + 1 + failed_count, len(lines))
            index += 1
            continue

        if markers_seen == 1:
            delimiter = DELIMITER_RE.match(stripped)
            if delimiter:
                _flush()
                current_path = delimiter.group("path")
            elif current_path is not None:
                current_text.append(line)

        index += 1

    _flush()
    if markers_seen == 0:
        return diagnostics, start
    return diagnostics, index


def attach_failure_details(
    tests: list[ParsedTest],
    diagnostics: list[tuple[str, str]],
) -> list[ParsedTest]:
    """Return a copy of *tests* with failure details filled in.

    The first diagnostic for a module path attaches to the first normal
    failed test with exactly that path.  Other diagnostics are dropped.
    """
    details: dict[str, str] = {}
    for path, text in diagnostics:
        details.setdefault(path, text)

    attached: list[ParsedTest] = []
    for test in tests:
        if (
            test.kind is TestKind.NORMAL
            and test.status is Status.FAILED
            and test.module_path in details
        ):
            test = dataclasses.replace(
                test, failure_detail=details.pop(test.module_path),
            )
        attached.append(test)
    return attached


def correlate_failures(
    tests: list[ParsedTest],
    lines: list[str],
    start: int,
) -> tuple[list[ParsedTest], int]:
    """Attach diagnostics to failed tests when the block has any.

    Returns:
        The (possibly new) test list and the index at which the summary
        search should resume.
    """
    failed_count = sum(1 for t in tests if t.status is Status.FAILED)
    if failed_count == 0:
        return tests, start
    diagnostics, resume = collect_diagnostics(lines, start, failed_count)
    return attach_failure_details(tests, diagnostics), resume

"""Parsing of the ``test result:`` line that closes a binary's output.

``test result: FAILED. 1 passed; 1 failed; 0 ignored; 0 measured; 0 filtered out; finished in 0.01s``

The overall token must be ``ok`` or ``FAILED``.  Any count or the elapsed
time that is absent or unreadable is reported as zero rather than failing
the parse.
"""

from __future__ import annotations

import re

from cargo_ptest.parsing.errors import UnrecognizedSummaryStatus
from cargo_ptest.parsing.models import Status, Summary

SUMMARY_PREFIX = "test result:"

SUMMARY_STATUS_RE = re.compile(r"^test result: (?P<status>[^\s.]*)\.?")

_FIELD_RES: dict[str, re.Pattern[str]] = {
    "passed": re.compile(r"(\S+) passed"),
    "failed": re.compile(r"(\S+) failed"),
    "ignored": re.compile(r"(\S+) ignored"),
    "measured": re.compile(r"(\S+) measured"),
    "filtered": re.compile(r"(\S+) filtered out"),
}

ELAPSED_RE = re.compile(r"finished in (\S+?)s\b")

_SUMMARY_STATUSES = {"ok": Status.OK, "FAILED": Status.FAILED}


def is_summary_line(line: str) -> bool:
    return line.strip().startswith(SUMMARY_PREFIX)


def _count(pattern: re.Pattern[str], text: str) -> int:
    match = pattern.search(text)
    if not match:
        return 0
    try:
        value = int(match.group(1))
    except ValueError:
        return 0
    return max(value, 0)


def _elapsed(text: str) -> float:
    match = ELAPSED_RE.search(text)
    if not match:
        return 0.0
    try:
        return max(float(match.group(1)), 0.0)
    except ValueError:
        return 0.0


def parse_summary(line: str) -> Summary:
    """Parse a summary line.

    Raises:
        UnrecognizedSummaryStatus: If the overall result token is not
            exactly ``ok`` or ``FAILED``.
    """
    text = line.strip()
    match = SUMMARY_STATUS_RE.match(text)
    token = match.group("status") if match else None
    if token not in _SUMMARY_STATUSES:
        raise UnrecognizedSummaryStatus(
            f"unrecognised test result status in {text!r}"
        )
    counts = {name: _count(pattern, text) for name, pattern in _FIELD_RES.items()}
    return Summary(
        status=_SUMMARY_STATUSES[token],
        elapsed_seconds=_elapsed(text),
        **counts,
    )

"""Classification of single ``test ... <status>`` lines.

Two grammars are tried in order:

* normal tests: ``test a::b::c - should panic ... FAILED``
* doc tests: ``test src/lib.rs - module::item (line 12) - compile fail ... ok``

A normal module path never contains ``/``, ``\\`` or ``.``, so a doc line
(whose first token is a source file path) never matches the normal grammar.

The outcome is read from the text after ``...`` by substring containment,
checked in the order FAILED, ignored, ok, and defaulting to ok.  The order
is part of the contract: a status text such as ``ignored, FAILED before``
is reported as failed.
"""

from __future__ import annotations

import re

from cargo_ptest.parsing.errors import LineGrammarMismatch
from cargo_ptest.parsing.models import ParsedTest, Status, TestKind

NORMAL_TEST_RE = re.compile(
    r"^test (?P<path>[^\s/\\.]+)(?: - (?P<note>.+?))? \.\.\. (?P<status>.*)$"
)

DOC_TEST_RE = re.compile(
    r"^test (?P<file>\S+)(?: - (?P<path>.+?))? \(line (?P<line>\d+)\)"
    r"(?: - (?P<note>.+?))? \.\.\. (?P<status>.*)$"
)

# Priority order for status detection; first substring found wins.
_STATUS_TOKENS: tuple[tuple[str, Status], ...] = (
    ("FAILED", Status.FAILED),
    ("ignored", Status.IGNORED),
    ("ok", Status.OK),
)


def detect_status(text: str) -> Status:
    """Map trailing status text to a Status, defaulting to OK."""
    for token, status in _STATUS_TOKENS:
        if token in text:
            return status
    return Status.OK


def _ignore_reason(text: str) -> str | None:
    # "ignored, not yet implemented" -> "not yet implemented"
    _, sep, reason = text.partition(", ")
    if sep and reason.strip():
        return reason.strip()
    return None


def parse_normal_line(line: str) -> ParsedTest | None:
    """Parse a normal test line, or return None if it does not match."""
    match = NORMAL_TEST_RE.match(line.strip())
    if not match:
        return None
    status_text = match.group("status").strip()
    status = detect_status(status_text)
    return ParsedTest(
        kind=TestKind.NORMAL,
        module_path=match.group("path"),
        status=status,
        note=match.group("note"),
        ignore_reason=(
            _ignore_reason(status_text) if status is Status.IGNORED else None
        ),
    )


def parse_doc_line(line: str) -> ParsedTest | None:
    """Parse a doc test line, or return None if it does not match.

    The module path is empty for doc tests attached to the crate root.
    """
    match = DOC_TEST_RE.match(line.strip())
    if not match:
        return None
    return ParsedTest(
        kind=TestKind.DOC,
        module_path=match.group("path") or "",
        status=detect_status(match.group("status")),
        source_file_path=match.group("file"),
        line_number=int(match.group("line")),
        note=match.group("note"),
    )


def try_classify_line(line: str) -> ParsedTest | None:
    """Classify *line* with either grammar; None if neither matches."""
    parsed = parse_normal_line(line)
    if parsed is None:
        parsed = parse_doc_line(line)
    return parsed


def classify_line(line: str) -> ParsedTest:
    """Classify a line expected to be a test result.

    Raises:
        LineGrammarMismatch: If the line matches neither grammar.
    """
    parsed = try_classify_line(line)
    if parsed is None:
        raise LineGrammarMismatch(f"not a test result line: {line.strip()!r}")
    return parsed

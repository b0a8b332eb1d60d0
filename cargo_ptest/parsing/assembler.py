"""Assembly of parsed test groups from captured ``cargo test`` output.

``parse`` is the entry point of the parsing package: it normalises both
channels, segments them into per-binary blocks and turns each block into
a ``ParsedTestGroup``.  Any error aborts the whole parse; no partial list
is ever returned.
"""

from __future__ import annotations

import re
import sys

from cargo_ptest.config import Configuration
from cargo_ptest.parsing.classifier import classify_line, parse_doc_line
from cargo_ptest.parsing.errors import (
    CountNotNumeric,
    MissingSummary,
    MissingTestCount,
    NoTestsFound,
)
from cargo_ptest.parsing.failures import FAILURES_MARKER, correlate_failures
from cargo_ptest.parsing.models import (
    DOC_TESTS_CRATE,
    BlockKind,
    ParsedTest,
    ParsedTestGroup,
    RawBlock,
)
from cargo_ptest.parsing.normalizer import normalize_streams
from cargo_ptest.parsing.segmenter import HEADER_RE, segment_blocks
from cargo_ptest.parsing.summary import is_summary_line, parse_summary

# Printed by libtest between result lines when a test runs for a long time
SLOW_TEST_RE = re.compile(r"^test .+ has been running for over \d+ seconds$")


def _debug(config: Configuration, message: str) -> None:
    if config.debug:
        print(f"debug: {message}", file=sys.stderr)


def read_test_count(header: str) -> int:
    """Extract N from a ``running N tests`` header.

    Raises:
        MissingTestCount: If the header carries no count.
        CountNotNumeric: If the count is not a non-negative integer.
    """
    match = HEADER_RE.match(header.strip())
    count = match.group("count") if match else None
    if count is None:
        raise MissingTestCount(f"no test count in header {header.strip()!r}")
    if not count.isdecimal():
        raise CountNotNumeric(f"test count {count!r} is not a number")
    return int(count)


def assemble_doc_group(block: RawBlock) -> ParsedTestGroup:
    """Keep only the doc test result lines of the aggregated doc block."""
    tests = []
    for line in block.lines:
        parsed = parse_doc_line(line)
        if parsed is not None:
            tests.append(parsed)
    return ParsedTestGroup(
        crate_name=DOC_TESTS_CRATE,
        binary_path=(),
        tests=tuple(tests),
        summary=None,
        kind=BlockKind.DOC,
    )


def assemble_binary_group(block: RawBlock) -> ParsedTestGroup:
    """Build the group for a unit or integration test binary.

    Reads the declared count, classifies that many result lines (fewer if
    the block ends early), attaches failure diagnostics and parses the
    closing summary line.

    Raises:
        ParseError: Any of the header, line or summary errors.
    """
    lines = block.lines
    count = read_test_count(lines[0])

    tests: list[ParsedTest] = []
    index = 1
    while len(tests) < count and index < len(lines):
        line = lines[index]
        # The result list ended early; what follows belongs to the trailer
        if is_summary_line(line) or line.strip() == FAILURES_MARKER:
            break
        index += 1
        if SLOW_TEST_RE.match(line.strip()):
            continue
        tests.append(classify_line(line))

    tests, index = correlate_failures(tests, lines, index)

    summary_line = next(
        (line for line in lines[index:] if is_summary_line(line)), None,
    )
    if summary_line is None:
        raise MissingSummary(
            f"no 'test result:' line for {'/'.join(block.binary_path)}"
        )

    return ParsedTestGroup(
        crate_name=block.crate_name,
        binary_path=tuple(block.binary_path),
        tests=tuple(tests),
        summary=parse_summary(summary_line),
        kind=block.kind,
    )


def parse(
    stdout: str,
    stderr: str,
    config: Configuration | None = None,
) -> list[ParsedTestGroup]:
    """Parse captured ``cargo test`` output into test groups.

    Args:
        stdout: Captured standard output of the run.
        stderr: Captured standard error of the run.
        config: Read-only settings; ``debug`` traces blocks to stderr.

    Returns:
        One group per test binary, plus one aggregated doc-test group,
        in the order they ran.

    Raises:
        NoTestsFound: If no block is recognised at all.
        ParseError: The first error raised while assembling a block.
    """
    config = config if config is not None else Configuration()
    stdout_lines, stderr_lines = normalize_streams(stdout, stderr)
    blocks = segment_blocks(stdout_lines, stderr_lines)
    if not blocks:
        raise NoTestsFound("no 'running N tests' header found in output")

    groups: list[ParsedTestGroup] = []
    for block in blocks:
        _debug(
            config,
            f"{block.kind.value} block for {block.crate_name} "
            f"({len(block.lines)} lines)",
        )
        if block.kind is BlockKind.DOC:
            group = assemble_doc_group(block)
        else:
            group = assemble_binary_group(block)
        _debug(
            config,
            f"parsed {len(group.tests)} tests for {group.crate_name}, "
            f"{len(group.failed_tests)} failed",
        )
        groups.append(group)
    return groups

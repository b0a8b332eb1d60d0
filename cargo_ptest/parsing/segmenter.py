"""Block segmentation across the two ``cargo test`` output channels.

Cargo prints the name of each test binary to stderr (``Running ...`` or
``Doc-tests ...``) while the binary itself prints its ``running N tests``
header and results to stdout.  The two buffers are captured separately, so
the only link between a header and the binary it belongs to is position:
the k-th header on stdout pairs with the k-th announcement on stderr.

Once a ``Doc-tests`` announcement has been paired, every remaining stdout
line belongs to the single aggregated doc block, including the headers of
further crates' doc tests.
"""

from __future__ import annotations

import re
from collections.abc import Iterator

from cargo_ptest.parsing.errors import MalformedAnnouncement
from cargo_ptest.parsing.models import BlockKind, RawBlock

# "running 3 tests" / "running 1 test"; the count is captured loosely so
# the assembler can report a missing or non-numeric count.
HEADER_RE = re.compile(r"^running(?: (?P<count>\S+))? tests?$")

# "Running unittests src/lib.rs (target/debug/deps/mycrate-0123abcd)"
RUNNING_RE = re.compile(
    r"^Running (?P<unittests>unittests )?(?P<source>\S+) \((?P<binary>[^)]+)\)$"
)

# "Running target/debug/deps/mycrate-0123abcd" (cargo before 1.58)
LEGACY_RUNNING_RE = re.compile(r"^Running (?P<binary>\S+)$")

DOC_TESTS_RE = re.compile(r"^Doc-tests (?P<crate>\S+)$")

# Final binary path component: "<crate>-<hash>" with an optional ".exe"
BINARY_NAME_RE = re.compile(r"^(?P<crate>.+)-[0-9a-fA-F]+(?:\.exe)?$")

_ANNOUNCEMENT_PREFIXES = ("Running ", "Doc-tests ")


def is_announcement(line: str) -> bool:
    """True if a stderr line names a test binary or the doc-test phase."""
    return line.strip().startswith(_ANNOUNCEMENT_PREFIXES)


def split_binary_path(binary: str) -> list[str]:
    """Split a binary path on either separator, dropping empty parts."""
    return [part for part in re.split(r"[\\/]", binary) if part]


def parse_announcement(line: str) -> RawBlock:
    """Build an empty block from an announcement line.

    Raises:
        MalformedAnnouncement: If the line does not name a binary and crate.
    """
    text = line.strip()

    doc = DOC_TESTS_RE.match(text)
    if doc:
        return RawBlock(
            kind=BlockKind.DOC, binary_path=[], crate_name=doc.group("crate"),
        )

    match = RUNNING_RE.match(text)
    if match:
        kind = BlockKind.UNIT if match.group("unittests") else BlockKind.INTEGRATION
        binary = match.group("binary")
    else:
        match = LEGACY_RUNNING_RE.match(text)
        if not match:
            raise MalformedAnnouncement(f"unrecognised announcement: {text!r}")
        kind = BlockKind.UNIT
        binary = match.group("binary")

    components = split_binary_path(binary)
    name = BINARY_NAME_RE.match(components[-1]) if components else None
    if name is None:
        raise MalformedAnnouncement(
            f"cannot extract crate name from binary path: {binary!r}"
        )
    return RawBlock(
        kind=kind, binary_path=components, crate_name=name.group("crate"),
    )


def _announcements(stderr_lines: list[str]) -> Iterator[str]:
    return (line for line in stderr_lines if is_announcement(line))


def segment_blocks(
    stdout_lines: list[str],
    stderr_lines: list[str],
) -> list[RawBlock]:
    """Split normalised output into per-binary blocks.

    Args:
        stdout_lines: Normalised stdout lines (the primary channel).
        stderr_lines: Normalised stderr lines (the announcement channel).

    Returns:
        Blocks in the order their headers appear on stdout.  Lines before
        the first header are discarded.

    Raises:
        MalformedAnnouncement: If an announcement cannot be decomposed, or
            a header has no announcement left to pair with.
    """
    announcements = _announcements(stderr_lines)
    blocks: list[RawBlock] = []
    current: RawBlock | None = None
    doc_mode = False

    def _flush_block() -> None:
        nonlocal current
        if current is not None:
            blocks.append(current)
            current = None

    for line in stdout_lines:
        if not doc_mode and HEADER_RE.match(line.strip()):
            announcement = next(announcements, None)
            if announcement is None:
                raise MalformedAnnouncement(
                    f"no announcement left to pair with header {line.strip()!r}"
                )
            _flush_block()
            current = parse_announcement(announcement)
            doc_mode = current.kind is BlockKind.DOC
            current.lines.append(line)
            continue

        if current is not None:
            current.lines.append(line)

    _flush_block()
    return blocks

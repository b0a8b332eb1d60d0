"""Data model for parsed ``cargo test`` output.

``RawBlock`` is the transient per-binary slice of output produced by the
segmenter.  ``ParsedTest``, ``Summary`` and ``ParsedTestGroup`` are the
immutable records handed back to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class BlockKind(Enum):
    """Origin of a block of output."""

    UNIT = "unit"
    INTEGRATION = "integration"
    DOC = "doc"


class TestKind(Enum):
    """Which line grammar produced a test record."""

    __test__ = False

    NORMAL = "normal"
    DOC = "doc"


class Status(Enum):
    """Outcome of a single test, or of a whole binary run."""

    OK = "ok"
    FAILED = "failed"
    IGNORED = "ignored"


# Crate name reported for the aggregated doc-test group
DOC_TESTS_CRATE = "Doc-tests"


@dataclass
class RawBlock:
    """Lines belonging to one test binary's run, or to the doc-test phase.

    ``lines`` starts with the ``running N tests`` header.  For doc blocks
    ``binary_path`` is empty and ``crate_name`` is the crate named by the
    ``Doc-tests`` announcement.
    """

    kind: BlockKind
    binary_path: list[str]
    crate_name: str
    lines: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ParsedTest:
    """A single test result line.

    ``source_file_path`` and ``line_number`` are only set for doc tests.
    ``failure_detail`` is never set at construction; the failure
    correlator produces a copy carrying it.
    """

    kind: TestKind
    module_path: str
    status: Status
    source_file_path: str | None = None
    line_number: int | None = None
    note: str | None = None
    ignore_reason: str | None = None
    failure_detail: str | None = None


@dataclass(frozen=True)
class Summary:
    """The ``test result:`` line closing a unit or integration block."""

    status: Status
    passed: int = 0
    failed: int = 0
    ignored: int = 0
    measured: int = 0
    filtered: int = 0
    elapsed_seconds: float = 0.0


@dataclass(frozen=True)
class ParsedTestGroup:
    """All tests run by one binary, or all doc tests."""

    crate_name: str
    binary_path: tuple[str, ...]
    tests: tuple[ParsedTest, ...]
    summary: Summary | None = None
    kind: BlockKind = BlockKind.UNIT

    @property
    def is_doc(self) -> bool:
        return self.kind is BlockKind.DOC

    @property
    def failed_tests(self) -> list[ParsedTest]:
        """Tests in this group whose status is FAILED."""
        return [t for t in self.tests if t.status is Status.FAILED]

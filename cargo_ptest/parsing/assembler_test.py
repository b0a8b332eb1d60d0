"""Tests for assembling parsed test groups."""

from __future__ import annotations

import pytest

from cargo_ptest.config import Configuration
from cargo_ptest.parsing.assembler import (
    assemble_binary_group,
    assemble_doc_group,
    parse,
    read_test_count,
)
from cargo_ptest.parsing.errors import (
    CountNotNumeric,
    LineGrammarMismatch,
    MalformedAnnouncement,
    MissingSummary,
    MissingTestCount,
    NoTestsFound,
    ParseError,
    UnrecognizedSummaryStatus,
)
from cargo_ptest.parsing.models import BlockKind, RawBlock, Status, TestKind

UNIT_ANNOUNCEMENT = "     Running unittests src/lib.rs (target/debug/deps/mycrate-abcdef)"

PASSING_STDOUT = """
running 2 tests
test tests::a ... ok
test tests::b ... ok

test result: ok. 2 passed; 0 failed; 0 ignored; 0 measured; 0 filtered out; finished in 0.01s

"""

PASSING_STDERR = """   Compiling mycrate v0.1.0 (/work/mycrate)
    Finished test [unoptimized + debuginfo] target(s) in 0.52s
""" + UNIT_ANNOUNCEMENT + "\n"

FAILING_STDOUT = """
running 3 tests
test tests::succeed ... ok
test tests::panic ... FAILED
test tests::should_panic_and_doesnt - should panic ... FAILED

failures:

---- tests::panic stdout ----
thread 'tests::panic' panicked at src/lib.rs:12:5:
assertion `left == right` failed
  left: 2
 right: 1
note: run with `RUST_BACKTRACE=1` environment variable to display a backtrace

---- tests::should_panic_and_doesnt stdout ----
note: test did not panic as expected

failures:
    tests::panic
    tests::should_panic_and_doesnt

test result: FAILED. 1 passed; 2 failed; 0 ignored; 0 measured; 0 filtered out; finished in 0.00s

"""


def _block(*lines: str, kind: BlockKind = BlockKind.UNIT) -> RawBlock:
    return RawBlock(
        kind=kind,
        binary_path=["target", "debug", "deps", "mycrate-abcdef"],
        crate_name="mycrate",
        lines=list(lines),
    )


class TestReadTestCount:
    """Tests for header count extraction."""

    def test_plural(self):
        assert read_test_count("running 12 tests") == 12

    def test_singular(self):
        assert read_test_count("running 1 test") == 1

    def test_missing_count(self):
        """A header without a count raises MissingTestCount."""
        with pytest.raises(MissingTestCount):
            read_test_count("running tests")

    def test_non_numeric_count(self):
        """A non-integer count raises CountNotNumeric."""
        with pytest.raises(CountNotNumeric):
            read_test_count("running many tests")

    def test_superscript_count(self):
        """Unicode digits that are not decimal raise CountNotNumeric."""
        with pytest.raises(CountNotNumeric):
            read_test_count("running ² tests")

    def test_superscript_count_through_parse(self):
        """The structured error reaches callers of parse()."""
        with pytest.raises(CountNotNumeric):
            parse(
                "running ² tests\ntest a ... ok\ntest result: ok. 1 passed\n",
                UNIT_ANNOUNCEMENT,
            )

    def test_negative_count(self):
        """A signed count is not numeric."""
        with pytest.raises(CountNotNumeric):
            read_test_count("running -1 tests")


class TestAssembleBinaryGroup:
    """Tests for unit and integration block assembly."""

    def test_truncated_block(self):
        """A declared count exceeding the result lines truncates silently."""
        group = assemble_binary_group(_block(
            "running 3 tests",
            "test a ... ok",
            "test result: ok. 1 passed; 0 failed; 0 ignored; 0 measured; 0 filtered out",
        ))
        assert [t.module_path for t in group.tests] == ["a"]
        assert group.summary.passed == 1

    def test_truncated_before_failures(self):
        """Truncation stops at the failures section."""
        group = assemble_binary_group(_block(
            "running 4 tests",
            "test a ... FAILED",
            "failures:",
            "---- a stdout ----",
            "boom",
            "failures:",
            "    a",
            "test result: FAILED. 0 passed; 1 failed; 0 ignored; 0 measured; 0 filtered out",
        ))
        assert len(group.tests) == 1
        assert group.tests[0].failure_detail == "boom"

    def test_stream_ends_early(self):
        """Running out of lines entirely leaves the summary missing."""
        with pytest.raises(MissingSummary):
            assemble_binary_group(_block("running 5 tests", "test a ... ok"))

    def test_zero_tests(self):
        """A binary that ran no tests still has a summary."""
        group = assemble_binary_group(_block(
            "running 0 tests",
            "test result: ok. 0 passed; 0 failed; 0 ignored; 0 measured; "
            "3 filtered out; finished in 0.00s",
        ))
        assert group.tests == ()
        assert group.summary is not None
        assert group.summary.filtered == 3

    def test_slow_test_notice_skipped(self):
        """Long-running notices are not counted as tests."""
        group = assemble_binary_group(_block(
            "running 1 test",
            "test big::soak has been running for over 60 seconds",
            "test big::soak ... ok",
            "test result: ok. 1 passed; 0 failed; 0 ignored; 0 measured; "
            "0 filtered out; finished in 75.10s",
        ))
        assert [t.module_path for t in group.tests] == ["big::soak"]

    def test_kind_and_binary_path_carried(self):
        """Group metadata comes from the block."""
        group = assemble_binary_group(_block(
            "running 0 tests",
            "test result: ok. 0 passed; 0 failed; 0 ignored; 0 measured; 0 filtered out",
            kind=BlockKind.INTEGRATION,
        ))
        assert group.kind is BlockKind.INTEGRATION
        assert group.binary_path == ("target", "debug", "deps", "mycrate-abcdef")

    def test_bad_summary_status(self):
        """An unrecognised summary status aborts the block."""
        with pytest.raises(UnrecognizedSummaryStatus):
            assemble_binary_group(_block(
                "running 0 tests",
                "test result: maybe. 0 passed",
            ))


class TestAssembleDocGroup:
    """Tests for the aggregated doc block."""

    def test_keeps_only_doc_lines(self):
        """Headers, summaries and failure text are dropped."""
        group = assemble_doc_group(_block(
            "running 2 tests",
            "test src/lib.rs - add (line 5) ... ok",
            "test src/lib.rs - sub (line 15) ... FAILED",
            "failures:",
            "---- src/lib.rs - sub (line 15) stdout ----",
            "test result: FAILED. 1 passed; 1 failed; 0 ignored; 0 measured; 0 filtered out",
            "running 1 test",
            "test src/util.rs - util::trim (line 3) ... ignored",
            kind=BlockKind.DOC,
        ))
        assert group.crate_name == "Doc-tests"
        assert group.binary_path == ()
        assert group.summary is None
        assert group.is_doc
        assert [t.module_path for t in group.tests] == ["add", "sub", "util::trim"]
        assert all(t.kind is TestKind.DOC for t in group.tests)
        # Doc failures are never correlated
        assert group.tests[1].failure_detail is None


class TestParse:
    """Tests for the parse entry point."""

    def test_single_passing_binary(self):
        """Two passing tests in one unit binary."""
        groups = parse(PASSING_STDOUT, PASSING_STDERR)
        assert len(groups) == 1
        group = groups[0]
        assert group.crate_name == "mycrate"
        assert group.kind is BlockKind.UNIT
        assert len(group.tests) == 2
        assert all(t.status is Status.OK for t in group.tests)
        assert group.summary is not None
        assert group.summary.passed == 2
        assert group.summary.status is Status.OK

    def test_failure_details_attached(self):
        """Each failed test carries the text under its delimiter."""
        groups = parse(FAILING_STDOUT, UNIT_ANNOUNCEMENT)
        tests = groups[0].tests
        assert [t.status for t in tests] == [Status.OK, Status.FAILED, Status.FAILED]
        assert tests[0].failure_detail is None
        assert tests[1].failure_detail == (
            "thread 'tests::panic' panicked at src/lib.rs:12:5:\n"
            "assertion `left == right` failed\n"
            "  left: 2\n"
            " right: 1\n"
            "note: run with `RUST_BACKTRACE=1` environment variable to display a backtrace"
        )
        assert tests[2].note == "should panic"
        assert tests[2].failure_detail == "note: test did not panic as expected"
        assert groups[0].summary.failed == 2

    def test_crlf_output(self):
        """Windows line endings parse the same."""
        groups = parse(
            PASSING_STDOUT.replace("\n", "\r\n"),
            PASSING_STDERR.replace("\n", "\r\n"),
        )
        assert groups[0].summary.passed == 2

    def test_no_tests_found(self):
        """Output without any block raises NoTestsFound."""
        with pytest.raises(NoTestsFound) as exc_info:
            parse("error: could not compile `mycrate`\n", "   Compiling mycrate\n")
        assert str(exc_info.value).startswith("Parse Error: ")

    def test_empty_input(self):
        with pytest.raises(NoTestsFound):
            parse("", "")

    def test_error_aborts_whole_parse(self):
        """A failure in a later block discards earlier groups."""
        stdout = PASSING_STDOUT + "running 1 test\nnot a test line\n"
        stderr = PASSING_STDERR + UNIT_ANNOUNCEMENT + "\n"
        with pytest.raises(LineGrammarMismatch) as exc_info:
            parse(stdout, stderr)
        assert isinstance(exc_info.value, ParseError)
        assert "not a test line" in str(exc_info.value)

    def test_malformed_announcement(self):
        with pytest.raises(MalformedAnnouncement):
            parse(PASSING_STDOUT, "     Running ???\n")

    def test_missing_summary(self):
        stdout = "running 1 test\ntest a ... ok\n"
        with pytest.raises(MissingSummary):
            parse(stdout, UNIT_ANNOUNCEMENT)

    def test_debug_traces_to_stderr(self, capsys):
        """The debug flag prints block traces on stderr only."""
        parse(PASSING_STDOUT, PASSING_STDERR, Configuration(debug=True))
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "debug: unit block for mycrate" in captured.err
        assert "parsed 2 tests for mycrate, 0 failed" in captured.err

    def test_no_debug_output_by_default(self, capsys):
        parse(PASSING_STDOUT, PASSING_STDERR)
        assert capsys.readouterr().err == ""

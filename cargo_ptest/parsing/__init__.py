"""Test output parsing: stream segmentation, line grammars, failures and summaries."""

from cargo_ptest.parsing.assembler import parse
from cargo_ptest.parsing.classifier import classify_line, try_classify_line
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
from cargo_ptest.parsing.models import (
    BlockKind,
    ParsedTest,
    ParsedTestGroup,
    RawBlock,
    Status,
    Summary,
    TestKind,
)
from cargo_ptest.parsing.summary import parse_summary

__all__ = [
    "BlockKind",
    "CountNotNumeric",
    "LineGrammarMismatch",
    "MalformedAnnouncement",
    "MissingSummary",
    "MissingTestCount",
    "NoTestsFound",
    "ParseError",
    "ParsedTest",
    "ParsedTestGroup",
    "RawBlock",
    "Status",
    "Summary",
    "TestKind",
    "UnrecognizedSummaryStatus",
    "classify_line",
    "parse",
    "parse_summary",
    "try_classify_line",
]

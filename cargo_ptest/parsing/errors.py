"""Errors raised while parsing ``cargo test`` output.

Every error carries a ``kind`` naming the failure and renders with the
fixed ``Parse Error:`` prefix so the invoking layer can surface it as-is.
"""

from __future__ import annotations

ERROR_PREFIX = "Parse Error: "


class ParseError(Exception):
    """Base class for all parsing failures."""

    kind = "ParseError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{ERROR_PREFIX}{self.message}"


class MalformedAnnouncement(ParseError):
    """A stderr announcement line could not be decomposed."""

    kind = "MalformedAnnouncement"


class LineGrammarMismatch(ParseError):
    """A test result line matched neither the normal nor the doc grammar."""

    kind = "LineGrammarMismatch"


class UnrecognizedSummaryStatus(ParseError):
    """The overall ``test result:`` token was not ``ok`` or ``FAILED``."""

    kind = "UnrecognizedSummaryStatus"


class MissingSummary(ParseError):
    """A unit or integration block ended before its summary line."""

    kind = "MissingSummary"


class MissingTestCount(ParseError):
    """A ``running tests`` header carried no count."""

    kind = "MissingTestCount"


class CountNotNumeric(ParseError):
    """A ``running N tests`` header count was not an integer."""

    kind = "CountNotNumeric"


class NoTestsFound(ParseError):
    """No block was recognised anywhere in the output."""

    kind = "NoTestsFound"

"""Structured parsing of ``cargo test`` console output."""

from cargo_ptest.config import Configuration
from cargo_ptest.parsing import ParsedTest, ParsedTestGroup, ParseError, Summary, parse

__all__ = [
    "Configuration",
    "ParseError",
    "ParsedTest",
    "ParsedTestGroup",
    "Summary",
    "parse",
]

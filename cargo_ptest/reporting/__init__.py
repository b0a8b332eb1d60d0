"""Presentation of parsed test groups: coloured text and YAML reports."""

from cargo_ptest.reporting.reporter import Colour, Reporter, colour

__all__ = [
    "Colour",
    "Reporter",
    "colour",
]

"""Line normalisation for captured test runner output."""

from __future__ import annotations


def normalize_lines(text: str) -> list[str]:
    """Split *text* into lines, dropping carriage returns and blank lines."""
    text = text.replace("\r\n", "\n").replace("\r", "")
    return [line for line in text.split("\n") if line.strip()]


def normalize_streams(stdout: str, stderr: str) -> tuple[list[str], list[str]]:
    """Normalise both captured channels."""
    return normalize_lines(stdout), normalize_lines(stderr)

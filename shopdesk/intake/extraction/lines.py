"""Splitting recognized text into lines."""

from __future__ import annotations


def segment_lines(text: str, min_length: int = 1) -> list[str]:
    """Split OCR text into stripped, non-empty lines.

    Order is preserved; the assemblers rely on it to look at neighbouring
    lines.
    """
    if not text:
        return []
    lines: list[str] = []
    for raw in text.splitlines():
        line = raw.strip()
        if len(line) >= max(min_length, 1):
            lines.append(line)
    return lines

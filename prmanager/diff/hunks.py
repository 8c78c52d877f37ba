"""Hunk header parsing shared by the renderer and the comment subsystem."""

from __future__ import annotations

import re
from dataclasses import dataclass

HUNK_PREFIX = "@@"

# Only the first line is examined; trailing section text after the closing @@
# (usually the enclosing function signature) is captured but not interpreted.
HUNK_HEADER_RE = re.compile(
    r"@@\s+-(\d+)(?:,(\d+))?\s+\+(\d+)(?:,(\d+))?\s+@@(.*)"
)


@dataclass(frozen=True)
class HunkHeader:
    """Parsed ``@@ -a,b +c,d @@ section`` header."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    section: str = ""


@dataclass(frozen=True)
class HunkRange:
    """New-file line range covered by a hunk."""

    start_line: int
    line_count: int

    @property
    def end_line(self) -> int:
        return self.start_line + max(self.line_count, 1) - 1

    def contains(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line


def parse_hunk_header(text: str) -> HunkHeader | None:
    """Parse a hunk header line.

    Omitted counts default to 1, as in unified diff output for single-line
    hunks. Returns None when ``text`` does not start with a hunk header.

    Args:
        text: Header line, or a multi-line diff hunk whose first line is the header.
    """
    if not text:
        return None
    match = HUNK_HEADER_RE.match(text)
    if not match:
        return None
    old_start, old_count, new_start, new_count, section = match.groups()
    return HunkHeader(
        old_start=int(old_start),
        old_count=int(old_count) if old_count is not None else 1,
        new_start=int(new_start),
        new_count=int(new_count) if new_count is not None else 1,
        section=section.strip(),
    )


def parse_hunk_range(text: str) -> HunkRange | None:
    """Return the new-side ``HunkRange`` of a hunk header, or None."""
    header = parse_hunk_header(text)
    if header is None:
        return None
    return HunkRange(start_line=header.new_start, line_count=header.new_count)

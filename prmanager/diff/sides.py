"""Split one file's diff into original and modified text for a two-pane view."""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from prmanager.diff.extractor import extract
from prmanager.diff.hunks import HUNK_PREFIX
from prmanager.diff.renderer import NO_NEWLINE_MARKER

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class DiffSides:
    """Reconstructed hunk content of both sides of a file diff."""

    original: str
    modified: str


def split_sides(raw_diff: str, file_path: str) -> DiffSides | None:
    """Rebuild the old and new hunk content of ``file_path``.

    Deleted lines go to the original side, added lines to the modified side
    and context lines to both. Only hunk bodies are reconstructed, not the
    whole file. Returns None when the file is missing, binary or deleted.
    """
    try:
        fragment = extract(raw_diff, file_path)
        if fragment is None or fragment.is_binary or fragment.is_deleted:
            return None

        original: list[str] = []
        modified: list[str] = []
        in_hunk = False
        for line in fragment.lines:
            if line.startswith(HUNK_PREFIX):
                in_hunk = True
                continue
            if not in_hunk or line.startswith(NO_NEWLINE_MARKER):
                continue
            if line.startswith("-"):
                original.append(line[1:])
            elif line.startswith("+"):
                modified.append(line[1:])
            else:
                text = line[1:] if line.startswith(" ") else line
                original.append(text)
                modified.append(text)
    except Exception:
        logger.exception("Failed to split diff", file_path=file_path)
        return None

    return DiffSides(original="\n".join(original), modified="\n".join(modified))

"""Render one file's diff as editor text plus per-line decorations.

The output is a flat display buffer for a single code-editor pane: hunk
headers are kept verbatim, added/deleted/context lines lose their leading
marker, and every hunk-header, added and deleted line gets exactly one
annotation keyed by its 1-indexed line number in that buffer.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum
from typing import Any

import structlog

from prmanager.diff.extractor import FileDiffFragment, extract
from prmanager.diff.hunks import HUNK_PREFIX

logger = structlog.get_logger(__name__)

BINARY_PLACEHOLDER = "Binary file - no preview available"
DELETED_PLACEHOLDER = "File was deleted in this PR"
EMPTY_PLACEHOLDER = "No changes to display"
ERROR_PLACEHOLDER = "Error parsing diff. The diff format may be unsupported."

NEW_FILE_BANNER = "// New file"
RENAME_BANNER = "// File renamed: {old} → {new}"

NO_NEWLINE_MARKER = "\\"


class AnnotationCategory(str, Enum):
    """Semantic category of an annotated display line."""

    HUNK_HEADER = "hunk-header"
    ADDED = "added"
    DELETED = "deleted"

    def __str__(self) -> str:
        return self.value


# category -> (body class, glyph margin class)
ANNOTATION_STYLES: dict[AnnotationCategory, tuple[str, str | None]] = {
    AnnotationCategory.HUNK_HEADER: ("diff-hunk-header", None),
    AnnotationCategory.ADDED: ("diff-line-added", "diff-glyph-added"),
    AnnotationCategory.DELETED: ("diff-line-deleted", "diff-glyph-deleted"),
}


@dataclass(frozen=True)
class LineAnnotation:
    """A styled line range in the display buffer."""

    start_line: int
    end_line: int
    category: AnnotationCategory
    class_name: str
    glyph_margin_class_name: str | None = None

    @classmethod
    def for_line(cls, line_number: int, category: AnnotationCategory) -> LineAnnotation:
        class_name, glyph_class = ANNOTATION_STYLES[category]
        return cls(
            start_line=line_number,
            end_line=line_number,
            category=category,
            class_name=class_name,
            glyph_margin_class_name=glyph_class,
        )

    def to_editor_decoration(self) -> dict[str, Any]:
        options: dict[str, Any] = {"isWholeLine": True, "className": self.class_name}
        if self.glyph_margin_class_name:
            options["glyphMarginClassName"] = self.glyph_margin_class_name
        return {
            "range": {"startLineNumber": self.start_line, "endLineNumber": self.end_line},
            "options": options,
        }


@dataclass(frozen=True)
class RenderedDiff:
    """Display lines and their annotations for one file."""

    lines: tuple[str, ...]
    annotations: tuple[LineAnnotation, ...] = ()

    @classmethod
    def placeholder(cls, message: str) -> RenderedDiff:
        return cls(lines=(message,), annotations=())

    @property
    def content(self) -> str:
        return "\n".join(self.lines)

    def annotations_of(self, category: AnnotationCategory) -> list[LineAnnotation]:
        return [annotation for annotation in self.annotations if annotation.category == category]

    def to_editor_decorations(self) -> list[dict[str, Any]]:
        return [annotation.to_editor_decoration() for annotation in self.annotations]


def _banner(fragment: FileDiffFragment) -> list[str]:
    if fragment.is_renamed:
        return [RENAME_BANNER.format(old=fragment.old_path, new=fragment.new_path), ""]
    if fragment.is_new:
        return [NEW_FILE_BANNER, ""]
    return []


def _display_rows(
    fragment: FileDiffFragment,
) -> Iterator[tuple[str, AnnotationCategory | None]]:
    """Yield ``(display text, category)`` for every line that takes a display slot."""
    for line in _banner(fragment):
        yield line, None

    in_hunk = False
    for line in fragment.lines:
        if line.startswith(HUNK_PREFIX):
            in_hunk = True
            yield line, AnnotationCategory.HUNK_HEADER
            continue
        # Everything before the first hunk is file metadata.
        if not in_hunk:
            continue
        if line.startswith(NO_NEWLINE_MARKER):
            continue
        if line.startswith("-"):
            yield line[1:], AnnotationCategory.DELETED
        elif line.startswith("+"):
            yield line[1:], AnnotationCategory.ADDED
        else:
            yield (line[1:] if line.startswith(" ") else line), None


def _build(fragment: FileDiffFragment) -> RenderedDiff:
    lines: list[str] = []
    annotations: list[LineAnnotation] = []
    for line_number, (text, category) in enumerate(_display_rows(fragment), start=1):
        lines.append(text)
        if category is not None:
            annotations.append(LineAnnotation.for_line(line_number, category))
    return RenderedDiff(lines=tuple(lines), annotations=tuple(annotations))


def render(raw_diff: str, file_path: str) -> RenderedDiff | None:
    """Render the diff of ``file_path`` for a single-pane editor.

    Returns None when the file has no section in ``raw_diff``. Binary and
    deleted files, header-only sections and anything that fails to parse are
    rendered as a one-line placeholder with no annotations; this function
    does not raise for diff content.

    Args:
        raw_diff: Full multi-file unified diff text.
        file_path: New path of the file to render.
    """
    try:
        fragment = extract(raw_diff, file_path)
        if fragment is None:
            return None
        if fragment.is_binary:
            return RenderedDiff.placeholder(BINARY_PLACEHOLDER)
        if fragment.is_deleted:
            return RenderedDiff.placeholder(DELETED_PLACEHOLDER)
        rendered = _build(fragment)
    except Exception:
        logger.exception("Failed to render diff", file_path=file_path)
        return RenderedDiff.placeholder(ERROR_PLACEHOLDER)

    if not rendered.lines:
        return RenderedDiff.placeholder(EMPTY_PLACEHOLDER)
    return rendered

"""Map review comments onto display line ranges."""

from __future__ import annotations

from dataclasses import dataclass

from prmanager.diff.hunks import parse_hunk_range
from prmanager.models import ReviewComment


@dataclass(frozen=True)
class CommentRange:
    """Lines a comment highlights, plus the line its glyph is anchored to."""

    comment_id: int
    start_line: int
    end_line: int
    anchor_line: int

    def contains(self, line: int) -> bool:
        return self.start_line <= line <= self.end_line


def effective_line(comment: ReviewComment) -> int:
    """Line a comment is attached to: ``line``, then ``original_line``, then ``position``."""
    return comment.line or comment.original_line or comment.position or 1


def comment_line_range(comment: ReviewComment) -> CommentRange:
    """Resolve the range to flash-highlight for ``comment``.

    Uses the new-side range of the comment's stored diff hunk when it parses,
    otherwise the single effective line.
    """
    anchor = effective_line(comment)
    hunk_range = parse_hunk_range(comment.diff_hunk) if comment.diff_hunk else None
    if hunk_range is not None:
        return CommentRange(
            comment_id=comment.id,
            start_line=hunk_range.start_line,
            end_line=hunk_range.end_line,
            anchor_line=anchor,
        )
    return CommentRange(comment_id=comment.id, start_line=anchor, end_line=anchor, anchor_line=anchor)


def comments_for_file(comments: list[ReviewComment], path: str) -> list[ReviewComment]:
    return [comment for comment in comments if comment.path == path]


def group_comments_by_file(comments: list[ReviewComment]) -> dict[str, list[ReviewComment]]:
    """Group comments by path, keeping first-seen order of paths and comments."""
    grouped: dict[str, list[ReviewComment]] = {}
    for comment in comments:
        if not comment.path:
            continue
        grouped.setdefault(comment.path, []).append(comment)
    return grouped

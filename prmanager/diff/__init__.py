"""Per-file unified diff extraction and rendering."""

from prmanager.diff.extractor import ChangeType, FileDiffFragment, extract, list_files
from prmanager.diff.hunks import HunkHeader, HunkRange, parse_hunk_header, parse_hunk_range
from prmanager.diff.renderer import (
    AnnotationCategory,
    LineAnnotation,
    RenderedDiff,
    render,
)
from prmanager.diff.sides import DiffSides, split_sides

__all__ = [
    "AnnotationCategory",
    "ChangeType",
    "DiffSides",
    "FileDiffFragment",
    "HunkHeader",
    "HunkRange",
    "LineAnnotation",
    "RenderedDiff",
    "extract",
    "list_files",
    "parse_hunk_header",
    "parse_hunk_range",
    "render",
    "split_sides",
]

"""Isolate a single file's section from a multi-file unified diff.

The scan is a two-state line machine (seeking a matching ``diff --git``
header, then collecting until the next header or end of input) rather than a
regex spanning the whole blob, so large diffs cost one linear pass.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from prmanager.diff.hunks import HUNK_PREFIX

FILE_HEADER_PREFIX = "diff --git "
OLD_PATH_PREFIX = "a/"
NEW_PATH_MARKER = " b/"

BINARY_MARKERS = ("Binary files ", "GIT binary patch")
DELETED_MARKER = "deleted file mode"
NEW_FILE_MARKER = "new file mode"
RENAME_FROM_MARKER = "rename from "
RENAME_TO_MARKER = "rename to "
NEW_SIDE_PREFIX = "+++ b/"


class ChangeType(str, Enum):
    """File-level change classification, in priority order."""

    BINARY = "binary"
    DELETED = "deleted"
    RENAMED = "renamed"
    ADDED = "added"
    MODIFIED = "modified"

    def __str__(self) -> str:
        return self.value


class _ScanState(Enum):
    SEEKING_HEADER = "seeking-header"
    IN_FRAGMENT = "in-fragment"


@dataclass(frozen=True)
class FileDiffFragment:
    """The part of a raw diff that belongs to exactly one file."""

    path: str
    lines: tuple[str, ...]
    is_binary: bool = False
    is_deleted: bool = False
    is_new: bool = False
    is_renamed: bool = False
    old_path: str | None = None
    new_path: str | None = None

    @property
    def text(self) -> str:
        return "\n".join(self.lines)

    @property
    def hunk_count(self) -> int:
        return sum(1 for line in self.lines if line.startswith(HUNK_PREFIX))

    @property
    def change_type(self) -> ChangeType:
        if self.is_binary:
            return ChangeType.BINARY
        if self.is_deleted:
            return ChangeType.DELETED
        if self.is_renamed:
            return ChangeType.RENAMED
        if self.is_new:
            return ChangeType.ADDED
        return ChangeType.MODIFIED


def split_diff_lines(raw_diff: str) -> list[str]:
    """Split diff text on ``\\n`` only.

    ``str.splitlines`` would also break on form feeds, ``\\x1c``-``\\x1e``,
    ``\\x85``, U+2028/U+2029 and bare ``\\r``, all of which can occur inside a
    source line. A trailing ``\\r`` (CRLF diffs) is dropped per line.
    """
    lines = raw_diff.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def header_new_path(line: str) -> str | None:
    """Return the new path named by a ``diff --git a/<old> b/<new>`` line.

    When old and new path are equal the header is split in the middle, so a
    path that itself contains ``" b/"`` is still read correctly. Otherwise
    the text after the last ``" b/"`` is used.
    """
    if not line.startswith(FILE_HEADER_PREFIX + OLD_PATH_PREFIX):
        return None
    rest = line[len(FILE_HEADER_PREFIX + OLD_PATH_PREFIX):]
    half = (len(rest) - len(NEW_PATH_MARKER)) // 2
    if half > 0 and rest[half:half + len(NEW_PATH_MARKER)] == NEW_PATH_MARKER:
        if rest[:half] == rest[half + len(NEW_PATH_MARKER):]:
            return rest[:half]
    index = line.rfind(NEW_PATH_MARKER)
    if index < len(FILE_HEADER_PREFIX):
        return None
    path = line[index + len(NEW_PATH_MARKER):]
    return path or None


def _header_matches(line: str, file_path: str) -> bool:
    # Anchored at end of line: "b/a.ts" must not match "b/a.ts.bak".
    if not line.startswith(FILE_HEADER_PREFIX + OLD_PATH_PREFIX):
        return False
    suffix = NEW_PATH_MARKER + file_path
    return line.endswith(suffix) and len(line) - len(suffix) > len(FILE_HEADER_PREFIX)


def _metadata_lines(lines: list[str]) -> list[str]:
    """Lines between the file header and the first hunk header."""
    metadata: list[str] = []
    for line in lines[1:]:
        if line.startswith(HUNK_PREFIX):
            break
        metadata.append(line)
    return metadata


def _classify(file_path: str, lines: list[str]) -> FileDiffFragment:
    metadata = _metadata_lines(lines)
    is_binary = any(line.startswith(BINARY_MARKERS) for line in metadata)
    is_deleted = any(line.startswith(DELETED_MARKER) for line in metadata)
    is_new = any(line.startswith(NEW_FILE_MARKER) for line in metadata)

    rename_from = next(
        (line[len(RENAME_FROM_MARKER):] for line in metadata if line.startswith(RENAME_FROM_MARKER)),
        None,
    )
    rename_to = next(
        (line[len(RENAME_TO_MARKER):] for line in metadata if line.startswith(RENAME_TO_MARKER)),
        None,
    )
    is_renamed = rename_from is not None and rename_to is not None

    return FileDiffFragment(
        path=file_path,
        lines=tuple(lines),
        is_binary=is_binary,
        is_deleted=is_deleted,
        is_new=is_new,
        is_renamed=is_renamed,
        old_path=rename_from if is_renamed else None,
        new_path=rename_to if is_renamed else None,
    )


def _fragment_path(lines: list[str]) -> str | None:
    """New path of a fragment, preferring the unambiguous metadata lines.

    The ``diff --git`` header cannot be split reliably when a renamed path
    contains ``" b/"``; the ``+++ b/`` and ``rename to`` lines can.
    """
    if not lines or header_new_path(lines[0]) is None:
        return None
    metadata = _metadata_lines(lines)
    for line in metadata:
        if line.startswith(NEW_SIDE_PREFIX):
            # git appends a tab to ---/+++ names that contain spaces.
            return line[len(NEW_SIDE_PREFIX):].removesuffix("\t")
    for line in metadata:
        if line.startswith(RENAME_TO_MARKER):
            return line[len(RENAME_TO_MARKER):]
    return header_new_path(lines[0])


def extract(raw_diff: str, file_path: str) -> FileDiffFragment | None:
    """Extract the fragment for ``file_path`` from ``raw_diff``.

    ``file_path`` is matched exactly against the new path of each file header,
    so renamed files are found under their new name. Returns None when no
    header matches, including for empty or unparseable input.

    Args:
        raw_diff: Full multi-file unified diff text.
        file_path: Repository-relative path of the file to isolate.
    """
    if not raw_diff or not file_path:
        return None

    state = _ScanState.SEEKING_HEADER
    collected: list[str] = []
    for line in split_diff_lines(raw_diff):
        is_header = line.startswith(FILE_HEADER_PREFIX)
        if state is _ScanState.IN_FRAGMENT:
            if not is_header:
                collected.append(line)
                continue
            if _fragment_path(collected) == file_path:
                break
            # Header suffix matched but the path contains " b/"; keep seeking.
            state = _ScanState.SEEKING_HEADER
            collected = []
        if is_header and _header_matches(line, file_path):
            state = _ScanState.IN_FRAGMENT
            collected = [line]

    if state is _ScanState.SEEKING_HEADER or _fragment_path(collected) != file_path:
        return None
    return _classify(file_path, collected)


def list_files(raw_diff: str) -> list[str]:
    """Return the new path of every file section in document order."""
    if not raw_diff:
        return []
    sections: list[list[str]] = []
    for line in split_diff_lines(raw_diff):
        if line.startswith(FILE_HEADER_PREFIX):
            sections.append([line])
        elif sections:
            sections[-1].append(line)
    paths = (_fragment_path(section) for section in sections)
    return [path for path in paths if path]

"""Tests for single-file extraction from multi-file diffs."""

import pytest

from prmanager.diff import ChangeType, extract, list_files
from prmanager.diff.extractor import header_new_path
from rpm_fixtures import SAMPLE_DIFF, SAMPLE_FILES


class TestExtract:
    """Test fragment isolation and boundaries."""

    def test_returns_none_for_unknown_path(self) -> None:
        """A path with no file header is not found."""
        assert extract(SAMPLE_DIFF, "src/missing.ts") is None

    @pytest.mark.parametrize("raw", ["", "garbage input ###", "@@ -1 +1 @@\n+orphan"])
    def test_malformed_input_is_not_found(self, raw: str) -> None:
        """Input without recognizable headers yields None instead of raising."""
        assert extract(raw, "src/app.ts") is None

    def test_empty_path_is_not_found(self) -> None:
        assert extract(SAMPLE_DIFF, "") is None

    def test_fragment_stops_at_next_header(self) -> None:
        """The fragment runs up to, but excluding, the following file header."""
        fragment = extract(SAMPLE_DIFF, "src/app.ts")

        assert fragment is not None
        assert fragment.lines[0] == "diff --git a/src/app.ts b/src/app.ts"
        assert fragment.lines[-1] == " return a;"
        assert not any(line.startswith("diff --git") for line in fragment.lines[1:])

    def test_prefix_path_does_not_match_longer_path(self) -> None:
        """Requesting a.ts never picks up a.ts.bak or a.test.ts."""
        fragment = extract(SAMPLE_DIFF, "src/app.ts")

        assert fragment is not None
        assert "backup" not in fragment.text
        assert "import { main }" not in fragment.text

    def test_longer_path_found_after_prefix_path(self) -> None:
        fragment = extract(SAMPLE_DIFF, "src/app.ts.bak")

        assert fragment is not None
        assert fragment.lines[-1] == "+new backup"

    def test_suffix_path_does_not_match(self) -> None:
        """A path that only matches the tail of another path is not found."""
        assert extract(SAMPLE_DIFF, "app.ts") is None

    def test_last_fragment_runs_to_end_of_input(self) -> None:
        fragment = extract(SAMPLE_DIFF, "lib/after.py")

        assert fragment is not None
        assert fragment.lines[-1] == " # end"

    def test_adjacent_headers_without_body(self) -> None:
        """A header-only section directly followed by another header is found and empty."""
        raw = (
            "diff --git a/run.sh b/run.sh\n"
            "old mode 100644\n"
            "new mode 100755\n"
            "diff --git a/b.txt b/b.txt\n"
            "@@ -1 +1 @@\n"
            "-x\n"
            "+y\n"
        )
        fragment = extract(raw, "run.sh")

        assert fragment is not None
        assert fragment.hunk_count == 0
        assert fragment.change_type is ChangeType.MODIFIED
        assert len(fragment.lines) == 3

    def test_identical_inputs_give_identical_fragments(self) -> None:
        assert extract(SAMPLE_DIFF, "src/app.ts") == extract(SAMPLE_DIFF, "src/app.ts")


class TestClassification:
    """Test change-type flags."""

    def test_modified(self) -> None:
        fragment = extract(SAMPLE_DIFF, "src/app.ts")

        assert fragment.change_type is ChangeType.MODIFIED
        assert fragment.hunk_count == 1
        assert not (fragment.is_binary or fragment.is_deleted or fragment.is_new or fragment.is_renamed)

    def test_new_file(self) -> None:
        fragment = extract(SAMPLE_DIFF, "src/app.test.ts")

        assert fragment.is_new is True
        assert fragment.change_type is ChangeType.ADDED

    def test_binary(self) -> None:
        fragment = extract(SAMPLE_DIFF, "assets/logo.png")

        assert fragment.is_binary is True
        assert fragment.change_type is ChangeType.BINARY
        assert fragment.hunk_count == 0

    def test_git_binary_patch_is_binary(self) -> None:
        raw = (
            "diff --git a/img.gif b/img.gif\n"
            "index 1..2 100644\n"
            "GIT binary patch\n"
            "literal 10\n"
            "Xc${NkU|?VXVq^e\n"
        )
        assert extract(raw, "img.gif").is_binary is True

    def test_deleted(self) -> None:
        fragment = extract(SAMPLE_DIFF, "docs/old.md")

        assert fragment.is_deleted is True
        assert fragment.change_type is ChangeType.DELETED

    def test_renamed_is_found_by_new_path(self) -> None:
        """Renamed files bind to their new path and capture both names."""
        fragment = extract(SAMPLE_DIFF, "lib/after.py")

        assert fragment.is_renamed is True
        assert fragment.old_path == "lib/before.py"
        assert fragment.new_path == "lib/after.py"
        assert fragment.change_type is ChangeType.RENAMED
        assert fragment.hunk_count == 1

    def test_renamed_is_not_found_by_old_path(self) -> None:
        assert extract(SAMPLE_DIFF, "lib/before.py") is None

    def test_markers_inside_hunks_are_content(self) -> None:
        """Body lines that look like metadata do not change the classification."""
        raw = (
            "diff --git a/notes.txt b/notes.txt\n"
            "index 1..2 100644\n"
            "--- a/notes.txt\n"
            "+++ b/notes.txt\n"
            "@@ -1,2 +1,3 @@\n"
            " intro\n"
            "+deleted file mode 100644\n"
            "+Binary files a and b differ\n"
        )
        fragment = extract(raw, "notes.txt")

        assert fragment.change_type is ChangeType.MODIFIED

    def test_binary_takes_priority_over_deleted(self) -> None:
        raw = (
            "diff --git a/icon.png b/icon.png\n"
            "deleted file mode 100644\n"
            "index 1..0\n"
            "Binary files a/icon.png and /dev/null differ\n"
        )
        fragment = extract(raw, "icon.png")

        assert fragment.is_binary and fragment.is_deleted
        assert fragment.change_type is ChangeType.BINARY


class TestListFiles:
    """Test listing file paths in a diff."""

    def test_lists_new_paths_in_order(self) -> None:
        assert list_files(SAMPLE_DIFF) == SAMPLE_FILES

    def test_empty_and_garbage(self) -> None:
        assert list_files("") == []
        assert list_files("garbage input ###") == []

    def test_header_new_path(self) -> None:
        assert header_new_path("diff --git a/x/y.py b/x/z.py") == "x/z.py"
        assert header_new_path("diff --git x y") is None

    def test_header_new_path_with_marker_inside_path(self) -> None:
        assert header_new_path("diff --git a/docs b/x.md b/docs b/x.md") == "docs b/x.md"


SPACED_PATH_DIFF = (
    "diff --git a/docs b/x.md b/docs b/x.md\n"
    "index 1111111..2222222 100644\n"
    "--- a/docs b/x.md\t\n"
    "+++ b/docs b/x.md\t\n"
    "@@ -1 +1 @@\n"
    "-old\n"
    "+new\n"
    "diff --git a/notes b/old.md b/notes b/new.md\n"
    "similarity index 100%\n"
    "rename from notes b/old.md\n"
    "rename to notes b/new.md\n"
)


class TestPathsContainingMarker:
    """Test paths that contain the " b/" header separator."""

    def test_extracts_full_path(self) -> None:
        fragment = extract(SPACED_PATH_DIFF, "docs b/x.md")

        assert fragment is not None
        assert fragment.lines[-1] == "+new"

    def test_suffix_of_path_is_not_found(self) -> None:
        assert extract(SPACED_PATH_DIFF, "x.md") is None
        assert extract(SPACED_PATH_DIFF, "new.md") is None

    def test_rename_uses_rename_to_line(self) -> None:
        fragment = extract(SPACED_PATH_DIFF, "notes b/new.md")

        assert fragment is not None
        assert fragment.old_path == "notes b/old.md"

    def test_list_files(self) -> None:
        assert list_files(SPACED_PATH_DIFF) == ["docs b/x.md", "notes b/new.md"]


class TestLineSplitting:
    """Test that only newlines end a diff line."""

    @pytest.mark.parametrize("sep", ["\x0c", "\u2028", "\x1c", "\x85", "\r"])
    def test_unicode_line_breaks_stay_inside_line(self, sep: str) -> None:
        raw = f"diff --git a/f.py b/f.py\n@@ -1 +1,2 @@\n keep\n+foo{sep}bar\n"

        fragment = extract(raw, "f.py")

        assert fragment is not None
        assert fragment.lines[-1] == f"+foo{sep}bar"

    def test_crlf_diff(self) -> None:
        raw = "diff --git a/f.py b/f.py\r\n@@ -1 +1 @@\r\n-a\r\n+b\r\n"

        fragment = extract(raw, "f.py")

        assert fragment is not None
        assert fragment.lines == ("diff --git a/f.py b/f.py", "@@ -1 +1 @@", "-a", "+b")
        assert list_files(raw) == ["f.py"]

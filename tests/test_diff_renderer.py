"""Tests for the single-pane diff renderer."""

import pytest

from prmanager.diff import AnnotationCategory, render
from prmanager.diff import renderer as renderer_module
from prmanager.diff.renderer import (
    BINARY_PLACEHOLDER,
    DELETED_PLACEHOLDER,
    EMPTY_PLACEHOLDER,
    ERROR_PLACEHOLDER,
    NEW_FILE_BANNER,
    LineAnnotation,
)
from rpm_fixtures import SAMPLE_DIFF, SAMPLE_FILES


def _origin_counts(raw: str, path: str) -> dict[AnnotationCategory, int]:
    """Count hunk-body lines by origin marker in one file's section."""
    counts = {category: 0 for category in AnnotationCategory}
    in_section = in_hunk = False
    for line in raw.split("\n"):
        if line.startswith("diff --git "):
            in_section = line.endswith(" b/" + path)
            in_hunk = False
            continue
        if not in_section:
            continue
        if line.startswith("@@"):
            in_hunk = True
            counts[AnnotationCategory.HUNK_HEADER] += 1
        elif in_hunk and line.startswith("+"):
            counts[AnnotationCategory.ADDED] += 1
        elif in_hunk and line.startswith("-"):
            counts[AnnotationCategory.DELETED] += 1
    return counts


class TestRenderModified:
    """Test rendering of an ordinary modified file."""

    def test_display_lines(self) -> None:
        """Hunk headers stay verbatim, markers are stripped, metadata is skipped."""
        rendered = render(SAMPLE_DIFF, "src/app.ts")

        assert rendered.lines == (
            "@@ -40,7 +40,8 @@ export function main() {",
            "const a = 1;",
            "const b = 2;",
            "const b = 3;",
            "const c = 4;",
            "return a;",
        )

    def test_annotations(self) -> None:
        rendered = render(SAMPLE_DIFF, "src/app.ts")

        assert [(a.start_line, a.category) for a in rendered.annotations] == [
            (1, AnnotationCategory.HUNK_HEADER),
            (3, AnnotationCategory.DELETED),
            (4, AnnotationCategory.ADDED),
            (5, AnnotationCategory.ADDED),
        ]
        assert all(a.start_line == a.end_line for a in rendered.annotations)

    def test_style_identifiers(self) -> None:
        """Added and deleted lines carry distinct body and glyph classes."""
        rendered = render(SAMPLE_DIFF, "src/app.ts")
        header = rendered.annotations_of(AnnotationCategory.HUNK_HEADER)[0]
        deleted = rendered.annotations_of(AnnotationCategory.DELETED)[0]
        added = rendered.annotations_of(AnnotationCategory.ADDED)[0]

        assert header.class_name == "diff-hunk-header"
        assert header.glyph_margin_class_name is None
        assert deleted.class_name == "diff-line-deleted"
        assert deleted.glyph_margin_class_name == "diff-glyph-deleted"
        assert added.class_name == "diff-line-added"
        assert added.glyph_margin_class_name == "diff-glyph-added"

    def test_content_joins_lines(self) -> None:
        rendered = render(SAMPLE_DIFF, "src/app.ts")

        assert rendered.content.split("\n") == list(rendered.lines)

    def test_no_newline_marker_is_skipped(self) -> None:
        raw = (
            "diff --git a/a.txt b/a.txt\n"
            "--- a/a.txt\n"
            "+++ b/a.txt\n"
            "@@ -1 +1 @@\n"
            "-old\n"
            "\\ No newline at end of file\n"
            "+new\n"
            "\\ No newline at end of file\n"
        )
        rendered = render(raw, "a.txt")

        assert rendered.lines == ("@@ -1 +1 @@", "old", "new")
        assert len(rendered.annotations) == 3


class TestRenderSpecialFiles:
    """Test placeholders and banners."""

    def test_not_found_propagates(self) -> None:
        assert render(SAMPLE_DIFF, "src/missing.ts") is None

    def test_malformed_input_is_not_found(self) -> None:
        """Garbage never raises and is reported as not found."""
        assert render("garbage input ###", "src/app.ts") is None

    def test_binary_placeholder(self) -> None:
        rendered = render(SAMPLE_DIFF, "assets/logo.png")

        assert rendered.lines == (BINARY_PLACEHOLDER,)
        assert rendered.annotations == ()

    def test_binary_placeholder_ignores_hunks(self) -> None:
        """A binary marker wins even when the section also carries hunks."""
        raw = (
            "diff --git a/blob.bin b/blob.bin\n"
            "Binary files a/blob.bin and b/blob.bin differ\n"
            "@@ -1 +1 @@\n"
            "-a\n"
            "+b\n"
        )
        rendered = render(raw, "blob.bin")

        assert rendered.lines == (BINARY_PLACEHOLDER,)
        assert rendered.annotations == ()

    def test_deleted_placeholder(self) -> None:
        rendered = render(SAMPLE_DIFF, "docs/old.md")

        assert rendered.lines == (DELETED_PLACEHOLDER,)
        assert rendered.annotations == ()

    def test_new_file_banner(self) -> None:
        """New files get a banner and three annotated additions, no deletions."""
        rendered = render(SAMPLE_DIFF, "src/app.test.ts")

        assert rendered.lines[:2] == (NEW_FILE_BANNER, "")
        assert rendered.lines[2] == "@@ -0,0 +1,3 @@"
        added = rendered.annotations_of(AnnotationCategory.ADDED)
        assert [a.start_line for a in added] == [4, 5, 6]
        assert rendered.annotations_of(AnnotationCategory.DELETED) == []

    def test_rename_banner_offsets_annotations(self) -> None:
        raw = (
            "diff --git a/old-name.txt b/new-name.txt\n"
            "similarity index 95%\n"
            "rename from old-name.txt\n"
            "rename to new-name.txt\n"
            "--- a/old-name.txt\n"
            "+++ b/new-name.txt\n"
            "@@ -1,1 +1,2 @@\n"
            " keep\n"
            "+added\n"
        )
        rendered = render(raw, "new-name.txt")

        assert "old-name.txt" in rendered.lines[0]
        assert "new-name.txt" in rendered.lines[0]
        assert rendered.lines[1] == ""
        assert rendered.lines[2] == "@@ -1,1 +1,2 @@"
        added = rendered.annotations_of(AnnotationCategory.ADDED)
        assert [(a.start_line, rendered.lines[a.start_line - 1]) for a in added] == [(4, "added")]

    def test_header_only_fragment_renders_empty_placeholder(self) -> None:
        raw = "diff --git a/run.sh b/run.sh\nold mode 100644\nnew mode 100755\n"
        rendered = render(raw, "run.sh")

        assert rendered.lines == (EMPTY_PLACEHOLDER,)
        assert rendered.annotations == ()

    def test_unexpected_error_renders_error_placeholder(self, monkeypatch) -> None:
        """Parser failures degrade to a placeholder instead of raising."""

        def explode(fragment):
            raise RuntimeError("boom")

        monkeypatch.setattr(renderer_module, "_build", explode)
        rendered = render(SAMPLE_DIFF, "src/app.ts")

        assert rendered.lines == (ERROR_PLACEHOLDER,)
        assert rendered.annotations == ()


class TestRenderProperties:
    """Invariants that hold for every file in a diff."""

    @pytest.mark.parametrize("path", SAMPLE_FILES)
    def test_idempotent(self, path: str) -> None:
        assert render(SAMPLE_DIFF, path) == render(SAMPLE_DIFF, path)

    @pytest.mark.parametrize(
        "path", ["src/app.ts", "src/app.ts.bak", "src/app.test.ts", "lib/after.py"]
    )
    def test_annotation_counts_match_origins(self, path: str) -> None:
        rendered = render(SAMPLE_DIFF, path)
        expected = _origin_counts(SAMPLE_DIFF, path)

        for category, count in expected.items():
            assert len(rendered.annotations_of(category)) == count

    @pytest.mark.parametrize("path", SAMPLE_FILES)
    def test_annotations_never_overlap(self, path: str) -> None:
        rendered = render(SAMPLE_DIFF, path)
        lines = [a.start_line for a in rendered.annotations]

        assert len(lines) == len(set(lines))
        assert all(1 <= line <= len(rendered.lines) for line in lines)


class TestEditorDecorations:
    """Test conversion to editor widget decorations."""

    def test_decoration_shape(self) -> None:
        annotation = LineAnnotation.for_line(7, AnnotationCategory.ADDED)

        assert annotation.to_editor_decoration() == {
            "range": {"startLineNumber": 7, "endLineNumber": 7},
            "options": {
                "isWholeLine": True,
                "className": "diff-line-added",
                "glyphMarginClassName": "diff-glyph-added",
            },
        }

    def test_hunk_header_has_no_glyph(self) -> None:
        decoration = LineAnnotation.for_line(1, AnnotationCategory.HUNK_HEADER).to_editor_decoration()

        assert "glyphMarginClassName" not in decoration["options"]

    def test_rendered_decorations_follow_annotations(self) -> None:
        rendered = render(SAMPLE_DIFF, "src/app.ts")
        decorations = rendered.to_editor_decorations()

        assert [d["range"]["startLineNumber"] for d in decorations] == [1, 3, 4, 5]


class TestEmbeddedLineBreaks:
    """Form feeds and Unicode separators inside a source line."""

    @pytest.mark.parametrize("sep", ["\x0c", "\u2028", "\x1c", "\r"])
    def test_added_line_keeps_one_slot(self, sep: str) -> None:
        raw = f"diff --git a/f.py b/f.py\n@@ -1 +1,2 @@\n keep\n+foo{sep}bar\n"

        rendered = render(raw, "f.py")

        assert rendered.lines == ("@@ -1 +1,2 @@", "keep", f"foo{sep}bar")
        assert [(a.start_line, a.category) for a in rendered.annotations] == [
            (1, AnnotationCategory.HUNK_HEADER),
            (3, AnnotationCategory.ADDED),
        ]

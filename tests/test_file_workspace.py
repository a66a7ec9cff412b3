"""Tests for the filesystem workspace and the edit applier."""

import io
from pathlib import Path

import pytest
from rich.console import Console

from green_refactor.contracts.selection import Position, SelectionContext, TextRange
from green_refactor.core.edits.applier import EditApplier
from green_refactor.errors import EditApplyError
from green_refactor.infrastructure.workspace.filesystem import (
    FileWorkspace,
    line_range,
    range_offsets,
)


TEXT = "a = 1\nfor x in y:\n    slow(x)\nprint(a)\n"


def context_for(path, text_range, original_text):
    return SelectionContext(str(path), text_range, "python", original_text)


@pytest.fixture
def plain_workspace():
    return FileWorkspace(console=Console(file=io.StringIO(), width=120))


@pytest.fixture
def doc(tmp_path):
    path = tmp_path / "module.py"
    path.write_text(TEXT, encoding="utf-8")
    return path


class TestRanges:
    def test_offsets(self):
        text_range = TextRange(Position(1, 0), Position(3, 0))
        start, end = range_offsets(TEXT, text_range)
        assert TEXT[start:end] == "for x in y:\n    slow(x)\n"

    def test_offset_past_end_rejected(self):
        with pytest.raises(ValueError):
            range_offsets(TEXT, TextRange(Position(0, 0), Position(9, 0)))
        with pytest.raises(ValueError):
            range_offsets(TEXT, TextRange(Position(0, 0), Position(0, 40)))

    def test_end_of_document_is_valid(self):
        start, end = range_offsets(TEXT, TextRange(Position(0, 0), Position(4, 0)))
        assert (start, end) == (0, len(TEXT))

    def test_line_range_middle(self):
        assert line_range(TEXT, 2, 3) == TextRange(Position(1, 0), Position(2, 11))

    def test_line_range_last_line_excludes_final_newline(self):
        assert line_range(TEXT, 4, 10) == TextRange(Position(3, 0), Position(3, 8))

    def test_line_range_crlf_stops_before_line_break(self):
        text = "a\r\nb\r\nc\r\n"
        start, end = range_offsets(text, line_range(text, 1, 2))
        assert text[start:end] == "a\r\nb"

    @pytest.mark.parametrize("first, last", [(0, 1), (3, 2), (9, 9)])
    def test_line_range_invalid(self, first, last):
        with pytest.raises(ValueError):
            line_range(TEXT, first, last)

    def test_inverted_range_rejected(self):
        with pytest.raises(ValueError):
            TextRange(Position(2, 0), Position(1, 0))


class TestWorkspace:
    def test_language_from_suffix(self, plain_workspace):
        assert plain_workspace.language_of("x.py") == "python"
        assert plain_workspace.language_of("x.TS") == "typescript"
        assert plain_workspace.language_of("Makefile") == "plaintext"

    def test_replace(self, plain_workspace, doc):
        text_range = TextRange(Position(1, 0), Position(3, 0))
        plain_workspace.replace(context_for(doc, text_range, "for x in y:\n    slow(x)\n"), "fast(y)\n")
        assert doc.read_text(encoding="utf-8") == "a = 1\nfast(y)\nprint(a)\n"
        assert list(doc.parent.glob(".module.py.*")) == []

    @pytest.mark.parametrize("first, last", [(2, 3), (1, 1), (3, 4)])
    def test_replace_line_selection_keeps_neighbours(self, plain_workspace, doc, first, last):
        text_range = line_range(TEXT, first, last)
        selected = plain_workspace.read_range(str(doc), text_range)

        plain_workspace.replace(context_for(doc, text_range, selected), "fast()")

        lines = TEXT.splitlines()
        expected = lines[:first - 1] + ["fast()"] + lines[last:]
        assert doc.read_text(encoding="utf-8") == "\n".join(expected) + "\n"

    def test_replace_keeps_crlf(self, plain_workspace, tmp_path):
        path = tmp_path / "win.py"
        path.write_bytes(b"a\r\nb\r\n")
        plain_workspace.replace(
            context_for(path, TextRange(Position(0, 0), Position(1, 0)), "a\r\n"), "c\r\n"
        )
        assert path.read_bytes() == b"c\r\nb\r\n"

    def test_missing_document(self, plain_workspace, tmp_path):
        ctx = context_for(tmp_path / "gone.py", TextRange(Position(0, 0), Position(1, 0)), "x\n")
        with pytest.raises(EditApplyError, match="no longer exists"):
            plain_workspace.replace(ctx, "y\n")

    def test_range_no_longer_fits(self, plain_workspace, doc):
        ctx = context_for(doc, TextRange(Position(1, 0), Position(3, 0)), "for x in y:\n    slow(x)\n")
        doc.write_text("a = 1\n", encoding="utf-8")
        with pytest.raises(EditApplyError, match="no longer valid"):
            plain_workspace.replace(ctx, "fast()\n")
        assert doc.read_text(encoding="utf-8") == "a = 1\n"

    def test_stale_text_rejected(self, plain_workspace, doc):
        ctx = context_for(doc, TextRange(Position(1, 0), Position(3, 0)), "for x in y:\n    slow(x)\n")
        edited = TEXT.replace("slow", "slower")
        doc.write_text(edited, encoding="utf-8")
        with pytest.raises(EditApplyError, match="stale"):
            plain_workspace.replace(ctx, "fast()\n")
        assert doc.read_text(encoding="utf-8") == edited

    def test_show_diff_does_not_touch_document(self, doc):
        out = io.StringIO()
        workspace = FileWorkspace(console=Console(file=out, width=120))
        ctx = context_for(doc, TextRange(Position(2, 0), Position(3, 0)), "    slow(x)\n")

        workspace.show_diff(ctx, "    fast(x)\n", "Original vs Optimized")
        workspace.discard_diffs()

        rendered = out.getvalue()
        assert "-    slow(x)" in rendered
        assert "+    fast(x)" in rendered
        assert doc.read_text(encoding="utf-8") == TEXT


class TestEditApplier:
    def test_success_notifies(self, workspace, doc):
        ctx = context_for(doc, TextRange(Position(3, 0), Position(4, 0)), "print(a)\n")
        assert EditApplier(workspace).apply(ctx, "")
        assert doc.read_text(encoding="utf-8") == "a = 1\nfor x in y:\n    slow(x)\n"
        assert workspace.notifications == [("info", "Optimized code applied.")]

    def test_failure_notifies_and_leaves_document(self, workspace, doc):
        ctx = context_for(doc, TextRange(Position(3, 0), Position(4, 0)), "print(b)\n")
        assert not EditApplier(workspace).apply(ctx, "pass\n")
        assert doc.read_text(encoding="utf-8") == TEXT
        level, message = workspace.notifications[-1]
        assert level == "error"
        assert "Could not apply" in message


class TestDiffFiles:
    def test_optimized_versions_share_one_directory(self, plain_workspace, doc):
        ctx = context_for(doc, line_range(TEXT, 3, 3), "    slow(x)")

        plain_workspace.show_diff(ctx, "    fast(x)", "diff")
        plain_workspace.show_diff(ctx, "    faster(x)", "diff")

        diff_dir = Path(plain_workspace._diff_dir)
        assert sorted(p.read_text(encoding="utf-8") for p in diff_dir.iterdir()) == [
            "    fast(x)",
            "    faster(x)",
        ]

    def test_discard_removes_optimized_versions(self, plain_workspace, doc):
        ctx = context_for(doc, line_range(TEXT, 3, 3), "    slow(x)")
        plain_workspace.show_diff(ctx, "    fast(x)", "diff")
        diff_dir = Path(plain_workspace._diff_dir)

        plain_workspace.discard_diffs()
        plain_workspace.discard_diffs()

        assert not diff_dir.exists()
        assert doc.read_text(encoding="utf-8") == TEXT

    def test_diff_of_selection_without_trailing_newline(self, doc):
        out = io.StringIO()
        workspace = FileWorkspace(console=Console(file=out, width=120))
        ctx = context_for(doc, line_range(TEXT, 2, 3), "for x in y:\n    slow(x)")

        workspace.show_diff(ctx, "for x in y: fast(x)", "diff")
        workspace.discard_diffs()

        rendered = out.getvalue()
        assert "-    slow(x)" in rendered
        assert "+for x in y: fast(x)" in rendered

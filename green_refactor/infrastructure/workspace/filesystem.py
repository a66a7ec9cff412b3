import difflib
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Tuple

from rich.console import Console
from rich.syntax import Syntax

from green_refactor.contracts.selection import Position, SelectionContext, TextRange
from green_refactor.core.workspace.port import NotifyLevel, Workspace
from green_refactor.errors import EditApplyError

logger = logging.getLogger(__name__)

LANGUAGE_BY_SUFFIX = {
    ".py": "python",
    ".js": "javascript",
    ".mjs": "javascript",
    ".ts": "typescript",
    ".tsx": "typescriptreact",
    ".jsx": "javascriptreact",
    ".java": "java",
    ".kt": "kotlin",
    ".go": "go",
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".cc": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".rb": "ruby",
    ".php": "php",
    ".swift": "swift",
    ".scala": "scala",
    ".sql": "sql",
    ".sh": "shellscript",
}

SUFFIX_BY_LANGUAGE = {language: suffix for suffix, language in reversed(LANGUAGE_BY_SUFFIX.items())}

NOTIFY_STYLES = {
    "info": "green",
    "warning": "yellow",
    "error": "bold red",
}


def _offset(lines: List[str], position: Position) -> int:
    """Character offset of position, ValueError when outside the text."""
    if position.line == len(lines) and position.character == 0:
        return sum(len(line) for line in lines)
    if position.line >= len(lines):
        raise ValueError(f"Line {position.line + 1} is past the end of the document")

    line = lines[position.line].rstrip("\r\n")
    if position.character > len(line):
        raise ValueError(
            f"Character {position.character} is past the end of line {position.line + 1}"
        )
    return sum(len(chunk) for chunk in lines[:position.line]) + position.character


def range_offsets(text: str, text_range: TextRange) -> Tuple[int, int]:
    lines = text.splitlines(keepends=True)
    return _offset(lines, text_range.start), _offset(lines, text_range.end)


def line_range(text: str, first_line: int, last_line: int) -> TextRange:
    """
    Range covering 1-based inclusive lines [first_line, last_line].

    The range stops before the line break of last_line, so replacing it
    with code that has no trailing newline keeps the following line apart.
    """
    lines = text.splitlines(keepends=True)
    if first_line < 1 or last_line < first_line or first_line > len(lines):
        raise ValueError(f"Invalid line range {first_line}-{last_line} ({len(lines)} lines)")

    last_line = min(last_line, len(lines))
    start = Position(first_line - 1, 0)
    end = Position(last_line - 1, len(lines[last_line - 1].rstrip("\r\n")))

    return TextRange(start, end)


class FileWorkspace(Workspace):
    """
    Documents are files on disk, identified by their path.
    """

    def __init__(self, console: Console | None = None, encoding: str = "utf-8"):
        self.console = console or Console()
        self.encoding = encoding

        # optimized versions written by show_diff, removed by discard_diffs
        self._diff_dir: Optional[str] = None

    def _read(self, document_id: str) -> str:
        # newline="" keeps \r\n intact so that rewritten files keep their endings
        with open(document_id, "r", encoding=self.encoding, newline="") as f:
            return f.read()

    def exists(self, document_id: str) -> bool:
        return Path(document_id).is_file()

    def language_of(self, document_id: str) -> str:
        return LANGUAGE_BY_SUFFIX.get(Path(document_id).suffix.lower(), "plaintext")

    def read_text(self, document_id: str) -> str:
        return self._read(document_id)

    def read_range(self, document_id: str, text_range: TextRange) -> str:
        text = self._read(document_id)
        start, end = range_offsets(text, text_range)
        return text[start:end]

    def replace(self, context: SelectionContext, new_text: str) -> None:
        path = Path(context.document_id)

        try:
            text = self._read(context.document_id)
        except FileNotFoundError as e:
            raise EditApplyError(f"Document no longer exists: {path}") from e
        except OSError as e:
            raise EditApplyError(f"Cannot read {path}: {e}") from e

        try:
            start, end = range_offsets(text, context.text_range)
        except ValueError as e:
            raise EditApplyError(f"Range is no longer valid: {e}") from e

        if text[start:end] != context.original_text:
            raise EditApplyError(f"{path.name} changed since the analysis; selection is stale")

        updated = text[:start] + new_text + text[end:]

        # temp file + os.replace: the document is either fully rewritten or untouched
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        except OSError as e:
            raise EditApplyError(f"Cannot write next to {path}: {e}") from e

        try:
            with os.fdopen(fd, "w", encoding=self.encoding, newline="") as f:
                f.write(updated)
            try:
                os.chmod(tmp_path, path.stat().st_mode)
            except OSError:
                logger.debug("Could not copy file mode to %s", tmp_path)
            os.replace(tmp_path, path)
        except OSError as e:
            Path(tmp_path).unlink(missing_ok=True)
            raise EditApplyError(f"Cannot write {path}: {e}") from e

    def show_diff(self, context: SelectionContext, optimized_code: str, title: str) -> None:
        suffix = SUFFIX_BY_LANGUAGE.get(context.language, ".txt")
        if self._diff_dir is None:
            self._diff_dir = tempfile.mkdtemp(prefix="green-refactor-")

        with tempfile.NamedTemporaryFile(
            "w",
            encoding=self.encoding,
            prefix="optimized-",
            suffix=suffix,
            dir=self._diff_dir,
            delete=False,
        ) as f:
            f.write(optimized_code)
            transient_path = f.name

        name = Path(context.document_id).name
        # selections usually end without a line break; compare bare lines
        diff = "\n".join(
            difflib.unified_diff(
                context.original_text.splitlines(),
                optimized_code.splitlines(),
                fromfile=f"{name} (original)",
                tofile=f"{name} (optimized)",
                lineterm="",
            )
        )

        self.console.rule(title)
        self.console.print(Syntax(diff or "(no changes)\n", "diff", word_wrap=True))
        self.console.print(f"Optimized version written to {transient_path}", style="dim", markup=False)

    def discard_diffs(self) -> None:
        diff_dir, self._diff_dir = self._diff_dir, None
        if diff_dir is not None:
            shutil.rmtree(diff_dir, ignore_errors=True)
            logger.debug("Removed diff directory %s", diff_dir)

    def notify(self, level: NotifyLevel, message: str) -> None:
        self.console.print(message, style=NOTIFY_STYLES[level], markup=False)

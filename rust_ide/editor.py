"""The editor buffer model: one open file and its contents."""

from __future__ import annotations

from pathlib import Path

__all__ = ["EditorError", "EditorModel", "split_lines"]


class EditorError(Exception):
    """Raised when the editor cannot open or save a file."""


class EditorModel:
    """Holds the contents of the currently open file and its dirty flag."""

    def __init__(self) -> None:
        self._content = ""
        self._current_file: Path | None = None
        self.dirty = False

    @property
    def contents(self) -> str:
        return self._content

    @property
    def current_file(self) -> Path | None:
        return self._current_file

    def title(self) -> str:
        if self._current_file is None:
            return "Editor"
        if self.dirty:
            return f"Editor * {self._current_file}"
        return f"Editor {self._current_file}"

    def open(self, path: str | Path) -> None:
        """Load ``path`` into the editor and mark it clean."""
        path = Path(path)
        try:
            content = path.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise EditorError(f"não foi possível abrir {path}") from exc
        self._content = content
        self._current_file = path
        self.dirty = False

    def save(self) -> Path:
        """Write the current contents back to the open file."""
        return self.save_content(self._content)

    def save_content(self, text: str) -> Path:
        """Write ``text`` to the open file and make it the editor contents."""
        if self._current_file is None:
            raise EditorError("nenhum arquivo aberto")
        path = self._current_file
        try:
            path.write_bytes(text.encode("utf-8"))
        except OSError as exc:
            raise EditorError(f"não foi possível salvar {path}") from exc
        self._content = text
        self.dirty = False
        return path


def split_lines(content: str) -> list[str]:
    """Split text into lines; empty text gives a single empty line."""
    if not content:
        return [""]
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line.removesuffix("\r") for line in lines]
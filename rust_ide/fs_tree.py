"""The workspace file tree shown in the side panel."""

from __future__ import annotations

import os
import stat
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path

__all__ = ["FileTree", "VisibleEntry"]

_IGNORED_NAMES = frozenset({".git", "target"})


@dataclass(frozen=True)
class VisibleEntry:
    """One row of the tree as it is currently displayed."""

    path: Path
    label: str
    depth: int
    is_dir: bool
    expanded: bool


def _entry_is_dir(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


@dataclass
class _TreeNode:
    path: Path
    label: str
    is_dir: bool
    expanded: bool
    children: list[_TreeNode] = field(default_factory=list)

    @classmethod
    def build(cls, path: Path, expanded: bool) -> _TreeNode:
        is_dir = stat.S_ISDIR(path.stat().st_mode)
        node = cls(
            path=path,
            label=path.name or str(path),
            is_dir=is_dir,
            expanded=expanded,
        )
        if is_dir:
            with os.scandir(path) as listing:
                entries = [entry for entry in listing if entry.name not in _IGNORED_NAMES]
            entries.sort(key=lambda entry: (not _entry_is_dir(entry), entry.name))
            node.children = [cls.build(Path(entry.path), False) for entry in entries]
        return node

    def walk(self, depth: int) -> Iterator[VisibleEntry]:
        yield VisibleEntry(
            path=self.path,
            label=self.label,
            depth=depth,
            is_dir=self.is_dir,
            expanded=self.expanded,
        )
        if self.is_dir and self.expanded:
            for child in self.children:
                yield from child.walk(depth + 1)

    def toggle(self, path: Path) -> bool:
        if self.path == path and self.is_dir:
            self.expanded = not self.expanded
            return True
        return any(child.toggle(path) for child in self.children)


class FileTree:
    """A directory tree with expandable folders and a selected row."""

    def __init__(self, root_path: str | Path) -> None:
        self._root_path = Path(root_path)
        self._root = _TreeNode.build(self._root_path, True)
        self._selected = min(max(len(self.visible_entries()) - 1, 0), 1)

    @property
    def root_path(self) -> Path:
        return self._root_path

    @property
    def selected_index(self) -> int:
        return self._selected

    def refresh(self) -> None:
        """Re-read the filesystem, keeping the selected path when it still exists."""
        selected = self.selected_entry()
        self._root = _TreeNode.build(self._root_path, True)
        if selected is not None:
            self._selected = next(
                (
                    index
                    for index, entry in enumerate(self.visible_entries())
                    if entry.path == selected.path
                ),
                0,
            )

    def visible_entries(self) -> list[VisibleEntry]:
        """All rows that are currently shown, in display order."""
        return list(self._root.walk(0))

    def selected_entry(self) -> VisibleEntry | None:
        entries = self.visible_entries()
        if 0 <= self._selected < len(entries):
            return entries[self._selected]
        return None

    def move_selection(self, delta: int) -> None:
        """Move the selection by ``delta`` rows, clamped to the visible rows."""
        total = len(self.visible_entries())
        if total == 0:
            self._selected = 0
        elif delta < 0:
            self._selected = max(self._selected + delta, 0)
        else:
            self._selected = min(self._selected + delta, total - 1)

    def activate_selected(self) -> Path | None:
        """Toggle a selected directory, or return the selected file's path."""
        entry = self.selected_entry()
        if entry is None:
            return None
        if entry.is_dir:
            self._root.toggle(entry.path)
            return None
        return entry.path
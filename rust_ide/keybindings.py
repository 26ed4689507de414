"""Keybindings configuration loaded from a ``keybindings.toml`` file.

Every field in the file is optional; unset fields keep the built-in defaults.
"""

from __future__ import annotations

import dataclasses
import tomllib
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

__all__ = [
    "GlobalKeys",
    "KeyList",
    "KeybindingsConfig",
    "ToolKeys",
    "TreeKeys",
]

_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)


def _ascii_fold(text: str) -> str:
    return text.translate(_ASCII_LOWER)


class KeyList:
    """One key string or several alternative key strings."""

    __slots__ = ("_keys",)

    def __init__(self, keys: str | Iterable[str]) -> None:
        items = (keys,) if isinstance(keys, str) else tuple(keys)
        if not all(isinstance(key, str) for key in items):
            raise ValueError(f"key list must hold strings only: {items!r}")
        self._keys: tuple[str, ...] = items

    @classmethod
    def from_value(cls, value: Any) -> KeyList:
        """Build a key list from a TOML value: a string or an array of strings."""
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, list):
            return cls(value)
        raise ValueError(f"expected a key string or a list of them, got {value!r}")

    def keys(self) -> list[str]:
        """Return all key strings in this list."""
        return list(self._keys)

    def matches(self, key_str: str) -> bool:
        """Return ``True`` if ``key_str`` equals any entry, ignoring ASCII case."""
        wanted = _ascii_fold(key_str)
        return any(_ascii_fold(key) == wanted for key in self._keys)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyList):
            return NotImplemented
        return self._keys == other._keys

    def __hash__(self) -> int:
        return hash(self._keys)

    def __repr__(self) -> str:
        return f"KeyList({list(self._keys)!r})"


@dataclass(frozen=True)
class GlobalKeys:
    """Bindings active regardless of which pane has focus."""

    save: KeyList
    refresh: KeyList
    quit: KeyList
    focus_next: KeyList
    focus_prev: KeyList
    focus_tree: KeyList
    focus_editor: KeyList
    focus_sidebar: KeyList
    open_settings: KeyList


@dataclass(frozen=True)
class ToolKeys:
    """Bindings that launch external tools."""

    lazygit: KeyList
    lazydocker: KeyList
    ai: KeyList
    mcp: KeyList
    restart_lsp: KeyList


@dataclass(frozen=True)
class TreeKeys:
    """Bindings active when the file tree pane has focus."""

    move_up: KeyList
    move_down: KeyList
    open: KeyList
    go_parent: KeyList


def _merge_section(base: Any, section: Any) -> Any:
    if section is None:
        return base
    if not isinstance(section, dict):
        raise ValueError(f"expected a table, got {section!r}")
    known = {field.name for field in dataclasses.fields(base)}
    overrides = {
        name: KeyList.from_value(value)
        for name, value in section.items()
        if name in known
    }
    return dataclasses.replace(base, **overrides)


@dataclass(frozen=True)
class KeybindingsConfig:
    """The complete keybindings configuration."""

    global_: GlobalKeys
    tools: ToolKeys
    tree: TreeKeys

    @classmethod
    def default(cls) -> KeybindingsConfig:
        """Return the built-in bindings."""
        return cls(
            global_=GlobalKeys(
                save=KeyList("Ctrl+S"),
                refresh=KeyList("Ctrl+R"),
                quit=KeyList("Ctrl+Q"),
                focus_next=KeyList("Tab"),
                focus_prev=KeyList("Shift+Tab"),
                focus_tree=KeyList("Ctrl+1"),
                focus_editor=KeyList("Ctrl+2"),
                focus_sidebar=KeyList("Ctrl+3"),
                open_settings=KeyList("Ctrl+,"),
            ),
            tools=ToolKeys(
                lazygit=KeyList("g"),
                lazydocker=KeyList("d"),
                ai=KeyList("a"),
                mcp=KeyList("m"),
                restart_lsp=KeyList("l"),
            ),
            tree=TreeKeys(
                move_up=KeyList(["Up", "k"]),
                move_down=KeyList(["Down", "j"]),
                open=KeyList(["Enter", "Right", "o"]),
                go_parent=KeyList(["Left", "h"]),
            ),
        )

    @classmethod
    def load_from_file(cls, path: str | Path) -> KeybindingsConfig:
        """Load bindings from a TOML file, merged onto the defaults.

        A missing file gives the defaults. A file that is not valid TOML, or
        whose values have the wrong shape, also gives the defaults. Any other
        failure to read the file raises.
        """
        try:
            content = Path(path).read_bytes().decode("utf-8")
        except FileNotFoundError:
            return cls.default()

        base = cls.default()
        try:
            data = tomllib.loads(content)
            return cls(
                global_=_merge_section(base.global_, data.get("global")),
                tools=_merge_section(base.tools, data.get("tools")),
                tree=_merge_section(base.tree, data.get("tree")),
            )
        except (tomllib.TOMLDecodeError, ValueError):
            return base
"""Colour themes for the IDE user interface."""

from __future__ import annotations

import dataclasses
import string
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

__all__ = ["ThemeColor", "ThemeColors", "parse_hex_color"]

_HEX_DIGITS = frozenset(string.hexdigits)


@dataclass(frozen=True)
class ThemeColor:
    """An RGB colour with 8-bit components."""

    r: int
    g: int
    b: int

    def components(self) -> tuple[int, int, int]:
        """Return the colour as an ``(r, g, b)`` tuple."""
        return (self.r, self.g, self.b)


def parse_hex_color(s: str) -> ThemeColor | None:
    """Parse ``"#RRGGBB"`` or ``"#RGB"``; return ``None`` when invalid."""
    text = s.strip()
    if not text.startswith("#"):
        return None
    digits = text[1:]
    if not digits or not set(digits) <= _HEX_DIGITS:
        return None
    if len(digits) == 6:
        r, g, b = (int(digits[i : i + 2], 16) for i in (0, 2, 4))
        return ThemeColor(r, g, b)
    if len(digits) == 3:
        r, g, b = (int(ch, 16) * 17 for ch in digits)
        return ThemeColor(r, g, b)
    return None


def _color_from_value(name: str, value: Any) -> ThemeColor:
    if not isinstance(value, str):
        raise ValueError(f"invalid color for {name}: expected a string, got {value!r}")
    color = parse_hex_color(value)
    if color is None:
        raise ValueError(f'invalid color {value!r}: expected "#RRGGBB" or "#RGB"')
    return color


@dataclass(frozen=True)
class ThemeColors:
    """All colour tokens used by the IDE UI."""

    editor_bg: ThemeColor
    editor_fg: ThemeColor
    editor_cursor_line_bg: ThemeColor
    editor_selection_bg: ThemeColor
    editor_line_number_fg: ThemeColor
    tree_bg: ThemeColor
    tree_fg: ThemeColor
    tree_selected_bg: ThemeColor
    tree_selected_fg: ThemeColor
    tree_dir_fg: ThemeColor
    sidebar_bg: ThemeColor
    sidebar_fg: ThemeColor
    status_bg: ThemeColor
    status_fg: ThemeColor
    border_normal: ThemeColor
    border_focused: ThemeColor
    diag_error: ThemeColor
    diag_warning: ThemeColor
    diag_info: ThemeColor
    git_added: ThemeColor
    git_modified: ThemeColor
    git_deleted: ThemeColor

    @classmethod
    def builtin(cls, name: str) -> ThemeColors:
        """Return a built-in theme by name, falling back to ``dark``."""
        factories = {
            "gruvbox": cls.gruvbox,
            "nord": cls.nord,
            "dracula": cls.dracula,
            "light": cls.light,
        }
        return factories.get(name, cls.dark)()

    @classmethod
    def load_from_file(cls, path: str | Path, base: ThemeColors) -> ThemeColors:
        """Load a TOML theme file, overriding only the fields it sets on ``base``.

        Raises ``OSError`` if the file cannot be read, ``tomllib.TOMLDecodeError``
        if it is not valid TOML and ``ValueError`` for malformed colours.
        """
        content = Path(path).read_bytes().decode("utf-8")
        data = tomllib.loads(content)
        known = {field.name for field in dataclasses.fields(cls)}
        overrides = {
            name: _color_from_value(name, value)
            for name, value in data.items()
            if name in known
        }
        return dataclasses.replace(base, **overrides)

    @classmethod
    def _from_tuples(cls, **colors: tuple[int, int, int]) -> ThemeColors:
        return cls(**{name: ThemeColor(*rgb) for name, rgb in colors.items()})

    @classmethod
    def dark(cls) -> ThemeColors:
        return cls._from_tuples(
            editor_bg=(26, 26, 46),
            editor_fg=(224, 230, 237),
            editor_cursor_line_bg=(35, 35, 60),
            editor_selection_bg=(56, 70, 110),
            editor_line_number_fg=(110, 120, 150),
            tree_bg=(22, 22, 38),
            tree_fg=(206, 214, 224),
            tree_selected_bg=(60, 76, 122),
            tree_selected_fg=(255, 255, 255),
            tree_dir_fg=(130, 196, 255),
            sidebar_bg=(24, 24, 42),
            sidebar_fg=(192, 199, 214),
            status_bg=(53, 99, 193),
            status_fg=(245, 247, 250),
            border_normal=(48, 58, 84),
            border_focused=(95, 170, 255),
            diag_error=(240, 92, 92),
            diag_warning=(235, 190, 90),
            diag_info=(112, 189, 255),
            git_added=(104, 211, 145),
            git_modified=(235, 190, 90),
            git_deleted=(240, 92, 92),
        )

    @classmethod
    def gruvbox(cls) -> ThemeColors:
        return cls._from_tuples(
            editor_bg=(40, 40, 40),
            editor_fg=(235, 219, 178),
            editor_cursor_line_bg=(60, 56, 54),
            editor_selection_bg=(80, 73, 69),
            editor_line_number_fg=(146, 131, 116),
            tree_bg=(32, 32, 32),
            tree_fg=(235, 219, 178),
            tree_selected_bg=(69, 133, 136),
            tree_selected_fg=(251, 241, 199),
            tree_dir_fg=(131, 165, 152),
            sidebar_bg=(29, 32, 33),
            sidebar_fg=(189, 174, 147),
            status_bg=(215, 153, 33),
            status_fg=(29, 32, 33),
            border_normal=(80, 73, 69),
            border_focused=(215, 153, 33),
            diag_error=(251, 73, 52),
            diag_warning=(250, 189, 47),
            diag_info=(131, 165, 152),
            git_added=(184, 187, 38),
            git_modified=(250, 189, 47),
            git_deleted=(251, 73, 52),
        )

    @classmethod
    def nord(cls) -> ThemeColors:
        return cls._from_tuples(
            editor_bg=(46, 52, 64),
            editor_fg=(216, 222, 233),
            editor_cursor_line_bg=(59, 66, 82),
            editor_selection_bg=(67, 76, 94),
            editor_line_number_fg=(76, 86, 106),
            tree_bg=(36, 41, 51),
            tree_fg=(216, 222, 233),
            tree_selected_bg=(67, 76, 94),
            tree_selected_fg=(236, 239, 244),
            tree_dir_fg=(129, 161, 193),
            sidebar_bg=(39, 44, 54),
            sidebar_fg=(196, 204, 219),
            status_bg=(94, 129, 172),
            status_fg=(236, 239, 244),
            border_normal=(67, 76, 94),
            border_focused=(136, 192, 208),
            diag_error=(191, 97, 106),
            diag_warning=(235, 203, 139),
            diag_info=(136, 192, 208),
            git_added=(163, 190, 140),
            git_modified=(235, 203, 139),
            git_deleted=(191, 97, 106),
        )

    @classmethod
    def dracula(cls) -> ThemeColors:
        return cls._from_tuples(
            editor_bg=(40, 42, 54),
            editor_fg=(248, 248, 242),
            editor_cursor_line_bg=(68, 71, 90),
            editor_selection_bg=(68, 71, 90),
            editor_line_number_fg=(98, 114, 164),
            tree_bg=(33, 34, 44),
            tree_fg=(248, 248, 242),
            tree_selected_bg=(68, 71, 90),
            tree_selected_fg=(255, 255, 255),
            tree_dir_fg=(139, 233, 253),
            sidebar_bg=(33, 34, 44),
            sidebar_fg=(189, 147, 249),
            status_bg=(98, 114, 164),
            status_fg=(248, 248, 242),
            border_normal=(68, 71, 90),
            border_focused=(189, 147, 249),
            diag_error=(255, 85, 85),
            diag_warning=(241, 250, 140),
            diag_info=(139, 233, 253),
            git_added=(80, 250, 123),
            git_modified=(241, 250, 140),
            git_deleted=(255, 85, 85),
        )

    @classmethod
    def light(cls) -> ThemeColors:
        return cls._from_tuples(
            editor_bg=(255, 255, 255),
            editor_fg=(30, 30, 30),
            editor_cursor_line_bg=(235, 235, 235),
            editor_selection_bg=(180, 210, 250),
            editor_line_number_fg=(160, 160, 160),
            tree_bg=(245, 245, 245),
            tree_fg=(50, 50, 50),
            tree_selected_bg=(180, 210, 250),
            tree_selected_fg=(0, 0, 0),
            tree_dir_fg=(0, 100, 200),
            sidebar_bg=(240, 240, 240),
            sidebar_fg=(60, 60, 60),
            status_bg=(0, 120, 212),
            status_fg=(255, 255, 255),
            border_normal=(200, 200, 200),
            border_focused=(0, 120, 212),
            diag_error=(200, 0, 0),
            diag_warning=(180, 130, 0),
            diag_info=(0, 130, 200),
            git_added=(0, 160, 60),
            git_modified=(150, 100, 0),
            git_deleted=(200, 0, 0),
        )
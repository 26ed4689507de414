import tomllib

import pytest

from rust_ide.theme import ThemeColor, ThemeColors, parse_hex_color


def test_parse_rrggbb():
    assert parse_hex_color("#1e1e1e") == ThemeColor(0x1E, 0x1E, 0x1E)


def test_parse_rgb_short():
    assert parse_hex_color("#fff") == ThemeColor(255, 255, 255)


@pytest.mark.parametrize("value", ["1e1e1e", "#gg0000", "#12345", "#", ""])
def test_parse_invalid_returns_none(value):
    assert parse_hex_color(value) is None


def test_parse_with_whitespace():
    assert parse_hex_color("  #ff0000  ") == ThemeColor(255, 0, 0)


def test_dark_theme_loads():
    assert ThemeColors.builtin("dark").editor_bg == ThemeColor(26, 26, 46)


def test_gruvbox_theme_loads():
    theme = ThemeColors.builtin("gruvbox")
    assert theme.editor_bg == ThemeColor(40, 40, 40)
    assert theme.editor_bg != ThemeColor(26, 26, 46)


def test_nord_theme_loads():
    assert ThemeColors.builtin("nord").editor_bg == ThemeColor(46, 52, 64)


def test_dracula_theme_loads():
    assert ThemeColors.builtin("dracula").editor_bg == ThemeColor(40, 42, 54)


def test_light_theme_loads():
    assert ThemeColors.builtin("light").editor_bg == ThemeColor(255, 255, 255)


def test_unknown_theme_falls_back_to_dark():
    assert ThemeColors.builtin("does-not-exist") == ThemeColors.dark()


def test_file_overrides_only_specified_fields(tmp_path):
    path = tmp_path / "custom.toml"
    path.write_text('editor_bg = "#ff0000"\n', encoding="utf-8")
    base = ThemeColors.dark()
    result = ThemeColors.load_from_file(path, base)
    assert result.editor_bg == ThemeColor(255, 0, 0)
    assert result.editor_fg == base.editor_fg


def test_empty_file_keeps_base_theme(tmp_path):
    path = tmp_path / "empty.toml"
    path.write_text("", encoding="utf-8")
    base = ThemeColors.gruvbox()
    assert ThemeColors.load_from_file(path, base) == base


def test_invalid_file_path_returns_error(tmp_path):
    with pytest.raises(OSError):
        ThemeColors.load_from_file(tmp_path / "missing_theme_xyz.toml", ThemeColors.dark())


def test_invalid_color_in_file_raises(tmp_path):
    path = tmp_path / "bad.toml"
    path.write_text('editor_bg = "red"\n', encoding="utf-8")
    with pytest.raises(ValueError):
        ThemeColors.load_from_file(path, ThemeColors.dark())


def test_invalid_toml_raises(tmp_path):
    path = tmp_path / "broken.toml"
    path.write_text("this is not [[[ toml", encoding="utf-8")
    with pytest.raises(tomllib.TOMLDecodeError):
        ThemeColors.load_from_file(path, ThemeColors.dark())


def test_components_return_rgb_values():
    assert ThemeColor(10, 20, 30).components() == (10, 20, 30)
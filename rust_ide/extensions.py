"""Extensions: TOML manifests that add keybindings, tools and file types."""

from __future__ import annotations

import sys
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

__all__ = [
    "ExtKeybinding",
    "ExtTool",
    "ExtensionManifest",
    "ExtensionRegistry",
]

_DEFAULT_VERSION = "0.1.0"


def _required_str(data: dict[str, Any], key: str) -> str:
    if key not in data:
        raise ValueError(f"missing field `{key}`")
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"field `{key}` must be a string")
    return value


def _optional_str(data: dict[str, Any], key: str, default: str) -> str:
    if key not in data:
        return default
    return _required_str(data, key)


def _table(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be a table")
    return value


def _array_of_tables(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    value = data.get(key, [])
    if not isinstance(value, list):
        raise ValueError(f"field `{key}` must be an array")
    return [_table(item, f"entry of `{key}`") for item in value]


@dataclass(frozen=True)
class ExtKeybinding:
    """A custom keybinding defined by an extension."""

    key: str
    command: str
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtKeybinding:
        return cls(
            key=_required_str(data, "key"),
            command=_required_str(data, "command"),
            description=_optional_str(data, "description", ""),
        )


@dataclass(frozen=True)
class ExtTool:
    """A custom tool defined by an extension."""

    name: str
    command: str
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtTool:
        return cls(
            name=_required_str(data, "name"),
            command=_required_str(data, "command"),
            description=_optional_str(data, "description", ""),
        )


@dataclass
class ExtensionManifest:
    """The parsed content of one extension file."""

    name: str
    version: str = _DEFAULT_VERSION
    description: str = ""
    keybindings: list[ExtKeybinding] = field(default_factory=list)
    tools: list[ExtTool] = field(default_factory=list)
    filetypes: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtensionManifest:
        """Build a manifest from parsed TOML; raise ``ValueError`` if malformed."""
        data = _table(data, "manifest")
        filetypes = _table(data.get("filetypes", {}), "field `filetypes`")
        if not all(isinstance(value, str) for value in filetypes.values()):
            raise ValueError("field `filetypes` must map strings to strings")
        return cls(
            name=_required_str(data, "name"),
            version=_optional_str(data, "version", _DEFAULT_VERSION),
            description=_optional_str(data, "description", ""),
            keybindings=[
                ExtKeybinding.from_dict(item)
                for item in _array_of_tables(data, "keybindings")
            ],
            tools=[ExtTool.from_dict(item) for item in _array_of_tables(data, "tools")],
            filetypes=dict(filetypes),
        )

    @classmethod
    def load(cls, path: Path) -> ExtensionManifest:
        data = tomllib.loads(path.read_bytes().decode("utf-8"))
        return cls.from_dict(data)


@dataclass
class ExtensionRegistry:
    """All loaded extensions, in load order."""

    extensions: list[ExtensionManifest] = field(default_factory=list)

    @classmethod
    def load_from_dir(cls, directory: str | Path) -> ExtensionRegistry:
        """Load every ``*.toml`` file in ``directory``, sorted by file name.

        A missing directory gives an empty registry. Files that cannot be read
        or parsed are skipped with a warning on stderr. Raises ``OSError`` only
        if the directory itself cannot be listed.
        """
        directory = Path(directory)
        if not directory.exists():
            return cls()

        paths = sorted(
            (path for path in directory.iterdir() if path.suffix == ".toml"),
            key=lambda path: path.name,
        )
        extensions = []
        for path in paths:
            try:
                extensions.append(ExtensionManifest.load(path))
            except (OSError, ValueError) as exc:
                print(f"rust-ide: skipping extension {path.name}: {exc}", file=sys.stderr)
        return cls(extensions)

    def all_keybindings(self) -> list[ExtKeybinding]:
        """All keybindings from all loaded extensions."""
        return [binding for ext in self.extensions for binding in ext.keybindings]

    def all_tools(self) -> list[ExtTool]:
        """All tools from all loaded extensions."""
        return [tool for ext in self.extensions for tool in ext.tools]

    def filetype_map(self) -> dict[str, str]:
        """Merged file type map; later extensions override earlier ones."""
        merged: dict[str, str] = {}
        for ext in self.extensions:
            merged.update(ext.filetypes)
        return merged
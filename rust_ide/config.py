"""Application configuration: a TOML file merged with environment overrides."""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import platformdirs

__all__ = [
    "AppConfig",
    "DocsSettings",
    "LspSettings",
    "ToolCommands",
    "config_path",
    "parse_bool",
]

_APP_NAME = "rust-ide"
_DEFAULT_DOCS_PORT = 3000
_MAX_PORT = 65535
_PORT_TEXT = re.compile(r"\+?[0-9]+")
_ASCII_LOWER = str.maketrans(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZ", "abcdefghijklmnopqrstuvwxyz"
)

_T = TypeVar("_T")


@dataclass
class ToolCommands:
    """Shell commands used to start the external tools."""

    lazygit: str
    lazydocker: str
    ai: str | None = None
    mcp: str | None = None


@dataclass
class LspSettings:
    """How the language server is started, and whether it is started at all."""

    command: str
    enabled: bool


@dataclass
class DocsSettings:
    """Documentation server settings."""

    port: int = _DEFAULT_DOCS_PORT


def _table(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{key} must be a table")
    return value


def _string(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ValueError(f"{key} must be a string")
    return value


def _boolean(data: dict[str, Any], key: str) -> bool | None:
    value = data.get(key)
    if value is not None and not isinstance(value, bool):
        raise ValueError(f"{key} must be a boolean")
    return value


def _port(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer")
    if not 0 <= value <= _MAX_PORT:
        raise ValueError(f"{key} out of range: {value}")
    return value


@dataclass(frozen=True)
class _DiskConfig:
    lazygit: str | None = None
    lazydocker: str | None = None
    ai: str | None = None
    mcp: str | None = None
    lsp_command: str | None = None
    lsp_enabled: bool | None = None
    theme: str | None = None
    docs_port: int | None = None

    @classmethod
    def parse(cls, data: dict[str, Any]) -> _DiskConfig:
        tools = _table(data, "tools")
        lsp = _table(data, "lsp")
        docs = _table(data, "docs")
        return cls(
            lazygit=_string(tools, "lazygit"),
            lazydocker=_string(tools, "lazydocker"),
            ai=_string(tools, "ai"),
            mcp=_string(tools, "mcp"),
            lsp_command=_string(lsp, "command"),
            lsp_enabled=_boolean(lsp, "enabled"),
            theme=_string(data, "theme"),
            docs_port=_port(docs, "port"),
        )

    @classmethod
    def read(cls, path: Path) -> _DiskConfig:
        """Read the file; anything unreadable or malformed gives an empty config."""
        try:
            data = tomllib.loads(path.read_bytes().decode("utf-8"))
            return cls.parse(data)
        except (OSError, ValueError):
            return cls()


def _first(*values: _T | None) -> _T | None:
    return next((value for value in values if value is not None), None)


def _parse_port(text: str | None) -> int | None:
    if text is None or not _PORT_TEXT.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _MAX_PORT else None


@dataclass
class AppConfig:
    """The complete application configuration."""

    config_path: Path
    tools: ToolCommands
    lsp: LspSettings
    theme: str
    extensions_dir: Path
    themes_dir: Path
    keybindings_path: Path
    docs: DocsSettings

    @classmethod
    def load(cls, workspace_root: str | Path) -> AppConfig:
        """Build the configuration from environment, config file and defaults.

        Environment variables win over the file, the file over the defaults.
        A missing or malformed file is ignored.
        """
        workspace_root = Path(workspace_root)
        path = config_path(workspace_root)
        disk = _DiskConfig.read(path)
        env = os.environ.get

        tools = ToolCommands(
            lazygit=_first(env("RUST_IDE_LAZYGIT_COMMAND"), disk.lazygit, "lazygit"),
            lazydocker=_first(
                env("RUST_IDE_LAZYDOCKER_COMMAND"), disk.lazydocker, "lazydocker"
            ),
            ai=_first(env("RUST_IDE_AI_COMMAND"), disk.ai),
            mcp=_first(env("RUST_IDE_MCP_COMMAND"), disk.mcp),
        )

        enabled_text = env("RUST_IDE_LSP_ENABLED")
        lsp = LspSettings(
            command=_first(
                env("RUST_IDE_LSP_COMMAND"), disk.lsp_command, "rust-analyzer"
            ),
            enabled=_first(
                parse_bool(enabled_text) if enabled_text is not None else None,
                disk.lsp_enabled,
                True,
            ),
        )

        theme = _first(env("RUST_IDE_THEME"), disk.theme, "dark")
        docs = DocsSettings(
            port=_first(
                _parse_port(env("RUST_IDE_DOCS_PORT")),
                disk.docs_port,
                _DEFAULT_DOCS_PORT,
            )
        )

        config_dir = path.parent
        return cls(
            config_path=path,
            tools=tools,
            lsp=lsp,
            theme=theme,
            extensions_dir=config_dir / "extensions",
            themes_dir=config_dir / "themes",
            keybindings_path=config_dir / "keybindings.toml",
            docs=docs,
        )


def config_path(workspace_root: str | Path) -> Path:
    """Return the user's config file, or a file in the workspace as a fallback."""
    try:
        directory = platformdirs.user_config_dir(_APP_NAME, appauthor=False)
    except (OSError, KeyError, RuntimeError):
        directory = ""
    if directory:
        return Path(directory) / "config.toml"
    return Path(workspace_root) / ".rust-ide.toml"


def parse_bool(value: str) -> bool | None:
    """Parse a yes/no style string; return ``None`` when it is neither."""
    normalized = value.strip().translate(_ASCII_LOWER)
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return None
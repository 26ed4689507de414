"""Core of a keyboard-driven IDE: file tree, editor buffer, LSP client, git, themes,
keybindings, extensions and a message controller."""

__version__ = "0.2.0"

__all__ = [
    "app",
    "config",
    "controller",
    "editor",
    "extensions",
    "fs_tree",
    "integrations",
    "keybindings",
    "lsp",
    "theme",
]
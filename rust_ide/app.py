"""The application state tying the tree, editor, tools and language server together."""

from __future__ import annotations

import enum
import tomllib
from pathlib import Path

from rust_ide.config import AppConfig
from rust_ide.editor import EditorModel
from rust_ide.extensions import ExtensionRegistry
from rust_ide.fs_tree import FileTree
from rust_ide.integrations import IntegrationState
from rust_ide.keybindings import KeybindingsConfig
from rust_ide.lsp import LspClient, LspError
from rust_ide.theme import ThemeColors

__all__ = ["App", "Focus"]


class Focus(enum.Enum):
    """The pane that has keyboard focus."""

    TREE = "tree"
    EDITOR = "editor"
    SIDEBAR = "sidebar"


_FORWARD = {Focus.TREE: Focus.EDITOR, Focus.EDITOR: Focus.SIDEBAR, Focus.SIDEBAR: Focus.TREE}
_BACKWARD = {target: source for source, target in _FORWARD.items()}


def _load_theme(config: AppConfig) -> ThemeColors:
    base = ThemeColors.builtin(config.theme)
    custom = config.themes_dir / f"{config.theme}.toml"
    if not custom.exists():
        return base
    try:
        return ThemeColors.load_from_file(custom, base)
    except (OSError, ValueError, tomllib.TOMLDecodeError):
        return base


class App:
    """The whole IDE state for one workspace."""

    def __init__(self, workspace_root: str | Path, config: AppConfig) -> None:
        self.workspace_root = Path(workspace_root)
        self.config = config
        self.tree = FileTree(self.workspace_root)
        self.integrations = IntegrationState.discover(self.workspace_root, config)
        self.lsp = LspClient(self.workspace_root, config.lsp.command)
        self.theme = _load_theme(config)
        try:
            self.extensions = ExtensionRegistry.load_from_dir(config.extensions_dir)
        except OSError:
            self.extensions = ExtensionRegistry()
        try:
            self.keybindings = KeybindingsConfig.load_from_file(config.keybindings_path)
        except OSError:
            self.keybindings = KeybindingsConfig.default()
        self.editor = EditorModel()
        self.focus = Focus.TREE

        if config.lsp.enabled:
            try:
                self.lsp.start()
            except LspError as error:
                self.status_message = f"IDE pronta. LSP indisponível: {error}"
            else:
                self.status_message = "IDE pronta. LSP conectado."
        else:
            self.status_message = "IDE pronta. LSP desabilitado por configuração."

    def on_tick(self) -> None:
        """Periodic work: refresh git status and apply language server events."""
        self.integrations.refresh(self.workspace_root)
        self.lsp.drain()

    def cycle_focus_forward(self) -> None:
        self.focus = _FORWARD[self.focus]

    def cycle_focus_backward(self) -> None:
        self.focus = _BACKWARD[self.focus]

    def tree_move_up(self) -> None:
        self.tree.move_selection(-1)

    def tree_move_down(self) -> None:
        self.tree.move_selection(1)

    def open_tree_selection(self) -> None:
        """Open the selected file, or toggle the selected directory."""
        path = self.tree.activate_selected()
        if path is not None:
            self.open_file(path)

    def open_file(self, path: str | Path) -> None:
        path = Path(path)
        self.editor.open(path)
        self.lsp.sync_document(path, self.editor.contents)
        self.focus = Focus.EDITOR
        self.status_message = f"Arquivo aberto: {path}"

    def save_file(self) -> None:
        contents = self.editor.contents
        path = self.editor.save()
        self.lsp.save_document(path, contents)
        self.tree.refresh()
        self.status_message = f"Arquivo salvo: {path}"

    def save_content(self, text: str) -> None:
        """Save text coming from the UI to the open file."""
        path = self.editor.save_content(text)
        self.lsp.save_document(path, self.editor.contents)
        self.tree.refresh()
        self.status_message = f"Arquivo salvo: {path}"

    def refresh(self) -> None:
        self.tree.refresh()
        self.integrations.refresh_now(self.workspace_root, self.config.tools)
        self.lsp.drain()
        self.status_message = f"Workspace atualizada: {self.workspace_root}"

    def launch_tool(self, name: str) -> str | None:
        """Return the command of the named tool, or set a status and return ``None``."""
        command = next(
            (tool.command for tool in self.integrations.tools if tool.name == name),
            None,
        )
        if command is None:
            self.status_message = (
                f"Ferramenta {name} não configurada. Ajuste {self.config.config_path}"
            )
        return command

    def set_status(self, msg: str) -> None:
        self.status_message = msg

    def restart_lsp(self) -> None:
        if self.lsp.is_running():
            self.status_message = f"LSP ativo: {self.lsp.status}"
            return
        try:
            self.lsp.start()
        except LspError as error:
            self.status_message = f"Falha ao iniciar LSP: {error}"
        else:
            self.status_message = "LSP reconectado."
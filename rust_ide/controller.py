"""Message handling for the IDE window: keys, panes, editor buffer and tools."""

from __future__ import annotations

import enum
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from rust_ide.app import App, Focus
from rust_ide.editor import EditorError
from rust_ide.keybindings import KeybindingsConfig
from rust_ide.lsp import LspError

__all__ = [
    "IdeController",
    "Message",
    "MessageKind",
    "TICK_INTERVAL",
    "format_key",
    "key_to_message",
    "selection_delta",
    "spawn_shell_command",
]

TICK_INTERVAL = 0.25
"""Seconds between two ``TICK`` messages."""

_NAMED_KEYS = {
    "Tab": "Tab",
    "Enter": "Enter",
    "ArrowUp": "Up",
    "ArrowDown": "Down",
    "ArrowLeft": "Left",
    "ArrowRight": "Right",
    "Escape": "Escape",
    "Backspace": "Backspace",
    "Delete": "Delete",
    "Home": "Home",
    "End": "End",
    "PageUp": "PageUp",
    "PageDown": "PageDown",
    **{f"F{number}": f"F{number}" for number in range(1, 13)},
}

_OPEN_ERRORS = (EditorError, LspError, OSError)


class MessageKind(enum.Enum):
    """Everything the window can ask the controller to do."""

    TICK = "tick"
    PANE_CLICKED = "pane_clicked"
    TREE_ENTRY_PRESSED = "tree_entry_pressed"
    EDITOR_ACTION = "editor_action"
    SAVE_REQUESTED = "save_requested"
    REFRESH_REQUESTED = "refresh_requested"
    LAUNCH_TOOL = "launch_tool"
    COMMAND_FINISHED = "command_finished"
    RESTART_LSP = "restart_lsp"
    FOCUS_NEXT = "focus_next"
    FOCUS_PREV = "focus_prev"
    FOCUS_TREE = "focus_tree"
    FOCUS_EDITOR = "focus_editor"
    FOCUS_SIDEBAR = "focus_sidebar"
    TREE_MOVE_UP = "tree_move_up"
    TREE_MOVE_DOWN = "tree_move_down"
    TREE_OPEN = "tree_open"
    TOGGLE_SETTINGS = "toggle_settings"
    OPEN_CONFIG_FILE = "open_config_file"
    LAUNCH_DOCS = "launch_docs"
    QUIT_REQUESTED = "quit_requested"
    IGNORED = "ignored"


@dataclass(frozen=True)
class Message:
    """A message and its payload.

    Payloads: ``PANE_CLICKED`` a :class:`Focus`, ``TREE_ENTRY_PRESSED`` a row
    index, ``EDITOR_ACTION`` the edited text (``None`` for actions that do
    not edit), ``LAUNCH_TOOL`` a tool name, ``COMMAND_FINISHED`` a status
    text and ``OPEN_CONFIG_FILE`` a path.
    """

    kind: MessageKind
    payload: Any = None


def format_key(key: str, ctrl: bool = False, shift: bool = False, alt: bool = False) -> str:
    """Normalise a key press into a string such as ``"Ctrl+s"`` or ``"Shift+Tab"``.

    ``key`` is either a named key (``"Tab"``, ``"ArrowUp"``, ``"F5"``...) or
    the single character produced. Unrecognised keys give an empty string.
    """
    if key in _NAMED_KEYS:
        name = _NAMED_KEYS[key]
    elif len(key) == 1:
        name = key
    else:
        return ""
    modifiers = [label for label, held in (("Ctrl", ctrl), ("Shift", shift), ("Alt", alt)) if held]
    return "+".join([*modifiers, name])


def key_to_message(key_str: str, bindings: KeybindingsConfig) -> Message | None:
    """Return the message bound to ``key_str``, or ``None`` if nothing is bound."""
    if not key_str:
        return None
    table = (
        (bindings.global_.save, Message(MessageKind.SAVE_REQUESTED)),
        (bindings.global_.refresh, Message(MessageKind.REFRESH_REQUESTED)),
        (bindings.global_.quit, Message(MessageKind.QUIT_REQUESTED)),
        (bindings.global_.focus_next, Message(MessageKind.FOCUS_NEXT)),
        (bindings.global_.focus_prev, Message(MessageKind.FOCUS_PREV)),
        (bindings.global_.focus_tree, Message(MessageKind.FOCUS_TREE)),
        (bindings.global_.focus_editor, Message(MessageKind.FOCUS_EDITOR)),
        (bindings.global_.focus_sidebar, Message(MessageKind.FOCUS_SIDEBAR)),
        (bindings.global_.open_settings, Message(MessageKind.TOGGLE_SETTINGS)),
        (bindings.tools.lazygit, Message(MessageKind.LAUNCH_TOOL, "lazygit")),
        (bindings.tools.lazydocker, Message(MessageKind.LAUNCH_TOOL, "lazydocker")),
        (bindings.tools.ai, Message(MessageKind.LAUNCH_TOOL, "ai")),
        (bindings.tools.mcp, Message(MessageKind.LAUNCH_TOOL, "mcp")),
        (bindings.tools.restart_lsp, Message(MessageKind.RESTART_LSP)),
        (bindings.tree.move_up, Message(MessageKind.TREE_MOVE_UP)),
        (bindings.tree.move_down, Message(MessageKind.TREE_MOVE_DOWN)),
        (bindings.tree.open, Message(MessageKind.TREE_OPEN)),
    )
    return next((message for keys, message in table if keys.matches(key_str)), None)


def selection_delta(target: int, current: int) -> int:
    """The signed number of rows from ``current`` to ``target``."""
    return target - current


def spawn_shell_command(command: str) -> str:
    """Start ``command`` in the background through a login shell; return a status."""
    try:
        process = subprocess.Popen(["sh", "-lc", f"({command}) &"])
    except OSError as error:
        return f"Falha ao iniciar comando: {error}"
    threading.Thread(target=process.wait, daemon=True).start()
    return f"Comando iniciado: {command}"


class IdeController:
    """Applies window messages to the application state.

    ``update`` returns a follow-up message when the work it started yields
    one (a finished command), otherwise ``None``.
    """

    def __init__(self, app: App) -> None:
        self.app = app
        self.editor_text = app.editor.contents
        self.settings_open = False
        self.quit_requested = False

    def title(self) -> str:
        path = self.app.editor.current_file
        return f"rust-ide — {path}" if path is not None else "rust-ide"

    def update(self, message: Message) -> Message | None:
        kind = message.kind
        app = self.app

        if kind is MessageKind.TICK:
            try:
                app.on_tick()
            except (OSError, LspError, ValueError) as error:
                app.set_status(f"Erro no tick: {error}")
        elif kind is MessageKind.PANE_CLICKED:
            app.focus = Focus(message.payload)
        elif kind is MessageKind.TREE_ENTRY_PRESSED:
            app.tree.move_selection(selection_delta(message.payload, app.tree.selected_index))
            self._open_selection()
        elif kind is MessageKind.EDITOR_ACTION:
            if message.payload is not None:
                self.editor_text = message.payload
                app.editor.dirty = True
        elif kind is MessageKind.SAVE_REQUESTED:
            try:
                app.save_content(self.editor_text)
            except _OPEN_ERRORS as error:
                app.set_status(f"Erro ao salvar: {error}")
        elif kind is MessageKind.REFRESH_REQUESTED:
            try:
                app.refresh()
            except (OSError, LspError) as error:
                app.set_status(f"Erro ao atualizar: {error}")
        elif kind is MessageKind.LAUNCH_TOOL:
            command = app.launch_tool(message.payload)
            if command is not None:
                app.set_status(f"Executando: {command}")
                return Message(MessageKind.COMMAND_FINISHED, spawn_shell_command(command))
        elif kind is MessageKind.COMMAND_FINISHED:
            app.set_status(message.payload)
        elif kind is MessageKind.RESTART_LSP:
            app.restart_lsp()
        elif kind is MessageKind.FOCUS_NEXT:
            app.cycle_focus_forward()
        elif kind is MessageKind.FOCUS_PREV:
            app.cycle_focus_backward()
        elif kind is MessageKind.FOCUS_TREE:
            app.focus = Focus.TREE
        elif kind is MessageKind.FOCUS_EDITOR:
            app.focus = Focus.EDITOR
        elif kind is MessageKind.FOCUS_SIDEBAR:
            app.focus = Focus.SIDEBAR
        elif kind is MessageKind.TOGGLE_SETTINGS:
            self.settings_open = not self.settings_open
        elif kind is MessageKind.OPEN_CONFIG_FILE:
            try:
                app.open_file(Path(message.payload))
            except _OPEN_ERRORS as error:
                app.set_status(f"Erro ao abrir config: {error}")
            else:
                self._sync_editor_from_app()
        elif kind is MessageKind.LAUNCH_DOCS:
            port = app.config.docs.port
            app.set_status(f"Iniciando docs na porta {port}...")
            return Message(
                MessageKind.COMMAND_FINISHED,
                spawn_shell_command(f"mdbook serve --port {port} docs/"),
            )
        elif kind is MessageKind.TREE_MOVE_UP:
            app.tree_move_up()
        elif kind is MessageKind.TREE_MOVE_DOWN:
            app.tree_move_down()
        elif kind is MessageKind.TREE_OPEN:
            self._open_selection()
        elif kind is MessageKind.QUIT_REQUESTED:
            self.quit_requested = True
        return None

    def _open_selection(self) -> None:
        previous = self.app.editor.current_file
        try:
            self.app.open_tree_selection()
        except _OPEN_ERRORS as error:
            self.app.set_status(f"Erro ao abrir arquivo: {error}")
        if self.app.editor.current_file != previous:
            self._sync_editor_from_app()

    def _sync_editor_from_app(self) -> None:
        self.editor_text = self.app.editor.contents
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from rust_ide.app import App, Focus
from rust_ide.config import AppConfig
from rust_ide.controller import (
    IdeController,
    Message,
    MessageKind,
    format_key,
    key_to_message,
    selection_delta,
    spawn_shell_command,
)
from rust_ide.keybindings import KeybindingsConfig


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "cfg"))
    monkeypatch.setenv("RUST_IDE_LSP_ENABLED", "false")
    monkeypatch.setenv("RUST_IDE_LAZYGIT_COMMAND", "true")
    monkeypatch.setenv("RUST_IDE_DOCS_PORT", "4321")
    root = tmp_path / "ws"
    (root / "src").mkdir(parents=True)
    (root / "src" / "main.rs").write_text("fn main() {}\n")
    (root / "notes.txt").write_text("hello\n")
    return root


@pytest.fixture
def controller(workspace):
    config = AppConfig.load(workspace)
    config.lsp.enabled = False
    return IdeController(App(workspace, config))


def _index_of(controller, label):
    return next(
        i for i, e in enumerate(controller.app.tree.visible_entries()) if e.label == label
    )


def test_format_key_modifiers_order():
    assert format_key("Tab", shift=True) == "Shift+Tab"
    assert format_key("s", ctrl=True) == "Ctrl+s"
    assert format_key("x", ctrl=True, shift=True, alt=True) == "Ctrl+Shift+Alt+x"


def test_format_key_named_and_unknown():
    assert format_key("ArrowUp") == "Up"
    assert format_key("F5") == "F5"
    assert format_key("Shift") == ""
    assert format_key("") == ""


def test_key_to_message_defaults():
    kb = KeybindingsConfig.default()
    assert key_to_message("Ctrl+S", kb) == Message(MessageKind.SAVE_REQUESTED)
    assert key_to_message(format_key("s", ctrl=True), kb) == Message(MessageKind.SAVE_REQUESTED)
    assert key_to_message("g", kb) == Message(MessageKind.LAUNCH_TOOL, "lazygit")
    assert key_to_message("k", kb) == Message(MessageKind.TREE_MOVE_UP)
    assert key_to_message("Shift+Tab", kb) == Message(MessageKind.FOCUS_PREV)
    assert key_to_message("Ctrl+,", kb) == Message(MessageKind.TOGGLE_SETTINGS)


def test_key_to_message_unbound():
    kb = KeybindingsConfig.default()
    assert key_to_message("", kb) is None
    assert key_to_message("z", kb) is None
    assert key_to_message("Left", kb) is None


def test_selection_delta_is_signed_distance():
    assert selection_delta(5, 2) == 3
    assert selection_delta(2, 5) == -3
    assert selection_delta(4, 4) == 0


def test_spawn_shell_command_success():
    assert spawn_shell_command("true") == "Comando iniciado: true"


def test_spawn_shell_command_failure():
    with patch("rust_ide.controller.subprocess.Popen", side_effect=OSError("boom")):
        assert spawn_shell_command("true") == "Falha ao iniciar comando: boom"


def test_title_without_file(controller):
    assert controller.title() == "rust-ide"


def test_tree_entry_opens_file_and_syncs_editor(controller, workspace):
    controller.update(Message(MessageKind.TREE_ENTRY_PRESSED, _index_of(controller, "notes.txt")))
    assert controller.editor_text == "hello\n"
    assert controller.app.focus is Focus.EDITOR
    assert controller.title() == f"rust-ide — {workspace / 'notes.txt'}"


def test_tree_entry_on_directory_toggles(controller):
    index = _index_of(controller, "src")
    before = controller.app.tree.visible_entries()[index].expanded
    controller.update(Message(MessageKind.TREE_ENTRY_PRESSED, index))
    assert controller.app.tree.visible_entries()[index].expanded is not before
    assert controller.editor_text == ""


def test_edit_and_save_writes_file(controller, workspace):
    controller.update(Message(MessageKind.TREE_ENTRY_PRESSED, _index_of(controller, "notes.txt")))
    controller.update(Message(MessageKind.EDITOR_ACTION, "changed\n"))
    assert controller.app.editor.dirty is True
    controller.update(Message(MessageKind.SAVE_REQUESTED))
    assert (workspace / "notes.txt").read_text() == "changed\n"
    assert controller.app.editor.dirty is False


def test_non_edit_action_keeps_clean(controller):
    controller.update(Message(MessageKind.EDITOR_ACTION, None))
    assert controller.app.editor.dirty is False


def test_save_without_file_sets_error(controller):
    controller.update(Message(MessageKind.SAVE_REQUESTED))
    assert controller.app.status_message.startswith("Erro ao salvar:")


def test_focus_messages(controller):
    controller.update(Message(MessageKind.FOCUS_NEXT))
    assert controller.app.focus is Focus.EDITOR
    controller.update(Message(MessageKind.FOCUS_SIDEBAR))
    assert controller.app.focus is Focus.SIDEBAR
    controller.update(Message(MessageKind.FOCUS_PREV))
    assert controller.app.focus is Focus.EDITOR
    controller.update(Message(MessageKind.PANE_CLICKED, Focus.TREE))
    assert controller.app.focus is Focus.TREE


def test_toggle_settings_and_quit(controller):
    controller.update(Message(MessageKind.TOGGLE_SETTINGS))
    assert controller.settings_open is True
    controller.update(Message(MessageKind.TOGGLE_SETTINGS))
    assert controller.settings_open is False
    controller.update(Message(MessageKind.QUIT_REQUESTED))
    assert controller.quit_requested is True


def test_launch_unknown_tool(controller):
    result = controller.update(Message(MessageKind.LAUNCH_TOOL, "missing-tool"))
    assert result is None
    assert "Ferramenta missing-tool não configurada" in controller.app.status_message


def test_launch_tool_returns_finished_message(controller):
    result = controller.update(Message(MessageKind.LAUNCH_TOOL, "lazygit"))
    assert controller.app.status_message == "Executando: true"
    assert result == Message(MessageKind.COMMAND_FINISHED, "Comando iniciado: true")
    controller.update(result)
    assert controller.app.status_message == "Comando iniciado: true"


def test_launch_docs_uses_configured_port(controller):
    fake = MagicMock()
    with patch("rust_ide.controller.subprocess.Popen", return_value=fake) as popen:
        result = controller.update(Message(MessageKind.LAUNCH_DOCS))
    args = popen.call_args.args[0]
    assert "mdbook serve --port 4321 docs/" in args[-1]
    assert result.kind is MessageKind.COMMAND_FINISHED
    assert controller.app.status_message == "Iniciando docs na porta 4321..."


def test_open_missing_config_file(controller, tmp_path):
    controller.update(Message(MessageKind.OPEN_CONFIG_FILE, tmp_path / "nope.toml"))
    assert controller.app.status_message.startswith("Erro ao abrir config:")


def test_open_config_file_syncs_editor(controller, workspace):
    target = workspace / "src" / "main.rs"
    controller.update(Message(MessageKind.OPEN_CONFIG_FILE, target))
    assert controller.editor_text == "fn main() {}\n"
    assert controller.app.editor.current_file == Path(target)


def test_tree_move_and_open(controller):
    controller.update(Message(MessageKind.TREE_MOVE_UP))
    assert controller.app.tree.selected_index == 0
    target = _index_of(controller, "notes.txt")
    for _ in range(target):
        controller.update(Message(MessageKind.TREE_MOVE_DOWN))
    controller.update(Message(MessageKind.TREE_OPEN))
    assert controller.editor_text == "hello\n"


def test_command_finished_and_ignored(controller):
    controller.update(Message(MessageKind.COMMAND_FINISHED, "done"))
    assert controller.app.status_message == "done"
    assert controller.update(Message(MessageKind.IGNORED)) is None
    assert controller.app.status_message == "done"


def test_refresh_sets_status(controller, workspace):
    controller.update(Message(MessageKind.REFRESH_REQUESTED))
    assert controller.app.status_message == f"Workspace atualizada: {workspace}"
import subprocess
from pathlib import Path

import pytest

from rust_ide.config import AppConfig, ToolCommands
from rust_ide.integrations import (
    GitError,
    IntegrationState,
    binary_for_command,
    binary_on_path,
    detect_tools,
    git_status,
)


def test_binary_for_simple_command():
    assert binary_for_command("lazygit") == "lazygit"


def test_binary_for_command_with_args():
    assert binary_for_command("npx @modelcontextprotocol/inspector") == "npx"


def test_binary_for_empty_command_is_none():
    assert binary_for_command("") is None


def test_binary_for_command_with_path():
    assert (
        binary_for_command("/usr/local/bin/lazygit --no-ui") == "/usr/local/bin/lazygit"
    )


def test_binary_on_path_with_explicit_path(tmp_path):
    tool = tmp_path / "mytool"
    tool.write_text("#!/bin/sh\n")
    assert binary_on_path(str(tool)) is True
    assert binary_on_path(str(tmp_path / "absent")) is False


def test_binary_on_path_searches_path_directories(tmp_path, monkeypatch):
    (tmp_path / "fancytool").write_text("")
    monkeypatch.setenv("PATH", str(tmp_path))
    assert binary_on_path("fancytool") is True
    assert binary_on_path("othertool") is False


def test_detect_tools_uses_path(tmp_path, monkeypatch):
    (tmp_path / "git").write_text("")
    (tmp_path / "lazygit").write_text("")
    monkeypatch.setenv("PATH", str(tmp_path))
    tools = ToolCommands(lazygit="lazygit --flag", lazydocker="lazydocker")
    detected = {tool.name: tool for tool in detect_tools(tools)}
    assert detected["git"].available is True
    assert detected["git"].command == "git"
    assert detected["lazygit"].available is True
    assert detected["lazygit"].command == "lazygit --flag"
    assert detected["lazydocker"].available is False
    assert detected["ai"].command is None
    assert detected["ai"].available is False
    assert detected["mcp"].available is False


def test_detect_tools_order():
    tools = ToolCommands(lazygit="lazygit", lazydocker="lazydocker")
    names = [tool.name for tool in detect_tools(tools)]
    assert names == ["git", "lazygit", "lazydocker", "ai", "mcp"]


def test_integration_state_has_all_required_tool_entries(tmp_path):
    config = AppConfig.load(tmp_path)
    state = IntegrationState.discover(tmp_path, config)
    names = [tool.name for tool in state.tools]
    for required in ["git", "lazygit", "lazydocker", "ai", "mcp"]:
        assert required in names
    assert state.config_path == config.config_path


def test_refresh_now_replaces_tools(tmp_path, monkeypatch):
    monkeypatch.setenv("PATH", str(tmp_path))
    state = IntegrationState(tools=[], git=None, config_path=tmp_path / "c.toml")
    state.refresh_now(tmp_path, ToolCommands(lazygit="lg", lazydocker="ld", ai="ai-cli"))
    commands = {tool.name: tool.command for tool in state.tools}
    assert commands["lazygit"] == "lg"
    assert commands["ai"] == "ai-cli"


def test_git_status_outside_repository_raises(tmp_path, monkeypatch):
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    with pytest.raises(GitError):
        git_status(tmp_path)


def test_git_status_counts_untracked_and_staged(tmp_path, monkeypatch):
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    subprocess.run(["git", "init", "-q", str(tmp_path)], check=True)
    (tmp_path / "a.txt").write_text("a")
    (tmp_path / "b.txt").write_text("b")
    subprocess.run(["git", "-C", str(tmp_path), "add", "b.txt"], check=True)

    snapshot = git_status(tmp_path)
    assert snapshot.untracked == 1
    assert snapshot.staged == 1
    assert snapshot.unstaged == 0
    assert (snapshot.ahead, snapshot.behind) == (0, 0)
    assert snapshot.repository_root.resolve() == Path(tmp_path).resolve()
"""External tool detection and a git status snapshot of the workspace."""

from __future__ import annotations

import os
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path

from rust_ide.config import AppConfig, ToolCommands

__all__ = [
    "GitError",
    "GitStatusSnapshot",
    "IntegrationState",
    "ToolStatus",
    "binary_for_command",
    "binary_on_path",
    "detect_tools",
    "git_status",
]

_GIT_REFRESH_INTERVAL = 2.0
_STAGED_CODES = frozenset("AMDRT")
_UNSTAGED_CODES = frozenset("MDRT")


class GitError(Exception):
    """Raised when the git status of a directory cannot be determined."""


@dataclass(frozen=True)
class ToolStatus:
    """An external tool, the command that starts it and whether it was found."""

    name: str
    command: str | None
    available: bool


@dataclass(frozen=True)
class GitStatusSnapshot:
    """Counts of changed files and the branch of a repository."""

    repository_root: Path
    branch: str
    staged: int
    unstaged: int
    untracked: int
    ahead: int
    behind: int


@dataclass
class IntegrationState:
    """Detected tools and the latest git snapshot of the workspace."""

    tools: list[ToolStatus]
    git: GitStatusSnapshot | None
    config_path: Path
    _last_git_refresh: float = field(default_factory=time.monotonic, repr=False)

    @classmethod
    def discover(cls, workspace_root: str | Path, config: AppConfig) -> IntegrationState:
        """Detect the configured tools and read the git status once."""
        return cls(
            tools=detect_tools(config.tools),
            git=_try_git_status(Path(workspace_root)),
            config_path=config.config_path,
        )

    def refresh(self, workspace_root: str | Path) -> None:
        """Re-read the git status if the last read is at least two seconds old."""
        if time.monotonic() - self._last_git_refresh >= _GIT_REFRESH_INTERVAL:
            self.git = _try_git_status(Path(workspace_root))
            self._last_git_refresh = time.monotonic()

    def refresh_now(self, workspace_root: str | Path, tools: ToolCommands) -> None:
        """Re-detect the tools and re-read the git status immediately."""
        self.tools = detect_tools(tools)
        self.git = _try_git_status(Path(workspace_root))
        self._last_git_refresh = time.monotonic()


def _command_available(command: str | None) -> bool:
    if command is None:
        return False
    binary = binary_for_command(command)
    return binary is not None and binary_on_path(binary)


def detect_tools(commands: ToolCommands) -> list[ToolStatus]:
    """Return the status of git, lazygit, lazydocker, the AI and the MCP tools."""
    return [
        ToolStatus("git", "git", binary_on_path("git")),
        ToolStatus("lazygit", commands.lazygit, _command_available(commands.lazygit)),
        ToolStatus(
            "lazydocker", commands.lazydocker, _command_available(commands.lazydocker)
        ),
        ToolStatus("ai", commands.ai, _command_available(commands.ai)),
        ToolStatus("mcp", commands.mcp, _command_available(commands.mcp)),
    ]


def _git(root: Path, *args: str) -> str:
    try:
        result = subprocess.run(
            ["git", "-C", str(root), *args],
            capture_output=True,
            check=False,
        )
    except OSError as exc:
        raise GitError(f"git indisponível: {exc}") from exc
    if result.returncode != 0:
        message = result.stderr.decode("utf-8", "replace").strip()
        raise GitError(message or f"git {' '.join(args)} falhou")
    return result.stdout.decode("utf-8", "replace")


def _repository_root(root: Path) -> Path:
    try:
        return Path(_git(root, "rev-parse", "--show-toplevel").strip())
    except GitError:
        git_dir = _git(root, "rev-parse", "--absolute-git-dir").strip()
        return Path(git_dir)


def _branch(root: Path) -> str:
    try:
        name = _git(root, "rev-parse", "--abbrev-ref", "HEAD").strip()
    except GitError:
        return "detached"
    return name or "detached"


def _count_changes(porcelain: str) -> tuple[int, int, int]:
    staged = unstaged = untracked = 0
    fields = iter(porcelain.split("\0"))
    for entry in fields:
        if len(entry) < 3:
            continue
        index_code, worktree_code = entry[0], entry[1]
        if index_code in "RC":
            next(fields, None)
        if index_code == "?" and worktree_code == "?":
            untracked += 1
            continue
        if index_code in _STAGED_CODES:
            staged += 1
        if worktree_code in _UNSTAGED_CODES:
            unstaged += 1
    return staged, unstaged, untracked


def _upstream_delta(root: Path, branch: str) -> tuple[int, int]:
    try:
        output = _git(
            root,
            "rev-list",
            "--left-right",
            "--count",
            f"refs/heads/{branch}...{branch}@{{upstream}}",
        )
        ahead, behind = output.split()
        return int(ahead), int(behind)
    except (GitError, ValueError):
        return 0, 0


def git_status(workspace_root: str | Path) -> GitStatusSnapshot:
    """Read the git status of the repository that holds ``workspace_root``.

    Raises ``GitError`` if the directory is not inside a repository or git
    cannot be run.
    """
    root = Path(workspace_root)
    repository_root = _repository_root(root)
    branch = _branch(root)
    porcelain = _git(root, "status", "--porcelain=v1", "-z", "--untracked-files=all")
    staged, unstaged, untracked = _count_changes(porcelain)
    ahead, behind = _upstream_delta(root, branch)
    return GitStatusSnapshot(
        repository_root=repository_root,
        branch=branch,
        staged=staged,
        unstaged=unstaged,
        untracked=untracked,
        ahead=ahead,
        behind=behind,
    )


def _try_git_status(root: Path) -> GitStatusSnapshot | None:
    try:
        return git_status(root)
    except GitError:
        return None


def binary_on_path(binary: str) -> bool:
    """Return whether ``binary`` exists, as a path or in a ``PATH`` directory."""
    if "/" in binary:
        return os.path.lexists(binary) and os.path.exists(binary)
    search = os.environ.get("PATH")
    if search is None:
        return False
    return any((Path(directory) / binary).exists() for directory in search.split(os.pathsep))


def binary_for_command(command: str) -> str | None:
    """Return the first word of a shell command, or ``None`` if it is blank."""
    words = command.split()
    return words[0] if words else None
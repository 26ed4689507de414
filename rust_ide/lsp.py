"""A minimal language server client speaking JSON-RPC over a child's stdio."""

from __future__ import annotations

import json
import os
import queue
import re
import subprocess
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Any

__all__ = [
    "DiagnosticItem",
    "LspClient",
    "LspError",
    "file_uri",
    "parse_diagnostics",
    "read_message",
]

_CONTENT_LENGTH = "Content-Length: "
_LENGTH_TEXT = re.compile(r"\+?[0-9]+")
_U64_MAX = 2**64 - 1
_SEVERITIES = {1: "erro", 2: "alerta", 3: "info", 4: "hint"}


class LspError(Exception):
    """Raised when the language server cannot be started or talked to."""


@dataclass(frozen=True)
class DiagnosticItem:
    """One diagnostic published by the server; ``line`` is 1-based."""

    line: int
    severity: str
    message: str


@dataclass(frozen=True)
class _DiagnosticsEvent:
    path: Path
    diagnostics: list[DiagnosticItem]


@dataclass(frozen=True)
class _ExitedEvent:
    message: str


def file_uri(path: str | Path) -> str:
    return f"file://{path}"


def read_message(stream: IO[bytes]) -> str | None:
    """Read one framed message; return ``None`` at end of stream."""
    content_length: int | None = None
    while True:
        raw = stream.readline()
        if not raw:
            return None
        try:
            line = raw.decode("utf-8").strip()
        except UnicodeDecodeError as exc:
            raise LspError(f"cabeçalho inválido: {exc}") from exc
        if not line:
            break
        if line.startswith(_CONTENT_LENGTH):
            value = line[len(_CONTENT_LENGTH) :]
            if not _LENGTH_TEXT.fullmatch(value):
                raise LspError(f"Content-Length inválido: {value}")
            content_length = int(value)

    if content_length is None:
        raise LspError("Content-Length ausente")

    chunks: list[bytes] = []
    remaining = content_length
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            raise LspError("mensagem incompleta")
        chunks.append(chunk)
        remaining -= len(chunk)
    try:
        return b"".join(chunks).decode("utf-8")
    except UnicodeDecodeError as exc:
        raise LspError(f"mensagem inválida: {exc}") from exc


def _as_u64(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and 0 <= value <= _U64_MAX:
        return value
    return None


def _get(value: Any, key: str) -> Any:
    return value.get(key) if isinstance(value, dict) else None


def _diagnostic(item: Any) -> DiagnosticItem:
    start = _get(_get(item, "range"), "start")
    line = _as_u64(_get(start, "line")) or 0
    severity = _SEVERITIES.get(_as_u64(_get(item, "severity")), "desconhecido")
    message = _get(item, "message")
    return DiagnosticItem(
        line=line + 1,
        severity=severity,
        message=message if isinstance(message, str) else "sem mensagem",
    )


def parse_diagnostics(message: str) -> tuple[Path, list[DiagnosticItem]] | None:
    """Extract the file and diagnostics of a ``publishDiagnostics`` notification."""
    try:
        value = json.loads(message)
    except ValueError:
        return None
    if _get(value, "method") != "textDocument/publishDiagnostics":
        return None
    params = _get(value, "params")
    uri = _get(params, "uri")
    if not isinstance(uri, str) or not uri.startswith("file://"):
        return None
    diagnostics = _get(params, "diagnostics")
    if not isinstance(diagnostics, list):
        return None
    path = uri.removeprefix("file://").replace("%20", " ")
    return Path(path), [_diagnostic(item) for item in diagnostics]


def _pump(stream: IO[bytes], events: queue.Queue[Any]) -> None:
    try:
        while True:
            message = read_message(stream)
            if message is None:
                events.put(_ExitedEvent("LSP encerrado"))
                return
            parsed = parse_diagnostics(message)
            if parsed is not None:
                events.put(_DiagnosticsEvent(*parsed))
    except (LspError, OSError, ValueError) as exc:
        events.put(_ExitedEvent(f"falha no LSP: {exc}"))


class LspClient:
    """Starts a language server as a shell command and tracks its diagnostics."""

    def __init__(self, workspace_root: str | Path, command: str) -> None:
        self.command = command
        self.workspace_root = Path(workspace_root)
        self.status = "desconectado"
        self._child: subprocess.Popen[bytes] | None = None
        self._stdin: IO[bytes] | None = None
        self._events: queue.Queue[Any] | None = None
        self._open_documents: dict[Path, int] = {}
        self._diagnostics: dict[Path, list[DiagnosticItem]] = {}
        self._next_id = 1

    def start(self) -> None:
        """Spawn the server and send the initialize handshake."""
        if self.is_running():
            return
        try:
            child = subprocess.Popen(
                ["sh", "-lc", self.command],
                cwd=self.workspace_root,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
            )
        except OSError as exc:
            raise LspError(f"não foi possível iniciar {self.command}") from exc
        if child.stdin is None or child.stdout is None:
            raise LspError("stdio indisponível no LSP")

        events: queue.Queue[Any] = queue.Queue()
        threading.Thread(target=_pump, args=(child.stdout, events), daemon=True).start()

        self._child = child
        self._stdin = child.stdin
        self._events = events

        root_uri = file_uri(self.workspace_root)
        self._send_request(
            "initialize",
            {
                "processId": os.getpid(),
                "rootUri": root_uri,
                "capabilities": {"textDocument": {"publishDiagnostics": {}}},
                "workspaceFolders": [
                    {"uri": root_uri, "name": self.workspace_root.name or "workspace"}
                ],
            },
        )
        self._send_notification("initialized", {})
        self.status = "conectado"

    def is_running(self) -> bool:
        return self._child is not None

    def _accepts(self, path: Path) -> bool:
        return self.is_running() and path.suffix == ".rs"

    def sync_document(self, path: str | Path, contents: str) -> None:
        """Send ``didOpen`` the first time a Rust file is seen, ``didChange`` after."""
        path = Path(path)
        if not self._accepts(path):
            return
        version = self._open_documents.get(path, 0) + 1
        self._open_documents[path] = version
        uri = file_uri(path)
        if version == 1:
            self._send_notification(
                "textDocument/didOpen",
                {
                    "textDocument": {
                        "uri": uri,
                        "languageId": "rust",
                        "version": version,
                        "text": contents,
                    }
                },
            )
        else:
            self._send_notification(
                "textDocument/didChange",
                {
                    "textDocument": {"uri": uri, "version": version},
                    "contentChanges": [{"text": contents}],
                },
            )

    def save_document(self, path: str | Path, contents: str) -> None:
        """Synchronise a Rust file and send ``didSave``."""
        path = Path(path)
        if not self._accepts(path):
            return
        self.sync_document(path, contents)
        self._send_notification(
            "textDocument/didSave",
            {"textDocument": {"uri": file_uri(path)}, "text": contents},
        )

    def diagnostics_for(self, path: str | Path | None) -> list[DiagnosticItem]:
        if path is None:
            return []
        return list(self._diagnostics.get(Path(path), []))

    def drain(self) -> None:
        """Apply every pending event from the server without blocking."""
        if self._events is None:
            return
        disconnected = False
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                break
            if isinstance(event, _ExitedEvent):
                self.status = event.message
                disconnected = True
            else:
                self._diagnostics[event.path] = list(event.diagnostics)
        if disconnected:
            self._disconnect()

    def _disconnect(self) -> None:
        if self._stdin is not None:
            try:
                self._stdin.close()
            except OSError:
                pass
        if self._child is not None:
            self._child.poll()
        self._child = None
        self._stdin = None
        self._events = None
        self._open_documents.clear()

    def _send_request(self, method: str, params: dict[str, Any]) -> None:
        payload = {"jsonrpc": "2.0", "id": self._next_id, "method": method, "params": params}
        self._next_id += 1
        self._write_message(payload)

    def _send_notification(self, method: str, params: dict[str, Any]) -> None:
        self._write_message({"jsonrpc": "2.0", "method": method, "params": params})

    def _write_message(self, payload: dict[str, Any]) -> None:
        if self._stdin is None:
            raise LspError("LSP não iniciado")
        body = json.dumps(
            payload, ensure_ascii=False, separators=(",", ":"), sort_keys=True
        ).encode("utf-8")
        header = f"Content-Length: {len(body)}\r\n\r\n".encode("ascii")
        try:
            self._stdin.write(header + body)
            self._stdin.flush()
        except OSError as exc:
            raise LspError(f"falha ao escrever no LSP: {exc}") from exc
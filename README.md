# rust_ide

The core of a small, keyboard-driven IDE: a workspace file tree, an editor
buffer that reads and writes files, a Language Server Protocol client that
collects diagnostics, git status and external-tool detection, colour themes,
configurable keybindings and TOML extensions. A front end drives it through
`rust_ide.controller.IdeController`, which turns messages (key presses,
clicks, ticks) into state changes.

Messages shown to the user (status texts, errors) are in Portuguese.

## What this package does not do

It has no window, no drawing and no command to start it. There is no text
widget, syntax highlighting or line-number gutter: the editor is a buffer
(`EditorModel`) and the controller keeps the edited text as a plain string.
A front end of your own has to show the state and feed `IdeController.update`
with messages, including a `TICK` message every `TICK_INTERVAL` seconds.

## Quick start

```python
from pathlib import Path

from rust_ide.app import App
from rust_ide.config import AppConfig

root = Path.cwd()
config = AppConfig.load(root)
config.lsp.enabled = False          # do not start a language server

app = App(root, config)
print(app.status_message)           # "IDE pronta. LSP desabilitado por configuração."

app.tree_move_down()
app.open_tree_selection()           # opens a file, or toggles a directory
app.cycle_focus_forward()
app.save_content("new text\n")      # needs a file to be open
```

`App` holds `tree` (`FileTree`), `editor` (`EditorModel`), `integrations`
(`IntegrationState`), `lsp` (`LspClient`), `theme`, `extensions`,
`keybindings`, `focus` (`Focus.TREE`, `Focus.EDITOR`, `Focus.SIDEBAR`) and
`status_message`.

## Configuration

`AppConfig.load(workspace_root)` reads `config.toml` from the user's
configuration directory (found with platformdirs; `.rust-ide.toml` in the
workspace if there is none). A missing or malformed file is ignored.
Environment variables win over the file:

| Setting           | TOML                 | Environment variable          | Default         |
|-------------------|----------------------|-------------------------------|-----------------|
| lazygit command   | `[tools] lazygit`    | `RUST_IDE_LAZYGIT_COMMAND`    | `lazygit`       |
| lazydocker        | `[tools] lazydocker` | `RUST_IDE_LAZYDOCKER_COMMAND` | `lazydocker`    |
| AI client         | `[tools] ai`         | `RUST_IDE_AI_COMMAND`         | none            |
| MCP client        | `[tools] mcp`        | `RUST_IDE_MCP_COMMAND`        | none            |
| LSP command       | `[lsp] command`      | `RUST_IDE_LSP_COMMAND`        | `rust-analyzer` |
| LSP enabled       | `[lsp] enabled`      | `RUST_IDE_LSP_ENABLED`        | `true`          |
| Theme             | `theme`              | `RUST_IDE_THEME`              | `dark`          |
| Docs server port  | `[docs] port`        | `RUST_IDE_DOCS_PORT`          | `3000`          |

`RUST_IDE_LSP_ENABLED` accepts `1/true/yes/on` and `0/false/no/off` in any
case (see `parse_bool`); other values are ignored. A port outside 0–65535 is
ignored too.

Next to `config.toml` live `themes/`, `extensions/` and `keybindings.toml`
(`AppConfig.themes_dir`, `extensions_dir`, `keybindings_path`).

## Themes

Built-in themes: `dark` (the fallback for unknown names), `gruvbox`, `nord`,
`dracula`, `light`. If `themes/<theme>.toml` exists it overrides any colour
of the selected theme:

```toml
editor_bg = "#1e1e1e"
tree_dir_fg = "#8cf"
```

```python
from rust_ide.theme import ThemeColors, parse_hex_color

base = ThemeColors.builtin("nord")
theme = ThemeColors.load_from_file(Path("themes/nord.toml"), base)
parse_hex_color("#fff").components()    # (255, 255, 255)
```

`load_from_file` raises `OSError` for an unreadable file,
`tomllib.TOMLDecodeError` for bad TOML and `ValueError` for a bad colour;
`App` then falls back to the built-in theme.

## Keybindings

`keybindings.toml` only needs the bindings you want to change; a value is a
single key or a list of alternatives, matched ignoring ASCII case. A file
that is missing or malformed gives the defaults.

```toml
[global]
quit = "Ctrl+W"

[tools]
lazygit = "Ctrl+G"

[tree]
move_up = ["Up", "k", "w"]
```

```python
from rust_ide.controller import format_key, key_to_message
from rust_ide.keybindings import KeybindingsConfig

bindings = KeybindingsConfig.load_from_file(Path("keybindings.toml"))
bindings.global_.save.matches("ctrl+s")          # True with the defaults
key_to_message(format_key("s", ctrl=True), bindings)
```

Defaults: `Ctrl+S` save, `Ctrl+R` refresh, `Ctrl+Q` quit, `Tab`/`Shift+Tab`
cycle focus, `Ctrl+1/2/3` jump to tree/editor/sidebar, `Ctrl+,` settings,
`g`/`d`/`a`/`m` launch lazygit/lazydocker/AI/MCP, `l` restart the LSP,
`Up`/`k`, `Down`/`j`, `Enter`/`Right`/`o` in the tree. `tree.go_parent`
(`Left`/`h`) can be configured but `key_to_message` does not map it to a
message.

`format_key` understands single characters, `Tab`, `Enter`, the `Arrow*`
keys (as `Up`, `Down`, `Left`, `Right`), `Escape`, `Backspace`, `Delete`,
`Home`, `End`, `PageUp`, `PageDown` and `F1`–`F12`; anything else gives `""`.

## Extensions

Each `extensions/*.toml` file is loaded in file-name order; files that fail
to read or parse are skipped with a warning on stderr.

```toml
name = "my-ext"
version = "1.0.0"

[[keybindings]]
key = "F5"
command = "cargo run"

[[tools]]
name = "fmt"
command = "cargo fmt"

[filetypes]
ts = "typescript"
```

```python
from rust_ide.extensions import ExtensionRegistry

registry = ExtensionRegistry.load_from_dir(config.extensions_dir)
registry.all_keybindings()
registry.all_tools()
registry.filetype_map()    # later extensions override earlier ones
```

The registry is loaded into `App.extensions`; the controller does not bind
extension keys or tools.

## Tools and git

`detect_tools` reports git, lazygit, lazydocker, AI and MCP, each with its
command and whether the first word of that command is found on `PATH`.
`git_status` runs the `git` command to get the branch, the counts of staged,
unstaged and untracked files and how far the branch is ahead of or behind
its upstream; it raises `GitError` outside a repository. `App.on_tick`
re-reads it at most every two seconds.

Launching a tool (`LAUNCH_TOOL`) or the docs server (`LAUNCH_DOCS`, running
`mdbook serve --port <port> docs/`) starts the command in the background
with `sh -lc`.

## Language server

`LspClient` starts its command with `sh -lc` in the workspace, sends the
`initialize` handshake and then `didOpen`, `didChange` and `didSave` for
`.rs` files only. Diagnostics from `textDocument/publishDiagnostics` are
read on a background thread and applied by `drain()`; read them with
`diagnostics_for(path)`.

## Driving the IDE

```python
from rust_ide.app import Focus
from rust_ide.controller import IdeController, Message, MessageKind

controller = IdeController(app)
controller.update(Message(MessageKind.FOCUS_NEXT))
controller.update(Message(MessageKind.PANE_CLICKED, Focus.SIDEBAR))
controller.update(Message(MessageKind.EDITOR_ACTION, "edited text\n"))
controller.update(Message(MessageKind.SAVE_REQUESTED))
print(controller.title())
```

`update` returns a `COMMAND_FINISHED` message after starting a tool or the
docs server, otherwise `None`. `QUIT_REQUESTED` sets
`controller.quit_requested`; `TOGGLE_SETTINGS` flips
`controller.settings_open`.

## Tests

The test suite uses pytest; install the `test` extra to get it and run
`pytest`.
"""Interactive REPL for ZPy, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
from typing import List, Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .eval.common import stringify, write_bytes
from .lexer_rd import tokenize
from .parser_rd import ParseError
from .repl_highlight import ZpyLexer
from .runner import VERSION, repl_eval, report_parse_error, report_runtime_error
from .runtime import Environment, ZpyNone, ZpyRuntimeError, init_stdlib
from .token_types import TT
from .utils import debug_py_trace_enabled

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/reset": ("Reset the REPL environment", ""),
}

_TRACE_ENV = "ZPY_DEBUG_PY_TRACE"
_EXIT_WORDS = ("exit", "quit")

_DEPTH_OPEN = {TT.LPAR, TT.LSQB, TT.LBRACE}
_DEPTH_CLOSE = {TT.RPAR, TT.RSQB, TT.RBRACE}
_LAYOUT = {TT.NEWLINE, TT.INDENT, TT.DEDENT, TT.EOF}


def _is_block_header(line: str) -> bool:
    """Return True if *line* ends a block header (colon at depth 0)."""
    depth = 0
    last_sig = None

    for tok in tokenize(line):
        t = tok.type
        if t in _LAYOUT or t == TT.SEMI:
            continue
        if t in _DEPTH_OPEN:
            depth += 1
        elif t in _DEPTH_CLOSE:
            depth = max(depth - 1, 0)
        if depth == 0:
            last_sig = t

    return depth == 0 and last_sig == TT.COLON


def _indent_width(line: str) -> int:
    width = 0
    for ch in line:
        if ch == " ":
            width += 1
        elif ch == "\t":
            width += 4
        else:
            break
    return width


class _SlashCompleter(Completer):
    """Autocomplete slash commands on the primary prompt."""

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor
        if not text.startswith("/"):
            return

        for cmd, (desc, _hint) in _SLASH_CMDS.items():
            if cmd.startswith(text):
                yield Completion(
                    cmd,
                    start_position=-len(text),
                    display_meta=desc,
                )


def _handle_slash(line: str, env_box: List[Environment]) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1].lower() if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/py-traceback":
        if arg in ("on", "1", "true", "yes"):
            os.environ[_TRACE_ENV] = "1"
        elif arg in ("off", "0", "false", "no"):
            os.environ.pop(_TRACE_ENV, None)
        elif arg == "":
            if debug_py_trace_enabled():
                os.environ.pop(_TRACE_ENV, None)
            else:
                os.environ[_TRACE_ENV] = "1"
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if debug_py_trace_enabled() else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        env_box[0] = Environment()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def _compute_indent(text: str) -> str:
    """Compute the auto-indent prefix for the next continuation line."""
    last = text.split("\n")[-1]

    if _is_block_header(last):
        return " " * (_indent_width(last) + 4)

    if last.strip():
        return " " * _indent_width(last)

    return ""


def _should_submit(text: str) -> bool:
    """
    Decide whether Enter submits the buffer or opens a continuation line.

    A single line submits unless it is a block header. Inside a block, an
    empty line submits, and so does a non-indented line that is not itself
    a header.
    """
    lines = text.split("\n")
    last = lines[-1]

    if len(lines) == 1:
        return not _is_block_header(last)

    if not last.strip():
        return True

    return _indent_width(last) == 0 and not _is_block_header(last)


def repl(env: Optional[Environment]=None) -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    init_stdlib()
    # Mutable box so /reset can swap the environment.
    env_box: List[Environment] = [env if env is not None else Environment()]

    bindings = KeyBindings()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        if _should_submit(text):
            lines = text.split("\n")
            if len(lines) > 1 and not lines[-1].strip():
                buf.text = "\n".join(lines[:-1])
                buf.cursor_position = len(buf.text)
            buf.validate_and_handle()
            return

        buf.insert_text("\n" + _compute_indent(text))

    session: PromptSession[str] = PromptSession(
        history=InMemoryHistory(),
        lexer=ZpyLexer(),
        completer=_SlashCompleter(),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print(f"ZPy {VERSION} - Interactive REPL")
    print("Type 'exit' or press Ctrl+C to quit\n")

    while True:
        try:
            text = session.prompt(">>> ")
        except (EOFError, KeyboardInterrupt):
            print()
            break

        text = _normalize(text)
        if not text.strip():
            continue

        if text.strip() in _EXIT_WORDS:
            break

        if _handle_slash(text, env_box):
            continue

        try:
            result, is_stmt = repl_eval(text + "\n", env_box[0])
        except ParseError as err:
            report_parse_error(err)
            continue
        except ZpyRuntimeError as exc:
            report_runtime_error(exc)
            continue

        if not is_stmt and not isinstance(result, ZpyNone):
            write_bytes(stringify(result) + b"\n")

    print("Goodbye!")

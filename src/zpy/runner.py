from __future__ import annotations

import os
import sys
import traceback
from typing import List, Optional, Sequence, Tuple, Union

from .evaluator import Interpreter
from .lexer_rd import Lexer
from .parser_rd import ParseError, Parser
from .runtime import Environment, ZpyNone, ZpyRuntimeError, ZpyString, ZpyValue, init_stdlib
from .token_types import TT
from .tree import ExprStmt, Stmt, pretty
from .utils import color_enabled, debug_py_trace_enabled

VERSION = "0.1.0"

USAGE = """\
Usage: zpy [options] [file]
Try 'zpy --help' for more information."""

HELP = f"""\
ZPy {VERSION} - a small Python-like language

Usage:
    zpy [options] [file]
    zpy repl

Options:
    -h, --help           Show this help message
    -v, --version        Show version information
    -i, --interactive    Run file then enter REPL
    -c, --code <CODE>    Execute code string and exit
    --tokens             Dump tokens (for debugging)
    --ast                Dump AST (for debugging)

Examples:
    zpy script.zpy              Run a script
    zpy -c "print(1 + 2)"       Execute code string
    zpy --tokens script.zpy     Show tokens for script
    zpy --ast script.zpy        Show AST for script
    zpy                         Start the REPL

Environment:
    ZPY_DEBUG_PY_TRACE   Also print the Python traceback of runtime errors
    NO_COLOR, ZPY_NO_COLOR   Disable colored error output"""

Source = Union[str, bytes]

# ---------------- Running programs ----------------

def parse_program(source: Source) -> Tuple[List[Stmt], List[ParseError]]:
    """Tokenize and parse; return the recovered statements and every parse error."""
    parser = Parser(Lexer(source).tokenize())
    statements = parser.parse()
    return statements, parser.errors

def run_program(source: Source, env: Optional[Environment]=None) -> Environment:
    """
    Run a whole program and return the global environment it ran in.

    Statements that parsed are executed even when others failed to parse;
    callers that care about parse errors use parse_program first.
    """
    init_stdlib()
    statements, _errors = parse_program(source)
    interp = Interpreter(env)
    interp.execute(statements)
    return interp.env

def repl_eval(text: Source, env: Environment) -> Tuple[ZpyValue, bool]:
    """
    Evaluate one REPL chunk in env.

    Returns (value, is_stmt). A chunk holding a single expression statement
    yields its value with is_stmt False; anything else runs for effect.
    The first parse error is raised and nothing runs.
    """
    statements, errors = parse_program(text)
    if errors:
        raise errors[0]

    interp = Interpreter(env)
    if len(statements) == 1 and isinstance(statements[0], ExprStmt):
        return interp.evaluate(statements[0].expr), False

    interp.execute(statements)
    return ZpyNone(), True

def bind_script_path(env: Environment, path: str) -> None:
    env.define("__file__", ZpyString.of(path))
    env.define("__dir__", ZpyString.of(os.path.dirname(path) or "."))

# ---------------- Diagnostics ----------------

def _red(text: str) -> str:
    if not color_enabled():
        return text
    return f"\x1b[31m{text}\x1b[0m"

def report_parse_error(err: ParseError) -> None:
    print(f"{_red('Parse error:')} {err}", file=sys.stderr)

def report_runtime_error(exc: ZpyRuntimeError) -> None:
    print(f"{_red('Runtime error:')} {exc}", file=sys.stderr)

    if debug_py_trace_enabled():
        print("\nPython traceback:", file=sys.stderr)
        print("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)), file=sys.stderr, end="")

def execute_source(source: Source, env: Environment) -> bool:
    """Run source for the CLI, reporting errors. Returns True if none occurred."""
    statements, errors = parse_program(source)
    for err in errors:
        report_parse_error(err)

    try:
        Interpreter(env).execute(statements)
    except ZpyRuntimeError as exc:
        report_runtime_error(exc)
        return False

    return not errors

def dump_tokens(source: Source) -> None:
    print("=== Tokens ===")
    lexer = Lexer(source)
    while True:
        tok = lexer.next_token()
        print(tok)
        if tok.type == TT.EOF:
            break

def dump_ast(source: Source) -> bool:
    statements, errors = parse_program(source)
    for err in errors:
        report_parse_error(err)

    print("=== AST ===")
    if statements:
        print(pretty(statements))
    return not errors

# ---------------- CLI ----------------

class _Options:
    def __init__(self):
        self.show_help = False
        self.show_version = False
        self.interactive = False
        self.dump_tokens = False
        self.dump_ast = False
        self.start_repl = False
        self.code: Optional[str] = None
        self.file_path: Optional[str] = None

def _usage_error(message: str) -> int:
    print(f"Error: {message}\n", file=sys.stderr)
    print(USAGE, file=sys.stderr)
    return 2

def _parse_args(args: Sequence[str]) -> Union[_Options, int]:
    opts = _Options()
    it = iter(args)

    for token in it:
        if token in ("-h", "--help"):
            opts.show_help = True
            continue

        if token in ("-v", "--version"):
            opts.show_version = True
            continue

        if token in ("-i", "--interactive"):
            opts.interactive = True
            continue

        if token == "--tokens":
            opts.dump_tokens = True
            continue

        if token == "--ast":
            opts.dump_ast = True
            continue

        if token in ("-c", "--code"):
            try:
                opts.code = next(it)
            except StopIteration:
                return _usage_error(f"{token} requires an argument")
            continue

        if token.startswith("-c=") or token.startswith("--code="):
            opts.code = token.split("=", 1)[1]
            continue

        if token.startswith("-"):
            return _usage_error(f"Unknown option '{token}'")

        if token == "repl" and opts.file_path is None:
            opts.start_repl = True
            continue

        if opts.file_path is None:
            opts.file_path = token
        else:
            return _usage_error(f"Unexpected argument '{token}'")

    return opts

def _read_file(path: str) -> Optional[bytes]:
    try:
        with open(path, "rb") as f:
            return f.read()
    except OSError as exc:
        print(f"Error: cannot read '{path}': {exc.strerror or exc}", file=sys.stderr)
        return None

def _start_repl(env: Optional[Environment]=None) -> int:
    from .repl import repl

    repl(env)
    return 0

def main(argv: Optional[Sequence[str]]=None) -> int:
    parsed = _parse_args(sys.argv[1:] if argv is None else argv)
    if isinstance(parsed, int):
        return parsed
    opts = parsed

    if opts.show_help:
        print(HELP)
        return 0

    if opts.show_version:
        print(f"ZPy {VERSION}")
        return 0

    init_stdlib()

    if opts.code is not None:
        if opts.dump_tokens:
            dump_tokens(opts.code)
            return 0
        if opts.dump_ast:
            return 0 if dump_ast(opts.code) else 1
        return 0 if execute_source(opts.code, Environment()) else 1

    if opts.file_path is not None:
        source = _read_file(opts.file_path)
        if source is None:
            return 1

        if opts.dump_tokens:
            dump_tokens(source)
            return 0
        if opts.dump_ast:
            return 0 if dump_ast(source) else 1

        env = Environment()
        bind_script_path(env, opts.file_path)
        ok = execute_source(source, env)

        if opts.interactive:
            print("\n--- Entering REPL ---")
            _start_repl(env)
        return 0 if ok else 1

    return _start_repl()

if __name__ == "__main__":
    sys.exit(main())

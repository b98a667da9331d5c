"""prompt_toolkit lexer for live ZPy syntax highlighting in the REPL."""

from __future__ import annotations

from typing import Callable

from prompt_toolkit.document import Document
from prompt_toolkit.formatted_text import StyleAndTextTuples
from prompt_toolkit.lexers import Lexer

from .lexer_rd import Lexer as ZpyTokenizer
from .token_types import TT

# Map highlight groups → prompt_toolkit style strings.
GROUP_STYLE = {
    "keyword": "bold ansicyan",
    "boolean": "ansicyan",
    "constant": "ansicyan",
    "number": "ansimagenta",
    "string": "ansigreen",
    "identifier": "",
    "function": "bold ansiyellow",
    "operator": "",
    "punctuation": "",
    "comment": "italic ansigray",
    "error": "bold ansired",
}

_KEYWORDS = (
    TT.IF, TT.ELIF, TT.ELSE, TT.WHILE, TT.FOR, TT.IN, TT.BREAK, TT.CONTINUE,
    TT.DEF, TT.RETURN, TT.DEL, TT.PASS, TT.AND, TT.OR, TT.NOT,
)
_OPERATORS = (
    TT.PLUS, TT.MINUS, TT.STAR, TT.SLASH, TT.MOD, TT.POW,
    TT.EQ, TT.NEQ, TT.LT, TT.GT, TT.LTE, TT.GTE,
    TT.ASSIGN, TT.PLUSEQ, TT.MINUSEQ, TT.STAREQ, TT.SLASHEQ, TT.MODEQ,
)
_PUNCTUATION = (
    TT.LPAR, TT.RPAR, TT.LSQB, TT.RSQB, TT.LBRACE, TT.RBRACE,
    TT.COMMA, TT.COLON, TT.DOT, TT.SEMI,
)

# Token type → highlight group.
_TT_GROUP = {
    **{t: "keyword" for t in _KEYWORDS},
    **{t: "operator" for t in _OPERATORS},
    **{t: "punctuation" for t in _PUNCTUATION},
    TT.TRUE: "boolean",
    TT.FALSE: "boolean",
    TT.NONE: "constant",
    TT.INT: "number",
    TT.FLOAT: "number",
    TT.STRING: "string",
    TT.IDENT: "identifier",
    TT.INVALID: "error",
}

_LAYOUT = {TT.NEWLINE, TT.INDENT, TT.DEDENT, TT.EOF}


def _highlight_line(text: str) -> StyleAndTextTuples:
    """Tokenize a single line and return styled fragments."""
    if not text:
        return [("", "")]

    tokens = ZpyTokenizer(text).tokenize()

    result: StyleAndTextTuples = []
    pos = 0

    for i, tok in enumerate(tokens):
        if tok.type in _LAYOUT:
            continue
        tok_text = str(tok.value) if tok.value is not None else ""
        if not tok_text:
            continue

        # Find actual position of this token value in the line from pos onwards.
        idx = text.find(tok_text, pos)
        if idx < 0:
            continue

        # Unstyled gap before token.
        if idx > pos:
            result.append(("", text[pos:idx]))

        group = _TT_GROUP.get(tok.type, "")
        if tok.type == TT.IDENT and i + 1 < len(tokens) and tokens[i + 1].type == TT.LPAR:
            group = "function"
        result.append((GROUP_STYLE.get(group, ""), tok_text))
        pos = idx + len(tok_text)

    # Whatever the tokenizer skipped at the end is a comment or whitespace.
    if pos < len(text):
        rest = text[pos:]
        if rest.lstrip().startswith("#"):
            gap = len(rest) - len(rest.lstrip())
            if gap:
                result.append(("", rest[:gap]))
            result.append((GROUP_STYLE["comment"], rest[gap:]))
        else:
            result.append(("", rest))

    return result if result else [("", text)]


class ZpyLexer(Lexer):
    """prompt_toolkit Lexer that highlights ZPy source using the RD lexer."""

    def lex_document(self, document: Document) -> Callable[[int], StyleAndTextTuples]:
        lines = document.lines

        cache: dict[int, StyleAndTextTuples] = {}

        def get_line(lineno: int) -> StyleAndTextTuples:
            if lineno not in cache:
                if lineno < len(lines):
                    cache[lineno] = _highlight_line(lines[lineno])
                else:
                    cache[lineno] = [("", "")]

            return cache[lineno]

        return get_line

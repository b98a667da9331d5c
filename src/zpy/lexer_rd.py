"""
Lexer for ZPy - Recursive Descent Parser

Tokenizes ZPy source code into a stream of tokens.

Features:
- Streaming tokenization (one token per next_token() call)
- Indentation-aware (emits INDENT/DEDENT, one DEDENT per call)
- Position tracking (line, byte column)
- Never raises: unknown bytes become INVALID tokens
"""

from typing import List, Optional, Union

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    ZPy lexer with indentation handling.

    Based on Python's indentation model:
    - Track stack of indentation widths (space = 1, tab = 4)
    - Emit INDENT when the width increases
    - Emit DEDENT once per popped level when it decreases
    - Blank and comment-only lines never reach the parser

    The source is scanned as bytes. Internally each byte is held as one
    latin-1 character so columns count bytes and multi-byte UTF-8 text
    inside strings survives untouched.
    """

    # Keyword mapping
    KEYWORDS = {
        'true': TT.TRUE,
        'false': TT.FALSE,
        'none': TT.NONE,
        'if': TT.IF,
        'elif': TT.ELIF,
        'else': TT.ELSE,
        'while': TT.WHILE,
        'for': TT.FOR,
        'in': TT.IN,
        'break': TT.BREAK,
        'continue': TT.CONTINUE,
        'and': TT.AND,
        'or': TT.OR,
        'not': TT.NOT,
        'def': TT.DEF,
        'return': TT.RETURN,
        'del': TT.DEL,
        'pass': TT.PASS,
    }

    # Operator mapping: longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('**', TT.POW),
        ('==', TT.EQ),
        ('!=', TT.NEQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),
        ('+=', TT.PLUSEQ),
        ('-=', TT.MINUSEQ),
        ('*=', TT.STAREQ),
        ('/=', TT.SLASHEQ),
        ('%=', TT.MODEQ),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('%', TT.MOD),
        ('<', TT.LT),
        ('>', TT.GT),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        (',', TT.COMMA),
        (':', TT.COLON),
        ('.', TT.DOT),
        (';', TT.SEMI),
    ]

    TAB_WIDTH = 4

    def __init__(self, source: Union[str, bytes]):
        if isinstance(source, str):
            source = source.encode('utf-8', 'surrogateescape')
        self.source = source.decode('latin-1')
        self.pos = 0
        self.line = 1
        self.column = 1

        # Indentation tracking
        self.indent_stack = [0]
        self.at_line_start = True
        self.pending_dedents = 0

        # Start of the token being scanned
        self.start = 0
        self.start_line = 1
        self.start_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list ending with EOF"""
        tokens: List[Tok] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.type == TT.EOF:
                return tokens

    def next_token(self) -> Tok:
        """Scan and return the next token"""
        if self.pending_dedents > 0:
            self.pending_dedents -= 1
            return self.emit(TT.DEDENT, '')

        # Handle indentation at line start
        if self.at_line_start:
            self.at_line_start = False
            tok = self.handle_indentation()
            if tok is not None:
                return tok

        self.skip_whitespace()
        self.mark_start()

        if self.pos >= len(self.source):
            if len(self.indent_stack) > 1:
                self.indent_stack.pop()
                return self.emit(TT.DEDENT, '')
            return self.emit(TT.EOF, '')

        ch = self.peek()

        # Comments
        if ch == '#':
            self.skip_comment()
            return self.next_token()

        # Newlines
        if ch == '\n':
            return self.scan_newline()

        # Numbers
        if _is_digit(ch):
            return self.scan_number()

        # String literals
        if ch in ('"', "'"):
            return self.scan_string()

        # Identifiers and keywords
        if _is_ident_start(ch):
            return self.scan_identifier()

        # Operators and punctuation
        return self.scan_operator()

    # ========================================================================
    # Indentation Handling
    # ========================================================================

    def handle_indentation(self) -> Optional[Tok]:
        """
        Measure the indentation of the next logical line.

        Blank and comment-only lines are consumed here and reset the width.
        Returns INDENT, the first of one or more DEDENTs, or None.
        """
        indent = 0
        while True:
            ch = self.peek()
            if ch == ' ':
                indent += 1
                self.advance()
            elif ch == '\t':
                indent += self.TAB_WIDTH
                self.advance()
            elif ch in ('\n', '\r'):
                indent = 0
                self.advance()
                if ch == '\r' and self.peek() == '\n':
                    self.advance()
                self.new_line()
            elif ch == '#':
                self.skip_comment()
                if self.peek() == '\n':
                    self.advance()
                    self.new_line()
                indent = 0
            else:
                break

        self.mark_start()
        current_indent = self.indent_stack[-1]

        if indent > current_indent:
            self.indent_stack.append(indent)
            return self.emit(TT.INDENT, '')

        if indent < current_indent:
            popped = 0
            while len(self.indent_stack) > 1 and self.indent_stack[-1] > indent:
                self.indent_stack.pop()
                popped += 1

            if popped > 0:
                self.pending_dedents = popped - 1
                return self.emit(TT.DEDENT, '')

        return None

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_newline(self) -> Tok:
        """Scan newline character"""
        self.advance()
        tok = Tok(TT.NEWLINE, '\n', self.start_line, 1)
        self.new_line()
        self.at_line_start = True
        return tok

    def scan_number(self) -> Tok:
        """Scan an integer, or a float when '.' is followed by a digit"""
        while _is_digit(self.peek()):
            self.advance()

        if self.peek() == '.' and _is_digit(self.peek(1)):
            self.advance()
            while _is_digit(self.peek()):
                self.advance()
            return self.emit(TT.FLOAT, self.lexeme())

        return self.emit(TT.INT, self.lexeme())

    def scan_string(self) -> Tok:
        """
        Scan a quoted string, keeping quotes and escapes in the lexeme.

        An unescaped newline ends an unterminated string; a missing closing
        quote is tolerated.
        """
        quote = self.advance()
        while self.pos < len(self.source):
            ch = self.peek()
            if ch == quote or ch == '\n':
                break
            if ch == '\\' and self.pos + 1 < len(self.source):
                self.advance()
            self.advance()

        if self.peek() == quote:
            self.advance()

        return self.emit(TT.STRING, self.lexeme())

    def scan_identifier(self) -> Tok:
        """Scan identifier or keyword"""
        while _is_ident_char(self.peek()):
            self.advance()

        text = self.lexeme()
        return self.emit(self.KEYWORDS.get(text, TT.IDENT), text)

    def scan_operator(self) -> Tok:
        """Scan operator or punctuation"""
        for op, token_type in self.OPERATORS:
            if self.source.startswith(op, self.pos):
                self.advance(len(op))
                return self.emit(token_type, op)

        self.advance()
        return self.emit(TT.INVALID, self.lexeme())

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character, '' past the end"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return ''

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        result = self.source[self.pos:self.pos + n]
        self.pos += len(result)
        self.column += len(result)
        return result

    def new_line(self):
        self.line += 1
        self.column = 1

    def skip_whitespace(self):
        """Skip spaces, tabs and carriage returns"""
        while self.peek() in (' ', '\t', '\r'):
            self.advance()

    def skip_comment(self):
        """Skip comment until end of line"""
        while self.peek() not in ('\n', ''):
            self.advance()

    def mark_start(self):
        self.start = self.pos
        self.start_line = self.line
        self.start_column = self.column

    def lexeme(self) -> str:
        """Source text of the current token, decoded as UTF-8"""
        raw = self.source[self.start:self.pos].encode('latin-1')
        return raw.decode('utf-8', 'surrogateescape')

    def emit(self, token_type: TT, value) -> Tok:
        """Build a token positioned at the start of the current scan"""
        return Tok(
            type=token_type,
            value=value,
            line=self.start_line,
            column=self.start_column
        )


def _is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


def _is_ident_start(ch: str) -> bool:
    return ch == '_' or ('a' <= ch <= 'z') or ('A' <= ch <= 'Z')


def _is_ident_char(ch: str) -> bool:
    return _is_ident_start(ch) or _is_digit(ch)

# ============================================================================
# Testing
# ============================================================================

def tokenize(source: Union[str, bytes]) -> List[Tok]:
    """Convenience function to tokenize source"""
    return Lexer(source).tokenize()


if __name__ == '__main__':
    # Simple test
    test_source = '''
def fibonacci(n):
    if n <= 1:
        return n
    return fibonacci(n - 1) + fibonacci(n - 2)

print(fibonacci(10))
'''

    for tok in tokenize(test_source):
        print(tok)

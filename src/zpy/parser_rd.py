"""
Recursive Descent Parser for ZPy

Structure:
- Lexer: Token stream from source (lexer_rd)
- Parser: Recursive descent for statements, precedence climbing for expressions
- AST: frozen dataclasses from tree.py

Parse errors inside a statement are recorded on ``Parser.errors`` and the
parser resynchronizes at the next statement boundary, so one bad line does
not hide the rest of the program.
"""

from typing import List, Optional, Tuple

from .token_types import AUG_ASSIGN_OPS, TT, Tok
from .tree import (
    Assignment,
    AugAssign,
    Binary,
    Block,
    BoolLit,
    BreakStmt,
    Call,
    ContinueStmt,
    DelStmt,
    DictLit,
    ElifBranch,
    Expr,
    ExprStmt,
    FloatLit,
    ForStmt,
    FuncDef,
    Identifier,
    IfStmt,
    Index,
    IndexAssign,
    IntLit,
    ListLit,
    Membership,
    MethodCall,
    NoneLit,
    PassStmt,
    ReturnStmt,
    Stmt,
    StringLit,
    Unary,
    WhileStmt,
)
from .utils import I64_MAX, recursion_budget

# ============================================================================
# Parser
# ============================================================================

PARSE_MESSAGES = {
    "UnexpectedToken": "Unexpected token",
    "ExpectedExpression": "Expected an expression",
    "ExpectedIdentifier": "Expected an identifier",
    "ExpectedColon": "Expected ':'",
    "UnterminatedBlock": "Unterminated block",
    "NestingTooDeep": "Nesting too deep",
}

# Escape sequences recognised in string literals
_ESCAPES = {
    ord('n'): b'\n',
    ord('t'): b'\t',
    ord('r'): b'\r',
    ord('\\'): b'\\',
    ord('"'): b'"',
    ord("'"): b"'",
    ord('0'): b'\0',
}

_COMPARE_OPS = {
    TT.EQ: '==',
    TT.NEQ: '!=',
    TT.LT: '<',
    TT.GT: '>',
    TT.LTE: '<=',
    TT.GTE: '>=',
}

# Tokens that end a bare `return`
_RETURN_TERMINATORS = (TT.NEWLINE, TT.SEMI, TT.EOF, TT.DEDENT)


class ParseError(Exception):
    """Parse error with kind and position info"""
    def __init__(self, kind: str, token: Optional[Tok] = None):
        self.kind = kind
        self.message = PARSE_MESSAGES[kind]
        self.token = token
        super().__init__(
            f"{self.message} at line {token.line}, col {token.column}" if token else self.message
        )


class Parser:
    """
    Recursive descent parser for ZPy.

    Expression precedence (lowest to highest):
    1. or
    2. and
    3. not (prefix)
    4. compare (==, !=, <, >, <=, >=) and membership (in, not in)
    5. add (+, -)
    6. mul (*, /, %)
    7. unary (-)
    8. pow (**, right operand at unary level)
    9. postfix ([index], name(call), .method(call))
    10. primary (literals, identifiers, parens, list, dict)
    """

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens
        self.pos = 0
        self.current = tokens[0] if tokens else Tok(TT.EOF, '', 0, 0)
        self.errors: List[ParseError] = []

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead at token"""
        idx = self.pos + offset
        if idx < len(self.tokens):
            return self.tokens[idx]
        return Tok(TT.EOF, '', 0, 0)

    def advance(self) -> Tok:
        """Consume current token and move to next"""
        prev = self.current
        self.pos += 1
        self.current = self.peek()
        return prev

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def match(self, *types: TT) -> bool:
        """Check and consume if current token matches"""
        if self.check(*types):
            self.advance()
            return True
        return False

    def expect(self, token_type: TT, kind: str = "UnexpectedToken") -> Tok:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            raise ParseError(kind, self.current)
        return self.advance()

    def skip_newlines(self):
        """Skip statement separators (NEWLINE and ';')"""
        while self.match(TT.NEWLINE, TT.SEMI):
            pass

    def synchronize(self, in_block: bool = False):
        """
        Discard tokens after an error: through the next NEWLINE or ';', or up
        to (not including) a statement keyword that can start fresh.

        Inside an indented block the DEDENT closing it is left for the block.
        """
        while not self.check(TT.EOF):
            if self.match(TT.NEWLINE, TT.SEMI):
                return
            if self.check(TT.IF, TT.WHILE, TT.FOR):
                return
            if in_block and self.check(TT.DEDENT):
                return
            self.advance()

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> List[Stmt]:
        """Parse entire program"""
        statements: List[Stmt] = []

        with recursion_budget():
            while not self.check(TT.EOF):
                self.skip_newlines()
                if self.check(TT.EOF):
                    break

                try:
                    statements.append(self.parse_statement())
                except ParseError as exc:
                    self.errors.append(exc)
                    self.synchronize()
                except RecursionError:
                    self.errors.append(ParseError("NestingTooDeep", self.current))
                    self.synchronize()

        return statements

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Stmt:
        """Dispatch on the leading keyword"""
        self.skip_newlines()

        if self.check(TT.IF):
            return self.parse_if_stmt()
        if self.check(TT.WHILE):
            return self.parse_while_stmt()
        if self.check(TT.FOR):
            return self.parse_for_stmt()
        if self.check(TT.BREAK):
            return self.parse_simple_stmt(BreakStmt)
        if self.check(TT.CONTINUE):
            return self.parse_simple_stmt(ContinueStmt)
        if self.check(TT.DEF):
            return self.parse_def_stmt()
        if self.check(TT.RETURN):
            return self.parse_return_stmt()
        if self.check(TT.DEL):
            return self.parse_del_stmt()
        if self.check(TT.PASS):
            return self.parse_simple_stmt(PassStmt)

        return self.parse_expr_stmt()

    def parse_if_stmt(self) -> IfStmt:
        """
        Parse if statement:
        if expr: body [elif expr: body]* [else: body]
        """
        if_tok = self.expect(TT.IF)
        cond = self.parse_expr()
        self.expect(TT.COLON, "ExpectedColon")
        then_body = self.parse_block()

        elifs = []
        while self.match(TT.ELIF):
            elif_cond = self.parse_expr()
            self.expect(TT.COLON, "ExpectedColon")
            elifs.append(ElifBranch(elif_cond, self.parse_block()))

        else_body = None
        if self.match(TT.ELSE):
            self.expect(TT.COLON, "ExpectedColon")
            else_body = self.parse_block()

        return IfStmt(cond, then_body, tuple(elifs), else_body, line=if_tok.line)

    def parse_while_stmt(self) -> WhileStmt:
        """Parse while loop: while expr: body"""
        while_tok = self.expect(TT.WHILE)
        cond = self.parse_expr()
        self.expect(TT.COLON, "ExpectedColon")
        body = self.parse_block()
        return WhileStmt(cond, body, line=while_tok.line)

    def parse_for_stmt(self) -> ForStmt:
        """Parse for loop: for IDENT in expr: body"""
        for_tok = self.expect(TT.FOR)
        var = self.expect(TT.IDENT, "ExpectedIdentifier")
        self.expect(TT.IN)
        iterable = self.parse_expr()
        self.expect(TT.COLON, "ExpectedColon")
        body = self.parse_block()
        return ForStmt(var.value, iterable, body, line=for_tok.line)

    def parse_def_stmt(self) -> FuncDef:
        """Parse function definition: def name(a, b): body"""
        def_tok = self.expect(TT.DEF)
        name = self.expect(TT.IDENT, "ExpectedIdentifier")
        self.expect(TT.LPAR)

        params = []
        if not self.check(TT.RPAR):
            params.append(self.expect(TT.IDENT, "ExpectedIdentifier").value)
            while self.match(TT.COMMA):
                params.append(self.expect(TT.IDENT, "ExpectedIdentifier").value)

        self.expect(TT.RPAR)
        self.expect(TT.COLON, "ExpectedColon")
        body = self.parse_block()
        return FuncDef(name.value, tuple(params), body, line=def_tok.line)

    def parse_return_stmt(self) -> ReturnStmt:
        """Parse return statement: return [expr]"""
        ret_tok = self.expect(TT.RETURN)
        value = None
        if not self.check(*_RETURN_TERMINATORS):
            value = self.parse_expr()
        self.skip_newlines()
        return ReturnStmt(value, line=ret_tok.line)

    def parse_del_stmt(self) -> DelStmt:
        """Parse del statement: del obj[index]"""
        del_tok = self.expect(TT.DEL)
        target = self.parse_expr()
        if not isinstance(target, Index):
            raise ParseError("UnexpectedToken", self.current)
        self.skip_newlines()
        return DelStmt(target.obj, target.index, line=del_tok.line)

    def parse_simple_stmt(self, node_type) -> Stmt:
        """Parse break, continue or pass"""
        tok = self.advance()
        self.skip_newlines()
        return node_type(line=tok.line)

    def parse_expr_stmt(self) -> Stmt:
        """
        Parse expression statement, assignment or augmented assignment.

        An unassignable target keeps only the left-hand expression; the
        right-hand side is parsed and dropped.
        """
        line = self.current.line
        expr = self.parse_expr()
        stmt: Stmt = ExprStmt(expr, line=line)

        if self.match(TT.ASSIGN):
            value = self.parse_expr()
            if isinstance(expr, Identifier):
                stmt = Assignment(expr.name, value, line=line)
            elif isinstance(expr, Index):
                stmt = IndexAssign(expr.obj, expr.index, value, line=line)

        elif self.current.type in AUG_ASSIGN_OPS:
            op = AUG_ASSIGN_OPS[self.advance().type]
            value = self.parse_expr()
            if isinstance(expr, Identifier):
                stmt = AugAssign(expr.name, op, value, line=line)

        self.skip_newlines()
        return stmt

    def parse_block(self) -> Stmt:
        """
        Parse a body:
        - a single statement on the same line, or
        - INDENT stmt* DEDENT
        """
        self.skip_newlines()

        if not self.check(TT.INDENT):
            return self.parse_statement()

        indent_tok = self.advance()
        statements: List[Stmt] = []

        while not self.check(TT.DEDENT, TT.EOF):
            self.skip_newlines()
            if self.check(TT.DEDENT, TT.EOF):
                break

            try:
                statements.append(self.parse_statement())
            except ParseError as exc:
                self.errors.append(exc)
                self.synchronize(in_block=True)

        if not self.match(TT.DEDENT):
            self.errors.append(ParseError("UnterminatedBlock", self.current))

        return Block(tuple(statements), line=indent_tok.line)

    # ========================================================================
    # Expressions
    # ========================================================================

    def parse_expr(self) -> Expr:
        return self.parse_or_expr()

    def parse_or_expr(self) -> Expr:
        left = self.parse_and_expr()
        while self.match(TT.OR):
            left = Binary('or', left, self.parse_and_expr())
        return left

    def parse_and_expr(self) -> Expr:
        left = self.parse_not_expr()
        while self.match(TT.AND):
            left = Binary('and', left, self.parse_not_expr())
        return left

    def parse_not_expr(self) -> Expr:
        if self.match(TT.NOT):
            return Unary('not', self.parse_not_expr())
        return self.parse_compare_expr()

    def parse_compare_expr(self) -> Expr:
        """
        Parse comparison chain (left-associative, no chained meaning):
        add ((== | != | < | > | <= | >= | in | not in) add)*
        """
        left = self.parse_add_expr()

        while True:
            if self.current.type in _COMPARE_OPS:
                op = _COMPARE_OPS[self.advance().type]
                left = Binary(op, left, self.parse_add_expr())
            elif self.match(TT.IN):
                left = Membership(left, self.parse_add_expr(), negated=False)
            elif self.check(TT.NOT) and self.peek(1).type == TT.IN:
                self.advance()
                self.advance()
                left = Membership(left, self.parse_add_expr(), negated=True)
            else:
                return left

    def parse_add_expr(self) -> Expr:
        left = self.parse_mul_expr()
        while self.check(TT.PLUS, TT.MINUS):
            op = self.advance().value
            left = Binary(op, left, self.parse_mul_expr())
        return left

    def parse_mul_expr(self) -> Expr:
        left = self.parse_unary_expr()
        while self.check(TT.STAR, TT.SLASH, TT.MOD):
            op = self.advance().value
            left = Binary(op, left, self.parse_unary_expr())
        return left

    def parse_unary_expr(self) -> Expr:
        if self.match(TT.MINUS):
            return Unary('-', self.parse_unary_expr())
        return self.parse_pow_expr()

    def parse_pow_expr(self) -> Expr:
        """Parse power: postfix ['**' unary] (right-associative)"""
        base = self.parse_postfix_expr()
        if self.match(TT.POW):
            return Binary('**', base, self.parse_unary_expr())
        return base

    def parse_postfix_expr(self) -> Expr:
        """
        Parse postfix operations:
        - obj[index]
        - name(args)     only directly on an identifier
        - obj.method(args)
        """
        expr = self.parse_primary_expr()

        while True:
            if self.match(TT.LSQB):
                index = self.parse_expr()
                self.expect(TT.RSQB)
                expr = Index(expr, index)
            elif self.check(TT.LPAR) and isinstance(expr, Identifier):
                self.advance()
                expr = Call(expr.name, self.parse_call_args())
            elif self.match(TT.DOT):
                method = self.expect(TT.IDENT, "ExpectedIdentifier")
                self.expect(TT.LPAR)
                expr = MethodCall(expr, method.value, self.parse_call_args())
            else:
                return expr

    def parse_call_args(self) -> Tuple[Expr, ...]:
        """Parse arguments after '(' through the closing ')'"""
        args = []
        if not self.check(TT.RPAR):
            args.append(self.parse_expr())
            while self.match(TT.COMMA):
                args.append(self.parse_expr())
        self.expect(TT.RPAR)
        return tuple(args)

    def parse_primary_expr(self) -> Expr:
        tok = self.current

        if self.match(TT.INT):
            value = int(tok.value)
            # Literals beyond the 64-bit range evaluate to 0
            return IntLit(value if value <= I64_MAX else 0)

        if self.match(TT.FLOAT):
            return FloatLit(float(tok.value))

        if self.match(TT.STRING):
            return StringLit(decode_string_literal(tok.value))

        if self.match(TT.TRUE):
            return BoolLit(True)

        if self.match(TT.FALSE):
            return BoolLit(False)

        if self.match(TT.NONE):
            return NoneLit()

        if self.match(TT.IDENT):
            return Identifier(tok.value)

        if self.match(TT.LPAR):
            expr = self.parse_expr()
            self.expect(TT.RPAR)
            return expr

        if self.check(TT.LSQB):
            return self.parse_list_literal()

        if self.check(TT.LBRACE):
            return self.parse_dict_literal()

        raise ParseError("ExpectedExpression", tok)

    def parse_list_literal(self) -> ListLit:
        """Parse [a, b, ...] with optional trailing comma"""
        self.expect(TT.LSQB)
        elements = []

        if not self.check(TT.RSQB):
            elements.append(self.parse_expr())
            while self.match(TT.COMMA):
                if self.check(TT.RSQB):
                    break
                elements.append(self.parse_expr())

        self.expect(TT.RSQB)
        return ListLit(tuple(elements))

    def parse_dict_literal(self) -> DictLit:
        """Parse {k: v, ...} with optional trailing comma"""
        self.expect(TT.LBRACE)
        keys = []
        values = []

        if not self.check(TT.RBRACE):
            keys.append(self.parse_expr())
            self.expect(TT.COLON, "ExpectedColon")
            values.append(self.parse_expr())

            while self.match(TT.COMMA):
                if self.check(TT.RBRACE):
                    break
                keys.append(self.parse_expr())
                self.expect(TT.COLON, "ExpectedColon")
                values.append(self.parse_expr())

        self.expect(TT.RBRACE)
        return DictLit(tuple(keys), tuple(values))


def decode_string_literal(lexeme: str) -> bytes:
    """Strip the surrounding quotes from a string lexeme and decode escapes."""
    raw = lexeme.encode('utf-8', 'surrogateescape')
    if len(raw) >= 2:
        raw = raw[1:-1]

    out = bytearray()
    i = 0
    while i < len(raw):
        byte = raw[i]
        if byte == ord('\\') and i + 1 < len(raw):
            esc = raw[i + 1]
            out += _ESCAPES.get(esc, bytes([esc]))
            i += 2
            continue
        out.append(byte)
        i += 1

    return bytes(out)


if __name__ == '__main__':
    import sys

    from .lexer_rd import tokenize
    from .tree import pretty

    if len(sys.argv) > 1 and sys.argv[1] != '-':
        with open(sys.argv[1], 'rb') as f:
            source = f.read()
    else:
        source = sys.stdin.buffer.read()

    parser = Parser(tokenize(source))
    statements = parser.parse()
    print(pretty(statements))
    for err in parser.errors:
        print(f"Parse error: {err}", file=sys.stderr)
    if parser.errors:
        sys.exit(1)

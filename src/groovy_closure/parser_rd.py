"""
Recursive Descent Parser for a Groovy expression subset

Produces a lossless concrete syntax tree: whitespace, newlines and comments are
kept as trivia tokens inside the tree, so the text of the root equals the
source exactly and any node can be re-emitted verbatim.

Structure:
- Lexer: token stream including trivia
- Parser: recursive descent with precedence climbing for expressions
- AST: Lark Tree/Token nodes

Trivia placement: a parse_* method starts on a significant token and never
consumes trailing trivia. Callers flush pending trivia into their own children
before parsing a child, so the whitespace in front of a node belongs to its
parent.
"""

from typing import Callable, List, Optional

from lark import Tree, Token

from .token_types import TT, TRIVIA, Tok

# ============================================================================
# Parser
# ============================================================================

class ParseError(Exception):
    """Parse error with position info"""
    def __init__(self, message: str, token: Optional[Tok] = None):
        self.message = message
        self.token = token
        super().__init__(
            f"{message} at line {token.line}, col {token.column}" if token else message
        )


# Tokens that can begin an expression
EXPR_START = frozenset({
    TT.NUMBER, TT.STRING, TT.IDENT, TT.TRUE, TT.FALSE, TT.NULL,
    TT.LPAR, TT.LSQB, TT.LBRACE, TT.MINUS, TT.NEG,
})

# Tokens that can begin a command argument (`println x`)
COMMAND_ARG_START = frozenset({
    TT.NUMBER, TT.STRING, TT.IDENT, TT.TRUE, TT.FALSE, TT.NULL,
})

OPENERS = {TT.LPAR: TT.RPAR, TT.LSQB: TT.RSQB, TT.LBRACE: TT.RBRACE}


def to_lark(tok: Tok) -> Token:
    return Token(
        tok.type.name,
        tok.value,
        start_pos=tok.start_pos,
        line=tok.line,
        column=tok.column,
        end_pos=tok.end_pos,
    )


class Parser:
    """
    Recursive descent parser for Groovy lambdas, closures and expressions.

    Expression precedence (lowest to highest):
    1. assignment (=), right associative
    2. or (||)
    3. and (&&)
    4. compare (==, !=, <, >, <=, >=)
    5. add (+, -)
    6. mul (*, /, %)
    7. unary (-, !)
    8. postfix (call, .field, [index], trailing closure)
    9. primary (literals, identifiers, parens, lists, closures, lambdas)

    Newlines are trivia, but an expression does not continue across a newline
    unless it is nested inside parentheses or brackets.
    """

    def __init__(self, tokens: List[Tok]):
        self.tokens = tokens
        self.pos = 0
        self.nl_depth = 0  # > 0 while inside ( ) or [ ]

    # ========================================================================
    # Token Navigation
    # ========================================================================

    def _sig_index(self, start: int) -> int:
        idx = start
        while idx < len(self.tokens) and self.tokens[idx].type in TRIVIA:
            idx += 1
        return idx

    def _at(self, idx: int) -> Tok:
        if idx < len(self.tokens):
            return self.tokens[idx]
        return Tok(TT.EOF, None, 0, 0)

    @property
    def current(self) -> Tok:
        """Next significant token (pending trivia is skipped, not consumed)"""
        return self._at(self._sig_index(self.pos))

    def peek(self, offset: int = 0) -> Tok:
        """Look ahead `offset` significant tokens past the current one"""
        idx = self._sig_index(self.pos)
        for _ in range(offset):
            idx = self._sig_index(idx + 1)
        return self._at(idx)

    def newline_before(self) -> bool:
        """True if pending trivia contains a line break"""
        idx = self.pos
        while idx < len(self.tokens) and self.tokens[idx].type in TRIVIA:
            tok = self.tokens[idx]
            if tok.type == TT.NEWLINE:
                return True
            if tok.type == TT.BLOCK_COMMENT and ('\n' in tok.value or '\r' in tok.value):
                return True
            idx += 1
        return False

    def check(self, *types: TT) -> bool:
        """Check if current token matches any of the given types"""
        return self.current.type in types

    def continues(self, *types: TT) -> bool:
        """Check for an operator that extends the expression on this line"""
        if not self.check(*types):
            return False
        return self.nl_depth > 0 or not self.newline_before()

    def trivia(self) -> List[Token]:
        """Consume pending trivia"""
        out = []
        while self.pos < len(self.tokens) and self.tokens[self.pos].type in TRIVIA:
            out.append(to_lark(self.tokens[self.pos]))
            self.pos += 1
        return out

    def advance(self) -> Token:
        """Consume the current significant token (no pending trivia allowed)"""
        tok = self._at(self.pos)
        if tok.type in TRIVIA:
            raise ParseError("Internal error: advance() over pending trivia", tok)
        if tok.type == TT.EOF:
            raise ParseError("Unexpected end of input", tok)
        self.pos += 1
        return to_lark(tok)

    def expect(self, token_type: TT, message: Optional[str] = None) -> Token:
        """Consume token of expected type or raise error"""
        if not self.check(token_type):
            msg = message or f"Expected {token_type.name}, got {self.current.type.name}"
            raise ParseError(msg, self.current)
        return self.advance()

    def eat(self, children: List, token_type: Optional[TT] = None, message: Optional[str] = None) -> Token:
        """Flush trivia into children, then consume one token into them"""
        children.extend(self.trivia())
        tok = self.expect(token_type, message) if token_type is not None else self.advance()
        children.append(tok)
        return tok

    def child(self, children: List, parse: Callable[[], object]) -> object:
        """Flush trivia into children, then parse one child node into them"""
        children.extend(self.trivia())
        node = parse()
        children.append(node)
        return node

    # ========================================================================
    # Top-Level Parsing
    # ========================================================================

    def parse(self) -> Tree:
        """Parse entire file"""
        children: List = []
        self.parse_statements(children, TT.EOF)
        children.extend(self.trivia())
        if not self.check(TT.EOF):
            raise ParseError(f"Unexpected {self.current.type.name}", self.current)
        return Tree('file', children)

    def parse_statements(self, children: List, closing: TT) -> None:
        """Statements separated by ';' or newlines, up to (not including) `closing`"""
        saved = self.nl_depth
        self.nl_depth = 0
        need_separator = False

        while not self.check(closing, TT.EOF):
            if self.check(TT.SEMI):
                self.eat(children)
                need_separator = False
                continue

            if need_separator and not self.newline_before():
                raise ParseError("Expected ';' or newline between statements", self.current)

            self.child(children, self.parse_statement)
            need_separator = True

        self.nl_depth = saved

    # ========================================================================
    # Statements
    # ========================================================================

    def parse_statement(self) -> Tree:
        """
        Parse a single statement.

        - return [expr]
        - def name [= expr]
        - Type name = expr
        - command call: name arg, arg
        - expression
        """
        if self.check(TT.RETURN):
            return self.parse_return_stmt()
        if self.check(TT.DEF):
            return self.parse_decl()

        if self.check(TT.IDENT) and not self.newline_before_sig(1):
            nxt = self.peek(1)
            if nxt.type == TT.IDENT and self.peek(2).type == TT.ASSIGN:
                return self.parse_decl()
            if nxt.type in COMMAND_ARG_START:
                return self.parse_command()

        return self.parse_expr()

    def newline_before_sig(self, offset: int) -> bool:
        """True if a line break precedes the significant token at `offset`"""
        idx = self._sig_index(self.pos)
        for _ in range(offset):
            idx += 1
            while idx < len(self.tokens) and self.tokens[idx].type in TRIVIA:
                if self.tokens[idx].type == TT.NEWLINE:
                    return True
                idx += 1
        return False

    def parse_return_stmt(self) -> Tree:
        children: List = [self.advance()]
        if self.check(*EXPR_START) and not self.newline_before():
            self.child(children, self.parse_expr)
        return Tree('return_stmt', children)

    def parse_decl(self) -> Tree:
        """def x = e, or Type x = e"""
        children: List = [self.advance()]  # def or type
        self.eat(children, TT.IDENT, "Expected variable name")
        if self.continues(TT.ASSIGN):
            self.eat(children)
            self.child(children, self.parse_expr)
        return Tree('decl', children)

    def parse_command(self) -> Tree:
        """Command expression: println x, y"""
        children: List = [self.advance()]
        self.child(children, self.parse_expr)
        while self.continues(TT.COMMA):
            self.eat(children)
            self.child(children, self.parse_expr)
        return Tree('command', children)

    # ========================================================================
    # Expressions - Precedence Climbing
    # ========================================================================

    def parse_expr(self) -> Tree:
        """Parse expression (top level)"""
        return self.parse_assign_expr()

    def parse_assign_expr(self) -> Tree:
        left = self.parse_or_expr()

        if self.continues(TT.ASSIGN):
            if not self._is_lvalue(left):
                raise ParseError("Invalid assignment target", self.current)
            children: List = [left]
            self.eat(children)
            self.child(children, self.parse_assign_expr)
            return Tree('assignexpr', children)

        return left

    def _is_lvalue(self, node) -> bool:
        if isinstance(node, Token):
            return node.type == 'IDENT'
        if node.data == 'chain':
            last = [ch for ch in node.children if isinstance(ch, Tree)][-1]
            return last.data in ('field', 'index')
        return False

    def _binary(self, label: str, operand: Callable[[], object], *ops: TT):
        """Left-associative binary level"""
        left = operand()
        while self.continues(*ops):
            children: List = [left]
            self.eat(children)
            self.child(children, operand)
            left = Tree(label, children)
        return left

    def parse_or_expr(self):
        return self._binary('orexpr', self.parse_and_expr, TT.OR)

    def parse_and_expr(self):
        return self._binary('andexpr', self.parse_compare_expr, TT.AND)

    def parse_compare_expr(self):
        return self._binary(
            'compareexpr', self.parse_add_expr,
            TT.EQ, TT.NEQ, TT.LT, TT.LTE, TT.GT, TT.GTE,
        )

    def parse_add_expr(self):
        return self._binary('addexpr', self.parse_mul_expr, TT.PLUS, TT.MINUS)

    def parse_mul_expr(self):
        return self._binary('mulexpr', self.parse_unary_expr, TT.STAR, TT.SLASH, TT.MOD)

    def parse_unary_expr(self):
        if self.check(TT.MINUS, TT.NEG):
            children: List = [self.advance()]
            self.child(children, self.parse_unary_expr)
            return Tree('unaryexpr', children)
        return self.parse_postfix_expr()

    def parse_postfix_expr(self):
        """Parse postfix chain: primary (call | .field | [index] | closure)*"""
        primary = self.parse_primary_expr()
        children: List = [primary]

        while True:
            if self.continues(TT.LPAR):
                self.child(children, self.parse_call)
            elif self.continues(TT.DOT):
                self.child(children, self.parse_field)
            elif self.continues(TT.LSQB):
                self.child(children, self.parse_index)
            elif self.continues(TT.LBRACE) and self._accepts_trailing_closure(children):
                self.child(children, self.parse_closure)
            else:
                break

        if len(children) == 1:
            return primary
        return Tree('chain', children)

    def _accepts_trailing_closure(self, children: List) -> bool:
        last = children[-1]
        if isinstance(last, Token):
            return last.type == 'IDENT'
        return last.data in ('call', 'field')

    def parse_call(self) -> Tree:
        children: List = [self.advance()]  # (
        self.nl_depth += 1
        self._parse_comma_list(children, TT.RPAR)
        self.nl_depth -= 1
        self.eat(children, TT.RPAR, "Expected ')' after arguments")
        return Tree('call', children)

    def parse_field(self) -> Tree:
        children: List = [self.advance()]  # .
        self.eat(children, TT.IDENT, "Expected field name after '.'")
        return Tree('field', children)

    def parse_index(self) -> Tree:
        children: List = [self.advance()]  # [
        self.nl_depth += 1
        self.child(children, self.parse_expr)
        self.nl_depth -= 1
        self.eat(children, TT.RSQB, "Expected ']' after index")
        return Tree('index', children)

    def _parse_comma_list(self, children: List, closing: TT) -> None:
        while not self.check(closing):
            self.child(children, self.parse_expr)
            if not self.check(TT.COMMA):
                break
            self.eat(children)

    def parse_primary_expr(self):
        tok = self.current

        if tok.type in (TT.NUMBER, TT.STRING, TT.TRUE, TT.FALSE, TT.NULL):
            return self.advance()

        if tok.type == TT.IDENT:
            if self.peek(1).type == TT.ARROW:
                return self.parse_lambda()
            return self.advance()

        if tok.type == TT.LPAR:
            if self._scan_arrow_after_parens():
                return self.parse_lambda()
            return self.parse_paren()

        if tok.type == TT.LSQB:
            return self.parse_list()

        if tok.type == TT.LBRACE:
            return self.parse_closure()

        if tok.type == TT.EOF:
            raise ParseError("Unexpected end of input", tok)
        raise ParseError(f"Unexpected {tok.type.name}", tok)

    def parse_paren(self) -> Tree:
        children: List = [self.advance()]
        self.nl_depth += 1
        self.child(children, self.parse_expr)
        self.nl_depth -= 1
        self.eat(children, TT.RPAR, "Expected ')'")
        return Tree('paren', children)

    def parse_list(self) -> Tree:
        children: List = [self.advance()]
        self.nl_depth += 1
        self._parse_comma_list(children, TT.RSQB)
        self.nl_depth -= 1
        self.eat(children, TT.RSQB, "Expected ']' after list")
        return Tree('list', children)

    # ========================================================================
    # Lambdas and Closures
    # ========================================================================

    def _scan_arrow_after_parens(self) -> bool:
        """Check whether the '(' at the current position closes into '->'"""
        depth = 0
        offset = 0
        while True:
            tok = self.peek(offset)
            if tok.type == TT.EOF:
                return False
            if tok.type in OPENERS:
                depth += 1
            elif tok.type in (TT.RPAR, TT.RSQB, TT.RBRACE):
                depth -= 1
                if depth == 0:
                    return tok.type == TT.RPAR and self.peek(offset + 1).type == TT.ARROW
            offset += 1

    def _scan_arrow_in_closure(self) -> bool:
        """Check for an '->' at nesting depth 0 before the closure's first ';' or '}'"""
        if not self.check(TT.IDENT, TT.DEF):
            return False

        depth = 0
        for idx in range(self.pos, len(self.tokens)):
            tok = self.tokens[idx]
            if tok.type in TRIVIA:
                continue
            if tok.type in OPENERS:
                depth += 1
            elif tok.type in (TT.RPAR, TT.RSQB, TT.RBRACE):
                if depth == 0:
                    return False
                depth -= 1
            elif depth == 0 and tok.type == TT.ARROW:
                return True
            elif depth == 0 and tok.type in (TT.SEMI, TT.EOF):
                return False
        return False

    def _parse_closure_header(self) -> Optional[List]:
        """
        Try to parse `params ->` right after a closure's '{'.

        Returns the header children, or None with the position restored when
        the closure declares no parameters. Line breaks and comments may
        appear anywhere in the header, as in a parenthesized parameter list,
        so a lambda's parameters always read back as the same closure header.
        """
        if not self._scan_arrow_in_closure():
            return None

        start, depth = self.pos, self.nl_depth
        header: List = []
        self.nl_depth += 1
        try:
            self.child(header, lambda: self.parse_param_list(parenthesized=False))
            self.eat(header, TT.ARROW)
        except ParseError:
            self.pos = start
            return None
        finally:
            self.nl_depth = depth
        return header

    def parse_lambda(self) -> Tree:
        """
        Lambda expression: (params) -> body, or name -> body

        The body is a brace block or a single expression. When nothing that
        can start an expression follows the arrow, the lambda has no body.
        """
        if self.check(TT.LPAR):
            params = self.parse_param_list(parenthesized=True)
        else:
            params = Tree('paramlist', [Tree('param', [self.advance()])])

        children: List = [params]
        self.eat(children, TT.ARROW)

        if self.check(TT.LBRACE):
            self.child(children, self.parse_block)
        elif self.check(*EXPR_START):
            self.child(children, self.parse_expr)

        return Tree('lambda', children)

    def parse_param_list(self, parenthesized: bool) -> Tree:
        """Parse lambda/closure parameters, with or without parentheses"""
        children: List = []
        closing = TT.RPAR if parenthesized else TT.ARROW

        if parenthesized:
            children.append(self.advance())
            self.nl_depth += 1

        while not self.check(closing, TT.EOF):
            self.child(children, self.parse_param)
            if not self.check(TT.COMMA):
                break
            self.eat(children)

        if parenthesized:
            self.nl_depth -= 1
            self.eat(children, TT.RPAR, "Expected ')' after parameters")

        return Tree('paramlist', children)

    def parse_param(self) -> Tree:
        """[Type] name [= default]"""
        children: List = []

        if self.check(TT.IDENT, TT.DEF) and self.peek(1).type == TT.IDENT:
            children.append(self.advance())  # type
            self.eat(children, TT.IDENT)
        else:
            children.append(self.expect(TT.IDENT, "Expected parameter name"))

        if self.check(TT.ASSIGN):
            self.eat(children)
            self.child(children, self.parse_or_expr)

        return Tree('param', children)

    def parse_block(self) -> Tree:
        """Brace-delimited lambda body: { stmts }"""
        children: List = [self.advance()]
        self.parse_statements(children, TT.RBRACE)
        self.eat(children, TT.RBRACE, "Expected '}' to close block")
        return Tree('block', children)

    def parse_closure(self) -> Tree:
        """
        Closure literal:
        { stmts }
        { -> stmts }
        { a, b -> stmts }
        """
        children: List = [self.advance()]

        if self.check(TT.ARROW):
            self.eat(children)
        else:
            header = self._parse_closure_header()
            if header is not None:
                children.extend(header)

        self.parse_statements(children, TT.RBRACE)
        self.eat(children, TT.RBRACE, "Expected '}' to close closure")
        return Tree('closure', children)


# ============================================================================
# Entry Points
# ============================================================================

def parse_source(source: str) -> Tree:
    """
    Parse Groovy source code to a lossless tree rooted at 'file'.

    Args:
        source: Source code to parse
    """
    from .lexer_rd import tokenize

    tokens = tokenize(source)
    parser = Parser(tokens)
    return parser.parse()


def parse_closure(source: str) -> Tree:
    """
    Parse text that must be exactly one closure literal.
    Used when substituting synthesized closure text into a document.
    """
    from .lexer_rd import tokenize

    tokens = tokenize(source)
    parser = Parser(tokens)

    first = parser._at(0)
    if first.type != TT.LBRACE:
        raise ParseError("Expected closure literal", first)

    closure = parser.parse_closure()

    rest = parser._at(parser.pos)
    if rest.type != TT.EOF:
        raise ParseError("Unexpected text after closure literal", rest)
    return closure

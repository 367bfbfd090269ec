"""
Lexer for the Groovy lambda parser

Tokenizes Groovy source into a lossless token stream: whitespace, newlines and
comments are emitted as trivia tokens so that concatenating every token value
reproduces the input exactly.

Features:
- Single-pass tokenization
- Position tracking (line, column, absolute offsets)
- Longest-match operators ('->' before '-')
"""

from typing import List, Optional

from .token_types import TT, Tok

# ============================================================================
# Lexer Implementation
# ============================================================================

class Lexer:
    """
    Groovy lexer that keeps trivia.

    Every scan_* method consumes at least one character and emits exactly one
    token, so the token values tile the source without gaps.
    """

    KEYWORDS = {
        'def': TT.DEF,
        'return': TT.RETURN,
        'true': TT.TRUE,
        'false': TT.FALSE,
        'null': TT.NULL,
    }

    # Longest matches first to handle prefixes correctly
    OPERATORS = [
        # Two-character operators
        ('->', TT.ARROW),
        ('==', TT.EQ),
        ('!=', TT.NEQ),
        ('<=', TT.LTE),
        ('>=', TT.GTE),
        ('&&', TT.AND),
        ('||', TT.OR),

        # Single-character operators
        ('+', TT.PLUS),
        ('-', TT.MINUS),
        ('*', TT.STAR),
        ('/', TT.SLASH),
        ('%', TT.MOD),
        ('<', TT.LT),
        ('>', TT.GT),
        ('!', TT.NEG),
        ('=', TT.ASSIGN),
        ('(', TT.LPAR),
        (')', TT.RPAR),
        ('[', TT.LSQB),
        (']', TT.RSQB),
        ('{', TT.LBRACE),
        ('}', TT.RBRACE),
        ('.', TT.DOT),
        (',', TT.COMMA),
        (';', TT.SEMI),
    ]

    def __init__(self, source: str):
        self.source = source
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Tok] = []

        # Start of the token currently being scanned
        self.start = 0
        self.start_line = 1
        self.start_column = 1

    # ========================================================================
    # Main Tokenization
    # ========================================================================

    def tokenize(self) -> List[Tok]:
        """Tokenize entire source, return token list"""
        while self.pos < len(self.source):
            self.scan_token()

        self.mark()
        self.emit(TT.EOF, None)
        return self.tokens

    def mark(self):
        self.start = self.pos
        self.start_line = self.line
        self.start_column = self.column

    def scan_token(self):
        """Scan next token"""
        self.mark()
        ch = self.peek()

        if ch in (' ', '\t', '\f'):
            self.scan_whitespace()
            return

        if ch in ('\n', '\r'):
            self.scan_newline()
            return

        # Comments
        if ch == '/' and self.peek(1) == '/':
            self.scan_line_comment()
            return
        if ch == '/' and self.peek(1) == '*':
            self.scan_block_comment()
            return

        if ch in ('"', "'"):
            self.scan_string()
            return

        if ch.isdigit():
            self.scan_number()
            return

        if ch.isalpha() or ch in ('_', '$'):
            self.scan_identifier()
            return

        self.scan_operator()

    # ========================================================================
    # Token Scanners
    # ========================================================================

    def scan_whitespace(self):
        value = ''
        while self.peek() in (' ', '\t', '\f'):
            value += self.advance()
        self.emit(TT.WS, value)

    def scan_newline(self):
        """Scan newline: LF, CRLF or a lone CR"""
        if self.peek() == '\r' and self.peek(1) == '\n':
            value = self.advance(2)
        else:
            value = self.advance()

        self.emit(TT.NEWLINE, value)
        self.line += 1
        self.column = 1

    def scan_line_comment(self):
        value = ''
        while self.pos < len(self.source) and self.peek() not in ('\n', '\r'):
            value += self.advance()
        self.emit(TT.LINE_COMMENT, value)

    def scan_block_comment(self):
        value = self.advance(2)  # /*

        while self.pos < len(self.source):
            if self.peek() == '*' and self.peek(1) == '/':
                value += self.advance(2)
                self.emit(TT.BLOCK_COMMENT, value)
                return

            ch = self.advance()
            value += ch
            if ch == '\n' or (ch == '\r' and self.peek() != '\n'):
                self.line += 1
                self.column = 1

        raise LexError("Unterminated block comment", self.start_line, self.start_column)

    def scan_string(self):
        """Scan string literal: "..." or '...', escapes kept verbatim"""
        quote = self.advance()
        value = quote

        while self.pos < len(self.source) and self.peek() != quote:
            if self.peek() in ('\n', '\r'):
                break
            if self.peek() == '\\':
                value += self.advance()
                if self.pos < len(self.source):
                    value += self.advance()
            else:
                value += self.advance()

        if self.pos >= len(self.source) or self.peek() != quote:
            raise LexError("Unterminated string", self.start_line, self.start_column)

        value += self.advance()  # Closing quote
        self.emit(TT.STRING, value)

    def scan_number(self):
        """Scan number literal"""
        value = ''

        # Integer part
        while self.peek().isdigit():
            value += self.advance()

        # Decimal part
        if self.peek() == '.' and self.peek(1).isdigit():
            value += self.advance()  # .
            while self.peek().isdigit():
                value += self.advance()

        # Scientific notation
        if self.peek() in ('e', 'E') and (
            self.peek(1).isdigit() or (self.peek(1) in ('+', '-') and self.peek(2).isdigit())
        ):
            value += self.advance()
            if self.peek() in ('+', '-'):
                value += self.advance()
            while self.peek().isdigit():
                value += self.advance()

        self.emit(TT.NUMBER, value)

    def scan_identifier(self):
        """Scan identifier or keyword"""
        value = ''

        while self.peek().isalnum() or self.peek() in ('_', '$'):
            value += self.advance()

        token_type = self.KEYWORDS.get(value, TT.IDENT)
        self.emit(token_type, value)

    def scan_operator(self):
        """Scan operators and punctuation"""
        for op_str, op_type in self.OPERATORS:
            if self.source.startswith(op_str, self.pos):
                self.advance(len(op_str))
                self.emit(op_type, op_str)
                return

        ch = self.peek()
        raise LexError(f"Unexpected character '{ch}'", self.line, self.column)

    # ========================================================================
    # Utilities
    # ========================================================================

    def peek(self, offset: int = 0) -> str:
        """Look ahead at character"""
        idx = self.pos + offset
        if idx < len(self.source):
            return self.source[idx]
        return '\0'

    def advance(self, n: int = 1) -> str:
        """Consume n characters and return them as a string"""
        if n < 0:
            raise ValueError(f"advance() requires n >= 0, got {n}")
        result = self.source[self.pos:self.pos + n]
        self.pos += len(result)
        self.column += len(result)
        return result

    def emit(self, token_type: TT, value):
        """Emit a token spanning from the last mark to the current position"""
        tok = Tok(
            type=token_type,
            value=value,
            line=self.start_line,
            column=self.start_column,
            start_pos=self.start,
            end_pos=self.pos,
        )
        self.tokens.append(tok)


class LexError(Exception):
    """Lexical analysis error"""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(
            f"{message} at line {line}, col {column}" if line is not None else message
        )


def tokenize(source: str) -> List[Tok]:
    """Convenience function to tokenize source"""
    lexer = Lexer(source)
    return lexer.tokenize()

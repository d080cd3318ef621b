"""Lexer for the Esolang language.

The lexer turns source text into tokens one at a time. Whitespace and
``//`` comments are skipped. Malformed input never raises: it is reported
as an ILLEGAL token and left for the parser to turn into a syntax error.
"""

from __future__ import annotations

from typing import Iterator, List

from . import token
from .token import Token

TWO_CHAR_OPERATORS = {
    '==': token.EQ,
    '!=': token.NOT_EQ,
    '<=': token.LT_EQ,
    '>=': token.GT_EQ,
    '&&': token.AND,
    '||': token.OR,
    '+=': token.PLUS_EQ,
    '-=': token.MINUS_EQ,
    '*=': token.ASTERISK_EQ,
    '++': token.PLUS_PLUS,
    '--': token.MINUS_MINUS,
    '::': token.DOUBLE_COLON,
    ':=': token.BIND,
}

SINGLE_CHAR_OPERATORS = {
    '=': token.ASSIGN,
    '+': token.PLUS,
    '-': token.MINUS,
    '!': token.BANG,
    '*': token.ASTERISK,
    '/': token.SLASH,
    '%': token.MOD,
    '<': token.LT,
    '>': token.GT,
    ',': token.COMMA,
    ';': token.SEMICOLON,
    ':': token.COLON,
    '.': token.PERIOD,
    '(': token.LPAREN,
    ')': token.RPAREN,
    '{': token.LBRACE,
    '}': token.RBRACE,
    '[': token.LBRACKET,
    ']': token.RBRACKET,
}

ESCAPES = {
    'n': '\n',
    'r': '\r',
    't': '\t',
    '"': '"',
    '\\': '\\',
}


def is_letter(ch: str) -> bool:
    return ch.isalpha() or ch == '_'


def is_digit(ch: str) -> bool:
    return '0' <= ch <= '9'


class Lexer:
    def __init__(self, source: str, filename: str = '<input>'):
        self.source = source
        self.filename = filename
        self.pos = 0
        self.line = 1
        self.column = 1

    @property
    def char(self) -> str:
        if self.pos < len(self.source):
            return self.source[self.pos]
        return ''

    def peek_char(self, offset: int = 1) -> str:
        index = self.pos + offset
        if index < len(self.source):
            return self.source[index]
        return ''

    def advance(self, n: int = 1):
        for _ in range(n):
            if self.pos >= len(self.source):
                return
            if self.source[self.pos] == '\n':
                self.line += 1
                self.column = 1
            else:
                self.column += 1
            self.pos += 1

    def make_token(self, type_: str, literal: str, line: int, column: int) -> Token:
        return Token(type_, literal, line, column, self.filename)

    def skip_whitespace_and_comments(self):
        while True:
            if self.char and self.char.isspace():
                self.advance()
            elif self.char == '/' and self.peek_char() == '/':
                while self.char and self.char != '\n':
                    self.advance()
            else:
                return

    def next_token(self) -> Token:
        """Return the next token, or EOF once the input is exhausted."""
        self.skip_whitespace_and_comments()
        line, column = self.line, self.column
        ch = self.char
        if ch == '':
            return self.make_token(token.EOF, '', line, column)
        if is_letter(ch):
            ident = self.read_identifier()
            return self.make_token(token.lookup_ident(ident), ident, line, column)
        if is_digit(ch):
            type_, literal = self.read_number()
            return self.make_token(type_, literal, line, column)
        if ch == '"':
            ok, literal = self.read_string()
            if not ok:
                return self.make_token(token.ILLEGAL, '"', line, column)
            return self.make_token(token.STRING, literal, line, column)
        pair = ch + self.peek_char()
        if pair in TWO_CHAR_OPERATORS:
            self.advance(2)
            return self.make_token(TWO_CHAR_OPERATORS[pair], pair, line, column)
        self.advance()
        if ch in SINGLE_CHAR_OPERATORS:
            return self.make_token(SINGLE_CHAR_OPERATORS[ch], ch, line, column)
        return self.make_token(token.ILLEGAL, ch, line, column)

    def tokens(self) -> Iterator[Token]:
        """Yield every token up to and including EOF."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == token.EOF:
                return

    def read_word(self) -> str:
        start = self.pos
        while self.char and (is_letter(self.char) or is_digit(self.char)):
            self.advance()
        return self.source[start:self.pos]

    def read_identifier(self) -> str:
        ident = self.read_word()
        if self.char == '.' and is_letter(self.peek_char()):
            saved = (self.pos, self.line, self.column)
            self.advance()
            dotted = ident + '.' + self.read_word()
            if token.is_namespaced(dotted):
                return dotted
            # not a known namespace: leave the '.' for method-call syntax
            self.pos, self.line, self.column = saved
        return ident

    def read_number(self):
        start = self.pos
        while is_digit(self.char):
            self.advance()
        if self.char == '.' and is_digit(self.peek_char()):
            self.advance()
            while is_digit(self.char):
                self.advance()
            return token.FLOAT, self.source[start:self.pos]
        return token.INT, self.source[start:self.pos]

    def read_string(self):
        """Read a string literal, returning (terminated, text)."""
        self.advance()  # opening quote
        chars: List[str] = []
        while True:
            ch = self.char
            if ch == '':
                return False, ''.join(chars)
            if ch == '"':
                self.advance()
                return True, ''.join(chars)
            if ch == '\\':
                nxt = self.peek_char()
                if nxt == '':
                    self.advance()
                    return False, ''.join(chars)
                if nxt == '\r' and self.peek_char(2) == '\n':
                    self.advance(3)
                    continue
                self.advance(2)
                if nxt == '\n':
                    continue
                if nxt in ESCAPES:
                    chars.append(ESCAPES[nxt])
                else:
                    chars.append('\\' + nxt)
                continue
            chars.append(ch)
            self.advance()

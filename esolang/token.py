"""Token definitions for the Esolang lexer.

A token is the smallest unit the parser works with. Each token keeps the
text it was built from together with the position it was read at, so
that later stages can report errors as ``file:line:column: message``.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Token:
    type: str
    literal: str
    line: int = 0
    column: int = 0
    filename: str = '<input>'

    def position(self) -> str:
        return f"{self.filename}:{self.line}:{self.column}"


ILLEGAL = 'ILLEGAL'
EOF = 'EOF'

# Identifiers and literals
IDENT = 'IDENT'
INT = 'INT'
FLOAT = 'FLOAT'
STRING = 'STRING'

# Operators
ASSIGN = '='
PLUS = '+'
MINUS = '-'
BANG = '!'
ASTERISK = '*'
SLASH = '/'
MOD = '%'
LT = '<'
GT = '>'
LT_EQ = '<='
GT_EQ = '>='
EQ = '=='
NOT_EQ = '!='
AND = '&&'
OR = '||'
PLUS_EQ = '+='
MINUS_EQ = '-='
ASTERISK_EQ = '*='
PLUS_PLUS = '++'
MINUS_MINUS = '--'
BIND = ':='

# Delimiters
COMMA = ','
SEMICOLON = ';'
COLON = ':'
DOUBLE_COLON = '::'
PERIOD = '.'
LPAREN = '('
RPAREN = ')'
LBRACE = '{'
RBRACE = '}'
LBRACKET = '['
RBRACKET = ']'

# Keywords
FUNCTION = 'FUNCTION'
DEFINE_FUNCTION = 'FUNC'
LET = 'LET'
TRUE = 'TRUE'
FALSE = 'FALSE'
IF = 'IF'
ELIF = 'ELIF'
ELSE = 'ELSE'
RETURN = 'RETURN'
WHEN = 'WHEN'
IMPORT = 'IMPORT'

KEYWORDS = {
    'fn': FUNCTION,
    'func': DEFINE_FUNCTION,
    'let': LET,
    'true': TRUE,
    'false': FALSE,
    'if': IF,
    'elif': ELIF,
    'else': ELSE,
    'return': RETURN,
    'when': WHEN,
    'import': IMPORT,
    # word spellings of operators
    'and': AND,
    'or': OR,
    'is': EQ,
    'is_not': NOT_EQ,
}

# Word operators are normalised to their symbolic form so that the
# evaluator only ever sees one spelling.
CANONICAL_LITERALS = {
    'and': '&&',
    'or': '||',
    'is': '==',
    'is_not': '!=',
}

# Dotted names the lexer keeps as a single identifier.
NAMESPACED_BUILTINS = frozenset({
    'math.random_int',
    'math.random_float',
})

TYPE_NAMESPACES = ('string', 'array', 'integer', 'float', 'hash', 'object')


def lookup_ident(ident: str) -> str:
    """Return the keyword token type for ``ident`` or IDENT."""
    return KEYWORDS.get(ident, IDENT)


def is_namespaced(name: str) -> bool:
    if name in NAMESPACED_BUILTINS:
        return True
    prefix, _, rest = name.partition('.')
    return bool(rest) and prefix in TYPE_NAMESPACES

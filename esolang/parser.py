"""Pratt parser for the Esolang language.

Each token type may register a prefix handler (the token starts an
expression), an infix handler (the token continues the expression built
so far) and a postfix handler. ``parse_expression`` keeps folding infix
operators into the left-hand side for as long as the upcoming operator
binds tighter than the caller's precedence.

Syntax errors are collected rather than raised, so that one pass reports
as many problems as possible.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from . import ast
from . import token
from .errors import ParseError
from .lexer import Lexer
from .token import Token

# Precedence levels, lowest first
LOWEST = 1
ASSIGN = 2        # = += -= *= :=
EQUALS = 3        # == !=
ANDOR = 4         # && ||
LESSGREATER = 5   # < > <= >=
SUM = 6           # + -
MODULUS = 7       # %
PRODUCT = 8       # * /
PREFIX = 9        # -x !x
CALL = 10         # f(x) obj.m(x)
INDEX = 11        # a[i] a::name

PRECEDENCES = {
    token.ASSIGN: ASSIGN,
    token.PLUS_EQ: ASSIGN,
    token.MINUS_EQ: ASSIGN,
    token.ASTERISK_EQ: ASSIGN,
    token.BIND: ASSIGN,
    token.EQ: EQUALS,
    token.NOT_EQ: EQUALS,
    token.AND: ANDOR,
    token.OR: ANDOR,
    token.LT: LESSGREATER,
    token.GT: LESSGREATER,
    token.LT_EQ: LESSGREATER,
    token.GT_EQ: LESSGREATER,
    token.PLUS: SUM,
    token.MINUS: SUM,
    token.MOD: MODULUS,
    token.ASTERISK: PRODUCT,
    token.SLASH: PRODUCT,
    token.LPAREN: CALL,
    token.PERIOD: CALL,
    token.LBRACKET: INDEX,
    token.DOUBLE_COLON: INDEX,
}

MAX_INT = 2 ** 63 - 1

# Deepest allowed nesting of expressions (parentheses, blocks, literals).
DEFAULT_MAX_NESTING = 100


class NestingTooDeep(Exception):
    """Unwinds the parser once the nesting limit has been reported."""


class Parser:
    def __init__(self, lexer: Lexer, max_depth: int = DEFAULT_MAX_NESTING):
        self.lexer = lexer
        self.errors: List[str] = []
        self.max_depth = max_depth
        self.depth = 0
        self.prev_token: Optional[Token] = None
        self.cur_token: Token = lexer.next_token()
        self.peek_token: Token = lexer.next_token()

        self.prefix_parse_fns: Dict[str, Callable[[], Optional[ast.Expression]]] = {
            token.IDENT: self.parse_identifier,
            token.INT: self.parse_integer_literal,
            token.FLOAT: self.parse_float_literal,
            token.STRING: self.parse_string_literal,
            token.TRUE: self.parse_boolean,
            token.FALSE: self.parse_boolean,
            token.BANG: self.parse_prefix_expression,
            token.MINUS: self.parse_prefix_expression,
            token.LPAREN: self.parse_grouped_expression,
            token.LBRACKET: self.parse_array_literal,
            token.LBRACE: self.parse_hash_literal,
            token.IF: self.parse_if_expression,
            token.WHEN: self.parse_while_expression,
            token.FUNCTION: self.parse_function_literal,
            token.DEFINE_FUNCTION: self.parse_function_define,
            token.IMPORT: self.parse_import_expression,
        }
        self.infix_parse_fns: Dict[str, Callable[[ast.Expression], Optional[ast.Expression]]] = {
            token.LPAREN: self.parse_call_expression,
            token.LBRACKET: self.parse_index_expression,
            token.DOUBLE_COLON: self.parse_selector_expression,
            token.PERIOD: self.parse_method_call,
            token.BIND: self.parse_bind_expression,
        }
        for type_ in (token.PLUS, token.MINUS, token.ASTERISK, token.SLASH, token.MOD,
                      token.EQ, token.NOT_EQ, token.LT, token.GT, token.LT_EQ, token.GT_EQ,
                      token.AND, token.OR):
            self.infix_parse_fns[type_] = self.parse_infix_expression
        for type_ in (token.ASSIGN, token.PLUS_EQ, token.MINUS_EQ, token.ASTERISK_EQ):
            self.infix_parse_fns[type_] = self.parse_assign_statement
        self.postfix_parse_fns: Dict[str, Callable[[], Optional[ast.Expression]]] = {
            token.PLUS_PLUS: self.parse_postfix_expression,
            token.MINUS_MINUS: self.parse_postfix_expression,
        }

    # Token stream helpers

    def next_token(self):
        self.prev_token = self.cur_token
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def cur_token_is(self, type_: str) -> bool:
        return self.cur_token.type == type_

    def peek_token_is(self, type_: str) -> bool:
        return self.peek_token.type == type_

    def expect_peek(self, type_: str) -> bool:
        if self.peek_token_is(type_):
            self.next_token()
            return True
        self.peek_error(type_)
        return False

    def peek_precedence(self) -> int:
        return PRECEDENCES.get(self.peek_token.type, LOWEST)

    def cur_precedence(self) -> int:
        return PRECEDENCES.get(self.cur_token.type, LOWEST)

    # Error reporting

    def error(self, tok: Token, message: str):
        self.errors.append(f"{tok.position()}: {message}")

    def illegal_message(self, tok: Token) -> str:
        if tok.literal == '"':
            return "unterminated string literal"
        return f"illegal character {tok.literal!r}"

    def peek_error(self, type_: str):
        tok = self.peek_token
        if tok.type == token.ILLEGAL:
            self.error(tok, self.illegal_message(tok))
            return
        self.error(tok, f"expected next token to be {type_}, got {tok.type} instead")

    def no_prefix_parse_fn_error(self, tok: Token):
        if tok.type == token.ILLEGAL:
            self.error(tok, self.illegal_message(tok))
            return
        self.error(tok, f"no prefix parse function for {tok.type} found")

    # Statements

    def parse_program(self) -> ast.Program:
        program = ast.Program(self.cur_token)
        try:
            while not self.cur_token_is(token.EOF):
                if not self.cur_token_is(token.SEMICOLON):
                    stmt = self.parse_statement()
                    if stmt is not None:
                        program.statements.append(stmt)
                self.next_token()
        except NestingTooDeep:
            pass  # already recorded in self.errors
        except RecursionError:
            self.error(self.cur_token, "expression nested too deeply")
        return program

    def parse_statement(self) -> Optional[ast.Statement]:
        if self.cur_token_is(token.LET):
            return self.parse_let_statement()
        if self.cur_token_is(token.RETURN):
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> Optional[ast.LetStatement]:
        tok = self.cur_token
        if not self.expect_peek(token.IDENT):
            return None
        name = ast.Identifier(self.cur_token, self.cur_token.literal)
        if not self.expect_peek(token.ASSIGN):
            return None
        self.next_token()
        value = self.parse_expression(LOWEST)
        if self.peek_token_is(token.SEMICOLON):
            self.next_token()
        if value is None:
            return None
        return ast.LetStatement(tok, name, value)

    def parse_return_statement(self) -> ast.ReturnStatement:
        tok = self.cur_token
        if self.peek_token_is(token.SEMICOLON):
            self.next_token()
            return ast.ReturnStatement(tok)
        if self.peek_token_is(token.RBRACE) or self.peek_token_is(token.EOF):
            return ast.ReturnStatement(tok)
        self.next_token()
        value = self.parse_expression(LOWEST)
        if self.peek_token_is(token.SEMICOLON):
            self.next_token()
        return ast.ReturnStatement(tok, value)

    def parse_expression_statement(self) -> Optional[ast.ExpressionStatement]:
        tok = self.cur_token
        expression = self.parse_expression(LOWEST)
        if self.peek_token_is(token.SEMICOLON):
            self.next_token()
        if expression is None:
            return None
        return ast.ExpressionStatement(tok, expression)

    def parse_block_statement(self) -> ast.BlockStatement:
        block = ast.BlockStatement(self.cur_token)
        self.next_token()
        while not self.cur_token_is(token.RBRACE):
            if self.cur_token_is(token.EOF):
                self.error(self.cur_token, "unterminated block, expected }")
                return block
            if not self.cur_token_is(token.SEMICOLON):
                stmt = self.parse_statement()
                if stmt is not None:
                    block.statements.append(stmt)
            self.next_token()
        return block

    # Expressions

    def parse_expression(self, precedence: int) -> Optional[ast.Expression]:
        if self.depth >= self.max_depth:
            self.error(self.cur_token, "expression nested too deeply")
            raise NestingTooDeep()
        self.depth += 1
        try:
            return self.parse_operators(precedence)
        finally:
            self.depth -= 1

    def parse_operators(self, precedence: int) -> Optional[ast.Expression]:
        postfix = self.postfix_parse_fns.get(self.cur_token.type)
        if postfix is not None:
            return postfix()
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur_token)
            return None
        left = prefix()
        while left is not None and not self.peek_token_is(token.SEMICOLON) \
                and precedence < self.peek_precedence():
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left
            self.next_token()
            left = infix(left)
        return left

    def parse_identifier(self) -> ast.Identifier:
        return ast.Identifier(self.cur_token, self.cur_token.literal)

    def parse_integer_literal(self) -> Optional[ast.IntegerLiteral]:
        value = int(self.cur_token.literal)
        if value > MAX_INT:
            self.error(self.cur_token, f"could not parse {self.cur_token.literal} as integer")
            return None
        return ast.IntegerLiteral(self.cur_token, value)

    def parse_float_literal(self) -> ast.FloatLiteral:
        return ast.FloatLiteral(self.cur_token, float(self.cur_token.literal))

    def parse_string_literal(self) -> ast.StringLiteral:
        return ast.StringLiteral(self.cur_token, self.cur_token.literal)

    def parse_boolean(self) -> ast.BooleanLiteral:
        return ast.BooleanLiteral(self.cur_token, self.cur_token_is(token.TRUE))

    def parse_prefix_expression(self) -> Optional[ast.PrefixExpression]:
        tok = self.cur_token
        self.next_token()
        right = self.parse_expression(PREFIX)
        if right is None:
            return None
        return ast.PrefixExpression(tok, tok.literal, right)

    def parse_postfix_expression(self) -> Optional[ast.PostfixExpression]:
        target = self.prev_token
        if target is None or target.type != token.IDENT:
            self.error(self.cur_token, f"{self.cur_token.literal} must follow an identifier")
            return None
        return ast.PostfixExpression(target, self.cur_token.literal)

    def parse_infix_expression(self, left: ast.Expression) -> Optional[ast.InfixExpression]:
        tok = self.cur_token
        operator = token.CANONICAL_LITERALS.get(tok.literal, tok.literal)
        precedence = self.cur_precedence()
        self.next_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None
        return ast.InfixExpression(tok, left, operator, right)

    def parse_assign_statement(self, left: ast.Expression) -> Optional[ast.AssignStatement]:
        tok = self.cur_token
        if not isinstance(left, ast.Identifier):
            self.error(tok, f"cannot assign to {left}, expected an identifier")
            return None
        self.next_token()
        value = self.parse_expression(LOWEST)
        if value is None:
            return None
        return ast.AssignStatement(tok, left, tok.literal, value)

    def parse_bind_expression(self, left: ast.Expression) -> Optional[ast.BindExpression]:
        tok = self.cur_token
        if not isinstance(left, ast.Identifier):
            self.error(tok, f"expected identifier on left side of :=, got {left}")
            return None
        self.next_token()
        value = self.parse_expression(LOWEST)
        if value is None:
            return None
        return ast.BindExpression(tok, left, value)

    def parse_grouped_expression(self) -> Optional[ast.Expression]:
        self.next_token()
        expression = self.parse_expression(LOWEST)
        if not self.expect_peek(token.RPAREN):
            return None
        return expression

    def parse_if_expression(self) -> Optional[ast.IfExpression]:
        tok = self.cur_token
        if not self.expect_peek(token.LPAREN):
            return None
        self.next_token()
        condition = self.parse_expression(LOWEST)
        if condition is None or not self.expect_peek(token.RPAREN):
            return None
        if not self.expect_peek(token.LBRACE):
            return None
        consequence = self.parse_block_statement()
        alternative = None
        if self.peek_token_is(token.ELIF):
            self.next_token()
            elif_tok = self.cur_token
            nested = self.parse_if_expression()
            if nested is None:
                return None
            alternative = ast.BlockStatement(elif_tok, [ast.ExpressionStatement(elif_tok, nested)])
        elif self.peek_token_is(token.ELSE):
            self.next_token()
            if not self.expect_peek(token.LBRACE):
                return None
            alternative = self.parse_block_statement()
        return ast.IfExpression(tok, condition, consequence, alternative)

    def parse_while_expression(self) -> Optional[ast.WhileExpression]:
        tok = self.cur_token
        if not self.expect_peek(token.LPAREN):
            return None
        self.next_token()
        condition = self.parse_expression(LOWEST)
        if condition is None or not self.expect_peek(token.RPAREN):
            return None
        if not self.expect_peek(token.LBRACE):
            return None
        return ast.WhileExpression(tok, condition, self.parse_block_statement())

    def parse_parameter_name(self) -> Optional[ast.Identifier]:
        if not self.cur_token_is(token.IDENT):
            self.error(self.cur_token, f"expected parameter name, got {self.cur_token.type}")
            return None
        return ast.Identifier(self.cur_token, self.cur_token.literal)

    def parse_function_parameters(self) -> Optional[List[ast.Identifier]]:
        params: List[ast.Identifier] = []
        if self.peek_token_is(token.RPAREN):
            self.next_token()
            return params
        self.next_token()
        while True:
            param = self.parse_parameter_name()
            if param is None:
                return None
            params.append(param)
            if not self.peek_token_is(token.COMMA):
                break
            self.next_token()
            self.next_token()
        if not self.expect_peek(token.RPAREN):
            return None
        return params

    def parse_function_literal(self) -> Optional[ast.FunctionLiteral]:
        tok = self.cur_token
        if not self.expect_peek(token.LPAREN):
            return None
        params = self.parse_function_parameters()
        if params is None or not self.expect_peek(token.LBRACE):
            return None
        return ast.FunctionLiteral(tok, params, self.parse_block_statement())

    def parse_function_define(self) -> Optional[ast.FunctionDefine]:
        tok = self.cur_token
        if not self.expect_peek(token.IDENT):
            return None
        name = ast.Identifier(self.cur_token, self.cur_token.literal)
        if not self.expect_peek(token.LPAREN):
            return None
        params: List[ast.Identifier] = []
        defaults: Dict[str, ast.Expression] = {}
        if self.peek_token_is(token.RPAREN):
            self.next_token()
        else:
            self.next_token()
            while True:
                param = self.parse_parameter_name()
                if param is None:
                    return None
                params.append(param)
                if self.peek_token_is(token.ASSIGN):
                    self.next_token()
                    self.next_token()
                    default = self.parse_expression(ASSIGN)
                    if default is None:
                        return None
                    defaults[param.value] = default
                if not self.peek_token_is(token.COMMA):
                    break
                self.next_token()
                self.next_token()
            if not self.expect_peek(token.RPAREN):
                return None
        if not self.expect_peek(token.LBRACE):
            return None
        return ast.FunctionDefine(tok, name, params, defaults, self.parse_block_statement())

    def parse_expression_list(self, end: str) -> Optional[List[ast.Expression]]:
        items: List[ast.Expression] = []
        if self.peek_token_is(end):
            self.next_token()
            return items
        self.next_token()
        while True:
            item = self.parse_expression(LOWEST)
            if item is None:
                return None
            items.append(item)
            if not self.peek_token_is(token.COMMA):
                break
            self.next_token()
            if self.peek_token_is(end):
                break
            self.next_token()
        if not self.expect_peek(end):
            return None
        return items

    def parse_array_literal(self) -> Optional[ast.ArrayLiteral]:
        tok = self.cur_token
        elements = self.parse_expression_list(token.RBRACKET)
        if elements is None:
            return None
        return ast.ArrayLiteral(tok, elements)

    def parse_hash_literal(self) -> Optional[ast.HashLiteral]:
        hash_literal = ast.HashLiteral(self.cur_token)
        while not self.peek_token_is(token.RBRACE):
            self.next_token()
            key = self.parse_expression(LOWEST)
            if key is None or not self.expect_peek(token.COLON):
                return None
            self.next_token()
            value = self.parse_expression(LOWEST)
            if value is None:
                return None
            hash_literal.pairs.append((key, value))
            if not self.peek_token_is(token.RBRACE) and not self.expect_peek(token.COMMA):
                return None
        self.next_token()
        return hash_literal

    def parse_call_expression(self, function: ast.Expression) -> Optional[ast.CallExpression]:
        tok = self.cur_token
        arguments = self.parse_expression_list(token.RPAREN)
        if arguments is None:
            return None
        return ast.CallExpression(tok, function, arguments)

    def parse_index_expression(self, left: ast.Expression) -> Optional[ast.IndexExpression]:
        tok = self.cur_token
        self.next_token()
        index = self.parse_expression(LOWEST)
        if index is None or not self.expect_peek(token.RBRACKET):
            return None
        return ast.IndexExpression(tok, left, index)

    def parse_selector_expression(self, left: ast.Expression) -> Optional[ast.IndexExpression]:
        tok = self.cur_token
        if not self.expect_peek(token.IDENT):
            return None
        key = ast.StringLiteral(self.cur_token, self.cur_token.literal)
        return ast.IndexExpression(tok, left, key)

    def parse_method_call(self, receiver: ast.Expression) -> Optional[ast.ObjectCallExpression]:
        tok = self.cur_token
        if not self.expect_peek(token.IDENT):
            return None
        method = ast.Identifier(self.cur_token, self.cur_token.literal)
        if not self.expect_peek(token.LPAREN):
            return None
        call = self.parse_call_expression(method)
        if call is None:
            return None
        return ast.ObjectCallExpression(tok, receiver, call)

    def parse_import_expression(self) -> Optional[ast.ImportExpression]:
        tok = self.cur_token
        if not self.expect_peek(token.LPAREN):
            return None
        self.next_token()
        name = self.parse_expression(LOWEST)
        if name is None or not self.expect_peek(token.RPAREN):
            return None
        return ast.ImportExpression(tok, name)


def parse_program(source: str, filename: str = '<input>') -> ast.Program:
    """Parse source text into a Program, raising ParseError on syntax errors."""
    parser = Parser(Lexer(source, filename))
    program = parser.parse_program()
    if parser.errors:
        raise ParseError(parser.errors)
    return program

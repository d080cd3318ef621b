"""Abstract Syntax Tree (AST) definitions for the Esolang language.

Every node keeps the token it was built from so that runtime errors can
point back at the source. ``str(node)`` renders the node as source text
that parses back to an equivalent tree: infix and prefix expressions are
fully parenthesised and string literals are re-quoted.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .token import Token


@dataclass
class Node:
    """Base class for all AST nodes."""
    token: Token


@dataclass
class Statement(Node):
    pass


@dataclass
class Expression(Node):
    pass


def join(nodes, sep: str = ', ') -> str:
    return sep.join(str(n) for n in nodes)


def quote(value: str) -> str:
    escaped = (value.replace('\\', '\\\\')
               .replace('"', '\\"')
               .replace('\n', '\\n')
               .replace('\r', '\\r')
               .replace('\t', '\\t'))
    return f'"{escaped}"'


@dataclass
class Program(Node):
    statements: List[Statement] = field(default_factory=list)

    def __str__(self) -> str:
        return join(self.statements, '; ')


@dataclass
class Identifier(Expression):
    value: str = ''

    def __str__(self) -> str:
        return self.value


@dataclass
class LetStatement(Statement):
    name: Identifier = None
    value: Optional[Expression] = None

    def __str__(self) -> str:
        return f"let {self.name} = {self.value}"


@dataclass
class ReturnStatement(Statement):
    value: Optional[Expression] = None

    def __str__(self) -> str:
        if self.value is None:
            return "return"
        return f"return {self.value}"


@dataclass
class ExpressionStatement(Statement):
    expression: Optional[Expression] = None

    def __str__(self) -> str:
        return str(self.expression) if self.expression is not None else ''


@dataclass
class BlockStatement(Statement):
    statements: List[Statement] = field(default_factory=list)

    def __str__(self) -> str:
        if not self.statements:
            return "{ }"
        return "{ " + join(self.statements, '; ') + " }"


@dataclass
class AssignStatement(Statement):
    """``name = value`` and the compound forms ``+=``, ``-=`` and ``*=``."""
    name: Identifier = None
    operator: str = '='
    value: Optional[Expression] = None

    def __str__(self) -> str:
        return f"{self.name} {self.operator} {self.value}"


@dataclass
class IntegerLiteral(Expression):
    value: int = 0

    def __str__(self) -> str:
        return self.token.literal


@dataclass
class FloatLiteral(Expression):
    value: float = 0.0

    def __str__(self) -> str:
        return self.token.literal


@dataclass
class StringLiteral(Expression):
    value: str = ''

    def __str__(self) -> str:
        return quote(self.value)


@dataclass
class BooleanLiteral(Expression):
    value: bool = False

    def __str__(self) -> str:
        return 'true' if self.value else 'false'


@dataclass
class ArrayLiteral(Expression):
    elements: List[Expression] = field(default_factory=list)

    def __str__(self) -> str:
        return f"[{join(self.elements)}]"


@dataclass
class HashLiteral(Expression):
    pairs: List[Tuple[Expression, Expression]] = field(default_factory=list)

    def __str__(self) -> str:
        return "{" + ', '.join(f"{k}: {v}" for k, v in self.pairs) + "}"


@dataclass
class PrefixExpression(Expression):
    operator: str = ''
    right: Optional[Expression] = None

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass
class PostfixExpression(Expression):
    """``name++`` / ``name--``; ``token`` is the identifier being stepped."""
    operator: str = ''

    def __str__(self) -> str:
        return f"{self.token.literal}{self.operator}"


@dataclass
class InfixExpression(Expression):
    left: Optional[Expression] = None
    operator: str = ''
    right: Optional[Expression] = None

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass
class BindExpression(Expression):
    left: Optional[Expression] = None
    value: Optional[Expression] = None

    def __str__(self) -> str:
        return f"{self.left} := {self.value}"


@dataclass
class IfExpression(Expression):
    condition: Optional[Expression] = None
    consequence: Optional[BlockStatement] = None
    alternative: Optional[BlockStatement] = None

    def __str__(self) -> str:
        out = f"if ({self.condition}) {self.consequence}"
        if self.alternative is not None:
            out += f" else {self.alternative}"
        return out


@dataclass
class WhileExpression(Expression):
    condition: Optional[Expression] = None
    body: Optional[BlockStatement] = None

    def __str__(self) -> str:
        return f"when ({self.condition}) {self.body}"


@dataclass
class FunctionLiteral(Expression):
    parameters: List[Identifier] = field(default_factory=list)
    body: Optional[BlockStatement] = None

    def __str__(self) -> str:
        return f"fn({join(self.parameters)}) {self.body}"


@dataclass
class FunctionDefine(Expression):
    """``func name(a, b = 1) { ... }``: binds itself in the enclosing scope."""
    name: Identifier = None
    parameters: List[Identifier] = field(default_factory=list)
    defaults: Dict[str, Expression] = field(default_factory=dict)
    body: Optional[BlockStatement] = None

    def __str__(self) -> str:
        params = []
        for param in self.parameters:
            if param.value in self.defaults:
                params.append(f"{param} = {self.defaults[param.value]}")
            else:
                params.append(str(param))
        return f"func {self.name}({', '.join(params)}) {self.body}"


@dataclass
class CallExpression(Expression):
    function: Optional[Expression] = None
    arguments: List[Expression] = field(default_factory=list)

    def __str__(self) -> str:
        return f"{self.function}({join(self.arguments)})"


@dataclass
class IndexExpression(Expression):
    left: Optional[Expression] = None
    index: Optional[Expression] = None

    def __str__(self) -> str:
        return f"({self.left}[{self.index}])"


@dataclass
class ObjectCallExpression(Expression):
    """``receiver.method(args)``"""
    object: Optional[Expression] = None
    call: Optional[CallExpression] = None

    def __str__(self) -> str:
        return f"{self.object}.{self.call}"


@dataclass
class ImportExpression(Expression):
    name: Optional[Expression] = None

    def __str__(self) -> str:
        return f"import({self.name})"

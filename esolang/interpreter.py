"""Tree-walking evaluator for the Esolang language.

``Interpreter.eval`` is the single catch point for runtime errors. Below
it, errors travel as ``EsolangError`` exceptions carrying their Error
value; ``eval`` turns them back into that value, so callers only ever see
Objects. ``return`` produces a ReturnValue that blocks hand upward
untouched until a function call or the program unwraps it.
"""

from __future__ import annotations

import math
import sys
from typing import Dict, List, Mapping, Optional, Set

from .ast import (
    ArrayLiteral, AssignStatement, BindExpression, BlockStatement, BooleanLiteral,
    CallExpression, ExpressionStatement, FloatLiteral, FunctionDefine, FunctionLiteral,
    HashLiteral, Identifier, IfExpression, ImportExpression, IndexExpression,
    InfixExpression, IntegerLiteral, LetStatement, Node, ObjectCallExpression,
    PostfixExpression, PrefixExpression, Program, ReturnStatement, StringLiteral,
    WhileExpression,
)
from .builtin_function import BuiltinFunction
from .environment import Environment
from .errors import EsolangError, ParseError
from .lexer import Lexer
from .modules import ModuleResolver
from .parser import Parser, parse_program
from .std import default_builtins
from .types import (
    NULL, Array, Boolean, Error, Float, Function, Hash, Hashable, Integer, Module,
    Null, Object, ReturnValue, String, copy_value, is_truthy, native_bool, wrap_int,
)

DEFAULT_MAX_CALL_DEPTH = 512

# Host stack frames used per nested Esolang call, with headroom.
FRAMES_PER_CALL = 40

COMPARISONS = {
    '<': lambda a, b: a < b,
    '>': lambda a, b: a > b,
    '<=': lambda a, b: a <= b,
    '>=': lambda a, b: a >= b,
    '==': lambda a, b: a == b,
    '!=': lambda a, b: a != b,
}


class Interpreter:
    """Core interpreter that evaluates Esolang ASTs."""
    def __init__(self, builtins: Optional[Mapping[str, BuiltinFunction]] = None,
                 resolver: Optional[ModuleResolver] = None,
                 debug_level: int = 0, debug_file: Optional[str] = 'debug.txt',
                 max_call_depth: int = DEFAULT_MAX_CALL_DEPTH):
        self.builtins = builtins if builtins is not None else default_builtins()
        self.resolver = resolver if resolver is not None else ModuleResolver()
        self.global_env = Environment()
        self.modules: Dict[str, Module] = {}
        self.importing: Set[str] = set()
        self.max_call_depth = max_call_depth
        self.call_depth = 0
        # the call-depth guard must trip before the host stack limit does
        sys.setrecursionlimit(max(sys.getrecursionlimit(), max_call_depth * FRAMES_PER_CALL))
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 and debug_file else None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def close(self):
        if self.debug_fp:
            self.debug_fp.close()
            self.debug_fp = None

    # Public API
    def run(self, program: Program, env: Optional[Environment] = None) -> Object:
        if env is None:
            env = self.global_env
        return self.eval(program, env)

    def eval(self, node: Node, env: Environment) -> Object:
        """Evaluate ``node``; runtime errors come back as Error values."""
        try:
            result = self.evaluate(node, env)
        except EsolangError as e:
            return e.err
        except RecursionError:
            self.call_depth = 0
            return Error("maximum recursion depth exceeded")
        if isinstance(result, ReturnValue):
            return result.value
        return result

    def error(self, node: Node, message: str) -> EsolangError:
        return EsolangError(Error(f"{node.token.position()}: {message}"))

    def evaluate(self, node: Node, env: Environment) -> Object:
        # Statements
        if isinstance(node, Program):
            return self.eval_program(node, env)
        if isinstance(node, BlockStatement):
            return self.eval_block(node, env)
        if isinstance(node, ExpressionStatement):
            return self.evaluate(node.expression, env)
        if isinstance(node, LetStatement):
            value = self.evaluate(node.value, env)
            env.set(node.name.value, value)
            if self.debug_level >= 2:
                self.debug(f"let {node.name.value} = {value.inspect()}")
            return NULL
        if isinstance(node, ReturnStatement):
            value = self.evaluate(node.value, env) if node.value is not None else NULL
            return ReturnValue(value)
        if isinstance(node, AssignStatement):
            return self.eval_assign(node, env)
        # Literals
        if isinstance(node, IntegerLiteral):
            return Integer(node.value)
        if isinstance(node, FloatLiteral):
            return Float(node.value)
        if isinstance(node, StringLiteral):
            return String(node.value)
        if isinstance(node, BooleanLiteral):
            return native_bool(node.value)
        if isinstance(node, ArrayLiteral):
            return Array([self.evaluate(e, env) for e in node.elements])
        if isinstance(node, HashLiteral):
            return self.eval_hash_literal(node, env)
        if isinstance(node, FunctionLiteral):
            return Function(node.parameters, node.body, env)
        if isinstance(node, FunctionDefine):
            fn = Function(node.parameters, node.body, env, node.defaults, node.name.value)
            env.set(node.name.value, fn)
            if self.debug_level >= 2:
                self.debug(f"func {node.name.value}")
            return NULL
        # Expressions
        if isinstance(node, Identifier):
            return self.eval_identifier(node, env)
        if isinstance(node, PrefixExpression):
            right = self.evaluate(node.right, env)
            return self.eval_prefix(node, right)
        if isinstance(node, PostfixExpression):
            return self.eval_postfix(node, env)
        if isinstance(node, InfixExpression):
            if node.operator in ('&&', '||'):
                return self.eval_logical(node, env)
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return self.eval_infix(node, node.operator, left, right)
        if isinstance(node, BindExpression):
            value = copy_value(self.evaluate(node.value, env))
            env.set(node.left.value, value)
            if self.debug_level >= 2:
                self.debug(f"bind {node.left.value} := {value.inspect()}")
            return NULL
        if isinstance(node, IfExpression):
            condition = self.evaluate(node.condition, env)
            if is_truthy(condition):
                return self.evaluate(node.consequence, env)
            if node.alternative is not None:
                return self.evaluate(node.alternative, env)
            return NULL
        if isinstance(node, WhileExpression):
            return self.eval_while(node, env)
        if isinstance(node, CallExpression):
            function = self.evaluate(node.function, env)
            args = [self.evaluate(a, env) for a in node.arguments]
            return self.apply_function(node, function, args)
        if isinstance(node, IndexExpression):
            left = self.evaluate(node.left, env)
            index = self.evaluate(node.index, env)
            return self.eval_index(node, left, index)
        if isinstance(node, ObjectCallExpression):
            return self.eval_object_call(node, env)
        if isinstance(node, ImportExpression):
            return self.eval_import(node, env)
        return NULL

    def eval_program(self, program: Program, env: Environment) -> Object:
        result: Object = NULL
        for stmt in program.statements:
            if self.debug_level >= 4:
                self.debug(f"{stmt.token.position()}: {stmt}")
            result = self.evaluate(stmt, env)
            if isinstance(result, ReturnValue):
                return result.value
        return result

    def eval_block(self, block: BlockStatement, env: Environment) -> Object:
        result: Object = NULL
        for stmt in block.statements:
            result = self.evaluate(stmt, env)
            # propagate return values
            if isinstance(result, ReturnValue):
                return result
        return result

    def eval_while(self, node: WhileExpression, env: Environment) -> Object:
        result: Object = NULL
        while is_truthy(self.evaluate(node.condition, env)):
            result = self.evaluate(node.body, env)
            if isinstance(result, ReturnValue):
                return result
        return result

    def eval_hash_literal(self, node: HashLiteral, env: Environment) -> Hash:
        result = Hash()
        for key_node, value_node in node.pairs:
            key = self.evaluate(key_node, env)
            if not isinstance(key, Hashable):
                raise self.error(key_node, f"unusable as hash key: {key.type()}")
            result.put(key, self.evaluate(value_node, env))
        return result

    def eval_identifier(self, node: Identifier, env: Environment) -> Object:
        value = env.get(node.value)
        if value is not None:
            return value
        builtin = self.builtins.get(node.value)
        if builtin is not None:
            return builtin
        raise self.error(node, f"cannot find '{node.value}' in scope")

    def eval_assign(self, node: AssignStatement, env: Environment) -> Object:
        name = node.name.value
        value = self.evaluate(node.value, env)
        if node.operator != '=':
            current = env.get(name)
            if current is None:
                raise self.error(node, f"{name} is unknown")
            value = self.eval_infix(node, node.operator[0], current, value)
        env.assign(name, value)
        if self.debug_level >= 2:
            self.debug(f"assign {name} {node.operator} {value.inspect()}")
        return value

    def eval_postfix(self, node: PostfixExpression, env: Environment) -> Object:
        name = node.token.literal
        current = env.get(name)
        if current is None:
            raise self.error(node, f"{name} is unknown")
        if not isinstance(current, Integer):
            raise self.error(node, f"{name} is not an int")
        step = 1 if node.operator == '++' else -1
        env.assign(name, Integer(wrap_int(current.value + step)))
        return current

    def eval_prefix(self, node: PrefixExpression, right: Object) -> Object:
        if node.operator == '!':
            return native_bool(not is_truthy(right))
        if node.operator == '-':
            if isinstance(right, Integer):
                return Integer(wrap_int(-right.value))
            if isinstance(right, Float):
                return Float(-right.value)
            raise self.error(node, f"unknown operator: -{right.type()}")
        raise self.error(node, f"unknown operator: {node.operator}{right.type()}")

    def eval_logical(self, node: InfixExpression, env: Environment) -> Object:
        left = is_truthy(self.evaluate(node.left, env))
        if node.operator == '&&' and not left:
            return native_bool(False)
        if node.operator == '||' and left:
            return native_bool(True)
        return native_bool(is_truthy(self.evaluate(node.right, env)))

    def eval_infix(self, node: Node, op: str, left: Object, right: Object) -> Object:
        if isinstance(left, Integer) and isinstance(right, Integer):
            return self.eval_integer_infix(node, op, left.value, right.value)
        if isinstance(left, (Integer, Float)) and isinstance(right, (Integer, Float)):
            return self.eval_float_infix(node, op, float(left.value), float(right.value))
        if isinstance(left, String) and isinstance(right, String):
            if op == '+':
                return String(left.value + right.value)
            if op in ('==', '!='):
                return native_bool(COMPARISONS[op](left.value, right.value))
        if isinstance(left, String) and isinstance(right, Integer) and op == '*':
            if right.value < 0:
                raise self.error(node, "cannot repeat a string a negative number of times")
            return String(left.value * right.value)
        if isinstance(left, Array) and isinstance(right, Array) and op == '+':
            return Array(left.elements + right.elements)
        if op == '==':
            return native_bool(self.objects_equal(left, right))
        if op == '!=':
            return native_bool(not self.objects_equal(left, right))
        if left.type() != right.type():
            raise self.error(node, f"type mismatch: {left.type()} {op} {right.type()}")
        raise self.error(node, f"unknown operator: {left.type()} {op} {right.type()}")

    def eval_integer_infix(self, node: Node, op: str, a: int, b: int) -> Object:
        if op == '+':
            return Integer(wrap_int(a + b))
        if op == '-':
            return Integer(wrap_int(a - b))
        if op == '*':
            return Integer(wrap_int(a * b))
        if op in ('/', '%'):
            if b == 0:
                raise self.error(node, "Can't divide by zero")
            # truncate toward zero; the remainder keeps the dividend's sign
            quotient = abs(a) // abs(b)
            if (a < 0) != (b < 0):
                quotient = -quotient
            if op == '/':
                return Integer(wrap_int(quotient))
            return Integer(wrap_int(a - b * quotient))
        if op in COMPARISONS:
            return native_bool(COMPARISONS[op](a, b))
        raise self.error(node, f"unknown operator: INTEGER {op} INTEGER")

    def eval_float_infix(self, node: Node, op: str, a: float, b: float) -> Object:
        if op == '+':
            return Float(a + b)
        if op == '-':
            return Float(a - b)
        if op == '*':
            return Float(a * b)
        if op in ('/', '%'):
            if b == 0.0:
                raise self.error(node, "Can't divide by zero")
            return Float(a / b if op == '/' else math.fmod(a, b))
        if op in COMPARISONS:
            return native_bool(COMPARISONS[op](a, b))
        raise self.error(node, f"unknown operator: FLOAT {op} FLOAT")

    def objects_equal(self, left: Object, right: Object) -> bool:
        if isinstance(left, Boolean) and isinstance(right, Boolean):
            return left.value == right.value
        if isinstance(left, Null) and isinstance(right, Null):
            return True
        return left is right

    def eval_index(self, node: IndexExpression, left: Object, index: Object) -> Object:
        if isinstance(left, Module):
            left = left.attrs
        if isinstance(left, Array) and isinstance(index, Integer):
            if 0 <= index.value < len(left.elements):
                return left.elements[index.value]
            return NULL
        if isinstance(left, String) and isinstance(index, Integer):
            if 0 <= index.value < len(left.value):
                return String(left.value[index.value])
            return NULL
        if isinstance(left, Hash):
            if not isinstance(index, Hashable):
                raise self.error(node, f"unusable as hash key: {index.type()}")
            pair = left.pairs.get(index.hash_key())
            return pair.value if pair is not None else NULL
        raise self.error(node, f"index operator not supported: {left.type()}")

    # Functions

    def apply_function(self, node: Node, fn: Object, args: List[Object]) -> Object:
        if isinstance(fn, Function):
            if self.call_depth >= self.max_call_depth:
                raise self.error(node, f"maximum recursion depth exceeded ({self.max_call_depth})")
            call_env = self.extend_function_env(node, fn, args)
            if self.debug_level >= 3:
                self.debug(f"call {fn.name or 'fn'}({', '.join(a.inspect() for a in args)})")
            self.call_depth += 1
            try:
                result = self.evaluate(fn.body, call_env)
            finally:
                self.call_depth -= 1
            if isinstance(result, ReturnValue):
                return result.value
            return result
        if isinstance(fn, BuiltinFunction):
            if self.debug_level >= 3:
                self.debug(f"call builtin {fn.name}")
            result = fn.call(args)
            if isinstance(result, Error):
                raise EsolangError(result)
            return result
        raise self.error(node, f"not a function: {fn.type()}")

    def extend_function_env(self, node: Node, fn: Function, args: List[Object]) -> Environment:
        params = fn.parameters
        if len(args) > len(params):
            raise self.error(node, f"wrong number of arguments: want={len(params)}, got={len(args)}")
        call_env = Environment(parent=fn.env)
        for i, param in enumerate(params):
            if i < len(args):
                call_env.set(param.value, args[i])
            elif param.value in fn.defaults:
                call_env.set(param.value, self.evaluate(fn.defaults[param.value], call_env))
            else:
                raise self.error(node, f"wrong number of arguments: want={len(params)}, got={len(args)}")
        return call_env

    def eval_object_call(self, node: ObjectCallExpression, env: Environment) -> Object:
        receiver = self.evaluate(node.object, env)
        method = node.call.function.value
        args = [self.evaluate(a, env) for a in node.call.arguments]
        if isinstance(receiver, Module):
            member = receiver.attrs.get(method)
            if member is None:
                raise self.error(node, f"module '{receiver.name}' has no member `{method}`")
            return self.apply_function(node.call, member, args)
        result = receiver.invoke_method(method, env, args)
        if result is None:
            raise self.error(node, f"value of type `{receiver.type()}` has no member `{method}`")
        if isinstance(result, Error):
            raise EsolangError(result)
        return result

    # Modules

    def eval_import(self, node: ImportExpression, env: Environment) -> Module:
        name = self.evaluate(node.name, env)
        if not isinstance(name, String):
            raise self.error(node, f"ImportError: invalid import path '{name.inspect()}'")
        return self.import_module(node, name.value)

    def import_module(self, node: Node, name: str) -> Module:
        if name in self.modules:
            return self.modules[name]
        if name in self.importing:
            raise self.error(node, f"ImportError: circular import of '{name}'")
        try:
            filename, source = self.resolver.resolve(name)
        except EsolangError as e:
            raise self.error(node, e.err.message)
        if self.debug_level >= 1:
            self.debug(f"import {name} from {filename}")
        parser = Parser(Lexer(source, filename))
        program = parser.parse_program()
        if parser.errors:
            raise EsolangError(Error('\n'.join(parser.errors)))
        module_env = Environment()
        self.importing.add(name)
        try:
            self.eval_program(program, module_env)
        finally:
            self.importing.discard(name)
        module = Module(name, module_env.exported_hash())
        self.modules[name] = module
        return module


def run_program(source: str, filename: str = '<input>', debug_level: int = 0) -> Object:
    """Convenience function to parse and run an Esolang program from source."""
    program = parse_program(source, filename)
    interpreter = Interpreter(debug_level=debug_level)
    try:
        return interpreter.run(program)
    finally:
        interpreter.close()


def run_file(path: str, interpreter: Optional[Interpreter] = None) -> Object:
    """Parse and run an Esolang file; raises ParseError on syntax errors."""
    with open(path, 'r', encoding='utf-8') as f:
        source = f.read()
    program = parse_program(source, path)
    if interpreter is None:
        interpreter = Interpreter()
    return interpreter.run(program)


__all__ = ['Interpreter', 'run_program', 'run_file', 'parse_program', 'ParseError', 'EsolangError']

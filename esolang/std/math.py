import random
from typing import Dict, List

from esolang.builtin_function import BuiltinFunction
from esolang.types import INT_MAX, INTEGER, Error, Float, Integer, Object


def math_random_int(args: List[Object]) -> Object:
    """random_int() or random_int(low, high), both bounds inclusive."""
    if not args:
        return Integer(random.randint(0, INT_MAX))
    if len(args) != 2:
        return Error(f"wrong number of arguments. got={len(args)}, want=0 or 2")
    for arg in args:
        if arg.type() != INTEGER:
            return Error(f"arguments to `random_int` must be INTEGER, got {arg.type()}")
    low, high = args[0].value, args[1].value
    if low > high:
        return Error(f"empty range for `random_int`: {low} > {high}")
    return Integer(random.randint(low, high))


def math_random_float(args: List[Object]) -> Object:
    return Float(random.random())


def populate_math_builtins() -> Dict[str, BuiltinFunction]:
    return {
        'math.random_int': BuiltinFunction('math.random_int', None, math_random_int),
        'math.random_float': BuiltinFunction('math.random_float', 0, math_random_float),
    }

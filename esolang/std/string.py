from typing import Dict, List

from esolang.builtin_function import BuiltinFunction
from esolang.types import STRING, Error, Object, String, native_bool


def string_upper(args: List[Object]) -> Object:
    if args[0].type() != STRING:
        return Error(f"argument to `upper` must be STRING, got {args[0].type()}")
    return String(args[0].value.upper())


def string_lower(args: List[Object]) -> Object:
    if args[0].type() != STRING:
        return Error(f"argument to `lower` must be STRING, got {args[0].type()}")
    return String(args[0].value.lower())


def string_contains(args: List[Object]) -> Object:
    for arg in args:
        if arg.type() != STRING:
            return Error(f"arguments to `contains` must be STRING, got {arg.type()}")
    return native_bool(args[1].value in args[0].value)


def populate_string_builtins() -> Dict[str, BuiltinFunction]:
    return {
        'string.upper': BuiltinFunction('string.upper', 1, string_upper),
        'string.lower': BuiltinFunction('string.lower', 1, string_lower),
        'string.contains': BuiltinFunction('string.contains', 2, string_contains),
    }

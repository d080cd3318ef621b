"""General purpose builtins: printing, sizes and type names."""

from typing import Dict, List

from esolang.builtin_function import BuiltinFunction
from esolang.types import NULL, Array, Error, Hash, Integer, Object, Set, String


def std_print(args: List[Object]) -> Object:
    for arg in args:
        print(arg.inspect(), end='')
    return NULL


def std_println(args: List[Object]) -> Object:
    if not args:
        print()
    for arg in args:
        print(arg.inspect())
    return NULL


def std_count(args: List[Object]) -> Object:
    arg = args[0]
    if isinstance(arg, Array):
        return Integer(len(arg.elements))
    if isinstance(arg, String):
        return Integer(len(arg.value))
    if isinstance(arg, Hash):
        return Integer(len(arg.pairs))
    if isinstance(arg, Set):
        return Integer(len(arg.elements))
    return Error(f"argument to `count` not supported, got {arg.type()}")


def std_type_of(args: List[Object]) -> Object:
    return String(args[0].type())


def std_set(args: List[Object]) -> Object:
    if len(args) > 1:
        return Error(f"wrong number of arguments. got={len(args)}, want=0 or 1")
    result = Set()
    if args:
        if not isinstance(args[0], Array):
            return Error(f"argument to `Set` must be ARRAY, got {args[0].type()}")
        for element in args[0].elements:
            result.add(element)
    return result


def populate_core_builtins() -> Dict[str, BuiltinFunction]:
    return {
        'print': BuiltinFunction('print', None, std_print),
        'println': BuiltinFunction('println', None, std_println),
        'count': BuiltinFunction('count', 1, std_count),
        'type_of': BuiltinFunction('type_of', 1, std_type_of),
        'Set': BuiltinFunction('Set', None, std_set),
    }

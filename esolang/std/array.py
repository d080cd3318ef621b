"""Array builtins under the ``array.`` namespace."""

from typing import Dict, List

from esolang.builtin_function import BuiltinFunction
from esolang.types import ARRAY, INTEGER, NULL, Array, Error, Integer, Object, String


def expect_array(args: List[Object], fn_name: str):
    if args[0].type() != ARRAY:
        return Error(f"first argument to `{fn_name}` must be ARRAY, got {args[0].type()}")
    return None


def array_new(args: List[Object]) -> Object:
    return Array(list(args))


def array_get(args: List[Object]) -> Object:
    err = expect_array(args, 'get')
    if err:
        return err
    if args[1].type() != INTEGER:
        return Error(f"second argument to `get` must be INTEGER, got {args[1].type()}")
    elements = args[0].elements
    index = args[1].value
    if index < 0 or index >= len(elements):
        return NULL
    return elements[index]


def array_get_first(args: List[Object]) -> Object:
    err = expect_array(args, 'get_first')
    if err:
        return err
    elements = args[0].elements
    return elements[0] if elements else NULL


def array_get_last(args: List[Object]) -> Object:
    err = expect_array(args, 'get_last')
    if err:
        return err
    elements = args[0].elements
    return elements[-1] if elements else NULL


def array_pop(args: List[Object]) -> Object:
    err = expect_array(args, 'pop')
    if err:
        return err
    elements = args[0].elements
    return elements.pop() if elements else NULL


def array_append(args: List[Object]) -> Object:
    if len(args) < 2:
        return Error(f"wrong number of arguments. got={len(args)}, want=at least 2")
    err = expect_array(args, 'append')
    if err:
        return err
    args[0].elements.extend(args[1:])
    return args[0]


def array_index_of(args: List[Object]) -> Object:
    err = expect_array(args, 'index_of')
    if err:
        return err
    target = args[1].inspect()
    for i, element in enumerate(args[0].elements):
        if element.inspect() == target:
            return Integer(i)
    return NULL


def array_sort(args: List[Object]) -> Object:
    err = expect_array(args, 'sort')
    if err:
        return err
    elements = args[0].elements
    if not (all(isinstance(e, Integer) for e in elements)
            or all(isinstance(e, String) for e in elements)):
        return Error("Sorting only supports primitive types (integers and strings)")
    elements.sort(key=lambda e: e.value)
    return NULL


def array_rest(args: List[Object]) -> Object:
    err = expect_array(args, 'rest')
    if err:
        return err
    elements = args[0].elements
    if not elements:
        return NULL
    return Array(list(elements[1:]))


def populate_array_builtins() -> Dict[str, BuiltinFunction]:
    return {
        'array.new': BuiltinFunction('array.new', None, array_new),
        'array.get': BuiltinFunction('array.get', 2, array_get),
        'array.get_first': BuiltinFunction('array.get_first', 1, array_get_first),
        'array.get_last': BuiltinFunction('array.get_last', 1, array_get_last),
        'array.pop': BuiltinFunction('array.pop', 1, array_pop),
        'array.append': BuiltinFunction('array.append', None, array_append),
        'array.index_of': BuiltinFunction('array.index_of', 2, array_index_of),
        'array.sort': BuiltinFunction('array.sort', 1, array_sort),
        'array.rest': BuiltinFunction('array.rest', 1, array_rest),
    }

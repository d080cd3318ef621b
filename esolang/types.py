"""Runtime values for the Esolang interpreter.

Every value the evaluator produces is an ``Object``. Objects report their
type name, render themselves with ``inspect()`` and expose methods through
``invoke_method``, which returns ``None`` when the type has no such
method. Method argument problems are reported as ``Error`` values, never
raised.

Arrays, hashes and sets are mutable and shared between bindings; the
``:=`` operator stores a deep copy of them instead (see ``Copyable``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Dict, List, Optional

from .ast import BlockStatement, Expression, Identifier, quote

if TYPE_CHECKING:
    from .environment import Environment

INTEGER = 'INTEGER'
FLOAT = 'FLOAT'
STRING = 'STRING'
BOOLEAN = 'BOOLEAN'
NULL_TYPE = 'NULL'
ARRAY = 'ARRAY'
HASH = 'HASH'
SET = 'SET'
FUNCTION = 'FUNCTION'
BUILTIN = 'BUILTIN'
ERROR = 'ERROR'
RETURN_VALUE = 'RETURN_VALUE'
MODULE = 'MODULE'

INT_MIN = -2 ** 63
INT_MAX = 2 ** 63 - 1

FNV_OFFSET_BASIS = 0xcbf29ce484222325
FNV_PRIME = 0x100000001b3
UINT64_MASK = 0xFFFFFFFFFFFFFFFF


def wrap_int(value: int) -> int:
    """Wrap an arbitrary Python int into the signed 64-bit range."""
    return (value - INT_MIN) % 2 ** 64 + INT_MIN


def fnv1a_64(data: bytes) -> int:
    h = FNV_OFFSET_BASIS
    for byte in data:
        h ^= byte
        h = (h * FNV_PRIME) & UINT64_MASK
    return h


@dataclass(frozen=True)
class HashKey:
    type: str
    value: int


class Object:
    """Base class for all runtime values."""

    def type(self) -> str:
        raise NotImplementedError

    def inspect(self) -> str:
        raise NotImplementedError

    def invoke_method(self, name: str, env: 'Environment', args: List['Object']) -> Optional['Object']:
        return None

    def __str__(self) -> str:
        return self.inspect()


class Hashable:
    """Values that can be used as hash keys."""

    def hash_key(self) -> HashKey:
        raise NotImplementedError


class Copyable:
    """Values that ``:=`` stores as a deep copy."""

    def copy(self) -> Object:
        raise NotImplementedError


def copy_value(obj: Object) -> Object:
    if isinstance(obj, Copyable):
        return obj.copy()
    return obj


def display(obj: Object) -> str:
    """Render an element nested inside a container."""
    if isinstance(obj, String):
        return quote(obj.value)
    return obj.inspect()


@dataclass
class Integer(Object, Hashable):
    value: int

    def type(self) -> str:
        return INTEGER

    def inspect(self) -> str:
        return str(self.value)

    def hash_key(self) -> HashKey:
        return HashKey(INTEGER, self.value & UINT64_MASK)

    def invoke_method(self, name, env, args):
        return dispatch(INTEGER_METHODS, 'Integer', self, name, args)


@dataclass
class Float(Object):
    value: float

    def type(self) -> str:
        return FLOAT

    def inspect(self) -> str:
        return repr(self.value)


@dataclass
class String(Object, Hashable):
    value: str

    def type(self) -> str:
        return STRING

    def inspect(self) -> str:
        return self.value

    def hash_key(self) -> HashKey:
        return HashKey(STRING, fnv1a_64(self.value.encode('utf-8')))

    def invoke_method(self, name, env, args):
        return dispatch(STRING_METHODS, 'String', self, name, args)


@dataclass
class Boolean(Object, Hashable):
    value: bool

    def type(self) -> str:
        return BOOLEAN

    def inspect(self) -> str:
        return 'true' if self.value else 'false'

    def hash_key(self) -> HashKey:
        return HashKey(BOOLEAN, 1 if self.value else 0)


@dataclass
class Null(Object):
    def type(self) -> str:
        return NULL_TYPE

    def inspect(self) -> str:
        return 'null'


TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()


def native_bool(value: bool) -> Boolean:
    return TRUE if value else FALSE


@dataclass
class Array(Object, Copyable):
    elements: List[Object] = field(default_factory=list)

    def type(self) -> str:
        return ARRAY

    def inspect(self) -> str:
        return '[' + ', '.join(display(e) for e in self.elements) + ']'

    def copy(self) -> 'Array':
        return Array([copy_value(e) for e in self.elements])

    def invoke_method(self, name, env, args):
        return dispatch(ARRAY_METHODS, 'Array', self, name, args)


@dataclass
class HashPair:
    key: Object
    value: Object


@dataclass
class Hash(Object, Copyable):
    """A hash keyed by ``HashKey``; the original key object is kept for display."""
    pairs: Dict[HashKey, HashPair] = field(default_factory=dict)

    def type(self) -> str:
        return HASH

    def inspect(self) -> str:
        items = ', '.join(f"{display(p.key)}: {display(p.value)}" for p in self.pairs.values())
        return '{' + items + '}'

    def copy(self) -> 'Hash':
        return Hash({k: HashPair(p.key, copy_value(p.value)) for k, p in self.pairs.items()})

    def get(self, name: str) -> Optional[Object]:
        pair = self.pairs.get(String(name).hash_key())
        return pair.value if pair is not None else None

    def put(self, key: Object, value: Object):
        self.pairs[key.hash_key()] = HashPair(key, value)

    def invoke_method(self, name, env, args):
        return dispatch(HASH_METHODS, 'Hash', self, name, args)


@dataclass
class Set(Object, Copyable):
    """An ordered collection without duplicates, compared by ``inspect()``."""
    elements: List[Object] = field(default_factory=list)

    def type(self) -> str:
        return SET

    def inspect(self) -> str:
        return 'Set{' + ', '.join(display(e) for e in self.elements) + '}'

    def copy(self) -> 'Set':
        return Set([copy_value(e) for e in self.elements])

    def index(self, obj: Object) -> int:
        text = obj.inspect()
        for i, element in enumerate(self.elements):
            if element.inspect() == text:
                return i
        return -1

    def add(self, obj: Object):
        if self.index(obj) < 0:
            self.elements.append(obj)

    def invoke_method(self, name, env, args):
        return dispatch(SET_METHODS, 'Set', self, name, args)


@dataclass
class Function(Object):
    parameters: List[Identifier]
    body: BlockStatement
    env: 'Environment'
    defaults: Dict[str, Expression] = field(default_factory=dict)
    name: Optional[str] = None

    def type(self) -> str:
        return FUNCTION

    def inspect(self) -> str:
        params = ', '.join(p.value for p in self.parameters)
        body = '; '.join(str(s) for s in self.body.statements)
        return f"fn({params}) {{\n{body}\n}}"


@dataclass
class Error(Object):
    message: str

    def type(self) -> str:
        return ERROR

    def inspect(self) -> str:
        return 'ERROR: ' + self.message


@dataclass
class ReturnValue(Object):
    value: Object

    def type(self) -> str:
        return RETURN_VALUE

    def inspect(self) -> str:
        return self.value.inspect()


@dataclass
class Module(Object):
    name: str
    attrs: Hash

    def type(self) -> str:
        return MODULE

    def inspect(self) -> str:
        return f"<module {self.name}>"


def is_truthy(obj: Object) -> bool:
    if isinstance(obj, Null):
        return False
    if isinstance(obj, Boolean):
        return obj.value
    if isinstance(obj, (Integer, Float)):
        return obj.value != 0
    if isinstance(obj, String):
        return obj.value != ''
    if isinstance(obj, (Array, Set)):
        return len(obj.elements) > 0
    if isinstance(obj, Hash):
        return len(obj.pairs) > 0
    return True


###############################################################################
# Argument checks
###############################################################################

Check = Callable[[str, List[Object]], Optional[str]]


def check_typings(name: str, args: List[Object], *checks: Check) -> Optional[Error]:
    """Run argument checks in order and return the first failure as an Error."""
    for check in checks:
        message = check(name, args)
        if message is not None:
            return Error(message)
    return None


def exact_args(n: int) -> Check:
    def check(name, args):
        if len(args) != n:
            plural = '' if n == 1 else 's'
            return f"TypeError: {name}() takes exactly {n} argument{plural} ({len(args)} given)"
        return None
    return check


def min_args(n: int) -> Check:
    def check(name, args):
        if len(args) < n:
            return f"TypeError: {name}() takes a minimum {n} arguments ({len(args)} given)"
        return None
    return check


def range_of_args(n: int, m: int) -> Check:
    def check(name, args):
        if len(args) < n or len(args) > m:
            return f"TypeError: {name}() takes at least {n} arguments at most {m} ({len(args)} given)"
        return None
    return check


def with_types(*types: Optional[str]) -> Check:
    """Check argument types by position; ``None`` accepts any type."""
    def check(name, args):
        for i, expected in enumerate(types):
            if expected is not None and i < len(args) and args[i].type() != expected:
                return (f"TypeError: {name}() expected argument #{i + 1} to be "
                        f"`{expected}` got `{args[i].type()}`")
        return None
    return check


def dispatch(table, type_name: str, receiver: Object, method: str, args: List[Object]) -> Optional[Object]:
    handler = table.get(method)
    if handler is None:
        return None
    return handler(receiver, f"{type_name}.{method}", args)


###############################################################################
# String methods
###############################################################################

def string_length(s: String, name, args):
    return check_typings(name, args, exact_args(0)) or Integer(len(s.value))


def string_reverse(s: String, name, args):
    return check_typings(name, args, exact_args(0)) or String(s.value[::-1])


def string_equals(s: String, name, args):
    err = check_typings(name, args, exact_args(1), with_types(STRING))
    if err:
        return err
    return native_bool(s.value == args[0].value)


def string_empty(s: String, name, args):
    return check_typings(name, args, exact_args(0)) or native_bool(s.value == '')


def string_upper_case(s: String, name, args):
    return check_typings(name, args, exact_args(0)) or String(s.value.upper())


def string_lower_case(s: String, name, args):
    return check_typings(name, args, exact_args(0)) or String(s.value.lower())


def string_to_int(s: String, name, args):
    err = check_typings(name, args, exact_args(0))
    if err:
        return err
    try:
        value = int(s.value, 0)
    except ValueError:
        return Integer(0)
    if value < INT_MIN or value > INT_MAX:
        return Integer(0)
    return Integer(value)


def string_contains(s: String, name, args):
    err = check_typings(name, args, exact_args(1), with_types(STRING))
    if err:
        return err
    return native_bool(args[0].value in s.value)


STRING_METHODS = {
    'count': string_length,
    'length': string_length,
    'reverse': string_reverse,
    'equals': string_equals,
    'empty': string_empty,
    'upper_case': string_upper_case,
    'lower_case': string_lower_case,
    'to_int': string_to_int,
    'contains': string_contains,
}


###############################################################################
# Integer methods
###############################################################################

def integer_to_string(i: Integer, name, args):
    return check_typings(name, args, exact_args(0)) or String(str(i.value))


def integer_to_float(i: Integer, name, args):
    return check_typings(name, args, exact_args(0)) or Float(float(i.value))


INTEGER_METHODS = {
    'to_string': integer_to_string,
    'to_float': integer_to_float,
}


###############################################################################
# Array methods
###############################################################################

def array_length(arr: Array, name, args):
    return check_typings(name, args, exact_args(0)) or Integer(len(arr.elements))


def array_append(arr: Array, name, args):
    err = check_typings(name, args, min_args(1))
    if err:
        return err
    arr.elements.extend(args)
    return arr


def array_pop(arr: Array, name, args):
    err = check_typings(name, args, exact_args(0))
    if err:
        return err
    if not arr.elements:
        return NULL
    return arr.elements.pop()


def array_fill(arr: Array, name, args):
    err = check_typings(name, args, range_of_args(1, 3), with_types(None, INTEGER, INTEGER))
    if err:
        return err
    size = len(arr.elements)
    start = args[1].value if len(args) > 1 else 0
    end = args[2].value if len(args) > 2 else size
    start = max(0, min(start, size))
    end = max(start, min(end, size))
    for i in range(start, end):
        arr.elements[i] = args[0]
    return arr


def array_sort(arr: Array, name, args):
    err = check_typings(name, args, exact_args(0))
    if err:
        return err
    if all(isinstance(e, (Integer, Float)) for e in arr.elements) \
            or all(isinstance(e, String) for e in arr.elements):
        arr.elements.sort(key=lambda e: e.value)
        return arr
    return Error(f"TypeError: {name}() requires all numbers or all strings")


def array_get(arr: Array, name, args):
    err = check_typings(name, args, exact_args(1), with_types(INTEGER))
    if err:
        return err
    index = args[0].value
    if index < 0 or index >= len(arr.elements):
        return NULL
    return arr.elements[index]


def array_get_first(arr: Array, name, args):
    err = check_typings(name, args, exact_args(0))
    if err:
        return err
    return arr.elements[0] if arr.elements else NULL


def array_get_last(arr: Array, name, args):
    err = check_typings(name, args, exact_args(0))
    if err:
        return err
    return arr.elements[-1] if arr.elements else NULL


def array_index_of(arr: Array, name, args):
    err = check_typings(name, args, exact_args(1))
    if err:
        return err
    text = args[0].inspect()
    for i, element in enumerate(arr.elements):
        if element.inspect() == text:
            return Integer(i)
    return NULL


def array_contains(arr: Array, name, args):
    found = array_index_of(arr, name, args)
    if isinstance(found, Error):
        return found
    return native_bool(found is not NULL)


def array_rest(arr: Array, name, args):
    err = check_typings(name, args, exact_args(0))
    if err:
        return err
    if not arr.elements:
        return NULL
    return Array(list(arr.elements[1:]))


ARRAY_METHODS = {
    'count': array_length,
    'length': array_length,
    'append': array_append,
    'pop': array_pop,
    'fill': array_fill,
    'sort': array_sort,
    'get': array_get,
    'get_first': array_get_first,
    'get_last': array_get_last,
    'index_of': array_index_of,
    'contains': array_contains,
    'rest': array_rest,
}


###############################################################################
# Hash methods
###############################################################################

def hash_length(h: Hash, name, args):
    return check_typings(name, args, exact_args(0)) or Integer(len(h.pairs))


def hash_keys(h: Hash, name, args):
    return check_typings(name, args, exact_args(0)) or Array([p.key for p in h.pairs.values()])


def hash_values(h: Hash, name, args):
    return check_typings(name, args, exact_args(0)) or Array([p.value for p in h.pairs.values()])


def hash_entries(h: Hash, name, args):
    err = check_typings(name, args, exact_args(0))
    if err:
        return err
    return Array([Array([p.key, p.value]) for p in h.pairs.values()])


def hash_to_string(h: Hash, name, args):
    return check_typings(name, args, exact_args(0)) or String(h.inspect())


HASH_METHODS = {
    'count': hash_length,
    'length': hash_length,
    'keys': hash_keys,
    'values': hash_values,
    'entries': hash_entries,
    'to_string': hash_to_string,
}


###############################################################################
# Set methods
###############################################################################

def set_insert(s: Set, name, args):
    err = check_typings(name, args, exact_args(1))
    if err:
        return err
    s.add(args[0])
    return s


def set_delete(s: Set, name, args):
    err = check_typings(name, args, exact_args(1))
    if err:
        return err
    index = s.index(args[0])
    if index >= 0:
        del s.elements[index]
    return s


def set_contains(s: Set, name, args):
    err = check_typings(name, args, exact_args(1))
    if err:
        return err
    return native_bool(s.index(args[0]) >= 0)


def set_size(s: Set, name, args):
    return check_typings(name, args, exact_args(0)) or Integer(len(s.elements))


def set_clear(s: Set, name, args):
    err = check_typings(name, args, exact_args(0))
    if err:
        return err
    s.elements.clear()
    return s


def set_is_empty(s: Set, name, args):
    return check_typings(name, args, exact_args(0)) or native_bool(not s.elements)


SET_METHODS = {
    'insert': set_insert,
    'delete': set_delete,
    'contains': set_contains,
    'size': set_size,
    'clear': set_clear,
    'is_empty': set_is_empty,
    'isEmpty': set_is_empty,
}

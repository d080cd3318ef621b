from typing import Dict, List

from .basic_io import BasicIO
from esolang.builtin_function import BuiltinFunction
from esolang.errors import EsolangError
from esolang.types import NULL, STRING, Error, Object, String

WRITE_FLAGS = ('a+', '+a')


def populate_io_builtins() -> Dict[str, BuiltinFunction]:
    basic_io = BasicIO()

    def std_read_file(args: List[Object]) -> Object:
        if args[0].type() != STRING:
            return Error(f'Supplied path must be of type String, got {args[0].type()}')
        try:
            return String(basic_io.read_file(args[0].value))
        except EsolangError as e:
            return e.err

    def std_write_file(args: List[Object]) -> Object:
        if len(args) < 2 or len(args) > 3:
            return Error(f'wrong number of arguments. got={len(args)}, want=2 or 3')
        path, data = args[0], args[1]
        if path.type() != STRING:
            return Error(f'Supplied path must be of type String, got {path.type()}')
        if data.type() != STRING:
            return Error(f'Supplied content must be of type String, got {data.type()}')
        flag = None
        if len(args) == 3:
            if args[2].type() != STRING:
                return Error(f'Supplied flag must be of type String, got {args[2].type()}')
            flag = args[2].value
            if flag not in WRITE_FLAGS:
                return Error(f'Invalid flag for WriteFile {flag}, expected a+ or +a')
        try:
            if flag == 'a+':
                basic_io.append_file(path.value, data.value)
            elif flag == '+a':
                basic_io.prepend_file(path.value, data.value)
            else:
                basic_io.write_file(path.value, data.value)
        except EsolangError as e:
            return e.err
        return NULL

    return {
        'ReadFile': BuiltinFunction('ReadFile', 1, std_read_file),
        'WriteFile': BuiltinFunction('WriteFile', None, std_write_file),
    }

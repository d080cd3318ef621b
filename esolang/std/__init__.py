"""Builtin function registry.

Builtins are looked up by the evaluator only after the environment chain
has no binding for a name. The registry is built once and handed to the
interpreter as a read-only mapping.
"""

from types import MappingProxyType
from typing import Mapping

from esolang.builtin_function import BuiltinFunction
from .array import populate_array_builtins
from .core import populate_core_builtins
from .io import populate_io_builtins
from .math import populate_math_builtins
from .string import populate_string_builtins


def default_builtins() -> Mapping[str, BuiltinFunction]:
    registry = {}
    for populate in (populate_core_builtins, populate_array_builtins,
                     populate_string_builtins, populate_math_builtins,
                     populate_io_builtins):
        registry.update(populate())
    return MappingProxyType(registry)

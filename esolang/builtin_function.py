from dataclasses import dataclass
from typing import Callable, List, Optional

from esolang.types import BUILTIN, Error, Object


@dataclass
class BuiltinFunction(Object):
    """A native function callable from Esolang code.

    ``arity`` is the exact number of arguments accepted, or ``None`` for a
    variadic function that validates its own arguments.
    """
    name: str
    arity: Optional[int]
    fn: Callable[[List[Object]], Object]

    def type(self) -> str:
        return BUILTIN

    def inspect(self) -> str:
        return 'builtin function'

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"

    def call(self, args: List[Object]) -> Object:
        if self.arity is not None and len(args) != self.arity:
            return Error(f"wrong number of arguments. got={len(args)}, want={self.arity}")
        return self.fn(args)

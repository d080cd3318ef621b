"""Module lookup for ``import(...)``.

``import("eso/math")`` loads one of the standard-library scripts shipped
with the package. Any other name is a file: dots become directory
separators, the ``.eso`` extension is appended and the search directories
are tried in order. The search path comes from the ``ESOPATH`` environment
variable when set, else the current working directory.
"""

import os
from pathlib import Path
from typing import List, Optional, Tuple

from esolang.errors import EsolangError
from esolang.types import Error

STDLIB_PREFIX = 'eso/'
STDLIB_DIR = Path(__file__).parent / 'stdlib'
STDLIB_MODULES = ('array', 'bool', 'string', 'set', 'math', 'os')


def default_search_paths() -> List[str]:
    value = os.environ.get('ESOPATH')
    if value:
        return [os.path.abspath(os.path.expandvars(p)) for p in value.split(os.pathsep) if p]
    return [os.getcwd()]


class ModuleResolver:
    def __init__(self, search_paths: Optional[List[str]] = None, extension: str = '.eso'):
        self.search_paths = search_paths
        self.extension = extension

    def paths(self) -> List[str]:
        if self.search_paths is None:
            return default_search_paths()
        return list(self.search_paths)

    def resolve(self, name: str) -> Tuple[str, str]:
        """Return ``(filename, source)`` for the module called ``name``."""
        if name.startswith(STDLIB_PREFIX):
            lib = name[len(STDLIB_PREFIX):]
            if lib not in STDLIB_MODULES:
                raise EsolangError(Error(f"stdlib: {lib} not found"))
            return name, self.read(name, STDLIB_DIR / f"{lib}.eso")
        relative = Path(*name.split('.')).as_posix() + self.extension
        for directory in self.paths():
            candidate = Path(directory) / relative
            if candidate.is_file():
                return str(candidate), self.read(name, candidate)
        raise EsolangError(Error(f"ImportError: no module named '{name}'"))

    def read(self, name: str, path: Path) -> str:
        try:
            return path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise EsolangError(Error(f"IOError: error reading module '{name}': {e}"))

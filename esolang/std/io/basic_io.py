import os

from esolang.errors import EsolangError
from esolang.types import Error


class BasicIO:
    """Whole-file reads and writes backing ReadFile and WriteFile."""

    def read_file(self, path: str) -> str:
        if not os.path.exists(path):
            raise EsolangError(Error(f'I/O Error: File {path} does not exist'))
        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except (OSError, UnicodeDecodeError):
            raise EsolangError(Error(f'I/O Error: Error reading file {path}'))

    def write_file(self, path: str, data: str):
        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(data)
        except OSError:
            raise EsolangError(Error(f'I/O Error: Error writing file {path}'))

    def append_file(self, path: str, data: str):
        try:
            with open(path, 'a', encoding='utf-8') as f:
                f.write(data)
        except OSError:
            raise EsolangError(Error(f'I/O Error: Error writing to file {path}'))

    def prepend_file(self, path: str, data: str):
        existing = self.read_file(path)
        self.write_file(path, data + '\n' + existing)

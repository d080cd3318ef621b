# Esolang language package
# This package provides a lexer, parser and tree-walking interpreter for Esolang.
from .errors import EsolangError, ParseError
from .interpreter import Interpreter, parse_program, run_file, run_program

__all__ = [
    'run_program',
    'run_file',
    'parse_program',
    'Interpreter',
    'EsolangError',
    'ParseError',
]

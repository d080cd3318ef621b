"""Interactive read-eval-print loop.

Bindings persist from one line to the next. Syntax and runtime errors are
printed and the loop carries on with the next line.
"""

from typing import Optional, TextIO

from .interpreter import Interpreter
from .lexer import Lexer
from .parser import Parser
from .types import Null

PROMPT = '>> '

HELP = """Commands:
  .help    show this message
  .exit    leave the interpreter
Anything else is evaluated as Esolang code, for example:
  let add = fn(a, b) { a + b };
  add(1, 2)
"""


def start(stdin: TextIO, stdout: TextIO, interpreter: Optional[Interpreter] = None):
    if interpreter is None:
        interpreter = Interpreter()
    env = interpreter.global_env
    while True:
        stdout.write(PROMPT)
        stdout.flush()
        line = stdin.readline()
        if not line:
            stdout.write('\n')
            return
        line = line.strip()
        if not line:
            continue
        if line == '.exit':
            stdout.write('Goodbye!\n')
            return
        if line == '.help':
            stdout.write(HELP)
            continue
        parser = Parser(Lexer(line, '<stdin>'))
        program = parser.parse_program()
        if parser.errors:
            for message in parser.errors:
                stdout.write(f"\t{message}\n")
            continue
        result = interpreter.eval(program, env)
        if not isinstance(result, Null):
            stdout.write(result.inspect() + '\n')

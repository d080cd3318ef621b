"""CLI entry point for the Esolang interpreter.

Usage:
    python -m esolang [-v|-vv|-vvv|-vvvv] [-I DIR]... [--max-depth N] <program.eso>
    python -m esolang [options] --repl [program.eso]

Options:
  -v            Increase debug verbosity (can be repeated)
  -I DIR        Search DIR for imported modules before ESOPATH/the working directory
  --max-depth   Maximum nesting of function calls
  --repl        Start the interactive interpreter (after running the program, if given)

Debug information is written to `debug.txt` in the current directory when
verbosity is greater than zero.
"""

import argparse
import sys
from pathlib import Path

from . import repl
from .errors import ParseError
from .interpreter import DEFAULT_MAX_CALL_DEPTH, Interpreter, run_file
from .modules import ModuleResolver, default_search_paths
from .types import Error


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Esolang language interpreter")
    parser.add_argument('-v', action='count', default=0, help='increase debug verbosity (can be repeated)')
    parser.add_argument('-I', dest='include', action='append', default=[], metavar='DIR',
                        help='add a module search directory (can be repeated)')
    parser.add_argument('--max-depth', type=int, default=DEFAULT_MAX_CALL_DEPTH,
                        help='maximum nesting of function calls')
    parser.add_argument('--repl', action='store_true', help='start the interactive interpreter')
    parser.add_argument('program', nargs='?', help='Esolang program file (.eso) to execute')
    args = parser.parse_args(argv)

    if args.program is None and not args.repl:
        parser.error('missing program file; or use --repl')
    if args.max_depth < 1:
        parser.error('--max-depth must be at least 1')

    resolver = ModuleResolver(args.include + default_search_paths()) if args.include else ModuleResolver()
    interpreter = Interpreter(resolver=resolver, debug_level=args.v, max_call_depth=args.max_depth)
    try:
        if args.program is not None:
            run_source_file(Path(args.program), interpreter)
        if args.repl:
            repl.start(sys.stdin, sys.stdout, interpreter)
    finally:
        interpreter.close()


def run_source_file(program_file: Path, interpreter: Interpreter) -> None:
    if program_file.suffix != '.eso':
        print(f"Error: {program_file} is not an .eso file", file=sys.stderr)
        sys.exit(1)
    if not program_file.exists():
        print(f"Error: file {program_file} not found", file=sys.stderr)
        sys.exit(1)
    try:
        result = run_file(str(program_file), interpreter)
    except ParseError as e:
        for message in e.errors:
            print(message, file=sys.stderr)
        sys.exit(1)
    except (OSError, UnicodeDecodeError) as e:
        print(f"Error: cannot read {program_file}: {e}", file=sys.stderr)
        sys.exit(1)
    if isinstance(result, Error):
        print(result.inspect(), file=sys.stderr)
        sys.exit(1)


if __name__ == '__main__':
    main()

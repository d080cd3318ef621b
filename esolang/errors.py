from typing import List

from esolang.types import Error


class EsolangError(Exception):
    """Exception type used to propagate Esolang runtime errors.

    It only ever travels between the point where a runtime error is
    detected and the evaluator's catch point, where it is turned back into
    its Error value.
    """
    def __init__(self, err: Error):
        super().__init__(f"EsolangError: {err.message}")
        self.err = err


class ParseError(Exception):
    """Raised when source text has one or more syntax errors."""
    def __init__(self, errors: List[str]):
        super().__init__('\n'.join(errors))
        self.errors = list(errors)

"""
Error types raised while turning RILL tokens into instructions.

Every parse failure is fatal: the first error aborts the parse and propagates
to the caller. All parse errors derive from `ParseError`, a `SyntaxError`
subclass, so callers can catch lexer and parser failures alike with
``except SyntaxError``.

Classes:
    ParseError: Base class for all parser failures.
    UnexpectedEof: Token stream exhausted where a token was required.
    UnexpectedToken: A required token did not match.
    UnimplementedKeyword: Reserved keyword in statement position without a handler.
    ParseSyntaxError: Generic grammar violation.
    InvalidExpression: The expression translator rejected a token sequence.
    StackUnderflow: An instruction sequence consumes more values than it pushed.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from rill.rill_lexer import Token


def _describe(expected: Token | str) -> str:
    return expected if isinstance(expected, str) else repr(expected)


class ParseError(SyntaxError):
    """Base class for RILL parse failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class UnexpectedEof(ParseError):
    """Raised when the token stream ends where a token was required.

    Attributes:
        expected (Token | str | None): What the parser was looking for, if known.
    """

    def __init__(self, expected: Token | str | None = None):
        if expected is None:
            message = "Unexpected end of input"
        else:
            message = f"Expected {_describe(expected)}, got end of input"
        super().__init__(message)
        self.expected = expected


class UnexpectedToken(ParseError):
    """Raised when a required token does not match.

    Attributes:
        expected (Token | str): The required token, or a description such as "identifier".
        got (Token): The token actually found.
    """

    def __init__(self, expected: Token | str, got: Token):
        super().__init__(f"Expected {_describe(expected)}, got {got!r}{got.location()}")
        self.expected = expected
        self.got = got


class UnimplementedKeyword(ParseError):
    """Raised for a reserved keyword in statement position that has no handler.

    Attributes:
        keyword (str): The keyword text.
    """

    def __init__(self, keyword: str, token: Token | None = None):
        where = token.location() if token is not None else ""
        super().__init__(f"Unimplemented keyword '{keyword}'{where}")
        self.keyword = keyword


class ParseSyntaxError(ParseError):
    """Generic grammar violation (e.g. a malformed parameter list)."""


class InvalidExpression(ParseError):
    """Raised by the expression translator for a malformed expression.

    Attributes:
        tokens (list[Token]): The raw tokens that failed to translate.
    """

    def __init__(self, message: str, tokens: Sequence[Token] = ()):
        super().__init__(message)
        self.tokens = list(tokens)


class StackUnderflow(ValueError):
    """Raised when an instruction would pop more values than the stack holds.

    Attributes:
        index (int): Position of the offending instruction in its sequence.
        depth (int): Stack depth just before that instruction.
    """

    def __init__(self, message: str, index: int, depth: int):
        super().__init__(message)
        self.index = index
        self.depth = depth


__all__ = [
    "InvalidExpression",
    "ParseError",
    "ParseSyntaxError",
    "StackUnderflow",
    "UnexpectedEof",
    "UnexpectedToken",
    "UnimplementedKeyword",
]

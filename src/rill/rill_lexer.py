"""
Lexical analyzer for the RILL scripting language.

This module provides core components for converting raw source code into token streams:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with type, value, and source location.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips whitespace and single-line comments (`#`)
    - Supports longest-match recognition of operators and symbols
    - Recognizes:
        * Keywords (`let`, `fn`, `return`, ...) and identifiers
        * Numbers (integer and float)
        * Strings (with escape sequences)
        * Operators (`+`, `==`, `(`, ...) and symbols (`=`, `;`, `,`, `{`, `}`)

Raises:
    SyntaxError: If invalid floats, unterminated strings or unknown characters are encountered.

Example:
    >>> lexer = Lexer(CharacterStream("let x = 2;"))
    >>> lexer.next_token()
    Token(KEYWORD, let)

Exports:
    - CharacterStream
    - Token
    - Lexer
    - tokenize
"""

from typing import Any

from rill.rill_constants import Keyword, keyword_map, token_hashmap

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\", '"': '"', "'": "'", "0": "\0"}


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character at `offset` without advancing, or "" if out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token in the RILL language.

    Equality is structural: two tokens are equal when their type and value
    match. Source location is metadata only, so a token built by hand
    (e.g. ``Token("SYMBOL", ";")``) compares equal to one produced by the
    lexer at any line and column.

    Attributes:
        type (str): The token type ('KEYWORD', 'IDENT', 'OPERATOR', 'SYMBOL',
            'NUMBER', 'FLOAT', 'STRING' or 'EOF').
        value (str): The raw string value associated with the token.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(self, type_: str, value: str, line: int = 0, col: int = 0):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    @property
    def keyword(self) -> Keyword | None:
        """The Keyword tag for KEYWORD tokens, None otherwise or for keyword text outside the language."""
        if self.type != "KEYWORD":
            return None
        return keyword_map.get(self.value)

    def location(self) -> str:
        if not self.line:
            return ""
        return f" at line {self.line}, col {self.col}"

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value))


class Lexer:
    """Lexical analyzer for the RILL language.

    The Lexer takes a CharacterStream and converts it into a stream of Token objects.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        """Skips all whitespace and comments in the stream."""
        while not self.stream.end_of_file():
            if self.peek() in " \t\r\n":
                self.advance()
            elif self.peek() == "#":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        while not self.stream.end_of_file() and self.peek() != "\n":
            self.advance()

    def match_operator(self) -> Token | None:
        """Attempts to match the longest operator or symbol from the current position.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        max_token = None
        match_len = 0
        candidate = ""

        for i in range(2):  # longest entry in token_hashmap
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in token_hashmap:
                max_token = candidate
                match_len = i + 1

        if max_token:
            for _ in range(match_len):
                self.advance()
            return Token(token_hashmap[max_token], max_token, line, col)

        return None

    def read_string(self, line: int, col: int) -> Token:
        quote = self.advance()
        val = ""
        while not self.stream.end_of_file():
            ch = self.peek()
            if ch == "\\":
                self.advance()
                if self.stream.end_of_file():
                    break
                esc = self.advance()
                val += _ESCAPES.get(esc, esc)
            elif ch == quote:
                self.advance()
                return Token("STRING", val, line, col)
            else:
                val += self.advance()
        raise SyntaxError(f"Unterminated string at line {line}, col {col}")

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Raises:
            SyntaxError: If a malformed token is encountered (e.g., unterminated
                string, malformed float or a character outside the language).
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return Token("EOF", "EOF", self.stream.line, self.stream.column)

        ch = self.peek()
        line, col = self.stream.line, self.stream.column

        # 1. Identifier or keyword
        if ch.isalpha() or ch == "_":
            ident = ""
            while not self.stream.end_of_file() and (
                self.peek().isalnum() or self.peek() == "_"
            ):
                ident += self.advance()
            if ident in keyword_map:
                return Token("KEYWORD", ident, line, col)
            return Token("IDENT", ident, line, col)

        # 2. Number or float
        if ch.isdecimal():
            num = ""
            has_dot = False
            while not self.stream.end_of_file() and (
                self.peek().isdecimal() or self.peek() == "."
            ):
                if self.peek() == ".":
                    if has_dot:
                        raise SyntaxError(
                            f"Invalid float format at line {line}, col {col}"
                        )
                    has_dot = True
                num += self.advance()
            if num.endswith("."):
                raise SyntaxError(f"Invalid float format at line {line}, col {col}")
            return Token("FLOAT" if has_dot else "NUMBER", num, line, col)

        # 3. String
        if ch in ('"', "'"):
            return self.read_string(line, col)

        # 4. Operator or symbol
        token = self.match_operator()
        if token:
            return token

        raise SyntaxError(f"Unexpected character {ch!r} at line {line}, col {col}")

    def tokenize(self) -> list[Token]:
        """Lexes the whole stream, including the trailing EOF token."""
        tokens = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.type == "EOF":
                return tokens


def tokenize(source: str) -> list[Token]:
    return Lexer(CharacterStream(source)).tokenize()


__all__ = ["CharacterStream", "Lexer", "Token", "tokenize"]

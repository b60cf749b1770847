"""
RILL Language Parser

Parses RILL lexical tokens into a flat, stack-oriented instruction sequence (IR).

The parser walks a read-only token buffer once, front to back, dispatching on
lookahead. Declarations and calls are parsed here; every expression is cut out
of the token stream as a raw sub-sequence and handed to an injectable
expression translator, whose output is spliced in place unchanged.

Grammar
-------
    program     := statement* EOF
    block       := statement*                      (closed by '}')
    statement   := "let" IDENT "=" expr ";"
                 | "fn" IDENT "(" params? ")" "{" block "}"
                 | "return" expr? ";"              (function bodies only)
                 | IDENT "(" args? ")" ";"
                 | expr ";"
    params      := IDENT ("," IDENT)* ","?
    args        := expr ("," expr)*

Emitted IR
----------
    let x = e;            e-code, DeclareVariable(x)
    fn f(a) { ... }       DeclareFunction(f, body, params=(a,))
    return e;             e-code, Ret()
    f(e1, e2);            e1-code, e2-code, Call(f, 2)
    e;                    e-code, Pop()

Entry Points
------------
- `Parser.parse()`: Parse a whole program; consumes the end-of-input marker.
- `Parser.parse_block()`: Parse statements up to a closing '}', leaving it unconsumed.
- `parse_source()`: Lex and parse a source string.

Raises
------
ParseError
    Subclasses from `rill.rill_errors` (all `SyntaxError`s). The first error
    aborts the parse; there is no recovery.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from rill.rill_constants import Keyword
from rill.rill_errors import (
    ParseSyntaxError,
    UnexpectedEof,
    UnexpectedToken,
    UnimplementedKeyword,
)
from rill.rill_expr import translate as translate_expression
from rill.rill_ir import Call, DeclareFunction, DeclareVariable, Instruction, Pop, Ret
from rill.rill_lexer import Token, tokenize

LOGGER = logging.getLogger(__name__)

EOF_TOKEN = Token("EOF", "EOF")
SEMICOLON = Token("SYMBOL", ";")
COMMA = Token("SYMBOL", ",")
ASSIGN = Token("SYMBOL", "=")
LBRACE = Token("SYMBOL", "{")
RBRACE = Token("SYMBOL", "}")
LPAREN = Token("OPERATOR", "(")
RPAREN = Token("OPERATOR", ")")

Translator = Callable[[Sequence[Token]], list[Instruction]]


class TokenCursor:
    """
    Forward-only view over an immutable token buffer.

    Attributes
    ----------
    tokens : tuple[Token, ...]
        The full token stream, normally ending with an EOF token.
    position : int
        Index of the next unconsumed token.
    """

    def __init__(self, tokens: Sequence[Token]) -> None:
        self.tokens: tuple[Token, ...] = tuple(tokens)
        self.position: int = 0

    @property
    def exhausted(self) -> bool:
        return self.position >= len(self.tokens)

    def peek(self, offset: int = 0) -> Token | None:
        """Return the token `offset` places ahead without advancing, or None past the end."""
        index = self.position + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def consume(self) -> Token | None:
        """Advance past the next token and return it, or None if exhausted."""
        tok = self.peek()
        if tok is not None:
            self.position += 1
        return tok

    def expect(self, token: Token) -> Token:
        """Consume the next token and require it to equal `token`.

        Raises
        ------
        UnexpectedEof
            If the stream is exhausted, or only the end-of-input marker remains.
        UnexpectedToken
            If the next token differs from `token`.
        """
        tok = self.consume()
        if tok is None:
            raise UnexpectedEof(token)
        if tok != token:
            if tok.type == "EOF":
                raise UnexpectedEof(token)
            raise UnexpectedToken(token, tok)
        return tok


def extract_until(cursor: TokenCursor, terminators: Sequence[Token]) -> list[Token]:
    """Consume raw tokens up to, not including, the first terminator at grouping depth zero.

    Parentheses are tracked, so a terminator inside `( ... )` does not end the
    extraction. On return the cursor points exactly at the terminator.

    Raises
    ------
    UnexpectedEof
        If the stream or the end-of-input marker is reached before a terminator.
    """
    extracted: list[Token] = []
    depth = 0
    while True:
        tok = cursor.peek()
        if tok is None:
            raise UnexpectedEof(" or ".join(repr(t) for t in terminators))
        if depth == 0 and tok in terminators:
            return extracted
        if tok.type == "EOF":
            raise UnexpectedEof(" or ".join(repr(t) for t in terminators))
        if tok == LPAREN:
            depth += 1
        elif tok == RPAREN and depth > 0:
            depth -= 1
        extracted.append(tok)
        cursor.consume()


class Parser:
    """
    RILL Parser Class

    Transforms a token stream into a list of IR instructions. One Parser owns
    one TokenCursor; create a new Parser for each token stream.

    Attributes
    ----------
    cursor : TokenCursor
        The token stream being parsed.
    translate : Translator
        Expression translator: raw expression tokens -> instructions leaving one value.
    max_depth : int
        Maximum nesting of function declarations.
    depth : int
        Current function nesting; 0 at top level.
    """

    def __init__(
        self,
        tokens: Sequence[Token],
        translate: Translator = translate_expression,
        max_depth: int = 64,
    ) -> None:
        self.cursor = TokenCursor(tokens)
        self.translate = translate
        self.max_depth = max_depth
        self.depth = 0

    def parse(self) -> list[Instruction]:
        """Parse a full RILL program, consuming the end-of-input marker."""
        program = self.parse_statements(EOF_TOKEN)
        self.cursor.expect(EOF_TOKEN)
        return program

    def parse_block(self) -> list[Instruction]:
        """Parse a block body. The closing '}' is left for the caller to consume."""
        return self.parse_statements(RBRACE)

    def parse_statements(self, terminator: Token) -> list[Instruction]:
        """Parse statements until `terminator` is next, without consuming it."""
        instructions: list[Instruction] = []
        while True:
            tok = self.cursor.peek()
            if tok is None:
                raise UnexpectedEof(terminator)
            if tok == terminator:
                return instructions
            if tok.type == "EOF":
                raise UnexpectedEof(terminator)
            instructions += self.parse_statement(tok)

    def parse_statement(self, tok: Token) -> list[Instruction]:
        """Dispatch on the statement's first token."""
        keyword = tok.keyword
        if keyword is Keyword.LET:
            return self.parse_variable_declaration()
        if keyword is Keyword.FN:
            return self.parse_function_declaration()
        if keyword is Keyword.RETURN:
            return self.parse_return()
        if tok.type == "KEYWORD":
            raise UnimplementedKeyword(tok.value, tok)

        if tok.type == "IDENT" and self.at_call_statement():
            return self.parse_call()

        LOGGER.debug("expression statement at %r%s", tok, tok.location())
        return self.parse_expression_statement()

    def at_call_statement(self) -> bool:
        """True when the cursor sits on `IDENT ( ... ) ;` with balanced parentheses."""
        if self.cursor.peek(1) != LPAREN:
            return False
        depth = 0
        offset = 1
        while True:
            tok = self.cursor.peek(offset)
            if tok is None or tok.type == "EOF":
                return False
            if tok == LPAREN:
                depth += 1
            elif tok == RPAREN:
                depth -= 1
                if depth == 0:
                    return self.cursor.peek(offset + 1) == SEMICOLON
            offset += 1

    def extract_until(self, *terminators: Token) -> list[Token]:
        return extract_until(self.cursor, terminators)

    def expect_identifier(self) -> Token:
        tok = self.cursor.consume()
        if tok is None or tok.type == "EOF":
            raise UnexpectedEof("identifier")
        if tok.type != "IDENT":
            raise UnexpectedToken("identifier", tok)
        return tok

    def parse_variable_declaration(self) -> list[Instruction]:
        """Parse `let IDENT = expr ;`."""
        self.cursor.consume()  # let
        name_tok = self.expect_identifier()
        self.cursor.expect(ASSIGN)

        code = self.translate(self.extract_until(SEMICOLON))
        self.cursor.expect(SEMICOLON)

        return list(code) + [DeclareVariable(name_tok.value)]

    def parse_function_declaration(self) -> list[Instruction]:
        """Parse `fn IDENT ( params ) { block }` into a single DeclareFunction."""
        fn_tok = self.cursor.consume()
        name_tok = self.expect_identifier()
        self.cursor.expect(LPAREN)
        params = self.parse_parameters()
        self.cursor.expect(LBRACE)

        if self.depth >= self.max_depth:
            raise ParseSyntaxError(
                f"Function '{name_tok.value}' nested deeper than {self.max_depth} levels"
                f"{fn_tok.location() if fn_tok else ''}"
            )
        self.depth += 1
        body = self.parse_block()
        self.depth -= 1
        self.cursor.expect(RBRACE)

        LOGGER.debug(
            "declared function %s(%s) with %d instruction(s)",
            name_tok.value,
            ", ".join(params),
            len(body),
        )
        return [DeclareFunction(name_tok.value, body, params)]

    def parse_parameters(self) -> list[str]:
        """Parse parameter names after '(' up to and including ')'."""
        params: list[str] = []
        while True:
            tok = self.cursor.consume()
            if tok is None or tok.type == "EOF":
                raise UnexpectedEof("parameter name or ')'")
            if tok == RPAREN:
                return params
            if tok.type != "IDENT":
                raise ParseSyntaxError(
                    f"Invalid function declaration: expected parameter name, got {tok!r}{tok.location()}"
                )
            params.append(tok.value)

            sep = self.cursor.consume()
            if sep is None or sep.type == "EOF":
                raise UnexpectedEof("',' or ')'")
            if sep == RPAREN:
                return params
            if sep != COMMA:
                raise ParseSyntaxError(
                    f"Invalid function declaration: expected ',' or ')', got {sep!r}{sep.location()}"
                )

    def parse_call(self) -> list[Instruction]:
        """Parse a statement call `IDENT ( args ) ;`; the result is left for the evaluator to discard."""
        name_tok = self.expect_identifier()
        self.cursor.expect(LPAREN)

        code: list[Instruction] = []
        arg_count = 0
        if self.cursor.peek() == RPAREN:
            self.cursor.consume()
        else:
            while True:
                code += self.translate(self.extract_until(COMMA, RPAREN))
                arg_count += 1
                if self.cursor.consume() == RPAREN:
                    break

        self.cursor.expect(SEMICOLON)
        code.append(Call(name_tok.value, arg_count))
        return code

    def parse_return(self) -> list[Instruction]:
        """Parse `return expr? ;` inside a function body."""
        ret_tok = self.cursor.consume()
        if self.depth == 0:
            raise ParseSyntaxError(
                f"'return' outside of a function{ret_tok.location() if ret_tok else ''}"
            )
        if self.cursor.peek() == SEMICOLON:
            self.cursor.consume()
            return [Ret()]

        code = self.translate(self.extract_until(SEMICOLON))
        self.cursor.expect(SEMICOLON)
        return list(code) + [Ret()]

    def parse_expression_statement(self) -> list[Instruction]:
        """Parse `expr ;`; the expression's value is popped."""
        code = self.translate(self.extract_until(SEMICOLON))
        self.cursor.expect(SEMICOLON)
        return list(code) + [Pop()]


def parse(
    tokens: Sequence[Token], translate: Translator = translate_expression
) -> list[Instruction]:
    return Parser(tokens, translate=translate).parse()


def parse_source(source: str) -> list[Instruction]:
    """Lex and parse RILL source text into IR."""
    return Parser(tokenize(source)).parse()


__all__ = [
    "EOF_TOKEN",
    "Parser",
    "TokenCursor",
    "Translator",
    "extract_until",
    "parse",
    "parse_source",
]

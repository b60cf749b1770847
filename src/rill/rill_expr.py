"""
Default expression translator for RILL.

Converts the raw token sub-sequence of an infix expression into stack
instructions (postfix order) that leave exactly one value on the stack.

Supported forms:
    - Literals: `2`, `2.5`, `"text"` -> Push
    - Variables: `x` -> GetVariable
    - Calls: `f(a, b + 1)` -> argument code, then Call("f", 2)
    - Binary operators, left-associative, loosest to tightest:
        `== !=`  <  `< <= > >=`  <  `+ -`  <  `* / %`
    - Unary minus: `-x` -> Push(0), x, Operation("-")
    - Parenthesized grouping

`translate` is the parser's default translator. The parser treats it like any
other injected `translate` callable and splices the result in place.

Nesting of groups, unary minus and call arguments is bounded by
`max_depth`; deeper input raises InvalidExpression.
"""

from collections.abc import Sequence

from rill.rill_constants import BINARY_PRECEDENCE
from rill.rill_errors import InvalidExpression
from rill.rill_ir import Call, GetVariable, Instruction, Operation, Push
from rill.rill_lexer import Token


class ExpressionTranslator:
    """Precedence-climbing translator over a fixed token sequence.

    Attributes:
        tokens (list[Token]): The expression tokens (no terminator, no EOF).
        position (int): Index of the next unread token.
        max_depth (int): Maximum nesting of operands.
        depth (int): Current operand nesting.
    """

    def __init__(self, tokens: Sequence[Token], max_depth: int = 64) -> None:
        self.tokens: list[Token] = list(tokens)
        self.position: int = 0
        self.max_depth = max_depth
        self.depth = 0

    def current(self) -> Token | None:
        if self.position < len(self.tokens):
            return self.tokens[self.position]
        return None

    def advance(self) -> Token:
        tok = self.current()
        if tok is None:
            raise InvalidExpression("Unexpected end of expression", self.tokens)
        self.position += 1
        return tok

    def is_operator(self, text: str) -> bool:
        tok = self.current()
        return tok is not None and tok.type == "OPERATOR" and tok.value == text

    def translate(self) -> list[Instruction]:
        if not self.tokens:
            raise InvalidExpression("Expected an expression", self.tokens)
        code = self.parse_binary(0)
        tok = self.current()
        if tok is not None:
            raise InvalidExpression(
                f"Unexpected {tok!r} in expression{tok.location()}", self.tokens
            )
        return code

    def parse_binary(self, min_prec: int) -> list[Instruction]:
        code = self.parse_unary()
        while True:
            tok = self.current()
            if tok is None or tok.type != "OPERATOR":
                return code
            prec = BINARY_PRECEDENCE.get(tok.value)
            if prec is None or prec < min_prec:
                return code
            self.advance()
            code += self.parse_binary(prec + 1)
            code.append(Operation(tok.value))

    def parse_unary(self) -> list[Instruction]:
        if self.depth >= self.max_depth:
            tok = self.current()
            raise InvalidExpression(
                f"Expression nested deeper than {self.max_depth} levels"
                f"{tok.location() if tok else ''}",
                self.tokens,
            )
        self.depth += 1
        if self.is_operator("-"):
            self.advance()
            code = [Push(0)] + self.parse_unary() + [Operation("-")]
        else:
            code = self.parse_primary()
        self.depth -= 1
        return code

    def parse_primary(self) -> list[Instruction]:
        tok = self.advance()

        if tok.type == "NUMBER":
            return [Push(int(tok.value))]
        if tok.type == "FLOAT":
            return [Push(float(tok.value))]
        if tok.type == "STRING":
            return [Push(tok.value)]

        if tok.type == "IDENT":
            if self.is_operator("("):
                return self.parse_call(tok.value)
            return [GetVariable(tok.value)]

        if tok.type == "OPERATOR" and tok.value == "(":
            code = self.parse_binary(0)
            if not self.is_operator(")"):
                raise InvalidExpression(
                    f"Expected ')' to close group{tok.location()}", self.tokens
                )
            self.advance()
            return code

        raise InvalidExpression(
            f"Unexpected {tok!r} in expression{tok.location()}", self.tokens
        )

    def parse_call(self, name: str) -> list[Instruction]:
        self.advance()  # (
        code: list[Instruction] = []
        arg_count = 0
        if self.is_operator(")"):
            self.advance()
            return [Call(name, 0)]
        while True:
            code += self.parse_binary(0)
            arg_count += 1
            sep = self.advance()
            if sep.type == "SYMBOL" and sep.value == ",":
                continue
            if sep.type == "OPERATOR" and sep.value == ")":
                break
            raise InvalidExpression(
                f"Expected ',' or ')' in call to '{name}', got {sep!r}{sep.location()}",
                self.tokens,
            )
        code.append(Call(name, arg_count))
        return code


def translate(tokens: Sequence[Token]) -> list[Instruction]:
    """Translates an infix expression's tokens into stack instructions.

    Raises:
        InvalidExpression: If the tokens do not form a single well-formed expression,
            or nest deeper than the translator's default `max_depth`.
    """
    return ExpressionTranslator(tokens).translate()


__all__ = ["ExpressionTranslator", "translate"]

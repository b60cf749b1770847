"""
Lexical tables shared by the RILL lexer, parser and expression translator.

Exports:
    - Keyword: closed set of reserved words, decided at lex time
    - token_hashmap: operator/symbol text -> token type
    - keyword_map: keyword text -> Keyword
    - BINARY_PRECEDENCE: binary operator -> binding power
"""

from enum import Enum


class Keyword(str, Enum):
    """Reserved words of the RILL language."""

    LET = "let"
    FN = "fn"
    RETURN = "return"
    IF = "if"
    ELSE = "else"
    WHILE = "while"


keyword_map: dict[str, Keyword] = {kw.value: kw for kw in Keyword}

# Longest match wins in the lexer, so "==" beats "=" and "<=" beats "<".
token_hashmap: dict[str, str] = {
    "+": "OPERATOR",
    "-": "OPERATOR",
    "*": "OPERATOR",
    "/": "OPERATOR",
    "%": "OPERATOR",
    "==": "OPERATOR",
    "!=": "OPERATOR",
    "<": "OPERATOR",
    "<=": "OPERATOR",
    ">": "OPERATOR",
    ">=": "OPERATOR",
    "(": "OPERATOR",
    ")": "OPERATOR",
    "=": "SYMBOL",
    ";": "SYMBOL",
    ",": "SYMBOL",
    "{": "SYMBOL",
    "}": "SYMBOL",
}

BINARY_PRECEDENCE: dict[str, int] = {
    "==": 0,
    "!=": 0,
    "<": 1,
    "<=": 1,
    ">": 1,
    ">=": 1,
    "+": 2,
    "-": 2,
    "*": 3,
    "/": 3,
    "%": 3,
}

__all__ = ["BINARY_PRECEDENCE", "Keyword", "keyword_map", "token_hashmap"]

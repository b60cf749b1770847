import pytest
from hypothesis import given
from hypothesis import strategies as st

from rill.rill_constants import Keyword
from rill.rill_lexer import CharacterStream, Lexer, Token, tokenize


def tokenize_no_eof(source: str) -> list[Token]:
    tokens = tokenize(source)
    assert tokens[-1].type == "EOF"
    return tokens[:-1]


def test_single_char_tokens() -> None:
    code = "+ - * / % < > ( ) = ; , { }"
    expected = [
        ("OPERATOR", "+"),
        ("OPERATOR", "-"),
        ("OPERATOR", "*"),
        ("OPERATOR", "/"),
        ("OPERATOR", "%"),
        ("OPERATOR", "<"),
        ("OPERATOR", ">"),
        ("OPERATOR", "("),
        ("OPERATOR", ")"),
        ("SYMBOL", "="),
        ("SYMBOL", ";"),
        ("SYMBOL", ","),
        ("SYMBOL", "{"),
        ("SYMBOL", "}"),
    ]
    tokens = tokenize_no_eof(code)
    assert [(t.type, t.value) for t in tokens] == expected


def test_longest_match_operators() -> None:
    tokens = tokenize_no_eof("== != <= >= = < >")
    assert [t.value for t in tokens] == ["==", "!=", "<=", ">=", "=", "<", ">"]
    assert [t.type for t in tokens] == ["OPERATOR"] * 4 + ["SYMBOL"] + ["OPERATOR"] * 2


def test_equals_without_space() -> None:
    tokens = tokenize_no_eof("x==y")
    assert tokens == [
        Token("IDENT", "x"),
        Token("OPERATOR", "=="),
        Token("IDENT", "y"),
    ]


@pytest.mark.parametrize("word", [kw.value for kw in Keyword])
def test_keywords(word: str) -> None:
    (tok,) = tokenize_no_eof(word)
    assert tok.type == "KEYWORD"
    assert tok.value == word
    assert tok.keyword is Keyword(word)


def test_keyword_prefix_is_identifier() -> None:
    (tok,) = tokenize_no_eof("letter")
    assert tok.type == "IDENT"
    assert tok.keyword is None


def test_keywords_are_case_sensitive() -> None:
    (tok,) = tokenize_no_eof("LET")
    assert tok.type == "IDENT"


def test_identifier_token() -> None:
    (tok,) = tokenize_no_eof("_my_Var2")
    assert tok.type == "IDENT"
    assert tok.value == "_my_Var2"


def test_number_token() -> None:
    (tok,) = tokenize_no_eof("123")
    assert tok.type == "NUMBER"
    assert tok.value == "123"


def test_float_token() -> None:
    (tok,) = tokenize_no_eof("123.456")
    assert tok.type == "FLOAT"
    assert tok.value == "123.456"


def test_string_token() -> None:
    (tok,) = tokenize_no_eof('"hello world"')
    assert tok.type == "STRING"
    assert tok.value == "hello world"


def test_single_quoted_string() -> None:
    (tok,) = tokenize_no_eof("'it'")
    assert tok == Token("STRING", "it")


def test_escape_sequences_in_string() -> None:
    (tok,) = tokenize_no_eof('"line\\nbreak \\"q\\" \\\\"')
    assert tok.value == 'line\nbreak "q" \\'


def test_let_statement_tokens() -> None:
    assert tokenize("let x = 2;") == [
        Token("KEYWORD", "let"),
        Token("IDENT", "x"),
        Token("SYMBOL", "="),
        Token("NUMBER", "2"),
        Token("SYMBOL", ";"),
        Token("EOF", "EOF"),
    ]


def test_line_and_column_tracking() -> None:
    tokens = tokenize_no_eof("let x = 1;\n  foo();")
    foo = tokens[5]
    assert foo.value == "foo"
    assert foo.line == 2
    assert foo.col == 3


def test_skip_whitespace_and_comments() -> None:
    tokens = tokenize_no_eof("   \n  # a comment\n123 # trailing")
    assert tokens == [Token("NUMBER", "123")]


def test_empty_input_returns_eof() -> None:
    assert tokenize("") == [Token("EOF", "EOF")]
    assert tokenize("  # only a comment") == [Token("EOF", "EOF")]


def test_token_equality_ignores_location() -> None:
    t1 = Token("NUMBER", "42", 1, 2)
    t2 = Token("NUMBER", "42", 7, 9)
    t3 = Token("IDENT", "42", 1, 2)

    assert repr(t1) == "Token(NUMBER, 42)"
    assert t1 == t2
    assert t1 != t3
    assert t1 != "42"

    token_set = {t1, t2, t3}
    assert len(token_set) == 2


def test_token_location() -> None:
    assert Token("IDENT", "x", 3, 4).location() == " at line 3, col 4"
    assert Token("IDENT", "x").location() == ""


def test_character_stream_methods() -> None:
    stream = CharacterStream("abc")
    assert stream.peek() == "a"
    assert stream.next() == "a"
    assert stream.peek() == "b"
    assert not stream.end_of_file()
    stream.next()
    stream.next()
    assert stream.end_of_file()
    assert stream.peek() == ""
    assert stream.peek(5) == ""


def test_character_stream_next_past_eof_raises() -> None:
    with pytest.raises(EOFError, match="Attempted to read past end of source"):
        CharacterStream("").next()


def test_unclosed_string_raises() -> None:
    with pytest.raises(SyntaxError, match="Unterminated string"):
        tokenize('"abc')


def test_unterminated_string_with_trailing_escape() -> None:
    with pytest.raises(SyntaxError, match="Unterminated string"):
        tokenize('"abc\\')


@pytest.mark.parametrize("source", ["123..456", "1.2.3", "7."])
def test_malformed_float(source: str) -> None:
    with pytest.raises(SyntaxError, match="Invalid float format at line 1, col 1"):
        tokenize(source)


@pytest.mark.parametrize("source", ["`", "~", "!", "let x = 1 & 2;"])
def test_unknown_character_raises(source: str) -> None:
    with pytest.raises(SyntaxError, match="Unexpected character"):
        tokenize(source)


def test_lexer_next_token_after_eof_keeps_returning_eof() -> None:
    lexer = Lexer(CharacterStream("x"))
    assert lexer.next_token() == Token("IDENT", "x")
    assert lexer.next_token().type == "EOF"
    assert lexer.next_token().type == "EOF"


@given(st.text(min_size=1, max_size=100))  # type: ignore[misc]
def test_lexer_does_not_crash_on_random_input(input_str: str) -> None:
    try:
        tokens = tokenize(input_str)
    except SyntaxError as e:
        assert (
            "Unterminated string" in str(e)
            or "Invalid float format" in str(e)
            or "Unexpected character" in str(e)
        )
    else:
        assert tokens[-1].type == "EOF"
        assert all(t.type != "EOF" for t in tokens[:-1])


@given(
    st.lists(
        st.from_regex(r"[a-z_][a-z0-9_]{0,8}", fullmatch=True), min_size=1, max_size=10
    )
)  # type: ignore[misc]
def test_words_roundtrip_as_identifiers_or_keywords(words: list[str]) -> None:
    tokens = tokenize_no_eof(" ".join(words))
    assert [t.value for t in tokens] == words
    for tok in tokens:
        assert tok.type in ("IDENT", "KEYWORD")

import pytest
from hypothesis import given
from hypothesis import strategies as st

from rill.rill_errors import InvalidExpression
from rill.rill_expr import ExpressionTranslator, translate
from rill.rill_ir import Call, GetVariable, Instruction, Operation, Push, check_stack
from rill.rill_lexer import Token, tokenize


def expr(source: str) -> list[Instruction]:
    return translate(tokenize(source)[:-1])


@pytest.mark.parametrize(
    "source,expected",
    [
        ("2", [Push(2)]),
        ("2.5", [Push(2.5)]),
        ('"s"', [Push("s")]),
        ("x", [GetVariable("x")]),
        ("1 + 2", [Push(1), Push(2), Operation("+")]),
        ("1 - 2 - 3", [Push(1), Push(2), Operation("-"), Push(3), Operation("-")]),
        ("1 + 2 * 3", [Push(1), Push(2), Push(3), Operation("*"), Operation("+")]),
        ("(1 + 2) * 3", [Push(1), Push(2), Operation("+"), Push(3), Operation("*")]),
        ("a % b / c", [GetVariable("a"), GetVariable("b"), Operation("%"), GetVariable("c"), Operation("/")]),
        (
            "a < b == c >= d",
            [
                GetVariable("a"),
                GetVariable("b"),
                Operation("<"),
                GetVariable("c"),
                GetVariable("d"),
                Operation(">="),
                Operation("=="),
            ],
        ),
        ("x != 1 + 1", [GetVariable("x"), Push(1), Push(1), Operation("+"), Operation("!=")]),
        ("-x", [Push(0), GetVariable("x"), Operation("-")]),
        (
            "-x * 2",
            [Push(0), GetVariable("x"), Operation("-"), Push(2), Operation("*")],
        ),
        ("2 - -1", [Push(2), Push(0), Push(1), Operation("-"), Operation("-")]),
        ("f()", [Call("f", 0)]),
        ("f(1)", [Push(1), Call("f", 1)]),
        (
            "f(a, b + 1, g())",
            [
                GetVariable("a"),
                GetVariable("b"),
                Push(1),
                Operation("+"),
                Call("g", 0),
                Call("f", 3),
            ],
        ),
        ("f(g(h(1)))", [Push(1), Call("h", 1), Call("g", 1), Call("f", 1)]),
        ("((((7))))", [Push(7)]),
    ],
)
def test_translate(source: str, expected: list[Instruction]) -> None:
    assert expr(source) == expected


@pytest.mark.parametrize(
    "source",
    [
        "1 +",
        "* 2",
        "(1 + 2",
        "1 + 2)",
        "1 2",
        "f(1,)",
        "f(1 2)",
        "f(1",
        "let",
        "x = 1",
        "{ }",
        "()",
    ],
)
def test_translate_rejects_malformed(source: str) -> None:
    with pytest.raises(InvalidExpression):
        expr(source)


def test_translate_empty() -> None:
    with pytest.raises(InvalidExpression, match="Expected an expression"):
        translate([])


def test_invalid_expression_carries_tokens() -> None:
    with pytest.raises(InvalidExpression) as excinfo:
        expr("1 +")
    assert excinfo.value.tokens == [Token("NUMBER", "1"), Token("OPERATOR", "+")]


def test_error_message_has_location() -> None:
    with pytest.raises(InvalidExpression, match="line 1, col 3"):
        expr("1 2")


def test_translator_is_reusable_per_instance() -> None:
    translator = ExpressionTranslator(tokenize("a + 1")[:-1])
    assert translator.translate() == [GetVariable("a"), Push(1), Operation("+")]
    assert translator.position == 3


def test_nesting_within_bound() -> None:
    assert expr("(" * 60 + "1" + ")" * 60) == [Push(1)]
    assert check_stack(expr("-" * 60 + "1")) == 1


@pytest.mark.parametrize(
    "source",
    ["(" * 400 + "1" + ")" * 400, "-" * 1200 + "x", "f(" * 400 + ")" * 400],
)
def test_nesting_beyond_bound(source: str) -> None:
    with pytest.raises(InvalidExpression, match="nested deeper than 64 levels"):
        expr(source)


def test_nesting_bound_is_configurable() -> None:
    tokens = tokenize("-(-(1))")[:-1]
    assert check_stack(ExpressionTranslator(tokens, max_depth=5).translate()) == 1
    with pytest.raises(InvalidExpression, match="nested deeper than 4 levels"):
        ExpressionTranslator(tokens, max_depth=4).translate()


operands = st.one_of(
    st.integers(min_value=0, max_value=999).map(str),
    st.sampled_from(["a", "b", "c"]),
)


@st.composite  # type: ignore[misc]
def expressions(draw: st.DrawFn, depth: int = 3) -> str:
    if depth == 0 or draw(st.booleans()):
        return draw(operands)
    kind = draw(st.sampled_from(["binary", "paren", "neg", "call"]))
    if kind == "binary":
        op = draw(st.sampled_from(["+", "-", "*", "/", "%", "<", "<=", ">", ">=", "==", "!="]))
        return f"{draw(expressions(depth - 1))} {op} {draw(expressions(depth - 1))}"
    if kind == "paren":
        return f"({draw(expressions(depth - 1))})"
    if kind == "neg":
        return f"-{draw(expressions(depth - 1))}"
    args = draw(st.lists(expressions(depth - 1), max_size=3))
    return f"f({', '.join(args)})"


@given(expressions())  # type: ignore[misc]
def test_translation_leaves_exactly_one_value(source: str) -> None:
    assert check_stack(expr(source)) == 1

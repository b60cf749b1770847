"""
Defines the stack-oriented instruction set (IR) emitted by the RILL parser.

The IR is a flat sequence of instructions executed left to right against an
evaluation stack. It is flat everywhere except at function boundaries:
`DeclareFunction` carries its body as a nested instruction sequence, so a
program is a shallow tree.

Classes:
    Instruction:
        Base class. Each variant declares how many stack values it consumes
        and produces, supports structural equality, and serializes with `to_dict()`.

    Push, GetVariable, DeclareVariable, Operation, Call, Ret, Pop, DeclareFunction:
        The closed set of instruction variants.

    InstructionDict:
        TypedDict shape of a serialized instruction, suitable for JSON output.

Functions:
    check_stack(instructions) -> int:
        Verifies no instruction underflows the stack and returns the final depth.
    format_listing(instructions) -> str:
        Renders an indented, human-readable listing.

Stack effects:
    | Variant                     | Consumes  | Produces |
    |-----------------------------|-----------|----------|
    | Push(value)                 | 0         | 1        |
    | GetVariable(name)           | 0         | 1        |
    | DeclareVariable(name)       | 1         | 0        |
    | Operation(op)               | 2         | 1        |
    | Call(name, arg_count)       | arg_count | 1        |
    | Ret()                       | all       | 0        |
    | Pop()                       | 1         | 0        |
    | DeclareFunction(name, body) | 0         | 0        |
"""

from collections.abc import Sequence
from typing import Any, TypedDict, Union

from rill.rill_errors import StackUnderflow

Value = Union[int, float, str, bool]


class InstructionDict(TypedDict, total=False):
    """
    TypedDict representation of an Instruction used for serialization.

    Fields:
        kind (str): The instruction variant (e.g. "push", "call").
        value (Any): Literal value for "push".
        name (str): Variable or function name.
        op (str): Operator text for "operation".
        arg_count (int): Number of arguments for "call".
        params (list[str]): Parameter names for "declare_function".
        body (list[InstructionDict]): Function body for "declare_function".
    """

    kind: str
    value: Any
    name: str
    op: str
    arg_count: int
    params: list[str]
    body: list["InstructionDict"]


class Instruction:
    """
    Base class for RILL IR instructions.

    Subclasses set `kind`, `consumes` and `produces` and implement `operands()`.
    Two instructions are equal when they are the same variant with equal operands.
    """

    kind: str = ""
    consumes: int = 0
    produces: int = 0

    def operands(self) -> tuple[Any, ...]:
        return ()

    def fields(self) -> dict[str, Any]:
        return {}

    def __repr__(self) -> str:
        return f"{type(self).__name__}({', '.join(repr(o) for o in self.operands())})"

    def __eq__(self, other: Any) -> bool:
        return type(self) is type(other) and self.operands() == other.operands()

    __hash__ = None  # type: ignore[assignment]

    def to_dict(self) -> InstructionDict:
        data: dict[str, Any] = {"kind": self.kind}
        data.update(self.fields())
        return data  # type: ignore[return-value]


class Push(Instruction):
    """Push a literal value onto the stack."""

    kind = "push"
    produces = 1

    def __init__(self, value: Value):
        self.value = value

    def operands(self) -> tuple[Any, ...]:
        # bool is an int subclass; keep Push(True) distinct from Push(1)
        return (type(self.value).__name__, self.value)

    def __repr__(self) -> str:
        return f"Push({self.value!r})"

    def fields(self) -> dict[str, Any]:
        return {"value": self.value}


class GetVariable(Instruction):
    """Push the value bound to `name`."""

    kind = "get_variable"
    produces = 1

    def __init__(self, name: str):
        self.name = name

    def operands(self) -> tuple[Any, ...]:
        return (self.name,)

    def fields(self) -> dict[str, Any]:
        return {"name": self.name}


class DeclareVariable(Instruction):
    """Pop the top of the stack and bind it to `name`."""

    kind = "declare_variable"
    consumes = 1

    def __init__(self, name: str):
        self.name = name

    def operands(self) -> tuple[Any, ...]:
        return (self.name,)

    def fields(self) -> dict[str, Any]:
        return {"name": self.name}


class Operation(Instruction):
    """Pop two operands, apply the binary operator `op`, push the result."""

    kind = "operation"
    consumes = 2
    produces = 1

    def __init__(self, op: str):
        self.op = op

    def operands(self) -> tuple[Any, ...]:
        return (self.op,)

    def fields(self) -> dict[str, Any]:
        return {"op": self.op}


class Call(Instruction):
    """Pop `arg_count` arguments, invoke `name`, push its result."""

    kind = "call"
    produces = 1

    def __init__(self, name: str, arg_count: int = 0):
        if arg_count < 0:
            raise ValueError(f"arg_count must be non-negative, got {arg_count}")
        self.name = name
        self.arg_count = arg_count

    @property  # type: ignore[override]
    def consumes(self) -> int:
        return self.arg_count

    def operands(self) -> tuple[Any, ...]:
        return (self.name, self.arg_count)

    def fields(self) -> dict[str, Any]:
        return {"name": self.name, "arg_count": self.arg_count}


class Ret(Instruction):
    """Return from the enclosing function, yielding the top of stack if any."""

    kind = "ret"


class Pop(Instruction):
    """Discard the top of the stack."""

    kind = "pop"
    consumes = 1


class DeclareFunction(Instruction):
    """
    Bind `name` to a function whose body is an ordered instruction sequence.

    Args:
        name (str): Function name.
        body (Sequence[Instruction]): The function body.
        params (Sequence[str]): Parameter names, in declaration order. The
            evaluator binds call arguments to these names.
    """

    kind = "declare_function"

    def __init__(
        self,
        name: str,
        body: Sequence[Instruction] = (),
        params: Sequence[str] = (),
    ):
        self.name = name
        self.body: list[Instruction] = list(body)
        self.params: tuple[str, ...] = tuple(params)

    def operands(self) -> tuple[Any, ...]:
        return (self.name, self.body, self.params)

    def __repr__(self) -> str:
        if self.params:
            return f"DeclareFunction({self.name!r}, {self.body!r}, params={self.params!r})"
        return f"DeclareFunction({self.name!r}, {self.body!r})"

    def fields(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "params": list(self.params),
            "body": [instr.to_dict() for instr in self.body],
        }


def check_stack(instructions: Sequence[Instruction]) -> int:
    """Simulates stack depth over `instructions` and returns the final depth.

    Function bodies are checked recursively, each starting from an empty stack
    (arguments are bound to parameter names, not passed on the stack). A Call
    counts as producing one value, so the result is an upper bound when calls
    appear in statement position.

    Raises:
        StackUnderflow: If any instruction consumes more values than are present.
    """
    depth = 0
    for index, instr in enumerate(instructions):
        if isinstance(instr, DeclareFunction):
            check_stack(instr.body)
            continue
        if isinstance(instr, Ret):
            depth = 0
            continue
        if instr.consumes > depth:
            raise StackUnderflow(
                f"{instr!r} at index {index} needs {instr.consumes} value(s), stack holds {depth}",
                index,
                depth,
            )
        depth += instr.produces - instr.consumes
    return depth


def _format_operands(instr: Instruction) -> str:
    if isinstance(instr, Push):
        return repr(instr.value)
    if isinstance(instr, Call):
        return f"{instr.name}/{instr.arg_count}"
    if isinstance(instr, DeclareFunction):
        return f"{instr.name}({', '.join(instr.params)})"
    return " ".join(str(o) for o in instr.operands())


def format_listing(instructions: Sequence[Instruction], indent: int = 0) -> str:
    """Renders instructions one per line; function bodies are indented beneath their declaration."""
    pad = "    " * indent
    lines = []
    for instr in instructions:
        operands = _format_operands(instr)
        lines.append(f"{pad}{instr.kind.upper()} {operands}".rstrip())
        if isinstance(instr, DeclareFunction) and instr.body:
            lines.append(format_listing(instr.body, indent + 1))
    return "\n".join(lines)


__all__ = [
    "Call",
    "DeclareFunction",
    "DeclareVariable",
    "GetVariable",
    "Instruction",
    "InstructionDict",
    "Operation",
    "Pop",
    "Push",
    "Ret",
    "Value",
    "check_stack",
    "format_listing",
]

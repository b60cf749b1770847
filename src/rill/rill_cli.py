"""
RILL CLI Entrypoint.

This module provides the command-line interface for compiling RILL source code to IR.

Features:
    - Read source from `.rill` files or inline strings.
    - Lex and parse code into the stack-oriented instruction sequence.
    - Print the IR as an indented listing or as JSON.
    - Optionally verify stack balance of the emitted IR.
    - Output to console or file.

Example usage:
    rill hello.rill
    rill -s "let x = 1 + 2;" --json
    rill prog.rill --check -o prog.ir
    rill prog.rill --verbose

Functions:
    run_rill(source: str, is_string: bool = False, as_json: bool = False,
             check: bool = False, out: Optional[str] = None) -> str:
        Executes the RILL pipeline (lex → parse → format → output).

    main(argv: Optional[list[str]] = None) -> int:
        Parses CLI arguments, runs the pipeline and reports errors.
"""

import argparse
import json
import logging
import sys

from rill.rill_errors import StackUnderflow
from rill.rill_ir import check_stack, format_listing
from rill.rill_lexer import CharacterStream, Lexer
from rill.rill_parser import Parser

LOGGER = logging.getLogger(__name__)


def run_rill(
    source: str,
    is_string: bool = False,
    as_json: bool = False,
    check: bool = False,
    out: str | None = None,
) -> str:
    """
    Run the RILL toolchain: lex, parse, format, and write output.

    Args:
        source (str): The RILL source code or path to a `.rill` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        as_json (bool): If True, render the IR as JSON instead of a listing.
        check (bool): If True, verify the IR never underflows the stack and
            report the final depth on stderr.
        out (str | None): Optional path to write the output. If None, prints to stdout.

    Returns:
        str: The rendered IR.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.rill'.
        SyntaxError: On any lexing or parsing error.
        StackUnderflow: If `check` is set and the IR is not stack-balanced.
    """
    if not is_string and not source.endswith(".rill"):
        raise ValueError("Only .rill files are supported.")
    # 1. Read source
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    # 2. Lexing
    tokens = Lexer(CharacterStream(source)).tokenize()
    LOGGER.debug("lexed %d token(s)", len(tokens))

    # 3. Parsing
    program = Parser(tokens).parse()
    LOGGER.debug("parsed %d top-level instruction(s)", len(program))

    # 4. Optional stack check
    if check:
        depth = check_stack(program)
        print(f"stack check passed, final depth {depth}", file=sys.stderr)

    # 5. Formatting
    if as_json:
        code = json.dumps([instr.to_dict() for instr in program], indent=2)
    else:
        code = format_listing(program)

    # 6. Output result
    if out:
        with open(out, "w", encoding="utf-8") as f:
            f.write(code + "\n")
        LOGGER.info("wrote IR to %s", out)
    else:
        print(code)
    return code


def main(argv: list[str] | None = None) -> int:
    """
    Entry point for the RILL CLI.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `--json`: Emit the IR as JSON.
        - `--check`: Verify stack balance of the emitted IR.
        - `-o`, `--out`: Write output to a file.
        - `-v`, `--verbose`: Enable debug logging.

    Returns:
        int: Process exit status (0 on success, 1 on error).
    """
    parser = argparse.ArgumentParser(prog="rill")
    parser.add_argument("source", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--json", dest="as_json", action="store_true", help="Emit IR as JSON"
    )
    parser.add_argument(
        "--check", action="store_true", help="Verify the IR is stack-balanced"
    )
    parser.add_argument("-o", "--out", metavar="OUTFILE", help="Output to file")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        run_rill(
            source=args.source,
            is_string=args.string,
            as_json=args.as_json,
            check=args.check,
            out=args.out,
        )
    except (SyntaxError, StackUnderflow, ValueError, OSError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    sys.exit(main())

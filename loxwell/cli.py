"""Command-line entry point: runs a script file, or reads lines in a REPL."""
from __future__ import annotations
import argparse
import sys

from termcolor import colored

from .ast_printer import AstPrinter
from .errors import ErrorReporter
from .lexer import scan
from .parser import parse
from .interpreter import DEFAULT_MAX_CALL_DEPTH
from .session import LoxSession

EXIT_USAGE = 64
EXIT_NO_INPUT = 66


def _red(text: str) -> str:
    return colored(text, "red", attrs=["bold"])


def dump(source: str, out, tokens=False, tree=False):
    """Write the token stream and/or syntax tree of ``source`` to ``out``."""
    reporter = ErrorReporter()
    token_list = scan(source, reporter)
    if tokens:
        for token in token_list:
            out.write(f"{token}\n")
    if tree:
        try:
            out.write(AstPrinter().print(parse(token_list, reporter)) + "\n")
        except RecursionError:
            sys.stderr.write("Syntax tree nested too deeply to print.\n")


def run_prompt(session: LoxSession, stdin=None, stdout=None):
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    while True:
        stdout.write("> ")
        stdout.flush()
        line = stdin.readline()
        if not line:
            stdout.write("\n")
            break
        session.run(line)


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="loxwell", description="Run a Lox script.")
    parser.add_argument("script", nargs="?", help="script to run (if omitted, starts a REPL)")
    parser.add_argument("--tokens", action="store_true", help="print the token stream before running")
    parser.add_argument("--ast", action="store_true", help="print the syntax tree before running")
    parser.add_argument("--no-color", action="store_true", help="do not colour diagnostics")
    parser.add_argument("--max-call-depth", type=int, default=DEFAULT_MAX_CALL_DEPTH)
    parser.add_argument("--max-instructions", type=int, default=None)
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return EXIT_USAGE if e.code else 0

    session = LoxSession(
        stdout=sys.stdout,
        stderr=sys.stderr,
        colorize=None if args.no_color else _red,
        max_call_depth=args.max_call_depth,
        max_instructions=args.max_instructions,
    )

    if args.script is None:
        run_prompt(session)
        return 0

    try:
        with open(args.script, encoding="utf-8") as f:
            source = f.read()
    except OSError as e:
        sys.stderr.write(f"Error reading file: {e}\n")
        return EXIT_NO_INPUT

    if args.tokens or args.ast:
        dump(source, sys.stdout, tokens=args.tokens, tree=args.ast)
    return session.run(source)


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations
import logging
from typing import Any, Callable, TextIO
from . import ast_nodes as ast
from .errors import ErrorReporter, LoxRuntimeError, LoxSyntaxError
from .interpreter import DEFAULT_MAX_CALL_DEPTH, Interpreter
from .lexer import scan
from .parser import Parser
from .resolver import Resolver
from .stdlib import install_stdlib
from .runtime import NativeFunction

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_STATIC_ERROR = 65
EXIT_RUNTIME_ERROR = 70


class LoxSession:
    """A Lox execution session.

    Globals and resolved variable distances persist across calls, so a
    session can back a REPL one line at a time. Error flags are reset at the
    start of every call.

    Args:
        stdout: Stream ``print`` writes to, in addition to the captured output.
        stderr: Stream diagnostics are written to.
        colorize: Optional ``str -> str`` applied to diagnostics before writing.
        max_call_depth: Max function call nesting depth (default 1000). The Python
            recursion limit is raised to fit it.
        max_instructions: Max statements executed per call (default unlimited).
    """

    def __init__(
        self,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
        colorize: Callable[[str], str] | None = None,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
        max_instructions: int | None = None,
    ):
        self.reporter = ErrorReporter(stderr, colorize)
        self.interpreter = Interpreter(
            self.reporter,
            stdout=stdout,
            max_call_depth=max_call_depth,
            max_instructions=max_instructions,
        )
        install_stdlib(self.interpreter)

    def _reset(self):
        self.reporter.reset()
        self.interpreter.output = []
        self.interpreter.instructions = 0

    def _compile(self, source: str) -> list | None:
        """Scan, parse and resolve; None when any static error was reported."""
        tokens = scan(source, self.reporter)
        logger.debug("scanned %d tokens", len(tokens))
        statements = Parser(tokens, self.reporter).parse()
        logger.debug("parsed %d statements", len(statements))
        if self.reporter.had_error:
            return None
        Resolver(self.interpreter, self.reporter).resolve(statements)
        if self.reporter.had_error:
            return None
        return statements

    def run(self, source: str) -> int:
        """Run ``source`` and return the process exit status for it."""
        self._reset()
        statements = self._compile(source)
        if statements is None:
            logger.debug("%d static errors, execution suppressed", len(self.reporter.diagnostics))
            return EXIT_STATIC_ERROR
        self.interpreter.interpret(statements)
        if self.reporter.had_runtime_error:
            return EXIT_RUNTIME_ERROR
        return EXIT_OK

    def execute(self, code: str) -> str:
        """Execute Lox code and return the printed output as a string."""
        status = self.run(code)
        if status == EXIT_STATIC_ERROR:
            raise LoxSyntaxError(list(self.reporter.diagnostics), self.reporter.lines[0])
        if status == EXIT_RUNTIME_ERROR:
            raise self.reporter.runtime_errors[0]
        return "\n".join(self.interpreter.output)

    def eval(self, expression: str) -> Any:
        """Evaluate a single Lox expression and return its value."""
        self._reset()
        tokens = scan(expression, self.reporter)
        expr = Parser(tokens, self.reporter).parse_expression()
        if not self.reporter.had_error:
            line = tokens[0].line
            self.interpreter.line = line
            Resolver(self.interpreter, self.reporter).resolve([ast.Expression(expr, line=line)])
        if self.reporter.had_error:
            raise LoxSyntaxError(list(self.reporter.diagnostics), self.reporter.lines[0])
        try:
            return self.interpreter.evaluate(expr)
        except LoxRuntimeError as error:
            self.reporter.runtime_error(error)
            raise

    def get(self, name: str) -> Any:
        """Get a global variable; a missing name yields None."""
        return self.interpreter.globals.values.get(name)

    def define(self, name: str, value: Any):
        """Define a global variable from a Python value."""
        if isinstance(value, int) and not isinstance(value, bool):
            value = float(value)
        self.interpreter.globals.define(name, value)

    def define_native(self, name: str, arity: int, func: Callable):
        """Expose a Python callable to scripts as a global function."""
        self.interpreter.globals.define(name, NativeFunction(name, arity, func))

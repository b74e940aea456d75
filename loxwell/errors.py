from __future__ import annotations
from typing import TYPE_CHECKING, TextIO

if TYPE_CHECKING:
    from .lexer import Token


class LoxError(Exception):
    pass


class LoxSyntaxError(LoxError):
    """Raised by a session when scanning, parsing or resolving reported errors."""

    def __init__(self, diagnostics: list[str], line=None):
        self.diagnostics = diagnostics
        self.line = line
        super().__init__("\n".join(diagnostics))


class LoxRuntimeError(LoxError):
    """``token`` may be None when only the statement's line is known."""

    def __init__(self, token: Token | None, message: str, line: int | None = None):
        self.token = token
        self.message = message
        self._line = line
        super().__init__(message)

    @property
    def line(self) -> int:
        if self._line is not None:
            return self._line
        return self.token.line


class LoxInternalError(LoxError):
    pass


class ErrorReporter:
    """Collects diagnostics from every stage of the pipeline.

    Static errors (lexical, syntactic, resolution) go through ``report`` and
    ``error_at``; runtime errors through ``runtime_error``. Each entry is
    recorded and, when a stream is given, written to it as well.
    """

    def __init__(self, stream: TextIO | None = None, colorize=None):
        self.stream = stream
        self.colorize = colorize
        self.diagnostics: list[str] = []
        self.lines: list[int] = []
        self.runtime_errors: list[LoxRuntimeError] = []

    @property
    def had_error(self) -> bool:
        return bool(self.diagnostics)

    @property
    def had_runtime_error(self) -> bool:
        return bool(self.runtime_errors)

    def reset(self):
        self.diagnostics = []
        self.lines = []
        self.runtime_errors = []

    def report(self, line: int, where: str, message: str):
        text = f"[line {line}] Error{where}: {message}"
        self.diagnostics.append(text)
        self.lines.append(line)
        self._write(text)

    def error_at(self, token: Token, message: str):
        if token.type.name == "EOF":
            self.report(token.line, " at end", message)
        else:
            self.report(token.line, f" at '{token.lexeme}'", message)

    def runtime_error(self, error: LoxRuntimeError):
        self.runtime_errors.append(error)
        self._write(f"{error.message}\n[line {error.line}]")

    def _write(self, text: str):
        if self.stream is None:
            return
        if self.colorize is not None:
            text = self.colorize(text)
        self.stream.write(text + "\n")

from .session import LoxSession
from .errors import LoxError, LoxSyntaxError, LoxRuntimeError, ErrorReporter
from .lexer import scan
from .parser import parse
from .resolver import resolve
from .interpreter import Interpreter

__all__ = [
    "LoxSession", "LoxError", "LoxSyntaxError", "LoxRuntimeError",
    "ErrorReporter", "scan", "parse", "resolve", "Interpreter",
]

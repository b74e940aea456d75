from __future__ import annotations
from enum import Enum, auto
from typing import TYPE_CHECKING
from .errors import ErrorReporter
from .lexer import Token
from .parser import NESTED_TOO_DEEPLY
from . import ast_nodes as ast

if TYPE_CHECKING:
    from .interpreter import Interpreter


class FunctionType(Enum):
    NONE = auto()
    FUNCTION = auto()
    METHOD = auto()
    INITIALIZER = auto()


class ClassType(Enum):
    NONE = auto()
    CLASS = auto()
    SUBCLASS = auto()


class Resolver:
    """Static pass computing how many scopes separate each use of a local
    variable from its declaration.

    Distances are handed to ``interpreter.resolve``; names that are not found
    in any block scope are left for the interpreter to look up in globals.
    The pass also reports misuse that the parser cannot see (reading a local
    in its own initializer, ``return`` outside a function, ``this`` and
    ``super`` outside a class, and so on). Errors are reported, never
    raised, so resolution always runs to the end.
    """

    def __init__(self, interpreter: Interpreter, reporter: ErrorReporter | None = None):
        self.interpreter = interpreter
        self.reporter = reporter or ErrorReporter()
        self.scopes: list[dict[str, bool]] = []
        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    # ---- public interface ----

    def resolve(self, statements: list):
        for stmt in statements:
            depth = len(self.scopes)
            function, klass = self.current_function, self.current_class
            try:
                self._resolve_stmt(stmt)
            except RecursionError:
                del self.scopes[depth:]
                self.current_function, self.current_class = function, klass
                self.reporter.report(stmt.line, "", NESTED_TOO_DEEPLY)

    def _resolve_all(self, statements: list):
        for stmt in statements:
            self._resolve_stmt(stmt)

    # ---- scopes ----

    def _begin_scope(self):
        self.scopes.append({})

    def _end_scope(self):
        self.scopes.pop()

    def _declare(self, name: Token):
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.reporter.error_at(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def _define(self, name: Token):
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def _resolve_local(self, expr, name: Token):
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.interpreter.resolve(expr, depth)
                return

    def _resolve_function(self, function: ast.Function, kind: FunctionType):
        enclosing = self.current_function
        self.current_function = kind

        self._begin_scope()
        for param in function.params:
            self._declare(param)
            self._define(param)
        self._resolve_all(function.body)
        self._end_scope()

        self.current_function = enclosing

    # ---- statements ----

    def _resolve_stmt(self, stmt):
        if isinstance(stmt, ast.Block):
            self._begin_scope()
            self._resolve_all(stmt.statements)
            self._end_scope()
        elif isinstance(stmt, ast.Var):
            self._declare(stmt.name)
            if stmt.initializer is not None:
                self._resolve_expr(stmt.initializer)
            self._define(stmt.name)
        elif isinstance(stmt, ast.Function):
            # defined before the body so the function can call itself
            self._declare(stmt.name)
            self._define(stmt.name)
            self._resolve_function(stmt, FunctionType.FUNCTION)
        elif isinstance(stmt, ast.Class):
            self._resolve_class(stmt)
        elif isinstance(stmt, ast.Expression):
            self._resolve_expr(stmt.expression)
        elif isinstance(stmt, ast.Print):
            self._resolve_expr(stmt.expression)
        elif isinstance(stmt, ast.If):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.then_branch)
            if stmt.else_branch is not None:
                self._resolve_stmt(stmt.else_branch)
        elif isinstance(stmt, ast.While):
            self._resolve_expr(stmt.condition)
            self._resolve_stmt(stmt.body)
        elif isinstance(stmt, ast.Return):
            self._resolve_return(stmt)

    def _resolve_return(self, stmt: ast.Return):
        if self.current_function == FunctionType.NONE:
            self.reporter.error_at(stmt.keyword, "Can't return from top-level code.")
        if stmt.value is not None:
            if self.current_function == FunctionType.INITIALIZER:
                self.reporter.error_at(stmt.keyword, "Can't return a value from an initializer.")
            self._resolve_expr(stmt.value)

    def _resolve_class(self, stmt: ast.Class):
        enclosing = self.current_class
        self.current_class = ClassType.CLASS

        self._declare(stmt.name)
        self._define(stmt.name)

        if stmt.superclass is not None:
            if stmt.superclass.name.lexeme == stmt.name.lexeme:
                self.reporter.error_at(stmt.superclass.name, "A class can't inherit from itself.")
            else:
                self.current_class = ClassType.SUBCLASS
                self._resolve_expr(stmt.superclass)

            self._begin_scope()
            self.scopes[-1]["super"] = True

        self._begin_scope()
        self.scopes[-1]["this"] = True

        for method in stmt.methods:
            kind = FunctionType.METHOD
            if method.name.lexeme == "init":
                kind = FunctionType.INITIALIZER
            self._resolve_function(method, kind)

        self._end_scope()
        if stmt.superclass is not None:
            self._end_scope()

        self.current_class = enclosing

    # ---- expressions ----

    def _resolve_expr(self, expr):
        if isinstance(expr, ast.Variable):
            if self.scopes and self.scopes[-1].get(expr.name.lexeme) is False:
                self.reporter.error_at(
                    expr.name, "Can't read local variable in its own initializer."
                )
            self._resolve_local(expr, expr.name)
        elif isinstance(expr, ast.Assign):
            self._resolve_expr(expr.value)
            self._resolve_local(expr, expr.name)
        elif isinstance(expr, (ast.Binary, ast.Logical)):
            self._resolve_expr(expr.left)
            self._resolve_expr(expr.right)
        elif isinstance(expr, ast.Unary):
            self._resolve_expr(expr.right)
        elif isinstance(expr, ast.Grouping):
            self._resolve_expr(expr.expression)
        elif isinstance(expr, ast.Call):
            self._resolve_expr(expr.callee)
            for argument in expr.arguments:
                self._resolve_expr(argument)
        elif isinstance(expr, ast.Get):
            self._resolve_expr(expr.object)
        elif isinstance(expr, ast.Set):
            self._resolve_expr(expr.value)
            self._resolve_expr(expr.object)
        elif isinstance(expr, ast.This):
            if self.current_class == ClassType.NONE:
                self.reporter.error_at(expr.keyword, "Can't use 'this' outside of a class.")
                return
            self._resolve_local(expr, expr.keyword)
        elif isinstance(expr, ast.Super):
            if self.current_class == ClassType.NONE:
                self.reporter.error_at(expr.keyword, "Can't use 'super' outside of a class.")
            elif self.current_class != ClassType.SUBCLASS:
                self.reporter.error_at(
                    expr.keyword, "Can't use 'super' in a class with no superclass."
                )
            self._resolve_local(expr, expr.keyword)
        # Literal: nothing to resolve


def resolve(statements: list, interpreter: Interpreter, reporter: ErrorReporter | None = None) -> bool:
    """Resolve ``statements`` into ``interpreter``; True when no error was reported."""
    reporter = reporter or ErrorReporter()
    before = len(reporter.diagnostics)
    Resolver(interpreter, reporter).resolve(statements)
    return len(reporter.diagnostics) == before

from __future__ import annotations
import math
import sys
from typing import Any, TextIO
from . import ast_nodes as ast
from .errors import ErrorReporter, LoxInternalError, LoxRuntimeError
from .lexer import TokenType, Token
from .runtime import (
    Environment, Return, LoxCallable, LoxFunction, LoxClass, LoxInstance,
)

TT = TokenType


def is_truthy(v) -> bool:
    return v is not None and v is not False


def is_equal(a, b) -> bool:
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    # True == 1.0 in Python, never in Lox
    if isinstance(a, bool) != isinstance(b, bool):
        return False
    if isinstance(a, (bool, float, str)):
        return type(a) is type(b) and a == b
    return a is b


def stringify(v) -> str:
    if v is None:
        return "nil"
    if isinstance(v, bool):
        return "true" if v else "false"
    if isinstance(v, float):
        text = repr(v)
        if text.endswith(".0"):
            text = text[:-2]
        return text
    return str(v)


def _divide(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


_ARITH = {
    TT.MINUS: lambda a, b: a - b,
    TT.STAR: lambda a, b: a * b,
    TT.SLASH: _divide,
    TT.GREATER: lambda a, b: a > b,
    TT.GREATER_EQUAL: lambda a, b: a >= b,
    TT.LESS: lambda a, b: a < b,
    TT.LESS_EQUAL: lambda a, b: a <= b,
}


DEFAULT_MAX_CALL_DEPTH = 1000

# Python frames reserved per Lox call, plus a base for parsing and resolving.
FRAMES_PER_CALL = 50
BASE_FRAMES = 10_000


def ensure_stack_headroom(max_call_depth: int):
    """Raise the Python recursion limit so ``max_call_depth`` Lox calls fit."""
    needed = BASE_FRAMES + FRAMES_PER_CALL * max_call_depth
    if sys.getrecursionlimit() < needed:
        sys.setrecursionlimit(needed)


class Interpreter:
    def __init__(
        self,
        reporter: ErrorReporter | None = None,
        stdout: TextIO | None = None,
        max_call_depth: int = DEFAULT_MAX_CALL_DEPTH,
        max_instructions: int | None = None,
    ):
        self.reporter = reporter or ErrorReporter()
        self.stdout = stdout
        self.globals = Environment()
        self.environment = self.globals
        self.locals: dict[int, int] = {}
        self.call_depth = 0
        self.max_call_depth = max_call_depth
        self.max_instructions = max_instructions
        self.instructions = 0
        self.line = 0
        self.output: list[str] = []
        ensure_stack_headroom(max_call_depth)

    # ---- public interface ----

    def interpret(self, statements: list):
        """Run top-level statements; stop at the first runtime error."""
        try:
            for stmt in statements:
                if self._execute(stmt) is not None:
                    raise LoxInternalError("return completion escaped to top level")
        except LoxRuntimeError as error:
            self.reporter.runtime_error(error)
        except RecursionError:
            self.reporter.runtime_error(self._stack_overflow())

    def resolve(self, expr, depth: int):
        self.locals[expr.node_id] = depth

    def evaluate(self, expr) -> Any:
        try:
            return self._evaluate(expr)
        except RecursionError:
            raise self._stack_overflow() from None

    def execute_block(self, statements: list, environment: Environment) -> Return | None:
        previous = self.environment
        try:
            self.environment = environment
            for stmt in statements:
                completion = self._execute(stmt)
                if completion is not None:
                    return completion
            return None
        finally:
            self.environment = previous

    def _tick(self, stmt):
        self.line = stmt.line
        self.instructions += 1
        if self.max_instructions is not None and self.instructions > self.max_instructions:
            raise LoxRuntimeError(None, "Execution quota exceeded.", stmt.line)

    def _stack_overflow(self) -> LoxRuntimeError:
        return LoxRuntimeError(None, "Stack overflow.", self.line)

    # ---- statement execution ----

    def _execute(self, stmt) -> Return | None:
        self._tick(stmt)
        if isinstance(stmt, ast.Expression):
            self._evaluate(stmt.expression)
        elif isinstance(stmt, ast.Print):
            self._print(stringify(self._evaluate(stmt.expression)))
        elif isinstance(stmt, ast.Var):
            value = None
            if stmt.initializer is not None:
                value = self._evaluate(stmt.initializer)
            self.environment.define(stmt.name.lexeme, value)
        elif isinstance(stmt, ast.Block):
            return self.execute_block(stmt.statements, Environment(self.environment))
        elif isinstance(stmt, ast.If):
            if is_truthy(self._evaluate(stmt.condition)):
                return self._execute(stmt.then_branch)
            if stmt.else_branch is not None:
                return self._execute(stmt.else_branch)
        elif isinstance(stmt, ast.While):
            return self._exec_while(stmt)
        elif isinstance(stmt, ast.Function):
            function = LoxFunction(stmt, self.environment)
            self.environment.define(stmt.name.lexeme, function)
        elif isinstance(stmt, ast.Return):
            value = None
            if stmt.value is not None:
                value = self._evaluate(stmt.value)
            return Return(value)
        elif isinstance(stmt, ast.Class):
            self._exec_class(stmt)
        else:
            raise LoxInternalError(f"cannot execute node: {type(stmt).__name__}")
        return None

    def _exec_while(self, stmt: ast.While) -> Return | None:
        while is_truthy(self._evaluate(stmt.condition)):
            completion = self._execute(stmt.body)
            if completion is not None:
                return completion
        return None

    def _exec_class(self, stmt: ast.Class):
        superclass = None
        if stmt.superclass is not None:
            superclass = self._evaluate(stmt.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")

        self.environment.define(stmt.name.lexeme, None)

        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.define("super", superclass)

        methods: dict[str, LoxFunction] = {}
        for method in stmt.methods:
            is_init = method.name.lexeme == "init"
            methods[method.name.lexeme] = LoxFunction(method, self.environment, is_init)

        klass = LoxClass(stmt.name.lexeme, superclass, methods)

        if superclass is not None:
            self.environment = self.environment.enclosing

        self.environment.assign(stmt.name, klass)

    def _print(self, line: str):
        self.output.append(line)
        if self.stdout is not None:
            self.stdout.write(line + "\n")

    # ---- expression evaluation ----

    def _evaluate(self, expr) -> Any:
        if isinstance(expr, ast.Literal):
            return expr.value
        if isinstance(expr, ast.Grouping):
            return self._evaluate(expr.expression)
        if isinstance(expr, ast.Variable):
            return self._lookup_variable(expr.name, expr)
        if isinstance(expr, ast.Assign):
            value = self._evaluate(expr.value)
            distance = self.locals.get(expr.node_id)
            if distance is not None:
                self.environment.assign_at(distance, expr.name, value)
            else:
                self.globals.assign(expr.name, value)
            return value
        if isinstance(expr, ast.Logical):
            left = self._evaluate(expr.left)
            if expr.operator.type == TT.OR:
                if is_truthy(left):
                    return left
            elif not is_truthy(left):
                return left
            return self._evaluate(expr.right)
        if isinstance(expr, ast.Binary):
            return self._eval_binary(expr)
        if isinstance(expr, ast.Unary):
            return self._eval_unary(expr)
        if isinstance(expr, ast.Call):
            return self._eval_call(expr)
        if isinstance(expr, ast.Get):
            obj = self._evaluate(expr.object)
            if isinstance(obj, LoxInstance):
                return obj.get(expr.name)
            raise LoxRuntimeError(expr.name, "Only instances have properties.")
        if isinstance(expr, ast.Set):
            obj = self._evaluate(expr.object)
            if not isinstance(obj, LoxInstance):
                raise LoxRuntimeError(expr.name, "Only instances have fields.")
            value = self._evaluate(expr.value)
            obj.set(expr.name, value)
            return value
        if isinstance(expr, ast.This):
            return self._lookup_variable(expr.keyword, expr)
        if isinstance(expr, ast.Super):
            return self._eval_super(expr)
        raise LoxInternalError(f"cannot evaluate node: {type(expr).__name__}")

    def _lookup_variable(self, name: Token, expr):
        distance = self.locals.get(expr.node_id)
        if distance is not None:
            return self.environment.get_at(distance, name.lexeme)
        return self.globals.get(name)

    def _eval_binary(self, expr: ast.Binary):
        left = self._evaluate(expr.left)
        right = self._evaluate(expr.right)
        op = expr.operator

        if op.type == TT.EQUAL_EQUAL:
            return is_equal(left, right)
        if op.type == TT.BANG_EQUAL:
            return not is_equal(left, right)
        if op.type == TT.PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, str) and isinstance(right, str):
                return left + right
            raise LoxRuntimeError(
                op, f"Operands of '{op.lexeme}' must be two numbers or two strings."
            )

        if not (isinstance(left, float) and isinstance(right, float)):
            raise LoxRuntimeError(op, f"Operands of '{op.lexeme}' must be numbers.")
        return _ARITH[op.type](left, right)

    def _eval_unary(self, expr: ast.Unary):
        right = self._evaluate(expr.right)
        op = expr.operator

        if op.type == TT.BANG:
            return not is_truthy(right)
        if op.type == TT.MINUS:
            if not isinstance(right, float):
                raise LoxRuntimeError(op, f"Operand of '{op.lexeme}' must be a number.")
            return -right
        raise LoxInternalError(f"unknown unary operator: {op.lexeme}")

    def _eval_call(self, expr: ast.Call):
        callee = self._evaluate(expr.callee)
        arguments = [self._evaluate(arg) for arg in expr.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                expr.paren,
                f"Expected {callee.arity()} arguments but got {len(arguments)}.",
            )

        self.call_depth += 1
        if self.call_depth > self.max_call_depth:
            self.call_depth -= 1
            raise LoxRuntimeError(expr.paren, "Stack overflow.")
        try:
            return callee.call(self, arguments)
        except RecursionError:
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None
        finally:
            self.call_depth -= 1

    def _eval_super(self, expr: ast.Super):
        distance = self.locals[expr.node_id]
        superclass: LoxClass = self.environment.get_at(distance, "super")
        # "this" lives in the scope just inside the one holding "super"
        obj = self.environment.get_at(distance - 1, "this")
        method = superclass.find_method(expr.method.lexeme)
        if method is None:
            raise LoxRuntimeError(expr.method, f"Undefined property '{expr.method.lexeme}'.")
        return method.bind(obj)

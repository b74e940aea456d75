from __future__ import annotations
from . import ast_nodes as ast
from .interpreter import stringify


class AstPrinter:
    """Renders a syntax tree in parenthesized prefix form, for debugging."""

    def print(self, node) -> str:
        if isinstance(node, list):
            return "\n".join(self.print(stmt) for stmt in node)
        return self._render(node)

    def _parenthesize(self, name: str, *parts) -> str:
        out = ["(" + name]
        for part in parts:
            out.append(part if isinstance(part, str) else self._render(part))
        return " ".join(out) + ")"

    def _render(self, node) -> str:
        # expressions
        if isinstance(node, ast.Literal):
            if isinstance(node.value, str):
                return f'"{node.value}"'
            return stringify(node.value)
        if isinstance(node, ast.Variable):
            return node.name.lexeme
        if isinstance(node, ast.Assign):
            return self._parenthesize("=", node.name.lexeme, node.value)
        if isinstance(node, (ast.Binary, ast.Logical)):
            return self._parenthesize(node.operator.lexeme, node.left, node.right)
        if isinstance(node, ast.Unary):
            return self._parenthesize(node.operator.lexeme, node.right)
        if isinstance(node, ast.Grouping):
            return self._parenthesize("group", node.expression)
        if isinstance(node, ast.Call):
            return self._parenthesize("call", node.callee, *node.arguments)
        if isinstance(node, ast.Get):
            return self._parenthesize(".", node.object, node.name.lexeme)
        if isinstance(node, ast.Set):
            return self._parenthesize("=", node.object, node.name.lexeme, node.value)
        if isinstance(node, ast.This):
            return "this"
        if isinstance(node, ast.Super):
            return self._parenthesize("super", node.method.lexeme)
        # statements
        if isinstance(node, ast.Expression):
            return self._parenthesize(";", node.expression)
        if isinstance(node, ast.Print):
            return self._parenthesize("print", node.expression)
        if isinstance(node, ast.Var):
            if node.initializer is None:
                return self._parenthesize("var", node.name.lexeme)
            return self._parenthesize("var", node.name.lexeme, "=", node.initializer)
        if isinstance(node, ast.Block):
            return self._parenthesize("block", *node.statements)
        if isinstance(node, ast.If):
            if node.else_branch is None:
                return self._parenthesize("if", node.condition, node.then_branch)
            return self._parenthesize("if-else", node.condition, node.then_branch, node.else_branch)
        if isinstance(node, ast.While):
            return self._parenthesize("while", node.condition, node.body)
        if isinstance(node, ast.Function):
            params = "(" + " ".join(p.lexeme for p in node.params) + ")"
            return self._parenthesize("fun", node.name.lexeme, params, *node.body)
        if isinstance(node, ast.Return):
            if node.value is None:
                return "(return)"
            return self._parenthesize("return", node.value)
        if isinstance(node, ast.Class):
            parts = [node.name.lexeme]
            if node.superclass is not None:
                parts += ["<", node.superclass.name.lexeme]
            return self._parenthesize("class", *parts, *node.methods)
        raise TypeError(f"cannot print node: {type(node).__name__}")


class RpnPrinter:
    """Renders an expression in reverse Polish notation: ``1 2 + 4 3 - *``."""

    def print(self, expr) -> str:
        if isinstance(expr, ast.Literal):
            return stringify(expr.value)
        if isinstance(expr, ast.Variable):
            return expr.name.lexeme
        if isinstance(expr, ast.Grouping):
            return self.print(expr.expression)
        if isinstance(expr, (ast.Binary, ast.Logical)):
            return f"{self.print(expr.left)} {self.print(expr.right)} {expr.operator.lexeme}"
        if isinstance(expr, ast.Unary):
            # distinguish negation from subtraction
            op = "~" if expr.operator.lexeme == "-" else expr.operator.lexeme
            return f"{self.print(expr.right)} {op}"
        raise TypeError(f"cannot print node in RPN: {type(expr).__name__}")

from __future__ import annotations
import itertools
from dataclasses import dataclass, field
from typing import Optional
from .lexer import Token

_ids = itertools.count()


def _next_id() -> int:
    return next(_ids)


# Nodes compare by identity; node_id is the stable key the resolver uses.
node = dataclass(frozen=True, eq=False)


def _node_id():
    return field(default_factory=_next_id, repr=False)


# --------------- Expressions ---------------

@node
class Literal:
    value: object
    node_id: int = _node_id()

@node
class Variable:
    name: Token
    node_id: int = _node_id()

@node
class Assign:
    name: Token
    value: object
    node_id: int = _node_id()

@node
class Binary:
    left: object
    operator: Token
    right: object
    node_id: int = _node_id()

@node
class Logical:
    left: object
    operator: Token
    right: object
    node_id: int = _node_id()

@node
class Unary:
    operator: Token
    right: object
    node_id: int = _node_id()

@node
class Grouping:
    expression: object
    node_id: int = _node_id()

@node
class Call:
    callee: object
    paren: Token
    arguments: list
    node_id: int = _node_id()

@node
class Get:
    object: object
    name: Token
    node_id: int = _node_id()

@node
class Set:
    object: object
    name: Token
    value: object
    node_id: int = _node_id()

@node
class This:
    keyword: Token
    node_id: int = _node_id()

@node
class Super:
    keyword: Token
    method: Token
    node_id: int = _node_id()


# --------------- Statements ---------------
# Every statement has a `line`, used to place runtime errors with no token.

@node
class Expression:
    expression: object
    line: int = 0
    node_id: int = _node_id()

@node
class Print:
    expression: object
    line: int = 0
    node_id: int = _node_id()

@node
class Var:
    name: Token
    initializer: Optional[object] = None
    node_id: int = _node_id()

    @property
    def line(self) -> int:
        return self.name.line

@node
class Block:
    statements: list
    line: int = 0
    node_id: int = _node_id()

@node
class If:
    condition: object
    then_branch: object
    else_branch: Optional[object] = None
    line: int = 0
    node_id: int = _node_id()

@node
class While:
    condition: object
    body: object
    line: int = 0
    node_id: int = _node_id()

@node
class Function:
    name: Token
    params: list[Token]
    body: list
    node_id: int = _node_id()

    @property
    def line(self) -> int:
        return self.name.line

@node
class Return:
    keyword: Token
    value: Optional[object] = None
    node_id: int = _node_id()

    @property
    def line(self) -> int:
        return self.keyword.line

@node
class Class:
    name: Token
    superclass: Optional[Variable]
    methods: list[Function]
    node_id: int = _node_id()

    @property
    def line(self) -> int:
        return self.name.line

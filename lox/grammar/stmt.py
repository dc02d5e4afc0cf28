"""Statement nodes. Like expression nodes, they are plain data compared by identity."""

from dataclasses import dataclass
from typing import Optional

from lox.grammar import expr
from lox.grammar.tokens import Token


class Stmt:
    """Superclass of all statement nodes."""


@dataclass(eq=False)
class Expression(Stmt):
    expression: expr.Expr


@dataclass(eq=False)
class Print(Stmt):
    expression: expr.Expr


@dataclass(eq=False)
class Var(Stmt):
    name: Token
    initializer: Optional[expr.Expr]


@dataclass(eq=False)
class Block(Stmt):
    statements: list


@dataclass(eq=False)
class If(Stmt):
    condition: expr.Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@dataclass(eq=False)
class While(Stmt):
    condition: expr.Expr
    body: Stmt


@dataclass(eq=False)
class Function(Stmt):
    name: Token
    function: expr.Function


@dataclass(eq=False)
class Return(Stmt):
    keyword: Token
    value: Optional[expr.Expr]


@dataclass(eq=False)
class Class(Stmt):
    name: Token
    superclass: Optional[expr.Variable]
    methods: list  # of stmt.Function

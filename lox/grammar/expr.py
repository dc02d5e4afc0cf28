"""Expression nodes. One dataclass per expression form; nodes carry no behavior.

Nodes compare and hash by identity (eq=False): the resolver keys its hop-distance table by the node itself, so two
structurally equal references to the same name at different places in the source must stay distinct.
"""

from dataclasses import dataclass

from lox.grammar.tokens import Token


class Expr:
    """Superclass of all expression nodes."""


@dataclass(eq=False)
class Literal(Expr):
    value: object


@dataclass(eq=False)
class Grouping(Expr):
    expression: Expr


@dataclass(eq=False)
class Unary(Expr):
    operator: Token
    right: Expr


@dataclass(eq=False)
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@dataclass(eq=False)
class Logical(Expr):
    left: Expr
    operator: Token  # AND or OR
    right: Expr


@dataclass(eq=False)
class Ternary(Expr):
    condition: Expr
    then_branch: Expr
    else_branch: Expr


@dataclass(eq=False)
class Variable(Expr):
    name: Token


@dataclass(eq=False)
class Assign(Expr):
    name: Token
    value: Expr


@dataclass(eq=False)
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used to locate runtime errors
    arguments: list


@dataclass(eq=False)
class Function(Expr):
    """Anonymous function literal. Also the body of every named function and method declaration."""
    params: list
    body: list


@dataclass(eq=False)
class Get(Expr):
    object: Expr
    name: Token


@dataclass(eq=False)
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@dataclass(eq=False)
class This(Expr):
    keyword: Token


@dataclass(eq=False)
class Super(Expr):
    keyword: Token
    method: Token

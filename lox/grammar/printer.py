"""Debug printer: renders expressions and statements as parenthesized prefix notation, e.g. "(* (- 1) (group 2))".

Only used by the --ast command-line flag and by tests; output is not meant to be parsed back.
"""

from lox.grammar import expr, stmt


def literal(value):
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        text = str(value)
        return text[:-2] if text.endswith(".0") else text
    if isinstance(value, str):
        return f'"{value}"'
    return str(value)


def parenthesize(name, *parts):
    return "(" + " ".join([name] + [part if isinstance(part, str) else show(part) for part in parts]) + ")"


def params(names):
    return "(" + " ".join(name.lexeme for name in names) + ")"


def show(node):
    """Returns the prefix notation of node, which may be any expression or statement."""
    match node:
        case expr.Literal(value=value):
            return literal(value)
        case expr.Grouping(expression=inner):
            return parenthesize("group", inner)
        case expr.Unary(operator=op, right=right):
            return parenthesize(op.lexeme, right)
        case expr.Binary(left=left, operator=op, right=right) | expr.Logical(left=left, operator=op, right=right):
            return parenthesize(op.lexeme, left, right)
        case expr.Ternary(condition=condition, then_branch=then_branch, else_branch=else_branch):
            return parenthesize("?:", condition, then_branch, else_branch)
        case expr.Variable(name=name):
            return name.lexeme
        case expr.Assign(name=name, value=value):
            return parenthesize("=", name.lexeme, value)
        case expr.Call(callee=callee, arguments=arguments):
            return parenthesize("call", callee, *arguments)
        case expr.Function(params=names, body=body):
            return parenthesize("fun", params(names), *body)
        case expr.Get(object=obj, name=name):
            return parenthesize(".", obj, name.lexeme)
        case expr.Set(object=obj, name=name, value=value):
            return parenthesize("=", parenthesize(".", obj, name.lexeme), value)
        case expr.This():
            return "this"
        case expr.Super(method=method):
            return parenthesize("super", method.lexeme)

        case stmt.Expression(expression=expression):
            return parenthesize(";", expression)
        case stmt.Print(expression=expression):
            return parenthesize("print", expression)
        case stmt.Var(name=name, initializer=None):
            return parenthesize("var", name.lexeme)
        case stmt.Var(name=name, initializer=initializer):
            return parenthesize("var", name.lexeme, "=", initializer)
        case stmt.Block(statements=statements):
            return parenthesize("block", *statements)
        case stmt.If(condition=condition, then_branch=then_branch, else_branch=None):
            return parenthesize("if", condition, then_branch)
        case stmt.If(condition=condition, then_branch=then_branch, else_branch=else_branch):
            return parenthesize("if-else", condition, then_branch, else_branch)
        case stmt.While(condition=condition, body=body):
            return parenthesize("while", condition, body)
        case stmt.Function(name=name, function=function):
            return parenthesize("fun", name.lexeme, params(function.params), *function.body)
        case stmt.Return(value=None):
            return "(return)"
        case stmt.Return(value=value):
            return parenthesize("return", value)
        case stmt.Class(name=name, superclass=superclass, methods=methods):
            header = [name.lexeme] if superclass is None else [name.lexeme, "<", superclass.name.lexeme]
            return parenthesize("class", *header, *methods)

    raise TypeError(f"cannot print {type(node).__name__}")

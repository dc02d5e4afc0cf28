"""Static scope resolution. Walks the AST once before it is run and tells the interpreter, for every local variable
reference, how many environment frames lie between the reference and the declaration ("hop distance").

The resolver's scope stack must mirror the environments the interpreter creates at run time, frame for frame:

```
block body               ->  one scope                  (Interpreter: execute_block)
function/lambda body     ->  one scope for params+body  (LoxFunction.call)
class with superclass    ->  one scope binding "super"  (Interpreter: class declaration)
class body               ->  one scope binding "this"   (LoxFunction.bind)
```

Globals are not tracked: a reference that is not found in any scope is left unresolved and looked up dynamically in
the global environment. Also reports scoping errors, and warns about local variables that are never used.
"""

from enum import Enum, auto

from lox.grammar import expr, stmt


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

    def __init__(self, interpreter, error_handler):
        self.interpreter = interpreter
        self.error_handler = error_handler

        self.scopes = []  # innermost last; name: whether its initializer has been resolved
        self.unused = []  # parallel to self.scopes; name: declaring Token of a not-yet-used local variable

        self.current_function = FunctionType.NONE
        self.current_class = ClassType.NONE

    def resolve(self, node):
        """Resolves a list of statements, a statement or an expression."""
        if isinstance(node, list):
            for statement in node:
                self.resolve(statement)
        elif isinstance(node, stmt.Stmt):
            self.resolve_stmt(node)
        else:
            self.resolve_expr(node)

    def resolve_stmt(self, node):
        match node:
            case stmt.Block(statements=statements):
                self.begin_scope()
                self.resolve(statements)
                self.end_scope()

            case stmt.Var(name=name, initializer=initializer):
                self.declare(name)
                if initializer is not None:
                    self.resolve(initializer)
                self.define(name)
                if self.scopes:
                    self.unused[-1][name.lexeme] = name

            case stmt.Function(name=name, function=function):
                self.declare(name)
                self.define(name)  # defined before the body, so functions can recurse
                self.resolve_function(function, FunctionType.FUNCTION)

            case stmt.Class():
                self.resolve_class(node)

            case stmt.Expression(expression=expression) | stmt.Print(expression=expression):
                self.resolve(expression)

            case stmt.If(condition=condition, then_branch=then_branch, else_branch=else_branch):
                self.resolve(condition)
                self.resolve(then_branch)
                if else_branch is not None:
                    self.resolve(else_branch)

            case stmt.While(condition=condition, body=body):
                self.resolve(condition)
                self.resolve(body)

            case stmt.Return(keyword=keyword, value=value):
                if self.current_function is FunctionType.NONE:
                    self.error_handler.error(keyword, "Can't return from top-level code.")
                # in an initializer the value is still resolved; the instance is returned regardless
                if value is not None:
                    self.resolve(value)

            case _:
                raise TypeError(f"cannot resolve {type(node).__name__}")

    def resolve_expr(self, node):
        match node:
            case expr.Variable(name=name):
                if self.scopes and self.scopes[-1].get(name.lexeme) is False:
                    self.error_handler.error(name, "Can't read local variable in its own initializer.")
                self.resolve_local(node, name)

            case expr.Assign(name=name, value=value):
                self.resolve(value)
                self.resolve_local(node, name)

            case expr.Function():
                self.resolve_function(node, FunctionType.FUNCTION)

            case expr.This(keyword=keyword):
                if self.current_class is ClassType.NONE:
                    self.error_handler.error(keyword, "Can't use 'this' outside of a class.")
                    return
                self.resolve_local(node, keyword)

            case expr.Super(keyword=keyword):
                if self.current_class is ClassType.NONE:
                    self.error_handler.error(keyword, "Can't use 'super' outside of a class.")
                elif self.current_class is not ClassType.SUBCLASS:
                    self.error_handler.error(keyword, "Can't use 'super' in a class with no superclass.")
                self.resolve_local(node, keyword)

            case expr.Binary(left=left, right=right) | expr.Logical(left=left, right=right):
                self.resolve(left)
                self.resolve(right)

            case expr.Ternary(condition=condition, then_branch=then_branch, else_branch=else_branch):
                self.resolve(condition)
                self.resolve(then_branch)
                self.resolve(else_branch)

            case expr.Call(callee=callee, arguments=arguments):
                self.resolve(callee)
                self.resolve(arguments)

            case expr.Get(object=obj):
                self.resolve(obj)  # properties are looked up dynamically

            case expr.Set(object=obj, value=value):
                self.resolve(value)
                self.resolve(obj)

            case expr.Grouping(expression=inner) | expr.Unary(right=inner):
                self.resolve(inner)

            case expr.Literal():
                pass

            case _:
                raise TypeError(f"cannot resolve {type(node).__name__}")

    def resolve_class(self, node):
        enclosing_class = self.current_class
        self.current_class = ClassType.CLASS

        self.declare(node.name)
        self.define(node.name)

        if node.superclass is not None:
            if node.superclass.name.lexeme == node.name.lexeme:
                self.error_handler.error(node.superclass.name, "A class can't inherit from itself.")

            self.current_class = ClassType.SUBCLASS
            self.resolve(node.superclass)

            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.begin_scope()
        self.scopes[-1]["this"] = True

        for method in node.methods:
            kind = FunctionType.INITIALIZER if method.name.lexeme == "init" else FunctionType.METHOD
            self.resolve_function(method.function, kind)

        self.end_scope()
        if node.superclass is not None:
            self.end_scope()

        self.current_class = enclosing_class

    def resolve_function(self, function, kind):
        enclosing_function = self.current_function
        self.current_function = kind

        self.begin_scope()
        for param in function.params:
            self.declare(param)
            self.define(param)
        self.resolve(function.body)
        self.end_scope()

        self.current_function = enclosing_function

    def resolve_local(self, node, name):
        """Records the hop distance to the innermost scope declaring name. Records nothing if name is global."""
        for depth, scope in enumerate(reversed(self.scopes)):
            if name.lexeme in scope:
                self.unused[-1 - depth].pop(name.lexeme, None)
                self.interpreter.resolve(node, depth)
                return

    def begin_scope(self):
        self.scopes.append({})
        self.unused.append({})

    def end_scope(self):
        self.scopes.pop()
        for name in self.unused.pop().values():
            self.error_handler.warn(name, f"Local variable '{name.lexeme}' is never used.")

    def declare(self, name):
        if not self.scopes:
            return

        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.error_handler.error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def define(self, name):
        if self.scopes:
            self.scopes[-1][name.lexeme] = True

"""Tree-walking evaluator for resolved Lox programs.

Statements execute to either None (completed normally) or a Returning value, which travels back up through blocks
and loops until the nearest function call boundary consumes it. `return` is therefore never an exception: only
LoxRuntimeError is raised, and it unwinds all the way to interpret, which reports it and stops the run.
"""

import sys
import time
from dataclasses import dataclass

from lox.grammar import expr, stmt
from lox.grammar.tokens import TokenType
from lox.lang.error import LoxRuntimeError
from lox.runtime.callables import LoxCallable, LoxClass, LoxFunction, LoxInstance, NativeFunction
from lox.runtime.environment import UNINITIALIZED, Environment


@dataclass
class Returning:
    """Result of executing a `return` statement."""
    value: object


def is_truthy(value):
    """nil and false are falsey; everything else, including 0 and "", is truthy."""
    if isinstance(value, bool):
        return value
    return value is not None


def is_equal(left, right):
    """No implicit conversions: values of different types are never equal (in particular, true != 1)."""
    if left is None or right is None:
        return left is None and right is None
    return type(left) is type(right) and left == right


def stringify(value):
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return stringify_number(value)
    return str(value)


def stringify_number(value):
    """Integral numbers print without a fractional part. Very large and very small magnitudes use exponent notation
    written as 1.0E23 or 1.5E-5.
    """
    text = repr(value)
    if value.is_integer() and abs(value) < 1e16:
        return text[:-2]  # repr always ends in ".0" here

    mantissa, exp, exponent = text.partition("e")
    if not exp:
        return text
    if "." not in mantissa:
        mantissa += ".0"
    return f"{mantissa}E{int(exponent)}"


def check_number_operand(operator, operand):
    if not isinstance(operand, float):
        raise LoxRuntimeError(operator, "Operand must be a number.")


def check_number_operands(operator, left, right):
    if not isinstance(left, float) or not isinstance(right, float):
        raise LoxRuntimeError(operator, "Operands must be numbers.")


class Interpreter:

    def __init__(self, error_handler, stdout=None):
        self.error_handler = error_handler
        self.stdout = stdout  # None means sys.stdout at the time of printing

        self.globals = Environment()
        self.environment = self.globals
        self.locals = {}  # expr node: hop distance, filled in by the resolver

        self.globals.define("clock", NativeFunction("clock", 0, time.time))

    @property
    def out(self):
        return self.stdout if self.stdout is not None else sys.stdout

    def interpret(self, statements):
        """Executes statements in order. The first runtime error is reported and ends the run."""
        try:
            for statement in statements:
                self.execute(statement)
        except LoxRuntimeError as error:
            self.error_handler.runtime_error(error)

    def resolve(self, node, depth):
        """Called by the resolver for every local variable reference."""
        self.locals[node] = depth

    # statements

    def execute(self, node):
        match node:
            case stmt.Expression(expression=expression):
                self.evaluate(expression)

            case stmt.Print(expression=expression):
                print(stringify(self.evaluate(expression)), file=self.out)

            case stmt.Var(name=name, initializer=initializer):
                value = UNINITIALIZED if initializer is None else self.evaluate(initializer)
                self.environment.define(name.lexeme, value)

            case stmt.Block(statements=statements):
                return self.execute_block(statements, Environment(self.environment))

            case stmt.If(condition=condition, then_branch=then_branch, else_branch=else_branch):
                if is_truthy(self.evaluate(condition)):
                    return self.execute(then_branch)
                elif else_branch is not None:
                    return self.execute(else_branch)

            case stmt.While(condition=condition, body=body):
                while is_truthy(self.evaluate(condition)):
                    returning = self.execute(body)
                    if returning is not None:
                        return returning

            case stmt.Function(name=name, function=function):
                self.environment.define(name.lexeme, LoxFunction(name.lexeme, function, self.environment))

            case stmt.Return(value=value):
                return Returning(None if value is None else self.evaluate(value))

            case stmt.Class():
                self.execute_class(node)

            case _:
                raise TypeError(f"cannot execute {type(node).__name__}")

        return None

    def execute_block(self, statements, environment):
        """Executes statements in environment, restoring the current environment afterwards however the block
        exits. Returns the Returning result if a return statement was executed.
        """
        previous = self.environment
        try:
            self.environment = environment
            for statement in statements:
                returning = self.execute(statement)
                if returning is not None:
                    return returning
        finally:
            self.environment = previous
        return None

    def execute_class(self, node):
        superclass = None
        if node.superclass is not None:
            superclass = self.evaluate(node.superclass)
            if not isinstance(superclass, LoxClass):
                raise LoxRuntimeError(node.superclass.name, "Superclass must be a class.")

        self.environment.define(node.name.lexeme)

        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.define("super", superclass)

        methods = {}
        for method in node.methods:
            is_initializer = method.name.lexeme == "init"
            methods[method.name.lexeme] = LoxFunction(method.name.lexeme, method.function, self.environment,
                                                      is_initializer)

        klass = LoxClass(node.name.lexeme, superclass, methods)

        if superclass is not None:
            self.environment = self.environment.enclosing

        self.environment.assign(node.name, klass)

    # expressions

    def evaluate(self, node):
        match node:
            case expr.Literal(value=value):
                return value

            case expr.Grouping(expression=inner):
                return self.evaluate(inner)

            case expr.Unary(operator=operator, right=right):
                return self.evaluate_unary(operator, self.evaluate(right))

            case expr.Binary(left=left, operator=operator, right=right):
                return self.evaluate_binary(operator, self.evaluate(left), self.evaluate(right))

            case expr.Logical(left=left, operator=operator, right=right):
                value = self.evaluate(left)
                if operator.type is TokenType.OR:
                    return value if is_truthy(value) else self.evaluate(right)
                return self.evaluate(right) if is_truthy(value) else value

            case expr.Ternary():
                return self.evaluate_ternary(node)

            case expr.Variable(name=name):
                return self.look_up_variable(name, node)

            case expr.Assign(name=name, value=value):
                value = self.evaluate(value)
                if node in self.locals:
                    self.environment.assign_at(self.locals[node], name, value)
                else:
                    self.globals.assign(name, value)
                return value

            case expr.Call():
                return self.evaluate_call(node)

            case expr.Function():
                return LoxFunction(None, node, self.environment)

            case expr.Get(object=obj, name=name):
                instance = self.evaluate(obj)
                if not isinstance(instance, LoxInstance):
                    raise LoxRuntimeError(name, "Only instances have properties.")
                return instance.get(name)

            case expr.Set(object=obj, name=name, value=value):
                instance = self.evaluate(obj)
                if not isinstance(instance, LoxInstance):
                    raise LoxRuntimeError(name, "Only instances have fields.")
                value = self.evaluate(value)
                instance.set(name, value)
                return value

            case expr.This(keyword=keyword):
                return self.look_up_variable(keyword, node)

            case expr.Super():
                return self.evaluate_super(node)

        raise TypeError(f"cannot evaluate {type(node).__name__}")

    def look_up_variable(self, name, node):
        if node in self.locals:
            return self.environment.get_at(self.locals[node], name)
        return self.globals.get(name)

    @staticmethod
    def evaluate_unary(operator, right):
        if operator.type is TokenType.MINUS:
            check_number_operand(operator, right)
            return -right
        return not is_truthy(right)

    @staticmethod
    def evaluate_binary(operator, left, right):
        match operator.type:
            case TokenType.COMMA:
                return right
            case TokenType.EQUAL_EQUAL:
                return is_equal(left, right)
            case TokenType.BANG_EQUAL:
                return not is_equal(left, right)
            case TokenType.PLUS:
                if isinstance(left, float) and isinstance(right, float):
                    return left + right
                if isinstance(left, str) or isinstance(right, str):
                    return stringify(left) + stringify(right)
                raise LoxRuntimeError(operator, "Operands must be two numbers or two strings.")

        check_number_operands(operator, left, right)
        match operator.type:
            case TokenType.MINUS:
                return left - right
            case TokenType.STAR:
                return left * right
            case TokenType.SLASH:
                if right == 0:
                    raise LoxRuntimeError(operator, "Division by zero.")
                return left / right
            case TokenType.GREATER:
                return left > right
            case TokenType.GREATER_EQUAL:
                return left >= right
            case TokenType.LESS:
                return left < right
            case TokenType.LESS_EQUAL:
                return left <= right

        raise LoxRuntimeError(operator, f"Unknown operator '{operator.lexeme}'.")

    def evaluate_ternary(self, node):
        """A falsey condition selects the else branch, and so does a number that is not positive (0 included). Any
        other truthy value selects the then branch.
        """
        condition = self.evaluate(node.condition)

        if not is_truthy(condition):
            return self.evaluate(node.else_branch)
        if isinstance(condition, float) and not condition > 0:
            return self.evaluate(node.else_branch)
        return self.evaluate(node.then_branch)

    def evaluate_call(self, node):
        callee = self.evaluate(node.callee)
        arguments = [self.evaluate(argument) for argument in node.arguments]

        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(node.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity:
            raise LoxRuntimeError(node.paren, f"Expected {callee.arity} arguments but got {len(arguments)}.")

        return callee.call(self, arguments)

    def evaluate_super(self, node):
        distance = self.locals[node]
        superclass = self.environment.get_at(distance, "super")
        instance = self.environment.get_at(distance - 1, "this")  # "this" is always one frame inside "super"

        method = superclass.find_method(node.method.lexeme)
        if method is None:
            raise LoxRuntimeError(node.method, f"Undefined property '{node.method.lexeme}'.")
        return method.bind(instance)

"""Runtime object model: everything a Lox program can call (native functions, functions/closures, classes), plus
class instances.
"""

from abc import ABC, abstractmethod

from lox.lang.error import LoxRuntimeError
from lox.runtime.environment import Environment


class LoxCallable(ABC):

    @property
    @abstractmethod
    def arity(self):
        """Number of arguments call expects."""

    @abstractmethod
    def call(self, interpreter, arguments):
        """Calls this object with already-evaluated arguments, whose count has been checked against arity."""


class NativeFunction(LoxCallable):
    """Function implemented in Python, e.g. the global clock."""

    def __init__(self, name, arity, function):
        self.name = name
        self._arity = arity
        self.function = function

    @property
    def arity(self):
        return self._arity

    def call(self, interpreter, arguments):
        return self.function(*arguments)

    def __str__(self):
        return "<native fn>"


class LoxFunction(LoxCallable):
    """User-defined function. closure is shared with the defining scope, not copied, so later mutations of captured
    variables are visible to the function (and vice versa).
    """

    def __init__(self, name, declaration, closure, is_initializer=False):
        self.name = name  # None for anonymous functions
        self.declaration = declaration
        self.closure = closure
        self.is_initializer = is_initializer

    @property
    def arity(self):
        return len(self.declaration.params)

    def call(self, interpreter, arguments):
        environment = Environment(self.closure)  # lexical, not dynamic, scoping
        for param, argument in zip(self.declaration.params, arguments):
            environment.define(param.lexeme, argument)

        returning = interpreter.execute_block(self.declaration.body, environment)

        if self.is_initializer:
            return self.closure.get_at(0, "this")
        return None if returning is None else returning.value

    def bind(self, instance):
        """Returns a copy of this method whose closure binds "this" to instance."""
        environment = Environment(self.closure)
        environment.define("this", instance)
        return LoxFunction(self.name, self.declaration, environment, self.is_initializer)

    def __str__(self):
        if self.name is None:
            return "<fn λ>"
        return f"<fn {self.name}>"


class LoxClass(LoxCallable):

    def __init__(self, name, superclass, methods):
        self.name = name
        self.superclass = superclass
        self.methods = methods  # name: LoxFunction, unbound

    def find_method(self, name):
        """Looks name up in this class, then along the superclass chain. Returns None if not found."""
        klass = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    @property
    def arity(self):
        initializer = self.find_method("init")
        return 0 if initializer is None else initializer.arity

    def call(self, interpreter, arguments):
        instance = LoxInstance(self)

        initializer = self.find_method("init")
        if initializer is not None:
            initializer.bind(instance).call(interpreter, arguments)

        return instance

    def __str__(self):
        return self.name


class LoxInstance:

    def __init__(self, klass):
        self.klass = klass
        self.fields = {}

    def get(self, name):
        """Fields shadow methods. Methods are bound to this instance on every access."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]

        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)

        raise LoxRuntimeError(name, f"Undefined property '{name.lexeme}'.")

    def set(self, name, value):
        self.fields[name.lexeme] = value

    def __str__(self):
        return f"{self.klass.name} instance"

"""Scope frames for the interpreter.

Each Environment maps names to value slots and points at its enclosing frame (None for globals). A slot holds either
a Lox value or UNINITIALIZED, which distinguishes "declared but never assigned" (`var a;`) from "bound to nil".
"""

from lox.lang.error import LoxRuntimeError


class _Uninitialized:

    def __repr__(self):
        return "UNINITIALIZED"


UNINITIALIZED = _Uninitialized()


class Environment:

    def __init__(self, enclosing=None):
        self.enclosing = enclosing
        self.values = {}

    def define(self, name, value=UNINITIALIZED):
        """Binds name in this frame, shadowing any outer binding. Redefinition is allowed (globals only, since the
        resolver rejects it in local scopes).
        """
        self.values[name] = value

    @staticmethod
    def _read(name, value):
        if value is UNINITIALIZED:
            raise LoxRuntimeError(name, f"Uninitialized variable '{name.lexeme}'.")
        return value

    def get(self, name):
        """Looks name (a Token) up through the whole chain."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                return self._read(name, environment.values[name.lexeme])
            environment = environment.enclosing

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def assign(self, name, value):
        """Rebinds name in the nearest frame that declares it."""
        environment = self
        while environment is not None:
            if name.lexeme in environment.values:
                environment.values[name.lexeme] = value
                return
            environment = environment.enclosing

        raise LoxRuntimeError(name, f"Undefined variable '{name.lexeme}'.")

    def ancestor(self, distance):
        environment = self
        for _ in range(distance):
            environment = environment.enclosing
        return environment

    def get_at(self, distance, name):
        """Reads name from the frame exactly distance hops up, without searching. name may be a Token or, for the
        synthetic "this" and "super" bindings, a plain string.
        """
        lexeme = name if isinstance(name, str) else name.lexeme
        value = self.ancestor(distance).values[lexeme]
        if isinstance(name, str):
            return value
        return self._read(name, value)

    def assign_at(self, distance, name, value):
        self.ancestor(distance).values[name.lexeme] = value

    def __repr__(self):
        depth = 0
        environment = self.enclosing
        while environment is not None:
            depth += 1
            environment = environment.enclosing
        return f"Environment(depth={depth}, names={list(self.values)})"

"""Lox interpreter: a tree-walking interpreter for a small dynamically-typed language with closures, first-class
functions and single-inheritance classes.

Basic program flow:
    1. Scanner (grammar/lexical.py): produces a flat list of tokens from source text
    2. Parser (grammar/parser.py): recursive-descent parser that produces a list of statement nodes
        - for the grammar rules, see the docstring of grammar/parser.py
    3. Resolver (runtime/resolver.py): static pass that computes the scope distance of every local variable
       reference and reports scoping errors
    4. Interpreter (runtime/interpreter.py): walks the statements and executes them on the fly

Static errors stop the pipeline after the phase that reported them; see lang/error.py.
"""

__version__ = "0.1.0"

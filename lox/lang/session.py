"""Session control for the Lox language. Runs source text through the whole pipeline, either one file at a time or
one line at a time in command-line mode:

    source -> Scanner -> tokens -> Parser -> statements -> Resolver -> Interpreter

Each phase only runs if the previous ones reported no static errors.
"""

import sys

from lox.grammar import printer
from lox.grammar.lexical import Scanner
from lox.grammar.parser import Parser
from lox.lang.error import LoxError
from lox.runtime.interpreter import Interpreter
from lox.runtime.resolver import Resolver


class Session:
    """Governs a Lox session. Global variables persist across every run in the same session."""
    DUMPS = (None, "tokens", "ast")

    def __init__(self, error_handler, stdout=None, dump=None):
        assert dump in Session.DUMPS, f"unknown dump '{dump}'"

        self.error_handler = error_handler
        self.stdout = stdout
        self.dump = dump  # if set, print tokens/syntax tree instead of running

        self.interpreter = Interpreter(error_handler, stdout)

    @staticmethod
    def read(path):
        """Returns contents of the file at path. Raises a LoxError if it can't be read."""
        try:
            with open(path, "r", encoding="utf-8") as file:
                return file.read()
        except (OSError, UnicodeDecodeError):
            raise LoxError(f"'{path}' could not be opened") from None

    @staticmethod
    def preprocess_line(line, add_to_prev=""):
        """Prepends add_to_prev (unfinished previous lines) to line. Returns the joined line and whether or not it
        is unfinished (unclosed braces, parentheses, string or block comment), in which case a line continuation is
        necessary.
        """
        if add_to_prev:
            line = add_to_prev + "\n" + line

        balance = 0
        in_string = False
        idx = 0
        while idx < len(line):
            char = line[idx]
            if char == '"':
                in_string = not in_string
            elif not in_string and line.startswith("//", idx):
                newline = line.find("\n", idx)
                idx = len(line) if newline == -1 else newline
                continue
            elif not in_string and line.startswith("/*", idx):
                close = line.find("*/", idx + 2)
                if close == -1:
                    return line, True
                idx = close + 2
                continue
            elif not in_string and char in "({":
                balance += 1
            elif not in_string and char in ")}":
                balance -= 1
            idx += 1

        return line, balance > 0 or in_string

    def output(self, text):
        print(text, file=self.stdout if self.stdout is not None else sys.stdout)

    def run(self, source):
        """Runs source in this session. Errors are reported to self.error_handler."""
        self.error_handler.register_source(source)

        tokens = Scanner(source, self.error_handler).scan_tokens()
        if self.dump == "tokens":
            for token in tokens:
                self.output(token)
            return

        statements = Parser(tokens, self.error_handler).parse()
        if self.error_handler.had_error:
            return

        if self.dump == "ast":
            for statement in statements:
                self.output(printer.show(statement))
            return

        Resolver(self.interpreter, self.error_handler).resolve(statements)
        if self.error_handler.had_error:
            return

        self.interpreter.interpret(statements)

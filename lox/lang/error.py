"""Error handling for the Lox language. Two kinds of errors exist: static errors (lexical, syntactic and scoping
errors), which are reported as they are found so that a single run surfaces all of them, and runtime errors, which
are raised as LoxRuntimeErrors and reported once at the interpret boundary. If some other Python error makes it all
the way to ErrorHandler, it is assumed to be an internal issue.
"""

import sys

from termcolor import colored

from lox.grammar.tokens import TokenType


class LoxError(Exception):
    """Base class for all Lox errors."""


class LoxRuntimeError(LoxError):
    """Error raised while evaluating a program. token is used to locate the error in the source."""

    def __init__(self, token, msg):
        super().__init__(msg)
        self.token = token
        self.msg = msg


class ErrorHandler:
    """Diagnostics collector for the lexer, parser and resolver, and context manager that reports errors escaping to
    the host instead of printing Python tracebacks.
    """
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, stream=None, color=True, diagnosis=True):
        self.stream = stream
        self.color = color
        self.diagnosis = diagnosis

        self.had_error = False
        self.had_runtime_error = False
        self.errors = []  # uncolored messages, in order of reporting

        self.source_lines = []

    @property
    def out(self):
        return self.stream if self.stream is not None else sys.stderr

    def register_source(self, source):
        """Registers source so that errors can display the offending line. Should be called before scanning."""
        self.source_lines = source.split("\n")

    def reset(self):
        """Clears the static error flag. Called between lines in interactive mode."""
        self.had_error = False

    def _colored(self, text, color=None, attrs=None):
        if not self.color:
            return text
        return colored(text, color, attrs=attrs)

    def diagnose(self, line, lexeme, warning=False):
        """Returns line in source with lexeme highlighted and underlined, or None if lexeme cannot be found."""
        if not lexeme or not 0 < line <= len(self.source_lines):
            return None

        text = self.source_lines[line - 1]
        start = text.find(lexeme)
        if start == -1:
            return None
        end = start + len(lexeme)
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        diagnosis = "  " + text[:start] + self._colored(text[start:end], color, ["bold"]) + text[end:] + "\n"
        diagnosis += "  " + " " * start + self._colored("^" + "~" * (end - start - 1), color, ["bold"])
        return diagnosis

    def error(self, where, msg):
        """Reports a static error. where is either a line number or the offending token."""
        if isinstance(where, int):
            line, location, lexeme = where, "", None
        elif where.type is TokenType.EOF:
            line, location, lexeme = where.line, " at end", None
        else:
            line, location, lexeme = where.line, f" at '{where.lexeme}'", where.lexeme

        self.errors.append(f"[line {line}] Error{location}: {msg}")
        self.had_error = True

        error_msg = self._colored(f"[line {line}] ", attrs=["bold"])
        error_msg += self._colored(f"Error{location}", ErrorHandler.ERROR, ["bold"]) + f": {msg}"
        print(error_msg, file=self.out)

        if self.diagnosis:
            diagnosis = self.diagnose(line, lexeme)
            if diagnosis:
                print(diagnosis, file=self.out)

    def warn(self, token, msg):
        """Reports a warning. Warnings never stop execution."""
        error_msg = self._colored(f"[line {token.line}] ", attrs=["bold"])
        error_msg += self._colored("Warning", ErrorHandler.WARNING, ["bold"]) + f": {msg}"
        print(error_msg, file=self.out)

        if self.diagnosis:
            diagnosis = self.diagnose(token.line, token.lexeme, warning=True)
            if diagnosis:
                print(diagnosis, file=self.out)

    def runtime_error(self, error):
        """Reports a LoxRuntimeError that escaped to the interpret boundary."""
        line = error.token.line if error.token is not None else "?"

        self.errors.append(f"{error.msg}\n[line {line}]")
        self.had_runtime_error = True

        print(self._colored(error.msg, ErrorHandler.ERROR, ["bold"]) + f"\n[line {line}]", file=self.out)

    def fatal(self, error):
        """Reports an error that keeps the program from running at all, e.g. an unreadable file."""
        self.errors.append(f"error: {error}")
        print(self._colored("error: ", ErrorHandler.ERROR, ["bold"]) + str(error), file=self.out)

    def internal(self, msg):
        """Reports an error that is not the program's fault."""
        self.errors.append(f"[internal] {msg}")
        self.had_runtime_error = True
        print(self._colored("[internal] ", ErrorHandler.ERROR, ["bold"]) + msg, file=self.out)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None or exc_type is SystemExit:
            return False
        if exc_type is KeyboardInterrupt:
            self.runtime_error(LoxRuntimeError(None, "Keyboard interrupt."))
        elif exc_type is RecursionError:
            self.runtime_error(LoxRuntimeError(None, "Stack overflow: maximum recursion depth exceeded."))
        elif issubclass(exc_type, LoxRuntimeError):
            self.runtime_error(exc_val)
        elif issubclass(exc_type, LoxError):
            self.fatal(exc_val)
        else:
            self.internal(f"unknown error: '{exc_type.__name__}: {exc_val}'")
        return True

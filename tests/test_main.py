import contextlib
import io
import os
import tempfile
import unittest

from lox.grammar.tokens import Token, TokenType
from lox.lang.error import ErrorHandler, LoxError, LoxRuntimeError
from lox.lang.session import Session
from lox.lang.shell import Shell
from lox.main import EX_DATAERR, EX_NOINPUT, EX_SOFTWARE, EX_USAGE, main


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.tmpdir.cleanup()

    def script(self, source):
        path = os.path.join(self.tmpdir.name, "script.lox")
        with open(path, "w", encoding="utf-8") as file:
            file.write(source)
        return path

    def main(self, *argv):
        """Runs main with argv. Returns exit code, stdout and stderr."""
        stdout, stderr = io.StringIO(), io.StringIO()
        with contextlib.redirect_stdout(stdout), contextlib.redirect_stderr(stderr):
            try:
                code = main(list(argv))
            except SystemExit as error:
                code = error.code
        return code, stdout.getvalue(), stderr.getvalue()

    def test_exit_codes(self):
        cases = {
            'print "ok";': (0, "ok\n"),
            "print 1": (EX_DATAERR, ""),
            "print 1; { var a; var a; }": (EX_DATAERR, ""),
            "print 1; print 1 / 0; print 2;": (EX_SOFTWARE, "1\n"),
        }
        for case, (code, output) in cases.items():
            result = self.main(self.script(case), "--no-color")
            self.assertEqual((code, output), result[:2], case)

    def test_error_output(self):
        __, __, stderr = self.main(self.script("var x = 1;\nprint x +;"), "--no-color")
        self.assertIn("[line 2] Error at ';': Expect expression.", stderr)
        self.assertIn("  print x +;\n", stderr)  # diagnosis echoes the offending line

        __, __, stderr = self.main(self.script("print x +;"), "--no-color", "--no-diagnosis")
        self.assertEqual("[line 1] Error at ';': Expect expression.\n", stderr)

        __, __, stderr = self.main(self.script("print nope;"), "--no-color")
        self.assertEqual("Undefined variable 'nope'.\n[line 1]\n", stderr)

    def test_missing_file(self):
        code, __, stderr = self.main(os.path.join(self.tmpdir.name, "missing.lox"), "--no-color")
        self.assertEqual(EX_NOINPUT, code)
        self.assertIn("could not be opened", stderr)

    def test_usage(self):
        should_fail = [("a.lox", "b.lox"), ("--unknown",), ("--tokens", "--ast", "a.lox")]
        for case in should_fail:
            code, __, stderr = self.main(*case)
            self.assertEqual(EX_USAGE, code, case)
            self.assertIn("usage:", stderr, case)

    def test_dump_flags(self):
        code, stdout, __ = self.main(self.script("print 1;"), "--tokens")
        self.assertEqual(0, code)
        self.assertEqual("PRINT print nil\nNUMBER 1 1.0\nSEMICOLON ; nil\nEOF  nil\n", stdout)

        code, stdout, __ = self.main(self.script("var a = -1;"), "--ast")
        self.assertEqual(0, code)
        self.assertEqual("(var a = (- 1))\n", stdout)


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()
        self.error_handler = ErrorHandler(stream=self.stderr, color=False, diagnosis=False)
        self.shell = Shell(Session(self.error_handler, stdout=self.stdout), stdout=io.StringIO())

    def feed(self, *lines):
        for line in lines:
            self.shell.onecmd(line)

    def test_state_persists(self):
        self.feed("var a = 1;", "fun double(x) { return x * 2; }", "print double(a);")
        self.assertEqual("2\n", self.stdout.getvalue())

    def test_continuation(self):
        self.feed("fun f() {")
        self.assertEqual(Shell.secondary_prompt, self.shell.prompt)
        self.feed("  return 3;", "}")
        self.assertEqual("> ", self.shell.prompt)
        self.feed("print f();")
        self.assertEqual("3\n", self.stdout.getvalue())

    def test_errors_do_not_end_session(self):
        self.feed("print ;", "print nope;", "print 1;")
        self.assertEqual("1\n", self.stdout.getvalue())
        self.assertEqual(2, len(self.error_handler.errors))
        self.assertFalse(self.error_handler.had_error)  # reset for the last line

    def test_exit(self):
        self.assertTrue(self.shell.onecmd("exit"))
        self.assertTrue(self.shell.onecmd("  exit  "))
        self.assertFalse(self.shell.onecmd(""))

    def test_command_words_as_identifiers(self):
        self.assertFalse(self.shell.onecmd("var exit = 1;"))
        self.assertFalse(self.shell.onecmd("exit = 2;"))
        self.assertFalse(self.shell.onecmd("fun help(x) { return x + exit; }"))
        self.assertFalse(self.shell.onecmd("print help(1);"))
        self.assertEqual("3\n", self.stdout.getvalue())
        self.assertEqual([], self.error_handler.errors)

    def test_command_word_inside_continuation(self):
        self.feed("fun f() {")
        self.assertFalse(self.shell.onecmd("exit"))  # part of the unfinished source, not a command
        self.feed("}")
        self.assertEqual("> ", self.shell.prompt)
        self.assertTrue(self.error_handler.had_error)  # "exit" without ";" is a syntax error in the function body

    def test_end_of_input_inside_continuation(self):
        self.feed("fun f() {")
        with contextlib.redirect_stdout(io.StringIO()):
            self.assertTrue(self.shell.onecmd("EOF"))

    def test_preprocess_line(self):
        cases = {
            "print 1;": False,
            "fun f() {": True,
            "f(1,": True,
            'print "{";': False,
            'print "a': True,
            "print 1; // {": False,
            "{ }": False,
            "print 1; /* ( */": False,
            "print 1; /* { */ {": True,
            "/* (": True,
            'print "/*";': False,
        }
        for case, expected in cases.items():
            self.assertEqual(expected, Session.preprocess_line(case)[1], case)

        line, unfinished = Session.preprocess_line("}", "fun f() {")
        self.assertEqual("fun f() {\n}", line)
        self.assertFalse(unfinished)


class ErrorHandlerTestCase(unittest.TestCase):

    def setUp(self):
        self.stream = io.StringIO()
        self.error_handler = ErrorHandler(stream=self.stream, color=False)

    def test_locations(self):
        cases = {
            3: "[line 3] Error: message",
            Token(TokenType.IDENTIFIER, "name", None, 2): "[line 2] Error at 'name': message",
            Token(TokenType.EOF, "", None, 4): "[line 4] Error at end: message",
        }
        for where, expected in cases.items():
            self.error_handler.error(where, "message")
            self.assertEqual(expected, self.error_handler.errors[-1])
        self.assertTrue(self.error_handler.had_error)

        self.error_handler.reset()
        self.assertFalse(self.error_handler.had_error)

    def test_diagnose(self):
        self.error_handler.register_source("var a = 1;\nprint a + oops;")
        self.assertEqual("  print a + oops;\n            ^~~~", self.error_handler.diagnose(2, "oops"))
        self.assertIsNone(self.error_handler.diagnose(3, "oops"))
        self.assertIsNone(self.error_handler.diagnose(1, "missing"))

    def test_runtime_error(self):
        token = Token(TokenType.PLUS, "+", None, 7)
        self.error_handler.runtime_error(LoxRuntimeError(token, "Operands must be numbers."))
        self.assertEqual(["Operands must be numbers.\n[line 7]"], self.error_handler.errors)
        self.assertEqual("Operands must be numbers.\n[line 7]\n", self.stream.getvalue())
        self.assertTrue(self.error_handler.had_runtime_error)
        self.assertFalse(self.error_handler.had_error)

    def test_context_manager(self):
        cases = {
            LoxRuntimeError(Token(TokenType.IDENTIFIER, "x", None, 1), "boom"): "boom\n[line 1]",
            LoxError("'file' could not be opened"): "error: 'file' could not be opened",
            ValueError("bad"): "[internal] unknown error: 'ValueError: bad'",
        }
        for error, expected in cases.items():
            with self.error_handler:
                raise error
            self.assertEqual(expected, self.error_handler.errors[-1])

        with self.assertRaises(SystemExit):
            with self.error_handler:
                raise SystemExit(0)

    def test_colored(self):
        stream = io.StringIO()
        error_handler = ErrorHandler(stream=stream, color=True, diagnosis=False)
        error_handler.error(1, "message")
        self.assertEqual(["[line 1] Error: message"], error_handler.errors)  # recorded uncolored
        self.assertIn("message", stream.getvalue())


if __name__ == '__main__':
    unittest.main()

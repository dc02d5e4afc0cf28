import io
import unittest

from lox.grammar import expr, printer, stmt
from lox.grammar.lexical import Scanner
from lox.grammar.parser import Parser
from lox.lang.error import ErrorHandler


def parse(source):
    error_handler = ErrorHandler(stream=io.StringIO(), color=False, diagnosis=False)
    tokens = Scanner(source, error_handler).scan_tokens()
    return Parser(tokens, error_handler).parse(), error_handler


def show(source):
    statements, error_handler = parse(source)
    assert not error_handler.had_error, error_handler.errors
    return [printer.show(statement) for statement in statements]


class ExpressionTestCase(unittest.TestCase):

    def test_precedence(self):
        cases = {
            "1 + 2 * 3;": "(; (+ 1 (* 2 3)))",
            "(1 + 2) * 3;": "(; (* (group (+ 1 2)) 3))",
            "1 - 2 - 3;": "(; (- (- 1 2) 3))",
            "8 / 4 / 2;": "(; (/ (/ 8 4) 2))",
            "-1 - -2;": "(; (- (- 1) (- 2)))",
            "!!true;": "(; (! (! true)))",
            "1 < 2 == true;": "(; (== (< 1 2) true))",
            "a or b and c;": "(; (or a (and b c)))",
            "a and b or c;": "(; (or (and a b) c))",
            "1, 2, 3;": "(; (, (, 1 2) 3))",
            "nil != \"s\";": '(; (!= nil "s"))',
            "1.5 >= 2;": "(; (>= 1.5 2))",
        }
        for case, expected in cases.items():
            self.assertEqual([expected], show(case), case)

    def test_assignment(self):
        cases = {
            "a = 1;": "(; (= a 1))",
            "a = b = 1;": "(; (= a (= b 1)))",
            "a.b.c = 1;": "(; (= (. (. a b) c) 1))",
            "f().x = 2;": "(; (= (. (call f) x) 2))",
            "a = b ? 1 : 2;": "(; (= a (?: b 1 2)))",
        }
        for case, expected in cases.items():
            self.assertEqual([expected], show(case), case)

    def test_ternary(self):
        cases = {
            "x ? 1 : 2;": "(; (?: x 1 2))",
            "x ? 1 : y ? 2 : 3;": "(; (?: x 1 (?: y 2 3)))",
            "a or b ? c = 1 : d;": "(; (?: (or a b) (= c 1) d))",
        }
        for case, expected in cases.items():
            self.assertEqual([expected], show(case), case)

    def test_calls(self):
        cases = {
            "f();": "(; (call f))",
            "f(1, 2);": "(; (call f 1 2))",
            "f(1)(2);": "(; (call (call f 1) 2))",
            "a.b(c).d;": "(; (. (call (. a b) c) d))",
            "super.m(1);": "(; (call (super m) 1))",
            "this.x;": "(; (. this x))",
        }
        for case, expected in cases.items():
            self.assertEqual([expected], show(case), case)

    def test_call_arguments_are_not_comma_expressions(self):
        statements, __ = parse("f(1, 2);")
        call = statements[0].expression
        self.assertIsInstance(call, expr.Call)
        self.assertEqual(2, len(call.arguments))

    def test_lambda(self):
        cases = {
            "fun (x) { return x; };": "(; (fun (x) (return x)))",
            "var f = fun () {};": "(var f = (fun ()))",
            "f(fun (a, b) { print a; });": "(; (call f (fun (a b) (print a))))",
        }
        for case, expected in cases.items():
            self.assertEqual([expected], show(case), case)


class StatementTestCase(unittest.TestCase):

    def test_declarations(self):
        cases = {
            "var a;": "(var a)",
            "var a = 1;": "(var a = 1)",
            "fun f(a, b) { return a + b; }": "(fun f (a b) (return (+ a b)))",
            "fun f() { return; }": "(fun f () (return))",
            "class A {}": "(class A)",
            "class B < A { init(x) { this.x = x; } }": "(class B < A (fun init (x) (; (= (. this x) x))))",
        }
        for case, expected in cases.items():
            self.assertEqual([expected], show(case), case)

    def test_statements(self):
        cases = {
            "print 1;": "(print 1)",
            "{ var a = 1; print a; }": "(block (var a = 1) (print a))",
            "if (a) print 1;": "(if a (print 1))",
            "if (a) print 1; else print 2;": "(if-else a (print 1) (print 2))",
            "if (a) if (b) print 1; else print 2;": "(if a (if-else b (print 1) (print 2)))",
            "while (a) a = a - 1;": "(while a (; (= a (- a 1))))",
        }
        for case, expected in cases.items():
            self.assertEqual([expected], show(case), case)

    def test_for_desugaring(self):
        cases = {
            "for (var i = 0; i < 3; i = i + 1) print i;":
                "(block (var i = 0) (while (< i 3) (block (print i) (; (= i (+ i 1))))))",
            "for (;;) print 1;": "(while true (print 1))",
            "for (i = 0; i < 3;) print i;": "(block (; (= i 0)) (while (< i 3) (print i)))",
            "for (; i < 3; i = i + 1) {}": "(while (< i 3) (block (block) (; (= i (+ i 1)))))",
        }
        for case, expected in cases.items():
            self.assertEqual([expected], show(case), case)

        statements, __ = parse("for (;;) {}")
        self.assertIsInstance(statements[0], stmt.While)
        self.assertIs(True, statements[0].condition.value)

    def test_nodes_are_distinct_keys(self):
        statements, __ = parse("a; a;")
        first, second = statements[0].expression, statements[1].expression
        self.assertNotEqual(first, second)
        self.assertEqual(2, len({first: 0, second: 1}))


class ErrorTestCase(unittest.TestCase):

    def test_errors(self):
        cases = {
            "1 = 2;": ["[line 1] Error at '=': Invalid assignment target."],
            "a + b = c;": ["[line 1] Error at '=': Invalid assignment target."],
            "print 1": ["[line 1] Error at end: Expect ';' after value."],
            "var 1 = 2;": ["[line 1] Error at '1': Expect variable name."],
            "x ? 1;": ["[line 1] Error at ';': Expect ':' after then branch of conditional expression."],
            "(1 + 2;": ["[line 1] Error at ';': Expect ')' after expression."],
            "class { }": ["[line 1] Error at '{': Expect class name."],
            "class A < { }": ["[line 1] Error at '{': Expect superclass name."],
            "fun f(1) {}": ["[line 1] Error at '1': Expect parameter name."],
            "a.1;": ["[line 1] Error at '1': Expect property name after '.'."],
            "super;": ["[line 1] Error at ';': Expect '.' after 'super'."],
            "{ print 1;": ["[line 1] Error at end: Expect '}' after block."],
            ";": ["[line 1] Error at ';': Expect expression."],
        }
        for case, expected in cases.items():
            __, error_handler = parse(case)
            self.assertEqual(expected, error_handler.errors, case)

    def test_invalid_assignment_keeps_parsing(self):
        statements, error_handler = parse("1 = 2; print 3;")
        self.assertTrue(error_handler.had_error)
        self.assertEqual(["(; 1)", "(print 3)"], [printer.show(statement) for statement in statements])

    def test_synchronize(self):
        source = "var = 1;\nprint 2;\nvar 3;\nprint 4;\nfun (;\nprint 5;"
        statements, error_handler = parse(source)
        self.assertEqual(3, len(error_handler.errors))
        self.assertEqual(["[line 1]", "[line 3]", "[line 5]"], [error.split(" Error")[0] for error in error_handler.errors])
        self.assertEqual(["(print 2)", "(print 4)", "(print 5)"], [printer.show(statement) for statement in statements])

    def test_synchronize_stops_at_statement_keywords(self):
        statements, error_handler = parse("1 + ) print 2;")
        self.assertEqual(1, len(error_handler.errors))
        self.assertEqual(["(print 2)"], [printer.show(statement) for statement in statements])

    def test_max_arguments(self):
        cases = {
            "f(" + ", ".join(["1"] * 256) + ");": "[line 1] Error at '1': Can't have more than 255 arguments.",
            "fun f(" + ", ".join(f"a{idx}" for idx in range(256)) + ") {}":
                "[line 1] Error at 'a255': Can't have more than 255 parameters.",
        }
        for case, expected in cases.items():
            statements, error_handler = parse(case)
            self.assertEqual([expected], error_handler.errors, case[:10])
            self.assertEqual(1, len(statements), case[:10])  # reported, but parsing continues

        __, error_handler = parse("f(" + ", ".join(["1"] * 255) + ");")
        self.assertFalse(error_handler.had_error)


if __name__ == '__main__':
    unittest.main()

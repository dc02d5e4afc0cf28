"""Recursive-descent parser for the Lox language. Consumes the scanner's tokens and produces a list of statements.

Syntactic grammar, from statements down to the highest-binding expressions:

```
<program>     ::= <declaration>* EOF
<declaration> ::= <class_decl> | <fun_decl> | <var_decl> | <statement>
<class_decl>  ::= "class" IDENTIFIER ("<" IDENTIFIER)? "{" <function>* "}"
<fun_decl>    ::= "fun" <function>                  ; only if "fun" is directly followed by an IDENTIFIER
<function>    ::= IDENTIFIER "(" <parameters>? ")" <block>
<parameters>  ::= IDENTIFIER ("," IDENTIFIER)*      ; at most 255
<var_decl>    ::= "var" IDENTIFIER ("=" <expression>)? ";"

<statement>   ::= <expr_stmt> | <for_stmt> | <if_stmt> | <print_stmt> | <return_stmt> | <while_stmt> | <block>
<for_stmt>    ::= "for" "(" (<var_decl> | <expr_stmt> | ";") <expression>? ";" <expression>? ")" <statement>
<if_stmt>     ::= "if" "(" <expression> ")" <statement> ("else" <statement>)?
<return_stmt> ::= "return" <expression>? ";"
<while_stmt>  ::= "while" "(" <expression> ")" <statement>
<block>       ::= "{" <declaration>* "}"

<expression>  ::= <comma>
<comma>       ::= <assignment> ("," <assignment>)*
<assignment>  ::= (<call> ".")? IDENTIFIER "=" <assignment> | <ternary>
<ternary>     ::= <logic_or> ("?" <assignment> ":" <assignment>)?
<logic_or>    ::= <logic_and> ("or" <logic_and>)*
<logic_and>   ::= <equality> ("and" <equality>)*
<equality>    ::= <compare> (("!=" | "==") <compare>)*
<compare>     ::= <add> ((">" | ">=" | "<" | "<=") <add>)*
<add>         ::= <multiply> (("-" | "+") <multiply>)*
<multiply>    ::= <unary> (("/" | "*") <unary>)*
<unary>       ::= ("!" | "-") <unary> | <call>
<call>        ::= <primary> ("(" <arguments>? ")" | "." IDENTIFIER)*
<arguments>   ::= <assignment> ("," <assignment>)*  ; at most 255
<primary>     ::= NUMBER | STRING | "true" | "false" | "nil" | "this" | "super" "." IDENTIFIER
                | "(" <expression> ")" | IDENTIFIER | "fun" "(" <parameters>? ")" <block>
```

"for" loops have no node of their own: they are desugared into "while" loops wrapped in blocks.
"""

from lox.grammar import expr, stmt
from lox.grammar.tokens import Token, TokenType


MAX_ARGS = 255

# tokens that start a new statement, used to resynchronize after a syntax error
BOUNDARIES = {
    TokenType.CLASS,
    TokenType.FUN,
    TokenType.VAR,
    TokenType.FOR,
    TokenType.IF,
    TokenType.WHILE,
    TokenType.PRINT,
    TokenType.RETURN,
}


class ParseError(Exception):
    """Unwinds the parser to the enclosing declaration. Never escapes Parser.parse."""


class Parser:

    def __init__(self, tokens, error_handler):
        self.tokens = tokens
        self.error_handler = error_handler
        self.current = 0

    def parse(self):
        """Parses every declaration in self.tokens. Declarations containing syntax errors are reported and left out,
        so the result is the best-effort list of the well-formed ones.
        """
        statements = []
        while not self.at_end:
            declaration = self.declaration()
            if declaration is not None:
                statements.append(declaration)
        return statements

    # declarations

    def declaration(self):
        try:
            if self.match(TokenType.CLASS):
                return self.class_declaration()
            if self.check(TokenType.FUN) and self.check_next(TokenType.IDENTIFIER):
                self.advance()
                return self.function("function")
            if self.match(TokenType.VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expect class name.")

        superclass = None
        if self.match(TokenType.LESS):
            self.consume(TokenType.IDENTIFIER, "Expect superclass name.")
            superclass = expr.Variable(self.previous())

        self.consume(TokenType.LEFT_BRACE, "Expect '{' before class body.")

        methods = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.at_end:
            methods.append(self.function("method"))

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after class body.")
        return stmt.Class(name, superclass, methods)

    def function(self, kind):
        name = self.consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        return stmt.Function(name, self.function_body(kind))

    def function_body(self, kind):
        self.consume(TokenType.LEFT_PAREN, f"Expect '(' after {kind} name.")

        params = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGS} parameters.")
                params.append(self.consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenType.COMMA):
                    break

        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after parameters.")
        self.consume(TokenType.LEFT_BRACE, f"Expect '{{' before {kind} body.")
        return expr.Function(params, self.block())

    def var_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expect variable name.")

        initializer = None
        if self.match(TokenType.EQUAL):
            initializer = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return stmt.Var(name, initializer)

    # statements

    def statement(self):
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.LEFT_BRACE):
            return stmt.Block(self.block())
        return self.expression_statement()

    def block(self):
        """Parses declarations up to and including the closing brace. Assumes the opening brace was consumed."""
        statements = []
        while not self.check(TokenType.RIGHT_BRACE) and not self.at_end:
            declaration = self.declaration()
            if declaration is not None:
                statements.append(declaration)

        self.consume(TokenType.RIGHT_BRACE, "Expect '}' after block.")
        return statements

    def for_statement(self):
        """Desugars for (init; cond; incr) body into { init; while (cond) { body; incr; } }."""
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'for'.")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition = None
        if not self.check(TokenType.SEMICOLON):
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None
        if not self.check(TokenType.RIGHT_PAREN):
            increment = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()

        if increment is not None:
            body = stmt.Block([body, stmt.Expression(increment)])
        if condition is None:
            condition = expr.Literal(True)
        body = stmt.While(condition, body)
        if initializer is not None:
            body = stmt.Block([initializer, body])

        return body

    def if_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = self.statement() if self.match(TokenType.ELSE) else None
        return stmt.If(condition, then_branch, else_branch)

    def print_statement(self):
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return stmt.Print(value)

    def return_statement(self):
        keyword = self.previous()
        value = None
        if not self.check(TokenType.SEMICOLON):
            value = self.expression()

        self.consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return stmt.Return(keyword, value)

    def while_statement(self):
        self.consume(TokenType.LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenType.RIGHT_PAREN, "Expect ')' after condition.")
        return stmt.While(condition, self.statement())

    def expression_statement(self):
        expression = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return stmt.Expression(expression)

    # expressions

    def expression(self):
        return self.comma()

    def comma(self):
        expression = self.assignment()
        while self.match(TokenType.COMMA):
            operator = self.previous()
            expression = expr.Binary(expression, operator, self.assignment())
        return expression

    def assignment(self):
        expression = self.ternary()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expression, expr.Variable):
                return expr.Assign(expression.name, value)
            elif isinstance(expression, expr.Get):
                return expr.Set(expression.object, expression.name, value)

            self.error(equals, "Invalid assignment target.")  # reported, but no need to synchronize

        return expression

    def ternary(self):
        expression = self.logic_or()

        if self.match(TokenType.QUESTION_MARK):
            then_branch = self.assignment()
            self.consume(TokenType.COLON, "Expect ':' after then branch of conditional expression.")
            else_branch = self.assignment()
            return expr.Ternary(expression, then_branch, else_branch)

        return expression

    def logic_or(self):
        expression = self.logic_and()
        while self.match(TokenType.OR):
            operator = self.previous()
            expression = expr.Logical(expression, operator, self.logic_and())
        return expression

    def logic_and(self):
        expression = self.equality()
        while self.match(TokenType.AND):
            operator = self.previous()
            expression = expr.Logical(expression, operator, self.equality())
        return expression

    def _binary(self, operand, *types):
        """Parses a left-associative chain of operand separated by any of types."""
        expression = operand()
        while self.match(*types):
            operator = self.previous()
            expression = expr.Binary(expression, operator, operand())
        return expression

    def equality(self):
        return self._binary(self.compare, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def compare(self):
        return self._binary(self.add, TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.LESS,
                            TokenType.LESS_EQUAL)

    def add(self):
        return self._binary(self.multiply, TokenType.MINUS, TokenType.PLUS)

    def multiply(self):
        return self._binary(self.unary, TokenType.SLASH, TokenType.STAR)

    def unary(self):
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            return expr.Unary(operator, self.unary())
        return self.call()

    def call(self):
        expression = self.primary()

        while True:
            if self.match(TokenType.LEFT_PAREN):
                expression = self.finish_call(expression)
            elif self.match(TokenType.DOT):
                name = self.consume(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expression = expr.Get(expression, name)
            else:
                break

        return expression

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenType.RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGS:
                    self.error(self.peek(), f"Can't have more than {MAX_ARGS} arguments.")
                arguments.append(self.assignment())
                if not self.match(TokenType.COMMA):
                    break

        paren = self.consume(TokenType.RIGHT_PAREN, "Expect ')' after arguments.")
        return expr.Call(callee, paren, arguments)

    def primary(self):
        if self.match(TokenType.FALSE):
            return expr.Literal(False)
        if self.match(TokenType.TRUE):
            return expr.Literal(True)
        if self.match(TokenType.NIL):
            return expr.Literal(None)

        if self.match(TokenType.NUMBER, TokenType.STRING):
            return expr.Literal(self.previous().literal)

        if self.match(TokenType.THIS):
            return expr.This(self.previous())

        if self.match(TokenType.SUPER):
            keyword = self.previous()
            self.consume(TokenType.DOT, "Expect '.' after 'super'.")
            method = self.consume(TokenType.IDENTIFIER, "Expect superclass method name.")
            return expr.Super(keyword, method)

        if self.match(TokenType.IDENTIFIER):
            return expr.Variable(self.previous())

        if self.match(TokenType.LEFT_PAREN):
            expression = self.expression()
            self.consume(TokenType.RIGHT_PAREN, "Expect ')' after expression.")
            return expr.Grouping(expression)

        if self.match(TokenType.FUN):
            return self.function_body("function")

        raise self.error(self.peek(), "Expect expression.")

    # helpers

    def match(self, *types):
        """Consumes the next token if it is any of types."""
        for token_type in types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def check(self, token_type):
        return not self.at_end and self.peek().type is token_type

    def check_next(self, token_type):
        if self.at_end or self.tokens[self.current + 1].type is TokenType.EOF:
            return False
        return self.tokens[self.current + 1].type is token_type

    def advance(self):
        if not self.at_end:
            self.current += 1
        return self.previous()

    @property
    def at_end(self):
        return self.peek().type is TokenType.EOF

    def peek(self) -> Token:
        return self.tokens[self.current]

    def previous(self) -> Token:
        return self.tokens[self.current - 1]

    def consume(self, token_type, msg):
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), msg)

    def error(self, token, msg):
        """Reports a syntax error and returns (does not raise) a ParseError for the caller to raise if needed."""
        self.error_handler.error(token, msg)
        return ParseError(msg)

    def synchronize(self):
        """Discards tokens until the start of what is probably the next statement."""
        self.advance()

        while not self.at_end:
            if self.previous().type is TokenType.SEMICOLON:
                return
            if self.peek().type in BOUNDARIES:
                return
            self.advance()

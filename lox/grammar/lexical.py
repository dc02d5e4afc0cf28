"""Lexical analysis for the Lox language: converts raw source text into a flat list of Tokens.

Lexical grammar, loosely:

```
<token>      ::= <punctuator> | <operator> | <number> | <string> | <identifier> | <keyword>
<punctuator> ::= "(" | ")" | "{" | "}" | "," | "." | "-" | "+" | ";" | "/" | "*" | "?" | ":"
<operator>   ::= "!" | "!=" | "=" | "==" | ">" | ">=" | "<" | "<="  ; resolved with one character of lookahead
<number>     ::= <digit>+ ("." <digit>+)?                           ; always stored as a float
<string>     ::= '"' <char>* '"'                                    ; may span lines, no escape sequences
<identifier> ::= <alpha> (<alpha> | <digit>)*                       ; <alpha> is a-z, A-Z or "_"

<comment>    ::= "//" <char>* <newline>
               | "/*" <char>* "*/"                                  ; block comments do not nest
```

The scanner never raises: errors are reported to the ErrorHandler and scanning continues.
"""

from lox.grammar.tokens import KEYWORDS, Token, TokenType


SINGLE = {
    "(": TokenType.LEFT_PAREN,
    ")": TokenType.RIGHT_PAREN,
    "{": TokenType.LEFT_BRACE,
    "}": TokenType.RIGHT_BRACE,
    ",": TokenType.COMMA,
    ".": TokenType.DOT,
    "-": TokenType.MINUS,
    "+": TokenType.PLUS,
    ";": TokenType.SEMICOLON,
    "*": TokenType.STAR,
    "?": TokenType.QUESTION_MARK,
    ":": TokenType.COLON,
}

# char: (type if followed by "=", type otherwise)
DOUBLE = {
    "!": (TokenType.BANG_EQUAL, TokenType.BANG),
    "=": (TokenType.EQUAL_EQUAL, TokenType.EQUAL),
    "<": (TokenType.LESS_EQUAL, TokenType.LESS),
    ">": (TokenType.GREATER_EQUAL, TokenType.GREATER),
}

WHITESPACE = " \r\t"


def is_digit(char):
    return "0" <= char <= "9"


def is_alpha(char):
    return "a" <= char <= "z" or "A" <= char <= "Z" or char == "_"


def is_alphanumeric(char):
    return is_alpha(char) or is_digit(char)


class Scanner:
    """Single-pass scanner. start and current index into source; line is the line currently being scanned."""

    def __init__(self, source, error_handler):
        self.source = source
        self.error_handler = error_handler

        self.tokens = []
        self.start = 0
        self.current = 0
        self.line = 1

    def scan_tokens(self):
        """Scans the whole source and returns its tokens, always terminated by an EOF token."""
        while not self.at_end:
            self.start = self.current
            self.scan_token()

        self.tokens.append(Token(TokenType.EOF, "", None, self.line))
        return self.tokens

    @property
    def at_end(self):
        return self.current >= len(self.source)

    def scan_token(self):
        char = self.advance()

        if char in SINGLE:
            self.add_token(SINGLE[char])
        elif char in DOUBLE:
            matched, single = DOUBLE[char]
            self.add_token(matched if self.match("=") else single)
        elif char == "/":
            if self.match("/"):
                while self.peek() != "\n" and not self.at_end:
                    self.advance()
            elif self.match("*"):
                self.block_comment()
            else:
                self.add_token(TokenType.SLASH)
        elif char in WHITESPACE:
            pass
        elif char == "\n":
            self.line += 1
        elif char == '"':
            self.string()
        elif is_digit(char):
            self.number()
        elif is_alpha(char):
            self.identifier()
        else:
            self.error_handler.error(self.line, "Unexpected character.")

    def advance(self):
        self.current += 1
        return self.source[self.current - 1]

    def match(self, expected):
        """Consumes the next character only if it is expected."""
        if self.at_end or self.source[self.current] != expected:
            return False
        self.current += 1
        return True

    def peek(self):
        return "\0" if self.at_end else self.source[self.current]

    def peek_next(self):
        if self.current + 1 >= len(self.source):
            return "\0"
        return self.source[self.current + 1]

    def add_token(self, token_type, literal=None):
        self.tokens.append(Token(token_type, self.source[self.start:self.current], literal, self.line))

    def block_comment(self):
        """Skips to the first "*/". A nested "/*" is ignored, so the first "*/" always closes the comment."""
        while not self.at_end:
            if self.peek() == "*" and self.peek_next() == "/":
                self.current += 2
                return
            if self.peek() == "\n":
                self.line += 1
            self.advance()

        self.error_handler.error(self.line, "Unterminated block comment.")

    def string(self):
        while self.peek() != '"' and not self.at_end:
            if self.peek() == "\n":
                self.line += 1
            self.advance()

        if self.at_end:
            self.error_handler.error(self.line, "Unterminated string.")
            return

        self.advance()  # closing "
        self.add_token(TokenType.STRING, self.source[self.start + 1:self.current - 1])

    def number(self):
        while is_digit(self.peek()):
            self.advance()

        if self.peek() == "." and is_digit(self.peek_next()):
            self.advance()
            while is_digit(self.peek()):
                self.advance()

        self.add_token(TokenType.NUMBER, float(self.source[self.start:self.current]))

    def identifier(self):
        while is_alphanumeric(self.peek()):
            self.advance()

        text = self.source[self.start:self.current]
        self.add_token(KEYWORDS.get(text, TokenType.IDENTIFIER))

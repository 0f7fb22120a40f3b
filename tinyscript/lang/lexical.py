"""Lexical analysis for tinyscript: converts source text into an ordered list of Tokens in a single left-to-right pass.

All tokens can be loosely defined as follows:

```
<number>     ::= [0-9]+
<word>       ::= [A-Za-z_]+                 ; "if", "print", "function" and "import" are keywords,
                                            ; anything else is an identifier ("iffy" is one identifier)
<string>     ::= '"' <char except '"'>* '"'  ; captured verbatim, no escape sequences
<operator>   ::= "+" | "-" | "*" | "/" | "=" | "==" | ">" | "<"
<punct>      ::= ";" | "(" | ")" | "{" | "}" | ","
```

Whitespace separates tokens and is otherwise ignored. Positions are 1-based lines and columns, where columns count
code points rather than bytes.
"""

import string
from dataclasses import dataclass, field
from enum import Enum

from tinyscript.lang.error import LexError


class TokenType(Enum):
    NUMBER = "NUMBER"
    STRING = "STRING"
    IDENTIFIER = "IDENTIFIER"

    IF = "IF"
    PRINT = "PRINT"
    FUNCTION = "FUNCTION"
    IMPORT = "IMPORT"

    PLUS = "PLUS"
    MINUS = "MINUS"
    MULTIPLY = "MULTIPLY"
    DIVIDE = "DIVIDE"
    EQUALS = "EQUALS"
    EQUAL_EQUAL = "EQUAL_EQUAL"
    GREATER_THAN = "GREATER_THAN"
    LESS_THAN = "LESS_THAN"

    SEMICOLON = "SEMICOLON"
    LPAREN = "LPAREN"
    RPAREN = "RPAREN"
    LBRACE = "LBRACE"
    RBRACE = "RBRACE"
    COMMA = "COMMA"


@dataclass(frozen=True)
class Position:
    """Where a token starts in its source unit."""
    path: str
    line: int
    col: int

    def __str__(self):
        return f"{self.path}:{self.line}:{self.col}"


@dataclass(frozen=True)
class Token:
    """Tag plus text. For STRING tokens, text is the literal's content without the surrounding quotes."""
    type: TokenType
    text: str
    pos: Position = field(default=None, compare=False, repr=False)

    @property
    def lexeme(self):
        """Source spelling of this token."""
        if self.type is TokenType.STRING:
            return f'"{self.text}"'
        return self.text


class Lexer:
    """Single-pass tokenizer. Fails on the first character that cannot start a token."""
    DIGITS = frozenset(string.digits)
    LETTERS = frozenset(string.ascii_letters + "_")

    KEYWORDS = {
        "if": TokenType.IF,
        "print": TokenType.PRINT,
        "function": TokenType.FUNCTION,
        "import": TokenType.IMPORT,
    }
    SINGLES = {
        "+": TokenType.PLUS,
        "-": TokenType.MINUS,
        "*": TokenType.MULTIPLY,
        "/": TokenType.DIVIDE,
        ";": TokenType.SEMICOLON,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        "{": TokenType.LBRACE,
        "}": TokenType.RBRACE,
        ">": TokenType.GREATER_THAN,
        "<": TokenType.LESS_THAN,
        ",": TokenType.COMMA,
    }

    def __init__(self, source, path="<string>", line=1):
        self.source = source
        self.path = path

        self.idx = 0
        self.line = line        # line of self.idx
        self.line_start = 0     # index of the first character of self.line

        self.tokens = []

    @property
    def pos(self):
        return Position(self.path, self.line, self.idx - self.line_start + 1)

    @property
    def char(self):
        return self.source[self.idx] if self.idx < len(self.source) else None

    def advance(self):
        """Consumes one character, keeping line bookkeeping up to date."""
        if self.source[self.idx] == "\n":
            self.line += 1
            self.line_start = self.idx + 1
        self.idx += 1

    def tokenize(self):
        while self.char is not None:
            char = self.char

            if char.isspace():
                self.advance()
            elif char in Lexer.DIGITS:
                self.read_number()
            elif char in Lexer.LETTERS:
                self.read_word()
            elif char == "\"":
                self.read_string()
            elif char == "=":
                self.read_equals()
            elif char in Lexer.SINGLES:
                self.emit(Lexer.SINGLES[char], char, self.pos)
                self.advance()
            else:
                shown = char if char.isprintable() else repr(char)[1:-1]
                raise LexError("unexpected character '{}'", shown, pos=self.pos)

        return self.tokens

    def emit(self, token_type, text, pos):
        self.tokens.append(Token(token_type, text, pos))

    def read_run(self, charset):
        start = self.idx
        while self.char is not None and self.char in charset:
            self.advance()
        return self.source[start:self.idx]

    def read_number(self):
        pos = self.pos
        self.emit(TokenType.NUMBER, self.read_run(Lexer.DIGITS), pos)

    def read_word(self):
        """Keywords are only recognized once the whole run is collected (longest match)."""
        pos = self.pos
        word = self.read_run(Lexer.LETTERS)
        self.emit(Lexer.KEYWORDS.get(word, TokenType.IDENTIFIER), word, pos)

    def read_string(self):
        pos = self.pos
        self.advance()  # opening quote

        start = self.idx
        while self.char != "\"":
            if self.char is None:
                raise LexError("unterminated string literal", "\"", pos=pos, length=self.idx - start + 1)
            self.advance()

        self.emit(TokenType.STRING, self.source[start:self.idx], pos)
        self.advance()  # closing quote

    def read_equals(self):
        pos = self.pos
        self.advance()
        if self.char == "=":
            self.advance()
            self.emit(TokenType.EQUAL_EQUAL, "==", pos)
        else:
            self.emit(TokenType.EQUALS, "=", pos)


def tokenize(source, path="<string>", line=1):
    """Returns the list of Tokens in source. path and line only affect the Positions attached to the tokens."""
    return Lexer(source, path, line).tokenize()


def spelling(token_type):
    """Source spelling of a keyword or symbol token type, e.g. 'import' for TokenType.IMPORT."""
    for table in (Lexer.KEYWORDS, Lexer.SINGLES, {"=": TokenType.EQUALS, "==": TokenType.EQUAL_EQUAL}):
        for text, candidate in table.items():
            if candidate is token_type:
                return text
    raise ValueError(f"{token_type} has no fixed spelling")

"""Recursive descent parser for tinyscript. Turns the Lexer's token list into a tuple of statement nodes (see
grammar/nodes.py for the grammar). Parsing stops at the first malformed construct: there is no error recovery.
"""

from tinyscript.grammar.nodes import (Assignment, BinaryExpression, FunctionCall, FunctionDefinition, Identifier,
                                      IfStatement, ImportStatement, NumberLiteral, PrintStatement, StringLiteral)
from tinyscript.lang.error import ParseError
from tinyscript.lang.lexical import Position, TokenType


SPELLINGS = {
    TokenType.SEMICOLON: "';'",
    TokenType.LPAREN: "'('",
    TokenType.RPAREN: "')'",
    TokenType.LBRACE: "'{'",
    TokenType.RBRACE: "'}'",
    TokenType.EQUALS: "'='",
    TokenType.IDENTIFIER: "identifier",
}


class Parser:
    """One token of lookahead, plus a peek at the token after an identifier to tell calls from assignments."""
    EXPRESSION_OPERATORS = frozenset([TokenType.PLUS, TokenType.MINUS, TokenType.GREATER_THAN, TokenType.LESS_THAN,
                                      TokenType.EQUAL_EQUAL])
    TERM_OPERATORS = frozenset([TokenType.MULTIPLY, TokenType.DIVIDE])

    def __init__(self, tokens):
        self.tokens = list(tokens)
        self.idx = 0

    def parse(self):
        statements = []
        while self.peek() is not None:
            statements.append(self.statement())
        return tuple(statements)

    def peek(self, offset=0):
        idx = self.idx + offset
        return self.tokens[idx] if idx < len(self.tokens) else None

    def advance(self):
        token = self.peek()
        self.idx += 1
        return token

    def end_pos(self):
        """Position just past the last token, used when input ends early."""
        last = self.tokens[-1]
        return Position(last.pos.path, last.pos.line, last.pos.col + len(last.lexeme)) if last.pos else None

    @staticmethod
    def describe(token):
        if token is None:
            return "end of input"
        if token.type in (TokenType.NUMBER, TokenType.STRING, TokenType.IDENTIFIER):
            return f"{token.type.value} '{token.lexeme}'"
        return f"'{token.lexeme}'"

    def unexpected(self, msg, token, *exprs):
        """Returns a ParseError for msg, pointing at token (or at the end of input if token is None)."""
        if token is None:
            return ParseError(msg, (*exprs, Parser.describe(None)), pos=self.end_pos())
        return ParseError(msg, (*exprs, Parser.describe(token)), pos=token.pos, length=len(token.lexeme))

    def expect(self, token_type, after):
        """Consumes and returns the current token if it has token_type, otherwise raises a ParseError."""
        token = self.peek()
        if token is None or token.type is not token_type:
            raise self.unexpected("expected {} after {}, found {}", token, SPELLINGS[token_type], after)
        return self.advance()

    # statements

    def statement(self):
        token = self.peek()

        if token.type is TokenType.IMPORT:
            return self.import_statement()
        elif token.type is TokenType.IDENTIFIER:
            following = self.peek(1)
            if following is not None and following.type is TokenType.LPAREN:
                return self.function_call()
            return self.assignment()
        elif token.type is TokenType.IF:
            return self.if_statement()
        elif token.type is TokenType.PRINT:
            return self.print_statement()
        elif token.type is TokenType.FUNCTION:
            return self.function_definition()

        raise self.unexpected("unexpected {} at start of statement", token)

    def block(self, after):
        """Parses '{' <statement>* '}' and returns the statements."""
        self.expect(TokenType.LBRACE, after)

        body = []
        while True:
            token = self.peek()
            if token is None:
                raise self.unexpected("expected {} to close {}, found {}", token, "'}'", after)
            if token.type is TokenType.RBRACE:
                break
            body.append(self.statement())

        self.advance()
        return tuple(body)

    def import_statement(self):
        keyword = self.advance()
        file_name = self.peek()
        if file_name is None or file_name.type not in (TokenType.STRING, TokenType.IDENTIFIER):
            raise self.unexpected("expected file name after {}, found {}", file_name, "'import'")
        self.advance()

        self.expect(TokenType.SEMICOLON, "import statement")
        return ImportStatement(file_name.text, pos=keyword.pos)

    def assignment(self):
        identifier = self.advance()
        self.expect(TokenType.EQUALS, f"'{identifier.text}'")
        expression = self.expression()
        self.expect(TokenType.SEMICOLON, "assignment")
        return Assignment(identifier.text, expression, pos=identifier.pos)

    def if_statement(self):
        keyword = self.advance()
        condition = self.expression()
        body = self.block("if condition")
        return IfStatement(condition, body, pos=keyword.pos)

    def print_statement(self):
        keyword = self.advance()
        expression = self.expression()
        self.expect(TokenType.SEMICOLON, "print statement")
        return PrintStatement(expression, pos=keyword.pos)

    def function_definition(self):
        keyword = self.advance()
        name = self.expect(TokenType.IDENTIFIER, "'function'")
        self.expect(TokenType.LPAREN, "function name")

        parameters = []
        for parameter in self.comma_separated(lambda: self.expect(TokenType.IDENTIFIER, "'(' or ','"), "parameters"):
            if parameter.text in parameters:
                raise ParseError("duplicate parameter '{}' in function '{}'", (parameter.text, name.text),
                                 pos=parameter.pos, length=len(parameter.text))
            parameters.append(parameter.text)

        body = self.block("function parameters")
        return FunctionDefinition(name.text, tuple(parameters), body, pos=keyword.pos)

    def function_call(self):
        name = self.advance()
        self.advance()  # '('
        arguments = self.comma_separated(self.expression, "arguments")
        self.expect(TokenType.SEMICOLON, "function call")
        return FunctionCall(name.text, tuple(arguments), pos=name.pos)

    def comma_separated(self, item, what):
        """Parses items separated by commas up to and including the closing ')'. A trailing comma is accepted."""
        items = []
        while True:
            token = self.peek()
            if token is not None and token.type is TokenType.RPAREN:
                break
            items.append(item())

            token = self.peek()
            if token is None or token.type is not TokenType.COMMA:
                break
            self.advance()

        self.expect(TokenType.RPAREN, what)
        return items

    # expressions

    def expression(self):
        return self.binary(self.term, Parser.EXPRESSION_OPERATORS)

    def term(self):
        return self.binary(self.factor, Parser.TERM_OPERATORS)

    def binary(self, operand, operators):
        """Left-associative chain of operand separated by any of operators."""
        left = operand()

        while self.peek() is not None and self.peek().type in operators:
            operator = self.advance()
            right = operand()
            left = BinaryExpression(operator.type, left, right, pos=operator.pos)

        return left

    def factor(self):
        token = self.peek()

        if token is None:
            raise self.unexpected("expected expression, found {}", token)
        elif token.type is TokenType.NUMBER:
            self.advance()
            return NumberLiteral(token.text, pos=token.pos)
        elif token.type is TokenType.STRING:
            self.advance()
            return StringLiteral(token.text, pos=token.pos)
        elif token.type is TokenType.IDENTIFIER:
            self.advance()
            return Identifier(token.text, pos=token.pos)
        elif token.type is TokenType.LPAREN:
            self.advance()
            expression = self.expression()
            self.expect(TokenType.RPAREN, "parenthesized expression")
            return expression

        raise self.unexpected("unexpected {} in expression", token)


def parse(tokens):
    """Returns the statements in tokens as a tuple of AST nodes."""
    return Parser(tokens).parse()

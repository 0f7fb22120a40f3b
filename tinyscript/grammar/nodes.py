"""Abstract syntax tree of tinyscript. Nodes are created once by the parser and never mutated afterwards; every child
belongs to exactly one parent.

Formally, tinyscript can be defined as

```
<program>     ::= <statement>*
<statement>   ::= "import" (<string> | <identifier>) ";"          ; ImportStatement
                | <identifier> "=" <expression> ";"                 ; Assignment
                | <identifier> "(" <args> ")" ";"                   ; FunctionCall
                | "if" <expression> "{" <statement>* "}"            ; IfStatement (no else)
                | "print" <expression> ";"                          ; PrintStatement
                | "function" <identifier> "(" <params> ")" "{" <statement>* "}"
                                                                    ; FunctionDefinition
<params>      ::= [<identifier> ("," <identifier>)* [","]]
<args>        ::= [<expression> ("," <expression>)* [","]]

<expression>  ::= <term> (("+" | "-" | ">" | "<" | "==") <term>)*  ; one precedence tier, left-associative
<term>        ::= <factor> (("*" | "/") <factor>)*
<factor>      ::= <number> | <string> | <identifier> | "(" <expression> ")"
```

Note that comparisons share a tier with "+" and "-": `1 + 2 > 2` is `(1 + 2) > 2`, and `1 > 0 + 1` is `(1 > 0) + 1`.

Every node carries the Position of its first token (of its operator, for BinaryExpression). Positions are excluded
from equality, so trees parsed from different places compare equal when their structure is equal.
"""

from dataclasses import dataclass, field
from typing import Tuple

from tinyscript.lang.lexical import Position, TokenType


class Node:
    """Superclass of every AST node."""


class Expression(Node):
    """Evaluates to a Value."""


class Statement(Node):
    """Executed for its effect."""


@dataclass(frozen=True)
class NumberLiteral(Expression):
    text: str
    pos: Position = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class StringLiteral(Expression):
    text: str
    pos: Position = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Identifier(Expression):
    name: str
    pos: Position = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class BinaryExpression(Expression):
    operator: TokenType
    left: Expression
    right: Expression
    pos: Position = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Assignment(Statement):
    identifier: str
    expression: Expression
    pos: Position = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class IfStatement(Statement):
    condition: Expression
    body: Tuple[Statement, ...]
    pos: Position = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class PrintStatement(Statement):
    expression: Expression
    pos: Position = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class FunctionDefinition(Statement):
    name: str
    parameters: Tuple[str, ...]
    body: Tuple[Statement, ...]
    pos: Position = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class FunctionCall(Statement):
    name: str
    arguments: Tuple[Expression, ...]
    pos: Position = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ImportStatement(Statement):
    file_name: str
    pos: Position = field(default=None, compare=False, repr=False)

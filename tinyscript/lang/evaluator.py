"""Tree-walking evaluation of tinyscript ASTs.

The Interpreter keeps no notion of a "current" environment: every execute/evaluate call is handed the Environment it
works in. The top-level Environment lives as long as the Interpreter. A function call gets a fresh Environment holding
only its parameters, which is dropped when the body finishes, so nothing a function assigns is visible to its caller.
"""

from tinyscript.grammar.nodes import (Assignment, BinaryExpression, FunctionCall, FunctionDefinition, Identifier,
                                      IfStatement, ImportStatement, NumberLiteral, PrintStatement, StringLiteral)
from tinyscript.lang import values
from tinyscript.lang.error import (ArityMismatch, GenericException, ImportIOError, UndefinedFunction,
                                   UndefinedVariable)
from tinyscript.lang.lexical import TokenType, spelling


class Environment:
    """Variable bindings: identifier name to Value."""

    def __init__(self, bindings=None):
        self.bindings = dict(bindings) if bindings else {}

    def lookup(self, identifier):
        """Returns the Value bound to Identifier node identifier."""
        try:
            return self.bindings[identifier.name]
        except KeyError:
            raise UndefinedVariable("undefined variable '{}'", identifier.name, pos=identifier.pos,
                                    length=len(identifier.name))

    def assign(self, name, value):
        self.bindings[name] = value

    def __contains__(self, name):
        return name in self.bindings

    def __repr__(self):
        return f"Environment({self.bindings!r})"


class Interpreter:
    """Executes statements against a top-level Environment and a function table (name: FunctionDefinition).

    write receives each printed line. load_module(file_name, pos) must return the function table of the module named
    by an import statement; it is supplied by Session, which knows how to find and run files. warn has the signature of
    ErrorHandler.warn.
    """

    def __init__(self, write=print, load_module=None, warn=None):
        self.globals = Environment()
        self.functions = {}

        self.write = write
        self.load_module = load_module
        self.warn = warn

    def interpret(self, statements):
        """Runs statements in order in the top-level Environment."""
        for statement in statements:
            self.execute(statement, self.globals)

    def execute_all(self, statements, env):
        for statement in statements:
            self.execute(statement, env)

    def execute(self, statement, env):
        if isinstance(statement, Assignment):
            env.assign(statement.identifier, self.evaluate(statement.expression, env))

        elif isinstance(statement, IfStatement):
            if self.evaluate(statement.condition, env).truthy:
                self.execute_all(statement.body, env)  # bodies share the enclosing scope

        elif isinstance(statement, PrintStatement):
            self.write(self.evaluate(statement.expression, env).render())

        elif isinstance(statement, FunctionDefinition):
            self.functions[statement.name] = statement

        elif isinstance(statement, FunctionCall):
            self.call(statement, env)

        elif isinstance(statement, ImportStatement):
            self.import_module(statement)

        else:
            raise GenericException("cannot execute '{}'", type(statement).__name__, internal=True)

    def call(self, call, env):
        definition = self.functions.get(call.name)
        if definition is None:
            raise UndefinedFunction("undefined function '{}'", call.name, pos=call.pos, length=len(call.name))

        if len(call.arguments) != len(definition.parameters):
            msg = "function '{}' expects {} argument(s), got {}"
            exprs = (call.name, len(definition.parameters), len(call.arguments))
            raise ArityMismatch(msg, exprs, pos=call.pos, length=len(call.name))

        arguments = [self.evaluate(argument, env) for argument in call.arguments]
        self.execute_all(definition.body, Environment(zip(definition.parameters, arguments)))

    def import_module(self, statement):
        """Merges the imported module's functions into self.functions. Names already defined here stay local."""
        if self.load_module is None:
            raise ImportIOError("cannot import '{}': no module loader", statement.file_name, pos=statement.pos,
                                length=len(spelling(TokenType.IMPORT)))

        for name, definition in self.load_module(statement.file_name, statement.pos).items():
            if name in self.functions:
                if self.warn is not None:
                    self.warn("imported function '{}' is shadowed by the local definition", name,
                              pos=statement.pos, length=len(spelling(TokenType.IMPORT)))
                continue
            self.functions[name] = definition

    def evaluate(self, expression, env):
        if isinstance(expression, NumberLiteral):
            return values.Number(values.parse_int(expression.text))

        elif isinstance(expression, StringLiteral):
            return values.String(expression.text)

        elif isinstance(expression, Identifier):
            return env.lookup(expression)

        elif isinstance(expression, BinaryExpression):
            left = self.evaluate(expression.left, env)
            right = self.evaluate(expression.right, env)
            return values.apply(expression.operator, left, right, expression.pos)

        raise GenericException("cannot evaluate '{}'", type(expression).__name__, internal=True)


def interpret(statements, write=print, load_module=None):
    """Runs statements with a fresh Interpreter and returns it (its globals and functions hold the final state)."""
    interpreter = Interpreter(write, load_module)
    interpreter.interpret(statements)
    return interpreter

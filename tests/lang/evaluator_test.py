import unittest

from tinyscript.grammar.nodes import Identifier, ImportStatement
from tinyscript.lang.error import (ArityMismatch, ImportIOError, TypeMismatch, UndefinedFunction,
                                   UndefinedVariable)
from tinyscript.lang.evaluator import Environment, Interpreter, interpret
from tinyscript.lang.lexical import Position, tokenize
from tinyscript.lang.parser import parse
from tinyscript.lang.values import Number, String


def run(source, **kwargs):
    """Returns printed lines of source."""
    output = []
    interpret(parse(tokenize(source)), write=output.append, **kwargs)
    return output


class EnvironmentTestCase(unittest.TestCase):

    def test_lookup(self):
        env = Environment({"x": Number(1)})
        env.assign("y", String("a"))

        self.assertEqual(Number(1), env.lookup(Identifier("x")))
        self.assertEqual(String("a"), env.lookup(Identifier("y")))
        self.assertIn("y", env)

        with self.assertRaises(UndefinedVariable) as cm:
            env.lookup(Identifier("z", pos=Position("f", 3, 4)))
        self.assertEqual("undefined variable 'z'", str(cm.exception))
        self.assertEqual(Position("f", 3, 4), cm.exception.pos)

    def test_assign_overwrites(self):
        env = Environment()
        env.assign("x", Number(1))
        env.assign("x", String("1"))
        self.assertEqual(String("1"), env.lookup(Identifier("x")))


class InterpreterTestCase(unittest.TestCase):

    def test_programs(self):
        cases = {
            "x = 2 + 3 * 4;\nprint x;": ["14"],
            "x = 5;\nif x > 3 { print \"big\"; }\nif x < 3 { print \"small\"; }": ["big"],
            "function add(a, b) { c = a + b; print c; }\nadd(2,3);\nadd(10,20);": ["5", "30"],
            "x = \"1\"; print x == 1;": ["true"],
            "print 0 == \"0\"; print \"a\" == 0; print 1 == 2;": ["true", "false", "false"],
            "print 10 / 0;": ["inf"],
            "print 0 - 10 / 0;": ["-inf"],
            "print 0 / 0;": ["nan"],
            "print 7 / 2; print 4 / 2;": ["3.5", "2"],
            "print 1 + 2 > 2;": ["true"],
            "print \"n=\" + 1 + 2; print 1 + 2 + \"x\";": ["n=12", "3x"],
            "print \"b\" > \"a\"; print \"10\" < \"9\";": ["true", "true"],
            "x = 1; x = x + 1; print x;": ["2"],
            "print \"  spaced  \";": ["  spaced  "],
            "": [],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

    def test_large_integers(self):
        huge = "9" * 400
        cases = {
            f"print {huge} / 0;": ["inf"],
            f"print 0 - {huge} / 0;": ["-inf"],
            f"print {huge} / 3 > 0;": ["true"],
            f"print {huge} / 3;": ["inf"],
            f"print {huge} + 1 / 2;": ["inf"],
            f"print {huge} - {huge};": ["0"],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, run(case), case)

        digits = "1" + "0" * 5000
        self.assertEqual([digits], run(f"print {digits};"))
        self.assertEqual(["true"], run(f"print {digits} > ({digits} - 1);"))

    def test_truthiness(self):
        source = """
            if 0 { print "zero"; }
            if "" { print "empty"; }
            if 1 > 2 { print "false"; }
            if "0" { print "string zero"; }
            if 2 { print "two"; }
            if 1 == 1 { print "true"; }
        """
        self.assertEqual(["string zero", "two", "true"], run(source))

    def test_if_shares_scope(self):
        self.assertEqual(["2"], run("if 1 { y = 2; } print y;"))

    def test_callee_bindings_do_not_leak(self):
        output = []
        interpreter = Interpreter(write=output.append)
        source = "function add(a, b) { c = a + b; print c; }\nadd(2,3);\nadd(10,20);\nprint c;"

        with self.assertRaises(UndefinedVariable) as cm:
            interpreter.interpret(parse(tokenize(source)))
        self.assertEqual(["5", "30"], output)
        self.assertEqual("undefined variable 'c'", str(cm.exception))
        self.assertNotIn("c", interpreter.globals)

    def test_callee_cannot_see_globals(self):
        self.assertRaises(UndefinedVariable, run, "x = 1; function f() { print x; } f();")

    def test_caller_environment_unchanged(self):
        self.assertEqual(["5", "1"], run("a = 1; function f(a) { a = 5; print a; } f(2); print a;"))

    def test_arguments_use_caller_environment(self):
        self.assertEqual(["25"], run("x = 4; function square(n) { print n * n; } square(x + 1);"))

    def test_recursion(self):
        source = "function countdown(n) { print n; if n > 0 { countdown(n - 1); } } countdown(3);"
        self.assertEqual(["3", "2", "1", "0"], run(source))

    def test_redefinition(self):
        self.assertEqual(["2"], run("function f() { print 1; } function f() { print 2; } f();"))

    def test_raises(self):
        cases = {
            "print y;": UndefinedVariable,
            "f();": UndefinedFunction,
            "function f(a) { print a; } f();": ArityMismatch,
            "function f() { print 1; } f(1);": ArityMismatch,
            "print \"a\" - 1;": TypeMismatch,
            "x = 2 * \"3\";": TypeMismatch,
            "import lib;": ImportIOError,
        }
        for case, expected in cases.items():
            self.assertRaises(expected, run, case)

    def test_error_positions(self):
        with self.assertRaises(TypeMismatch) as cm:
            run("x = 1;\nprint x - \"a\";")
        self.assertEqual(Position("<string>", 2, 9), cm.exception.pos)

        with self.assertRaises(UndefinedFunction) as cm:
            run("  nope(1);")
        self.assertEqual(Position("<string>", 1, 3), cm.exception.pos)

    def test_final_state(self):
        interpreter = interpret(parse(tokenize("x = 2 + 3 * 4; function f() {}")), write=lambda line: None)
        self.assertEqual(Number(14), interpreter.globals.lookup(Identifier("x")))
        self.assertEqual(["f"], list(interpreter.functions))


class ImportTestCase(unittest.TestCase):

    def setUp(self):
        module = interpret(parse(tokenize("function f() { print \"lib f\"; } function g() { print \"lib g\"; }")),
                           write=lambda line: None)
        self.loaded = []
        self.warnings = []

        def load_module(file_name, pos):
            self.loaded.append((file_name, pos))
            return module.functions

        def warn(*args, **kwargs):
            self.warnings.append(args)

        self.output = []
        self.interpreter = Interpreter(self.output.append, load_module, warn)

    def run_source(self, source):
        self.interpreter.interpret(parse(tokenize(source)))
        return self.output

    def test_import(self):
        self.assertEqual(["lib f", "lib g"], self.run_source("import \"lib.tiny\"; f(); g();"))
        self.assertEqual([("lib.tiny", Position("<string>", 1, 1))], self.loaded)
        self.assertEqual([], self.warnings)

    def test_local_definition_wins(self):
        source = "function f() { print \"local\"; } import lib; f(); g();"
        self.assertEqual(["local", "lib g"], self.run_source(source))
        self.assertEqual(1, len(self.warnings))
        self.assertIn("f", self.warnings[0])

    def test_later_definition_wins(self):
        self.assertEqual(["local"], self.run_source("import lib; function f() { print \"local\"; } f();"))

    def test_import_statement_node(self):
        self.interpreter.execute(ImportStatement("other"), self.interpreter.globals)
        self.assertEqual([("other", None)], self.loaded)


if __name__ == '__main__':
    unittest.main()

"""Handles interactive/command-line mode for tinyscript interpreter. Uses cmd as backend."""

import cmd

from tinyscript.lang.error import LexError
from tinyscript.lang.lexical import TokenType, tokenize
from tinyscript.lang.session import Session


class Shell(cmd.Cmd):
    """tinyscript interpreter shell."""
    intro = "tinyscript interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess

        self._tmp_lines = []
        self.line_num = 0  # lines handed to the session so far

    @staticmethod
    def is_open(source):
        """Whether source has a '{' that is not closed yet. Input that does not lex is complete, so that its error
        gets reported.
        """
        try:
            tokens = tokenize(source, Session.SH_FILE)
        except LexError:
            return False

        types = [token.type for token in tokens]
        return types.count(TokenType.LBRACE) > types.count(TokenType.RBRACE)

    def default(self, line):
        """Executes arbitrary tinyscript statements, waiting for more input while a block is open."""
        self._tmp_lines.append(line)
        source = "\n".join(self._tmp_lines)

        if Shell.is_open(source):
            self.prompt = self.secondary_prompt
            return

        self._tmp_lines = []
        self.prompt = self._tmp_prompt

        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            start = self.line_num + 1
            self.line_num += source.count("\n") + 1

            self.sess.add(source, start)
            self.sess.run()

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        if arg:
            return self.default(f"help {arg}")

        print("Welcome to the tinyscript interpreter!\n\n"
              "Statements run as soon as they are complete; variables and functions stay \n"
              "defined for the rest of the session.\n\n"
              "Try it out by typing 'x = 2 + 3 * 4;' and then 'print x;'. Functions are \n"
              "defined with 'function add(a, b) { print a + b; }' and called with \n"
              "'add(1, 2);'. Other files can be loaded with 'import \"file.tiny\";'.")

    def emptyline(self):
        """Do not repeat previous command on empty line, but keep empty lines inside an open block."""
        if self._tmp_lines:
            self.default("")
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        if arg:
            return self.default(f"EOF {arg}")
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        if arg:
            return self.default(f"exit {arg}")  # 'exit' used as a variable name
        return True

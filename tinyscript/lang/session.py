"""Session control for tinyscript. A Session owns one source unit (a file, or the shell's input) and runs it through
the lexer, the parser and its own Interpreter. Import statements are resolved here: each imported file runs in a
Session of its own, and only its function table is handed back to the importer.
"""

import os

from tinyscript.lang.error import GenericException, ImportCycle, ImportIOError
from tinyscript.lang.evaluator import Interpreter
from tinyscript.lang.lexical import TokenType, spelling, tokenize
from tinyscript.lang.parser import parse


class Session:
    """Governs a tinyscript session, with control over scope of functions and variables."""
    SH_FILE = "<in>"  # command-line interpreter filename

    def __init__(self, error_handler, path, importing=(), source=None, write=print):
        """importing is the chain of absolute paths currently being imported, ending with the importer. If source is
        None, it is read from path.
        """
        self.error_handler = error_handler
        self.path = path    # used for error messages
        self.write = write

        self.interpreter = Interpreter(write, self.load_module, error_handler.warn)
        self.statements = []  # parsed statements waiting for run
        self.source = ""      # everything added so far, for quoting lines in error messages

        if path == Session.SH_FILE:
            self.importing = importing
            self.error_handler.fatal = False
            self.error_handler.register_file(path, self.source)
        else:
            self.importing = importing + (os.path.abspath(path),)
            self.add(Session.read(path) if source is None else source)

    @staticmethod
    def read(path, pos=None):
        """Returns the text of path, decoded as UTF-8 with any byte order mark dropped. pos is the position of the
        import statement naming path, if there is one.
        """
        try:
            with open(path, "r", encoding="utf-8-sig") as file:
                return file.read()
        except (OSError, UnicodeDecodeError):
            if pos is None:
                raise GenericException("'{}' could not be read", path, diagnosis=False)
            raise ImportIOError("'{}' could not be read", path, pos=pos, length=len(spelling(TokenType.IMPORT)))

    def add(self, source, line_num=1):
        """Lexes and parses source, queueing its statements for run. line_num is the line source starts on."""
        self.source += source if not self.source else "\n" + source
        self.error_handler.register_file(self.path, self.source)

        self.statements.extend(parse(tokenize(source, self.path, line_num)))

    def run(self):
        """Runs the queued statements. Will raise any errors that are encountered."""
        statements, self.statements = self.statements, []
        self.interpreter.interpret(statements)

    @property
    def functions(self):
        return self.interpreter.functions

    @property
    def environment(self):
        return self.interpreter.globals

    def load_module(self, file_name, pos):
        """Runs file_name in a separate Session and returns its function table. file_name is used as given, so relative
        names resolve against the working directory.
        """
        path = os.path.abspath(file_name)
        if path in self.importing:
            chain = " -> ".join(self.importing + (path,))
            raise ImportCycle("import cycle detected: {}", chain, pos=pos, length=len(spelling(TokenType.IMPORT)))

        # the import statement may come from a function defined in another file, so key its line by pos.path
        if pos is not None:
            self.error_handler.register_line(pos.path, pos.line)  # in case error is raised

        module = Session(self.error_handler, file_name, self.importing, Session.read(file_name, pos), self.write)
        module.run()

        self.error_handler.unregister_file(file_name)
        if pos is not None:
            self.error_handler.remove_line(pos.path)  # error was not raised
        return module.functions

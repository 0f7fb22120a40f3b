"""Error handling for tinyscript. Only GenericExceptions should be encountered during running: if another type of
error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

Taxonomy:

```
GenericException
 ├── LexError           ; unexpected character, unterminated string literal
 ├── ParseError         ; unexpected or missing token
 └── EvalError          ; errors raised while the program runs
      ├── UndefinedVariable
      ├── UndefinedFunction
      ├── TypeMismatch
      ├── ArityMismatch
      ├── ImportCycle
      └── ImportIOError
```

Nothing recovers from an error: the first one aborts the run (unless the handler is non-fatal, as in the shell).
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw a tinyscript error/warning. The offending
    snippets in exprs are substituted into msg and bolded; pos is the Position of the offending token and length is
    how many characters of the source line should be marked.
    """

    def __init__(self, msg, exprs=None, pos=None, length=1, diagnosis=True, internal=False):
        if exprs is None:
            exprs = ""
        if isinstance(exprs, str):
            exprs = [exprs]
        exprs = [str(expr) for expr in exprs]

        super().__init__(msg.format(*exprs))
        self.msg = msg.format(*(colored(expr, attrs=["bold"]) for expr in exprs))  # color expr snippets
        self.expr = exprs[0]  # exprs[0] should be the offending expr that caused the error

        self.pos = pos
        self.length = max(length, 1)
        self.diagnosis = diagnosis
        self.internal = internal


class LexError(GenericException):
    """Raised by the lexer on a character it cannot start a token with, or on an unterminated string."""


class ParseError(GenericException):
    """Raised by the parser on the first token that does not fit the grammar."""


class EvalError(GenericException):
    """Runtime error of a tinyscript program."""


class UndefinedVariable(EvalError):
    pass


class UndefinedFunction(EvalError):
    pass


class TypeMismatch(EvalError):
    pass


class ArityMismatch(EvalError):
    pass


class ImportCycle(EvalError):
    pass


class ImportIOError(EvalError):
    pass


class ErrorHandler:
    """Context manager that will silently suppress Python errors and report tinyscript errors/warnings on stderr."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.sources = {}    # path: source lines, used to quote the offending line
        self.traceback = {}  # path: (line, line_num) of the import statement currently running in path

    def register_file(self, path, source):
        """Registers path (and its source text) in traceback."""
        self.sources[path] = source.splitlines()
        self.traceback[path] = (None, None)

    def unregister_file(self, path):
        """Removes path from traceback once it has finished running. Its source is kept, since functions defined in
        it may still be called.
        """
        self.traceback.pop(path, None)

    def register_line(self, path, line_num):
        """Registers line in traceback given path. Should be called before running an import statement."""
        self.traceback[path] = (self.source_line(path, line_num), line_num)

    def remove_line(self, path):
        """Removes line from traceback given path. Should be called after a successful import."""
        self.traceback[path] = (None, None)

    def source_line(self, path, line_num):
        lines = self.sources.get(path, [])
        if 0 < line_num <= len(lines):
            return lines[line_num - 1]
        return ""

    def diagnose(self, error, warning=False):
        """Returns offending line of error with the offending token highlighted and underlined."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        line = self.source_line(error.pos.path, error.pos.line).replace("\t", " ")
        start = error.pos.col - 1
        end = start + error.length

        diagnosis = "  " + line[:start]
        diagnosis += colored(line[start:end], color, attrs=["bold"])
        diagnosis += line[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (min(end, max(len(line), start + 1)) - start - 1), color, attrs=["bold"])

        return diagnosis

    @staticmethod
    def location(error):
        if error.pos is None:
            return ""
        return colored(f"{error.pos}: ", attrs=["bold"])

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        error_msg = ErrorHandler.location(error)
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg
        print(error_msg, file=sys.stderr)

        if error.pos is not None and error.diagnosis:
            print(self.diagnose(error, warning=True), file=sys.stderr)

    def throw(self, error):
        """Throws error using error and self.traceback. error must be a GenericException, and self.traceback must be a
        dict of file: (line, line_num) representing the import statements that led to the error.
        """
        error_msg = ""
        for file, (line, line_num) in self.traceback.items():  # assumes dict is insertion-ordered
            if line is not None:
                error_msg += f"  File '{file}', line {line_num}:\n"
                error_msg += f"    {line.strip()}\n"

        if error_msg:
            error_msg = "Traceback (most recent import last):\n" + error_msg

        error_msg += ErrorHandler.location(error)
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg, file=sys.stderr)

        if not error.internal and error.pos is not None and error.diagnosis:
            print(self.diagnose(error), file=sys.stderr)

        if self.fatal:
            sys.exit(1)
        self.traceback = {}  # if error occurred, reset traceback (no need if error is fatal)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded (does a function call itself forever?)"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}'", f"{exc_type.__name__}: {exc_val}", internal=True))
            do_exit = True

        return not do_exit

"""Runs tinyscript files, or the interactive shell when no file is given. Errors are reported by the ErrorHandler
context manager, which exits with status 1 on the first one.
"""

import argparse

from tinyscript.lang.error import ErrorHandler
from tinyscript.lang.session import Session
from tinyscript.lang.shell import Shell


def main(argv=None):
    """Runs tinyscript interpreter. Called from the tinyscript console script and from python -m tinyscript."""
    with ErrorHandler() as error_handler:
        parser = argparse.ArgumentParser(prog="tinyscript")
        parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
        args = parser.parse_args(argv)

        if args.file is not None:
            Session(error_handler, args.file).run()
        else:
            Shell(Session(error_handler, Session.SH_FILE)).cmdloop()

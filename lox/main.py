"""Command-line entry point: runs a .lox file, or starts the interactive shell when no file is given.

Exit codes follow sysexits.h: 64 for bad usage, 65 for static (syntax/scoping) errors, 66 for an unreadable file and
70 for an uncaught runtime error.
"""

import argparse
import sys

from lox.lang.error import ErrorHandler, LoxError
from lox.lang.session import Session
from lox.lang.shell import Shell


EX_USAGE = 64
EX_DATAERR = 65
EX_NOINPUT = 66
EX_SOFTWARE = 70


class ArgumentParser(argparse.ArgumentParser):
    """argparse exits with 2 on bad usage; lox uses EX_USAGE."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(EX_USAGE, f"{self.prog}: error: {message}\n")


def build_parser():
    parser = ArgumentParser(prog="lox", description="Lox tree-walking interpreter.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("--no-color", action="store_true", help="don't color error messages")
    parser.add_argument("--no-diagnosis", action="store_true", help="don't echo the offending source line on errors")

    dump = parser.add_mutually_exclusive_group()
    dump.add_argument("--tokens", action="store_const", const="tokens", dest="dump",
                      help="print scanned tokens instead of running")
    dump.add_argument("--ast", action="store_const", const="ast", dest="dump",
                      help="print the parsed syntax tree instead of running")
    return parser


def main(argv=None):
    """Runs lox interpreter. Returns the process exit code."""
    args = build_parser().parse_args(argv)

    error_handler = ErrorHandler(color=not args.no_color, diagnosis=not args.no_diagnosis)

    if args.file is None:
        Shell(Session(error_handler, dump=args.dump)).cmdloop()
        return 0

    sess = Session(error_handler, dump=args.dump)
    try:
        source = sess.read(args.file)
    except LoxError as error:
        error_handler.fatal(error)
        return EX_NOINPUT

    with error_handler:
        sess.run(source)

    if error_handler.had_error:
        return EX_DATAERR
    if error_handler.had_runtime_error:
        return EX_SOFTWARE
    return 0


if __name__ == "__main__":
    sys.exit(main())

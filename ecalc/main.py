"""Uses the ecalc core to interpret a program file, a program given on the command line, or to run in interactive
mode. Also uses the error handling context manager. Called from the ecalc console script and from `python -m ecalc`.
"""

import argparse

from ecalc.lang.error import ErrorHandler
from ecalc.lang.session import Session
from ecalc.lang.shell import Shell


def build_parser():
    parser = argparse.ArgumentParser(prog="ecalc", description="Evaluate an ecalc program.")
    parser.add_argument("file", help="file to interpret and run (if empty, goes to command-line mode)", nargs="?")
    parser.add_argument("-c", "--command", help="program passed in as a string (instead of a file)")
    parser.add_argument("--tree", action="store_true", help="print the expression tree before evaluating")
    return parser


def main(argv=None):
    """Runs the ecalc interpreter."""
    args = build_parser().parse_args(argv)

    with ErrorHandler() as error_handler:
        if args.command is not None:
            sess = Session(error_handler, Session.CMD_FILE, args.tree)
            sess.add(args.command)
            sess.run()

        elif args.file is not None:
            sess = Session.from_file(error_handler, args.file, args.tree)
            sess.run()

        else:
            error_handler.fatal = False
            Shell(Session(error_handler, Session.SH_FILE, args.tree)).cmdloop()


if __name__ == "__main__":
    main()

"""Session control for the ecalc language: reads a program (from a file, the command line, or the interactive shell),
parses it, evaluates it and prints the result. Errors are raised as GenericExceptions and left to the ErrorHandler.
"""

from ecalc.lang.error import EvalError, GenericException
from ecalc.lang.numerical import is_anomaly, number
from ecalc.pure.evaluator import evaluate
from ecalc.pure.lexical import parse


class Session:
    """Governs an ecalc session. Every program added to a session is parsed and evaluated on its own, with fresh
    scopes: nothing defined by one program is visible to the next.
    """
    SH_FILE = "<in>"        # command-line interpreter filename
    CMD_FILE = "<command>"  # filename for programs passed with -c

    def __init__(self, error_handler, path, show_tree=False):
        self.error_handler = error_handler
        self.error_handler.register_file(path)

        self.path = path            # used for error messages
        self.show_tree = show_tree  # whether or not to print each tree before evaluating it

        self.programs = []  # sources waiting to be run
        self.results = []   # values of programs that have been run, oldest first

    @classmethod
    def from_file(cls, error_handler, path, show_tree=False):
        """Returns a Session with the contents of path added to it."""
        try:
            with open(path, "r") as file:
                source = file.read()
        except OSError:
            raise GenericException("'{}' could not be opened", path, diagnosis=False)

        sess = cls(error_handler, path, show_tree)
        sess.add(source)
        return sess

    @staticmethod
    def preprocess_line(line, prev=""):
        """Joins line onto prev (an unfinished line) and returns the result and whether it still needs another line:
        either parentheses are unbalanced or the text ends in the middle of a let/fn declaration.
        """
        line = f"{prev}\n{line}" if prev else line
        stripped = line.rstrip()
        return line, line.count("(") > line.count(")") or stripped.endswith(";")

    def add(self, source):
        """Adds a program to the session. Evaluation is delayed until run is called."""
        if not source.strip():
            raise GenericException("'{}' contains no program", self.path, diagnosis=False)
        self.programs.append(source)

    def execute(self, source):
        """Parses and evaluates source, returning its value. Evaluation errors are given source for diagnosis."""
        tree = parse(source)
        if self.show_tree:
            print(tree.display())

        try:
            value = evaluate(tree)
        except EvalError as error:
            error.source = source
            raise

        if is_anomaly(value):
            self.error_handler.warn("program evaluated to {}", number(value), source, 0, len(source.rstrip()))
        return value

    def run(self):
        """Runs every program added so far and prints their results. Programs are removed from the session as they
        run, so a failing program is not run again.
        """
        while self.programs:
            source = self.programs.pop(0)
            value = self.execute(source)
            self.results.append(value)
            print(f"Result: {number(value)}")

    def pop(self):
        """Removes and returns the oldest result."""
        return self.results.pop(0)

"""Error handling for the ecalc language. Only GenericExceptions should be encountered during running: if another type
of error is raised and makes it all the way to ErrorHandler, it is assumed to be an internal issue.

There are two families of language errors, and they are reported differently:
    1. Syntax errors (ParseError) are collected by the parser and raised together as a single ParseErrors.
    2. Evaluation errors (EvalError) are raised as soon as the first one is encountered.
"""

import sys

from termcolor import colored


class GenericException(Exception):
    """Templates an error/warning message so that it can be used to throw an ecalc error/warning. msg is a format
    string whose fields are filled with args (bolded when displayed). source is the program text the error refers to,
    and start/end are offsets into it.
    """

    def __init__(self, msg, args=(), source="", start=0, end=-1, diagnosis=True, internal=False):
        if isinstance(args, str):
            args = (args,)

        super().__init__(msg.format(*args))
        self.msg = msg.format(*(colored(str(arg), attrs=["bold"]) for arg in args))  # color arg snippets

        self.source = source
        self.start = start
        self.end = end if end != -1 else start + 1  # needed for error display

        self.diagnosis = diagnosis
        self.internal = internal

    @property
    def line(self):
        """1-based line of self.start in self.source."""
        return self.source.count("\n", 0, self.start) + 1

    @property
    def column(self):
        """1-based column of self.start in self.source."""
        return self.start - (self.source.rfind("\n", 0, self.start) + 1) + 1


class ParseError(GenericException):
    """A single syntax error. Never raised out of parse on its own: see ParseErrors."""

    def __eq__(self, other):
        return isinstance(other, ParseError) and (str(self), self.start) == (str(other), other.start)

    def __hash__(self):
        return hash((str(self), self.start))

    def __repr__(self):
        return f"ParseError({str(self)!r}, start={self.start})"


class ParseErrors(GenericException):
    """All syntax errors found in a program, in source order."""

    def __init__(self, source, errors):
        assert errors, "ParseErrors needs at least one error"
        self.errors = sorted(errors, key=lambda error: error.start)

        first = self.errors[0]
        super().__init__("found {} syntax error(s)", (len(self.errors),), source, first.start, first.end,
                         diagnosis=False)


class EvalError(GenericException):
    """Superclass for errors raised while evaluating an expression tree. name is the offending function/variable."""
    MESSAGE = "cannot evaluate {}"

    def __init__(self, name, span=None, args=None):
        start, end = span if span else (0, -1)
        super().__init__(self.MESSAGE, args if args else (name,), start=start, end=end, diagnosis=span is not None)
        self.name = name


class UndefinedVariable(EvalError):
    MESSAGE = "undefined variable '{}'"


class UndefinedFunction(EvalError):
    MESSAGE = "undefined function '{}'"


class ArityMismatch(EvalError):
    MESSAGE = "function '{}' expects {} argument(s), got {}"

    def __init__(self, name, expected, actual, span=None):
        super().__init__(name, span, (name, expected, actual))
        self.expected = expected
        self.actual = actual


class ErrorHandler:
    """Context manager that will silently suppress Python errors and raise custom ecalc errors/warnings."""
    ERROR = "red"
    WARNING = "magenta"

    def __init__(self, fatal=True):
        self.fatal = fatal
        self.path = None

    def register_file(self, path):
        """Registers the file (or pseudo-file, like '<in>') that errors will be attributed to."""
        self.path = path

    @staticmethod
    def diagnose(error, warning=False):
        """Returns the source line containing error.start with the offending part highlighted and underlined."""
        color = ErrorHandler.WARNING if warning else ErrorHandler.ERROR

        line_start = error.source.rfind("\n", 0, error.start) + 1
        line_end = error.source.find("\n", error.start)
        if line_end == -1:
            line_end = len(error.source)

        text = error.source[line_start:line_end]
        start = error.start - line_start
        end = max(min(error.end - line_start, len(text)), start + 1)

        diagnosis = "  " + text[:start]
        diagnosis += colored(text[start:end], color, attrs=["bold"])
        diagnosis += text[end:] + "\n"

        diagnosis += "  " + " " * start
        diagnosis += colored("^" + "~" * (end - start - 1), color, attrs=["bold"])

        return diagnosis

    def location(self, error):
        """Returns 'path:line:col: ' for error, or '' if no file has been registered."""
        if self.path is None:
            return ""
        if not error.source:
            return colored(f"{self.path}: ", attrs=["bold"])
        return colored(f"{self.path}:{error.line}:{error.column}: ", attrs=["bold"])

    def warn(self, *args, **kwargs):
        """Generates and prints runtime warning message based on args."""
        error = GenericException(*args, **kwargs)

        error_msg = self.location(error)
        error_msg += colored("warning: ", ErrorHandler.WARNING, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.source and error.diagnosis:
            print(ErrorHandler.diagnose(error, warning=True))

    def report(self, error):
        """Prints a single error and its diagnosis."""
        error_msg = self.location(error)
        if error.internal:
            error_msg += colored("[internal] ", ErrorHandler.ERROR, attrs=["bold"])

        error_msg += colored("error: ", ErrorHandler.ERROR, attrs=["bold"]) + error.msg
        print(error_msg)

        if not error.internal and error.source and error.diagnosis:
            print(ErrorHandler.diagnose(error))

    def throw(self, error):
        """Reports error (every collected error, for ParseErrors) and exits if this handler is fatal."""
        if isinstance(error, ParseErrors):
            for parse_error in error.errors:
                self.report(parse_error)
        else:
            self.report(error)

        if self.fatal:
            sys.exit(1)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        do_exit = False
        if exc_type is KeyboardInterrupt:
            self.throw(GenericException("keyboard interrupt"))
        elif exc_type is SystemExit:
            do_exit = True
        elif exc_type is RecursionError:
            self.throw(GenericException("maximum recursion depth exceeded"))
        elif exc_type is not None and issubclass(exc_type, GenericException):
            self.throw(exc_val)
        elif exc_type is not None:
            self.throw(GenericException("unknown error: '{}: {}'", (exc_type.__name__, exc_val), internal=True))
            do_exit = True

        return not do_exit

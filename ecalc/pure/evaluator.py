"""Tree-walking evaluator for ecalc expression trees.

Evaluation runs under two scope stacks, one for variables and one for functions. Both are plain lists searched from
the end, so the most recent binding of a name shadows older ones. Every binding is made through Scope.bind, which
removes it again when the body it was made for is done, whether that body returned or raised. After evaluate
returns (or raises), both stacks are therefore exactly as they were before the call.

Evaluation is fail-fast: the first undefined name or arity mismatch raises and aborts everything above it. Division
by zero is not an error and follows IEEE-754 (see lang/numerical.py).
"""

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Tuple

from ecalc.lang.error import ArityMismatch, UndefinedFunction, UndefinedVariable
from ecalc.lang.numerical import divide
from ecalc.pure.lexical import (Add, Call, Divide, Expression, Function, Let, Multiply, Negation, Number, Subtract,
                                Variable)


@dataclass(frozen=True)
class FunctionDef:
    """A function visible in the function scope."""
    name: str
    parameters: Tuple[str, ...]
    body: Expression

    @property
    def arity(self):
        return len(self.parameters)


class Scope:
    """Stack of (name, value) bindings, pushed and popped to mirror lexical nesting."""

    def __init__(self, entries=None):
        self.entries = list(entries) if entries else []

    def lookup(self, name):
        """Returns the most recently bound value of name, or None if name is unbound."""
        for entry_name, value in reversed(self.entries):
            if entry_name == name:
                return value
        return None

    @contextmanager
    def bind(self, *entries):
        """Pushes entries for the duration of the with block. On exit (normal or not), the stack is truncated back to
        the length it had before the push.
        """
        depth = len(self.entries)
        self.entries.extend(entries)
        try:
            yield self
        finally:
            del self.entries[depth:]

    def __len__(self):
        return len(self.entries)

    def __contains__(self, name):
        return any(entry_name == name for entry_name, __ in self.entries)

    def __repr__(self):
        return f"Scope({self.entries!r})"


class Evaluator:
    """Evaluates expression trees under a variable scope and a function scope."""
    ARITHMETIC = {
        Add: lambda left, right: left + right,
        Subtract: lambda left, right: left - right,
        Multiply: lambda left, right: left * right,
        Divide: divide,
    }

    def __init__(self, variables=None, functions=None):
        self.variables = variables if variables is not None else Scope()
        self.functions = functions if functions is not None else Scope()

    def evaluate(self, node):
        if isinstance(node, Number):
            return node.value

        elif isinstance(node, Negation):
            return -self.evaluate(node.operand)

        elif type(node) in Evaluator.ARITHMETIC:
            left = self.evaluate(node.left)
            right = self.evaluate(node.right)
            return Evaluator.ARITHMETIC[type(node)](left, right)

        elif isinstance(node, Variable):
            value = self.variables.lookup(node.name)
            if value is None:
                raise UndefinedVariable(node.name, node.span)
            return value

        elif isinstance(node, Let):
            value = self.evaluate(node.rhs)
            with self.variables.bind((node.name, value)):
                return self.evaluate(node.then)

        elif isinstance(node, Function):
            with self.functions.bind((node.name, FunctionDef(node.name, node.arguments, node.body))):
                return self.evaluate(node.then)

        elif isinstance(node, Call):
            return self.call(node)

        raise TypeError(f"cannot evaluate {type(node).__name__}")

    def call(self, node):
        """Arguments are evaluated in the caller's scope, then bound to the function's parameters for its body."""
        function = self.functions.lookup(node.name)
        if function is None:
            raise UndefinedFunction(node.name, node.span)
        if len(node.arguments) != function.arity:
            raise ArityMismatch(node.name, function.arity, len(node.arguments), node.span)

        values = [self.evaluate(argument) for argument in node.arguments]
        with self.variables.bind(*zip(function.parameters, values)):
            return self.evaluate(function.body)


def evaluate(tree, variables=None, functions=None):
    """Returns the value of tree. Fresh, empty scopes are used unless variables/functions are given; given scopes are
    left as they were found.
    """
    return Evaluator(variables, functions).evaluate(tree)

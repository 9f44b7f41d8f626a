"""ecalc expression tree and parser.

The `pure` directory contains the language core: this module turns source text into an expression tree, and
evaluator.py walks that tree. Nothing in `pure` reads files or prints.

Formally, an ecalc program can be defined as (highest precedence first)

```
<atom>        ::= <number>
                | "(" <expression> ")"
                | <identifier> "(" [<expression> ("," <expression>)* [","]] ")"  ; "call"
                | <identifier>                                                  ; "variable"
<unary>       ::= "-"* <atom>                        ; folded right to left: --1 = -(-(1))
<product>     ::= <unary> (("*" | "/") <unary>)*     ; associating by left: a/b/c = ((a/b)/c)
<expression>  ::= <product> (("+" | "-") <product>)*  ; associating by left: a-b+c = ((a-b)+c)
<declaration> ::= "let" <identifier> "=" <expression> ";" <declaration>
                | "fn" <identifier> <identifier>* "=" <expression> ";" <declaration>
                | <expression>
```

A program is exactly one <declaration>. The "let" and "fn" forms are tried before a bare expression: a keyword
followed by an identifier always starts a declaration. Anywhere else "let" and "fn" are ordinary names, so
"let let = 1; let" is a valid program.

The parser does not stop at the first syntax error. A broken declaration is skipped up to its ";" and a broken call
argument up to the next "," or ")", after which parsing carries on. Every error found this way is raised at the end
in a single ParseErrors.
"""

from abc import ABC
from dataclasses import dataclass, field, fields
from typing import Optional, Tuple

from ecalc.grammar.tokens import END, IDENTIFIER, INVALID, NUMBER, tokenize
from ecalc.lang.error import ParseError, ParseErrors


Span = Optional[Tuple[int, int]]


class Expression(ABC):
    """Superclass for every node of an expression tree. Trees are immutable once built."""

    @property
    def nodes(self):
        """Child expressions of this node, in source order."""
        children = []
        for item in fields(self):
            value = getattr(self, item.name)
            if isinstance(value, Expression):
                children.append(value)
            elif isinstance(value, tuple):
                children.extend(child for child in value if isinstance(child, Expression))
        return children

    def display(self, indents=0):
        """Recursively displays the tree with readable format.

        Format:
        <Expression>(<attrs>, nodes=[
            <Expression>(<attrs>, nodes=[
                ...
                <Expression>(<attrs>)  # <-- if nodes is empty
            ])
        ])
        """
        attrs = []
        for item in fields(self):
            value = getattr(self, item.name)
            if item.compare and not isinstance(value, Expression) and not _is_expressions(value):
                attrs.append(f"{item.name}={value!r}")

        result = f"{'    ' * indents}{type(self).__name__}({', '.join(attrs)}"
        if self.nodes:
            result += ", nodes=[" if attrs else "nodes=["
            for node in self.nodes:
                result += "\n" + node.display(indents + 1) + ","
            result = result[:-1] + f"\n{'    ' * indents}]"
        return result + ")"

    def __str__(self):
        return self.display()


def _is_expressions(value):
    return isinstance(value, tuple) and any(isinstance(item, Expression) for item in value)


@dataclass(frozen=True)
class Number(Expression):
    value: float


@dataclass(frozen=True)
class Variable(Expression):
    name: str
    span: Span = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Negation(Expression):
    operand: Expression


@dataclass(frozen=True)
class Add(Expression):
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Subtract(Expression):
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Multiply(Expression):
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Divide(Expression):
    left: Expression
    right: Expression


@dataclass(frozen=True)
class Call(Expression):
    name: str
    arguments: Tuple[Expression, ...]
    span: Span = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Let(Expression):
    """Binds name to the value of rhs while evaluating then."""
    name: str
    rhs: Expression
    then: Expression


@dataclass(frozen=True)
class Function(Expression):
    """Makes function name (with parameters arguments) callable while evaluating then."""
    name: str
    arguments: Tuple[str, ...]
    body: Expression
    then: Expression


class Parser:
    """Recursive descent parser for one ecalc program. Use parse() rather than instantiating directly."""
    SUMS = {"+": Add, "-": Subtract}
    PRODUCTS = {"*": Multiply, "/": Divide}

    def __init__(self, source):
        self.source = source
        self.tokens = tokenize(source)
        self.pos = 0
        self.errors = []

    def parse(self):
        """Parses self.source, raising ParseErrors if anything went wrong."""
        tree = None
        try:
            tree = self.declaration()
            if self.peek().kind != END:
                raise self.error("unexpected {} after end of program", self.peek().describe())
        except ParseError as error:
            self.record(error)

        if self.errors:
            raise ParseErrors(self.source, self.errors)
        return tree

    # helpers

    def peek(self):
        return self.tokens[self.pos]

    def advance(self):
        token = self.tokens[self.pos]
        if token.kind != END:
            self.pos += 1
        return token

    def error(self, msg, *args):
        """Returns a ParseError pointing at the current token; the caller raises it."""
        token = self.peek()
        return ParseError(msg, args, self.source, token.start, max(token.end, token.start + 1))

    def expected(self, what):
        token = self.peek()
        if token.kind == INVALID:
            return self.error("unexpected character {}", token.describe())
        return self.error("expected {}, found {}", what, token.describe())

    def expect(self, symbol):
        if not self.peek().is_symbol(symbol):
            raise self.expected(f"'{symbol}'")
        return self.advance()

    def identifier(self):
        if self.peek().kind != IDENTIFIER:
            raise self.expected("an identifier")
        return self.advance().text

    def starts_declaration(self, keyword):
        """Whether the current token is keyword and is followed by the name being declared."""
        if not self.peek().is_keyword(keyword):
            return False
        return self.tokens[self.pos + 1].kind == IDENTIFIER

    def record(self, error):
        """Adds error to self.errors, unless an error was already recorded at the same position."""
        if all(error.start != other.start for other in self.errors):
            self.errors.append(error)

    def skip_until(self, *symbols):
        """Skips tokens until one of symbols (not consumed) or the end of input. Returns whether a symbol was found."""
        while self.peek().kind != END:
            if self.peek().is_symbol(*symbols):
                return True
            self.advance()
        return False

    # grammar rules

    def declaration(self):
        if self.starts_declaration("let"):
            return self.let()
        if self.starts_declaration("fn"):
            return self.function()
        return self.expression()

    def let(self):
        self.advance()
        try:
            name = self.identifier()
            self.expect("=")
            rhs = self.expression()
            self.expect(";")
        except ParseError as error:
            return self.recover_declaration(error)
        return Let(name, rhs, self.declaration())

    def function(self):
        self.advance()
        try:
            name = self.identifier()
            arguments = []
            while not self.peek().is_symbol("="):
                if self.peek().kind != IDENTIFIER:
                    raise self.expected("a parameter name or '='")
                arguments.append(self.identifier())
            self.advance()
            body = self.expression()
            self.expect(";")
        except ParseError as error:
            return self.recover_declaration(error)
        return Function(name, tuple(arguments), body, self.declaration())

    def recover_declaration(self, error):
        """Records error, then skips past the broken declaration's ';' and parses whatever follows it. The tree is
        discarded once there are errors, so nothing useful is returned.
        """
        self.record(error)
        if self.skip_until(";"):
            self.advance()
            self.declaration()
        return None

    def expression(self):
        left = self.product()
        while self.peek().is_symbol(*self.SUMS):
            operator = self.SUMS[self.advance().text]
            left = operator(left, self.product())
        return left

    def product(self):
        left = self.unary()
        while self.peek().is_symbol(*self.PRODUCTS):
            operator = self.PRODUCTS[self.advance().text]
            left = operator(left, self.unary())
        return left

    def unary(self):
        negations = 0
        while self.peek().is_symbol("-"):
            self.advance()
            negations += 1

        operand = self.atom()
        for __ in range(negations):
            operand = Negation(operand)
        return operand

    def atom(self):
        token = self.peek()

        if token.kind == NUMBER:
            self.advance()
            return Number(float(token.text))

        if token.is_symbol("("):
            self.advance()
            inner = self.expression()
            self.expect(")")
            return inner

        if token.kind == IDENTIFIER:
            name = self.identifier()
            if self.peek().is_symbol("("):
                return self.call(name, token)
            return Variable(name, (token.start, token.end))

        raise self.expected("an expression")

    def call(self, name, token):
        """Parses a call's argument list. A broken argument is recorded and skipped, and the (incomplete) Call is still
        returned so that the rest of the program gets checked too.
        """
        self.advance()
        arguments = []

        while not self.peek().is_symbol(")"):
            try:
                arguments.append(self.expression())
                if not self.peek().is_symbol(",", ")"):
                    raise self.expected("',' or ')'")
                if self.peek().is_symbol(","):
                    self.advance()
            except ParseError as error:
                self.record(error)
                if not self.skip_until(",", ")", ";"):
                    raise error
                if self.peek().is_symbol(";"):
                    raise self.expected("')'")
                if self.peek().is_symbol(","):
                    self.advance()

        end = self.advance().end
        return Call(name, tuple(arguments), (token.start, end))


def parse(source):
    """Returns the expression tree of source, or raises ParseErrors listing every syntax error that was found."""
    return Parser(source).parse()

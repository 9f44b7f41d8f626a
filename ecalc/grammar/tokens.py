"""ecalc token generator.

Formally, the tokens of the ecalc language can be defined as
<number>     ::= [0-9]+                     ; always read as a float
<identifier> ::= [A-Za-z_][A-Za-z0-9_]*     ; "let" and "fn" start declarations (see pure/lexical.py)
<symbol>     ::= "+" | "-" | "*" | "/" | "=" | ";" | "," | "(" | ")"

Whitespace is insignificant between tokens. Any other character becomes an "invalid" token so that the parser can
report it together with every other syntax error instead of giving up on the first bad character.
"""

from dataclasses import dataclass
import re


class Invariate:
    CHARS = {
        "<plus>": "+",
        "<minus>": "-",
        "<times>": "*",
        "<divide>": "/",
        "<assign>": "=",
        "<semicolon>": ";",
        "<comma>": ",",
        "<open_paren>": "(",
        "<close_paren>": ")"
    }
    KEYWORDS = ("let", "fn")


NUMBER = "number"
IDENTIFIER = "identifier"
SYMBOL = "symbol"
INVALID = "invalid"
END = "end"

TOKEN_REGEX = re.compile(
    r"(?P<number>[0-9]+)"
    r"|(?P<identifier>[A-Za-z_][A-Za-z0-9_]*)"
    r"|(?P<symbol>[{}])"
    r"|(?P<whitespace>\s+)"
    r"|(?P<invalid>.)".format(re.escape("".join(Invariate.CHARS.values()))),
    re.DOTALL
)


@dataclass(frozen=True)
class Token:
    kind: str
    text: str
    start: int

    @property
    def end(self):
        return self.start + len(self.text)

    def is_symbol(self, *symbols):
        return self.kind == SYMBOL and self.text in symbols

    def is_keyword(self, keyword=None):
        if self.kind != IDENTIFIER or self.text not in Invariate.KEYWORDS:
            return False
        return keyword is None or self.text == keyword

    def describe(self):
        """How this token is referred to in error messages."""
        if self.kind == END:
            return "end of input"
        return f"'{self.text}'"


def tokenize(source):
    """Splits source into tokens, always ending with a single END token positioned at len(source)."""
    tokens = []
    for match in TOKEN_REGEX.finditer(source):
        if match.lastgroup != "whitespace":
            tokens.append(Token(match.lastgroup, match.group(), match.start()))
    tokens.append(Token(END, "", len(source)))
    return tokens

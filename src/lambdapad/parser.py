r"""
Text front end.

```
λf. (λx. f (x x)) λx. f (x x)      # expression, `\` can replace `λ`
Y = \f. (\x. f (x x)) \x. f (x x)  # definition
```

- identifiers are any run of characters other than blanks and `\ λ . ( ) = /`,
  so CJK names are fine
- application associates to the left: `a b c` is `(a b) c`
- the body of an abstraction extends as far right as possible, and an
  abstraction can end an application: `f λx. x` is `f (λx. x)`
- `//` starts a comment running to the end of the line

A document holds one definition per line, blank lines and comments are skipped.
"""

from __future__ import annotations

from lark import Lark, Transformer
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from .errors import ParseError
from .term import Term, app, lam, var

__all__ = ["parse_term", "parse_definition", "parse_document"]

GRAMMAR = r"""
expression: expr
line: [definition]

definition: NAME "=" expr

?expr: abstraction
     | application

abstraction: _LAMBDA NAME "." expr
application: atom+ abstraction?

?atom: NAME -> variable
     | "(" expr ")"

_LAMBDA: "\\" | "λ"
NAME: /[^\s\\λ.()=\/]+/
COMMENT: /\/\/[^\n]*/

%ignore /\s+/
%ignore COMMENT
"""


class _TermBuilder(Transformer):
    def variable(self, children):
        (name,) = children
        return var(str(name))

    def abstraction(self, children):
        name, body = children
        return lam(str(name), body)

    def application(self, children):
        return app(*children)

    def definition(self, children):
        name, body = children
        return str(name), body

    def expression(self, children):
        return children[0]

    def line(self, children):
        return children[0]


_parser = Lark(
    GRAMMAR,
    start=["expression", "line"],
    parser="lalr",
    transformer=_TermBuilder(),
)


def _describe(error: UnexpectedInput) -> str:
    match error:
        case UnexpectedCharacters():
            return f"unexpected character {error.char!r}"
        case UnexpectedEOF():
            return "unexpected end of input"
        case UnexpectedToken() if error.token.type == "$END":
            return "unexpected end of input"
        case UnexpectedToken():
            return f"unexpected {str(error.token)!r}"
    return "invalid input"


def parse_term(text: str) -> Term:
    """
    Parse a single expression, e.g. `\\f. (\\x. f (x x)) \\x. f (x x)`.

    Names bound by an abstraction get their De Bruijn code, the others stay free.
    """
    try:
        return _parser.parse(text, start="expression")
    except UnexpectedInput as e:
        raise ParseError(_describe(e), e.line, e.column) from e


def parse_definition(text: str) -> tuple[str, Term]:
    """Parse a single definition, e.g. `tt = \\x. \\y. x`."""
    try:
        parsed = _parser.parse(text, start="line")
    except UnexpectedInput as e:
        raise ParseError(_describe(e), e.line, e.column) from e
    if parsed is None:
        raise ParseError("expected a definition")
    return parsed


def parse_document(text: str) -> dict[str, Term]:
    """
    Parse one definition per line.

    For multiple definitions of the same name, the last one wins.
    """
    definitions: dict[str, Term] = {}
    for number, line in enumerate(text.splitlines(), start=1):
        try:
            parsed = _parser.parse(line, start="line")
        except UnexpectedInput as e:
            raise ParseError(_describe(e), number, e.column) from e
        if parsed is not None:
            name, term = parsed
            definitions[name] = term
    return definitions

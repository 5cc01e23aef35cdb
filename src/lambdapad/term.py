"""
Lambda calculus term representation using De Bruijn codes.

A term is one of three immutable nodes:

- `Var`, a variable occurrence
- `Abs`, an abstraction introducing one binder
- `App`, the application of a function to an argument

Every node carries an `Ident` made of a display label and a code.
The code of a variable is its De Bruijn index, counted from 1:

```
λx. λy. x  =>  Abs(x, Abs(y, Var(x, 2)))
λx. λy. y  =>  Abs(x, Abs(y, Var(y, 1)))
λx. y      =>  Abs(x, Var(y, 0))            # y is free
```

A code of 0 marks a free variable. The code stored on a binder is not used.

Labels only matter for display. Two terms that differ only by the names of
their bound variables are different under `==`, but become equal once both
are passed through `purify`.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Callable, Hashable, Iterator, NamedTuple, Optional

__all__ = [
    "Ident",
    "Term",
    "Var",
    "Abs",
    "App",
    "var",
    "lam",
    "app",
    "bind",
    "rebuild",
    "purify",
    "alpha_equivalent",
    "free_names",
    "is_valid",
    "format_term",
    "format_purified",
    "abstraction_needs_parens",
    "application_needs_parens",
]


class Ident(NamedTuple):
    """
    Identifier of a variable or binder.

    Attributes:
        name: display label, `None` once purified
        code: De Bruijn index, 0 for free variables
    """

    name: Hashable
    code: int = 0


class Term:
    """Base class of `Var`, `Abs` and `App`."""

    def __call__(self, arg: Term) -> Term:
        """Apply this term to an argument"""
        return App(self, arg)

    def __str__(self) -> str:
        if _root_ident(self).name is None:
            return format_purified(self)
        return format_term(self)


@dataclass(frozen=True)
class Var(Term):
    ident: Ident

    def __post_init__(self):
        if self.ident.code < 0:
            raise ValueError(f"De Bruijn code must be non-negative, got {self.ident.code}")

    @property
    def is_free(self) -> bool:
        return self.ident.code == 0


@dataclass(frozen=True)
class Abs(Term):
    ident: Ident
    body: Term


@dataclass(frozen=True)
class App(Term):
    func: Term
    arg: Term


def _root_ident(term: Term) -> Ident:
    while isinstance(term, App):
        term = term.func
    assert isinstance(term, (Var, Abs))
    return term.ident


def rebuild(
    term: Term,
    leaf: Callable[[Var, int], Term],
    binder: Optional[Callable[[Abs, int], Optional[Ident]]] = None,
    depth: int = 0,
) -> Term:
    """
    Copy `term` bottom-up with an explicit stack, so that deep terms
    (large numerals, long spines) do not hit the recursion limit.

    Args:
        leaf: gives the replacement of a variable met at some depth
        binder: gives the ident of the copied abstraction, or `None` to keep
            the abstraction and its whole body as they are.
            Without it, abstractions keep their ident.
        depth: number of binders enclosing `term` in its context
    """
    built: list[Term] = []
    # ("visit", node, depth, None), ("abs", node, depth, ident) or ("app", node, depth, None)
    pending: list[tuple[str, Term, int, Optional[Ident]]] = [("visit", term, depth, None)]
    while pending:
        match pending.pop():
            case "abs", _, _, ident:
                built.append(Abs(ident, built.pop()))
            case "app", _, _, _:
                arg = built.pop()
                built.append(App(built.pop(), arg))
            case _, Var() as node, d, _:
                built.append(leaf(node, d))
            case _, Abs(ident, body) as node, d, _:
                if binder is not None:
                    ident = binder(node, d)
                if ident is None:
                    built.append(node)
                else:
                    pending.append(("abs", node, d, ident))
                    pending.append(("visit", body, d + 1, None))
            case _, App(func, arg) as node, d, _:
                pending.append(("app", node, d, None))
                pending.append(("visit", arg, d, None))
                pending.append(("visit", func, d, None))
            case _, node, _, _:
                raise TypeError(f"not a term: {node!r}")
    return built.pop()


def var(name: Hashable) -> Var:
    """A free variable."""
    return Var(Ident(name))


def bind(term: Term, name: Hashable, index: int = 1) -> Term:
    """
    Bind the free occurrences of `name` to a binder sitting `index` levels above `term`.

    A binder with the same name inside `term` shadows it: occurrences below it
    are left untouched.
    """

    def leaf(node: Var, depth: int) -> Term:
        if node.ident == Ident(name, 0):
            return Var(Ident(name, index + depth))
        return node

    return rebuild(term, leaf, lambda node, _: None if node.ident.name == name else node.ident)


def lam(name: Hashable, body: Term) -> Abs:
    """Build `λname. body`, binding the free occurrences of `name` in `body`."""
    return Abs(Ident(name), bind(body, name))


def app(*terms: Term) -> Term:
    """Left-associated application: `app(a, b, c)` is `(a b) c`."""
    if not terms:
        raise ValueError("app needs at least one term")
    return reduce(App, terms)


def purify(term: Term) -> Term:
    """
    Copy of `term` without labels, keeping only the binding structure.

    Two terms are alpha-equivalent iff their purified forms are equal.
    Free variables all become the same `Var(Ident(None, 0))`,
    and every binder becomes `Ident(None, 0)`.
    """
    return rebuild(
        term,
        lambda node, _: Var(Ident(None, node.ident.code)),
        lambda *_: Ident(None, 0),
    )


def alpha_equivalent(left: Term, right: Term) -> bool:
    """
    Same as `purify(left) == purify(right)`, without building the copies.

    Only variable codes are compared, labels and binder codes are ignored.
    """
    pending = [(left, right)]
    while pending:
        match pending.pop():
            case Var(Ident(_, i)), Var(Ident(_, j)):
                if i != j:
                    return False
            case Abs(_, a), Abs(_, b):
                pending.append((a, b))
            case App(f, a), App(g, b):
                pending.append((a, b))
                pending.append((f, g))
            case _:
                return False
    return True


def free_names(term: Term) -> Iterator[Hashable]:
    """Labels of the free occurrences, left to right."""
    pending = [term]
    while pending:
        match pending.pop():
            case Var(Ident(name, 0)):
                yield name
            case Abs(_, body):
                pending.append(body)
            case App(func, arg):
                pending.append(arg)
                pending.append(func)


def is_valid(term: Term, depth: int = 0) -> bool:
    """
    Check that every code points to a binder inside `term`.

    `depth` is the number of binders enclosing `term` in its context.
    """
    pending = [(term, depth)]
    while pending:
        match pending.pop():
            case Var(Ident(_, code)), d:
                if code > d:
                    return False
            case Abs(_, body), d:
                pending.append((body, d + 1))
            case App(func, arg), d:
                pending.append((arg, d))
                pending.append((func, d))
            case node, _:
                raise TypeError(f"not a term: {node!r}")
    return True


def abstraction_needs_parens(is_app_func: bool, is_tail: bool) -> bool:
    # the body of an abstraction extends as far right as possible
    return is_app_func or not is_tail


def application_needs_parens(is_app_arg: bool) -> bool:
    # application associates to the left
    return is_app_arg


def format_term(term: Term, indexed: bool = False) -> str:
    """
    Format with minimal parentheses, e.g. `λf. (λx. f (x x)) λx. f (x x)`.

    With `indexed`, variables show their code: `λx. λy. x<2>`.
    """
    parts: list[str] = []
    # pieces of text, or (node, is_app_func, is_app_arg, is_tail) still to format
    pending: list = [(term, False, False, True)]
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            parts.append(item)
            continue
        node, is_app_func, is_app_arg, is_tail = item
        match node:
            case Var(Ident(name, code)):
                parts.append(f"{name}<{code}>" if indexed else f"{name}")
                continue
            case Abs(Ident(name, _), body):
                wrapped = abstraction_needs_parens(is_app_func, is_tail)
                children = [f"λ{name}. ", (body, False, False, wrapped or is_tail)]
            case App(func, arg):
                wrapped = application_needs_parens(is_app_arg)
                children = [(func, True, False, False), " ", (arg, False, True, wrapped or is_tail)]
            case _:
                raise TypeError(f"not a term: {node!r}")
        if wrapped:
            children = ["(", *children, ")"]
        pending.extend(reversed(children))
    return "".join(parts)


def format_purified(term: Term) -> str:
    """
    Index-only format: `λλλ[[1](3)](2)` for `λx. λy. λf. f x y`.
    """
    parts: list[str] = []
    pending: list = [term]
    while pending:
        match pending.pop():
            case str() as text:
                parts.append(text)
            case Var(Ident(_, code)):
                parts.append(f"{code}")
            case Abs(_, body):
                parts.append("λ")
                pending.append(body)
            case App(func, arg):
                pending.extend([")", arg, "](", func])
                parts.append("[")
            case node:
                raise TypeError(f"not a term: {node!r}")
    return "".join(parts)

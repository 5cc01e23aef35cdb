"""
Church numerals, and shortcuts for their addition and multiplication.

The numeral `n` is `λf. λx. f (f (... (f x)))` with `n` applications of `f`.
Reducing `add a b` or `mul a b` by beta-reduction alone takes a number of
steps proportional to `a + b` or `a * b`. When the fast path is enabled,
the normal order evaluator rewrites these applications directly into the
resulting numeral.
"""

from __future__ import annotations

import logging
from typing import Hashable, Optional

from .term import Abs, App, Ident, Term, Var, alpha_equivalent, app, lam, var

__all__ = [
    "ZERO",
    "SUCC",
    "ADD",
    "MUL",
    "to_numeral",
    "from_numeral",
    "is_add",
    "is_mul",
    "partial_add_value",
    "rewrite_arithmetic",
]

logger = logging.getLogger(__name__)

ZERO = lam("f", lam("x", var("x")))
SUCC = lam("n", lam("f", lam("x", var("f")(app(var("n"), var("f"), var("x"))))))
ADD = lam(
    "n",
    lam("m", lam("f", lam("x", app(var("n"), var("f"), app(var("m"), var("f"), var("x")))))),
)
MUL = lam("n", lam("m", lam("f", lam("x", app(var("n"), var("m")(var("f")), var("x"))))))


def to_numeral(term: Term) -> Optional[tuple[int, Hashable, Hashable]]:
    """
    Read a Church numeral.

    Returns:
        the value with the labels of the two binders, or `None` if `term` is not a numeral
    """
    match term:
        case Abs(Ident(f, _), Abs(Ident(x, _), body)):
            value = 0
            while isinstance(body, App):
                match body:
                    case App(Var(Ident(_, 2)), inner):
                        value += 1
                        body = inner
                    case _:
                        return None
            match body:
                case Var(Ident(_, 1)):
                    return value, f, x
    return None


def from_numeral(value: int, f: Hashable = "f", x: Hashable = "x") -> Abs:
    if value < 0:
        raise ValueError(f"only natural numbers are Church numerals, got {value}")
    body: Term = Var(Ident(x, 1))
    for _ in range(value):
        body = App(Var(Ident(f, 2)), body)
    return Abs(Ident(f), Abs(Ident(x), body))


def is_add(term: Term) -> bool:
    return isinstance(term, Abs) and alpha_equivalent(term, ADD)


def is_mul(term: Term) -> bool:
    return isinstance(term, Abs) and alpha_equivalent(term, MUL)


def partial_add_value(term: Term) -> Optional[int]:
    """
    Recognise `add k`, once reduced to `λm. λf. λx. f (... (f (m f x)))`.

    Returns:
        `k`, the number of `f` wrapped around `m f x`
    """
    match term:
        case Abs(_, Abs(_, Abs(_, body))):
            value = 0
            while True:
                match body:
                    case App(Var(Ident(_, 2)), inner):
                        value += 1
                        body = inner
                    case App(App(Var(Ident(_, 3)), Var(Ident(_, 2))), Var(Ident(_, 1))):
                        return value
                    case _:
                        return None
    return None


def _rewrite_add(term: Term) -> Optional[Term]:
    # add a  ->  λm. λf. λx. f^a (m f x)
    match term:
        case App(Abs(_, Abs(Ident(m, _), _)) as add, a) if is_add(add):
            numeral = to_numeral(a)
            if numeral is None:
                return None
            value, f, x = numeral
            logger.debug("add fast path: add %d", value)
            body: Term = App(App(Var(Ident(m, 3)), Var(Ident(f, 2))), Var(Ident(x, 1)))
            for _ in range(value):
                body = App(Var(Ident(f, 2)), body)
            return Abs(Ident(m), Abs(Ident(f), Abs(Ident(x), body)))
    return None


def _rewrite_partial_add(term: Term) -> Optional[Term]:
    # (add k) b  ->  k + b
    match term:
        case App(Abs() as add_k, b):
            numeral = to_numeral(b)
            if numeral is None:
                return None
            k = partial_add_value(add_k)
            if k is None:
                return None
            value, f, x = numeral
            logger.debug("add fast path: %d + %d", k, value)
            return from_numeral(k + value, f, x)
    return None


def _rewrite_mul(term: Term) -> Optional[Term]:
    # mul a b  ->  a * b
    match term:
        case App(App(Abs() as mul, a), b) if is_mul(mul):
            left = to_numeral(a)
            right = to_numeral(b)
            if left is None or right is None:
                return None
            logger.debug("mul fast path: %d * %d", left[0], right[0])
            return from_numeral(left[0] * right[0], left[1], left[2])
    return None


def rewrite_arithmetic(term: Term) -> Optional[Term]:
    """Apply the first arithmetic shortcut matching at the root of `term`, if any."""
    for rewrite in (_rewrite_add, _rewrite_partial_add, _rewrite_mul):
        rewritten = rewrite(term)
        if rewritten is not None:
            return rewritten
    return None

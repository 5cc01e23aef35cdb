"""Core engine of lambda-calculus.

This module implements substitution and reduction over `Term` trees.
Because it is the most intricate module of the library, it is useful to define some words.
I will refer to them in the comments below for concision.

# 1. Depth

The depth of a node, relative to some starting node, is the number of
abstractions passed on the way down from the starting node to it.

# 2. Outer captured variable

A variable is "outer captured" relative to a starting node if its code is
larger than its depth: it is bound by an abstraction above the starting node.
When a subtree moves to a place with a different number of binders above it,
only its outer captured variables must be renumbered.

# 3. Redex

3.1 A "beta redex" is an application whose function is an abstraction.
    The abstraction is the "trunk", the argument is the "substitute".
3.2 An "eta redex" is an abstraction `λx. F x` where `F` does not use `x`.

# 4. Beta-reduction

The beta-reduction of a redex consists in 3 steps:

4.1 every variable bound by the trunk is replaced by a copy of the substitute,
    whose outer captured variables are shifted by the depth of the replaced variable
4.2 every outer captured variable of the trunk is shifted by -1,
    since the trunk binder disappears
4.3 the body of the trunk takes the place of the redex

# 5. Normal order

The leftmost, outermost redex is always reduced first.
That is, whenever possible the arguments are substituted into
the body of an abstraction before the arguments are reduced.

Every function here is pure: terms are immutable, reductions return new terms.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Hashable, Iterator, Optional

from .church import rewrite_arithmetic
from .errors import SimplifyLimitExceeded
from .term import Abs, App, Ident, Term, Var, rebuild

__all__ = [
    "SIMPLIFY_LIMIT",
    "ReductionOptions",
    "ReductionStats",
    "substitute_free",
    "substitute_at_depth",
    "shift_outer_captured",
    "is_beta_redex",
    "beta_reduce",
    "is_eta_redex",
    "eta_reduce",
    "eta_expand",
    "eval_normal_order",
    "reduction_chain",
    "simplify",
    "simplify_with",
]

logger = logging.getLogger(__name__)

# maximum number of reduction steps in a simplification
SIMPLIFY_LIMIT = 1 << 10


@dataclass(frozen=True)
class ReductionOptions:
    """
    How a term is simplified.

    Attributes:
        eta: also perform eta-reductions (assumes extensionality)
        fast_path: shortcut Church numeral addition and multiplication
        limit: maximum number of normal order steps before giving up
    """

    eta: bool = False
    fast_path: bool = False
    limit: int = SIMPLIFY_LIMIT

    def __post_init__(self):
        if self.limit < 0:
            raise ValueError(f"limit must be non-negative, got {self.limit}")


@dataclass
class ReductionStats:
    """Counters filled by the reduction functions that receive it."""

    steps: int = 0
    beta: int = 0
    eta: int = 0
    arithmetic: int = 0
    visited: int = 0

    def reset(self):
        self.steps = 0
        self.beta = 0
        self.eta = 0
        self.arithmetic = 0
        self.visited = 0


def substitute_free(term: Term, name: Hashable, replacement: Term) -> Term:
    """
    Replace the free occurrences of `name` by `replacement`.

    Used to inject named definitions, `replacement` is expected to be closed.
    """
    return rebuild(term, lambda node, _: replacement if node.ident == Ident(name, 0) else node)


def substitute_at_depth(term: Term, index: int, replacement: Term, depth: int = 0) -> Term:
    """
    Replace the variables with code `index + depth` by `replacement` (see 4.1).

    Args:
        index: the code to target at the starting node
        replacement: the substitute, as seen from the starting node
        depth: number of abstractions already passed
    """

    def leaf(node: Var, d: int) -> Term:
        code = node.ident.code
        if code != 0 and code == index + d:
            return shift_outer_captured(replacement, d)
        return node

    return rebuild(term, leaf, depth=depth)


def shift_outer_captured(term: Term, delta: int, depth: int = 0) -> Term:
    """
    Add `delta` to the code of every outer captured variable (see 2.)

    Variables bound inside `term` and free variables are left untouched.
    """
    if delta == 0:
        return term

    def leaf(node: Var, d: int) -> Term:
        name, code = node.ident
        if code <= d:
            return node
        shifted = code + delta
        assert shifted >= 1, f"code of {name} underflows: {code} {delta:+}"
        return Var(Ident(name, shifted))

    return rebuild(term, leaf, depth=depth)


def is_beta_redex(term: Term) -> bool:
    return isinstance(term, App) and isinstance(term.func, Abs)


def beta_reduce(term: Term) -> Optional[Term]:
    """
    Compute the beta-reduction of this redex (see 4.)

    Returns `None` if `term` is not a beta redex.
    """
    match term:
        case App(Abs() as trunk, substitute):
            reduced = shift_outer_captured(substitute_at_depth(trunk, 0, substitute), -1)
            assert isinstance(reduced, Abs)
            return reduced.body
    return None


def _uses(term: Term, index: int) -> bool:
    pending = [(term, 0)]
    while pending:
        match pending.pop():
            case Var(Ident(_, code)), depth:
                if code != 0 and code == index + depth:
                    return True
            case Abs(_, body), depth:
                pending.append((body, depth + 1))
            case App(func, arg), depth:
                pending.append((arg, depth))
                pending.append((func, depth))
            case node, _:
                raise TypeError(f"not a term: {node!r}")
    return False


def is_eta_redex(term: Term) -> bool:
    match term:
        case Abs(_, App(func, Var(Ident(_, 1)))):
            return not _uses(func, 1)
    return False


def eta_reduce(term: Term) -> Optional[Term]:
    """
    Reduce `λx. F x` to `F`.

    Eta-reduction requires the extensionality axiom, so it is never
    performed unless asked for. Returns `None` if `term` is not an eta redex.
    """
    if not is_eta_redex(term):
        return None
    assert isinstance(term, Abs) and isinstance(term.body, App)
    return shift_outer_captured(term.body.func, -1)


def eta_expand(term: Term, name: Hashable = "x") -> Abs:
    """Build `λname. term name`, the inverse of `eta_reduce`."""
    return Abs(Ident(name), App(shift_outer_captured(term, 1), Var(Ident(name, 1))))


def _rewrite(node: Term, eta: bool, fast_path: bool, stats: Optional[ReductionStats]) -> Optional[Term]:
    if fast_path:
        rewritten = rewrite_arithmetic(node)
        if rewritten is not None:
            if stats is not None:
                stats.arithmetic += 1
            return rewritten

    reduced = beta_reduce(node)
    if reduced is not None:
        if stats is not None:
            stats.beta += 1
        return reduced

    if eta:
        reduced = eta_reduce(node)
        if reduced is not None:
            if stats is not None:
                stats.eta += 1
            return reduced
    return None


# (parent, field name of the child in the parent, link of the parent)
_Link = Optional[tuple[Term, str, "_Link"]]


def eval_normal_order(
    term: Term,
    eta: bool = False,
    fast_path: bool = False,
    stats: Optional[ReductionStats] = None,
) -> Optional[Term]:
    """
    Perform a single normal order step (see 5.)

    At each node, the arithmetic fast path is tried first (if enabled), then
    beta-reduction, then eta-reduction (if enabled). Otherwise the function
    or abstraction body is searched before the argument.

    Returns `None` if `term` is in normal form.
    """
    # explicit stack: the spine of divergent terms grows with each step
    stack: list[tuple[Term, _Link]] = [(term, None)]
    while stack:
        node, link = stack.pop()
        if stats is not None:
            stats.visited += 1

        reduced = _rewrite(node, eta, fast_path, stats)
        if reduced is not None:
            if stats is not None:
                stats.steps += 1
            while link is not None:
                parent, field, link = link
                reduced = replace(parent, **{field: reduced})
            return reduced

        match node:
            case Abs(_, body):
                stack.append((body, (node, "body", link)))
            case App(func, arg):
                stack.append((arg, (node, "arg", link)))
                stack.append((func, (node, "func", link)))
    return None


def reduction_chain(
    term: Term,
    eta: bool = False,
    fast_path: bool = False,
    stats: Optional[ReductionStats] = None,
) -> Iterator[Term]:
    """Yield `term` then every normal order step, until normal form."""
    current: Optional[Term] = term
    while current is not None:
        yield current
        current = eval_normal_order(current, eta, fast_path, stats)


def simplify(
    term: Term,
    eta: bool = False,
    fast_path: bool = False,
    limit: int = SIMPLIFY_LIMIT,
    stats: Optional[ReductionStats] = None,
) -> Term:
    """
    Repeat normal order steps until normal form, performing at most `limit` steps.

    A term whose normal form is reached by exactly `limit` steps is returned.

    Raises:
        SimplifyLimitExceeded: if the bound is hit, the term probably has no normal form
    """
    for _ in range(limit):
        reduced = eval_normal_order(term, eta, fast_path, stats)
        if reduced is None:
            return term
        term = reduced
    # the last allowed step may have reached the normal form
    if eval_normal_order(term, eta, fast_path) is None:
        return term
    logger.warning("simplification abandoned after %d steps", limit)
    raise SimplifyLimitExceeded(limit)


def simplify_with(
    term: Term, options: ReductionOptions, stats: Optional[ReductionStats] = None
) -> Term:
    return simplify(term, options.eta, options.fast_path, options.limit, stats)

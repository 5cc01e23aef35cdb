"""
Decorated view of a term, and reduction by id.

A view mirrors a `Term` node for node and carries what an interactive
front end needs to display it and to let a user pick a reduction:

- parenthesization flags,
- an alpha id on every abstraction, shared by every variable it binds,
  and a fresh alpha id on every free variable,
- a beta-redex id on every application whose function is an abstraction,
- an eta-redex id on every eta-reducible abstraction.

All ids of a view come from a single counter, so an id names exactly one
binder, free variable or redex. Ids only make sense together with the term
the view was built from: a view is never updated, a reduction gives a new
term from which a new view is built.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from itertools import count
from typing import Callable, Iterator, Optional, Union

from .core import _Link, beta_reduce, eta_reduce, is_eta_redex, shift_outer_captured
from .errors import InvalidRedex, RedexNotFound, VariableNotFound
from .term import (
    Abs,
    App,
    Ident,
    Term,
    Var,
    abstraction_needs_parens,
    application_needs_parens,
)

__all__ = [
    "View",
    "VarView",
    "AbsView",
    "AppView",
    "build_view",
    "beta_redex_ids",
    "eta_redex_ids",
    "reduce_by_beta_id",
    "reduce_by_eta_id",
    "find_variable_by_alpha_id",
    "replace_variable_by_alpha_id",
    "format_view",
]


@dataclass(frozen=True)
class VarView:
    alpha_id: int
    parentheses: bool = False


@dataclass(frozen=True)
class AbsView:
    """
    Attributes:
        alpha_id: shared with the variables bound by this abstraction
        body: view of the body
        parentheses: whether the abstraction is wrapped in parentheses
        eta_redex: id of the eta redex, if the abstraction is one
        in_beta_redex: whether the abstraction is the function of a beta redex
    """

    alpha_id: int
    body: View
    parentheses: bool = False
    eta_redex: Optional[int] = None
    in_beta_redex: bool = False


@dataclass(frozen=True)
class AppView:
    func: View
    arg: View
    parentheses: bool = False
    beta_redex: Optional[int] = None


View = Union[VarView, AbsView, AppView]


def build_view(term: Term) -> View:
    """
    Decorate `term`.

    Ids are taken in this order: an abstraction on entry, a free variable when
    met, an eta redex after its body, a beta redex after both of its children.
    """
    counter = count(1)
    binders: list[int] = []
    built: list[View] = []
    # ("visit", node, is_app_func, is_app_arg, is_tail),
    # ("abs", node, alpha_id, wrapped, is_app_func) or ("app", node, wrapped, None, None)
    pending: list[tuple] = [("visit", term, False, False, True)]
    while pending:
        match pending.pop():
            case "abs", node, alpha_id, wrapped, is_app_func:
                binders.pop()
                eta_redex = next(counter) if is_eta_redex(node) else None
                built.append(AbsView(alpha_id, built.pop(), wrapped, eta_redex, is_app_func))

            case "app", node, wrapped, _, _:
                arg_view = built.pop()
                func_view = built.pop()
                beta_redex = next(counter) if isinstance(node.func, Abs) else None
                built.append(AppView(func_view, arg_view, wrapped, beta_redex))

            case _, Var(Ident(_, code)), _, _, _:
                if 0 < code <= len(binders):
                    built.append(VarView(binders[-code]))
                else:
                    # free, or bound outside of the term
                    built.append(VarView(next(counter)))

            case _, Abs(_, body) as node, is_app_func, _, is_tail:
                alpha_id = next(counter)
                wrapped = abstraction_needs_parens(is_app_func, is_tail)
                binders.append(alpha_id)
                pending.append(("abs", node, alpha_id, wrapped, is_app_func))
                pending.append(("visit", body, False, False, wrapped or is_tail))

            case _, App(func, arg) as node, _, is_app_arg, is_tail:
                wrapped = application_needs_parens(is_app_arg)
                pending.append(("app", node, wrapped, None, None))
                pending.append(("visit", arg, False, True, wrapped or is_tail))
                pending.append(("visit", func, True, False, False))

            case _, node, _, _, _:
                raise TypeError(f"not a term: {node!r}")
    return built.pop()


def _walk(view: View) -> Iterator[View]:
    pending = [view]
    while pending:
        node = pending.pop()
        yield node
        match node:
            case AbsView(body=body):
                pending.append(body)
            case AppView(func=func, arg=arg):
                pending.append(arg)
                pending.append(func)


def beta_redex_ids(view: View) -> list[int]:
    """
    Beta-redex ids, outermost first then left to right.

    The first one is the redex a normal order step would reduce.
    """
    return [v.beta_redex for v in _walk(view) if isinstance(v, AppView) and v.beta_redex is not None]


def eta_redex_ids(view: View) -> list[int]:
    return [v.eta_redex for v in _walk(view) if isinstance(v, AbsView) and v.eta_redex is not None]


def _rewrite_first(
    term: Term,
    view: View,
    is_target: Callable[[View], bool],
    rewrite: Callable[[Term, int], Term],
) -> Optional[tuple[Term, View]]:
    """
    Walk `term` and `view` in lockstep, and rewrite the first node whose view is a target.

    Returns:
        the rewritten term together with the view of the target, or `None` if no view is a target
    """
    pending: list[tuple[Term, View, int, _Link]] = [(term, view, 0, None)]
    while pending:
        node, node_view, depth, link = pending.pop()
        if is_target(node_view):
            rewritten = rewrite(node, depth)
            while link is not None:
                parent, field, link = link
                rewritten = replace(parent, **{field: rewritten})
            return rewritten, node_view

        match node, node_view:
            case Var(), VarView():
                pass
            case Abs(_, body), AbsView(body=body_view):
                pending.append((body, body_view, depth + 1, (node, "body", link)))
            case App(func, arg), AppView(func=func_view, arg=arg_view):
                pending.append((arg, arg_view, depth, (node, "arg", link)))
                pending.append((func, func_view, depth, (node, "func", link)))
            case _:
                raise AssertionError(f"view {node_view!r} was not built from {node}")
    return None


def reduce_by_beta_id(term: Term, view: View, redex_id: int) -> tuple[Term, int]:
    """
    Beta-reduce the redex marked `redex_id` in `view`.

    Returns:
        the reduced term, and the alpha id the binder of the reduced abstraction had

    Raises:
        RedexNotFound: no redex of `view` has this id
        InvalidRedex: the marked node is not a beta redex of `term`
    """

    def rewrite(node: Term, _depth: int) -> Term:
        reduced = beta_reduce(node)
        if reduced is None:
            raise InvalidRedex(redex_id, node)
        return reduced

    found = _rewrite_first(
        term,
        view,
        lambda v: isinstance(v, AppView) and v.beta_redex == redex_id,
        rewrite,
    )
    if found is None:
        raise RedexNotFound(redex_id)
    reduced, target = found
    assert isinstance(target, AppView) and isinstance(target.func, AbsView)
    return reduced, target.func.alpha_id


def reduce_by_eta_id(term: Term, view: View, redex_id: int) -> tuple[Term, int]:
    """Same as `reduce_by_beta_id`, for the eta redex marked `redex_id`."""

    def rewrite(node: Term, _depth: int) -> Term:
        reduced = eta_reduce(node)
        if reduced is None:
            raise InvalidRedex(redex_id, node)
        return reduced

    found = _rewrite_first(
        term,
        view,
        lambda v: isinstance(v, AbsView) and v.eta_redex == redex_id,
        rewrite,
    )
    if found is None:
        raise RedexNotFound(redex_id)
    reduced, target = found
    assert isinstance(target, AbsView)
    return reduced, target.alpha_id


def find_variable_by_alpha_id(term: Term, view: View, alpha_id: int) -> Var:
    """First variable occurrence, left to right, carrying `alpha_id`."""
    pending = [(term, view)]
    while pending:
        match pending.pop():
            case Var() as node, VarView(alpha_id=found):
                if found == alpha_id:
                    return node
            case Abs(_, body), AbsView(body=body_view):
                pending.append((body, body_view))
            case App(func, arg), AppView(func=func_view, arg=arg_view):
                pending.append((arg, arg_view))
                pending.append((func, func_view))
            case node, node_view:
                raise AssertionError(f"view {node_view!r} was not built from {node}")
    raise VariableNotFound(alpha_id)


def replace_variable_by_alpha_id(term: Term, view: View, alpha_id: int, replacement: Term) -> Term:
    """
    Replace the first occurrence carrying `alpha_id` by `replacement`, and only that one.

    The outer captured variables of `replacement` are shifted by the number
    of abstractions above the occurrence.
    """
    found = _rewrite_first(
        term,
        view,
        lambda v: isinstance(v, VarView) and v.alpha_id == alpha_id,
        lambda _node, depth: shift_outer_captured(replacement, depth),
    )
    if found is None:
        raise VariableNotFound(alpha_id)
    return found[0]


def format_view(term: Term, view: View, indexed: bool = False) -> str:
    """Format `term` with the parentheses recorded in `view`."""
    parts: list[str] = []
    pending: list = [(term, view)]
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            parts.append(item)
            continue
        match item:
            case Var(Ident(name, code)), VarView() as node_view:
                children = [f"{name}<{code}>" if indexed else f"{name}"]
            case Abs(Ident(name, _), body), AbsView(body=body_view) as node_view:
                children = [f"λ{name}. ", (body, body_view)]
            case App(func, arg), AppView(func=func_view, arg=arg_view) as node_view:
                children = [(func, func_view), " ", (arg, arg_view)]
            case node, node_view:
                raise AssertionError(f"view {node_view!r} was not built from {node}")
        if node_view.parentheses:
            children = ["(", *children, ")"]
        pending.extend(reversed(children))
    return "".join(parts)

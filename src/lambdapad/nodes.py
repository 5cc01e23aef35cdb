"""
Flat, tabular form of a decorated term.

Each node of the term is a row. Ids follow a pre-order, left to right walk,
so that:

- the child of an abstraction, and the function of an application, is the next row
- `arg` is the id of the argument of an application
- `ref` is the id of the abstraction binding a variable (null if free)
"""

from __future__ import annotations

from typing import NamedTuple, Optional

import polars as pl
from polars import Boolean, Schema, String, UInt32

from .term import Abs, App, Ident, Term, Var
from .view import AbsView, AppView, VarView, View, build_view

__all__ = ["SCHEMA", "NodeInfo", "node_table", "find_redexes", "find_variables"]

SCHEMA = Schema(
    {
        "id": UInt32,
        "parent": UInt32,
        "kind": String,
        "name": String,
        "code": UInt32,
        "ref": UInt32,
        "arg": UInt32,
        "alpha_id": UInt32,
        "beta_redex": UInt32,
        "eta_redex": UInt32,
        "parentheses": Boolean,
    },
)


class NodeInfo(NamedTuple):
    id: int
    parent: Optional[int]
    kind: str
    name: Optional[str]
    code: int
    ref: Optional[int]  # For variables: which lambda they reference
    arg: Optional[int]  # For applications: where the argument starts
    alpha_id: Optional[int]
    beta_redex: Optional[int]
    eta_redex: Optional[int]
    parentheses: bool


def _label(ident: Ident) -> Optional[str]:
    return None if ident.name is None else str(ident.name)


def _nodes(term: Term, view: View) -> list[NodeInfo]:
    rows: list[NodeInfo] = []
    # ids of the enclosing abstractions
    context: list[int] = []
    # (term, view, parent id) to number, ("arg", row) once the function of `row`
    # is numbered, or ("leave", None) after the body of an abstraction
    pending: list[tuple] = [(term, view, None)]
    while pending:
        match pending.pop():
            case "arg", row:
                rows[row] = rows[row]._replace(arg=len(rows))
                continue
            case "leave", _:
                context.pop()
                continue
            case node, node_view, parent_id:
                my_id = len(rows)

        match node, node_view:
            case Var(ident), VarView(alpha_id=alpha_id):
                code = ident.code
                ref = context[-code] if 0 < code <= len(context) else None
                rows.append(
                    NodeInfo(
                        id=my_id,
                        parent=parent_id,
                        kind="variable",
                        name=_label(ident),
                        code=code,
                        ref=ref,
                        arg=None,
                        alpha_id=alpha_id,
                        beta_redex=None,
                        eta_redex=None,
                        parentheses=node_view.parentheses,
                    )
                )

            case Abs(ident, body), AbsView(alpha_id=alpha_id, body=body_view, eta_redex=eta_redex):
                rows.append(
                    NodeInfo(
                        id=my_id,
                        parent=parent_id,
                        kind="abstraction",
                        name=_label(ident),
                        code=ident.code,
                        ref=None,
                        arg=None,
                        alpha_id=alpha_id,
                        beta_redex=None,
                        eta_redex=eta_redex,
                        parentheses=node_view.parentheses,
                    )
                )
                context.append(my_id)
                pending.append(("leave", None))
                pending.append((body, body_view, my_id))

            case App(func, arg), AppView(func=func_view, arg=arg_view, beta_redex=beta_redex):
                rows.append(
                    NodeInfo(
                        id=my_id,
                        parent=parent_id,
                        kind="application",
                        name=None,
                        code=0,
                        ref=None,
                        arg=None,  # known once the function is numbered
                        alpha_id=None,
                        beta_redex=beta_redex,
                        eta_redex=None,
                        parentheses=node_view.parentheses,
                    )
                )
                pending.append((arg, arg_view, my_id))
                pending.append(("arg", my_id))
                pending.append((func, func_view, my_id))

            case _:
                raise AssertionError(f"view {node_view!r} was not built from {node}")
    return rows


def node_table(term: Term, view: Optional[View] = None) -> pl.DataFrame:
    if view is None:
        view = build_view(term)
    return pl.DataFrame(_nodes(term, view), schema=SCHEMA, orient="row")


def find_redexes(nodes: pl.DataFrame) -> pl.DataFrame:
    """
    Find all beta redexes, as `(id, beta_redex)` rows.

    The first redex is the leftmost-outermost redex.
    """
    return nodes.filter(pl.col("beta_redex").is_not_null()).select("id", "beta_redex").sort("id")


def find_variables(nodes: pl.DataFrame, alpha_id: int) -> pl.Series:
    """
    Find the ids of the variable nodes carrying `alpha_id`.

    For a binder's alpha id, these are all the variables bound to it.
    """
    return nodes.filter(pl.col("kind") == "variable", pl.col("alpha_id") == alpha_id)["id"]

"""
Lambda diagram of a term, as SVG.

Variables are laid out left to right, one column each. An abstraction is a
blue bar spanning the columns of the variables it binds (and of its body);
each bound variable is a red box with a gray line up to its binder. An
application is an orange frame over its function, with a black link to its
argument.
"""

from __future__ import annotations

from typing import Iterable, NamedTuple, Optional

import polars as pl
import svg

from .nodes import node_table
from .term import Term
from .view import View

__all__ = ["Interval", "compute_layout", "compute_height", "render"]


class Interval(NamedTuple):
    lo: int
    hi: int

    def __or__(self, other: Optional[Interval]) -> Interval:
        if other is None:
            return self
        return Interval(min(self.lo, other.lo), max(self.hi, other.hi))

    def shift(self, offset: int) -> Interval:
        return Interval(self.lo + offset, self.hi + offset)


def compute_layout(nodes: pl.DataFrame) -> tuple[dict[int, Interval], dict[int, Interval]]:
    """
    Compute the columns (x) and rows (y) spanned by each node.

    Rows are assigned top-down, columns bottom-up from the variables.
    """
    kinds = nodes["kind"]
    y = {0: Interval(0, 0)}
    for node, kind, arg in nodes.select("id", "kind", "arg").iter_rows():
        if kind == "variable":
            continue
        child = node + 1
        if kind == "application":
            # a curried application stays on the row of its head
            y[child] = y[node].shift(1 if kinds[child] == "application" else 0)
            y[arg] = y[node]
        else:
            y[child] = y[node].shift(1)

    x: dict[int, Interval] = {}
    next_var_x = nodes.filter(pl.col("kind") == "variable").height
    for node, kind, ref in nodes.sort("id", descending=True).select("id", "kind", "ref").iter_rows():
        if kind == "variable":
            x[node] = Interval(next_var_x, next_var_x)
            next_var_x -= 1
            if ref is not None:
                x[ref] = x[node] | x.get(ref)
        else:
            child = node + 1
            x[node] = x[child] | x.get(node)
            y[node] = y[child] | y[node]
    return x, y


def compute_height(nodes: pl.DataFrame) -> int:
    _, y = compute_layout(nodes)
    return max(interval.hi for interval in y.values())


def draw(
    x: dict[int, Interval],
    y: dict[int, Interval],
    row: dict,
    highlighted: bool = False,
) -> Iterable[svg.Element]:
    node = row["id"]
    x_node = x[node]
    y_node = y[node]

    if row["kind"] == "application":
        yield svg.Rect(
            x=0.1 + x_node.lo,
            y=0.1 + y_node.lo,
            width=0.8 + x_node.hi - x_node.lo,
            height=0.8,
            fill="none",
            stroke="green" if row["beta_redex"] is not None else "orange",
            stroke_width=0.1,
        )
        x_arg = x[row["arg"]]
        y_arg = y[row["arg"]]
        yield svg.Line(
            x1=0.5 + x_node.hi,
            y1=0.5 + y_node.lo,
            x2=0.5 + x_arg.lo,
            y2=0.5 + y_arg.lo,
            stroke="black",
            stroke_width=0.05,
        )
        yield svg.Circle(cx=0.5 + x_node.hi, cy=0.5 + y_node.lo, r=0.1, fill="black")
        return

    if highlighted:
        color = "green"
    elif row["kind"] == "variable":
        color = "red"
    else:
        color = "blue"
    yield svg.Rect(
        x=0.1 + x_node.lo,
        y=0.1 + y_node.lo,
        width=0.8 + x_node.hi - x_node.lo,
        height=0.8,
        fill=color,
        stroke="gray",
        stroke_width=0.05,
    )

    ref = row["ref"]
    if ref is not None:
        yield svg.Line(
            x1=x_node.lo + 0.5,
            y1=y_node.lo + 0.1,
            x2=x_node.lo + 0.5,
            y2=y[ref].lo + 0.9,
            stroke="green" if highlighted else "gray",
            stroke_width=0.2,
        )


def render(term: Term, view: Optional[View] = None, highlight: Optional[int] = None) -> svg.SVG:
    """
    Draw `term`.

    Args:
        view: the view of `term`, built if not given
        highlight: alpha id of the binder or free variable to paint green
    """
    nodes = node_table(term, view)
    x, y = compute_layout(nodes)
    width = max(interval.hi for interval in x.values()) + 1
    height = max(interval.hi for interval in y.values()) + 1

    elements: list[svg.Element] = []
    for row in nodes.sort("id", descending=True).iter_rows(named=True):
        highlighted = highlight is not None and row["alpha_id"] == highlight
        elements.extend(draw(x, y, row, highlighted))

    # prefered size in pixels
    H = height * 40
    return svg.SVG(
        xmlns="http://www.w3.org/2000/svg",
        viewBox=f"0 0 {width} {height}",  # type: ignore
        style=f"max-height:{H}px",
        elements=elements,
    )

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

import polars as pl

from .core import ReductionOptions, ReductionStats, eval_normal_order, simplify_with
from .display import render
from .nodes import node_table
from .term import Term, format_term
from .view import (
    View,
    beta_redex_ids,
    build_view,
    eta_redex_ids,
    format_view,
    reduce_by_beta_id,
    reduce_by_eta_id,
    replace_variable_by_alpha_id,
)

__all__ = ["Snapshot"]


@dataclass(frozen=True)
class Snapshot:
    """
    A term together with the view built from it.

    Ids read from `view` are only meaningful for this snapshot. Every
    reduction returns a new snapshot with a fresh view.

    Attributes:
        term: the term
        view: its decorated view
        last_reduce: id of the redex that was reduced to leave this snapshot, if any
    """

    term: Term
    view: View = field(repr=False, compare=False)
    last_reduce: Optional[int] = field(default=None, compare=False)

    @staticmethod
    def of(term: Term) -> Snapshot:
        return Snapshot(term, build_view(term))

    def __call__(self, other: Snapshot) -> Snapshot:
        return Snapshot.of(self.term(other.term))

    def __str__(self) -> str:
        return format_view(self.term, self.view)

    def format(self, indexed: bool = False) -> str:
        return format_term(self.term, indexed)

    @property
    def beta_redexes(self) -> list[int]:
        return beta_redex_ids(self.view)

    @property
    def eta_redexes(self) -> list[int]:
        return eta_redex_ids(self.view)

    @property
    def nodes(self) -> pl.DataFrame:
        return node_table(self.term, self.view)

    def reduce_beta(self, redex_id: int) -> tuple[Snapshot, int]:
        """
        Reduce the beta redex `redex_id` of this snapshot.

        Returns:
            the next snapshot, and the alpha id of the binder that disappeared
        """
        reduced, alpha_id = reduce_by_beta_id(self.term, self.view, redex_id)
        return Snapshot.of(reduced), alpha_id

    def reduce_eta(self, redex_id: int) -> tuple[Snapshot, int]:
        reduced, alpha_id = reduce_by_eta_id(self.term, self.view, redex_id)
        return Snapshot.of(reduced), alpha_id

    def expand(self, alpha_id: int, replacement: Term) -> Snapshot:
        """Replace the variable occurrence `alpha_id` by `replacement`."""
        return Snapshot.of(replace_variable_by_alpha_id(self.term, self.view, alpha_id, replacement))

    def beta(self, options: ReductionOptions = ReductionOptions()) -> Optional[Snapshot]:
        """The next normal order step, or `None` in normal form."""
        reduced = eval_normal_order(self.term, options.eta, options.fast_path)
        if reduced is None:
            return None
        return Snapshot.of(reduced)

    def reduction_chain(self, options: ReductionOptions = ReductionOptions()) -> Iterable[Snapshot]:
        snapshot: Optional[Snapshot] = self
        while snapshot is not None:
            yield snapshot
            snapshot = snapshot.beta(options)

    def reduce(
        self,
        options: ReductionOptions = ReductionOptions(),
        stats: Optional[ReductionStats] = None,
    ) -> Snapshot:
        """The normal form, see `simplify`."""
        return Snapshot.of(simplify_with(self.term, options, stats))

    def _repr_html_(self, highlight: Optional[int] = None) -> str:
        return f"<div>{render(self.term, self.view, highlight).as_str()}</div>"

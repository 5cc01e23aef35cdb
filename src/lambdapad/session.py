"""
Interactive reduction session.

A session keeps a linear history of snapshots. The user picks any step of
the history and an id read from its view; the step is reduced, every later
step is discarded and the result is appended:

```
session = Session()
session.load("tt = \\x. \\y. x")
session.start("(\\x. x) tt")
session.beta_reduce(0, session.current.beta_redexes[0])
```
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Mapping, Optional, Union

from .core import ReductionOptions, substitute_free
from .errors import InvalidStep, UndefinedName
from .parser import parse_document, parse_term
from .snapshot import Snapshot
from .term import Term, free_names
from .view import View, find_variable_by_alpha_id

__all__ = ["Session"]

logger = logging.getLogger(__name__)


class Session:
    """Governs the reduction of one term, with named definitions in scope."""

    def __init__(
        self,
        definitions: Optional[Mapping[str, Term]] = None,
        options: ReductionOptions = ReductionOptions(),
    ):
        self.definitions: dict[str, Term] = dict(definitions or {})
        self.options = options
        self.steps: list[Snapshot] = []

    def load(self, text: str):
        """Add the definitions of a document, replacing those with the same name."""
        loaded = parse_document(text)
        self.definitions.update(loaded)
        logger.info("loaded %d definitions", len(loaded))

    def define(self, name: str, term: Union[str, Term]):
        self.definitions[name] = parse_term(term) if isinstance(term, str) else term

    def start(self, term: Union[str, Term]) -> Snapshot:
        """Reset the history to a single step."""
        if isinstance(term, str):
            term = parse_term(term)
        self.steps = [Snapshot.of(term)]
        return self.steps[0]

    @property
    def current(self) -> Snapshot:
        if not self.steps:
            raise InvalidStep(0, 0)
        return self.steps[-1]

    def _branch(self, step: int) -> Snapshot:
        if not 0 <= step < len(self.steps):
            raise InvalidStep(step, len(self.steps))
        return self.steps[step]

    def _append(self, step: int, snapshot: Snapshot, last_reduce: Optional[int] = None) -> Snapshot:
        # the history is linear: later steps are dropped
        del self.steps[step + 1 :]
        self.steps[step] = replace(self.steps[step], last_reduce=last_reduce)
        self.steps.append(snapshot)
        logger.info("step %d -> %d: %s", step, step + 1, snapshot)
        return snapshot

    def beta_reduce(self, step: int, redex_id: int) -> int:
        """
        Reduce the beta redex `redex_id` of step `step`.

        Returns:
            the alpha id the reduced binder had in step `step`
        """
        reduced, alpha_id = self._branch(step).reduce_beta(redex_id)
        self._append(step, reduced, redex_id)
        return alpha_id

    def eta_reduce(self, step: int, redex_id: int) -> int:
        reduced, alpha_id = self._branch(step).reduce_eta(redex_id)
        self._append(step, reduced, redex_id)
        return alpha_id

    def expand(self, step: int, alpha_id: int) -> Snapshot:
        """Replace the free variable `alpha_id` of step `step` by its definition."""
        source = self._branch(step)
        variable = find_variable_by_alpha_id(source.term, source.view, alpha_id)
        name = variable.ident.name
        if not variable.is_free or name not in self.definitions:
            raise UndefinedName(name)
        return self._append(step, source.expand(alpha_id, self.definitions[name]))

    def expand_all(self, step: int) -> Snapshot:
        """Replace every defined free variable of step `step`, until none is left."""
        term = self._branch(step).term
        # a definition can use another one, each pass resolves one level
        for _ in range(len(self.definitions) + 1):
            pending = dict.fromkeys(name for name in free_names(term) if name in self.definitions)
            if not pending:
                break
            for name in pending:
                term = substitute_free(term, name, self.definitions[name])
        return self._append(step, Snapshot.of(term))

    def simplify(self, step: int) -> Snapshot:
        """Append the normal form of step `step`, see `simplify`."""
        return self._append(step, self._branch(step).reduce(self.options))

    def history(self) -> list[tuple[View, Optional[int], str]]:
        return [(s.view, s.last_reduce, str(s)) for s in self.steps]

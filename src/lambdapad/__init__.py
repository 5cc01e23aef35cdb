from typing import Optional, Union

try:
    import polars  # noqa: F401
except ImportError:
    raise ImportError(
        "lambdapad needs the `polars` library. \n Please install it, typically with `pip install polars`"
    )

from .church import ADD, MUL, SUCC, ZERO, from_numeral, to_numeral
from .core import (
    SIMPLIFY_LIMIT,
    ReductionOptions,
    ReductionStats,
    beta_reduce,
    eta_expand,
    eta_reduce,
    eval_normal_order,
    is_beta_redex,
    is_eta_redex,
    reduction_chain,
    shift_outer_captured,
    simplify,
    simplify_with,
    substitute_at_depth,
    substitute_free,
)
from .display import render
from .errors import (
    InvalidRedex,
    InvalidStep,
    LambdaError,
    ParseError,
    RedexNotFound,
    SimplifyLimitExceeded,
    UndefinedName,
    VariableNotFound,
)
from .nodes import find_redexes, find_variables, node_table
from .parser import parse_definition, parse_document, parse_term
from .session import Session
from .snapshot import Snapshot
from .term import (
    Abs,
    App,
    Ident,
    Term,
    Var,
    alpha_equivalent,
    app,
    format_purified,
    format_term,
    lam,
    purify,
    rebuild,
    var,
)
from .view import (
    build_view,
    find_variable_by_alpha_id,
    reduce_by_beta_id,
    reduce_by_eta_id,
    replace_variable_by_alpha_id,
)

__all__ = [
    "L",
    "V",
    "Term",
    "Var",
    "Abs",
    "App",
    "Ident",
    "var",
    "lam",
    "app",
    "rebuild",
    "purify",
    "alpha_equivalent",
    "format_term",
    "format_purified",
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
    "SIMPLIFY_LIMIT",
    "ReductionOptions",
    "ReductionStats",
    "ZERO",
    "SUCC",
    "ADD",
    "MUL",
    "to_numeral",
    "from_numeral",
    "build_view",
    "reduce_by_beta_id",
    "reduce_by_eta_id",
    "find_variable_by_alpha_id",
    "replace_variable_by_alpha_id",
    "Snapshot",
    "Session",
    "node_table",
    "find_redexes",
    "find_variables",
    "render",
    "parse_term",
    "parse_definition",
    "parse_document",
    "LambdaError",
    "SimplifyLimitExceeded",
    "ParseError",
    "RedexNotFound",
    "InvalidRedex",
    "VariableNotFound",
    "InvalidStep",
    "UndefinedName",
]


def _as_term(t: Union[str, "L", Term]) -> Term:
    if isinstance(t, L):
        return t.build()
    elif isinstance(t, Term):
        return t
    assert isinstance(t, str)
    return var(t)


class L:
    """
    Chained term builder.

    ```
    succ = L("n", "f", "x")._("f").call(V("n").call("f").call("x")).build()
    ```

    Names listed in `L(...)` or added with `lamb` become the binders, outermost
    first. Names used in the body that are not bound anywhere stay free.
    """

    def __init__(self, *lambda_names):
        self.lambdas = list(lambda_names)
        self.body: Optional[Term] = None

    def lamb(self, name: str) -> "L":
        self.lambdas.append(name)
        return self

    def _(self, x: Union[str, "L", Term]) -> "L":
        term = _as_term(x)
        self.body = term if self.body is None else App(self.body, term)
        return self

    def call(self, arg: Union[str, "L", Term]) -> "L":
        assert self.body is not None, "nothing to call, start with `_`"
        self.body = App(self.body, _as_term(arg))
        return self

    def build(self) -> Term:
        if self.body is None:
            raise ValueError("the term has no body")
        term = self.body
        for name in reversed(self.lambdas):
            term = lam(name, term)
        return term


def V(name: str) -> L:
    return L()._(name)

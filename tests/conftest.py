"""
Pytest configuration for lambdapad tests.

Provides:
- Hypothesis profiles (select with HYPOTHESIS_PROFILE, "default" or "ci")
- A `terms` strategy generating well formed terms, shared by the property tests
- Fixtures for the usual combinators
"""

import os

import pytest
from hypothesis import HealthCheck, settings
from hypothesis import strategies as st
from hypothesis.strategies import composite

from lambdapad import Abs, App, Ident, Var, parse_term

# =============================================================================
# Hypothesis Configuration
# =============================================================================

settings.register_profile(
    "default",
    max_examples=200,
    print_blob=True,
    suppress_health_check=[HealthCheck.too_slow],
)

# CI profile: fixed seed so that failures reproduce across runs
settings.register_profile(
    "ci",
    max_examples=500,
    print_blob=True,
    derandomize=True,
    suppress_health_check=[HealthCheck.too_slow],
)

settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))


# =============================================================================
# Strategies
# =============================================================================

BINDER_NAMES = "xyzuvw"
FREE_NAMES = "abc"


@composite
def terms(draw, binders=(), budget=8):
    """
    Generate a term whose bound variables point to binders inside it.

    Args:
        binders: labels of the enclosing binders, innermost last
        budget: bound on the number of inner nodes
    """
    kind = draw(st.sampled_from(["var", "abs", "app"] if budget > 0 else ["var"]))

    if kind == "var":
        code = draw(st.integers(min_value=0, max_value=len(binders)))
        if code == 0:
            return Var(Ident(draw(st.sampled_from(FREE_NAMES))))
        return Var(Ident(binders[-code], code))

    if kind == "abs":
        name = draw(st.sampled_from(BINDER_NAMES))
        body = draw(terms(binders + (name,), budget - 1))
        return Abs(Ident(name), body)

    half = (budget - 1) // 2
    return App(draw(terms(binders, half)), draw(terms(binders, half)))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def tt():
    return parse_term(r"\x. \y. x")


@pytest.fixture
def ff():
    return parse_term(r"\x. \y. y")


@pytest.fixture
def omega():
    return parse_term(r"(\x. x x) \x. x x")


@pytest.fixture
def y_combinator():
    return parse_term(r"\f. (\x. f (x x)) \x. f (x x)")

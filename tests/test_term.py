import pytest
from hypothesis import given

from conftest import terms
from lambdapad import L, V, Abs, App, Ident, Var, alpha_equivalent, app, lam, purify, var
from lambdapad.term import bind, format_purified, format_term, free_names, is_valid


def relabel(term, suffix="'"):
    """Rename every binder, and the variables it binds, consistently."""
    match term:
        case Var(Ident(name, code)) if code > 0:
            return Var(Ident(f"{name}{suffix}", code))
        case Var():
            return term
        case Abs(Ident(name, code), body):
            return Abs(Ident(f"{name}{suffix}", code), relabel(body, suffix))
        case App(func, arg):
            return App(relabel(func, suffix), relabel(arg, suffix))


def test_lam_binds_by_depth():
    assert lam("x", lam("y", var("x"))) == Abs(Ident("x"), Abs(Ident("y"), Var(Ident("x", 2))))
    assert lam("x", lam("y", var("y"))) == Abs(Ident("x"), Abs(Ident("y"), Var(Ident("y", 1))))
    assert lam("x", var("y")) == Abs(Ident("x"), Var(Ident("y", 0)))


def test_inner_binder_shadows():
    term = lam("x", lam("x", var("x")))
    assert term.body == Abs(Ident("x"), Var(Ident("x", 1)))


def test_bind_only_touches_free_occurrences():
    body = App(var("x"), Var(Ident("x", 3)))
    assert bind(body, "x", 2) == App(Var(Ident("x", 2)), Var(Ident("x", 3)))


def test_app_is_left_associated():
    a, b, c = var("a"), var("b"), var("c")
    assert app(a, b, c) == App(App(a, b), c)
    assert app(a) == a
    assert a(b)(c) == app(a, b, c)
    with pytest.raises(ValueError):
        app()


def test_negative_code_is_rejected():
    with pytest.raises(ValueError):
        Var(Ident("x", -1))


def test_equality_is_label_sensitive():
    identity_x = lam("x", var("x"))
    identity_y = lam("y", var("y"))
    assert identity_x != identity_y
    assert purify(identity_x) == purify(identity_y)
    assert alpha_equivalent(identity_x, identity_y)
    assert not alpha_equivalent(identity_x, lam("x", lam("y", var("x"))))


def test_purify_merges_free_variables():
    assert purify(var("a")) == purify(var("b")) == Var(Ident(None, 0))


def test_free_names_in_order():
    term = app(var("x"), lam("y", app(var("y"), var("z"))), var("x"))
    assert list(free_names(term)) == ["x", "z", "x"]


def test_is_valid():
    assert is_valid(lam("x", var("x")))
    assert not is_valid(Var(Ident("x", 1)))
    assert is_valid(Var(Ident("x", 1)), depth=1)


def test_format_minimal_parentheses(y_combinator):
    assert format_term(y_combinator) == "λf. (λx. f (x x)) λx. f (x x)"
    assert str(app(lam("x", var("x")), var("y"))) == "(λx. x) y"
    assert str(app(var("f"), lam("x", var("x")), var("y"))) == "f (λx. x) y"
    assert str(app(var("x"), app(var("y"), var("z")))) == "x (y z)"
    assert str(app(var("f"), lam("x", var("x")))) == "f λx. x"


def test_format_indexed(y_combinator):
    assert format_term(lam("x", lam("y", var("x"))), indexed=True) == "λx. λy. x<2>"
    assert format_term(y_combinator, indexed=True) == "λf. (λx. f<2> (x<1> x<1>)) λx. f<2> (x<1> x<1>)"


def test_format_purified():
    pair = lam("x", lam("y", lam("f", app(var("f"), var("x"), var("y")))))
    assert format_purified(pair) == "λλλ[[1](3)](2)"
    assert str(purify(pair)) == "λλλ[[1](3)](2)"


def test_builder():
    succ = L("n", "f", "x")._("f").call(V("n").call("f").call("x")).build()
    assert str(succ) == "λn. λf. λx. f (n f x)"
    assert succ == lam("n", lam("f", lam("x", app(var("f"), app(var("n"), var("f"), var("x"))))))

    with pytest.raises(ValueError):
        L("x").build()


@given(terms())
def test_purify_ignores_labels(term):
    renamed = relabel(term)
    assert purify(renamed) == purify(term)
    assert alpha_equivalent(renamed, term)


@given(terms())
def test_generated_terms_are_valid(term):
    assert is_valid(term)


def test_binder_codes_are_ignored():
    identity = Abs(Ident("x", 3), Var(Ident("x", 1)))
    assert purify(identity) == purify(lam("y", var("y"))) == Abs(Ident(None), Var(Ident(None, 1)))
    assert alpha_equivalent(identity, lam("y", var("y")))


def test_deep_terms():
    body = var("x")
    for _ in range(3000):
        body = App(var("f"), body)
    numeral = lam("f", lam("x", body))
    assert is_valid(numeral)
    assert list(free_names(numeral)) == []
    assert list(free_names(body)) == ["f"] * 3000 + ["x"]

    assert format_term(numeral) == "λf. λx. " + "f (" * 2999 + "f x" + ")" * 2999
    assert format_purified(purify(numeral)) == "λλ" + "[2](" * 3000 + "1" + ")" * 3000
    assert str(purify(numeral)) == format_purified(numeral)

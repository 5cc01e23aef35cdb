import pytest

from lambdapad import ParseError, app, lam, parse_definition, parse_document, parse_term, var
from lambdapad.term import format_term


def test_parse_expression():
    s = r"\x .  (  x  x  )  (  x  x  )"
    assert parse_term(s) == lam("x", app(app(var("x"), var("x")), app(var("x"), var("x"))))
    assert str(parse_term(s)) == "λx. x x (x x)"


def test_lambda_signs(y_combinator):
    assert parse_term(r"\f. (\x. f (x x)) \x. f (x x)") == parse_term("λf. (λx. f (x x)) λx. f (x x)")
    assert format_term(y_combinator, indexed=True) == "λf. (λx. f<2> (x<1> x<1>)) λx. f<2> (x<1> x<1>)"


def test_application_associates_left():
    assert parse_term("a b c") == app(var("a"), var("b"), var("c"))
    assert parse_term("a (b c)") == app(var("a"), app(var("b"), var("c")))


def test_abstraction_ends_application():
    assert parse_term(r"f \x. x") == app(var("f"), lam("x", var("x")))
    assert parse_term(r"f \x. x y") == app(var("f"), lam("x", app(var("x"), var("y"))))


def test_shadowing():
    term = parse_term(r"\x. \x. x")
    assert term == lam("x", lam("x", var("x")))
    assert format_term(term, indexed=True) == "λx. λx. x<1>"


def test_unicode_names():
    assert parse_term("λ甲. 甲 乙") == lam("甲", app(var("甲"), var("乙")))


@pytest.mark.parametrize("text", [r"( x \x.", "", "x)", r"\. x", "a = b", "(x", "x / y"])
def test_malformed_expressions(text):
    with pytest.raises(ParseError):
        parse_term(text)


def test_parse_error_position():
    with pytest.raises(ParseError) as error:
        parse_term("x )")
    assert error.value.line == 1
    assert error.value.column == 3


def test_parse_definition():
    name, tt = parse_definition(r"tt    =   \x. \y. x")
    assert name == "tt"
    assert tt == lam("x", lam("y", var("x")))

    with pytest.raises(ParseError):
        parse_definition(r" = x.x")
    with pytest.raises(ParseError):
        parse_definition("   // nothing")


def test_parse_document(y_combinator):
    document = r"""
        // test parse_document

        // Y combinator
        Y = \f. (\x. f (x x) ) (\x. f (x x) )
        tt = \x. \y. x   // true
        // false
        ff = \x. \y. y// false
    """
    definitions = parse_document(document)
    assert list(definitions) == ["Y", "tt", "ff"]
    assert definitions["Y"] == y_combinator
    assert definitions["ff"] == lam("x", lam("y", var("y")))


def test_last_definition_wins():
    assert parse_document("a = x\nb = y\na = z") == {"a": var("z"), "b": var("y")}


def test_document_error_line():
    with pytest.raises(ParseError) as error:
        parse_document("tt = \\x. \\y. x\n\nff = (\\x. \\y. y")
    assert error.value.line == 3


def test_documented_examples(y_combinator):
    from lambdapad import parser

    expression, definition = [line.split("#")[0] for line in parser.__doc__.splitlines() if "#" in line]
    assert r"\x. f (x x)" in definition
    assert parse_term(expression) == y_combinator
    assert parse_definition(definition) == ("Y", y_combinator)

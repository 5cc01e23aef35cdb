import svg
from hypothesis import given

from conftest import terms
from lambdapad import (
    Abs,
    App,
    Snapshot,
    build_view,
    find_redexes,
    find_variables,
    from_numeral,
    node_table,
    parse_term,
    render,
)
from lambdapad.display import Interval, compute_height, compute_layout
from lambdapad.nodes import SCHEMA


def test_node_table():
    nodes = node_table(parse_term(r"\x. x y"))
    assert nodes.schema == SCHEMA
    assert nodes["id"].to_list() == [0, 1, 2, 3]
    assert nodes["kind"].to_list() == ["abstraction", "application", "variable", "variable"]
    assert nodes["name"].to_list() == ["x", None, "x", "y"]
    assert nodes["parent"].to_list() == [None, 0, 1, 1]
    assert nodes["ref"].to_list() == [None, None, 0, None]
    assert nodes["arg"].to_list() == [None, 3, None, None]
    assert nodes["code"].to_list() == [0, 0, 1, 0]
    assert nodes["alpha_id"].to_list() == [1, None, 1, 2]


def test_node_table_carries_view_ids():
    term = parse_term(r"(\x. x) y")
    view = build_view(term)
    nodes = node_table(term, view)
    assert nodes["beta_redex"].to_list() == [view.beta_redex, None, None, None]
    assert nodes["parentheses"].to_list() == [False, True, False, False]


def test_find_redexes():
    nodes = node_table(parse_term(r"(\x. x) ((\y. y) z)"))
    assert find_redexes(nodes).rows() == [(0, 5), (3, 4)]
    assert find_redexes(node_table(parse_term("f x"))).height == 0


def test_find_variables():
    term = parse_term(r"\x. x (\y. x y)")
    view = build_view(term)
    nodes = node_table(term, view)
    assert find_variables(nodes, view.alpha_id).to_list() == [2, 5]
    assert find_variables(nodes, 99).len() == 0


def size(term):
    match term:
        case Abs(_, body):
            return 1 + size(body)
        case App(func, arg):
            return 1 + size(func) + size(arg)
    return 1


@given(terms())
def test_node_table_shape(term):
    nodes = node_table(term)
    assert nodes.height == size(term)

    parent = dict(nodes.select("id", "parent").iter_rows())
    for node, kind, ref, arg in nodes.select("id", "kind", "ref", "arg").iter_rows():
        if kind != "variable":
            # the first child of an inner node is the next row
            assert parent[node + 1] == node
        if kind == "application":
            assert parent[arg] == node
        if ref is not None:
            assert nodes["kind"][ref] == "abstraction"

    x, y = compute_layout(nodes)
    assert set(x) == set(y) == set(range(nodes.height))


def test_interval():
    a = Interval(1, 2)
    assert a | Interval(0, 1) == Interval(0, 2)
    assert a | None == a
    assert a.shift(3) == Interval(4, 5)


def test_layout():
    nodes = node_table(parse_term(r"(\x. x) y"))
    x, y = compute_layout(nodes)
    assert set(x) == set(y) == {0, 1, 2, 3}
    # one column per variable
    assert x[2] != x[3]
    # the abstraction spans the variable it binds
    assert x[1].lo <= x[2].lo and x[2].hi <= x[1].hi
    assert compute_height(nodes) == 1


def test_render():
    term = parse_term(r"(\x. x) y")
    view = build_view(term)
    drawing = render(term, view)
    assert isinstance(drawing, svg.SVG)
    text = drawing.as_str()
    assert text.startswith("<svg")
    # the beta redex is stroked green
    assert 'stroke="green"' in text
    assert 'fill="green"' not in text

    highlighted = render(term, view, highlight=view.func.alpha_id).as_str()
    assert 'fill="green"' in highlighted


def test_snapshot_html():
    snapshot = Snapshot.of(parse_term(r"\f. \x. f (f x)"))
    html = snapshot._repr_html_()
    assert html.startswith("<div><svg")
    assert snapshot.nodes.height == 7


def test_deep_node_table():
    nodes = node_table(from_numeral(3000))
    assert nodes.height == 2 * 3000 + 3
    assert find_variables(nodes, 1).len() == 3000
    # the argument of each application is the next application
    applications = nodes.filter(kind="application")
    assert (applications["arg"] == applications["id"] + 2).all()

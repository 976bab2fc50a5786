import pytest

import symopl.mat as mat
from symopl.parsing.oplparser import OPLParser
from test_util import *


# Scripts
# ----------------------------------------------------------------------------------------------------------------------

DECLARATIONS = [
    "range I = 1..3",
    "int n = 4",
    "range N = 1..n",
    '{string} Cities = {"Rome", "Paris", "Oslo"}',
    "{int} Large = {i | i in N: i >= 2}",
    "tuple Arc { key int from; key int to; float weight; }",
    "{Arc} Arcs = {<1,2,7>, <2,3,4>, <1,3,9>}",
    "{Arc} Out[i in N] = {a | a in Arcs: a.from == i}",
    "{int} Heads = {a.to | a in Arcs}",
    "{int} Pairs = {i + j | i in I, j in I: i < j}",
    "{int} Supply = ...",
]


def build_state() -> mat.State:
    parser = OPLParser()
    for literal in DECLARATIONS:
        parser.parse_statement(literal)
    return parser.state


# Tests
# ----------------------------------------------------------------------------------------------------------------------


def test_resolve_fixed_domains():

    state = build_state()

    assert isinstance(state.get_domain("I"), mat.IndexSet)
    assert list(state.resolve_domain("I")) == [1, 2, 3]
    assert list(state.resolve_domain("Cities")) == ["Rome", "Paris", "Oslo"]
    assert list(state.resolve_domain("Supply")) == []


def test_domain_not_found():
    state = build_state()
    with pytest.raises(mat.DomainNotFoundError):
        state.resolve_domain("Unknown")


def test_domain_lookup_precedence():

    state = mat.State()

    # registries are filled directly, since declarations reject duplicate symbols
    state.index_sets["S"] = mat.IndexSet("S", 1, 2)
    state.primitive_sets["S"] = mat.PrimitiveSet("S", mat.INT_TYPE, [7, 8])
    assert list(state.resolve_domain("S")) == [7, 8]

    schema = mat.TupleSchema("Pair", [("a", mat.INT_TYPE)])
    state.tuple_sets["S"] = mat.TupleSet("S", schema, [[5]])
    assert list(state.resolve_domain("S")) == [schema.create_instance([5])]


def test_bound_range_cache_invalidation():

    state = build_state()

    assert isinstance(state.get_domain("N"), mat.BoundRange)
    assert list(state.resolve_domain("N")) == [1, 2, 3, 4]

    state.set_parameter_value("n", 2)
    assert list(state.resolve_domain("N")) == [1, 2]

    # dependent comprehensions are recomputed
    assert list(state.resolve_domain("Large")) == [2]


def test_non_integral_range_bound():

    state = build_state()

    parser = OPLParser(state)
    parser.parse_statement("float h = 2.5")
    parser.parse_statement("range H = 1..h")

    with pytest.raises(mat.TypeCoercionFailedError):
        state.resolve_domain("H")


def test_computed_sets():

    state = build_state()

    assert list(state.resolve_domain("Large")) == [2, 3, 4]
    assert list(state.resolve_domain("Heads")) == [2, 3]
    assert list(state.resolve_domain("Pairs")) == [3, 4, 5]


def test_outer_indexed_computed_set():

    state = build_state()

    with pytest.raises(mat.MissingOuterIndexError):
        state.resolve_domain("Out", mat.Environment())

    env = mat.Environment()
    with env.bind("i", 1):
        members = state.resolve_domain("Out", env)
    assert [a.get_key() for a in members] == [(1, 2), (1, 3)]
    assert env.get_depth() == 0

    members = state.resolve_domain("Out", outer_value=2)
    assert [a.get_key() for a in members] == [(2, 3)]

    assert len(state.resolve_domain("Out", outer_value=4)) == 0


def test_named_domains_ignore_caller_bindings():

    state = build_state()

    # an iterator that shadows the parameter bounding N
    env = mat.Environment()
    with env.bind("n", 1):
        assert list(state.resolve_domain("N", env)) == [1, 2, 3, 4]
        assert list(state.resolve_domain("Large", env)) == [2, 3, 4]
    assert list(state.resolve_domain("N")) == [1, 2, 3, 4]

    parser = OPLParser(state)
    parser.parse_statement("{int} Far[i in N] = {j | j in N: j > i + n - 4}")

    env = mat.Environment()
    with env.bind("i", 1), env.bind("n", 0):
        assert list(state.resolve_domain("Far", env)) == [2, 3, 4]


def test_named_range_in_shadowing_forall():

    script = """
    int n = 3;
    range R = 1..n;
    range K = 1..2;
    dvar float x[R];
    forall(n in K) c[n]: sum(r in R) x[r] <= n;
    d: sum(r in R) x[r] <= 10;
    """

    problem = build_problem(script, textual_summation=False)
    state = problem.state

    assert len(problem.equations) == 3
    for eq in problem.equations:
        assert check_coefficients(get_coefficient_values(eq, state), {"x1": 1, "x2": 1, "x3": 1})
    assert check_num_result(get_constant_value(problem.get_equation("c[2]"), state), 2)
    assert check_num_result(get_constant_value(problem.get_equation("d"), state), 10)


def test_outer_indexed_computed_set_as_iterator_domain():

    state = build_state()

    iterators = [mat.Iterator("i", "I"), mat.Iterator("a", "Out", domain_idx_node=mat.ParameterNode("i"))]
    combinations = mat.collect_bindings(state, mat.Environment(), iterators)

    assert [(i, a.get_key()) for i, a in combinations] == [(1, (1, 2)), (1, (1, 3)), (2, (2, 3))]


def test_computed_set_cache_invalidation():

    state = build_state()
    assert len(state.resolve_domain("Out", outer_value=1)) == 2

    state.set_tuple_instances("Arcs", [(1, 2, 7), (3, 1, 2)])
    assert len(state.resolve_domain("Out", outer_value=1)) == 1
    assert list(state.resolve_domain("Heads")) == [2, 1]


def test_external_set_loading():

    state = build_state()

    state.set_set_elements("Supply", [3, 1.0, 3])
    assert list(state.resolve_domain("Supply")) == [3, 1]

    with pytest.raises(mat.TypeCoercionFailedError):
        state.set_set_elements("Supply", [1.5])

    with pytest.raises(mat.DomainNotFoundError):
        state.set_set_elements("Arcs", [1])


def test_set_element_coercion():

    parser = OPLParser()

    with pytest.raises(mat.TypeCoercionFailedError) as e:
        parser.parse_statement("{int} Bad = {1, 2.5}")

    assert e.value.statement == "{int} Bad = {1, 2.5}"

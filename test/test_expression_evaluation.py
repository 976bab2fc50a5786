import numpy as np
import pytest

import symopl.mat as mat
from symopl.handlers.formulator import simplify
from symopl.parsing.oplparser import OPLParser
from test_util import *


# Scripts
# ----------------------------------------------------------------------------------------------------------------------

DECLARATIONS = [
    "range I = 1..3",
    "float c[I] = [10, 20, 30]",
    "float p = 2.5",
    "float e[I] = ...",
    "int q[i in I] = 2 * i",
    'string s = "abc"',
    "dvar float x[I]",
    "dvar float z",
]

SIMPLIFICATION_LITERALS = [
    "0 + p * 1 - 0",
    "x[1] * 0 + 3 * 2",
    "c[2] * x[1] - 1 * (x[2] + 0)",
    "-(-(x[3])) + 0 * z",
    "(1 + 2) * (z - 0) / 1",
    "sum(i in I) (c[i] * 1) * x[i] + 0",
    "2 * (p + x[1]) - (c[1] - c[1])",
    "(1 < 2) * z + (1 == 2) * x[2]",
]


def build_parser() -> OPLParser:
    parser = OPLParser()
    for literal in DECLARATIONS:
        parser.parse_statement(literal)
    return parser


# Tests
# ----------------------------------------------------------------------------------------------------------------------


def test_arithmetic_evaluation():

    parser = build_parser()
    state = parser.state

    assert check_num_result(parser.parse_expression("c[2] * p + 1").evaluate(state), 51)
    assert check_num_result(parser.parse_expression("-c[1] / 4 - (2 - 3)").evaluate(state), -1.5)
    assert check_num_result(parser.parse_expression("sum(i in I) c[i] * i").evaluate(state), 140)
    assert check_num_result(parser.parse_expression("q[3] + maxint - maxint").evaluate(state), 6)


def test_division_follows_floating_point_semantics():

    parser = build_parser()
    state = parser.state

    assert np.isposinf(parser.parse_expression("1 / 0").evaluate(state))
    assert np.isneginf(parser.parse_expression("-1 / 0").evaluate(state))
    assert np.isnan(parser.parse_expression("0 / 0").evaluate(state))


def test_logical_evaluation():

    parser = build_parser()
    state = parser.state

    assert parser.parse_expression("1 == 1 + 1e-12").evaluate(state) == 1.0
    assert parser.parse_expression("1 != 1 + 1e-12").evaluate(state) == 0.0
    assert parser.parse_expression("2 > 3 || c[1] <= 10").evaluate(state) == 1.0
    assert parser.parse_expression("!(p >= 2) && true").evaluate(state) == 0.0
    assert parser.parse_expression('s == "abc"').evaluate(state) == 1.0
    assert parser.parse_expression('s < "abd"').evaluate(state) == 1.0


def test_boolean_tolerance():
    assert mat.is_true(1.0 - 1e-11)
    assert not mat.is_true(1.0 - 1e-9)
    assert mat.is_zero(-1e-11)


def test_evaluation_failures():

    parser = build_parser()
    state = parser.state

    with pytest.raises(mat.NonScalarParameterError):
        parser.parse_expression("c + 1").evaluate(state)

    with pytest.raises(mat.DimensionMismatchError):
        parser.parse_expression("c[1][2]").evaluate(state)

    with pytest.raises(mat.MissingIndexedValueError):
        parser.parse_expression("e[1]").evaluate(state)

    with pytest.raises(mat.MissingIndexedValueError):
        parser.parse_expression("c[4]").evaluate(state)

    with pytest.raises(mat.UnboundNameError):
        parser.parse_expression("unknown + 1").evaluate(state)

    with pytest.raises(mat.UnboundNameError):
        parser.parse_expression("z + 1").evaluate(state)

    with pytest.raises(mat.TypeCoercionFailedError):
        parser.parse_expression('"abc" + 1').evaluate(state)

    with pytest.raises(mat.TypeCoercionFailedError):
        parser.parse_expression("s * 2").evaluate(state)


def test_external_value_assignment():

    parser = build_parser()
    state = parser.state

    state.set_parameter_values("e", {1: 5, (2,): 6.5, 3.0: 7})
    assert check_num_result(parser.parse_expression("e[1] + e[2] + e[3]").evaluate(state), 18.5)

    with pytest.raises(mat.DimensionMismatchError):
        state.set_parameter_value("e", 1, idx=(1, 2))

    with pytest.raises(mat.NonScalarParameterError):
        state.set_parameter_value("e", 1)

    with pytest.raises(mat.TypeCoercionFailedError):
        state.set_parameter_value("p", "abc")


def test_variable_evaluation():

    parser = build_parser()
    state = parser.state

    env = mat.Environment(var_values={"x1": 1, "x2": 2, "x3": 3, "z": -1})
    node = parser.parse_expression("sum(i in I) c[i] * x[i] - z")

    assert check_num_result(node.evaluate(state, env), 141)


def test_simplification_rules():

    parser = build_parser()
    state = parser.state

    assert check_str_result(simplify(parser.parse_expression("0 + p * 1 - 0")), "p")
    assert check_str_result(simplify(parser.parse_expression("x[1] * 0 + 3 * 2")), "6")
    assert check_str_result(simplify(parser.parse_expression("0 - z")), "-z")
    assert check_str_result(simplify(parser.parse_expression("1 * z / 1")), "z")
    assert check_str_result(simplify(parser.parse_expression("-(-z)")), "z")

    # parameters are only folded when a state is supplied
    assert check_str_result(simplify(parser.parse_expression("c[2] * x[1]")), "c[2] * x[1]")
    assert check_str_result(simplify(parser.parse_expression("c[2] * x[1]"), state), "20 * x[1]")
    assert check_str_result(simplify(parser.parse_expression("e[2] * x[1]"), state), "e[2] * x[1]")


def test_simplification_idempotence():

    parser = build_parser()
    state = parser.state

    for literal in SIMPLIFICATION_LITERALS:
        node = parser.parse_expression(literal)
        for spl_state in (None, state):
            spl_node = simplify(node, spl_state)
            assert check_str_result(simplify(spl_node, spl_state), spl_node)


def test_simplification_preserves_value():

    parser = build_parser()
    state = parser.state

    rng = np.random.RandomState(0)
    var_names = ["x1", "x2", "x3", "z"]

    for literal in SIMPLIFICATION_LITERALS:

        node = parser.parse_expression(literal)
        spl_nodes = [simplify(node), simplify(node, state)]

        for _ in range(5):
            env = mat.Environment(var_values=dict(zip(var_names, rng.uniform(-10, 10, len(var_names)))))
            value = node.evaluate(state, env)
            for spl_node in spl_nodes:
                assert check_num_result(spl_node.evaluate(state, env), value)


def test_substitution_leaves_tree_unchanged():

    parser = build_parser()
    state = parser.state

    node = parser.parse_expression("sum(i in I) c[i] * x[i]")
    literal = str(node)

    flat_node = node.substitute(state, mat.Environment())

    assert check_str_result(flat_node, "c[1] * x1 + c[2] * x2 + c[3] * x3")
    assert check_str_result(node, literal)

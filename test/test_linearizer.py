import numpy as np
import pytest

import symopl.mat as mat
from symopl.handlers.formulator import formulate_equation
from symopl.handlers.linearizer import Linearizer
from symopl.parsing.oplparser import OPLParser
from test_util import *


# Scripts
# ----------------------------------------------------------------------------------------------------------------------

DECLARATIONS = [
    "range I = 1..3",
    "float c[I] = [2, -1, 0]",
    "float p = 4",
    "float u = ...",
    "dvar float x[I]",
    "dvar float y[I]",
    "dvar float z",
    "dexpr float total = sum(i in I) c[i] * x[i]",
    "dexpr float twice = 2 * total",
    "dexpr float k = p * 3",
    "dexpr float dx[i in I] = x[i] + c[i]",
]

AFFINE_LITERALS = [
    "3 * x[1] - 2 * (x[2] - x[3]) + 5",
    "-(x[1] + 2) / 4 + y[2] * p",
    "(x[1] - x[1]) + z / 2 - p",
    "sum(i in I) c[i] * x[i] - 1",
    "twice + dx[2] - k",
    "sum(i in I) (y[i] - dx[i]) / (p - 2)",
    "-(-(z)) - (1 - y[3]) * 3",
]

VAR_NAMES = ["x1", "x2", "x3", "y1", "y2", "y3", "z"]


def build_parser() -> OPLParser:
    parser = OPLParser()
    for literal in DECLARATIONS:
        parser.parse_statement(literal)
    return parser


def linearize(parser: OPLParser, literal: str, env: mat.Environment = None):
    return Linearizer(parser.state).linearize(parser.parse_expression(literal), env)


# Tests
# ----------------------------------------------------------------------------------------------------------------------


def test_linear_form_reconstruction():

    parser = build_parser()
    state = parser.state
    rng = np.random.RandomState(1)

    for literal in AFFINE_LITERALS:

        node = parser.parse_expression(literal)
        form = Linearizer(state).linearize(node)

        for _ in range(10):
            var_values = dict(zip(VAR_NAMES, rng.uniform(-5, 5, len(VAR_NAMES))))
            expected_value = node.evaluate(state, mat.Environment(var_values=var_values))
            assert check_num_result(form.evaluate(state, var_values), expected_value)


def test_coefficient_extraction():

    parser = build_parser()
    state = parser.state

    form = linearize(parser, "3 * x[1] - 2 * (x[2] - x[3]) + 5")
    coefficients = {v: c.evaluate(state) for v, c in form.coefficients.items()}
    assert check_coefficients(coefficients, {"x1": 3, "x2": -2, "x3": 2})
    assert check_num_result(form.constant.evaluate(state), 5)

    form = linearize(parser, "twice + dx[2] - k")
    coefficients = {v: c.evaluate(state) for v, c in form.coefficients.items()}
    assert check_coefficients(coefficients, {"x1": 4, "x2": -1})
    assert check_num_result(form.constant.evaluate(state), -13)

    assert form.variable_map["x2"] == ("x", (2,))


def test_constant_multiplier_of_linear_subexpression():

    parser = build_parser()

    form = linearize(parser, "2 * (x[1] + 3) - (z - 1) * p")
    assert check_num_result(form.coefficients["x1"].evaluate(parser.state), 2)
    assert check_num_result(form.coefficients["z"].evaluate(parser.state), -4)
    assert check_num_result(form.constant.evaluate(parser.state), 10)


def test_zero_coefficients_removed():

    parser = build_parser()

    form = linearize(parser, "x[1] - x[1] + z")
    assert list(form.coefficients.keys()) == ["z"]

    # c[3] is 0
    form = linearize(parser, "sum(i in I) c[i] * x[i]")
    assert list(form.coefficients.keys()) == ["x1", "x2"]
    assert "x3" not in form.variable_map

    form = linearize(parser, "1e-12 * z + 1")
    assert len(form.coefficients) == 0


def test_symbolic_coefficient_of_external_parameter():

    parser = build_parser()
    state = parser.state

    form = linearize(parser, "u * x[1] + u")
    assert check_str_result(form.coefficients["x1"], "u")

    state.set_parameter_value("u", 1.5)
    assert check_num_result(form.coefficients["x1"].evaluate(state), 1.5)
    assert check_num_result(form.constant.evaluate(state), 1.5)


def test_linearization_under_bindings():

    parser = build_parser()
    env = mat.Environment()

    with env.bind("i", 3):
        form = linearize(parser, "dx[i] + c[i] * y[i]", env)
        assert env.get_bindings() == [("i", 3)]

    assert list(form.coefficients.keys()) == ["x3"]
    assert check_num_result(form.constant.evaluate(parser.state), 0)
    assert env.get_depth() == 0


def test_product_of_variables():

    parser = build_parser()

    with pytest.raises(mat.NonLinearTermError):
        linearize(parser, "x[1] * y[1]")

    with pytest.raises(mat.NonLinearTermError):
        linearize(parser, "(x[1] + 1) * (total - 2)")

    with pytest.raises(mat.NonLinearTermError):
        linearize(parser, "1 / x[1]")

    with pytest.raises(mat.NonLinearTermError):
        linearize(parser, "x[1] / (z + 1)")


def test_non_arithmetic_terms():

    parser = build_parser()

    with pytest.raises(mat.NonLinearTermError):
        linearize(parser, "(x[1] <= 2) + z")

    with pytest.raises(mat.TypeCoercionFailedError):
        linearize(parser, '"abc" + x[1]')


def test_cyclic_decision_expressions():

    parser = build_parser()
    state = parser.state

    state.add_dexpr(mat.DecisionExpression("a", mat.FLOAT_TYPE, mat.DecisionExpressionNode("b")))
    state.add_dexpr(
        mat.DecisionExpression(
            "b",
            mat.FLOAT_TYPE,
            mat.BinaryArithmeticOperationNode.addition(mat.DecisionExpressionNode("a"), mat.VariableNode("z")),
        )
    )

    linearizer = Linearizer(state)
    env = mat.Environment()

    with pytest.raises(mat.CyclicDecisionExpressionError):
        linearizer.linearize(mat.DecisionExpressionNode("a"), env)

    with pytest.raises(mat.CyclicDecisionExpressionError):
        mat.DecisionExpressionNode("b").evaluate(state, mat.Environment(var_values={"z": 1}))

    assert env.active_dexprs == []


def test_equation_formulation():

    parser = build_parser()
    state = parser.state
    linearizer = Linearizer(state)

    eq, variable_map = formulate_equation(
        linearizer,
        parser.parse_expression("x[1] + 2"),
        mat.LESS_EQUAL_INEQUALITY_OPERATOR,
        parser.parse_expression("3 * x[2] - 1"),
        label="c1",
    )

    assert check_coefficients(get_coefficient_values(eq, state), {"x1": 1, "x2": -3})
    assert check_num_result(get_constant_value(eq, state), -3)
    assert eq.get_full_identifier() == "c1"
    assert set(variable_map.keys()) == {"x1", "x2"}

    assert eq.is_satisfied(state, {"x1": 0, "x2": 1})
    assert not eq.is_satisfied(state, {"x1": 0, "x2": 0})

    with pytest.raises(mat.ParsingError):
        formulate_equation(linearizer, mat.VariableNode("z"), "=", mat.NumericNode(1))

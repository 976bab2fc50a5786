import pytest

import symopl
import symopl.mat as mat
import symopl.prob.statement as stm
from test_util import *


# Scripts
# ----------------------------------------------------------------------------------------------------------------------

SCENARIO_A_SCRIPT = """
range I = 1..3;
float cost[I] = {10, 20, 30};
dvar float x[I];
forall(i in I) cost[i] * x[i] <= 100;
"""

SCENARIO_B_SCRIPT = """
range I = 1..3;
dvar float x[I];
sum(i in I) x[i] == 1;
"""

SCENARIO_C_SCRIPT = """
range I = 1..3;
dvar float x[I];
dvar float y[I];
x[1] * y[1] <= 5;
"""

SCENARIO_E_SCRIPT = """
range I = 1..2;
range J = 1..2;
dvar float x[I][J];
forall(i in I, j in J: i != j) x[i][j] <= 1;
"""

TRANSPORT_SCRIPT = """
{int} S = ...;
range D = 1..3;
float c[D] = ...;
float cap = ...;
dvar float+ x[S][D];

minimize cost: sum(s in S, d in D) c[d] * x[s][d];

subject to {
    forall(s in S)
        supply[s]: sum(d in D) x[s][d] <= cap;
    forall(d in D)
        demand[d]: sum(s in S) x[s][d] >= 1;
}
"""

LABEL_SCRIPT = """
range I = 1..3;
range J = 1..2;
float u[I] = [4, 5, 6];
dvar float+ x[I];
dvar float z[I][J];
dexpr float slack[i in I] = u[i] - x[i];

maximize total: sum(i in I) x[i];

subject to {
    lim[i in I]: slack[i] >= 0;
    forall(i in I, j in J: i <= 2) grid[i][j]: z[i][j] <= i + j;
}
"""


# Scenarios
# ----------------------------------------------------------------------------------------------------------------------


def test_indexed_constraint_expansion():

    problem = build_problem(SCENARIO_A_SCRIPT)
    state = problem.state

    assert len(problem.equations) == 3

    for eq, (var_name, value) in zip(problem.equations, [("x1", 10), ("x2", 20), ("x3", 30)]):
        assert eq.operator == mat.LESS_EQUAL_INEQUALITY_OPERATOR
        assert check_coefficients(get_coefficient_values(eq, state), {var_name: value})
        assert check_num_result(get_constant_value(eq, state), 100)


def test_summation_expansion():

    for textual_summation in (True, False):

        problem = build_problem(SCENARIO_B_SCRIPT, textual_summation=textual_summation)
        state = problem.state

        assert len(problem.equations) == 1
        eq = problem.equations[0]
        assert eq.operator == mat.EQUALITY_OPERATOR
        assert check_coefficients(get_coefficient_values(eq, state), {"x1": 1, "x2": 1, "x3": 1})
        assert check_num_result(get_constant_value(eq, state), 1)


def test_product_of_variables_fails():

    with pytest.raises(mat.NonLinearTermError) as e:
        build_problem(SCENARIO_C_SCRIPT)

    assert e.value.statement == "x[1] * y[1] <= 5"


def test_filtered_nested_forall():

    problem = build_problem(SCENARIO_E_SCRIPT)
    state = problem.state

    assert len(problem.equations) == 2
    assert check_coefficients(get_coefficient_values(problem.equations[0], state), {"x1_2": 1})
    assert check_coefficients(get_coefficient_values(problem.equations[1], state), {"x2_1": 1})


def test_expansion_error_context():

    script = SCENARIO_A_SCRIPT + "forall(i in I) x[i][i] <= 1;"

    with pytest.raises(mat.DimensionMismatchError) as e:
        build_problem(script)

    assert e.value.bindings == [("i", 1)]
    assert e.value.statement.startswith("forall")
    assert "i=1" in str(e.value)


# Data Loading
# ----------------------------------------------------------------------------------------------------------------------


def test_load_data():

    problem = build_problem(TRANSPORT_SCRIPT, can_build=False)
    assert not problem.is_built

    symopl.load_data(problem, {"S": [4, 5], "c": {1: 1, 2: 2, 3: 3}, "cap": 10})
    state = problem.state

    assert problem.is_built
    assert len(problem.equations) == 5
    assert len(problem.get_equations_by_base_name("supply")) == 2
    assert len(problem.get_equations_by_base_name("demand")) == 3

    assert check_coefficients(
        get_coefficient_values(problem.objective, state),
        {"x4_1": 1, "x4_2": 2, "x4_3": 3, "x5_1": 1, "x5_2": 2, "x5_3": 3},
    )
    assert problem.get_variable_names()[:3] == ["x4_1", "x4_2", "x4_3"]

    eq = problem.get_equation("supply[5]")
    assert check_coefficients(get_coefficient_values(eq, state), {"x5_1": 1, "x5_2": 1, "x5_3": 1})
    assert check_num_result(get_constant_value(eq, state), 10)

    symopl.load_data(problem, {"cap": 5})
    assert check_num_result(get_constant_value(problem.get_equation("supply[5]"), state), 5)


def test_load_data_failures():

    problem = build_problem(TRANSPORT_SCRIPT, can_build=False)

    with pytest.raises(mat.UnboundNameError):
        symopl.load_data(problem, {"unknown": 1})

    with pytest.raises(mat.TypeCoercionFailedError):
        symopl.load_data(problem, {"S": [1.5]}, can_build=False)

    # coefficients of unassigned parameters remain symbolic until evaluated
    symopl.load_data(problem, {"S": [1], "cap": 1})
    assert len(problem.equations) == 4
    with pytest.raises(mat.MissingIndexedValueError):
        problem.objective.evaluate(problem.state)


# Model Structure
# ----------------------------------------------------------------------------------------------------------------------


def test_single_objective():
    with pytest.raises(mat.DeclarationError):
        build_problem(SCENARIO_B_SCRIPT + "minimize x[1]; maximize x[2];")


def test_variable_name_collision():

    script = """
    range I = 1..2;
    dvar float x[I];
    dvar float x1;
    c: x[2] + x1 <= 1;
    d: x[1] <= 1;
    """

    problem = build_problem(script, can_build=False)

    with pytest.raises(mat.DeclarationError) as e:
        problem.build()

    assert e.value.statement == "d: x[1] <= 1"
    assert not problem.is_built


def test_duplicate_labels():
    script = SCENARIO_B_SCRIPT + "c: x[1] <= 1; c: x[2] <= 1;"
    with pytest.warns(UserWarning):
        build_problem(script)


def test_equation_labels():

    problem = build_problem(LABEL_SCRIPT)
    state = problem.state

    assert len(problem.equations) == 7

    lim_equations = problem.get_equations_by_base_name("lim")
    assert [eq.get_full_identifier() for eq in lim_equations] == ["lim[1]", "lim[2]", "lim[3]"]
    assert [eq.index for eq in lim_equations] == [1, 2, 3]

    eq = problem.get_equation("lim[2]")
    assert eq.operator == mat.GREATER_EQUAL_INEQUALITY_OPERATOR
    assert check_coefficients(get_coefficient_values(eq, state), {"x2": -1})
    assert check_num_result(get_constant_value(eq, state), -5)

    eq = problem.get_equation("grid[2][1]")
    assert eq.base_name == "grid"
    assert (eq.index, eq.second_index) == (2, 1)
    assert check_coefficients(get_coefficient_values(eq, state), {"z2_1": 1})
    assert check_num_result(get_constant_value(eq, state), 3)

    assert problem.get_equation("grid[3][1]") is None
    assert problem.objective.is_maximization()
    assert problem.objective.name == "total"


def test_model_statements():

    problem = build_problem(LABEL_SCRIPT, can_build=False)

    model_statements = problem.get_model_statements()
    assert len(model_statements) == 3
    assert isinstance(problem.get_objective_statement(), stm.ObjectiveStatement)
    assert all([isinstance(s, stm.ForallStatement) for s in model_statements[1:]])

    assert "Model: not built" in problem.generate_report()

    problem.build()
    report = problem.generate_report()
    assert "Equations: 7" in report
    assert "Problem: test" in report


def test_read_from_file(tmp_path):

    file_path = tmp_path / "model.mod"
    file_path.write_text(SCENARIO_B_SCRIPT)

    problem = symopl.read_opl(file_name="model.mod", working_dir_path=str(tmp_path))

    assert problem.symbol == "model"
    assert len(problem.equations) == 1


def test_read_without_input():
    with pytest.raises(ValueError):
        symopl.read_opl()

import numpy as np
import pytest

import symopl
import symopl.mat as mat
from symopl.writing.matrixwriter import get_residuals, is_feasible
from test_util import *


# Scripts
# ----------------------------------------------------------------------------------------------------------------------

SCRIPT = """
range I = 1..2;
float c[I] = [3, 5];
dvar float+ x[I];
dvar int n in 0..10;
dvar boolean b;
dvar float z;

maximize profit: sum(i in I) c[i] * x[i] + 2 * n - b + 4;

subject to {
    cap: x[1] + x[2] <= 8;
    link: n - 2 * b >= 1;
    balance: x[1] - z == 0;
}
"""


def get_mps_lines(problem: symopl.Problem, **kwargs):
    return [line.split() for line in symopl.to_mps(problem, **kwargs).splitlines()]


# MPS
# ----------------------------------------------------------------------------------------------------------------------


def test_mps_sections():

    lines = get_mps_lines(build_problem(SCRIPT))

    assert lines[0] == ["NAME", "test"]
    assert lines[1:6] == [["ROWS"], ["N", "profit"], ["L", "cap"], ["G", "link"], ["E", "balance"]]
    assert lines[6] == ["COLUMNS"]
    assert lines[-1] == ["ENDATA"]

    section_names = [line[0] for line in lines if len(line) == 1]
    assert section_names == ["ROWS", "COLUMNS", "RHS", "BOUNDS", "ENDATA"]


def test_mps_columns():

    lines = get_mps_lines(build_problem(SCRIPT))
    columns = lines[lines.index(["COLUMNS"]) + 1:lines.index(["RHS"])]

    # the objective of a maximization problem is negated
    assert ["x1", "profit", "-3"] in columns
    assert ["x1", "cap", "1"] in columns
    assert ["x1", "balance", "1"] in columns
    assert ["x2", "profit", "-5"] in columns
    assert ["n", "link", "1"] in columns
    assert ["b", "profit", "1"] in columns
    assert ["b", "link", "-2"] in columns
    assert ["z", "balance", "-1"] in columns

    # integer columns are enclosed by markers
    markers = [i for i, line in enumerate(columns) if line[1] == "'MARKER'"]
    assert len(markers) == 2
    assert columns[markers[0]][2] == "'INTORG'"
    assert columns[markers[1]][2] == "'INTEND'"
    assert set([line[0] for line in columns[markers[0] + 1:markers[1]]]) == {"n", "b"}


def test_mps_rhs_and_bounds():

    lines = get_mps_lines(build_problem(SCRIPT))

    rhs = lines[lines.index(["RHS"]) + 1:lines.index(["BOUNDS"])]
    assert rhs == [["RHS1", "profit", "4"], ["RHS1", "cap", "8"], ["RHS1", "link", "1"]]

    bounds = lines[lines.index(["BOUNDS"]) + 1:lines.index(["ENDATA"])]
    assert bounds == [
        ["PL", "BOUND1", "x1"],
        ["PL", "BOUND1", "x2"],
        ["UP", "BOUND1", "n", "10"],
        ["BV", "BOUND1", "b"],
        ["FR", "BOUND1", "z"],
    ]


def test_mps_file(tmp_path):

    problem = build_problem(SCRIPT)
    literal = symopl.to_mps(problem, file_name="model.mps", dir_path=str(tmp_path))

    assert (tmp_path / "model.mps").read_text() == literal


def test_writers_require_built_problem():

    problem = build_problem(SCRIPT, can_build=False)

    with pytest.raises(ValueError):
        symopl.to_mps(problem)

    with pytest.raises(ValueError):
        symopl.to_matrix_form(problem)


# Matrix Form
# ----------------------------------------------------------------------------------------------------------------------


def test_matrix_form():

    mf = symopl.to_matrix_form(build_problem(SCRIPT))

    assert mf.get_shape() == (3, 5)
    assert mf.var_names == ["x1", "x2", "n", "b", "z"]
    assert mf.row_names == ["cap", "link", "balance"]
    assert mf.senses == [
        mat.LESS_EQUAL_INEQUALITY_OPERATOR,
        mat.GREATER_EQUAL_INEQUALITY_OPERATOR,
        mat.EQUALITY_OPERATOR,
    ]
    assert mf.get_column_index("b") == 3

    assert np.allclose(mf.a, [[1, 1, 0, 0, 0], [0, 0, 1, -2, 0], [1, 0, 0, 0, -1]])
    assert np.allclose(mf.b, [8, 1, 0])
    assert np.allclose(mf.c, [3, 5, 2, -1, 0])
    assert check_num_result(mf.c0, 4)
    assert mf.is_maximization

    assert np.array_equal(mf.lb, [0, 0, 0, 0, -np.inf])
    assert np.array_equal(mf.ub, [np.inf, np.inf, 10, 1, np.inf])


def test_feasibility():

    mf = symopl.to_matrix_form(build_problem(SCRIPT))

    x = np.array([1, 2, 3, 1, 1], dtype=float)
    assert np.allclose(get_residuals(mf, x), [-5, 0, 0])
    assert is_feasible(mf, x)

    x[4] = 0
    assert not is_feasible(mf, x)

    # bounds
    x = np.array([1, 2, 11, 1, 1], dtype=float)
    assert not is_feasible(mf, x)

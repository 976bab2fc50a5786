from typing import List

import numpy as np

import symopl.mat as mat
from symopl.prob.problem import Problem


class MatrixForm:
    """
    Dense matrix form of a linear model: min or max c'x + c0 subject to A x (senses) b, lb <= x <= ub.
    """

    def __init__(self,
                 a: np.ndarray,  # (m, n)
                 b: np.ndarray,  # (m)
                 c: np.ndarray,  # (n)
                 c0: float,
                 senses: List[str],
                 lb: np.ndarray,  # (n)
                 ub: np.ndarray,  # (n)
                 var_names: List[str],
                 row_names: List[str],
                 is_maximization: bool = False):
        self.a: np.ndarray = a
        self.b: np.ndarray = b
        self.c: np.ndarray = c
        self.c0: float = c0
        self.senses: List[str] = senses
        self.lb: np.ndarray = lb
        self.ub: np.ndarray = ub
        self.var_names: List[str] = var_names
        self.row_names: List[str] = row_names
        self.is_maximization: bool = is_maximization

    def get_shape(self):
        return self.a.shape

    def get_column_index(self, var_name: str) -> int:
        return self.var_names.index(var_name)


def to_matrix_form(problem: Problem) -> MatrixForm:
    """
    Evaluate the built model of a problem into dense numeric arrays.

    Columns follow the order in which variables first appear in the model. Variables that appear in no equation and
    in no objective have no column.
    :param problem: built problem
    :return: matrix form of the model
    """

    if not problem.is_built:
        raise ValueError("Matrix writer requires a built problem")

    state = problem.state

    var_names = problem.get_variable_names()
    col_indices = {v: j for j, v in enumerate(var_names)}

    m = len(problem.equations)
    n = len(var_names)

    a = np.zeros(shape=(m, n), dtype=float)
    b = np.zeros(shape=(m,), dtype=float)
    c = np.zeros(shape=(n,), dtype=float)
    c0 = 0.0

    senses = []
    row_names = []

    for i, eq in enumerate(problem.equations):
        coeffs, constant = eq.evaluate(state)
        for var_name, coeff in coeffs.items():
            a[i, col_indices[var_name]] = coeff
        b[i] = constant
        senses.append(eq.operator)
        row_names.append(eq.get_full_identifier())

    is_maximization = False
    if problem.objective is not None:
        obj_coeffs, c0 = problem.objective.evaluate(state)
        for var_name, coeff in obj_coeffs.items():
            c[col_indices[var_name]] = coeff
        is_maximization = problem.objective.is_maximization()

    # bounds
    lb = np.full(shape=(n,), fill_value=-np.inf)
    ub = np.full(shape=(n,), fill_value=np.inf)
    for j, var_name in enumerate(var_names):
        var = problem.get_variable_declaration(var_name)
        if var is not None:
            lb[j], ub[j] = var.get_bounds(state)

    return MatrixForm(
        a=a,
        b=b,
        c=c,
        c0=float(c0),
        senses=senses,
        lb=lb,
        ub=ub,
        var_names=var_names,
        row_names=row_names,
        is_maximization=is_maximization,
    )


def get_residuals(matrix_form: MatrixForm, x: np.ndarray) -> np.ndarray:
    """
    Compute A x - b for a vector of variable values.
    """
    return matrix_form.a.dot(x) - matrix_form.b


def is_feasible(matrix_form: MatrixForm, x: np.ndarray) -> bool:
    """
    Check whether a vector of variable values satisfies every row and every bound of a matrix form.
    """

    residuals = get_residuals(matrix_form, x)

    for r, sense in zip(residuals, matrix_form.senses):
        if sense == mat.EQUALITY_OPERATOR and abs(r) >= mat.EPSILON:
            return False
        elif sense == mat.LESS_EQUAL_INEQUALITY_OPERATOR and r > mat.EPSILON:
            return False
        elif sense == mat.LESS_INEQUALITY_OPERATOR and r >= -mat.EPSILON:
            return False
        elif sense == mat.GREATER_EQUAL_INEQUALITY_OPERATOR and r < -mat.EPSILON:
            return False
        elif sense == mat.GREATER_INEQUALITY_OPERATOR and r <= mat.EPSILON:
            return False

    if np.any(x < matrix_form.lb - mat.EPSILON) or np.any(x > matrix_form.ub + mat.EPSILON):
        return False

    return True

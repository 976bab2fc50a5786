import re
from typing import List

import numpy as np

import symopl.mat as mat
from symopl.prob.problem import Problem
import symopl.util.util as util


MAX_NAME_LENGTH = 24

ROW_TYPES = {
    mat.LESS_EQUAL_INEQUALITY_OPERATOR: "L",
    mat.LESS_INEQUALITY_OPERATOR: "L",
    mat.GREATER_EQUAL_INEQUALITY_OPERATOR: "G",
    mat.GREATER_INEQUALITY_OPERATOR: "G",
    mat.EQUALITY_OPERATOR: "E",
}


def to_mps(problem: Problem, file_name: str = None, dir_path: str = None) -> str:
    """
    Write the built model of a problem in free MPS format.

    Strict inequalities are written as non-strict ones. The objective of a maximization problem is negated, since MPS
    models are minimized.
    :param problem: built problem
    :param file_name: name of the output file; nothing is written if None
    :param dir_path: directory of the output file
    :return: literal of the MPS model
    """

    if not problem.is_built:
        raise ValueError("MPS writer requires a built problem")
    if problem.objective is None:
        raise ValueError("MPS writer requires a problem with an objective")

    state = problem.state
    obj = problem.objective

    obj_name = __sanitize_name(obj.name if obj.name is not None else "OBJ")
    row_names = __generate_row_names(problem.equations, {obj_name})

    var_names = problem.get_variable_names()
    col_names = __generate_unique_names(var_names, set())

    obj_coeffs, obj_const = obj.evaluate(state)
    sign = -1 if obj.is_maximization() else 1

    eq_values = [eq.evaluate(state) for eq in problem.equations]

    lines = ["NAME          {0}".format(__sanitize_name(problem.symbol))]

    # ROWS
    lines.append("ROWS")
    lines.append(" N  {0}".format(obj_name))
    for eq, row_name in zip(problem.equations, row_names):
        lines.append(" {0}  {1}".format(ROW_TYPES[eq.operator], row_name))

    # COLUMNS
    lines.append("COLUMNS")
    is_integer_block = False
    marker_count = 0
    for var_name, col_name in zip(var_names, col_names):

        var = problem.get_variable_declaration(var_name)
        is_integer = var is not None and var.is_integer()

        if is_integer != is_integer_block:
            marker = "INTORG" if is_integer else "INTEND"
            lines.append("    MARKER{0}      'MARKER'      '{1}'".format(marker_count, marker))
            marker_count += 1
            is_integer_block = is_integer

        if var_name in obj_coeffs and not mat.is_zero(obj_coeffs[var_name]):
            lines.append(__format_entry(col_name, obj_name, sign * obj_coeffs[var_name]))

        for (coeffs, _), row_name in zip(eq_values, row_names):
            if var_name in coeffs and not mat.is_zero(coeffs[var_name]):
                lines.append(__format_entry(col_name, row_name, coeffs[var_name]))

    if is_integer_block:
        lines.append("    MARKER{0}      'MARKER'      'INTEND'".format(marker_count))

    # RHS
    lines.append("RHS")
    if not mat.is_zero(obj_const):
        lines.append(__format_entry("RHS1", obj_name, -sign * obj_const))
    for (_, constant), row_name in zip(eq_values, row_names):
        if not mat.is_zero(constant):
            lines.append(__format_entry("RHS1", row_name, constant))

    # BOUNDS
    lines.append("BOUNDS")
    for var_name, col_name in zip(var_names, col_names):
        var = problem.get_variable_declaration(var_name)
        if var is None:
            continue
        lines.extend(__generate_bound_lines(var, col_name, state))

    lines.append("ENDATA")

    literal = "\n".join(lines) + "\n"

    if file_name is not None:
        util.write_file(dir_path, file_name, literal)

    return literal


# Names
# ----------------------------------------------------------------------------------------------------------------------


def __sanitize_name(name: str) -> str:
    name = re.sub(r"[^A-Za-z0-9_]", "_", name).strip("_")
    if name == "":
        name = "R"
    return name[:MAX_NAME_LENGTH]


def __generate_row_names(equations: List[mat.LinearEquation], used_names: set) -> List[str]:
    base_names = []
    for i, eq in enumerate(equations):
        if eq.base_name is not None:
            name = eq.base_name
            if eq.index is not None:
                name += "_" + __format_index_element(eq.index)
            if eq.second_index is not None:
                name += "_" + __format_index_element(eq.second_index)
        elif eq.label is not None:
            name = eq.label
        else:
            name = "R{0}".format(i + 1)
        base_names.append(name)
    return __generate_unique_names(base_names, used_names)


def __format_index_element(element) -> str:
    if isinstance(element, mat.TupleInstance):
        return "_".join([__format_index_element(k) for k in element.get_key()])
    if isinstance(element, str):
        return element
    return mat.format_number(element)


def __generate_unique_names(names: List[str], used_names: set) -> List[str]:
    unique_names = []
    for name in names:
        sanitized_name = __sanitize_name(name)
        unique_name = sanitized_name
        counter = 1
        while unique_name in used_names:
            suffix = "_{0}".format(counter)
            unique_name = sanitized_name[:MAX_NAME_LENGTH - len(suffix)] + suffix
            counter += 1
        used_names.add(unique_name)
        unique_names.append(unique_name)
    return unique_names


# Formatting
# ----------------------------------------------------------------------------------------------------------------------


def __format_value(value: float) -> str:
    return "{0:.12g}".format(value)


def __format_entry(col_name: str, row_name: str, value: float) -> str:
    return "    {0:<10} {1:<10} {2:>12}".format(col_name, row_name, __format_value(value))


def __generate_bound_lines(var: mat.IndexedVariable, col_name: str, state: mat.State) -> List[str]:

    lb, ub = var.get_bounds(state)

    if var.type == mat.BOOLEAN_TYPE and lb == 0 and ub == 1:
        return [" BV BOUND1     {0}".format(col_name)]

    lines = []

    if np.isinf(lb) and np.isinf(ub):
        lines.append(" FR BOUND1     {0}".format(col_name))
        return lines

    if np.isinf(lb):
        lines.append(" MI BOUND1     {0}".format(col_name))
    elif lb != 0:
        lines.append(" LO BOUND1     {0:<10} {1:>12}".format(col_name, __format_value(lb)))
    elif np.isinf(ub):
        lines.append(" PL BOUND1     {0}".format(col_name))

    if not np.isinf(ub):
        lines.append(" UP BOUND1     {0:<10} {1:>12}".format(col_name, __format_value(ub)))

    return lines

import os

import symopl.mat as mat
from symopl.prob.problem import Problem
from symopl.parsing.oplparser import OPLParser
from symopl.parsing.oplscriptparser import split_statements
import symopl.util.util as util


def read_opl(script_literal: str = None,
             file_name: str = None,
             working_dir_path: str = None,
             name: str = None,
             description: str = None,
             can_build: bool = True,
             textual_summation: bool = True) -> Problem:
    """
    Build a problem from an OPL model.
    :param script_literal: literal of the model; read from file if None
    :param file_name: name of the model file
    :param working_dir_path: directory of the model file
    :param name: symbol of the problem; defaults to the base name of the model file
    :param description: description of the problem
    :param can_build: if True, expand the model into linear equations once every statement has been parsed
    :param textual_summation: if True, expand summations over fixed domains textually before parsing
    :return: problem
    """

    if file_name is None and script_literal is None:
        raise ValueError("Problem builder requires either a file name or a script literal")

    if name is None and file_name is not None:
        name = os.path.splitext(os.path.basename(file_name))[0]

    problem = Problem(symbol=name, description=description, working_dir_path=working_dir_path)

    if script_literal is None:
        script_literal = util.read_file(working_dir_path, file_name)

    parse_opl_statements(problem, script_literal, textual_summation=textual_summation)

    if can_build:
        problem.build()

    return problem


def parse_opl_statements(problem: Problem, script_literal: str, textual_summation: bool = True):
    """
    Parse the statements of an OPL model literal and add them to a problem.
    """

    parser = OPLParser(problem.state, textual_summation=textual_summation)

    for literal in split_statements(script_literal):
        statement = parser.parse_statement(literal)
        problem.add_statement(statement)


def load_data(problem: Problem, data: dict, can_build: bool = True) -> Problem:
    """
    Assign values to external sets and parameters of a problem, then rebuild it.

    Each key is the symbol of a declared set or parameter. Sets take an iterable of elements, or of tuple values for
    tuple sets. Scalar parameters take a value; indexed parameters take a mapping of indices to values.
    :param problem: problem whose entities are assigned
    :param data: mapping of symbols to values
    :param can_build: if True, rebuild the problem once the data has been assigned
    :return: problem
    """

    state = problem.state

    for symbol, value in data.items():

        if state.get_tuple_set(symbol) is not None:
            state.set_tuple_instances(symbol, value)

        elif state.domain_exists(symbol):
            state.set_set_elements(symbol, value)

        elif state.is_parameter(symbol):
            param = state.get_parameter(symbol)
            if param.is_indexed():
                state.set_parameter_values(symbol, value)
            else:
                state.set_parameter_value(symbol, value)

        else:
            raise mat.UnboundNameError("Symbol '{0}' is not declared".format(symbol))

    if can_build:
        problem.build()

    return problem

from typing import Dict, Optional, Tuple

from .constants import *
from .environment import Environment
from .exprn import ExpressionNode
from .types import Element
from .util import get_element_literal


class LinearEquation:
    """
    Linear equation of the form sum(coefficient * variable) operator constant.

    Coefficients and the constant are kept as expression nodes so that parameters whose values are supplied after
    expansion can still be resolved. No coefficient that folds to 0 is ever stored.
    """

    def __init__(self,
                 coefficients: Dict[str, ExpressionNode],
                 constant: ExpressionNode,
                 operator: str,
                 label: str = None,
                 base_name: str = None,
                 index: Element = None,
                 second_index: Element = None):
        self.coefficients: Dict[str, ExpressionNode] = coefficients
        self.constant: ExpressionNode = constant
        self.operator: str = operator
        self.label: Optional[str] = label
        self.base_name: Optional[str] = base_name
        self.index: Optional[Element] = index
        self.second_index: Optional[Element] = second_index

    def __str__(self):
        return self.get_literal()

    def get_full_identifier(self) -> str:
        if self.label is not None:
            return self.label
        if self.base_name is None:
            return ""
        identifier = self.base_name
        if self.index is not None:
            identifier += "[{0}]".format(get_element_literal(self.index))
        if self.second_index is not None:
            identifier += "[{0}]".format(get_element_literal(self.second_index))
        return identifier

    def get_variable_names(self):
        return list(self.coefficients.keys())

    def evaluate(self, state) -> Tuple[Dict[str, float], float]:
        """
        Evaluate the coefficients and the constant of the equation.
        :param state: registry against which parameters are resolved
        :return: map of variable names to numeric coefficients, and the numeric constant
        """
        env = Environment()
        coefficients = {v: c.evaluate(state, env) for v, c in self.coefficients.items()}
        return coefficients, self.constant.evaluate(state, env)

    def is_satisfied(self, state, var_values: Dict[str, float]) -> bool:
        coefficients, constant = self.evaluate(state)
        body = sum([c * var_values[v] for v, c in coefficients.items()])
        if self.operator == EQUALITY_OPERATOR:
            return abs(body - constant) < EPSILON
        elif self.operator == LESS_INEQUALITY_OPERATOR:
            return body < constant - EPSILON
        elif self.operator == LESS_EQUAL_INEQUALITY_OPERATOR:
            return body <= constant + EPSILON
        elif self.operator == GREATER_INEQUALITY_OPERATOR:
            return body > constant + EPSILON
        else:
            return body >= constant - EPSILON

    def get_literal(self) -> str:
        literal = get_linear_form_literal(self.coefficients)
        literal += " {0} {1}".format(self.operator, self.constant)
        identifier = self.get_full_identifier()
        if identifier != "":
            literal = "{0}: {1}".format(identifier, literal)
        return literal


class Objective:
    def __init__(self,
                 sense: str,
                 coefficients: Dict[str, ExpressionNode],
                 constant: ExpressionNode,
                 name: str = None):
        self.sense: str = sense
        self.coefficients: Dict[str, ExpressionNode] = coefficients
        self.constant: ExpressionNode = constant
        self.name: Optional[str] = name

    def __str__(self):
        return self.get_literal()

    def is_maximization(self) -> bool:
        return self.sense == MAXIMIZE_SENSE

    def evaluate(self, state) -> Tuple[Dict[str, float], float]:
        env = Environment()
        coefficients = {v: c.evaluate(state, env) for v, c in self.coefficients.items()}
        return coefficients, self.constant.evaluate(state, env)

    def get_literal(self) -> str:
        literal = self.sense + " "
        if self.name is not None:
            literal += self.name + ": "
        body = get_linear_form_literal(self.coefficients)
        constant = str(self.constant)
        if constant != "0":
            body = constant if body == "0" else "{0} + {1}".format(body, constant)
        return literal + body


def get_linear_form_literal(coefficients: Dict[str, ExpressionNode]) -> str:
    terms = []
    for var_name, coeff in coefficients.items():
        coeff_literal = str(coeff)
        if coeff_literal == "1":
            term = var_name
        elif coeff_literal == "-1":
            term = "-" + var_name
        elif " " in coeff_literal:
            term = "({0})*{1}".format(coeff_literal, var_name)
        else:
            term = "{0}*{1}".format(coeff_literal, var_name)
        terms.append(term)
    if len(terms) == 0:
        return "0"
    literal = terms[0]
    for term in terms[1:]:
        if term.startswith("-"):
            literal += " - " + term[1:]
        else:
            literal += " + " + term
    return literal

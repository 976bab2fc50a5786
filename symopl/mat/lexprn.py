from numbers import Number
from typing import List

from .constants import *
from .entity import TupleInstance
from .environment import Environment
from .exceptions import TypeCoercionFailedError
from .exprn import ExpressionNode, LogicalExpressionNode
from .util import is_true, normalize_element, to_boolean_value


class RelationalOperationNode(LogicalExpressionNode):
    """
    Comparison of two operands. Numbers are compared with a tolerance of 1e-10; strings and tuple instances are
    compared by value. The result is 1.0 when the comparison holds and 0.0 otherwise.
    """

    def __init__(self, operator: str, lhs_operand: ExpressionNode, rhs_operand: ExpressionNode):
        super().__init__()
        if operator not in RELATIONAL_OPERATORS:
            raise ValueError(
                "Unable to resolve operator '{0}' as a relational operator".format(operator)
            )
        self.operator: str = operator
        self.lhs_operand: ExpressionNode = lhs_operand
        self.rhs_operand: ExpressionNode = rhs_operand

    def evaluate(self, state, env: Environment = None) -> float:

        x_lhs = normalize_element(self.lhs_operand.evaluate_value(state, env))
        x_rhs = normalize_element(self.rhs_operand.evaluate_value(state, env))

        if isinstance(x_lhs, Number) and isinstance(x_rhs, Number):
            return to_boolean_value(self.__compare_numbers(x_lhs, x_rhs))

        if self.operator == EQUALITY_OPERATOR:
            return to_boolean_value(x_lhs == x_rhs)
        elif self.operator == INEQUALITY_OPERATOR:
            return to_boolean_value(x_lhs != x_rhs)

        if isinstance(x_lhs, TupleInstance) or isinstance(x_rhs, TupleInstance):
            raise TypeCoercionFailedError(
                "Tuples cannot be ordered with operator '{0}'".format(self.operator)
            )

        x_lhs = str(x_lhs)
        x_rhs = str(x_rhs)
        if self.operator == LESS_INEQUALITY_OPERATOR:
            return to_boolean_value(x_lhs < x_rhs)
        elif self.operator == LESS_EQUAL_INEQUALITY_OPERATOR:
            return to_boolean_value(x_lhs <= x_rhs)
        elif self.operator == GREATER_INEQUALITY_OPERATOR:
            return to_boolean_value(x_lhs > x_rhs)
        else:
            return to_boolean_value(x_lhs >= x_rhs)

    def __compare_numbers(self, x_lhs: float, x_rhs: float) -> bool:
        if self.operator == EQUALITY_OPERATOR:
            return abs(x_lhs - x_rhs) < EPSILON
        elif self.operator == INEQUALITY_OPERATOR:
            return abs(x_lhs - x_rhs) >= EPSILON
        elif self.operator == LESS_INEQUALITY_OPERATOR:
            return x_lhs < x_rhs - EPSILON
        elif self.operator == LESS_EQUAL_INEQUALITY_OPERATOR:
            return x_lhs <= x_rhs + EPSILON
        elif self.operator == GREATER_INEQUALITY_OPERATOR:
            return x_lhs > x_rhs + EPSILON
        else:
            return x_lhs >= x_rhs - EPSILON

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        return RelationalOperationNode(
            self.operator,
            self.lhs_operand.substitute(state, env),
            self.rhs_operand.substitute(state, env),
        )

    def get_children(self) -> List[ExpressionNode]:
        return [self.lhs_operand, self.rhs_operand]

    def get_literal(self) -> str:
        return "{0} {1} {2}".format(self.lhs_operand, self.operator, self.rhs_operand)


class LogicalOperationNode(LogicalExpressionNode):
    def __init__(self, operator: str, operands: List[ExpressionNode]):
        super().__init__()
        if operator not in (CONJUNCTION_OPERATOR, DISJUNCTION_OPERATOR, NEGATION_OPERATOR):
            raise ValueError(
                "Unable to resolve operator '{0}' as a logical operator".format(operator)
            )
        self.operator: str = operator
        self.operands: List[ExpressionNode] = list(operands)

    def evaluate(self, state, env: Environment = None) -> float:

        if self.operator == NEGATION_OPERATOR:
            return to_boolean_value(not is_true(self.operands[0].evaluate(state, env)))

        elif self.operator == CONJUNCTION_OPERATOR:
            for operand in self.operands:
                if not is_true(operand.evaluate(state, env)):
                    return 0.0
            return 1.0

        else:
            for operand in self.operands:
                if is_true(operand.evaluate(state, env)):
                    return 1.0
            return 0.0

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        return LogicalOperationNode(
            self.operator, [o.substitute(state, env) for o in self.operands]
        )

    def get_children(self) -> List[ExpressionNode]:
        return list(self.operands)

    def get_literal(self) -> str:
        if self.operator == NEGATION_OPERATOR:
            return "!({0})".format(self.operands[0])
        literals = []
        for operand in self.operands:
            if isinstance(operand, LogicalOperationNode) and operand.operator != NEGATION_OPERATOR:
                literals.append("({0})".format(operand))
            else:
                literals.append(str(operand))
        return " {0} ".format(self.operator).join(literals)

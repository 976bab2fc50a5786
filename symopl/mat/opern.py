from typing import List

import numpy as np

from .constants import *
from .environment import Environment
from .exprn import ArithmeticExpressionNode, ExpressionNode


class BinaryArithmeticOperationNode(ArithmeticExpressionNode):
    def __init__(self,
                 operator: str,
                 lhs_operand: ExpressionNode,
                 rhs_operand: ExpressionNode):
        super().__init__()
        if operator not in ARITHMETIC_OPERATOR_PRECEDENCE:
            raise ValueError(
                "Unable to resolve operator '{0}' as a binary arithmetic operator".format(
                    operator
                )
            )
        self.operator: str = operator
        self.lhs_operand: ExpressionNode = lhs_operand
        self.rhs_operand: ExpressionNode = rhs_operand

    @staticmethod
    def addition(lhs_operand: ExpressionNode, rhs_operand: ExpressionNode):
        return BinaryArithmeticOperationNode(ADDITION_OPERATOR, lhs_operand, rhs_operand)

    @staticmethod
    def subtraction(lhs_operand: ExpressionNode, rhs_operand: ExpressionNode):
        return BinaryArithmeticOperationNode(SUBTRACTION_OPERATOR, lhs_operand, rhs_operand)

    @staticmethod
    def multiplication(lhs_operand: ExpressionNode, rhs_operand: ExpressionNode):
        return BinaryArithmeticOperationNode(
            MULTIPLICATION_OPERATOR, lhs_operand, rhs_operand
        )

    @staticmethod
    def division(lhs_operand: ExpressionNode, rhs_operand: ExpressionNode):
        return BinaryArithmeticOperationNode(DIVISION_OPERATOR, lhs_operand, rhs_operand)

    def evaluate(self, state, env: Environment = None) -> float:

        x_lhs = self.lhs_operand.evaluate(state, env)
        x_rhs = self.rhs_operand.evaluate(state, env)

        if self.operator == ADDITION_OPERATOR:
            return x_lhs + x_rhs
        elif self.operator == SUBTRACTION_OPERATOR:
            return x_lhs - x_rhs
        elif self.operator == MULTIPLICATION_OPERATOR:
            return x_lhs * x_rhs
        else:
            # IEEE semantics: division by zero yields an infinity or nan
            with np.errstate(divide="ignore", invalid="ignore"):
                return float(np.divide(np.float64(x_lhs), np.float64(x_rhs)))

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        return BinaryArithmeticOperationNode(
            self.operator,
            self.lhs_operand.substitute(state, env),
            self.rhs_operand.substitute(state, env),
        )

    def get_children(self) -> List[ExpressionNode]:
        return [self.lhs_operand, self.rhs_operand]

    def get_precedence(self) -> int:
        return ARITHMETIC_OPERATOR_PRECEDENCE[self.operator]

    def get_literal(self) -> str:

        lhs_literal = self.lhs_operand.get_literal()
        rhs_literal = self.rhs_operand.get_literal()

        if isinstance(self.lhs_operand, BinaryArithmeticOperationNode):
            if self.lhs_operand.get_precedence() < self.get_precedence():
                lhs_literal = "(" + lhs_literal + ")"

        if isinstance(self.rhs_operand, BinaryArithmeticOperationNode):
            # right operands of non-associative operators are parenthesized at equal precedence
            if self.rhs_operand.get_precedence() < self.get_precedence() or (
                self.rhs_operand.get_precedence() == self.get_precedence()
                and self.operator in (SUBTRACTION_OPERATOR, DIVISION_OPERATOR)
            ):
                rhs_literal = "(" + rhs_literal + ")"
        elif isinstance(self.rhs_operand, UnaryArithmeticOperationNode):
            rhs_literal = "(" + rhs_literal + ")"

        return "{0} {1} {2}".format(lhs_literal, self.operator, rhs_literal)


class UnaryArithmeticOperationNode(ArithmeticExpressionNode):
    def __init__(self, operand: ExpressionNode):
        super().__init__()
        self.operator: str = UNARY_NEGATION_OPERATOR
        self.operand: ExpressionNode = operand

    def evaluate(self, state, env: Environment = None) -> float:
        return -self.operand.evaluate(state, env)

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        return UnaryArithmeticOperationNode(self.operand.substitute(state, env))

    def get_children(self) -> List[ExpressionNode]:
        return [self.operand]

    def get_literal(self) -> str:
        literal = self.operand.get_literal()
        if isinstance(self.operand, (BinaryArithmeticOperationNode, UnaryArithmeticOperationNode)):
            literal = "(" + literal + ")"
        return "-" + literal

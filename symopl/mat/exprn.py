from abc import ABC, abstractmethod
from typing import List

from .environment import Environment
from .entity import to_numeric_value


# Expression Node
# ----------------------------------------------------------------------------------------------------------------------


class ExpressionNode(ABC):
    """
    Immutable node of an expression tree.

    Nodes are never modified once built: substitution and simplification always return new trees that may share
    unchanged subtrees with the original.
    """

    def __str__(self):
        return self.get_literal()

    def __repr__(self):
        return "{0}({1})".format(type(self).__name__, self.get_literal())

    @abstractmethod
    def evaluate(self, state, env: Environment = None) -> float:
        """
        Evaluate the node to a number.
        :param state: registry against which named entities are resolved
        :param env: binding environment supplying iterator values and, optionally, decision variable values
        :return: numeric value
        """
        pass

    def evaluate_value(self, state, env: Environment = None):
        """
        Evaluate the node to its raw value, which may be a number, a string, or a tuple instance.
        """
        return self.evaluate(state, env)

    def is_constant(self) -> bool:
        return all([c.is_constant() for c in self.get_children()])

    @abstractmethod
    def substitute(self, state, env: Environment = None) -> "ExpressionNode":
        """
        Build a copy of the node in which every bound iterator is replaced by its value and every summation is
        flattened into a chain of additions.
        """
        pass

    @abstractmethod
    def get_children(self) -> List["ExpressionNode"]:
        pass

    @abstractmethod
    def get_literal(self) -> str:
        pass


class ArithmeticExpressionNode(ExpressionNode, ABC):
    def __neg__(self):
        from .opern import UnaryArithmeticOperationNode

        return UnaryArithmeticOperationNode(self)

    def __add__(self, other: "ArithmeticExpressionNode"):
        from .opern import BinaryArithmeticOperationNode

        return BinaryArithmeticOperationNode.addition(self, other)

    def __sub__(self, other: "ArithmeticExpressionNode"):
        from .opern import BinaryArithmeticOperationNode

        return BinaryArithmeticOperationNode.subtraction(self, other)

    def __mul__(self, other: "ArithmeticExpressionNode"):
        from .opern import BinaryArithmeticOperationNode

        return BinaryArithmeticOperationNode.multiplication(self, other)

    def __truediv__(self, other: "ArithmeticExpressionNode"):
        from .opern import BinaryArithmeticOperationNode

        return BinaryArithmeticOperationNode.division(self, other)


class LogicalExpressionNode(ExpressionNode, ABC):
    pass


class StringExpressionNode(ExpressionNode, ABC):
    def evaluate(self, state, env: Environment = None) -> float:
        return to_numeric_value(self.evaluate_value(state, env), context=self.get_literal())

from typing import List

from .entity import TupleInstance
from .environment import Environment
from .exprn import ExpressionNode, StringExpressionNode
from .util import get_element_literal


class StringNode(StringExpressionNode):
    def __init__(self, value: str):
        super().__init__()
        self.value: str = value

    def evaluate_value(self, state, env: Environment = None) -> str:
        return self.value

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        return self

    def get_children(self) -> List[ExpressionNode]:
        return []

    def get_literal(self) -> str:
        return get_element_literal(self.value)


class TupleInstanceNode(StringExpressionNode):
    """
    Literal tuple value, produced when a bound tuple iterator or a resolved item() lookup is substituted.
    """

    def __init__(self, instance: TupleInstance):
        super().__init__()
        self.instance: TupleInstance = instance

    def evaluate_value(self, state, env: Environment = None) -> TupleInstance:
        return self.instance

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        return self

    def get_children(self) -> List[ExpressionNode]:
        return []

    def get_literal(self) -> str:
        return self.instance.get_literal()

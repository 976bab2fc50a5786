from typing import List

from .aexprn import NumericNode
from .environment import Environment
from .expansion import Iterator, enumerate_bindings, get_iterators_literal
from .exprn import ArithmeticExpressionNode, ExpressionNode
from .opern import BinaryArithmeticOperationNode


class SummationNode(ArithmeticExpressionNode):
    """
    Symbolic summation of a body over the cartesian product of one or more iterators, with an optional filter.
    """

    def __init__(self,
                 iterators: List[Iterator],
                 body_node: ExpressionNode,
                 condition_node: ExpressionNode = None):
        super().__init__()
        self.iterators: List[Iterator] = list(iterators)
        self.body_node: ExpressionNode = body_node
        self.condition_node: ExpressionNode = condition_node

    def evaluate(self, state, env: Environment = None) -> float:

        if env is None:
            env = Environment()

        terms = []

        def accumulate(e: Environment):
            terms.append(self.body_node.evaluate(state, e))

        enumerate_bindings(state, env, self.iterators, accumulate, self.condition_node)

        return float(sum(terms))

    def is_constant(self) -> bool:
        return self.body_node.is_constant()

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        """
        Flatten the summation into a left-associated chain of additions of the substituted body, one term per
        admissible combination of iterator values. An empty summation becomes the constant 0.
        """

        if env is None:
            env = Environment()

        terms = []

        def collect(e: Environment):
            terms.append(self.body_node.substitute(state, e))

        enumerate_bindings(state, env, self.iterators, collect, self.condition_node)

        if len(terms) == 0:
            return NumericNode(0)

        node = terms[0]
        for term in terms[1:]:
            node = BinaryArithmeticOperationNode.addition(node, term)
        return node

    def get_children(self) -> List[ExpressionNode]:
        children = [self.body_node]
        if self.condition_node is not None:
            children.append(self.condition_node)
        return children

    def get_literal(self) -> str:
        body_literal = self.body_node.get_literal()
        if isinstance(self.body_node, BinaryArithmeticOperationNode):
            body_literal = "(" + body_literal + ")"
        return "sum({0}) {1}".format(
            get_iterators_literal(self.iterators, self.condition_node), body_literal
        )

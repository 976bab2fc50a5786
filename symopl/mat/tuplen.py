from typing import List
import warnings

from .aexprn import build_value_node
from .entity import TupleInstance, to_numeric_value
from .environment import Environment
from .exceptions import (
    DimensionMismatchError,
    DomainNotFoundError,
    KeyLookupFailedError,
    TypeCoercionFailedError,
)
from .exprn import ArithmeticExpressionNode, ExpressionNode
from .strexprn import TupleInstanceNode
from .util import get_element_literal, normalize_element


class TupleFieldAccessNode(ArithmeticExpressionNode):
    """
    Access to a field of a tuple value. The base is a bound tuple iterator, a tuple parameter, or an item() lookup.
    """

    def __init__(self, base_node: ExpressionNode, field: str):
        super().__init__()
        self.base_node: ExpressionNode = base_node
        self.field: str = field

    def evaluate(self, state, env: Environment = None) -> float:
        return to_numeric_value(self.evaluate_value(state, env), context=self.get_literal())

    def evaluate_value(self, state, env: Environment = None):
        instance = self.base_node.evaluate_value(state, env)
        if not isinstance(instance, TupleInstance):
            raise TypeCoercionFailedError(
                "Field '{0}' is accessed on '{1}', which is not a tuple".format(
                    self.field, self.base_node
                )
            )
        return instance.get_value(self.field)

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        base_node = self.base_node.substitute(state, env)
        if isinstance(base_node, TupleInstanceNode):
            return build_value_node(base_node.instance.get_value(self.field))
        return TupleFieldAccessNode(base_node, self.field)

    def get_children(self) -> List[ExpressionNode]:
        return [self.base_node]

    def get_literal(self) -> str:
        return "{0}.{1}".format(self.base_node, self.field)


class ItemLookupNode(ArithmeticExpressionNode):
    """
    Keyed lookup of a tuple instance within a tuple set: item(Set, key) or item(Set, <k1, k2, ...>).
    """

    def __init__(self, set_symbol: str, key_nodes: List[ExpressionNode]):
        super().__init__()
        self.set_symbol: str = set_symbol
        self.key_nodes: List[ExpressionNode] = list(key_nodes)

    def evaluate(self, state, env: Environment = None) -> float:
        raise TypeCoercionFailedError(
            "Tuple lookup '{0}' cannot be used as a number".format(self.get_literal())
        )

    def evaluate_value(self, state, env: Environment = None) -> TupleInstance:

        tuple_set = state.get_tuple_set(self.set_symbol)
        if tuple_set is None:
            raise DomainNotFoundError(
                "Tuple set '{0}' is not declared".format(self.set_symbol)
            )

        key_fields = tuple_set.schema.key_fields
        if len(self.key_nodes) != len(key_fields):
            raise DimensionMismatchError(
                "Tuple set '{0}' is keyed by {1} fields but {2} key values were supplied".format(
                    self.set_symbol, len(key_fields), len(self.key_nodes)
                )
            )

        key = tuple([normalize_element(n.evaluate_value(state, env)) for n in self.key_nodes])
        matches = tuple_set.find_by_key(key)

        if len(matches) == 0:
            raise KeyLookupFailedError(
                "Tuple set '{0}' has no element with key <{1}>".format(
                    self.set_symbol, ",".join([get_element_literal(k) for k in key])
                )
            )

        if len(matches) > 1:
            warnings.warn(
                "Tuple set '{0}' has {1} elements with key <{2}>; the first is used".format(
                    self.set_symbol,
                    len(matches),
                    ",".join([get_element_literal(k) for k in key]),
                )
            )

        return matches[0]

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        node = ItemLookupNode(self.set_symbol, [n.substitute(state, env) for n in self.key_nodes])
        return TupleInstanceNode(node.evaluate_value(state, env))

    def get_children(self) -> List[ExpressionNode]:
        return list(self.key_nodes)

    def get_literal(self) -> str:
        if len(self.key_nodes) == 1:
            return "item({0}, {1})".format(self.set_symbol, self.key_nodes[0])
        return "item({0}, <{1}>)".format(
            self.set_symbol, ",".join([str(n) for n in self.key_nodes])
        )

from contextlib import contextmanager
from numbers import Number
from typing import List, Optional, Tuple

from .entity import IndexedVariable, TupleInstance, to_numeric_value
from .environment import Environment
from .exceptions import DeclarationError, DimensionMismatchError, UnboundNameError
from .exprn import ArithmeticExpressionNode, ExpressionNode
from .strexprn import StringNode, TupleInstanceNode
from .types import Index
from .util import format_number, get_index_literal, normalize_element


def build_value_node(value) -> ExpressionNode:
    """
    Build a literal node holding the supplied value.
    :param value: number, string or tuple instance
    :return: numeric, string or tuple instance node
    """
    if isinstance(value, TupleInstance):
        return TupleInstanceNode(value)
    elif isinstance(value, str):
        return StringNode(value)
    else:
        return NumericNode(value)


def evaluate_index(state, env: Environment, idx_nodes: List[ExpressionNode]) -> Index:
    return tuple([normalize_element(n.evaluate_value(state, env)) for n in idx_nodes])


def get_index_nodes_literal(idx_nodes: List[ExpressionNode]) -> str:
    return "".join(["[{0}]".format(n) for n in idx_nodes])


# Constants
# ----------------------------------------------------------------------------------------------------------------------


class NumericNode(ArithmeticExpressionNode):
    def __init__(self, value: Number):
        super().__init__()
        if isinstance(value, bool):
            value = 1.0 if value else 0.0
        self.value: float = float(value)

    def evaluate(self, state, env: Environment = None) -> float:
        return self.value

    def evaluate_value(self, state, env: Environment = None):
        return normalize_element(self.value)

    def is_constant(self) -> bool:
        return True

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        return self

    def get_children(self) -> List[ExpressionNode]:
        return []

    def get_literal(self) -> str:
        return format_number(self.value)


# Parameters
# ----------------------------------------------------------------------------------------------------------------------


class ParameterNode(ArithmeticExpressionNode):
    """
    Reference to a name that is either a bound iterator or a scalar parameter. Bindings take precedence.
    """

    def __init__(self, symbol: str):
        super().__init__()
        self.symbol: str = symbol

    def evaluate(self, state, env: Environment = None) -> float:
        return to_numeric_value(self.evaluate_value(state, env), context=self.symbol)

    def evaluate_value(self, state, env: Environment = None):
        if env is not None and env.is_bound(self.symbol):
            return env.get(self.symbol)
        if state.is_parameter(self.symbol):
            return state.get_parameter_value(self.symbol)
        raise UnboundNameError("Name '{0}' is not bound".format(self.symbol))

    def is_constant(self) -> bool:
        return True

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        if env is not None and env.is_bound(self.symbol):
            return build_value_node(env.get(self.symbol))
        return self

    def get_children(self) -> List[ExpressionNode]:
        return []

    def get_literal(self) -> str:
        return self.symbol


class IndexedParameterNode(ArithmeticExpressionNode):
    def __init__(self, symbol: str, idx_nodes: List[ExpressionNode]):
        super().__init__()
        self.symbol: str = symbol
        self.idx_nodes: List[ExpressionNode] = list(idx_nodes)

    def evaluate(self, state, env: Environment = None) -> float:
        return to_numeric_value(self.evaluate_value(state, env), context=self.get_literal())

    def evaluate_value(self, state, env: Environment = None):
        idx = evaluate_index(state, env, self.idx_nodes)
        return state.get_parameter_value(self.symbol, idx)

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        return IndexedParameterNode(
            self.symbol, [n.substitute(state, env) for n in self.idx_nodes]
        )

    def get_children(self) -> List[ExpressionNode]:
        return list(self.idx_nodes)

    def get_literal(self) -> str:
        return self.symbol + get_index_nodes_literal(self.idx_nodes)


# Decision Variables
# ----------------------------------------------------------------------------------------------------------------------


class VariableNode(ArithmeticExpressionNode):
    """
    Reference to a concrete decision variable, identified by its generated name.
    """

    def __init__(self, symbol: str, base_symbol: str = None, idx: Index = None):
        super().__init__()
        self.symbol: str = symbol
        self.base_symbol: str = base_symbol if base_symbol is not None else symbol
        self.idx: Optional[Index] = idx

    def evaluate(self, state, env: Environment = None) -> float:
        if env is None:
            raise UnboundNameError(
                "Decision variable '{0}' has no value in the current environment".format(
                    self.symbol
                )
            )
        return env.get_variable_value(self.symbol)

    def is_constant(self) -> bool:
        return False

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        return self

    def get_children(self) -> List[ExpressionNode]:
        return []

    def get_literal(self) -> str:
        return self.symbol


class IndexedVariableNode(ArithmeticExpressionNode):
    def __init__(self, symbol: str, idx_nodes: List[ExpressionNode]):
        super().__init__()
        self.symbol: str = symbol
        self.idx_nodes: List[ExpressionNode] = list(idx_nodes)

    def evaluate(self, state, env: Environment = None) -> float:
        var_name, _ = self.get_variable_name(state, env)
        if env is None:
            raise UnboundNameError(
                "Decision variable '{0}' has no value in the current environment".format(
                    var_name
                )
            )
        return env.get_variable_value(var_name)

    def get_variable_name(self, state, env: Environment = None) -> Tuple[str, Index]:
        var = state.get_variable(self.symbol)
        if var is None:
            raise UnboundNameError(
                "Decision variable '{0}' is not declared".format(self.symbol)
            )
        idx = evaluate_index(state, env, self.idx_nodes)
        if len(idx) != var.get_dim():
            raise DimensionMismatchError(
                "Decision variable '{0}' expects {1} indices but {2} were supplied".format(
                    self.symbol, var.get_dim(), len(idx)
                )
            )
        var_name = IndexedVariable.generate_variable_name(self.symbol, idx)
        other_var = state.get_variable(var_name)
        if var_name != self.symbol and other_var is not None and other_var.get_dim() == 0:
            raise DeclarationError(
                "Decision variable '{0}' is named '{1}', which is already the name of a scalar variable".format(
                    self.symbol + get_index_literal(idx), var_name
                )
            )
        return var_name, idx

    def is_constant(self) -> bool:
        return False

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        var_name, idx = self.get_variable_name(state, env)
        return VariableNode(var_name, base_symbol=self.symbol, idx=idx)

    def get_children(self) -> List[ExpressionNode]:
        return list(self.idx_nodes)

    def get_literal(self) -> str:
        return self.symbol + get_index_nodes_literal(self.idx_nodes)


# Decision Expressions
# ----------------------------------------------------------------------------------------------------------------------


class DecisionExpressionNode(ArithmeticExpressionNode):
    def __init__(self, symbol: str, idx_node: ExpressionNode = None):
        super().__init__()
        self.symbol: str = symbol
        self.idx_node: Optional[ExpressionNode] = idx_node

    def evaluate(self, state, env: Environment = None) -> float:
        if env is None:
            env = Environment()
        with env.enter_dexpr(self.symbol):
            with self.__scope(state, env) as (dexpr, inner_env):
                return dexpr.expression_node.evaluate(state, inner_env)

    def expand(self, state, env: Environment = None) -> ExpressionNode:
        """
        Build the substituted body of the referenced decision expression.
        The body only sees the binding of its own index, never the bindings of the referencing context.
        """
        if env is None:
            env = Environment()
        with self.__scope(state, env) as (dexpr, inner_env):
            return dexpr.expression_node.substitute(state, inner_env)

    @contextmanager
    def __scope(self, state, env: Environment):

        dexpr = state.get_dexpr(self.symbol)
        if dexpr is None:
            raise UnboundNameError(
                "Decision expression '{0}' is not declared".format(self.symbol)
            )

        inner_env = env.spawn()

        if dexpr.is_indexed():
            if self.idx_node is None:
                raise DimensionMismatchError(
                    "Indexed decision expression '{0}' is referenced without an index".format(
                        self.symbol
                    )
                )
            value = normalize_element(self.idx_node.evaluate_value(state, env))
            with inner_env.bind(dexpr.idx_symbol, value):
                yield dexpr, inner_env

        else:
            if self.idx_node is not None:
                raise DimensionMismatchError(
                    "Scalar decision expression '{0}' is referenced with an index".format(
                        self.symbol
                    )
                )
            yield dexpr, inner_env

    def substitute(self, state, env: Environment = None) -> ExpressionNode:
        if self.idx_node is None:
            return self
        return DecisionExpressionNode(self.symbol, self.idx_node.substitute(state, env))

    def get_children(self) -> List[ExpressionNode]:
        return [self.idx_node] if self.idx_node is not None else []

    def get_literal(self) -> str:
        if self.idx_node is None:
            return self.symbol
        return "{0}[{1}]".format(self.symbol, self.idx_node)

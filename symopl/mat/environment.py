from contextlib import contextmanager
from typing import Dict, List, Optional, Tuple

from .exceptions import CyclicDecisionExpressionError, UnboundNameError


class Environment:
    """
    Scoped stack of iterator bindings.

    Bindings are only ever pushed through the bind() context manager so that every frame is released on all exit
    paths. Name lookups search the stack from the innermost frame outwards.
    """

    def __init__(self, var_values: Dict[str, float] = None):
        """
        Constructor of the Environment class.

        :param var_values: optional assignment of concrete decision variable names to values
        """
        self.frames: List[Tuple[str, object]] = []
        self.var_values: Optional[Dict[str, float]] = var_values
        self.active_dexprs: List[str] = []

    def __str__(self):
        return "{" + ", ".join(["{0}={1}".format(s, v) for s, v in self.frames]) + "}"

    # Bindings
    # ------------------------------------------------------------------------------------------------------------------

    @contextmanager
    def bind(self, symbol: str, value):
        self.frames.append((symbol, value))
        try:
            yield self
        finally:
            self.frames.pop()

    def is_bound(self, symbol: str) -> bool:
        for s, _ in reversed(self.frames):
            if s == symbol:
                return True
        return False

    def get(self, symbol: str):
        for s, v in reversed(self.frames):
            if s == symbol:
                return v
        raise UnboundNameError("Name '{0}' is not bound".format(symbol))

    def get_bindings(self) -> List[Tuple[str, object]]:
        return list(self.frames)

    def get_depth(self) -> int:
        return len(self.frames)

    def spawn(self) -> "Environment":
        """
        Create an environment without bindings that shares the variable values and the decision expression stack of
        this environment.
        """
        env = Environment(var_values=self.var_values)
        env.active_dexprs = self.active_dexprs
        return env

    # Decision Variables
    # ------------------------------------------------------------------------------------------------------------------

    def has_variable_value(self, var_name: str) -> bool:
        return self.var_values is not None and var_name in self.var_values

    def get_variable_value(self, var_name: str) -> float:
        if not self.has_variable_value(var_name):
            raise UnboundNameError(
                "Decision variable '{0}' has no value in the current environment".format(
                    var_name
                )
            )
        return float(self.var_values[var_name])

    # Decision Expressions
    # ------------------------------------------------------------------------------------------------------------------

    @contextmanager
    def enter_dexpr(self, symbol: str):
        if symbol in self.active_dexprs:
            cycle = self.active_dexprs[self.active_dexprs.index(symbol):] + [symbol]
            raise CyclicDecisionExpressionError(
                "Decision expression '{0}' references itself: {1}".format(
                    symbol, " -> ".join(cycle)
                )
            )
        self.active_dexprs.append(symbol)
        try:
            yield self
        finally:
            self.active_dexprs.pop()

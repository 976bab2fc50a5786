from typing import Callable, List, Optional

from ordered_set import OrderedSet

from .constants import MAX_ITERATOR_DEPTH
from .environment import Environment
from .exceptions import ExpansionDepthError
from .util import is_true


class Iterator:
    """
    Binds a symbol to each element of a domain in turn, optionally skipping elements that fail a filter.

    The domain is either a named domain of the registry, a member of an indexed computed set family (when an outer
    index node is supplied), or an anonymous domain object such as an inline range.
    """

    def __init__(self,
                 symbol: str,
                 domain_symbol: str = None,
                 domain=None,
                 domain_idx_node=None,
                 filter_node=None):
        self.symbol: str = symbol
        self.domain_symbol: Optional[str] = domain_symbol
        self.domain = domain
        self.domain_idx_node = domain_idx_node
        self.filter_node = filter_node

    def __str__(self):
        return self.get_literal()

    def resolve(self, state, env: Environment) -> OrderedSet:
        if self.domain is not None:
            return self.domain.get_elements(state, env)
        outer_value = None
        if self.domain_idx_node is not None:
            outer_value = self.domain_idx_node.evaluate_value(state, env)
        return state.resolve_domain(self.domain_symbol, env, outer_value=outer_value)

    def get_domain_literal(self) -> str:
        if self.domain is not None:
            return self.domain.get_literal()
        if self.domain_idx_node is not None:
            return "{0}[{1}]".format(self.domain_symbol, self.domain_idx_node)
        return self.domain_symbol

    def get_literal(self) -> str:
        literal = "{0} in {1}".format(self.symbol, self.get_domain_literal())
        if self.filter_node is not None:
            literal += ": {0}".format(self.filter_node)
        return literal


def get_iterators_literal(iterators: List[Iterator], condition_node=None) -> str:
    literal = ", ".join([it.get_literal() for it in iterators])
    if condition_node is not None:
        literal += ": {0}".format(condition_node)
    return literal


def enumerate_bindings(state,
                       env: Environment,
                       iterators: List[Iterator],
                       callback: Callable[[Environment], None],
                       condition_node=None):
    """
    Enumerate the cartesian product of the domains of the supplied iterators.

    Iterators are expanded in declaration order from the outermost to the innermost; the elements of each domain are
    visited in the intrinsic order of the domain. The domain of an inner iterator is resolved anew for each binding of
    the outer iterators, so it may depend on them. The callback is invoked once for each combination that satisfies
    the per-iterator filters and the global condition. Every binding is released before this function returns,
    whether it completes normally or raises.

    :param state: registry against which domains and filters are resolved
    :param env: binding environment receiving the iterator bindings
    :param iterators: ordered list of iterators
    :param callback: function invoked with the environment for each admissible combination
    :param condition_node: optional global filter evaluated once all iterators are bound
    :return: None
    """

    if env.get_depth() + len(iterators) > MAX_ITERATOR_DEPTH:
        raise ExpansionDepthError(
            "Expansion exceeds the maximum nesting depth of {0} iterators".format(
                MAX_ITERATOR_DEPTH
            )
        )

    __enumerate(state, env, iterators, 0, callback, condition_node)


def __enumerate(state,
                env: Environment,
                iterators: List[Iterator],
                pos: int,
                callback: Callable[[Environment], None],
                condition_node):

    # all iterators are bound
    if pos == len(iterators):
        if condition_node is None or is_true(condition_node.evaluate(state, env)):
            callback(env)
        return

    iterator = iterators[pos]

    for element in iterator.resolve(state, env):
        with env.bind(iterator.symbol, element):

            if iterator.filter_node is not None:
                if not is_true(iterator.filter_node.evaluate(state, env)):
                    continue

            __enumerate(state, env, iterators, pos + 1, callback, condition_node)


def collect_bindings(state,
                     env: Environment,
                     iterators: List[Iterator],
                     condition_node=None) -> List[tuple]:
    """
    Collect the admissible combinations of iterator values.
    :return: list of tuples of bound values ordered as the iterators
    """

    combinations = []

    def collect(e: Environment):
        combinations.append(tuple([e.get(it.symbol) for it in iterators]))

    enumerate_bindings(state, env, iterators, collect, condition_node)

    return combinations

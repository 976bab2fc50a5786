from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence

from ordered_set import OrderedSet

from .entity import Entity, TupleInstance, TupleSchema, coerce_value
from .environment import Environment
from .exceptions import MissingOuterIndexError, TypeCoercionFailedError
from .expansion import Iterator, enumerate_bindings, get_iterators_literal
from .types import IndexingSet
from .util import get_element_literal, normalize_element


class Domain(Entity, ABC):
    """
    Named, ordered collection of elements over which an iterator can range.
    """

    def __init__(self, symbol: str):
        super(Domain, self).__init__(symbol)

    @abstractmethod
    def get_elements(self, state, env: Environment = None) -> IndexingSet:
        pass

    def invalidate(self):
        pass

    @abstractmethod
    def get_literal(self) -> str:
        pass


# Integer Ranges
# ----------------------------------------------------------------------------------------------------------------------


class IndexSet(Domain):
    def __init__(self, symbol: str, start: int, end: int):
        super(IndexSet, self).__init__(symbol)
        self.start: int = start
        self.end: int = end

    def get_elements(self, state=None, env: Environment = None) -> IndexingSet:
        return OrderedSet(range(self.start, self.end + 1))

    def get_literal(self) -> str:
        return "{0}..{1}".format(self.start, self.end)


class BoundRange(Domain):
    """
    Contiguous integer range whose bounds are expressions evaluated on first use.
    The evaluated bounds are cached until invalidate() is called.
    """

    def __init__(self, symbol: Optional[str], start_node, end_node):
        super(BoundRange, self).__init__(symbol)
        self.start_node = start_node
        self.end_node = end_node
        self.__start: Optional[int] = None
        self.__end: Optional[int] = None

    def get_start(self, state, env: Environment = None) -> int:
        if self.__start is None or self.is_dynamic():
            self.__start = self.__evaluate_bound(self.start_node, state, self.__get_scope(env))
        return self.__start

    def get_end(self, state, env: Environment = None) -> int:
        if self.__end is None or self.is_dynamic():
            self.__end = self.__evaluate_bound(self.end_node, state, self.__get_scope(env))
        return self.__end

    def is_dynamic(self) -> bool:
        # anonymous ranges may depend on iterator bindings and are never cached
        return self.symbol is None

    def __get_scope(self, env: Optional[Environment]) -> Environment:
        # bounds of a named range never see the iterators of the caller
        if env is None:
            return Environment()
        return env if self.is_dynamic() else env.spawn()

    def get_elements(self, state, env: Environment = None) -> IndexingSet:
        return OrderedSet(range(self.get_start(state, env), self.get_end(state, env) + 1))

    def invalidate(self):
        self.__start = None
        self.__end = None

    def get_literal(self) -> str:
        return "{0}..{1}".format(self.start_node, self.end_node)

    @staticmethod
    def __evaluate_bound(node, state, env: Environment) -> int:
        value = normalize_element(node.evaluate(state, env))
        if not isinstance(value, int):
            raise TypeCoercionFailedError(
                "Range bound '{0}' evaluates to the non-integral value {1}".format(
                    node, value
                )
            )
        return value


# Explicit Sets
# ----------------------------------------------------------------------------------------------------------------------


class PrimitiveSet(Domain):
    def __init__(self,
                 symbol: str,
                 type: str,
                 elements: Iterable = None,
                 is_external: bool = False):
        super(PrimitiveSet, self).__init__(symbol)
        self.type: str = type
        self.is_external: bool = is_external
        self.elements: IndexingSet = OrderedSet()
        if elements is not None:
            self.set_elements(elements)

    def set_elements(self, elements: Iterable):
        self.elements = OrderedSet(
            [normalize_element(coerce_value(e, self.type)) for e in elements]
        )

    def get_elements(self, state=None, env: Environment = None) -> IndexingSet:
        return self.elements

    def get_literal(self) -> str:
        return "{" + ",".join([get_element_literal(e) for e in self.elements]) + "}"


class TupleSet(Domain):
    def __init__(self,
                 symbol: str,
                 schema: TupleSchema,
                 instances: Iterable = None,
                 is_external: bool = False):
        super(TupleSet, self).__init__(symbol)
        self.schema: TupleSchema = schema
        self.is_external: bool = is_external
        self.instances: IndexingSet = OrderedSet()
        if instances is not None:
            self.set_instances(instances)

    def set_instances(self, instances: Iterable):
        self.instances = OrderedSet(
            [
                i if isinstance(i, TupleInstance) else self.schema.create_instance(i)
                for i in instances
            ]
        )
        for instance in self.instances:
            if instance.schema.symbol != self.schema.symbol:
                raise TypeCoercionFailedError(
                    "Tuple set '{0}' of type '{1}' cannot hold an instance of type '{2}'".format(
                        self.symbol, self.schema.symbol, instance.schema.symbol
                    )
                )

    def get_elements(self, state=None, env: Environment = None) -> IndexingSet:
        return self.instances

    def find_by_key(self, key: Sequence) -> List[TupleInstance]:
        key = tuple([normalize_element(k) for k in key])
        return [i for i in self.instances if i.get_key() == key]

    def get_literal(self) -> str:
        return "{" + ",".join([i.get_literal() for i in self.instances]) + "}"


# Set Comprehensions
# ----------------------------------------------------------------------------------------------------------------------


class ComputedSet(Domain):
    """
    Set comprehension, optionally indexed by an outer iterator to form a family of sets.

    Elements are either the value bound to the first iterator (filter comprehension) or the value of an output
    expression (projection comprehension). Evaluated members are memoized by outer index value.
    """

    def __init__(self,
                 symbol: str,
                 type: str,
                 iterators: List[Iterator],
                 condition_node=None,
                 output_node=None,
                 outer_iterator: Iterator = None):
        super(ComputedSet, self).__init__(symbol)
        self.type: str = type
        self.iterators: List[Iterator] = iterators
        self.condition_node = condition_node
        self.output_node = output_node
        self.outer_iterator: Optional[Iterator] = outer_iterator
        self.cache: Dict[object, IndexingSet] = {}

    def is_indexed(self) -> bool:
        return self.outer_iterator is not None

    def is_projection(self) -> bool:
        return self.output_node is not None

    def get_elements(self,
                     state,
                     env: Environment = None,
                     outer_value=None) -> IndexingSet:

        if env is None:
            env = Environment()

        # members depend only on the registry and the outer index
        scope = env.spawn()

        if not self.is_indexed():
            if None not in self.cache:
                self.cache[None] = self.__evaluate(state, scope)
            return self.cache[None]

        if outer_value is None:
            if not env.is_bound(self.outer_iterator.symbol):
                raise MissingOuterIndexError(
                    "Computed set '{0}' is indexed by '{1}', which is not bound".format(
                        self.symbol, self.outer_iterator.symbol
                    )
                )
            outer_value = env.get(self.outer_iterator.symbol)

        outer_value = normalize_element(outer_value)
        if outer_value not in self.cache:
            with scope.bind(self.outer_iterator.symbol, outer_value):
                self.cache[outer_value] = self.__evaluate(state, scope)
        return self.cache[outer_value]

    def __evaluate(self, state, env: Environment) -> IndexingSet:

        elements = OrderedSet()

        def emit(e: Environment):
            if self.output_node is None:
                element = e.get(self.iterators[0].symbol)
            else:
                element = self.output_node.evaluate_value(state, e)
            elements.add(normalize_element(element))

        enumerate_bindings(state, env, self.iterators, emit, self.condition_node)

        return elements

    def invalidate(self):
        self.cache = {}

    def get_literal(self) -> str:
        output = self.iterators[0].symbol if self.output_node is None else str(self.output_node)
        return "{{{0} | {1}}}".format(
            output, get_iterators_literal(self.iterators, self.condition_node)
        )

from typing import Dict, Iterable, List, Optional, Union

from .domain import BoundRange, ComputedSet, Domain, IndexSet, PrimitiveSet, TupleSet
from .entity import (
    DecisionExpression,
    IndexedVariable,
    Parameter,
    TupleSchema,
)
from .environment import Environment
from .exceptions import DeclarationError, DomainNotFoundError, UnboundNameError
from .expansion import enumerate_bindings
from .types import Element, Index, IndexingSet


class State:
    """
    Registry of every named entity declared in one compilation run.
    """

    def __init__(self):

        self.tuple_schemas: Dict[str, TupleSchema] = {}

        self.tuple_sets: Dict[str, TupleSet] = {}
        self.computed_sets: Dict[str, ComputedSet] = {}
        self.primitive_sets: Dict[str, PrimitiveSet] = {}
        self.index_sets: Dict[str, IndexSet] = {}
        self.bound_ranges: Dict[str, BoundRange] = {}

        self.params: Dict[str, Parameter] = {}
        self.vars: Dict[str, IndexedVariable] = {}
        self.dexprs: Dict[str, DecisionExpression] = {}

    # Checkers
    # ------------------------------------------------------------------------------------------------------------------

    def symbol_exists(self, symbol: str) -> bool:
        return any(
            [
                symbol in self.tuple_schemas,
                self.domain_exists(symbol),
                symbol in self.params,
                symbol in self.vars,
                symbol in self.dexprs,
            ]
        )

    def domain_exists(self, symbol: str) -> bool:
        return self.get_domain(symbol) is not None

    def is_variable(self, symbol: str) -> bool:
        return symbol in self.vars

    def is_dexpr(self, symbol: str) -> bool:
        return symbol in self.dexprs

    def is_parameter(self, symbol: str) -> bool:
        return symbol in self.params

    # Accessors
    # ------------------------------------------------------------------------------------------------------------------

    def get_domain(self, symbol: str) -> Optional[Domain]:
        # fixed precedence: tuple sets, computed sets, primitive sets, index sets, bound ranges
        for registry in (
            self.tuple_sets,
            self.computed_sets,
            self.primitive_sets,
            self.index_sets,
            self.bound_ranges,
        ):
            if symbol in registry:
                return registry[symbol]
        return None

    def get_domains(self) -> List[Domain]:
        domains = []
        for registry in (
            self.tuple_sets,
            self.computed_sets,
            self.primitive_sets,
            self.index_sets,
            self.bound_ranges,
        ):
            domains.extend(registry.values())
        return domains

    def resolve_domain(self,
                       symbol: str,
                       env: Environment = None,
                       outer_value: Element = None) -> IndexingSet:
        """
        Resolve the elements of a named domain.
        :param symbol: declared symbol of the domain
        :param env: binding environment supplying the outer index of an indexed computed set
        :param outer_value: explicit outer index of an indexed computed set
        :return: ordered set of elements
        """

        if env is None:
            env = Environment()

        domain = self.get_domain(symbol)

        if domain is None:
            raise DomainNotFoundError("Domain '{0}' is not declared".format(symbol))

        if isinstance(domain, ComputedSet):
            return domain.get_elements(self, env, outer_value=outer_value)

        return domain.get_elements(self, env)

    def get_tuple_schema(self, symbol: str) -> Optional[TupleSchema]:
        return self.tuple_schemas.get(symbol, None)

    def get_tuple_set(self, symbol: str) -> Optional[TupleSet]:
        return self.tuple_sets.get(symbol, None)

    def get_parameter(self, symbol: str) -> Optional[Parameter]:
        return self.params.get(symbol, None)

    def get_variable(self, symbol: str) -> Optional[IndexedVariable]:
        return self.vars.get(symbol, None)

    def get_dexpr(self, symbol: str) -> Optional[DecisionExpression]:
        return self.dexprs.get(symbol, None)

    def get_parameter_value(self, symbol: str, idx: Index = None):
        """
        Retrieve a value of a parameter, evaluating its definition on first access.
        :param symbol: declared symbol of the parameter
        :param idx: index of the value, None if scalar
        :return: stored value
        """

        param = self.get_parameter(symbol)
        if param is None:
            raise UnboundNameError("Parameter '{0}' is not declared".format(symbol))

        if param.has_definition() and not param.is_defined:
            self.define_parameter(param)

        return param.get_value(idx)

    def define_parameter(self, param: Parameter):
        """
        Evaluate the definition of a parameter and store the resulting values.
        """

        param.value = None
        param.values = {}
        env = Environment()

        if not param.is_indexed():
            param.set_value(param.definition.evaluate_value(self, env))

        else:

            def assign(e: Environment):
                idx = tuple([e.get(it.symbol) for it in param.definition_iterators])
                param.set_indexed_value(idx, param.definition.evaluate_value(self, e))

            enumerate_bindings(self, env, param.definition_iterators, assign)

        param.is_defined = True

    # Object Addition
    # ------------------------------------------------------------------------------------------------------------------

    def __check_symbol(self, symbol: str):
        if self.symbol_exists(symbol):
            raise DeclarationError("Symbol '{0}' is already declared".format(symbol))

    def add_tuple_schema(self, schema: TupleSchema):
        self.__check_symbol(schema.symbol)
        self.tuple_schemas[schema.symbol] = schema

    def add_domain(self, domain: Domain):
        self.__check_symbol(domain.symbol)
        if isinstance(domain, TupleSet):
            self.tuple_sets[domain.symbol] = domain
        elif isinstance(domain, ComputedSet):
            self.computed_sets[domain.symbol] = domain
        elif isinstance(domain, PrimitiveSet):
            self.primitive_sets[domain.symbol] = domain
        elif isinstance(domain, IndexSet):
            self.index_sets[domain.symbol] = domain
        elif isinstance(domain, BoundRange):
            self.bound_ranges[domain.symbol] = domain
        else:
            raise DeclarationError(
                "Unable to register domain '{0}' of type '{1}'".format(
                    domain.symbol, type(domain).__name__
                )
            )

    def add_parameter(self, param: Parameter):
        self.__check_symbol(param.symbol)
        self.params[param.symbol] = param

    def add_variable(self, var: IndexedVariable):
        self.__check_symbol(var.symbol)
        self.vars[var.symbol] = var

    def add_dexpr(self, dexpr: DecisionExpression):
        self.__check_symbol(dexpr.symbol)
        self.dexprs[dexpr.symbol] = dexpr

    # Data Loading
    # ------------------------------------------------------------------------------------------------------------------

    def set_parameter_value(self, symbol: str, value, idx: Union[Index, Element] = None):
        """
        Assign a scalar or indexed value to a declared parameter.
        Cached domain evaluations and derived parameter values are invalidated.
        :param symbol: declared symbol of the parameter
        :param value: value to assign
        :param idx: index of the value if the parameter is indexed, None otherwise
        :return: None
        """

        param = self.get_parameter(symbol)
        if param is None:
            raise UnboundNameError("Parameter '{0}' is not declared".format(symbol))

        if idx is None:
            param.set_value(value)
        else:
            param.set_indexed_value(idx, value)

        self.invalidate_caches()

    def set_parameter_values(self, symbol: str, values: dict):
        param = self.get_parameter(symbol)
        if param is None:
            raise UnboundNameError("Parameter '{0}' is not declared".format(symbol))
        for idx, value in values.items():
            param.set_indexed_value(idx, value)
        self.invalidate_caches()

    def set_set_elements(self, symbol: str, elements: Iterable):
        domain = self.get_domain(symbol)
        if not isinstance(domain, PrimitiveSet):
            raise DomainNotFoundError(
                "Primitive set '{0}' is not declared".format(symbol)
            )
        # elements of an initialized set may already be written into expanded statements
        if not domain.is_external:
            raise DeclarationError(
                "Set '{0}' is initialized in the model and cannot be assigned data".format(symbol)
            )
        domain.set_elements(elements)
        self.invalidate_caches()

    def set_tuple_instances(self, symbol: str, instances: Iterable):
        tuple_set = self.get_tuple_set(symbol)
        if tuple_set is None:
            raise DomainNotFoundError("Tuple set '{0}' is not declared".format(symbol))
        tuple_set.set_instances(instances)
        self.invalidate_caches()

    def invalidate_caches(self):
        for domain in self.get_domains():
            domain.invalidate()
        for param in self.params.values():
            if param.has_definition():
                param.clear_values()


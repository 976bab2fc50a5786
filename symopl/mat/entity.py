from abc import ABC
from numbers import Number
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np

from .constants import *
from .exceptions import (
    DeclarationError,
    DimensionMismatchError,
    MissingIndexedValueError,
    NonScalarParameterError,
    TypeCoercionFailedError,
    UnknownFieldError,
)
from .types import Element, Index
from .util import format_number, get_element_literal, get_index_literal, normalize_element


class Entity(ABC):
    def __init__(self, symbol: str):
        """
        Constructor of the Entity class.

        :param symbol: unique declared symbol that identifies the entity
        """
        self.symbol: str = symbol

    def __str__(self):
        return self.symbol

    def get_dim(self) -> int:
        return 0


# Tuples
# ----------------------------------------------------------------------------------------------------------------------


class TupleSchema(Entity):
    def __init__(self,
                 symbol: str,
                 fields: Sequence[Tuple[str, str]],
                 key_fields: Sequence[str] = None):
        """
        Constructor of the TupleSchema class.

        :param symbol: name of the tuple type
        :param fields: ordered list of (field name, field type) pairs
        :param key_fields: ordered subset of field names that identify an instance; all fields if None or empty
        """

        super(TupleSchema, self).__init__(symbol)

        self.fields: List[Tuple[str, str]] = list(fields)
        self.field_types: Dict[str, str] = {}

        for field_name, field_type in self.fields:
            if field_name in self.field_types:
                raise DeclarationError(
                    "Field '{0}' is declared more than once in tuple '{1}'".format(
                        field_name, symbol
                    )
                )
            self.field_types[field_name] = field_type

        if key_fields is None or len(key_fields) == 0:
            key_fields = [f for f, _ in self.fields]
        for key_field in key_fields:
            if key_field not in self.field_types:
                raise DeclarationError(
                    "Key field '{0}' is not a field of tuple '{1}'".format(
                        key_field, symbol
                    )
                )
        self.key_fields: List[str] = list(key_fields)

    def get_field_names(self) -> List[str]:
        return [f for f, _ in self.fields]

    def has_field(self, field_name: str) -> bool:
        return field_name in self.field_types

    def create_instance(self,
                        values: Union[Sequence, Mapping[str, object]]) -> "TupleInstance":
        """
        Build a tuple instance of this schema, coercing each value to the type of its field.
        :param values: positional values in field order or a mapping of field names to values
        :return: tuple instance
        """

        if isinstance(values, Mapping):
            unknown_fields = [f for f in values if f not in self.field_types]
            if len(unknown_fields) > 0:
                raise UnknownFieldError(
                    "Tuple '{0}' has no field '{1}'".format(
                        self.symbol, unknown_fields[0]
                    )
                )
            missing_fields = [f for f, _ in self.fields if f not in values]
            if len(missing_fields) > 0:
                raise DimensionMismatchError(
                    "Tuple '{0}' requires a value for field '{1}'".format(
                        self.symbol, missing_fields[0]
                    )
                )
            values = [values[f] for f, _ in self.fields]

        values = list(values)
        if len(values) != len(self.fields):
            raise DimensionMismatchError(
                "Tuple '{0}' has {1} fields but {2} values were supplied".format(
                    self.symbol, len(self.fields), len(values)
                )
            )

        coerced_values = []
        for (field_name, field_type), value in zip(self.fields, values):
            coerced_values.append(coerce_value(value, field_type))

        return TupleInstance(self, tuple(coerced_values))

    def get_literal(self) -> str:
        field_literals = []
        for field_name, field_type in self.fields:
            prefix = "key " if field_name in self.key_fields else ""
            field_literals.append("{0}{1} {2};".format(prefix, field_type, field_name))
        return "tuple {0} {{ {1} }}".format(self.symbol, " ".join(field_literals))


class TupleInstance:
    """
    Immutable record of a tuple schema. Instances are hashable and compare by schema name and field values.
    """

    __slots__ = ("_schema", "_values")

    def __init__(self, schema: TupleSchema, values: Tuple):
        object.__setattr__(self, "_schema", schema)
        object.__setattr__(self, "_values", tuple(values))

    def __setattr__(self, key, value):
        raise AttributeError("Tuple instances are immutable")

    def __eq__(self, other):
        if isinstance(other, TupleInstance):
            return (
                self._schema.symbol == other._schema.symbol
                and self._values == other._values
            )
        return False

    def __hash__(self):
        return hash((self._schema.symbol, self._values))

    def __str__(self):
        return self.get_literal()

    def __repr__(self):
        return "{0}{1}".format(self._schema.symbol, self.get_literal())

    @property
    def schema(self) -> TupleSchema:
        return self._schema

    @property
    def values(self) -> Tuple:
        return self._values

    def get_value(self, field_name: str):
        for (f, _), value in zip(self._schema.fields, self._values):
            if f == field_name:
                return value
        raise UnknownFieldError(
            "Tuple '{0}' has no field '{1}'".format(self._schema.symbol, field_name)
        )

    def get_key(self) -> Tuple:
        return tuple([self.get_value(f) for f in self._schema.key_fields])

    def get_literal(self) -> str:
        return "<{0}>".format(",".join([get_element_literal(v) for v in self._values]))


# Value Coercion
# ----------------------------------------------------------------------------------------------------------------------


def coerce_value(value, type: str):
    """
    Coerce a raw value to the declared scalar type of an entity.
    Booleans are stored as the numbers 0.0 and 1.0.
    :param value: raw value
    :param type: declared type symbol
    :return: coerced value
    """

    if isinstance(value, (np.integer, np.floating)):
        value = value.item()

    if type == INT_TYPE:
        if isinstance(value, bool):
            return int(value)
        if isinstance(value, int):
            return value
        if isinstance(value, float) and value.is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                pass
        raise TypeCoercionFailedError(
            "Value '{0}' cannot be coerced to type '{1}'".format(value, type)
        )

    elif type == FLOAT_TYPE:
        if isinstance(value, Number):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value)
            except ValueError:
                pass
        raise TypeCoercionFailedError(
            "Value '{0}' cannot be coerced to type '{1}'".format(value, type)
        )

    elif type in (BOOL_TYPE, BOOLEAN_TYPE):
        if isinstance(value, bool):
            return 1.0 if value else 0.0
        if isinstance(value, Number):
            if abs(value) < EPSILON:
                return 0.0
            if abs(value - 1) < EPSILON:
                return 1.0
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return 1.0 if value.lower() == "true" else 0.0
        raise TypeCoercionFailedError(
            "Value '{0}' cannot be coerced to type '{1}'".format(value, type)
        )

    elif type == STRING_TYPE:
        if isinstance(value, str):
            return value
        raise TypeCoercionFailedError(
            "Value '{0}' cannot be coerced to type '{1}'".format(value, type)
        )

    # tuple type
    else:
        if isinstance(value, TupleInstance) and value.schema.symbol == type:
            return value
        raise TypeCoercionFailedError(
            "Value '{0}' cannot be coerced to tuple type '{1}'".format(value, type)
        )


def to_numeric_value(value, context: str = None) -> float:
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, Number):
        return float(value)
    raise TypeCoercionFailedError(
        "Value '{0}'{1} is not numeric".format(
            value, "" if context is None else " of '{0}'".format(context)
        )
    )


# Parameters
# ----------------------------------------------------------------------------------------------------------------------


class Parameter(Entity):
    def __init__(self,
                 symbol: str,
                 type: str = FLOAT_TYPE,
                 idx_set_symbols: Iterable[str] = None,
                 is_external: bool = False,
                 definition=None,
                 definition_iterators: list = None):
        """
        Constructor of the Parameter class.

        :param symbol: unique declared symbol that identifies the parameter
        :param type: scalar type of the values held by the parameter
        :param idx_set_symbols: symbols of the domains that index the parameter, empty if scalar
        :param is_external: True if the values are supplied after declaration
        :param definition: expression node from which the values are derived, None if the values are literal
        :param definition_iterators: iterators binding the index of an indexed definition
        """

        super(Parameter, self).__init__(symbol)

        self.type: str = type
        self.idx_set_symbols: List[str] = (
            list(idx_set_symbols) if idx_set_symbols is not None else []
        )
        self.is_external: bool = is_external
        self.definition = definition
        self.definition_iterators: list = (
            definition_iterators if definition_iterators is not None else []
        )
        self.is_defined: bool = False  # True once the definition has been evaluated

        self.value = None
        self.values: Dict[Index, object] = {}

    def __str__(self):
        if self.get_dim() == 0:
            return self.symbol
        return "{0}[{1}]".format(self.symbol, "][".join(self.idx_set_symbols))

    def get_dim(self) -> int:
        return len(self.idx_set_symbols)

    def is_indexed(self) -> bool:
        return self.get_dim() > 0

    def has_definition(self) -> bool:
        return self.definition is not None

    def has_value(self) -> bool:
        if self.is_indexed():
            return len(self.values) > 0
        return self.value is not None

    def get_value(self, idx: Index = None):
        """
        Retrieve a value of the parameter.
        :param idx: index of the value if the parameter is indexed, None otherwise
        :return: stored value
        """

        if idx is None or len(idx) == 0:

            if self.is_indexed():
                raise NonScalarParameterError(
                    "Indexed parameter '{0}' is referenced without an index".format(
                        self
                    )
                )
            if self.value is None:
                raise MissingIndexedValueError(
                    "Parameter '{0}' has not been assigned a value".format(self.symbol)
                )
            return self.value

        if len(idx) != self.get_dim():
            raise DimensionMismatchError(
                "Parameter '{0}' expects {1} indices but {2} were supplied".format(
                    self, self.get_dim(), len(idx)
                )
            )

        idx = tuple([normalize_element(e) for e in idx])
        if idx not in self.values:
            raise MissingIndexedValueError(
                "Parameter '{0}' has no value at index {1}".format(
                    self.symbol, get_index_literal(idx)
                )
            )
        return self.values[idx]

    def set_value(self, value):
        if self.is_indexed():
            raise NonScalarParameterError(
                "Indexed parameter '{0}' cannot be assigned a scalar value".format(self)
            )
        self.value = coerce_value(value, self.type)

    def set_indexed_value(self, idx: Union[Index, Element], value):
        if not isinstance(idx, tuple):
            idx = (idx,)
        if len(idx) != self.get_dim():
            raise DimensionMismatchError(
                "Parameter '{0}' expects {1} indices but {2} were supplied".format(
                    self, self.get_dim(), len(idx)
                )
            )
        idx = tuple([normalize_element(e) for e in idx])
        self.values[idx] = coerce_value(value, self.type)

    def clear_values(self):
        self.value = None
        self.values = {}
        self.is_defined = False

    def get_literal(self) -> str:
        literal = "{0} {1}".format(self.type, self.symbol)
        literal += "".join(["[{0}]".format(s) for s in self.idx_set_symbols])
        if self.is_external:
            literal += " = ..."
        elif self.definition is not None:
            literal += " = {0}".format(self.definition)
        elif not self.is_indexed() and self.value is not None:
            literal += " = {0}".format(get_element_literal(self.value))
        return literal


class TupleParameter(Parameter):
    def __init__(self,
                 symbol: str,
                 schema: TupleSchema,
                 idx_set_symbols: Iterable[str] = None,
                 is_external: bool = False,
                 definition=None,
                 definition_iterators: list = None):
        super(TupleParameter, self).__init__(
            symbol=symbol,
            type=schema.symbol,
            idx_set_symbols=idx_set_symbols,
            is_external=is_external,
            definition=definition,
            definition_iterators=definition_iterators,
        )
        self.schema: TupleSchema = schema

    def set_value(self, value):
        if not isinstance(value, TupleInstance):
            value = self.schema.create_instance(value)
        super(TupleParameter, self).set_value(value)

    def set_indexed_value(self, idx: Union[Index, Element], value):
        if not isinstance(value, TupleInstance):
            value = self.schema.create_instance(value)
        super(TupleParameter, self).set_indexed_value(idx, value)


# Decision Variables
# ----------------------------------------------------------------------------------------------------------------------


class IndexedVariable(Entity):
    def __init__(self,
                 symbol: str,
                 type: str = FLOAT_TYPE,
                 idx_set_symbols: Iterable[str] = None,
                 lb_node=None,
                 ub_node=None):
        """
        Constructor of the IndexedVariable class.

        :param symbol: unique declared symbol that identifies the variable
        :param type: numeric kind of the variable (float, int or boolean)
        :param idx_set_symbols: literals of the domains that index the variable (at most 2)
        :param lb_node: expression node of the lower bound, None if unbounded below
        :param ub_node: expression node of the upper bound, None if unbounded above
        """

        super(IndexedVariable, self).__init__(symbol)

        self.type: str = type
        self.idx_set_symbols: List[str] = (
            list(idx_set_symbols) if idx_set_symbols is not None else []
        )
        self.lb_node = lb_node
        self.ub_node = ub_node

        if len(self.idx_set_symbols) > 2:
            raise DeclarationError(
                "Decision variable '{0}' is indexed over {1} dimensions;".format(
                    symbol, len(self.idx_set_symbols)
                )
                + " at most 2 are supported"
            )

    def get_dim(self) -> int:
        return len(self.idx_set_symbols)

    def is_integer(self) -> bool:
        return self.type in (INT_TYPE, BOOLEAN_TYPE)

    def get_bounds(self, state) -> Tuple[float, float]:
        """
        Evaluate the bounds of the variable.
        :param state: registry against which bound expressions are evaluated
        :return: lower bound and upper bound, infinite when unbounded
        """

        lb = -np.inf
        ub = np.inf

        if self.type == BOOLEAN_TYPE:
            lb = 0.0
            ub = 1.0

        if self.lb_node is not None:
            lb = max(lb, self.lb_node.evaluate(state))
        if self.ub_node is not None:
            ub = min(ub, self.ub_node.evaluate(state))

        return lb, ub

    @staticmethod
    def generate_variable_name(symbol: str, idx: Index = None) -> str:
        """
        Generate the name of a concrete decision variable.
        The first index is appended to the symbol; any further index is appended after an underscore,
        e.g. x[1] becomes x1 and x[1][2] becomes x1_2.
        :param symbol: declared symbol of the variable
        :param idx: concrete index, None if the variable is scalar
        :return: concrete variable name
        """

        if idx is None or len(idx) == 0:
            return symbol

        idx_literals = []
        for element in idx:
            element = normalize_element(element)
            if isinstance(element, TupleInstance):
                idx_literals.append("_".join([format_number(k) for k in element.get_key()]))
            elif isinstance(element, Number):
                idx_literals.append(format_number(element))
            else:
                idx_literals.append(str(element))

        return symbol + "_".join(idx_literals)

    def get_literal(self) -> str:
        literal = "dvar {0} {1}".format(self.type, self.symbol)
        literal += "".join(["[{0}]".format(s) for s in self.idx_set_symbols])
        if self.lb_node is not None and self.ub_node is not None:
            literal += " in {0}..{1}".format(self.lb_node, self.ub_node)
        return literal


# Decision Expressions
# ----------------------------------------------------------------------------------------------------------------------


class DecisionExpression(Entity):
    def __init__(self,
                 symbol: str,
                 type: str,
                 expression_node,
                 idx_symbol: str = None,
                 idx_set_symbol: str = None):
        super(DecisionExpression, self).__init__(symbol)
        self.type: str = type
        self.expression_node = expression_node
        self.idx_symbol: Optional[str] = idx_symbol
        self.idx_set_symbol: Optional[str] = idx_set_symbol

    def get_dim(self) -> int:
        return 0 if self.idx_symbol is None else 1

    def is_indexed(self) -> bool:
        return self.idx_symbol is not None

    def get_literal(self) -> str:
        literal = "dexpr {0} {1}".format(self.type, self.symbol)
        if self.is_indexed():
            literal += "[{0} in {1}]".format(self.idx_symbol, self.idx_set_symbol)
        return literal + " = {0}".format(self.expression_node)

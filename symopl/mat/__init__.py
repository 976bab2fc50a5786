from .constants import *

from .types import Element, Index, IndexingSet

from .exceptions import (
    OPLError,
    ParsingError,
    DeclarationError,
    DomainNotFoundError,
    MissingOuterIndexError,
    ExpansionDepthError,
    UnboundNameError,
    DimensionMismatchError,
    MissingIndexedValueError,
    NonScalarParameterError,
    TypeCoercionFailedError,
    NonLinearTermError,
    CyclicDecisionExpressionError,
    KeyLookupFailedError,
    UnknownFieldError,
)

from .util import (
    normalize_element,
    get_element_literal,
    get_index_literal,
    format_number,
    is_true,
    is_zero,
)

from .entity import (
    Entity,
    TupleSchema,
    TupleInstance,
    Parameter,
    TupleParameter,
    IndexedVariable,
    DecisionExpression,
    coerce_value,
    to_numeric_value,
)

from .environment import Environment

from .expansion import (
    Iterator,
    enumerate_bindings,
    collect_bindings,
    get_iterators_literal,
)

from .domain import (
    Domain,
    IndexSet,
    BoundRange,
    PrimitiveSet,
    TupleSet,
    ComputedSet,
)

from .state import State

from .exprn import (
    ExpressionNode,
    ArithmeticExpressionNode,
    LogicalExpressionNode,
    StringExpressionNode,
)

from .aexprn import (
    NumericNode,
    ParameterNode,
    IndexedParameterNode,
    VariableNode,
    IndexedVariableNode,
    DecisionExpressionNode,
    build_value_node,
)

from .strexprn import StringNode, TupleInstanceNode

from .opern import BinaryArithmeticOperationNode, UnaryArithmeticOperationNode

from .lexprn import RelationalOperationNode, LogicalOperationNode

from .tuplen import TupleFieldAccessNode, ItemLookupNode

from .sumn import SummationNode

from .equation import LinearEquation, Objective

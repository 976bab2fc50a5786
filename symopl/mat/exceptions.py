from typing import List, Optional, Tuple


class OPLError(Exception):
    """
    Base class of every failure raised while declaring, evaluating, or expanding a model.

    Errors raised during the expansion of a statement carry the literal of the statement and the iterator bindings
    that were active when the failure occurred.
    """

    def __init__(self,
                 message: str,
                 statement: str = None,
                 bindings: List[Tuple[str, object]] = None):
        super().__init__(message)
        self.message: str = message
        self.statement: Optional[str] = statement
        self.bindings: Optional[List[Tuple[str, object]]] = bindings

    def __str__(self):
        literal = self.message
        if self.statement is not None:
            literal += " in statement '{0}'".format(self.statement)
        if self.bindings:
            literal += " with bindings ({0})".format(
                ", ".join(["{0}={1}".format(sym, val) for sym, val in self.bindings])
            )
        return literal

    def attach_context(self,
                       statement: str = None,
                       bindings: List[Tuple[str, object]] = None) -> "OPLError":
        # the innermost context is the most precise one; never overwrite it
        if self.statement is None:
            self.statement = statement
        if self.bindings is None and bindings is not None:
            self.bindings = list(bindings)
        return self


# Declaration and Parsing
# ----------------------------------------------------------------------------------------------------------------------


class ParsingError(OPLError, ValueError):
    pass


class DeclarationError(OPLError, ValueError):
    pass


# Domain Resolution
# ----------------------------------------------------------------------------------------------------------------------


class DomainNotFoundError(OPLError, LookupError):
    pass


class MissingOuterIndexError(OPLError, LookupError):
    pass


class ExpansionDepthError(OPLError, RecursionError):
    pass


# Evaluation
# ----------------------------------------------------------------------------------------------------------------------


class UnboundNameError(OPLError, NameError):
    pass


class DimensionMismatchError(OPLError, ValueError):
    pass


class MissingIndexedValueError(OPLError, LookupError):
    pass


class NonScalarParameterError(OPLError, TypeError):
    pass


class TypeCoercionFailedError(OPLError, TypeError):
    pass


# Linearization
# ----------------------------------------------------------------------------------------------------------------------


class NonLinearTermError(OPLError, ValueError):
    pass


class CyclicDecisionExpressionError(OPLError, RecursionError):
    pass


# Tuple Lookup
# ----------------------------------------------------------------------------------------------------------------------


class KeyLookupFailedError(OPLError, LookupError):
    pass


class UnknownFieldError(OPLError, AttributeError):
    pass

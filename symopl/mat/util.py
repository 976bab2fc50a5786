from numbers import Number
from typing import Iterable

import numpy as np

from .constants import EPSILON


# Elements
# ----------------------------------------------------------------------------------------------------------------------


def normalize_element(element):
    """
    Normalize an index element so that integral numbers compare and hash identically regardless of their origin.
    :param element: int, float, str or tuple instance
    :return: normalized element
    """
    if isinstance(element, bool):
        return int(element)
    if isinstance(element, (float, np.floating)):
        if np.isfinite(element) and float(element).is_integer():
            return int(element)
        return float(element)
    if isinstance(element, np.integer):
        return int(element)
    return element


def get_element_literal(element) -> str:
    if isinstance(element, str):
        return '"{0}"'.format(element)
    elif isinstance(element, Number):
        return format_number(element)
    else:
        return str(element)


def get_index_literal(idx: Iterable) -> str:
    return "".join(["[{0}]".format(get_element_literal(e)) for e in idx])


# Numbers
# ----------------------------------------------------------------------------------------------------------------------


def format_number(value) -> str:
    if isinstance(value, bool):
        return str(int(value))
    if value == np.inf:
        return "infinity"
    elif value == -np.inf:
        return "-infinity"
    elif isinstance(value, (float, np.floating)) and np.isfinite(value):
        if float(value).is_integer():
            return str(int(value))
        return repr(float(value))
    return str(value)


def is_true(value: float) -> bool:
    return abs(value - 1.0) < EPSILON


def is_zero(value: float) -> bool:
    return abs(value) < EPSILON


def to_boolean_value(flag: bool) -> float:
    return 1.0 if flag else 0.0

from typing import Tuple, Union

from ordered_set import OrderedSet

Element = Union[int, float, str, "TupleInstance"]
Index = Tuple[Element, ...]
IndexingSet = OrderedSet

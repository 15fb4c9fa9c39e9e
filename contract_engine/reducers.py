from __future__ import annotations

"""Per-field merge rules for immutable result records.

A result dataclass declares how each field combines by tagging it with
``reduced(Reducer.X, default)``. ``merge`` folds any number of records of the
same class field by field.
"""

from dataclasses import field, fields
from enum import Enum
from typing import Any, Callable, Dict, Iterable, Type, TypeVar


class Reducer(str, Enum):
    SUM = "sum"
    PRODUCT = "product"
    MAX = "max"
    MIN = "min"
    ANY = "any"


_OPS: Dict[Reducer, Callable[[Any, Any], Any]] = {
    Reducer.SUM: lambda a, b: a + b,
    Reducer.PRODUCT: lambda a, b: a * b,
    Reducer.MAX: max,
    Reducer.MIN: min,
    Reducer.ANY: lambda a, b: bool(a or b),
}


def reduced(reducer: Reducer, default: Any) -> Any:
    return field(default=default, metadata={"reducer": reducer})


T = TypeVar("T")


def merge(cls: Type[T], results: Iterable[T]) -> T:
    """Fold ``results`` into one record; an empty input gives the neutral record."""
    out = cls()
    for r in results:
        values = {}
        for f in fields(cls):
            op = _OPS[f.metadata["reducer"]]
            values[f.name] = op(getattr(out, f.name), getattr(r, f.name))
        out = cls(**values)
    return out

"""
Generic value tree produced by the YAML decoder.

Closed set of node kinds: Null, Bool, Int, Float, String, Sequence, Mapping.
Every node remembers the 1-based line it starts on so later stages can
report positions. Mapping keeps its pairs in document order as a tuple;
it is not a dict, so duplicate keys survive until someone rejects them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple, Union


@dataclass(frozen=True)
class Null:
    line: int = 0


@dataclass(frozen=True)
class Bool:
    value: bool
    line: int = 0


@dataclass(frozen=True)
class Int:
    value: int
    line: int = 0


@dataclass(frozen=True)
class Float:
    value: float
    line: int = 0


@dataclass(frozen=True)
class String:
    value: str
    line: int = 0


@dataclass(frozen=True)
class Sequence:
    items: Tuple["GenericValue", ...] = ()
    line: int = 0


@dataclass(frozen=True)
class Mapping:
    pairs: Tuple[Tuple["GenericValue", "GenericValue"], ...] = ()
    line: int = 0


Scalar = Union[Null, Bool, Int, Float, String]
GenericValue = Union[Null, Bool, Int, Float, String, Sequence, Mapping]

# int64 min .. uint64 max; wider integer literals are read as floats
INT_MIN = -(2 ** 63)
INT_MAX = 2 ** 64 - 1


def kind_name(node: GenericValue) -> str:
    if isinstance(node, Null):
        return "null"
    if isinstance(node, Bool):
        return "bool"
    if isinstance(node, Int):
        return "int"
    if isinstance(node, Float):
        return "float"
    if isinstance(node, String):
        return "string"
    if isinstance(node, Sequence):
        return "sequence"
    if isinstance(node, Mapping):
        return "mapping"
    raise TypeError(f"not a generic value: {type(node).__name__}")

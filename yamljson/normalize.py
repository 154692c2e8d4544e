from __future__ import annotations

import math
from decimal import Decimal
from typing import Any, Dict, List

from .errors import DuplicateKeyError, TypeMismatchError
from .tree import Bool, Float, GenericValue, Int, Mapping, Null, Sequence, String, kind_name


def format_float_key(value: float) -> str:
    """
    Spell a float the way it appears as a JSON object key:
    - shortest digits that round-trip (repr precision)
    - exponent form when the decimal exponent is < -4 or >= 6, e.g. 1e+36, 1e+06
    - exponent carries a sign and at least two digits
    - non-finite values in YAML spelling (.inf, -.inf, .nan) so the key re-reads as the same float
    """
    if math.isnan(value):
        return ".nan"
    if math.isinf(value):
        return ".inf" if value > 0 else "-.inf"
    if value == 0:
        return "-0" if math.copysign(1.0, value) < 0 else "0"

    dec = Decimal(repr(value)).normalize()
    sign, digits, exponent = dec.as_tuple()
    prefix = "-" if sign else ""
    point = len(digits) + int(exponent)
    x = point - 1
    if x < -4 or x >= 6:
        mantissa = str(digits[0])
        if len(digits) > 1:
            mantissa += "." + "".join(str(d) for d in digits[1:])
        return f"{prefix}{mantissa}e{'+' if x >= 0 else '-'}{abs(x):02d}"
    return format(dec, "f")


def _non_finite_name(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    return "+Inf" if value > 0 else "-Inf"


def normalize_key(node: GenericValue) -> str:
    if isinstance(node, String):
        return node.value
    if isinstance(node, Bool):
        return "true" if node.value else "false"
    if isinstance(node, Int):
        return str(node.value)
    if isinstance(node, Float):
        return format_float_key(node.value)
    if isinstance(node, Null):
        return "null"
    raise TypeMismatchError(f"unsupported map key of type {kind_name(node)}", line=node.line or None)


def _normalize_mapping(node: Mapping) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    seen: Dict[str, int] = {}
    for key_node, value_node in node.pairs:
        key = normalize_key(key_node)
        if key in seen:
            raise DuplicateKeyError(key, line=seen[key] or None, duplicate_line=key_node.line or None)
        seen[key] = key_node.line
        out[key] = normalize(value_node)
    return out


def normalize(node: GenericValue) -> Any:
    """
    Rewrite a generic tree into plain JSON-compatible values
    (dict with str keys, list, str, int, float, bool, None).
    """
    if isinstance(node, Mapping):
        return _normalize_mapping(node)
    if isinstance(node, Sequence):
        items: List[Any] = [normalize(item) for item in node.items]
        return items
    if isinstance(node, Null):
        return None
    if isinstance(node, (Bool, Int, String)):
        return node.value
    if isinstance(node, Float):
        if not math.isfinite(node.value):
            raise TypeMismatchError(
                f"unsupported value: {_non_finite_name(node.value)}",
                line=node.line or None,
            )
        return node.value
    raise TypeError(f"not a generic value: {type(node).__name__}")


__all__ = ["format_float_key", "normalize_key", "normalize"]

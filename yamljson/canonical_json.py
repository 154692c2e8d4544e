from __future__ import annotations

import json
from typing import Any, Dict, List, NoReturn, Tuple, Union

from .errors import DocumentSyntaxError, DuplicateKeyError, TypeMismatchError


def _parse_no_duplicate_keys(pairs: List[Tuple[str, Any]]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}
    for k, v in pairs:
        if k in out:
            raise DuplicateKeyError(k)
        out[k] = v
    return out


def _reject_constant(name: str) -> NoReturn:
    raise DocumentSyntaxError(f"json: invalid number literal {name}")


def loads_strict_no_duplicates(data: Union[bytes, str]) -> Any:
    """
    Strict JSON parse:
    - duplicate object keys fail (DuplicateKeyError)
    - NaN / Infinity / -Infinity fail (not JSON)
    - malformed input fails with 1-based line/column (DocumentSyntaxError)
    Object key order is kept.
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DocumentSyntaxError(f"json: invalid UTF-8 input at byte {exc.start}") from exc
    try:
        return json.loads(
            data,
            object_pairs_hook=_parse_no_duplicate_keys,
            parse_constant=_reject_constant,
        )
    except json.JSONDecodeError as exc:
        raise DocumentSyntaxError(
            f"json: line {exc.lineno} column {exc.colno}: {exc.msg}",
            line=exc.lineno,
            column=exc.colno,
        ) from exc


def compact_json(obj: Any, *, ensure_ascii: bool = False) -> bytes:
    """
    Compact JSON bytes:
    - separators=(",", ":")
    - insertion key order (no sort_keys)
    - allow_nan=False
    - UTF-8
    """
    try:
        s = json.dumps(
            obj,
            separators=(",", ":"),
            ensure_ascii=ensure_ascii,
            indent=None,
            allow_nan=False,
        )
    except (TypeError, ValueError) as exc:
        raise TypeMismatchError(f"json: unsupported value: {exc}") from exc
    return s.encode("utf-8")


__all__ = ["loads_strict_no_duplicates", "compact_json"]

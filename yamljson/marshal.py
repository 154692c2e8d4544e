"""
Typed records <-> YAML, with JSON as the intermediate form.

Records are anything pydantic can build a TypeAdapter for: BaseModel
subclasses, dataclasses, and plain containers of those. Wire names come from
pydantic's field names and aliases.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import logging
import types
import typing
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import BaseModel, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from .canonical_json import compact_json, loads_strict_no_duplicates
from .config import ConverterConfig, resolve_config
from .convert import json_to_yaml, yaml_to_json
from .errors import MarshalError, TypeMismatchError, UnknownFieldError, UnmarshalError, YAMLJSONError

logger = logging.getLogger(__name__)

_UNION_ORIGINS = (Union, getattr(types, "UnionType", Union))
_SEQUENCE_ORIGINS = (list, set, frozenset, collections.abc.Sequence, collections.abc.Set, collections.abc.MutableSequence)
_MAPPING_ORIGINS = (dict, collections.abc.Mapping, collections.abc.MutableMapping)

PathPart = Union[str, int]


def _join_path(parts: Sequence[PathPart]) -> str:
    out: List[str] = []
    for part in parts:
        if isinstance(part, int):
            out.append(f"[{part}]")
        elif out:
            out.append(f".{part}")
        else:
            out.append(str(part))
    return "".join(out)


def marshal(record: Any, *, config: Optional[ConverterConfig] = None) -> bytes:
    """Record -> JSON (pydantic, by alias) -> YAML. Keys follow field declaration order."""
    cfg = resolve_config(config)
    logger.debug("marshaling %s", type(record).__name__)
    try:
        payload = TypeAdapter(type(record)).dump_json(record, by_alias=True)
    except PydanticSerializationError as exc:
        raise MarshalError("error marshaling into JSON", TypeMismatchError(str(exc))) from exc
    try:
        return json_to_yaml(payload, config=cfg)
    except YAMLJSONError as exc:
        raise MarshalError("error converting JSON to YAML", exc) from exc


def _model_keys(model: type) -> Optional[Dict[str, Any]]:
    """Wire key -> annotation for a model type, or None when extra keys are allowed."""
    if isinstance(model, type) and issubclass(model, BaseModel):
        if model.model_config.get("extra") == "allow":
            return None
        keys: Dict[str, Any] = {}
        by_name = bool(model.model_config.get("populate_by_name") or model.model_config.get("validate_by_name"))
        for name, info in model.model_fields.items():
            keys[info.alias or name] = info.annotation
            if by_name:
                keys.setdefault(name, info.annotation)
        return keys
    hints = typing.get_type_hints(model)
    return {f.name: hints.get(f.name, Any) for f in dataclasses.fields(model)}


def _is_record(annotation: Any) -> bool:
    if typing.get_origin(annotation) is not None or not isinstance(annotation, type):
        return False
    return issubclass(annotation, BaseModel) or dataclasses.is_dataclass(annotation)


def check_unknown_fields(tree: Any, annotation: Any, path: Tuple[PathPart, ...] = ()) -> None:
    """
    Fail on the first object key the target type does not declare.

    Recurses through nested records, list/tuple/set items, dict values and
    Optional/Union members. Shape mismatches are left to validation.
    """
    if annotation is Any or annotation is None:
        return
    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)

    if origin is typing.Annotated:
        check_unknown_fields(tree, args[0], path)
        return

    if _is_record(annotation):
        if not isinstance(tree, dict):
            return
        keys = _model_keys(annotation)
        for key, value in tree.items():
            if keys is None:
                break
            if key not in keys:
                raise UnknownFieldError(key, path=_join_path(path + (key,)))
            check_unknown_fields(value, keys[key], path + (key,))
        return

    if origin in _UNION_ORIGINS:
        members = [a for a in args if a is not type(None)]
        if tree is None or not members:
            return
        failures: List[UnknownFieldError] = []
        for member in members:
            try:
                check_unknown_fields(tree, member, path)
                return
            except UnknownFieldError as exc:
                failures.append(exc)
        raise failures[0]

    if origin is tuple and isinstance(tree, list):
        if len(args) == 2 and args[1] is Ellipsis:
            item_types = [args[0]] * len(tree)
        else:
            item_types = [args[i] if i < len(args) else Any for i in range(len(tree))]
        for i, (item, item_type) in enumerate(zip(tree, item_types)):
            check_unknown_fields(item, item_type, path + (i,))
        return

    if origin in _SEQUENCE_ORIGINS and isinstance(tree, list):
        item_type = args[0] if args else Any
        for i, item in enumerate(tree):
            check_unknown_fields(item, item_type, path + (i,))
        return

    if origin in _MAPPING_ORIGINS and isinstance(tree, dict):
        value_type = args[1] if len(args) == 2 else Any
        for key, value in tree.items():
            check_unknown_fields(value, value_type, path + (key,))


def _mismatch(exc: ValidationError) -> YAMLJSONError:
    details = exc.errors(include_url=False)
    first = details[0]
    path = _join_path(first["loc"])
    if first["type"] == "extra_forbidden":
        return UnknownFieldError(str(first["loc"][-1]), path=path)
    lines = []
    for err in details:
        where = _join_path(err["loc"]) or "<root>"
        lines.append(f"{where}: {err['msg']} (got {err['input']!r})")
    return TypeMismatchError("json: cannot unmarshal " + "; ".join(lines), path=path)


def _decode_json(payload: bytes, target: Any, disallow_unknown_fields: bool) -> Any:
    model = type(target) if isinstance(target, BaseModel) else target
    tree = loads_strict_no_duplicates(payload)
    if tree is None and isinstance(target, BaseModel):
        # null decodes into an existing record as a no-op
        return target
    if disallow_unknown_fields:
        check_unknown_fields(tree, model)
    if isinstance(target, BaseModel) and isinstance(tree, dict):
        base = target.model_dump(by_alias=True, mode="json")
        base.update(tree)
        payload = compact_json(base)
    try:
        value = TypeAdapter(model).validate_json(payload, strict=True)
    except ValidationError as exc:
        raise _mismatch(exc) from exc
    if isinstance(target, BaseModel):
        for name in type(target).model_fields:
            setattr(target, name, getattr(value, name))
        return target
    return value


def unmarshal(
    data: Union[bytes, str],
    target: Any,
    *,
    disallow_unknown_fields: bool = False,
    config: Optional[ConverterConfig] = None,
) -> Any:
    """
    YAML -> JSON -> typed value.

    `target` is a type (a new value is returned) or a BaseModel instance, which
    is updated in place with the document's top-level keys and returned. The
    instance is only touched once the whole document has validated.
    Unknown fields are ignored unless disallow_unknown_fields is set.
    """
    if isinstance(target, BaseModel) and target.model_config.get("frozen"):
        raise TypeError(f"cannot unmarshal into frozen {type(target).__name__} instance")
    cfg = resolve_config(config)
    logger.debug(
        "unmarshaling into %s (disallow_unknown_fields=%s)",
        getattr(target, "__name__", type(target).__name__),
        disallow_unknown_fields,
    )
    try:
        payload = yaml_to_json(data, config=cfg)
    except YAMLJSONError as exc:
        raise UnmarshalError("error converting YAML to JSON", exc) from exc
    try:
        return _decode_json(payload, target, disallow_unknown_fields)
    except YAMLJSONError as exc:
        raise UnmarshalError("error unmarshaling JSON", exc) from exc


def unmarshal_strict(data: Union[bytes, str], target: Any, *, config: Optional[ConverterConfig] = None) -> Any:
    return unmarshal(data, target, disallow_unknown_fields=True, config=config)


__all__ = ["marshal", "unmarshal", "unmarshal_strict", "check_unknown_fields"]

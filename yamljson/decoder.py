from __future__ import annotations

import logging
import re
from typing import Dict, List, Optional, Set, Tuple, Union, cast

import yaml

from .errors import DocumentSyntaxError, DuplicateKeyError, TypeMismatchError
from .normalize import normalize_key
from .tree import INT_MAX, INT_MIN, Bool, Float, GenericValue, Int, Mapping, Null, Sequence, String

logger = logging.getLogger(__name__)

TIMESTAMP_TAG = "tag:yaml.org,2002:timestamp"
FLOAT_TAG = "tag:yaml.org,2002:float"
MERGE_TAG = "tag:yaml.org,2002:merge"
VALUE_TAG = "tag:yaml.org,2002:value"

# 1e+36, 1e3, 2.5e10: PyYAML's YAML 1.1 float pattern wants a dot and a signed exponent
EXPONENT_FLOAT_RE = re.compile(r"^[-+]?[0-9][0-9_]*(?:\.[0-9_]*)?[eE][-+]?[0-9]+$")
EXPONENT_FLOAT_FIRST = list("-+0123456789")


class YAMLLoader(yaml.SafeLoader):
    pass


# timestamps stay strings; the resolver table is copied so SafeLoader is untouched
YAMLLoader.yaml_implicit_resolvers = {
    ch: [r for r in resolvers if r[0] != TIMESTAMP_TAG]
    for ch, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
YAMLLoader.add_implicit_resolver(FLOAT_TAG, EXPONENT_FLOAT_RE, EXPONENT_FLOAT_FIRST)


def _line(node: yaml.Node) -> int:
    return node.start_mark.line + 1


class _TreeBuilder:
    """Walks composed PyYAML nodes into the generic value tree."""

    def __init__(self, loader: YAMLLoader, strict: bool) -> None:
        self._loader = loader
        self._strict = strict
        self._active: Set[int] = set()

    def build(self, node: yaml.Node) -> GenericValue:
        if isinstance(node, yaml.ScalarNode):
            return self._scalar(node)
        if id(node) in self._active:
            raise TypeMismatchError("recursive alias is not supported", line=_line(node))
        self._active.add(id(node))
        try:
            if isinstance(node, yaml.SequenceNode):
                return Sequence(tuple(self.build(item) for item in node.value), _line(node))
            if isinstance(node, yaml.MappingNode):
                return self._mapping(node)
            raise TypeMismatchError(f"unsupported node {type(node).__name__}", line=_line(node))
        finally:
            self._active.discard(id(node))

    def _scalar(self, node: yaml.ScalarNode) -> GenericValue:
        line = _line(node)
        if node.tag == VALUE_TAG:
            return String(node.value, line)
        value = self._loader.construct_object(node, deep=True)
        if value is None:
            return Null(line)
        if isinstance(value, bool):
            return Bool(value, line)
        if isinstance(value, int):
            if INT_MIN <= value <= INT_MAX:
                return Int(value, line)
            try:
                return Float(float(value), line)
            except OverflowError:
                return String(node.value, line)
        if isinstance(value, float):
            return Float(value, line)
        if isinstance(value, str):
            return String(value, line)
        raise TypeMismatchError(f"unsupported value of type {type(value).__name__}", line=line)

    def _merge_sources(self, value_node: yaml.Node) -> List[Mapping]:
        if isinstance(value_node, yaml.SequenceNode):
            candidates = list(value_node.value)
        else:
            candidates = [value_node]
        sources: List[Mapping] = []
        for candidate in candidates:
            if not isinstance(candidate, yaml.MappingNode):
                raise TypeMismatchError("merge key expects a mapping or a list of mappings", line=_line(candidate))
            sources.append(cast(Mapping, self.build(candidate)))
        return sources

    def _mapping(self, node: yaml.MappingNode) -> Mapping:
        pairs: List[Tuple[GenericValue, GenericValue]] = []
        seen: Dict[str, int] = {}
        merges: List[Mapping] = []

        for key_node, value_node in node.value:
            # resolved here instead of flatten_mapping so merged keys skip duplicate checks
            if key_node.tag == MERGE_TAG:
                merges.extend(self._merge_sources(value_node))
                continue
            key = self.build(key_node)
            name = normalize_key(key)
            if name in seen:
                first = pairs[seen[name]][0]
                if self._strict:
                    raise DuplicateKeyError(name, line=first.line, duplicate_line=key.line)
                pairs[seen[name]] = (first, self.build(value_node))
                continue
            seen[name] = len(pairs)
            pairs.append((key, self.build(value_node)))

        if merges:
            # explicit keys win over merged ones; earlier merge sources win over later
            merged: List[Tuple[GenericValue, GenericValue]] = []
            taken = set(seen)
            for source in merges:
                for key, value in source.pairs:
                    name = normalize_key(key)
                    if name not in taken:
                        taken.add(name)
                        merged.append((key, value))
            pairs = merged + pairs

        return Mapping(tuple(pairs), _line(node))


def decode(data: Union[bytes, str], strict: bool = True) -> GenericValue:
    """
    Parse one YAML document into a generic value tree.

    With strict=True a repeated key within one mapping raises DuplicateKeyError;
    otherwise the later value replaces the earlier one.
    """
    logger.debug("decoding %d bytes of YAML (strict=%s)", len(data), strict)
    try:
        loader = YAMLLoader(data)
    except yaml.YAMLError as exc:
        raise DocumentSyntaxError(f"yaml: {exc}") from exc
    try:
        node = loader.get_single_node()
        if node is None:
            return Null(1)
        return _TreeBuilder(loader, strict).build(node)
    except yaml.constructor.ConstructorError as exc:
        line, _ = _position(exc)
        raise TypeMismatchError(_problem(exc), line=line) from exc
    except yaml.MarkedYAMLError as exc:
        line, column = _position(exc)
        if line is None:
            message = f"yaml: {_problem(exc)}"
        else:
            message = f"yaml: line {line}: {_problem(exc)}"
        raise DocumentSyntaxError(message, line=line, column=column) from exc
    except yaml.YAMLError as exc:
        raise DocumentSyntaxError(f"yaml: {exc}") from exc
    finally:
        loader.dispose()


def _problem(exc: yaml.MarkedYAMLError) -> str:
    return str(exc.problem or exc.context or "invalid document")


def _position(exc: yaml.MarkedYAMLError) -> Tuple[Optional[int], Optional[int]]:
    mark = exc.problem_mark or exc.context_mark
    if mark is None:
        return None, None
    return mark.line + 1, mark.column + 1


__all__ = ["YAMLLoader", "decode", "EXPONENT_FLOAT_RE", "EXPONENT_FLOAT_FIRST", "FLOAT_TAG"]

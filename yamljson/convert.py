from __future__ import annotations

import logging
from typing import Any, Optional, Union

import yaml

from .canonical_json import compact_json, loads_strict_no_duplicates
from .config import ConverterConfig, resolve_config
from .decoder import EXPONENT_FLOAT_FIRST, EXPONENT_FLOAT_RE, FLOAT_TAG, decode
from .normalize import normalize

logger = logging.getLogger(__name__)


class YAMLDumper(yaml.SafeDumper):
    def ignore_aliases(self, data: Any) -> bool:
        return True


# strings such as "1e3" read back as floats through YAMLLoader, so they must be quoted
YAMLDumper.add_implicit_resolver(FLOAT_TAG, EXPONENT_FLOAT_RE, EXPONENT_FLOAT_FIRST)

_DOCUMENT_END = b"\n...\n"


def yaml_to_json(data: Union[bytes, str], *, config: Optional[ConverterConfig] = None) -> bytes:
    """YAML document -> compact JSON. Duplicate keys at any level are rejected."""
    cfg = resolve_config(config)
    tree = decode(data, strict=True)
    out = compact_json(normalize(tree), ensure_ascii=cfg.ensure_ascii)
    logger.debug("converted %d bytes of YAML to %d bytes of JSON", len(data), len(out))
    return out


def dump_yaml(obj: Any, cfg: ConverterConfig) -> bytes:
    out = yaml.dump(
        obj,
        Dumper=YAMLDumper,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=cfg.allow_unicode,
        indent=cfg.indent,
        width=cfg.width,
        encoding="utf-8",
    )
    # PyYAML closes a plain root scalar with an explicit document end marker
    if not isinstance(obj, (dict, list)) and out.endswith(_DOCUMENT_END):
        out = out[: -len(_DOCUMENT_END) + 1]
    return out


def json_to_yaml(data: Union[bytes, str], *, config: Optional[ConverterConfig] = None) -> bytes:
    """JSON document -> block-style YAML, keys in document order, null spelled out."""
    cfg = resolve_config(config)
    tree = loads_strict_no_duplicates(data)
    out = dump_yaml(tree, cfg)
    logger.debug("converted %d bytes of JSON to %d bytes of YAML", len(data), len(out))
    return out


__all__ = ["YAMLDumper", "yaml_to_json", "json_to_yaml", "dump_yaml"]

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .errors import ConfigError

_TRUE = ("1", "true", "TRUE", "yes", "YES")
_FALSE = ("0", "false", "FALSE", "no", "NO")


@dataclass(frozen=True)
class ConverterConfig:
    indent: int = 2
    width: int = 80
    allow_unicode: bool = True
    ensure_ascii: bool = False

    def __post_init__(self) -> None:
        # PyYAML silently falls back to 2 outside this range
        if not 2 <= self.indent <= 9:
            raise ConfigError(f"indent must be between 2 and 9, got {self.indent}", name="indent")
        if self.width <= self.indent * 2:
            raise ConfigError(f"width must exceed twice the indent, got {self.width}", name="width")

    @classmethod
    def from_mapping(cls, obj: Mapping[str, Any]) -> "ConverterConfig":
        return cls(
            indent=int(obj.get("indent", 2)),
            width=int(obj.get("width", 80)),
            allow_unicode=bool(obj.get("allow_unicode", True)),
            ensure_ascii=bool(obj.get("ensure_ascii", False)),
        )


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConfigError(f"{name}: expected a boolean flag, got {raw!r}", name=name)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name}: expected an integer, got {raw!r}", name=name) from None


def load_config_from_env() -> ConverterConfig:
    return ConverterConfig(
        indent=_env_int("YAMLJSON_INDENT", 2),
        width=_env_int("YAMLJSON_WIDTH", 80),
        allow_unicode=_env_bool("YAMLJSON_ALLOW_UNICODE", True),
        ensure_ascii=_env_bool("YAMLJSON_ENSURE_ASCII", False),
    )


def resolve_config(config: Optional[Any]) -> ConverterConfig:
    if config is None:
        return load_config_from_env()
    if isinstance(config, ConverterConfig):
        return config
    if isinstance(config, dict):
        return ConverterConfig.from_mapping(config)
    raise TypeError(f"config must be ConverterConfig or dict, got {type(config).__name__}")


__all__ = ["ConverterConfig", "load_config_from_env", "resolve_config"]

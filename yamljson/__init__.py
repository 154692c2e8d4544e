from __future__ import annotations

import logging

from .config import ConverterConfig, load_config_from_env
from .convert import json_to_yaml, yaml_to_json
from .decoder import decode
from .errors import (
    ConfigError,
    DocumentSyntaxError,
    DuplicateKeyError,
    MarshalError,
    TypeMismatchError,
    UnknownFieldError,
    UnmarshalError,
    YAMLJSONError,
)
from .marshal import marshal, unmarshal, unmarshal_strict
from .normalize import normalize

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "ConverterConfig",
    "load_config_from_env",
    "yaml_to_json",
    "json_to_yaml",
    "decode",
    "normalize",
    "marshal",
    "unmarshal",
    "unmarshal_strict",
    "YAMLJSONError",
    "ConfigError",
    "DocumentSyntaxError",
    "DuplicateKeyError",
    "TypeMismatchError",
    "UnknownFieldError",
    "UnmarshalError",
    "MarshalError",
]

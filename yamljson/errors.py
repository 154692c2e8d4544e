from __future__ import annotations

from typing import Optional


class YAMLJSONError(ValueError):
    """Base error for every failed conversion."""

    def __init__(self, message: str, *, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line


class DocumentSyntaxError(YAMLJSONError):
    """Malformed YAML or JSON input."""

    def __init__(self, message: str, *, line: Optional[int] = None, column: Optional[int] = None) -> None:
        super().__init__(message, line=line)
        self.column = column


class DuplicateKeyError(YAMLJSONError):
    """Two keys of one mapping normalize to the same string.

    `line` is where the key was first defined, `duplicate_line` where it was
    defined again. JSON input carries no positions, so both may be None.
    """

    def __init__(self, key: str, *, line: Optional[int] = None, duplicate_line: Optional[int] = None) -> None:
        message = f"mapping key {_quote(key)} already defined"
        if line is not None:
            message = f"{message} at line {line}"
        if duplicate_line is not None:
            message = f"line {duplicate_line}: {message}"
        super().__init__(message, line=line)
        self.key = key
        self.duplicate_line = duplicate_line


class TypeMismatchError(YAMLJSONError):
    """A value has no JSON form or cannot populate the target field."""

    def __init__(self, message: str, *, path: str = "", line: Optional[int] = None) -> None:
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message, line=line)
        self.path = path


class UnknownFieldError(YAMLJSONError):
    """Document field not declared by the target record."""

    def __init__(self, field: str, *, path: str = "") -> None:
        super().__init__(f"json: unknown field {_quote(field)}")
        self.field = field
        self.path = path


class ConfigError(YAMLJSONError):
    """Invalid converter setting, from the environment or passed in."""

    def __init__(self, message: str, *, name: str = "") -> None:
        super().__init__(message)
        self.name = name


class UnmarshalError(YAMLJSONError):
    """Typed decode failure; the underlying error is kept in `cause`."""

    def __init__(self, prefix: str, cause: YAMLJSONError) -> None:
        super().__init__(f"{prefix}: yaml: unmarshal errors:\n  {cause}", line=cause.line)
        self.prefix = prefix
        self.cause = cause


class MarshalError(YAMLJSONError):
    """Typed encode failure; the underlying error is kept in `cause`."""

    def __init__(self, prefix: str, cause: YAMLJSONError) -> None:
        super().__init__(f"{prefix}: {cause}", line=cause.line)
        self.prefix = prefix
        self.cause = cause


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import Dict, List, Optional

import pytest
from pydantic import BaseModel, ConfigDict, Field

from yamljson.errors import (
    DocumentSyntaxError,
    DuplicateKeyError,
    TypeMismatchError,
    UnknownFieldError,
    UnmarshalError,
)
from yamljson.marshal import check_unknown_fields, marshal, unmarshal, unmarshal_strict


class MarshalRecord(BaseModel):
    A: str
    B: int
    C: float


class Primitives(BaseModel):
    number: int = 0
    string: str = ""
    flag: bool = Field(False, alias="bool")


class NestedString(BaseModel):
    string: str = ""


class NestedHolder(BaseModel):
    nested_string: NestedString = Field(default_factory=NestedString, alias="nestedString")


class NestedStrings(BaseModel):
    string: str = ""
    string_ptr: Optional[str] = Field(None, alias="stringPtr")


class SliceHolder(BaseModel):
    items: List[NestedStrings] = Field(default_factory=list, alias="slice")


class StringMap(BaseModel):
    entries: Dict[str, str] = Field(default_factory=dict, alias="dict")


class NamedThing(BaseModel):
    name: str


class OptionalHolder(BaseModel):
    inner: Optional[NestedString] = None


class Closed(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: str = ""


class Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""


@dataclass
class Point:
    x: int
    y: int


def test_marshal_extreme_numbers():
    record = MarshalRecord(A="a", B=2 ** 63 - 1, C=sys.float_info.max)
    assert marshal(record) == b"A: a\nB: 9223372036854775807\nC: 1.7976931348623157e+308\n"


def test_marshal_uses_aliases_and_field_order():
    record = NestedStrings(string="abc", stringPtr=None)
    assert marshal(record) == b"string: abc\nstringPtr: null\n"


def test_marshal_nested_records():
    record = SliceHolder(slice=[NestedStrings(string="a", stringPtr="b")])
    assert marshal(record) == b"slice:\n- string: a\n  stringPtr: b\n"


def test_marshal_dataclass_and_plain_containers():
    assert marshal(Point(x=1, y=2)) == b"x: 1\ny: 2\n"
    assert marshal({"b": 1, "a": [1, 2]}) == b"b: 1\na:\n- 1\n- 2\n"


def test_marshal_then_unmarshal():
    record = SliceHolder(slice=[NestedStrings(string="123", stringPtr="456"), NestedStrings(string="x")])
    assert unmarshal(marshal(record), SliceHolder) == record


@pytest.mark.parametrize(
    "yaml_text, expected",
    [
        ('string: "1"', {"number": 0, "string": "1", "flag": False}),
        ("bool: true", {"number": 0, "string": "", "flag": True}),
        ("number: 1", {"number": 1, "string": "", "flag": False}),
        ("bool: true\nnumber: 2", {"number": 2, "string": "", "flag": True}),
        ("string: foo\nunknownField: 2", {"number": 0, "string": "foo", "flag": False}),
    ],
)
def test_unmarshal_primitives(yaml_text, expected):
    out = unmarshal(yaml_text.encode("utf-8"), Primitives)
    assert isinstance(out, Primitives)
    assert {"number": out.number, "string": out.string, "flag": out.flag} == expected


def test_unmarshal_nested():
    out = unmarshal(b"nestedString:\n  string: hello", NestedHolder)
    assert out.nested_string == NestedString(string="hello")


def test_unmarshal_slice():
    data = b'slice:\n  - string: abc\n    stringPtr: def\n  - string: "123"\n    stringPtr: "456"\n'
    out = unmarshal(data, SliceHolder)
    assert out.items == [
        NestedStrings(string="abc", stringPtr="def"),
        NestedStrings(string="123", stringPtr="456"),
    ]


def test_unmarshal_string_map():
    out = unmarshal(b"dict:\n  b: balloon", StringMap)
    assert out.entries == {"b": "balloon"}


def test_unmarshal_map_of_records():
    data = b"\na:\n  name: TestA\nb:\n  name: TestB\n"
    out = unmarshal(data, Dict[str, NamedThing])
    assert out == {"a": NamedThing(name="TestA"), "b": NamedThing(name="TestB")}


def test_unmarshal_dataclass():
    assert unmarshal(b"x: 1\ny: 2\n", Point) == Point(x=1, y=2)


def test_unmarshal_into_instance_overlays_fields():
    target = Primitives(number=5, string="keep")
    out = unmarshal(b"bool: true\nnumber: 2", target)
    assert out is target
    assert (target.number, target.string, target.flag) == (2, "keep", True)


@pytest.mark.parametrize(
    "yaml_text, want_err",
    [
        ("number: 1\nnumber: 2", 'mapping key "number" already defined at line 1'),
        ("a: [1,2,3]\na: value-of-a", 'mapping key "a" already defined at line 1'),
        ("bool: true\nbool: false", 'mapping key "bool" already defined at line 1'),
    ],
)
def test_unmarshal_duplicate_keys_leave_target_untouched(yaml_text, want_err):
    target = Primitives()
    with pytest.raises(UnmarshalError) as exc:
        unmarshal(yaml_text.encode("utf-8"), target)
    message = str(exc.value)
    assert "yaml: unmarshal errors" in message
    assert want_err in message
    assert message.startswith("error converting YAML to JSON: ")
    assert isinstance(exc.value.cause, DuplicateKeyError)
    assert exc.value.__cause__ is exc.value.cause
    assert target == Primitives()


def test_unmarshal_type_mismatch():
    target = Primitives(string="before")
    with pytest.raises(UnmarshalError) as exc:
        unmarshal(b"string: after\nnumber: abc\n", target)
    cause = exc.value.cause
    assert isinstance(cause, TypeMismatchError)
    assert cause.path == "number"
    assert str(exc.value).startswith("error unmarshaling JSON: yaml: unmarshal errors:\n  json: cannot unmarshal number")
    assert target.string == "before"


def test_unmarshal_does_not_coerce_strings_to_numbers():
    with pytest.raises(UnmarshalError) as exc:
        unmarshal(b'number: "2"', Primitives)
    assert isinstance(exc.value.cause, TypeMismatchError)


def test_unmarshal_reports_nested_path():
    with pytest.raises(UnmarshalError) as exc:
        unmarshal(b"slice:\n- string: ok\n- string: [1]\n", SliceHolder)
    assert exc.value.cause.path == "slice[1].string"


def test_unmarshal_syntax_error():
    with pytest.raises(UnmarshalError) as exc:
        unmarshal(b"a: [1, 2\n", Primitives)
    assert isinstance(exc.value.cause, DocumentSyntaxError)


def test_unmarshal_strict_rejects_unknown_fields():
    with pytest.raises(UnmarshalError) as exc:
        unmarshal(b"string: foo\nunknownField: 2", Primitives, disallow_unknown_fields=True)
    cause = exc.value.cause
    assert isinstance(cause, UnknownFieldError)
    assert cause.field == "unknownField"
    assert 'json: unknown field "unknownField"' in str(exc.value)


def test_unmarshal_strict_accepts_known_fields():
    out = unmarshal_strict(b"string: foo\nbool: true", Primitives)
    assert (out.string, out.flag) == ("foo", True)


def test_unmarshal_strict_checks_nested_positions():
    with pytest.raises(UnmarshalError) as exc:
        unmarshal_strict(b"slice:\n- string: a\n- string: b\n  extra: 1\n", SliceHolder)
    assert exc.value.cause.path == "slice[1].extra"

    with pytest.raises(UnmarshalError) as exc:
        unmarshal_strict(b"inner:\n  string: x\n  bogus: 1\n", OptionalHolder)
    assert exc.value.cause.path == "inner.bogus"

    with pytest.raises(UnmarshalError) as exc:
        unmarshal_strict(b"a:\n  name: A\n  age: 3\n", Dict[str, NamedThing])
    assert exc.value.cause.path == "a.age"


def test_model_forbidding_extra_reports_unknown_field():
    with pytest.raises(UnmarshalError) as exc:
        unmarshal(b"name: x\nother: 1\n", Closed)
    assert isinstance(exc.value.cause, UnknownFieldError)
    assert exc.value.cause.field == "other"


@pytest.mark.parametrize("data", [b"", b"~\n", b"null\n"])
def test_unmarshal_null_document_leaves_instance_alone(data):
    target = Primitives(number=5, string="keep")
    assert unmarshal(data, target) is target
    assert (target.number, target.string, target.flag) == (5, "keep", False)
    assert unmarshal_strict(data, target) is target


def test_unmarshal_into_frozen_instance_is_refused():
    with pytest.raises(TypeError):
        unmarshal(b"name: x\n", Frozen())


def test_check_unknown_fields_ignores_shape_mismatch():
    check_unknown_fields("not an object", Primitives)
    check_unknown_fields([{"x": 1}], Dict[str, int])
    check_unknown_fields(None, Optional[NestedString])

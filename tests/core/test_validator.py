"""Unit tests for core.validator."""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, TypeAdapter

from schemql.core import JsonText, PydanticValidator, ValidationResult, Validator, as_validator, parse_json


class _Custom:
    def validate(self, value):
        return ValidationResult(value=value)


def test_as_validator_none() -> None:
    assert as_validator(None) is None


def test_as_validator_model() -> None:
    class M(BaseModel):
        x: int

    v = as_validator(M)
    assert isinstance(v, PydanticValidator)
    assert v.validate({"x": "1"}).value == M(x=1)


def test_as_validator_type_adapter() -> None:
    v = as_validator(TypeAdapter(list[int]))
    assert isinstance(v, PydanticValidator)
    assert v.validate(["1", 2]).value == [1, 2]


def test_as_validator_annotation() -> None:
    v = as_validator(dict[str, int])
    result = v.validate({"a": "x"})
    assert not result.ok
    assert result.issues[0].path == ("a",)


def test_as_validator_custom_kept() -> None:
    custom = _Custom()
    assert as_validator(custom) is custom
    assert isinstance(custom, Validator)


def test_issue_to_dict() -> None:
    result = as_validator(dict[str, int]).validate({"a": "x"})
    assert result.issues[0].to_dict()["path"] == ["a"]


def test_parse_json() -> None:
    assert parse_json('{"a": 1}') == {"a": 1}
    assert parse_json({"a": 1}) == {"a": 1}


def test_parse_json_in_model() -> None:
    class M(BaseModel):
        meta: Annotated[dict[str, Any], JsonText]
        other: Annotated[list[int], BeforeValidator(parse_json)]

    m = M(meta='{"a": 1}', other="[1, 2]")
    assert m.meta == {"a": 1}
    assert m.other == [1, 2]


def test_parse_json_invalid_is_issue() -> None:
    class M(BaseModel):
        meta: Annotated[dict[str, Any], JsonText]

    result = as_validator(M).validate({"meta": "{not json"})
    assert not result.ok
    assert result.issues[0].path == ("meta",)

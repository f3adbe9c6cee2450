"""Argument validation for action input shapes.

An InputShape is compiled once, when its action is constructed, into a strict
Pydantic model. validate_arguments() checks a raw argument mapping against it
and reports the first violation as a ValidationError.

Shapes constrain type and required-ness. ``choices`` restricts a string
field to a fixed set, but a rejection there is a protocol fault the caller's
reasoning layer never sees; prefer checking domain values inside the action
and returning ``Outcome.error(...)``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, create_model, model_validator
from pydantic import ValidationError as PydanticValidationError

from hellomcp.core.result import Err, Ok, Result, ValidationError

FieldType = Literal["string", "integer", "number", "boolean"]

_PYTHON_TYPES: dict[str, type] = {
    "string": str,
    "integer": int,
    "number": float,
    "boolean": bool,
}


class FieldSpec(BaseModel):
    """A single named argument: its primitive type, description and required-ness."""

    model_config = ConfigDict(frozen=True)

    type: FieldType = "string"
    description: str = ""
    required: bool = True
    choices: tuple[str, ...] | None = None

    @model_validator(mode="after")
    def _choices_need_strings(self) -> FieldSpec:
        if self.choices is not None and self.type != "string":
            raise ValueError("choices are only supported on string fields")
        if self.choices is not None and not self.choices:
            raise ValueError("choices must not be empty")
        return self

    def annotation(self) -> Any:
        if self.choices is not None:
            return Literal[self.choices]  # type: ignore[valid-type]
        return _PYTHON_TYPES[self.type]

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type}
        if self.description:
            schema["description"] = self.description
        if self.choices is not None:
            schema["enum"] = list(self.choices)
        return schema


def string(description: str = "", *, required: bool = True) -> FieldSpec:
    return FieldSpec(type="string", description=description, required=required)


def integer(description: str = "", *, required: bool = True) -> FieldSpec:
    return FieldSpec(type="integer", description=description, required=required)


def number(description: str = "", *, required: bool = True) -> FieldSpec:
    return FieldSpec(type="number", description=description, required=required)


def boolean(description: str = "", *, required: bool = True) -> FieldSpec:
    return FieldSpec(type="boolean", description=description, required=required)


class InputShape:
    """A fully-formed argument shape with its compiled validation model.

    Build one with InputShape.from_fields(); the model is created there and
    reused for every call.
    """

    __slots__ = ("_fields", "_model")

    def __init__(self, fields: Mapping[str, FieldSpec], model: type[BaseModel]) -> None:
        self._fields = dict(fields)
        self._model = model

    @classmethod
    def from_fields(cls, fields: Mapping[str, FieldSpec]) -> InputShape:
        definitions: dict[str, Any] = {}
        for index, (name, spec) in enumerate(fields.items()):
            if not isinstance(spec, FieldSpec):
                raise TypeError(f"Field '{name}' must be a FieldSpec, got {type(spec).__name__}")
            annotation = spec.annotation()
            # Internal attribute names avoid clashes with BaseModel members;
            # the alias keeps the wire name.
            if spec.required:
                definitions[f"field_{index}"] = (
                    annotation,
                    Field(alias=name, description=spec.description),
                )
            else:
                definitions[f"field_{index}"] = (
                    annotation | None,
                    Field(default=None, alias=name, description=spec.description),
                )
        model = create_model(  # type: ignore[call-overload]
            "Arguments",
            __config__=ConfigDict(strict=True, extra="ignore"),
            **definitions,
        )
        return cls(fields, model)

    @property
    def fields(self) -> dict[str, FieldSpec]:
        return dict(self._fields)

    @property
    def model(self) -> type[BaseModel]:
        return self._model

    @property
    def required(self) -> list[str]:
        return [name for name, spec in self._fields.items() if spec.required]

    def json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {name: spec.json_schema() for name, spec in self._fields.items()},
        }
        if self.required:
            schema["required"] = self.required
        return schema

    def __repr__(self) -> str:
        return f"InputShape({', '.join(self._fields)})"


def input_schema(shape: InputShape | None) -> dict[str, Any]:
    """Return the JSON Schema advertised for a shape (an open object when absent)."""
    if shape is None:
        return {"type": "object", "properties": {}}
    return shape.json_schema()


def _first_violation(exc: PydanticValidationError) -> ValidationError:
    error = exc.errors()[0]
    loc = error.get("loc", ())
    field = ".".join(str(part) for part in loc) or "arguments"
    kind = error.get("type", "")
    message = error.get("msg", "invalid value")

    if kind == "missing":
        text = f"Missing required argument '{field}'"
    elif kind == "literal_error":
        text = f"Invalid value for argument '{field}': {message}"
    else:
        text = f"Invalid type for argument '{field}': {message}"

    return ValidationError(text, context={"field": field})


def validate_arguments(
    shape: InputShape | None,
    arguments: Mapping[str, Any] | None,
) -> Result[dict[str, Any], ValidationError]:
    """Check raw arguments against a shape.

    Returns Ok with the validated arguments (unknown keys dropped, absent
    optional fields set to None) or Err describing the first violation.
    Without a shape, any mapping is accepted as-is.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, Mapping):
        return Err(
            ValidationError(
                "Arguments must be an object",
                context={"received": type(arguments).__name__},
            )
        )
    if shape is None:
        return Ok(dict(arguments))

    try:
        validated = shape.model.model_validate(dict(arguments))
    except PydanticValidationError as exc:
        return Err(_first_violation(exc))
    return Ok(validated.model_dump(by_alias=True))


__all__ = [
    "FieldSpec",
    "FieldType",
    "InputShape",
    "boolean",
    "input_schema",
    "integer",
    "number",
    "string",
    "validate_arguments",
]

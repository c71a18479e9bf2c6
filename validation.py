"""
Request validation shared by the services and the persistence path.

Every record is checked against its schema model exactly once, before the
store is touched, and violations are reported as one readable message.
"""

from typing import Any, List, Type, TypeVar

from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class BadInputError(Exception):
    """Client-supplied data failed a presence, format or length rule."""

    def __init__(self, errors: List[str]):
        self.errors = errors
        super().__init__(". ".join(errors))

    @property
    def message(self) -> str:
        return str(self)


def _describe(error: dict) -> str:
    field = str(error["loc"][0]) if error["loc"] else "body"
    kind = error["type"]
    ctx = error.get("ctx") or {}

    if kind == "missing" or error.get("input") is None:
        return f"{field} is required"
    if kind == "string_too_short":
        if ctx.get("min_length") == 1:
            return f"{field} is required"
        return f"{field} must be at least {ctx['min_length']} characters"
    if kind == "string_too_long":
        return f"{field} must be at most {ctx['max_length']} characters"
    if kind == "string_pattern_mismatch":
        return f"Please provide a valid {field}"
    if kind == "control_characters":
        return f"{field} contains invalid characters"
    if kind == "string_type":
        return f"{field} must be a string"
    return error["msg"]


def describe_errors(exc: ValidationError) -> List[str]:
    """Turn a pydantic ValidationError into one message per violation."""
    return [_describe(error) for error in exc.errors()]


def validate(model: Type[ModelT], data: Any) -> ModelT:
    """Validate a request body against a schema model or raise BadInputError."""
    if not isinstance(data, dict):
        raise BadInputError(["Request body must be a JSON object"])
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise BadInputError(describe_errors(exc)) from exc

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from dmn_rules.core.validators import (
    validate_expression_tree_depth,
    validate_expression_tree_node_count,
)
from dmn_rules.expression.model import Expression
from dmn_rules.expression.serializer import expression_from_dict


def validate_expression_tree(v: dict[str, Any]) -> dict[str, Any]:
    """Validate expression tree shape, depth, and node count."""
    if not isinstance(v, dict):
        raise ValueError("expression must be an object")
    if not v:
        raise ValueError("expression cannot be empty")
    if "type" not in v:
        raise ValueError("expression must declare a 'type'")

    validate_expression_tree_depth(v)
    validate_expression_tree_node_count(v)
    return v


class ExpressionRequest(BaseModel):
    """An expression tree in its JSON form (see ``expression_to_dict``)."""

    expression: dict[str, Any]
    variable_prefix: str = Field(default="", alias="variablePrefix")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("expression")
    @classmethod
    def check_expression(cls, v: dict[str, Any]) -> dict[str, Any]:
        return validate_expression_tree(v)

    def to_expression(self) -> Expression:
        """Build the tree leniently so layout problems reach the validator."""
        return expression_from_dict(self.expression, strict=False)


class ValidationResponse(BaseModel):
    valid: bool
    errors: list[str]
    warnings: list[str]


class RenderResponse(BaseModel):
    readable: str
    java: str
    feel: str
    csv: str
    base64: str
    parameters: list[str]
    rows: list[dict[str, str]]


class DecodeRequest(BaseModel):
    """Flat-record text or its Base64 transport form; exactly one must be given."""

    csv: str | None = None
    base64: str | None = None

    @model_validator(mode="after")
    def exactly_one_source(self) -> DecodeRequest:
        if (self.csv is None) == (self.base64 is None):
            raise ValueError("Provide exactly one of 'csv' or 'base64'")
        return self


class DecodeResponse(BaseModel):
    expression: dict[str, Any]
    readable: str

"""
Expression validator.

Walks an expression tree and reports problems without raising or changing
anything. Callers decide whether errors block rendering; the
``raise_for_errors`` helper turns a result into a ValidationError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from dmn_rules.core.errors import ValidationError
from dmn_rules.expression import operators
from dmn_rules.expression.model import (
    CompositeExpression,
    Condition,
    ConstantExpression,
    Expression,
    GroupExpression,
)

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """Aggregated validation findings."""

    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def has_warnings(self) -> bool:
        return bool(self.warnings)

    def merge(self, other: ValidationResult) -> ValidationResult:
        return ValidationResult(self.errors + other.errors, self.warnings + other.warnings)

    def raise_for_errors(self) -> None:
        """
        Raises:
            ValidationError: If any error was recorded
        """
        if self.errors:
            raise ValidationError(
                "Expression validation failed",
                details={"errors": list(self.errors), "warnings": list(self.warnings)},
            )

    def __str__(self) -> str:
        if self.is_valid and not self.has_warnings:
            return "Valid"
        parts = []
        if self.errors:
            parts.append(f"Errors: {self.errors}")
        if self.warnings:
            parts.append(f"Warnings: {self.warnings}")
        return "; ".join(parts)


def validate(expression: Expression) -> ValidationResult:
    """
    Validate an expression tree.

    Checks performed:
    - Conditions name a parameter and an operator
    - The operator supports the condition's value kind
    - A value is present when the operator needs one
    - Composite node layout (warning for a leading connective, error for a
      missing one); every child is visited, including inside groups

    Args:
        expression: Root of the tree

    Returns:
        ValidationResult with all errors and warnings found
    """
    result = ValidationResult()
    _validate_node(expression, result)
    if result.errors:
        logger.debug("Expression failed validation: %s", result)
    return result


def _validate_node(expression: Expression, result: ValidationResult) -> None:
    match expression:
        case Condition():
            _validate_condition(expression, result)
        case CompositeExpression(nodes=nodes):
            if not nodes:
                result.warnings.append("Composite expression is empty")
                return
            for index, node in enumerate(nodes):
                if index == 0 and node.connective is not None:
                    result.warnings.append("First expression should not have a logical operator")
                elif index > 0 and node.connective is None:
                    result.errors.append(
                        f"Expression at position {index} is missing a logical operator"
                    )
                _validate_node(node.expression, result)
        case GroupExpression(expression=inner):
            _validate_node(inner, result)
        case ConstantExpression():
            return
        case _:
            result.errors.append(f"Unsupported expression type: {type(expression).__name__}")


def _validate_condition(condition: Condition, result: ValidationResult) -> None:
    if not condition.parameter or not condition.parameter.strip():
        result.errors.append("Parameter name is required")

    if condition.operator is None:
        result.errors.append("Operator is required")
        return

    label = operators.label(condition.operator)
    if not operators.supports_kind(condition.operator, condition.data_type):
        kind = condition.data_type.name if condition.data_type else "UNKNOWN"
        result.errors.append(f"Operator '{label}' does not support data type {kind}")

    if operators.requires_value(condition.operator) and not (
        condition.value and condition.value.strip()
    ):
        result.errors.append(f"Value is required for operator '{label}'")

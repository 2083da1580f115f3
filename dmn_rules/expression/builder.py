"""
Fluent builder for expression trees.

Nodes are staged in a private list and frozen into an immutable tree by
``build()``. A node added without an explicit ``and_()``/``or_()`` is joined
to the previous one with AND.

Example:
    >>> expr = (
    ...     ExpressionBuilder()
    ...     .gte("age", 60)
    ...     .and_()
    ...     .eq("hasLicense", True)
    ...     .build()
    ... )
    >>> str(expr)
    '(age >= 60) AND (hasLicense == true)'
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from dmn_rules.domain.enums import DataType, LogicalOperator, Operator
from dmn_rules.expression.model import (
    CompositeExpression,
    Condition,
    Expression,
    ExpressionNode,
    GroupExpression,
    always_true,
)
from dmn_rules.expression.validator import validate


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return "" if value is None else str(value)


class ExpressionBuilder:
    """Accumulates conditions and connectives into one expression."""

    def __init__(self) -> None:
        self._nodes: list[ExpressionNode] = []
        self._pending: LogicalOperator | None = None

    def _add(self, expression: Expression) -> ExpressionBuilder:
        connective = None
        if self._nodes:
            connective = self._pending or LogicalOperator.AND
        self._nodes.append(ExpressionNode(connective, expression))
        self._pending = None
        return self

    # ------------------------------------------------------------------
    # Connectives
    # ------------------------------------------------------------------

    def and_(self) -> ExpressionBuilder:
        self._pending = LogicalOperator.AND
        return self

    def or_(self) -> ExpressionBuilder:
        self._pending = LogicalOperator.OR
        return self

    # ------------------------------------------------------------------
    # Conditions
    # ------------------------------------------------------------------

    def condition(
        self,
        parameter: str,
        operator: Operator,
        value: Any = "",
        data_type: DataType | None = None,
    ) -> ExpressionBuilder:
        return self._add(Condition(parameter, operator, _text(value), data_type))

    def eq(self, parameter: str, value: Any) -> ExpressionBuilder:
        return self.condition(parameter, Operator.EQUALS, value)

    def neq(self, parameter: str, value: Any) -> ExpressionBuilder:
        return self.condition(parameter, Operator.NOT_EQUALS, value)

    def gt(self, parameter: str, value: Any) -> ExpressionBuilder:
        return self.condition(parameter, Operator.GREATER_THAN, value)

    def gte(self, parameter: str, value: Any) -> ExpressionBuilder:
        return self.condition(parameter, Operator.GREATER_THAN_OR_EQUAL, value)

    def lt(self, parameter: str, value: Any) -> ExpressionBuilder:
        return self.condition(parameter, Operator.LESS_THAN, value)

    def lte(self, parameter: str, value: Any) -> ExpressionBuilder:
        return self.condition(parameter, Operator.LESS_THAN_OR_EQUAL, value)

    def contains(self, parameter: str, value: str) -> ExpressionBuilder:
        return self.condition(parameter, Operator.CONTAINS, value, DataType.STRING)

    def starts_with(self, parameter: str, value: str) -> ExpressionBuilder:
        return self.condition(parameter, Operator.STARTS_WITH, value, DataType.STRING)

    def ends_with(self, parameter: str, value: str) -> ExpressionBuilder:
        return self.condition(parameter, Operator.ENDS_WITH, value, DataType.STRING)

    def is_null(self, parameter: str) -> ExpressionBuilder:
        return self.condition(parameter, Operator.IS_NULL)

    def is_not_null(self, parameter: str) -> ExpressionBuilder:
        return self.condition(parameter, Operator.IS_NOT_NULL)

    def is_empty(self, parameter: str) -> ExpressionBuilder:
        return self.condition(parameter, Operator.IS_EMPTY, "", DataType.STRING)

    def is_in(self, parameter: str, *values: Any) -> ExpressionBuilder:
        """Add an IN test; the kind is inferred from the first value."""
        items = [_text(v) for v in values]
        data_type = DataType.infer_from_value(items[0]) if items else DataType.STRING
        return self.condition(parameter, Operator.IN, ",".join(items), data_type)

    def between(self, parameter: str, low: Any, high: Any) -> ExpressionBuilder:
        low_text = _text(low)
        return self.condition(
            parameter,
            Operator.BETWEEN,
            f"{low_text},{_text(high)}",
            DataType.infer_from_value(low_text),
        )

    # ------------------------------------------------------------------
    # Nesting
    # ------------------------------------------------------------------

    def group(self, inner: Expression | Callable[[ExpressionBuilder], Any]) -> ExpressionBuilder:
        """
        Add a parenthesised sub-expression.

        Args:
            inner: A finished expression, or a callable that fills a fresh
                nested builder
        """
        if callable(inner):
            nested = ExpressionBuilder()
            inner(nested)
            inner = nested.build()
        return self._add(GroupExpression(inner))

    def expression(self, expression: Expression) -> ExpressionBuilder:
        return self._add(expression)

    # ------------------------------------------------------------------
    # Terminal operations
    # ------------------------------------------------------------------

    def build(self) -> Expression:
        if not self._nodes:
            return always_true()
        if len(self._nodes) == 1:
            return self._nodes[0].expression
        return CompositeExpression(tuple(self._nodes))

    def build_and_validate(self) -> Expression:
        """
        Build and reject the result if the validator reports errors.

        Raises:
            ValidationError: If validation finds at least one error
        """
        expression = self.build()
        validate(expression).raise_for_errors()
        return expression


def single(parameter: str, operator: Operator, value: Any = "") -> Expression:
    return ExpressionBuilder().condition(parameter, operator, value).build()


def all_of(*conditions: Expression) -> Expression:
    builder = ExpressionBuilder()
    for condition in conditions:
        builder.and_().expression(condition)
    return builder.build()


def any_of(*conditions: Expression) -> Expression:
    builder = ExpressionBuilder()
    for condition in conditions:
        builder.or_().expression(condition)
    return builder.build()

"""
Inline boolean-expression renderers.

Both renderers share one recursive walk; they differ only in the notation
asked of the operator catalog, the connective tokens and the literals used
for constants.
"""

from __future__ import annotations

from dmn_rules.domain.enums import LogicalOperator, Notation
from dmn_rules.expression import operators
from dmn_rules.expression.model import (
    CompositeExpression,
    Condition,
    ConstantExpression,
    Expression,
    GroupExpression,
)


class ExpressionRenderer:
    """Base renderer; subclasses pick the notation and connective tokens."""

    name: str = ""
    description: str = ""
    notation: Notation
    connectives: dict[LogicalOperator, str]
    true_literal = "true"
    false_literal = "false"

    def __init__(self, variable_prefix: str = "") -> None:
        self.variable_prefix = variable_prefix

    def render(self, expression: Expression) -> str:
        match expression:
            case Condition():
                text = operators.to_notation_fragment(
                    expression.operator,
                    expression.value,
                    expression.data_type,
                    self.notation,
                    parameter=f"{self.variable_prefix}{expression.parameter}",
                )
                return f"({text})" if expression.grouped else text
            case CompositeExpression(nodes=nodes):
                parts: list[str] = []
                for index, node in enumerate(nodes):
                    if index > 0 and node.connective is not None:
                        parts.append(self.connectives[node.connective])
                    elif index > 0:
                        parts.append(" ")
                    parts.append(self.render(node.expression))
                return "".join(parts)
            case GroupExpression(expression=inner):
                return f"({self.render(inner)})"
            case ConstantExpression(value=value):
                return self.true_literal if value else self.false_literal
            case _:
                raise TypeError(f"Unsupported expression type: {type(expression).__name__}")


class JavaRenderer(ExpressionRenderer):
    """Renders Java-style boolean expressions (``amount > 100 && name.contains("x")``)."""

    name = "java"
    description = "Java boolean expression"
    notation = Notation.JAVA
    connectives = {LogicalOperator.AND: " && ", LogicalOperator.OR: " || "}


class FeelRenderer(ExpressionRenderer):
    """Renders FEEL boolean expressions (``amount > 100 and contains(name, "x")``)."""

    name = "feel"
    description = "FEEL boolean expression"
    notation = Notation.FEEL
    connectives = {LogicalOperator.AND: " and ", LogicalOperator.OR: " or "}


RENDERERS: dict[str, type[ExpressionRenderer]] = {
    JavaRenderer.name: JavaRenderer,
    FeelRenderer.name: FeelRenderer,
}


def to_java(expression: Expression, variable_prefix: str = "") -> str:
    return JavaRenderer(variable_prefix).render(expression)


def to_feel(expression: Expression, variable_prefix: str = "") -> str:
    return FeelRenderer(variable_prefix).render(expression)

"""
Expression model.

Four immutable variants make up an expression tree:

- Condition: a single ``parameter <operator> value`` test
- CompositeExpression: a flat, left-associative list of nodes, each joined to
  the previous one by an AND/OR connective
- GroupExpression: explicit parentheses around one child
- ConstantExpression: always true or always false

The composite is deliberately not a binary tree. Precedence only changes by
wrapping a run of nodes in a GroupExpression.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass, field

from dmn_rules.core.errors import ExpressionError
from dmn_rules.domain.enums import DataType, LogicalOperator, Operator
from dmn_rules.expression import operators


@dataclass(frozen=True, slots=True, eq=False)
class Parameter:
    """A named input of a decision table. Identity is the name alone."""

    name: str
    data_type: DataType = DataType.STRING
    label: str | None = None
    description: str | None = None

    def __post_init__(self) -> None:
        if self.label is None:
            object.__setattr__(self, "label", self.name)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Parameter):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    def __str__(self) -> str:
        return f"{self.name} ({self.data_type.name})"


@dataclass(frozen=True, slots=True)
class Condition:
    """
    Leaf test of one parameter against a value.

    ``data_type`` defaults to the kind inferred from ``value``. ``grouped``
    controls whether inline renderers wrap the condition in parentheses.
    Neither takes part in equality.
    """

    parameter: str
    operator: Operator
    value: str = ""
    data_type: DataType | None = field(default=None, compare=False)
    grouped: bool = field(default=True, compare=False)

    def __post_init__(self) -> None:
        if self.value is None:
            object.__setattr__(self, "value", "")
        if self.data_type is None:
            object.__setattr__(self, "data_type", DataType.infer_from_value(self.value))

    def __str__(self) -> str:
        return to_readable_string(self)

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def equals(cls, parameter: str, value: str) -> Condition:
        return cls(parameter, Operator.EQUALS, value)

    @classmethod
    def not_equals(cls, parameter: str, value: str) -> Condition:
        return cls(parameter, Operator.NOT_EQUALS, value)

    @classmethod
    def greater_than(cls, parameter: str, value: str) -> Condition:
        return cls(parameter, Operator.GREATER_THAN, value)

    @classmethod
    def greater_than_or_equal(cls, parameter: str, value: str) -> Condition:
        return cls(parameter, Operator.GREATER_THAN_OR_EQUAL, value)

    @classmethod
    def less_than(cls, parameter: str, value: str) -> Condition:
        return cls(parameter, Operator.LESS_THAN, value)

    @classmethod
    def less_than_or_equal(cls, parameter: str, value: str) -> Condition:
        return cls(parameter, Operator.LESS_THAN_OR_EQUAL, value)

    @classmethod
    def contains(cls, parameter: str, value: str) -> Condition:
        return cls(parameter, Operator.CONTAINS, value, DataType.STRING)

    @classmethod
    def starts_with(cls, parameter: str, value: str) -> Condition:
        return cls(parameter, Operator.STARTS_WITH, value, DataType.STRING)

    @classmethod
    def is_empty(cls, parameter: str) -> Condition:
        return cls(parameter, Operator.IS_EMPTY, "", DataType.STRING)

    @classmethod
    def is_null(cls, parameter: str) -> Condition:
        return cls(parameter, Operator.IS_NULL)


@dataclass(frozen=True, slots=True)
class ExpressionNode:
    """One entry of a composite: the connective to the previous node and a child."""

    connective: LogicalOperator | None
    expression: Expression


@dataclass(frozen=True, slots=True)
class CompositeExpression:
    """
    Ordered node list joined by per-node connectives, evaluated left to right.

    Raises:
        ExpressionError: If there are no nodes, node 0 carries a connective or a
            later node lacks one
    """

    nodes: tuple[ExpressionNode, ...] = ()

    def __post_init__(self) -> None:
        nodes = tuple(self.nodes)
        object.__setattr__(self, "nodes", nodes)
        if not nodes:
            raise ExpressionError("Composite expression is empty")
        for index, node in enumerate(nodes):
            if index == 0 and node.connective is not None:
                raise ExpressionError(
                    "First expression should not have a logical operator",
                    details={"position": 0, "connective": node.connective.value},
                )
            if index > 0 and node.connective is None:
                raise ExpressionError(
                    f"Expression at position {index} is missing a logical operator",
                    details={"position": index},
                )

    @classmethod
    def unchecked(cls, nodes: Iterable[ExpressionNode]) -> CompositeExpression:
        """
        Build a composite without enforcing the connective layout.

        Used for externally supplied trees that should be reported by the
        validator instead of rejected at construction time.
        """
        composite = object.__new__(cls)
        object.__setattr__(composite, "nodes", tuple(nodes))
        return composite

    @classmethod
    def of(cls, first: Expression, *rest: tuple[LogicalOperator, Expression]) -> CompositeExpression:
        nodes = [ExpressionNode(None, first)]
        nodes.extend(ExpressionNode(connective, expr) for connective, expr in rest)
        return cls(tuple(nodes))

    @classmethod
    def all_of(cls, *expressions: Expression) -> CompositeExpression:
        return cls(_join(expressions, LogicalOperator.AND))

    @classmethod
    def any_of(cls, *expressions: Expression) -> CompositeExpression:
        return cls(_join(expressions, LogicalOperator.OR))

    def __len__(self) -> int:
        return len(self.nodes)

    def __iter__(self) -> Iterator[ExpressionNode]:
        return iter(self.nodes)

    def __str__(self) -> str:
        return to_readable_string(self)


@dataclass(frozen=True, slots=True)
class GroupExpression:
    """Explicit parentheses around a single child expression."""

    expression: Expression

    def __str__(self) -> str:
        return to_readable_string(self)


@dataclass(frozen=True, slots=True)
class ConstantExpression:
    """Boolean constant: True matches everything, False matches nothing."""

    value: bool
    label: str | None = None

    def __post_init__(self) -> None:
        if self.label is None:
            object.__setattr__(self, "label", "Always" if self.value else "Never")

    def __str__(self) -> str:
        return to_readable_string(self)


Expression = Condition | CompositeExpression | GroupExpression | ConstantExpression

ALWAYS_TRUE = ConstantExpression(True)
ALWAYS_FALSE = ConstantExpression(False)


def always_true(label: str | None = None) -> ConstantExpression:
    return ALWAYS_TRUE if label is None else ConstantExpression(True, label)


def always_false(label: str | None = None) -> ConstantExpression:
    return ALWAYS_FALSE if label is None else ConstantExpression(False, label)


def _join(expressions: Sequence[Expression], connective: LogicalOperator) -> tuple[ExpressionNode, ...]:
    return tuple(
        ExpressionNode(None if index == 0 else connective, expr)
        for index, expr in enumerate(expressions)
    )


# ============================================================================
# Tree operations
# ============================================================================


def to_readable_string(expression: Expression) -> str:
    """Human readable form, e.g. ``(amount > 100) AND (status == active)``."""
    match expression:
        case Condition(parameter=parameter, operator=operator, value=value):
            if operators.requires_value(operator):
                return f"({parameter} {operators.symbol(operator)} {value})"
            return f"({parameter} {operators.symbol(operator)})"
        case CompositeExpression(nodes=nodes):
            parts: list[str] = []
            for index, node in enumerate(nodes):
                if index > 0:
                    joiner = node.connective.display_name if node.connective else ""
                    parts.append(f" {joiner} " if joiner else " ")
                parts.append(to_readable_string(node.expression))
            return "".join(parts)
        case GroupExpression(expression=inner):
            return f"({to_readable_string(inner)})"
        case ConstantExpression(label=label):
            return label or ""
        case _:
            raise TypeError(f"Unsupported expression type: {type(expression).__name__}")


def copy_expression(expression: Expression) -> Expression:
    """Deep copy: the result is equal to ``expression`` but shares no nodes with it."""
    match expression:
        case Condition():
            return dataclasses.replace(expression)
        case CompositeExpression(nodes=nodes):
            return CompositeExpression.unchecked(
                ExpressionNode(node.connective, copy_expression(node.expression))
                for node in nodes
            )
        case GroupExpression(expression=inner):
            return GroupExpression(copy_expression(inner))
        case ConstantExpression(value=value, label=label):
            return ConstantExpression(value, label)
        case _:
            raise TypeError(f"Unsupported expression type: {type(expression).__name__}")


def iter_conditions(expression: Expression) -> Iterator[Condition]:
    """Yield every leaf condition depth-first, left to right."""
    match expression:
        case Condition():
            yield expression
        case CompositeExpression(nodes=nodes):
            for node in nodes:
                yield from iter_conditions(node.expression)
        case GroupExpression(expression=inner):
            yield from iter_conditions(inner)
        case ConstantExpression():
            return
        case _:
            raise TypeError(f"Unsupported expression type: {type(expression).__name__}")


def collect_parameters(*expressions: Expression) -> list[str]:
    """
    Parameter names in first-seen order, without duplicates.

    The traversal is depth-first and left to right through groups and nested
    composites, so the result is stable for a given tree. Several trees are
    scanned in the order given.
    """
    seen: dict[str, None] = {}
    for expression in expressions:
        for condition in iter_conditions(expression):
            seen.setdefault(condition.parameter, None)
    return list(seen)

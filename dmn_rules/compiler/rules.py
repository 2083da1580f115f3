"""
Rule compiler: expression trees to decision table rows.

Algorithm:
1. Discover parameters depth-first in first-seen order (fixes column order)
2. Split the top-level composite into row groups at every OR connective
3. Flatten groups and nested composites inside a row group into leaf conditions
4. Render each column's conditions as unary tests, joined with ", "
5. Stamp every row with the output values of the compile call

Within a row group every reachable condition contributes to its column,
including conditions behind a nested OR. Several conditions on the same
parameter land in one cell joined by ", ", which a decision engine reads as
"any of". The compiler keeps that behaviour as is.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType

from dmn_rules.compiler.config import RenderConfig
from dmn_rules.domain.enums import LogicalOperator, Notation
from dmn_rules.expression import operators
from dmn_rules.expression.model import (
    CompositeExpression,
    Condition,
    ConstantExpression,
    Expression,
    GroupExpression,
    collect_parameters,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class DecisionRow:
    """
    One decision table row.

    ``entries`` maps every column parameter to its unary-test text, in column
    order; an empty string places no restriction on that column.
    """

    entries: Mapping[str, str]
    outputs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "entries", MappingProxyType(dict(self.entries)))
        object.__setattr__(self, "outputs", tuple(self.outputs))

    @property
    def constrained(self) -> dict[str, str]:
        """Only the columns that carry a constraint."""
        return {name: text for name, text in self.entries.items() if text}


@dataclass(frozen=True, slots=True)
class RuleDefinition:
    """An expression together with the output entries its rows receive, emitted verbatim."""

    expression: Expression
    outputs: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "outputs", tuple(self.outputs))

    @classmethod
    def of(cls, expression: Expression, *outputs: str) -> RuleDefinition:
        return cls(expression, outputs)


@dataclass(frozen=True, slots=True)
class CompiledTable:
    """Column parameters plus the rows compiled against them."""

    parameters: tuple[str, ...]
    rows: tuple[DecisionRow, ...]


# ============================================================================
# Row groups
# ============================================================================


def split_row_groups(expression: Expression) -> list[list[Expression]]:
    """
    Split the top level into OR-separated row groups.

    Only the top-level composite is split. A bare condition, constant or
    group is a single row group.
    """
    if not isinstance(expression, CompositeExpression):
        return [[expression]]

    groups: list[list[Expression]] = []
    current: list[Expression] = []
    for node in expression.nodes:
        if node.connective is LogicalOperator.OR and current:
            groups.append(current)
            current = []
        current.append(node.expression)
    if current:
        groups.append(current)
    return groups


def _flatten(expressions: Iterable[Expression], leaves: list[Condition]) -> bool:
    """
    Collect leaf conditions; returns False if an always-false constant was reached.
    """
    satisfiable = True
    for expression in expressions:
        match expression:
            case Condition():
                leaves.append(expression)
            case GroupExpression(expression=inner):
                satisfiable = _flatten([inner], leaves) and satisfiable
            case CompositeExpression(nodes=nodes):
                satisfiable = _flatten([node.expression for node in nodes], leaves) and satisfiable
            case ConstantExpression(value=value):
                satisfiable = satisfiable and value
            case _:
                raise TypeError(f"Unsupported expression type: {type(expression).__name__}")
    return satisfiable


def unary_test(condition: Condition) -> str:
    return operators.to_notation_fragment(
        condition.operator, condition.value, condition.data_type, Notation.UNARY_TEST
    )


def compile_rows(
    expression: Expression,
    parameters: Sequence[str] | None = None,
    outputs: Sequence[str] = (),
) -> list[DecisionRow]:
    """
    Compile one expression into decision rows.

    Args:
        expression: Expression to compile
        parameters: Column order; defaults to the expression's own parameters
        outputs: Output entries stamped on every produced row

    Returns:
        One row per satisfiable row group, in order

    Example:
        >>> rows = compile_rows(Condition.greater_than("amount", "100"))
        >>> dict(rows[0].entries)
        {'amount': '> 100'}
    """
    columns = list(parameters) if parameters is not None else collect_parameters(expression)
    rows: list[DecisionRow] = []
    for group in split_row_groups(expression):
        leaves: list[Condition] = []
        if not _flatten(group, leaves):
            continue
        entries = {
            column: operators.UNARY_TEST_LIST_SEPARATOR.join(
                unary_test(leaf) for leaf in leaves if leaf.parameter == column
            )
            for column in columns
        }
        rows.append(DecisionRow(entries, tuple(outputs)))
    return rows


def _columns(expressions: Sequence[Expression], config: RenderConfig) -> tuple[str, ...]:
    columns = collect_parameters(*expressions)
    for computed in config.computed_inputs:
        if computed.name not in columns:
            columns.append(computed.name)
    return tuple(columns)


def compile_expression(expression: Expression, config: RenderConfig | None = None) -> CompiledTable:
    """Compile a single expression; rows carry each output column's formatted default."""
    config = config or RenderConfig()
    columns = _columns([expression], config)
    outputs = tuple(column.formatted_default for column in config.output_columns)
    rows = compile_rows(expression, columns, outputs)
    logger.debug("Compiled expression into %d rows over %d columns", len(rows), len(columns))
    return CompiledTable(columns, tuple(rows))


def compile_rules(rules: Sequence[RuleDefinition], config: RenderConfig | None = None) -> CompiledTable:
    """
    Compile several rules against one shared column set.

    Each rule is compiled on its own and its rows are appended in input
    order, so under a FIRST hit policy earlier rules take precedence.
    """
    config = config or RenderConfig()
    columns = _columns([rule.expression for rule in rules], config)
    rows: list[DecisionRow] = []
    for rule in rules:
        rows.extend(compile_rows(rule.expression, columns, rule.outputs))
    logger.debug(
        "Compiled %d rules into %d rows over %d columns", len(rules), len(rows), len(columns)
    )
    return CompiledTable(columns, tuple(rows))

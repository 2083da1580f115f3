"""
Operator catalog.

A static mapping from each Operator to its symbol, label, category, the value
kinds it supports and one fragment function per Notation. Every backend asks
the catalog for operator text, so no renderer carries its own per-operator
branching.

Fragment functions take ``(parameter, value, data_type)``. The unary-test
notation ignores the parameter because a decision-table cell is implicitly
tested against its column.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from dmn_rules.domain.enums import DataType, Notation, Operator, OperatorCategory

FragmentFn = Callable[[str, str, DataType], str]

# Separator used when several unary tests share one decision-table cell.
UNARY_TEST_LIST_SEPARATOR = ", "


@dataclass(frozen=True, slots=True)
class OperatorSpec:
    """Static behaviour of one operator."""

    symbol: str
    label: str
    category: OperatorCategory
    supports_numeric: bool
    supports_string: bool
    requires_value: bool
    unary_test: FragmentFn
    java: FragmentFn
    feel: FragmentFn

    def fragment_fn(self, notation: Notation) -> FragmentFn:
        if notation is Notation.UNARY_TEST:
            return self.unary_test
        if notation is Notation.JAVA:
            return self.java
        return self.feel


# ============================================================================
# Value helpers
# ============================================================================


def _quoted(value: str) -> str:
    return f'"{value}"'


def _literal(value: str, data_type: DataType) -> str:
    """Quote string values, leave everything else as a raw token."""
    return _quoted(value) if data_type is DataType.STRING else value


def _list_items(value: str, data_type: DataType) -> list[str]:
    return [_literal(item.strip(), data_type) for item in value.split(",")]


def _range_bounds(value: str) -> tuple[str, str] | None:
    parts = value.split(",")
    if len(parts) != 2:
        return None
    return parts[0].strip(), parts[1].strip()


# ============================================================================
# Unary tests (decision-table cells)
# ============================================================================


def _unary_in(p: str, v: str, dt: DataType) -> str:
    return ", ".join(_list_items(v, dt))


def _unary_between(p: str, v: str, dt: DataType) -> str:
    bounds = _range_bounds(v)
    if bounds is None:
        return v
    return f"[{bounds[0]}..{bounds[1]}]"


# ============================================================================
# Java-like boolean expressions
# ============================================================================


def _java_in(p: str, v: str, dt: DataType) -> str:
    return f"java.util.Arrays.asList({', '.join(_list_items(v, dt))}).contains({p})"


def _java_between(p: str, v: str, dt: DataType) -> str:
    bounds = _range_bounds(v)
    if bounds is None:
        return f"{p} between {v}"
    return f"({p} >= {bounds[0]} && {p} <= {bounds[1]})"


def _java_equals(p: str, v: str, dt: DataType) -> str:
    if dt is DataType.STRING:
        return f"{p}.equals({_quoted(v)})"
    return f"{p} == {v}"


def _java_not_equals(p: str, v: str, dt: DataType) -> str:
    if dt is DataType.STRING:
        return f"!{p}.equals({_quoted(v)})"
    return f"{p} != {v}"


# ============================================================================
# FEEL boolean expressions
# ============================================================================


def _feel_in(p: str, v: str, dt: DataType) -> str:
    return f"{p} in ({', '.join(_list_items(v, dt))})"


def _feel_not_in(p: str, v: str, dt: DataType) -> str:
    return f"{p} not in ({', '.join(_list_items(v, dt))})"


def _feel_between(p: str, v: str, dt: DataType) -> str:
    bounds = _range_bounds(v)
    if bounds is None:
        return f"{p} between {v}"
    return f"{p} in [{bounds[0]}..{bounds[1]}]"


def _comparison(symbol: str) -> tuple[FragmentFn, FragmentFn, FragmentFn]:
    return (
        lambda p, v, dt: f"{symbol} {v}",
        lambda p, v, dt: f"{p} {symbol} {v}",
        lambda p, v, dt: f"{p} {symbol} {v}",
    )


def _spec(
    symbol: str,
    label: str,
    category: OperatorCategory,
    numeric: bool,
    string: bool,
    fragments: tuple[FragmentFn, FragmentFn, FragmentFn],
    requires_value: bool = True,
) -> OperatorSpec:
    unary_test, java, feel = fragments
    return OperatorSpec(
        symbol=symbol,
        label=label,
        category=category,
        supports_numeric=numeric,
        supports_string=string,
        requires_value=requires_value,
        unary_test=unary_test,
        java=java,
        feel=feel,
    )


_C = OperatorCategory

OPERATOR_CATALOG: dict[Operator, OperatorSpec] = {
    Operator.EQUALS: _spec(
        "==",
        "equals",
        _C.COMPARISON,
        True,
        True,
        (
            lambda p, v, dt: _literal(v, dt),
            _java_equals,
            lambda p, v, dt: f"{p} = {_literal(v, dt)}",
        ),
    ),
    Operator.NOT_EQUALS: _spec(
        "!=",
        "not equals",
        _C.COMPARISON,
        True,
        True,
        (
            lambda p, v, dt: f"not({_literal(v, dt)})",
            _java_not_equals,
            lambda p, v, dt: f"{p} != {_literal(v, dt)}",
        ),
    ),
    Operator.GREATER_THAN: _spec(">", "greater than", _C.NUMERIC, True, False, _comparison(">")),
    Operator.GREATER_THAN_OR_EQUAL: _spec(
        ">=", "greater than or equal", _C.NUMERIC, True, False, _comparison(">=")
    ),
    Operator.LESS_THAN: _spec("<", "less than", _C.NUMERIC, True, False, _comparison("<")),
    Operator.LESS_THAN_OR_EQUAL: _spec(
        "<=", "less than or equal", _C.NUMERIC, True, False, _comparison("<=")
    ),
    Operator.BETWEEN: _spec(
        "between",
        "between",
        _C.NUMERIC,
        True,
        False,
        (_unary_between, _java_between, _feel_between),
    ),
    Operator.CONTAINS: _spec(
        "contains",
        "contains",
        _C.STRING,
        False,
        True,
        (
            lambda p, v, dt: f"contains(?, {_quoted(v)})",
            lambda p, v, dt: f"{p}.contains({_quoted(v)})",
            lambda p, v, dt: f"contains({p}, {_quoted(v)})",
        ),
    ),
    Operator.NOT_CONTAINS: _spec(
        "not contains",
        "not contains",
        _C.STRING,
        False,
        True,
        (
            lambda p, v, dt: f"not(contains(?, {_quoted(v)}))",
            lambda p, v, dt: f"!{p}.contains({_quoted(v)})",
            lambda p, v, dt: f"not(contains({p}, {_quoted(v)}))",
        ),
    ),
    Operator.STARTS_WITH: _spec(
        "startsWith",
        "starts with",
        _C.STRING,
        False,
        True,
        (
            lambda p, v, dt: f"starts with {_quoted(v)}",
            lambda p, v, dt: f"{p}.startsWith({_quoted(v)})",
            lambda p, v, dt: f"starts with({p}, {_quoted(v)})",
        ),
    ),
    Operator.ENDS_WITH: _spec(
        "endsWith",
        "ends with",
        _C.STRING,
        False,
        True,
        (
            lambda p, v, dt: f"ends with {_quoted(v)}",
            lambda p, v, dt: f"{p}.endsWith({_quoted(v)})",
            lambda p, v, dt: f"ends with({p}, {_quoted(v)})",
        ),
    ),
    Operator.MATCHES: _spec(
        "matches",
        "matches regex",
        _C.STRING,
        False,
        True,
        (
            lambda p, v, dt: f"matches(?, {_quoted(v)})",
            lambda p, v, dt: f"{p}.matches({_quoted(v)})",
            lambda p, v, dt: f"matches({p}, {_quoted(v)})",
        ),
    ),
    Operator.EQUALS_IGNORE_CASE: _spec(
        "equalsIgnoreCase",
        "equals (ignore case)",
        _C.STRING,
        False,
        True,
        (
            lambda p, v, dt: f"lower case(?) = {_quoted(v.lower())}",
            lambda p, v, dt: f"{p}.equalsIgnoreCase({_quoted(v)})",
            lambda p, v, dt: f"lower case({p}) = {_quoted(v.lower())}",
        ),
    ),
    Operator.IS_NULL: _spec(
        "isNull",
        "is null",
        _C.NULL_CHECK,
        True,
        True,
        (
            lambda p, v, dt: "null",
            lambda p, v, dt: f"{p} == null",
            lambda p, v, dt: f"{p} = null",
        ),
        requires_value=False,
    ),
    Operator.IS_NOT_NULL: _spec(
        "isNotNull",
        "is not null",
        _C.NULL_CHECK,
        True,
        True,
        (
            lambda p, v, dt: "not(null)",
            lambda p, v, dt: f"{p} != null",
            lambda p, v, dt: f"{p} != null",
        ),
        requires_value=False,
    ),
    Operator.IS_EMPTY: _spec(
        "isEmpty",
        "is empty",
        _C.NULL_CHECK,
        False,
        True,
        (
            lambda p, v, dt: "null",
            lambda p, v, dt: f"{p}.isEmpty()",
            lambda p, v, dt: f'{p} = null or {p} = ""',
        ),
        requires_value=False,
    ),
    Operator.IS_NOT_EMPTY: _spec(
        "isNotEmpty",
        "is not empty",
        _C.NULL_CHECK,
        False,
        True,
        (
            lambda p, v, dt: "not(null)",
            lambda p, v, dt: f"!{p}.isEmpty()",
            lambda p, v, dt: f'{p} != null and {p} != ""',
        ),
        requires_value=False,
    ),
    Operator.IN: _spec(
        "in",
        "in list",
        _C.COLLECTION,
        True,
        True,
        (_unary_in, _java_in, _feel_in),
    ),
    Operator.NOT_IN: _spec(
        "notIn",
        "not in list",
        _C.COLLECTION,
        True,
        True,
        (
            lambda p, v, dt: f"not({_unary_in(p, v, dt)})",
            lambda p, v, dt: f"!{_java_in(p, v, dt)}",
            _feel_not_in,
        ),
    ),
}

_BY_SYMBOL: dict[str, Operator] = {spec.symbol: op for op, spec in OPERATOR_CATALOG.items()}

# BOOLEAN values only make sense for equality and null checks.
_BOOLEAN_OPERATORS = frozenset(
    {Operator.EQUALS, Operator.NOT_EQUALS, Operator.IS_NULL, Operator.IS_NOT_NULL}
)


def symbol(operator: Operator) -> str:
    return OPERATOR_CATALOG[operator].symbol


def label(operator: Operator) -> str:
    return OPERATOR_CATALOG[operator].label


def requires_value(operator: Operator) -> bool:
    return OPERATOR_CATALOG[operator].requires_value


def supports_kind(operator: Operator, data_type: DataType | None) -> bool:
    """
    Check whether an operator can compare values of the given kind.

    A missing kind is treated as compatible; the value kind is usually
    inferred and absence means the caller did not care.
    """
    if data_type is None:
        return True
    spec = OPERATOR_CATALOG[operator]
    if data_type is DataType.STRING:
        return spec.supports_string
    if data_type is DataType.BOOLEAN:
        return operator in _BOOLEAN_OPERATORS
    # integer, long, double, date and dateTime all order like numbers
    return spec.supports_numeric


def to_notation_fragment(
    operator: Operator,
    value: str | None,
    data_type: DataType,
    notation: Notation,
    parameter: str = "?",
) -> str:
    """
    Render one operator/value pair in the requested notation.

    Malformed list and range values are passed through rather than rejected.

    Args:
        operator: Operator to render
        value: Raw comparison value (may be empty for value-less operators)
        data_type: Declared kind of the value, drives quoting
        notation: Target syntax
        parameter: Parameter reference; unused for unary tests

    Returns:
        Notation fragment text

    Example:
        >>> to_notation_fragment(Operator.GREATER_THAN, "100", DataType.INTEGER, Notation.UNARY_TEST)
        '> 100'
    """
    fn = OPERATOR_CATALOG[operator].fragment_fn(notation)
    return fn(parameter, value or "", data_type)


def operator_from_symbol(text: str) -> Operator:
    """
    Look up an operator by its symbol.

    Raises:
        ValueError: If no operator uses the symbol
    """
    try:
        return _BY_SYMBOL[text]
    except KeyError:
        raise ValueError(f"Unknown operator symbol: {text}") from None


def operators_for_kind(data_type: DataType) -> list[Operator]:
    return [op for op in OPERATOR_CATALOG if supports_kind(op, data_type)]


def operators_in_category(category: OperatorCategory) -> list[Operator]:
    return [op for op, spec in OPERATOR_CATALOG.items() if spec.category is category]

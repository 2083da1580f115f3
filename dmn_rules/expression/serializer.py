"""
Flat-record codec and JSON tree serialization for expressions.

Flat records are the persistence form. Each leaf condition becomes one record
of six comma-separated fields::

    connective,openParen,parameter,operatorSymbol,value,closeParen

and records are joined with ``<>``. A Base64 form of that text is used for
transport. Composite and group nesting is flattened; group boundaries survive
only as extra parenthesis markers and are not rebuilt on decode.

The JSON tree form is lossless and is what the HTTP API accepts.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass, replace
from typing import Any

from dmn_rules.core.errors import ValidationError
from dmn_rules.domain.enums import DataType, LogicalOperator, Operator
from dmn_rules.expression import operators
from dmn_rules.expression.model import (
    ALWAYS_FALSE,
    ALWAYS_TRUE,
    CompositeExpression,
    Condition,
    ConstantExpression,
    Expression,
    ExpressionNode,
    GroupExpression,
)

logger = logging.getLogger(__name__)

RECORD_SEPARATOR = "<>"
FIELD_SEPARATOR = ","
FIELD_COUNT = 6


@dataclass(frozen=True, slots=True)
class FlatRecord:
    """One encoded condition."""

    connective: str
    open_paren: str
    parameter: str
    operator_symbol: str
    value: str
    close_paren: str

    def to_text(self) -> str:
        return FIELD_SEPARATOR.join(
            (
                self.connective,
                self.open_paren,
                self.parameter,
                self.operator_symbol,
                self.value,
                self.close_paren,
            )
        )

    @classmethod
    def parse(cls, text: str) -> FlatRecord | None:
        """
        Parse one record, or return None when it has fewer than six fields.

        Commas inside the value field (IN lists, BETWEEN ranges) are kept: the
        first four fields and the last one are fixed, everything between is
        the value.
        """
        parts = text.split(FIELD_SEPARATOR)
        if len(parts) < FIELD_COUNT:
            return None
        return cls(
            connective=parts[0].strip(),
            open_paren=parts[1],
            parameter=parts[2].strip(),
            operator_symbol=parts[3].strip(),
            value=FIELD_SEPARATOR.join(parts[4:-1]),
            close_paren=parts[-1],
        )


def _sentinel(value: str = "") -> FlatRecord:
    return FlatRecord("", "(", "", "", value, ")")


# ============================================================================
# Encoding
# ============================================================================


def encode_records(expression: Expression) -> list[FlatRecord]:
    """
    Flatten an expression into records.

    Constants and empty composites produce a single sentinel record with an
    empty parameter. The sentinel's value field holds ``false`` for an
    always-false constant so it decodes back to the same constant.
    """
    if isinstance(expression, ConstantExpression):
        return [_sentinel("true" if expression.value else "false")]
    records = _records(expression, None)
    return records or [_sentinel()]


def _records(expression: Expression, connective: LogicalOperator | None) -> list[FlatRecord]:
    match expression:
        case Condition():
            return [
                FlatRecord(
                    connective=connective.symbol if connective else "",
                    open_paren="(" if expression.grouped else " ",
                    parameter=expression.parameter,
                    operator_symbol=operators.symbol(expression.operator),
                    value=expression.value,
                    close_paren=")" if expression.grouped else " ",
                )
            ]
        case CompositeExpression(nodes=nodes):
            records: list[FlatRecord] = []
            for index, node in enumerate(nodes):
                records.extend(_records(node.expression, connective if index == 0 else node.connective))
            return records
        case GroupExpression(expression=inner):
            records = _records(inner, connective)
            if records:
                first, last = records[0], records[-1]
                records[0] = replace(first, open_paren="(" + first.open_paren)
                records[-1] = replace(records[-1], close_paren=last.close_paren + ")")
            return records
        case ConstantExpression():
            # Constants nested inside a composite have no record form.
            return []
        case _:
            raise TypeError(f"Unsupported expression type: {type(expression).__name__}")


def encode_csv(expression: Expression) -> str:
    """Encode to ``<>``-separated flat records."""
    return RECORD_SEPARATOR.join(record.to_text() for record in encode_records(expression))


def encode_base64(expression: Expression) -> str:
    return base64.b64encode(encode_csv(expression).encode("utf-8")).decode("ascii")


# ============================================================================
# Decoding
# ============================================================================


def _decode_operator(symbol: str) -> Operator:
    try:
        return operators.operator_from_symbol(symbol)
    except ValueError:
        logger.debug("Unknown operator symbol %r decoded as EQUALS", symbol)
        return Operator.EQUALS


def _decode_connective(symbol: str) -> LogicalOperator:
    try:
        return LogicalOperator.from_symbol(symbol) or LogicalOperator.AND
    except ValueError:
        return LogicalOperator.AND


def decode_records(records: list[FlatRecord]) -> Expression:
    conditions: list[tuple[FlatRecord, Condition]] = []
    always_false = False
    for record in records:
        if not record.parameter:
            always_false = always_false or record.value.strip().lower() == "false"
            continue
        conditions.append(
            (
                record,
                Condition(
                    parameter=record.parameter,
                    operator=_decode_operator(record.operator_symbol),
                    value=record.value,
                    grouped="(" in record.open_paren,
                ),
            )
        )

    if not conditions:
        return ALWAYS_FALSE if always_false else ALWAYS_TRUE
    if len(conditions) == 1:
        return conditions[0][1]

    nodes = [
        ExpressionNode(None if index == 0 else _decode_connective(record.connective), condition)
        for index, (record, condition) in enumerate(conditions)
    ]
    return CompositeExpression(tuple(nodes))


def decode_csv(text: str | None) -> Expression:
    """
    Decode flat records back into an expression.

    Records with fewer than six fields are dropped. One surviving record
    yields a bare Condition, several yield one flat CompositeExpression.
    Blank input is always-true.
    """
    if text is None or not text.strip():
        return ALWAYS_TRUE
    records = []
    for row in text.split(RECORD_SEPARATOR):
        record = FlatRecord.parse(row)
        if record is None:
            logger.debug("Dropping malformed flat record %r", row)
            continue
        records.append(record)
    return decode_records(records)


def decode_base64(text: str | None) -> Expression:
    """
    Raises:
        ValidationError: If the payload is not valid Base64 UTF-8 text
    """
    if text is None or not text.strip():
        return ALWAYS_TRUE
    try:
        decoded = base64.b64decode(text.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValidationError("Invalid Base64 expression payload", details={"reason": str(e)})
    return decode_csv(decoded)


# ============================================================================
# JSON tree
# ============================================================================


def expression_to_dict(expression: Expression) -> dict[str, Any]:
    match expression:
        case Condition():
            return {
                "type": "condition",
                "parameter": expression.parameter,
                "operator": expression.operator.value,
                "value": expression.value,
                "dataType": expression.data_type.value,
                "grouped": expression.grouped,
            }
        case CompositeExpression(nodes=nodes):
            return {
                "type": "composite",
                "nodes": [
                    {
                        "connective": node.connective.value if node.connective else None,
                        "expression": expression_to_dict(node.expression),
                    }
                    for node in nodes
                ],
            }
        case GroupExpression(expression=inner):
            return {"type": "group", "expression": expression_to_dict(inner)}
        case ConstantExpression(value=value, label=label):
            return {"type": "constant", "value": value, "label": label}
        case _:
            raise TypeError(f"Unsupported expression type: {type(expression).__name__}")


def _parse_operator(text: Any) -> Operator:
    if not isinstance(text, str):
        raise ValidationError("Operator must be a string", details={"operator": text})
    try:
        return Operator(text)
    except ValueError:
        pass
    try:
        return operators.operator_from_symbol(text)
    except ValueError:
        raise ValidationError(f"Unknown operator: {text}", details={"operator": text}) from None


def _value_text(value: Any) -> str:
    """JSON scalars become condition text; booleans use the lower-case literals."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value
    raise ValidationError(
        "Condition value must be a string, number or boolean", details={"value": value}
    )


def _string_field(data: dict[str, Any], key: str, required: bool = True) -> str | None:
    value = data[key] if required else data.get(key)
    if value is None and not required:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"'{key}' must be a string", details={"node": data})
    return value


def _bool_field(data: dict[str, Any], key: str, default: bool) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValidationError(f"'{key}' must be a boolean", details={"node": data})
    return value


def expression_from_dict(data: dict[str, Any], strict: bool = True) -> Expression:
    """
    Rebuild an expression from its JSON tree.

    Operators may be given by name (``GREATER_THAN``) or symbol (``>``),
    connectives by any spelling LogicalOperator accepts. Numeric and boolean
    condition values are accepted and stored as their text form.

    Args:
        data: Tree produced by ``expression_to_dict`` or sent by a client
        strict: When False, composite node layout is not enforced so the
            validator can report it instead

    Raises:
        ValidationError: If a node is not an object, is missing required keys,
            has a field of the wrong JSON type or names an unknown type,
            operator or connective
    """
    if not isinstance(data, dict):
        raise ValidationError("Expression node must be an object", details={"node": data})

    kind = data.get("type")
    try:
        if kind == "condition":
            data_type = _string_field(data, "dataType", required=False)
            return Condition(
                parameter=_string_field(data, "parameter"),
                operator=_parse_operator(data["operator"]),
                value=_value_text(data.get("value")),
                data_type=DataType.from_type_ref(data_type) if data_type else None,
                grouped=_bool_field(data, "grouped", True),
            )
        if kind == "composite":
            entries = data["nodes"]
            if not isinstance(entries, list):
                raise ValidationError("'nodes' must be a list", details={"node": data})
            nodes = []
            for entry in entries:
                if not isinstance(entry, dict):
                    raise ValidationError(
                        "Composite node must be an object", details={"node": entry}
                    )
                connective = _string_field(entry, "connective", required=False)
                nodes.append(
                    ExpressionNode(
                        LogicalOperator.from_symbol(connective),
                        expression_from_dict(entry["expression"], strict),
                    )
                )
            if strict:
                return CompositeExpression(tuple(nodes))
            return CompositeExpression.unchecked(nodes)
        if kind == "group":
            return GroupExpression(expression_from_dict(data["expression"], strict))
        if kind == "constant":
            value = data["value"]
            if not isinstance(value, bool):
                raise ValidationError("Constant value must be a boolean", details={"node": data})
            return ConstantExpression(value, _string_field(data, "label", required=False))
    except KeyError as e:
        raise ValidationError(
            f"Expression node of type '{kind}' is missing '{e.args[0]}'", details={"node": data}
        ) from None
    except ValueError as e:
        raise ValidationError(str(e), details={"node": data}) from None

    raise ValidationError(f"Unknown expression type: {kind}", details={"node": data})


def to_json(expression: Expression, pretty: bool = False) -> str:
    """Serialize to JSON with sorted keys so equal trees give identical text."""
    if pretty:
        return json.dumps(expression_to_dict(expression), sort_keys=True, indent=2, ensure_ascii=False)
    return json.dumps(
        expression_to_dict(expression), sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def from_json(text: str) -> Expression:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValidationError("Invalid expression JSON", details={"reason": str(e)}) from None
    return expression_from_dict(data)

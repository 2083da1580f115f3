"""
Expression model for business-rule conditions.

Key Components:
- model: Immutable expression tree (Condition, Composite, Group, Constant)
- operators: Operator catalog with per-notation text fragments
- builder: Fluent construction of expression trees
- validator: Advisory checks over a tree
- serializer: Flat-record codec, Base64 transport and JSON tree

Design Principles:
- Immutability: Trees never change after construction
- Advisory validation: Rendering never fails, validation is an explicit gate
"""

from dmn_rules.expression.builder import ExpressionBuilder
from dmn_rules.expression.model import (
    ALWAYS_FALSE,
    ALWAYS_TRUE,
    CompositeExpression,
    Condition,
    ConstantExpression,
    Expression,
    ExpressionNode,
    GroupExpression,
    Parameter,
    always_false,
    always_true,
    collect_parameters,
    copy_expression,
    to_readable_string,
)
from dmn_rules.expression.serializer import (
    decode_base64,
    decode_csv,
    encode_base64,
    encode_csv,
    expression_from_dict,
    expression_to_dict,
)
from dmn_rules.expression.validator import ValidationResult, validate

__all__ = [
    "ALWAYS_FALSE",
    "ALWAYS_TRUE",
    "CompositeExpression",
    "Condition",
    "ConstantExpression",
    "Expression",
    "ExpressionBuilder",
    "ExpressionNode",
    "GroupExpression",
    "Parameter",
    "ValidationResult",
    "always_false",
    "always_true",
    "collect_parameters",
    "copy_expression",
    "decode_base64",
    "decode_csv",
    "encode_base64",
    "encode_csv",
    "expression_from_dict",
    "expression_to_dict",
    "to_readable_string",
    "validate",
]

"""
Domain enums for expressions and decision tables.

Value kinds use the DMN ``typeRef`` spelling so they can be written to a
document without translation.
"""

from __future__ import annotations

from enum import Enum


class DataType(str, Enum):
    """Declared value kind of a parameter or comparison value."""

    STRING = "string"
    INTEGER = "integer"
    LONG = "long"
    DOUBLE = "double"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "dateTime"

    @property
    def type_ref(self) -> str:
        return self.value

    @property
    def is_numeric(self) -> bool:
        return self in (DataType.INTEGER, DataType.LONG, DataType.DOUBLE)

    @classmethod
    def from_type_ref(cls, type_ref: str | None) -> DataType:
        """Resolve a DMN typeRef case-insensitively, falling back to STRING."""
        if not type_ref:
            return cls.STRING
        for member in cls:
            if member.value.lower() == type_ref.strip().lower():
                return member
        return cls.STRING

    @classmethod
    def infer_from_value(cls, value: str | None) -> DataType:
        """
        Infer a value kind from the raw comparison text.

        Numbers win over booleans, booleans over strings. A value containing a
        dot is tried as a float first; anything else numeric is an INTEGER.
        """
        if value is None or value == "":
            return cls.STRING
        text = value.strip()
        if "." in text:
            try:
                float(text)
                return cls.DOUBLE
            except ValueError:
                pass
        else:
            try:
                int(text)
                return cls.INTEGER
            except ValueError:
                pass
        if text.lower() in ("true", "false"):
            return cls.BOOLEAN
        return cls.STRING


class LogicalOperator(str, Enum):
    """Connective joining a node to the previous node of a composite."""

    AND = "AND"
    OR = "OR"

    @property
    def symbol(self) -> str:
        return self.value.lower()

    @property
    def display_name(self) -> str:
        return self.value

    @property
    def java_token(self) -> str:
        return "&&" if self is LogicalOperator.AND else "||"

    @classmethod
    def from_symbol(cls, symbol: str | None) -> LogicalOperator | None:
        """
        Parse a connective from any of its spellings.

        Args:
            symbol: ``and``/``AND``/``&&`` or ``or``/``OR``/``||``

        Returns:
            The connective, or None for a blank symbol

        Raises:
            ValueError: If the symbol is not a known connective
        """
        if symbol is None or not symbol.strip():
            return None
        text = symbol.strip()
        for member in cls:
            if text.lower() == member.symbol or text == member.java_token:
                return member
        raise ValueError(f"Unknown logical operator: {symbol}")


class OperatorCategory(str, Enum):
    """Grouping of comparison operators by the kind of test they perform."""

    COMPARISON = "COMPARISON"
    NUMERIC = "NUMERIC"
    STRING = "STRING"
    NULL_CHECK = "NULL_CHECK"
    COLLECTION = "COLLECTION"

    @property
    def display_name(self) -> str:
        return _CATEGORY_DISPLAY_NAMES[self]


_CATEGORY_DISPLAY_NAMES = {
    OperatorCategory.COMPARISON: "Comparison",
    OperatorCategory.NUMERIC: "Numeric",
    OperatorCategory.STRING: "String",
    OperatorCategory.NULL_CHECK: "Null/Empty",
    OperatorCategory.COLLECTION: "Collection",
}


class Operator(str, Enum):
    """Comparison operators understood by the catalog."""

    EQUALS = "EQUALS"
    NOT_EQUALS = "NOT_EQUALS"
    GREATER_THAN = "GREATER_THAN"
    GREATER_THAN_OR_EQUAL = "GREATER_THAN_OR_EQUAL"
    LESS_THAN = "LESS_THAN"
    LESS_THAN_OR_EQUAL = "LESS_THAN_OR_EQUAL"
    BETWEEN = "BETWEEN"
    CONTAINS = "CONTAINS"
    NOT_CONTAINS = "NOT_CONTAINS"
    STARTS_WITH = "STARTS_WITH"
    ENDS_WITH = "ENDS_WITH"
    MATCHES = "MATCHES"
    EQUALS_IGNORE_CASE = "EQUALS_IGNORE_CASE"
    IS_NULL = "IS_NULL"
    IS_NOT_NULL = "IS_NOT_NULL"
    IS_EMPTY = "IS_EMPTY"
    IS_NOT_EMPTY = "IS_NOT_EMPTY"
    IN = "IN"
    NOT_IN = "NOT_IN"


class HitPolicy(str, Enum):
    """Decision table hit policies, spelled as they appear in DMN XML."""

    UNIQUE = "UNIQUE"
    FIRST = "FIRST"
    PRIORITY = "PRIORITY"
    ANY = "ANY"
    COLLECT = "COLLECT"
    RULE_ORDER = "RULE ORDER"
    OUTPUT_ORDER = "OUTPUT ORDER"


class Notation(str, Enum):
    """
    Target text syntaxes for operator fragments.

    UNARY_TEST is the decision-table cell syntax, JAVA and FEEL are the two
    inline boolean-expression syntaxes.
    """

    UNARY_TEST = "unary_test"
    JAVA = "java"
    FEEL = "feel"

"""
Domain-specific exceptions for the DMN rules service.

The compile and render paths never raise for malformed expressions; these
errors come from explicit validation gates, raw table shape checks and the
API layer, which maps them to HTTP status codes.
"""

from typing import Any


class DmnRulesError(Exception):
    """Base exception for all DMN rules domain errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(DmnRulesError):
    """
    Raised when an expression or request fails validation.

    Examples:
    - Condition without a parameter name
    - Operator that does not support the value kind
    - Missing comparison value
    - Too many rules in one request

    HTTP Status: 400 Bad Request
    """

    pass


class ExpressionError(DmnRulesError, ValueError):
    """
    Raised when an expression tree is constructed with a broken node layout.

    Examples:
    - Connective on the first node of a composite
    - Missing connective on a later node

    HTTP Status: 400 Bad Request
    """

    pass


class GenerationError(DmnRulesError):
    """
    Raised when a decision table document cannot be produced.

    Examples:
    - Rule entry count does not match the declared columns
    - Generated XML does not parse

    HTTP Status: 422 Unprocessable Entity
    """

    pass


ERROR_STATUS_MAP = {
    ValidationError: 400,
    ExpressionError: 400,
    GenerationError: 422,
}


def get_status_code(error: Exception) -> int:
    """
    Get HTTP status code for a domain exception.

    Args:
        error: Domain exception instance

    Returns:
        HTTP status code (defaults to 500 for unknown errors)
    """
    return ERROR_STATUS_MAP.get(type(error), 500)

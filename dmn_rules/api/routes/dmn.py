"""Decision table document generation endpoints."""

import logging

from fastapi import APIRouter, Response

from dmn_rules.api.schemas.dmn import (
    DecisionTableRequestSchema,
    ExpressionDmnRequest,
    RulesDmnRequest,
)
from dmn_rules.compiler.dmn import generate_from_table, generate_xml, generate_xml_from_rules
from dmn_rules.core.config import settings
from dmn_rules.core.errors import ValidationError
from dmn_rules.expression.validator import validate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dmn", tags=["dmn"])

DMN_MEDIA_TYPE = "application/xml"
DMN_FILENAME = "decision.dmn"


def _dmn_response(xml: str) -> Response:
    return Response(
        content=xml,
        media_type=DMN_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={DMN_FILENAME}"},
    )


@router.post("", response_class=Response)
async def post_decision_table(payload: DecisionTableRequestSchema) -> Response:
    """
    Generate a DMN document from explicit columns and cell text.

    Returns the document as an attachment named ``decision.dmn``.
    """
    xml = generate_from_table(payload.to_request(), pretty_print=settings.dmn_pretty_print)
    return _dmn_response(xml)


@router.post("/expression", response_class=Response)
async def post_expression_table(payload: ExpressionDmnRequest) -> Response:
    """
    Compile one expression into a DMN decision table.

    With ``validate`` (the default) an expression that fails validation is
    rejected with 400 and the validator's findings.
    """
    expression = payload.to_expression()
    if payload.validate_expression:
        validate(expression).raise_for_errors()
    xml = generate_xml(expression, payload.config.to_render_config(settings))
    return _dmn_response(xml)


@router.post("/rules", response_class=Response)
async def post_rules_table(payload: RulesDmnRequest) -> Response:
    """
    Compile several rules into one DMN decision table.

    Rows appear in rule order and carry each rule's outputs verbatim.
    """
    if len(payload.rules) > settings.dmn_max_rules:
        raise ValidationError(
            f"Too many rules: {len(payload.rules)} (maximum {settings.dmn_max_rules})",
            details={"rule_count": len(payload.rules), "max_rules": settings.dmn_max_rules},
        )

    rules = [rule.to_rule_definition() for rule in payload.rules]
    if payload.validate_expression:
        for index, rule in enumerate(rules):
            result = validate(rule.expression)
            if not result.is_valid:
                raise ValidationError(
                    f"Rule {index} failed validation",
                    details={"rule": index, "errors": result.errors, "warnings": result.warnings},
                )

    xml = generate_xml_from_rules(rules, payload.config.to_render_config(settings))
    return _dmn_response(xml)

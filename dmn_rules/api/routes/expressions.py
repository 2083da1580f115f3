"""Expression validation, rendering and decoding endpoints."""

import logging

from fastapi import APIRouter

from dmn_rules.api.schemas.expression import (
    DecodeRequest,
    DecodeResponse,
    ExpressionRequest,
    RenderResponse,
    ValidationResponse,
)
from dmn_rules.compiler.renderers import FeelRenderer, JavaRenderer
from dmn_rules.compiler.rules import compile_rows
from dmn_rules.expression.model import collect_parameters, to_readable_string
from dmn_rules.expression.serializer import (
    decode_base64,
    decode_csv,
    encode_base64,
    encode_csv,
    expression_to_dict,
)
from dmn_rules.expression.validator import validate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/expressions", tags=["expressions"])


@router.post("/validate", response_model=ValidationResponse)
async def post_validate(payload: ExpressionRequest) -> ValidationResponse:
    """Report validation errors and warnings without rejecting the expression."""
    result = validate(payload.to_expression())
    return ValidationResponse(valid=result.is_valid, errors=result.errors, warnings=result.warnings)


@router.post("/render", response_model=RenderResponse)
async def post_render(payload: ExpressionRequest) -> RenderResponse:
    """
    Render an expression in every supported form.

    Includes the readable text, Java and FEEL expressions, the flat-record
    encoding and the decision rows it compiles to.
    """
    expression = payload.to_expression()
    parameters = collect_parameters(expression)
    rows = compile_rows(expression, parameters)
    return RenderResponse(
        readable=to_readable_string(expression),
        java=JavaRenderer(payload.variable_prefix).render(expression),
        feel=FeelRenderer(payload.variable_prefix).render(expression),
        csv=encode_csv(expression),
        base64=encode_base64(expression),
        parameters=parameters,
        rows=[dict(row.entries) for row in rows],
    )


@router.post("/decode", response_model=DecodeResponse)
async def post_decode(payload: DecodeRequest) -> DecodeResponse:
    """Decode flat-record text (or its Base64 form) into an expression tree."""
    if payload.csv is not None:
        expression = decode_csv(payload.csv)
    else:
        expression = decode_base64(payload.base64)
    return DecodeResponse(
        expression=expression_to_dict(expression),
        readable=to_readable_string(expression),
    )

"""Generate a DMN document from a JSON request file.

Usage:
    dmn-generate request.json -o decision.dmn
    dmn-generate rules.json --mode rules

The file holds the same body the HTTP API accepts: an expression request, a
multi-rule request, or a raw decision table request. ``--mode auto`` picks
by the keys present.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import pydantic

from dmn_rules.api.schemas.dmn import (
    DecisionTableRequestSchema,
    ExpressionDmnRequest,
    RulesDmnRequest,
)
from dmn_rules.compiler.dmn import generate_from_table, generate_xml, generate_xml_from_rules
from dmn_rules.core.config import settings
from dmn_rules.core.errors import DmnRulesError
from dmn_rules.expression.validator import validate

logger = logging.getLogger(__name__)

MODES = ("auto", "expression", "rules", "table")


def detect_mode(body: dict[str, Any]) -> str:
    if "rules" in body and "expression" not in body:
        return "table" if "decisionName" in body or "decision_name" in body else "rules"
    if "expression" in body:
        return "expression"
    return "table"


def build_document(body: dict[str, Any], mode: str = "auto") -> str:
    """
    Turn a request body into DMN XML.

    Raises:
        DmnRulesError: If validation or generation fails
        pydantic.ValidationError: If the body does not match the request shape
    """
    if mode == "auto":
        mode = detect_mode(body)

    if mode == "table":
        request = DecisionTableRequestSchema.model_validate(body)
        return generate_from_table(request.to_request(), pretty_print=settings.dmn_pretty_print)

    if mode == "rules":
        payload = RulesDmnRequest.model_validate(body)
        rules = [rule.to_rule_definition() for rule in payload.rules]
        if payload.validate_expression:
            for rule in rules:
                validate(rule.expression).raise_for_errors()
        return generate_xml_from_rules(rules, payload.config.to_render_config(settings))

    payload = ExpressionDmnRequest.model_validate(body)
    expression = payload.to_expression()
    if payload.validate_expression:
        validate(expression).raise_for_errors()
    return generate_xml(expression, payload.config.to_render_config(settings))


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate a DMN decision table from a JSON request")
    parser.add_argument("input", type=Path, help="JSON request file")
    parser.add_argument("--output", "-o", type=Path, help="Write XML here instead of stdout")
    parser.add_argument("--mode", choices=MODES, default="auto", help="Request kind (default: auto)")
    args = parser.parse_args(argv)

    try:
        body = json.loads(args.input.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        print(f"[ERROR] Cannot read {args.input}: {e}", file=sys.stderr)
        return 2

    try:
        xml = build_document(body, args.mode)
    except DmnRulesError as e:
        print(f"[ERROR] {e.message}", file=sys.stderr)
        for error in e.details.get("errors", []):
            print(f"   - {error}", file=sys.stderr)
        return 1
    except pydantic.ValidationError as e:
        print(f"[ERROR] Invalid request: {e}", file=sys.stderr)
        return 1

    if args.output:
        args.output.write_text(xml, encoding="utf-8")
        print(f"[OK] DMN written: {args.output}")
    else:
        sys.stdout.write(xml)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

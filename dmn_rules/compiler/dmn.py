"""
DMN decision table document assembly.

Produces DMN 1.3 XML with lxml. Two entry points feed the same writer:

- Expression path: expressions are compiled into rows (``generate_xml``,
  ``generate_xml_from_rules``) and ids are 1-based (``input_1``, ``rule_1``)
- Table path: the caller supplies columns and cell text directly
  (``generate_from_table``) and ids follow the modeler convention,
  0-based with the decision named after the request
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from lxml import etree

from dmn_rules.compiler.config import RenderConfig
from dmn_rules.compiler.rules import (
    CompiledTable,
    RuleDefinition,
    compile_expression,
    compile_rules,
)
from dmn_rules.core.errors import GenerationError
from dmn_rules.domain.enums import HitPolicy
from dmn_rules.expression.model import Expression

logger = logging.getLogger(__name__)

DMN_NAMESPACE = "https://www.omg.org/spec/DMN/20191111/MODEL/"
MODEL_NAMESPACE = "http://camunda.org/schema/1.0/dmn"

_NSMAP = {None: DMN_NAMESPACE}


def _tag(name: str) -> str:
    return f"{{{DMN_NAMESPACE}}}{name}"


# ============================================================================
# Raw table request
# ============================================================================


@dataclass(frozen=True, slots=True)
class TableInput:
    label: str
    expression: str
    type_ref: str = "string"


@dataclass(frozen=True, slots=True)
class TableOutput:
    label: str
    name: str
    type_ref: str = "string"


@dataclass(frozen=True, slots=True)
class TableRule:
    input_entries: tuple[str, ...] = ()
    output_entries: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DecisionTableRequest:
    """Decision table described column by column with ready-made cell text."""

    decision_name: str
    inputs: tuple[TableInput, ...] = ()
    outputs: tuple[TableOutput, ...] = ()
    rules: tuple[TableRule, ...] = ()
    hit_policy: HitPolicy = field(default=HitPolicy.FIRST)


# ============================================================================
# XML writer
# ============================================================================


class _DocumentWriter:
    """Builds one definitions/decision/decisionTable element tree."""

    def __init__(
        self,
        definitions_id: str,
        definitions_name: str,
        decision_id: str,
        decision_name: str,
        table_id: str,
        hit_policy: HitPolicy,
    ) -> None:
        self.root = etree.Element(
            _tag("definitions"),
            attrib={"id": definitions_id, "name": definitions_name, "namespace": MODEL_NAMESPACE},
            nsmap=_NSMAP,
        )
        decision = etree.SubElement(
            self.root, _tag("decision"), attrib={"id": decision_id, "name": decision_name}
        )
        self.table = etree.SubElement(
            decision, _tag("decisionTable"), attrib={"id": table_id, "hitPolicy": hit_policy.value}
        )

    def _text(self, parent: etree._Element, text: str) -> None:
        etree.SubElement(parent, _tag("text")).text = text

    def add_input(self, input_id: str, label: str, expression_id: str, type_ref: str, text: str) -> None:
        element = etree.SubElement(self.table, _tag("input"), attrib={"id": input_id, "label": label})
        expression = etree.SubElement(
            element, _tag("inputExpression"), attrib={"id": expression_id, "typeRef": type_ref}
        )
        self._text(expression, text)

    def add_output(self, output_id: str, label: str, name: str, type_ref: str) -> None:
        etree.SubElement(
            self.table,
            _tag("output"),
            attrib={"id": output_id, "label": label, "name": name, "typeRef": type_ref},
        )

    def add_rule(
        self,
        rule_id: str,
        input_entries: Sequence[tuple[str, str]],
        output_entries: Sequence[tuple[str, str]],
    ) -> None:
        rule = etree.SubElement(self.table, _tag("rule"), attrib={"id": rule_id})
        for entry_id, text in input_entries:
            self._text(etree.SubElement(rule, _tag("inputEntry"), attrib={"id": entry_id}), text)
        for entry_id, text in output_entries:
            self._text(etree.SubElement(rule, _tag("outputEntry"), attrib={"id": entry_id}), text)

    def to_xml(self, pretty_print: bool = True) -> str:
        return etree.tostring(
            self.root, xml_declaration=True, encoding="UTF-8", pretty_print=pretty_print
        ).decode("utf-8")


# ============================================================================
# Expression path
# ============================================================================


def render_table(table: CompiledTable, config: RenderConfig) -> str:
    """
    Write a compiled table as a DMN document.

    Output entries are emitted exactly as stored on each row; a row with
    fewer outputs than columns gets empty output entries for the rest.
    """
    writer = _DocumentWriter(
        config.definitions_id,
        config.definitions_name,
        config.decision_id,
        config.decision_name,
        config.table_id,
        config.hit_policy,
    )

    for index, parameter in enumerate(table.parameters, start=1):
        computed = config.computed_input(parameter)
        if computed is not None:
            writer.add_input(
                f"input_{index}",
                computed.label,
                f"inputExpr_{index}",
                computed.data_type.type_ref,
                computed.expression,
            )
        else:
            writer.add_input(
                f"input_{index}",
                config.parameter_label(parameter),
                f"inputExpr_{index}",
                config.parameter_type(parameter).type_ref,
                parameter,
            )

    output_columns = config.output_columns
    for index, column in enumerate(output_columns, start=1):
        writer.add_output(f"output_{index}", column.label, column.name, column.data_type.type_ref)

    for row_number, row in enumerate(table.rows, start=1):
        if len(row.outputs) < len(output_columns):
            logger.warning(
                "Rule %d has %d output values for %d output columns",
                row_number,
                len(row.outputs),
                len(output_columns),
            )
        writer.add_rule(
            f"rule_{row_number}",
            [
                (f"inputEntry_{row_number}_{index}", row.entries.get(parameter, ""))
                for index, parameter in enumerate(table.parameters, start=1)
            ],
            [
                (
                    f"outputEntry_{row_number}_{index}",
                    row.outputs[index - 1] if index <= len(row.outputs) else "",
                )
                for index in range(1, len(output_columns) + 1)
            ],
        )

    return writer.to_xml(config.pretty_print)


def generate_xml(expression: Expression, config: RenderConfig | None = None) -> str:
    """
    Generate a DMN document from a single expression.

    Every row receives each output column's default value, quoted for
    string outputs.

    Args:
        expression: Expression to compile
        config: Ids, hit policy and column metadata (defaults if None)

    Returns:
        DMN XML text

    Raises:
        GenerationError: If the document cannot be serialized
    """
    config = config or RenderConfig()
    return _generate("expression", config, lambda: compile_expression(expression, config))


def generate_xml_from_rules(rules: Sequence[RuleDefinition], config: RenderConfig | None = None) -> str:
    """
    Generate a DMN document from several rules sharing one column set.

    Rows appear in rule order; each rule's output values are written verbatim.
    """
    config = config or RenderConfig()
    return _generate("rules", config, lambda: compile_rules(rules, config))


def _generate(source: str, config: RenderConfig, compile_fn: Callable[[], CompiledTable]) -> str:
    start_time = time.time()
    try:
        table = compile_fn()
        try:
            xml = render_table(table, config)
        except ValueError as e:
            # lxml rejects text that cannot appear in XML (control characters, NUL)
            raise GenerationError("Cell text is not valid XML", details={"reason": str(e)}) from e
    except Exception:
        _record_generation_metrics(source, "error", time.time() - start_time, 0)
        raise

    duration = time.time() - start_time
    _record_generation_metrics(source, "success", duration, len(table.rows))
    logger.info(
        "Generated decision %s with %d rows and %d inputs",
        config.decision_id,
        len(table.rows),
        len(table.parameters),
        extra={"source": source, "duration_ms": round(duration * 1000, 2)},
    )
    return xml


# ============================================================================
# Table path
# ============================================================================


def generate_from_table(request: DecisionTableRequest, pretty_print: bool = True) -> str:
    """
    Generate a DMN document from explicit columns and cell text.

    Raises:
        GenerationError: If the decision name is blank, a rule's entry counts
            do not match the columns, or the document cannot be serialized
    """
    start_time = time.time()
    try:
        xml = _write_table(request, pretty_print)
    except Exception:
        _record_generation_metrics("table", "error", time.time() - start_time, 0)
        raise

    _record_generation_metrics("table", "success", time.time() - start_time, len(request.rules))
    logger.info("Generated decision %s with %d rows", request.decision_name, len(request.rules))
    return xml


def _write_table(request: DecisionTableRequest, pretty_print: bool) -> str:
    if not request.decision_name or not request.decision_name.strip():
        raise GenerationError("Decision name is required")

    for index, rule in enumerate(request.rules):
        if len(rule.input_entries) != len(request.inputs):
            raise GenerationError(
                f"Rule {index} has {len(rule.input_entries)} input entries, "
                f"expected {len(request.inputs)}",
                details={"rule": index},
            )
        if len(rule.output_entries) != len(request.outputs):
            raise GenerationError(
                f"Rule {index} has {len(rule.output_entries)} output entries, "
                f"expected {len(request.outputs)}",
                details={"rule": index},
            )

    writer = _DocumentWriter(
        "definitions",
        request.decision_name,
        request.decision_name,
        request.decision_name,
        f"{request.decision_name}Table",
        request.hit_policy,
    )
    try:
        for index, column in enumerate(request.inputs):
            writer.add_input(
                f"input_{index}", column.label, f"inputExpression_{index}", column.type_ref, column.expression
            )
        for index, column in enumerate(request.outputs):
            writer.add_output(f"output_{index}", column.label, column.name, column.type_ref)
        for index, rule in enumerate(request.rules):
            writer.add_rule(
                f"rule_{index}",
                [(f"inputEntry_{index}_{i}", text) for i, text in enumerate(rule.input_entries)],
                [(f"outputEntry_{index}_{i}", text) for i, text in enumerate(rule.output_entries)],
            )
    except ValueError as e:
        raise GenerationError("Cell text is not valid XML", details={"reason": str(e)}) from e
    return writer.to_xml(pretty_print)


def _record_generation_metrics(source: str, status: str, duration: float, rows: int) -> None:
    """
    Record generation metrics to Prometheus.

    Metrics failures are logged and otherwise ignored so they never break
    document generation.
    """
    try:
        from dmn_rules.core.observability import metrics

        metrics.dmn_generations_total.labels(status=status, source=source).inc()
        metrics.dmn_generation_duration_seconds.labels(source=source).observe(duration)
        if status == "success":
            metrics.dmn_generation_rows.labels(source=source).observe(rows)
    except Exception:
        logger.debug("Failed to record generation metrics", exc_info=True)

"""
Unit tests for DMN document assembly.

Tests cover:
- Document skeleton, ids and namespaces
- Input columns (types, labels, computed inputs) and output columns
- Rule rows for single expressions and rule lists
- The raw table path and its shape checks
- XML safety and generation metrics
"""

import pytest
from lxml import etree

from dmn_rules.compiler.config import RenderConfig
from dmn_rules.compiler.dmn import (
    DMN_NAMESPACE,
    MODEL_NAMESPACE,
    DecisionTableRequest,
    TableInput,
    TableOutput,
    TableRule,
    generate_from_table,
    generate_xml,
    generate_xml_from_rules,
)
from dmn_rules.compiler.rules import RuleDefinition
from dmn_rules.core.errors import GenerationError
from dmn_rules.core.observability import metrics
from dmn_rules.domain.enums import DataType, HitPolicy
from dmn_rules.expression.model import ALWAYS_FALSE, ALWAYS_TRUE, Condition

NS = {"d": DMN_NAMESPACE}


def parse(xml: str) -> etree._Element:
    return etree.fromstring(xml.encode("utf-8"))


def texts(element: etree._Element, path: str) -> list[str]:
    return [(node.text or "") for node in element.findall(path, NS)]


def generation_count(status: str, source: str) -> float:
    value = metrics.registry.get_sample_value(
        "dmn_generations_total", {"status": status, "source": source}
    )
    return value or 0.0


# ============================================================================
# Expression path
# ============================================================================


class TestDocumentSkeleton:
    """Tests for the definitions/decision/decisionTable structure."""

    @pytest.mark.anyio
    async def test_default_ids_and_names(self, amount_and_status):
        root = parse(generate_xml(amount_and_status))
        assert root.tag == f"{{{DMN_NAMESPACE}}}definitions"
        assert root.get("id") == "definitions_1"
        assert root.get("name") == "DRD"
        assert root.get("namespace") == MODEL_NAMESPACE

        decision = root.find("d:decision", NS)
        assert decision.get("id") == "decision_1"
        assert decision.get("name") == "Business Rule Decision"

        table = decision.find("d:decisionTable", NS)
        assert table.get("id") == "decisionTable_1"
        assert table.get("hitPolicy") == "FIRST"

    @pytest.mark.anyio
    async def test_configured_ids_and_hit_policy(self, amount_and_status):
        config = (
            RenderConfig.builder()
            .definitions("defs", "Fraud")
            .decision("fraudCheck", "Fraud Check")
            .table_id("fraudTable")
            .hit_policy(HitPolicy.RULE_ORDER)
            .build()
        )
        root = parse(generate_xml(amount_and_status, config))
        assert root.get("id") == "defs"
        assert root.find("d:decision", NS).get("name") == "Fraud Check"
        table = root.find("d:decision/d:decisionTable", NS)
        assert table.get("id") == "fraudTable"
        assert table.get("hitPolicy") == "RULE ORDER"

    @pytest.mark.anyio
    async def test_xml_declaration_and_pretty_print(self, amount_and_status):
        pretty = generate_xml(amount_and_status)
        compact = generate_xml(amount_and_status, RenderConfig(pretty_print=False))
        assert pretty.startswith("<?xml")
        assert "\n  <decision" in pretty
        assert "\n  <decision" not in compact


class TestColumns:
    """Tests for input and output columns."""

    @pytest.mark.anyio
    async def test_inputs_follow_parameter_order(self, amount_and_status):
        table = parse(generate_xml(amount_and_status)).find("d:decision/d:decisionTable", NS)
        inputs = table.findall("d:input", NS)
        assert [i.get("id") for i in inputs] == ["input_1", "input_2"]
        assert [i.get("label") for i in inputs] == ["amount", "status"]
        expressions = [i.find("d:inputExpression", NS) for i in inputs]
        assert [e.get("id") for e in expressions] == ["inputExpr_1", "inputExpr_2"]
        assert [e.get("typeRef") for e in expressions] == ["string", "string"]
        assert texts(table, "d:input/d:inputExpression/d:text") == ["amount", "status"]

    @pytest.mark.anyio
    async def test_parameter_types_and_labels(self, amount_and_status):
        config = (
            RenderConfig.builder()
            .parameter_type("amount", DataType.DOUBLE)
            .parameter_label("amount", "Transaction Amount")
            .build()
        )
        table = parse(generate_xml(amount_and_status, config)).find(
            "d:decision/d:decisionTable", NS
        )
        first = table.find("d:input", NS)
        assert first.get("label") == "Transaction Amount"
        assert first.find("d:inputExpression", NS).get("typeRef") == "double"

    @pytest.mark.anyio
    async def test_default_output_column(self, amount_and_status):
        table = parse(generate_xml(amount_and_status)).find("d:decision/d:decisionTable", NS)
        output = table.find("d:output", NS)
        assert dict(output.attrib) == {
            "id": "output_1",
            "label": "Result",
            "name": "result",
            "typeRef": "string",
        }

    @pytest.mark.anyio
    async def test_configured_output_columns(self, amount_and_status):
        config = (
            RenderConfig.builder()
            .add_output("decision", "Decision", DataType.STRING, "review")
            .add_output("score", "Score", DataType.INTEGER, "10")
            .build()
        )
        table = parse(generate_xml(amount_and_status, config)).find(
            "d:decision/d:decisionTable", NS
        )
        assert [o.get("name") for o in table.findall("d:output", NS)] == ["decision", "score"]
        assert texts(table, "d:rule/d:outputEntry/d:text") == ['"review"', "10"]


class TestRules:
    """Tests for rule rows."""

    @pytest.mark.anyio
    async def test_single_row(self, amount_and_status):
        table = parse(generate_xml(amount_and_status)).find("d:decision/d:decisionTable", NS)
        rules = table.findall("d:rule", NS)
        assert [r.get("id") for r in rules] == ["rule_1"]
        entries = rules[0].findall("d:inputEntry", NS)
        assert [e.get("id") for e in entries] == ["inputEntry_1_1", "inputEntry_1_2"]
        assert texts(rules[0], "d:inputEntry/d:text") == ["> 100", '"active"']
        assert rules[0].find("d:outputEntry", NS).get("id") == "outputEntry_1_1"
        assert texts(rules[0], "d:outputEntry/d:text") == ['"approved"']

    @pytest.mark.anyio
    async def test_or_gives_two_rows_with_empty_cells(self, amount_or_vip):
        table = parse(generate_xml(amount_or_vip)).find("d:decision/d:decisionTable", NS)
        rules = table.findall("d:rule", NS)
        assert len(rules) == 2
        assert texts(rules[0], "d:inputEntry/d:text") == ["> 500", ""]
        assert texts(rules[1], "d:inputEntry/d:text") == ["", '"vip"']
        # Empty cells still carry a text element
        assert len(rules[1].findall("d:inputEntry/d:text", NS)) == 2

    @pytest.mark.anyio
    async def test_always_true_has_one_rule_and_no_inputs(self):
        table = parse(generate_xml(ALWAYS_TRUE)).find("d:decision/d:decisionTable", NS)
        assert table.findall("d:input", NS) == []
        assert len(table.findall("d:rule", NS)) == 1

    @pytest.mark.anyio
    async def test_always_false_has_no_rules(self):
        table = parse(generate_xml(ALWAYS_FALSE)).find("d:decision/d:decisionTable", NS)
        assert table.findall("d:rule", NS) == []
        assert len(table.findall("d:output", NS)) == 1

    @pytest.mark.anyio
    async def test_rules_with_missing_outputs_are_padded(self):
        config = RenderConfig.builder().add_output("a").add_output("b").build()
        xml = generate_xml_from_rules(
            [RuleDefinition.of(Condition.greater_than("x", "1"), '"only"')], config
        )
        table = parse(xml).find("d:decision/d:decisionTable", NS)
        assert texts(table, "d:rule/d:outputEntry/d:text") == ['"only"', ""]


class TestGapClosingDecision:
    """A computed input column referenced by one rule, with a catch-all fallback."""

    @pytest.fixture
    def xml(self) -> str:
        config = (
            RenderConfig.builder()
            .decision("gapDecision", "Gap Closing")
            .add_input(
                "closedAndExceedsMax",
                "Closed and exceeds max gap",
                'gantryStatus = "CLOSED" and (gapLength > maxGapLength)',
            )
            .add_output("action", "Action", DataType.STRING)
            .build()
        )
        rules = [
            RuleDefinition.of(Condition.equals("closedAndExceedsMax", "true"), '"CLOSE_GAP"'),
            RuleDefinition.of(ALWAYS_TRUE, '"NO_ACTION"'),
        ]
        return generate_xml_from_rules(rules, config)

    @pytest.mark.anyio
    async def test_computed_input_column(self, xml):
        table = parse(xml).find("d:decision/d:decisionTable", NS)
        inputs = table.findall("d:input", NS)
        assert len(inputs) == 1
        assert inputs[0].get("label") == "Closed and exceeds max gap"
        expression = inputs[0].find("d:inputExpression", NS)
        assert expression.get("typeRef") == "boolean"
        assert expression.find("d:text", NS).text == (
            'gantryStatus = "CLOSED" and (gapLength > maxGapLength)'
        )

    @pytest.mark.anyio
    async def test_rows_in_rule_order(self, xml):
        table = parse(xml).find("d:decision/d:decisionTable", NS)
        rules = table.findall("d:rule", NS)
        assert texts(rules[0], "d:inputEntry/d:text") == ["true"]
        assert texts(rules[0], "d:outputEntry/d:text") == ['"CLOSE_GAP"']
        assert texts(rules[1], "d:inputEntry/d:text") == [""]
        assert texts(rules[1], "d:outputEntry/d:text") == ['"NO_ACTION"']


class TestXmlSafety:
    """Tests for text that must be escaped or rejected."""

    @pytest.mark.anyio
    async def test_markup_characters_are_escaped(self):
        xml = generate_xml(Condition.equals("name", "<a & b>"))
        assert "&lt;a &amp; b&gt;" in xml
        table = parse(xml).find("d:decision/d:decisionTable", NS)
        assert texts(table, "d:rule/d:inputEntry/d:text") == ['"<a & b>"']

    @pytest.mark.anyio
    async def test_control_characters_raise_generation_error(self):
        with pytest.raises(GenerationError, match="not valid XML"):
            generate_xml(Condition.equals("name", "bad\x00value"))


class TestGenerationMetrics:
    """Tests for Prometheus counters around generation."""

    @pytest.mark.anyio
    async def test_success_is_counted(self, amount_and_status):
        before = generation_count("success", "expression")
        generate_xml(amount_and_status)
        assert generation_count("success", "expression") == before + 1

    @pytest.mark.anyio
    async def test_failure_is_counted(self):
        before = generation_count("error", "expression")
        with pytest.raises(GenerationError):
            generate_xml(Condition.equals("name", "\x01"))
        assert generation_count("error", "expression") == before + 1


# ============================================================================
# Table path
# ============================================================================


@pytest.fixture
def table_request() -> DecisionTableRequest:
    return DecisionTableRequest(
        decision_name="loanCheck",
        inputs=(
            TableInput("Amount", "amount", "integer"),
            TableInput("Status", "status"),
        ),
        outputs=(TableOutput("Result", "result"),),
        rules=(
            TableRule(("> 100", '"active"'), ('"approve"',)),
            TableRule(("", ""), ('"reject"',)),
        ),
        hit_policy=HitPolicy.UNIQUE,
    )


class TestTablePath:
    """Tests for documents built from explicit cells."""

    @pytest.mark.anyio
    async def test_ids_follow_decision_name(self, table_request):
        root = parse(generate_from_table(table_request))
        assert root.get("id") == "definitions"
        assert root.get("name") == "loanCheck"
        decision = root.find("d:decision", NS)
        assert decision.get("id") == "loanCheck"
        assert decision.get("name") == "loanCheck"
        table = decision.find("d:decisionTable", NS)
        assert table.get("id") == "loanCheckTable"
        assert table.get("hitPolicy") == "UNIQUE"

    @pytest.mark.anyio
    async def test_zero_based_element_ids(self, table_request):
        table = parse(generate_from_table(table_request)).find("d:decision/d:decisionTable", NS)
        assert [i.get("id") for i in table.findall("d:input", NS)] == ["input_0", "input_1"]
        assert table.find("d:input/d:inputExpression", NS).get("id") == "inputExpression_0"
        assert table.find("d:output", NS).get("id") == "output_0"
        rules = table.findall("d:rule", NS)
        assert [r.get("id") for r in rules] == ["rule_0", "rule_1"]
        assert rules[1].find("d:inputEntry", NS).get("id") == "inputEntry_1_0"
        assert rules[1].find("d:outputEntry", NS).get("id") == "outputEntry_1_0"

    @pytest.mark.anyio
    async def test_cells_are_written_verbatim(self, table_request):
        table = parse(generate_from_table(table_request)).find("d:decision/d:decisionTable", NS)
        assert texts(table, "d:input/d:inputExpression/d:text") == ["amount", "status"]
        assert table.find("d:input/d:inputExpression", NS).get("typeRef") == "integer"
        assert texts(table, "d:rule/d:inputEntry/d:text") == ["> 100", '"active"', "", ""]
        assert texts(table, "d:rule/d:outputEntry/d:text") == ['"approve"', '"reject"']

    @pytest.mark.anyio
    async def test_blank_decision_name(self):
        with pytest.raises(GenerationError, match="Decision name is required"):
            generate_from_table(DecisionTableRequest(decision_name="  "))

    @pytest.mark.anyio
    async def test_input_entry_count_mismatch(self, table_request):
        request = DecisionTableRequest(
            decision_name="loanCheck",
            inputs=table_request.inputs,
            outputs=table_request.outputs,
            rules=(TableRule(("> 100",), ('"approve"',)),),
        )
        with pytest.raises(GenerationError) as exc_info:
            generate_from_table(request)
        assert exc_info.value.message == "Rule 0 has 1 input entries, expected 2"
        assert exc_info.value.details == {"rule": 0}

    @pytest.mark.anyio
    async def test_output_entry_count_mismatch(self, table_request):
        request = DecisionTableRequest(
            decision_name="loanCheck",
            inputs=table_request.inputs,
            outputs=table_request.outputs,
            rules=(TableRule(("", ""), ()),),
        )
        with pytest.raises(GenerationError, match="0 output entries, expected 1"):
            generate_from_table(request)

    @pytest.mark.anyio
    async def test_table_generation_is_counted(self, table_request):
        before = generation_count("success", "table")
        generate_from_table(table_request)
        assert generation_count("success", "table") == before + 1

    @pytest.mark.anyio
    async def test_control_characters_in_cells_raise_generation_error(self, table_request):
        request = DecisionTableRequest(
            decision_name="loanCheck",
            inputs=table_request.inputs,
            outputs=table_request.outputs,
            rules=(TableRule(("> 100", '"a\x0bb"'), ('"approve"',)),),
        )
        with pytest.raises(GenerationError, match="not valid XML"):
            generate_from_table(request)

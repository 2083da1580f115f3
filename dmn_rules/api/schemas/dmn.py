from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dmn_rules.compiler.config import RenderConfig, RenderConfigBuilder
from dmn_rules.compiler.dmn import DecisionTableRequest, TableInput, TableOutput, TableRule
from dmn_rules.compiler.rules import RuleDefinition
from dmn_rules.core.config import Settings
from dmn_rules.domain.enums import DataType, HitPolicy
from dmn_rules.expression.model import Expression
from dmn_rules.expression.serializer import expression_from_dict

from .expression import validate_expression_tree


class OutputColumnSchema(BaseModel):
    name: str = Field(min_length=1)
    label: str | None = None
    type_ref: DataType = Field(default=DataType.STRING, alias="typeRef")
    default_value: str = Field(default="", alias="defaultValue")

    model_config = ConfigDict(populate_by_name=True)


class ComputedInputSchema(BaseModel):
    name: str = Field(min_length=1)
    label: str
    expression: str = Field(min_length=1)
    type_ref: DataType = Field(default=DataType.BOOLEAN, alias="typeRef")

    model_config = ConfigDict(populate_by_name=True)


class RenderConfigSchema(BaseModel):
    """Optional document settings; anything left out falls back to defaults."""

    definitions_id: str | None = Field(default=None, alias="definitionsId")
    definitions_name: str | None = Field(default=None, alias="definitionsName")
    decision_id: str | None = Field(default=None, alias="decisionId")
    decision_name: str | None = Field(default=None, alias="decisionName")
    table_id: str | None = Field(default=None, alias="tableId")
    hit_policy: HitPolicy | None = Field(default=None, alias="hitPolicy")
    parameter_types: dict[str, DataType] = Field(default_factory=dict, alias="parameterTypes")
    parameter_labels: dict[str, str] = Field(default_factory=dict, alias="parameterLabels")
    outputs: list[OutputColumnSchema] = Field(default_factory=list)
    computed_inputs: list[ComputedInputSchema] = Field(default_factory=list, alias="computedInputs")

    model_config = ConfigDict(populate_by_name=True)

    def to_render_config(self, settings: Settings) -> RenderConfig:
        builder: RenderConfigBuilder = RenderConfig.builder()
        builder.hit_policy(self.hit_policy or settings.dmn_hit_policy)
        builder.decision_name(self.decision_name or settings.dmn_decision_name)
        builder.pretty_print(settings.dmn_pretty_print)
        if self.definitions_id:
            builder.definitions(self.definitions_id, self.definitions_name)
        elif self.definitions_name:
            builder.definitions_name(self.definitions_name)
        if self.decision_id:
            builder.decision(self.decision_id)
        if self.table_id:
            builder.table_id(self.table_id)
        for name, data_type in self.parameter_types.items():
            builder.parameter_type(name, data_type)
        for name, label in self.parameter_labels.items():
            builder.parameter_label(name, label)
        for output in self.outputs:
            builder.add_output(output.name, output.label, output.type_ref, output.default_value)
        for computed in self.computed_inputs:
            builder.add_input(computed.name, computed.label, computed.expression, computed.type_ref)
        return builder.build()


class ExpressionDmnRequest(BaseModel):
    expression: dict[str, Any]
    config: RenderConfigSchema = Field(default_factory=RenderConfigSchema)
    validate_expression: bool = Field(default=True, alias="validate")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("expression")
    @classmethod
    def check_expression(cls, v: dict[str, Any]) -> dict[str, Any]:
        return validate_expression_tree(v)

    def to_expression(self) -> Expression:
        return expression_from_dict(self.expression, strict=False)


class RuleSchema(BaseModel):
    expression: dict[str, Any]
    outputs: list[str] = Field(default_factory=list)

    @field_validator("expression")
    @classmethod
    def check_expression(cls, v: dict[str, Any]) -> dict[str, Any]:
        return validate_expression_tree(v)

    def to_rule_definition(self) -> RuleDefinition:
        return RuleDefinition(expression_from_dict(self.expression, strict=False), tuple(self.outputs))


class RulesDmnRequest(BaseModel):
    rules: list[RuleSchema] = Field(min_length=1)
    config: RenderConfigSchema = Field(default_factory=RenderConfigSchema)
    validate_expression: bool = Field(default=True, alias="validate")

    model_config = ConfigDict(populate_by_name=True)


# ============================================================================
# Raw decision table request
# ============================================================================


class TableInputSchema(BaseModel):
    label: str
    expression: str
    type: str = "string"


class TableOutputSchema(BaseModel):
    label: str
    name: str
    type: str = "string"


class TableRuleSchema(BaseModel):
    input_entries: list[str] = Field(default_factory=list, alias="inputEntries")
    output_entries: list[str] = Field(default_factory=list, alias="outputEntries")

    model_config = ConfigDict(populate_by_name=True)


class DecisionTableRequestSchema(BaseModel):
    decision_name: str = Field(min_length=1, alias="decisionName")
    hit_policy: HitPolicy = Field(default=HitPolicy.FIRST, alias="hitPolicy")
    inputs: list[TableInputSchema] = Field(default_factory=list)
    outputs: list[TableOutputSchema] = Field(default_factory=list)
    rules: list[TableRuleSchema] = Field(default_factory=list)

    model_config = ConfigDict(populate_by_name=True)

    def to_request(self) -> DecisionTableRequest:
        return DecisionTableRequest(
            decision_name=self.decision_name,
            inputs=tuple(TableInput(i.label, i.expression, i.type) for i in self.inputs),
            outputs=tuple(TableOutput(o.label, o.name, o.type) for o in self.outputs),
            rules=tuple(
                TableRule(tuple(r.input_entries), tuple(r.output_entries)) for r in self.rules
            ),
            hit_policy=self.hit_policy,
        )

"""
Render configuration for decision table documents.

RenderConfig is immutable; RenderConfigBuilder collects overrides and
freezes them with ``build()``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from dmn_rules.domain.enums import DataType, HitPolicy
from dmn_rules.expression.model import Parameter

DEFAULT_DEFINITIONS_ID = "definitions_1"
DEFAULT_DEFINITIONS_NAME = "DRD"
DEFAULT_DECISION_ID = "decision_1"
DEFAULT_DECISION_NAME = "Business Rule Decision"
DEFAULT_TABLE_ID = "decisionTable_1"


@dataclass(frozen=True, slots=True)
class OutputColumn:
    """Output column of a decision table and the value single-expression rows receive."""

    name: str
    label: str | None = None
    data_type: DataType = DataType.STRING
    default_value: str = ""

    def __post_init__(self) -> None:
        if self.label is None:
            object.__setattr__(self, "label", self.name)

    @property
    def formatted_default(self) -> str:
        """Default value as output-entry text: quoted for strings, raw otherwise."""
        if self.data_type is DataType.STRING:
            return f'"{self.default_value}"'
        return self.default_value


@dataclass(frozen=True, slots=True)
class ComputedInput:
    """
    Input column whose expression is a fixed FEEL expression.

    Conditions reference the column by ``name``; the document's
    inputExpression carries ``expression`` instead of the bare name.
    """

    name: str
    label: str
    expression: str
    data_type: DataType = DataType.BOOLEAN


DEFAULT_OUTPUT = OutputColumn("result", "Result", DataType.STRING, "approved")


@dataclass(frozen=True, slots=True)
class RenderConfig:
    """Identifiers, hit policy and column metadata for one document."""

    definitions_id: str = DEFAULT_DEFINITIONS_ID
    definitions_name: str = DEFAULT_DEFINITIONS_NAME
    decision_id: str = DEFAULT_DECISION_ID
    decision_name: str = DEFAULT_DECISION_NAME
    table_id: str = DEFAULT_TABLE_ID
    hit_policy: HitPolicy = HitPolicy.FIRST
    parameter_types: Mapping[str, DataType] = field(default_factory=dict)
    parameter_labels: Mapping[str, str] = field(default_factory=dict)
    outputs: tuple[OutputColumn, ...] = ()
    computed_inputs: tuple[ComputedInput, ...] = ()
    pretty_print: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameter_types", MappingProxyType(dict(self.parameter_types)))
        object.__setattr__(self, "parameter_labels", MappingProxyType(dict(self.parameter_labels)))
        object.__setattr__(self, "outputs", tuple(self.outputs))
        object.__setattr__(self, "computed_inputs", tuple(self.computed_inputs))

    @staticmethod
    def builder() -> RenderConfigBuilder:
        return RenderConfigBuilder()

    @classmethod
    def defaults(cls) -> RenderConfig:
        return cls()

    def parameter_type(self, name: str) -> DataType:
        return self.parameter_types.get(name, DataType.STRING)

    def parameter_label(self, name: str) -> str:
        return self.parameter_labels.get(name, name)

    def computed_input(self, name: str) -> ComputedInput | None:
        for computed in self.computed_inputs:
            if computed.name == name:
                return computed
        return None

    @property
    def output_columns(self) -> tuple[OutputColumn, ...]:
        """Configured outputs, or the single default ``result`` column."""
        return self.outputs or (DEFAULT_OUTPUT,)


class RenderConfigBuilder:
    """Mutable staging area for a RenderConfig."""

    def __init__(self) -> None:
        self._values: dict = {}
        self._types: dict[str, DataType] = {}
        self._labels: dict[str, str] = {}
        self._outputs: list[OutputColumn] = []
        self._computed: list[ComputedInput] = []

    def definitions(self, definitions_id: str, name: str | None = None) -> RenderConfigBuilder:
        self._values["definitions_id"] = definitions_id
        if name is not None:
            self._values["definitions_name"] = name
        return self

    def definitions_name(self, name: str) -> RenderConfigBuilder:
        self._values["definitions_name"] = name
        return self

    def decision(self, decision_id: str, name: str | None = None) -> RenderConfigBuilder:
        self._values["decision_id"] = decision_id
        if name is not None:
            self._values["decision_name"] = name
        return self

    def decision_name(self, name: str) -> RenderConfigBuilder:
        self._values["decision_name"] = name
        return self

    def table_id(self, table_id: str) -> RenderConfigBuilder:
        self._values["table_id"] = table_id
        return self

    def hit_policy(self, hit_policy: HitPolicy) -> RenderConfigBuilder:
        self._values["hit_policy"] = hit_policy
        return self

    def pretty_print(self, enabled: bool) -> RenderConfigBuilder:
        self._values["pretty_print"] = enabled
        return self

    def parameter_type(self, name: str, data_type: DataType) -> RenderConfigBuilder:
        self._types[name] = data_type
        return self

    def parameter_label(self, name: str, label: str) -> RenderConfigBuilder:
        self._labels[name] = label
        return self

    def parameter(self, parameter: Parameter) -> RenderConfigBuilder:
        self._types[parameter.name] = parameter.data_type
        self._labels[parameter.name] = parameter.label or parameter.name
        return self

    def add_output(
        self,
        name: str,
        label: str | None = None,
        data_type: DataType = DataType.STRING,
        default_value: str = "",
    ) -> RenderConfigBuilder:
        self._outputs.append(OutputColumn(name, label, data_type, default_value))
        return self

    def add_input(
        self,
        name: str,
        label: str,
        expression: str,
        data_type: DataType = DataType.BOOLEAN,
    ) -> RenderConfigBuilder:
        self._computed.append(ComputedInput(name, label, expression, data_type))
        return self

    def build(self) -> RenderConfig:
        return RenderConfig(
            parameter_types=self._types,
            parameter_labels=self._labels,
            outputs=tuple(self._outputs),
            computed_inputs=tuple(self._computed),
            **self._values,
        )

"""
Decision table compiler.

This package turns expression trees into decision table rows and renders
them as DMN documents or inline boolean expressions.

Key Components:
- rules: Row compilation (OR splitting, group flattening, column assembly)
- renderers: Java and FEEL inline expression renderers
- config: Render configuration for documents
- dmn: DMN XML document assembly

Design Principles:
- Determinism: Same input produces identical rows and documents
- Best effort: Compilation never fails on malformed conditions; validation
  is a separate, explicit step
"""

from dmn_rules.compiler.config import ComputedInput, OutputColumn, RenderConfig
from dmn_rules.compiler.dmn import (
    DecisionTableRequest,
    TableInput,
    TableOutput,
    TableRule,
    generate_from_table,
    generate_xml,
    generate_xml_from_rules,
)
from dmn_rules.compiler.renderers import FeelRenderer, JavaRenderer, to_feel, to_java
from dmn_rules.compiler.rules import (
    CompiledTable,
    DecisionRow,
    RuleDefinition,
    compile_expression,
    compile_rows,
    compile_rules,
)

__all__ = [
    "CompiledTable",
    "ComputedInput",
    "DecisionRow",
    "DecisionTableRequest",
    "FeelRenderer",
    "JavaRenderer",
    "OutputColumn",
    "RenderConfig",
    "RuleDefinition",
    "TableInput",
    "TableOutput",
    "TableRule",
    "compile_expression",
    "compile_rows",
    "compile_rules",
    "generate_from_table",
    "generate_xml",
    "generate_xml_from_rules",
    "to_feel",
    "to_java",
]

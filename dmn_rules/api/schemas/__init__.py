"""
Pydantic schemas for API request/response validation.

Expression trees travel as tagged JSON objects and are validated for size
here; their semantics are checked by the expression validator.
"""

# Re-export schemas for convenient imports.
from .dmn import DecisionTableRequestSchema as DecisionTableRequestSchema
from .dmn import ExpressionDmnRequest as ExpressionDmnRequest
from .dmn import RenderConfigSchema as RenderConfigSchema
from .dmn import RulesDmnRequest as RulesDmnRequest
from .expression import DecodeRequest as DecodeRequest
from .expression import DecodeResponse as DecodeResponse
from .expression import ExpressionRequest as ExpressionRequest
from .expression import RenderResponse as RenderResponse
from .expression import ValidationResponse as ValidationResponse

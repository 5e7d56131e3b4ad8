"""
Schema generation options and validation results.
"""

from typing import Literal, Optional
from pydantic import BaseModel, Field, ConfigDict


class GenerationOptions(BaseModel):
    """Options shaping the schema the model is asked to produce."""
    model_config = ConfigDict(frozen=True)

    draft: Literal["draft-07", "draft-06", "draft-04"] = Field(
        default="draft-07", description="JSON Schema draft to target"
    )
    include_descriptions: bool = Field(default=True, description="Ask for per-field descriptions")
    include_examples: bool = Field(default=True, description="Ask for per-field examples")
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0, description="Override temperature")
    max_tokens: Optional[int] = Field(default=None, ge=1, description="Override max tokens")


class ValidationResult(BaseModel):
    """Outcome of a local schema or data validation."""

    valid: bool = Field(..., description="True when no errors were found")
    errors: list[str] = Field(default_factory=list, description="'path: message' entries")
    error_count: int = Field(default=0, ge=0, description="Total errors, including truncated ones")

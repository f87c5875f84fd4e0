"""Pydantic models for expression evaluation requests and results."""
from typing import Optional, Union

from pydantic import BaseModel, Field, field_validator

from expression_calculator.common.errors import ErrorCategory


class OperationRequest(BaseModel):
    """Represents a single arithmetic expression read from the input."""

    line: int = Field(default=1, ge=1, description="Line number in the input")
    expression: str = Field(..., description="Arithmetic expression as a string")

    @field_validator("expression")
    def expression_must_not_be_empty(cls, v: str) -> str:
        """Ensure that the expression is not empty."""
        if not v.strip():
            raise ValueError("Expression cannot be empty")
        return v.strip()


class OperationResult(BaseModel):
    """Represents the outcome of an evaluated expression: a result or an error."""

    line: int = Field(..., ge=1, description="Line number in the input")
    expression: str = Field(..., description="Original arithmetic expression")
    result: Optional[Union[int, float]] = Field(default=None, description="Evaluated value, if successful")
    error: Optional[str] = Field(default=None, description="Error message, if evaluation failed")
    category: Optional[ErrorCategory] = Field(default=None, description="Error category, if known")

    @property
    def ok(self) -> bool:
        return self.error is None

    def format_line(self) -> str:
        """Render the result the way it is written to result files."""
        if self.ok:
            return f"{self.expression} = {self.result}"
        return f"{self.expression} -> ERROR: {self.error}"

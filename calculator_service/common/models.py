"""Pydantic models for calculator requests, results, validation issues and history."""
from datetime import datetime
from typing import Dict, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from calculator_service.common.operations import Operation


class _OperandsRequest(BaseModel):
    """Operands must be JSON numbers: booleans are not coerced to 0 or 1."""

    @field_validator("*", mode="before")
    @classmethod
    def reject_booleans(cls, v):
        if isinstance(v, bool):
            raise ValueError("Input should be a valid number, not a boolean")
        return v


class BinaryRequest(_OperandsRequest):
    """Operands of a binary operation sent to the server."""

    a: float = Field(..., allow_inf_nan=False, description="First operand")
    b: float = Field(..., allow_inf_nan=False, description="Second operand")


class UnaryRequest(_OperandsRequest):
    """Operand of a unary operation sent to the server."""

    a: float = Field(..., allow_inf_nan=False, description="Operand")


class OperationResult(BaseModel):
    """Represents the result of an evaluated operation."""

    result: float = Field(..., description="Computed numeric result")


class ErrorResponse(BaseModel):
    """Represents a rejected operation."""

    error: str = Field(..., description="Human-readable reason for the rejection")


class ValidationIssue(BaseModel):
    """A single problem found by the pre-submit validators."""

    model_config = ConfigDict(frozen=True)

    field: str = Field(..., description="Label of the offending field")
    message: str = Field(..., description="Human-readable message")
    advisory: bool = Field(default=False, description="Warns without blocking the calculation")


class HistoryItem(BaseModel):
    """One past calculation, kept only for display."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid4().hex, description="Unique identifier")
    operation: Operation = Field(..., description="Operation that was requested")
    inputs: Dict[str, float] = Field(..., description="Operands by name (a, b)")
    result: Optional[float] = Field(default=None, description="Result when the call succeeded")
    error: Optional[str] = Field(default=None, description="Error message when the call failed")
    timestamp: datetime = Field(default_factory=datetime.now, description="When the call completed")

    @property
    def succeeded(self) -> bool:
        return self.error is None

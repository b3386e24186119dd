"""Test the request, result, validation issue and history models."""
from datetime import datetime

from pydantic import ValidationError
import pytest

from calculator_service.common.models import (
    BinaryRequest,
    ErrorResponse,
    HistoryItem,
    OperationResult,
    UnaryRequest,
    ValidationIssue,
)
from calculator_service.common.operations import Operation


def test_binary_request_valid() -> None:
    """Test that a valid BinaryRequest can be created."""
    req = BinaryRequest(a=10, b=5.5)
    assert req.a == 10.0
    assert req.b == 5.5
    assert isinstance(req.a, float)


def test_binary_request_requires_both_operands() -> None:
    """Test that a missing operand raises a validation error."""
    with pytest.raises(ValidationError):
        BinaryRequest(a=1)


def test_request_invalid_type() -> None:
    """Test that non-numeric operands raise a validation error."""
    with pytest.raises(ValidationError):
        UnaryRequest(a="not a float")


@pytest.mark.parametrize("value", [True, False])
def test_request_rejects_booleans(value: bool) -> None:
    """Test that booleans are not coerced to numbers."""
    with pytest.raises(ValidationError):
        BinaryRequest(a=value, b=1)
    with pytest.raises(ValidationError):
        UnaryRequest(a=value)


@pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
def test_request_rejects_non_finite_operands(value: float) -> None:
    """Test that infinities and NaN are refused."""
    with pytest.raises(ValidationError):
        UnaryRequest(a=value)


def test_operation_result_valid() -> None:
    """Test that a valid OperationResult can be created."""
    res = OperationResult(result=8.0)
    assert res.result == 8.0
    assert isinstance(res.result, float)


def test_operation_result_invalid_result_type() -> None:
    """Test that invalid result type raises a validation error."""
    with pytest.raises(ValidationError):
        OperationResult(result="not a float")


def test_error_response() -> None:
    assert ErrorResponse(error="cannot divide by zero").model_dump() == {"error": "cannot divide by zero"}


def test_validation_issue_is_immutable() -> None:
    """Test that a ValidationIssue cannot be modified."""
    issue = ValidationIssue(field="Number (a)", message="Number (a) is required")
    assert issue.advisory is False
    with pytest.raises(ValidationError):
        issue.message = "changed"


def test_history_item_defaults() -> None:
    """Test that a HistoryItem gets an id and a timestamp."""
    first = HistoryItem(operation="add", inputs={"a": 1, "b": 2}, result=3)
    second = HistoryItem(operation=Operation.DIVIDE, inputs={"a": 1, "b": 0}, error="cannot divide by zero")
    assert first.operation is Operation.ADD
    assert first.id != second.id
    assert isinstance(first.timestamp, datetime)
    assert first.succeeded
    assert not second.succeeded


def test_history_item_unknown_operation() -> None:
    with pytest.raises(ValidationError):
        HistoryItem(operation="modulo", inputs={"a": 1}, result=1)

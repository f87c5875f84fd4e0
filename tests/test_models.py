"""Test classes OperationRequest and OperationResult."""
from pydantic import ValidationError
import pytest

from expression_calculator.common.errors import ErrorCategory
from expression_calculator.common.models import OperationRequest, OperationResult


def test_operation_request_valid() -> None:
    """Test that a valid OperationRequest can be created."""
    req = OperationRequest(expression="2 + 2 * 3", line=4)
    assert req.expression == "2 + 2 * 3"
    assert req.line == 4


def test_operation_request_strips_expression() -> None:
    assert OperationRequest(expression="  1 + 1\n").expression == "1 + 1"


@pytest.mark.parametrize("kwargs", [
    {"expression": 123},
    {"expression": ""},
    {"expression": "   "},
    {"expression": "1", "line": 0},
])
def test_operation_request_invalid(kwargs) -> None:
    """Non-string, blank expressions and bad line numbers raise a validation error."""
    with pytest.raises(ValidationError):
        OperationRequest(**kwargs)


def test_operation_result_valid() -> None:
    """Test that a successful OperationResult keeps the result type."""
    res = OperationResult(line=1, expression="2 + 2 * 3", result=8)
    assert res.ok
    assert res.result == 8
    assert isinstance(res.result, int)
    assert res.format_line() == "2 + 2 * 3 = 8"

    res = OperationResult(line=1, expression="1 / 4", result=0.25)
    assert isinstance(res.result, float)


def test_operation_result_error() -> None:
    res = OperationResult(
        line=2,
        expression="1 / 0",
        error="Division by zero in '/' at offset 2",
        category=ErrorCategory.DIVISION_BY_ZERO,
    )
    assert not res.ok
    assert res.result is None
    assert res.format_line() == "1 / 0 -> ERROR: Division by zero in '/' at offset 2"


def test_operation_result_invalid_expression_type() -> None:
    """Test that invalid expression type raises a validation error."""
    with pytest.raises(ValidationError):
        OperationResult(line=1, expression=42, result=8.0)


def test_operation_result_invalid_result_type() -> None:
    """Test that invalid result type raises a validation error."""
    with pytest.raises(ValidationError):
        OperationResult(line=1, expression="2 + 2", result="not a number")

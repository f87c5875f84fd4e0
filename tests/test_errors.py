"""Test class CalculatorError."""
import pickle

import pytest

from expression_calculator.common.errors import CalculatorError, ErrorCategory, syntax_error


def test_error_is_value_error() -> None:
    """Callers catching ValueError also catch calculator errors."""
    with pytest.raises(ValueError):
        raise CalculatorError("Division by zero in '/'", ErrorCategory.DIVISION_BY_ZERO, 2)


def test_str_includes_offset() -> None:
    error = CalculatorError("Undefined variable 'x'", ErrorCategory.UNDEFINED_VARIABLE, 4)
    assert str(error) == "Undefined variable 'x' at offset 4"
    assert error.message == "Undefined variable 'x'"
    assert error.category is ErrorCategory.UNDEFINED_VARIABLE


def test_str_without_offset() -> None:
    assert str(CalculatorError("Number too large", ErrorCategory.NUMBER_TOO_LARGE)) == "Number too large"


def test_syntax_error_prefix() -> None:
    error = syntax_error("unexpected end of expression", 3)
    assert error.category is ErrorCategory.SYNTAX
    assert str(error).startswith("Syntax error: ")


def test_error_survives_pickling() -> None:
    """Errors can cross process boundaries intact."""
    error = CalculatorError("Undefined function 'f'", ErrorCategory.UNDEFINED_FUNCTION, 0)
    restored = pickle.loads(pickle.dumps(error))
    assert restored.message == error.message
    assert restored.category is error.category
    assert restored.offset == 0

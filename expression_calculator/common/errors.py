"""Errors raised while tokenizing, parsing or evaluating an expression."""
from enum import Enum
from typing import Optional


class ErrorCategory(str, Enum):
    """What went wrong, for callers that branch on the kind of failure."""

    SYNTAX = "syntax_error"
    MALFORMED_LITERAL = "malformed_literal"
    UNDEFINED_VARIABLE = "undefined_variable"
    UNDEFINED_FUNCTION = "undefined_function"
    UNSUPPORTED_OPERATOR = "unsupported_operator"
    DIVISION_BY_ZERO = "division_by_zero"
    NUMBER_TOO_LARGE = "number_too_large"
    DOMAIN_ERROR = "domain_error"
    NESTING_TOO_DEEP = "nesting_too_deep"


class CalculatorError(ValueError):
    """
    The single failure signal of the calculator.

    :param str message: Human-readable description
    :param ErrorCategory category: Kind of failure
    :param Optional[int] offset: Position in the source text, if known
    """

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.SYNTAX,
        offset: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.offset = offset

    def __str__(self) -> str:
        if self.offset is None:
            return self.message
        return f"{self.message} at offset {self.offset}"

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, "
            f"category={self.category.value!r}, offset={self.offset!r})"
        )

    def __reduce__(self):
        return type(self), (self.message, self.category, self.offset)


def syntax_error(detail: str, offset: Optional[int] = None) -> CalculatorError:
    """Build a syntax error with the standard message prefix."""
    return CalculatorError(f"Syntax error: {detail}", ErrorCategory.SYNTAX, offset)


def malformed_number(detail: str, offset: Optional[int] = None) -> CalculatorError:
    """Build a malformed-literal error with the standard message prefix."""
    return CalculatorError(f"Malformed number: {detail}", ErrorCategory.MALFORMED_LITERAL, offset)


def number_too_large(offset: Optional[int] = None) -> CalculatorError:
    return CalculatorError("Number too large", ErrorCategory.NUMBER_TOO_LARGE, offset)

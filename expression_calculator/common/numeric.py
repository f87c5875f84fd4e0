"""
Numeric value types the calculator can evaluate in.

Each type knows how to read a literal, how to accept a value coming from
the caller, and how to apply every operator of the grammar. Integral types
support the whole operator set; floating types reject modulo and the
bitwise operators when they are applied.
"""
from abc import abstractmethod
import math
import numbers
import struct
from typing import ClassVar, Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from expression_calculator.common.errors import CalculatorError, ErrorCategory, malformed_number, number_too_large


Number = Union[int, float]

# Operator symbol -> name of the NumericType method implementing it
BINARY_OPERATORS: Dict[str, str] = {
    "+": "add",
    "-": "subtract",
    "*": "multiply",
    "/": "divide",
    "%": "modulo",
    "**": "power",
    "&": "bit_and",
    "|": "bit_or",
    "^": "bit_xor",
    "<<": "shift_left",
    ">>": "shift_right",
}

UNARY_OPERATORS: Dict[str, str] = {
    "+": "positive",
    "-": "negate",
    "~": "invert",
}


def division_by_zero(symbol: str, offset: Optional[int] = None) -> CalculatorError:
    return CalculatorError(
        f"Division by zero in '{symbol}'", ErrorCategory.DIVISION_BY_ZERO, offset
    )


def domain_error(detail: str, offset: Optional[int] = None) -> CalculatorError:
    return CalculatorError(f"Math domain error: {detail}", ErrorCategory.DOMAIN_ERROR, offset)


class NumericType(BaseModel):
    """
    Abstract base class of the value types an expression is evaluated in.

    Subclasses implement the operator methods named in ``BINARY_OPERATORS``
    and ``UNARY_OPERATORS``. Every method takes the operator's source offset
    so failures point back at the expression text.
    """

    model_config = ConfigDict(frozen=True)

    integral: ClassVar[bool] = False

    name: str = Field(..., description="Canonical type name, e.g. 'int32'")
    bits: Literal[32, 64] = Field(..., description="Storage width in bits")

    def __str__(self) -> str:
        return self.name

    def binary(self, symbol: str, lhs: Number, rhs: Number, offset: Optional[int] = None) -> Number:
        """
        Apply the binary operator ``symbol`` to two values of this type.

        :param str symbol: Operator as written in the expression
        :param lhs: Left operand
        :param rhs: Right operand
        :param offset: Position of the operator in the source text

        :return: Result of the operation
        :raises CalculatorError: If the operation is illegal or overflows
        """
        return getattr(self, BINARY_OPERATORS[symbol])(lhs, rhs, offset)

    def unary(self, symbol: str, operand: Number, offset: Optional[int] = None) -> Number:
        """Apply the prefix operator ``symbol`` to a value of this type."""
        return getattr(self, UNARY_OPERATORS[symbol])(operand, offset)

    def unsupported(self, symbol: str, offset: Optional[int] = None) -> CalculatorError:
        return CalculatorError(
            f"Operator not supported for type {self.name}: '{symbol}'",
            ErrorCategory.UNSUPPORTED_OPERATOR,
            offset,
        )

    @abstractmethod
    def parse_literal(self, text: str, offset: Optional[int] = None) -> Number:
        """Convert the text of a NUMBER token into a value of this type."""

    @abstractmethod
    def convert(self, value: Number, offset: Optional[int] = None) -> Number:
        """Convert a caller-supplied value into this type."""

    def positive(self, operand: Number, offset: Optional[int] = None) -> Number:
        return operand


class IntegralType(NumericType):
    """Signed two's complement integer of ``bits`` width with C division semantics."""

    integral: ClassVar[bool] = True

    @property
    def min_value(self) -> int:
        return -(1 << (self.bits - 1))

    @property
    def max_value(self) -> int:
        return (1 << (self.bits - 1)) - 1

    def _check(self, value: int, offset: Optional[int] = None) -> int:
        if value < self.min_value or value > self.max_value:
            raise number_too_large(offset)
        return value

    def parse_literal(self, text: str, offset: Optional[int] = None) -> int:
        """
        Convert a literal already validated by the tokenizer.

        Exponent notation is exact for integers as long as the exponent is
        not negative ("1e3" is 1000); a decimal point is always rejected.
        """
        lowered = text.lower()
        if lowered.startswith("0x"):
            return self._check(int(lowered, 16), offset)

        if "." in lowered:
            raise malformed_number(
                f"floating-point literal '{text}' is not allowed for type {self.name}", offset
            )

        if "e" not in lowered:
            return self._check(int(lowered), offset)

        mantissa_text, exponent_text = lowered.split("e")
        mantissa = int(mantissa_text)
        exponent = int(exponent_text)
        if exponent < 0:
            raise malformed_number(
                f"literal '{text}' has a negative exponent, not allowed for type {self.name}", offset
            )
        if mantissa == 0:
            return 0
        # 10 ** bits is beyond every signed range of that width
        if exponent >= self.bits:
            raise number_too_large(offset)
        return self._check(mantissa * 10 ** exponent, offset)

    def convert(self, value: Number, offset: Optional[int] = None) -> int:
        """
        Accept a value supplied by the caller (variable or function result).

        :raises TypeError: If ``value`` is not an integral number
        :raises CalculatorError: If ``value`` does not fit this type
        """
        if not isinstance(value, numbers.Integral):
            raise TypeError(f"{type(value).__name__} value {value!r} is not valid for type {self.name}")
        return self._check(int(value), offset)

    def add(self, lhs: int, rhs: int, offset: Optional[int] = None) -> int:
        return self._check(lhs + rhs, offset)

    def subtract(self, lhs: int, rhs: int, offset: Optional[int] = None) -> int:
        return self._check(lhs - rhs, offset)

    def multiply(self, lhs: int, rhs: int, offset: Optional[int] = None) -> int:
        return self._check(lhs * rhs, offset)

    def divide(self, lhs: int, rhs: int, offset: Optional[int] = None) -> int:
        if rhs == 0:
            raise division_by_zero("/", offset)
        quotient = abs(lhs) // abs(rhs)
        # Truncate toward zero
        if (lhs < 0) != (rhs < 0):
            quotient = -quotient
        return self._check(quotient, offset)

    def modulo(self, lhs: int, rhs: int, offset: Optional[int] = None) -> int:
        if rhs == 0:
            raise division_by_zero("%", offset)
        # The remainder takes the sign of the dividend
        remainder = abs(lhs) % abs(rhs)
        return -remainder if lhs < 0 else remainder

    def power(self, base: int, exponent: int, offset: Optional[int] = None) -> int:
        """
        Exponentiation by repeated squaring.

        A negative exponent yields the truncated value of ``1 / base ** n``.
        """
        if exponent < 0:
            if base == 0:
                raise division_by_zero("**", offset)
            if base == 1:
                return 1
            if base == -1:
                return -1 if exponent % 2 else 1
            return 0

        result = 1
        while exponent:
            if exponent & 1:
                result = self._check(result * base, offset)
            exponent >>= 1
            if exponent:
                base = self._check(base * base, offset)
        return result

    def bit_and(self, lhs: int, rhs: int, offset: Optional[int] = None) -> int:
        return lhs & rhs

    def bit_or(self, lhs: int, rhs: int, offset: Optional[int] = None) -> int:
        return lhs | rhs

    def bit_xor(self, lhs: int, rhs: int, offset: Optional[int] = None) -> int:
        return lhs ^ rhs

    def shift_left(self, lhs: int, rhs: int, offset: Optional[int] = None) -> int:
        if rhs < 0:
            raise domain_error("negative shift count", offset)
        if lhs == 0:
            return 0
        if rhs >= self.bits:
            raise number_too_large(offset)
        return self._check(lhs << rhs, offset)

    def shift_right(self, lhs: int, rhs: int, offset: Optional[int] = None) -> int:
        if rhs < 0:
            raise domain_error("negative shift count", offset)
        if rhs >= self.bits:
            return -1 if lhs < 0 else 0
        return lhs >> rhs

    def negate(self, operand: int, offset: Optional[int] = None) -> int:
        return self._check(-operand, offset)

    def invert(self, operand: int, offset: Optional[int] = None) -> int:
        return ~operand


class FloatingType(NumericType):
    """IEEE 754 binary floating point; float32 results are rounded after every operation."""

    def _round(self, value: float, offset: Optional[int] = None) -> float:
        if self.bits == 64:
            return value
        try:
            # Standard-size packing raises on finite values beyond the float32 range
            return struct.unpack("<f", struct.pack("<f", value))[0]
        except OverflowError:
            raise number_too_large(offset) from None

    def _result(self, value: float, offset: Optional[int], *operands: float) -> float:
        # Infinities are only an error when the operands were finite
        if math.isinf(value) and all(math.isfinite(operand) for operand in operands):
            raise number_too_large(offset)
        return self._round(value, offset)

    def parse_literal(self, text: str, offset: Optional[int] = None) -> float:
        lowered = text.lower()
        if lowered.startswith("0x"):
            try:
                value = float(int(lowered, 16))
            except OverflowError:
                raise number_too_large(offset) from None
        else:
            value = float(lowered)
        if math.isinf(value):
            raise number_too_large(offset)
        return self._round(value, offset)

    def convert(self, value: Number, offset: Optional[int] = None) -> float:
        """
        Accept a value supplied by the caller (variable or function result).

        :raises TypeError: If ``value`` is not a real number
        :raises CalculatorError: If ``value`` does not fit this type
        """
        if not isinstance(value, numbers.Real):
            raise TypeError(f"{type(value).__name__} value {value!r} is not valid for type {self.name}")
        try:
            converted = float(value)
        except OverflowError:
            raise number_too_large(offset) from None
        return self._round(converted, offset)

    def add(self, lhs: float, rhs: float, offset: Optional[int] = None) -> float:
        return self._result(lhs + rhs, offset, lhs, rhs)

    def subtract(self, lhs: float, rhs: float, offset: Optional[int] = None) -> float:
        return self._result(lhs - rhs, offset, lhs, rhs)

    def multiply(self, lhs: float, rhs: float, offset: Optional[int] = None) -> float:
        return self._result(lhs * rhs, offset, lhs, rhs)

    def divide(self, lhs: float, rhs: float, offset: Optional[int] = None) -> float:
        if rhs == 0:
            raise division_by_zero("/", offset)
        return self._result(lhs / rhs, offset, lhs, rhs)

    def modulo(self, lhs: float, rhs: float, offset: Optional[int] = None) -> float:
        raise self.unsupported("%", offset)

    def power(self, base: float, exponent: float, offset: Optional[int] = None) -> float:
        try:
            value = math.pow(base, exponent)
        except OverflowError:
            raise number_too_large(offset) from None
        except ValueError:
            raise domain_error(f"{base!r} ** {exponent!r}", offset) from None
        return self._result(value, offset, base, exponent)

    def bit_and(self, lhs: float, rhs: float, offset: Optional[int] = None) -> float:
        raise self.unsupported("&", offset)

    def bit_or(self, lhs: float, rhs: float, offset: Optional[int] = None) -> float:
        raise self.unsupported("|", offset)

    def bit_xor(self, lhs: float, rhs: float, offset: Optional[int] = None) -> float:
        raise self.unsupported("^", offset)

    def shift_left(self, lhs: float, rhs: float, offset: Optional[int] = None) -> float:
        raise self.unsupported("<<", offset)

    def shift_right(self, lhs: float, rhs: float, offset: Optional[int] = None) -> float:
        raise self.unsupported(">>", offset)

    def negate(self, operand: float, offset: Optional[int] = None) -> float:
        return -operand

    def invert(self, operand: float, offset: Optional[int] = None) -> float:
        raise self.unsupported("~", offset)


INT32 = IntegralType(name="int32", bits=32)
INT64 = IntegralType(name="int64", bits=64)
FLOAT32 = FloatingType(name="float32", bits=32)
FLOAT64 = FloatingType(name="float64", bits=64)

NUMERIC_TYPES: Dict[str, NumericType] = {
    "int32": INT32,
    "int": INT32,
    "int64": INT64,
    "long": INT64,
    "float32": FLOAT32,
    "float": FLOAT32,
    "float64": FLOAT64,
    "double": FLOAT64,
}

NumericTypeLike = Union[NumericType, str, type]


def resolve_numeric_type(numeric_type: NumericTypeLike) -> NumericType:
    """
    Turn a type name, a builtin type or a NumericType into a NumericType.

    The builtins map to the 64-bit types: ``int`` is int64, ``float`` is
    float64. Names follow C: "int" is int32 and "float" is float32.

    :raises ValueError: If the name is unknown
    :raises TypeError: If the argument is neither a name nor a type
    """
    if isinstance(numeric_type, NumericType):
        return numeric_type
    if numeric_type is int:
        return INT64
    if numeric_type is float:
        return FLOAT64
    if isinstance(numeric_type, str):
        try:
            return NUMERIC_TYPES[numeric_type.strip().lower()]
        except KeyError:
            raise ValueError(
                f"Unknown numeric type {numeric_type!r}, expected one of {sorted(NUMERIC_TYPES)}"
            ) from None
    raise TypeError(f"Cannot use {numeric_type!r} as a numeric type")

"""Common mathematical functions and constants for a parser's symbol table."""
import math
from typing import Callable, Dict

from expression_calculator.common.parser import ExpressionParser


# Bound for every numeric type; results are range-checked like any function result
COMMON_FUNCTIONS: Dict[str, Callable] = {
    "abs": abs,
    "square": lambda x: x * x,
    "cube": lambda x: x * x * x,
}

FLOAT_FUNCTIONS: Dict[str, Callable[[float], float]] = {
    "sqrt": math.sqrt,
    "cbrt": lambda x: math.copysign(abs(x) ** (1.0 / 3.0), x),
    "exp": math.exp,
    "log": math.log,
    "ln": math.log,
    "log10": math.log10,
    "log2": math.log2,
    "sin": math.sin,
    "cos": math.cos,
    "tan": math.tan,
    "asin": math.asin,
    "acos": math.acos,
    "atan": math.atan,
    "sinh": math.sinh,
    "cosh": math.cosh,
    "tanh": math.tanh,
    "floor": lambda x: float(math.floor(x)),
    "ceil": lambda x: float(math.ceil(x)),
    "round": lambda x: float(round(x)),
}

FLOAT_CONSTANTS: Dict[str, float] = {
    "pi": math.pi,
    "e": math.e,
    "tau": math.tau,
}


def install_math(parser: ExpressionParser) -> ExpressionParser:
    """
    Bind the standard functions and constants on ``parser``.

    ``abs``, ``square`` and ``cube`` are bound for every type. The
    remaining functions and the constants only make sense for floating
    types and are skipped for integral ones. Existing bindings with the same names are replaced.

    Domain errors of the ``math`` module (``sqrt(-1)``, ``log(0)``) are
    raised as ``ValueError`` by the functions themselves.

    :param ExpressionParser parser: Parser to populate

    :return: The same parser, for chaining
    """
    for name, function in COMMON_FUNCTIONS.items():
        parser.set(name, function)

    if parser.numeric_type.integral:
        return parser

    for name, function in FLOAT_FUNCTIONS.items():
        parser.set(name, function)
    for name, value in FLOAT_CONSTANTS.items():
        parser.set(name, value)
    return parser

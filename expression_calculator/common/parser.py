"""Parse and evaluate arithmetic expressions safely."""
from typing import Dict, Optional, Union

from expression_calculator.common.config import DEFAULT_CONFIG, ParserConfig
from expression_calculator.common.errors import CalculatorError, ErrorCategory, syntax_error
from expression_calculator.common.logger import logger
from expression_calculator.common.numeric import FLOAT64, Number, NumericTypeLike, resolve_numeric_type
from expression_calculator.common.symbols import SymbolTable, UnaryFunction
from expression_calculator.common.tokenizer import Token, Tokenizer, TokenKind


# Binding strength of the left-associative binary operators, loosest first.
# "**" and the prefix operators bind tighter and are parsed separately.
BINARY_PRECEDENCE: Dict[str, int] = {
    "|": 1,
    "^": 2,
    "&": 3,
    "<<": 4,
    ">>": 4,
    "+": 5,
    "-": 5,
    "*": 6,
    "/": 6,
    "%": 6,
}

PREFIX_OPERATORS = ("+", "-", "~")


class _Evaluation:
    """
    State of a single ``eval`` call: the tokenizer and the nesting depth.

    Grammar, tightest binding first::

        primary := NUMBER | NAME | NAME "(" expr ")" | "(" expr ")"
        power   := primary [ "**" unary ]
        unary   := ("+" | "-" | "~") unary | power
        binary  := unary { OP binary-of-higher-precedence }

    Each level evaluates its operands and applies the operator immediately,
    so no tree is ever built.
    """

    def __init__(self, parser: "ExpressionParser", expr: str) -> None:
        self.numeric_type = parser.numeric_type
        self.symbols = parser.symbols
        self.max_depth = parser.config.max_depth
        self.tokens = Tokenizer(expr, parser.config.max_literal_length)
        self.depth = 0

    def run(self) -> Number:
        if self.tokens.peek().kind is TokenKind.END_OF_INPUT:
            raise syntax_error("empty expression", 0)

        try:
            value = self.parse_expression()
        except RecursionError:
            # Precedence climbing can use several frames per nesting level
            raise self.too_deep() from None

        token = self.tokens.peek()
        if token.kind is TokenKind.RIGHT_PAREN:
            raise syntax_error("unmatched ')'", token.offset)
        if token.kind is not TokenKind.END_OF_INPUT:
            raise syntax_error(f"unexpected token {token.describe()}", token.offset)
        return value

    def too_deep(self, offset: Optional[int] = None) -> CalculatorError:
        return CalculatorError(
            f"Expression nested too deeply (limit {self.max_depth})",
            ErrorCategory.NESTING_TOO_DEEP,
            offset,
        )

    def parse_expression(self) -> Number:
        return self.parse_binary(1)

    def parse_binary(self, min_precedence: int) -> Number:
        """Precedence climbing over the left-associative binary operators."""
        lhs = self.parse_unary()
        while True:
            token = self.tokens.peek()
            if token.kind is not TokenKind.OPERATOR:
                return lhs
            precedence = BINARY_PRECEDENCE.get(token.text)
            if precedence is None or precedence < min_precedence:
                return lhs
            self.tokens.next()
            rhs = self.parse_binary(precedence + 1)
            lhs = self.numeric_type.binary(token.text, lhs, rhs, token.offset)

    def parse_unary(self) -> Number:
        # Every recursive path of the grammar goes through here
        self.depth += 1
        if self.depth > self.max_depth:
            raise self.too_deep(self.tokens.peek().offset)
        try:
            token = self.tokens.peek()
            if token.is_operator(*PREFIX_OPERATORS):
                self.tokens.next()
                operand = self.parse_unary()
                return self.numeric_type.unary(token.text, operand, token.offset)
            return self.parse_power()
        finally:
            self.depth -= 1

    def parse_power(self) -> Number:
        base = self.parse_primary()
        token = self.tokens.peek()
        if not token.is_operator("**"):
            return base
        self.tokens.next()
        # Right operand is a unary expression: right-associative, and "2 ** -1" is legal
        exponent = self.parse_unary()
        return self.numeric_type.power(base, exponent, token.offset)

    def parse_primary(self) -> Number:
        token = self.tokens.next()

        if token.kind is TokenKind.NUMBER:
            return self.numeric_type.parse_literal(token.text, token.offset)

        if token.kind is TokenKind.IDENTIFIER:
            if self.tokens.peek().kind is TokenKind.LEFT_PAREN:
                return self.call_function(token)
            variable = self.symbols.get_variable(token.text)
            if variable is None:
                raise CalculatorError(
                    f"Undefined variable '{token.text}'", ErrorCategory.UNDEFINED_VARIABLE, token.offset
                )
            return variable.value

        if token.kind is TokenKind.LEFT_PAREN:
            value = self.parse_expression()
            self.expect_closing_paren(token)
            return value

        if token.kind is TokenKind.END_OF_INPUT:
            raise syntax_error("unexpected end of expression", token.offset)
        raise syntax_error(f"unexpected token {token.describe()}", token.offset)

    def call_function(self, name: Token) -> Number:
        opening = self.tokens.next()
        argument = self.parse_expression()
        if self.tokens.peek().kind is TokenKind.COMMA:
            raise syntax_error(
                f"function '{name.text}' takes a single argument", self.tokens.peek().offset
            )
        self.expect_closing_paren(opening)

        function = self.symbols.get_function(name.text)
        if function is None:
            raise CalculatorError(
                f"Undefined function '{name.text}'", ErrorCategory.UNDEFINED_FUNCTION, name.offset
            )
        # Exceptions raised by the function itself reach the caller unchanged
        return self.numeric_type.convert(function.function(argument), name.offset)

    def expect_closing_paren(self, opening: Token) -> None:
        token = self.tokens.next()
        if token.kind is TokenKind.RIGHT_PAREN:
            return
        if token.kind is TokenKind.END_OF_INPUT:
            raise syntax_error(f"missing ')' to close '(' opened at {opening.offset}", token.offset)
        raise syntax_error(f"expected ')' but found {token.describe()}", token.offset)


class ExpressionParser:
    """
    Parse and evaluate arithmetic expressions safely.

    Design constraints:
        - No eval(), no dynamic code execution
        - Safe, deterministic computation
        - No tree is built: operators are applied as soon as both operands are parsed

    Algorithm:
        1. Pull tokens on demand from a Tokenizer
        2. Recursive descent with precedence climbing over the binary operators
        3. Apply each operator through the numeric type, which enforces the
           rules of that type (integer division, overflow, unsupported operators)

    A parser owns a symbol table that survives between calls, so reusing one
    parser and rebinding variables is cheaper than building a new one per
    expression. Nothing else is kept between calls. A parser is not
    thread-safe; share one across threads only with external locking.

    Examples:
        >>> parser = ExpressionParser("float64")
        >>> parser.set("x", 2.0)
        >>> parser.eval("x ** 2 + 1")
        5.0

    :param numeric_type: Type results are computed in (default float64)
    :param config: Depth and literal-length limits
    """

    def __init__(
        self,
        numeric_type: NumericTypeLike = FLOAT64,
        config: Optional[ParserConfig] = None,
    ) -> None:
        self.numeric_type = resolve_numeric_type(numeric_type)
        self.config = config if config is not None else DEFAULT_CONFIG
        self.symbols = SymbolTable()

    def set(self, name: str, value: Union[int, float, UnaryFunction]) -> None:
        """
        Bind a variable, or a unary function when ``value`` is callable.

        Rebinding a name replaces its previous binding, whatever its kind.

        :param str name: Identifier used in expressions
        :param value: Number (converted to the parser's type) or unary callable

        :raises TypeError: If a number is not valid for the parser's type
        :raises CalculatorError: If a number does not fit the parser's type
        :raises pydantic.ValidationError: If ``name`` is not a valid identifier
        """
        if not callable(value):
            value = self.numeric_type.convert(value)
        self.symbols.set(name, value)

    def eval(self, expr: str) -> Number:
        """
        Evaluate an arithmetic expression against the current symbol table.

        :param str expr: Arithmetic expression string

        :return: Computed result, an int for integral types and a float otherwise
        :raises CalculatorError: If the expression is invalid or cannot be evaluated
        """
        logger.debug("Evaluating %r as %s", expr, self.numeric_type)
        return _Evaluation(self, expr).run()

    evaluate = eval

    def copy(self) -> "ExpressionParser":
        """Return a parser with the same type, configuration and an independent copy of the symbols."""
        clone = ExpressionParser(self.numeric_type, self.config)
        clone.symbols = self.symbols.copy()
        return clone

    def __repr__(self) -> str:
        return f"ExpressionParser({self.numeric_type.name!r}, symbols={len(self.symbols)})"


def evaluate(
    expr: str,
    numeric_type: NumericTypeLike = FLOAT64,
    config: Optional[ParserConfig] = None,
) -> Number:
    """
    Evaluate an expression once, with no variables or functions.

    :param str expr: Arithmetic expression string
    :param numeric_type: Type the result is computed in (default float64)
    :param config: Depth and literal-length limits

    :return: Computed result
    :raises CalculatorError: If the expression is invalid, references a name, or cannot be evaluated
    """
    return ExpressionParser(numeric_type, config).eval(expr)

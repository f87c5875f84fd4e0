"""Split an arithmetic expression into tokens, one at a time."""
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from expression_calculator.common.config import DEFAULT_CONFIG
from expression_calculator.common.errors import malformed_number, number_too_large, syntax_error


class TokenKind(str, Enum):
    NUMBER = "number"
    IDENTIFIER = "identifier"
    OPERATOR = "operator"
    LEFT_PAREN = "("
    RIGHT_PAREN = ")"
    COMMA = ","
    END_OF_INPUT = "end of input"


class Token(BaseModel):
    """A lexical unit and the offset where it starts in the source text."""

    model_config = ConfigDict(frozen=True)

    kind: TokenKind = Field(..., description="Lexical category")
    text: str = Field(default="", description="Source text of the token")
    offset: int = Field(..., ge=0, description="Offset of the first character")

    def is_operator(self, *symbols: str) -> bool:
        return self.kind is TokenKind.OPERATOR and self.text in symbols

    def describe(self) -> str:
        if self.kind is TokenKind.END_OF_INPUT:
            return "end of input"
        return f"'{self.text}'"


WHITESPACE = frozenset(" \t\n\r\v\f")
DIGITS = frozenset("0123456789")
HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
LETTERS = frozenset("abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ")
IDENTIFIER_CHARS = LETTERS | DIGITS | {"_"}

# Checked before the single-character operators so "**" is never split
MULTI_CHAR_OPERATORS = ("**", "<<", ">>")
SINGLE_CHAR_OPERATORS = frozenset("+-*/%|&^~")


class Tokenizer:
    """
    Pull-based tokenizer over one expression.

    Tokens are produced lazily by ``next()``; ``peek()`` gives one token of
    lookahead. Once the input is exhausted every call returns an
    END_OF_INPUT token.

    :param str expr: Expression source text
    :param int max_literal_length: Longest numeric literal accepted
    """

    def __init__(self, expr: str, max_literal_length: int = DEFAULT_CONFIG.max_literal_length) -> None:
        self.expr = expr
        self.max_literal_length = max_literal_length
        self._pos = 0
        self._lookahead: Optional[Token] = None

    def peek(self) -> Token:
        """Return the next token without consuming it."""
        if self._lookahead is None:
            self._lookahead = self._scan()
        return self._lookahead

    def next(self) -> Token:
        """Consume and return the next token."""
        token = self.peek()
        self._lookahead = None
        return token

    def __iter__(self):
        while True:
            token = self.next()
            yield token
            if token.kind is TokenKind.END_OF_INPUT:
                return

    def _scan(self) -> Token:
        expr = self.expr
        length = len(expr)

        while self._pos < length and expr[self._pos] in WHITESPACE:
            self._pos += 1

        start = self._pos
        if start >= length:
            return Token(kind=TokenKind.END_OF_INPUT, offset=length)

        char = expr[start]
        if char in DIGITS:
            return self._scan_number(start)
        if char in LETTERS:
            return self._scan_identifier(start)

        for symbol in MULTI_CHAR_OPERATORS:
            if expr.startswith(symbol, start):
                self._pos = start + len(symbol)
                return Token(kind=TokenKind.OPERATOR, text=symbol, offset=start)

        self._pos = start + 1
        if char in SINGLE_CHAR_OPERATORS:
            return Token(kind=TokenKind.OPERATOR, text=char, offset=start)
        if char == "(":
            return Token(kind=TokenKind.LEFT_PAREN, text=char, offset=start)
        if char == ")":
            return Token(kind=TokenKind.RIGHT_PAREN, text=char, offset=start)
        if char == ",":
            return Token(kind=TokenKind.COMMA, text=char, offset=start)

        raise syntax_error(f"unexpected character '{char}'", start)

    def _consume(self, charset: frozenset) -> int:
        """Advance over characters of ``charset`` and return how many were consumed."""
        start = self._pos
        while self._pos < len(self.expr) and self.expr[self._pos] in charset:
            self._pos += 1
        return self._pos - start

    def _current(self) -> str:
        return self.expr[self._pos] if self._pos < len(self.expr) else ""

    def _scan_number(self, start: int) -> Token:
        """
        Scan a decimal, hexadecimal or scientific literal starting at ``start``.

        The literal text is kept as written; converting it is up to the
        numeric type the expression is evaluated in.
        """
        self._pos = start

        if self.expr.startswith(("0x", "0X"), start):
            self._pos += 2
            if not self._consume(HEX_DIGITS):
                raise malformed_number("hexadecimal literal needs at least one hex digit", start)
        else:
            self._consume(DIGITS)
            if self._current() == ".":
                self._pos += 1
                if not self._consume(DIGITS):
                    raise malformed_number("expected digits after '.'", start)
            if self._current() in ("e", "E"):
                self._pos += 1
                if self._current() in ("+", "-"):
                    self._pos += 1
                if not self._consume(DIGITS):
                    raise malformed_number("expected digits in exponent", start)

        # "1..2", "12abc", "0xG" and the like
        trailing = self._current()
        if trailing and (trailing in IDENTIFIER_CHARS or trailing == "."):
            raise malformed_number(f"unexpected '{trailing}' in numeric literal", start)

        text = self.expr[start:self._pos]
        if len(text) > self.max_literal_length:
            raise number_too_large(start)
        return Token(kind=TokenKind.NUMBER, text=text, offset=start)

    def _scan_identifier(self, start: int) -> Token:
        self._pos = start
        self._consume(IDENTIFIER_CHARS)
        return Token(kind=TokenKind.IDENTIFIER, text=self.expr[start:self._pos], offset=start)


def tokenize(expr: str, max_literal_length: int = DEFAULT_CONFIG.max_literal_length) -> List[Token]:
    """
    Tokenize a whole expression.

    :param str expr: Expression source text
    :param int max_literal_length: Longest numeric literal accepted

    :return: All tokens, the last one being END_OF_INPUT
    :rtype: List[Token]
    :raises CalculatorError: On an unexpected character or malformed literal
    """
    return list(Tokenizer(expr, max_literal_length))

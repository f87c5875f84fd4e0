"""Named variables and unary functions available to an expression."""
import re
from typing import Callable, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


IDENTIFIER_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9_]*")

UnaryFunction = Callable[[Union[int, float]], Union[int, float]]


class Symbol(BaseModel):
    """A name bound in a symbol table."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="Identifier the expression refers to")

    @field_validator("name")
    def name_must_be_identifier(cls, v: str) -> str:
        """Only names the tokenizer can produce may be bound."""
        if not IDENTIFIER_PATTERN.fullmatch(v):
            raise ValueError(
                f"Invalid symbol name {v!r}: must start with a letter and contain only letters, digits or '_'"
            )
        return v


class Variable(Symbol):
    value: Union[int, float] = Field(..., description="Bound value, already converted to the parser's type")


class Function(Symbol):
    function: UnaryFunction = Field(..., description="Unary function called with the evaluated argument")


class SymbolTable:
    """
    Mapping from name to either a Variable or a Function.

    A single mapping holds both kinds, so a name is never a variable and a
    function at the same time: binding it in one role replaces the other.
    Parsing only reads the table.
    """

    def __init__(self) -> None:
        self._symbols: Dict[str, Symbol] = {}

    def set(self, name: str, value: Union[int, float, UnaryFunction]) -> None:
        """
        Bind ``name`` to a function if ``value`` is callable, otherwise to a variable.

        :param str name: Identifier to bind
        :param value: Number or unary callable

        :raises pydantic.ValidationError: If the name is not a valid identifier
        """
        if callable(value):
            self._symbols[name] = Function(name=name, function=value)
        else:
            self._symbols[name] = Variable(name=name, value=value)

    def get_variable(self, name: str) -> Optional[Variable]:
        symbol = self._symbols.get(name)
        return symbol if isinstance(symbol, Variable) else None

    def get_function(self, name: str) -> Optional[Function]:
        symbol = self._symbols.get(name)
        return symbol if isinstance(symbol, Function) else None

    def copy(self) -> "SymbolTable":
        """Return an independent table with the same bindings."""
        clone = SymbolTable()
        clone._symbols = dict(self._symbols)
        return clone

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __repr__(self) -> str:
        return f"SymbolTable({sorted(self._symbols)!r})"

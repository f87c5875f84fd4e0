"""Test class SymbolTable."""
import math

from pydantic import ValidationError
import pytest

from expression_calculator.common.symbols import Function, SymbolTable, Variable


def test_set_and_get_variable() -> None:
    table = SymbolTable()
    table.set("x", 2.0)
    assert table.get_variable("x") == Variable(name="x", value=2.0)
    assert table.get_function("x") is None


def test_set_and_get_function() -> None:
    table = SymbolTable()
    table.set("sqrt", math.sqrt)
    function = table.get_function("sqrt")
    assert isinstance(function, Function)
    assert function.function(16.0) == 4.0
    assert table.get_variable("sqrt") is None


def test_missing_names() -> None:
    table = SymbolTable()
    assert table.get_variable("nope") is None
    assert table.get_function("nope") is None
    assert "nope" not in table
    assert len(table) == 0


def test_rebinding_moves_name_between_roles() -> None:
    """A name is either a variable or a function, whichever was set last."""
    table = SymbolTable()
    table.set("f", 1)
    table.set("f", abs)
    assert table.get_variable("f") is None
    assert table.get_function("f") is not None

    table.set("f", 3)
    assert table.get_function("f") is None
    assert table.get_variable("f").value == 3
    assert len(table) == 1


def test_overwrite_variable() -> None:
    table = SymbolTable()
    table.set("x", 2.0)
    table.set("x", 5.0)
    assert table.get_variable("x").value == 5.0


@pytest.mark.parametrize("name", ["", "_x", "1x", "x y", "x-y", "é"])
def test_invalid_names_are_rejected(name: str) -> None:
    """Only names the tokenizer can produce may be bound."""
    table = SymbolTable()
    with pytest.raises(ValidationError):
        table.set(name, 1)
    with pytest.raises(ValidationError):
        table.set(name, abs)


def test_copy_is_independent() -> None:
    table = SymbolTable()
    table.set("x", 1)
    clone = table.copy()
    clone.set("x", 2)
    clone.set("y", 3)
    assert table.get_variable("x").value == 1
    assert "y" not in table
    assert clone.get_variable("x").value == 2


def test_symbols_are_immutable() -> None:
    variable = Variable(name="x", value=1)
    with pytest.raises(ValidationError):
        variable.value = 2

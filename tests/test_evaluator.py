"""Test class BatchEvaluator and function build_output_path."""
import math
from pathlib import Path

from pydantic import ValidationError
import pytest

from expression_calculator.batch.evaluator import BatchEvaluator, build_output_path
from expression_calculator.common.errors import ErrorCategory
from expression_calculator.common.models import OperationRequest


@pytest.mark.parametrize(
    "expr,expected",
    [
        ("2 + 3", 5.0),
        ("10 - 4", 6.0),
        ("3 * 4", 12.0),
        ("8 / 2", 4.0),
        ("2 ** 10", 1024.0),
    ],
)
def test_evaluate_valid_expression(expr: str, expected: float) -> None:
    """The evaluator returns the computed result for valid expressions."""
    result = BatchEvaluator().evaluate(OperationRequest(expression=expr, line=1))
    assert result.line == 1
    assert result.expression == expr
    assert result.result == expected
    assert result.ok


@pytest.mark.parametrize(
    "expr,category",
    [
        ("2 +", ErrorCategory.SYNTAX),
        ("* 3 4", ErrorCategory.SYNTAX),
        ("3 4 + 5", ErrorCategory.SYNTAX),
        ("1 / 0", ErrorCategory.DIVISION_BY_ZERO),
        ("y * 2", ErrorCategory.UNDEFINED_VARIABLE),
    ],
)
def test_evaluate_invalid_expression(expr: str, category: ErrorCategory) -> None:
    """Errors become error results carrying the message and category."""
    result = BatchEvaluator().evaluate(OperationRequest(expression=expr, line=2))
    assert result.line == 2
    assert not result.ok
    assert result.result is None
    assert result.category is category
    assert isinstance(result.error, str)


def test_function_errors_become_results() -> None:
    """A failing bound function is reported for its line only."""
    evaluator = BatchEvaluator(with_math=True)
    results = evaluator.evaluate_lines(["sqrt(-1)", "sqrt(4)"])
    assert not results[0].ok
    assert results[0].category is None
    assert results[1].result == 2.0


def test_variables_and_math() -> None:
    evaluator = BatchEvaluator(variables={"x": 2.0}, with_math=True)
    result = evaluator.evaluate(OperationRequest(expression="sin(pi / 2) + x"))
    assert result.result == pytest.approx(3.0)
    assert evaluator.parser.symbols.get_variable("x").value == 2.0


def test_integral_evaluator() -> None:
    evaluator = BatchEvaluator(numeric_type="INT64", variables={"n": 7})
    assert evaluator.numeric_type == "int64"
    results = evaluator.evaluate_lines(["n / 2", "n % 4", "", "1.5"])
    assert [r.result for r in results] == [3, 3, None]
    assert [r.line for r in results] == [1, 2, 4]
    assert results[2].category is ErrorCategory.MALFORMED_LITERAL


def test_unknown_numeric_type() -> None:
    with pytest.raises(ValidationError):
        BatchEvaluator(numeric_type="decimal")


def test_invalid_variable_name() -> None:
    with pytest.raises(ValidationError):
        BatchEvaluator(variables={"_hidden": 1.0})


def test_run_writes_results(tmp_path: Path) -> None:
    """run writes one line per expression, results and errors alike."""
    input_file = tmp_path / "ops.txt"
    output_file = tmp_path / "results.txt"
    input_file.write_text("2 + 3\n\n4 * 5\n2 +\n1 / 0\n")

    results = BatchEvaluator().run(input_file, output_file)

    assert len(results) == 4
    assert [result.line for result in results] == [1, 3, 4, 5]
    lines = output_file.read_text().splitlines()
    assert lines[0] == "2 + 3 = 5.0"
    assert lines[1] == "4 * 5 = 20.0"
    assert lines[2].startswith("2 + -> ERROR: Syntax error")
    assert lines[3].startswith("1 / 0 -> ERROR: Division by zero")


def test_parser_is_reused() -> None:
    """Every expression of a batch shares the same parser."""
    evaluator = BatchEvaluator()
    parser = evaluator.parser
    evaluator.evaluate_lines(["1", "2"])
    assert evaluator.parser is parser
    assert math.isclose(evaluator.parser.eval("0.5 * 4"), 2.0)


@pytest.mark.parametrize("name,expected", [
    ("resources/operations_short.7z", "resources/operations_short_7z_results.txt"),
    ("ops.txt", "ops_txt_results.txt"),
    ("data/ops.tar.xz", "data/ops_tar_xz_results.txt"),
])
def test_build_output_path(name: str, expected: str) -> None:
    assert build_output_path(Path(name)) == Path(expected)

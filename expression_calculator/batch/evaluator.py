"""Evaluate many expressions with one reusable parser."""
from pathlib import Path
from typing import Dict, Iterable, List, Union

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from expression_calculator.batch.reader import ExpressionFileReader
from expression_calculator.common.config import ParserConfig
from expression_calculator.common.errors import CalculatorError
from expression_calculator.common.logger import logger
from expression_calculator.common.mathlib import install_math
from expression_calculator.common.models import OperationRequest, OperationResult
from expression_calculator.common.numeric import NUMERIC_TYPES
from expression_calculator.common.parser import ExpressionParser


class BatchEvaluator(BaseModel):
    """
    Evaluator for a sequence of expressions sharing one symbol table.

    Lifecycle:
        - Builds a single ExpressionParser when created
        - Binds the given variables (and the math library when requested)
        - Evaluates every expression with that parser, one at a time
        - Turns each failure into an error result and keeps going
    """

    model_config = ConfigDict(frozen=True)

    numeric_type: str = Field(default="float64", description="Name of the type to evaluate in")
    variables: Dict[str, Union[int, float]] = Field(default_factory=dict, description="Variables bound before evaluation")
    with_math: bool = Field(default=False, description="Bind the standard math functions and constants")
    config: ParserConfig = Field(default_factory=ParserConfig, description="Parser limits")

    _parser: ExpressionParser = PrivateAttr()

    @field_validator("numeric_type")
    def numeric_type_must_be_known(cls, v: str) -> str:
        """Ensure the type name is one the parser understands."""
        if v.strip().lower() not in NUMERIC_TYPES:
            raise ValueError(f"Unknown numeric type {v!r}, expected one of {sorted(NUMERIC_TYPES)}")
        return v.strip().lower()

    def model_post_init(self, __context) -> None:
        parser = ExpressionParser(self.numeric_type, self.config)
        if self.with_math:
            install_math(parser)
        for name, value in self.variables.items():
            parser.set(name, value)
        self._parser = parser

    @property
    def parser(self) -> ExpressionParser:
        return self._parser

    def evaluate(self, request: OperationRequest) -> OperationResult:
        """
        Evaluate one expression and report its result or error.

        Errors of the calculator and of user functions become error results;
        anything else propagates.

        :param OperationRequest request: Expression and its line number

        :return: Result of the evaluation
        :rtype: OperationResult
        """
        logger.debug("👷🏁 Evaluating line %d: %s", request.line, request.expression)

        try:
            value = self._parser.eval(request.expression)
        except CalculatorError as exc:
            logger.error(
                "👷❌ Evaluation failed on line %d: %s\nInvalid arithmetic expression, could not evaluate: %r",
                request.line,
                exc,
                request.expression,
            )
            return OperationResult(
                line=request.line,
                expression=request.expression,
                error=str(exc),
                category=exc.category,
            )
        except (ArithmeticError, TypeError, ValueError) as exc:
            # Raised by a bound function, not by the calculator itself
            logger.error("👷❌ Function failed on line %d: %s", request.line, exc)
            return OperationResult(line=request.line, expression=request.expression, error=str(exc))

        logger.debug("👷✅ Line %d = %s", request.line, value)
        return OperationResult(line=request.line, expression=request.expression, result=value)

    def evaluate_lines(self, expressions: Iterable[str]) -> List[OperationResult]:
        """
        Evaluate expressions in order, numbering them from 1.

        :param expressions: Expression strings; blank ones are skipped

        :return: One result per non-blank expression
        :rtype: List[OperationResult]
        """
        results: List[OperationResult] = []
        for line_number, expression in enumerate(expressions, start=1):
            if not expression.strip():
                continue
            results.append(self.evaluate(OperationRequest(line=line_number, expression=expression)))
        return results

    def run(self, input_file: Path, output_file: Path) -> List[OperationResult]:
        """
        Evaluate every expression of ``input_file`` and write the results to ``output_file``.

        Each result is written and flushed as soon as it is computed, so
        progress survives an interruption.

        :param Path input_file: Text file or archive with one expression per line
        :param Path output_file: Destination of the "expr = result" lines

        :return: All results, in input order
        :rtype: List[OperationResult]
        """
        expressions = ExpressionFileReader().read_numbered_expressions(input_file)
        logger.info("Evaluating %d expressions as %s", len(expressions), self.numeric_type)

        results: List[OperationResult] = []
        with Path(output_file).open("w", encoding="utf-8") as f_out:
            for line_number, expression in expressions:
                result = self.evaluate(OperationRequest(line=line_number, expression=expression))
                f_out.write(result.format_line() + "\n")
                f_out.flush()
                results.append(result)

        failures = sum(1 for result in results if not result.ok)
        logger.info("✅ Wrote %d results to %s (%d errors)", len(results), output_file, failures)
        return results


def build_output_path(input_path: Path) -> Path:
    """
    Construct an output file path next to the input file.

    - Preserves the original folder
    - Replaces dots in extensions with underscores
    - Appends '_results.txt' at the end

    Examples
    --------
    input: resources/operations_short.7z
    output: resources/operations_short_7z_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    stem = input_path.name[: len(input_path.name) - len("".join(input_path.suffixes))]
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")

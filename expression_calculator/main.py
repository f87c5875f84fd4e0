"""
Command-line entry point.

Evaluates either a single expression given as argument or every line of a
file (plain text or archive), with one reused parser:

    expression-calculator "2 ** 10 - 1" --type int64
    expression-calculator "sin(pi / 2) + x" --math --var x=1.5
    expression-calculator --file resources/operations.7z
"""
import argparse
from pathlib import Path
import sys
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field, FilePath, ValidationError, field_validator, model_validator

from expression_calculator.batch.evaluator import BatchEvaluator, build_output_path
from expression_calculator.common.logger import configure_logging, logger
from expression_calculator.common.models import OperationRequest
from expression_calculator.common.numeric import NUMERIC_TYPES, resolve_numeric_type


class CliArgs(BaseModel):
    """
    Pydantic model used to validate CLI arguments.

    Attributes
    ----------
    expression : Optional[str]
        Expression to evaluate, exclusive with ``file_path``.
    file_path : Optional[FilePath]
        Path to a file or archive containing one expression per line.
    """

    expression: Optional[str] = None
    file_path: Optional[FilePath] = None
    output: Optional[Path] = None
    numeric_type: str = "float64"
    variables: List[str] = Field(default_factory=list)
    with_math: bool = False
    log_level: str = "WARNING"

    @field_validator("numeric_type")
    def numeric_type_must_be_known(cls, v: str) -> str:
        if v.strip().lower() not in NUMERIC_TYPES:
            raise ValueError(f"Unknown numeric type {v!r}, expected one of {sorted(NUMERIC_TYPES)}")
        return v.strip().lower()

    @field_validator("variables")
    def variables_must_be_assignments(cls, v: List[str]) -> List[str]:
        for item in v:
            name, sep, value = item.partition("=")
            if not sep or not name.strip() or not value.strip():
                raise ValueError(f"Variables must be given as NAME=VALUE, got {item!r}")
        return v

    @model_validator(mode="after")
    def exactly_one_input(self) -> "CliArgs":
        if (self.expression is None) == (self.file_path is None):
            raise ValueError("Give either an expression or --file, not both")
        return self

    def parsed_variables(self) -> Dict[str, Union[int, float]]:
        """Return the ``--var`` assignments, values converted for the chosen type."""
        cast = int if resolve_numeric_type(self.numeric_type).integral else float
        variables: Dict[str, Union[int, float]] = {}
        for item in self.variables:
            name, _, value = item.partition("=")
            variables[name.strip()] = cast(value.strip())
        return variables


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = argparse.ArgumentParser(
        prog="expression-calculator",
        description="Evaluate arithmetic expressions",
    )

    parser.add_argument("expression", nargs="?", help="Expression to evaluate")
    parser.add_argument("-f", "--file", dest="file_path", help="File or archive with one expression per line")
    parser.add_argument("-o", "--output", help="Where to write file results (default: next to the input)")
    parser.add_argument(
        "-t", "--type", dest="numeric_type", default="float64",
        help=f"Numeric type, one of {', '.join(sorted(NUMERIC_TYPES))} (default: float64)",
    )
    parser.add_argument(
        "--var", dest="variables", action="append", default=[], metavar="NAME=VALUE",
        help="Bind a variable (repeatable)",
    )
    parser.add_argument("--math", dest="with_math", action="store_true", help="Bind the standard math functions")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")

    args = parser.parse_args(argv)

    try:
        return CliArgs(**vars(args))
    except ValidationError as exc:
        parser.error(str(exc))


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the calculator from the command line.

    :return: Process exit status, non-zero when an expression failed
    """
    cli_args = parse_args(argv)
    configure_logging(cli_args.log_level)

    try:
        evaluator = BatchEvaluator(
            numeric_type=cli_args.numeric_type,
            variables=cli_args.parsed_variables(),
            with_math=cli_args.with_math,
        )
    except (ValueError, TypeError) as exc:
        logger.error("Could not set up the calculator: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if cli_args.expression is not None:
        try:
            request = OperationRequest(expression=cli_args.expression)
        except ValidationError:
            print("error: Expression cannot be empty", file=sys.stderr)
            return 1
        result = evaluator.evaluate(request)
        if result.ok:
            print(result.result)
            return 0
        print(f"error: {result.error}", file=sys.stderr)
        return 1

    input_path = Path(cli_args.file_path)
    output_path = cli_args.output or build_output_path(input_path)
    results = evaluator.run(input_path, output_path)
    print(f"{len(results)} results written to {output_path}")
    return 0 if all(result.ok for result in results) else 1


if __name__ == "__main__":
    sys.exit(main())

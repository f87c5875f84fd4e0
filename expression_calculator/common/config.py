"""Parser settings."""
from pydantic import BaseModel, ConfigDict, Field


class ParserConfig(BaseModel):
    """
    Limits applied by the tokenizer and the evaluating parser.

    Each nesting level of the expression costs a handful of Python stack
    frames, so ``max_depth`` stays well below the interpreter recursion limit.
    """

    # Shared between parsers, so it must not change after construction
    model_config = ConfigDict(frozen=True)

    max_depth: int = Field(
        default=64,
        ge=1,
        le=150,
        description="Maximum nesting of parentheses, unary operators and right-hand powers",
    )
    max_literal_length: int = Field(
        default=128,
        ge=1,
        description="Longest numeric literal accepted before conversion is attempted",
    )


DEFAULT_CONFIG = ParserConfig()

"""runvector core -- shared primitives for the translation pipeline.

Architecture::

    errors.py      Structured error hierarchy (ValidationError, ConflictError,
                   TranslationError)
    result.py      Result[T] envelope (Ok / Err / collect_all_errors)
    logging.py     structlog configuration and get_logger()
    settings.py    pydantic-settings for the CLI process
"""

from runvector.core.errors import (
    AggregateError,
    ConfigError,
    ConflictError,
    ErrorCategory,
    ResourceCategory,
    RunvectorError,
    TranslationError,
    TranslationFailure,
    ValidationError,
)
from runvector.core.result import Err, Ok, Result, collect_all_errors, partition_results

__all__ = [
    "AggregateError",
    "ConfigError",
    "ConflictError",
    "Err",
    "ErrorCategory",
    "Ok",
    "ResourceCategory",
    "Result",
    "RunvectorError",
    "TranslationError",
    "TranslationFailure",
    "ValidationError",
    "collect_all_errors",
    "partition_results",
]

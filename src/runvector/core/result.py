"""
Ok / Err envelope used by every pipeline stage.

A stage returns ``Ok(value)`` when its input is acceptable and ``Err(error)``
otherwise; bad declarations never unwind through the pipeline as exceptions.
``collect_all_errors`` is the accumulator that lets a stage inspect *every*
declaration and report all failures at once.

Stage chaining::

    normalize_spec(spec)          Ok(NormalizedResources) | Err(AggregateError)
        .map(...)                 runs only on Ok
        .flat_map(...)            next stage may fail too
        .unwrap()                 raises the carried error on Err

Examples:
    >>> from runvector.core.result import Ok, Err
    >>> Ok(["--read-only"]).map(len).unwrap()
    1
    >>> Err(ValueError("bad")).map(len).unwrap_or(0)
    0

Tags:
    result-pattern, error-handling, accumulation, runvector
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, TypeVar

from runvector.core.errors import AggregateError, RunvectorError

T = TypeVar("T")
U = TypeVar("U")


@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Stage succeeded with ``value``."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_err(self) -> Exception:
        raise ValueError(f"called unwrap_err() on {self!r}")

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Ok(f(self.value))

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        return f(self.value)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        return self

    def to_dict(self) -> dict[str, Any]:
        return {"ok": True, "value": self.value}

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Generic[T]):
    """
    Stage rejected its input; ``error`` says why.

    ``map`` and ``flat_map`` return a new Err with the same error, so a chain
    of stages stops at the first failing one and keeps its full diagnosis.
    """

    error: Exception

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> T:
        """Raise the carried error."""
        raise self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> Exception:
        return self.error

    def map(self, f: Callable[[T], U]) -> Result[U]:
        return Err(self.error)

    def flat_map(self, f: Callable[[T], Result[U]]) -> Result[U]:
        return Err(self.error)

    def map_err(self, f: Callable[[Exception], Exception]) -> Result[T]:
        return Err(f(self.error))

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.error, RunvectorError):
            error = self.error.to_dict()
        else:
            error = {"error_type": type(self.error).__name__, "message": str(self.error)}
        return {"ok": False, "error": error}

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


Result = Ok[T] | Err[T]


def partition_results(results: Iterable[Result[T]]) -> tuple[list[T], list[Exception]]:
    """Split results into values and errors, both in input order.

    An :class:`AggregateError` contributes its individual errors, so nested
    aggregates never reach the caller.
    """
    values: list[T] = []
    errors: list[Exception] = []
    for result in results:
        match result:
            case Ok(value):
                values.append(value)
            case Err(AggregateError(errors=inner)):
                errors.extend(inner)
            case Err(error):
                errors.append(error)
    return values, errors


def collect_all_errors(results: Iterable[Result[T]]) -> Result[list[T]]:
    """
    Inspect every result; ``Ok(values)`` only if none failed.

    Unlike a fail-fast collector this never stops early: the returned
    ``Err`` always wraps an :class:`AggregateError` listing each individual
    error (even when there is just one).

    Examples:
        >>> collect_all_errors([Ok(1), Ok(2)]).unwrap()
        [1, 2]
        >>> from runvector.core.errors import InvalidEnvKey
        >>> res = collect_all_errors([Ok(1), Err(InvalidEnvKey("a")), Err(InvalidEnvKey("b"))])
        >>> len(res.error)
        2
    """
    values, errors = partition_results(results)
    if errors:
        return Err(AggregateError(errors))
    return Ok(values)


__all__ = [
    "Err",
    "Ok",
    "Result",
    "collect_all_errors",
    "partition_results",
]

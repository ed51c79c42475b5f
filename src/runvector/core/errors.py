"""
Structured error types for runvector.

Provides a typed error hierarchy whose instances are carried as *values*
(inside :class:`runvector.core.result.Err`) rather than raised through the
translation pipeline. Every error knows which resource category it belongs
to and which declaration caused it, so a caller can print a complete,
itemized diagnosis without parsing messages.

Manifesto:
    - **Errors are data:** Normalizers and the resolver never raise for bad
      input; they return errors so that every problem is reported at once
    - **Attributable:** A ValidationError names one declaration, a
      ConflictError names the key or path shared by several declarations
    - **Serializable:** ``to_dict()`` on every error for logging and JSON output

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────┐
        │                     RunvectorError                           │
        │            (category, context, to_dict)                      │
        ├──────────────────┬──────────────────┬───────────────────────┤
        │ ValidationError  │  ConflictError   │  AggregateError       │
        │ (one declaration)│  (shared key)    │  (ordered errors)     │
        │       │          │       │          │        │              │
        │ InvalidImage     │ MountTarget-     │ TranslationError      │
        │ InvalidMount     │   Collision      │  (INVALID | CONFLICT) │
        │ InvalidDevice    │ MountDevice-     │                       │
        │ InvalidEnvKey    │   Collision      │ ConfigError           │
        │ InvalidAnnot...  │ DevicePath-      │                       │
        │ InvalidWorkdir   │   Collision      │                       │
        │ InvalidReadOnly  │ DuplicateEnvKey  │                       │
        │ InvalidContainer │ DuplicateAnnot.. │                       │
        │   Context        │                  │                       │
        └──────────────────┴──────────────────┴───────────────────────┘

Examples:
    >>> err = InvalidMount("target must be absolute", index=0, field="target", value="data")
    >>> err.resource
    <ResourceCategory.MOUNTS: 'mounts'>
    >>> err.to_dict()["rule"]
    'InvalidMount'

Tags:
    errors, validation, conflicts, diagnostics, runvector
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Sequence


class ErrorCategory(str, Enum):
    """Coarse error classification used for routing and exit codes."""

    VALIDATION = "VALIDATION"  # One declaration is malformed
    CONFLICT = "CONFLICT"  # Declarations are individually valid but incompatible
    CONFIG = "CONFIG"  # Invalid translation / CLI configuration
    INTERNAL = "INTERNAL"  # Bugs, unexpected state


class ResourceCategory(str, Enum):
    """Declaration category of a deployment spec."""

    IMAGE = "image"
    MOUNTS = "mounts"
    DEVICES = "devices"
    ENV = "env"
    ANNOTATIONS = "annotations"
    WORKDIR = "workdir"
    READ_ONLY = "read_only"
    CONTAINER = "container"


class TranslationFailure(str, Enum):
    """Which pipeline stage rejected a deployment spec."""

    INVALID = "invalid"  # At least one normalizer failed
    CONFLICT = "conflict"  # Normalization succeeded, resolution failed


@dataclass
class ErrorContext:
    """Where an error happened: which spec, which run, plus free-form extras.

    ``to_dict`` drops unset fields and flattens ``metadata``.
    """

    spec_image: str | None = None
    run_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        known = {"spec_image": self.spec_image, "run_id": self.run_id}
        return {**{k: v for k, v in known.items() if v is not None}, **self.metadata}


class RunvectorError(Exception):
    """
    Root of the runvector error hierarchy.

    Subclasses pick a ``default_category``; every instance carries its
    message, category and :class:`ErrorContext`, plus the optional exception
    that caused it.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category if category is not None else self.default_category
        self.context = context if context is not None else ErrorContext()
        self.cause = cause
        self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> RunvectorError:
        """
        Attach context and return ``self``; unknown keys land in ``metadata``.

        Usage:
            err = InvalidImage("bad reference").with_context(run_id="abc")
        """
        for key, value in kwargs.items():
            if key in ("spec_image", "run_id"):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form used by the CLI and log events."""
        result: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if context := self.context.to_dict():
            result["context"] = context
        if self.cause is not None:
            result["cause"] = f"{type(self.cause).__name__}: {self.cause}"
        return result

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# VALIDATION ERRORS (one malformed declaration)
# =============================================================================


class ValidationError(RunvectorError):
    """
    A single declaration violates a normalization rule.

    ``index`` is the position of the declaration inside its category (``None``
    for scalar fields such as ``image`` or ``workdir``), ``field`` the
    offending attribute and ``value`` the rejected input.
    """

    default_category = ErrorCategory.VALIDATION
    resource: ResourceCategory = ResourceCategory.IMAGE

    def __init__(
        self,
        message: str,
        *,
        index: int | None = None,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.index = index
        self.field = field
        self.value = value

    @property
    def rule(self) -> str:
        """Name of the violated rule (the concrete class name)."""
        return self.__class__.__name__

    @property
    def location(self) -> str:
        """Human readable pointer to the declaration, e.g. ``mounts[2].target``."""
        loc = self.resource.value
        if self.index is not None:
            loc += f"[{self.index}]"
        if self.field and self.field != self.resource.value:
            loc += f".{self.field}"
        return loc

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["rule"] = self.rule
        result["resource"] = self.resource.value
        result["location"] = self.location
        if self.index is not None:
            result["index"] = self.index
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ValidationError):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.message == other.message
            and self.index == other.index
            and self.field == other.field
            and self.value == other.value
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.message, self.index, self.field))


class InvalidImage(ValidationError):
    resource = ResourceCategory.IMAGE


class InvalidMount(ValidationError):
    resource = ResourceCategory.MOUNTS


class InvalidDevice(ValidationError):
    resource = ResourceCategory.DEVICES


class InvalidEnvKey(ValidationError):
    resource = ResourceCategory.ENV


class InvalidAnnotationKey(ValidationError):
    resource = ResourceCategory.ANNOTATIONS


class InvalidWorkdir(ValidationError):
    resource = ResourceCategory.WORKDIR


class InvalidReadOnly(ValidationError):
    resource = ResourceCategory.READ_ONLY


class InvalidContainerContext(ValidationError):
    """Container-level run options (name, pidfile) are malformed."""

    resource = ResourceCategory.CONTAINER


# =============================================================================
# CONFLICT ERRORS (several valid declarations are incompatible)
# =============================================================================


class ConflictError(RunvectorError):
    """
    Two or more declarations share a key or path.

    ``declarations`` holds the distinct normalized declarations involved, in
    their canonical order.
    """

    default_category = ErrorCategory.CONFLICT
    resource: ResourceCategory = ResourceCategory.MOUNTS

    def __init__(
        self,
        key: str,
        reason: str,
        *,
        declarations: Sequence[Any] = (),
        **kwargs: Any,
    ):
        super().__init__(f"{self.__class__.__name__} on {key!r}: {reason}", **kwargs)
        self.key = key
        self.reason = reason
        self.declarations = tuple(declarations)

    @property
    def kind(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["kind"] = self.kind
        result["resource"] = self.resource.value
        result["key"] = self.key
        result["reason"] = self.reason
        result["declarations"] = [repr(d) for d in self.declarations]
        return result

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConflictError):
            return NotImplemented
        return (
            type(self) is type(other)
            and self.key == other.key
            and self.declarations == other.declarations
        )

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.key))


class MountTargetCollision(ConflictError):
    resource = ResourceCategory.MOUNTS


class MountDeviceCollision(ConflictError):
    resource = ResourceCategory.MOUNTS


class DevicePathCollision(ConflictError):
    resource = ResourceCategory.DEVICES


class DuplicateEnvKey(ConflictError):
    resource = ResourceCategory.ENV


class DuplicateAnnotationKey(ConflictError):
    resource = ResourceCategory.ANNOTATIONS


# =============================================================================
# AGGREGATES
# =============================================================================


class AggregateError(RunvectorError):
    """
    An ordered collection of errors reported together.

    Iterating yields the individual errors; ``len()`` gives their count.
    """

    def __init__(self, errors: Sequence[RunvectorError], message: str | None = None, **kwargs: Any):
        errors = tuple(errors)
        if not errors:
            raise ValueError("AggregateError requires at least one error")
        if message is None:
            preview = "; ".join(str(e) for e in errors[:3])
            more = "..." if len(errors) > 3 else ""
            message = f"{len(errors)} error(s): {preview}{more}"
        super().__init__(message, **kwargs)
        self.errors = errors

    def __iter__(self) -> Iterator[RunvectorError]:
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["error_count"] = len(self.errors)
        result["errors"] = [e.to_dict() for e in self.errors]
        return result


class TranslationError(AggregateError):
    """
    Top-level failure returned by :func:`runvector.translate.translate`.

    ``kind`` tells which stage failed. Validation and conflict failures are
    mutually exclusive: conflicts are only checked once every declaration is
    individually valid.
    """

    def __init__(self, kind: TranslationFailure, errors: Sequence[RunvectorError], **kwargs: Any):
        category = (
            ErrorCategory.VALIDATION if kind is TranslationFailure.INVALID else ErrorCategory.CONFLICT
        )
        kwargs.setdefault("category", category)
        errors = tuple(errors)
        noun = "invalid declaration(s)" if kind is TranslationFailure.INVALID else "conflict(s)"
        super().__init__(errors, message=f"translation failed with {len(errors)} {noun}", **kwargs)
        self.kind = kind

    @classmethod
    def invalid(cls, errors: Sequence[ValidationError]) -> TranslationError:
        return cls(TranslationFailure.INVALID, errors)

    @classmethod
    def conflicting(cls, errors: Sequence[ConflictError]) -> TranslationError:
        return cls(TranslationFailure.CONFLICT, errors)

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["kind"] = self.kind.value
        return result


class ConfigError(RunvectorError):
    """Invalid translation or CLI configuration."""

    default_category = ErrorCategory.CONFIG


__all__ = [
    "AggregateError",
    "ConfigError",
    "ConflictError",
    "DevicePathCollision",
    "DuplicateAnnotationKey",
    "DuplicateEnvKey",
    "ErrorCategory",
    "ErrorContext",
    "InvalidAnnotationKey",
    "InvalidContainerContext",
    "InvalidDevice",
    "InvalidEnvKey",
    "InvalidImage",
    "InvalidMount",
    "InvalidReadOnly",
    "InvalidWorkdir",
    "MountDeviceCollision",
    "MountTargetCollision",
    "ResourceCategory",
    "RunvectorError",
    "TranslationError",
    "TranslationFailure",
    "ValidationError",
]

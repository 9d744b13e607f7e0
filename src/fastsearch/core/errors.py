"""
Structured error types for fast-search.

Every failure the lookup path can produce is one of three kinds: the caller
sent an unusable query, the backend could not answer in time, or the
service is misconfigured.  An empty result set is *not* an error.

Manifesto:
    - **Typed Error Hierarchy:** The HTTP boundary maps errors by type,
      never by parsing messages or inspecting driver exceptions
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry the backend name and operation
    - **Error Chaining:** The driver exception is kept as ``cause``

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────────┐
        │                      FastSearchError                           │
        │     (code, category, retryable, retry_after, context, cause)   │
        ├───────────────────────────────────────────────────────────────┤
        │                                                                │
        │  TransientError            ValidationError      ConfigError    │
        │  (retryable=True)          (VALIDATION)         (CONFIG)       │
        │       │                         │                   │          │
        │  BackendUnavailableError   InvalidQueryError   MissingConfig   │
        │  BackendTimeoutError                           InvalidConfig   │
        │  BackendThrottledError                                         │
        └───────────────────────────────────────────────────────────────┘

Examples:
    >>> error = BackendTimeoutError("ZRANGE timed out").with_context(
    ...     backend="redis", operation="range_by_rank"
    ... )
    >>> error.retryable
    True
    >>> error.context.backend
    'redis'

Tags:
    error-handling, exception-hierarchy, retry-logic, fast-search

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and routing."""

    # Infrastructure errors (usually transient)
    NETWORK = "NETWORK"           # Connection, timeout, DNS
    BACKEND = "BACKEND"           # Index or key store refused/failed

    # Caller errors
    VALIDATION = "VALIDATION"     # Empty or malformed query

    # Configuration errors (never retryable)
    CONFIG = "CONFIG"             # Missing config, invalid settings

    # Internal errors
    INTERNAL = "INTERNAL"         # Bugs, unexpected state


@dataclass
class ErrorContext:
    """Structured metadata attached to an error for logging.

    Attributes:
        backend: Backend that raised (``redis``, ``cloudflare-kv``, ...)
        operation: Backend primitive being called (``rank``, ``list_keys``)
        query: Normalized query, when one was in flight
        http_status: HTTP status returned by a remote store
        metadata: Additional key-value pairs
    """

    backend: str | None = None
    operation: str | None = None
    query: str | None = None
    http_status: int | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["backend", "operation", "query", "http_status"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class FastSearchError(Exception):
    """
    Base exception for all fast-search errors.

    Subclasses set ``default_category``, ``default_retryable`` and ``code``.
    ``code`` is the machine-readable value the API layer maps to an HTTP
    status (see :data:`fastsearch.api.middleware.errors.ERROR_CODE_TO_STATUS`).

    Examples:
        >>> error = FastSearchError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["retryable"]
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False
    code: str = "INTERNAL"

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        retry_after: int | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.retry_after = retry_after
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> FastSearchError:
        """
        Add context to this error (fluent API).

        Usage:
            raise BackendUnavailableError("refused").with_context(
                backend="redis", operation="rank"
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }

        if self.retry_after is not None:
            result["retry_after"] = self.retry_after

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# TRANSIENT ERRORS (backend failures)
# =============================================================================


class TransientError(FastSearchError):
    """
    Temporary backend failure that may succeed on retry.

    The lookup engine never retries by itself and never returns a partially
    scanned window once one of these has been raised; retry policy belongs
    to the caller.
    """

    default_category = ErrorCategory.BACKEND
    default_retryable = True
    code = "TRANSIENT"


class BackendUnavailableError(TransientError):
    """Backend refused the connection or answered with a server error."""

    default_category = ErrorCategory.NETWORK
    code = "UNAVAILABLE"


class BackendTimeoutError(TransientError):
    """Backend call exceeded its deadline."""

    default_category = ErrorCategory.NETWORK
    code = "TRANSIENT"


class BackendThrottledError(TransientError):
    """Backend rejected the call because of rate limiting."""

    code = "RATE_LIMITED"

    def __init__(
        self,
        message: str = "Backend rate limit exceeded",
        *,
        retry_after: int | None = 1,
        **kwargs: Any,
    ):
        super().__init__(message, retry_after=retry_after, **kwargs)


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class ValidationError(FastSearchError):
    """
    Input validation error.

    Never retryable - input must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False
    code = "VALIDATION_FAILED"

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.field:
            result["field"] = self.field
        if self.value is not None:
            result["value"] = repr(self.value)
        return result


class InvalidQueryError(ValidationError):
    """Query is absent, empty, or whitespace only."""

    code = "INVALID_INPUT"

    def __init__(self, message: str = "No input provided", **kwargs: Any):
        kwargs.setdefault("field", "input")
        super().__init__(message, **kwargs)


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(FastSearchError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False
    code = "INTERNAL"


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}")


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, FastSearchError):
        return error.retryable
    return False


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "FastSearchError",
    "TransientError",
    "BackendUnavailableError",
    "BackendTimeoutError",
    "BackendThrottledError",
    "ValidationError",
    "InvalidQueryError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "is_retryable",
]

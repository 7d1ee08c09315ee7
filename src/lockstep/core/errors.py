"""
Structured error types for lockstep.

Every failure the migration engine can report is a typed ``LockstepError``
carrying a category, structured context (location, file, lock file) and the
chained underlying exception. Callers branch on the type; logs consume
``to_dict()``.

Manifesto:
    - **Typed Error Hierarchy:** One error type per failure stage
    - **No Retry Semantics:** Every failure is terminal for the current run
    - **Rich Context:** Errors name the file and location that failed
    - **Error Chaining:** Preserve the original exception as ``cause``

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                       LockstepError                              │
        │  (category, context, cause)                                     │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  ConfigError        LockFileError       DiscoveryError          │
        │  (CONFIG)           (PARSE)             (DISCOVERY)             │
        │       │                                                          │
        │  MissingConfig      SourceError         DatabaseError           │
        │  InvalidConfig      (SOURCE)            (DATABASE)              │
        │                         │                   │                    │
        │                     ChecksumError       MigrationExecutionError │
        │                     MigrationReadError                          │
        │                                                                  │
        │  LockPersistenceError  (STORAGE, unrecoverable)                 │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    Adding context to an error:

    >>> error = DiscoveryError("cannot list directory")
    >>> error.with_context(location="/srv/migrations")
    DiscoveryError('cannot list directory', category=DISCOVERY)
    >>> error.context.location
    '/srv/migrations'

Tags:
    error-handling, exception-hierarchy, error-context, lockstep

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Standard error categories for classification and reporting."""

    CONFIG = "CONFIG"
    PARSE = "PARSE"
    DISCOVERY = "DISCOVERY"
    SOURCE = "SOURCE"
    DATABASE = "DATABASE"
    STORAGE = "STORAGE"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured context attached to errors.

    Attributes:
        location: Configured migration location (directory or glob pattern)
        filepath: Migration file being processed
        lock_file: Lock file being read or written
        metadata: Additional key-value pairs
    """

    location: str | None = None
    filepath: str | None = None
    lock_file: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["location", "filepath", "lock_file"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class LockstepError(Exception):
    """
    Base exception for all lockstep errors.

    Subclasses set ``default_category``; ``unrecoverable`` marks failures
    that leave the database and the lock file out of sync and need a human
    to reconcile them before the next run.

    Examples:
        >>> error = LockstepError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>

        >>> try:
        ...     raise OSError("disk full")
        ... except OSError as e:
        ...     error = LockstepError("write failed", cause=e)
        >>> error.cause
        OSError('disk full')
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    unrecoverable: bool = False

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
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> LockstepError:
        """
        Add context to this error (fluent API).

        Usage:
            raise DiscoveryError("Failed").with_context(location="db/migrations")
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key):
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result: dict[str, Any] = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if self.unrecoverable:
            result["unrecoverable"] = True
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(LockstepError):
    """Configuration error. The config must be fixed before re-running."""

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigError):
    """Required configuration is missing."""

    def __init__(self, key: str, message: str | None = None, **kwargs: Any):
        self.key = key
        super().__init__(message or f"Missing required configuration: {key}", **kwargs)


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None, **kwargs: Any):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}", **kwargs)


# =============================================================================
# LOCK FILE ERRORS
# =============================================================================


class LockFileError(LockstepError):
    """Lock file exists but cannot be read or decoded."""

    default_category = ErrorCategory.PARSE


class LockPersistenceError(LockstepError):
    """
    Updated lock file could not be written after migrations ran.

    The database already contains the changes listed in ``results`` but the
    lock file does not, so the next run would execute them again. Inspect the
    database and the lock file by hand before re-running.
    """

    default_category = ErrorCategory.STORAGE
    unrecoverable = True

    def __init__(self, message: str, *, results: list[Any] | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.results = list(results or [])


# =============================================================================
# DISCOVERY / SOURCE ERRORS
# =============================================================================


class DiscoveryError(LockstepError):
    """A migration location could not be listed or matched."""

    default_category = ErrorCategory.DISCOVERY


class SourceError(LockstepError):
    """A discovered migration file could not be processed."""

    default_category = ErrorCategory.SOURCE


class ChecksumError(SourceError):
    """Checksum of a migration file could not be computed."""

    pass


class MigrationReadError(SourceError):
    """Migration file content could not be read."""

    pass


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(LockstepError):
    """Database-side failure."""

    default_category = ErrorCategory.DATABASE


class MigrationExecutionError(DatabaseError):
    """The database rejected a migration's statement batch."""

    pass


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "LockstepError",
    "ConfigError",
    "MissingConfigError",
    "InvalidConfigError",
    "LockFileError",
    "LockPersistenceError",
    "DiscoveryError",
    "SourceError",
    "ChecksumError",
    "MigrationReadError",
    "DatabaseError",
    "MigrationExecutionError",
]

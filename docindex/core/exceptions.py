"""
Exception hierarchy for the documentation index.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class DocIndexException(Exception):
    """Base exception for all documentation index errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(DocIndexException):
    """Raised when component configuration is invalid."""

    pass


class ValidationError(DocIndexException):
    """Raised when a record fails validation. Never retried."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class DimensionMismatchError(ValidationError):
    """Raised when a vector length differs from the indexed dimension."""

    def __init__(
        self,
        expected: int,
        actual: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize dimension mismatch error.

        Args:
            expected: Dimension the index was built for
            actual: Dimension that was supplied
            details: Additional context
        """
        details = details or {}
        details.update({"expected": expected, "actual": actual})
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Vector dimension mismatch: expected {expected}, got {actual}",
            field="vector",
            details=details,
        )


class ModelMismatchError(ValidationError):
    """Raised when an embedding model differs from the one the index was built with."""

    def __init__(
        self,
        expected: str,
        actual: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize model mismatch error.

        Args:
            expected: Model the index was built with
            actual: Model that was supplied
            details: Additional context
        """
        details = details or {}
        details.update({"expected": expected, "actual": actual})
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Embedding model mismatch: index built with {expected!r}, got {actual!r}",
            field="model",
            details=details,
        )


class ProviderError(DocIndexException):
    """Raised when the embedding provider fails for a whole batch."""

    def __init__(
        self,
        message: str,
        model: str | None = None,
        batch_size: int | None = None,
        attempts: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize provider error.

        Args:
            message: Error message
            model: Embedding model that was requested
            batch_size: Number of texts in the failed batch
            attempts: Attempts made before giving up
            details: Additional context
        """
        details = details or {}
        if model:
            details["model"] = model
        if batch_size is not None:
            details["batch_size"] = batch_size
        if attempts is not None:
            details["attempts"] = attempts
        super().__init__(message, details)


class VectorStoreError(DocIndexException):
    """Raised when vector store operations fail."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize vector store error.

        Args:
            message: Error message
            operation: Operation that failed (upsert, query, delete)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class SearchError(DocIndexException):
    """Raised when a search query cannot be embedded."""

    def __init__(
        self,
        message: str,
        package: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize search error.

        Args:
            message: Error message
            package: Package the search was scoped to
            details: Additional context
        """
        details = details or {}
        if package:
            details["package"] = package
        super().__init__(message, details)

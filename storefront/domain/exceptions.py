"""Domain exceptions.

Errors raised by the catalog components. Malformed user input never
raises; only store failures and missing resources do.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# Store Errors
# ============================================================================


class CatalogQueryError(DomainError):
    """Raised when the store fails while computing facets or search results.

    Callers render an empty state; partial results are never returned.
    """

    def __init__(self, operation: str, reason: str) -> None:
        """Initialize catalog query error.

        Args:
            operation: Name of the failed operation (e.g., "compute_facets").
            reason: Underlying failure description.
        """
        super().__init__(
            f"Catalog query '{operation}' failed: {reason}",
            details={"operation": operation, "reason": reason},
        )


class AttributeCatalogUnavailableError(DomainError):
    """Raised when the attribute catalog cannot load and holds no snapshot."""

    def __init__(self, reason: str) -> None:
        """Initialize attribute catalog unavailable error.

        Args:
            reason: Underlying failure description.
        """
        super().__init__(
            f"Attribute catalog unavailable: {reason}",
            details={"reason": reason},
        )


# ============================================================================
# Lookup Errors
# ============================================================================


class ProductNotFoundError(DomainError):
    """Raised when a product slug does not match an active product."""

    def __init__(self, slug: str) -> None:
        super().__init__(
            f"Product '{slug}' not found",
            details={"slug": slug},
        )

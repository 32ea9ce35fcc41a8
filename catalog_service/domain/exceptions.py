"""Domain exceptions.

All domain-level errors that represent business rule violations.
These exceptions are raised by entities, services and repositories
when invariants are violated or referenced records do not exist.
Every error carries a stable machine-readable ``code``.
"""

from typing import Any, ClassVar


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    code: ClassVar[str] = "DOMAIN_ERROR"

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
# Lookup Errors
# ============================================================================


class NotFoundError(DomainError):
    """Raised when a referenced category, attribute, option or product does not exist."""

    code = "NOT_FOUND"

    def __init__(self, entity_type: str, entity_id: str) -> None:
        """Initialize not found error.

        Args:
            entity_type: Kind of record (e.g., "category", "product").
            entity_id: Identifier that failed to resolve.
        """
        super().__init__(
            f"{entity_type} {entity_id} not found",
            details={"entity_type": entity_type, "entity_id": entity_id},
        )


# ============================================================================
# Category Errors
# ============================================================================


class InvalidCategoryError(DomainError):
    """Raised when a category fails validation."""

    code = "INVALID_CATEGORY"


class InvalidCategoryHierarchyError(DomainError):
    """Raised when a parent assignment would break the category tree."""

    code = "INVALID_CATEGORY_HIERARCHY"


class DuplicateSlugUnderParentError(DomainError):
    """Raised when a sibling category already uses the slug."""

    code = "DUPLICATE_SLUG_UNDER_PARENT"

    def __init__(self, slug: str, parent_id: str | None) -> None:
        """Initialize duplicate slug error.

        Args:
            slug: Normalized slug that collided.
            parent_id: Parent category ID, None for root categories.
        """
        parent = parent_id or "root"
        super().__init__(
            f"Category slug '{slug}' already exists under {parent}",
            details={"slug": slug, "parent_id": parent_id},
        )


# ============================================================================
# Attribute Errors
# ============================================================================


class InvalidAttributeError(DomainError):
    """Raised when an attribute definition or option is invalid."""

    code = "INVALID_ATTRIBUTE"


class InvalidAttributeValueError(DomainError):
    """Raised when a product attribute value breaks the value rules."""

    code = "INVALID_ATTRIBUTE_VALUE"


# ============================================================================
# Product Errors
# ============================================================================


class InvalidProductError(DomainError):
    """Raised when a product fails validation."""

    code = "INVALID_PRODUCT"


# ============================================================================
# Variant Errors
# ============================================================================


class InvalidVariantAxisError(DomainError):
    """Raised when variant axes or a generated variant are invalid."""

    code = "INVALID_VARIANT_AXIS"


class DuplicateVariantCombinationError(DomainError):
    """Raised when a combination key repeats an attribute or collides with another variant."""

    code = "DUPLICATE_VARIANT_COMBINATION"

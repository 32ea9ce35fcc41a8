"""Enumerations for catalog entities."""

from enum import Enum

from catalog_service.domain.exceptions import (
    InvalidAttributeError,
    InvalidProductError,
    InvalidVariantAxisError,
)


class AttributeType(str, Enum):
    """Value kinds a category attribute can hold."""

    SELECT = "select"
    TEXT = "text"
    NUMBER = "number"
    BOOL = "bool"

    @classmethod
    def parse(cls, raw: "str | AttributeType") -> "AttributeType":
        """Resolve a raw attribute type string.

        Args:
            raw: Type name, surrounding whitespace ignored.

        Returns:
            Matching AttributeType.

        Raises:
            InvalidAttributeError: If the type is not supported.
        """
        if isinstance(raw, cls):
            return raw
        value = str(raw).strip().lower()
        try:
            return cls(value)
        except ValueError:
            raise InvalidAttributeError(
                f"Unsupported attribute type '{raw}'",
                details={"type": str(raw), "allowed": [t.value for t in cls]},
            ) from None


class ProductStatus(str, Enum):
    """Product lifecycle states. New products start as DRAFT."""

    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"

    @classmethod
    def parse(cls, raw: "str | ProductStatus") -> "ProductStatus":
        """Resolve a raw product status string."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise InvalidProductError(
                f"Unsupported product status '{raw}'",
                details={"status": str(raw)},
            ) from None


class VariantStatus(str, Enum):
    """Availability of a purchasable variant."""

    ACTIVE = "active"
    INACTIVE = "inactive"

    @classmethod
    def parse(cls, raw: "str | VariantStatus") -> "VariantStatus":
        """Resolve a raw variant status string."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(str(raw).strip().lower())
        except ValueError:
            raise InvalidVariantAxisError(
                f"Unsupported variant status '{raw}'",
                details={"status": str(raw)},
            ) from None

"""Domain layer - Entities, value objects, enumerations and domain errors.

This module exports the core catalog building blocks:

- **Entities**: Category, CategoryAttribute, AttributeOption, Product,
  ProductAttributeValue, ProductVariant
- **Value Objects**: typed IDs, variant option pairs, tagged attribute values
- **Exceptions**: Domain-specific errors and invariant violations

Example usage:
    from catalog_service.domain import Category, build_combination_key

    shoes = Category.create(name="Shoes", slug="shoes")
    running = Category.create(name="Running", slug="running", parent=shoes)
    print(running.path)  # /shoes/running
"""

# Base classes
from catalog_service.domain.base import AggregateRoot, Entity, ValueObject

# Entities
from catalog_service.domain.entities import (
    AttributeOption,
    Category,
    CategoryAttribute,
    CategoryTreeNode,
    Product,
    ProductAttributeValue,
    ProductVariant,
    build_category_path,
    normalize_category_ids,
    normalize_code,
    normalize_slug,
)

# Enumerations
from catalog_service.domain.enums import AttributeType, ProductStatus, VariantStatus

# Exceptions
from catalog_service.domain.exceptions import (
    DomainError,
    DuplicateSlugUnderParentError,
    DuplicateVariantCombinationError,
    InvalidAttributeError,
    InvalidAttributeValueError,
    InvalidCategoryError,
    InvalidCategoryHierarchyError,
    InvalidProductError,
    InvalidVariantAxisError,
    NotFoundError,
)

# Value Objects
from catalog_service.domain.value_objects import (
    AttributeId,
    AttributeValue,
    AttributeValueId,
    BooleanValue,
    CategoryId,
    EntityId,
    JsonValue,
    NumberValue,
    OptionId,
    OptionValue,
    ProductId,
    TextValue,
    VariantId,
    VariantOptionValue,
    attribute_value_from_fields,
    build_combination_key,
)

__all__ = [
    # Base classes
    "AggregateRoot",
    "Entity",
    "ValueObject",
    # Entities
    "AttributeOption",
    "Category",
    "CategoryAttribute",
    "CategoryTreeNode",
    "Product",
    "ProductAttributeValue",
    "ProductVariant",
    "build_category_path",
    "normalize_category_ids",
    "normalize_code",
    "normalize_slug",
    # Enumerations
    "AttributeType",
    "ProductStatus",
    "VariantStatus",
    # Value Objects
    "AttributeId",
    "AttributeValue",
    "AttributeValueId",
    "BooleanValue",
    "CategoryId",
    "EntityId",
    "JsonValue",
    "NumberValue",
    "OptionId",
    "OptionValue",
    "ProductId",
    "TextValue",
    "VariantId",
    "VariantOptionValue",
    "attribute_value_from_fields",
    "build_combination_key",
    # Exceptions
    "DomainError",
    "DuplicateSlugUnderParentError",
    "DuplicateVariantCombinationError",
    "InvalidAttributeError",
    "InvalidAttributeValueError",
    "InvalidCategoryError",
    "InvalidCategoryHierarchyError",
    "InvalidProductError",
    "InvalidVariantAxisError",
    "NotFoundError",
]

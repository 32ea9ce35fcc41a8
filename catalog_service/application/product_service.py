"""Product catalog application service.

Creates products with their category associations and manages the
non-variant attribute values of a product.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

import structlog

from catalog_service.application.ports import (
    AttributeRepository,
    CategoryRepository,
    ProductRepository,
)
from catalog_service.domain.entities import (
    Product,
    ProductAttributeValue,
    ProductVariant,
)
from catalog_service.domain.exceptions import (
    InvalidAttributeValueError,
    InvalidCategoryError,
    InvalidProductError,
)
from catalog_service.domain.value_objects import (
    AttributeId,
    AttributeValue,
    CategoryId,
    OptionId,
    OptionValue,
    ProductId,
    attribute_value_from_fields,
)

logger = structlog.get_logger()


@dataclass
class AttributeValueInput:
    """Incoming attribute value with its five mutually exclusive fields.

    Exactly one of option_id, value_text, value_number, value_boolean
    and value_json must be set.
    """

    attribute_id: AttributeId
    option_id: OptionId | None = None
    value_text: str | None = None
    value_number: float | None = None
    value_boolean: bool | None = None
    value_json: Any | None = None

    def to_value(self) -> AttributeValue:
        """Convert to the tagged attribute value.

        Raises:
            InvalidAttributeValueError: Unless exactly one field is set.
        """
        return attribute_value_from_fields(
            option_id=self.option_id,
            value_text=self.value_text,
            value_number=self.value_number,
            value_boolean=self.value_boolean,
            value_json=self.value_json,
        )


class ProductCatalogService:
    """Application service for products and their attribute values."""

    def __init__(
        self,
        products: ProductRepository,
        categories: CategoryRepository,
        attributes: AttributeRepository,
    ) -> None:
        """Initialize service.

        Args:
            products: Product repository.
            categories: Category repository.
            attributes: Attribute repository.
        """
        self.products = products
        self.categories = categories
        self.attributes = attributes

    async def create_product(
        self,
        name: str,
        slug: str,
        primary_category_id: CategoryId,
        additional_category_ids: Sequence[CategoryId | None] = (),
        description: str = "",
        base_price_minor: int = 0,
    ) -> Product:
        """Create a draft product.

        Args:
            name: Product name.
            slug: Globally unique slug.
            primary_category_id: Category whose schema defines variant axes.
            additional_category_ids: Further categories, in display order.
            description: Free-form description.
            base_price_minor: Base price in minor currency units.

        Returns:
            The persisted product.

        Raises:
            InvalidProductError: If the primary category is missing or the
                product fails validation.
            NotFoundError: If any referenced category does not exist.
        """
        if primary_category_id is None:
            raise InvalidProductError("Primary category is required")
        await self.categories.get_by_id(primary_category_id)
        for category_id in additional_category_ids:
            if category_id is None or category_id == primary_category_id:
                continue
            await self.categories.get_by_id(category_id)

        product = Product.create(
            name=name,
            slug=slug,
            primary_category_id=primary_category_id,
            additional_category_ids=additional_category_ids,
            description=description,
            base_price_minor=base_price_minor,
        )
        await self.products.create(product)
        await self.products.set_categories(
            product.id, product.category_ids, product.primary_category_id
        )

        logger.info(
            "Product created",
            product_id=str(product.id),
            slug=product.slug,
            category_count=len(product.category_ids),
        )
        return product

    async def assign_categories(
        self,
        product_id: ProductId,
        primary_category_id: CategoryId,
        additional_category_ids: Sequence[CategoryId | None] = (),
    ) -> Product:
        """Replace a product's categories.

        The primary category is listed first and duplicates are dropped.
        Existing variants and attribute values are left as they are.

        Raises:
            InvalidProductError: If product_id or the primary category is missing.
            NotFoundError: If the product or a category does not exist.
        """
        if product_id is None:
            raise InvalidProductError("product_id is required")
        if primary_category_id is None:
            raise InvalidProductError("Primary category is required")
        product = await self.products.get_by_id(product_id)
        await self.categories.get_by_id(primary_category_id)
        for category_id in additional_category_ids:
            if category_id is None or category_id == primary_category_id:
                continue
            await self.categories.get_by_id(category_id)

        category_ids = product.assign_categories(primary_category_id, additional_category_ids)
        await self.products.set_categories(product.id, category_ids, primary_category_id)

        logger.info(
            "Product categories assigned",
            product_id=str(product.id),
            primary_category_id=str(primary_category_id),
            category_count=len(category_ids),
        )
        return product

    async def set_product_attributes(
        self,
        product_id: ProductId,
        values: Sequence[AttributeValueInput],
    ) -> list[ProductAttributeValue]:
        """Replace the product's values for the given attributes.

        All values are validated before anything is written.

        Args:
            product_id: Target product.
            values: One input per attribute.

        Returns:
            The stored attribute values.

        Raises:
            InvalidProductError: If product_id is missing.
            NotFoundError: If the product or an attribute does not exist.
            InvalidAttributeValueError: If a value sets zero or several
                fields, repeats an attribute, targets a variant axis, or
                references an option of another attribute.
        """
        if product_id is None:
            raise InvalidProductError("product_id is required")
        await self.products.get_by_id(product_id)

        seen: set[AttributeId] = set()
        resolved: list[ProductAttributeValue] = []
        for item in values:
            value = item.to_value()
            if item.attribute_id in seen:
                raise InvalidAttributeValueError(
                    "Attribute set more than once",
                    details={"attribute_id": str(item.attribute_id)},
                )
            seen.add(item.attribute_id)

            attribute = await self.attributes.get_by_id(item.attribute_id)
            if attribute.is_variant_axis:
                raise InvalidAttributeValueError(
                    f"Attribute {attribute.code} is a variant axis",
                    details={"attribute_id": str(attribute.id), "code": attribute.code},
                )
            if isinstance(value, OptionValue):
                belongs = await self.attributes.option_belongs_to_attribute(
                    value.option_id, item.attribute_id
                )
                if not belongs:
                    raise InvalidAttributeValueError(
                        "Option does not belong to attribute",
                        details={
                            "attribute_id": str(item.attribute_id),
                            "option_id": str(value.option_id),
                        },
                    )
            resolved.append(ProductAttributeValue.create(product_id, item.attribute_id, value))

        await self.products.upsert_attribute_values(product_id, resolved)
        logger.info(
            "Product attributes set",
            product_id=str(product_id),
            attribute_count=len(resolved),
        )
        return resolved

    async def get_product(self, product_id: ProductId) -> Product:
        """Get product by ID."""
        if product_id is None:
            raise InvalidProductError("product_id is required")
        return await self.products.get_by_id(product_id)

    async def list_products_by_category(self, category_id: CategoryId) -> list[Product]:
        """List products assigned to a category, sorted by name."""
        if category_id is None:
            raise InvalidCategoryError("category_id is required")
        await self.categories.get_by_id(category_id)
        products = await self.products.list_by_category(category_id)
        return sorted(products, key=lambda p: p.name)

    async def list_product_attribute_values(self, product_id: ProductId) -> list[ProductAttributeValue]:
        """List a product's attribute values sorted by attribute id."""
        if product_id is None:
            raise InvalidProductError("product_id is required")
        await self.products.get_by_id(product_id)
        values = await self.products.list_attribute_values(product_id)
        return sorted(values, key=lambda v: str(v.attribute_id))

    async def list_product_variants(self, product_id: ProductId) -> list[ProductVariant]:
        """List a product's variants sorted by combination key."""
        if product_id is None:
            raise InvalidProductError("product_id is required")
        await self.products.get_by_id(product_id)
        variants = await self.products.list_variants_by_product(product_id)
        return sorted(variants, key=lambda v: v.combination_key)

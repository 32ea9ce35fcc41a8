"""In-memory repositories.

Process-local implementations of the repository ports. All three
repositories share one ``InMemoryStore`` so that cross-aggregate checks
(e.g. a product's categories) see the same data. Reads and writes both
hold the store's lock while touching the tables, and entities are copied
on the way in and out so callers never share state with the store.
"""

import threading
from collections.abc import Sequence
from copy import deepcopy
from dataclasses import dataclass, field

import structlog

from catalog_service.domain.entities import (
    AttributeOption,
    Category,
    CategoryAttribute,
    Product,
    ProductAttributeValue,
    ProductVariant,
)
from catalog_service.domain.exceptions import (
    DuplicateSlugUnderParentError,
    DuplicateVariantCombinationError,
    InvalidAttributeError,
    InvalidProductError,
    InvalidVariantAxisError,
    NotFoundError,
)
from catalog_service.domain.value_objects import (
    AttributeId,
    CategoryId,
    OptionId,
    ProductId,
)

logger = structlog.get_logger()


@dataclass
class InMemoryStore:
    """Shared tables backing the in-memory repositories."""

    categories: dict[CategoryId, Category] = field(default_factory=dict)
    attributes: dict[AttributeId, CategoryAttribute] = field(default_factory=dict)
    options: dict[OptionId, AttributeOption] = field(default_factory=dict)
    products: dict[ProductId, Product] = field(default_factory=dict)
    product_categories: dict[ProductId, list[CategoryId]] = field(default_factory=dict)
    attribute_values: dict[ProductId, dict[AttributeId, ProductAttributeValue]] = field(
        default_factory=dict
    )
    variants: dict[ProductId, list[ProductVariant]] = field(default_factory=dict)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def clear(self) -> None:
        """Drop all stored records."""
        with self.lock:
            self.categories.clear()
            self.attributes.clear()
            self.options.clear()
            self.products.clear()
            self.product_categories.clear()
            self.attribute_values.clear()
            self.variants.clear()


# ============================================================================
# Categories
# ============================================================================


class InMemoryCategoryRepository:
    """In-memory repository for categories."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def create(self, category: Category) -> None:
        """Store a category, enforcing slug uniqueness among siblings."""
        with self.store.lock:
            for existing in self.store.categories.values():
                if existing.parent_id == category.parent_id and existing.slug == category.slug:
                    raise DuplicateSlugUnderParentError(
                        category.slug,
                        str(category.parent_id) if category.parent_id else None,
                    )
            self.store.categories[category.id] = deepcopy(category)

    async def get_by_id(self, category_id: CategoryId) -> Category:
        """Get category by ID."""
        with self.store.lock:
            category = self.store.categories.get(category_id)
            if category is None:
                raise NotFoundError("category", str(category_id))
            return deepcopy(category)

    async def exists_by_parent_and_slug(self, parent_id: CategoryId | None, slug: str) -> bool:
        """Check whether a sibling already uses the slug (case-insensitive)."""
        slug = slug.lower()
        with self.store.lock:
            return any(
                c.parent_id == parent_id and c.slug.lower() == slug
                for c in self.store.categories.values()
            )

    async def list_children(self, parent_id: CategoryId | None) -> list[Category]:
        """List direct children of a category, or the roots for None."""
        with self.store.lock:
            return [
                deepcopy(c) for c in self.store.categories.values() if c.parent_id == parent_id
            ]

    async def list_all(self) -> list[Category]:
        """List every category."""
        with self.store.lock:
            return [deepcopy(c) for c in self.store.categories.values()]


# ============================================================================
# Attribute Schema
# ============================================================================


class InMemoryAttributeRepository:
    """In-memory repository for attribute definitions and options."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def create(self, attribute: CategoryAttribute) -> None:
        """Store an attribute, enforcing code uniqueness per category."""
        with self.store.lock:
            if attribute.category_id not in self.store.categories:
                raise NotFoundError("category", str(attribute.category_id))
            for existing in self.store.attributes.values():
                if existing.category_id == attribute.category_id and existing.code == attribute.code:
                    raise InvalidAttributeError(
                        "Duplicate code in category",
                        details={"category_id": str(attribute.category_id), "code": attribute.code},
                    )
            self.store.attributes[attribute.id] = deepcopy(attribute)

    async def get_by_id(self, attribute_id: AttributeId) -> CategoryAttribute:
        """Get attribute by ID."""
        with self.store.lock:
            attribute = self.store.attributes.get(attribute_id)
            if attribute is None:
                raise NotFoundError("attribute", str(attribute_id))
            return deepcopy(attribute)

    async def get_by_category(self, category_id: CategoryId) -> list[CategoryAttribute]:
        """List attributes defined on a category."""
        with self.store.lock:
            return [
                deepcopy(a) for a in self.store.attributes.values() if a.category_id == category_id
            ]

    async def exists_by_category_and_code(self, category_id: CategoryId, code: str) -> bool:
        """Check whether the category already defines the code."""
        code = code.lower()
        with self.store.lock:
            return any(
                a.category_id == category_id and a.code.lower() == code
                for a in self.store.attributes.values()
            )

    async def create_option(self, option: AttributeOption) -> None:
        """Store an option, enforcing case-insensitive value uniqueness."""
        with self.store.lock:
            if option.attribute_id not in self.store.attributes:
                raise NotFoundError("attribute", str(option.attribute_id))
            value_key = option.value.lower()
            for existing in self.store.options.values():
                if existing.attribute_id == option.attribute_id and existing.value.lower() == value_key:
                    raise InvalidAttributeError(
                        "Duplicate option value",
                        details={"attribute_id": str(option.attribute_id), "value": option.value},
                    )
            self.store.options[option.id] = deepcopy(option)

    async def list_options_by_attribute(self, attribute_id: AttributeId) -> list[AttributeOption]:
        """List options of an attribute."""
        with self.store.lock:
            return [
                deepcopy(o) for o in self.store.options.values() if o.attribute_id == attribute_id
            ]

    async def option_belongs_to_attribute(self, option_id: OptionId, attribute_id: AttributeId) -> bool:
        """Check that the option exists and belongs to the attribute."""
        with self.store.lock:
            option = self.store.options.get(option_id)
        return option is not None and option.attribute_id == attribute_id


# ============================================================================
# Products
# ============================================================================


class InMemoryProductRepository:
    """In-memory repository for products, attribute values and variants."""

    def __init__(self, store: InMemoryStore) -> None:
        self.store = store

    async def create(self, product: Product) -> None:
        """Store a product, enforcing slug uniqueness."""
        with self.store.lock:
            for existing in self.store.products.values():
                if existing.slug == product.slug:
                    raise InvalidProductError(
                        "Duplicate product slug",
                        details={"slug": product.slug},
                    )
            self.store.products[product.id] = deepcopy(product)

    def _copy_product(self, product_id: ProductId) -> Product:
        # Caller holds the store lock.
        product = self.store.products.get(product_id)
        if product is None:
            raise NotFoundError("product", str(product_id))
        product = deepcopy(product)
        if product_id in self.store.product_categories:
            product.category_ids = list(self.store.product_categories[product_id])
        return product

    async def get_by_id(self, product_id: ProductId) -> Product:
        """Get product by ID, with its current category list."""
        with self.store.lock:
            return self._copy_product(product_id)

    async def set_categories(
        self,
        product_id: ProductId,
        category_ids: Sequence[CategoryId],
        primary_category_id: CategoryId,
    ) -> None:
        """Replace a product's category associations."""
        with self.store.lock:
            if product_id not in self.store.products:
                raise NotFoundError("product", str(product_id))
            for category_id in category_ids:
                if category_id not in self.store.categories:
                    raise NotFoundError("category", str(category_id))
            ordered = [primary_category_id] + [c for c in category_ids if c != primary_category_id]
            self.store.product_categories[product_id] = ordered
            self.store.products[product_id].primary_category_id = primary_category_id
            self.store.products[product_id].category_ids = list(ordered)

    async def upsert_attribute_values(
        self,
        product_id: ProductId,
        values: Sequence[ProductAttributeValue],
    ) -> None:
        """Insert or replace values keyed by (product, attribute).

        A replaced value keeps the ID of the stored one, and the ID is
        written back onto the given value.
        """
        with self.store.lock:
            if product_id not in self.store.products:
                raise NotFoundError("product", str(product_id))
            current = self.store.attribute_values.setdefault(product_id, {})
            for value in values:
                stored = current.get(value.attribute_id)
                if stored is not None:
                    value.id = stored.id
                current[value.attribute_id] = deepcopy(value)

    async def list_attribute_values(self, product_id: ProductId) -> list[ProductAttributeValue]:
        """List a product's attribute values."""
        with self.store.lock:
            return [deepcopy(v) for v in self.store.attribute_values.get(product_id, {}).values()]

    async def list_by_category(self, category_id: CategoryId) -> list[Product]:
        """List products associated with a category."""
        with self.store.lock:
            return [
                self._copy_product(product_id)
                for product_id, category_ids in self.store.product_categories.items()
                if category_id in category_ids
            ]

    async def create_variants(self, variants: Sequence[ProductVariant]) -> None:
        """Store a batch of variants atomically.

        Raises:
            NotFoundError: If a variant's product does not exist.
            DuplicateVariantCombinationError: If a combination key collides
                with a stored variant or repeats within the batch.
            InvalidVariantAxisError: If a SKU collides.
        """
        if not variants:
            return

        with self.store.lock:
            keys: dict[ProductId, set[str]] = {}
            skus: dict[ProductId, set[str]] = {}
            for variant in variants:
                product_id = variant.product_id
                if product_id not in self.store.products:
                    raise NotFoundError("product", str(product_id))
                if product_id not in keys:
                    existing = self.store.variants.get(product_id, [])
                    keys[product_id] = {v.combination_key for v in existing}
                    skus[product_id] = {v.sku for v in existing if v.sku}

                if variant.combination_key in keys[product_id]:
                    raise DuplicateVariantCombinationError(
                        "Variant combination already exists",
                        details={
                            "product_id": str(product_id),
                            "combination_key": variant.combination_key,
                        },
                    )
                keys[product_id].add(variant.combination_key)

                if variant.sku:
                    if variant.sku in skus[product_id]:
                        raise InvalidVariantAxisError(
                            "Duplicate SKU for product",
                            details={"product_id": str(product_id), "sku": variant.sku},
                        )
                    skus[product_id].add(variant.sku)

            for variant in variants:
                self.store.variants.setdefault(variant.product_id, []).append(deepcopy(variant))

        logger.debug("Variants stored", variant_count=len(variants))

    async def list_variants_by_product(self, product_id: ProductId) -> list[ProductVariant]:
        """List a product's variants."""
        with self.store.lock:
            return [deepcopy(v) for v in self.store.variants.get(product_id, [])]

"""Repository ports consumed by the application services.

Every method is a coroutine and raises ``NotFoundError`` when an id does
not resolve. Implementations live in ``catalog_service.infrastructure``.
"""

from collections.abc import Sequence
from typing import Protocol

from catalog_service.domain.entities import (
    AttributeOption,
    Category,
    CategoryAttribute,
    Product,
    ProductAttributeValue,
    ProductVariant,
)
from catalog_service.domain.value_objects import (
    AttributeId,
    CategoryId,
    OptionId,
    ProductId,
)


class CategoryRepository(Protocol):
    """Persistence contract for categories."""

    async def create(self, category: Category) -> None: ...

    async def get_by_id(self, category_id: CategoryId) -> Category: ...

    async def exists_by_parent_and_slug(self, parent_id: CategoryId | None, slug: str) -> bool: ...

    async def list_children(self, parent_id: CategoryId | None) -> list[Category]: ...

    async def list_all(self) -> list[Category]: ...


class AttributeRepository(Protocol):
    """Persistence contract for attribute definitions and their options."""

    async def create(self, attribute: CategoryAttribute) -> None: ...

    async def get_by_id(self, attribute_id: AttributeId) -> CategoryAttribute: ...

    async def get_by_category(self, category_id: CategoryId) -> list[CategoryAttribute]: ...

    async def exists_by_category_and_code(self, category_id: CategoryId, code: str) -> bool: ...

    async def create_option(self, option: AttributeOption) -> None: ...

    async def list_options_by_attribute(self, attribute_id: AttributeId) -> list[AttributeOption]: ...

    async def option_belongs_to_attribute(self, option_id: OptionId, attribute_id: AttributeId) -> bool: ...


class ProductRepository(Protocol):
    """Persistence contract for products, their attribute values and variants.

    ``create_variants`` must be atomic: within one call no combination key may
    collide with an existing variant of the product or with another variant of
    the batch, and a set SKU must be unique per product. Any violation rejects
    the whole batch and nothing is written.
    """

    async def create(self, product: Product) -> None: ...

    async def get_by_id(self, product_id: ProductId) -> Product: ...

    async def set_categories(
        self,
        product_id: ProductId,
        category_ids: Sequence[CategoryId],
        primary_category_id: CategoryId,
    ) -> None: ...

    async def upsert_attribute_values(
        self,
        product_id: ProductId,
        values: Sequence[ProductAttributeValue],
    ) -> None: ...

    async def list_attribute_values(self, product_id: ProductId) -> list[ProductAttributeValue]: ...

    async def list_by_category(self, category_id: CategoryId) -> list[Product]: ...

    async def create_variants(self, variants: Sequence[ProductVariant]) -> None: ...

    async def list_variants_by_product(self, product_id: ProductId) -> list[ProductVariant]: ...

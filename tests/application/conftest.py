"""Fixtures shared by the application service tests."""

from dataclasses import dataclass

import pytest_asyncio

from catalog_service.application.attribute_service import AttributeSchemaService
from catalog_service.application.category_service import CategoryHierarchyService
from catalog_service.application.product_service import ProductCatalogService
from catalog_service.domain import (
    AttributeOption,
    Category,
    CategoryAttribute,
    Product,
)


@dataclass
class ShoeCatalog:
    """A small shoes catalog with a size axis, a color axis and a text attribute."""

    apparel: Category
    shoes: Category
    size: CategoryAttribute
    sizes: list[AttributeOption]
    color: CategoryAttribute
    colors: list[AttributeOption]
    material: CategoryAttribute
    product: Product


@pytest_asyncio.fixture
async def shoe_catalog(
    category_service: CategoryHierarchyService,
    attribute_service: AttributeSchemaService,
    product_service: ProductCatalogService,
) -> ShoeCatalog:
    """Create Apparel > Shoes with sizes 42-44, colors red/blue and one product."""
    apparel = await category_service.create_category(name="Apparel", slug="apparel")
    shoes = await category_service.create_category(name="Shoes", slug="shoes", parent_id=apparel.id)

    size = await attribute_service.create_category_attribute(
        category_id=shoes.id, name="Size", code="size", type="select", is_variant_axis=True
    )
    sizes = [
        await attribute_service.add_attribute_option(size.id, value=value, label=f"EU {value}")
        for value in ("42", "43", "44")
    ]
    color = await attribute_service.create_category_attribute(
        category_id=shoes.id, name="Color", code="color", type="select", is_variant_axis=True
    )
    colors = [
        await attribute_service.add_attribute_option(color.id, value=value, label=value.title())
        for value in ("red", "blue")
    ]
    material = await attribute_service.create_category_attribute(
        category_id=shoes.id, name="Material", code="material", type="text"
    )

    product = await product_service.create_product(
        name="Trail Runner",
        slug="trail-runner",
        primary_category_id=shoes.id,
        base_price_minor=9999,
    )
    return ShoeCatalog(
        apparel=apparel,
        shoes=shoes,
        size=size,
        sizes=sizes,
        color=color,
        colors=colors,
        material=material,
        product=product,
    )

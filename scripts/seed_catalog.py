#!/usr/bin/env python3
"""Seed catalog script.

Imports the Google Product Taxonomy as the category tree and creates a
demo shoe product with size variants.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --taxonomy-file taxonomy-with-ids.en-US.txt
    python scripts/seed_catalog.py --no-demo
"""

import argparse
import asyncio

from catalog_service.api.deps import CatalogServices
from catalog_service.application.product_service import AttributeValueInput
from catalog_service.application.taxonomy_import import TaxonomyImporter, TaxonomyParser
from catalog_service.application.variant_service import VariantAxis
from catalog_service.domain.exceptions import InvalidProductError
from catalog_service.domain.value_objects import CategoryId
from catalog_service.infrastructure.database import create_tables, get_session_factory
from catalog_service.infrastructure.logging_config import configure_logging
from catalog_service.infrastructure.sql_repository import (
    SqlAttributeRepository,
    SqlCategoryRepository,
    SqlProductRepository,
)

SHOES_PATH = "Apparel & Accessories > Shoes"
DEMO_SIZES = ["40", "41", "42", "43", "44"]


async def seed_demo_product(catalog: CatalogServices, shoes_id: CategoryId) -> int:
    """Create the demo shoe with one variant per size.

    Args:
        catalog: Catalog services.
        shoes_id: Category the product and its attributes live in.

    Returns:
        Number of variants created.
    """
    existing = {a.code: a for a in await catalog.attributes.list_category_attributes(shoes_id)}
    size = existing.get("size") or await catalog.attributes.create_category_attribute(
        category_id=shoes_id,
        name="Size (EU)",
        code="size",
        type="select",
        is_variant_axis=True,
        is_filterable=True,
    )
    material = existing.get("material") or await catalog.attributes.create_category_attribute(
        category_id=shoes_id,
        name="Material",
        code="material",
        type="text",
    )

    options = {o.value: o for o in await catalog.attributes.list_attribute_options(size.id)}
    for position, value in enumerate(DEMO_SIZES):
        if value not in options:
            options[value] = await catalog.attributes.add_attribute_option(
                attribute_id=size.id,
                value=value,
                label=f"EU {value}",
                sort_order=position,
            )

    product = await catalog.products.create_product(
        name="Trail Runner",
        slug="trail-runner",
        primary_category_id=shoes_id,
        description="Lightweight trail running shoe",
        base_price_minor=12999,
    )
    await catalog.products.set_product_attributes(
        product.id,
        [AttributeValueInput(attribute_id=material.id, value_text="Mesh")],
    )
    variants = await catalog.variants.generate_and_persist(
        product_id=product.id,
        axes=[VariantAxis(size.id, [options[v].id for v in DEMO_SIZES])],
        base_price_minor=product.base_price_minor,
        initial_stock_qty=25,
    )
    return len(variants)


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed the catalog database",
    )
    parser.add_argument(
        "--taxonomy-file",
        default=None,
        help="Google Product Taxonomy file (default: embedded subset)",
    )
    parser.add_argument(
        "--no-demo",
        action="store_true",
        help="Only import the taxonomy, skip the demo product",
    )

    args = parser.parse_args()
    configure_logging()

    print("=" * 60)
    print("Catalog Seeder")
    print("=" * 60)

    print("Creating database tables...")
    await create_tables()
    print("Tables ready.")
    print()

    taxonomy = TaxonomyParser()
    entries = (
        taxonomy.parse_file(args.taxonomy_file)
        if args.taxonomy_file
        else taxonomy.parse_embedded()
    )

    async with get_session_factory()() as session:
        catalog = CatalogServices.build(
            SqlCategoryRepository(session),
            SqlAttributeRepository(session),
            SqlProductRepository(session),
        )

        print(f"Importing {len(entries)} taxonomy entries...")
        result = await TaxonomyImporter(catalog.categories).import_entries(entries)
        await session.commit()
        print(f"  Created: {result.created}")
        print(f"  Reused: {result.reused}")
        print(f"  Skipped: {result.skipped}")
        print()

        shoes_id = result.categories.get(SHOES_PATH)
        if not args.no_demo and shoes_id is not None:
            print("Creating demo product...")
            try:
                variant_count = await seed_demo_product(catalog, shoes_id)
            except InvalidProductError as e:
                await session.rollback()
                print(f"  Skipped: {e.message}")
            else:
                await session.commit()
                print(f"  Variants: {variant_count}")
            print()

    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
